from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Protocol

from timeline_selections.application.selection.drag_edit import (
    DragEditEngine,
    DragProposal,
    TimelineScale,
)
from timeline_selections.application.selection.session import ActiveGroupSession
from timeline_selections.config import DEFAULT_FPS
from timeline_selections.domain.errors import DragStateError, SelectionGroupError
from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.selection_group import (
    SelectionDraft,
    SelectionGroup,
    SelectionGroupSummary,
)
from timeline_selections.domain.value_objects import DragMode, RequestKind, SelectionGroupId

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


class SelectionGroupsGateway(Protocol):
    async def list_groups(self) -> List[SelectionGroupSummary]: ...

    async def get_group(self, group_id: SelectionGroupId) -> SelectionGroup: ...

    async def create_group(self, name: str, timeframes: IntervalSet) -> SelectionGroupId: ...

    async def update_group(
        self,
        group_id: SelectionGroupId,
        timeframes: IntervalSet,
        name: Optional[str] = None,
    ) -> None: ...


class Player(Protocol):
    def pause(self) -> None: ...

    def seek_to(self, frame: int) -> None: ...


def frame_for_time(seconds: float, fps: float) -> int:
    # округление half-up, как у Math.round в плеере
    return max(0, math.floor(seconds * fps + 0.5))


def _noop_notify(level: str, message: str) -> None:
    return None


class SelectionEditorController:
    """
    Связка редактора: API групп + состояние сессии + drag-движок + плеер.

    Любая сетевая ошибка превращается в уведомление (notify("error", ...)),
    состояние сессии при этом не меняется.
    """

    def __init__(
        self,
        api: SelectionGroupsGateway,
        session: ActiveGroupSession,
        *,
        scale: TimelineScale,
        player: Optional[Player] = None,
        fps: float = DEFAULT_FPS,
        notify: Optional[Notifier] = None,
    ) -> None:
        self._api = api
        self._session = session
        self._player = player
        self._fps = fps
        self._notify = notify or _noop_notify
        self._engine = DragEditEngine(scale, self._apply_drag_update)

    @property
    def session(self) -> ActiveGroupSession:
        return self._session

    @property
    def engine(self) -> DragEditEngine:
        return self._engine

    async def refresh_groups(self) -> List[SelectionGroupSummary]:
        try:
            return await self._api.list_groups()
        except SelectionGroupError as exc:
            logger.warning("editor.refresh_groups failed: %s", exc)
            self._notify("error", str(exc))
            return []

    def new_draft(self, name: str, timeframes: Optional[IntervalSet] = None) -> SelectionDraft:
        """
        Начать новую (ещё не сохранённую) группу.
        """
        draft = SelectionDraft(name=name, timeframes=timeframes or IntervalSet())
        self._session.set_active_group(draft)
        return draft

    async def load_group(self, group_id: SelectionGroupId) -> bool:
        """
        Загружает группу в редактор и переводит плеер на начало самого
        раннего интервала. Устаревший ответ (пользователь уже правил или
        загрузил другую группу) отбрасывается.
        """
        ticket = self._session.issue_ticket(RequestKind.LOAD)
        try:
            group = await self._api.get_group(group_id)
        except SelectionGroupError as exc:
            logger.warning("editor.load_group failed id=%s: %s", group_id, exc)
            self._notify("error", str(exc) or "Failed to load group")
            return False

        if not self._session.apply_loaded(ticket, SelectionDraft.from_group(group)):
            return False

        earliest = group.timeframes.earliest()
        if earliest is not None and self._player is not None:
            self._player.pause()
            self._player.seek_to(frame_for_time(earliest.start, self._fps))

        self._notify("success", f"Loaded selection group: {group.name}")
        return True

    async def save(self, name: str) -> Optional[SelectionGroupId]:
        """
        Сохраняет активную группу: PUT, если у неё уже есть id, иначе POST.
        """
        name = (name or "").strip()
        if not name:
            self._notify("error", "Please enter a name")
            return None

        active = self._session.active_group
        if active is None:
            self._notify("error", "No active selection group")
            return None

        ticket = self._session.issue_ticket(RequestKind.SAVE)
        timeframes = active.timeframes

        try:
            if active.id is not None:
                await self._api.update_group(active.id, timeframes, name=name)
                group_id = active.id
                message = "Selection group updated"
            else:
                group_id = await self._api.create_group(name, timeframes)
                message = "Selection group created"
        except SelectionGroupError as exc:
            logger.warning("editor.save failed name=%s: %s", name, exc)
            self._notify("error", str(exc) or "Failed to save group")
            return None

        self._session.apply_saved(ticket, group_id, name)
        self._notify("success", message)
        return group_id

    def set_scale(self, scale: TimelineScale) -> None:
        self._engine.set_scale(scale)

    def start_drag(self, name: str, mode: DragMode, pointer_x: float) -> None:
        active = self._session.active_group
        if active is None or name not in active.timeframes:
            raise DragStateError(f'No segment "{name}" in the active group')

        prev, item, next_ = active.timeframes.neighbors(name)
        self._engine.begin(mode, item, prev, next_, pointer_x)

    def drag_to(self, pointer_x: float) -> DragProposal:
        return self._engine.move(pointer_x)

    def end_drag(self) -> Optional[DragProposal]:
        return self._engine.end()

    def cancel_drag(self) -> None:
        self._engine.cancel()

    def _apply_drag_update(
        self,
        name: str,
        start: Optional[float],
        end: Optional[float],
    ) -> None:
        self._session.update_timeframe(name, start=start, end=end)
