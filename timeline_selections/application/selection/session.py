from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from timeline_selections.domain.selection_group import SelectionDraft
from timeline_selections.domain.value_objects import RequestKind, SelectionGroupId

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[SelectionDraft]], None]


@dataclass(frozen=True)
class RequestTicket:
    """
    Метка асинхронного запроса:
      seq        — монотонный порядковый номер;
      revision   — счётчик локальных правок на момент отправки;
      generation — счётчик полных замен активной группы на момент отправки.
    """
    seq: int
    revision: int
    generation: int
    kind: RequestKind


class ActiveGroupSession:
    """
    Состояние редактора: ноль или одна активная группа.

    Единственная точка записи — set_active_group / update_timeframe.
    Каждая правка создаёт новый неизменяемый IntervalSet, подписчики
    получают новое значение после каждого изменения.
    """

    def __init__(self) -> None:
        self._active: Optional[SelectionDraft] = None
        self._listeners: List[Listener] = []
        self._revision = 0
        self._generation = 0
        self._next_seq = 0
        self._last_applied_seq = 0

    @property
    def active_group(self) -> Optional[SelectionDraft]:
        return self._active

    @property
    def revision(self) -> int:
        return self._revision

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_active_group(self, group: Optional[SelectionDraft]) -> None:
        self._revision += 1
        self._generation += 1
        self._set(group)

    def update_timeframe(
        self,
        name: str,
        start: Optional[float] = None,
        end: Optional[float] = None,
    ) -> bool:
        """
        Точечная правка одного интервала (шаг перетаскивания).
        Нет активной группы или нет такого имени — ничего не делаем.
        """
        active = self._active
        if active is None or name not in active.timeframes:
            return False

        timeframes = active.timeframes.with_bounds(name, start=start, end=end)
        self._revision += 1
        self._set(active.with_timeframes(timeframes))
        return True

    def issue_ticket(self, kind: RequestKind) -> RequestTicket:
        self._next_seq += 1
        return RequestTicket(
            seq=self._next_seq,
            revision=self._revision,
            generation=self._generation,
            kind=kind,
        )

    def is_stale(self, ticket: RequestTicket) -> bool:
        if ticket.seq <= self._last_applied_seq:
            return True
        return ticket.revision != self._revision

    def apply_loaded(self, ticket: RequestTicket, group: SelectionDraft) -> bool:
        """
        Применяет результат загрузки, если он не устарел:
        более новый запрос уже применён или пользователь успел что-то поправить.
        """
        if self.is_stale(ticket):
            logger.info(
                "session.discard_stale_load seq=%s last_applied=%s revision=%s/%s",
                ticket.seq, self._last_applied_seq, ticket.revision, self._revision,
            )
            return False

        # Ревизию не трогаем: это не локальная правка, и более новый
        # запрос загрузки, отправленный раньше этого ответа, остаётся валидным.
        self._last_applied_seq = ticket.seq
        self._generation += 1
        self._set(group)
        return True

    def apply_saved(
        self,
        ticket: RequestTicket,
        group_id: SelectionGroupId,
        name: str,
    ) -> bool:
        """
        После сохранения проставляем id и имя. Локальные timeframes
        не перетираются, даже если пользователь продолжил правки.
        Если активную группу за это время заменили целиком — ответ игнорируется.
        """
        if ticket.seq <= self._last_applied_seq or ticket.generation != self._generation:
            logger.info(
                "session.discard_stale_save seq=%s last_applied=%s group=%s",
                ticket.seq, self._last_applied_seq, group_id,
            )
            return False

        active = self._active
        if active is None:
            return False

        self._last_applied_seq = ticket.seq
        self._set(replace(active, id=group_id, name=name))
        return True

    def _set(self, group: Optional[SelectionDraft]) -> None:
        self._active = group
        for listener in list(self._listeners):
            listener(group)
