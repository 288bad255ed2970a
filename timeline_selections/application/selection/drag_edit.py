from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional

from timeline_selections.domain.errors import DragStateError, ValidationError
from timeline_selections.domain.timeframe import SegmentEntry
from timeline_selections.domain.value_objects import DragMode

MIN_DURATION_SEC = 0.1

UpdateCallback = Callable[[str, Optional[float], Optional[float]], None]


@dataclass(frozen=True)
class DragProposal:
    """
    Результат одного шага перетаскивания.
    None — граница не меняется (получатель оставляет прежнее значение).
    """
    name: str
    start: Optional[float] = None
    end: Optional[float] = None


@dataclass(frozen=True)
class TimelineScale:
    """
    Перевод пикселей таймлайна в секунды при текущем масштабе.
    """
    pixels_per_second: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.pixels_per_second) or self.pixels_per_second <= 0:
            raise ValidationError(
                f"pixels_per_second must be positive, got {self.pixels_per_second}"
            )

    def to_seconds(self, pixels: float) -> float:
        return pixels / self.pixels_per_second

    def to_pixels(self, seconds: float) -> float:
        return seconds * self.pixels_per_second


def _min_start(prev: Optional[SegmentEntry]) -> float:
    return prev.end if prev is not None else 0.0


def _max_end(next_: Optional[SegmentEntry]) -> float:
    return next_.start if next_ is not None else math.inf


def clamp_move(
    item: SegmentEntry,
    prev: Optional[SegmentEntry],
    next_: Optional[SegmentEntry],
    delta_sec: float,
) -> DragProposal:
    """
    Перенос сегмента целиком: длительность сохраняется (не меньше
    MIN_DURATION_SEC, но и не больше промежутка между соседями),
    сдвиг зажимается в окно [minStart - start, maxEnd - (start + duration)].
    """
    min_start = _min_start(prev)
    max_end = _max_end(next_)
    duration = min(max(MIN_DURATION_SEC, item.end - item.start), max_end - min_start)

    min_delta = min_start - item.start
    max_delta = max_end - (item.start + duration)
    clamped = min(max(delta_sec, min_delta), max_delta)

    # На упоре берём границу соседа напрямую: start + delta + duration
    # в float может уйти на ulp за неё.
    if clamped <= min_delta:
        new_start = min_start
        new_end = min(min_start + duration, max_end)
    elif clamped >= max_delta:
        new_end = max_end
        new_start = max(max_end - duration, min_start)
    else:
        new_start = max(item.start + clamped, min_start)
        new_end = min(new_start + duration, max_end)

    return DragProposal(name=item.name, start=new_start, end=new_end)


def clamp_left_edge(
    item: SegmentEntry,
    prev: Optional[SegmentEntry],
    proposed_start: float,
) -> DragProposal:
    """
    Левый край: меняется только start.

    Если сосед ближе, чем MIN_DURATION_SEC, граница соседа важнее
    минимальной длительности — сегмент может стать короче порога.
    """
    min_start = _min_start(prev)
    max_start = max(item.end - MIN_DURATION_SEC, min_start)

    start = max(0.0, proposed_start)
    start = min(max(start, min_start), max_start)
    return DragProposal(name=item.name, start=start)


def clamp_right_edge(
    item: SegmentEntry,
    next_: Optional[SegmentEntry],
    proposed_end: float,
) -> DragProposal:
    """
    Правый край: меняется только end, в пределах
    [max(start + MIN_DURATION_SEC, 0), maxEnd].
    Как и слева, граница соседа важнее минимальной длительности.
    """
    max_end = _max_end(next_)
    min_end = min(max(item.start + MIN_DURATION_SEC, 0.0), max_end)

    end = max(min(proposed_end, max_end), min_end)
    return DragProposal(name=item.name, end=end)


@dataclass(frozen=True)
class _Gesture:
    mode: DragMode
    item: SegmentEntry
    prev: Optional[SegmentEntry]
    next: Optional[SegmentEntry]
    origin_x: float


class DragEditEngine:
    """
    Протокол перетаскивания сегмента: Idle -> Dragging -> Idle.

    На begin фиксируется снимок (сегмент, соседи, исходная позиция указателя).
    Каждый move пересчитывает предложение от этого снимка и полного смещения
    указателя, а не от предыдущего кадра — ошибки округления не накапливаются.
    """

    def __init__(self, scale: TimelineScale, on_update: UpdateCallback) -> None:
        self._scale = scale
        self._on_update = on_update
        self._gesture: Optional[_Gesture] = None
        self._last: Optional[DragProposal] = None

    @property
    def is_dragging(self) -> bool:
        return self._gesture is not None

    @property
    def mode(self) -> Optional[DragMode]:
        return self._gesture.mode if self._gesture is not None else None

    @property
    def scale(self) -> TimelineScale:
        return self._scale

    def set_scale(self, scale: TimelineScale) -> None:
        if self._gesture is not None:
            raise DragStateError("Cannot change timeline scale while dragging")
        self._scale = scale

    def begin(
        self,
        mode: DragMode,
        item: SegmentEntry,
        prev: Optional[SegmentEntry],
        next_: Optional[SegmentEntry],
        pointer_x: float,
    ) -> None:
        if self._gesture is not None:
            raise DragStateError(
                f'Drag already in progress for "{self._gesture.item.name}"'
            )
        self._gesture = _Gesture(
            mode=mode,
            item=item,
            prev=prev,
            next=next_,
            origin_x=pointer_x,
        )
        self._last = None

    def propose(self, pointer_x: float) -> DragProposal:
        """
        Предложение для текущей позиции указателя без вызова колбэка.
        """
        gesture = self._require_gesture()
        delta_sec = self._scale.to_seconds(pointer_x - gesture.origin_x)
        item = gesture.item

        if gesture.mode is DragMode.MOVE:
            return clamp_move(item, gesture.prev, gesture.next, delta_sec)
        if gesture.mode is DragMode.RESIZE_LEFT:
            return clamp_left_edge(item, gesture.prev, item.start + delta_sec)
        if gesture.mode is DragMode.RESIZE_RIGHT:
            return clamp_right_edge(item, gesture.next, item.end + delta_sec)

        raise DragStateError(f"Unknown drag mode: {gesture.mode}")

    def move(self, pointer_x: float) -> DragProposal:
        proposal = self.propose(pointer_x)
        self._last = proposal
        self._on_update(proposal.name, proposal.start, proposal.end)
        return proposal

    def end(self) -> Optional[DragProposal]:
        """
        Завершает жест. Возвращает последнее применённое предложение (или None,
        если указатель так и не сдвинулся).
        """
        self._require_gesture()
        last = self._last
        self._gesture = None
        self._last = None
        return last

    def cancel(self) -> None:
        """
        Отмена жеста: возвращаем сегменту границы, снятые на begin.
        """
        gesture = self._require_gesture()
        had_updates = self._last is not None
        self._gesture = None
        self._last = None

        if had_updates:
            item = gesture.item
            self._on_update(item.name, item.start, item.end)

    def _require_gesture(self) -> _Gesture:
        if self._gesture is None:
            raise DragStateError("No drag in progress")
        return self._gesture
