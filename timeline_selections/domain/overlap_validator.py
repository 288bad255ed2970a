from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional

from .errors import OverlapError
from .timeframe import SegmentEntry, Timeframe


@dataclass(frozen=True)
class OverlapConflict:
    first: SegmentEntry
    second: SegmentEntry


def sort_entries(timeframes: Mapping[str, Timeframe]) -> List[SegmentEntry]:
    entries = [
        SegmentEntry(name=name, start=tf.start, end=tf.end)
        for name, tf in timeframes.items()
    ]
    entries.sort(key=lambda e: e.start)
    return entries


def find_overlap(timeframes: Mapping[str, Timeframe]) -> Optional[OverlapConflict]:
    """
    Сортирует интервалы по start и проверяет соседние пары.

    Пересечение — current.start < previous.end.
    Касание границ (current.start == previous.end) допустимо: [start, end).
    """
    entries = sort_entries(timeframes)

    for previous, current in zip(entries, entries[1:]):
        if current.start < previous.end:
            return OverlapConflict(first=previous, second=current)

    return None


def assert_no_overlaps(timeframes: Mapping[str, Timeframe]) -> None:
    conflict = find_overlap(timeframes)
    if conflict is None:
        return

    first, second = conflict.first, conflict.second
    raise OverlapError(
        (first.name, first.start, first.end),
        (second.name, second.start, second.end),
    )
