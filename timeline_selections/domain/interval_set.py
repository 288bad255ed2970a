from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .errors import ValidationError
from .overlap_validator import assert_no_overlaps, sort_entries
from .timeframe import SegmentEntry, Timeframe


class IntervalSet(Mapping[str, Timeframe]):
    """
    Неизменяемый набор именованных интервалов группы (timeframes).

    Инвариант "нет пересечений" проверяется только на полной записи
    (IntervalSet.validated). Точечные правки при перетаскивании
    (with_bounds) проверку не запускают — их корректность обеспечивает
    клампинг в drag-движке.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Optional[Mapping[str, Timeframe]] = None) -> None:
        self._items: Mapping[str, Timeframe] = MappingProxyType(dict(items or {}))

    @classmethod
    def validated(cls, items: Mapping[str, Timeframe]) -> "IntervalSet":
        for name in items:
            if not isinstance(name, str) or not name:
                raise ValidationError("timeframe name must be a non-empty string")
        assert_no_overlaps(items)
        return cls(items)

    @classmethod
    def parse(cls, raw: Mapping[str, Mapping[str, Any]]) -> "IntervalSet":
        """
        Разбор "сырого" JSON-объекта { name: {start, end} } с полной проверкой.
        """
        if not isinstance(raw, Mapping):
            raise ValidationError("timeframes must be an object keyed by name")

        items: Dict[str, Timeframe] = {}
        for name, value in raw.items():
            if not isinstance(value, Mapping) or "start" not in value or "end" not in value:
                raise ValidationError(f'timeframe "{name}" must have start and end')
            items[name] = Timeframe.checked(value["start"], value["end"])
        return cls.validated(items)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Mapping[str, Any]]) -> "IntervalSet":
        """
        Восстановление из хранилища: данные туда попадают только после проверки.
        """
        return cls({name: Timeframe.from_dict(value) for name, value in raw.items()})

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {name: tf.to_dict() for name, tf in self._items.items()}

    def __getitem__(self, name: str) -> Timeframe:
        return self._items[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"IntervalSet({dict(self._items)!r})"

    def sorted_entries(self) -> List[SegmentEntry]:
        return sort_entries(self._items)

    def earliest(self) -> Optional[SegmentEntry]:
        entries = self.sorted_entries()
        return entries[0] if entries else None

    def neighbors(
        self, name: str
    ) -> Tuple[Optional[SegmentEntry], SegmentEntry, Optional[SegmentEntry]]:
        """
        (previous, item, next) для интервала name в порядке возрастания start.
        У первого интервала previous = None, у последнего next = None.
        """
        entries = self.sorted_entries()
        for idx, entry in enumerate(entries):
            if entry.name == name:
                prev = entries[idx - 1] if idx > 0 else None
                nxt = entries[idx + 1] if idx + 1 < len(entries) else None
                return prev, entry, nxt
        raise KeyError(name)

    def with_bounds(
        self,
        name: str,
        start: Optional[float] = None,
        end: Optional[float] = None,
    ) -> "IntervalSet":
        """
        Новый набор, в котором у name заменены переданные границы.
        Непереданная граница остаётся прежней. Исходный набор не меняется.
        """
        current = self._items[name]
        items = dict(self._items)
        items[name] = Timeframe(
            start=start if start is not None else current.start,
            end=end if end is not None else current.end,
        )
        return IntervalSet(items)
