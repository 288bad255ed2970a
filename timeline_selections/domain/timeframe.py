from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import ValidationError


@dataclass(frozen=True)
class Timeframe:
    """
    Полуинтервал [start, end) на таймлайне, в секундах.
    """
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    @classmethod
    def checked(cls, start: Any, end: Any) -> "Timeframe":
        """
        Строит интервал с проверкой формы: конечные числа, start >= 0, end > start.
        """
        if isinstance(start, bool) or not isinstance(start, (int, float)):
            raise ValidationError(f"start must be a number, got {start!r}")
        if isinstance(end, bool) or not isinstance(end, (int, float)):
            raise ValidationError(f"end must be a number, got {end!r}")
        if not math.isfinite(start) or not math.isfinite(end):
            raise ValidationError("start and end must be finite")
        if start < 0:
            raise ValidationError(f"start must be >= 0, got {start}")
        if end <= start:
            raise ValidationError(f"end must be greater than start, got [{start}, {end})")
        return cls(start=float(start), end=float(end))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Timeframe":
        return cls(start=float(raw["start"]), end=float(raw["end"]))

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class SegmentEntry:
    """
    Именованный интервал в "развёрнутом" виде — так его видит таймлайн
    после сортировки по start.
    """
    name: str
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start
