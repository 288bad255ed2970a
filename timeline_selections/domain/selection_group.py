from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from .interval_set import IntervalSet
from .value_objects import SelectionGroupId


@dataclass(frozen=True)
class SelectionGroupSummary:
    id: SelectionGroupId
    name: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class SelectionGroup:
    """
    Именованная группа непересекающихся интервалов.

    id и created_at задаются один раз при создании,
    updated_at обновляется при каждой успешной замене.
    """
    id: SelectionGroupId
    name: str
    created_at: datetime
    updated_at: datetime
    timeframes: IntervalSet = field(default_factory=IntervalSet)

    def summary(self) -> SelectionGroupSummary:
        return SelectionGroupSummary(
            id=self.id,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def with_timeframes(self, timeframes: IntervalSet) -> "SelectionGroup":
        return replace(self, timeframes=timeframes)


@dataclass(frozen=True)
class SelectionDraft:
    """
    Группа в редакторе: копия, которую правит пользователь до сохранения.
    id = None — группа ещё ни разу не сохранялась (сохранение создаст новую).
    """
    name: str
    timeframes: IntervalSet = field(default_factory=IntervalSet)
    id: Optional[SelectionGroupId] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_group(cls, group: SelectionGroup) -> "SelectionDraft":
        return cls(
            name=group.name,
            timeframes=group.timeframes,
            id=group.id,
            created_at=group.created_at,
            updated_at=group.updated_at,
        )

    def with_timeframes(self, timeframes: IntervalSet) -> "SelectionDraft":
        return replace(self, timeframes=timeframes)
