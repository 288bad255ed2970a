from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.selection_group import SelectionGroup, SelectionGroupSummary
from timeline_selections.domain.value_objects import SelectionGroupId


class SelectionGroupRepository(ABC):
    """
    Хранилище групп выделений.

    Гарантий изоляции между конкурентными писателями нет:
    параллельные replace для одного id — побеждает последний.
    """

    @abstractmethod
    async def list_summaries(self) -> List[SelectionGroupSummary]:
        """
        Все группы без timeframes, новые (по created_at) первыми.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, group_id: SelectionGroupId) -> Optional[SelectionGroup]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, group: SelectionGroup) -> None:
        raise NotImplementedError

    @abstractmethod
    async def replace(
        self,
        group_id: SelectionGroupId,
        *,
        name: Optional[str],
        updated_at: datetime,
        timeframes: IntervalSet,
    ) -> bool:
        """
        Полностью заменяет timeframes, обновляет updated_at,
        переименовывает, если name передан.
        Возвращает False, если группы с таким id нет.
        """
        raise NotImplementedError
