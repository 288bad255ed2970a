from __future__ import annotations

from typing import Optional

from timeline_selections.application.selection.group_service import replace_group
from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.value_objects import SelectionGroupId
from timeline_selections.infrastructure.storage import open_selection_group_repository


async def replace_selection_group_usecase(
    group_id: str,
    name: Optional[str],
    timeframes: IntervalSet,
) -> None:
    """
    Полная замена timeframes группы (и имени, если передано).
    """
    async with open_selection_group_repository() as repo:
        await replace_group(repo, SelectionGroupId(group_id), name, timeframes)
