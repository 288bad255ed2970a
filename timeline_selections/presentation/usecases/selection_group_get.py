from __future__ import annotations

import asyncio
import json
import sys

from timeline_selections.application.selection.group_service import get_group
from timeline_selections.domain.selection_group import SelectionGroup
from timeline_selections.domain.value_objects import SelectionGroupId
from timeline_selections.infrastructure.storage import open_selection_group_repository


async def get_selection_group_usecase(group_id: str) -> SelectionGroup:
    """
    Одна группа с timeframes. NotFoundError, если такой нет.
    """
    async with open_selection_group_repository() as repo:
        return await get_group(repo, SelectionGroupId(group_id))


async def _main_cli(group_id: str) -> None:
    group = await get_selection_group_usecase(group_id)
    print(f"=== {group.name} ({group.id}) ===")
    print(json.dumps(group.timeframes.to_dict(), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    asyncio.run(_main_cli(sys.argv[1]))
