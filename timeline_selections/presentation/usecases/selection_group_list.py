from __future__ import annotations

import asyncio
from typing import List

from timeline_selections.application.selection.group_service import list_groups
from timeline_selections.domain.selection_group import SelectionGroupSummary
from timeline_selections.domain.timestamps import format_timestamp
from timeline_selections.infrastructure.storage import open_selection_group_repository


async def list_selection_groups_usecase() -> List[SelectionGroupSummary]:
    """
    Все группы (без timeframes), новые первыми.
    Подходит для вызова как из HTTP-эндпоинта, так и из CLI.
    """
    async with open_selection_group_repository() as repo:
        return await list_groups(repo)


async def _main_cli() -> None:
    groups = await list_selection_groups_usecase()

    print("=== Selection groups ===")
    if not groups:
        print("No groups found.")
        return

    for idx, g in enumerate(groups, start=1):
        print(f"{idx:02d}. {g.id}  {g.name}  (created {format_timestamp(g.created_at)})")


if __name__ == "__main__":
    asyncio.run(_main_cli())
