from __future__ import annotations

import asyncio

from timeline_selections.application.selection.group_service import create_group
from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.infrastructure.storage import open_selection_group_repository


async def create_selection_group_usecase(name: str, timeframes: IntervalSet) -> str:
    """
    Создаёт группу и возвращает её id.
    Пересечения проверяются сервисом до записи (OverlapError).
    """
    async with open_selection_group_repository() as repo:
        group_id = await create_group(repo, name, timeframes)
        return str(group_id)


async def _main_cli() -> None:
    """
    Пример запуска через python -m ...
    """
    group_id = await create_selection_group_usecase(
        name="Тестовая группа",
        timeframes=IntervalSet.parse(
            {
                "intro": {"start": 0.0, "end": 5.0},
                "highlight": {"start": 12.5, "end": 20.0},
            }
        ),
    )
    print(f"Группа создана → {group_id}")


if __name__ == "__main__":
    asyncio.run(_main_cli())
