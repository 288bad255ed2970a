from __future__ import annotations

import asyncio

from timeline_selections.env_config import selection_data_file, storage_backend
from timeline_selections.infrastructure.db.postgres import PostgresDatabase, load_config_from_env
from timeline_selections.infrastructure.repositories.selection_group_json_repository import (
    SelectionGroupJsonRepository,
)


_TRUNCATE_SQL = """
TRUNCATE TABLE selection_groups;
"""


async def reset_selection_groups() -> None:
    """
    Полностью очищает группы выделений в текущем хранилище.
    schema_migrations не трогаем — миграции остаются применёнными.
    """
    if storage_backend() == "postgres":
        db = PostgresDatabase(load_config_from_env())
        await db.connect()
        try:
            print("=== Truncating selection_groups ===")
            await db.execute(_TRUNCATE_SQL)
        finally:
            await db.close()
    else:
        repo = SelectionGroupJsonRepository(selection_data_file())
        print(f"=== Resetting {repo.path} ===")
        await repo.clear()

    print("=== Reset DONE ===")


if __name__ == "__main__":
    asyncio.run(reset_selection_groups())
