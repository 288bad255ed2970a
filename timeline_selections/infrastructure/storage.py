from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from timeline_selections.domain.repositories.selection_group_repository import (
    SelectionGroupRepository,
)
from timeline_selections.env_config import selection_data_file, storage_backend
from timeline_selections.infrastructure.db.migrate import apply_migrations
from timeline_selections.infrastructure.db.postgres import PostgresDatabase, load_config_from_env
from timeline_selections.infrastructure.repositories.selection_group_json_repository import (
    SelectionGroupJsonRepository,
)
from timeline_selections.infrastructure.repositories.selection_group_postgres_repository import (
    SelectionGroupPostgresRepository,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_selection_group_repository() -> AsyncIterator[SelectionGroupRepository]:
    """
    Открывает хранилище, выбранное через SELECTION_STORAGE, и закрывает его
    после использования. Usecase'ы и HTTP-слой работают только с интерфейсом.
    """
    backend = storage_backend()

    if backend == "postgres":
        db = PostgresDatabase(load_config_from_env())
        await db.connect()
        try:
            yield SelectionGroupPostgresRepository(db)
        finally:
            await db.close()
        return

    if backend != "json":
        raise RuntimeError(f"Unknown SELECTION_STORAGE backend: {backend}")

    repo = SelectionGroupJsonRepository(selection_data_file())
    await repo.ensure_storage()
    yield repo


async def prepare_storage() -> None:
    """
    Подготовка хранилища при старте сервиса:
    для JSON — создать файл, для PostgreSQL — применить миграции.
    """
    backend = storage_backend()

    if backend == "postgres":
        db = PostgresDatabase(load_config_from_env())
        await db.connect()
        try:
            applied = await apply_migrations(db)
            logger.info("storage.prepare backend=postgres applied=%s", applied)
        finally:
            await db.close()
        return

    async with open_selection_group_repository():
        logger.info("storage.prepare backend=%s", backend)
