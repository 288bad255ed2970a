from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Set, Tuple

from .postgres import PostgresDatabase, load_config_from_env

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def list_migrations(directory: Path = MIGRATIONS_DIR) -> List[Tuple[str, Path]]:
    """
    (version, path) для всех *.sql, упорядоченные по имени.
    Формат имени: 001_create_selection_groups.sql -> version = "001".
    """
    if not directory.exists():
        raise RuntimeError(f"Migrations directory does not exist: {directory}")

    return [
        (path.stem.split("_", 1)[0], path)
        for path in sorted(directory.glob("*.sql"))
    ]


async def _ensure_migrations_table(db: PostgresDatabase) -> None:
    await db.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version    TEXT PRIMARY KEY,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """
    )


async def _get_applied_versions(db: PostgresDatabase) -> Set[str]:
    rows = await db.fetch("SELECT version FROM schema_migrations;")
    return {row["version"] for row in rows}


async def _apply_migration(db: PostgresDatabase, version: str, sql: str) -> None:
    async def _run(conn) -> None:
        # Миграция и запись о ней — в одной транзакции.
        async with conn.transaction():
            await conn.execute(sql)
            await conn.execute(
                "INSERT INTO schema_migrations (version) VALUES ($1);",
                version,
            )

    await db.with_connection(_run)


async def apply_migrations(db: PostgresDatabase) -> List[str]:
    """
    Применяет ещё не применённые миграции на уже подключённой БД.
    Возвращает список применённых версий.
    """
    await _ensure_migrations_table(db)
    applied_versions = await _get_applied_versions(db)

    applied: List[str] = []
    for version, path in list_migrations():
        if version in applied_versions:
            continue

        logger.info("migrate.apply version=%s file=%s", version, path.name)
        await _apply_migration(db, version, path.read_text(encoding="utf-8"))
        applied.append(version)

    return applied


async def run_migrations() -> None:
    db = PostgresDatabase(load_config_from_env())

    await db.connect()
    try:
        applied = await apply_migrations(db)
        if not applied:
            print("No pending migrations.")
        else:
            print(f"Migrations applied: {', '.join(applied)}")
    finally:
        await db.close()


if __name__ == "__main__":
    asyncio.run(run_migrations())
