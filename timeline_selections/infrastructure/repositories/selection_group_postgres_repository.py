from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from asyncpg import Record

from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.repositories.selection_group_repository import (
    SelectionGroupRepository,
)
from timeline_selections.domain.selection_group import SelectionGroup, SelectionGroupSummary
from timeline_selections.domain.value_objects import SelectionGroupId
from timeline_selections.infrastructure.db.postgres import PostgresDatabase


class SelectionGroupPostgresRepository(SelectionGroupRepository):
    """
    PostgreSQL-реализация: таблица selection_groups, timeframes хранится в JSONB.
    """

    def __init__(self, db: PostgresDatabase) -> None:
        self._db = db

    async def list_summaries(self) -> List[SelectionGroupSummary]:
        sql = """
        SELECT id, name, created_at, updated_at
        FROM selection_groups
        ORDER BY created_at DESC;
        """
        rows = await self._db.fetch(sql)
        return [self._map_summary(row) for row in rows]

    async def find_by_id(self, group_id: SelectionGroupId) -> Optional[SelectionGroup]:
        sql = """
        SELECT id, name, created_at, updated_at, timeframes
        FROM selection_groups
        WHERE id = $1
        LIMIT 1;
        """
        row = await self._db.fetchrow(sql, group_id)
        return None if row is None else self._map_row(row)

    async def create(self, group: SelectionGroup) -> None:
        sql = """
        INSERT INTO selection_groups (id, name, created_at, updated_at, timeframes)
        VALUES ($1, $2, $3, $4, $5);
        """
        await self._db.execute(
            sql,
            group.id,
            group.name,
            group.created_at,
            group.updated_at,
            group.timeframes.to_dict(),
        )

    async def replace(
        self,
        group_id: SelectionGroupId,
        *,
        name: Optional[str],
        updated_at: datetime,
        timeframes: IntervalSet,
    ) -> bool:
        # COALESCE: name = NULL -> имя не меняется
        sql = """
        UPDATE selection_groups
        SET name = COALESCE($2, name),
            updated_at = $3,
            timeframes = $4
        WHERE id = $1;
        """
        status = await self._db.execute(
            sql,
            group_id,
            name or None,
            updated_at,
            timeframes.to_dict(),
        )
        return status.endswith(" 1")

    @staticmethod
    def _map_summary(row: Record) -> SelectionGroupSummary:
        return SelectionGroupSummary(
            id=SelectionGroupId(row["id"]),
            name=row["name"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _map_row(row: Record) -> SelectionGroup:
        return SelectionGroup(
            id=SelectionGroupId(row["id"]),
            name=row["name"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            timeframes=IntervalSet.from_dict(row["timeframes"] or {}),
        )
