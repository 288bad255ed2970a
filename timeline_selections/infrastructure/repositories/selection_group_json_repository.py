from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Union

from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.repositories.selection_group_repository import (
    SelectionGroupRepository,
)
from timeline_selections.domain.selection_group import SelectionGroup, SelectionGroupSummary
from timeline_selections.domain.timestamps import format_timestamp, parse_timestamp
from timeline_selections.domain.value_objects import SelectionGroupId

logger = logging.getLogger(__name__)

_TABLE = "selection_groups"


class SelectionGroupJsonRepository(SelectionGroupRepository):
    """
    Хранилище групп в одном JSON-файле:

        { "selection_groups": [ {id, name, created_at, updated_at, timeframes}, ... ] }

    Запись идёт через уникальный временный файл + os.replace, чтобы при падении
    не остался наполовину записанный документ. Внутри процесса
    read-modify-write сериализуется одним asyncio.Lock на файл (общим для всех
    экземпляров репозитория); между процессами изоляции нет — побеждает
    последняя запись.
    """

    _locks: ClassVar[Dict[Path, asyncio.Lock]] = {}

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._lock = self._lock_for(self._path)

    @classmethod
    def _lock_for(cls, path: Path) -> asyncio.Lock:
        key = path.resolve()
        lock = cls._locks.get(key)
        if lock is None:
            lock = cls._locks[key] = asyncio.Lock()
        return lock

    @property
    def path(self) -> Path:
        return self._path

    async def ensure_storage(self) -> None:
        """
        Создаёт каталог и пустой документ, если их ещё нет.
        """
        async with self._lock:
            await asyncio.to_thread(self._ensure_file)

    async def list_summaries(self) -> List[SelectionGroupSummary]:
        data = await self._read()
        summaries = [self._map_record(record).summary() for record in data[_TABLE]]
        summaries.sort(key=lambda s: s.created_at, reverse=True)
        return summaries

    async def find_by_id(self, group_id: SelectionGroupId) -> Optional[SelectionGroup]:
        data = await self._read()
        for record in data[_TABLE]:
            if record["id"] == group_id:
                return self._map_record(record)
        return None

    async def create(self, group: SelectionGroup) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data[_TABLE].append(self._to_record(group))
            await asyncio.to_thread(self._dump, data)

    async def replace(
        self,
        group_id: SelectionGroupId,
        *,
        name: Optional[str],
        updated_at: datetime,
        timeframes: IntervalSet,
    ) -> bool:
        async with self._lock:
            data = await asyncio.to_thread(self._load)

            record = next((r for r in data[_TABLE] if r["id"] == group_id), None)
            if record is None:
                return False

            if name:
                record["name"] = name
            record["updated_at"] = format_timestamp(updated_at)
            record["timeframes"] = timeframes.to_dict()

            await asyncio.to_thread(self._dump, data)
            return True

    async def clear(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._dump, {_TABLE: []})

    async def _read(self) -> Dict[str, Any]:
        async with self._lock:
            return await asyncio.to_thread(self._load)

    def _ensure_file(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            logger.info("json_store.init path=%s", self._path)
            self._dump({_TABLE: []})

    def _load(self) -> Dict[str, Any]:
        self._ensure_file()
        with self._path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)

        if not isinstance(data, dict) or not isinstance(data.get(_TABLE), list):
            raise RuntimeError(f"Malformed selection groups file: {self._path}")
        return data

    def _dump(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=self._path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
        try:
            os.replace(fh.name, self._path)
        except OSError:
            os.unlink(fh.name)
            raise

    @staticmethod
    def _to_record(group: SelectionGroup) -> Dict[str, Any]:
        return {
            "id": group.id,
            "name": group.name,
            "created_at": format_timestamp(group.created_at),
            "updated_at": format_timestamp(group.updated_at),
            "timeframes": group.timeframes.to_dict(),
        }

    @staticmethod
    def _map_record(record: Dict[str, Any]) -> SelectionGroup:
        return SelectionGroup(
            id=SelectionGroupId(record["id"]),
            name=record["name"],
            created_at=parse_timestamp(record["created_at"]),
            updated_at=parse_timestamp(record["updated_at"]),
            timeframes=IntervalSet.from_dict(record.get("timeframes") or {}),
        )
