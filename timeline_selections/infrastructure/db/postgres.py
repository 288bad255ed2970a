from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Optional, Callable, Awaitable

import asyncpg
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class PostgresConfig:
    host: str
    port: int
    database: str
    user: str
    password: str
    min_pool_size: int = 1
    max_pool_size: int = 5


def load_config_from_env() -> PostgresConfig:
    """
    Конфиг PostgreSQL из переменных окружения.
    Репозитории получают уже готовый PostgresDatabase и про env ничего не знают.
    """
    return PostgresConfig(
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "5432")),
        database=os.getenv("DB_NAME", "selection_groups"),
        user=os.getenv("DB_USER", "app_user"),
        password=os.getenv("DB_PASSWORD", "app_password"),
        min_pool_size=int(os.getenv("DB_POOL_MIN", "1")),
        max_pool_size=int(os.getenv("DB_POOL_MAX", "5")),
    )


async def _init_connection(connection: asyncpg.Connection) -> None:
    # JSONB <-> dict без ручного json.dumps в каждом запросе
    await connection.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


class PostgresDatabase:
    """
    Пул соединений asyncpg.

    Конкретная реализация хранилища, локализованная в инфраструктуре:
    доменный слой зависит только от SelectionGroupRepository.
    """

    def __init__(self, config: PostgresConfig) -> None:
        self._config = config
        self._pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> None:
        if self._pool is not None:
            return

        self._pool = await asyncpg.create_pool(
            host=self._config.host,
            port=self._config.port,
            database=self._config.database,
            user=self._config.user,
            password=self._config.password,
            min_size=self._config.min_pool_size,
            max_size=self._config.max_pool_size,
            init=_init_connection,
        )

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    def _require_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("PostgresDatabase is not connected")
        return self._pool

    async def execute(self, query: str, *args: Any) -> str:
        """
        Запрос без строк в ответе (INSERT/UPDATE/...).
        Возвращает статусную строку PostgreSQL, например "UPDATE 1".
        """
        async with self._require_pool().acquire() as connection:
            return await connection.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        async with self._require_pool().acquire() as connection:
            rows = await connection.fetch(query, *args)
            return list(rows)

    async def fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        async with self._require_pool().acquire() as connection:
            return await connection.fetchrow(query, *args)

    async def with_connection(
        self,
        func: Callable[[asyncpg.Connection], Awaitable[Any]],
    ) -> Any:
        """
        Даёт "сырое" соединение — для транзакций (миграции).
        """
        async with self._require_pool().acquire() as connection:
            return await func(connection)
