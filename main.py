from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from timeline_selections.env_config import APP_HOST, APP_PORT, LOG_LEVEL
from timeline_selections.infrastructure.storage import prepare_storage
from timeline_selections.presentation.http.health import router as health_router
from timeline_selections.presentation.http.selection_groups_router import (
    register_exception_handlers,
    router as selection_groups_router,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Хранилище должно быть готово до первого запроса:
    # JSON-файл создаётся, миграции PostgreSQL применяются.
    await prepare_storage()
    logger.info("Selection Groups API listening on http://%s:%s", APP_HOST, APP_PORT)
    yield


app = FastAPI(
    title="Selection Groups API",
    description="Named, non-overlapping timeline intervals for the video editor",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(selection_groups_router)


if __name__ == "__main__":
    # Для reload нужно указывать строку "main:app",
    # иначе uvicorn не сможет отслеживать изменения в файлах
    uvicorn.run(
        "main:app",
        host=APP_HOST,
        port=APP_PORT,
        reload=True,
    )
