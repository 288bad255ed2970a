from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, Field

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    ok: bool = Field(True, description="Сервис отвечает")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Проверка живости сервиса",
)
async def health() -> HealthResponse:
    return HealthResponse(ok=True)
