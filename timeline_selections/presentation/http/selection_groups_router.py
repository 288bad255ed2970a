from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from timeline_selections.domain.errors import NotFoundError, OverlapError, ValidationError
from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.selection_group import SelectionGroup, SelectionGroupSummary
from timeline_selections.domain.timeframe import Timeframe
from timeline_selections.domain.timestamps import format_timestamp
from timeline_selections.presentation.usecases.selection_group_create import (
    create_selection_group_usecase,
)
from timeline_selections.presentation.usecases.selection_group_get import (
    get_selection_group_usecase,
)
from timeline_selections.presentation.usecases.selection_group_list import (
    list_selection_groups_usecase,
)
from timeline_selections.presentation.usecases.selection_group_replace import (
    replace_selection_group_usecase,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/selection-groups",
    tags=["selection-groups"],
)

# {
#   "name": "Interview cuts",
#   "timeframes": {
#     "intro":  { "start": 0,   "end": 5 },
#     "answer": { "start": 5,   "end": 12.5 }
#   }
# }


# ---------- Схемы (Swagger-модели) ----------


class TimeframeSchema(BaseModel):
    start: float = Field(
        ...,
        ge=0,
        strict=True,
        allow_inf_nan=False,
        description="Начало интервала, секунды (включительно)",
        examples=[2.5],
    )
    end: float = Field(
        ...,
        gt=0,
        strict=True,
        allow_inf_nan=False,
        description="Конец интервала, секунды (не включительно)",
        examples=[3.5],
    )

    @model_validator(mode="after")
    def check_end_after_start(self) -> "TimeframeSchema":
        if self.end <= self.start:
            raise ValueError("end must be greater than start")
        return self


def _check_timeframe_names(value: Dict[str, TimeframeSchema]) -> Dict[str, TimeframeSchema]:
    for name in value:
        if not name:
            raise ValueError("timeframe name must be a non-empty string")
    return value


class CreateSelectionGroupRequest(BaseModel):
    name: str = Field(
        ...,
        min_length=1,
        description="Имя группы",
        examples=["Interview cuts"],
    )
    timeframes: Dict[str, TimeframeSchema] = Field(
        ...,
        description="Интервалы группы, ключ — уникальное имя интервала",
    )

    @field_validator("timeframes")
    @classmethod
    def check_timeframe_names(
        cls, value: Dict[str, TimeframeSchema]
    ) -> Dict[str, TimeframeSchema]:
        return _check_timeframe_names(value)


class ReplaceSelectionGroupRequest(BaseModel):
    name: Optional[str] = Field(
        None,
        min_length=1,
        description="Новое имя группы (если не передано — не меняется)",
    )
    timeframes: Dict[str, TimeframeSchema] = Field(
        ...,
        description="Новый набор интервалов — заменяет старый целиком",
    )

    @field_validator("timeframes")
    @classmethod
    def check_timeframe_names(
        cls, value: Dict[str, TimeframeSchema]
    ) -> Dict[str, TimeframeSchema]:
        return _check_timeframe_names(value)


class SelectionGroupSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Идентификатор группы")
    name: str = Field(..., description="Имя группы")
    created_at: str = Field(
        ...,
        alias="createdAt",
        description="Момент создания (ISO 8601, UTC)",
    )
    updated_at: str = Field(
        ...,
        alias="updatedAt",
        description="Момент последнего изменения (ISO 8601, UTC)",
    )


class SelectionGroupResponse(SelectionGroupSummaryResponse):
    timeframes: Dict[str, TimeframeSchema] = Field(
        ...,
        description="Интервалы группы",
    )


class CreateSelectionGroupResponse(BaseModel):
    id: str = Field(..., description="Идентификатор созданной группы")


class ReplaceSelectionGroupResponse(BaseModel):
    success: bool = Field(True)


def _to_interval_set(timeframes: Dict[str, TimeframeSchema]) -> IntervalSet:
    # Пересечения проверяет сервис — здесь только перенос в доменную модель.
    return IntervalSet(
        {name: Timeframe(start=tf.start, end=tf.end) for name, tf in timeframes.items()}
    )


def _summary_response(summary: SelectionGroupSummary) -> SelectionGroupSummaryResponse:
    return SelectionGroupSummaryResponse(
        id=summary.id,
        name=summary.name,
        created_at=format_timestamp(summary.created_at),
        updated_at=format_timestamp(summary.updated_at),
    )


def _group_response(group: SelectionGroup) -> SelectionGroupResponse:
    return SelectionGroupResponse(
        id=group.id,
        name=group.name,
        created_at=format_timestamp(group.created_at),
        updated_at=format_timestamp(group.updated_at),
        timeframes={
            name: TimeframeSchema(start=tf.start, end=tf.end)
            for name, tf in group.timeframes.items()
        },
    )


# ---------- Эндпоинты ----------


@router.get(
    "",
    response_model=List[SelectionGroupSummaryResponse],
    summary="Список групп выделений",
    description="Все группы без интервалов, новые (по createdAt) первыми.",
)
async def list_selection_groups() -> List[SelectionGroupSummaryResponse]:
    groups = await list_selection_groups_usecase()
    return [_summary_response(g) for g in groups]


@router.get(
    "/{group_id}",
    response_model=SelectionGroupResponse,
    summary="Группа выделений с интервалами",
    responses={404: {"description": "Группа не найдена"}},
)
async def get_selection_group(group_id: str) -> SelectionGroupResponse:
    group = await get_selection_group_usecase(group_id)
    return _group_response(group)


@router.post(
    "",
    response_model=CreateSelectionGroupResponse,
    status_code=201,
    summary="Создать группу выделений",
    description=(
        "Проверяет, что интервалы не пересекаются (касание границ допустимо), "
        "и сохраняет группу. Возвращает сгенерированный id."
    ),
    responses={400: {"description": "Некорректные данные или пересечение интервалов"}},
)
async def create_selection_group(
    payload: CreateSelectionGroupRequest,
) -> CreateSelectionGroupResponse:
    group_id = await create_selection_group_usecase(
        name=payload.name,
        timeframes=_to_interval_set(payload.timeframes),
    )
    return CreateSelectionGroupResponse(id=group_id)


@router.put(
    "/{group_id}",
    response_model=ReplaceSelectionGroupResponse,
    summary="Заменить интервалы группы",
    description=(
        "Интервалы заменяются целиком (без слияния), updatedAt обновляется. "
        "Если передано name — группа переименовывается."
    ),
    responses={
        400: {"description": "Некорректные данные или пересечение интервалов"},
        404: {"description": "Группа не найдена"},
    },
)
async def replace_selection_group(
    group_id: str,
    payload: ReplaceSelectionGroupRequest,
) -> ReplaceSelectionGroupResponse:
    await replace_selection_group_usecase(
        group_id=group_id,
        name=payload.name,
        timeframes=_to_interval_set(payload.timeframes),
    )
    return ReplaceSelectionGroupResponse(success=True)


# ---------- Ошибки -> HTTP ----------


def _validation_details(exc: RequestValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]


async def _on_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("http.invalid_payload path=%s", request.url.path)
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid payload", "details": _validation_details(exc)},
    )


async def _on_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    content: Dict[str, Any] = {"error": str(exc)}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=400, content=content)


async def _on_overlap_error(request: Request, exc: OverlapError) -> JSONResponse:
    logger.info("http.overlap path=%s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=400,
        content={"error": str(exc), "details": exc.to_details()},
    )


async def _on_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Not found"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _on_request_validation_error)
    app.add_exception_handler(ValidationError, _on_validation_error)
    app.add_exception_handler(OverlapError, _on_overlap_error)
    app.add_exception_handler(NotFoundError, _on_not_found)
