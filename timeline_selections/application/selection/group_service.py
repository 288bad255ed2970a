from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional
from uuid import uuid4

from timeline_selections.domain.errors import NotFoundError, ValidationError
from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.overlap_validator import assert_no_overlaps
from timeline_selections.domain.repositories.selection_group_repository import (
    SelectionGroupRepository,
)
from timeline_selections.domain.selection_group import SelectionGroup, SelectionGroupSummary
from timeline_selections.domain.timestamps import utcnow
from timeline_selections.domain.value_objects import SelectionGroupId

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _check_name(name: Optional[str], *, required: bool) -> Optional[str]:
    if name is None:
        if required:
            raise ValidationError("name is required")
        return None
    if not isinstance(name, str) or not name:
        raise ValidationError("name must be a non-empty string")
    return name


def new_group_id() -> SelectionGroupId:
    return SelectionGroupId(uuid4().hex)


async def list_groups(repo: SelectionGroupRepository) -> List[SelectionGroupSummary]:
    return await repo.list_summaries()


async def get_group(
    repo: SelectionGroupRepository,
    group_id: SelectionGroupId,
) -> SelectionGroup:
    group = await repo.find_by_id(group_id)
    if group is None:
        raise NotFoundError(group_id)
    return group


async def create_group(
    repo: SelectionGroupRepository,
    name: str,
    timeframes: IntervalSet,
    *,
    now: Clock = utcnow,
) -> SelectionGroupId:
    """
    Создаёт группу: проверка пересечений -> новый id -> created_at = updated_at = now.
    """
    name = _check_name(name, required=True)
    assert_no_overlaps(timeframes)

    timestamp = now()
    group = SelectionGroup(
        id=new_group_id(),
        name=name,
        created_at=timestamp,
        updated_at=timestamp,
        timeframes=timeframes,
    )
    await repo.create(group)

    logger.info(
        "selection_groups.create id=%s name=%s timeframes=%d",
        group.id, name, len(timeframes),
    )
    return group.id


async def replace_group(
    repo: SelectionGroupRepository,
    group_id: SelectionGroupId,
    name: Optional[str],
    timeframes: IntervalSet,
    *,
    now: Clock = utcnow,
) -> None:
    """
    Полная замена timeframes (без слияния). name = None — имя не меняется.
    """
    name = _check_name(name, required=False)
    assert_no_overlaps(timeframes)

    ok = await repo.replace(
        group_id,
        name=name,
        updated_at=now(),
        timeframes=timeframes,
    )
    if not ok:
        raise NotFoundError(group_id)

    logger.info(
        "selection_groups.replace id=%s rename=%s timeframes=%d",
        group_id, name is not None, len(timeframes),
    )
