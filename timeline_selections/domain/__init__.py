from .errors import (
    SelectionGroupError,
    ValidationError,
    OverlapError,
    NotFoundError,
    ApiRequestError,
    DragStateError,
)
from .interval_set import IntervalSet
from .selection_group import SelectionGroup, SelectionGroupSummary, SelectionDraft
from .timeframe import Timeframe, SegmentEntry
from .value_objects import SelectionGroupId, DragMode, RequestKind

__all__ = [
    "SelectionGroupError",
    "ValidationError",
    "OverlapError",
    "NotFoundError",
    "ApiRequestError",
    "DragStateError",
    "IntervalSet",
    "SelectionGroup",
    "SelectionGroupSummary",
    "SelectionDraft",
    "Timeframe",
    "SegmentEntry",
    "SelectionGroupId",
    "DragMode",
    "RequestKind",
]
