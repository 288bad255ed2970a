from __future__ import annotations

from enum import Enum
from typing import NewType

SelectionGroupId = NewType("SelectionGroupId", str)


class DragMode(str, Enum):
    MOVE = "MOVE"
    RESIZE_LEFT = "RESIZE_LEFT"
    RESIZE_RIGHT = "RESIZE_RIGHT"


class RequestKind(str, Enum):
    LOAD = "LOAD"
    SAVE = "SAVE"
