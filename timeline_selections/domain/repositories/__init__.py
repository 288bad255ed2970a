from .selection_group_repository import SelectionGroupRepository

__all__ = [
    "SelectionGroupRepository",
]
