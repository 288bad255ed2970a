from .selection_group_json_repository import SelectionGroupJsonRepository
from .selection_group_postgres_repository import SelectionGroupPostgresRepository

__all__ = [
    "SelectionGroupJsonRepository",
    "SelectionGroupPostgresRepository",
]
