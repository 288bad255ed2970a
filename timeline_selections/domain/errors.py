from __future__ import annotations

from typing import Any, Dict, Optional


class SelectionGroupError(Exception):
    """
    Базовая ошибка предметной области.
    Все наследники — восстановимые ошибки, которые показываются пользователю.
    """


class ValidationError(SelectionGroupError):
    """
    Некорректная форма данных (типы, отрицательные границы, пустые имена и т.п.).
    Отсекается до проверки пересечений.
    """

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.details = details


class OverlapError(SelectionGroupError):
    """
    Набор интервалов семантически некорректен: два интервала пересекаются.
    first / second — (имя, start, end) в порядке возрастания start.
    """

    def __init__(
        self,
        first: tuple[str, float, float],
        second: tuple[str, float, float],
    ) -> None:
        self.first = first
        self.second = second
        super().__init__(
            f'Timeframe overlap between "{first[0]}" [{first[1]}, {first[2]}) '
            f'and "{second[0]}" [{second[1]}, {second[2]})'
        )

    def to_details(self) -> Dict[str, Any]:
        return {
            "kind": "overlap",
            "first": {"name": self.first[0], "start": self.first[1], "end": self.first[2]},
            "second": {"name": self.second[0], "start": self.second[1], "end": self.second[2]},
        }


class NotFoundError(SelectionGroupError):
    def __init__(self, group_id: str) -> None:
        super().__init__(f"Selection group not found: {group_id}")
        self.group_id = group_id


class ApiRequestError(SelectionGroupError):
    """
    Сетевая ошибка или неожиданный ответ сервера.
    Для UI это транзиентное уведомление, состояние сессии не меняется.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DragStateError(SelectionGroupError):
    pass
