from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import httpx

from timeline_selections.domain.errors import (
    ApiRequestError,
    NotFoundError,
    OverlapError,
    ValidationError,
)
from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.selection_group import SelectionGroup, SelectionGroupSummary
from timeline_selections.domain.timestamps import parse_timestamp
from timeline_selections.domain.value_objects import SelectionGroupId
from timeline_selections.env_config import SELECTION_API_BASE

logger = logging.getLogger(__name__)

API_PREFIX = "/api/selection-groups"


def _error_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return fallback


def _bound(raw: Dict[str, Any]) -> tuple[str, float, float]:
    return raw["name"], float(raw["start"]), float(raw["end"])


@contextmanager
def _decoding(what: str) -> Iterator[None]:
    """
    Неожиданная форма ответа (не JSON, нет поля, не тот тип) -> ApiRequestError,
    чтобы вызывающий ловил только SelectionGroupError.
    """
    try:
        yield
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("api.malformed_response what=%s: %r", what, exc)
        raise ApiRequestError(f"Failed to {what}: malformed response") from exc


class SelectionGroupsApiClient:
    """
    Клиент HTTP API групп выделений (то, что раньше делали fetch-хелперы UI).

    Ретраев и собственных таймаутов нет: ошибка сразу уходит вызывающему.
    transport можно подменить (например, httpx.ASGITransport в тестах).
    """

    def __init__(
        self,
        base_url: str = SELECTION_API_BASE,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SelectionGroupsApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def list_groups(self) -> List[SelectionGroupSummary]:
        what = "fetch selection groups"
        payload = await self._request("GET", API_PREFIX, what=what)
        with _decoding(what):
            return [
                SelectionGroupSummary(
                    id=SelectionGroupId(item["id"]),
                    name=item["name"],
                    created_at=parse_timestamp(item["createdAt"]),
                    updated_at=parse_timestamp(item["updatedAt"]),
                )
                for item in payload
            ]

    async def get_group(self, group_id: SelectionGroupId) -> SelectionGroup:
        what = "fetch selection group"
        payload = await self._request(
            "GET",
            f"{API_PREFIX}/{group_id}",
            what=what,
            group_id=group_id,
        )
        with _decoding(what):
            return SelectionGroup(
                id=SelectionGroupId(payload["id"]),
                name=payload["name"],
                created_at=parse_timestamp(payload["createdAt"]),
                updated_at=parse_timestamp(payload["updatedAt"]),
                timeframes=IntervalSet.parse(payload["timeframes"]),
            )

    async def create_group(self, name: str, timeframes: IntervalSet) -> SelectionGroupId:
        what = "create selection group"
        payload = await self._request(
            "POST",
            API_PREFIX,
            what=what,
            json={"name": name, "timeframes": timeframes.to_dict()},
        )
        with _decoding(what):
            return SelectionGroupId(payload["id"])

    async def update_group(
        self,
        group_id: SelectionGroupId,
        timeframes: IntervalSet,
        name: Optional[str] = None,
    ) -> None:
        body: Dict[str, Any] = {"timeframes": timeframes.to_dict()}
        if name is not None:
            body["name"] = name

        await self._request(
            "PUT",
            f"{API_PREFIX}/{group_id}",
            what="update selection group",
            group_id=group_id,
            json=body,
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        what: str,
        group_id: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            logger.warning("api.%s failed url=%s: %s", method.lower(), url, exc)
            raise ApiRequestError(f"Failed to {what}: {exc}") from exc

        if response.is_success:
            with _decoding(what):
                return response.json()

        try:
            payload = response.json()
        except ValueError:
            payload = None

        message = _error_message(payload, f"Failed to {what}")

        if response.status_code == 404:
            raise NotFoundError(group_id or url)

        if response.status_code == 400:
            details = payload.get("details") if isinstance(payload, dict) else None
            if isinstance(details, dict) and details.get("kind") == "overlap":
                with _decoding(what):
                    first, second = _bound(details["first"]), _bound(details["second"])
                raise OverlapError(first, second)
            raise ValidationError(message, details=details)

        raise ApiRequestError(message, status_code=response.status_code)
