"""Shared fixtures: JSON-file storage in tmp_path, sample groups, fake clock."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import pytest

from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.timeframe import SegmentEntry, Timeframe
from timeline_selections.infrastructure.repositories.selection_group_json_repository import (
    SelectionGroupJsonRepository,
)

BASE_TS = datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def entry(name: str, start: float, end: float) -> SegmentEntry:
    return SegmentEntry(name=name, start=start, end=end)


def interval_set(raw: Optional[Dict[str, tuple]] = None) -> IntervalSet:
    """Build an IntervalSet from {name: (start, end)} without validation."""
    return IntervalSet(
        {name: Timeframe(start=s, end=e) for name, (s, e) in (raw or {}).items()}
    )


class TickingClock:
    """Deterministic clock: every call advances by one second."""

    def __init__(self, start: datetime = BASE_TS) -> None:
        self._now = start

    def __call__(self) -> datetime:
        current = self._now
        self._now = self._now + timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def data_file(tmp_path, monkeypatch):
    path = tmp_path / "data" / "selection-groups.json"
    monkeypatch.setenv("SELECTION_STORAGE", "json")
    monkeypatch.setenv("SELECTION_DATA_FILE", str(path))
    return path


@pytest.fixture
def json_repo(data_file) -> SelectionGroupJsonRepository:
    return SelectionGroupJsonRepository(data_file)
