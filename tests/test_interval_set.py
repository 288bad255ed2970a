"""Tests for the immutable IntervalSet and Timeframe parsing."""
from __future__ import annotations

import math

import pytest

from timeline_selections.domain.errors import OverlapError, ValidationError
from timeline_selections.domain.interval_set import IntervalSet
from timeline_selections.domain.timeframe import Timeframe

from .conftest import interval_set


class TestTimeframeChecked:

    def test_accepts_ints_and_floats(self):
        tf = Timeframe.checked(0, 2.5)
        assert tf == Timeframe(0.0, 2.5)
        assert tf.duration == 2.5

    @pytest.mark.parametrize(
        "start,end",
        [(-1.0, 2.0), (2.0, 2.0), (3.0, 1.0), (0.0, math.inf), (math.nan, 1.0), ("0", 1.0), (True, 2.0)],
    )
    def test_rejects_bad_bounds(self, start, end):
        with pytest.raises(ValidationError):
            Timeframe.checked(start, end)


class TestIntervalSetParse:

    def test_parse_valid_payload(self):
        tfs = IntervalSet.parse({"a": {"start": 0, "end": 5}, "b": {"start": 5, "end": 8}})
        assert len(tfs) == 2
        assert tfs["b"] == Timeframe(5.0, 8.0)
        assert tfs.to_dict() == {"a": {"start": 0.0, "end": 5.0}, "b": {"start": 5.0, "end": 8.0}}

    def test_parse_rejects_overlap(self):
        with pytest.raises(OverlapError):
            IntervalSet.parse({"a": {"start": 0, "end": 5}, "b": {"start": 3, "end": 8}})

    def test_parse_rejects_missing_bound(self):
        with pytest.raises(ValidationError):
            IntervalSet.parse({"a": {"start": 0}})

    def test_parse_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            IntervalSet.parse({"": {"start": 0, "end": 1}})

    def test_parse_rejects_non_mapping(self):
        with pytest.raises(ValidationError):
            IntervalSet.parse([{"start": 0, "end": 1}])


class TestIntervalSetViews:

    def test_sorted_entries_and_earliest(self):
        tfs = interval_set({"late": (10.0, 12.0), "early": (1.0, 2.0), "mid": (4.0, 6.0)})

        assert [e.name for e in tfs.sorted_entries()] == ["early", "mid", "late"]
        assert tfs.earliest().name == "early"
        assert interval_set().earliest() is None

    def test_neighbors(self):
        tfs = interval_set({"a": (0.0, 1.0), "b": (2.0, 3.0), "c": (4.0, 5.0)})

        prev, item, nxt = tfs.neighbors("a")
        assert prev is None and item.name == "a" and nxt.name == "b"

        prev, item, nxt = tfs.neighbors("b")
        assert prev.name == "a" and nxt.name == "c"

        prev, item, nxt = tfs.neighbors("c")
        assert prev.name == "b" and nxt is None

        with pytest.raises(KeyError):
            tfs.neighbors("missing")

    def test_with_bounds_returns_new_set(self):
        original = interval_set({"a": (0.0, 1.0), "b": (2.0, 3.0)})

        moved = original.with_bounds("a", start=0.5)
        assert moved["a"] == Timeframe(0.5, 1.0)
        assert moved["b"] is original["b"]
        assert original["a"] == Timeframe(0.0, 1.0)
        assert moved is not original

        resized = original.with_bounds("b", end=4.0)
        assert resized["b"] == Timeframe(2.0, 4.0)

    def test_is_read_only_mapping(self):
        tfs = interval_set({"a": (0.0, 1.0)})
        with pytest.raises(TypeError):
            tfs["a"] = Timeframe(1.0, 2.0)

    def test_equality_by_content(self):
        assert interval_set({"a": (0.0, 1.0)}) == interval_set({"a": (0.0, 1.0)})
        assert interval_set({"a": (0.0, 1.0)}) != interval_set({"a": (0.0, 2.0)})
