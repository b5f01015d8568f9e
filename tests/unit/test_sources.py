"""
Unit tests for provenance sources.
"""

from datetime import datetime, timezone

import pytest

from tagmatch.errors import InvalidSourceError
from tagmatch.sources import (
    BUILTIN_SOURCE,
    EPOCH,
    MANUAL_SOURCE,
    Source,
    canonical_sources,
    latest_source,
)


class TestSource:
    """Tests for Source construction and ordering."""

    def test_empty_name_rejected(self):
        with pytest.raises(InvalidSourceError):
            Source("")
        with pytest.raises(InvalidSourceError):
            Source("   ")

    def test_invalid_source_is_value_error(self):
        """Callers catching ValueError still see bad sources."""
        with pytest.raises(ValueError):
            Source("")

    def test_naive_start_is_utc(self):
        source = Source("LUTI", datetime(2021, 3, 14))
        assert source.start.tzinfo == timezone.utc
        assert source == Source("LUTI", datetime(2021, 3, 14, tzinfo=timezone.utc))

    def test_default_start_is_epoch(self):
        assert Source("Manual").start == EPOCH

    def test_ordered_by_start_then_name(self):
        early = Source("Zeta", datetime(2020, 1, 1))
        late = Source("Alpha", datetime(2021, 1, 1))
        same_time = Source("Beta", datetime(2021, 1, 1))

        assert early < late
        assert late < same_time
        assert sorted([same_time, late, early]) == [early, late, same_time]

    def test_hashable_by_value(self):
        a = Source("LUTI", datetime(2021, 1, 1))
        b = Source("LUTI", datetime(2021, 1, 1))
        assert len({a, b}) == 1


class TestFromName:
    """Tests for inferring a start date from the source name."""

    def test_date_prefix(self):
        source = Source.from_name("2021-03-14-LUTI-Season-12")
        assert source.start == datetime(2021, 3, 14, tzinfo=timezone.utc)
        assert source.name == "2021-03-14-LUTI-Season-12"

    def test_no_prefix(self):
        assert Source.from_name("Manual Entry").start == EPOCH

    def test_impossible_date(self):
        """An out-of-range date falls back to the epoch instead of raising."""
        assert Source.from_name("2021-13-45-Broken").start == EPOCH


def test_serialization_round_trip():
    source = Source("2022-06-01-InkTV", datetime(2022, 6, 1, 18, 30, tzinfo=timezone.utc))
    assert Source.from_dict(source.to_dict()) == source


def test_canonical_sources_dedupes_and_sorts():
    a = Source("A", datetime(2020, 1, 1))
    b = Source("B", datetime(2019, 1, 1))
    assert canonical_sources([a, b, a]) == (b, a)


def test_latest_source():
    a = Source("A", datetime(2020, 1, 1))
    b = Source("B", datetime(2019, 1, 1))
    assert latest_source([a, b]) == a
    assert latest_source([]) is None


def test_builtin_sources_are_oldest():
    assert BUILTIN_SOURCE.start == EPOCH
    assert MANUAL_SOURCE.name == "Manual Entry"
