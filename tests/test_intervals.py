"""Tests for time range arithmetic."""
from datetime import time

import pytest

from app.services.scheduling.intervals import (
    TimeRange,
    format_time,
    free_intervals,
    merge_ranges,
    parse_time,
    subtract_ranges,
    time_from_minutes,
)


def r(start, end):
    return TimeRange.parse(start, end)


class TestParsing:
    def test_parse_and_format(self):
        assert parse_time("09:30") == 570
        assert parse_time("09:30:00") == 570
        assert format_time(570) == "09:30"
        assert time_from_minutes(570) == time(9, 30)

    @pytest.mark.parametrize("value", ["9", "24:00", "12:60", "ab:cd", "", "10-30"])
    def test_parse_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_time(value)

    def test_range_requires_start_before_end(self):
        with pytest.raises(ValueError):
            r("10:00", "10:00")
        with pytest.raises(ValueError):
            r("11:00", "10:00")

    def test_range_to_dict(self):
        assert r("09:00", "17:00").to_dict() == {"start_time": "09:00", "end_time": "17:00"}


class TestMerge:
    def test_merges_overlapping_and_touching(self):
        merged = merge_ranges([r("11:00", "12:00"), r("09:00", "10:00"), r("10:00", "10:30"), r("09:30", "09:45")])
        assert merged == [r("09:00", "10:30"), r("11:00", "12:00")]


class TestFreeIntervals:
    def test_block_splits_open_hours(self):
        assert free_intervals([r("09:00", "17:00")], [r("12:00", "13:00")]) == [
            r("09:00", "12:00"),
            r("13:00", "17:00"),
        ]

    def test_full_coverage_leaves_nothing(self):
        assert free_intervals([r("09:00", "10:00")], [r("09:00", "10:00")]) == []

    def test_no_open_hours_means_closed(self):
        assert free_intervals([], [r("09:00", "10:00")]) == []

    def test_touching_block_does_not_shrink(self):
        assert free_intervals([r("09:00", "12:00")], [r("12:00", "13:00"), r("08:00", "09:00")]) == [
            r("09:00", "12:00")
        ]

    def test_overlapping_blocks(self):
        free = free_intervals([r("09:00", "17:00")], [r("10:00", "12:00"), r("11:00", "13:00"), r("16:30", "18:00")])
        assert free == [r("09:00", "10:00"), r("13:00", "16:30")]

    def test_subtract_across_several_windows(self):
        base = [r("08:00", "10:00"), r("14:00", "18:00")]
        assert subtract_ranges(base, [r("09:00", "15:00")]) == [r("08:00", "09:00"), r("15:00", "18:00")]
