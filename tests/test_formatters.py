"""Tests for the timer format registry."""

import pytest

from sincewhen.engine.buckets import YEAR, WEEK, DAY, HOUR, MINUTE, TIME_UNITS, bucketize
from sincewhen.engine.formatters import (
    FORMATTERS,
    format_time,
    get_formatter,
    is_valid_format,
    list_formatters,
    make_scale_formatter,
)
from sincewhen.models.constants import FORMAT_SHOW_EPOCH, FORMAT_ONE_UNIT, FORMAT_TWO_UNITS, DEFAULT_FORMAT

NOW = 1_700_000_000


def index_of(name: str) -> int:
    return list_formatters().index(name)


class TestRegistry:
    def test_names_in_index_order(self):
        assert list_formatters() == [
            "Show Epoch",
            "One Unit",
            "Two Units",
            "Years",
            "Weeks",
            "Days",
            "Hours",
            "Minutes",
        ]

    def test_constants_match_registry(self):
        assert FORMATTERS[FORMAT_SHOW_EPOCH][0] == "Show Epoch"
        assert FORMATTERS[FORMAT_ONE_UNIT][0] == "One Unit"
        assert FORMATTERS[FORMAT_TWO_UNITS][0] == "Two Units"
        assert DEFAULT_FORMAT == FORMAT_TWO_UNITS

    @pytest.mark.parametrize("value,expected", [(0, True), (7, True), (8, False), (-1, False), (None, False), (True, False), ("1", False)])
    def test_is_valid_format(self, value, expected):
        assert is_valid_format(value) is expected

    @pytest.mark.parametrize("value", [8, 99, -1, None])
    def test_invalid_index_falls_back_to_one_unit(self, value):
        assert get_formatter(value) is FORMATTERS[FORMAT_ONE_UNIT][1]
        assert format_time(NOW - 3661, value, now=NOW) == "1 Hour"

    def test_unknown_scale_rejected(self):
        with pytest.raises(ValueError):
            make_scale_formatter("Fortnight")


class TestFormatTime:
    """Rendering a timer reset 1 hour, 1 minute and 1 second ago."""

    epoch = NOW - 3661

    def test_two_units(self):
        assert format_time(self.epoch, FORMAT_TWO_UNITS, now=NOW) == "1 Hour, 1 Minute"

    def test_show_epoch(self):
        assert format_time(self.epoch, FORMAT_SHOW_EPOCH, now=NOW) == str(self.epoch)

    def test_one_unit(self):
        assert format_time(self.epoch, FORMAT_ONE_UNIT, now=NOW) == "1 Hour"

    def test_hours(self):
        assert format_time(self.epoch, index_of("Hours"), now=NOW) == "1 Hour"

    def test_minutes(self):
        assert format_time(self.epoch, index_of("Minutes"), now=NOW) == "61 Minutes"

    def test_days_and_larger_are_zero(self):
        assert format_time(self.epoch, index_of("Days"), now=NOW) == "0 Days"
        assert format_time(self.epoch, index_of("Weeks"), now=NOW) == "0 Weeks"
        assert format_time(self.epoch, index_of("Years"), now=NOW) == "0 Years"

    def test_under_a_minute_renders_placeholder(self):
        assert format_time(NOW - 30, FORMAT_ONE_UNIT, now=NOW) == "-"
        assert format_time(NOW - 30, FORMAT_TWO_UNITS, now=NOW) == "-"

    def test_two_units_with_single_bucket(self):
        assert format_time(NOW - 120, FORMAT_TWO_UNITS, now=NOW) == "2 Minutes"

    def test_two_units_keeps_zero_second_bucket(self):
        assert format_time(NOW - YEAR, FORMAT_TWO_UNITS, now=NOW) == "1 Year, 0 Weeks"

    def test_future_epoch_does_not_go_negative(self):
        assert format_time(NOW + 500, FORMAT_ONE_UNIT, now=NOW) == "-"
        assert format_time(NOW + 500, index_of("Minutes"), now=NOW) == "0 Minutes"

    def test_defaults_to_current_time(self):
        assert format_time(0, FORMAT_SHOW_EPOCH) == "0"
        assert format_time(0, index_of("Years")).endswith("Years")


class TestSingleScaleDivisors:
    """Each single-unit format divides by its own unit, not by a year."""

    @pytest.mark.parametrize("name,unit,seconds", [
        ("Years", "Year", YEAR),
        ("Weeks", "Week", WEEK),
        ("Days", "Day", DAY),
        ("Hours", "Hour", HOUR),
        ("Minutes", "Minute", MINUTE),
    ])
    def test_three_units(self, name, unit, seconds):
        elapsed = 3 * seconds + seconds // 2
        assert format_time(NOW - elapsed, index_of(name), now=NOW) == f"3 {unit}s"

    @pytest.mark.parametrize("name,unit,seconds", [
        ("Weeks", "Week", WEEK),
        ("Days", "Day", DAY),
        ("Hours", "Hour", HOUR),
        ("Minutes", "Minute", MINUTE),
    ])
    def test_exactly_one_unit(self, name, unit, seconds):
        assert format_time(NOW - seconds, index_of(name), now=NOW) == f"1 {unit}"


class TestOneUnitMonotonic:
    def test_unit_never_shrinks_as_duration_grows(self):
        rank = {u.name: i for i, u in enumerate(TIME_UNITS)}
        previous_rank = None
        for seconds in range(60, 3 * YEAR, 7919 * 13):
            unit = bucketize(seconds)[0].unit
            if previous_rank is not None:
                # Lower rank = larger unit
                assert rank[unit] <= previous_rank
            previous_rank = rank[unit]
