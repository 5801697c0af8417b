"""
Tests for "HH:mm" parsing and formatting.
"""

import pytest

from walkslots.domain.exceptions import FormatError
from walkslots.domain.time_parser import MINUTES_PER_DAY, fold_minutes, format_time, parse_time


class TestParseTime:
    """Tests for parse_time."""

    def test_parse_valid_times(self):
        """Test parsing well-formed times."""
        assert parse_time("00:00") == 0
        assert parse_time("09:15") == 555
        assert parse_time("23:59") == 1439

    @pytest.mark.parametrize(
        "value",
        ["", "0900", "9", "aa:bb", "24:00", "12:60", "-1:30", "12:3x", "12:00:00", " 9:00", "09:"],
    )
    def test_malformed_input_raises_format_error(self, value):
        """Test that malformed strings are rejected."""
        with pytest.raises(FormatError):
            parse_time(value)

    def test_format_error_is_value_error(self):
        """FormatError can be caught as ValueError by generic callers."""
        with pytest.raises(ValueError):
            parse_time("noon")


class TestFormatTime:
    """Tests for format_time."""

    def test_zero_padding(self):
        assert format_time(0) == "00:00"
        assert format_time(65) == "01:05"
        assert format_time(1439) == "23:59"

    def test_out_of_range_raises(self):
        with pytest.raises(FormatError):
            format_time(MINUTES_PER_DAY)
        with pytest.raises(FormatError):
            format_time(-1)

    def test_round_trip_for_every_minute_of_day(self):
        """format(parse(s)) == s for all valid zero-padded strings."""
        for minute in range(MINUTES_PER_DAY):
            text = f"{minute // 60:02d}:{minute % 60:02d}"
            assert format_time(parse_time(text)) == text

    def test_fold_minutes_past_midnight(self):
        assert fold_minutes(1500) == 60
        assert fold_minutes(1440) == 0
        assert fold_minutes(600) == 600
