"""
Tests for the variable-duration (sitting) generator.
"""

import random

import pytest

from walkslots.domain.exceptions import ValidationError
from walkslots.domain.models import AvailabilityRange
from walkslots.domain.time_parser import MINUTES_PER_DAY, format_time, parse_time
from walkslots.domain.variable_slots import VariableDurationSlotGenerator


def _range(start: str, end: str) -> AvailabilityRange:
    return AvailabilityRange.from_strings(start, end)


def _fmt(minutes):
    return [format_time(m) for m in minutes]


class TestStartTimes:
    """Tests for VariableDurationSlotGenerator.start_times."""

    def test_plain_range(self):
        """Starts lie on the 30-minute grid and leave room for the minimum hour."""
        generator = VariableDurationSlotGenerator()

        starts = generator.start_times([_range("09:00", "11:00")])

        assert _fmt(starts) == ["09:00", "09:30", "10:00"]

    def test_grid_is_anchored_at_midnight(self):
        """A range starting off-grid only offers grid starts inside it."""
        generator = VariableDurationSlotGenerator()

        starts = generator.start_times([_range("09:10", "11:00")])

        assert _fmt(starts) == ["09:30", "10:00"]

    def test_wrapping_range(self):
        """Both the evening and the early-morning segment offer starts."""
        generator = VariableDurationSlotGenerator()

        starts = _fmt(generator.start_times([_range("22:00", "02:00")], 60))

        assert "23:00" in starts
        assert "01:00" in starts
        assert "01:30" not in starts
        assert starts == ["00:00", "00:30", "01:00", "22:00", "22:30", "23:00", "23:30"]

    def test_results_are_deduplicated_and_sorted(self):
        """Start times come from a single pass over the day grid."""
        generator = VariableDurationSlotGenerator()

        starts = generator.start_times([_range("12:00", "14:00"), _range("09:00", "11:00")])

        assert _fmt(starts) == ["09:00", "09:30", "10:00", "12:00", "12:30", "13:00"]

    def test_no_range_long_enough(self):
        generator = VariableDurationSlotGenerator()

        assert generator.start_times([_range("09:00", "09:45")]) == []

    def test_custom_minimum_duration(self):
        generator = VariableDurationSlotGenerator()

        starts = generator.start_times([_range("09:00", "11:00")], min_duration_minutes=120)

        assert _fmt(starts) == ["09:00"]

    def test_step_override_per_call(self):
        generator = VariableDurationSlotGenerator()

        starts = generator.start_times([_range("09:00", "11:00")], step_minutes=60)

        assert _fmt(starts) == ["09:00", "10:00"]

    def test_invalid_parameters_raise(self):
        with pytest.raises(ValidationError):
            VariableDurationSlotGenerator(min_duration_minutes=0)
        with pytest.raises(ValidationError):
            VariableDurationSlotGenerator(step_minutes=-30)
        with pytest.raises(ValidationError):
            VariableDurationSlotGenerator().start_times([_range("09:00", "11:00")], min_duration_minutes=0)
        with pytest.raises(ValidationError):
            VariableDurationSlotGenerator().start_times([_range("09:00", "11:00")], step_minutes=0)


class TestEndTimes:
    """Tests for VariableDurationSlotGenerator.end_times."""

    def test_plain_range(self):
        generator = VariableDurationSlotGenerator()

        ends = generator.end_times([_range("09:00", "12:00")], parse_time("09:30"))

        assert _fmt(ends) == ["10:30", "11:00", "11:30", "12:00"]

    def test_step_override_per_call(self):
        generator = VariableDurationSlotGenerator()

        ends = generator.end_times([_range("09:00", "12:00")], parse_time("09:00"), step_minutes=60)

        assert _fmt(ends) == ["10:00", "11:00", "12:00"]

    def test_evening_start_runs_past_midnight(self):
        """Ends past midnight are folded back into next-day minutes."""
        generator = VariableDurationSlotGenerator()

        ends = generator.end_times([_range("22:00", "02:00")], parse_time("23:00"))

        assert _fmt(ends) == ["00:00", "00:30", "01:00", "01:30", "02:00"]

    def test_morning_start_in_wrapping_range(self):
        generator = VariableDurationSlotGenerator()

        ends = generator.end_times([_range("22:00", "02:00")], parse_time("00:30"))

        assert _fmt(ends) == ["01:30", "02:00"]

    def test_first_matching_range_wins(self):
        generator = VariableDurationSlotGenerator()
        ranges = [_range("09:00", "11:00"), _range("09:00", "15:00")]

        ends = generator.end_times(ranges, parse_time("09:00"))

        assert _fmt(ends) == ["10:00", "10:30", "11:00"]

    def test_start_outside_every_range_returns_empty(self):
        """No containing range means no end times, never an exception."""
        generator = VariableDurationSlotGenerator()

        assert generator.end_times([_range("09:00", "11:00")], parse_time("12:00")) == []

    def test_start_too_close_to_range_end_returns_empty(self):
        generator = VariableDurationSlotGenerator()

        assert generator.end_times([_range("09:00", "11:00")], parse_time("10:30")) == []

    def test_full_day_wrap_never_returns_the_start(self):
        """A range that wraps all the way round stops short of a full day."""
        generator = VariableDurationSlotGenerator()

        ends = generator.end_times([_range("10:00", "10:00")], parse_time("10:00"))

        assert parse_time("10:00") not in ends
        assert _fmt(ends)[0] == "11:00"
        assert _fmt(ends)[-1] == "09:30"

    def test_every_end_stays_inside_its_range(self):
        """Property check across random plain and wrapping ranges."""
        rng = random.Random(42)
        generator = VariableDurationSlotGenerator()

        for _ in range(200):
            availability = AvailabilityRange(
                start=rng.randrange(0, MINUTES_PER_DAY),
                end=rng.randrange(0, MINUTES_PER_DAY),
            )
            for start in generator.start_times([availability]):
                for end in generator.end_times([availability], start):
                    absolute_end = end if end > start else end + MINUTES_PER_DAY
                    assert absolute_end - start >= 60
                    assert absolute_end <= start + MINUTES_PER_DAY
                    if availability.wraps and start >= availability.start:
                        assert absolute_end <= availability.end + MINUTES_PER_DAY
                    else:
                        assert absolute_end <= availability.end
