"""
Tests for the Typer CLI, driven against the bundled mock data.
"""

import json

from typer.testing import CliRunner

from walkslots.cli.app import app
from walkslots.services.booking_planner import BookingPlannerService

runner = CliRunner()


def _isolated(monkeypatch, tmp_path):
    monkeypatch.setattr("walkslots.config.get_default_config_path", lambda: tmp_path / "config.yaml")


class TestCli:
    """Tests for CLI commands."""

    def test_services(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["services"])

        assert result.exit_code == 0
        assert "meetgreet" in result.output
        assert "Dog Sitting" in result.output

    def test_slots_for_walk(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["slots", "2030-01-07", "solo", "--mock"])

        assert result.exit_code == 0
        # 08:00-20:00 with 60-minute walks: 08:00 ... 19:00 every 15 minutes
        assert "45 slot(s) available" in result.output
        assert "08:00 - 09:00" in result.output

    def test_slots_with_exclusion(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        blocked = runner.invoke(app, ["slots", "2025-06-02", "solo", "--mock"])
        freed = runner.invoke(app, ["slots", "2025-06-02", "solo", "--mock", "--exclude-booking", "101"])

        assert "10:00 - 11:00" not in blocked.output
        assert "10:00 - 11:00" in freed.output

    def test_unknown_service(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["slots", "2030-01-07", "grooming", "--mock"])

        assert result.exit_code == 1
        assert "Unknown service" in result.output

    def test_invalid_date(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["slots", "07.01.2030", "solo", "--mock"])

        assert result.exit_code == 1

    def test_window_for_walk(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["window", "2030-07-01", "solo", "14:30", "--mock"])

        assert result.exit_code == 0
        payload = json.loads(result.output[result.output.index("{"):])
        assert payload == {
            "service_type": "solo",
            "start_time": "2030-07-01T14:30:00+01:00",
            "end_time": "2030-07-01T15:30:00+01:00",
        }

    def test_window_rejects_unavailable_slot(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["window", "2030-07-01", "solo", "19:30", "--mock"])

        assert result.exit_code == 1
        assert "not an available slot" in result.output

    def test_multi_day_window(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(
            app,
            ["window", "2030-07-01", "sitting", "18:00", "--end", "09:00", "--end-date", "2030-07-03", "--mock"],
        )

        assert result.exit_code == 0
        payload = json.loads(result.output[result.output.index("{"):])
        assert payload["end_time"] == "2030-07-03T09:00:00+01:00"

    def test_sitting_ends(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["sitting-ends", "2030-07-01", "21:00", "--mock"])

        assert result.exit_code == 0
        assert "22:00" in result.output
        assert "23:30" in result.output
        assert "150 min" in result.output

    def test_sitting_check_multi_day_conflict(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["sitting-check", "2025-06-04", "2025-06-06", "--mock"])

        assert result.exit_code == 1
        assert "Jun 5: Dog sitting conflict" in result.output

    def test_sitting_check_multi_day_available(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["sitting-check", "2030-07-01", "2030-07-03", "--mock"])

        assert result.exit_code == 0
        assert "Multi-day sitting" in result.output

    def test_sitting_check_same_day_lists_start_times(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["sitting-check", "2030-07-01", "2030-07-01", "--mock"])

        assert result.exit_code == 0
        assert "Single-day sitting" in result.output

    def test_sitting_check_reversed_dates(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["sitting-check", "2030-07-03", "2030-07-01", "--mock"])

        assert result.exit_code == 1
        assert "must be after start date" in result.output

    def test_superseded_response_exits(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        async def superseded(self, **kwargs):
            return None

        monkeypatch.setattr(BookingPlannerService, "load_day", superseded)

        result = runner.invoke(app, ["slots", "2030-01-07", "solo", "--mock"])

        assert result.exit_code == 1
        assert "please run the command again" in result.output

    def test_two_hour_solo_walk(self, monkeypatch, tmp_path):
        _isolated(monkeypatch, tmp_path)

        result = runner.invoke(app, ["slots", "2030-01-07", "solo2h", "--mock"])

        assert result.exit_code == 0
        assert "41 slot(s)" in result.output
        assert "18:00 - 20:00" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "walkslots" in result.output
