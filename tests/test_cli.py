"""Tests for src.cli — plain-text dashboard and entry point."""

import pytest

from src.cli import format_dashboard, main
from src.config import settings
from src.core.insight_service import InsightService


@pytest.fixture
def use_db(monkeypatch, tmp_db_path):
    monkeypatch.setattr(settings, "DATABASE_PATH", tmp_db_path)
    return tmp_db_path


class TestFormatDashboard:
    def test_sections(self, horizon_db, fixed_clock):
        sam = horizon_db.add_person("u1", "Sam", "partner")
        horizon_db.add_goal("u1", name="Gym", category="health", target_per_week=3,
                            ramp_start=1, ramp_duration_weeks=3)
        horizon_db.add_important_date("u1", "Sam's birthday", "1990-04-01",
                                      date_type="birthday", person_id=sam.id)

        text = format_dashboard(InsightService(horizon_db, fixed_clock).dashboard("u1"))
        assert text.startswith("Horizon — Wednesday, 26 March 2025")
        assert "Gym: 0/2 sessions (0%)  [Week 1 of 3]" in text
        assert "Sam (partner): Start tracking quality time with Sam" in text
        assert "Sam's birthday: Sam • Apr 01 (6 days)" in text
        assert "No activity logged yet this week." in text

    def test_empty_user(self, horizon_db, fixed_clock):
        text = format_dashboard(InsightService(horizon_db, fixed_clock).dashboard("u1"))
        assert "(no goals yet)" in text
        assert "Add people you care about" in text
        assert "Coming up" not in text


class TestMain:
    def test_prints_dashboard(self, use_db, capsys):
        assert main(["u1"]) == 0
        out = capsys.readouterr().out
        assert "Weekly goals" in out
        assert "Balance" in out

    @pytest.mark.parametrize("argv", [[], ["u1", "extra"]])
    def test_usage_error(self, argv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 2
        assert "usage: python main.py [-h] user_id" in capsys.readouterr().err

    def test_help_lists_user_id(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0
        assert "user_id" in capsys.readouterr().out

    def test_unreadable_database(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setattr(settings, "DATABASE_PATH", str(tmp_path))
        assert main(["u1"]) == 1
        assert "could not read the database" in capsys.readouterr().err
