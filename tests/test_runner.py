"""Tests for the CLI runner and configuration."""

import json

import pytest
from datetime import date

from immunization_src.config import Config
from immunization_src.errors import InvalidInputError, ScheduleError
from immunization_src.runner import load_history, main, run


@pytest.fixture
def history_file(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(json.dumps([
        {"vaccine_id": "HepB", "dose_number": 1, "date_given": "2026-01-01"},
        {"vaccine_id": "pentacel", "date_given": "2026-03-01"},
    ]))
    return path


def json_output(captured):
    """Parse the JSON document printed after any log lines."""
    out = captured.out
    return json.loads(out[out.index("["):])


class TestLoadHistory:
    """History file loading."""

    def test_no_path(self):
        assert load_history(None) == []

    def test_list(self, history_file):
        assert len(load_history(str(history_file))) == 2

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(json.dumps({"vaccine_id": "HepB"}))
        with pytest.raises(ScheduleError, match="JSON list"):
            load_history(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidInputError, match="Cannot read history file"):
            load_history(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("[{\"vaccine_id\": \"HepB\",")
        with pytest.raises(InvalidInputError, match="not valid JSON"):
            load_history(str(path))


class TestRun:
    """Schedule computation and output formats."""

    def test_standard_json(self, capsys):
        records = run(dob="2026-01-01", today="2026-01-01", output_format="json")
        data = json_output(capsys.readouterr())
        assert len(data) == len(records)
        assert data[0]["vaccine_id"] == "HepB"
        assert data[0]["status"] == "due"

    def test_history_defaults_to_catchup(self, history_file, capsys):
        records = run(
            dob="2026-01-01",
            history_path=str(history_file),
            today="2026-03-01",
            output_format="json",
        )
        completed = {r.vaccine_id for r in records if r.status.value == "completed"}
        assert completed == {"HepB", "DTaP", "IPV", "Hib"}

    def test_table_output(self, capsys):
        run(dob="2026-01-01", today="2026-01-01")
        out = capsys.readouterr().out
        assert "IMMUNIZATION SCHEDULE - STANDARD" in out
        assert "Summary:" in out

    def test_pivot_output(self, history_file, capsys):
        run(
            dob="2026-01-01",
            history_path=str(history_file),
            today="2026-03-01",
            output_format="pivot",
        )
        out = capsys.readouterr().out
        assert "is_complete" in out


class TestMain:
    """Command-line entry point."""

    def test_json(self, capsys):
        main(["--dob", "2026-01-01", "--today", "2026-01-01", "--format", "json"])
        data = json_output(capsys.readouterr())
        assert data[0]["scheduled_date"] == "2026-01-01"

    def test_invalid_dob_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--dob", "not-a-date"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().out

    def test_missing_history_file_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--dob", "2022-01-01", "--history", str(tmp_path / "missing.json")])
        assert exc_info.value.code == 1
        assert "Error: Cannot read history file" in capsys.readouterr().out

    def test_lenient_ignores_unknown_vaccine(self, tmp_path, capsys):
        path = tmp_path / "history.json"
        path.write_text(json.dumps([
            {"vaccine_id": "FluMist", "dose_number": 1, "date_given": "2025-01-15"},
        ]))
        main([
            "--dob", "2022-01-01", "--history", str(path),
            "--today", "2026-10-19", "--format", "json", "--lenient",
        ])
        data = json_output(capsys.readouterr())
        assert all(entry["vaccine_id"] != "FluMist" for entry in data)


class TestConfig:
    """Reference date configuration."""

    def test_schedule_today_override(self, monkeypatch):
        monkeypatch.setattr(Config, "SCHEDULE_TODAY", "2026-10-19")
        assert Config.get_today() == date(2026, 10, 19)

    def test_default_today(self, monkeypatch):
        monkeypatch.setattr(Config, "SCHEDULE_TODAY", "")
        assert Config.get_today() == date.today()
