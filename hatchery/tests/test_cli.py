"""
Tests for the command-line interface and settings.
"""

import json
from pathlib import Path

import pytest

from ..cli import main
from ..config import Settings, load_settings
from ..persistence.store import SaveStore
from .conftest import EVENTS, FOOTNOTES, NAME_PARTS


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the CLI away from the real home directory."""
    for name in ("HATCHERY_ENV", "HATCHERY_CONTENT_DIR", "HATCHERY_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HATCHERY_SAVE_DIR", str(tmp_path / "saves"))


class TestSettings:
    def test_defaults(self):
        settings = load_settings({})
        assert settings.env == "production"
        assert settings.strict_content
        assert settings.content_dir is None
        assert settings.allowed_origins == ("*",)
        assert settings.save_dir == Path.home() / ".hatchery" / "saves"

    def test_from_environment(self):
        settings = load_settings({
            "HATCHERY_ENV": "Development",
            "HATCHERY_CONTENT_DIR": "/tmp/content",
            "ALLOWED_ORIGINS": "http://a.test, http://b.test",
            "HATCHERY_LOG_LEVEL": "debug",
        })
        assert settings.is_development
        assert not settings.strict_content
        assert settings.content_dir == Path("/tmp/content")
        assert settings.allowed_origins == ("http://a.test", "http://b.test")
        assert settings.log_level == "DEBUG"

    def test_dataclass_defaults_match(self):
        assert Settings().strict_content


class TestCLI:
    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_validate_bundled(self, capsys):
        assert main(["validate"]) == 0
        assert "Valid:" in capsys.readouterr().out

    def test_validate_reports_errors(self, tmp_path, capsys):
        (tmp_path / "events.v1.json").write_text(json.dumps([EVENTS[0], EVENTS[0]]))
        (tmp_path / "footnotes.v1.json").write_text(json.dumps(FOOTNOTES))
        (tmp_path / "nameParts.v1.json").write_text(json.dumps(NAME_PARTS))
        assert main(["validate", str(tmp_path)]) == 1
        assert "ERROR: Duplicate event ID: evt_calm" in capsys.readouterr().out

    def test_validate_missing_dir(self, tmp_path, capsys):
        assert main(["validate", str(tmp_path / "nothing")]) == 1
        assert "not found" in capsys.readouterr().out

    def test_simulate_json(self, capsys):
        assert main(["simulate", "--policy", "reform", "-n", "3", "--seed", "5", "--json"]) == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats[0]["policy"] == "reform"
        assert stats[0]["runs"] == 3

    def test_simulate_text(self, capsys):
        assert main(["simulate", "-n", "2"]) == 0
        out = capsys.readouterr().out
        assert "RESULTS for random" in out
        assert "RESULTS for reform" in out

    def test_simulate_needs_runs(self, capsys):
        assert main(["simulate", "-n", "0"]) == 1

    def test_new_saves_slot(self, tmp_path, capsys):
        assert main(["new", "--seed", "11", "--slot", "cli"]) == 0
        assert "seed 11" in capsys.readouterr().out
        state = SaveStore(tmp_path / "saves").load("cli")
        assert state.seed == 11

    def test_new_bad_slot(self, capsys):
        assert main(["new", "--slot", "../bad"]) == 1
        assert "Invalid save slot" in capsys.readouterr().out
