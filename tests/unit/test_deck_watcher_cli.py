"""Tests for the command line entry point."""

from pathlib import Path

import pytest

from scripts.deck_watcher import load_settings, main, parse_args


def test_no_configuration_prints_usage(capsys):
    assert main([]) == 0

    out = capsys.readouterr().out
    assert "usage: deck-watcher" in out
    assert "CLEANUP_DAYS" in out


def test_help_flag_exits_zero():
    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])

    assert exc_info.value.code == 0


def test_positional_arguments_override_environment(monkeypatch):
    monkeypatch.setenv("CLEANUP_DAYS", "3")
    monkeypatch.setenv("GOTENBERG_URL", "http://env-host:3000")

    settings = load_settings(parse_args(["in", "out", "http://cli-host:3000", "14"]))

    assert settings.input_dir == Path("in")
    assert settings.output_dir == Path("out")
    assert settings.gotenberg_url == "http://cli-host:3000"
    assert settings.cleanup_days == 14


def test_environment_fills_missing_arguments(monkeypatch):
    monkeypatch.setenv("INPUT_DIR", "/env/in")
    monkeypatch.setenv("OUTPUT_DIR", "/env/out")
    monkeypatch.setenv("CLEANUP_DAYS", "30")

    settings = load_settings(parse_args([]))

    assert settings.input_dir == Path("/env/in")
    assert settings.cleanup_days == 30
    assert settings.gotenberg_url == "http://localhost:3000"


def test_invalid_retention_exits_one(tmp_path):
    assert main([str(tmp_path), str(tmp_path / "out"), "http://localhost:3000", "soon"]) == 1


def test_negative_retention_exits_one(tmp_path):
    assert main([str(tmp_path), str(tmp_path / "out"), "http://localhost:3000", "-2"]) == 1


def test_zero_retention_is_accepted_from_the_command_line():
    settings = load_settings(parse_args(["in", "out", "http://localhost:3000", "0"]))

    assert settings.cleanup_days == 0


def test_missing_input_dir_exits_one(tmp_path):
    assert main([str(tmp_path / "nope"), str(tmp_path / "out")]) == 1


def test_unreachable_service_exits_one(tmp_path, monkeypatch):
    async def unhealthy(self):
        return False

    monkeypatch.setattr("app.main.GotenbergClient.health_check", unhealthy)
    (tmp_path / "in").mkdir()

    assert main([str(tmp_path / "in"), str(tmp_path / "out")]) == 1
    assert (tmp_path / "out").is_dir()
