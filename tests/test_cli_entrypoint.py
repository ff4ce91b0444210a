from __future__ import annotations

import importlib

import pytest


def test_console_entrypoint_exposes_app() -> None:
    pytest.importorskip("typer")

    module = importlib.import_module("mc_routines.main")

    assert hasattr(module, "app")
    assert module.app is not None


def _runner_and_main(monkeypatch: pytest.MonkeyPatch):
    testing = pytest.importorskip("typer.testing")
    main = importlib.import_module("mc_routines.main")
    monkeypatch.setattr(main.settings, "demo_time_scale", 0.001)
    monkeypatch.setattr(main.settings, "routine_retry_delay_seconds", 0.0)
    monkeypatch.setattr(main, "configure_logging", lambda level: None)
    return testing.CliRunner(), main


def test_routines_command_lists_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    runner, main = _runner_and_main(monkeypatch)

    result = runner.invoke(main.app, ["routines"])

    assert result.exit_code == 0
    assert "gather_logs" in result.output
    assert "loot_chest" in result.output


def test_start_command_shows_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    runner, main = _runner_and_main(monkeypatch)

    result = runner.invoke(main.app, ["start"])

    assert result.exit_code == 0
    assert "stuck_check_interval_seconds" in result.output


def test_find_command_ranks_demo_blocks(monkeypatch: pytest.MonkeyPatch) -> None:
    runner, main = _runner_and_main(monkeypatch)

    result = runner.invoke(main.app, ["find", "block", "spruce_log", "--max-count", "2"])

    assert result.exit_code == 0
    assert "spruce_log" in result.output
    assert "sort_value" in result.output


def test_find_command_without_matches_exits_nonzero(monkeypatch: pytest.MonkeyPatch) -> None:
    runner, main = _runner_and_main(monkeypatch)

    result = runner.invoke(main.app, ["find", "entity", "ender_dragon"])

    assert result.exit_code == 1


def test_run_routine_command_loots_chest(monkeypatch: pytest.MonkeyPatch) -> None:
    runner, main = _runner_and_main(monkeypatch)

    result = runner.invoke(main.app, ["run-routine", "loot_chest", "--param", "items=bread"])

    assert result.exit_code == 0
    assert "succeeded" in result.output
    assert "bread" in result.output


def test_run_routine_rejects_unknown_routine(monkeypatch: pytest.MonkeyPatch) -> None:
    runner, main = _runner_and_main(monkeypatch)

    result = runner.invoke(main.app, ["run-routine", "dance"])

    assert result.exit_code != 0


def test_param_parsing(monkeypatch: pytest.MonkeyPatch) -> None:
    _, main = _runner_and_main(monkeypatch)

    assert main._parse_param("target=3") == ("target", 3)
    assert main._parse_param("max_distance=12.5") == ("max_distance", 12.5)
    assert main._parse_param("items=bread,iron_ingot") == ("items", ["bread", "iron_ingot"])
    assert main._parse_param("flower=poppy") == ("flower", "poppy")
    with pytest.raises(Exception):
        main._parse_param("oops")
