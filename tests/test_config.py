import pytest
from pydantic import ValidationError

from mc_routines.config import Settings


def test_defaults_match_game_constants() -> None:
    settings = Settings()

    assert settings.stuck_check_interval_seconds == 5.0
    assert settings.stuck_position_tolerance == 0.005
    assert settings.block_search_distance == 50.0
    assert settings.item_search_distance == 50.0
    assert settings.entity_search_distance is None
    assert settings.drop_collection_wait_ticks == 25


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MC_ROUTINES_STUCK_CHECK_INTERVAL_SECONDS", "1.5")
    monkeypatch.setenv("MC_ROUTINES_ROUTINE_MAX_RETRIES", "4")

    settings = Settings()

    assert settings.stuck_check_interval_seconds == 1.5
    assert settings.routine_max_retries == 4


def test_invalid_interval_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(stuck_check_interval_seconds=0)
