import pytest

from mc_routines.config import Settings
from mc_routines.models import Vec3
from mc_routines.session import AgentSession


class StubEngine:
    def __init__(self, busy: bool = False) -> None:
        self.busy = busy

    def is_busy(self) -> bool:
        return self.busy

    def current_position(self) -> Vec3:
        return Vec3(0, 64, 0)


def test_session_busy_combines_engine_and_session_flags() -> None:
    engine = StubEngine()
    session = AgentSession(engine)

    assert session.is_busy() is False
    engine.busy = True
    assert session.is_busy() is True
    engine.busy = False

    with session.crafting():
        assert session.is_busy() is True
    with session.using_container():
        assert session.is_busy() is True
    assert session.is_busy() is False


def test_flags_reset_when_work_fails() -> None:
    session = AgentSession(StubEngine())

    with pytest.raises(RuntimeError):
        with session.crafting():
            raise RuntimeError("recipe vanished")

    assert session.state.is_crafting is False


def test_sessions_do_not_share_state() -> None:
    first = AgentSession(StubEngine(), settings=Settings(stuck_check_interval_seconds=1))
    second = AgentSession(StubEngine())

    first.state.cooldown.last_attack_timestamp = 12.0

    assert second.state.cooldown.last_attack_timestamp is None
    assert first.settings.stuck_check_interval_seconds == 1
    assert second.settings.stuck_check_interval_seconds == 5.0
