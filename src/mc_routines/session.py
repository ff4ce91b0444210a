"""Per-agent session state shared by every operation of one agent."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from mc_routines.adapters.engine import GameEngine
from mc_routines.config import Settings, settings as default_settings
from mc_routines.models import AttackCooldownState


@dataclass(slots=True)
class AgentSessionState:
    cooldown: AttackCooldownState = field(default_factory=AttackCooldownState)
    is_crafting: bool = False
    is_using_container: bool = False


class AgentSession:
    """Owns the engine handle and the mutable state of a single agent.

    Several sessions can live in one process; nothing here is module level.
    """

    def __init__(self, engine: GameEngine, *, settings: Settings | None = None) -> None:
        self._engine = engine
        self._settings = settings or default_settings
        self._state = AgentSessionState()

    @property
    def engine(self) -> GameEngine:
        return self._engine

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def state(self) -> AgentSessionState:
        return self._state

    def is_busy(self) -> bool:
        """Engine work (mining/building) or session work (crafting/container) in progress."""
        return self._state.is_crafting or self._state.is_using_container or self._engine.is_busy()

    @contextmanager
    def crafting(self) -> Iterator[None]:
        self._state.is_crafting = True
        try:
            yield
        finally:
            self._state.is_crafting = False

    @contextmanager
    def using_container(self) -> Iterator[None]:
        self._state.is_using_container = True
        try:
            yield
        finally:
            self._state.is_using_container = False
