"""Game engine boundary and the in-memory engine used for demos and tests."""

from .engine import ActionEngine, EngineRejectedError, GameEngine, GoalChangedError, WorldQuery
from .simulated import SimulatedWorld, demo_world

__all__ = [
    "ActionEngine",
    "EngineRejectedError",
    "GameEngine",
    "GoalChangedError",
    "SimulatedWorld",
    "WorldQuery",
    "demo_world",
]
