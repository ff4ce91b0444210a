"""Example routines written against ``RoutineAgent``."""

from typing import Awaitable, Callable

from .gathering import gather_blocks, gather_flowers, gather_logs
from .hunting import hunt
from .looting import loot_chest

Routine = Callable[..., Awaitable[bool]]

ROUTINES: dict[str, Routine] = {
    "gather_flowers": gather_flowers,
    "gather_logs": gather_logs,
    "hunt": hunt,
    "loot_chest": loot_chest,
}

__all__ = [
    "ROUTINES",
    "Routine",
    "gather_blocks",
    "gather_flowers",
    "gather_logs",
    "hunt",
    "loot_chest",
]
