"""Navigation goals handed to the external pathfinder.

A goal only describes *where* the agent should end up; computing and walking the
route is the engine's job. ``next_waypoint`` gives simple engines a point to head
for; real pathfinders are free to ignore it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

from mc_routines.models import Vec3


class Goal(Protocol):
    def is_satisfied(self, position: Vec3) -> bool:
        """Return True once the agent standing at ``position`` has reached the goal."""

    def next_waypoint(self, position: Vec3) -> Vec3 | None:
        """Point the agent should move toward, or None when no movement helps."""


@dataclass(frozen=True, slots=True)
class GoalNear:
    """Stand within ``range`` blocks of a point."""

    position: Vec3
    range: float = 1.0

    def is_satisfied(self, position: Vec3) -> bool:
        return position.distance_to(self.position) <= self.range

    def next_waypoint(self, position: Vec3) -> Vec3 | None:
        return self.position


@dataclass(frozen=True, slots=True)
class GoalLookAtBlock:
    """Stand where the block at ``position`` is within ``reach``."""

    position: Vec3
    reach: float = 5.0

    def is_satisfied(self, position: Vec3) -> bool:
        return position.distance_to(self.position) <= self.reach

    def next_waypoint(self, position: Vec3) -> Vec3 | None:
        return self.position


@dataclass(frozen=True, slots=True)
class GoalXZ:
    """Reach a column regardless of height."""

    x: float
    z: float

    def is_satisfied(self, position: Vec3) -> bool:
        return math.dist((position.x, position.z), (self.x, self.z)) <= 0.5

    def next_waypoint(self, position: Vec3) -> Vec3 | None:
        return Vec3(self.x, position.y, self.z)


@dataclass(frozen=True, slots=True)
class GoalFollow:
    """Stay within ``range`` of an entity."""

    entity_id: int
    position: Vec3
    range: float = 2.0

    def is_satisfied(self, position: Vec3) -> bool:
        return position.distance_to(self.position) <= self.range

    def next_waypoint(self, position: Vec3) -> Vec3 | None:
        return self.position


@dataclass(frozen=True, slots=True)
class GoalInvert:
    """Satisfied exactly when the wrapped goal is not."""

    goal: GoalNear | GoalFollow

    def is_satisfied(self, position: Vec3) -> bool:
        return not self.goal.is_satisfied(position)

    def next_waypoint(self, position: Vec3) -> Vec3 | None:
        anchor = self.goal.position
        dx, dz = position.x - anchor.x, position.z - anchor.z
        length = math.hypot(dx, dz)
        if length == 0:
            dx, dz, length = 1.0, 0.0, 1.0
        step = self.goal.range + 1
        return Vec3(anchor.x + dx / length * step, position.y, anchor.z + dz / length * step)
