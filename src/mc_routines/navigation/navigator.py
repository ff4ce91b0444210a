"""Supervised movement operations."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

from mc_routines.adapters.engine import EngineRejectedError
from mc_routines.matching import display_name_of
from mc_routines.models import Block, Entity, GroundItem, Vec3, WorldObject
from mc_routines.navigation.goals import Goal, GoalFollow, GoalInvert, GoalLookAtBlock, GoalNear, GoalXZ
from mc_routines.session import AgentSession
from mc_routines.supervisor import ActionSupervisor


@dataclass(slots=True)
class ApproachOptions:
    """``reach``: how close the agent must stand to the target (None: per-kind default)."""

    reach: float | None = None


DEFAULT_ENTITY_REACH = 1.0
DEFAULT_BLOCK_REACH = 5.0
DEFAULT_FOLLOW_REACH = 2.0
DEFAULT_AVOID_REACH = 5.0


class Navigator:
    def __init__(
        self,
        session: AgentSession,
        supervisor: ActionSupervisor,
        *,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._engine = session.engine
        self._supervisor = supervisor
        self._rng = rng or random.Random()
        self._logger = logger or logging.getLogger("mc_routines.navigation")

    async def goto(self, goal: Goal) -> bool:
        """Walk to ``goal`` under stuck supervision; False when stuck or rejected."""
        try:
            return await self._supervisor.supervise(lambda: self._engine.goto(goal))
        except EngineRejectedError as exc:
            self._logger.warning("goto_rejected", extra={"goal": repr(goal), "error": str(exc)})
            return False

    async def approach(self, target: WorldObject | None, reach: float | None = None) -> bool:
        """Move within ``reach`` of any world object."""
        if target is None:
            self._logger.error("approach_missing_target")
            return False
        if isinstance(target, Block):
            return await self.approach_block(target, ApproachOptions(reach=reach))
        return await self.approach_entity(target, ApproachOptions(reach=reach))

    async def approach_entity(self, entity: Entity | GroundItem | None, options: ApproachOptions | None = None) -> bool:
        if entity is None:
            self._logger.error("approach_entity_missing_target")
            return False
        reach = _reach(options, DEFAULT_ENTITY_REACH)
        self._logger.info(
            "approach_entity",
            extra={"target": _describe(entity), "reach": reach, "position": str(entity.position)},
        )
        return await self.goto(GoalNear(entity.position, reach))

    async def approach_block(self, block: Block | None, options: ApproachOptions | None = None) -> bool:
        if block is None:
            self._logger.error("approach_block_missing_target")
            return False
        reach = _reach(options, DEFAULT_BLOCK_REACH)
        self._logger.info("approach_block", extra={"block": _describe(block), "reach": reach})
        return await self.goto(GoalLookAtBlock(block.position, reach))

    def follow_entity(self, entity: Entity | None, options: ApproachOptions | None = None) -> bool:
        """Keep following ``entity`` in the background; returns once the goal is set."""
        if entity is None:
            self._logger.error("follow_entity_missing_target")
            return False
        reach = _reach(options, DEFAULT_FOLLOW_REACH)
        self._engine.set_goal(GoalFollow(entity.id, entity.position, reach), dynamic=True)
        return True

    def avoid_entity(self, entity: Entity | None, options: ApproachOptions | None = None) -> bool:
        """Keep at least ``reach`` away from ``entity`` in the background."""
        if entity is None:
            self._logger.error("avoid_entity_missing_target")
            return False
        reach = _reach(options, DEFAULT_AVOID_REACH)
        self._engine.set_goal(GoalInvert(GoalFollow(entity.id, entity.position, reach)), dynamic=True)
        return True

    async def wander(self, min_distance: float = 10.0, max_distance: float = 10.0) -> bool:
        """Walk to a random XZ point between ``min_distance`` and ``max_distance`` away."""
        min_distance = max(1.0, min_distance)
        max_distance = max(min_distance, max_distance)
        origin = self._engine.current_position()

        def offset() -> float:
            magnitude = min_distance + self._rng.random() * (max_distance - min_distance)
            return magnitude if self._rng.random() < 0.5 else -magnitude

        return await self.goto(GoalXZ(origin.x + offset(), origin.z + offset()))

    async def move_away_from(self, position: Vec3, distance: float) -> bool:
        """Move along the XZ line from ``position`` through the agent until ``distance`` away."""
        current = self._engine.current_position()
        dx, dz = current.x - position.x, current.z - position.z
        planar = math.hypot(dx, dz)
        if planar >= distance:
            return True
        if planar == 0:
            angle = self._rng.random() * 2 * math.pi
            dx, dz, planar = math.cos(angle), math.sin(angle), 1.0
        target_x = position.x + dx / planar * distance
        target_z = position.z + dz / planar * distance
        return await self.goto(GoalXZ(target_x, target_z))


def _reach(options: ApproachOptions | None, default: float) -> float:
    if options is None or options.reach is None:
        return default
    return options.reach


def _describe(target: object) -> str:
    return display_name_of(target) or type(target).__name__
