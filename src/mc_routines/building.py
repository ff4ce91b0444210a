"""Block placement."""

from __future__ import annotations

import logging

from mc_routines.adapters.engine import EngineRejectedError
from mc_routines.inventory import InventoryOperations
from mc_routines.models import Block, Vec3
from mc_routines.navigation import GoalNear, Navigator
from mc_routines.session import AgentSession

UP = Vec3(0, 1, 0)


class BuildingOperations:
    def __init__(
        self,
        session: AgentSession,
        navigator: Navigator,
        inventory: InventoryOperations,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._engine = session.engine
        self._navigator = navigator
        self._inventory = inventory
        self._logger = logger or logging.getLogger("mc_routines.building")

    async def place_block(
        self,
        block_name: str,
        target: Block | None,
        face: Vec3 = UP,
        reach: float = 4.0,
    ) -> bool:
        """Place ``block_name`` from the inventory against ``face`` of ``target``."""
        if target is None:
            self._logger.error("place_block_missing_target", extra={"block": block_name})
            return False

        if not await self._navigator.goto(GoalNear(target.position, reach)):
            return False
        if await self._inventory.hold_item(block_name) is None:
            return False

        try:
            await self._engine.place_block(target, face)
        except EngineRejectedError as exc:
            self._logger.warning(
                "place_block_rejected",
                extra={"block": block_name, "target": str(target.position), "error": str(exc)},
            )
            return False
        self._logger.info("placed_block", extra={"block": block_name, "target": str(target.position + face)})
        return True
