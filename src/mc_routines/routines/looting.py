"""Take items out of the nearest chest."""

from __future__ import annotations

import logging
from typing import Sequence

from mc_routines.agent import RoutineAgent
from mc_routines.models import ContainerWindow

logger = logging.getLogger("mc_routines.routines.looting")


async def loot_chest(
    agent: RoutineAgent,
    items: Sequence[str] = (),
    quantity: int | None = None,
    max_distance: float | None = None,
) -> bool:
    chest = agent.find_block(["chest"], max_distance=max_distance)
    if chest is None:
        logger.info("loot_no_chest")
        return False
    if not await agent.approach_block(chest):
        return False

    async def take(window: ContainerWindow) -> bool:
        logger.info(
            "loot_chest_contents",
            extra={"items": [f"{stack.count}x {stack.name}" for stack in agent.get_container_contents(window)]},
        )
        return await agent.withdraw(window, items, partial_match=True, quantity=quantity)

    return await agent.open_and_use_container(chest, take)
