"""Gather blocks until the inventory holds enough of them."""

from __future__ import annotations

import logging

from mc_routines.agent import RoutineAgent

logger = logging.getLogger("mc_routines.routines.gathering")


async def gather_blocks(
    agent: RoutineAgent,
    block_name: str,
    *,
    target: int = 3,
    max_stuck: int = 3,
    partial_match: bool = False,
    item_name: str | None = None,
) -> bool:
    """Dig ``block_name`` until ``target`` of its item are carried.

    After a failed attempt the agent wanders before searching again. Once
    ``max_stuck`` attempts in a row have failed, the routine targets the
    second-best block instead, and gives up after twice that many.
    """
    item_name = item_name or block_name
    stuck = 0
    while agent.get_inventory_item_quantity(item_name, partial_match=partial_match) < target:
        if stuck >= 2 * max_stuck:
            logger.warning("gather_gave_up", extra={"block": block_name, "attempts": stuck})
            return False

        candidates = agent.find_blocks([block_name], partial_match=partial_match, max_count=2)
        # The closest block may be the one we keep getting stuck on.
        index = 1 if stuck >= max_stuck and len(candidates) > 1 else 0
        dug = bool(candidates) and await agent.approach_and_dig_block(candidates[index].result)
        if dug:
            stuck = 0
            continue

        stuck += 1
        logger.info("gather_attempt_failed", extra={"block": block_name, "stuck": stuck})
        await agent.wander()

    logger.info(
        "gather_complete",
        extra={"item": item_name, "quantity": agent.get_inventory_item_quantity(item_name, partial_match=partial_match)},
    )
    return True


async def gather_logs(agent: RoutineAgent, target: int = 3, log: str = "spruce_log") -> bool:
    return await gather_blocks(agent, log, target=target)


async def gather_flowers(agent: RoutineAgent, target: int = 2, flower: str = "poppy") -> bool:
    return await gather_blocks(agent, flower, target=target, partial_match=True)
