"""Harvest tool selection for blocks."""

from __future__ import annotations

import logging
import math

from mc_routines.adapters.engine import EngineRejectedError, GameEngine, WorldQuery
from mc_routines.models import BestHarvestTool, Block, Item

logger = logging.getLogger("mc_routines.harvest")


def best_harvest_tool(world: WorldQuery, block: Block, inventory: list[Item] | None = None) -> BestHarvestTool:
    """Return the held tool that digs ``block`` fastest.

    Bare hands are evaluated first and win ties, so ``tool`` is None either when no
    tool beats bare hands or when nothing can dig the block at all; the latter is
    reported with an infinite ``dig_time_ms``.
    """
    items = world.inventory_snapshot() if inventory is None else inventory
    best = BestHarvestTool(tool=None, dig_time_ms=world.dig_time_ms(block, None))
    for item in items:
        dig_time = world.dig_time_ms(block, item)
        if dig_time < best.dig_time_ms:
            best = BestHarvestTool(tool=item, dig_time_ms=dig_time)

    if not math.isfinite(best.dig_time_ms):
        return BestHarvestTool(tool=None, dig_time_ms=math.inf)
    return best


async def equip_best_harvest_tool(engine: GameEngine, block: Block) -> Item | None:
    """Equip the best tool for ``block``; None when bare hands are best or equipping failed."""
    best = best_harvest_tool(engine, block)
    if best.tool is None:
        return None

    try:
        await engine.equip(best.tool, "hand")
    except EngineRejectedError as exc:
        logger.warning(
            "equip_harvest_tool_rejected",
            extra={"tool": best.tool.name, "block": block.name, "error": str(exc)},
        )
        return None
    return engine.held_item()
