"""Crafting through the engine's recipe book."""

from __future__ import annotations

import logging

from mc_routines.adapters.engine import EngineRejectedError
from mc_routines.models import Block, Item
from mc_routines.session import AgentSession

logger = logging.getLogger("mc_routines.crafting")


async def craft_item(
    session: AgentSession,
    item_name: str,
    quantity: int = 1,
    crafting_table: Block | None = None,
) -> Item | None:
    """Craft ``quantity`` units of ``item_name``.

    Returns the resulting inventory stack, or None when the item is unknown, no
    recipe is available with the current materials, or the engine refused. The
    session is flagged busy for the duration so a supervised action running in
    parallel does not treat the agent as stuck.
    """
    if quantity < 1:
        logger.error("craft_invalid_quantity", extra={"item": item_name, "quantity": quantity})
        return None

    engine = session.engine
    definition = engine.item_definition(item_name)
    if definition is None:
        logger.error("craft_unknown_item", extra={"item": item_name})
        return None

    recipes = engine.recipes_for(definition.id, crafting_table)
    if not recipes:
        logger.info(
            "craft_no_recipe",
            extra={"item": item_name, "has_table": crafting_table is not None},
        )
        return None

    recipe = recipes[0]
    runs = -(-quantity // max(1, recipe.result_count))
    with session.crafting():
        try:
            await engine.craft(recipe, runs, crafting_table)
        except EngineRejectedError as exc:
            logger.warning("craft_rejected", extra={"item": item_name, "error": str(exc)})
            return None

    logger.info("crafted_item", extra={"item": item_name, "runs": runs})
    for stack in engine.inventory_snapshot():
        if stack.type_id == definition.id:
            return stack
    return None
