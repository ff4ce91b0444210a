"""Hunt the most worthwhile attackable entity."""

from __future__ import annotations

import logging

from mc_routines.agent import RoutineAgent
from mc_routines.combat import AttackOptions

logger = logging.getLogger("mc_routines.routines.hunting")


async def hunt(agent: RoutineAgent, target: str | None = None, max_attacks: int = 20) -> bool:
    """Attack the best-ranked attackable entity (optionally named ``target``) until it is gone."""
    names = [target] if target else []
    entity = agent.find_entity(names, attackable=True)
    if entity is None:
        logger.info("hunt_no_target", extra={"target": target})
        return False

    for swing in range(1, max_attacks + 1):
        if not await agent.attack(entity, AttackOptions()):
            break
        live = agent.engine.entity_by_id(entity.id)
        if live is None:
            logger.info("hunt_target_defeated", extra={"entity_id": entity.id, "swings": swing})
            return True
        entity = live

    return agent.engine.entity_by_id(entity.id) is None
