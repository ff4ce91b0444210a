"""Melee combat: weapon choice, shared attack cooldown and the attack operation."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable

from mc_routines.adapters.engine import EngineRejectedError
from mc_routines.models import AttackCooldownState, Entity, Item
from mc_routines.navigation import ApproachOptions, Navigator
from mc_routines.session import AgentSession

FIST_COOLDOWN_SECONDS = 0.25

# Seconds between full-strength swings, from each weapon's attack speed.
_COOLDOWN_BY_NAME = {
    "wooden_axe": 1.25,
    "stone_axe": 1.25,
    "iron_axe": 1 / 0.9,
    "trident": 1 / 1.1,
}
# "_pickaxe" must precede "_axe".
_COOLDOWN_BY_SUFFIX = (
    ("_sword", 0.625),
    ("_pickaxe", 1 / 1.2),
    ("_axe", 1.0),
    ("_shovel", 1.0),
)

_MELEE_DAMAGE = {
    "wooden_sword": 4.0,
    "golden_sword": 4.0,
    "stone_sword": 5.0,
    "iron_sword": 6.0,
    "diamond_sword": 7.0,
    "netherite_sword": 8.0,
    "wooden_axe": 7.0,
    "golden_axe": 7.0,
    "stone_axe": 9.0,
    "iron_axe": 9.0,
    "diamond_axe": 9.0,
    "netherite_axe": 10.0,
}


def weapon_cooldown_seconds(weapon: Item | None) -> float:
    """Recovery time after a swing with ``weapon`` (None: bare fist)."""
    if weapon is None:
        return FIST_COOLDOWN_SECONDS
    if weapon.name in _COOLDOWN_BY_NAME:
        return _COOLDOWN_BY_NAME[weapon.name]
    for suffix, cooldown in _COOLDOWN_BY_SUFFIX:
        if weapon.name.endswith(suffix):
            return cooldown
    return FIST_COOLDOWN_SECONDS


def best_attack_item_melee(items: Iterable[Item]) -> Item | None:
    """Highest damage-per-second sword or axe; None means fighting bare-handed."""
    best: Item | None = None
    best_dps = 1.0 / FIST_COOLDOWN_SECONDS
    for item in items:
        damage = _MELEE_DAMAGE.get(item.name)
        if damage is None:
            continue
        dps = damage / weapon_cooldown_seconds(item)
        if dps > best_dps:
            best, best_dps = item, dps
    return best


class AttackCooldownGate:
    """Blocks a new swing until the previous weapon's cooldown has elapsed.

    Timing is shared across weapons: switching weapons never skips the remaining
    cooldown of the one used last.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep

    def remaining(self, state: AttackCooldownState, cooldown_seconds: float) -> float:
        if state.last_attack_timestamp is None:
            return 0.0
        elapsed = self._clock() - state.last_attack_timestamp
        return max(0.0, cooldown_seconds - elapsed)

    async def wait_for_cooldown(self, state: AttackCooldownState, cooldown_seconds: float | None = None) -> None:
        """Suspend until ``cooldown_seconds`` (default: last weapon's cooldown) have passed."""
        if cooldown_seconds is None:
            cooldown_seconds = weapon_cooldown_seconds(state.last_attack_weapon)
        remaining = self.remaining(state, cooldown_seconds)
        if remaining > 0:
            await self._sleep(remaining)

    def record(self, state: AttackCooldownState, weapon: Item | None, timestamp: float | None = None) -> None:
        state.last_attack_timestamp = self._clock() if timestamp is None else timestamp
        state.last_attack_weapon = weapon


@dataclass(slots=True)
class AttackOptions:
    """``reach``: distance to close before swinging; ``attack_item``: weapon to use instead of the best melee item."""

    reach: float = 2.0
    attack_item: Item | None = None


class CombatOperations:
    def __init__(
        self,
        session: AgentSession,
        navigator: Navigator,
        *,
        cooldown_gate: AttackCooldownGate | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._engine = session.engine
        self._navigator = navigator
        self._gate = cooldown_gate or AttackCooldownGate()
        self._logger = logger or logging.getLogger("mc_routines.combat")

    @property
    def cooldown_gate(self) -> AttackCooldownGate:
        return self._gate

    async def wait_for_weapon_cooldown(self) -> None:
        await self._gate.wait_for_cooldown(self._session.state.cooldown)

    async def attack_entity(self, entity: Entity | None, options: AttackOptions | None = None) -> bool:
        """Close in on ``entity`` and strike it once; True if the swing landed."""
        options = options or AttackOptions()
        if entity is None or not entity.is_attackable:
            self._logger.error("attack_invalid_target", extra={"target": repr(entity)})
            return False

        if not await self._navigator.approach_entity(entity, ApproachOptions(reach=options.reach)):
            return False

        await self.wait_for_weapon_cooldown()
        weapon = await self._equip_weapon(options.attack_item)

        live = self._engine.entity_by_id(entity.id)
        if not isinstance(live, Entity) or not live.is_attackable:
            self._logger.info("attack_target_gone", extra={"entity_id": entity.id})
            return False

        try:
            await self._engine.attack(live)
        except EngineRejectedError as exc:
            self._logger.warning("attack_rejected", extra={"entity_id": entity.id, "error": str(exc)})
            return False

        self._gate.record(self._session.state.cooldown, weapon)
        self._logger.info(
            "attacked_entity",
            extra={"entity_id": entity.id, "weapon": weapon.name if weapon else "fist"},
        )
        return True

    async def _equip_weapon(self, requested: Item | None) -> Item | None:
        weapon = requested or best_attack_item_melee(self._engine.inventory_snapshot())
        if weapon is None:
            return self._engine.held_item()
        try:
            await self._engine.equip(weapon, "hand")
        except EngineRejectedError as exc:
            self._logger.warning("equip_weapon_rejected", extra={"weapon": weapon.name, "error": str(exc)})
        return self._engine.held_item()
