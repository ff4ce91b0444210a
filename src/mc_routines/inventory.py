"""Inventory queries, holding and dropping items."""

from __future__ import annotations

import logging
from typing import Sequence

from mc_routines.adapters.engine import EngineRejectedError
from mc_routines.matching import matches_any, names_match
from mc_routines.models import Item
from mc_routines.session import AgentSession


class InventoryOperations:
    def __init__(self, session: AgentSession, *, logger: logging.Logger | None = None) -> None:
        self._engine = session.engine
        self._logger = logger or logging.getLogger("mc_routines.inventory")

    def get_all_inventory_items(self) -> list[Item]:
        return list(self._engine.inventory_snapshot())

    def find_inventory_items(self, item_name: str, *, partial_match: bool = False) -> list[Item]:
        return [
            item
            for item in self._engine.inventory_snapshot()
            if names_match(item_name, item, partial_match=partial_match)
        ]

    def get_inventory_item_quantity(self, item_name: str, *, partial_match: bool = False) -> int:
        quantity = sum(item.count for item in self.find_inventory_items(item_name, partial_match=partial_match))
        self._logger.debug("inventory_quantity", extra={"item": item_name, "quantity": quantity})
        return quantity

    def inventory_contains_item(self, item_name: str, *, partial_match: bool = False, quantity: int = 1) -> bool:
        if quantity < 1:
            self._logger.error("inventory_contains_invalid_quantity", extra={"item": item_name, "quantity": quantity})
            return False
        return self.get_inventory_item_quantity(item_name, partial_match=partial_match) >= quantity

    def is_inventory_slots_full(self) -> bool:
        return self._engine.empty_slot_count() == 0

    async def hold_item(self, item_name: str, *, partial_match: bool = False) -> Item | None:
        """Equip the first stack matching ``item_name``; the held item, or None on failure."""
        matches = self.find_inventory_items(item_name, partial_match=partial_match)
        if not matches:
            self._logger.error("hold_item_missing", extra={"item": item_name})
            return None
        try:
            await self._engine.equip(matches[0], "hand")
        except EngineRejectedError as exc:
            self._logger.warning("hold_item_rejected", extra={"item": item_name, "error": str(exc)})
            return None
        return self._engine.held_item()

    async def drop_inventory_item(self, item_name: str, *, partial_match: bool = False, quantity: int = 1) -> bool:
        """Drop ``quantity`` matching items, spread over as many stacks as needed.

        A negative quantity drops every matching stack. Returns True when the full
        requested quantity was tossed.
        """
        if quantity == 0:
            self._logger.error("drop_invalid_quantity", extra={"item": item_name, "quantity": quantity})
            return False

        stacks = self.find_inventory_items(item_name, partial_match=partial_match)
        available = sum(stack.count for stack in stacks)
        if available == 0:
            self._logger.error("drop_item_missing", extra={"item": item_name})
            return False

        to_drop = available if quantity < 0 else quantity
        self._logger.info("dropping_items", extra={"item": item_name, "quantity": to_drop})
        try:
            for stack in stacks:
                if to_drop <= 0:
                    break
                count = min(stack.count, to_drop)
                await self._engine.toss(stack, count)
                to_drop -= count
        except EngineRejectedError as exc:
            self._logger.warning("drop_item_rejected", extra={"item": item_name, "error": str(exc)})
            return False
        return to_drop <= 0

    async def drop_all_inventory_item(self, item_name: str, *, partial_match: bool = False) -> bool:
        return await self.drop_inventory_item(item_name, partial_match=partial_match, quantity=-1)

    async def drop_all_inventory_items(
        self, item_names: Sequence[str] = (), *, partial_match: bool = False
    ) -> bool:
        """Drop every stack matching any of ``item_names`` (all stacks when empty)."""
        dropped_all = True
        for stack in self._engine.inventory_snapshot():
            if not matches_any(item_names, stack, partial_match=partial_match):
                continue
            try:
                await self._engine.toss(stack, stack.count)
            except EngineRejectedError as exc:
                self._logger.warning("drop_item_rejected", extra={"item": stack.name, "error": str(exc)})
                dropped_all = False
        return dropped_all
