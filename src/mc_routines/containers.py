"""Chest and dispenser transfers."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Sequence

from mc_routines.adapters.engine import EngineRejectedError
from mc_routines.matching import matches_any
from mc_routines.models import Block, ContainerWindow, Item
from mc_routines.session import AgentSession

ContainerUse = Callable[[ContainerWindow], Awaitable[bool]]


class ContainerOperations:
    """Window-level container I/O. None of these methods approach the container."""

    def __init__(self, session: AgentSession, *, logger: logging.Logger | None = None) -> None:
        self._session = session
        self._engine = session.engine
        self._logger = logger or logging.getLogger("mc_routines.containers")

    async def open_container(self, block: Block | None) -> ContainerWindow | None:
        if block is None:
            self._logger.error("open_container_missing_block")
            return None
        try:
            return await self._engine.open_container(block)
        except EngineRejectedError as exc:
            self._logger.warning("open_container_rejected", extra={"block": block.name, "error": str(exc)})
            return None

    async def close_container(self, window: ContainerWindow | None) -> bool:
        if window is None:
            return False
        try:
            await self._engine.close_container(window)
        except EngineRejectedError as exc:
            self._logger.warning("close_container_rejected", extra={"window_id": window.window_id, "error": str(exc)})
            return False
        return True

    def get_container_contents(self, window: ContainerWindow) -> list[Item]:
        return list(self._engine.container_items(window))

    async def withdraw_items(
        self,
        window: ContainerWindow,
        item_names: Sequence[str] = (),
        *,
        partial_match: bool = False,
        quantity: int | None = None,
    ) -> bool:
        """Withdraw matching stacks, up to ``quantity`` per distinct item name."""
        stacks = self._engine.container_items(window)
        return await self._transfer(stacks, item_names, partial_match, quantity, self._engine.withdraw, window, "withdraw")

    async def deposit_items(
        self,
        window: ContainerWindow,
        item_names: Sequence[str] = (),
        *,
        partial_match: bool = False,
        quantity: int | None = None,
    ) -> bool:
        """Deposit matching inventory stacks, up to ``quantity`` per distinct item name."""
        stacks = self._engine.inventory_snapshot()
        return await self._transfer(stacks, item_names, partial_match, quantity, self._engine.deposit, window, "deposit")

    async def open_and_use_container(self, block: Block | None, use: ContainerUse) -> bool:
        """Open ``block``, run ``use`` on the window, and always close it again."""
        window = await self.open_container(block)
        if window is None:
            return False
        with self._session.using_container():
            try:
                return await use(window)
            finally:
                await self.close_container(window)

    async def _transfer(
        self,
        stacks: Sequence[Item],
        item_names: Sequence[str],
        partial_match: bool,
        quantity: int | None,
        move: Callable[[ContainerWindow, Item, int], Awaitable[None]],
        window: ContainerWindow,
        direction: str,
    ) -> bool:
        if quantity is not None and quantity < 1:
            self._logger.error("container_invalid_quantity", extra={"direction": direction, "quantity": quantity})
            return False

        remaining: dict[str, int | None] = {}
        moved_any = False
        for stack in list(stacks):
            if not matches_any(item_names, stack, partial_match=partial_match):
                continue
            budget = remaining.setdefault(stack.name, quantity)
            if budget is not None and budget <= 0:
                continue
            count = stack.count if budget is None else min(stack.count, budget)
            try:
                await move(window, stack, count)
            except EngineRejectedError as exc:
                self._logger.warning(
                    "container_transfer_rejected",
                    extra={"direction": direction, "item": stack.name, "error": str(exc)},
                )
                return False
            if budget is not None:
                remaining[stack.name] = budget - count
            moved_any = True
            self._logger.info("container_transfer", extra={"direction": direction, "item": stack.name, "count": count})

        if not moved_any:
            self._logger.info("container_transfer_nothing_matched", extra={"direction": direction, "items": list(item_names)})
        return moved_any
