"""Digging blocks and picking up their drops."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from mc_routines.adapters.engine import EngineRejectedError
from mc_routines.harvest import best_harvest_tool, equip_best_harvest_tool
from mc_routines.models import Block, GroundItem, WorldObject, WorldObjectKind
from mc_routines.navigation import ApproachOptions, Navigator
from mc_routines.ranking import FindFilter, SortFunction, ValueFunction, find_best
from mc_routines.session import AgentSession
from mc_routines.supervisor import ActionSupervisor

PICKUP_REACH = 1.0
DROP_SEARCH_RADIUS = 4.0


@dataclass(slots=True)
class DigOptions:
    """``reach``: digging distance; ``skip_collection``: leave drops on the ground;
    ``collection_wait_ticks``: ticks to wait for drops to settle before collecting."""

    reach: float = 5.0
    skip_collection: bool = False
    collection_wait_ticks: int = 25


class HarvestingOperations:
    def __init__(
        self,
        session: AgentSession,
        supervisor: ActionSupervisor,
        navigator: Navigator,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._engine = session.engine
        self._supervisor = supervisor
        self._navigator = navigator
        self._logger = logger or logging.getLogger("mc_routines.harvesting")

    def default_dig_options(self) -> DigOptions:
        return DigOptions(collection_wait_ticks=self._session.settings.drop_collection_wait_ticks)

    async def dig_block(self, block: Block | None) -> bool:
        """Equip the best tool and break ``block``, giving up if it changes underneath us."""
        if block is None:
            self._logger.error("dig_missing_block")
            return False
        if not best_harvest_tool(self._engine, block).can_harvest:
            self._logger.info("dig_cannot_harvest", extra={"block": block.name, "position": str(block.position)})
            return False

        def block_changed() -> bool:
            current = self._engine.block_at(block.position)
            return current is None or current.name != block.name

        try:
            await equip_best_harvest_tool(self._engine, block)
            return await self._supervisor.supervise(lambda: self._engine.dig(block), cancel_when=block_changed)
        except EngineRejectedError as exc:
            self._logger.warning("dig_rejected", extra={"block": block.name, "error": str(exc)})
            return False

    async def approach_and_dig_block(self, block: Block | None, options: DigOptions | None = None) -> bool:
        """Walk to ``block``, equip the best tool, dig it and collect what it drops."""
        options = options or self.default_dig_options()
        if block is None:
            self._logger.error("dig_missing_block")
            return False

        if not best_harvest_tool(self._engine, block).can_harvest:
            self._logger.info("dig_cannot_harvest", extra={"block": block.name, "position": str(block.position)})
            return False

        if not await self._navigator.approach_block(block, ApproachOptions(reach=options.reach)):
            return False

        current = self._engine.block_at(block.position)
        if current is None or current.name != block.name:
            self._logger.info("dig_target_changed", extra={"block": block.name, "position": str(block.position)})
            return False

        if not await self.dig_block(current):
            return False
        self._logger.info("dug_block", extra={"block": block.name, "position": str(block.position)})

        if options.skip_collection:
            return True
        await self._engine.wait_ticks(options.collection_wait_ticks)
        return await self._collect_drops(block)

    async def find_and_dig_block(
        self,
        block_names: Sequence[str],
        *,
        partial_match: bool = False,
        only_find_top_blocks: bool = False,
        max_distance: float | None = None,
        value_function: ValueFunction | None = None,
        sort_function: SortFunction | None = None,
        options: DigOptions | None = None,
    ) -> bool:
        """Dig the best-ranked block matching ``block_names``; False when none is found."""
        find_filter = FindFilter(
            names=block_names,
            partial_match=partial_match,
            max_distance=self._session.settings.block_search_distance if max_distance is None else max_distance,
            only_find_top_blocks=only_find_top_blocks,
        )
        results = find_best(self._engine, WorldObjectKind.BLOCK, find_filter, value_function, sort_function)
        if not results:
            self._logger.info("find_and_dig_nothing_found", extra={"blocks": list(block_names)})
            return False
        return await self.approach_and_dig_block(results[0].result, options)

    async def collect_item_on_ground(self, item: GroundItem | None) -> bool:
        """Walk onto ``item`` so the engine picks it up."""
        if item is None:
            self._logger.error("collect_missing_item")
            return False
        return await self._navigator.approach_entity(item, ApproachOptions(reach=PICKUP_REACH))

    async def find_and_collect_items_on_ground(
        self,
        item_names: Sequence[str] = (),
        *,
        partial_match: bool = False,
        max_distance: float | None = None,
        max_count: int | None = None,
    ) -> int:
        """Collect matching ground items, at most ``max_count`` of them when given.

        Returns how many were collected, including ones swept up on the way to another.
        """
        find_filter = FindFilter(
            names=item_names,
            partial_match=partial_match,
            max_distance=self._session.settings.item_search_distance if max_distance is None else max_distance,
        )
        if max_count is None:
            in_range = self._engine.objects_within_radius(WorldObjectKind.GROUND_ITEM, find_filter.max_distance)
            max_count = max(len(in_range), 1)

        collected = 0
        for found in find_best(self._engine, WorldObjectKind.GROUND_ITEM, find_filter, max_count=max_count):
            if self._engine.entity_by_id(found.result.id) is None:
                collected += 1
                continue
            if await self.collect_item_on_ground(found.result):
                collected += 1
        self._logger.info("collected_ground_items", extra={"items": list(item_names), "collected": collected})
        return collected

    async def dig_or_collect(self, target: WorldObject | None, options: DigOptions | None = None) -> bool:
        """Dig a block (collecting its drop) or pick up a ground item."""
        if isinstance(target, Block):
            return await self.approach_and_dig_block(target, options)
        if isinstance(target, GroundItem):
            return await self.collect_item_on_ground(target)
        self._logger.error("dig_or_collect_invalid_target", extra={"target": repr(target)})
        return False

    async def _collect_drops(self, block: Block) -> bool:
        drop_names = block.drops or [block.name]
        find_filter = FindFilter(
            names=drop_names,
            partial_match=True,
            predicate=lambda item: item.position.distance_to(block.position) <= DROP_SEARCH_RADIUS,
        )
        drops = find_best(self._engine, WorldObjectKind.GROUND_ITEM, find_filter)
        if not drops:
            self._logger.info("dig_no_drop_found", extra={"block": block.name, "drops": drop_names})
            return True
        return await self.collect_item_on_ground(drops[0].result)
