"""The find/act surface that routines are written against."""

from __future__ import annotations

import random
from typing import Sequence

from mc_routines.building import UP, BuildingOperations
from mc_routines.combat import AttackCooldownGate, AttackOptions, CombatOperations
from mc_routines.containers import ContainerOperations, ContainerUse
from mc_routines.crafting import craft_item
from mc_routines.harvesting import DigOptions, HarvestingOperations
from mc_routines.inventory import InventoryOperations
from mc_routines.models import (
    Block,
    ContainerWindow,
    Entity,
    FindResult,
    GroundItem,
    Item,
    Vec3,
    WorldObject,
    WorldObjectKind,
)
from mc_routines.navigation import ApproachOptions, Navigator
from mc_routines.ranking import FindFilter, SortFunction, ValueFunction, find_best
from mc_routines.session import AgentSession
from mc_routines.supervisor import ActionSupervisor


def position_string(position: Vec3) -> str:
    return str(position)


class RoutineAgent:
    """Facade over one agent session.

    Composes ranking, the stuck supervisor and the navigation, harvesting, combat,
    inventory, container, crafting and building operations, all sharing the same
    session state.
    """

    def __init__(
        self,
        session: AgentSession,
        *,
        supervisor: ActionSupervisor | None = None,
        cooldown_gate: AttackCooldownGate | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.session = session
        self.engine = session.engine
        self.supervisor = supervisor or ActionSupervisor(
            self.engine,
            interval_seconds=session.settings.stuck_check_interval_seconds,
            position_tolerance=session.settings.stuck_position_tolerance,
            busy_check=session.is_busy,
        )
        self.navigator = Navigator(session, self.supervisor, rng=rng)
        self.harvesting = HarvestingOperations(session, self.supervisor, self.navigator)
        self.combat = CombatOperations(session, self.navigator, cooldown_gate=cooldown_gate)
        self.inventory = InventoryOperations(session)
        self.containers = ContainerOperations(session)
        self.building = BuildingOperations(session, self.navigator, self.inventory)

    # -- finding

    def find_best(
        self,
        kind: WorldObjectKind,
        find_filter: FindFilter | None = None,
        value_function: ValueFunction | None = None,
        sort_function: SortFunction | None = None,
        max_count: int = 1,
    ) -> list[FindResult[WorldObject]]:
        return find_best(self.engine, kind, find_filter, value_function, sort_function, max_count)

    def find_entities(
        self,
        names: Sequence[str] = (),
        *,
        partial_match: bool = False,
        attackable: bool = False,
        max_distance: float | None = None,
        value_function: ValueFunction | None = None,
        sort_function: SortFunction | None = None,
        max_count: int = 1,
    ) -> list[FindResult[Entity]]:
        find_filter = FindFilter(
            names=names,
            partial_match=partial_match,
            attackable=attackable,
            max_distance=self.session.settings.entity_search_distance if max_distance is None else max_distance,
        )
        return self.find_best(WorldObjectKind.ENTITY, find_filter, value_function, sort_function, max_count)

    def find_entity(self, names: Sequence[str] = (), **kwargs) -> Entity | None:
        return _first(self.find_entities(names, **kwargs))

    def find_blocks(
        self,
        names: Sequence[str] = (),
        *,
        partial_match: bool = False,
        only_find_top_blocks: bool = False,
        max_distance: float | None = None,
        value_function: ValueFunction | None = None,
        sort_function: SortFunction | None = None,
        max_count: int = 1,
    ) -> list[FindResult[Block]]:
        find_filter = FindFilter(
            names=names,
            partial_match=partial_match,
            only_find_top_blocks=only_find_top_blocks,
            max_distance=self.session.settings.block_search_distance if max_distance is None else max_distance,
        )
        return self.find_best(WorldObjectKind.BLOCK, find_filter, value_function, sort_function, max_count)

    def find_block(self, names: Sequence[str] = (), **kwargs) -> Block | None:
        return _first(self.find_blocks(names, **kwargs))

    def find_items_on_ground(
        self,
        names: Sequence[str] = (),
        *,
        partial_match: bool = False,
        max_distance: float | None = None,
        value_function: ValueFunction | None = None,
        sort_function: SortFunction | None = None,
        max_count: int = 1,
    ) -> list[FindResult[GroundItem]]:
        find_filter = FindFilter(
            names=names,
            partial_match=partial_match,
            max_distance=self.session.settings.item_search_distance if max_distance is None else max_distance,
        )
        return self.find_best(WorldObjectKind.GROUND_ITEM, find_filter, value_function, sort_function, max_count)

    def find_item_on_ground(self, names: Sequence[str] = (), **kwargs) -> GroundItem | None:
        return _first(self.find_items_on_ground(names, **kwargs))

    # -- movement

    async def approach(self, target: WorldObject | None, reach: float | None = None) -> bool:
        return await self.navigator.approach(target, reach)

    async def approach_entity(self, entity: Entity | GroundItem | None, options: ApproachOptions | None = None) -> bool:
        return await self.navigator.approach_entity(entity, options)

    async def approach_block(self, block: Block | None, options: ApproachOptions | None = None) -> bool:
        return await self.navigator.approach_block(block, options)

    def follow_entity(self, entity: Entity | None, options: ApproachOptions | None = None) -> bool:
        return self.navigator.follow_entity(entity, options)

    def avoid_entity(self, entity: Entity | None, options: ApproachOptions | None = None) -> bool:
        return self.navigator.avoid_entity(entity, options)

    async def wander(self, min_distance: float = 10.0, max_distance: float = 10.0) -> bool:
        return await self.navigator.wander(min_distance, max_distance)

    async def move_away_from(self, position: Vec3, distance: float) -> bool:
        return await self.navigator.move_away_from(position, distance)

    # -- harvesting

    async def dig_block(self, block: Block | None) -> bool:
        return await self.harvesting.dig_block(block)

    async def approach_and_dig_block(self, block: Block | None, options: DigOptions | None = None) -> bool:
        return await self.harvesting.approach_and_dig_block(block, options)

    async def find_and_dig_block(self, block_names: Sequence[str], **kwargs) -> bool:
        return await self.harvesting.find_and_dig_block(block_names, **kwargs)

    async def dig_or_collect(self, target: WorldObject | None, options: DigOptions | None = None) -> bool:
        return await self.harvesting.dig_or_collect(target, options)

    async def collect_item_on_ground(self, item: GroundItem | None) -> bool:
        return await self.harvesting.collect_item_on_ground(item)

    async def find_and_collect_items_on_ground(self, item_names: Sequence[str] = (), **kwargs) -> int:
        return await self.harvesting.find_and_collect_items_on_ground(item_names, **kwargs)

    # -- combat

    async def attack(self, entity: Entity | None, options: AttackOptions | None = None) -> bool:
        return await self.combat.attack_entity(entity, options)

    attack_entity = attack

    async def wait_for_weapon_cooldown(self) -> None:
        await self.combat.wait_for_weapon_cooldown()

    # -- containers

    async def open_container(self, block: Block | None) -> ContainerWindow | None:
        return await self.containers.open_container(block)

    async def close_container(self, window: ContainerWindow | None) -> bool:
        return await self.containers.close_container(window)

    def get_container_contents(self, window: ContainerWindow) -> list[Item]:
        return self.containers.get_container_contents(window)

    async def withdraw(
        self,
        window: ContainerWindow,
        item_names: Sequence[str] = (),
        *,
        partial_match: bool = False,
        quantity: int | None = None,
    ) -> bool:
        return await self.containers.withdraw_items(window, item_names, partial_match=partial_match, quantity=quantity)

    async def deposit(
        self,
        window: ContainerWindow,
        item_names: Sequence[str] = (),
        *,
        partial_match: bool = False,
        quantity: int | None = None,
    ) -> bool:
        return await self.containers.deposit_items(window, item_names, partial_match=partial_match, quantity=quantity)

    async def open_and_use_container(self, block: Block | None, use: ContainerUse) -> bool:
        return await self.containers.open_and_use_container(block, use)

    # -- inventory

    def get_all_inventory_items(self) -> list[Item]:
        return self.inventory.get_all_inventory_items()

    def get_inventory_item_quantity(self, item_name: str, *, partial_match: bool = False) -> int:
        return self.inventory.get_inventory_item_quantity(item_name, partial_match=partial_match)

    def inventory_contains_item(self, item_name: str, *, partial_match: bool = False, quantity: int = 1) -> bool:
        return self.inventory.inventory_contains_item(item_name, partial_match=partial_match, quantity=quantity)

    def is_inventory_slots_full(self) -> bool:
        return self.inventory.is_inventory_slots_full()

    async def hold_item(self, item_name: str, *, partial_match: bool = False) -> Item | None:
        return await self.inventory.hold_item(item_name, partial_match=partial_match)

    async def drop_inventory_item(self, item_name: str, *, partial_match: bool = False, quantity: int = 1) -> bool:
        return await self.inventory.drop_inventory_item(item_name, partial_match=partial_match, quantity=quantity)

    async def drop_all_inventory_item(self, item_name: str, *, partial_match: bool = False) -> bool:
        return await self.inventory.drop_all_inventory_item(item_name, partial_match=partial_match)

    async def drop_all_inventory_items(self, item_names: Sequence[str] = (), *, partial_match: bool = False) -> bool:
        return await self.inventory.drop_all_inventory_items(item_names, partial_match=partial_match)

    # -- crafting and building

    async def craft_item(self, item_name: str, quantity: int = 1, crafting_table: Block | None = None) -> Item | None:
        return await craft_item(self.session, item_name, quantity, crafting_table)

    async def place_block(self, block_name: str, target: Block | None, face: Vec3 = UP, reach: float = 4.0) -> bool:
        return await self.building.place_block(block_name, target, face, reach)

    position_string = staticmethod(position_string)


def _first(results: list[FindResult]) -> WorldObject | None:
    return results[0].result if results else None
