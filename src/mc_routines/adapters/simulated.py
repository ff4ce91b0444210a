"""In-memory game engine.

``SimulatedWorld`` implements the full ``GameEngine`` surface against plain
dictionaries so routines can run in the CLI demo and in CI without a game client.
Movement is a straight-line walk toward the goal's next waypoint; there is no
physics, collision or terrain beyond the blocks that were added explicitly.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import replace
from typing import TYPE_CHECKING, Iterable, Sequence

from mc_routines.adapters.engine import EngineRejectedError, GoalChangedError
from mc_routines.models import (
    Block,
    ContainerWindow,
    Entity,
    GroundItem,
    Item,
    ItemDefinition,
    Recipe,
    Vec3,
    WorldObject,
    WorldObjectKind,
)

if TYPE_CHECKING:
    from mc_routines.navigation.goals import Goal

PICKUP_RADIUS = 1.0
INVENTORY_SLOTS = 36


class SimulatedWorld:
    """Single-agent world with a tick clock scaled by ``time_scale``."""

    def __init__(
        self,
        *,
        position: Vec3 = Vec3(0, 64, 0),
        time_scale: float = 1.0,
        tick_seconds: float = 0.05,
        walk_speed: float = 5.0,
        hand_dig_time_ms: float = 750.0,
        attack_damage: float = 4.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self.position = position
        self.time_scale = time_scale
        self.tick_seconds = tick_seconds
        self.walk_speed = walk_speed
        self.hand_dig_time_ms = hand_dig_time_ms
        self.attack_damage = attack_damage
        # Freezes the agent in place while a goto is running.
        self.blocked = False
        self.cancel_calls = 0
        self.goal: Goal | None = None
        self._logger = logger or logging.getLogger("mc_routines.adapters.simulated")

        self._next_id = 1
        self._generation = 0
        self._digging = False
        self._held: Item | None = None
        self._definitions: dict[int, ItemDefinition] = {}
        self._entities: dict[int, Entity] = {}
        self._ground_items: dict[int, GroundItem] = {}
        self._blocks: dict[Vec3, Block] = {}
        self._inventory: list[Item] = []
        self._containers: dict[Vec3, list[Item]] = {}
        self._open_windows: dict[int, Vec3] = {}
        self._recipes: list[Recipe] = []
        self._dig_times: dict[tuple[str, str | None], float] = {}

    # -- world building

    def define_item(self, item_id: int, name: str, display_name: str | None = None, stack_size: int = 64) -> ItemDefinition:
        definition = ItemDefinition(id=item_id, name=name, display_name=display_name, stack_size=stack_size)
        self._definitions[item_id] = definition
        return definition

    def add_entity(self, name: str | None, position: Vec3, **fields) -> Entity:
        entity = Entity(id=self._allocate_id(), name=name, position=position, **fields)
        self._entities[entity.id] = entity
        return entity

    def add_block(self, name: str, position: Vec3, **fields) -> Block:
        block = Block(name=name, position=position.floored(), **fields)
        self._blocks[block.position] = block
        return block

    def add_ground_item(self, item_name: str, position: Vec3, count: int = 1) -> GroundItem:
        definition = self._require_definition(item_name)
        item = GroundItem(id=self._allocate_id(), item_id=definition.id, position=position, count=count)
        self._ground_items[item.id] = item
        return item

    def remove_block(self, position: Vec3) -> Block | None:
        return self._blocks.pop(position.floored(), None)

    def give(self, item_name: str, count: int = 1) -> Item:
        """Put ``count`` of ``item_name`` in the agent's inventory."""
        return self._add_to_stacks(self._inventory, self._require_definition(item_name), count)

    def fill_container(self, position: Vec3, items: dict[str, int]) -> None:
        stacks = self._containers.setdefault(position.floored(), [])
        for item_name, count in items.items():
            self._add_to_stacks(stacks, self._require_definition(item_name), count)

    def add_recipe(self, recipe: Recipe) -> None:
        self._recipes.append(recipe)

    def set_dig_time(self, block_name: str, tool_name: str | None, dig_time_ms: float) -> None:
        self._dig_times[(block_name, tool_name)] = dig_time_ms

    # -- WorldQuery

    def current_position(self) -> Vec3:
        return self.position

    def objects_within_radius(self, kind: WorldObjectKind, radius: float | None) -> Sequence[WorldObject]:
        if kind == WorldObjectKind.ENTITY:
            pool: Iterable[WorldObject] = self._entities.values()
        elif kind == WorldObjectKind.BLOCK:
            pool = self._blocks.values()
        else:
            pool = self._ground_items.values()
        return [
            replace(obj)
            for obj in pool
            if radius is None or self.position.distance_to(obj.position) <= radius
        ]

    def is_busy(self) -> bool:
        return self._digging

    def cancel_current_goal(self) -> None:
        self.cancel_calls += 1
        self.goal = None
        self._generation += 1
        self._logger.debug("simulated_goal_cancelled", extra={"cancel_calls": self.cancel_calls})

    def inventory_snapshot(self) -> list[Item]:
        return [replace(stack) for stack in self._inventory]

    def item_definition(self, name_or_id: str | int) -> ItemDefinition | None:
        if isinstance(name_or_id, int):
            return self._definitions.get(name_or_id)
        for definition in self._definitions.values():
            if definition.name == name_or_id:
                return definition
        return None

    def block_at(self, position: Vec3) -> Block | None:
        block = self._blocks.get(position.floored())
        if block is None:
            return Block(name="air", position=position.floored(), type_id=0)
        return replace(block)

    def entity_by_id(self, entity_id: int) -> Entity | GroundItem | None:
        found = self._entities.get(entity_id) or self._ground_items.get(entity_id)
        return None if found is None else replace(found)

    def dig_time_ms(self, block: Block, tool: Item | None) -> float:
        if block.is_air:
            return math.inf
        tool_name = tool.name if tool is not None else None
        if (block.name, tool_name) in self._dig_times:
            return self._dig_times[(block.name, tool_name)]
        return self._dig_times.get((block.name, None), self.hand_dig_time_ms)

    def held_item(self) -> Item | None:
        return None if self._held is None else replace(self._held)

    def empty_slot_count(self) -> int:
        return max(0, INVENTORY_SLOTS - len(self._inventory))

    # -- ActionEngine

    async def goto(self, goal: Goal) -> None:
        self._generation += 1
        generation = self._generation
        self.goal = goal
        step = self.walk_speed * self.tick_seconds
        while not goal.is_satisfied(self.position):
            waypoint = goal.next_waypoint(self.position)
            if waypoint is None:
                raise EngineRejectedError(f"No path to goal {goal!r}")
            if not self.blocked:
                self.position = _step_toward(self.position, waypoint, step)
                self._pick_up_nearby()
            await self._tick()
            if generation != self._generation:
                raise GoalChangedError("Goal was cancelled before it was reached")
        self.goal = None

    def set_goal(self, goal: Goal | None, dynamic: bool = False) -> None:
        self.goal = goal
        self._logger.debug("simulated_goal_set", extra={"goal": repr(goal), "dynamic": dynamic})

    async def dig(self, block: Block) -> None:
        current = self._blocks.get(block.position.floored())
        if current is None or current.name != block.name:
            raise EngineRejectedError(f"No {block.name} at {block.position}")
        dig_time = self.dig_time_ms(current, self._held)
        if not math.isfinite(dig_time):
            raise EngineRejectedError(f"{block.name} cannot be dug with the held item")

        self._generation += 1
        generation = self._generation
        self._digging = True
        try:
            remaining = dig_time / 1000.0
            while remaining > 0:
                await self._tick()
                remaining -= self.tick_seconds
                if generation != self._generation:
                    raise GoalChangedError("Digging was interrupted")
        finally:
            self._digging = False

        del self._blocks[current.position]
        for drop in current.drops:
            self.add_ground_item(drop, current.position.offset(0.5, 0, 0.5))

    async def equip(self, item: Item, destination: str = "hand") -> None:
        stack = self._find_stack(self._inventory, item)
        if stack is None:
            raise EngineRejectedError(f"{item.name} is not in the inventory")
        self._held = stack

    async def attack(self, entity: Entity) -> None:
        target = self._entities.get(entity.id)
        if target is None or not target.is_valid:
            raise EngineRejectedError(f"Entity {entity.id} is gone")
        if target.health is not None:
            target.health -= self.attack_damage
            if target.health <= 0:
                target.is_valid = False
                del self._entities[target.id]

    async def place_block(self, target: Block, face: Vec3) -> None:
        destination = (target.position + face).floored()
        if self._held is None or self._held.count < 1:
            raise EngineRejectedError("Nothing to place")
        if destination in self._blocks:
            raise EngineRejectedError(f"{destination} is occupied")
        self.add_block(self._held.name, destination, type_id=self._held.type_id)
        self._take_from(self._inventory, self._held, 1)

    async def toss(self, item: Item, count: int) -> None:
        stack = self._find_stack(self._inventory, item)
        if stack is None or count < 1:
            raise EngineRejectedError(f"Cannot toss {count} {item.name}")
        tossed = min(count, stack.count)
        self._take_from(self._inventory, stack, tossed)
        dropped = GroundItem(
            id=self._allocate_id(),
            item_id=stack.type_id,
            position=self.position.offset(PICKUP_RADIUS + 2, 0, 0),
            count=tossed,
        )
        self._ground_items[dropped.id] = dropped

    def recipes_for(self, item_id: int, crafting_table: Block | None) -> list[Recipe]:
        definition = self._definitions.get(item_id)
        if definition is None:
            return []
        return [
            recipe
            for recipe in self._recipes
            if recipe.result_name == definition.name
            and (crafting_table is not None or not recipe.requires_table)
            and self._has_ingredients(recipe, 1)
        ]

    async def craft(self, recipe: Recipe, count: int, crafting_table: Block | None) -> None:
        if recipe.requires_table and crafting_table is None:
            raise EngineRejectedError(f"{recipe.result_name} needs a crafting table")
        if not self._has_ingredients(recipe, count):
            raise EngineRejectedError(f"Missing ingredients for {recipe.result_name}")
        for name, needed in recipe.ingredients.items():
            self._consume(name, needed * count)
        await self._tick()
        self.give(recipe.result_name, recipe.result_count * count)

    async def open_container(self, block: Block) -> ContainerWindow:
        position = block.position.floored()
        if position not in self._containers:
            raise EngineRejectedError(f"No container at {position}")
        if self.position.distance_to(position) > 6:
            raise EngineRejectedError(f"Container at {position} is out of reach")
        window = ContainerWindow(window_id=self._allocate_id(), position=position, title=block.name)
        self._open_windows[window.window_id] = position
        return window

    async def close_container(self, window: ContainerWindow) -> None:
        if self._open_windows.pop(window.window_id, None) is None:
            raise EngineRejectedError(f"Window {window.window_id} is not open")

    def container_items(self, window: ContainerWindow) -> list[Item]:
        return [replace(stack) for stack in self._window_stacks(window)]

    async def withdraw(self, window: ContainerWindow, item: Item, count: int) -> None:
        await self._move(self._window_stacks(window), self._inventory, item, count)

    async def deposit(self, window: ContainerWindow, item: Item, count: int) -> None:
        await self._move(self._inventory, self._window_stacks(window), item, count)

    async def wait_ticks(self, ticks: int) -> None:
        for _ in range(ticks):
            await self._tick()

    # -- internals

    async def _tick(self) -> None:
        await asyncio.sleep(self.tick_seconds * self.time_scale)

    def _allocate_id(self) -> int:
        allocated = self._next_id
        self._next_id += 1
        return allocated

    def _require_definition(self, item_name: str) -> ItemDefinition:
        definition = self.item_definition(item_name)
        if definition is None:
            raise KeyError(f"Unknown item: {item_name}")
        return definition

    def _pick_up_nearby(self) -> None:
        for item in list(self._ground_items.values()):
            if self.position.distance_to(item.position) <= PICKUP_RADIUS:
                del self._ground_items[item.id]
                self._add_to_stacks(self._inventory, self._definitions[item.item_id], item.count)

    def _window_stacks(self, window: ContainerWindow) -> list[Item]:
        position = self._open_windows.get(window.window_id)
        if position is None:
            raise EngineRejectedError(f"Window {window.window_id} is not open")
        return self._containers[position]

    async def _move(self, source: list[Item], target: list[Item], item: Item, count: int) -> None:
        stack = self._find_stack(source, item)
        if stack is None or count < 1:
            raise EngineRejectedError(f"Cannot move {count} {item.name}")
        moved = min(count, stack.count)
        self._take_from(source, stack, moved)
        self._add_to_stacks(target, self._definitions[stack.type_id], moved)
        await self._tick()

    def _has_ingredients(self, recipe: Recipe, count: int) -> bool:
        totals: dict[str, int] = {}
        for stack in self._inventory:
            totals[stack.name] = totals.get(stack.name, 0) + stack.count
        return all(totals.get(name, 0) >= needed * count for name, needed in recipe.ingredients.items())

    def _consume(self, item_name: str, count: int) -> None:
        for stack in [stack for stack in self._inventory if stack.name == item_name]:
            taken = min(count, stack.count)
            self._take_from(self._inventory, stack, taken)
            count -= taken
            if count == 0:
                return

    def _add_to_stacks(self, stacks: list[Item], definition: ItemDefinition, count: int) -> Item:
        last: Item | None = None
        while count > 0:
            stack = next(
                (s for s in stacks if s.type_id == definition.id and s.count < definition.stack_size),
                None,
            )
            if stack is None:
                used = {s.slot for s in stacks}
                slot = next(index for index in range(len(stacks) + 1) if index not in used)
                stack = Item(
                    type_id=definition.id,
                    name=definition.name,
                    count=0,
                    display_name=definition.display_name,
                    slot=slot,
                )
                stacks.append(stack)
            added = min(count, definition.stack_size - stack.count)
            stack.count += added
            count -= added
            last = stack
        return last

    def _take_from(self, stacks: list[Item], stack: Item, count: int) -> None:
        stack.count -= count
        if stack.count <= 0:
            stacks.remove(stack)
            if stack is self._held:
                self._held = None

    @staticmethod
    def _find_stack(stacks: list[Item], item: Item) -> Item | None:
        for stack in stacks:
            if stack.type_id == item.type_id and (item.slot is None or stack.slot == item.slot):
                return stack
        return None


def _step_toward(position: Vec3, waypoint: Vec3, step: float) -> Vec3:
    delta = waypoint - position
    length = math.sqrt(delta.x**2 + delta.y**2 + delta.z**2)
    if length <= step:
        return waypoint
    scale = step / length
    return position.offset(delta.x * scale, delta.y * scale, delta.z * scale)


def demo_world(time_scale: float = 0.01) -> SimulatedWorld:
    """A small clearing with trees, flowers, animals and a stocked chest."""
    world = SimulatedWorld(position=Vec3(0, 64, 0), time_scale=time_scale)

    for item_id, name, display_name in (
        (1, "spruce_log", "Spruce Log"),
        (2, "oak_log", "Oak Log"),
        (3, "oak_planks", "Oak Planks"),
        (4, "stick", "Stick"),
        (5, "crafting_table", "Crafting Table"),
        (6, "poppy", "Poppy"),
        (7, "dandelion", "Dandelion"),
        (8, "wooden_pickaxe", "Wooden Pickaxe"),
        (9, "stone_sword", "Stone Sword"),
        (10, "bread", "Bread"),
        (11, "iron_ingot", "Iron Ingot"),
        (12, "cobblestone", "Cobblestone"),
        (13, "chest", "Chest"),
        (14, "porkchop", "Raw Porkchop"),
    ):
        world.define_item(item_id, name, display_name)

    for x, z in ((3, 4), (-6, 2), (10, -1), (-2, -12), (15, 9)):
        world.add_block("spruce_log", Vec3(x, 64, z), type_id=1, display_name="Spruce Log", drops=["spruce_log"])
    world.add_block("spruce_log", Vec3(3, 65, 4), type_id=1, display_name="Spruce Log", drops=["spruce_log"])
    for x, z in ((-8, -7), (12, 12)):
        world.add_block("oak_log", Vec3(x, 64, z), type_id=2, display_name="Oak Log", drops=["oak_log"])
    for x, z in ((5, -3), (-4, 6), (8, 8)):
        world.add_block("poppy", Vec3(x, 64, z), type_id=6, display_name="Poppy", drops=["poppy"])
    world.add_block("dandelion", Vec3(-3, 64, -4), type_id=7, display_name="Dandelion", drops=["dandelion"])
    world.add_block("stone", Vec3(2, 63, 2), type_id=12, display_name="Stone", drops=["cobblestone"])
    world.add_block("bedrock", Vec3(0, 60, 0), type_id=99, display_name="Bedrock")
    world.set_dig_time("bedrock", None, math.inf)
    world.set_dig_time("stone", None, math.inf)
    world.set_dig_time("stone", "wooden_pickaxe", 1150.0)
    world.set_dig_time("spruce_log", None, 3000.0)
    world.set_dig_time("oak_log", None, 3000.0)
    world.set_dig_time("poppy", None, 50.0)
    world.set_dig_time("dandelion", None, 50.0)

    chest = world.add_block("chest", Vec3(6, 64, -6), type_id=13, display_name="Chest")
    world.fill_container(chest.position, {"bread": 5, "iron_ingot": 3})
    world.add_block("crafting_table", Vec3(-5, 64, -2), type_id=5, display_name="Crafting Table")

    world.add_entity("pig", Vec3(7, 64, 3), health=10.0)
    world.add_entity("cow", Vec3(-9, 64, 5), health=10.0)
    world.add_entity("zombie", Vec3(14, 64, -8), health=20.0, defense=2.0)
    world.add_entity("player", Vec3(-1, 64, 9), kind="player", username="Steve", health=20.0)
    world.add_ground_item("stick", Vec3(4, 64, -1), count=2)

    world.give("wooden_pickaxe")
    world.give("stone_sword")

    world.add_recipe(Recipe(result_name="oak_planks", result_count=4, ingredients={"oak_log": 1}))
    world.add_recipe(Recipe(result_name="oak_planks", result_count=4, ingredients={"spruce_log": 1}))
    world.add_recipe(Recipe(result_name="stick", result_count=4, ingredients={"oak_planks": 2}))
    world.add_recipe(Recipe(result_name="crafting_table", ingredients={"oak_planks": 4}))
    world.add_recipe(
        Recipe(
            result_name="wooden_pickaxe",
            ingredients={"oak_planks": 3, "stick": 2},
            requires_table=True,
        )
    )
    return world
