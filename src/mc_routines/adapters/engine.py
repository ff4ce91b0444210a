"""Boundary for the external world, physics and pathfinding engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

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


class EngineRejectedError(RuntimeError):
    """Raised when the engine refuses an operation (stale target, failed equip, closed window)."""


class GoalChangedError(EngineRejectedError):
    """Raised by ``goto`` when the current goal was cancelled or replaced mid-route."""


class WorldQuery(Protocol):
    """Read-only view of the running world, plus the single cancellation signal."""

    def current_position(self) -> Vec3:
        """Agent position right now."""

    def objects_within_radius(self, kind: WorldObjectKind, radius: float | None) -> Sequence[WorldObject]:
        """Fresh snapshots of live objects of ``kind`` within ``radius`` (None: everything loaded)."""

    def is_busy(self) -> bool:
        """True while the engine is mining or building on the agent's behalf."""

    def cancel_current_goal(self) -> None:
        """Abandon the active path and clear the goal. Safe to call when idle."""

    def inventory_snapshot(self) -> list[Item]:
        """Stacks currently held by the agent."""

    def item_definition(self, name_or_id: str | int) -> ItemDefinition | None:
        """Static item data by name or numeric id."""

    def block_at(self, position: Vec3) -> Block | None:
        """Block currently at ``position``; None for unloaded space."""

    def entity_by_id(self, entity_id: int) -> Entity | GroundItem | None:
        """Live entity with ``entity_id`` or None once it despawned."""

    def dig_time_ms(self, block: Block, tool: Item | None) -> float:
        """Predicted dig time with ``tool`` (None: bare hands); ``math.inf`` if impossible."""

    def held_item(self) -> Item | None:
        """Item in the agent's main hand."""

    def empty_slot_count(self) -> int:
        """Free inventory slots."""


class ActionEngine(Protocol):
    """State-changing engine primitives. Failures raise ``EngineRejectedError``."""

    async def goto(self, goal: Goal) -> None:
        """Walk until ``goal`` is satisfied; raises ``GoalChangedError`` if cancelled."""

    def set_goal(self, goal: Goal | None, dynamic: bool = False) -> None:
        """Install a goal without waiting for it."""

    async def dig(self, block: Block) -> None:
        """Break ``block`` with the held item."""

    async def equip(self, item: Item, destination: str = "hand") -> None:
        """Move ``item`` into ``destination``."""

    async def attack(self, entity: Entity) -> None:
        """Swing once at ``entity``."""

    async def place_block(self, target: Block, face: Vec3) -> None:
        """Place the held block against ``face`` of ``target``."""

    async def toss(self, item: Item, count: int) -> None:
        """Drop ``count`` items from the stack ``item``."""

    def recipes_for(self, item_id: int, crafting_table: Block | None) -> list[Recipe]:
        """Recipes craftable right now with the held materials."""

    async def craft(self, recipe: Recipe, count: int, crafting_table: Block | None) -> None:
        """Run ``recipe`` ``count`` times."""

    async def open_container(self, block: Block) -> ContainerWindow:
        """Open a chest/dispenser in reach."""

    async def close_container(self, window: ContainerWindow) -> None:
        """Close an open window."""

    def container_items(self, window: ContainerWindow) -> list[Item]:
        """Stacks inside an open window."""

    async def withdraw(self, window: ContainerWindow, item: Item, count: int) -> None:
        """Move items from the window into the inventory."""

    async def deposit(self, window: ContainerWindow, item: Item, count: int) -> None:
        """Move items from the inventory into the window."""

    async def wait_ticks(self, ticks: int) -> None:
        """Suspend for ``ticks`` simulation ticks."""


class GameEngine(WorldQuery, ActionEngine, Protocol):
    """Full engine surface consumed by the agent."""
