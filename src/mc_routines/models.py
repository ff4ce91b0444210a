from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar, Union

_VEC_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


@dataclass(frozen=True, slots=True)
class Vec3:
    """World coordinate: x and z are horizontal, y is up."""

    x: float
    y: float
    z: float

    def distance_to(self, other: Vec3) -> float:
        return math.dist((self.x, self.y, self.z), (other.x, other.y, other.z))

    def equals(self, other: Vec3, tolerance: float = 0.0) -> bool:
        return (
            abs(self.x - other.x) <= tolerance
            and abs(self.y - other.y) <= tolerance
            and abs(self.z - other.z) <= tolerance
        )

    def offset(self, dx: float, dy: float, dz: float) -> Vec3:
        return Vec3(self.x + dx, self.y + dy, self.z + dz)

    def floored(self) -> Vec3:
        return Vec3(math.floor(self.x), math.floor(self.y), math.floor(self.z))

    def __add__(self, other: Vec3) -> Vec3:
        return self.offset(other.x, other.y, other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __str__(self) -> str:
        return f"{self.x}, {self.y}, {self.z}"

    @classmethod
    def from_string(cls, text: str) -> Vec3 | None:
        """Parse the ``'x, y, z'`` form produced by ``str(vec)``."""
        match = _VEC_RE.match(text or "")
        if not match:
            return None
        return cls(*(float(part) for part in match.groups()))


class WorldObjectKind(str, Enum):
    """The three kinds of discoverable world objects."""

    ENTITY = "entity"
    BLOCK = "block"
    GROUND_ITEM = "ground_item"


@dataclass(slots=True)
class ItemDefinition:
    """Static game data for an item type (not an item instance)."""

    id: int
    name: str
    display_name: str | None = None
    stack_size: int = 64


@dataclass(slots=True)
class Item:
    """A stack of items held in an inventory or container."""

    type_id: int
    name: str
    count: int = 1
    display_name: str | None = None
    slot: int | None = None


@dataclass(slots=True)
class Entity:
    id: int
    name: str | None
    position: Vec3
    kind: str = "mob"
    display_name: str | None = None
    username: str | None = None
    health: float | None = None
    defense: float = 0.0
    toughness: float = 0.0
    is_valid: bool = True

    @property
    def is_attackable(self) -> bool:
        return self.is_valid and self.kind in ("mob", "player")


@dataclass(slots=True)
class Block:
    name: str
    position: Vec3
    type_id: int = 1
    display_name: str | None = None
    drops: list[str] = field(default_factory=list)

    @property
    def is_air(self) -> bool:
        return self.type_id == 0


@dataclass(slots=True)
class GroundItem:
    """A dropped item entity lying on the ground; names come from its definition."""

    id: int
    item_id: int
    position: Vec3
    count: int = 1


WorldObject = Union[Entity, Block, GroundItem]

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class FindResult(Generic[T]):
    """One ranked candidate; result lists are ordered by ascending ``sort_value``."""

    result: T
    value: float
    sort_value: float
    distance: float


@dataclass(slots=True)
class BestHarvestTool:
    """Best tool for a block; ``dig_time_ms`` is infinite when nothing can dig it."""

    tool: Item | None = None
    dig_time_ms: float = math.inf

    @property
    def can_harvest(self) -> bool:
        return math.isfinite(self.dig_time_ms)


@dataclass(slots=True)
class AttackCooldownState:
    last_attack_timestamp: float | None = None
    last_attack_weapon: Item | None = None


@dataclass(slots=True)
class SupervisionState:
    previous_position: Vec3
    was_busy: bool
    stuck: bool = False
    reason: str | None = None


@dataclass(slots=True)
class ContainerWindow:
    """Handle for an open chest or dispenser window."""

    window_id: int
    position: Vec3
    title: str = "container"


@dataclass(slots=True)
class Recipe:
    result_name: str
    result_count: int = 1
    ingredients: dict[str, int] = field(default_factory=dict)
    requires_table: bool = False
