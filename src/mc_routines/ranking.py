"""Generic ranking of entities, blocks and ground items around the agent.

The same routine ranks all three kinds of world object. Each kind contributes a
``RankingPolicy`` describing how its names are read, which objects it accepts, and
what extra inputs its sort function receives. Callers customise the ranking with
two plain callables:

* a value function ``value(name) -> float``; a negative or non-finite value drops the candidate,
* a sort function ``sort(distance, value, *extra) -> float``; lower sorts first.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from mc_routines.adapters.engine import WorldQuery
from mc_routines.harvest import best_harvest_tool
from mc_routines.matching import matches_any
from mc_routines.models import (
    Block,
    Entity,
    FindResult,
    GroundItem,
    ItemDefinition,
    Vec3,
    WorldObject,
    WorldObjectKind,
)

logger = logging.getLogger("mc_routines.ranking")

ValueFunction = Callable[[str], float]
SortFunction = Callable[..., float]

RUN_SPEED_BLOCKS_PER_SECOND = 5.0
REFERENCE_DAMAGE = 6.0
REFERENCE_SWING_SECONDS = 0.625


def default_block_sort_value(distance: float, point_value: float = 0.0, dig_time_ms: float = 0.0) -> float:
    """Seconds to walk over and break the block, minus its value."""
    return distance / RUN_SPEED_BLOCKS_PER_SECOND + dig_time_ms / 1000.0 - point_value


def default_entity_sort_value(
    distance: float,
    point_value: float = 0.0,
    health: float | None = 10.0,
    defense: float = 0.0,
    toughness: float = 0.0,
) -> float:
    """Seconds to reach and kill the target, minus its value.

    Armour uses the game's reduction formula against a reference sword hit:
    ``min(20, max(defense / 5, defense - damage / (toughness / 4 + 2))) / 25``.
    """
    health = 10.0 if health is None else health
    reduction = min(20.0, max(defense / 5.0, defense - REFERENCE_DAMAGE / (toughness / 4.0 + 2.0))) / 25.0
    damage_per_hit = REFERENCE_DAMAGE * (1.0 - reduction)
    time_to_kill = math.ceil(max(health, 0.0) / damage_per_hit) * REFERENCE_SWING_SECONDS
    return distance / RUN_SPEED_BLOCKS_PER_SECOND + time_to_kill - point_value


def default_item_sort_value(distance: float, point_value: float = 0.0) -> float:
    """Seconds to walk to the item, minus its value."""
    return distance / RUN_SPEED_BLOCKS_PER_SECOND - point_value


def constant_value(_name: str) -> float:
    return 0.0


@dataclass(slots=True)
class FindFilter:
    """Which candidates a search accepts."""

    names: Sequence[str] = ()
    partial_match: bool = False
    max_distance: float | None = None
    attackable: bool = False
    only_find_top_blocks: bool = False
    predicate: Callable[[Any], bool] | None = None


@dataclass(slots=True)
class NameFields:
    name: str | None = None
    display_name: str | None = None
    username: str | None = None


@dataclass(slots=True)
class RankingPolicy:
    """Per-kind hooks plugged into ``rank_candidates``."""

    kind: WorldObjectKind
    names_of: Callable[[Any], NameFields]
    accepts: Callable[[Any, FindFilter], bool]
    sort_inputs: Callable[[Any], tuple] = field(default=lambda _obj: ())
    default_sort: SortFunction = default_item_sort_value

    def value_key(self, obj: Any) -> str:
        fields = self.names_of(obj)
        return fields.username or fields.name or fields.display_name or ""


def rank_candidates(
    objects: Iterable[Any],
    *,
    origin: Vec3,
    policy: RankingPolicy,
    find_filter: FindFilter,
    value_function: ValueFunction | None = None,
    sort_function: SortFunction | None = None,
    max_count: int = 1,
) -> list[FindResult]:
    """Filter, score and order candidates; the best candidate comes first."""
    if max_count < 1:
        logger.warning("rank_invalid_max_count", extra={"kind": policy.kind.value, "max_count": max_count})
        return []

    value_of = value_function or constant_value
    sort_of = sort_function or policy.default_sort

    scored: list[FindResult] = []
    for obj in objects:
        distance = origin.distance_to(obj.position)
        if find_filter.max_distance is not None and distance > find_filter.max_distance:
            continue
        if not matches_any(find_filter.names, policy.names_of(obj), partial_match=find_filter.partial_match):
            continue
        if not policy.accepts(obj, find_filter):
            continue
        if find_filter.predicate is not None and not find_filter.predicate(obj):
            continue

        value = value_of(policy.value_key(obj))
        if not math.isfinite(value) or value < 0:
            continue
        sort_value = sort_of(distance, value, *policy.sort_inputs(obj))
        scored.append(FindResult(result=obj, value=value, sort_value=sort_value, distance=distance))

    scored.sort(key=lambda found: found.sort_value)
    return scored[:max_count]


def has_block_above(world: WorldQuery, block: Block) -> bool:
    """True when a non-air block currently sits on top of ``block``."""
    above = world.block_at(block.position.offset(0, 1, 0))
    return above is not None and not above.is_air


def build_policy(kind: WorldObjectKind, world: WorldQuery) -> RankingPolicy:
    """Ranking hooks for ``kind``, reading live state from ``world``."""
    if kind == WorldObjectKind.ENTITY:
        return RankingPolicy(
            kind=kind,
            names_of=_entity_names,
            accepts=_accepts_entity,
            sort_inputs=lambda entity: (entity.health, entity.defense, entity.toughness),
            default_sort=default_entity_sort_value,
        )

    if kind == WorldObjectKind.BLOCK:
        inventory = world.inventory_snapshot()

        def accepts_block(block: Block, find_filter: FindFilter) -> bool:
            if block.is_air:
                return False
            return not (find_filter.only_find_top_blocks and has_block_above(world, block))

        return RankingPolicy(
            kind=kind,
            names_of=lambda block: NameFields(name=block.name, display_name=block.display_name),
            accepts=accepts_block,
            sort_inputs=lambda block: (best_harvest_tool(world, block, inventory).dig_time_ms,),
            default_sort=default_block_sort_value,
        )

    def ground_item_names(item: GroundItem) -> NameFields:
        definition: ItemDefinition | None = world.item_definition(item.item_id)
        if definition is None:
            return NameFields()
        return NameFields(name=definition.name, display_name=definition.display_name)

    return RankingPolicy(
        kind=kind,
        names_of=ground_item_names,
        accepts=lambda _item, _filter: True,
        default_sort=default_item_sort_value,
    )


def _entity_names(entity: Entity) -> NameFields:
    return NameFields(name=entity.name, display_name=entity.display_name, username=entity.username)


def _accepts_entity(entity: Entity, find_filter: FindFilter) -> bool:
    if not entity.is_valid:
        return False
    return not find_filter.attackable or entity.is_attackable


def find_best(
    world: WorldQuery,
    kind: WorldObjectKind,
    find_filter: FindFilter | None = None,
    value_function: ValueFunction | None = None,
    sort_function: SortFunction | None = None,
    max_count: int = 1,
) -> list[FindResult[WorldObject]]:
    """Rank live objects of ``kind`` around the agent's current position."""
    find_filter = find_filter or FindFilter()
    objects = world.objects_within_radius(kind, find_filter.max_distance)
    results = rank_candidates(
        objects,
        origin=world.current_position(),
        policy=build_policy(kind, world),
        find_filter=find_filter,
        value_function=value_function,
        sort_function=sort_function,
        max_count=max_count,
    )
    logger.debug(
        "find_best",
        extra={"kind": kind.value, "names": list(find_filter.names), "found": len(results)},
    )
    return results
