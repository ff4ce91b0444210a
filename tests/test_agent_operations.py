import asyncio
import math
import random

from mc_routines.adapters import SimulatedWorld
from mc_routines.agent import RoutineAgent, position_string
from mc_routines.config import Settings
from mc_routines.harvesting import DigOptions
from mc_routines.models import Block, Vec3, WorldObjectKind
from mc_routines.navigation import GoalFollow, GoalInvert
from mc_routines.ranking import FindFilter
from mc_routines.session import AgentSession


class RecordingWorld(SimulatedWorld):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.dug: list[Block] = []

    async def dig(self, block: Block) -> None:
        self.dug.append(block)
        await super().dig(block)


def _world() -> RecordingWorld:
    world = RecordingWorld(position=Vec3(0, 64, 0), time_scale=0.01)
    for item_id, name in ((1, "spruce_log"), (4, "stick"), (8, "wooden_pickaxe"), (12, "cobblestone")):
        world.define_item(item_id, name)
    return world


def _agent(world: SimulatedWorld, interval: float = 0.1) -> RoutineAgent:
    settings = Settings(stuck_check_interval_seconds=interval, drop_collection_wait_ticks=5)
    return RoutineAgent(AgentSession(world, settings=settings), rng=random.Random(7))


def test_unharvestable_block_is_not_dug() -> None:
    world = _world()
    bedrock = world.add_block("bedrock", Vec3(6, 64, 0))
    world.set_dig_time("bedrock", None, math.inf)
    agent = _agent(world)

    assert asyncio.run(agent.dig_or_collect(bedrock)) is False
    assert world.dug == []
    assert world.position == Vec3(0, 64, 0)


def test_find_and_dig_block_collects_the_drop() -> None:
    world = _world()
    world.add_block("spruce_log", Vec3(8, 64, 0), drops=["spruce_log"])
    agent = _agent(world)

    assert asyncio.run(agent.find_and_dig_block(["spruce_log"])) is True
    assert world.block_at(Vec3(8, 64, 0)).is_air
    assert agent.get_inventory_item_quantity("spruce_log") == 1
    assert world.objects_within_radius(WorldObjectKind.GROUND_ITEM, None) == []


def test_skip_collection_leaves_drop_on_ground() -> None:
    world = _world()
    log = world.add_block("spruce_log", Vec3(3, 64, 0), drops=["spruce_log"])
    agent = _agent(world)

    assert asyncio.run(agent.approach_and_dig_block(log, DigOptions(skip_collection=True))) is True
    assert agent.get_inventory_item_quantity("spruce_log") == 0
    assert agent.find_item_on_ground(["spruce_log"]) is not None


def test_find_and_dig_without_candidates_fails() -> None:
    agent = _agent(_world())

    assert asyncio.run(agent.find_and_dig_block(["diamond_ore"])) is False


def test_dig_uses_best_tool() -> None:
    world = _world()
    world.give("wooden_pickaxe")
    stone = world.add_block("stone", Vec3(2, 64, 0), drops=["cobblestone"])
    world.set_dig_time("stone", None, math.inf)
    world.set_dig_time("stone", "wooden_pickaxe", 1150.0)
    agent = _agent(world)

    assert asyncio.run(agent.dig_or_collect(stone)) is True
    assert world.held_item().name == "wooden_pickaxe"
    assert agent.inventory_contains_item("cobblestone")


def test_dig_stops_when_block_disappears() -> None:
    world = _world()
    log = world.add_block("spruce_log", Vec3(1, 64, 0))
    world.set_dig_time("spruce_log", None, 1_000_000.0)
    agent = _agent(world, interval=0.05)

    async def _run() -> bool:
        async def someone_else_breaks_it() -> None:
            await asyncio.sleep(0.1)
            world.remove_block(log.position)

        breaker = asyncio.create_task(someone_else_breaks_it())
        result = await agent.dig_block(log)
        await breaker
        return result

    assert asyncio.run(asyncio.wait_for(_run(), timeout=3)) is False
    assert world.cancel_calls == 1
    assert not world.is_busy()


def test_blocked_approach_is_reported_stuck() -> None:
    world = _world()
    world.blocked = True
    far_log = world.add_block("spruce_log", Vec3(20, 64, 0))
    agent = _agent(world, interval=0.05)

    assert asyncio.run(asyncio.wait_for(agent.approach_block(far_log), timeout=3)) is False
    assert world.cancel_calls == 1
    assert world.position == Vec3(0, 64, 0)


def test_approach_dispatches_on_target_kind() -> None:
    world = _world()
    pig = world.add_entity("pig", Vec3(6, 64, 0), health=10.0)
    log = world.add_block("spruce_log", Vec3(0, 64, 12))
    agent = _agent(world)

    assert asyncio.run(agent.approach(pig)) is True
    assert world.position.distance_to(pig.position) <= 1.0
    assert asyncio.run(agent.approach(log, reach=3)) is True
    assert world.position.distance_to(log.position) <= 3.0
    assert asyncio.run(agent.approach(None)) is False


def test_collect_items_on_ground() -> None:
    world = _world()
    world.add_ground_item("stick", Vec3(3, 64, 0), count=2)
    world.add_ground_item("stick", Vec3(-4, 64, 0), count=1)
    world.add_ground_item("spruce_log", Vec3(0, 64, 5))
    agent = _agent(world)

    collected = asyncio.run(agent.find_and_collect_items_on_ground(["stick"]))

    assert collected == 2
    assert agent.get_inventory_item_quantity("stick") == 3
    assert agent.find_item_on_ground(["spruce_log"]) is not None


def test_find_helpers_apply_configured_distances() -> None:
    world = _world()
    world.add_block("spruce_log", Vec3(10, 64, 0))
    world.add_block("spruce_log", Vec3(60, 64, 0))
    world.add_entity("pig", Vec3(80, 64, 0), health=10.0)
    agent = _agent(world)

    assert len(agent.find_blocks(["spruce_log"], max_count=5)) == 1
    assert len(agent.find_blocks(["spruce_log"], max_distance=70, max_count=5)) == 2
    assert agent.find_entity(["pig"]).name == "pig"
    assert agent.find_best(WorldObjectKind.BLOCK, FindFilter(names=["log"], partial_match=True), max_count=0) == []


def test_wander_moves_requested_distance() -> None:
    world = _world()
    agent = _agent(world)

    assert asyncio.run(agent.wander(3, 3)) is True
    assert math.dist((world.position.x, world.position.z), (0, 0)) >= 3.5


def test_move_away_from_point() -> None:
    world = _world()
    agent = _agent(world)
    danger = Vec3(1, 64, 0)

    assert asyncio.run(agent.move_away_from(danger, 5)) is True
    assert math.dist((world.position.x, world.position.z), (danger.x, danger.z)) >= 4.5
    assert world.position.x < 0


def test_follow_and_avoid_install_dynamic_goals() -> None:
    world = _world()
    player = world.add_entity("player", Vec3(5, 64, 5), kind="player", username="Steve")
    agent = _agent(world)

    assert agent.follow_entity(player) is True
    assert isinstance(world.goal, GoalFollow)
    assert agent.avoid_entity(player) is True
    assert isinstance(world.goal, GoalInvert)
    assert agent.follow_entity(None) is False


def test_place_block_on_target() -> None:
    world = _world()
    world.give("cobblestone", 2)
    floor = world.add_block("stone", Vec3(3, 63, 0))
    agent = _agent(world)

    assert asyncio.run(agent.place_block("cobblestone", floor)) is True
    assert world.block_at(Vec3(3, 64, 0)).name == "cobblestone"
    assert agent.get_inventory_item_quantity("cobblestone") == 1
    assert asyncio.run(agent.place_block("cobblestone", floor)) is False


def test_position_string_round_trips() -> None:
    position = Vec3(1.5, 64.0, -3.0)

    assert position_string(position) == "1.5, 64.0, -3.0"
    assert Vec3.from_string(position_string(position)) == position


def test_stacked_ground_items_are_all_counted() -> None:
    world = _world()
    world.add_ground_item("stick", Vec3(5, 64, 0))
    world.add_ground_item("stick", Vec3(5, 64, 0))
    agent = _agent(world)

    collected = asyncio.run(agent.find_and_collect_items_on_ground(["stick"]))

    assert collected == 2
    assert agent.get_inventory_item_quantity("stick") == 2


def test_collection_is_not_capped_by_default() -> None:
    world = _world()
    for offset in range(12):
        world.add_ground_item("stick", Vec3(2 + 2 * offset, 64, 0))
    agent = _agent(world)

    assert asyncio.run(agent.find_and_collect_items_on_ground(["stick"])) == 12
    assert agent.get_inventory_item_quantity("stick") == 12


def test_dig_block_swaps_held_item_for_best_tool() -> None:
    world = _world()
    world.give("stick")
    world.give("wooden_pickaxe")
    stone = world.add_block("stone", Vec3(1, 64, 0), drops=["cobblestone"])
    world.set_dig_time("stone", None, math.inf)
    world.set_dig_time("stone", "wooden_pickaxe", 1150.0)
    agent = _agent(world)
    asyncio.run(agent.hold_item("stick"))

    assert asyncio.run(agent.dig_block(stone)) is True
    assert world.held_item().name == "wooden_pickaxe"
    assert world.dug == [stone]
    assert world.block_at(Vec3(1, 64, 0)).is_air


def test_dig_block_refuses_unharvestable_block() -> None:
    world = _world()
    bedrock = world.add_block("bedrock", Vec3(1, 64, 0))
    world.set_dig_time("bedrock", None, math.inf)
    agent = _agent(world)

    assert asyncio.run(agent.dig_block(bedrock)) is False
    assert world.dug == []
