import asyncio
import random

from mc_routines.adapters import demo_world
from mc_routines.agent import RoutineAgent
from mc_routines.combat import AttackCooldownGate
from mc_routines.config import Settings
from mc_routines.routines import ROUTINES, gather_blocks, gather_flowers, gather_logs, hunt, loot_chest
from mc_routines.session import AgentSession


async def _no_sleep(seconds: float) -> None:
    await asyncio.sleep(0)


def _demo_agent(**settings_overrides):
    world = demo_world(time_scale=0.001)
    settings = Settings(stuck_check_interval_seconds=0.5, drop_collection_wait_ticks=2, **settings_overrides)
    agent = RoutineAgent(
        AgentSession(world, settings=settings),
        cooldown_gate=AttackCooldownGate(sleep=_no_sleep),
        rng=random.Random(3),
    )
    return world, agent


def test_registry_lists_example_routines() -> None:
    assert sorted(ROUTINES) == ["gather_flowers", "gather_logs", "hunt", "loot_chest"]


def test_gather_logs_in_demo_world() -> None:
    world, agent = _demo_agent()

    assert asyncio.run(asyncio.wait_for(gather_logs(agent, target=3), timeout=10)) is True
    assert agent.get_inventory_item_quantity("spruce_log") >= 3


def test_gather_flowers_in_demo_world() -> None:
    world, agent = _demo_agent()

    assert asyncio.run(asyncio.wait_for(gather_flowers(agent, target=2), timeout=10)) is True
    assert agent.get_inventory_item_quantity("poppy") >= 2


def test_gather_gives_up_when_nothing_can_be_found() -> None:
    world, agent = _demo_agent()

    result = asyncio.run(asyncio.wait_for(gather_blocks(agent, "diamond_ore", target=1, max_stuck=1), timeout=10))

    assert result is False


def test_hunt_defeats_closest_pig() -> None:
    world, agent = _demo_agent()

    assert asyncio.run(asyncio.wait_for(hunt(agent, target="pig"), timeout=10)) is True
    assert agent.find_entity(["pig"]) is None
    assert agent.find_entity(["cow"]) is not None


def test_hunt_without_target_fails() -> None:
    world, agent = _demo_agent()

    assert asyncio.run(hunt(agent, target="ender_dragon")) is False


def test_loot_chest_takes_bread() -> None:
    world, agent = _demo_agent()

    assert asyncio.run(asyncio.wait_for(loot_chest(agent, items="bread"), timeout=10)) is True
    assert agent.get_inventory_item_quantity("bread") == 5
    assert agent.get_inventory_item_quantity("iron_ingot") == 0
