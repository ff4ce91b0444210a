import asyncio

from mc_routines.adapters import SimulatedWorld
from mc_routines.inventory import InventoryOperations
from mc_routines.models import Vec3, WorldObjectKind
from mc_routines.session import AgentSession


def _inventory() -> tuple[SimulatedWorld, InventoryOperations]:
    world = SimulatedWorld(position=Vec3(0, 64, 0), time_scale=0.01)
    world.define_item(1, "spruce_log", "Spruce Log")
    world.define_item(2, "oak_log", "Oak Log")
    world.define_item(6, "poppy", "Poppy")
    world.give("spruce_log", 70)
    world.give("oak_log", 3)
    return world, InventoryOperations(AgentSession(world))


def test_quantity_spans_stacks() -> None:
    _, inventory = _inventory()

    assert len(inventory.find_inventory_items("spruce_log")) == 2
    assert inventory.get_inventory_item_quantity("spruce_log") == 70
    assert inventory.get_inventory_item_quantity("Spruce Log") == 70
    assert inventory.get_inventory_item_quantity("log", partial_match=True) == 73
    assert inventory.get_inventory_item_quantity("poppy") == 0


def test_contains_item_checks_quantity() -> None:
    _, inventory = _inventory()

    assert inventory.inventory_contains_item("oak_log", quantity=3)
    assert not inventory.inventory_contains_item("oak_log", quantity=4)
    assert not inventory.inventory_contains_item("oak_log", quantity=0)
    assert not inventory.inventory_contains_item("poppy")


def test_slots_full() -> None:
    world, inventory = _inventory()

    assert not inventory.is_inventory_slots_full()
    for _ in range(33):
        world.give("poppy", 64)
    assert inventory.is_inventory_slots_full()


def test_hold_item() -> None:
    world, inventory = _inventory()

    held = asyncio.run(inventory.hold_item("oak", partial_match=True))

    assert held.name == "oak_log"
    assert world.held_item().name == "oak_log"
    assert asyncio.run(inventory.hold_item("poppy")) is None


def test_drop_quantity_across_stacks() -> None:
    world, inventory = _inventory()

    assert asyncio.run(inventory.drop_inventory_item("spruce_log", quantity=66)) is True
    assert inventory.get_inventory_item_quantity("spruce_log") == 4
    dropped = world.objects_within_radius(WorldObjectKind.GROUND_ITEM, None)
    assert sum(item.count for item in dropped) == 66


def test_drop_negative_quantity_drops_everything() -> None:
    _, inventory = _inventory()

    assert asyncio.run(inventory.drop_inventory_item("spruce_log", quantity=-1)) is True
    assert inventory.get_inventory_item_quantity("spruce_log") == 0
    assert inventory.get_inventory_item_quantity("oak_log") == 3


def test_drop_rejects_zero_and_missing_items() -> None:
    _, inventory = _inventory()

    assert asyncio.run(inventory.drop_inventory_item("oak_log", quantity=0)) is False
    assert asyncio.run(inventory.drop_inventory_item("poppy")) is False
    assert inventory.get_inventory_item_quantity("oak_log") == 3


def test_drop_more_than_available_reports_shortfall() -> None:
    _, inventory = _inventory()

    assert asyncio.run(inventory.drop_inventory_item("oak_log", quantity=5)) is False
    assert inventory.get_inventory_item_quantity("oak_log") == 0


def test_drop_all_matching_items() -> None:
    _, inventory = _inventory()

    assert asyncio.run(inventory.drop_all_inventory_item("oak_log")) is True
    assert inventory.get_inventory_item_quantity("oak_log") == 0
    assert asyncio.run(inventory.drop_all_inventory_items(["log"], partial_match=True)) is True
    assert inventory.get_all_inventory_items() == []
