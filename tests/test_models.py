from mc_routines.models import BestHarvestTool, Block, Entity, Vec3


def test_vec3_parses_its_own_string_form() -> None:
    assert Vec3.from_string("1.5, 64, -3") == Vec3(1.5, 64.0, -3.0)
    assert Vec3.from_string(str(Vec3(-2, 70, 8))) == Vec3(-2, 70, 8)
    assert Vec3.from_string("north") is None
    assert Vec3.from_string("") is None


def test_vec3_tolerance_comparison() -> None:
    origin = Vec3(0, 64, 0)

    assert origin.equals(Vec3(0.004, 64, -0.004), tolerance=0.005)
    assert not origin.equals(Vec3(0.006, 64, 0), tolerance=0.005)
    assert Vec3(1.7, 63.2, -0.5).floored() == Vec3(1, 63, -1)


def test_world_object_flags() -> None:
    assert Block(name="air", position=Vec3(0, 0, 0), type_id=0).is_air
    assert Entity(id=1, name="pig", position=Vec3(0, 0, 0)).is_attackable
    assert not Entity(id=2, name="item", position=Vec3(0, 0, 0), kind="object").is_attackable
    assert not BestHarvestTool().can_harvest
