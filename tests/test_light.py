import numpy as np

from velvetcloth.actor import Actor
from velvetcloth.light import Light, LightType, active_lights


def test_registers_and_detaches():
    registry = []
    light = Light(registry=registry)
    assert registry == [light]
    light.detach()
    assert registry == []
    light.detach()
    assert registry == []


def test_default_registry():
    light = Light()
    try:
        assert light in active_lights
    finally:
        light.detach()
    assert light not in active_lights


def test_defaults():
    light = Light(registry=[])
    assert light.type is LightType.SPOT_LIGHT
    assert light.name == "Light"
    assert light.outer_cutoff > light.inner_cutoff


def test_spot_position_has_w_one():
    light = Light(registry=[])
    actor = Actor("lamp")
    actor.add_component(light)
    actor.initialize((1.0, 2.0, 3.0))
    np.testing.assert_allclose(light.position(), [1.0, 2.0, 3.0, 1.0])


def test_point_position_has_w_one():
    light = Light(LightType.POINT, registry=[])
    np.testing.assert_allclose(light.position(), [0.0, 0.0, 0.0, 1.0])


def test_directional_position_has_w_zero():
    light = Light(LightType.DIRECTIONAL, registry=[])
    actor = Actor()
    actor.add_component(light)
    actor.initialize((5.0, -1.0, 2.0))
    np.testing.assert_allclose(light.position(), [5.0, -1.0, 2.0, 0.0])