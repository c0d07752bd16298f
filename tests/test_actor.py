import numpy as np
import pytest

from velvetcloth.actor import Actor, Component


class Recorder(Component):
    def __init__(self, log=None):
        super().__init__()
        self.log = log if log is not None else []

    def start(self):
        self.log.append(("start", self))

    def update(self):
        self.log.append(("update", self))

    def fixed_update(self):
        self.log.append(("fixed", self))

    def on_destroy(self):
        self.log.append(("destroy", self))


class Other(Component):
    pass


def test_component_name_defaults_to_class_name():
    assert Component().name == "Component"
    assert Recorder().name == "Recorder"


def test_add_component_sets_owner_and_transform():
    actor = Actor("cloth")
    component = Recorder()
    actor.add_component(component)
    assert component.actor is actor
    assert component.transform is actor.transform
    assert actor.transform.actor is actor


def test_detached_component_gets_fresh_transform():
    component = Component()
    first = component.transform
    assert first is not component.transform
    np.testing.assert_allclose(first.matrix(), np.eye(4))


def test_initialize_sets_transform():
    actor = Actor()
    actor.initialize((1, 2, 3), scale=(2, 2, 2), rotation=(0, 90, 0))
    np.testing.assert_allclose(actor.transform.position, [1, 2, 3])
    np.testing.assert_allclose(actor.transform.scale, [2, 2, 2])
    np.testing.assert_allclose(actor.transform.rotation, [0, 90, 0])


def test_initialize_defaults_scale_and_rotation():
    actor = Actor()
    actor.initialize((4, 5, 6))
    np.testing.assert_allclose(actor.transform.scale, np.ones(3))
    np.testing.assert_allclose(actor.transform.rotation, np.zeros(3))


def test_lifecycle_order():
    log = []
    actor = Actor()
    a, b = Recorder(log), Recorder(log)
    actor.add_components([a, b])
    actor.start()
    actor.update()
    actor.on_destroy()
    assert log == [
        ("start", a), ("start", b),
        ("update", a), ("update", b),
        ("destroy", a), ("destroy", b),
    ]


def test_fixed_update_skips_disabled_but_update_does_not():
    log = []
    actor = Actor()
    a, b = Recorder(log), Recorder(log)
    b.enabled = False
    actor.add_components([a, b])
    actor.fixed_update()
    actor.update()
    assert log == [("fixed", a), ("update", a), ("update", b)]


def test_get_component_and_components():
    actor = Actor()
    r1, o, r2 = Recorder(), Other(), Recorder()
    actor.add_components([r1, o, r2])
    assert actor.get_component(Recorder) is r1
    assert actor.get_component(Other) is o
    assert actor.get_components(Recorder) == [r1, r2]
    assert actor.get_components(Component) == [r1, o, r2]


def test_get_component_missing_returns_none():
    actor = Actor()
    actor.add_component(Other())
    assert actor.get_component(Recorder) is None
    assert actor.get_components(Recorder) == []


def test_get_component_rejects_non_component():
    with pytest.raises(TypeError):
        Actor().get_component(int)