"""Actors and the components attached to them."""

from __future__ import annotations

from typing import Iterable, TypeVar

import numpy as np

from velvetcloth.transform import Transform

C = TypeVar("C", bound="Component")


class Component:
    """Behaviour attached to an actor; subclasses override the lifecycle hooks.

    The base hooks keep a record of the lifecycle: whether the component has
    started or been destroyed, and how many frames and fixed steps it has seen.
    """

    def __init__(self) -> None:
        self.name = type(self).__name__
        self.actor: Actor | None = None
        self.enabled = True
        self.started = False
        self.destroyed = False
        self.frame_count = 0
        self.fixed_step_count = 0

    @property
    def transform(self) -> Transform:
        """The owning actor's transform, or a fresh detached one."""
        if self.actor is not None:
            return self.actor.transform
        return Transform()

    def start(self) -> None:
        """Called once before the first frame."""
        self.started = True

    def update(self) -> None:
        """Called once per rendered frame."""
        self.frame_count += 1

    def fixed_update(self) -> None:
        """Called once per fixed physics step while enabled."""
        self.fixed_step_count += 1

    def on_destroy(self) -> None:
        """Called when the game shuts down."""
        self.destroyed = True


def _check_component_class(cls: type) -> None:
    if not (isinstance(cls, type) and issubclass(cls, Component)):
        raise TypeError(f"{cls!r} is not a Component subclass")


class Actor:
    """A named object in the scene holding a transform and components."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.transform = Transform(actor=self)
        self.components: list[Component] = []

    def initialize(self, position, scale=(1.0, 1.0, 1.0), rotation=(0.0, 0.0, 0.0)) -> None:
        """Place the actor."""
        self.transform.position = np.array(position, dtype=float)
        self.transform.scale = np.array(scale, dtype=float)
        self.transform.rotation = np.array(rotation, dtype=float)

    def start(self) -> None:
        for component in self.components:
            component.start()

    def update(self) -> None:
        for component in self.components:
            component.update()

    def fixed_update(self) -> None:
        for component in self.components:
            if component.enabled:
                component.fixed_update()

    def on_destroy(self) -> None:
        for component in self.components:
            component.on_destroy()

    def add_component(self, component: Component) -> Component:
        component.actor = self
        self.components.append(component)
        return component

    def add_components(self, components: Iterable[Component]) -> None:
        for component in components:
            self.add_component(component)

    def get_component(self, cls: type[C]) -> C | None:
        """Return the first component that is an instance of ``cls``, or None."""
        _check_component_class(cls)
        return next((c for c in self.components if isinstance(c, cls)), None)

    def get_components(self, cls: type[C]) -> list[C]:
        """Return every component that is an instance of ``cls``, in order."""
        _check_component_class(cls)
        return [c for c in self.components if isinstance(c, cls)]