"""Light sources."""

from __future__ import annotations

import enum

import numpy as np

from velvetcloth.actor import Component


class LightType(enum.Enum):
    POINT = "point"
    DIRECTIONAL = "directional"
    SPOT_LIGHT = "spot_light"


active_lights: list["Light"] = []


class Light(Component):
    """A light registered in a shared list for as long as it is attached."""

    def __init__(self, light_type: LightType = LightType.SPOT_LIGHT, registry: list | None = None) -> None:
        super().__init__()
        self.type = light_type
        self.color = np.full(3, 1.3)
        self.ambient = 0.15
        self.inner_cutoff = 40.0
        self.outer_cutoff = 50.0
        self.constant = 1.0
        self.linear = 0.09
        self.quadratic = 0.032
        self._registry = active_lights if registry is None else registry
        self._registry.append(self)

    def position(self) -> np.ndarray:
        """Homogeneous position: w is 1 for point and spot lights, 0 for directional."""
        w = 0.0 if self.type is LightType.DIRECTIONAL else 1.0
        return np.array([*self.transform.position, w])

    def detach(self) -> None:
        """Remove this light from its registry; does nothing if already removed."""
        if self in self._registry:
            self._registry.remove(self)