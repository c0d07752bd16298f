"""Position, rotation and scale of an actor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from velvetcloth.helper import rotate_matrix_with_degree


@dataclass(eq=False)
class Transform:
    """Placement of an actor; rotation is given as Euler angles in degrees."""

    actor: Any = None
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))

    def __post_init__(self) -> None:
        self.position = np.array(self.position, dtype=float)
        self.rotation = np.array(self.rotation, dtype=float)
        self.scale = np.array(self.scale, dtype=float)

    def matrix(self) -> np.ndarray:
        """Return the 4x4 model matrix: translate, then rotate, then scale."""
        translate = np.eye(4)
        translate[:3, 3] = self.position
        result = rotate_matrix_with_degree(translate, self.rotation)
        return result @ np.diag([*self.scale, 1.0])

    def reset(self) -> None:
        """Return to the origin with no rotation and unit scale."""
        self.position = np.zeros(3)
        self.rotation = np.zeros(3)
        self.scale = np.ones(3)