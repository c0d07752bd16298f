"""Small vector and matrix helpers shared across the simulation."""

from __future__ import annotations

import math
import random
from numbers import Real

import numpy as np

# Euler rotation order: yaw (Y), then roll (Z), then pitch (X).
_ROTATION_ORDER = (
    (1, (0.0, 1.0, 0.0)),
    (2, (0.0, 0.0, 1.0)),
    (0, (1.0, 0.0, 0.0)),
)


def _axis_rotation(axis, degrees: float) -> np.ndarray:
    """Return a 4x4 right-handed rotation about ``axis`` by ``degrees``."""
    angle = math.radians(degrees)
    c, s = math.cos(angle), math.sin(angle)
    t = 1.0 - c
    x, y, z = np.asarray(axis, dtype=float) / np.linalg.norm(axis)
    return np.array(
        [
            [t * x * x + c, t * x * y - s * z, t * x * z + s * y, 0.0],
            [t * x * y + s * z, t * y * y + c, t * y * z - s * x, 0.0],
            [t * x * z - s * y, t * y * z + s * x, t * z * z + c, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def rotate_matrix_with_degree(matrix, rotation) -> np.ndarray:
    """Post-multiply a 4x4 matrix by Euler rotations given in degrees (Y, Z, X order)."""
    result = np.array(matrix, dtype=float)
    if result.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {result.shape}")
    rotation = np.asarray(rotation, dtype=float)
    for component, axis in _ROTATION_ORDER:
        result = result @ _axis_rotation(axis, rotation[component])
    return result


def rotate_with_degree(vector, rotation) -> np.ndarray:
    """Rotate a direction by Euler angles in degrees and return it normalized."""
    rotation_matrix = rotate_matrix_with_degree(np.eye(4), rotation)
    rotated = rotation_matrix[:3, :3] @ np.asarray(vector, dtype=float)
    return rotated / np.linalg.norm(rotated)


def random_value(low: float = 0.0, high: float = 1.0) -> float:
    """Return a uniformly distributed value between ``low`` and ``high``."""
    return low + random.random() * (high - low)


def random_unit_vector() -> np.ndarray:
    """Return a random direction of unit length."""
    phi = random_value(0.0, math.pi * 2.0)
    theta = random_value(0.0, math.pi * 2.0)
    sin_phi = math.sin(phi)
    return np.array([math.cos(theta) * sin_phi, math.cos(phi), math.sin(theta) * sin_phi])


def lerp(value1, value2, a: float):
    """Linearly interpolate from ``value1`` to ``value2`` with ``a`` clamped to [0, 1]."""
    a = min(max(a, 0.0), 1.0)
    if not (isinstance(value1, Real) and isinstance(value2, Real)):
        value1 = np.asarray(value1, dtype=float)
        value2 = np.asarray(value2, dtype=float)
    return a * value2 + (1.0 - a) * value1


def format_vec(vector) -> str:
    """Format a 2- or 3-component vector as ``[x.xx, y.yy, z.zz]``."""
    components = np.asarray(vector, dtype=float).ravel()
    if components.size not in (2, 3):
        raise ValueError(f"expected 2 or 3 components, got {components.size}")
    return "[" + ", ".join(f"{c:.2f}" for c in components) + "]"