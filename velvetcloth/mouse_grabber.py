"""Picking and dragging particles with the mouse."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from velvetcloth.helper import lerp

FLT_MAX = float(np.finfo(np.float32).max)
GRAB_STIFFNESS = 0.8


@dataclass
class Ray:
    origin: np.ndarray
    direction: np.ndarray

    def __post_init__(self) -> None:
        self.origin = np.asarray(self.origin, dtype=float)
        self.direction = np.asarray(self.direction, dtype=float)


@dataclass
class RaycastCollision:
    collide: bool = False
    object_index: int = -1
    distance_to_origin: float = 0.0


def mouse_ray(inv_view_projection, screen_pos, window_size) -> Ray:
    """Unproject a cursor position in pixels into a world-space ray."""
    screen = np.asarray(screen_pos, dtype=float)
    size = np.asarray(window_size, dtype=float)
    ndc = 2.0 * screen / size - 1.0
    ndc[1] = -ndc[1]
    inv_vp = np.asarray(inv_view_projection, dtype=float)
    near_raw = inv_vp @ np.array([ndc[0], ndc[1], 0.0, 1.0])
    far_raw = inv_vp @ np.array([ndc[0], ndc[1], 1.0, 1.0])
    near = near_raw[:3] / near_raw[3]
    far = far_raw[:3] / far_raw[3]
    direction = far - near
    return Ray(near, direction / np.linalg.norm(direction))


def _as_array(values) -> np.ndarray:
    return np.asarray(getattr(values, "data", values), dtype=float)


class MouseGrabber:
    """Pins the particle nearest a ray and drags it along with the cursor."""

    def __init__(self, positions, velocities, inv_masses, particle_diameter: float) -> None:
        self.positions = positions
        self.velocities = velocities
        self.inv_masses = inv_masses
        self.particle_diameter = particle_diameter
        self.is_grabbing = False
        self.grabbed_inv_mass = 0.0
        self.collision = RaycastCollision()

    def find_closest_vertex_to_ray(self, ray: Ray) -> RaycastCollision:
        """The particle within one diameter of the ray that is nearest along it."""
        points = _as_array(self.positions).reshape(-1, 3)
        if len(points) == 0:
            return RaycastCollision(False, -1, FLT_MAX)
        offsets = points - ray.origin
        along = offsets @ ray.direction
        across = np.linalg.norm(np.cross(ray.direction, offsets), axis=1)
        candidates = (across < self.particle_diameter) & (along < FLT_MAX)
        if not candidates.any():
            return RaycastCollision(False, -1, FLT_MAX)
        masked = np.where(candidates, along, np.inf)
        index = int(np.argmin(masked))
        return RaycastCollision(True, index, float(along[index]))

    def begin_grab(self, ray: Ray) -> RaycastCollision:
        """Pick the particle under ``ray`` and pin it by zeroing its inverse mass."""
        self.collision = self.find_closest_vertex_to_ray(ray)
        if self.collision.collide:
            self.is_grabbing = True
            index = self.collision.object_index
            self.grabbed_inv_mass = float(self.inv_masses[index])
            self.inv_masses[index] = 0.0
        return self.collision

    def end_grab(self) -> bool:
        """Release the grabbed particle, restoring its inverse mass."""
        if not self.is_grabbing:
            return False
        self.is_grabbing = False
        self.inv_masses[self.collision.object_index] = self.grabbed_inv_mass
        return True

    def update_grabbed_vertex(self, ray: Ray, fixed_delta_time: float) -> None:
        """Pull the grabbed particle toward the point on ``ray`` at the grab depth."""
        if not self.is_grabbing:
            return
        index = self.collision.object_index
        mouse_pos = ray.origin + ray.direction * self.collision.distance_to_origin
        current = np.array(self.positions[index], dtype=float)
        target = lerp(mouse_pos, current, GRAB_STIFFNESS)
        self.positions[index] = target
        self.velocities[index] = (target - current) / fixed_delta_time