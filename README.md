# velvetcloth

Building blocks for a position-based cloth simulator, written with NumPy.
The package sets up particles and constraints for grid cloths, hashes
particles into a uniform grid for neighbour queries, lets a ray pick and
drag particles, and provides a small actor/component frame loop with
timers and frame statistics.

## Modules

- `velvetcloth.cloth_solver`: `ClothSolver` keeps the particle buffers
  (positions, velocities, inverse masses and so on) and the stretch,
  attachment and bending constraint lists. `add_cloth` registers a cloth's
  vertices transformed by a 4x4 model matrix and returns the index of its
  first particle; `add_stretch`, `add_attach_slot`, `add_attach` (a zero
  rest distance pins the particle), `add_bend`, `apply_cluster` and
  `add_lambdas` fill in constraints; `stretch_residual` returns the summed
  |length - rest length| over stretch constraints and appends it to
  `residual_strain`. `SimParams` holds the settings, and
  `chebyshev_weights(iterations, under_relax_coeff)` gives the per-iteration
  `(w_k1, w_k2)` acceleration weights.
- `velvetcloth.cloth_object`: `ClothObject` (a `Component`) builds a grid
  mesh into a `ClothSolver` with `build(mesh, model_matrix)`, or from its
  actor's transform in `start`. Helpers: `apply_transform`,
  `generate_stretch` (structural and shear constraints cell by cell),
  `generate_stretch_clustered` (the same constraints in eight groups where no
  particle appears twice in a group, plus the group sizes) and
  `generate_bending` (one constraint per six indices).
- `velvetcloth.mesh`: `Mesh` with vertices, normals, texture coordinates and
  indices; `Mesh.from_packed` reads interleaved data; `use_indices`,
  `draw_count`, `set_vertices_and_normals`.
- `velvetcloth.spatial_hash`: `hash_coords`, `SpatialHashCPU` (counting-sort
  hash with cached candidate neighbours from `hash_objects` and
  `get_neighbors`) and `GridHasher` (cell coordinates and hashes, plus
  `compare_neighbors`, which checks a flat neighbour table against brute
  force and returns `NeighborMismatch` records).
- `velvetcloth.mouse_grabber`: `mouse_ray` unprojects a cursor position
  through an inverse view-projection matrix into a `Ray`; `MouseGrabber`
  finds the particle nearest along the ray within one particle diameter,
  pins it with `begin_grab`, drags it with `update_grabbed_vertex` and
  restores it with `end_grab`.
- `velvetcloth.actor`: `Actor` and `Component` with `start`, `update`,
  `fixed_update` (only for enabled components) and `on_destroy` hooks, and
  `get_component` / `get_components` lookup by class.
- `velvetcloth.light`: `LightType` and `Light`, a component kept in a shared
  list until `detach` is called.
- `velvetcloth.input`: `Input` wraps callables that report key, mouse button
  and cursor state, and detects presses and releases between frames
  (`get_key_down`, `get_key_up`, `get_mouse_down`, `get_mouse_up`,
  `toggle_on_key_down`).
- `velvetcloth.game`: `Callback` lists, the `GameState` flags, and
  `GameInstance`, which owns actors and runs frames with `step` and `run`,
  calling fixed-step updates when the `Timer` says one is due.
- `velvetcloth.timer`: `Timer` with labelled interval timers, per-frame
  summed intervals in milliseconds (`start_timer_gpu`, `end_timer_gpu`,
  `get_timer_gpu`, and the `scoped_gpu_timer` context manager), a 1/60 s
  fixed step and `periodic_update` triggers. A custom clock can be passed in.
- `velvetcloth.stats`: `SolverTiming` (per-label times, averages and
  percentage rows) and `PerformanceStat` (frame counts, rates and a rolling
  graph of solver time, with a `summary` of display strings).
- `velvetcloth.buffer`, `velvetcloth.transform`, `velvetcloth.helper`:
  `GrowableBuffer` and `MergedBuffer`, `Transform`, and vector helpers such
  as `rotate_with_degree`, `lerp` and `format_vec`.

## Installation

```
pip install .
```

For development with the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import numpy as np
from velvetcloth.cloth_solver import ClothSolver
from velvetcloth.cloth_object import ClothObject
from velvetcloth.mesh import Mesh

resolution = 2
n = resolution + 1
vertices = [[x, 0.0, y] for x in range(n) for y in range(n)]
indices = []
for x in range(resolution):
    for y in range(resolution):
        a = x * n + y
        c = a + n
        indices += [a, c, a + 1, a + 1, c, c + 1]

solver = ClothSolver()
cloth = ClothObject(resolution, solver)
cloth.set_attached_indices([0, resolution])
cloth.build(Mesh(vertices, indices=indices), np.eye(4))

print(len(solver.stretch_lengths))   # 20
print(solver.cluster)                # [3, 3, 3, 3, 2, 2, 2, 2]
print(solver.stretch_residual())     # 0.0
```

## What the package does not do

There is no window, rendering, shader or texture loading, and no graphical
interface: `stats` produces values and strings for display but draws
nothing. `ClothSolver` holds the simulation state and constraints but has no
time-stepping routine: prediction, constraint projection, collision and
integration are not part of the package. There is no command-line program.

The package needs Python 3.10 or later and NumPy.