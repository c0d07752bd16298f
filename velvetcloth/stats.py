"""Solver kernel timing and frame statistics for display."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import numpy as np

from velvetcloth.timer import Timer

SOLVER_LABELS = (
    "SetParams",
    "Predict",
    "SolveStretch",
    "SolveAttach",
    "ApplyDeltas",
    "CollideSDFs",
    "CollideParticles",
    "Finalize",
    "UpdateNormals",
    "HashParticle",
    "HashSort",
    "HashBuildCell",
    "HashCache",
    "Total",
)

KERNEL_SUM = "KernelSum"
GRAPH_SIZE = 180


class TimingLevel(enum.Enum):
    """How prominently a kernel's share of the total is highlighted."""

    NORMAL = "normal"
    MID = "mid"
    HIGH = "high"
    DISABLED = "disabled"


@dataclass(frozen=True)
class TimingRow:
    name: str
    time: float
    average: float
    percentage: float
    level: TimingLevel


class SolverTiming:
    """Per-kernel solver times (ms), refreshed periodically and averaged over samples."""

    def __init__(self, labels=SOLVER_LABELS) -> None:
        self.labels = list(labels)
        self.count = 0
        self.times: dict[str, float] = {}
        self.average_times: dict[str, float] = {}

    def update(self, timer: Timer) -> None:
        if not timer.periodic_update("GUI_SOLVER", 0.2):
            return
        if timer.frame_count < 2:
            self.count = 0
            for label in self.labels:
                self.average_times[label] = 0.0
            self.average_times[KERNEL_SUM] = 0.0

        self.times[KERNEL_SUM] = 0.0
        for label in self.labels:
            value = timer.get_timer_gpu("Solver_" + label)
            self.times[label] = value
            self.average_times[label] = self.average_times.get(label, 0.0) + value
            if label not in ("Total", "Initialize"):
                self.times[KERNEL_SUM] += value

        self.average_times[KERNEL_SUM] = self.average_times.get(KERNEL_SUM, 0.0) + self.times[KERNEL_SUM]
        self.count += 1

    @property
    def average_kernel_sum(self) -> float:
        return self.average_times.get(KERNEL_SUM, 0.0) / self.count if self.count else 0.0

    def _row(self, name: str, auto_level: bool) -> TimingRow:
        total = self.average_times.get("Total", 0.0)
        accumulated = self.average_times.get(name, 0.0)
        percentage = accumulated / total * 100 if total > 0 else 0.0
        level = TimingLevel.NORMAL
        if auto_level:
            if percentage > 30:
                level = TimingLevel.HIGH
            elif percentage > 10:
                level = TimingLevel.MID
            elif percentage == 0.0:
                level = TimingLevel.DISABLED
        average = accumulated / self.count if self.count else 0.0
        return TimingRow(name, self.times.get(name, 0.0), average, percentage, level)

    def rows(self) -> list[TimingRow]:
        """Kernel rows, then the kernel sum, then the total."""
        result = [self._row(label, True) for label in self.labels[:-1]]
        result.append(self._row(KERNEL_SUM, False))
        if self.labels:
            result.append(self._row(self.labels[-1], False))
        return result


@dataclass
class PerformanceStat:
    """Frame counters, rates and a rolling graph of solver time."""

    delta_time: float = 0.0
    frame_rate: int = 0
    frame_count: int = 0
    physics_frame_count: int = 0
    num_particles: int = 0
    graph_values: np.ndarray = field(default_factory=lambda: np.zeros(GRAPH_SIZE))
    graph_index: int = 0
    graph_average: float = 0.0
    cpu_time: float = 0.0
    gpu_time: float = 0.0
    solver_time: float = 0.0

    def update(self, timer: Timer, paused: bool = False) -> None:
        if paused:
            return
        elapsed = timer.elapsed_time
        delta_ms = timer.delta_time * 1000
        self.frame_count = timer.frame_count
        self.physics_frame_count = timer.physics_frame_count

        if timer.periodic_update("GUI_FAST", timer.fixed_delta_time):
            self.graph_values[self.graph_index] = timer.get_timer_gpu("Solver_Total")
            self.graph_index = (self.graph_index + 1) % len(self.graph_values)

        if timer.periodic_update("GUI_SLOW", 0.3):
            self.delta_time = delta_ms
            self.frame_rate = int(self.frame_count / elapsed) if elapsed > 0 else 0
            self.cpu_time = timer.get_timer("CPU_TIME") * 1000
            self.gpu_time = timer.get_timer("GPU_TIME") * 1000
            self.solver_time = timer.get_timer_gpu("Solver_Total")
            self.graph_average += float(self.graph_values.sum())
            self.graph_average /= len(self.graph_values)

    def summary(self) -> dict[str, str]:
        """Display rows keyed by label, ending with the solver overlay text."""
        fps = 1000.0 / self.solver_time if self.solver_time > 0 else 0.0
        return {
            "Render Frame": f"{self.frame_count}",
            "Physics Frame": f"{self.physics_frame_count}",
            "Render FrameRate": f"{self.frame_rate} FPS",
            "CPU time": f"{self.cpu_time:.2f} ms",
            "GPU time": f"{self.gpu_time:.2f} ms",
            "Num Particles": f"{self.num_particles}",
            "Solver": f"{self.solver_time:.2f} ms ({fps:.2f} FPS)",
        }