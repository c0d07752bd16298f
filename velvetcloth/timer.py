"""Frame clock with labelled timers and periodic triggers."""

from __future__ import annotations

import time
import warnings
from contextlib import contextmanager
from typing import Callable, Iterator


class Timer:
    """Tracks frame time, fixed physics steps and named interval timers."""

    FIXED_DELTA_TIME = 1.0 / 60.0
    MAX_DELTA_TIME = 0.2

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        if clock is None:
            origin = time.perf_counter()
            clock = lambda: time.perf_counter() - origin  # noqa: E731
        self._clock = clock

        self._times: dict[str, float] = {}
        self._history: dict[str, float] = {}
        self._frames: dict[str, int] = {}
        self._gpu_events: dict[str, list[list[float | None]]] = {}
        self._accumulated: dict[str, float] = {}

        self._frame_count = 0
        self._physics_frame_count = 0
        self._elapsed_time = 0.0
        self._delta_time = 0.0
        self._last_update_time = self.current_time()
        self._fixed_update_timer = self.current_time()

    def current_time(self) -> float:
        """Return the clock reading in seconds."""
        return self._clock()

    def start_timer(self, label: str) -> None:
        self._times[label] = self.current_time()

    def end_timer(self, label: str, frame: int = -1) -> float:
        """Return seconds since ``start_timer``; repeated calls in one frame accumulate."""
        if label not in self._times:
            warnings.warn(f"end_timer with undefined label [{label}]", RuntimeWarning, stacklevel=2)
            return -1.0
        elapsed = self.current_time() - self._times[label]
        if frame == -1:
            frame = self._frame_count
        if frame > self._frames.get(label, 0):
            self._history[label] = elapsed
        else:
            self._history[label] = self._history.get(label, 0.0) + elapsed
        self._frames[label] = frame
        return self._history[label]

    def get_timer(self, label: str) -> float:
        """Return the last recorded time in seconds, or 0 if unknown."""
        return self._history.get(label, 0.0)

    def start_timer_gpu(self, label: str) -> None:
        """Begin an interval that is summed per frame and reported in milliseconds."""
        frame = self._frame_count
        if label in self._frames and self._frames[label] != frame:
            self.get_timer_gpu(label)
        self._frames[label] = frame
        self._gpu_events.setdefault(label, []).append([self.current_time(), None])

    def end_timer_gpu(self, label: str) -> None:
        events = self._gpu_events.get(label)
        if not events:
            raise KeyError(f"end_timer_gpu without start_timer_gpu for label [{label}]")
        events[-1][1] = self.current_time()

    def get_timer_gpu(self, label: str) -> float:
        """Collect pending intervals for ``label`` and return their total in milliseconds."""
        events = self._gpu_events.get(label)
        if events:
            total = sum((end - start) * 1000.0 for start, end in events if end is not None)
            events.clear()
            self._history[label] = total
        return self._history.get(label, 0.0)

    def update_delta_time(self) -> None:
        current = self.current_time()
        self._delta_time = min(current - self._last_update_time, self.MAX_DELTA_TIME)
        self._last_update_time = current

    def next_frame(self) -> None:
        self._frame_count += 1
        self._elapsed_time += self._delta_time

    def next_fixed_frame(self) -> bool:
        """Advance the fixed-step clock; return True when a physics step is due."""
        self._fixed_update_timer += self._delta_time
        if self._fixed_update_timer > self.FIXED_DELTA_TIME:
            self._fixed_update_timer = 0.0
            self._physics_frame_count += 1
            return True
        return False

    def periodic_update(self, label: str, interval: float, allow_repetition: bool = True) -> bool:
        """Return True once each time ``interval`` of elapsed time has passed for ``label``."""
        accumulated = self._accumulated.setdefault(label, 0.0)
        if accumulated < self._elapsed_time:
            self._accumulated[label] = (
                accumulated + interval if allow_repetition else self._elapsed_time + interval
            )
            return True
        return False

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def physics_frame_count(self) -> int:
        return self._physics_frame_count

    @property
    def elapsed_time(self) -> float:
        return self._elapsed_time

    @property
    def delta_time(self) -> float:
        return self._delta_time

    @property
    def fixed_delta_time(self) -> float:
        return self.FIXED_DELTA_TIME


@contextmanager
def scoped_gpu_timer(timer: Timer, label: str) -> Iterator[None]:
    """Time the enclosed block as a GPU interval under ``label``."""
    timer.start_timer_gpu(label)
    try:
        yield
    finally:
        timer.end_timer_gpu(label)