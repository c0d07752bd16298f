"""Growable typed arrays and a buffer merged from several segments."""

from __future__ import annotations

import operator
from typing import Iterator

import numpy as np


class GrowableBuffer:
    """A typed dynamic array that grows its capacity by a factor of 1.5."""

    def __init__(self, dtype=np.float64, shape=(), size: int = 0) -> None:
        self._dtype = np.dtype(dtype)
        self._shape = tuple(shape)
        self._data = np.zeros((0, *self._shape), dtype=self._dtype)
        self._count = 0
        if size:
            self.resize(size)

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def element_shape(self) -> tuple:
        return self._shape

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def data(self) -> np.ndarray:
        """A view of the live elements."""
        return self._data[: self._count]

    def __len__(self) -> int:
        return self._count

    def _checked(self, index) -> int:
        i = operator.index(index)
        if not 0 <= i < self._count:
            raise IndexError(f"index {i} out of range for buffer of size {self._count}")
        return i

    def _element(self, value):
        return value.copy() if self._shape else value.item()

    def __getitem__(self, index):
        return self._element(self._data[self._checked(index)])

    def __setitem__(self, index, value) -> None:
        self._data[self._checked(index)] = value

    def __iter__(self) -> Iterator:
        for value in self.data:
            yield self._element(value)

    def push_back(self, value, count: int = 1) -> None:
        """Append ``value`` ``count`` times."""
        for _ in range(count):
            self.reserve(self._count + 1)
            self._data[self._count] = value
            self._count += 1

    def extend(self, values) -> None:
        """Append every element of ``values``."""
        array = np.asarray(values, dtype=self._dtype).reshape(-1, *self._shape)
        offset = self._count
        self.resize(offset + len(array))
        self._data[offset : offset + len(array)] = array

    def reserve(self, min_capacity: int) -> None:
        if min_capacity > self.capacity:
            new_capacity = min_capacity * 3 // 2
            grown = np.zeros((new_capacity, *self._shape), dtype=self._dtype)
            grown[: self._count] = self._data[: self._count]
            self._data = grown

    def resize(self, new_count: int, value=None) -> None:
        """Set the element count; new entries are filled with ``value`` when given."""
        if new_count < 0:
            raise ValueError("buffer size cannot be negative")
        start = self._count
        self.reserve(new_count)
        self._count = new_count
        if value is not None and new_count > start:
            self._data[start:new_count] = value

    def destroy(self) -> None:
        self._data = np.zeros((0, *self._shape), dtype=self._dtype)
        self._count = 0


class MergedBuffer:
    """One contiguous buffer built from external segments, with write-back."""

    def __init__(self, dtype=np.float64, shape=(3,)) -> None:
        self.merged = GrowableBuffer(dtype, shape)
        self._segments: list[np.ndarray] = []
        self._offsets: list[int] = []

    @property
    def segments(self) -> tuple:
        return tuple(self._segments)

    @property
    def offsets(self) -> tuple:
        return tuple(self._offsets)

    @property
    def data(self) -> np.ndarray:
        return self.merged.data

    def __len__(self) -> int:
        return len(self.merged)

    def __getitem__(self, index):
        return self.merged[index]

    def __setitem__(self, index, value) -> None:
        self.merged[index] = value

    def register_new_buffer(self, segment: np.ndarray) -> int:
        """Append a writable segment and copy its contents; return its offset."""
        if not isinstance(segment, np.ndarray) or segment.shape[1:] != self.merged.element_shape:
            raise ValueError(
                f"segment must be an array of elements shaped {self.merged.element_shape}"
            )
        offset = len(self.merged)
        self._segments.append(segment)
        self._offsets.append(offset)
        self.merged.extend(segment)
        return offset

    def sync(self) -> None:
        """Copy the merged contents back into each segment."""
        for segment, offset in zip(self._segments, self._offsets):
            segment[...] = self.merged.data[offset : offset + len(segment)]

    def destroy(self) -> None:
        self.merged.destroy()
        self._segments.clear()
        self._offsets.clear()