"""Double-buffered ink grid.

Both buffers live in one taichi field of shape (2, width, height); the
leading index selects the buffer. A 0-d ping field names the front buffer,
so swapping roles is a single scalar write and never copies cell data.
"""
import math

import numpy as np
import taichi as ti

from ..errors import DimensionMismatch, OutOfBounds

# Largest amount a single precision ink cell holds.
_F32_MAX = float(np.finfo(np.float32).max)


@ti.data_oriented
class InkGrid:
    """Front/back pair of per-cell ink amounts.

    The front buffer is read for diffusion and rendering and is mutated in
    place by rasterization and decay. The back buffer only receives the
    output of diffusion.
    """

    def __init__(self, width: int, height: int):
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.shape = (width, height)

        self._ping = ti.field(dtype=ti.i32, shape=())
        self.ink = ti.field(dtype=ti.f32, shape=(2, width, height))
        self.reset()

    @property
    def front(self) -> int:
        return int(self._ping[None])

    @property
    def back(self) -> int:
        return 1 - int(self._ping[None])

    def swap(self):
        """Exchanges the front and back roles."""
        self._ping[None] = 1 - self._ping[None]

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x, y):
        if not isinstance(x, (int, np.integer)) or not isinstance(y, (int, np.integer)):
            raise TypeError(f"Cell coordinates must be integers, got ({x!r}, {y!r})")
        if not self.contains(x, y):
            raise OutOfBounds(x, y, self.width, self.height)

    def read(self, x: int, y: int) -> float:
        self._check(x, y)
        return float(self.ink[self.front, x, y])

    def write(self, x: int, y: int, value: float, back: bool = False):
        """Stores value at (x, y) in the front buffer, or the back buffer if back is set."""
        self._check(x, y)
        value = float(value)
        if not math.isfinite(value) or value < 0.0 or value > _F32_MAX:
            raise ValueError(f"Ink amounts must be finite, non-negative and within float32 range, got {value}")
        self.ink[self.back if back else self.front, x, y] = value

    def clear(self, back: bool = True):
        self._fill(self.back if back else self.front, 0.0)

    def reset(self):
        self._ping[None] = 0
        self._fill(0, 0.0)
        self._fill(1, 0.0)

    def to_numpy(self, back: bool = False) -> np.ndarray:
        return self.ink.to_numpy()[self.back if back else self.front]

    def load(self, values: np.ndarray):
        """Replaces the front buffer with values; the back buffer is left alone."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != self.shape:
            raise DimensionMismatch("ink array", self.shape, values.shape)
        if not np.all(np.isfinite(values)) or np.any(values < 0.0) or np.any(values > _F32_MAX):
            raise ValueError("Ink amounts must be finite, non-negative and within float32 range")
        both = self.ink.to_numpy()
        both[self.front] = values.astype(np.float32)
        self.ink.from_numpy(both)

    def total(self, back: bool = False) -> float:
        return float(self.to_numpy(back=back).sum())

    @ti.kernel
    def _fill(self, buf: ti.i32, value: ti.f32):
        for i, j in ti.ndrange(self.width, self.height):
            self.ink[buf, i, j] = value
