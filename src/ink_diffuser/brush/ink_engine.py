"""
This engine is a realtime ink-in-liquid simulator on a square-cell grid.

High-level approach:
- One scalar field (ink amount per cell) held in a front/back buffer pair
- Pointer strokes rasterized with Bresenham lines and deposited into the front buffer
- Overflow diffusion: a cell above capacity hands a fixed fraction of its
  excess to each of its 8 Moore neighbors, written into the zeroed back
  buffer with atomic adds; the buffers then swap
- Linear decay in place, floored at zero
- Exponential attenuation style rendering to map ink amount to color

Every per-cell phase is a Taichi range-for, so it runs in parallel across
cells on the selected backend.
"""

import logging
import time
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import taichi as ti

from ..errors import DimensionMismatch
from .backend import initialize_backend
from .configs import InkParams
from .framebuffer import Framebuffer
from .grid import InkGrid
from .stroke import Stroke, rasterize as rasterize_stroke

_logger = logging.getLogger(__name__)

StrokeLike = Union[Stroke, Sequence[Tuple[float, float]]]


@ti.data_oriented
class InkEngine:
    """Taichi ink diffusion simulation.

    Fields:
    - grid.ink: ink amount per cell, ping-pong in the leading dimension
    - _stamp: per-cell visit counts of the stroke being applied
    - framebuffer: RGBA u8 and float RGB output, one pixel per cell

    Per tick: rasterize -> diffuse -> swap -> decay -> color map.
    """

    def __init__(
        self,
        width: int,
        height: int,
        params: Optional[InkParams] = None,
        framebuffer: Optional[Framebuffer] = None,
        arch: str = "cpu",
        use_profiler: bool = False,
    ):
        initialize_backend(arch, use_profiler=use_profiler)

        if params is None:
            params = InkParams()
        if not isinstance(params, InkParams):
            raise TypeError(f"params must be InkParams, got {type(params).__name__}")
        self.params = params

        self.timing_mode = False
        self.tick_count = 0
        self._pending: List[Stroke] = []

        self._set_params_fields()
        self._upload_params()
        self._allocate(width, height, framebuffer)

    def _allocate(self, width: int, height: int, framebuffer: Optional[Framebuffer]):
        self.grid = InkGrid(width, height)
        self.width = self.grid.width
        self.height = self.grid.height
        self._stamp = ti.field(dtype=ti.i32, shape=self.grid.shape)
        if framebuffer is None:
            framebuffer = Framebuffer(self.width, self.height)
        self.attach_framebuffer(framebuffer)
        _logger.debug("Allocated %dx%d ink grid", self.width, self.height)

    def _set_params_fields(self):
        self._capacity = ti.field(dtype=ti.f32, shape=())
        self._deposit_amount = ti.field(dtype=ti.f32, shape=())
        self._diffusion_fraction = ti.field(dtype=ti.f32, shape=())
        self._decay_rate = ti.field(dtype=ti.f32, shape=())
        self._value_cutoff = ti.field(dtype=ti.f32, shape=())
        self._opacity = ti.field(dtype=ti.f32, shape=())
        self._ink_color = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._paper_color = ti.Vector.field(3, dtype=ti.f32, shape=())

    def _upload_params(self):
        """Copies the Python-side parameters into the Taichi-side scalar fields."""
        p = self.params
        self._capacity[None] = p.capacity
        self._deposit_amount[None] = p.deposit_amount
        self._diffusion_fraction[None] = p.diffusion_fraction
        self._decay_rate[None] = p.decay_rate
        self._value_cutoff[None] = p.value_cutoff
        self._opacity[None] = p.opacity
        self._ink_color[None] = ti.Vector(list(p.ink_rgb))
        self._paper_color[None] = ti.Vector(list(p.paper_rgb))

    def attach_framebuffer(self, framebuffer: Framebuffer):
        """Makes the color mapper write into a caller-owned framebuffer."""
        if framebuffer.shape != self.grid.shape:
            raise DimensionMismatch("framebuffer", self.grid.shape, framebuffer.shape)
        self.framebuffer = framebuffer

    def resize(self, width: int, height: int):
        """Reallocates an empty grid and framebuffer for a new viewport."""
        self._pending.clear()
        self._allocate(width, height, None)
        _logger.info("Resized ink grid to %dx%d", self.width, self.height)

    # ===============================
    # Input
    # ===============================

    def add_stroke(self, points: Sequence[Tuple[float, float]], erase: bool = False, continues: bool = False):
        """Queues pointer samples to be rasterized by the next tick."""
        self._pending.append(Stroke(tuple(points), erase=erase, continues=continues))

    def paint(self, x: float, y: float):
        """Queues a single-sample stroke at (x, y)."""
        self.add_stroke([(x, y)])

    def rasterize(self, strokes: Iterable[StrokeLike]):
        """Deposits (or erases) ink along each stroke in the front buffer.

        Every stroke is traced before any is applied, so an invalid sample
        leaves the grid untouched.
        """
        stamps = []
        for stroke in strokes:
            if not isinstance(stroke, Stroke):
                stroke = Stroke(tuple(stroke))
            if len(stroke) == 0:
                continue
            stamps.append((rasterize_stroke(stroke.points, self.width, self.height, stroke.continues), stroke.erase))

        front = self.grid.front
        for counts, erase in stamps:
            self._stamp.from_numpy(counts)
            self._apply_stamp(self.grid.ink, self._stamp, front, int(erase))

    # ===============================
    # Simulation phases
    # ===============================

    def diffuse(self):
        """Resolves overflow from the front buffer into the back buffer, then swaps."""
        self.grid.clear(back=True)
        self._diffuse(self.grid.ink, self.grid.front, self.grid.back)
        self.grid.swap()

    def decay(self):
        self._decay(self.grid.ink, self.grid.front)

    def color_map(self) -> Framebuffer:
        self._color_map(self.grid.ink, self.grid.front, self.framebuffer.image, self.framebuffer.rgba)
        return self.framebuffer

    def tick(self, strokes: Iterable[StrokeLike] = ()) -> Framebuffer:
        """Runs one full tick and returns the populated framebuffer."""
        t0 = time.perf_counter() if self.timing_mode else 0

        pending = self._pending + list(strokes)
        self._pending = []
        self.rasterize(pending)

        t1 = time.perf_counter() if self.timing_mode else 0
        self.diffuse()
        self.decay()
        if self.timing_mode:
            ti.sync()
        t2 = time.perf_counter() if self.timing_mode else 0

        self.color_map()
        self.tick_count += 1

        if self.timing_mode and self.tick_count % 30 == 0:
            ti.sync()
            t3 = time.perf_counter()
            _logger.info(
                "Tick %d: %.1fms (strokes) + %.1fms (diffuse/decay) + %.1fms (color)",
                self.tick_count, (t1 - t0) * 1000, (t2 - t1) * 1000, (t3 - t2) * 1000,
            )
        return self.framebuffer

    def step(self, steps: int = 1) -> Framebuffer:
        """Advances the simulation by the specified number of ticks."""
        for _ in range(int(steps)):
            self.tick()
        return self.framebuffer

    # ===============================
    # State access
    # ===============================

    def clear(self):
        """Empties the grid and drops queued strokes."""
        self._pending.clear()
        self.grid.reset()

    def render(self) -> np.ndarray:
        """Maps the current grid to colors and returns the RGBA pixels."""
        self.color_map()
        return self.framebuffer.to_numpy()

    def snapshot(self) -> np.ndarray:
        return self.grid.to_numpy()

    def load(self, values: np.ndarray):
        self.grid.load(values)

    def total_ink(self) -> float:
        return self.grid.total()

    def warmup(self):
        """Trigger JIT compilation of all kernels by running a small dummy tick."""
        self.clear()
        self.tick([Stroke(((self.width // 2, self.height // 2),))])
        self.clear()
        self.color_map()
        self.tick_count = 0
        ti.sync()
        _logger.info("Warmup complete.")

    def check_integrity(self) -> bool:
        """Verifies the grid holds only finite, non-negative ink."""
        ink = self.snapshot()
        if np.any(~np.isfinite(ink)):
            _logger.error("INTEGRITY ERROR: non-finite ink detected")
            return False
        if np.any(ink < 0.0):
            _logger.error("INTEGRITY ERROR: negative ink, min %g", float(ink.min()))
            return False
        return True

    # ===============================
    # Taichi kernels
    # ===============================

    @ti.kernel
    def _apply_stamp(self, ink: ti.template(), stamp: ti.template(), buf: ti.i32, erase: ti.i32):
        amount = self._deposit_amount[None]
        for i, j in stamp:
            c = stamp[i, j]
            if c > 0:
                if erase != 0:
                    ink[buf, i, j] = 0.0
                else:
                    ink[buf, i, j] += amount * ti.cast(c, ti.f32)

    @ti.kernel
    def _diffuse(self, ink: ti.template(), src: ti.i32, dst: ti.i32):
        """Overflow pass: dst must be zeroed; neighbors receive shares via atomic adds."""
        cap = self._capacity[None]
        frac = self._diffusion_fraction[None]
        w = ink.shape[1]
        h = ink.shape[2]

        for i, j in ti.ndrange(w, h):
            v = ink[src, i, j]
            if v > cap:
                share = (v - cap) * frac
                # The cell keeps what its 8 neighbors do not take, so the 9 parts sum to v.
                ink[dst, i, j] += v - 8.0 * share
                for di, dj in ti.static(ti.ndrange((-1, 2), (-1, 2))):
                    if ti.static(di != 0 or dj != 0):
                        ni = i + di
                        nj = j + dj
                        # Shares falling off the grid are discarded.
                        if ni >= 0 and ni < w and nj >= 0 and nj < h:
                            ink[dst, ni, nj] += share
            else:
                ink[dst, i, j] += v

    @ti.kernel
    def _decay(self, ink: ti.template(), buf: ti.i32):
        rate = self._decay_rate[None]
        cutoff = self._value_cutoff[None]
        for i, j in ti.ndrange(ink.shape[1], ink.shape[2]):
            v = ink[buf, i, j]
            if v > 0.0:
                v = ti.max(v - rate, 0.0)
                if v <= cutoff:
                    v = 0.0
                ink[buf, i, j] = v

    @ti.kernel
    def _color_map(self, ink: ti.template(), buf: ti.i32, image: ti.template(), rgba: ti.template()):
        """Composites ink over paper into both framebuffer fields."""
        paper = self._paper_color[None]
        ink_col = self._ink_color[None]
        opacity = self._opacity[None]

        for i, j in image:
            v = ink[buf, i, j]
            # Optical density: coverage saturates towards the ink color.
            t = ti.cast(1.0 - ti.exp(-opacity * v), ti.f32)
            col = paper + (ink_col - paper) * t
            col = ti.max(0.0, ti.min(1.0, col))
            image[i, j] = col
            rgba[i, j, 0] = ti.cast(col.x * 255.0 + 0.5, ti.u8)
            rgba[i, j, 1] = ti.cast(col.y * 255.0 + 0.5, ti.u8)
            rgba[i, j, 2] = ti.cast(col.z * 255.0 + 0.5, ti.u8)
            rgba[i, j, 3] = ti.cast(255, ti.u8)
