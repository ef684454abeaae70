"""Pointer strokes and their rasterization onto grid cells.

Pointer samples arrive at an irregular rate, often several cells apart, so
consecutive samples are joined with Bresenham lines to leave no gaps.
"""
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import InvalidStroke

Cell = Tuple[int, int]


@dataclass(frozen=True)
class Stroke:
    """Pointer samples in grid coordinates collected since the last tick."""

    points: Sequence[Tuple[float, float]]
    erase: bool = False
    # The first sample was the last sample of the previous tick's stroke and
    # has already been deposited.
    continues: bool = False

    def __len__(self):
        return len(self.points)


def to_cell(x: float, y: float) -> Cell:
    """Rounds a pointer sample to its cell, halves rounding up."""
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidStroke(f"Pointer sample ({x}, {y}) is not finite")
    return int(math.floor(x + 0.5)), int(math.floor(y + 0.5))


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> Iterator[Cell]:
    """Yields every cell from (x0, y0) to (x1, y1), both ends included."""
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    x, y = x0, y0
    while True:
        yield x, y
        if x == x1 and y == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy


def _clip_segment(start: Cell, end: Cell, width: int, height: int) -> Optional[Tuple[Cell, Cell]]:
    """Liang-Barsky clip of the segment to the cell rectangle, or None if it misses."""
    if width <= 0 or height <= 0:
        return None
    x0, y0 = start
    x1, y1 = end
    if 0 <= x0 < width and 0 <= y0 < height and 0 <= x1 < width and 0 <= y1 < height:
        return start, end

    dx = x1 - x0
    dy = y1 - y0
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x0), (dx, width - 1 - x0), (-dy, y0), (dy, height - 1 - y0)):
        if p == 0:
            if q < 0:
                return None
            continue
        r = q / p
        if p < 0:
            if r > t1:
                return None
            t0 = max(t0, r)
        else:
            if r < t0:
                return None
            t1 = min(t1, r)

    def clamp(x: float, y: float) -> Cell:
        cx, cy = to_cell(x, y)
        return min(max(cx, 0), width - 1), min(max(cy, 0), height - 1)

    return clamp(x0 + t0 * dx, y0 + t0 * dy), clamp(x0 + t1 * dx, y0 + t1 * dy)


def trace_stroke(
    points: Sequence[Tuple[float, float]], width: Optional[int] = None, height: Optional[int] = None
) -> List[Cell]:
    """Connected cell path through all samples.

    The cell joining two segments is emitted once; cells the path crosses
    again are emitted again. Given a grid size, each segment is clipped to
    the grid before it is walked, so only in-bounds cells are produced.
    """
    bounded = width is not None and height is not None
    cells: List[Cell] = []
    prev = None
    for x, y in points:
        cell = to_cell(x, y)
        if prev is None:
            if not bounded or (0 <= cell[0] < width and 0 <= cell[1] < height):
                cells.append(cell)
        else:
            seg = _clip_segment(prev, cell, width, height) if bounded else (prev, cell)
            if seg is not None:
                start, end = seg
                line = bresenham_line(start[0], start[1], end[0], end[1])
                if start == prev:
                    next(line)  # already emitted as the end of the previous segment
                cells.extend(line)
        prev = cell
    return cells


def rasterize(
    points: Sequence[Tuple[float, float]], width: int, height: int, skip_first: bool = False
) -> np.ndarray:
    """Visit counts per cell, shape (width, height).

    A segment leaving the grid stops at the nearest in-bounds cell on it.
    With skip_first the first sample's cell is dropped unless it is the
    whole path (a pointer held still); an off-grid first sample was never
    deposited, so nothing is dropped for it.
    """
    counts = np.zeros((width, height), dtype=np.int32)
    cells = trace_stroke(points, width, height)
    if skip_first and len(cells) > 1 and cells[0] == to_cell(*points[0]):
        cells = cells[1:]
    if not cells:
        return counts
    xy = np.asarray(cells, dtype=np.int64)
    np.add.at(counts, (xy[:, 0], xy[:, 1]), 1)
    return counts
