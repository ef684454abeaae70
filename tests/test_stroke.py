import numpy as np
import pytest

from ink_diffuser import InvalidStroke
from ink_diffuser.brush.stroke import bresenham_line, rasterize, to_cell, trace_stroke


def _is_connected(cells):
    return all(
        max(abs(x1 - x0), abs(y1 - y0)) == 1
        for (x0, y0), (x1, y1) in zip(cells, cells[1:])
    )


def test_horizontal_line_covers_every_cell():
    assert list(bresenham_line(0, 0, 5, 0)) == [(x, 0) for x in range(6)]


def test_reversed_line():
    assert list(bresenham_line(5, 0, 0, 0)) == [(x, 0) for x in range(5, -1, -1)]


def test_single_cell_line():
    assert list(bresenham_line(3, 4, 3, 4)) == [(3, 4)]


@pytest.mark.parametrize("end", [(7, 3), (3, 7), (-4, 9), (-9, -2), (5, 5), (0, -6)])
def test_lines_are_connected_in_all_octants(end):
    cells = list(bresenham_line(0, 0, *end))
    assert cells[0] == (0, 0)
    assert cells[-1] == end
    assert len(cells) == max(abs(end[0]), abs(end[1])) + 1
    assert _is_connected(cells)


def test_to_cell_rounds_half_up():
    assert to_cell(0.49, 1.5) == (0, 2)
    assert to_cell(2.5, -0.5) == (3, 0)
    assert to_cell(3, 4) == (3, 4)


def test_to_cell_rejects_non_finite():
    with pytest.raises(InvalidStroke):
        to_cell(float("nan"), 0.0)
    with pytest.raises(InvalidStroke):
        to_cell(0.0, float("inf"))


def test_trace_single_point():
    assert trace_stroke([(2.2, 3.7)]) == [(2, 4)]
    assert trace_stroke([]) == []


def test_trace_emits_joints_once():
    cells = trace_stroke([(0, 0), (3, 0), (3, 2)])
    assert cells == [(0, 0), (1, 0), (2, 0), (3, 0), (3, 1), (3, 2)]
    assert _is_connected(cells)


def test_trace_keeps_revisits():
    cells = trace_stroke([(0, 0), (2, 0), (0, 0)])
    assert cells == [(0, 0), (1, 0), (2, 0), (1, 0), (0, 0)]


def test_rasterize_connectivity():
    counts = rasterize([(0, 0), (5, 0)], 8, 3)
    assert counts.shape == (8, 3)
    np.testing.assert_array_equal(counts[:6, 0], np.ones(6))
    assert counts.sum() == 6


def test_rasterize_accumulates_revisits():
    counts = rasterize([(0, 0), (2, 0), (0, 0)], 4, 1)
    np.testing.assert_array_equal(counts[:, 0], [2, 2, 1, 0])


def test_rasterize_clips_to_grid():
    # from outside on the left to outside on the right, through row 1
    counts = rasterize([(-3, 1), (8, 1)], 5, 3)
    np.testing.assert_array_equal(counts[:, 1], np.ones(5))
    assert counts.sum() == 5

    # entirely outside: nothing is deposited, nothing wraps
    counts = rasterize([(-5, -5), (-1, -9)], 5, 3)
    assert counts.sum() == 0


def test_rasterize_skip_first():
    counts = rasterize([(0, 0), (3, 0)], 5, 1, skip_first=True)
    np.testing.assert_array_equal(counts[:, 0], [0, 1, 1, 1, 0])

    # a pointer held still still deposits
    counts = rasterize([(2, 0), (2, 0)], 5, 1, skip_first=True)
    np.testing.assert_array_equal(counts[:, 0], [0, 0, 1, 0, 0])


def test_rasterize_empty():
    assert rasterize([], 4, 4).sum() == 0


def test_rasterize_far_samples_only_walk_the_grid():
    # samples millions of cells apart cost no more than the cells on the grid
    counts = rasterize([(-2e6, 1), (2e6, 1)], 4, 4)
    np.testing.assert_array_equal(counts[:, 1], np.ones(4))
    assert counts.sum() == 4

    counts = rasterize([(-1e6, -1e6), (1e6, 1e6)], 5, 5)
    np.testing.assert_array_equal(counts, np.eye(5, dtype=np.int32))


def test_trace_with_grid_size_stays_inside_and_connected():
    cells = trace_stroke([(-1e6, 2), (3, 2), (3, 1e6)], 6, 6)
    assert cells == [(0, 2), (1, 2), (2, 2), (3, 2), (3, 3), (3, 4), (3, 5)]
    assert _is_connected(cells)


def test_rasterize_skip_first_off_grid_sample():
    # the first sample was never deposited, so the entry cell counts
    counts = rasterize([(-10, 0), (2, 0)], 5, 1, skip_first=True)
    np.testing.assert_array_equal(counts[:, 0], [1, 1, 1, 0, 0])


def test_rasterize_leaving_and_returning():
    counts = rasterize([(2, 0), (-1e6, 0), (2, 0)], 5, 1)
    np.testing.assert_array_equal(counts[:, 0], [2, 2, 2, 0, 0])
