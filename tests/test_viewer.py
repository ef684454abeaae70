import pytest

from ink_diffuser.brush.stroke import to_cell
from ink_diffuser.viewer import cursor_to_grid


@pytest.mark.parametrize(
    "mx, expected",
    [(0.0, 0), (0.124, 0), (0.249, 0), (0.251, 1), (0.5, 2), (0.76, 3), (0.999, 3)],
)
def test_cursor_maps_to_cell_under_pointer(mx, expected):
    # on a 4 cell wide grid cell k spans [k / 4, (k + 1) / 4) of the window
    x, y = cursor_to_grid(mx, mx, 4, 4)
    assert to_cell(x, y) == (expected, expected)


def test_cell_centers_map_to_integers():
    assert cursor_to_grid(0.125, 0.75, 4, 2) == pytest.approx((0.0, 1.0))
