import dataclasses
import json

import pytest

from ink_diffuser import InkParams, InvalidParams
from ink_diffuser.config import load_params, save_params


def test_defaults_are_valid():
    p = InkParams()
    assert p.capacity == 1.0
    assert 0.0 <= p.diffusion_fraction <= 1.0 / 8.0
    assert p.value_cutoff == 0.0
    assert isinstance(p.ink_rgb, tuple)


def test_params_are_frozen():
    p = InkParams()
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.capacity = 3.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"capacity": -1.0},
        {"decay_rate": -0.1},
        {"deposit_amount": -2.0},
        {"diffusion_fraction": 0.2},
        {"diffusion_fraction": -0.01},
        {"value_cutoff": -1e-3},
        {"opacity": 0.0},
        {"capacity": float("nan")},
        {"decay_rate": float("inf")},
        {"ink_rgb": (0.0, 0.0)},
        {"paper_rgb": (1.0, 1.5, 1.0)},
    ],
)
def test_invalid_params(kwargs):
    with pytest.raises(InvalidParams):
        InkParams(**kwargs)


def test_invalid_params_is_value_error():
    with pytest.raises(ValueError):
        InkParams(opacity=-1.0)


def test_kept_fraction():
    assert InkParams(diffusion_fraction=0.1).kept_fraction == pytest.approx(0.2)
    assert InkParams(diffusion_fraction=0.125).kept_fraction == pytest.approx(0.0)
    assert InkParams(diffusion_fraction=0.0).kept_fraction == pytest.approx(1.0)


def test_from_dict_merges_defaults():
    p = InkParams.from_dict({"capacity": 2, "unknown_key": 1, "ink_rgb": [0.1, 0.2, 0.3]})
    assert p.capacity == 2.0
    assert isinstance(p.capacity, float)
    assert p.ink_rgb == (0.1, 0.2, 0.3)
    assert p.decay_rate == InkParams().decay_rate


def test_save_and_load_params(tmp_path):
    path = save_params(InkParams(capacity=3.0, decay_rate=0.25), tmp_path / "cfg" / "ink.json")
    assert json.loads(path.read_text())["capacity"] == 3.0
    p = load_params(path)
    assert p.capacity == 3.0
    assert p.decay_rate == 0.25


def test_load_params_missing_file(tmp_path):
    assert load_params(tmp_path / "nope.json") == InkParams()
    assert load_params(None) == InkParams()


def test_load_params_rejects_non_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_params(path)
