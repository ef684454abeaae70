"""Load/save InkParams as JSON. Missing keys keep their defaults, unknown keys are ignored."""

import json
import logging
from pathlib import Path

from .brush.configs import InkParams

_logger = logging.getLogger(__name__)


def load_params(path: Path | str | None = None) -> InkParams:
    """Return InkParams from a JSON file, or the defaults if path is None or missing."""
    if path is None:
        return InkParams()
    p = Path(path)
    if not p.exists():
        _logger.warning("Config %s not found, using defaults", p)
        return InkParams()
    with open(p, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config {p} must hold a JSON object, got {type(data).__name__}")
    return InkParams.from_dict(data)


def save_params(params: InkParams, path: Path | str) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w") as f:
        json.dump(params.to_dict(), f, indent=2)
    return p
