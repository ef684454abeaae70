import math
from dataclasses import dataclass, field, fields
from typing import Tuple

from ..errors import InvalidParams

# Above 1/8 the overflowing cell would have to give away more than its excess.
MAX_DIFFUSION_FRACTION = 1.0 / 8.0


@dataclass(frozen=True)
class InkParams:
    """Constants of the ink simulation. Fixed for the lifetime of an engine."""

    # --- [NORMAL] Ink Behavior ---
    capacity: float = field(default=1.0, metadata={"help": "Ink a cell holds before it overflows into its neighbors.", "category": "Normal", "min": 0.0, "max": 10.0})
    deposit_amount: float = field(default=2.0, metadata={"help": "Ink added to every cell a stroke passes over.", "category": "Normal", "min": 0.0, "max": 20.0})
    diffusion_fraction: float = field(default=0.1, metadata={"help": "Share of the excess sent to each of the 8 neighbors.", "category": "Normal", "min": 0.0, "max": MAX_DIFFUSION_FRACTION})
    decay_rate: float = field(default=0.005, metadata={"help": "Ink removed from every non-empty cell per tick.", "category": "Normal", "min": 0.0, "max": 1.0})

    # --- [NORMAL] Visuals ---
    ink_rgb: Tuple[float, float, float] = field(default=(0.05, 0.05, 0.12), metadata={"help": "Color of saturated ink (normalized RGB).", "category": "Normal"})
    paper_rgb: Tuple[float, float, float] = field(default=(1.0, 1.0, 1.0), metadata={"help": "Color of an empty cell (normalized RGB).", "category": "Normal"})

    # --- [ADVANCED] ---
    opacity: float = field(default=2.0, metadata={"help": "How quickly ink darkens towards the ink color.", "category": "Advanced", "min": 0.01, "max": 20.0})
    value_cutoff: float = field(default=0.0, metadata={"help": "Cells at or below this amount after decay are emptied.", "category": "Advanced", "min": 0.0, "max": 1.0})

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.endswith("_rgb"):
                if len(value) != 3 or not all(math.isfinite(c) and 0.0 <= c <= 1.0 for c in value):
                    raise InvalidParams(f"{f.name} must be three components in [0, 1], got {value!r}")
                object.__setattr__(self, f.name, tuple(float(c) for c in value))
                continue
            if not math.isfinite(value):
                raise InvalidParams(f"{f.name} must be finite, got {value!r}")
            object.__setattr__(self, f.name, float(value))

        for name in ("capacity", "deposit_amount", "decay_rate", "value_cutoff"):
            if getattr(self, name) < 0.0:
                raise InvalidParams(f"{name} must be non-negative, got {getattr(self, name)}")
        if not 0.0 <= self.diffusion_fraction <= MAX_DIFFUSION_FRACTION:
            raise InvalidParams(
                f"diffusion_fraction must lie in [0, 1/8], got {self.diffusion_fraction}"
            )
        if self.opacity <= 0.0:
            raise InvalidParams(f"opacity must be positive, got {self.opacity}")

    @property
    def kept_fraction(self) -> float:
        """Share of the excess an overflowing cell keeps for itself."""
        return 1.0 - 8.0 * self.diffusion_fraction

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "InkParams":
        """Build from a mapping; unknown keys are ignored, missing keys keep defaults."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
