"""
Playfield dimensions and the derived world scale
"""

import math
from dataclasses import dataclass

from .utils import clamp


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"Viewport {name} must be a positive finite number, got {value!r}")

    @property
    def world_scale(self) -> float:
        """Size/speed multiplier keyed to the smaller screen dimension"""
        return clamp(min(self.width, self.height) / 900.0, 0.9, 1.35)
