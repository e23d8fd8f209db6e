"""
Timed buffs measured against the gameplay clock
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import BUFF_DURATIONS


@dataclass
class BuffTimers:
    """
    Expiry stamps for shield, slow and magnet.

    A buff is active while the clock is strictly before its stamp.
    Re-activating refreshes to whichever expiry is later, so a pickup
    never shortens a running buff.
    """
    shield_until: float = 0.0
    slow_until: float = 0.0
    magnet_until: float = 0.0

    def activate(self, buff: str, clock: float, duration: Optional[float] = None) -> float:
        if buff not in BUFF_DURATIONS:
            raise ValueError(f"Unknown buff: {buff}")
        if duration is None:
            duration = BUFF_DURATIONS[buff]
        attr = f"{buff}_until"
        until = max(getattr(self, attr), clock + duration)
        setattr(self, attr, until)
        return until

    def has_shield(self, clock: float) -> bool:
        return clock < self.shield_until

    def has_slow(self, clock: float) -> bool:
        return clock < self.slow_until

    def has_magnet(self, clock: float) -> bool:
        return clock < self.magnet_until

    def remaining(self, buff: str, clock: float) -> float:
        if buff not in BUFF_DURATIONS:
            raise ValueError(f"Unknown buff: {buff}")
        return max(0.0, getattr(self, f"{buff}_until") - clock)
