"""
Input adapter: collects device events between frames and hands the
simulation one immutable snapshot per tick.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Set

from .utils import clamp

UP_KEYS = {"KeyW", "ArrowUp"}
DOWN_KEYS = {"KeyS", "ArrowDown"}
LEFT_KEYS = {"KeyA", "ArrowLeft"}
RIGHT_KEYS = {"KeyD", "ArrowRight"}


def _finite(v: float) -> float:
    return v if math.isfinite(v) else 0.0


@dataclass(frozen=True)
class InputSnapshot:
    move_x: float = 0.0
    move_y: float = 0.0
    fire: bool = False
    pause: bool = False
    start: bool = False

    def __post_init__(self):
        # non-finite axes are dropped at the boundary
        object.__setattr__(self, "move_x", _finite(float(self.move_x)))
        object.__setattr__(self, "move_y", _finite(float(self.move_y)))


class InputAdapter:
    """
    Keyboard + virtual joystick state.

    Movement is the sum of the held direction keys and the joystick
    deflection; the simulation normalizes it. Discrete triggers latch
    until the next `snapshot()` call.
    """

    def __init__(self, joy_max: float = 38.0):
        self.joy_max = joy_max
        self.keys: Set[str] = set()
        self.joy_active = False
        self.joy_dx = 0.0
        self.joy_dy = 0.0
        self._fire = False
        self._pause = False
        self._start = False

    def key_down(self, code: str) -> None:
        if code == "Space":
            # Space starts a run from menus and fires during play; the
            # simulation decides which applies
            self._start = True
            self._fire = True
        elif code == "KeyR":
            self._start = True
        elif code == "KeyP":
            self._pause = True
        self.keys.add(code)

    def key_up(self, code: str) -> None:
        self.keys.discard(code)

    def joystick(self, dx: float, dy: float) -> None:
        """Stick offset in pixels from its base; scaled to [-1, 1] per axis"""
        self.joy_active = True
        self.joy_dx = clamp(_finite(dx) / self.joy_max, -1.0, 1.0)
        self.joy_dy = clamp(_finite(dy) / self.joy_max, -1.0, 1.0)

    def release_joystick(self) -> None:
        self.joy_active = False
        self.joy_dx = self.joy_dy = 0.0

    def fire(self) -> None:
        self._fire = True

    def pause(self) -> None:
        self._pause = True

    def start(self) -> None:
        self._start = True

    def movement(self):
        ix = iy = 0.0
        if self.keys & UP_KEYS:
            iy -= 1
        if self.keys & DOWN_KEYS:
            iy += 1
        if self.keys & LEFT_KEYS:
            ix -= 1
        if self.keys & RIGHT_KEYS:
            ix += 1
        if self.joy_active:
            ix += self.joy_dx
            iy += self.joy_dy
        return ix, iy

    def snapshot(self) -> InputSnapshot:
        ix, iy = self.movement()
        snap = InputSnapshot(ix, iy, self._fire, self._pause, self._start)
        self._fire = self._pause = self._start = False
        return snap
