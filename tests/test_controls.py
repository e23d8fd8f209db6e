"""Unit tests for the input adapter."""

from __future__ import annotations

import pytest

from galactic_dodge.controls import InputAdapter, InputSnapshot


pytestmark = pytest.mark.unit


class TestSnapshot:
    def test_non_finite_axes_dropped(self):
        snap = InputSnapshot(float("nan"), float("inf"))
        assert (snap.move_x, snap.move_y) == (0.0, 0.0)

    def test_immutable(self):
        snap = InputSnapshot()
        with pytest.raises(AttributeError):
            snap.fire = True


class TestKeyboard:
    def test_wasd_and_arrows(self):
        a = InputAdapter()
        a.key_down("KeyW")
        a.key_down("ArrowRight")
        assert a.movement() == (1.0, -1.0)
        a.key_up("KeyW")
        assert a.movement() == (1.0, 0.0)

    def test_opposite_keys_cancel(self):
        a = InputAdapter()
        a.key_down("KeyA")
        a.key_down("KeyD")
        assert a.movement() == (0.0, 0.0)

    def test_duplicate_bindings_count_once(self):
        a = InputAdapter()
        a.key_down("KeyS")
        a.key_down("ArrowDown")
        assert a.movement() == (0.0, 1.0)

    def test_space_latches_start_and_fire(self):
        a = InputAdapter()
        a.key_down("Space")
        snap = a.snapshot()
        assert snap.start and snap.fire and not snap.pause

    def test_restart_and_pause_keys(self):
        a = InputAdapter()
        a.key_down("KeyR")
        a.key_down("KeyP")
        snap = a.snapshot()
        assert snap.start and snap.pause and not snap.fire

    def test_triggers_consumed_by_snapshot(self):
        a = InputAdapter()
        a.fire()
        assert a.snapshot().fire
        assert not a.snapshot().fire

    def test_held_movement_persists(self):
        a = InputAdapter()
        a.key_down("KeyD")
        a.snapshot()
        assert a.snapshot().move_x == 1.0


class TestJoystick:
    def test_scaled_and_clamped(self):
        a = InputAdapter(joy_max=40.0)
        a.joystick(20.0, -100.0)
        assert a.movement() == (0.5, -1.0)

    def test_adds_to_keys(self):
        a = InputAdapter(joy_max=40.0)
        a.key_down("KeyD")
        a.joystick(40.0, 0.0)
        assert a.movement() == (2.0, 0.0)

    def test_release(self):
        a = InputAdapter()
        a.joystick(10.0, 10.0)
        a.release_joystick()
        assert a.movement() == (0.0, 0.0)

    def test_nan_offset_ignored(self):
        a = InputAdapter()
        a.joystick(float("nan"), 0.0)
        assert a.movement() == (0.0, 0.0)
