"""
Arcade window that draws a simulation snapshot.

Arcade's y axis points up, the simulation's points down; every draw call
flips y against the window height.
"""

import math
from typing import Tuple

import arcade

from .simulation import Snapshot

Color = Tuple[int, int, int]

POWERUP_COLORS = {
    "shield": (120, 220, 255),
    "bazooka": (255, 200, 120),
    "slow": (210, 160, 255),
    "magnet": (160, 255, 160),
    "bomb": (255, 120, 160),
}


def _rgb(color: str, fallback: Color = (230, 240, 255)) -> Color:
    """'#rrggbb' or 'rgba(r,g,b,a)' -> (r, g, b)"""
    if color.startswith("#") and len(color) == 7:
        return tuple(int(color[i:i + 2], 16) for i in (1, 3, 5))  # type: ignore
    if color.startswith("rgba(") or color.startswith("rgb("):
        parts = color[color.index("(") + 1:-1].split(",")
        return tuple(int(float(v)) for v in parts[:3])  # type: ignore
    return fallback


class DodgeWindow(arcade.Window):
    """Arcade window for rendering dodge snapshots"""

    def __init__(self, width: int, height: int):
        super().__init__(width, height, "Galactic Dodge - Arcade")
        self.snapshot: Snapshot = None  # type: ignore

        # Colors
        self.BG = (6, 8, 18)
        self.PLAYER_C = (207, 233, 255)
        self.SHIELD_C = (189, 246, 255)
        self.ROCKET_C = (255, 210, 184)
        self.BOOM_C = (255, 190, 150)
        self.BURST_C = (120, 220, 255)
        self.HUD_C = (230, 241, 255)

    def show(self, snapshot: Snapshot):
        """Draw one frame and keep the window responsive"""
        self.snapshot = snapshot
        self.dispatch_events()
        self.on_draw()
        self.flip()

    def on_draw(self):
        self.clear()
        arcade.set_background_color(self.BG)
        snap = self.snapshot
        if snap is None:
            return
        H = self.height

        # Beams: two solid pieces either side of the gap
        for bm in snap.beams:
            c = _rgb(bm.color)
            if bm.vertical:
                arcade.draw_lrbt_rectangle_filled(bm.x, bm.x + bm.w, H - bm.gap, H, c)
                arcade.draw_lrbt_rectangle_filled(bm.x, bm.x + bm.w, 0, H - (bm.gap + bm.gap_size), c)
            else:
                top, bottom = H - bm.y, H - (bm.y + bm.h)
                arcade.draw_lrbt_rectangle_filled(0, bm.gap, bottom, top, c)
                arcade.draw_lrbt_rectangle_filled(bm.gap + bm.gap_size, self.width, bottom, top, c)

        # Projectiles with a short trail from last position
        for b in snap.projectiles:
            c = _rgb(b.color)
            arcade.draw_line(b.last_x, H - b.last_y, b.x, H - b.y, c, 2)
            arcade.draw_circle_filled(b.x, H - b.y, b.radius, c)

        # Power-ups bob on their phase
        for p in snap.powerups:
            bob = math.sin(p.phase) * 2.5
            arcade.draw_circle_filled(p.x, H - (p.y + bob), p.radius, POWERUP_COLORS[p.type.value])

        for r in snap.rockets:
            arcade.draw_circle_filled(r.x, H - r.y, r.radius, self.ROCKET_C)

        for e in snap.effects:
            if e.kind.value == "spark":
                arcade.draw_line(e.x, H - e.y, e.x - e.vx * 0.03, H - (e.y - e.vy * 0.03), _rgb(e.color), 1.6)
            else:
                c = self.BOOM_C if e.kind.value == "boom" else self.BURST_C
                arcade.draw_circle_outline(e.x, H - e.y, e.radius, c, 2)

        # Player ship as a nose-forward triangle
        pl = snap.player
        nose = (pl.x + math.cos(pl.angle) * pl.radius * 1.8, H - (pl.y + math.sin(pl.angle) * pl.radius * 1.8))
        left = (pl.x + math.cos(pl.angle + 2.5) * pl.radius, H - (pl.y + math.sin(pl.angle + 2.5) * pl.radius))
        right = (pl.x + math.cos(pl.angle - 2.5) * pl.radius, H - (pl.y + math.sin(pl.angle - 2.5) * pl.radius))
        arcade.draw_triangle_filled(*nose, *left, *right, self.PLAYER_C)
        if snap.shield_text != "-":
            arcade.draw_circle_outline(pl.x, H - pl.y, pl.radius + 9, self.SHIELD_C, 2.5)

        # Text HUD
        txt = (f"{snap.mode}  Level: {snap.level}  Time: {snap.time_text}  "
               f"Best: {snap.best_text}  Ammo: {snap.ammo}  Shield: {snap.shield_text}")
        arcade.draw_text(txt, 12, H - 24, self.HUD_C, 14)
        if snap.paused:
            arcade.draw_text("PAUSED", self.width / 2, H / 2, self.HUD_C, 28, anchor_x="center")
        elif snap.terminal is not None:
            arcade.draw_text(type(snap.terminal).__name__.replace("Event", ""),
                             self.width / 2, H / 2, self.HUD_C, 28, anchor_x="center")
