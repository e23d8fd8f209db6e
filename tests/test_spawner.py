"""Unit tests for spawn cadence, weight tables and entity factories."""

from __future__ import annotations

import math
from collections import Counter

import pytest

from galactic_dodge.entities import (
    BouncerState,
    Player,
    PowerUpType,
    ProjectileKind,
    SeekerState,
    SplitterState,
    ZigzagState,
)
from galactic_dodge.spawner import (
    SpawnScheduler,
    difficulty_ratio,
    kind_counts,
    make_beam,
    make_powerup,
    make_projectile,
    pick_powerup_type,
    powerup_interval,
    stage_burst,
    stage_weights,
    survival_burst,
    survival_intervals,
    survival_weights,
)
from galactic_dodge.utils import make_rng
from galactic_dodge.viewport import Viewport


pytestmark = pytest.mark.unit


# ============================================================================
# Difficulty ramp
# ============================================================================

class TestDifficulty:
    def test_ratio_ramps_over_ninety_seconds(self):
        assert difficulty_ratio(0.0) == 0.0
        assert difficulty_ratio(45.0) == pytest.approx(0.5)
        assert difficulty_ratio(90.0) == 1.0
        assert difficulty_ratio(500.0) == 1.0

    @pytest.mark.parametrize("d", [0.0, 0.1, 0.5, 0.9, 1.0])
    def test_intervals_formula(self, d):
        spawn, beam = survival_intervals(d)
        assert spawn == pytest.approx(max(0.28, 1.0 - 0.6 * d))
        assert beam == pytest.approx(max(2.4, 5.0 - 2.6 * d))

    def test_intervals_at_full_difficulty(self):
        spawn, beam = survival_intervals(1.0)
        assert spawn == pytest.approx(0.4)
        assert beam == pytest.approx(2.4)

    def test_powerup_interval(self):
        assert powerup_interval(0.0) == 7.0
        assert powerup_interval(100.0) == pytest.approx(6.0)
        assert powerup_interval(300.0) == 4.0
        assert powerup_interval(10000.0) == 4.0


class TestWeights:
    def test_only_bolts_before_unlocks(self):
        table = dict(survival_weights(8.0, 0.0))
        assert set(table) == {ProjectileKind.BOLT}
        assert table[ProjectileKind.BOLT] == pytest.approx(1.0)

    def test_unlock_is_strictly_after(self):
        kinds = {k for k, _ in survival_weights(8.01, 0.1)}
        assert kinds == {ProjectileKind.BOLT, ProjectileKind.ZIGZAG}
        kinds = {k for k, _ in survival_weights(12.01, 0.1)}
        assert ProjectileKind.SEEKER in kinds
        assert ProjectileKind.BOUNCER not in kinds

    def test_full_table_at_max_difficulty(self):
        table = dict(survival_weights(120.0, 1.0))
        assert table[ProjectileKind.BOLT] == pytest.approx(0.5)
        assert table[ProjectileKind.ZIGZAG] == pytest.approx(0.9)
        assert table[ProjectileKind.SEEKER] == pytest.approx(0.8)
        assert table[ProjectileKind.BOUNCER] == pytest.approx(0.65)
        assert ProjectileKind.SPLITTER not in table

    def test_stage_weights_map_names(self):
        table = stage_weights({"bolt": 0.5, "splitter": 0.4})
        assert table == [(ProjectileKind.BOLT, 0.5), (ProjectileKind.SPLITTER, 0.4)]


class TestBursts:
    def test_survival_early_is_single(self, rng):
        assert all(survival_burst(0.1, rng) == 1 for _ in range(100))

    def test_survival_late_is_two_or_three(self, rng):
        draws = {survival_burst(0.95, rng) for _ in range(300)}
        assert draws == {2, 3}

    def test_survival_mid_is_one_or_two(self, rng):
        draws = {survival_burst(0.5, rng) for _ in range(300)}
        assert draws == {1, 2}

    def test_stage_warmup_single(self, rng):
        assert all(stage_burst(5.9, rng) == 1 for _ in range(100))

    def test_stage_after_warmup(self, rng):
        draws = Counter(stage_burst(10.0, rng) for _ in range(2000))
        assert set(draws) == {1, 2}
        assert draws[2] / 2000 == pytest.approx(0.5, abs=0.05)


# ============================================================================
# Scheduler
# ============================================================================

class TestScheduler:
    def test_initial_values(self):
        s = SpawnScheduler()
        assert s.projectile_interval == 0.95
        assert s.beam_interval == 5.0
        assert s.powerup_timer == 2.0

    def test_projectile_carries_remainder(self):
        s = SpawnScheduler()
        assert not s.advance(0.5, 7.0).projectile
        assert s.advance(0.5, 7.0).projectile
        assert s.projectile_timer == pytest.approx(0.05)

    def test_beam_and_powerup_carry_remainder(self):
        s = SpawnScheduler(beam_interval=1.0)
        orders = s.advance(5.25, 7.0)
        assert orders.beam and orders.powerup
        assert s.beam_timer == pytest.approx(4.25)
        assert s.powerup_timer == pytest.approx(0.25)

    def test_one_firing_per_tick(self):
        s = SpawnScheduler(projectile_interval=0.1)
        orders = s.advance(0.35, 7.0)
        assert orders.projectile
        # backlog drains over following ticks
        assert s.advance(0.0, 7.0).projectile
        assert s.advance(0.0, 7.0).projectile
        assert not s.advance(0.0, 7.0).projectile

    def test_powerup_head_start(self):
        s = SpawnScheduler()
        assert not s.advance(4.9, 7.0).powerup
        assert s.advance(0.2, 7.0).powerup


# ============================================================================
# Factories
# ============================================================================

def _aimed_at(p, player):
    tx, ty = player.x - p.x, player.y - p.y
    speed = math.hypot(p.vx, p.vy)
    cos = (p.vx * tx + p.vy * ty) / (speed * math.hypot(tx, ty))
    return cos == pytest.approx(1.0)


class TestMakeProjectile:
    @pytest.mark.parametrize("kind", list(ProjectileKind))
    def test_spawns_on_edge_aimed_at_player(self, view, rng, kind):
        player = Player(300.0, 500.0)
        for _ in range(20):
            p = make_projectile(kind, player, view, 0.5, rng)
            assert p.kind is kind
            on_edge = p.x in (-8.0, 908.0) or p.y in (-8.0, 908.0)
            assert on_edge
            assert _aimed_at(p, player)

    def test_payloads(self, view, rng):
        player = Player(450.0, 450.0)
        assert make_projectile(ProjectileKind.BOLT, player, view, 0.0, rng).payload is None
        z = make_projectile(ProjectileKind.ZIGZAG, player, view, 1.0, rng)
        assert isinstance(z.payload, ZigzagState)
        assert z.payload.amplitude == pytest.approx(40.0)
        assert z.payload.frequency == pytest.approx(5.0)
        assert math.hypot(z.payload.perp_x, z.payload.perp_y) == pytest.approx(1.0)
        assert z.payload.perp_x * z.vx + z.payload.perp_y * z.vy == pytest.approx(0.0, abs=1e-9)

    def test_seeker_starts_at_half_top_speed(self, view, rng):
        s = make_projectile(ProjectileKind.SEEKER, Player(450.0, 450.0), view, 1.0, rng)
        assert isinstance(s.payload, SeekerState)
        assert s.payload.max_speed == pytest.approx(200.0)
        assert s.payload.accel == pytest.approx(220.0)
        assert math.hypot(s.vx, s.vy) == pytest.approx(100.0)

    def test_bouncer_budget_grows_with_difficulty(self, view, rng):
        player = Player(450.0, 450.0)
        b0 = make_projectile(ProjectileKind.BOUNCER, player, view, 0.0, rng)
        b1 = make_projectile(ProjectileKind.BOUNCER, player, view, 1.0, rng)
        assert isinstance(b0.payload, BouncerState)
        assert b0.payload.bounces == 2 and b0.payload.ttl == pytest.approx(6.0)
        assert b1.payload.bounces == 5 and b1.payload.ttl == pytest.approx(9.0)
        assert b0.radius == 6.0

    def test_splitter_threshold_range(self, view, rng):
        for _ in range(50):
            s = make_projectile(ProjectileKind.SPLITTER, Player(450.0, 450.0), view, 0.5, rng)
            assert isinstance(s.payload, SplitterState)
            assert 0.9 <= s.payload.split_at <= 1.3
            assert s.payload.spread == pytest.approx(0.38)

    def test_bolt_speed_range(self, view, rng):
        for _ in range(50):
            p = make_projectile(ProjectileKind.BOLT, Player(450.0, 450.0), view, 0.0, rng)
            assert 100.0 <= math.hypot(p.vx, p.vy) <= 120.0

    def test_sizes_follow_world_scale(self, rng):
        big = Viewport(1215, 1215)
        p = make_projectile(ProjectileKind.BOLT, Player(600.0, 600.0), big, 0.0, rng)
        assert p.radius == pytest.approx(5.0 * 1.35)


class TestMakeBeam:
    def test_gap_kept_inside_edges(self, view, rng):
        corners = [Player(0.0, 0.0), Player(900.0, 900.0), Player(450.0, 450.0)]
        for player in corners:
            for _ in range(30):
                bm = make_beam(player, view, 0.0, rng)
                span = view.height if bm.vertical else view.width
                assert bm.gap >= 40.0 - 1e-9
                assert bm.gap + bm.gap_size <= span - 40.0 + 1e-9
                assert 120.0 <= bm.gap_size <= 200.0

    def test_short_playfield_gap_starts_at_edge(self, rng):
        short = Viewport(300, 200)
        player = Player(150.0, 190.0)
        squeezed = 0
        for _ in range(200):
            bm = make_beam(player, short, 0.0, rng)
            assert bm.gap >= 40.0
            if bm.vertical and short.height - 80.0 - bm.gap_size < 40.0:
                squeezed += 1
                assert bm.gap == 40.0
        assert squeezed > 0

    def test_gap_centered_on_player_when_room(self, view, rng):
        player = Player(450.0, 450.0)
        bm = make_beam(player, view, 0.0, rng)
        assert bm.gap + bm.gap_size / 2 == pytest.approx(450.0)

    def test_enters_from_outside_moving_inward(self, view, rng):
        for _ in range(40):
            bm = make_beam(Player(450.0, 450.0), view, 0.0, rng)
            if bm.vertical:
                assert bm.h == view.height
                assert (bm.x < 0 and bm.vx > 0) or (bm.x > view.width and bm.vx < 0)
            else:
                assert bm.w == view.width
                assert (bm.y < 0 and bm.vy > 0) or (bm.y > view.height and bm.vy < 0)

    def test_speed_grows_with_elapsed_and_caps(self, view, rng):
        def speed(elapsed):
            bm = make_beam(Player(450.0, 450.0), view, elapsed, rng)
            return abs(bm.vx) + abs(bm.vy)
        assert speed(0.0) == pytest.approx(160.0)
        assert speed(20.0) == pytest.approx(260.0)
        assert speed(500.0) == pytest.approx(400.0)


class TestPowerUps:
    def test_distribution(self):
        rng = make_rng(99)
        n = 20000
        counts = Counter(pick_powerup_type(rng) for _ in range(n))
        expected = {
            PowerUpType.BOMB: 0.20,
            PowerUpType.SHIELD: 0.30,
            PowerUpType.BAZOOKA: 0.25,
            PowerUpType.SLOW: 0.15,
            PowerUpType.MAGNET: 0.10,
        }
        for kind, share in expected.items():
            assert counts[kind] / n == pytest.approx(share, abs=0.015)

    def test_placed_inside_margin(self, view, rng):
        for _ in range(100):
            pu = make_powerup(view, rng)
            assert 30.0 <= pu.x <= 870.0
            assert 30.0 <= pu.y <= 870.0
            assert pu.ttl == 12.0
            assert pu.radius == 12.0


def test_kind_counts(view, rng):
    player = Player(450.0, 450.0)
    pool = [make_projectile(ProjectileKind.BOLT, player, view, 0.0, rng) for _ in range(3)]
    pool.append(make_projectile(ProjectileKind.SEEKER, player, view, 0.0, rng))
    assert kind_counts(pool) == {"bolt": 3, "seeker": 1}
