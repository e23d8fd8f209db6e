"""
Gameplay configuration for Galactic Dodge
Tuning constants for survival ramp, power-ups, rockets and the stage table
"""

# Environment / viewport parameters
ENV_CONFIG = {
    "width": 900,
    "height": 900,
    "dt": 1 / 60,
    "max_dt": 0.033,      # frame delta cap (seconds)
    "max_steps": 10800,   # 3 minutes at 60 FPS
    "k_projectiles": 6,
    "n_beams": 2,
    "m_powerups": 2,
}

# Player (all sizes/speeds multiplied by world scale)
PLAYER_CONFIG = {
    "radius": 10.0,
    "speed": 230.0,       # px/s
}

# ==============================================================================
# SURVIVAL DIFFICULTY RAMP
# ==============================================================================

SURVIVAL_CONFIG = {
    "ramp_seconds": 90.0,
    "spawn_interval_start": 1.0,
    "spawn_interval_drop": 0.6,
    "spawn_interval_min": 0.28,
    "beam_interval_start": 5.0,
    "beam_interval_drop": 2.6,
    "beam_interval_min": 2.4,
    # Values used right after a reset, before the first step recomputes them
    "initial_spawn_interval": 0.95,
    "initial_beam_interval": 5.0,
}

# Kind -> (unlock time in seconds, base weight, weight gain at d=1)
SURVIVAL_WEIGHTS = {
    "bolt": (0.0, 1.0, -0.5),
    "zigzag": (8.0, 0.3, 0.6),
    "seeker": (12.0, 0.2, 0.6),
    "bouncer": (18.0, 0.15, 0.5),
}

PROJECTILE_CONFIG = {
    "edge_margin": 8.0,
    "despawn_margin": 30.0,
    "radius": 5.0,
    "bouncer_radius": 6.0,
    "split_speed_factor": 0.92,
    "slow_factor": 0.35,
}

BEAM_CONFIG = {
    "despawn_margin": 80.0,
    "gap_edge_margin": 40.0,
}

# ==============================================================================
# POWER-UPS, BUFFS AND ROCKETS
# ==============================================================================

POWERUP_CONFIG = {
    "interval": 7.0,
    "interval_decay": 0.01,   # per second of survival time
    "interval_min": 4.0,
    "first_spawn_head_start": 2.0,
    "ttl": 12.0,
    "radius": 12.0,
    "spawn_margin": 30.0,
    "phase_speed": 2.2,
    "magnet_pull": 300.0,
    "magnet_bonus_radius": 80.0,
    "bazooka_ammo": 2,
}

# Type -> probability mass, in draw order
POWERUP_WEIGHTS = {
    "bomb": 0.20,
    "shield": 0.30,
    "bazooka": 0.25,
    "slow": 0.15,
    "magnet": 0.10,
}

BUFF_DURATIONS = {
    "shield": 3.0,
    "slow": 3.0,
    "magnet": 10.0,
}

ROCKET_CONFIG = {
    "speed": 520.0,
    "radius": 6.0,
    "ttl": 1.2,
    "despawn_margin": 40.0,
    "beam_boom_radius": 60.0,   # drawn
    "beam_blast_radius": 70.0,  # clears projectiles
    "expire_blast_radius": 40.0,
}

EFFECT_CONFIG = {
    "spark_drag": 0.985,
    "boom_ttl": 0.22,
    "bomb_ttl": 0.35,
    "pickup_burst_ttl": 0.25,
    "split_burst_ttl": 0.2,
}

# ==============================================================================
# STAGES
# ==============================================================================

LEVELS = [
    # 1: bolts and beams only
    {"duration": 20, "spawn": 0.95, "beam": 4.6, "weights": {"bolt": 1.0}},
    # 2: zigzag joins
    {"duration": 24, "spawn": 0.85, "beam": 4.2, "weights": {"bolt": 1.0, "zigzag": 0.3}},
    {"duration": 26, "spawn": 0.78, "beam": 3.9, "weights": {"bolt": 0.9, "zigzag": 0.7}},
    # 4: seekers unlocked
    {"duration": 28, "spawn": 0.7, "beam": 3.6, "weights": {"bolt": 0.8, "zigzag": 0.8, "seeker": 0.25}},
    {"duration": 30, "spawn": 0.62, "beam": 3.2, "weights": {"bolt": 0.7, "zigzag": 0.9, "seeker": 0.45}},
    # 6: bouncers
    {"duration": 32, "spawn": 0.56, "beam": 3.0,
     "weights": {"bolt": 0.65, "zigzag": 0.95, "seeker": 0.5, "bouncer": 0.2}},
    {"duration": 34, "spawn": 0.5, "beam": 2.8,
     "weights": {"bolt": 0.55, "zigzag": 1.05, "seeker": 0.6, "bouncer": 0.35}},
    # 8: splitters
    {"duration": 36, "spawn": 0.46, "beam": 2.7,
     "weights": {"bolt": 0.5, "zigzag": 1.0, "seeker": 0.7, "bouncer": 0.4, "splitter": 0.4}},
    {"duration": 38, "spawn": 0.42, "beam": 2.6,
     "weights": {"bolt": 0.45, "zigzag": 1.1, "seeker": 0.8, "bouncer": 0.45, "splitter": 0.6}},
    # 10: boss stage
    {"duration": 999, "spawn": 0.6, "beam": 3.0, "weights": {}, "boss": True},
]

BOSS_STARTING_AMMO = 4

# Stage-mode burst policy
STAGE_BURST_CONFIG = {
    "warmup_seconds": 6.0,
    "double_chance": 0.5,
}

# ==============================================================================
# PERSISTENCE
# ==============================================================================

STORAGE_KEYS = {
    "best": "dodge_highscore",
    "unlocked": "dodge_unlocked_levels",
}

# ==============================================================================
# ENV REWARD SHAPING
# ==============================================================================

REWARD_CONFIG = {
    "R_ALIVE": 1.0,       # multiplied by dt
    "R_PICKUP": 0.5,
    "R_BEAM_KILL": 0.3,
    "R_CLEAR": 5.0,
    "R_DEATH": 5.0,
}
