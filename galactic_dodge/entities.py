"""
Game entity dataclasses
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ProjectileKind(str, Enum):
    BOLT = "bolt"
    ZIGZAG = "zigzag"
    SEEKER = "seeker"
    BOUNCER = "bouncer"
    SPLITTER = "splitter"


class PowerUpType(str, Enum):
    SHIELD = "shield"
    BAZOOKA = "bazooka"
    SLOW = "slow"
    MAGNET = "magnet"
    BOMB = "bomb"


class EffectKind(str, Enum):
    BOOM = "boom"
    BURST = "burst"
    SPARK = "spark"


@dataclass
class Player:
    """Player ship"""
    x: float
    y: float
    radius: float = 10.0
    speed: float = 230.0  # px/s
    angle: float = 0.0    # facing, radians


# ----------------------------
# Projectile payloads (one per kind)
# ----------------------------

@dataclass
class ZigzagState:
    perp_x: float
    perp_y: float
    amplitude: float
    frequency: float
    phase: float = 0.0
    prev_sin: float = 0.0


@dataclass
class SeekerState:
    max_speed: float
    accel: float


@dataclass
class BouncerState:
    bounces: int
    ttl: float


@dataclass
class SplitterState:
    split_at: float
    spread: float
    elapsed: float = 0.0


Payload = Union[ZigzagState, SeekerState, BouncerState, SplitterState]

_PAYLOAD_TYPES = {
    ProjectileKind.BOLT: type(None),
    ProjectileKind.ZIGZAG: ZigzagState,
    ProjectileKind.SEEKER: SeekerState,
    ProjectileKind.BOUNCER: BouncerState,
    ProjectileKind.SPLITTER: SplitterState,
}


@dataclass
class Projectile:
    """Hostile projectile; `payload` holds the kind-specific state"""
    kind: ProjectileKind
    x: float
    y: float
    vx: float
    vy: float
    radius: float = 5.0
    color: str = "#3cff4e"
    payload: Optional[Payload] = None
    last_x: Optional[float] = None  # trail origin, previous tick
    last_y: Optional[float] = None

    def __post_init__(self):
        expected = _PAYLOAD_TYPES[self.kind]
        if not isinstance(self.payload, expected):
            raise ValueError(
                f"{self.kind.value} projectile needs {expected.__name__} payload, "
                f"got {type(self.payload).__name__}"
            )
        if self.last_x is None:
            self.last_x = self.x
        if self.last_y is None:
            self.last_y = self.y


@dataclass
class Beam:
    """Sweeping hazard rectangle with a fixed safe gap"""
    vertical: bool
    x: float
    y: float
    w: float
    h: float
    vx: float
    vy: float
    gap: float       # gap start on the axis perpendicular to the sweep
    gap_size: float
    color: str = "#ff3b3b"


@dataclass
class PowerUp:
    """Collectible power-up"""
    x: float
    y: float
    type: PowerUpType
    radius: float = 12.0
    ttl: float = 12.0
    phase: float = 0.0


@dataclass
class Rocket:
    """Player-fired countermeasure"""
    x: float
    y: float
    vx: float
    vy: float
    radius: float = 6.0
    ttl: float = 1.2


@dataclass
class Effect:
    """Visual marker with a decay timer; sparks also drift"""
    kind: EffectKind
    x: float
    y: float
    ttl: float
    radius: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    life: float = 0.0
    color: str = ""
