"""
Run modes, the stage table and progression.

`ModeMachine` tracks which screen the game is on (menu, playing, one of
the end-of-run panels), the chosen mode and level, and the persisted
best time / unlock counter. It never touches entity pools; the
orchestrator resets those before calling `begin`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .config import LEVELS, STORAGE_KEYS
from .entities import ProjectileKind

logger = logging.getLogger("galactic_dodge.stages")


class Mode(str, Enum):
    SURVIVAL = "survival"
    STAGES = "stages"


class GameState(str, Enum):
    MENU = "menu"
    STAGE_SELECT = "stage_select"
    PLAYING = "playing"
    GAME_OVER = "game_over"
    LEVEL_CLEAR = "level_clear"
    STAGE_FAILED = "stage_failed"


@dataclass(frozen=True)
class LevelConfig:
    duration: float
    spawn_interval: float
    beam_interval: float
    weights: Mapping[str, float] = field(default_factory=dict)
    boss: bool = False

    @classmethod
    def from_dict(cls, raw: Mapping) -> "LevelConfig":
        weights = dict(raw.get("weights", {}))
        for kind, w in weights.items():
            ProjectileKind(kind)  # raises ValueError on unknown kinds
            if w < 0:
                raise ValueError(f"Negative weight for {kind}: {w}")
        level = cls(
            duration=float(raw["duration"]),
            spawn_interval=float(raw["spawn"]),
            beam_interval=float(raw["beam"]),
            weights=weights,
            boss=bool(raw.get("boss", False)),
        )
        if level.duration <= 0 or level.spawn_interval <= 0 or level.beam_interval <= 0:
            raise ValueError(f"Level durations and intervals must be positive: {raw!r}")
        return level


def load_levels(raw_levels: Sequence[Mapping] = LEVELS) -> List[LevelConfig]:
    levels = [LevelConfig.from_dict(raw) for raw in raw_levels]
    if not levels:
        raise ValueError("At least one level is required")
    return levels


# ----------------------------
# Terminal events
# ----------------------------

@dataclass(frozen=True)
class GameOverEvent:
    time: float
    best: float
    new_best: bool


@dataclass(frozen=True)
class LevelClearEvent:
    level_index: int
    has_next: bool
    unlocked_levels: int
    newly_unlocked: bool


@dataclass(frozen=True)
class StageFailedEvent:
    level_index: int
    options: tuple = ("retry", "stage_select")


RunEvent = Union[GameOverEvent, LevelClearEvent, StageFailedEvent]


@dataclass(frozen=True)
class StageEntry:
    index: int
    label: str
    unlocked: bool


# ----------------------------
# Persisted progress
# ----------------------------

class Progress:
    """Best survival time and unlocked level count, backed by a key-value store"""

    def __init__(self, store, n_levels: int):
        self.store = store
        self.n_levels = n_levels
        self.best = max(0.0, store.get_number(STORAGE_KEYS["best"], 0.0))
        unlocked = store.get_int(STORAGE_KEYS["unlocked"], 1)
        self.unlocked = unlocked if unlocked >= 1 else 1

    def record_time(self, time: float) -> bool:
        """Persist `time` if it beats the best; returns whether it did"""
        if time > self.best:
            self.best = time
            self.store.set_number(STORAGE_KEYS["best"], time)
            logger.info(f"New best survival time: {time:.1f}s")
            return True
        return False

    def unlock_after(self, level_index: int) -> bool:
        """Clearing level i unlocks i + 2 levels in total; never goes down"""
        if level_index + 1 >= self.n_levels:
            return False
        count = level_index + 2
        if count > self.unlocked:
            self.unlocked = count
            self.store.set_int(STORAGE_KEYS["unlocked"], count)
            logger.info(f"Unlocked level {count}")
            return True
        return False

    def is_unlocked(self, level_index: int) -> bool:
        return level_index < self.unlocked


# ----------------------------
# State machine
# ----------------------------

class ModeMachine:
    def __init__(self, store, levels: Optional[List[LevelConfig]] = None):
        self.levels = levels if levels is not None else load_levels()
        self.progress = Progress(store, len(self.levels))
        self.state = GameState.MENU
        self.mode = Mode.SURVIVAL
        self.last_mode = Mode.SURVIVAL
        self.level_index = 0
        self.paused = False

    @property
    def playing(self) -> bool:
        return self.state is GameState.PLAYING

    @property
    def level(self) -> Optional[LevelConfig]:
        if self.mode is Mode.STAGES:
            return self.levels[self.level_index]
        return None

    @property
    def has_next(self) -> bool:
        return self.level_index + 1 < len(self.levels)

    def set_mode(self, mode: Mode) -> None:
        self.mode = mode
        self.last_mode = mode

    def begin(self, mode: Mode, level_index: int = 0) -> None:
        """Enter PLAYING in `mode`; stage levels must already be unlocked"""
        if mode is Mode.STAGES:
            if not 0 <= level_index < len(self.levels):
                raise ValueError(f"Level index out of range: {level_index}")
            if not self.progress.is_unlocked(level_index):
                raise ValueError(f"Level {level_index + 1} is locked")
            self.level_index = level_index
        self.set_mode(mode)
        self.state = GameState.PLAYING
        self.paused = False
        logger.info(f"Run started: {mode.value}"
                    + (f" level {level_index + 1}" if mode is Mode.STAGES else ""))

    def open_stage_select(self) -> List[StageEntry]:
        self.set_mode(Mode.STAGES)
        self.state = GameState.STAGE_SELECT
        return self.stage_entries()

    def stage_entries(self) -> List[StageEntry]:
        entries = []
        for i in range(len(self.levels)):
            unlocked = self.progress.is_unlocked(i)
            label = f"Level {i + 1}" if unlocked else f"Level {i + 1} (locked)"
            entries.append(StageEntry(index=i, label=label, unlocked=unlocked))
        return entries

    def toggle_pause(self) -> bool:
        if self.state is not GameState.PLAYING:
            return self.paused
        self.paused = not self.paused
        return self.paused

    def fail(self, elapsed: float) -> RunEvent:
        """Lethal hit: game over in survival, stage failed in stages"""
        if self.mode is Mode.SURVIVAL:
            self.state = GameState.GAME_OVER
            new_best = self.progress.record_time(elapsed)
            logger.info(f"Game over at {elapsed:.1f}s (best {self.progress.best:.1f}s)")
            return GameOverEvent(time=elapsed, best=self.progress.best, new_best=new_best)
        self.state = GameState.STAGE_FAILED
        logger.info(f"Stage failed on level {self.level_index + 1}")
        return StageFailedEvent(level_index=self.level_index)

    def clear(self) -> LevelClearEvent:
        self.state = GameState.LEVEL_CLEAR
        newly = self.progress.unlock_after(self.level_index)
        logger.info(f"Level {self.level_index + 1} clear")
        return LevelClearEvent(
            level_index=self.level_index,
            has_next=self.has_next,
            unlocked_levels=self.progress.unlocked,
            newly_unlocked=newly,
        )

    # HUD labels
    @property
    def mode_label(self) -> str:
        return "SURVIVAL" if self.mode is Mode.SURVIVAL else "STAGES"

    @property
    def level_label(self) -> str:
        return "-" if self.mode is Mode.SURVIVAL else str(self.level_index + 1)

    @property
    def best_label(self) -> str:
        return f"{self.progress.best:.1f}" if self.mode is Mode.SURVIVAL else "-"

    def summary(self) -> Dict[str, object]:
        return {
            "state": self.state.value,
            "mode": self.mode.value,
            "level": self.level_index,
            "paused": self.paused,
            "best": self.progress.best,
            "unlocked": self.progress.unlocked,
        }
