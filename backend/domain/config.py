"""
Round configuration: difficulty levels, speed tiers and the resolved
per-round settings handed to the simulator.
"""

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Union

from .constants import (
    DESKTOP_TILE_COUNT,
    INITIAL_SNAKE_LENGTH,
    MOBILE_TILE_COUNT,
    OBSTACLE_RATIO,
)


class RoundConfigError(ValueError):
    """Raised when a configuration cannot hold the snake, obstacles and food."""


class BoundaryPolicy(str, Enum):
    WRAP = "wrap"
    LETHAL = "lethal"


class Difficulty(IntEnum):
    LEVEL_1 = 1  # Pass-through walls, no obstacles
    LEVEL_2 = 2  # Lethal walls, no obstacles
    LEVEL_3 = 3  # Pass-through walls, with obstacles
    LEVEL_4 = 4  # Lethal walls, with obstacles

    @property
    def boundary_policy(self) -> BoundaryPolicy:
        if self in (Difficulty.LEVEL_2, Difficulty.LEVEL_4):
            return BoundaryPolicy.LETHAL
        return BoundaryPolicy.WRAP

    @property
    def obstacles_enabled(self) -> bool:
        return self in (Difficulty.LEVEL_3, Difficulty.LEVEL_4)


class Speed(IntEnum):
    """Tick period in milliseconds."""
    EASY = 150
    NORMAL = 100
    HARD = 60


DIFFICULTY_LABELS: Dict[Difficulty, str] = {
    Difficulty.LEVEL_1: "Ghost Walls",
    Difficulty.LEVEL_2: "Steel Borders",
    Difficulty.LEVEL_3: "Lethal Spikes",
    Difficulty.LEVEL_4: "Hardcore Mode",
}

SPEED_LABELS: Dict[Speed, str] = {
    Speed.EASY: "Slow Velocity",
    Speed.NORMAL: "Standard Speed",
    Speed.HARD: "Turbo Reflex",
}

LAYOUT_GRID_SIZES = {
    "desktop": DESKTOP_TILE_COUNT,
    "mobile": MOBILE_TILE_COUNT,
}


def parse_difficulty(value: Union[int, str, Difficulty]) -> Difficulty:
    """Accept 1-4 (int or numeric string) or a member name like 'LEVEL_3'."""
    if isinstance(value, Difficulty):
        return value
    if isinstance(value, str):
        raw = value.strip().upper()
        if raw in Difficulty.__members__:
            return Difficulty[raw]
        if not raw.isdigit():
            raise ValueError(f"Unknown difficulty '{value}'")
        value = int(raw)
    try:
        return Difficulty(value)
    except ValueError:
        raise ValueError(f"Unknown difficulty '{value}'. Expected 1-4.") from None


def parse_speed(value: Union[int, str, Speed]) -> Speed:
    """Accept a tier name ('easy', 'normal', 'hard') or a period in ms."""
    if isinstance(value, Speed):
        return value
    if isinstance(value, str):
        raw = value.strip().upper()
        if raw in Speed.__members__:
            return Speed[raw]
        if not raw.isdigit():
            raise ValueError(f"Unknown speed '{value}'")
        value = int(raw)
    try:
        return Speed(value)
    except ValueError:
        available = ", ".join(s.name.lower() for s in Speed)
        raise ValueError(f"Unknown speed '{value}'. Available: {available}") from None


def obstacle_count(grid_size: int) -> int:
    """Number of obstacles scattered on an N x N board."""
    return math.floor(grid_size * OBSTACLE_RATIO)


@dataclass(frozen=True)
class RoundConfig:
    """
    Settings for one round. Immutable for the lifetime of the round.

    Attributes:
        grid_size: cells per side of the square board
        boundary_policy: wrap around or die at the edges
        obstacles_enabled: scatter obstacles at round start
        tick_period_ms: scheduler period; the simulator itself ignores it
    """

    grid_size: int = DESKTOP_TILE_COUNT
    boundary_policy: BoundaryPolicy = BoundaryPolicy.WRAP
    obstacles_enabled: bool = False
    tick_period_ms: int = Speed.NORMAL.value

    @classmethod
    def from_settings(
        cls,
        difficulty: Union[int, str, Difficulty] = Difficulty.LEVEL_1,
        speed: Union[int, str, Speed] = Speed.NORMAL,
        grid_size: int = DESKTOP_TILE_COUNT,
    ) -> "RoundConfig":
        level = parse_difficulty(difficulty)
        tier = parse_speed(speed)
        return cls(
            grid_size=grid_size,
            boundary_policy=level.boundary_policy,
            obstacles_enabled=level.obstacles_enabled,
            tick_period_ms=tier.value,
        )

    @property
    def wraps(self) -> bool:
        return self.boundary_policy == BoundaryPolicy.WRAP

    @property
    def tick_period_seconds(self) -> float:
        return self.tick_period_ms / 1000.0

    def validate(self) -> None:
        """
        Reject configurations the simulator cannot start.

        Raises:
            RoundConfigError: if the starting snake does not fit, or the board
                has no room for snake + obstacles + food.
        """
        if not isinstance(self.grid_size, int) or isinstance(self.grid_size, bool):
            raise RoundConfigError(f"grid_size must be an int, got {self.grid_size!r}")
        if self.tick_period_ms <= 0:
            raise RoundConfigError(f"tick_period_ms must be positive, got {self.tick_period_ms}")

        # The tail sits two cells left of N // 3
        if self.grid_size // 3 < INITIAL_SNAKE_LENGTH - 1:
            raise RoundConfigError(
                f"Grid size {self.grid_size} is too small for the starting snake"
            )

        obstacles = obstacle_count(self.grid_size) if self.obstacles_enabled else 0
        needed = INITIAL_SNAKE_LENGTH + obstacles + 1
        if needed > self.grid_size * self.grid_size:
            raise RoundConfigError(
                f"Grid size {self.grid_size} cannot hold {INITIAL_SNAKE_LENGTH} snake cells, "
                f"{obstacles} obstacles and food"
            )
