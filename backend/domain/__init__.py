"""
Domain entities for the SnakeNeon round simulator.

This module contains the core game entities that are independent of
infrastructure concerns (database, HTTP, timers, audio).
"""

from .constants import UP, DOWN, LEFT, RIGHT, VALID_MOVES, DIRECTION_NAMES, FOOD_SCORE
from .config import (
    BoundaryPolicy,
    Difficulty,
    Speed,
    RoundConfig,
    RoundConfigError,
)
from .events import RoundStatus, CollisionCause, FoodConsumed, RoundEnded, TickResult
from .snake import Snake
from .game_state import RoundState

__all__ = [
    'UP', 'DOWN', 'LEFT', 'RIGHT', 'VALID_MOVES', 'DIRECTION_NAMES', 'FOOD_SCORE',
    'BoundaryPolicy', 'Difficulty', 'Speed', 'RoundConfig', 'RoundConfigError',
    'RoundStatus', 'CollisionCause', 'FoodConsumed', 'RoundEnded', 'TickResult',
    'Snake',
    'RoundState',
]
