"""
Input sources for SnakeNeon.

This module contains the player abstraction, the random autopilot used by the
headless runner, and the key/swipe translation used by the HTTP shell.
"""

from .base import Player
from .random_player import RandomPlayer
from .keyboard import KEY_BINDINGS, SWIPE_THRESHOLD, direction_for_key, direction_for_swipe

__all__ = [
    'Player',
    'RandomPlayer',
    'KEY_BINDINGS',
    'SWIPE_THRESHOLD',
    'direction_for_key',
    'direction_for_swipe',
]
