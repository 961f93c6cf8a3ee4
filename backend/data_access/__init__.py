"""
Data access layer for SnakeNeon database operations.

This module provides functions for reading and writing the persisted
scalars: the best score and the audio mute flag.
"""

from .preferences import (
    get_best_score,
    record_score,
    is_muted,
    set_muted,
    toggle_muted
)

__all__ = [
    'get_best_score',
    'record_score',
    'is_muted',
    'set_muted',
    'toggle_muted',
]
