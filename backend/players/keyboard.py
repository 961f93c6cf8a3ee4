"""
Translate raw device input (key names, touch swipes) into directions.
"""

from typing import Dict, Optional, Tuple

from domain.constants import UP, DOWN, LEFT, RIGHT

# Minimum travel in pixels before a swipe counts
SWIPE_THRESHOLD = 25

KEY_BINDINGS: Dict[str, Tuple[int, int]] = {
    "ARROWUP": UP,
    "ARROWDOWN": DOWN,
    "ARROWLEFT": LEFT,
    "ARROWRIGHT": RIGHT,
    "W": UP,
    "S": DOWN,
    "A": LEFT,
    "D": RIGHT,
}


def direction_for_key(key: str) -> Optional[Tuple[int, int]]:
    """Map a DOM-style key name ('ArrowUp', 'w', ...) to a direction."""
    if not key:
        return None
    return KEY_BINDINGS.get(key.strip().upper())


def direction_for_swipe(
    dx: float,
    dy: float,
    threshold: float = SWIPE_THRESHOLD,
) -> Optional[Tuple[int, int]]:
    """
    Map a swipe delta to a direction along its dominant axis.

    Screen y grows downward, so a positive dy is DOWN. Returns None when the
    swipe is shorter than the threshold.
    """
    if abs(dx) > abs(dy):
        if abs(dx) <= threshold:
            return None
        return RIGHT if dx > 0 else LEFT

    if abs(dy) <= threshold:
        return None
    return DOWN if dy > 0 else UP
