"""
Pure movement and placement rules.

Kept free of simulator state so the reversal check, the boundary handling and
the tail-vacancy tie-break can be tested on their own.
"""

import random
from typing import Collection, List, Optional, Sequence, Tuple, Union

from .constants import (
    DIRECTION_NAMES,
    INITIAL_SNAKE_LENGTH,
    MAX_PLACEMENT_ATTEMPTS,
    RIGHT,
    VALID_MOVES,
)

Position = Tuple[int, int]
Direction = Tuple[int, int]


def resolve_direction(value: Union[str, Sequence[int]]) -> Direction:
    """
    Turn a direction name ('UP', 'left', ...) or a (dx, dy) pair into one of
    the four unit vectors.

    Raises:
        ValueError: if the value is not one of the four directions.
    """
    if isinstance(value, str):
        key = value.strip().upper()
        if key not in DIRECTION_NAMES:
            raise ValueError(
                f"Unknown direction '{value}'. Expected one of {', '.join(DIRECTION_NAMES)}"
            )
        return DIRECTION_NAMES[key]

    try:
        vector = (int(value[0]), int(value[1]))
    except (TypeError, IndexError, ValueError):
        raise ValueError(f"Invalid direction vector {value!r}") from None
    if len(value) != 2 or vector not in VALID_MOVES:
        raise ValueError(f"Direction {value!r} is not a unit vector")
    return vector


def direction_name(direction: Direction) -> str:
    for name, vector in DIRECTION_NAMES.items():
        if vector == direction:
            return name
    raise ValueError(f"Direction {direction!r} is not a unit vector")


def is_reverse(requested: Direction, current: Direction) -> bool:
    """True if requested is the exact opposite of current."""
    return requested[0] == -current[0] and requested[1] == -current[1]


def step(position: Position, direction: Direction) -> Position:
    return (position[0] + direction[0], position[1] + direction[1])


def in_bounds(position: Position, grid_size: int) -> bool:
    x, y = position
    return 0 <= x < grid_size and 0 <= y < grid_size


def wrap_position(position: Position, grid_size: int) -> Position:
    """Wrap each axis independently: N -> 0, -1 -> N - 1."""
    return (position[0] % grid_size, position[1] % grid_size)


def collision_body(body: Sequence[Position], grows: bool) -> Sequence[Position]:
    """
    Cells the new head must not enter.

    The tail cell is vacated in the same step the head moves, so it only
    counts when the snake grows this tick.
    """
    if grows:
        return body
    return body[:-1]


def starting_snake(grid_size: int) -> List[Position]:
    """Head at (N // 3, N // 3), body trailing to the left, facing RIGHT."""
    start = grid_size // 3
    return [
        (start - i * RIGHT[0], start - i * RIGHT[1])
        for i in range(INITIAL_SNAKE_LENGTH)
    ]


def free_cells(grid_size: int, occupied: Collection[Position]) -> List[Position]:
    blocked = set(occupied)
    return [
        (x, y)
        for y in range(grid_size)
        for x in range(grid_size)
        if (x, y) not in blocked
    ]


def random_free_cell(
    grid_size: int,
    occupied: Collection[Position],
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_PLACEMENT_ATTEMPTS,
) -> Optional[Position]:
    """
    Return a uniformly random cell not in occupied, or None if the board is full.

    Uses rejection sampling for up to max_attempts draws, then picks from the
    explicit list of free cells so dense boards still terminate.
    """
    rng = rng or random
    blocked = occupied if isinstance(occupied, (set, frozenset)) else set(occupied)
    if len(blocked) >= grid_size * grid_size:
        return None

    for _ in range(max_attempts):
        cell = (rng.randrange(grid_size), rng.randrange(grid_size))
        if cell not in blocked:
            return cell

    remaining = free_cells(grid_size, blocked)
    if not remaining:
        return None
    return rng.choice(remaining)
