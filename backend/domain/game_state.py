"""
RoundState entity - an immutable snapshot of the round at a point in time.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from .config import BoundaryPolicy
from .events import CollisionCause, RoundStatus
from .rules import direction_name

Position = Tuple[int, int]


@dataclass(frozen=True)
class RoundState:
    """
    A snapshot of the round after a tick.

    Attributes:
        snake: tuple of (x, y) from head to tail
        food: (x, y) of the single food item; None only once the board is full
        obstacles: frozenset of (x, y), fixed for the round
        direction: direction applied on the last tick
        pending_direction: direction queued for the next tick
        score: points collected so far
        status: playing, paused or ended
        grid_size: cells per side
        boundary_policy: wrap or lethal edges
        tick_number: ticks applied so far (0-based)
        end_cause: why the round ended, None while it is still running
    """

    snake: Tuple[Position, ...]
    food: Optional[Position]
    obstacles: FrozenSet[Position]
    direction: Tuple[int, int]
    pending_direction: Tuple[int, int]
    score: int
    status: RoundStatus
    grid_size: int
    boundary_policy: BoundaryPolicy
    tick_number: int = 0
    end_cause: Optional[CollisionCause] = None

    @property
    def head(self) -> Position:
        return self.snake[0]

    @property
    def length(self) -> int:
        return len(self.snake)

    @property
    def is_over(self) -> bool:
        return self.status == RoundStatus.ENDED

    def print_board(self) -> str:
        """
        Returns a string representation of the board with:
        . = empty space
        F = food
        # = obstacle
        H = snake head
        o = snake body
        Row 0 is printed first since y grows downward.
        """
        board = [['.' for _ in range(self.grid_size)] for _ in range(self.grid_size)]

        for ox, oy in self.obstacles:
            board[oy][ox] = '#'

        if self.food is not None:
            fx, fy = self.food
            board[fy][fx] = 'F'

        for pos_idx, (x, y) in enumerate(self.snake):
            board[y][x] = 'H' if pos_idx == 0 else 'o'

        result = []
        for y in range(self.grid_size):
            result.append(f"{y:2d} {' '.join(board[y])}")

        # Only the last digit fits under each column
        result.append("   " + " ".join(str(i % 10) for i in range(self.grid_size)))

        return "\n".join(result)

    def to_dict(self) -> dict:
        """JSON-friendly form; positions become [x, y] lists."""
        return {
            "snake": [list(p) for p in self.snake],
            "food": list(self.food) if self.food is not None else None,
            "obstacles": sorted(list(p) for p in self.obstacles),
            "direction": direction_name(self.direction),
            "pending_direction": direction_name(self.pending_direction),
            "score": self.score,
            "status": self.status.value,
            "grid_size": self.grid_size,
            "boundary_policy": self.boundary_policy.value,
            "tick_number": self.tick_number,
            "end_cause": self.end_cause.value if self.end_cause else None,
        }

    def __repr__(self):
        return (
            f"<RoundState tick={self.tick_number}, status={self.status.value}, "
            f"length={len(self.snake)}, food={self.food}, score={self.score}>"
        )
