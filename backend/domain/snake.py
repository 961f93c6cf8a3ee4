"""
Snake entity for the round simulator.
"""

from collections import deque
from typing import List, Tuple


class Snake:
    """
    Represents the snake on the board.

    Attributes:
        positions: deque of (x, y) from head at index 0 to tail at the end
    """

    def __init__(self, positions: List[Tuple[int, int]]):
        if len(set(positions)) != len(positions):
            raise ValueError(f"Snake segments overlap: {positions}")
        self.positions = deque(positions)

    @property
    def head(self) -> Tuple[int, int]:
        """Return the head position (first element)."""
        return self.positions[0]

    def advance(self, new_head: Tuple[int, int], grow: bool = False) -> None:
        """Push a new head; drop the tail unless growing."""
        self.positions.appendleft(new_head)
        if not grow:
            self.positions.pop()

    def __len__(self) -> int:
        return len(self.positions)

    def __repr__(self):
        return f"<Snake length={len(self.positions)} head={self.head}>"
