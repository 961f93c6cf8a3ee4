"""
Round status, collision causes and the events emitted by a tick.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .game_state import RoundState


class RoundStatus(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


class CollisionCause(str, Enum):
    WALL = "wall"
    SELF = "self"
    OBSTACLE = "obstacle"
    # Growth filled every free cell; no place left for food
    BOARD_FULL = "board_full"


@dataclass(frozen=True)
class FoodConsumed:
    position: Tuple[int, int]
    score: int

    def to_dict(self) -> dict:
        return {"type": "food_consumed", "position": list(self.position), "score": self.score}


@dataclass(frozen=True)
class RoundEnded:
    cause: CollisionCause
    score: int

    def to_dict(self) -> dict:
        return {"type": "round_ended", "cause": self.cause.value, "score": self.score}


RoundEvent = Union[FoodConsumed, RoundEnded]


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick: the new snapshot and at most one event."""

    state: "RoundState"
    event: Optional[RoundEvent] = None

    @property
    def ended(self) -> bool:
        return isinstance(self.event, RoundEnded)

    def to_dict(self) -> dict:
        return {
            "state": self.state.to_dict(),
            "event": self.event.to_dict() if self.event is not None else None,
        }
