"""
Random player implementation - picks random safe moves.
"""

import random
from typing import List, Optional, Tuple

from domain.config import BoundaryPolicy
from domain.constants import UP, DOWN, LEFT, RIGHT
from domain.game_state import RoundState
from domain.rules import collision_body, in_bounds, is_reverse, step, wrap_position
from .base import Player


class RandomPlayer(Player):
    """
    An autopilot that picks a direction avoiding walls, obstacles and its own body.
    """

    name = "random"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def get_move(self, state: RoundState) -> Optional[Tuple[int, int]]:
        body = state.snake
        size = state.grid_size

        # Prefer a move straight onto food when it is safe
        valid_moves: List[Tuple[int, int]] = []
        for move in (UP, DOWN, LEFT, RIGHT):
            if is_reverse(move, state.direction):
                continue

            new_head = step(state.head, move)
            if state.boundary_policy == BoundaryPolicy.WRAP:
                new_head = wrap_position(new_head, size)
            elif not in_bounds(new_head, size):
                continue

            if new_head in state.obstacles:
                continue

            # Own body, excluding the tail which will move (unless we eat)
            grows = new_head == state.food
            if new_head in collision_body(body, grows):
                continue

            if grows:
                return move
            valid_moves.append(move)

        # No safe move: keep going, the round ends either way
        if not valid_moves:
            return None

        return self.rng.choice(valid_moves)
