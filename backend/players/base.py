"""
Base player interface for the round simulator.
"""

from typing import Optional, Tuple

from domain.game_state import RoundState


class Player:
    """
    Base class/interface for input sources that steer without a device.

    Each player looks at the latest snapshot and returns the direction it
    wants queued before the next tick.
    """

    name = "player"

    def get_move(self, state: RoundState) -> Optional[Tuple[int, int]]:
        """
        Return a direction given the current round state.

        Args:
            state: Snapshot taken after the previous tick

        Returns:
            One of UP, DOWN, LEFT, RIGHT, or None to keep the current heading
        """
        raise NotImplementedError
