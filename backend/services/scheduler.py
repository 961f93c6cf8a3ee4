"""
Fixed-period tick driver.

The simulator has no notion of time; this scheduler calls tick() once per
period, asks an optional player for a direction before each tick, and stops
when the round ends. Clock and sleep are injectable so tests never wait.
"""

import logging
import time
from typing import Callable, Optional

from domain.events import RoundStatus, TickResult
from players.base import Player
from simulator import RoundSimulator

logger = logging.getLogger(__name__)


class TickScheduler:
    def __init__(
        self,
        simulator: RoundSimulator,
        period_ms: Optional[int] = None,
        player: Optional[Player] = None,
        on_tick: Optional[Callable[[TickResult], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if period_ms is None:
            if simulator.config is None:
                raise ValueError("period_ms is required before the round is initialized")
            period = simulator.config.tick_period_seconds
        elif period_ms < 0:
            raise ValueError(f"period_ms must be non-negative, got {period_ms}")
        else:
            period = period_ms / 1000.0

        self.simulator = simulator
        self.period = period
        self.player = player
        self.on_tick = on_tick
        self.clock = clock
        self.sleep = sleep
        self.ticks_delivered = 0
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    def pause(self) -> None:
        self.simulator.pause()

    def resume(self) -> None:
        self.simulator.resume()

    def run(self, max_ticks: Optional[int] = None) -> Optional[TickResult]:
        """
        Deliver ticks until the round ends, stop() is called or max_ticks
        ticks have been delivered.

        Paused rounds receive no ticks; the loop keeps its cadence and waits.

        Returns:
            The last TickResult delivered, or None if no tick was delivered
        """
        self._stopped = False
        last: Optional[TickResult] = None
        next_deadline = self.clock() + self.period

        while not self._stopped:
            if max_ticks is not None and self.ticks_delivered >= max_ticks:
                break

            state = self.simulator.current_state()
            if state.status == RoundStatus.ENDED:
                break

            if state.status == RoundStatus.PLAYING:
                if self.player is not None:
                    move = self.player.get_move(state)
                    if move is not None:
                        self.simulator.queue_direction(move)

                last = self.simulator.tick()
                self.ticks_delivered += 1
                if self.on_tick is not None:
                    self.on_tick(last)
                if last.ended:
                    break

            # Fixed-rate: sleep to the next deadline, never accumulate drift
            delay = next_deadline - self.clock()
            if delay > 0:
                self.sleep(delay)
            next_deadline += self.period

        driver = self.player.name if self.player is not None else "manual"
        logger.debug("Scheduler stopped after %s ticks (driver=%s)", self.ticks_delivered, driver)
        return last
