"""
Round simulator: the authoritative state of one Snake round.

Manages:
  - Snake body
  - Food (one item, regenerated on consumption)
  - Obstacles (scattered once per round)
  - Current and pending direction
  - Score and round status

The simulator never owns a timer. A scheduler calls tick() on a fixed period
and input sources call queue_direction() between ticks; both run on the same
logical thread.
"""

import logging
import random
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union

from domain.config import RoundConfig, obstacle_count
from domain.constants import FOOD_SCORE, RIGHT
from domain.events import (
    CollisionCause,
    FoodConsumed,
    RoundEnded,
    RoundEvent,
    RoundStatus,
    TickResult,
)
from domain.game_state import RoundState
from domain.rules import (
    collision_body,
    in_bounds,
    is_reverse,
    random_free_cell,
    resolve_direction,
    starting_snake,
    step,
    wrap_position,
)
from domain.snake import Snake

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
EventListener = Callable[[RoundEvent], None]


class RoundSimulator:
    """
    Owns the round state and exposes initialize / queue_direction / tick.

    Callers only ever see RoundState snapshots; the live snake and obstacle
    collections stay private.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.config: Optional[RoundConfig] = None
        self._snake: Optional[Snake] = None
        self._food: Optional[Position] = None
        self._obstacles: FrozenSet[Position] = frozenset()
        self._direction = RIGHT
        self._pending_direction = RIGHT
        self._score = 0
        self._status = RoundStatus.ENDED
        self._tick_number = 0
        self._end_cause: Optional[CollisionCause] = None
        self._listeners: List[EventListener] = []

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self, config: RoundConfig) -> RoundState:
        """
        Start a fresh round and return its first snapshot.

        Raises:
            RoundConfigError: if the board cannot hold snake, obstacles and food.
        """
        config.validate()
        self.config = config

        snake_cells = starting_snake(config.grid_size)
        occupied = set(snake_cells)

        obstacles = set()
        if config.obstacles_enabled:
            for _ in range(obstacle_count(config.grid_size)):
                cell = random_free_cell(config.grid_size, occupied, self.rng)
                obstacles.add(cell)
                occupied.add(cell)

        self._snake = Snake(snake_cells)
        self._obstacles = frozenset(obstacles)
        self._food = random_free_cell(config.grid_size, occupied, self.rng)
        self._direction = RIGHT
        self._pending_direction = RIGHT
        self._score = 0
        self._status = RoundStatus.PLAYING
        self._tick_number = 0
        self._end_cause = None

        logger.info(
            "Round started: grid=%s policy=%s obstacles=%s period=%sms",
            config.grid_size,
            config.boundary_policy.value,
            len(self._obstacles),
            config.tick_period_ms,
        )
        return self.current_state()

    @classmethod
    def from_snapshot(
        cls,
        config: RoundConfig,
        state: RoundState,
        rng: Optional[random.Random] = None,
    ) -> "RoundSimulator":
        """
        Rebuild a simulator from an explicit snapshot.

        Grid size and boundary policy come from config; everything else from
        the snapshot.

        Raises:
            ValueError: if the snapshot breaks a board invariant.
        """
        config.validate()
        size = config.grid_size
        cells = list(state.snake)
        if not cells:
            raise ValueError("Snapshot has an empty snake")
        if state.food is None and state.status != RoundStatus.ENDED:
            raise ValueError("A running round needs a food cell")
        food_cells = [state.food] if state.food is not None else []
        for cell in [*cells, *food_cells, *state.obstacles]:
            if not in_bounds(cell, size):
                raise ValueError(f"Cell {cell} is outside a {size}x{size} board")
        if state.food is not None and (state.food in cells or state.food in state.obstacles):
            raise ValueError(f"Food {state.food} overlaps the snake or an obstacle")
        if state.obstacles.intersection(cells):
            raise ValueError("Obstacles overlap the snake")

        sim = cls(rng=rng)
        sim.config = config
        sim._snake = Snake(cells)
        sim._food = state.food
        sim._obstacles = frozenset(state.obstacles)
        sim._direction = resolve_direction(state.direction)
        sim._pending_direction = resolve_direction(state.pending_direction)
        sim._score = state.score
        sim._status = state.status
        sim._tick_number = state.tick_number
        sim._end_cause = state.end_cause
        return sim

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register a callable for FoodConsumed / RoundEnded; returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def queue_direction(self, requested: Union[str, Sequence[int]]) -> None:
        """
        Queue a direction for the next tick.

        The exact reverse of the current direction is dropped silently. Only
        the last accepted request before a tick takes effect.
        """
        direction = resolve_direction(requested)
        self._require_round()
        if self._status == RoundStatus.ENDED:
            return
        if is_reverse(direction, self._direction):
            logger.debug("Rejected reversal %s while moving %s", direction, self._direction)
            return
        self._pending_direction = direction

    # -------------------------------------------------------------------------
    # Pause (delivery of ticks is suspended, nothing else changes)
    # -------------------------------------------------------------------------

    def pause(self) -> RoundState:
        self._require_round()
        if self._status == RoundStatus.PLAYING:
            self._status = RoundStatus.PAUSED
        return self.current_state()

    def resume(self) -> RoundState:
        self._require_round()
        if self._status == RoundStatus.PAUSED:
            self._status = RoundStatus.PLAYING
        return self.current_state()

    def toggle_pause(self) -> RoundState:
        self._require_round()
        if self._status == RoundStatus.PAUSED:
            return self.resume()
        return self.pause()

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def tick(self) -> TickResult:
        """
        Advance the round by one cell.

        Order of checks: boundary, self, obstacle. A terminal check leaves the
        snake and score untouched and ends the round.
        """
        self._require_round()
        if self._status != RoundStatus.PLAYING:
            return TickResult(state=self.current_state())

        self._direction = self._pending_direction
        self._tick_number += 1
        size = self.config.grid_size

        candidate = step(self._snake.head, self._direction)
        if self.config.wraps:
            candidate = wrap_position(candidate, size)
        elif not in_bounds(candidate, size):
            return self._end_round(CollisionCause.WALL)

        grows = candidate == self._food
        body = list(self._snake.positions)
        if candidate in collision_body(body, grows):
            return self._end_round(CollisionCause.SELF)

        if candidate in self._obstacles:
            return self._end_round(CollisionCause.OBSTACLE)

        self._snake.advance(candidate, grow=grows)
        if not grows:
            return TickResult(state=self.current_state())

        self._score += FOOD_SCORE
        occupied = set(self._snake.positions) | self._obstacles
        food = random_free_cell(size, occupied, self.rng)
        if food is None:
            # Listeners still hear the growth; the tick result carries the end.
            self._food = None
            self._emit(FoodConsumed(position=candidate, score=self._score))
            return self._end_round(CollisionCause.BOARD_FULL)

        self._food = food
        event = FoodConsumed(position=candidate, score=self._score)
        self._emit(event)
        return TickResult(state=self.current_state(), event=event)

    def current_state(self) -> RoundState:
        """Return an immutable snapshot of the round."""
        self._require_round()
        return RoundState(
            snake=tuple(self._snake.positions),
            food=self._food,
            obstacles=self._obstacles,
            direction=self._direction,
            pending_direction=self._pending_direction,
            score=self._score,
            status=self._status,
            grid_size=self.config.grid_size,
            boundary_policy=self.config.boundary_policy,
            tick_number=self._tick_number,
            end_cause=self._end_cause,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _end_round(self, cause: CollisionCause) -> TickResult:
        self._status = RoundStatus.ENDED
        self._end_cause = cause
        event = RoundEnded(cause=cause, score=self._score)
        logger.info(
            "Round ended: cause=%s score=%s tick=%s length=%s",
            cause.value,
            self._score,
            self._tick_number,
            len(self._snake),
        )
        self._emit(event)
        return TickResult(state=self.current_state(), event=event)

    def _emit(self, event: RoundEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # A failing presenter or notifier must not corrupt the round
                logger.exception("Event listener %r failed for %r", listener, event)

    def _require_round(self) -> None:
        if self.config is None or self._snake is None:
            raise RuntimeError("Round has not been initialized; call initialize() first")
