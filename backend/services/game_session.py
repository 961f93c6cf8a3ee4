"""
Game session: the host application flow around one simulator.

Screens move Menu (IDLE) -> PLAYING <-> PAUSED -> GAMEOVER -> PLAYING again
(restart) or back to IDLE (menu). The session owns the round settings, keeps
the best score in sync with the score store, and wires the audio notifier to
the simulator's events.
"""

import logging
import random
import threading
import uuid
from enum import Enum
from typing import Callable, Optional, Union

from data_access import get_best_score, record_score
from domain.config import (
    Difficulty,
    RoundConfig,
    Speed,
    parse_difficulty,
    parse_speed,
)
from domain.constants import DESKTOP_TILE_COUNT
from domain.events import CollisionCause, RoundEnded, RoundEvent, RoundStatus, TickResult
from domain.game_state import RoundState
from simulator import RoundSimulator

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    PLAYING = "PLAYING"
    PAUSED = "PAUSED"
    GAMEOVER = "GAMEOVER"


class SessionStateError(RuntimeError):
    """Raised when an action does not fit the session's current screen."""


class GameSession:
    """
    One player's menu / round / game-over cycle.

    All entry points take the session lock, so a threaded host never runs
    tick() and queue_direction() at the same time.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        best_score_reader: Callable[[], int] = get_best_score,
        score_recorder: Callable[[int], bool] = record_score,
        listeners: Optional[list] = None,
        rng: Optional[random.Random] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.status = SessionStatus.IDLE
        self.difficulty = Difficulty.LEVEL_1
        self.speed = Speed.NORMAL
        self.grid_size = DESKTOP_TILE_COUNT
        self.simulator: Optional[RoundSimulator] = None
        self.rng = rng
        self.listeners = list(listeners or [])
        self.last_score = 0
        self.last_cause: Optional[CollisionCause] = None
        self.is_new_record = False
        self.lock = threading.RLock()

        self._record_score = score_recorder
        try:
            self.best_score = best_score_reader()
        except Exception as e:
            logger.warning("Could not read best score, starting from 0: %s", e)
            self.best_score = 0

    # -------------------------------------------------------------------------
    # Screen transitions
    # -------------------------------------------------------------------------

    def start(
        self,
        difficulty: Union[int, str, Difficulty, None] = None,
        speed: Union[int, str, Speed, None] = None,
        grid_size: Optional[int] = None,
    ) -> RoundState:
        """
        Leave the menu (or game-over screen) and begin a round.

        Raises:
            ValueError: for unknown difficulty/speed or an unusable grid size.
        """
        with self.lock:
            level = parse_difficulty(difficulty) if difficulty is not None else self.difficulty
            tier = parse_speed(speed) if speed is not None else self.speed
            size = grid_size if grid_size is not None else self.grid_size

            # Settings only change once the new round has actually started
            state = self._new_round(RoundConfig.from_settings(level, tier, size))
            self.difficulty = level
            self.speed = tier
            self.grid_size = size
            self._log_round_start()
            return state

    def restart(self) -> RoundState:
        """Play again with the same settings."""
        with self.lock:
            if self.status == SessionStatus.IDLE:
                raise SessionStateError("No round to restart; start one from the menu")
            state = self._new_round(self.config)
            self._log_round_start()
            return state

    def exit_to_menu(self) -> None:
        """Abandon any running round and return to the menu."""
        with self.lock:
            if self.simulator is not None and self.status in (SessionStatus.PLAYING, SessionStatus.PAUSED):
                logger.info("Session %s abandoned a round at score %s",
                            self.session_id, self.simulator.current_state().score)
            self.simulator = None
            self.status = SessionStatus.IDLE

    def toggle_pause(self) -> RoundState:
        with self.lock:
            simulator = self._require_round()
            if self.status == SessionStatus.GAMEOVER:
                raise SessionStateError("The round is over; restart or return to the menu")
            state = simulator.toggle_pause()
            self.status = (
                SessionStatus.PAUSED if state.status == RoundStatus.PAUSED else SessionStatus.PLAYING
            )
            return state

    # -------------------------------------------------------------------------
    # Round delegation
    # -------------------------------------------------------------------------

    def queue_direction(self, direction) -> RoundState:
        with self.lock:
            simulator = self._require_round()
            simulator.queue_direction(direction)
            return simulator.current_state()

    def tick(self) -> TickResult:
        with self.lock:
            return self._require_round().tick()

    def current_state(self) -> Optional[RoundState]:
        with self.lock:
            if self.simulator is None:
                return None
            return self.simulator.current_state()

    @property
    def config(self) -> RoundConfig:
        return RoundConfig.from_settings(self.difficulty, self.speed, self.grid_size)

    def to_dict(self) -> dict:
        with self.lock:
            state = self.simulator.current_state() if self.simulator is not None else None
            return {
                "session_id": self.session_id,
                "status": self.status.value,
                "settings": {
                    "difficulty": int(self.difficulty),
                    "speed": self.speed.name.lower(),
                    "tick_period_ms": int(self.speed),
                    "grid_size": self.grid_size,
                },
                "state": state.to_dict() if state is not None else None,
                "last_score": self.last_score,
                "last_cause": self.last_cause.value if self.last_cause else None,
                "best_score": max(self.best_score, state.score) if state is not None else self.best_score,
                "is_new_record": self.is_new_record,
            }

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _new_round(self, config: RoundConfig) -> RoundState:
        # initialize() validates before anything on the session is replaced
        simulator = RoundSimulator(rng=self.rng)
        state = simulator.initialize(config)
        simulator.subscribe(self._handle_event)
        for listener in self.listeners:
            simulator.subscribe(listener)

        self.simulator = simulator
        self.status = SessionStatus.PLAYING
        self.is_new_record = False
        self.last_cause = None
        return state

    def _log_round_start(self) -> None:
        logger.info(
            "Session %s started round: difficulty=%s speed=%s grid=%s",
            self.session_id, int(self.difficulty), self.speed.name, self.grid_size,
        )

    def _handle_event(self, event: RoundEvent) -> None:
        if not isinstance(event, RoundEnded):
            return

        self.last_score = event.score
        self.last_cause = event.cause
        self.status = SessionStatus.GAMEOVER

        if event.score > self.best_score:
            self.best_score = event.score
        try:
            self._record_score(event.score)
        except Exception as e:
            # Keep the in-memory record; the round already finished
            logger.warning("Could not persist score %s: %s", event.score, e)

        self.is_new_record = event.score > 0 and event.score >= self.best_score

    def _require_round(self) -> RoundSimulator:
        if self.simulator is None or self.status == SessionStatus.IDLE:
            raise SessionStateError("No round in progress; start one from the menu")
        return self.simulator
