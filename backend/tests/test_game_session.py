"""
Tests for services/game_session.py - menu, round and game-over flow.
"""

import os
import random
import sys

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain.config import BoundaryPolicy, Difficulty, Speed  # noqa: E402
from domain.constants import UP  # noqa: E402
from domain.events import CollisionCause, RoundEnded, RoundStatus  # noqa: E402
from services.game_session import GameSession, SessionStateError, SessionStatus  # noqa: E402


class ScoreStore:
    """In-memory stand-in for the persisted best score."""

    def __init__(self, best=0):
        self.best = best
        self.recorded = []

    def read(self):
        return self.best

    def record(self, score):
        self.recorded.append(score)
        if score > self.best:
            self.best = score
            return True
        return False


def make_session(best=0, **kwargs):
    store = ScoreStore(best)
    session = GameSession(
        session_id="test-session",
        best_score_reader=store.read,
        score_recorder=store.record,
        rng=random.Random(9),
        **kwargs,
    )
    return session, store


def play_out(session, limit=100):
    for _ in range(limit):
        result = session.tick()
        if result.ended:
            return result
    raise AssertionError("round did not end")


class TestSessionFlow:
    """Tests for screen transitions."""

    def test_starts_on_menu(self):
        session, _ = make_session(best=70)
        assert session.status == SessionStatus.IDLE
        assert session.best_score == 70
        assert session.current_state() is None

        data = session.to_dict()
        assert data["status"] == "IDLE"
        assert data["state"] is None
        assert data["best_score"] == 70

    def test_start_parses_settings(self):
        session, _ = make_session()
        state = session.start(difficulty="3", speed="hard", grid_size=24)

        assert session.status == SessionStatus.PLAYING
        assert session.difficulty == Difficulty.LEVEL_3
        assert session.speed == Speed.HARD
        assert session.config.boundary_policy == BoundaryPolicy.WRAP
        assert session.config.tick_period_ms == 60
        assert len(state.obstacles) == 14
        assert state.grid_size == 24

    def test_start_rejects_bad_settings(self):
        session, _ = make_session()
        with pytest.raises(ValueError):
            session.start(difficulty=9)
        with pytest.raises(ValueError):
            session.start(grid_size=3)

    def test_failed_start_keeps_previous_settings(self):
        """A rejected start leaves the running round, its settings and restart() intact."""
        session, _ = make_session()
        session.start(difficulty=1, speed="normal", grid_size=10)
        before = session.to_dict()["settings"]

        with pytest.raises(ValueError):
            session.start(difficulty=4, speed="hard", grid_size=3)

        assert session.to_dict()["settings"] == before
        assert session.status == SessionStatus.PLAYING
        assert session.current_state().grid_size == 10

        state = session.restart()
        assert state.grid_size == 10
        assert state.boundary_policy == BoundaryPolicy.WRAP
        assert session.speed == Speed.NORMAL

    def test_actions_need_a_round(self):
        session, _ = make_session()
        with pytest.raises(SessionStateError):
            session.tick()
        with pytest.raises(SessionStateError):
            session.queue_direction(UP)
        with pytest.raises(SessionStateError):
            session.restart()
        with pytest.raises(SessionStateError):
            session.toggle_pause()

    def test_round_to_game_over(self):
        """Level 2 on a 10x10 board hits the right wall on tick 7."""
        session, store = make_session(best=500)
        session.start(difficulty=Difficulty.LEVEL_2, grid_size=10)

        result = play_out(session)

        assert result.state.tick_number == 7
        assert session.status == SessionStatus.GAMEOVER
        assert session.last_cause == CollisionCause.WALL
        assert session.last_score == result.state.score
        assert store.recorded == [result.state.score]
        assert session.best_score == 500
        assert not session.is_new_record

    def test_ticks_after_game_over_are_no_ops(self):
        session, store = make_session()
        session.start(difficulty=2, grid_size=10)
        ended = play_out(session)

        after = session.tick()
        assert after.event is None
        assert after.state == ended.state
        assert len(store.recorded) == 1

    def test_restart_keeps_settings(self):
        session, _ = make_session()
        session.start(difficulty=2, speed="easy", grid_size=10)
        play_out(session)

        state = session.restart()
        assert session.status == SessionStatus.PLAYING
        assert state.tick_number == 0
        assert state.status == RoundStatus.PLAYING
        assert session.speed == Speed.EASY
        assert state.grid_size == 10
        assert session.last_cause is None

    def test_toggle_pause(self):
        session, _ = make_session()
        session.start(grid_size=10)

        assert session.toggle_pause().status == RoundStatus.PAUSED
        assert session.status == SessionStatus.PAUSED
        assert session.tick().state.tick_number == 0

        session.toggle_pause()
        assert session.status == SessionStatus.PLAYING
        assert session.tick().state.tick_number == 1

    def test_pause_after_game_over_rejected(self):
        session, _ = make_session()
        session.start(difficulty=2, grid_size=10)
        play_out(session)
        with pytest.raises(SessionStateError):
            session.toggle_pause()

    def test_exit_to_menu(self):
        session, _ = make_session()
        session.start(grid_size=10)
        session.exit_to_menu()

        assert session.status == SessionStatus.IDLE
        assert session.current_state() is None
        with pytest.raises(SessionStateError):
            session.tick()

    def test_queue_direction_returns_state(self):
        session, _ = make_session()
        session.start(grid_size=10)
        state = session.queue_direction("UP")
        assert state.pending_direction == UP


class TestBestScore:
    """Tests for best score tracking and new-record detection."""

    def test_new_record(self):
        session, _ = make_session(best=30)
        session.start(grid_size=10)
        session._handle_event(RoundEnded(cause=CollisionCause.SELF, score=50))

        assert session.best_score == 50
        assert session.is_new_record
        assert session.to_dict()["is_new_record"] is True

    def test_lower_score_is_not_a_record(self):
        session, _ = make_session(best=30)
        session.start(grid_size=10)
        session._handle_event(RoundEnded(cause=CollisionCause.SELF, score=20))

        assert session.best_score == 30
        assert not session.is_new_record

    def test_zero_score_is_never_a_record(self):
        session, _ = make_session(best=0)
        session.start(grid_size=10)
        session._handle_event(RoundEnded(cause=CollisionCause.WALL, score=0))
        assert not session.is_new_record

    def test_recorder_failure_keeps_round_result(self):
        def broken(score):
            raise RuntimeError("disk full")

        session = GameSession(best_score_reader=lambda: 10, score_recorder=broken)
        session.start(grid_size=10)
        session._handle_event(RoundEnded(cause=CollisionCause.WALL, score=40))

        assert session.status == SessionStatus.GAMEOVER
        assert session.best_score == 40

    def test_reader_failure_starts_from_zero(self):
        def broken():
            raise RuntimeError("no database")

        session = GameSession(best_score_reader=broken, score_recorder=lambda s: False)
        assert session.best_score == 0

    def test_listeners_receive_events(self):
        events = []
        session, _ = make_session(listeners=[events.append])
        session.start(difficulty=2, grid_size=10)
        play_out(session)

        assert isinstance(events[-1], RoundEnded)
        assert events[-1].cause == CollisionCause.WALL

    def test_to_dict_settings(self):
        session, _ = make_session()
        session.start(difficulty=4, speed="normal", grid_size=24)
        data = session.to_dict()

        assert data["session_id"] == "test-session"
        assert data["status"] == "PLAYING"
        assert data["settings"] == {
            "difficulty": 4,
            "speed": "normal",
            "tick_period_ms": 100,
            "grid_size": 24,
        }
        assert data["state"]["boundary_policy"] == "lethal"
