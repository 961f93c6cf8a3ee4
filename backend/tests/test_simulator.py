"""
Tests for simulator.py - the per-tick round rules.
"""

import dataclasses
import os
import random
import sys

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain.config import BoundaryPolicy, Difficulty, RoundConfig, RoundConfigError, Speed  # noqa: E402
from domain.constants import UP, DOWN, LEFT, RIGHT  # noqa: E402
from domain.events import CollisionCause, FoodConsumed, RoundEnded, RoundStatus  # noqa: E402
from domain.game_state import RoundState  # noqa: E402
from domain.rules import in_bounds, starting_snake  # noqa: E402
from players.random_player import RandomPlayer  # noqa: E402
from simulator import RoundSimulator  # noqa: E402


def make_sim(snake, food=(0, 0), obstacles=(), direction=RIGHT, pending=None,
             grid_size=10, policy=BoundaryPolicy.WRAP, score=0, seed=1):
    """Build a simulator from an explicit board."""
    config = RoundConfig(
        grid_size=grid_size,
        boundary_policy=policy,
        obstacles_enabled=bool(obstacles),
    )
    state = RoundState(
        snake=tuple(snake),
        food=food,
        obstacles=frozenset(obstacles),
        direction=direction,
        pending_direction=pending or direction,
        score=score,
        status=RoundStatus.PLAYING,
        grid_size=grid_size,
        boundary_policy=policy,
    )
    return RoundSimulator.from_snapshot(config, state, rng=random.Random(seed))


class TestInitialize:
    """Tests for starting a round."""

    def test_initial_layout(self):
        """Snake starts at one third of the board heading right with score 0."""
        sim = RoundSimulator(rng=random.Random(3))
        state = sim.initialize(RoundConfig(grid_size=30))

        assert list(state.snake) == starting_snake(30)
        assert state.direction == RIGHT
        assert state.pending_direction == RIGHT
        assert state.score == 0
        assert state.status == RoundStatus.PLAYING
        assert state.tick_number == 0
        assert state.obstacles == frozenset()
        assert state.food not in state.snake
        assert in_bounds(state.food, 30)

    def test_obstacles_scattered_on_free_cells(self):
        """With obstacles on, floor(N * 0.6) distinct cells avoid snake and food."""
        sim = RoundSimulator(rng=random.Random(11))
        config = RoundConfig.from_settings(Difficulty.LEVEL_4, Speed.NORMAL, grid_size=30)
        state = sim.initialize(config)

        assert len(state.obstacles) == 18
        assert not state.obstacles.intersection(state.snake)
        assert state.food not in state.obstacles
        assert all(in_bounds(cell, 30) for cell in state.obstacles)

    def test_same_seed_same_layout(self):
        """Placement is reproducible with an injected random source."""
        config = RoundConfig(grid_size=24, obstacles_enabled=True)
        first = RoundSimulator(rng=random.Random(42)).initialize(config)
        second = RoundSimulator(rng=random.Random(42)).initialize(config)
        assert first.obstacles == second.obstacles
        assert first.food == second.food

    def test_too_small_board_rejected(self):
        """A board that cannot fit the starting snake is a config error."""
        with pytest.raises(RoundConfigError):
            RoundSimulator().initialize(RoundConfig(grid_size=4))

    def test_uninitialized_simulator_raises(self):
        """tick and queue_direction need a round."""
        sim = RoundSimulator()
        with pytest.raises(RuntimeError):
            sim.tick()
        with pytest.raises(RuntimeError):
            sim.queue_direction("UP")

    def test_initialize_resets_previous_round(self):
        """Initializing again starts over from a clean round."""
        sim = make_sim([(9, 3), (8, 3), (7, 3)], policy=BoundaryPolicy.LETHAL)
        sim.tick()
        assert sim.current_state().is_over

        state = sim.initialize(RoundConfig(grid_size=10))
        assert state.status == RoundStatus.PLAYING
        assert state.end_cause is None
        assert state.tick_number == 0


class TestMovement:
    """Tests for plain movement, wraparound and walls."""

    def test_plain_move_keeps_length(self):
        """Moving onto an empty cell shifts the snake by one."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(8, 8))
        result = sim.tick()

        assert list(result.state.snake) == [(5, 3), (4, 3), (3, 3)]
        assert result.state.score == 0
        assert result.state.tick_number == 1
        assert result.event is None

    def test_wrap_crosses_right_edge(self):
        """Under wrap, leaving the right edge re-enters at x=0."""
        sim = make_sim([(9, 3), (8, 3), (7, 3)], food=(5, 5))
        result = sim.tick()

        assert result.state.head == (0, 3)
        assert result.state.status == RoundStatus.PLAYING

    def test_wrap_crosses_top_edge(self):
        """Under wrap, leaving row 0 upward re-enters at the bottom row."""
        sim = make_sim([(4, 0), (4, 1), (4, 2)], direction=UP, food=(5, 5))
        result = sim.tick()
        assert result.state.head == (4, 9)

    def test_lethal_wall_ends_round(self):
        """Under lethal walls, leaving the board ends the round unchanged."""
        sim = make_sim([(9, 3), (8, 3), (7, 3)], food=(5, 5), policy=BoundaryPolicy.LETHAL)
        result = sim.tick()

        assert result.ended
        assert result.event == RoundEnded(cause=CollisionCause.WALL, score=0)
        assert list(result.state.snake) == [(9, 3), (8, 3), (7, 3)]
        assert result.state.end_cause == CollisionCause.WALL
        assert result.state.status == RoundStatus.ENDED


class TestFood:
    """Tests for eating and food regeneration."""

    def test_eating_grows_and_scores(self):
        """Food adds 10 points, grows the snake and moves the food."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(5, 3))
        result = sim.tick()

        assert list(result.state.snake) == [(5, 3), (4, 3), (3, 3), (2, 3)]
        assert result.state.score == 10
        assert result.event == FoodConsumed(position=(5, 3), score=10)
        assert result.state.food not in result.state.snake
        assert result.state.food is not None

    def test_two_ticks_to_food(self):
        """From the starting layout, food two cells ahead is eaten on tick 2."""
        sim = make_sim([(3, 3), (2, 3), (1, 3)], food=(5, 3))

        first = sim.tick()
        assert list(first.state.snake) == [(4, 3), (3, 3), (2, 3)]
        assert first.state.score == 0

        second = sim.tick()
        assert list(second.state.snake) == [(5, 3), (4, 3), (3, 3), (2, 3)]
        assert second.state.score == 10
        assert second.state.food != (5, 3)

    def test_food_never_lands_on_obstacles(self):
        """Regenerated food avoids obstacles."""
        obstacles = {(x, 0) for x in range(10)} | {(x, 9) for x in range(10)}
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(5, 3), obstacles=obstacles)
        result = sim.tick()
        assert result.state.food not in obstacles

    def test_board_full_ends_round(self):
        """Filling the last free cell ends the round with no food left."""
        # Serpentine path covering a 6x6 board
        path = []
        for y in range(6):
            xs = range(6) if y % 2 == 0 else range(5, -1, -1)
            path.extend((x, y) for x in xs)
        snake = list(reversed(path[:-1]))
        assert snake[0] == (1, 5)

        sim = make_sim(snake, food=(0, 5), direction=LEFT, grid_size=6)
        events = []
        sim.subscribe(events.append)
        result = sim.tick()

        assert result.ended
        assert result.event == RoundEnded(cause=CollisionCause.BOARD_FULL, score=10)
        assert result.state.length == 36
        assert result.state.food is None
        assert events == [
            FoodConsumed(position=(0, 5), score=10),
            RoundEnded(cause=CollisionCause.BOARD_FULL, score=10),
        ]


class TestCollisions:
    """Tests for self and obstacle collisions."""

    def test_self_collision(self):
        """Turning into the body ends the round with cause SELF."""
        sim = make_sim([(5, 5), (4, 5), (3, 5)], direction=UP)
        sim.queue_direction(LEFT)
        result = sim.tick()

        assert result.event == RoundEnded(cause=CollisionCause.SELF, score=0)
        assert list(result.state.snake) == [(5, 5), (4, 5), (3, 5)]

    def test_self_collision_with_curled_body(self):
        """A curled body is deadly on any non-tail segment."""
        sim = make_sim([(5, 5), (5, 6), (4, 6), (4, 5), (4, 4)], direction=UP)
        sim.queue_direction(LEFT)
        result = sim.tick()
        assert result.event.cause == CollisionCause.SELF

    def test_moving_into_vacating_tail_is_safe(self):
        """The tail cell is free on a tick where the snake does not grow."""
        sim = make_sim([(5, 5), (5, 6), (4, 6), (4, 5)], direction=UP)
        sim.queue_direction(LEFT)
        result = sim.tick()

        assert not result.ended
        assert list(result.state.snake) == [(4, 5), (5, 5), (5, 6), (4, 6)]

    def test_obstacle_collision(self):
        """Entering an obstacle ends the round with cause OBSTACLE."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], obstacles={(5, 3)})
        result = sim.tick()
        assert result.event == RoundEnded(cause=CollisionCause.OBSTACLE, score=0)

    def test_wrap_onto_obstacle(self):
        """The wrapped position is the one checked against obstacles."""
        sim = make_sim([(9, 3), (8, 3), (7, 3)], obstacles={(0, 3)}, food=(5, 5))
        result = sim.tick()
        assert result.event.cause == CollisionCause.OBSTACLE

    def test_score_kept_on_collision(self):
        """The round ends with the score collected so far."""
        sim = make_sim([(9, 3), (8, 3), (7, 3)], policy=BoundaryPolicy.LETHAL, score=40)
        result = sim.tick()
        assert result.event.score == 40
        assert result.state.score == 40


class TestDirectionQueue:
    """Tests for queued turns and reversal rejection."""

    def test_reversal_is_ignored(self):
        """The exact opposite of the current heading is dropped."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(8, 8))
        sim.queue_direction(LEFT)
        assert sim.current_state().pending_direction == RIGHT

        result = sim.tick()
        assert result.state.head == (5, 3)

    def test_last_request_wins(self):
        """Only the last accepted request before a tick applies."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(8, 8))
        sim.queue_direction(UP)
        sim.queue_direction(DOWN)
        result = sim.tick()

        assert result.state.direction == DOWN
        assert result.state.head == (4, 4)

    def test_reversal_checked_against_applied_direction(self):
        """Two quick turns cannot fold the snake back within one tick."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(8, 8))
        sim.queue_direction(UP)
        sim.queue_direction(LEFT)
        assert sim.current_state().pending_direction == UP

    def test_names_accepted(self):
        """Direction names are accepted as well as vectors."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(8, 8))
        sim.queue_direction("down")
        assert sim.current_state().pending_direction == DOWN

    def test_invalid_direction_raises(self):
        """Non-unit vectors are rejected."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)])
        with pytest.raises(ValueError):
            sim.queue_direction((1, 1))

    def test_queue_after_end_is_ignored(self):
        """Requests after the round ends change nothing."""
        sim = make_sim([(9, 3), (8, 3), (7, 3)], policy=BoundaryPolicy.LETHAL)
        sim.tick()
        sim.queue_direction(UP)
        assert sim.current_state().pending_direction == RIGHT


class TestLifecycle:
    """Tests for pause, termination and events."""

    def test_paused_round_ignores_ticks(self):
        """Ticks while paused leave the board alone."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(8, 8))
        sim.pause()
        result = sim.tick()

        assert result.state.status == RoundStatus.PAUSED
        assert result.state.tick_number == 0
        assert result.state.head == (4, 3)

        sim.resume()
        assert sim.tick().state.head == (5, 3)

    def test_toggle_pause(self):
        """toggle_pause flips between playing and paused."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)])
        assert sim.toggle_pause().status == RoundStatus.PAUSED
        assert sim.toggle_pause().status == RoundStatus.PLAYING

    def test_round_ended_emitted_once(self):
        """Ticks after the end are no-ops without further events."""
        sim = make_sim([(9, 3), (8, 3), (7, 3)], policy=BoundaryPolicy.LETHAL)
        events = []
        sim.subscribe(events.append)

        first = sim.tick()
        second = sim.tick()

        assert first.ended
        assert second.event is None
        assert second.state == first.state
        assert len(events) == 1

    def test_pause_after_end_stays_ended(self):
        """An ended round cannot be paused back into play."""
        sim = make_sim([(9, 3), (8, 3), (7, 3)], policy=BoundaryPolicy.LETHAL)
        sim.tick()
        assert sim.toggle_pause().status == RoundStatus.ENDED

    def test_failing_listener_does_not_break_tick(self):
        """A listener exception is logged and the round continues."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(5, 3))

        def broken(event):
            raise RuntimeError("speaker unplugged")

        received = []
        sim.subscribe(broken)
        sim.subscribe(received.append)
        result = sim.tick()

        assert result.state.score == 10
        assert received == [FoodConsumed(position=(5, 3), score=10)]

    def test_unsubscribe(self):
        """Unsubscribed listeners stop receiving events."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(5, 3))
        received = []
        unsubscribe = sim.subscribe(received.append)
        unsubscribe()
        sim.tick()
        assert received == []


class TestSnapshots:
    """Tests for snapshot immutability and validation."""

    def test_snapshot_is_frozen(self):
        """Snapshots cannot be mutated by callers."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)])
        state = sim.current_state()
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.score = 100

    def test_old_snapshot_unchanged_by_tick(self):
        """A snapshot keeps describing its own tick."""
        sim = make_sim([(4, 3), (3, 3), (2, 3)], food=(8, 8))
        before = sim.current_state()
        sim.tick()
        assert before.head == (4, 3)
        assert before.tick_number == 0

    def test_from_snapshot_rejects_food_on_snake(self):
        """Food inside the body breaks the board invariant."""
        with pytest.raises(ValueError):
            make_sim([(4, 3), (3, 3), (2, 3)], food=(3, 3))

    def test_from_snapshot_rejects_out_of_bounds(self):
        """Every cell must be on the board."""
        with pytest.raises(ValueError):
            make_sim([(10, 3), (9, 3), (8, 3)])

    def test_from_snapshot_rejects_obstacle_on_snake(self):
        """Obstacles and snake must be disjoint."""
        with pytest.raises(ValueError):
            make_sim([(4, 3), (3, 3), (2, 3)], obstacles={(2, 3)})


class TestRandomRounds:
    """Invariants hold across many seeded rounds."""

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_invariants_hold_every_tick(self, difficulty):
        """Snake, food and obstacles stay disjoint and in bounds; score tracks growth."""
        for seed in range(10):
            rng = random.Random(seed)
            sim = RoundSimulator(rng=rng)
            config = RoundConfig.from_settings(difficulty, Speed.NORMAL, grid_size=10)
            state = sim.initialize(config)
            player = RandomPlayer(rng=rng)

            for _ in range(300):
                move = player.get_move(state)
                if move is not None:
                    sim.queue_direction(move)
                result = sim.tick()
                state = result.state

                assert len(set(state.snake)) == len(state.snake)
                assert all(in_bounds(cell, 10) for cell in state.snake)
                assert not state.obstacles.intersection(state.snake)
                assert state.score == 10 * (state.length - 3)
                if state.food is not None:
                    assert state.food not in state.snake
                    assert state.food not in state.obstacles
                if result.ended:
                    assert state.end_cause is not None
                    break
