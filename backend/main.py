import argparse
import json
import logging
import os
import random
from typing import Dict, Any

from dotenv import load_dotenv

from data_access import is_muted
from domain.config import Difficulty, RoundConfigError, Speed
from domain.constants import DESKTOP_TILE_COUNT, MOBILE_TILE_COUNT
from domain.events import TickResult
from players.random_player import RandomPlayer
from services.audio_notifier import AudioNotifier
from services.game_session import GameSession
from services.scheduler import TickScheduler

load_dotenv()

logger = logging.getLogger(__name__)


# -------------------------------
# Simulation Function
# -------------------------------

def run_simulation(game_params: argparse.Namespace) -> Dict[str, Any]:
    """
    Runs a single headless round steered by the random autopilot.

    Args:
        game_params: An object (like argparse.Namespace) containing round settings
                     (difficulty, speed, grid_size, mobile, max_ticks, seed,
                     no_delay, quiet).

    Returns:
        A dictionary summarizing the round (session_id, final_score, cause, ...).
    """
    rng = random.Random(game_params.seed)
    grid_size = MOBILE_TILE_COUNT if getattr(game_params, 'mobile', False) else game_params.grid_size
    quiet = getattr(game_params, 'quiet', False)

    notifier = AudioNotifier(is_muted=is_muted)
    session = GameSession(rng=rng, listeners=[notifier])
    state = session.start(
        difficulty=game_params.difficulty,
        speed=game_params.speed,
        grid_size=grid_size,
    )
    print(f"Session ID: {session.session_id}")
    if not quiet:
        print("\n" + state.print_board() + "\n")

    def show(result: TickResult) -> None:
        if quiet:
            return
        s = result.state
        print(f"Tick {s.tick_number} | score {s.score} | length {s.length}")
        print(s.print_board() + "\n")

    period_ms = 0 if getattr(game_params, 'no_delay', False) else None
    scheduler = TickScheduler(
        session.simulator,
        period_ms=period_ms,
        player=RandomPlayer(rng=rng),
        on_tick=show,
    )
    scheduler.run(max_ticks=game_params.max_ticks)

    final = session.current_state()
    if not final.is_over:
        print(f"Stopped after {scheduler.ticks_delivered} ticks without a collision.")

    return {
        "session_id": session.session_id,
        "difficulty": int(session.difficulty),
        "speed": session.speed.name.lower(),
        "grid_size": grid_size,
        "ticks": final.tick_number,
        "final_score": final.score,
        "length": final.length,
        "cause": final.end_cause.value if final.end_cause else None,
        "best_score": session.best_score,
        "new_record": session.is_new_record,
    }


# -------------------------------
# Main Entry Point
# -------------------------------
def main():
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING"))

    parser = argparse.ArgumentParser(
        description="Run a headless SnakeNeon round with the random autopilot."
    )
    parser.add_argument("--difficulty", type=int, choices=[d.value for d in Difficulty],
                        default=Difficulty.LEVEL_1.value,
                        help="1: wrap, 2: lethal walls, 3: wrap + obstacles, 4: lethal + obstacles")
    parser.add_argument("--speed", type=str, choices=[s.name.lower() for s in Speed],
                        default=Speed.NORMAL.name.lower(),
                        help="Tick period tier (easy=150ms, normal=100ms, hard=60ms)")
    parser.add_argument("--grid-size", type=int, default=DESKTOP_TILE_COUNT,
                        help="Cells per side of the board")
    parser.add_argument("--mobile", action="store_true",
                        help=f"Use the mobile board ({MOBILE_TILE_COUNT} cells per side)")
    parser.add_argument("--max-ticks", type=int, default=None,
                        help="Stop after this many ticks even if the snake is alive")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for obstacle/food placement and the autopilot")
    parser.add_argument("--no-delay", action="store_true",
                        help="Tick as fast as possible instead of on the speed period")
    parser.add_argument("--quiet", action="store_true",
                        help="Only print the final summary")

    args = parser.parse_args()

    try:
        result = run_simulation(args)
    except RoundConfigError as e:
        parser.error(str(e))

    print("\nRound Summary:")
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
