import os
import logging
import threading
import time
from typing import Dict

from flask import Flask, jsonify, request
from flask_cors import CORS
from dotenv import load_dotenv

from data_access import get_best_score, is_muted, toggle_muted
from domain.config import DIFFICULTY_LABELS, LAYOUT_GRID_SIZES, SPEED_LABELS, Difficulty, Speed
from domain.rules import resolve_direction
from players.keyboard import direction_for_key, direction_for_swipe
from services.audio_notifier import AudioNotifier
from services.game_session import GameSession, SessionStateError

load_dotenv()

app = Flask(__name__)
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

# Enable CORS for API routes so the browser client (different origin) can call Flask
# Allowed origins can be configured via CORS_ALLOWED_ORIGINS env var (comma-separated)
allowed_origins_env = os.getenv("CORS_ALLOWED_ORIGINS")
if allowed_origins_env:
    allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]
else:
    # sensible defaults for local dev
    allowed_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "capacitor://localhost",
    ]

CORS(app, resources={r"/api/*": {"origins": allowed_origins}})

# In-memory sessions; a round never outlives the process
_sessions: Dict[str, GameSession] = {}
_last_seen: Dict[str, float] = {}
_sessions_lock = threading.Lock()
_clock = time.monotonic

# Abandoned tabs are dropped after this many idle seconds, oldest first past the cap
SESSION_TTL_SECONDS = float(os.getenv("SESSION_TTL_SECONDS", 30 * 60))
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", 500))


class SessionNotFound(LookupError):
    pass


def _get_session(session_id: str) -> GameSession:
    with _sessions_lock:
        session = _sessions.get(session_id)
        if session is not None:
            _last_seen[session_id] = _clock()
    if session is None:
        raise SessionNotFound(session_id)
    return session


def _evict_sessions() -> None:
    """Drop idle sessions and make room for one more. Caller holds _sessions_lock."""
    now = _clock()
    stale = [sid for sid, seen in _last_seen.items() if now - seen > SESSION_TTL_SECONDS]
    fresh = sorted((sid for sid in _last_seen if sid not in stale), key=_last_seen.get)
    overflow = len(fresh) - (MAX_SESSIONS - 1)
    if overflow > 0:
        stale.extend(fresh[:overflow])

    for session_id in stale:
        _sessions.pop(session_id, None)
        _last_seen.pop(session_id, None)
    if stale:
        logger.info("Evicted %s idle sessions", len(stale))


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


@app.errorhandler(SessionNotFound)
def handle_unknown_session(error):
    return jsonify({"error": f"Session '{error.args[0]}' not found"}), 404


@app.errorhandler(SessionStateError)
def handle_session_state(error):
    return jsonify({"error": str(error)}), 409


@app.errorhandler(ValueError)
def handle_bad_input(error):
    return jsonify({"error": str(error)}), 400


@app.route("/api/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@app.route("/api/options", methods=["GET"])
def get_options():
    """
    Menu options for the start screen.

    Returns difficulty levels (with wall/obstacle flags), speed tiers and
    board layouts.
    """
    difficulties = [
        {
            "value": int(level),
            "label": DIFFICULTY_LABELS[level],
            "boundary_policy": level.boundary_policy.value,
            "obstacles": level.obstacles_enabled,
        }
        for level in Difficulty
    ]
    speeds = [
        {"value": speed.name.lower(), "label": SPEED_LABELS[speed], "tick_period_ms": int(speed)}
        for speed in Speed
    ]
    return jsonify({
        "difficulties": difficulties,
        "speeds": speeds,
        "layouts": LAYOUT_GRID_SIZES,
    })


@app.route("/api/settings", methods=["GET"])
def get_settings():
    try:
        return jsonify({"best_score": get_best_score(), "muted": is_muted()})
    except Exception as error:
        logger.error(f"Error reading settings: {error}")
        return jsonify({"error": "Failed to load settings"}), 500


@app.route("/api/settings/mute", methods=["POST"])
def toggle_mute():
    try:
        return jsonify({"muted": toggle_muted()})
    except Exception as error:
        logger.error(f"Error toggling mute: {error}")
        return jsonify({"error": "Failed to update settings"}), 500


@app.route("/api/sessions", methods=["POST"])
def create_session():
    """Open a session on the menu screen."""
    session = GameSession(listeners=[AudioNotifier(is_muted=is_muted)])
    with _sessions_lock:
        _evict_sessions()
        _sessions[session.session_id] = session
        _last_seen[session.session_id] = _clock()
    logger.info("Created session %s", session.session_id)
    return jsonify(session.to_dict()), 201


@app.route("/api/sessions/<session_id>", methods=["GET"])
def get_session(session_id):
    return jsonify(_get_session(session_id).to_dict())


@app.route("/api/sessions/<session_id>", methods=["DELETE"])
def delete_session(session_id):
    with _sessions_lock:
        session = _sessions.pop(session_id, None)
        _last_seen.pop(session_id, None)
    if session is None:
        raise SessionNotFound(session_id)
    session.exit_to_menu()
    return jsonify({"deleted": session_id})


@app.route("/api/sessions/<session_id>/start", methods=["POST"])
def start_round(session_id):
    """
    Start a round from the menu.

    Body (all optional):
    - difficulty: 1-4
    - speed: easy | normal | hard
    - layout: desktop | mobile, or grid_size: int
    """
    session = _get_session(session_id)
    body = _json_body()

    grid_size = body.get("grid_size")
    layout = body.get("layout")
    if layout is not None:
        if layout not in LAYOUT_GRID_SIZES:
            raise ValueError(f"Unknown layout '{layout}'. Available: {', '.join(LAYOUT_GRID_SIZES)}")
        grid_size = LAYOUT_GRID_SIZES[layout]
    if grid_size is not None and (not isinstance(grid_size, int) or isinstance(grid_size, bool)):
        raise ValueError(f"grid_size must be an integer, got {grid_size!r}")

    session.start(
        difficulty=body.get("difficulty"),
        speed=body.get("speed"),
        grid_size=grid_size,
    )
    return jsonify(session.to_dict())


@app.route("/api/sessions/<session_id>/direction", methods=["POST"])
def queue_direction(session_id):
    """
    Queue a direction for the next tick.

    Body, one of:
    - {"direction": "UP"}
    - {"key": "ArrowLeft"}
    - {"swipe": {"dx": 40, "dy": -3}}

    Keys and swipes that map to no direction, and reversals, come back with
    accepted: false.
    """
    session = _get_session(session_id)
    body = _json_body()

    if "direction" in body:
        direction = body["direction"]
    elif "key" in body:
        direction = direction_for_key(str(body["key"]))
    elif "swipe" in body:
        swipe = body["swipe"] or {}
        try:
            direction = direction_for_swipe(float(swipe.get("dx", 0)), float(swipe.get("dy", 0)))
        except (TypeError, ValueError, AttributeError):
            raise ValueError("swipe needs numeric dx and dy") from None
    else:
        raise ValueError("Provide one of: direction, key, swipe")

    if direction is None:
        state = session.current_state()
        return jsonify({"accepted": False, "state": state.to_dict() if state else None})

    requested = resolve_direction(direction)
    state = session.queue_direction(requested)
    # Reversals are dropped by the simulator, leaving the pending direction as it was
    return jsonify({"accepted": state.pending_direction == requested, "state": state.to_dict()})


@app.route("/api/sessions/<session_id>/tick", methods=["POST"])
def tick(session_id):
    session = _get_session(session_id)
    result = session.tick()
    payload = result.to_dict()
    payload["session"] = session.to_dict()
    return jsonify(payload)


@app.route("/api/sessions/<session_id>/pause", methods=["POST"])
def toggle_pause(session_id):
    session = _get_session(session_id)
    session.toggle_pause()
    return jsonify(session.to_dict())


@app.route("/api/sessions/<session_id>/restart", methods=["POST"])
def restart(session_id):
    session = _get_session(session_id)
    session.restart()
    return jsonify(session.to_dict())


@app.route("/api/sessions/<session_id>/menu", methods=["POST"])
def exit_to_menu(session_id):
    session = _get_session(session_id)
    session.exit_to_menu()
    return jsonify(session.to_dict())


if __name__ == "__main__":
    port = int(os.getenv("PORT", 5000))
    app.run(host="0.0.0.0", port=port)
