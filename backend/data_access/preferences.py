"""
Best score and mute flag persistence.

These functions delegate to the SettingsRepository for actual database operations.
"""

from domain.constants import BEST_SCORE_KEY, MUTED_KEY

from .repositories import SettingsRepository
from .repositories.settings_repository import parse_int_value

# Repository instance
_settings_repo = SettingsRepository()


def get_best_score() -> int:
    """
    Read the stored best score.

    Returns:
        The best score, 0 if none has been recorded
    """
    return parse_int_value(_settings_repo.get_value(BEST_SCORE_KEY))


def record_score(score: int) -> bool:
    """
    Store a finished round's score if it beats the best score.

    Args:
        score: Final score of a completed round

    Returns:
        True if a new best score was written

    Raises:
        ValueError: If score is negative
    """
    if score < 0:
        raise ValueError(f"Score must be non-negative, got {score}")
    return _settings_repo.set_if_greater(BEST_SCORE_KEY, int(score))


def is_muted() -> bool:
    return _settings_repo.get_value(MUTED_KEY) == "true"


def set_muted(muted: bool) -> None:
    _settings_repo.set_value(MUTED_KEY, "true" if muted else "false")


def toggle_muted() -> bool:
    """Flip the mute flag and return the new value."""
    muted = not is_muted()
    set_muted(muted)
    return muted
