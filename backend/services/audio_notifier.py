"""
Audio notifier: turns round events into tone cues.

Subscribes to the simulator's FoodConsumed / RoundEnded events and hands a
ToneCue to a sink. Actual sound synthesis belongs to the client; the default
sink only logs the cue. The persisted mute flag silences everything.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from domain.events import FoodConsumed, RoundEnded, RoundEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToneCue:
    name: str
    waveform: str
    start_hz: float
    end_hz: float
    duration_s: float
    gain: float
    # exponential or linear fade of the gain to silence
    fade: str = "exponential"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "waveform": self.waveform,
            "start_hz": self.start_hz,
            "end_hz": self.end_hz,
            "duration_s": self.duration_s,
            "gain": self.gain,
            "fade": self.fade,
        }


COLLECT_CUE = ToneCue(
    name="collect",
    waveform="triangle",
    start_hz=880.0,
    end_hz=1320.0,
    duration_s=0.15,
    gain=0.1,
)

GAME_OVER_CUE = ToneCue(
    name="game_over",
    waveform="sawtooth",
    start_hz=220.0,
    end_hz=40.0,
    duration_s=0.6,
    gain=0.2,
    fade="linear",
)


def log_sink(cue: ToneCue) -> None:
    logger.info(
        "Tone %s: %s %.0fHz -> %.0fHz over %.2fs",
        cue.name, cue.waveform, cue.start_hz, cue.end_hz, cue.duration_s,
    )


class AudioNotifier:
    """
    Event listener that plays cues unless muted.

    Usage:
        notifier = AudioNotifier(is_muted=data_access.is_muted)
        simulator.subscribe(notifier)
    """

    def __init__(
        self,
        sink: Callable[[ToneCue], None] = log_sink,
        is_muted: Optional[Callable[[], bool]] = None,
    ):
        self.sink = sink
        self._is_muted = is_muted or (lambda: False)
        self.last_cue: Optional[ToneCue] = None

    @property
    def muted(self) -> bool:
        return bool(self._is_muted())

    def cue_for(self, event: RoundEvent) -> Optional[ToneCue]:
        if isinstance(event, FoodConsumed):
            return COLLECT_CUE
        if isinstance(event, RoundEnded):
            return GAME_OVER_CUE
        return None

    def __call__(self, event: RoundEvent) -> None:
        cue = self.cue_for(event)
        if cue is None or self.muted:
            return
        self.last_cue = cue
        self.sink(cue)
