"""Playback clock over the synchronised interval.

The clock never schedules itself: an external driver calls :meth:`tick`
(or :meth:`tick_at` with a wall-clock reading) once per frame.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .results import OperationResult, empty_interval, invalid_state, ok

__all__ = ["AnimationClock", "AnimationState"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnimationState:
    start_time: float = 0.0
    end_time: float = 0.0
    current_time: float = 0.0
    speed: float = 1.0
    playing: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.start_time < self.end_time


def _is_positive(value: float) -> bool:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(numeric) and numeric > 0.0


class AnimationClock:
    """Two-state (stopped/playing) clock advancing ``current_time``.

    ``time_scale`` is the number of timestamp units per wall-clock second:
    ``1.0`` for timestamps in seconds, ``1000.0`` for milliseconds.
    """

    def __init__(self, *, speed: float = 1.0, time_scale: float = 1.0) -> None:
        if not _is_positive(time_scale):
            raise ValueError("time_scale must be a positive number")
        if not _is_positive(speed):
            raise ValueError("speed must be a positive number")
        self.state = AnimationState(speed=float(speed))
        self.time_scale = float(time_scale)
        self._reference: float | None = None
        self._finished = False

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def playing(self) -> bool:
        return self.state.playing

    @property
    def current_time(self) -> float:
        return self.state.current_time

    @property
    def start_time(self) -> float:
        return self.state.start_time

    @property
    def end_time(self) -> float:
        return self.state.end_time

    @property
    def speed(self) -> float:
        return self.state.speed

    @property
    def finished(self) -> bool:
        """True once playback has run into ``end_time``."""

        return self._finished

    @property
    def normalized_position(self) -> float:
        state = self.state
        if state.is_empty:
            return 0.0
        return (state.current_time - state.start_time) / (state.end_time - state.start_time)

    @property
    def elapsed(self) -> float:
        """Wall-clock seconds between ``start_time`` and ``current_time``."""

        return (self.state.current_time - self.state.start_time) / self.time_scale

    # ------------------------------------------------------------------
    # Interval management
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Back to the empty ``(0, 0, 0)`` interval; speed is preserved."""

        self.state.start_time = 0.0
        self.state.end_time = 0.0
        self.state.current_time = 0.0
        self.state.playing = False
        self._reference = None
        self._finished = False

    def set_bounds(self, start_time: float, end_time: float) -> None:
        """Install a new synchronised interval and rewind to its start."""

        start = float(start_time)
        end = float(end_time)
        if end < start:
            raise ValueError("end_time must not precede start_time")
        self.state.start_time = start
        self.state.end_time = end
        self.state.current_time = start
        self._finished = False
        if self.state.is_empty:
            self.state.playing = False
            self._reference = None

    # ------------------------------------------------------------------
    # Playback commands
    # ------------------------------------------------------------------
    def play(self, now: float | None = None) -> OperationResult:
        state = self.state
        if state.playing:
            return invalid_state("playback already running")
        if state.is_empty:
            logger.debug(
                "Play ignored on empty interval",
                extra={"event": "clock.empty_interval", "start_time": state.start_time, "end_time": state.end_time},
            )
            return empty_interval(
                "synchronised interval is empty",
                start_time=state.start_time,
                end_time=state.end_time,
            )
        state.playing = True
        self._finished = False
        self._reference = float(now) if now is not None else None
        return ok("playing", current_time=state.current_time)

    def pause(self) -> OperationResult:
        self.state.playing = False
        self._reference = None
        return ok("paused", current_time=self.state.current_time)

    def tick(self, elapsed_seconds: float) -> OperationResult:
        """Advance by ``elapsed_seconds`` of wall time scaled by ``speed``."""

        state = self.state
        if not state.playing:
            return invalid_state("tick ignored while stopped", current_time=state.current_time)
        elapsed = float(elapsed_seconds)
        if not math.isfinite(elapsed) or elapsed < 0.0:
            elapsed = 0.0
        state.current_time += elapsed * state.speed * self.time_scale
        if state.current_time >= state.end_time:
            state.current_time = state.end_time
            state.playing = False
            self._reference = None
            self._finished = True
            logger.debug(
                "Playback reached the end of the interval",
                extra={"event": "clock.finished", "end_time": state.end_time},
            )
            return ok("finished", current_time=state.current_time, finished=True)
        return ok("advanced", current_time=state.current_time, finished=False)

    def tick_at(self, now: float) -> OperationResult:
        """Advance using the wall-clock reading ``now`` (seconds)."""

        if not self.state.playing:
            return invalid_state("tick ignored while stopped", current_time=self.state.current_time)
        current = float(now)
        previous = self._reference
        self._reference = current
        elapsed = 0.0 if previous is None else current - previous
        result = self.tick(elapsed)
        if not self.state.playing:
            self._reference = None
        return result

    def seek_normalized(self, position: float) -> OperationResult:
        """Jump to ``start + position * (end - start)``; play state is kept."""

        try:
            fraction = float(position)
        except (TypeError, ValueError):
            return invalid_state("seek position must be a number", position=str(position))
        if math.isnan(fraction):
            return invalid_state("seek position must be a number", position="nan")
        state = self.state
        if fraction <= 0.0:
            target = state.start_time
        elif fraction >= 1.0:
            target = state.end_time
        else:
            target = state.start_time + fraction * (state.end_time - state.start_time)
            target = max(state.start_time, min(state.end_time, target))
        state.current_time = target
        if target < state.end_time:
            self._finished = False
        return ok("seeked", current_time=target)

    def set_speed(self, multiplier: float) -> OperationResult:
        if not _is_positive(multiplier):
            logger.debug(
                "Rejected playback speed",
                extra={"event": "clock.invalid_speed", "speed": str(multiplier)},
            )
            return invalid_state("speed must be a positive number", speed=str(multiplier))
        self.state.speed = float(multiplier)
        return ok("speed updated", speed=self.state.speed)

    def reset_to_sync_point(self) -> OperationResult:
        self.state.current_time = self.state.start_time
        self.state.playing = False
        self._reference = None
        self._finished = False
        return ok("rewound", current_time=self.state.current_time)
