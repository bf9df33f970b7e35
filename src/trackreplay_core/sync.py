"""Align every track to the time of the start flag.

The track hosting the start flag is the reference.  Every other track is
shifted by a constant offset so that its point nearest to the start flag
coordinate lands on the reference time.  The shift is applied as-is: if the
source timestamps are irregular the synchronised series is not reordered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

import numpy as np

from .clock import AnimationClock
from .flags import Deployed, FlagController, FlagKind
from .nearest import nearest_point_to_coordinate
from .results import OperationResult, invalid_state, ok
from .tracks import TrackStore

__all__ = ["SyncReport", "TimeSyncEngine", "reset_synchronisation", "synchronise"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncReport:
    """Offsets applied by one synchronisation pass."""

    reference_index: int
    reference_point: int
    reference_time: float | None
    offsets: Mapping[int, float] = field(default_factory=dict)
    interval: tuple[float, float] | None = None

    @property
    def synced_indices(self) -> tuple[int, ...]:
        return tuple(sorted(self.offsets))


def _interval(store: TrackStore) -> tuple[float, float] | None:
    spans = [span for span in (track.synced_span for track in store) if span is not None]
    if not spans:
        return None
    start = min(first for first, _ in spans)
    end = max(last for _, last in spans)
    if end < start:
        # irregular source timestamps; fall back to the raw extremes
        values = np.concatenate([track.synced_times for track in store if track.synced_times is not None])
        logger.warning(
            "Synchronised series are not ordered; using raw extremes",
            extra={"event": "sync.unordered", "first_min": start, "last_max": end},
        )
        start, end = float(values.min()), float(values.max())
    return (start, end)


def synchronise(store: TrackStore, start_flag: Deployed) -> SyncReport:
    """Recompute every track's synchronised series from scratch."""

    store.clear_synced()
    reference = store[start_flag.track_index]
    point = start_flag.point_index
    if not reference.has_timestamps:
        logger.warning(
            "Reference track has no timestamps; nothing to synchronise",
            extra={"event": "sync.untimed_reference", "track_index": start_flag.track_index},
        )
        return SyncReport(start_flag.track_index, point, None)

    reference_time = float(reference.timestamps[point])
    reference_coordinate = reference.coordinate(point)
    offsets: dict[int, float] = {}
    for index, track in enumerate(store):
        if not track.visible or not track.has_timestamps:
            continue
        if track is reference:
            track.set_synced_times(track.timestamps)
            offsets[index] = 0.0
            continue
        anchor = nearest_point_to_coordinate(track, reference_coordinate)
        if anchor is None:
            continue
        offset = reference_time - float(track.timestamps[anchor])
        track.set_synced_times(track.timestamps + offset)
        offsets[index] = offset
        logger.debug(
            "Track synchronised",
            extra={
                "event": "sync.offset",
                "track_index": index,
                "anchor_index": anchor,
                "offset": offset,
            },
        )

    return SyncReport(
        reference_index=start_flag.track_index,
        reference_point=point,
        reference_time=reference_time,
        offsets=MappingProxyType(offsets),
        interval=_interval(store),
    )


def reset_synchronisation(store: TrackStore, clock: AnimationClock | None = None) -> None:
    store.clear_synced()
    if clock is not None:
        clock.reset()


class TimeSyncEngine:
    """Runs :func:`synchronise` when both flags are deployed and updates the clock."""

    def __init__(self, store: TrackStore, flags: FlagController, clock: AnimationClock) -> None:
        self._store = store
        self._flags = flags
        self._clock = clock
        self.last_report: SyncReport | None = None

    def run(self) -> OperationResult:
        start = self._flags.deployed(FlagKind.START)
        if start is None or not self._flags.both_deployed:
            return invalid_state("both flags must be deployed before synchronising")

        report = synchronise(self._store, start)
        self.last_report = report
        if report.interval is None:
            self._clock.reset()
        else:
            self._clock.set_bounds(*report.interval)

        logger.info(
            "Tracks synchronised",
            extra={
                "event": "sync.completed",
                "reference_index": report.reference_index,
                "tracks": len(report.offsets),
                "start_time": self._clock.start_time,
                "end_time": self._clock.end_time,
            },
        )
        return ok(
            "tracks synchronised",
            reference_index=report.reference_index,
            tracks=len(report.offsets),
            start_time=self._clock.start_time,
            end_time=self._clock.end_time,
        )

    def reset(self) -> None:
        reset_synchronisation(self._store, self._clock)
        self.last_report = None
