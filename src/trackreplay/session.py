"""Replay session owning the tracks, flags and playback clock.

:class:`ReplaySession` is the single context object handed to rendering
and UI collaborators.  They read :meth:`ReplaySession.frame` once per
rendered frame and issue commands through the methods below; every
command runs to completion (including a cascading resynchronisation)
before returning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from trackreplay_core.clock import AnimationClock
from trackreplay_core.flags import FlagController, FlagKind
from trackreplay_core.gradient import Color
from trackreplay_core.nearest import nearest_point_across_tracks, nearest_time_index
from trackreplay_core.results import OperationResult, invalid_state, ok
from trackreplay_core.sync import TimeSyncEngine
from trackreplay_core.tracks import PointInfo, Track, TrackStore

from .legend import METRIC_KEYS, Legend, build_legend, color_for_value
from .settings import DisplaySettings, ReplaySettings

__all__ = ["Frame", "Marker", "ReplaySession"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Marker:
    """Current position of one synchronised track."""

    track_index: int
    name: str
    color: Color
    point_index: int
    time: float
    coordinate: tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class Frame:
    """Snapshot published to the renderer after each tick."""

    current_time: float
    start_time: float
    end_time: float
    normalized_position: float
    playing: bool
    markers: tuple[Marker, ...]


class ReplaySession:
    def __init__(
        self,
        settings: ReplaySettings | None = None,
        tracks: Sequence[Track | Mapping[str, Any]] = (),
    ) -> None:
        self.settings = settings or ReplaySettings()
        self.display: DisplaySettings = self.settings.display
        self.tracks = TrackStore()
        self.clock = AnimationClock(speed=self.settings.speed, time_scale=self.settings.time_scale)
        self.flags = FlagController(
            self.tracks,
            on_synchronise=self._synchronise,
            on_reset=self._reset_synchronisation,
        )
        self.sync = TimeSyncEngine(self.tracks, self.flags, self.clock)
        for track in tracks:
            self.add_track(track)

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any] | None,
        tracks: Sequence[Track | Mapping[str, Any]] = (),
    ) -> "ReplaySession":
        return cls(ReplaySettings.from_config(config), tracks)

    def _synchronise(self) -> OperationResult:
        return self.sync.run()

    def _reset_synchronisation(self) -> None:
        self.sync.reset()

    # ------------------------------------------------------------------
    # Track store
    # ------------------------------------------------------------------
    def add_track(self, track: Track | Mapping[str, Any]) -> int:
        if not isinstance(track, Track):
            track = Track.from_mapping(track)
        return self.tracks.add_track(track)

    def remove_track(self, index: int) -> OperationResult:
        """Drop a track and keep the flag references consistent.

        A flag hosted by the removed track is retracted and the previous
        synchronisation is discarded.  Otherwise flags on later tracks shift
        down with their track and the tracks are synchronised again, or
        everything is cleared when fewer than two visible tracks remain.
        """

        if not self.tracks.is_valid_index(index):
            return invalid_state(f"no track at index {index}", track_index=index)
        removed = self.tracks.remove_track(index)
        retracted = self.flags.on_track_removed(index)
        logger.info(
            "Track removed from session",
            extra={
                "event": "session.track_removed",
                "track_index": index,
                "track_name": removed.name,
                "retracted": [kind.value for kind in retracted],
            },
        )
        if retracted:
            self.sync.reset()
            return ok(
                f"track {removed.name!r} removed; flags retracted",
                track_index=index,
                retracted=",".join(kind.value for kind in retracted),
                synchronised=False,
            )
        if self.flags.both_deployed:
            if len(self.tracks.visible_indices()) < 2:
                self.clear_all()
                return ok(
                    f"track {removed.name!r} removed; session cleared",
                    track_index=index,
                    synchronised=False,
                )
            result = self.sync.run()
            return ok(
                f"track {removed.name!r} removed",
                track_index=index,
                synchronised=result.ok,
            )
        return ok(f"track {removed.name!r} removed", track_index=index, synchronised=False)

    def set_visible(self, index: int, visible: bool) -> OperationResult:
        """Toggle visibility; a new synchronisation must be requested explicitly."""

        if not self.tracks.is_valid_index(index):
            return invalid_state(f"no track at index {index}", track_index=index)
        self.tracks.set_visible(index, visible)
        return ok("visibility updated", track_index=index, visible=bool(visible))

    def bounds(self) -> tuple[float, float, float, float] | None:
        return self.tracks.bounds()

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------
    def pick_up(self, kind: FlagKind | str) -> OperationResult:
        return self.flags.pick_up(kind)

    def place_at(self, kind: FlagKind | str, query_position: Sequence[float]) -> OperationResult:
        return self.flags.place_at(kind, query_position)

    def move_flag(self, kind: FlagKind | str, query_position: Sequence[float]) -> OperationResult:
        return self.flags.move(kind, query_position)

    def clear_flag(self, kind: FlagKind | str) -> OperationResult:
        return self.flags.clear(kind)

    def clear_all(self) -> OperationResult:
        return self.flags.clear_all()

    def resync(self) -> OperationResult:
        return self.sync.run()

    def flag_positions(self) -> dict[FlagKind, tuple[float, float, float]]:
        return self.flags.deployed_positions()

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------
    def play(self, now: float | None = None) -> OperationResult:
        return self.clock.play(now)

    def pause(self) -> OperationResult:
        return self.clock.pause()

    def tick(self, elapsed_seconds: float) -> OperationResult:
        return self.clock.tick(elapsed_seconds)

    def tick_at(self, now: float) -> OperationResult:
        return self.clock.tick_at(now)

    def seek_normalized(self, position: float) -> OperationResult:
        return self.clock.seek_normalized(position)

    def set_speed(self, multiplier: float) -> OperationResult:
        return self.clock.set_speed(multiplier)

    def reset_to_sync_point(self) -> OperationResult:
        return self.clock.reset_to_sync_point()

    def markers(self) -> tuple[Marker, ...]:
        """Point of each visible synchronised track closest to the current time."""

        now = self.clock.current_time
        markers: list[Marker] = []
        for index, track in enumerate(self.tracks):
            if not track.visible:
                continue
            point = nearest_time_index(track.synced_times, now)
            if point is None:
                continue
            markers.append(
                Marker(
                    track_index=index,
                    name=track.name,
                    color=track.color,
                    point_index=point,
                    time=float(track.synced_times[point]),
                    coordinate=track.coordinate(point),
                )
            )
        return tuple(markers)

    def frame(self) -> Frame:
        clock = self.clock
        return Frame(
            current_time=clock.current_time,
            start_time=clock.start_time,
            end_time=clock.end_time,
            normalized_position=clock.normalized_position,
            playing=clock.playing,
            markers=self.markers(),
        )

    # ------------------------------------------------------------------
    # Queries and colouring
    # ------------------------------------------------------------------
    def hover(self, query_position: Sequence[float]) -> PointInfo | None:
        """Nearest visible point to a picked position, for highlighting."""

        target = nearest_point_across_tracks(query_position, self.tracks)
        if target is None:
            return None
        track = self.tracks[target.track_index]
        return track.point_info(target.point_index, track_index=target.track_index)

    def update_display(self, **changes: Any) -> DisplaySettings:
        self.display = self.display.with_changes(**changes)
        return self.display

    def legend(self) -> Legend:
        return build_legend(self.display)

    def point_color(self, track_index: int, point_index: int) -> Color:
        """Metric colour of one point; the track colour when no metric applies."""

        track = self.tracks[track_index]
        key = METRIC_KEYS.get(self.display.color_mode)
        series = track.metrics.get(key) if key is not None else None
        if series is None:
            return track.color
        color = color_for_value(float(series[point_index]), self.display)
        return color if color is not None else track.color

    def describe(self) -> Mapping[str, Any]:
        """JSON-friendly summary of the synchronisation state."""

        report = self.sync.last_report
        positions = self.flag_positions()
        return {
            "tracks": [track.name for track in self.tracks],
            "flags": {kind.value: list(coordinate) for kind, coordinate in positions.items()},
            "reference_index": report.reference_index if report else None,
            "offsets": {str(index): offset for index, offset in (report.offsets.items() if report else ())},
            "start_time": self.clock.start_time,
            "end_time": self.clock.end_time,
        }
