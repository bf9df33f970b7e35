"""In-memory track store.

A :class:`Track` pairs an ordered list of ``(lon, lat, alt)`` coordinates
with absolute timestamps and any number of per-point metric series.  The
:class:`TrackStore` owns the loaded tracks for the lifetime of a session.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, NamedTuple, Sequence

import numpy as np

from .geometry import as_coordinate_array, cartesian_from_degrees
from .gradient import Color
from .results import TrackReplayError

__all__ = [
    "PointInfo",
    "SyncedSample",
    "Track",
    "TrackStore",
    "TrackValidationError",
]

logger = logging.getLogger(__name__)

DEFAULT_TRACK_COLOR = Color(1.0, 1.0, 0.0)


class TrackValidationError(TrackReplayError):
    """Raised when a track's arrays are malformed or disagree in length."""


def _float_series(values: Any, label: str) -> np.ndarray:
    try:
        return np.asarray(values, dtype=float).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise TrackValidationError(f"{label} must be numeric: {exc}") from exc


class SyncedSample(NamedTuple):
    time: float
    coordinate: tuple[float, float, float]


class PointInfo(NamedTuple):
    """Per-point payload for hover highlighting."""

    track_index: int
    name: str
    point_index: int
    coordinate: tuple[float, float, float]
    elevation: float
    timestamp: float | None
    speed: float | None


@dataclass(eq=False)
class Track:
    name: str
    coordinates: np.ndarray
    timestamps: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=float))
    metrics: Mapping[str, np.ndarray] = field(default_factory=dict)
    color: Color = DEFAULT_TRACK_COLOR
    visible: bool = True
    _cartesian: np.ndarray = field(init=False, repr=False)
    _synced_times: np.ndarray | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        self.name = str(self.name)
        try:
            self.coordinates = as_coordinate_array(self.coordinates)
        except (TypeError, ValueError) as exc:
            raise TrackValidationError(f"track {self.name!r} has malformed coordinates: {exc}") from exc
        self.timestamps = _float_series(self.timestamps, f"timestamps of track {self.name!r}")
        count = len(self.coordinates)
        if len(self.timestamps) not in (0, count):
            raise TrackValidationError(
                f"track {self.name!r} has {count} coordinates but {len(self.timestamps)} timestamps"
            )
        metrics: dict[str, np.ndarray] = {}
        for key, values in dict(self.metrics).items():
            series = _float_series(values, f"metric {key!r} of track {self.name!r}")
            if len(series) != count:
                raise TrackValidationError(
                    f"metric {key!r} of track {self.name!r} has {len(series)} values, expected {count}"
                )
            metrics[str(key)] = series
        self.metrics = MappingProxyType(metrics)
        self.color = Color.coerce(self.color)
        self.visible = bool(self.visible)
        if count:
            self._cartesian = cartesian_from_degrees(
                self.coordinates[:, 0], self.coordinates[:, 1], self.coordinates[:, 2]
            )
        else:
            self._cartesian = np.zeros((0, 3), dtype=float)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Track":
        """Build a track from an ingestion payload."""

        metrics = {
            key: payload[key]
            for key in ("speed", "acceleration")
            if payload.get(key) is not None
        }
        extra = payload.get("metrics")
        if isinstance(extra, Mapping):
            metrics.update(extra)
        timestamps = payload.get("timestamps")
        return cls(
            name=payload.get("name", "track"),
            coordinates=payload.get("coordinates", ()),
            timestamps=timestamps if timestamps is not None else (),
            metrics=metrics,
            color=payload.get("color") or DEFAULT_TRACK_COLOR,
            visible=payload.get("visible", True),
        )

    def __len__(self) -> int:
        return len(self.coordinates)

    @property
    def is_empty(self) -> bool:
        return len(self.coordinates) == 0

    @property
    def has_timestamps(self) -> bool:
        return len(self.timestamps) > 0

    @property
    def cartesian(self) -> np.ndarray:
        """Earth-centred Cartesian positions of every point, ``(n, 3)``."""

        return self._cartesian

    @property
    def speed(self) -> np.ndarray | None:
        return self.metrics.get("speed")

    @property
    def acceleration(self) -> np.ndarray | None:
        return self.metrics.get("acceleration")

    @property
    def bounds(self) -> tuple[float, float, float, float] | None:
        """``(west, south, east, north)`` in degrees, ``None`` when empty."""

        if self.is_empty:
            return None
        lon = self.coordinates[:, 0]
        lat = self.coordinates[:, 1]
        return (float(lon.min()), float(lat.min()), float(lon.max()), float(lat.max()))

    def coordinate(self, index: int) -> tuple[float, float, float]:
        lon, lat, alt = self.coordinates[index]
        return (float(lon), float(lat), float(alt))

    def point_info(self, index: int, *, track_index: int = -1) -> PointInfo:
        timestamp = float(self.timestamps[index]) if self.has_timestamps else None
        speed = self.speed
        return PointInfo(
            track_index=track_index,
            name=self.name,
            point_index=index,
            coordinate=self.coordinate(index),
            elevation=float(self.coordinates[index, 2]),
            timestamp=timestamp,
            speed=float(speed[index]) if speed is not None else None,
        )

    # ------------------------------------------------------------------
    # Synchronised series
    # ------------------------------------------------------------------
    @property
    def synced_times(self) -> np.ndarray | None:
        return self._synced_times

    def set_synced_times(self, times: Sequence[float] | np.ndarray) -> None:
        values = np.asarray(times, dtype=float).reshape(-1)
        if len(values) != len(self.coordinates):
            raise TrackValidationError(
                f"synced series of track {self.name!r} must have {len(self.coordinates)} entries"
            )
        self._synced_times = values

    @property
    def synced_timestamps(self) -> tuple[SyncedSample, ...] | None:
        """Synchronised times paired with the original coordinates."""

        times = self._synced_times
        if times is None:
            return None
        return tuple(SyncedSample(float(time), self.coordinate(index)) for index, time in enumerate(times))

    def clear_synced(self) -> None:
        self._synced_times = None

    @property
    def synced_span(self) -> tuple[float, float] | None:
        """First and last synchronised times, if any."""

        times = self._synced_times
        if times is None or len(times) == 0:
            return None
        return (float(times[0]), float(times[-1]))


class TrackStore:
    """Ordered collection of the tracks loaded in a session."""

    __slots__ = ("_tracks",)

    def __init__(self, tracks: Sequence[Track] = ()) -> None:
        self._tracks: list[Track] = []
        for track in tracks:
            self.add_track(track)

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._tracks)

    def __getitem__(self, index: int) -> Track:
        if index < 0:
            raise IndexError("track index must be non-negative")
        return self._tracks[index]

    def is_valid_index(self, index: int) -> bool:
        return 0 <= index < len(self._tracks)

    def add_track(self, track: Track) -> int:
        if not isinstance(track, Track):
            raise TypeError("add_track expects a Track instance")
        self._tracks.append(track)
        index = len(self._tracks) - 1
        logger.debug(
            "Track added",
            extra={
                "event": "tracks.added",
                "track_index": index,
                "track_name": track.name,
                "points": len(track),
            },
        )
        return index

    def remove_track(self, index: int) -> Track:
        """Remove and return the track at ``index``; later indices shift down."""

        if not self.is_valid_index(index):
            raise IndexError(f"track index {index} out of range")
        track = self._tracks.pop(index)
        logger.debug(
            "Track removed",
            extra={"event": "tracks.removed", "track_index": index, "track_name": track.name},
        )
        return track

    def set_visible(self, index: int, visible: bool) -> None:
        self[index].visible = bool(visible)

    def visible_indices(self) -> list[int]:
        return [index for index, track in enumerate(self._tracks) if track.visible]

    def bounds(self) -> tuple[float, float, float, float] | None:
        """Union of the visible tracks' bounds."""

        west = south = math.inf
        east = north = -math.inf
        for track in self._tracks:
            if not track.visible:
                continue
            box = track.bounds
            if box is None:
                continue
            west = min(west, box[0])
            south = min(south, box[1])
            east = max(east, box[2])
            north = max(north, box[3])
        if west == math.inf:
            return None
        return (west, south, east, north)

    def clear_synced(self) -> None:
        for track in self._tracks:
            track.clear_synced()
