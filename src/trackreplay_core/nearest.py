"""Nearest-point queries over tracks.

All searches are linear scans over numpy arrays.  ``numpy.argmin`` returns
the first occurrence of the minimum, which gives the lowest index on exact
ties; the cross-track search only replaces its best candidate on a strictly
smaller distance so ties resolve to the lowest track index.
"""

from __future__ import annotations

from typing import Iterable, NamedTuple, Sequence

import numpy as np

from .geometry import as_coordinate_array, cartesian_from_degrees
from .tracks import Track

__all__ = [
    "PointRef",
    "nearest_point_across_tracks",
    "nearest_point_on_track",
    "nearest_point_to_coordinate",
    "nearest_time_index",
]


class PointRef(NamedTuple):
    """Location of a point inside the track store."""

    track_index: int
    point_index: int
    distance: float


def _as_query(position: Sequence[float] | np.ndarray) -> np.ndarray:
    query = np.asarray(position, dtype=float).reshape(-1)
    if query.shape != (3,):
        raise ValueError("query positions must be (x, y, z) triples")
    return query


def _squared_distances(track: Track, query: np.ndarray) -> np.ndarray:
    delta = track.cartesian - query
    return np.einsum("ij,ij->i", delta, delta)


def nearest_point_on_track(track: Track, query_position: Sequence[float] | np.ndarray) -> int | None:
    """Index of the point of ``track`` closest to a Cartesian query position.

    ``None`` is returned only when the track has no points.
    """

    if track.is_empty:
        return None
    distances = _squared_distances(track, _as_query(query_position))
    return int(np.argmin(distances))


def nearest_point_to_coordinate(track: Track, coordinate: Sequence[float]) -> int | None:
    """Same search as :func:`nearest_point_on_track` for a ``(lon, lat, alt)`` coordinate."""

    if track.is_empty:
        return None
    lon, lat, alt = as_coordinate_array(coordinate)[0]
    return nearest_point_on_track(track, cartesian_from_degrees(lon, lat, alt))


def nearest_point_across_tracks(
    query_position: Sequence[float] | np.ndarray,
    tracks: Sequence[Track] | Iterable[Track],
    *,
    include_hidden: bool = False,
) -> PointRef | None:
    """Globally nearest point over every visible, non-empty track.

    There is no distance cutoff: any candidate track yields a result.
    """

    query = _as_query(query_position)
    best: PointRef | None = None
    for track_index, track in enumerate(tracks):
        if track.is_empty or not (track.visible or include_hidden):
            continue
        distances = _squared_distances(track, query)
        point_index = int(np.argmin(distances))
        squared = float(distances[point_index])
        if best is None or squared < best.distance:
            best = PointRef(track_index, point_index, squared)
    if best is None:
        return None
    return best._replace(distance=float(np.sqrt(best.distance)))


def nearest_time_index(times: np.ndarray | Sequence[float] | None, target: float) -> int | None:
    """Index whose time is closest to ``target``; lowest index on ties."""

    if times is None:
        return None
    values = np.asarray(times, dtype=float)
    if values.size == 0:
        return None
    return int(np.argmin(np.abs(values - float(target))))
