"""Conversions between geodetic coordinates and Earth-centred Cartesian metres."""

from __future__ import annotations

from typing import Sequence

import numpy as np

__all__ = [
    "WGS84_ECCENTRICITY_SQUARED",
    "WGS84_SEMI_MAJOR_AXIS",
    "as_coordinate_array",
    "cartesian_from_degrees",
]

WGS84_SEMI_MAJOR_AXIS = 6378137.0
WGS84_FLATTENING = 1.0 / 298.257223563
WGS84_ECCENTRICITY_SQUARED = WGS84_FLATTENING * (2.0 - WGS84_FLATTENING)


def as_coordinate_array(coordinates: Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
    """Return ``coordinates`` as an ``(n, 3)`` float array of ``(lon, lat, alt)``.

    Two-component coordinates get a zero altitude.
    """

    array = np.asarray(coordinates, dtype=float)
    if array.size == 0:
        return np.zeros((0, 3), dtype=float)
    if array.ndim == 1:
        array = array.reshape(1, -1)
    if array.ndim != 2 or array.shape[1] not in (2, 3):
        raise ValueError("coordinates must be (lon, lat) or (lon, lat, alt) triples")
    if array.shape[1] == 2:
        array = np.column_stack([array, np.zeros(len(array), dtype=float)])
    return array


def cartesian_from_degrees(
    longitude: float | np.ndarray,
    latitude: float | np.ndarray,
    altitude: float | np.ndarray = 0.0,
) -> np.ndarray:
    """Convert WGS84 longitude/latitude/height to ECEF ``(x, y, z)`` metres.

    Scalars produce a ``(3,)`` array; arrays produce ``(n, 3)``.
    """

    lon = np.radians(np.asarray(longitude, dtype=float))
    lat = np.radians(np.asarray(latitude, dtype=float))
    alt = np.asarray(altitude, dtype=float)

    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)
    prime_vertical = WGS84_SEMI_MAJOR_AXIS / np.sqrt(
        1.0 - WGS84_ECCENTRICITY_SQUARED * sin_lat * sin_lat
    )
    x = (prime_vertical + alt) * cos_lat * np.cos(lon)
    y = (prime_vertical + alt) * cos_lat * np.sin(lon)
    z = (prime_vertical * (1.0 - WGS84_ECCENTRICITY_SQUARED) + alt) * sin_lat
    return np.stack([x, y, z], axis=-1)

