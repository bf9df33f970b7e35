"""Convenience re-exports for test helpers."""

from __future__ import annotations

from tests.helpers.config import write_pyproject
from tests.helpers.tracks import (
    SPACING,
    build_session,
    build_track,
    point_query,
    synced_session,
    track_payload,
)

__all__ = [
    "SPACING",
    "build_session",
    "build_track",
    "point_query",
    "synced_session",
    "track_payload",
    "write_pyproject",
]
