"""Core engine for synchronised multi-track playback.

The package is free of any rendering or UI concern: it stores tracks,
answers nearest-point queries, manages the start/finish flags, aligns the
tracks to a shared clock and maps metrics to colours.
"""

from __future__ import annotations

from .clock import AnimationClock, AnimationState
from .flags import (
    IDLE,
    PICKED_UP,
    Deployed,
    FlagController,
    FlagKind,
    FlagState,
    Idle,
    PickedUp,
)
from .geometry import cartesian_from_degrees
from .gradient import (
    COLOR_MODE_GRADIENTS,
    Color,
    Gradient,
    GradientError,
    GradientStop,
    interpolate_color,
    normalize,
)
from .nearest import (
    PointRef,
    nearest_point_across_tracks,
    nearest_point_on_track,
    nearest_point_to_coordinate,
    nearest_time_index,
)
from .results import OperationResult, Status, TrackReplayError
from .sync import SyncReport, TimeSyncEngine, reset_synchronisation, synchronise
from .tracks import PointInfo, SyncedSample, Track, TrackStore, TrackValidationError

__all__ = [
    "AnimationClock",
    "AnimationState",
    "COLOR_MODE_GRADIENTS",
    "Color",
    "Deployed",
    "FlagController",
    "FlagKind",
    "FlagState",
    "Gradient",
    "GradientError",
    "GradientStop",
    "IDLE",
    "Idle",
    "OperationResult",
    "PICKED_UP",
    "PickedUp",
    "PointInfo",
    "PointRef",
    "Status",
    "SyncReport",
    "SyncedSample",
    "TimeSyncEngine",
    "Track",
    "TrackReplayError",
    "TrackStore",
    "TrackValidationError",
    "cartesian_from_degrees",
    "interpolate_color",
    "nearest_point_across_tracks",
    "nearest_point_on_track",
    "nearest_point_to_coordinate",
    "nearest_time_index",
    "normalize",
    "reset_synchronisation",
    "synchronise",
]
