"""Synchronised replay of recorded tracks.

The :mod:`trackreplay_core` package holds the engine; this package wires it
into a :class:`ReplaySession` with settings, legends, logging and a CLI.
"""

from __future__ import annotations

from ._version import __version__
from .configuration import load_config
from .legend import Legend, build_legend, color_for_value, convert_speed
from .session import Frame, Marker, ReplaySession
from .settings import ConfigurationError, DisplaySettings, ReplaySettings

__all__ = [
    "ConfigurationError",
    "DisplaySettings",
    "Frame",
    "Legend",
    "Marker",
    "ReplaySession",
    "ReplaySettings",
    "__version__",
    "build_legend",
    "color_for_value",
    "convert_speed",
    "load_config",
]
