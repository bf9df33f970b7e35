"""Typed session settings parsed from ``[tool.trackreplay]``."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from trackreplay_core.results import TrackReplayError

__all__ = [
    "COLOR_MODES",
    "ConfigurationError",
    "DisplaySettings",
    "ReplaySettings",
    "SPEED_UNITS",
]

COLOR_MODES: tuple[str, ...] = ("speed", "acceleration", "timeDifference", "lostTime", "noColor")
SPEED_UNITS: tuple[str, ...] = ("mph", "kph")


class ConfigurationError(TrackReplayError):
    """Raised when ``[tool.trackreplay]`` holds an invalid value."""


def _positive(value: Any, name: str) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(numeric) or numeric <= 0.0:
        raise ConfigurationError(f"{name} must be a positive number, got {value!r}")
    return numeric


def _finite(value: Any, name: str) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(numeric):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return numeric


@dataclass(frozen=True, slots=True)
class DisplaySettings:
    """Colouring and legend preferences."""

    color_mode: str = "speed"
    continuous_colors: bool = True
    speed_units: str = "mph"
    legend_min: float = 0.0
    legend_max: float = 100.0

    def __post_init__(self) -> None:
        if self.color_mode not in COLOR_MODES:
            raise ConfigurationError(
                f"unknown color_mode {self.color_mode!r}; expected one of {', '.join(COLOR_MODES)}"
            )
        if self.speed_units not in SPEED_UNITS:
            raise ConfigurationError(f"speed_units must be 'mph' or 'kph', got {self.speed_units!r}")
        if self.legend_max < self.legend_min:
            raise ConfigurationError("legend_max must not be smaller than legend_min")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> "DisplaySettings":
        if not payload:
            return cls()
        defaults = cls()
        return cls(
            color_mode=str(payload.get("color_mode", defaults.color_mode)),
            continuous_colors=bool(payload.get("continuous_colors", defaults.continuous_colors)),
            speed_units=str(payload.get("speed_units", defaults.speed_units)).lower(),
            legend_min=_finite(payload.get("legend_min", defaults.legend_min), "legend_min"),
            legend_max=_finite(payload.get("legend_max", defaults.legend_max), "legend_max"),
        )

    def with_changes(self, **changes: Any) -> "DisplaySettings":
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class ReplaySettings:
    """Session-wide settings."""

    time_scale: float = 1.0
    speed: float = 1.0
    display: DisplaySettings = field(default_factory=DisplaySettings)
    logging: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None) -> "ReplaySettings":
        """Build settings from the ``[tool.trackreplay]`` mapping."""

        config = dict(config or {})
        display_raw = config.get("display")
        if display_raw is not None and not isinstance(display_raw, Mapping):
            raise ConfigurationError("[tool.trackreplay.display] must be a table")
        logging_raw = config.get("logging")
        if logging_raw is not None and not isinstance(logging_raw, Mapping):
            raise ConfigurationError("[tool.trackreplay.logging] must be a table")
        return cls(
            time_scale=_positive(config.get("time_scale", 1.0), "time_scale"),
            speed=_positive(config.get("speed", 1.0), "speed"),
            display=DisplaySettings.from_mapping(display_raw),
            logging=MappingProxyType(dict(logging_raw or {})),
        )
