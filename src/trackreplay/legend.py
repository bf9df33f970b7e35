"""Legend and metric colouring helpers for the active colour mode."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from trackreplay_core.gradient import COLOR_MODE_GRADIENTS, Color, Gradient, normalize

from .settings import DisplaySettings

__all__ = [
    "LEGEND_STEPS",
    "Legend",
    "MPH_TO_KPH",
    "METRIC_KEYS",
    "build_legend",
    "color_for_value",
    "convert_speed",
    "metric_value",
    "unit_for_mode",
]

MPH_TO_KPH = 1.60934
LEGEND_STEPS = 5

# colour mode -> metric series name on the track
METRIC_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "speed": "speed",
        "acceleration": "acceleration",
        "timeDifference": "time_difference",
        "lostTime": "lost_time",
    }
)


def convert_speed(value_mph: float, units: str) -> float:
    """Speeds are stored in mph; convert for display in ``units``."""

    if units == "kph":
        return float(value_mph) * MPH_TO_KPH
    return float(value_mph)


def unit_for_mode(settings: DisplaySettings) -> str:
    mode = settings.color_mode
    if mode == "speed":
        return "mph" if settings.speed_units == "mph" else "km/h"
    if mode == "acceleration":
        return "m/s²"
    if mode in ("timeDifference", "lostTime"):
        return "s"
    return ""


@dataclass(frozen=True, slots=True)
class Legend:
    mode: str
    unit: str
    gradient: Gradient | None
    ticks: tuple[tuple[float, float], ...]

    @property
    def stop_colors(self) -> tuple[Color, ...]:
        return self.gradient.colors if self.gradient is not None else ()


def build_legend(settings: DisplaySettings, *, steps: int = LEGEND_STEPS) -> Legend:
    """Gradient and ``(fraction, value)`` ticks for the configured range.

    ``noColor`` yields a legend without gradient or ticks.
    """

    gradient = COLOR_MODE_GRADIENTS.get(settings.color_mode)
    if gradient is None:
        return Legend(settings.color_mode, "", None, ())
    low = settings.legend_min
    high = settings.legend_max
    ticks = tuple(
        (index / steps, low + (high - low) * (index / steps)) for index in range(steps + 1)
    )
    return Legend(settings.color_mode, unit_for_mode(settings), gradient, ticks)


def metric_value(raw: float, settings: DisplaySettings) -> float:
    """Express a stored metric in the units the legend range uses."""

    if settings.color_mode == "speed":
        return convert_speed(raw, settings.speed_units)
    return float(raw)


def color_for_value(raw: float, settings: DisplaySettings) -> Color | None:
    gradient = COLOR_MODE_GRADIENTS.get(settings.color_mode)
    if gradient is None:
        return None
    position = normalize(metric_value(raw, settings), settings.legend_min, settings.legend_max)
    return gradient.color_at(position, continuous=settings.continuous_colors)
