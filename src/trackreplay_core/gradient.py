"""Piecewise linear colour gradients used to paint per-point metrics."""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, NamedTuple, Sequence

from .results import TrackReplayError

__all__ = [
    "COLOR_MODE_GRADIENTS",
    "Color",
    "Gradient",
    "GradientError",
    "GradientStop",
    "NAMED_COLORS",
    "interpolate_color",
    "normalize",
]


class GradientError(TrackReplayError):
    """Raised when a gradient table is malformed."""


class Color(NamedTuple):
    """RGBA colour with float channels in ``[0, 1]``."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """Parse ``#RGB``, ``#RRGGBB`` or ``#RRGGBBAA``."""

        text = value.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(char * 2 for char in text)
        if len(text) not in (6, 8):
            raise GradientError(f"invalid hex colour {value!r}")
        try:
            channels = [int(text[index : index + 2], 16) / 255.0 for index in range(0, len(text), 2)]
        except ValueError:
            raise GradientError(f"invalid hex colour {value!r}") from None
        return cls(*channels)

    @classmethod
    def coerce(cls, value: "Color | str | Sequence[float]") -> "Color":
        if isinstance(value, Color):
            return value
        if isinstance(value, str):
            named = NAMED_COLORS.get(value.lower())
            return named if named is not None else cls.from_hex(value)
        channels = [float(channel) for channel in value]
        if len(channels) not in (3, 4):
            raise GradientError("colours need three or four channels")
        return cls(*channels)

    def to_hex(self, *, alpha: bool = False) -> str:
        channels = (self.r, self.g, self.b, self.a) if alpha else (self.r, self.g, self.b)
        return "#" + "".join(f"{round(max(0.0, min(1.0, c)) * 255):02X}" for c in channels)


NAMED_COLORS: Mapping[str, Color] = MappingProxyType(
    {
        "blue": Color(0.0, 0.0, 1.0),
        "cyan": Color(0.0, 1.0, 1.0),
        "green": Color(0.0, 128 / 255, 0.0),
        "yellow": Color(1.0, 1.0, 0.0),
        "red": Color(1.0, 0.0, 0.0),
        "purple": Color(128 / 255, 0.0, 128 / 255),
        "white": Color(1.0, 1.0, 1.0),
        "black": Color(0.0, 0.0, 0.0),
    }
)


class GradientStop(NamedTuple):
    position: float
    color: Color


def normalize(value: float, minimum: float, maximum: float) -> float:
    """Map ``value`` onto ``[0, 1]`` using the legend range."""

    span = float(maximum) - float(minimum)
    if not math.isfinite(span) or span <= 0.0:
        return 0.0
    ratio = (float(value) - float(minimum)) / span
    if math.isnan(ratio):
        return 0.0
    return max(0.0, min(1.0, ratio))


def _lerp(lo: Color, hi: Color, t: float) -> Color:
    return Color(*(a + (b - a) * t for a, b in zip(lo, hi)))


def interpolate_color(stops: Sequence[GradientStop], value: float) -> Color:
    """Return the colour of ``value`` along ``stops`` (sorted ascending)."""

    if not stops:
        raise GradientError("gradient requires at least one stop")
    first = stops[0]
    last = stops[-1]
    if value <= first.position:
        return first.color
    if value >= last.position:
        return last.color
    for lo, hi in zip(stops, stops[1:]):
        if lo.position <= value <= hi.position:
            width = hi.position - lo.position
            if width <= 0.0:
                return hi.color
            return _lerp(lo.color, hi.color, (value - lo.position) / width)
    return last.color  # pragma: no cover - unreachable for sorted stops


@dataclass(frozen=True, slots=True)
class Gradient:
    """Validated, ascending gradient table."""

    stops: tuple[GradientStop, ...]

    def __post_init__(self) -> None:
        if not self.stops:
            raise GradientError("gradient requires at least one stop")
        previous = -math.inf
        for stop in self.stops:
            if not 0.0 <= stop.position <= 1.0:
                raise GradientError(f"stop position {stop.position!r} outside [0, 1]")
            if stop.position < previous:
                raise GradientError("gradient stops must be sorted by position")
            previous = stop.position

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[float, "Color | str | Sequence[float]"]]) -> "Gradient":
        return cls(tuple(GradientStop(float(position), Color.coerce(color)) for position, color in pairs))

    @classmethod
    def evenly_spaced(cls, colors: Sequence["Color | str | Sequence[float]"]) -> "Gradient":
        if not colors:
            raise GradientError("gradient requires at least one colour")
        if len(colors) == 1:
            return cls.from_pairs([(0.0, colors[0])])
        step = 1.0 / (len(colors) - 1)
        positions = [index * step for index in range(len(colors) - 1)] + [1.0]
        return cls.from_pairs(zip(positions, colors))

    def color_at(self, value: float, *, continuous: bool = True) -> Color:
        """Colour for a normalised ``value``.

        With ``continuous`` disabled the colour snaps to the lower stop of the
        bracketing pair, producing a banded legend.
        """

        if continuous:
            return interpolate_color(self.stops, value)
        chosen = self.stops[0]
        for stop in self.stops:
            if value >= stop.position:
                chosen = stop
            else:
                break
        return chosen.color

    @property
    def colors(self) -> tuple[Color, ...]:
        return tuple(stop.color for stop in self.stops)


COLOR_MODE_GRADIENTS: Mapping[str, Gradient] = MappingProxyType(
    {
        "speed": Gradient.evenly_spaced(["blue", "cyan", "green", "yellow", "red"]),
        "acceleration": Gradient.evenly_spaced(["purple", "blue", "green", "yellow", "red"]),
        "timeDifference": Gradient.evenly_spaced(["green", "yellow", "red"]),
        "lostTime": Gradient.evenly_spaced(["green", "yellow", "red"]),
    }
)
