from __future__ import annotations

import pytest

from trackreplay_core.gradient import (
    COLOR_MODE_GRADIENTS,
    NAMED_COLORS,
    Color,
    Gradient,
    GradientError,
    GradientStop,
    interpolate_color,
    normalize,
)


def test_hex_parsing() -> None:
    assert Color.from_hex("#FF0000") == Color(1.0, 0.0, 0.0)
    assert Color.from_hex("0f0") == Color(0.0, 1.0, 0.0)
    assert Color.from_hex("#0000FF80").a == pytest.approx(128 / 255)
    with pytest.raises(GradientError):
        Color.from_hex("#12345")
    with pytest.raises(GradientError):
        Color.from_hex("#GGGGGG")


def test_hex_formatting() -> None:
    assert NAMED_COLORS["green"].to_hex() == "#008000"
    assert Color(1.0, 0.0, 0.0, 0.5).to_hex(alpha=True) == "#FF000080"


def test_coerce() -> None:
    assert Color.coerce("Purple") == NAMED_COLORS["purple"]
    assert Color.coerce([0.1, 0.2, 0.3]) == Color(0.1, 0.2, 0.3, 1.0)
    with pytest.raises(GradientError):
        Color.coerce([0.1, 0.2])


@pytest.mark.parametrize(
    ("value", "expected"),
    [(50.0, 0.5), (-10.0, 0.0), (150.0, 1.0), (0.0, 0.0)],
)
def test_normalize(value: float, expected: float) -> None:
    assert normalize(value, 0.0, 100.0) == pytest.approx(expected)


def test_normalize_degenerate_range() -> None:
    assert normalize(5.0, 10.0, 10.0) == 0.0
    assert normalize(5.0, 10.0, 0.0) == 0.0


def test_speed_gradient_endpoints_and_stops() -> None:
    gradient = COLOR_MODE_GRADIENTS["speed"]

    assert gradient.color_at(0.0) == NAMED_COLORS["blue"]
    assert gradient.color_at(0.25) == NAMED_COLORS["cyan"]
    assert gradient.color_at(1.0) == NAMED_COLORS["red"]
    assert gradient.color_at(2.0) == NAMED_COLORS["red"]


def test_continuous_interpolation() -> None:
    gradient = COLOR_MODE_GRADIENTS["speed"]

    color = gradient.color_at(0.125)

    assert tuple(color) == pytest.approx((0.0, 0.5, 1.0, 1.0))


def test_discrete_mode_uses_lower_stop() -> None:
    gradient = COLOR_MODE_GRADIENTS["speed"]

    assert gradient.color_at(0.3, continuous=False) == NAMED_COLORS["cyan"]
    assert gradient.color_at(0.99, continuous=False) == NAMED_COLORS["yellow"]
    assert gradient.color_at(1.0, continuous=False) == NAMED_COLORS["red"]


def test_mode_tables() -> None:
    assert set(COLOR_MODE_GRADIENTS) == {"speed", "acceleration", "timeDifference", "lostTime"}
    assert COLOR_MODE_GRADIENTS["acceleration"].colors[0] == NAMED_COLORS["purple"]
    assert COLOR_MODE_GRADIENTS["lostTime"].colors == (
        NAMED_COLORS["green"],
        NAMED_COLORS["yellow"],
        NAMED_COLORS["red"],
    )


def test_evenly_spaced_positions() -> None:
    gradient = Gradient.evenly_spaced(["green", "yellow", "red"])

    assert [stop.position for stop in gradient.stops] == [0.0, 0.5, 1.0]


def test_gradient_validation() -> None:
    with pytest.raises(GradientError):
        Gradient(())
    with pytest.raises(GradientError):
        Gradient.from_pairs([(0.5, "red"), (0.1, "blue")])
    with pytest.raises(GradientError):
        Gradient.from_pairs([(0.0, "red"), (1.5, "blue")])


def test_interpolate_requires_stops() -> None:
    with pytest.raises(GradientError):
        interpolate_color([], 0.5)
    single = [GradientStop(0.5, NAMED_COLORS["red"])]
    assert interpolate_color(single, 0.0) == NAMED_COLORS["red"]
    assert interpolate_color(single, 1.0) == NAMED_COLORS["red"]
