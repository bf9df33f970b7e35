"""Argument parsing helpers for the trackreplay CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from ..settings import COLOR_MODES, SPEED_UNITS
from .commands import handle_legend, handle_sync


def _triple(value: str) -> tuple[float, float, float]:
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("expected three comma separated numbers")
    try:
        return (float(parts[0]), float(parts[1]), float(parts[2]))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid position {value!r}") from None


def _fraction(value: str) -> float:
    try:
        numeric = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid position {value!r}") from None
    if not 0.0 <= numeric <= 1.0:
        raise argparse.ArgumentTypeError("seek position must lie in [0, 1]")
    return numeric


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg = dict(config.get("logging", {}) or {})
    display_cfg = config.get("display", {})
    if not isinstance(display_cfg, Mapping):
        display_cfg = {}

    parser = argparse.ArgumentParser(
        prog="trackreplay",
        description="Synchronise recorded tracks on start/finish flags and replay them.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding [tool.trackreplay].",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser(
        "sync",
        help="Place both flags on a track bundle and print the synchronised timeline.",
    )
    sync_parser.add_argument("bundle", type=Path, help="JSON bundle of parsed tracks.")
    sync_parser.add_argument(
        "--start",
        type=_triple,
        required=True,
        metavar="X,Y,Z",
        help="Start flag drop position.",
    )
    sync_parser.add_argument(
        "--finish",
        type=_triple,
        required=True,
        metavar="X,Y,Z",
        help="Finish flag drop position.",
    )
    sync_parser.add_argument(
        "--geodetic",
        action="store_true",
        help="Interpret --start/--finish as lon,lat,alt instead of Cartesian metres.",
    )
    sync_parser.add_argument(
        "--seek",
        type=_fraction,
        default=0.0,
        help="Normalised playback position of the reported frame (default: 0).",
    )
    sync_parser.set_defaults(handler=handle_sync)

    legend_parser = subparsers.add_parser("legend", help="Print the legend of a colour mode.")
    legend_parser.add_argument(
        "--mode",
        choices=COLOR_MODES,
        default=display_cfg.get("color_mode", "speed"),
        help="Colour mode (default from configuration).",
    )
    legend_parser.add_argument(
        "--units",
        choices=SPEED_UNITS,
        default=display_cfg.get("speed_units", "mph"),
        help="Speed units for the speed legend.",
    )
    legend_parser.add_argument("--min", dest="legend_min", type=float, default=None)
    legend_parser.add_argument("--max", dest="legend_max", type=float, default=None)
    legend_parser.set_defaults(handler=handle_legend)

    return parser
