"""Command handlers for the trackreplay CLI."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Mapping

from trackreplay_core.flags import FlagKind
from trackreplay_core.geometry import cartesian_from_degrees
from trackreplay_core.results import TrackReplayError

from ..legend import build_legend
from ..session import Frame, ReplaySession
from ..settings import ConfigurationError, ReplaySettings
from .errors import CliError

__all__ = ["handle_legend", "handle_sync", "load_bundle"]


def load_bundle(path: Path) -> list[Mapping[str, Any]]:
    """Read the ``{"tracks": [...]}`` bundle produced by an ingestion step."""

    if not path.exists():
        raise CliError(
            f"Track bundle '{path}' does not exist.",
            category="not_found",
            context={"path": str(path)},
        )
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CliError(
            f"Unable to read track bundle '{path}': {exc}",
            category="io",
            context={"path": str(path)},
        ) from exc
    tracks = payload.get("tracks") if isinstance(payload, Mapping) else None
    if not isinstance(tracks, list) or not all(isinstance(item, Mapping) for item in tracks):
        raise CliError(
            f"Track bundle '{path}' must contain a 'tracks' list.",
            category="usage",
            context={"path": str(path)},
        )
    return tracks


def _settings(config: Mapping[str, Any]) -> ReplaySettings:
    try:
        return ReplaySettings.from_config(config)
    except ConfigurationError as exc:
        raise CliError(str(exc), category="usage", context={"source": config.get("_config_path")}) from exc


def _frame_payload(frame: Frame) -> dict[str, Any]:
    return {
        "current_time": frame.current_time,
        "normalized_position": frame.normalized_position,
        "markers": [
            {
                "track_index": marker.track_index,
                "name": marker.name,
                "point_index": marker.point_index,
                "time": marker.time,
                "coordinate": list(marker.coordinate),
            }
            for marker in frame.markers
        ],
    }


def handle_sync(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    tracks = load_bundle(namespace.bundle)
    try:
        session = ReplaySession(_settings(config), tracks)
    except TrackReplayError as exc:
        raise CliError(str(exc), category="usage", context={"path": str(namespace.bundle)}) from exc

    for kind, position in ((FlagKind.START, namespace.start), (FlagKind.FINISH, namespace.finish)):
        if namespace.geodetic:
            position = tuple(float(value) for value in cartesian_from_degrees(*position))
        session.pick_up(kind)
        result = session.place_at(kind, position)
        if not result.ok:
            raise CliError.from_result(result, prefix=f"{kind.value} flag: ")

    session.seek_normalized(namespace.seek)
    payload = dict(session.describe())
    payload["frame"] = _frame_payload(session.frame())
    return json.dumps(payload, indent=2, sort_keys=True)


def handle_legend(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    display = _settings(config).display
    changes: dict[str, Any] = {"color_mode": namespace.mode, "speed_units": namespace.units}
    if namespace.legend_min is not None:
        changes["legend_min"] = namespace.legend_min
    if namespace.legend_max is not None:
        changes["legend_max"] = namespace.legend_max
    try:
        display = display.with_changes(**changes)
    except ConfigurationError as exc:
        raise CliError(str(exc), category="usage") from exc

    legend = build_legend(display)
    payload = {
        "mode": legend.mode,
        "unit": legend.unit,
        "stops": [
            {"position": stop.position, "color": stop.color.to_hex()}
            for stop in (legend.gradient.stops if legend.gradient is not None else ())
        ],
        "ticks": [{"fraction": fraction, "value": value} for fraction, value in legend.ticks],
    }
    return json.dumps(payload, indent=2)

