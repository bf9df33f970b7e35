"""Logging configuration shared by the CLI and embedding applications."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

__all__ = ["JsonFormatter", "setup_logging"]

_RESERVED_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_MARKER = "_trackreplay_handler"


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, Path):
        return str(value)
    return repr(value)


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object.

    Fields passed through ``extra=`` are copied into the payload next to the
    standard ``timestamp``, ``level``, ``logger`` and ``message`` keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRIBUTES or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default, ensure_ascii=False)


def _resolve_level(value: Any) -> int:
    if isinstance(value, int):
        return value
    name = str(value or "info").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {value!r}")
    return level


def _build_handler(output: str) -> logging.Handler:
    target = (output or "stderr").strip()
    if target.lower() == "stdout":
        return logging.StreamHandler(sys.stdout)
    if target.lower() == "stderr":
        return logging.StreamHandler(sys.stderr)
    path = Path(target).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def setup_logging(config: Mapping[str, Any] | None = None) -> logging.Logger:
    """Configure the ``trackreplay`` logger hierarchy from ``config["logging"]``.

    Recognised keys are ``level`` (name or number), ``output`` (``stdout``,
    ``stderr`` or a file path) and ``format`` (``json`` or ``text``).
    Handlers installed by a previous call are replaced.
    """

    logging_cfg = dict((config or {}).get("logging", {}) or {})
    level = _resolve_level(logging_cfg.get("level", "info"))
    fmt = str(logging_cfg.get("format", "json")).lower()
    if fmt not in ("json", "text"):
        raise ValueError(f"Unknown logging format: {fmt!r}")

    handler = _build_handler(str(logging_cfg.get("output", "stderr")))
    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)

    targets = [logging.getLogger("trackreplay"), logging.getLogger("trackreplay_core")]
    for target in targets:
        for existing in list(target.handlers):
            if getattr(existing, _HANDLER_MARKER, False):
                target.removeHandler(existing)
                existing.close()
        target.addHandler(handler)
        target.setLevel(level)
    return targets[0]
