"""Helpers to load project-level configuration files."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping as ABCMapping
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore


CONFIG_ENV_VAR = "TRACKREPLAY_CONFIG"
_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "trackreplay"


def _plain_tables(table: ABCMapping[str, Any]) -> dict[str, Any]:
    """Copy a TOML table, turning nested tables into plain dictionaries."""

    return {
        str(key): _plain_tables(value) if isinstance(value, ABCMapping) else value
        for key, value in table.items()
    }


def _pyproject_for(candidate: Path) -> Path | None:
    """A directory maps to its ``pyproject.toml``; any other file is ignored."""

    candidate = candidate.expanduser()
    if candidate.name == _PROJECT_FILENAME:
        return candidate.resolve(strict=False)
    if candidate.suffix:
        return None
    return (candidate / _PROJECT_FILENAME).resolve(strict=False)


def _distinct(paths: Iterable[Path]) -> list[Path]:
    ordered: list[Path] = []
    for path in paths:
        resolved = path.expanduser().resolve(strict=False)
        if resolved not in ordered:
            ordered.append(resolved)
    return ordered


def _read_toml(path: Path) -> ABCMapping[str, Any] | None:
    if not path.is_file():
        return None
    with path.open("rb") as handle:
        return tomllib.load(handle)


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.trackreplay]`` section from ``pyproject.toml``."""

    pyproject_path = _pyproject_for(Path(path))
    document = _read_toml(pyproject_path) if pyproject_path is not None else None
    if not document:
        return None
    tool = document.get("tool")
    section = tool.get(_TOOL_SECTION) if isinstance(tool, ABCMapping) else None
    if not isinstance(section, ABCMapping):
        return None
    return _plain_tables(section), pyproject_path


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Resolve configuration from ``path``, ``$TRACKREPLAY_CONFIG`` or the CWD.

    The returned mapping carries the resolved source under ``_config_path``
    (``None`` when no configuration was found).
    """

    env_config = os.environ.get(CONFIG_ENV_VAR)
    candidates: list[Path] = []
    if path is not None:
        candidates.append(Path(path))
    if env_config:
        candidates.append(Path(env_config))
    candidates.append(Path.cwd())

    for candidate in _distinct(candidates):
        loaded = load_project_config(candidate)
        if loaded is None:
            continue
        payload, source = loaded
        payload["_config_path"] = str(source)
        return payload

    return {"_config_path": None}


__all__ = [
    "CONFIG_ENV_VAR",
    "load_config",
    "load_project_config",
]
