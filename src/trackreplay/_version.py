"""Resolve and validate the installed trackreplay version."""

from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

PACKAGE_NAME = "trackreplay"
_CHANGELOG_HEADING = re.compile(r"^## v(?P<version>\d+\.\d+\.\d+)\b")


def _changelog_version() -> str:
    """Read the newest ``## vX.Y.Z`` heading of a source checkout's changelog."""

    here = Path(__file__).resolve()
    for root in here.parents[1:3]:
        changelog = root / "CHANGELOG.md"
        if not changelog.is_file():
            continue
        for line in changelog.read_text(encoding="utf-8").splitlines():
            match = _CHANGELOG_HEADING.match(line)
            if match:
                return match.group("version")
    raise RuntimeError(
        f"Unable to determine the {PACKAGE_NAME!r} version from package metadata or CHANGELOG.md."
    )


def _load_version() -> str:
    try:
        raw_version = metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        raw_version = _changelog_version()

    try:
        parsed = Version(raw_version)
    except InvalidVersion as exc:
        raise RuntimeError(f"Invalid version string for {PACKAGE_NAME!r}: {raw_version!r}.") from exc
    if len(parsed.release) != 3:
        raise RuntimeError(
            f"The {PACKAGE_NAME!r} version must follow MAJOR.MINOR.PATCH; found {raw_version!r}."
        )
    return raw_version


__version__ = _load_version()

__all__ = ["PACKAGE_NAME", "__version__"]
