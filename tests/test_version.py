"""Tests for the package version metadata."""

import importlib
from importlib import metadata

import pytest
from packaging.version import Version

import trackreplay
from trackreplay import _version as version_module


def test_version_is_semver_patch():
    version = Version(trackreplay.__version__)

    assert len(version.release) == 3


def test_version_falls_back_to_changelog(monkeypatch):
    def _missing(name):
        raise metadata.PackageNotFoundError(name)

    monkeypatch.setattr(metadata, "version", _missing)
    reloaded = importlib.reload(version_module)

    assert reloaded.__version__ == "0.1.0"

    monkeypatch.undo()
    importlib.reload(version_module)


def test_invalid_metadata_version_is_rejected(monkeypatch):
    monkeypatch.setattr(metadata, "version", lambda name: "1.2")
    with pytest.raises(RuntimeError):
        importlib.reload(version_module)

    monkeypatch.undo()
    importlib.reload(version_module)
