from __future__ import annotations

from pathlib import Path

import pytest

from trackreplay import ReplaySession
from trackreplay.configuration import CONFIG_ENV_VAR, load_config, load_project_config
from trackreplay.settings import ConfigurationError, DisplaySettings, ReplaySettings

from tests.helpers import write_pyproject


def test_defaults() -> None:
    settings = ReplaySettings.from_config({})

    assert settings.time_scale == 1.0
    assert settings.speed == 1.0
    assert settings.display == DisplaySettings()
    assert settings.display.speed_units == "mph"


def test_from_config_reads_display_table() -> None:
    settings = ReplaySettings.from_config(
        {
            "time_scale": 1000,
            "speed": 2,
            "display": {"color_mode": "lostTime", "speed_units": "KPH", "legend_max": 30},
            "logging": {"level": "debug"},
        }
    )

    assert settings.time_scale == 1000.0
    assert settings.speed == 2.0
    assert settings.display.color_mode == "lostTime"
    assert settings.display.speed_units == "kph"
    assert settings.display.legend_max == 30.0
    assert settings.logging["level"] == "debug"


@pytest.mark.parametrize(
    "config",
    [
        {"time_scale": 0},
        {"speed": "fast"},
        {"display": {"color_mode": "rainbow"}},
        {"display": {"speed_units": "knots"}},
        {"display": {"legend_min": 10, "legend_max": 5}},
        {"display": "speed"},
        {"logging": ["debug"]},
    ],
)
def test_invalid_configuration_is_rejected(config: dict) -> None:
    with pytest.raises(ConfigurationError):
        ReplaySettings.from_config(config)


def test_with_changes_validates() -> None:
    display = DisplaySettings()

    assert display.with_changes(color_mode="noColor").color_mode == "noColor"
    with pytest.raises(ConfigurationError):
        display.with_changes(speed_units="furlongs")


def test_load_project_config(tmp_path: Path) -> None:
    path = write_pyproject(
        tmp_path,
        """
        [tool.trackreplay]
        time_scale = 1000.0

        [tool.trackreplay.display]
        color_mode = "acceleration"
        """,
    )

    loaded = load_project_config(tmp_path)

    assert loaded is not None
    payload, source = loaded
    assert source == path.resolve()
    assert payload == {"time_scale": 1000.0, "display": {"color_mode": "acceleration"}}


def test_load_project_config_without_section(tmp_path: Path) -> None:
    write_pyproject(tmp_path, "[tool.other]\nvalue = 1\n")

    assert load_project_config(tmp_path) is None
    assert load_project_config(tmp_path / "settings.json") is None


def test_load_config_prefers_explicit_path(isolated_cwd: Path, tmp_path_factory: pytest.TempPathFactory) -> None:
    write_pyproject(isolated_cwd, "[tool.trackreplay]\nspeed = 3.0\n")
    explicit = tmp_path_factory.mktemp("explicit")
    write_pyproject(explicit, "[tool.trackreplay]\nspeed = 5.0\n")

    assert load_config(explicit)["speed"] == 5.0
    assert load_config()["speed"] == 3.0


def test_load_config_from_environment(
    isolated_cwd: Path, tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    configured = tmp_path_factory.mktemp("configured")
    target = write_pyproject(configured, "[tool.trackreplay]\ntime_scale = 60.0\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(target))

    config = load_config()

    assert config["time_scale"] == 60.0
    assert config["_config_path"] == str(target.resolve())


def test_load_config_without_any_source(isolated_cwd: Path) -> None:
    assert load_config() == {"_config_path": None}


def test_session_from_config() -> None:
    session = ReplaySession.from_config({"time_scale": 1000.0, "speed": 2.0})

    assert session.clock.time_scale == 1000.0
    assert session.clock.speed == 2.0
