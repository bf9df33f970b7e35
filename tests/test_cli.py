from __future__ import annotations

import json
from pathlib import Path

import pytest

from trackreplay.cli import CliError, run_cli
from trackreplay_core.results import invalid_state, not_found

from tests.helpers import track_payload, write_pyproject


@pytest.fixture
def bundle(isolated_cwd: Path) -> Path:
    target = isolated_cwd / "tracks.json"
    target.write_text(
        json.dumps(
            {
                "tracks": [
                    track_payload("A", start=0.0, speed=[10.0, 20.0, 30.0]),
                    track_payload("B", start=5.0),
                    track_payload("C", start=100.0),
                ]
            }
        ),
        encoding="utf-8",
    )
    return target


def _log_args(directory: Path) -> list[str]:
    return ["--log-output", str(directory / "cli.log")]


def test_sync_command_reports_offsets(bundle: Path, capsys: pytest.CaptureFixture[str]) -> None:
    run_cli(
        _log_args(bundle.parent)
        + ["sync", str(bundle), "--geodetic", "--start", "0,0,0", "--finish", "0.002,0,0", "--seek", "0.5"]
    )

    payload = json.loads(capsys.readouterr().out)
    assert payload["tracks"] == ["A", "B", "C"]
    assert payload["offsets"] == {"0": 0.0, "1": -5.0, "2": -100.0}
    assert (payload["start_time"], payload["end_time"]) == (0.0, 20.0)
    assert payload["frame"]["current_time"] == 10.0
    assert [marker["point_index"] for marker in payload["frame"]["markers"]] == [1, 1, 1]


def test_sync_command_logs_json(bundle: Path, capsys: pytest.CaptureFixture[str]) -> None:
    run_cli(
        ["--log-level", "debug"]
        + _log_args(bundle.parent)
        + ["sync", str(bundle), "--geodetic", "--start", "0,0,0", "--finish", "0.002,0,0"]
    )
    capsys.readouterr()

    events = [
        json.loads(line).get("event")
        for line in (bundle.parent / "cli.log").read_text(encoding="utf-8").splitlines()
    ]
    assert "flags.deployed" in events
    assert "sync.completed" in events


def test_missing_bundle_exits_with_not_found(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(_log_args(isolated_cwd) + ["sync", "missing.json", "--start", "1,2,3", "--finish", "1,2,3"])

    assert excinfo.value.code == 4
    assert "does not exist" in capsys.readouterr().out


def test_malformed_bundle_exits_with_io_error(isolated_cwd: Path) -> None:
    broken = isolated_cwd / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        run_cli(_log_args(isolated_cwd) + ["sync", str(broken), "--start", "1,2,3", "--finish", "1,2,3"])

    assert excinfo.value.code == 3


def test_bundle_without_visible_tracks(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    hidden = isolated_cwd / "hidden.json"
    hidden.write_text(json.dumps({"tracks": [track_payload("A", visible=False)]}), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        run_cli(
            _log_args(isolated_cwd)
            + ["sync", str(hidden), "--geodetic", "--start", "0,0,0", "--finish", "0,0,0"]
        )

    assert excinfo.value.code == 4
    assert capsys.readouterr().out.startswith("start flag: ")


def test_invalid_position_is_a_usage_error(isolated_cwd: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(_log_args(isolated_cwd) + ["sync", "tracks.json", "--start", "1,2", "--finish", "1,2,3"])

    assert excinfo.value.code == 2


def test_legend_command(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    run_cli(_log_args(isolated_cwd) + ["legend", "--mode", "speed", "--units", "kph", "--max", "160"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["unit"] == "km/h"
    assert [stop["color"] for stop in payload["stops"]] == [
        "#0000FF",
        "#00FFFF",
        "#008000",
        "#FFFF00",
        "#FF0000",
    ]
    assert payload["ticks"][-1] == {"fraction": 1.0, "value": 160.0}


def test_legend_defaults_come_from_configuration(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    write_pyproject(
        isolated_cwd,
        """
        [tool.trackreplay.display]
        color_mode = "lostTime"
        legend_max = 30.0
        """,
    )

    run_cli(["--config", str(isolated_cwd)] + _log_args(isolated_cwd) + ["legend"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["mode"] == "lostTime"
    assert payload["unit"] == "s"
    assert payload["ticks"][-1]["value"] == 30.0


def test_legend_without_colouring(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    run_cli(_log_args(isolated_cwd) + ["legend", "--mode", "noColor"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["stops"] == []
    assert payload["ticks"] == []


def test_cli_error_from_result_maps_categories() -> None:
    missing = CliError.from_result(not_found("nothing here", flag="start"), prefix="start flag: ")
    wrong = CliError.from_result(invalid_state("not now"))

    assert missing.status_code == 4
    assert missing.payload.message == "start flag: nothing here"
    assert missing.context == {"flag": "start", "status": "not_found"}
    assert wrong.category == "usage"
    assert wrong.status_code == 2


@pytest.mark.parametrize(
    "track",
    [
        {"name": "ragged", "coordinates": [[0, 0, 0], [1, 1]], "timestamps": [0, 1]},
        {"name": "iso", "coordinates": [[0, 0, 0]], "timestamps": ["2024-01-01T00:00:00Z"]},
    ],
)
def test_malformed_tracks_are_usage_errors(
    isolated_cwd: Path, capsys: pytest.CaptureFixture[str], track: dict
) -> None:
    malformed = isolated_cwd / "malformed.json"
    malformed.write_text(json.dumps({"tracks": [track]}), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        run_cli(
            _log_args(isolated_cwd)
            + ["sync", str(malformed), "--geodetic", "--start", "0,0,0", "--finish", "0,0,0"]
        )

    assert excinfo.value.code == 2
    assert track["name"] in capsys.readouterr().out
