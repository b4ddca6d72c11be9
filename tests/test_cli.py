from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from nog_een_bandje.cli import app

runner = CliRunner()


def _write_bands(path: Path) -> Path:
    path.write_text(
        json.dumps(
            {
                "festivals": [
                    {"name": "Pinkpop", "years": [{"year": 2012, "artists": ["Racoon", "Kasabian"]}]},
                    {"name": "Lowlands", "years": [{"year": 2013, "artists": ["Foals"]}]},
                ]
            }
        )
    )
    return path


def _common(tmp_path: Path, data_file: Path) -> list[str]:
    return ["--config", str(tmp_path / "absent.yaml"), "--data-file", str(data_file)]


def test_serve_exits_non_zero_when_data_file_missing(tmp_path: Path) -> None:
    result = runner.invoke(app, ["serve", *_common(tmp_path, tmp_path / "bands.json")])

    assert result.exit_code == 1
    assert "Startup failed" in result.output


def test_serve_exits_non_zero_when_data_file_malformed(tmp_path: Path) -> None:
    bad = tmp_path / "bands.json"
    bad.write_text('{"festivals": [{"name": "Pinkpop", "years": [{"year": 1999, "artists": []}]}]}')

    result = runner.invoke(app, ["serve", *_common(tmp_path, bad)])

    assert result.exit_code == 1
    assert "Startup failed" in result.output


def test_random_prints_table(tmp_path: Path) -> None:
    data = _write_bands(tmp_path / "bands.json")
    result = runner.invoke(app, ["random", "--count", "2", *_common(tmp_path, data)])

    assert result.exit_code == 0
    assert "Successfully loaded 3 total artist performances." in result.output
    assert "Random bands" in result.output


def test_search_prints_matches(tmp_path: Path) -> None:
    data = _write_bands(tmp_path / "bands.json")
    result = runner.invoke(app, ["search", "rac", *_common(tmp_path, data)])

    assert result.exit_code == 0
    assert "Racoon" in result.output
    assert "Foals" not in result.output


def test_search_without_matches(tmp_path: Path) -> None:
    data = _write_bands(tmp_path / "bands.json")
    result = runner.invoke(app, ["search", "metallica", *_common(tmp_path, data)])

    assert result.exit_code == 0
    assert "No matches found" in result.output


def test_export_writes_flattened_list(tmp_path: Path) -> None:
    data = _write_bands(tmp_path / "bands.json")
    out = tmp_path / "out" / "all_bands.json"
    result = runner.invoke(app, ["export", "--out", str(out), *_common(tmp_path, data)])

    assert result.exit_code == 0
    assert json.loads(out.read_text()) == [
        {"name": "Racoon", "festival": "Pinkpop", "year": 2012},
        {"name": "Kasabian", "festival": "Pinkpop", "year": 2012},
        {"name": "Foals", "festival": "Lowlands", "year": 2013},
    ]


def test_export_rejects_name_with_lone_surrogate(tmp_path: Path) -> None:
    bad = tmp_path / "bands.json"
    bad.write_text(
        json.dumps({"festivals": [{"name": "Pinkpop", "years": [{"year": 2010, "artists": ["Bad\ud800Name"]}]}]})
    )
    out = tmp_path / "all_bands.json"

    result = runner.invoke(app, ["export", "--out", str(out), *_common(tmp_path, bad)])

    assert result.exit_code == 1
    assert "Startup failed" in result.output
    assert not out.exists()
