"""
Tests for CLI entry point (drawiograph.main).
"""
from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from drawiograph.io.drawio_loader import DrawIOLoader
from drawiograph.main import main


def _run(argv: list) -> None:
    with patch("sys.argv", ["drawiograph"] + argv):
        main()


def test_main_new_creates_document(tmp_path: Path, capsys) -> None:
    path = tmp_path / "new.drawio"
    _run(["new", str(path), "--tab", "Overview"])
    assert "Created" in capsys.readouterr().out
    assert [t.name for t in DrawIOLoader().list_tabs(path)] == ["Overview"]


def test_main_new_refuses_to_overwrite(sample_copy: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _run(["new", str(sample_copy)])
    assert exc_info.value.code == 1
    assert len(DrawIOLoader().list_tabs(sample_copy)) == 2


def test_main_tabs(sample_drawio_path: Path, capsys) -> None:
    _run(["tabs", str(sample_drawio_path)])
    out = capsys.readouterr().out
    assert "[0] Overview: 3 nodes, 1 edges" in out
    assert "[1] Schema & Data: 5 nodes, 0 edges" in out


def test_main_show_json_by_index(sample_drawio_path: Path, capsys) -> None:
    _run(["show", str(sample_drawio_path), "--tab", "0", "--json"])
    data = json.loads(capsys.readouterr().out)
    assert [n["id"] for n in data["nodes"]] == ["api", "db", "user"]
    assert data["edges"] == [{"id": "api-2-db", "source": "api", "target": "db", "label": "reads"}]


def test_main_nodes_filter(sample_drawio_path: Path, capsys) -> None:
    _run(["nodes", str(sample_drawio_path), "--kind", "Cylinder"])
    assert [n["id"] for n in json.loads(capsys.readouterr().out)] == ["db"]


def test_main_table(sample_drawio_path: Path, capsys) -> None:
    _run(["table", str(sample_drawio_path), "users", "--tab", "Schema & Data"])
    out = capsys.readouterr().out.splitlines()
    assert out == ["users: Users", "Name | Age", "Alice | 30"]


def test_main_unknown_tab_exits_with_error(sample_drawio_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _run(["show", str(sample_drawio_path), "--tab", "Nope"])
    assert exc_info.value.code == 1
    assert "Available tabs" in capsys.readouterr().out


def test_main_missing_file_exits_with_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _run(["tabs", str(tmp_path / "nonexistent.drawio")])
    assert exc_info.value.code == 1


def test_main_without_command_exits(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _run([])
    assert exc_info.value.code == 1
