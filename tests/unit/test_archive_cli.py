"""Tests for the archive CLI."""

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import Result
from loguru import logger
from typer.testing import CliRunner

from xmind_archive.archive_cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop the stderr sink bound to the runner's stream after each test."""
    yield
    logger.remove()


def _invoke(allowed_dir: Path, *args: str) -> Result:
    return runner.invoke(app, ["--allow", str(allowed_dir), *args])


def test_read_renders_markdown(allowed_dir: Path, sample_archive: Path) -> None:
    result = _invoke(allowed_dir, "read", str(sample_archive))
    assert result.exit_code == 0, result.output
    assert "# Project" in result.stdout
    assert "- Project Plan" in result.stdout
    assert "# Ideas" in result.stdout


def test_read_json_outputs_valid_json(allowed_dir: Path, sample_archive: Path) -> None:
    result = _invoke(allowed_dir, "read", str(sample_archive), "--json")
    assert result.exit_code == 0, result.output
    parsed = json.loads(result.stdout)
    assert [s["sheetTitle"] for s in parsed] == ["Project", "Ideas"]


def test_read_outside_allowed_dir_fails(allowed_dir: Path, tmp_path: Path) -> None:
    result = _invoke(allowed_dir, "read", str(tmp_path / "x.xmind"))
    assert result.exit_code == 1


def test_list_command(allowed_dir: Path, sample_archive: Path) -> None:
    result = _invoke(allowed_dir, "list")
    assert result.exit_code == 0, result.output
    assert str(sample_archive) in result.stdout


def test_list_command_empty(allowed_dir: Path) -> None:
    result = _invoke(allowed_dir, "list")
    assert result.exit_code == 0, result.output
    assert "No XMind files found" in result.stdout


def test_find_command(allowed_dir: Path, sample_archive: Path) -> None:
    result = _invoke(allowed_dir, "find", "fastapi")
    assert result.exit_code == 0, result.output
    assert str(sample_archive) in result.stdout


def test_extract_command_outputs_json(allowed_dir: Path, sample_archive: Path) -> None:
    result = _invoke(allowed_dir, "extract", str(sample_archive), "backend api")
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["matches"][0]["node"]["id"] == "api"


def test_node_command(allowed_dir: Path, sample_archive: Path) -> None:
    result = _invoke(allowed_dir, "node", str(sample_archive), "db")
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["node"]["title"] == "Database"

    missing = _invoke(allowed_dir, "node", str(sample_archive), "zzz")
    assert missing.exit_code == 1


def test_search_command(allowed_dir: Path, sample_archive: Path) -> None:
    result = _invoke(allowed_dir, "search", str(sample_archive), "python", "--in", "labels")
    assert result.exit_code == 0, result.output
    assert "Found 1 matches" in result.stdout
    assert "[Project] Project Plan > Backend" in result.stdout


def test_search_command_status_json(allowed_dir: Path, sample_archive: Path) -> None:
    result = _invoke(allowed_dir, "search", str(sample_archive), "--status", "todo", "--json")
    assert result.exit_code == 0, result.output
    assert [m["id"] for m in json.loads(result.stdout)["matches"]] == ["db"]


def test_search_command_rejects_unknown_field(allowed_dir: Path, sample_archive: Path) -> None:
    result = _invoke(allowed_dir, "search", str(sample_archive), "x", "--in", "body")
    assert result.exit_code == 1
    assert "Unknown field(s): body" in result.stdout


def test_create_command(allowed_dir: Path) -> None:
    description = allowed_dir / "plan.json"
    description.write_text(
        json.dumps({"sheets": [{"title": "S", "rootTopic": {"title": "Root", "children": [
            {"title": "Child", "taskStatus": "todo"},
        ]}}]})
    )
    output = allowed_dir / "plan.xmind"
    result = _invoke(allowed_dir, "create", str(output), str(description))
    assert result.exit_code == 0, result.output
    assert f"XMind file created: {output}" in result.stdout

    again = _invoke(allowed_dir, "create", str(output), str(description))
    assert again.exit_code == 1

    read = _invoke(allowed_dir, "read", str(output))
    assert "- [ ] Child" in read.stdout


def test_create_command_unreadable_description(allowed_dir: Path) -> None:
    result = _invoke(
        allowed_dir, "create", str(allowed_dir / "x.xmind"), str(allowed_dir / "missing.json")
    )
    assert result.exit_code == 1


def test_missing_allowed_directory_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--allow", str(tmp_path / "missing"), "list"])
    assert result.exit_code == 1


def test_serve_command_passes_directories(allowed_dir: Path) -> None:
    with patch("xmind_archive.mcp.server.run_mcp_server") as run:
        result = runner.invoke(app, ["serve", str(allowed_dir)])
    assert result.exit_code == 0, result.output
    run.assert_called_once_with([allowed_dir])
