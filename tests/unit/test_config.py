"""Tests for allowed-directory resolution."""

import os
from pathlib import Path

import pytest

from xmind_archive.config import ALLOWED_DIRS_ENV, resolve_allowed_directories


def test_explicit_directories_win(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ALLOWED_DIRS_ENV, "/nonexistent")
    assert resolve_allowed_directories([tmp_path]) == [tmp_path.resolve()]


def test_env_var_is_split_on_pathsep(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.mkdir()
    b.mkdir()
    monkeypatch.setenv(ALLOWED_DIRS_ENV, os.pathsep.join([str(a), str(b)]))
    assert resolve_allowed_directories() == [a.resolve(), b.resolve()]


def test_defaults_to_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ALLOWED_DIRS_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    assert resolve_allowed_directories() == [tmp_path.resolve()]


def test_missing_directory_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="does not exist"):
        resolve_allowed_directories([tmp_path / "missing"])
