"""Shared test fixtures."""

from pathlib import Path

import pytest

from tests.unit.samples import TWO_SHEET_CONTENT, write_archive
from xmind_archive.access import AllowList


@pytest.fixture
def allowed_dir(tmp_path: Path) -> Path:
    """Return the single directory tests are allowed to touch."""
    directory = tmp_path / "maps"
    directory.mkdir()
    return directory.resolve()


@pytest.fixture
def policy(allowed_dir: Path) -> AllowList:
    return AllowList([allowed_dir])


@pytest.fixture
def sample_archive(allowed_dir: Path) -> Path:
    """Return a two-sheet archive inside the allowed directory."""
    return write_archive(allowed_dir / "project.xmind", TWO_SHEET_CONTENT)
