"""Tests for finding archives on disk."""

from pathlib import Path

import pytest

from tests.unit.samples import TWO_SHEET_CONTENT, write_archive
from xmind_archive.access import AllowList
from xmind_archive.core.files.scanner import content_contains, find_archives, list_archives
from xmind_archive.errors import AccessDeniedError


@pytest.fixture
def tree(allowed_dir: Path) -> Path:
    write_archive(allowed_dir / "b.xmind", TWO_SHEET_CONTENT)
    write_archive(allowed_dir / "sub" / "A.XMIND", [{"title": "S", "rootTopic": {"title": "Zebra"}}])
    (allowed_dir / "notes.txt").write_text("not a map")
    return allowed_dir


def test_list_archives_recurses_and_filters(policy: AllowList, tree: Path) -> None:
    assert list_archives(policy) == [tree / "b.xmind", tree / "sub" / "A.XMIND"]


def test_list_archives_in_subdirectory(policy: AllowList, tree: Path) -> None:
    assert list_archives(policy, tree / "sub") == [(tree / "sub" / "A.XMIND").resolve()]


def test_list_archives_outside_allowed_dir_fails(policy: AllowList, tmp_path: Path) -> None:
    with pytest.raises(AccessDeniedError):
        list_archives(policy, tmp_path)


def test_list_archives_skips_symlinked_escape(policy: AllowList, tree: Path, tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    write_archive(outside / "secret.xmind", TWO_SHEET_CONTENT)
    (tree / "escape").symlink_to(outside, target_is_directory=True)
    assert all("secret" not in p.name for p in list_archives(policy))


def test_content_contains(tree: Path) -> None:
    assert content_contains(tree / "b.xmind", "fastapi")
    assert not content_contains(tree / "b.xmind", "zebra")


def test_content_contains_unreadable_is_no_match(tree: Path) -> None:
    broken = tree / "broken.xmind"
    broken.write_bytes(b"garbage")
    assert not content_contains(broken, "anything")


def test_find_archives_name_matches_before_content(policy: AllowList, tree: Path) -> None:
    write_archive(tree / "zebra.xmind", [{"title": "S", "rootTopic": {"title": "Horse"}}])
    found = find_archives(policy, "zebra")
    assert found == [tree / "zebra.xmind", tree / "sub" / "A.XMIND"]


def test_find_archives_empty_pattern_matches_all(policy: AllowList, tree: Path) -> None:
    assert len(find_archives(policy, "")) == 2
