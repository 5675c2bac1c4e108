"""Tests for path strings and node lookup."""

import json

import pytest

from tests.unit.samples import TWO_SHEET_CONTENT
from xmind_archive.core.importer.parser import parse_content_json
from xmind_archive.core.tree.navigation import find_node_by_id, find_node_by_path, node_path, walk
from xmind_archive.errors import NotFoundError
from xmind_archive.models.topic import Topic


@pytest.fixture
def roots() -> list[Topic]:
    return parse_content_json(json.dumps(TWO_SHEET_CONTENT))


def test_walk_is_preorder_with_ancestors(roots: list[Topic]) -> None:
    visited = [(node.title, parents) for node, parents in walk(roots[0])]
    assert visited == [
        ("Project Plan", ()),
        ("Backend", ("Project Plan",)),
        ("API", ("Project Plan", "Backend")),
        ("Database", ("Project Plan", "Backend")),
        ("Frontend", ("Project Plan",)),
    ]


def test_node_path_joins_titles() -> None:
    node = Topic(title="API", id="x", sheet_title="S")
    assert node_path(node, ("Project", "Backend")) == "Project > Backend > API"
    assert node_path(node) == "API"


def test_find_node_by_path_is_case_insensitive(roots: list[Topic]) -> None:
    assert find_node_by_path(roots[0], ["backend", "DATABASE"]).id == "db"


def test_find_node_by_path_empty_selects_root(roots: list[Topic]) -> None:
    assert find_node_by_path(roots[0], []).id == "root1"
    assert find_node_by_path(roots[0], ["", "Backend"]).id == "root1"


def test_find_node_by_path_missing_child(roots: list[Topic]) -> None:
    with pytest.raises(NotFoundError, match='Could not find child "mobile" in node "Project Plan"'):
        find_node_by_path(roots[0], ["Mobile"])


def test_find_node_by_path_leaf_has_no_children(roots: list[Topic]) -> None:
    with pytest.raises(NotFoundError, match='Node "Frontend" has no children, cannot find "x"'):
        find_node_by_path(roots[0], ["Frontend", "X"])


def test_find_node_by_id_searches_all_sheets(roots: list[Topic]) -> None:
    node = find_node_by_id(roots, "idea1")
    assert node is not None
    assert node.sheet_title == "Ideas"
    assert find_node_by_id(roots, "nope") is None
