"""Tests for decoding content.json into Topic trees."""

import json
from pathlib import Path

import pytest

from tests.unit.samples import TWO_SHEET_CONTENT, write_archive
from xmind_archive.config import MAX_TOPIC_DEPTH
from xmind_archive.core.importer.parser import parse_archive, parse_content_json
from xmind_archive.errors import FormatError
from xmind_archive.models.topic import Callout, Dependency, Notes


def _parse() -> list:
    return parse_content_json(json.dumps(TWO_SHEET_CONTENT))


def test_one_root_per_sheet_in_order() -> None:
    roots = _parse()
    assert [r.title for r in roots] == ["Project Plan", "Ideas"]
    assert [r.sheet_title for r in roots] == ["Project", "Ideas"]


def test_children_keep_order_and_sheet_title() -> None:
    root = _parse()[0]
    assert [c.title for c in root.children] == ["Backend", "Frontend"]
    assert [c.title for c in root.children[0].children] == ["API", "Database"]
    assert root.children[0].children[1].sheet_title == "Project"


def test_topic_attributes_are_lifted() -> None:
    backend = _parse()[0].children[0]
    assert backend.labels == ("server", "python")
    assert backend.notes == Notes(
        content="Use FastAPI for the API layer", html="<p>Use <b>FastAPI</b></p>"
    )
    assert backend.callouts == (Callout(title="Needs review"),)
    assert backend.boundaries[0].title == "Core"
    assert backend.summaries[0].topic_title == "Server side"


def test_callouts_are_not_children() -> None:
    backend = _parse()[0].children[0]
    assert "Needs review" not in [c.title for c in backend.children]


def test_markers_and_href() -> None:
    frontend = _parse()[0].children[1]
    assert frontend.markers == ("priority-1",)
    assert frontend.href == "https://example.com"


def test_task_extension_is_lifted() -> None:
    db = _parse()[0].children[0].children[1]
    assert db.task_status == "todo"
    assert db.progress == 0.5
    assert db.priority == 2
    assert db.start_date == "2026-02-01T00:00:00.000Z"
    assert db.due_date == "2026-02-15T00:00:00.000Z"
    assert db.duration == 1209600000
    assert db.dependencies == (Dependency(id="api", type="FS", lag=0),)


def test_relationships_attach_to_root() -> None:
    roots = _parse()
    assert roots[0].relationships[0].end1_id == "backend"
    assert roots[0].relationships[0].title == "calls"
    assert roots[1].relationships is None


def test_absent_fields_stay_absent() -> None:
    frontend = _parse()[0].children[1]
    assert frontend.notes is None
    assert frontend.labels is None
    assert frontend.task_status is None
    assert "notes" not in frontend.to_dict()


def test_empty_notes_are_absent() -> None:
    content = [{"title": "S", "rootTopic": {"id": "r", "title": "R", "notes": {"plain": {}}}}]
    assert parse_content_json(json.dumps(content))[0].notes is None


def test_missing_sheet_title_gets_default() -> None:
    content = [{"rootTopic": {"id": "r", "title": "R"}}]
    assert parse_content_json(json.dumps(content))[0].sheet_title == "Untitled Map"


def test_malformed_json_fails() -> None:
    with pytest.raises(FormatError, match="Failed to parse JSON content"):
        parse_content_json("{not json")


def test_non_list_document_fails() -> None:
    with pytest.raises(FormatError):
        parse_content_json('{"rootTopic": {}}')


def test_sheet_without_root_topic_fails() -> None:
    with pytest.raises(FormatError):
        parse_content_json('[{"title": "S"}]')


def test_excessive_depth_fails() -> None:
    root: dict = {"id": "0", "title": "0"}
    node = root
    for i in range(1, MAX_TOPIC_DEPTH + 1):
        child = {"id": str(i), "title": str(i)}
        node["children"] = {"attached": [child]}
        node = child
    with pytest.raises(FormatError, match="deeper than"):
        parse_content_json(json.dumps([{"title": "Deep", "rootTopic": root}]))


def test_parse_archive_reads_file(tmp_path: Path) -> None:
    path = write_archive(tmp_path / "a.xmind", TWO_SHEET_CONTENT)
    assert len(parse_archive(path)) == 2
