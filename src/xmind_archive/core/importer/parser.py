"""Parse XMind content.json into normalized Topic trees."""

import json
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger

from xmind_archive.config import DEFAULT_SHEET_TITLE, MAX_TOPIC_DEPTH, TASK_PROVIDER
from xmind_archive.core.archive.codec import read_archive
from xmind_archive.errors import FormatError
from xmind_archive.models.topic import (
    Boundary,
    Callout,
    Dependency,
    Notes,
    Relationship,
    Summary,
    Topic,
)


def _iso_from_ms(ms: float) -> str:
    """Render epoch milliseconds as e.g. 2026-02-01T00:00:00.000Z."""
    dt = datetime.fromtimestamp(ms / 1000, tz=UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_notes(raw: dict[str, Any]) -> Notes | None:
    notes = raw.get("notes") or {}
    content = (notes.get("plain") or {}).get("content")
    html = (notes.get("realHTML") or {}).get("content")
    if not content and not html:
        return None
    return Notes(content=content or None, html=html or None)


def _parse_summaries(raw: dict[str, Any]) -> tuple[Summary, ...]:
    titles = {st["id"]: st.get("title") for st in raw.get("summary") or ()}
    return tuple(
        Summary(id=s["id"], range=s["range"], topic_id=s["topicId"], topic_title=titles.get(s["topicId"]))
        for s in raw["summaries"]
    )


def _task_fields(raw: dict[str, Any]) -> dict[str, Any]:
    """Lift the task-planning extension into Topic keyword arguments."""
    task = next(
        (ext for ext in raw.get("extensions") or () if ext.get("provider") == TASK_PROVIDER),
        None,
    )
    if task is None:
        return {}
    c = task.get("content") or {}
    fields: dict[str, Any] = {}
    if c.get("status"):
        fields["task_status"] = c["status"]
    if c.get("progress") is not None:
        fields["progress"] = c["progress"]
    if c.get("priority") is not None:
        fields["priority"] = c["priority"]
    if c.get("duration") is not None:
        fields["duration"] = c["duration"]
    if c.get("start") is not None:
        fields["start_date"] = _iso_from_ms(c["start"])
    if c.get("due") is not None:
        fields["due_date"] = _iso_from_ms(c["due"])
    if c.get("dependencies"):
        fields["dependencies"] = tuple(
            Dependency(id=d["id"], type=d["type"], lag=d.get("lag", 0)) for d in c["dependencies"]
        )
    return fields


def parse_topic(raw: dict[str, Any], sheet_title: str, *, depth: int = 1) -> Topic:
    """Project one raw topic (and its attached children) into a Topic."""
    if depth > MAX_TOPIC_DEPTH:
        msg = f"Topic tree in sheet {sheet_title!r} is deeper than {MAX_TOPIC_DEPTH} levels"
        raise FormatError(msg)

    children = raw.get("children") or {}
    kwargs: dict[str, Any] = {}

    if raw.get("structureClass"):
        kwargs["structure_class"] = raw["structureClass"]
    if raw.get("href"):
        kwargs["href"] = raw["href"]
    if raw.get("labels") is not None:
        kwargs["labels"] = tuple(raw["labels"])
    if children.get("callout") is not None:
        kwargs["callouts"] = tuple(Callout(title=c.get("title", "")) for c in children["callout"])
    if (notes := _parse_notes(raw)) is not None:
        kwargs["notes"] = notes
    if raw.get("markers"):
        kwargs["markers"] = tuple(m["markerId"] for m in raw["markers"])
    if raw.get("boundaries"):
        kwargs["boundaries"] = tuple(
            Boundary(id=b["id"], range=b["range"], title=b.get("title")) for b in raw["boundaries"]
        )
    if raw.get("summaries"):
        kwargs["summaries"] = _parse_summaries(raw)
    kwargs.update(_task_fields(raw))

    attached = children.get("attached") or ()
    return Topic(
        title=raw.get("title", ""),
        id=raw.get("id", ""),
        sheet_title=sheet_title,
        children=tuple(parse_topic(c, sheet_title, depth=depth + 1) for c in attached),
        **kwargs,
    )


def parse_sheets(sheets: list[dict[str, Any]]) -> list[Topic]:
    """Parse decoded content.json sheets into one root Topic per sheet."""
    roots: list[Topic] = []
    for sheet in sheets:
        sheet_title = sheet.get("title") or DEFAULT_SHEET_TITLE
        root = parse_topic(sheet["rootTopic"], sheet_title)
        if sheet.get("relationships") is not None:
            root = replace(
                root,
                relationships=tuple(
                    Relationship(
                        id=r["id"], end1_id=r["end1Id"], end2_id=r["end2Id"], title=r.get("title")
                    )
                    for r in sheet["relationships"]
                ),
            )
        roots.append(root)
    return roots


def parse_content_json(text: str) -> list[Topic]:
    """Parse content.json text; no partial forest is ever returned.

    Raises:
        FormatError: The JSON is malformed or does not have the sheet shape.
    """
    try:
        data = json.loads(text)
        if not isinstance(data, list):
            msg = f"expected a list of sheets, got {type(data).__name__}"
            raise TypeError(msg)
        roots = parse_sheets(data)
    except FormatError:
        raise
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        msg = f"Failed to parse JSON content: {e}"
        raise FormatError(msg) from e
    logger.debug("Parsed {} sheet(s)", len(roots))
    return roots


def parse_archive(path: Path) -> list[Topic]:
    """Decode an .xmind file into one root Topic per sheet."""
    return parse_content_json(read_archive(path))
