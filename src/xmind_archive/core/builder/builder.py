"""Build XMind content.json from topic descriptions.

Descriptions refer to other topics by title. Building happens in passes so
references may point at topics that are declared later:

1. Construction: every topic gets an id and its title is registered;
   links and dependencies are parked, keyed by the source topic's id.
2. Dependency resolution, per sheet, once that sheet is fully constructed.
3. Link resolution, once all sheets are constructed (links may cross sheets).

Relationships are resolved while assembling each sheet object, against the
titles of that sheet only.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from loguru import logger

from xmind_archive.config import (
    INTERNAL_LINK_PREFIX,
    MS_PER_DAY,
    TASK_PROVIDER,
    WORKING_DAY_PROVIDER,
    WORKING_DAY_SETTINGS,
)
from xmind_archive.core.archive.codec import build_manifest, build_metadata, dump_json, encode_archive
from xmind_archive.core.archive.ids import generate_id
from xmind_archive.core.builder.themes import resolve_theme
from xmind_archive.errors import UnresolvedReferenceError
from xmind_archive.models.description import (
    DependencySpec,
    NotesSpec,
    RelationshipSpec,
    SheetSpec,
    TopicSpec,
    parse_timestamp,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _epoch_ms(value: str) -> int:
    return (parse_timestamp(value) - _EPOCH) // timedelta(milliseconds=1)


def _iter_topics(root: dict[str, Any]) -> Iterator[dict[str, Any]]:
    """Yield built topics depth-first in declaration order."""
    stack = [root]
    while stack:
        topic = stack.pop()
        yield topic
        stack.extend(reversed(topic.get("children", {}).get("attached", ())))


def _task_content(topic: dict[str, Any]) -> dict[str, Any] | None:
    for ext in topic.get("extensions", ()):
        if ext["provider"] == TASK_PROVIDER:
            return ext["content"]
    return None


@dataclass(frozen=True)
class BuiltDocument:
    """The output of a successful build, ready to be archived."""

    sheets: list[dict[str, Any]]

    @property
    def content(self) -> str:
        return dump_json(self.sheets)

    @property
    def metadata(self) -> str:
        return dump_json(build_metadata())

    @property
    def manifest(self) -> str:
        return dump_json(build_manifest())

    def to_bytes(self) -> bytes:
        return encode_archive(self.content, self.metadata, self.manifest)


class ArchiveBuilder:
    """Turn sheet descriptions into XMind sheet objects.

    State lives on the instance and is reset by every build() call, so
    separate builders never share titles or pending references.
    """

    def __init__(self) -> None:
        self._title_to_id: dict[str, str] = {}
        self._sheet_title_to_id: dict[str, str] = {}
        self._pending_dependencies: dict[str, list[DependencySpec]] = {}
        self._pending_links: dict[str, str] = {}

    def build(self, sheets: list[SheetSpec]) -> BuiltDocument:
        """Build all sheets.

        Raises:
            UnresolvedReferenceError: A dependency, link or relationship names
                a title that no built topic carries.
        """
        self._title_to_id = {}
        self._pending_dependencies = {}
        self._pending_links = {}

        built: list[tuple[SheetSpec, dict[str, Any], dict[str, str]]] = []
        for sheet in sheets:
            self._sheet_title_to_id = {}
            root = self._build_topic(sheet.root_topic)
            self._resolve_dependencies(root)
            logger.debug("Built sheet {!r} ({} topics)", sheet.title, len(self._sheet_title_to_id))
            built.append((sheet, root, self._sheet_title_to_id))

        for _sheet, root, _titles in built:
            self._resolve_links(root)

        return BuiltDocument(
            sheets=[self._assemble_sheet(sheet, root, titles) for sheet, root, titles in built]
        )

    def _register(self, title: str, topic_id: str) -> None:
        if title in self._title_to_id:
            logger.warning(
                "Duplicate topic title {!r}: references will resolve to the last one", title
            )
        self._title_to_id[title] = topic_id
        self._sheet_title_to_id[title] = topic_id

    def _build_topic(self, spec: TopicSpec) -> dict[str, Any]:
        topic_id = generate_id()
        self._register(spec.title, topic_id)

        topic: dict[str, Any] = {"id": topic_id, "class": "topic", "title": spec.title}

        if spec.structure_class:
            topic["structureClass"] = spec.structure_class
        if spec.notes:
            topic["notes"] = self._build_notes(spec.notes)
        if spec.href:
            topic["href"] = spec.href
        if spec.link_to_topic:
            self._pending_links[topic_id] = spec.link_to_topic
        if spec.labels is not None:
            topic["labels"] = list(spec.labels)
        if spec.markers:
            topic["markers"] = [{"markerId": m} for m in spec.markers]
        if spec.has_task_data:
            topic["extensions"] = [{"provider": TASK_PROVIDER, "content": self._build_task(spec)}]
            if spec.dependencies:
                self._pending_dependencies[topic_id] = list(spec.dependencies)
        if spec.boundaries:
            topic["boundaries"] = [
                {"id": generate_id(), "range": b.range, **({"title": b.title} if b.title else {})}
                for b in spec.boundaries
            ]
        if spec.summary_topics:
            summary_ids = [generate_id() for _ in spec.summary_topics]
            topic["summaries"] = [
                {"id": generate_id(), "range": s.range, "topicId": sid}
                for s, sid in zip(spec.summary_topics, summary_ids, strict=True)
            ]
            topic["summary"] = [
                {"id": sid, "title": s.title}
                for s, sid in zip(spec.summary_topics, summary_ids, strict=True)
            ]

        children: dict[str, list[dict[str, Any]]] = {}
        if spec.children:
            children["attached"] = [self._build_topic(c) for c in spec.children]
        if spec.callouts:
            children["callout"] = [{"id": generate_id(), "title": text} for text in spec.callouts]
        if children:
            topic["children"] = children

        return topic

    @staticmethod
    def _build_notes(notes: str | NotesSpec) -> dict[str, Any]:
        if isinstance(notes, str):
            return {"plain": {"content": notes}}
        out: dict[str, Any] = {}
        if notes.plain:
            out["plain"] = {"content": notes.plain}
        if notes.html:
            out["realHTML"] = {"content": notes.html}
        return out

    @staticmethod
    def _build_task(spec: TopicSpec) -> dict[str, Any]:
        content: dict[str, Any] = {}
        if spec.task_status:
            content["status"] = spec.task_status
        if spec.progress is not None:
            content["progress"] = spec.progress
        if spec.priority is not None:
            content["priority"] = spec.priority
        if spec.start_date:
            content["start"] = _epoch_ms(spec.start_date)
        if spec.due_date:
            content["due"] = _epoch_ms(spec.due_date)
            if spec.start_date:
                content["duration"] = content["due"] - content["start"]
        if spec.duration_days is not None and not spec.start_date:
            content["duration"] = round(spec.duration_days * MS_PER_DAY)
        return content

    def _resolve_dependencies(self, root: dict[str, Any]) -> None:
        # Only titles of the sheet being built are candidates.
        for topic in _iter_topics(root):
            deps = self._pending_dependencies.get(topic["id"])
            task = _task_content(topic)
            if not deps or task is None:
                continue
            resolved = []
            for d in deps:
                target_id = self._sheet_title_to_id.get(d.target_title)
                if target_id is None:
                    raise UnresolvedReferenceError("Dependency target", d.target_title)
                lag = d.lag if d.lag is not None else 0
                resolved.append({"id": target_id, "type": d.type, "lag": lag})
            task["dependencies"] = resolved
            logger.debug("Resolved {} dependencies of {!r}", len(resolved), topic["title"])

    def _resolve_links(self, root: dict[str, Any]) -> None:
        for topic in _iter_topics(root):
            target_title = self._pending_links.get(topic["id"])
            if target_title is None:
                continue
            target_id = self._title_to_id.get(target_title)
            if target_id is None:
                raise UnresolvedReferenceError("Link target topic", target_title)
            topic["href"] = f"{INTERNAL_LINK_PREFIX}{target_id}"

    def _assemble_sheet(
        self, sheet: SheetSpec, root: dict[str, Any], titles: dict[str, str]
    ) -> dict[str, Any]:
        sheet_obj: dict[str, Any] = {
            "id": generate_id(),
            "class": "sheet",
            "title": sheet.title,
            "rootTopic": root,
            "topicOverlapping": "overlap",
            "theme": resolve_theme(sheet.theme),
        }
        if _has_planned_tasks(sheet.root_topic):
            sheet_obj["extensions"] = [
                {"provider": WORKING_DAY_PROVIDER, "content": dict(WORKING_DAY_SETTINGS)}
            ]
        if sheet.relationships:
            sheet_obj["relationships"] = [
                self._build_relationship(r, titles) for r in sheet.relationships
            ]
        return sheet_obj

    @staticmethod
    def _build_relationship(rel: RelationshipSpec, titles: dict[str, str]) -> dict[str, str]:
        end1_id = titles.get(rel.source_title)
        if end1_id is None:
            raise UnresolvedReferenceError("Relationship source topic", rel.source_title)
        end2_id = titles.get(rel.target_title)
        if end2_id is None:
            raise UnresolvedReferenceError("Relationship target topic", rel.target_title)
        out = {"id": generate_id(), "end1Id": end1_id, "end2Id": end2_id}
        if rel.title:
            out["title"] = rel.title
        return out


def _has_planned_tasks(root: TopicSpec) -> bool:
    stack = [root]
    while stack:
        spec = stack.pop()
        if spec.has_planned_task_fields:
            return True
        stack.extend(spec.children or ())
    return False


def build_document(sheets: list[SheetSpec]) -> BuiltDocument:
    """Build sheets with a fresh builder."""
    return ArchiveBuilder().build(sheets)
