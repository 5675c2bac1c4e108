"""Normalized (query-form) domain models for decoded XMind documents."""

from dataclasses import dataclass
from typing import Any, Literal

TaskStatus = Literal["todo", "done"]


@dataclass(frozen=True)
class Notes:
    """Plain text and HTML note bodies; either may be absent."""

    content: str | None = None
    html: str | None = None

    def to_dict(self) -> dict[str, str]:
        out: dict[str, str] = {}
        if self.content is not None:
            out["content"] = self.content
        if self.html is not None:
            out["html"] = self.html
        return out


@dataclass(frozen=True)
class Callout:
    title: str


@dataclass(frozen=True)
class Boundary:
    """A grouping over the inclusive child range "(start,end)"."""

    id: str
    range: str
    title: str | None = None

    def to_dict(self) -> dict[str, str]:
        out = {"id": self.id, "range": self.range}
        if self.title is not None:
            out["title"] = self.title
        return out


@dataclass(frozen=True)
class Summary:
    """A summary topic spanning a child range."""

    id: str
    range: str
    topic_id: str
    topic_title: str | None = None

    def to_dict(self) -> dict[str, str]:
        out = {"id": self.id, "range": self.range, "topicId": self.topic_id}
        if self.topic_title is not None:
            out["topicTitle"] = self.topic_title
        return out


@dataclass(frozen=True)
class Dependency:
    """A resolved scheduling predecessor (FS, FF, SS or SF)."""

    id: str
    type: str
    lag: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "lag": self.lag}


@dataclass(frozen=True)
class Relationship:
    """A sheet-level edge between two topics."""

    id: str
    end1_id: str
    end2_id: str
    title: str | None = None

    def to_dict(self) -> dict[str, str]:
        out = {"id": self.id, "end1Id": self.end1_id, "end2Id": self.end2_id}
        if self.title is not None:
            out["title"] = self.title
        return out


@dataclass(frozen=True)
class Topic:
    """A single node of a decoded mind map.

    Root topics additionally carry the sheet's relationships.
    """

    title: str
    id: str
    sheet_title: str
    children: tuple["Topic", ...] = ()
    structure_class: str | None = None
    href: str | None = None
    labels: tuple[str, ...] | None = None
    markers: tuple[str, ...] | None = None
    notes: Notes | None = None
    callouts: tuple[Callout, ...] | None = None
    boundaries: tuple[Boundary, ...] | None = None
    summaries: tuple[Summary, ...] | None = None
    task_status: TaskStatus | None = None
    progress: float | None = None
    priority: int | None = None
    start_date: str | None = None
    due_date: str | None = None
    duration: int | None = None
    dependencies: tuple[Dependency, ...] | None = None
    relationships: tuple[Relationship, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape, omitting absent fields."""
        out: dict[str, Any] = {"title": self.title, "id": self.id, "sheetTitle": self.sheet_title}
        if self.structure_class is not None:
            out["structureClass"] = self.structure_class
        if self.href is not None:
            out["href"] = self.href
        if self.labels is not None:
            out["labels"] = list(self.labels)
        if self.callouts is not None:
            out["callouts"] = [{"title": c.title} for c in self.callouts]
        if self.notes is not None:
            out["notes"] = self.notes.to_dict()
        if self.markers is not None:
            out["markers"] = list(self.markers)
        if self.boundaries is not None:
            out["boundaries"] = [b.to_dict() for b in self.boundaries]
        if self.summaries is not None:
            out["summaries"] = [s.to_dict() for s in self.summaries]
        if self.task_status is not None:
            out["taskStatus"] = self.task_status
        if self.progress is not None:
            out["progress"] = self.progress
        if self.priority is not None:
            out["priority"] = self.priority
        if self.duration is not None:
            out["duration"] = self.duration
        if self.start_date is not None:
            out["startDate"] = self.start_date
        if self.due_date is not None:
            out["dueDate"] = self.due_date
        if self.dependencies is not None:
            out["dependencies"] = [d.to_dict() for d in self.dependencies]
        if self.children:
            out["children"] = [c.to_dict() for c in self.children]
        if self.relationships is not None:
            out["relationships"] = [r.to_dict() for r in self.relationships]
        return out


@dataclass(frozen=True)
class FuzzyMatch:
    """A fuzzy path search hit."""

    node: Topic
    path: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {"node": self.node.to_dict(), "matchConfidence": self.confidence, "path": self.path}


@dataclass(frozen=True)
class NodeMatch:
    """A multi-field search hit and the fields it matched in."""

    node: Topic
    path: str
    matched_in: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        node = self.node
        out: dict[str, Any] = {
            "id": node.id,
            "title": node.title,
            "path": self.path,
            "sheet": node.sheet_title,
            "matchedIn": list(self.matched_in),
        }
        if node.notes is not None and node.notes.content is not None:
            out["notes"] = node.notes.content
        if node.labels is not None:
            out["labels"] = list(node.labels)
        if node.callouts is not None:
            out["callouts"] = [{"title": c.title} for c in node.callouts]
        if node.task_status is not None:
            out["taskStatus"] = node.task_status
        return out
