"""Description (input) models for building archives.

Topics here refer to each other by title; the builder turns those titles
into generated identifiers. Numeric ranges, dates and enums are validated
by pydantic before any building starts.
"""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from xmind_archive.config import MAX_TOPIC_DEPTH

DependencyType = Literal["FS", "FF", "SS", "SF"]
ThemeName = Literal["default", "business", "dark", "simple"]


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 string; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


class _Spec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class NotesSpec(_Spec):
    plain: str | None = Field(default=None, description="Plain text content")
    html: str | None = Field(
        default=None,
        description="HTML formatted content (supports <strong>, <u>, <ul>, <ol>, <li>, <br>)",
    )


class BoundarySpec(_Spec):
    range: str = Field(description="Range of children to group, e.g. '(1,3)'")
    title: str | None = Field(default=None, description="Boundary label")


class SummaryTopicSpec(_Spec):
    range: str = Field(description="Range of children to summarize, e.g. '(0,2)'")
    title: str = Field(description="Summary topic title")


class DependencySpec(_Spec):
    target_title: str = Field(alias="targetTitle", description="Title of the dependency target topic")
    type: DependencyType = Field(
        description="FS=Finish-Start, FF=Finish-Finish, SS=Start-Start, SF=Start-Finish"
    )
    lag: float | None = Field(default=None, description="Lag in days (default 0)")


class TopicSpec(_Spec):
    """A topic to build, with its children."""

    title: str = Field(description="Topic title")
    children: list["TopicSpec"] | None = Field(default=None, description="Child topics")
    notes: str | NotesSpec | None = Field(
        default=None,
        description="Notes: string for plain text, or {plain?, html?} for formatted notes",
    )
    href: str | None = Field(default=None, description="URL link (external)")
    link_to_topic: str | None = Field(
        default=None,
        alias="linkToTopic",
        description="Title of a topic to link to (creates internal xmind:# link, works across sheets)",
    )
    labels: list[str] | None = Field(default=None, description="Labels/tags")
    markers: list[str] | None = Field(
        default=None, description="Marker IDs (e.g. 'task-done', 'task-start', 'priority-1')"
    )
    callouts: list[str] | None = Field(
        default=None, description="Callout text bubbles attached to this topic"
    )
    boundaries: list[BoundarySpec] | None = Field(
        default=None, description="Visual boundaries grouping children"
    )
    summary_topics: list[SummaryTopicSpec] | None = Field(
        default=None, alias="summaryTopics", description="Summary topics spanning children ranges"
    )
    structure_class: str | None = Field(
        default=None,
        alias="structureClass",
        description="Layout structure, e.g. 'org.xmind.ui.logic.right' or 'org.xmind.ui.map.clockwise'",
    )
    task_status: Literal["todo", "done"] | None = Field(
        default=None,
        alias="taskStatus",
        description="Simple to-do checkbox: 'todo' (unchecked) or 'done' (checked)",
    )
    progress: float | None = Field(
        default=None, ge=0, le=1, description="Planned Task: completion progress 0.0 to 1.0"
    )
    priority: int | None = Field(
        default=None, ge=1, le=9, description="Planned Task: priority level 1-9 (1=highest)"
    )
    start_date: str | None = Field(
        default=None,
        alias="startDate",
        description="Planned Task: start date in ISO 8601 (e.g. '2026-02-01T00:00:00Z')",
    )
    due_date: str | None = Field(
        default=None,
        alias="dueDate",
        description="Planned Task: due date in ISO 8601 (e.g. '2026-02-15T00:00:00Z')",
    )
    duration_days: float | None = Field(
        default=None,
        ge=1,
        alias="durationDays",
        description="Planned Task: duration in days, dates are derived from dependencies",
    )
    dependencies: list[DependencySpec] | None = Field(
        default=None, description="Task dependencies for automatic scheduling"
    )

    @field_validator("start_date", "due_date")
    @classmethod
    def _check_timestamp(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                parse_timestamp(value)
            except ValueError as e:
                msg = f"Invalid ISO 8601 date: {value!r}"
                raise ValueError(msg) from e
        return value

    @property
    def has_task_data(self) -> bool:
        """True if the topic needs a task extension."""
        return (
            self.task_status is not None
            or self.progress is not None
            or self.priority is not None
            or self.start_date is not None
            or self.due_date is not None
            or self.duration_days is not None
            or self.dependencies is not None
        )

    @property
    def has_planned_task_fields(self) -> bool:
        """True if the topic takes part in timeline planning."""
        return (
            self.start_date is not None
            or self.due_date is not None
            or self.progress is not None
            or self.duration_days is not None
        )


class RelationshipSpec(_Spec):
    source_title: str = Field(alias="sourceTitle", description="Title of source topic")
    target_title: str = Field(alias="targetTitle", description="Title of target topic")
    title: str | None = Field(default=None, description="Relationship label")


class SheetSpec(_Spec):
    """One sheet: a root topic plus relationships and theme."""

    title: str = Field(description="Sheet title")
    root_topic: TopicSpec = Field(alias="rootTopic", description="Root topic of the sheet")
    relationships: list[RelationshipSpec] | None = Field(
        default=None, description="Relationships between topics (by title)"
    )
    theme: ThemeName | None = Field(default=None, description="Visual theme for the sheet")

    @model_validator(mode="after")
    def _check_depth(self) -> "SheetSpec":
        stack: list[tuple[TopicSpec, int]] = [(self.root_topic, 1)]
        while stack:
            topic, depth = stack.pop()
            if depth > MAX_TOPIC_DEPTH:
                msg = f"Sheet {self.title!r} nests topics deeper than {MAX_TOPIC_DEPTH} levels"
                raise ValueError(msg)
            stack.extend((child, depth + 1) for child in topic.children or ())
        return self
