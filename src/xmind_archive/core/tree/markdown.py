"""Render decoded topic trees as markdown."""

import io

from xmind_archive.models.topic import Topic


def render_topic_as_markdown(
    root: Topic,
    *,
    max_depth: int | None = None,
    include_notes: bool = True,
) -> str:
    """Render a topic and its descendants as indented markdown.

    Args:
        root: The topic to start rendering from.
        max_depth: Max levels below root to include (None = unlimited).
        include_notes: Whether to include plain-text notes.

    Returns:
        Markdown string with bullet-list hierarchy.
    """
    out = io.StringIO()
    stack: list[tuple[Topic, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        indent = "    " * depth

        # Format checkbox
        prefix = "- "
        if node.task_status is not None:
            prefix = "- [x] " if node.task_status == "done" else "- [ ] "

        lines = node.title.split("\n")
        out.write(f"{indent}{prefix}{lines[0]}\n")
        for line in lines[1:]:
            out.write(f"{indent}  {line}\n")

        if node.labels:
            out.write(f"{indent}  labels: {', '.join(node.labels)}\n")
        if node.href:
            out.write(f"{indent}  link: {node.href}\n")
        if include_notes and node.notes and node.notes.content:
            for note_line in node.notes.content.split("\n"):
                out.write(f"{indent}  > {note_line}\n")
        for callout in node.callouts or ():
            out.write(f"{indent}  ! {callout.title}\n")

        if max_depth is not None and depth == max_depth:
            if node.children:
                child_indent = "    " * (depth + 1)
                count = len(node.children)
                noun = "child" if count == 1 else "children"
                out.write(f"{child_indent}- ... ({count} more {noun}, id={node.id})\n")
            continue
        stack.extend((child, depth + 1) for child in reversed(node.children))

    return out.getvalue()
