"""Tree navigation: path strings, exact path lookup, id lookup."""

from collections.abc import Iterable, Iterator

from xmind_archive.errors import NotFoundError
from xmind_archive.models.topic import Topic

PATH_SEPARATOR = " > "


def node_path(node: Topic, parents: Iterable[str] = ()) -> str:
    """Return "Ancestor > ... > Title" for a node given its ancestor titles."""
    return PATH_SEPARATOR.join([*parents, node.title])


def walk(root: Topic) -> Iterator[tuple[Topic, tuple[str, ...]]]:
    """Yield (node, ancestor titles) depth-first in pre-order."""
    stack: list[tuple[Topic, tuple[str, ...]]] = [(root, ())]
    while stack:
        node, parents = stack.pop()
        yield node, parents
        child_parents = (*parents, node.title)
        stack.extend((child, child_parents) for child in reversed(node.children))


def find_node_by_path(root: Topic, segments: list[str]) -> Topic:
    """Descend from root matching child titles case-insensitively.

    An empty segment list, or an empty first segment, selects root itself.

    Raises:
        NotFoundError: A segment has no matching child; the message names it and
            says whether the parent had no children at all.
    """
    node = root
    for segment in segments:
        if not segment:
            break
        wanted = segment.lower()
        if not node.children:
            msg = f'Node "{node.title}" has no children, cannot find "{wanted}"'
            raise NotFoundError(msg)
        match = next((c for c in node.children if c.title.lower() == wanted), None)
        if match is None:
            msg = f'Could not find child "{wanted}" in node "{node.title}"'
            raise NotFoundError(msg)
        node = match
    return node


def find_node_by_id(roots: Iterable[Topic], node_id: str) -> Topic | None:
    """Return the first node with this id in any of the trees, or None."""
    for root in roots:
        for node, _parents in walk(root):
            if node.id == node_id:
                return node
    return None
