"""Search over decoded topic trees: fuzzy path ranking and field matching."""

import re
from collections.abc import Iterable

from xmind_archive.config import FUZZY_THRESHOLD, SEARCH_FIELDS
from xmind_archive.core.tree.navigation import node_path, walk
from xmind_archive.models.topic import FuzzyMatch, NodeMatch, TaskStatus, Topic

_WORD_SPLIT = re.compile(r"[\s>]+")


def calculate_relevance(path: str, query: str) -> float:
    """Score how well a node path matches a free-text query.

    1.0 if the whole query is a substring of the path, otherwise the fraction
    of query words contained in some path word.
    """
    path_lower = path.lower()
    query_lower = query.lower()
    if query_lower in path_lower:
        return 1.0

    path_words = _WORD_SPLIT.split(path_lower)
    query_words = [w for w in _WORD_SPLIT.split(query_lower) if w]
    if not query_words:
        return 0.0
    matching = sum(1 for word in query_words if any(word in pw for pw in path_words))
    return matching / len(query_words)


def fuzzy_path_search(
    roots: Iterable[Topic],
    query: str,
    *,
    threshold: float = FUZZY_THRESHOLD,
) -> list[FuzzyMatch]:
    """Find nodes whose path scores above threshold, best first.

    Ties keep tree order (sheet by sheet, pre-order).
    """
    results: list[FuzzyMatch] = []
    for root in roots:
        for node, parents in walk(root):
            path = node_path(node, parents)
            confidence = calculate_relevance(path, query)
            if confidence > threshold:
                results.append(FuzzyMatch(node=node, path=path, confidence=confidence))
    results.sort(key=lambda m: m.confidence, reverse=True)
    return results


def _matched_fields(
    node: Topic,
    query: str,
    fields: Iterable[str],
    *,
    case_sensitive: bool,
) -> list[str]:
    needle = query if case_sensitive else query.lower()

    def matches(text: str | None) -> bool:
        if not text:
            return False
        return needle in (text if case_sensitive else text.lower())

    matched: list[str] = []
    for field in fields:
        if field == "title" and matches(node.title):
            matched.append(field)
        elif field == "notes" and node.notes is not None and matches(node.notes.content):
            matched.append(field)
        elif field == "labels" and any(matches(label) for label in node.labels or ()):
            matched.append(field)
        elif field == "callouts" and any(matches(c.title) for c in node.callouts or ()):
            matched.append(field)
        elif field == "tasks" and node.task_status is not None:
            matched.append(field)
    return matched


def search_nodes(
    roots: Iterable[Topic],
    query: str,
    *,
    search_in: Iterable[str] | None = None,
    case_sensitive: bool = False,
    task_status: TaskStatus | None = None,
) -> list[NodeMatch]:
    """Match query against selected fields of every node in every tree.

    Args:
        roots: Root topics, one per sheet.
        query: Substring to look for.
        search_in: Fields to test; any of title, notes, labels, callouts, tasks.
            Defaults to all of them. "tasks" matches any node with a task status.
        case_sensitive: Compare case-sensitively.
        task_status: Only nodes with this status qualify. With an empty query
            this returns exactly the nodes carrying that status.

    Returns:
        Matches in tree order. Children are searched whether or not their
        parent matched.
    """
    fields = [f for f in SEARCH_FIELDS if f in set(search_in)] if search_in else list(SEARCH_FIELDS)
    matches: list[NodeMatch] = []
    for root in roots:
        for node, parents in walk(root):
            if task_status is not None and node.task_status != task_status:
                continue
            matched = _matched_fields(node, query, fields, case_sensitive=case_sensitive)
            if matched or task_status is not None:
                matches.append(
                    NodeMatch(node=node, path=node_path(node, parents), matched_in=tuple(matched))
                )
    return matches
