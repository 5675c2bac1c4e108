"""MCP server exposing XMind read, search and create tools."""

import functools
import os
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP
from pydantic import ValidationError

from xmind_archive.access import AllowList, ensure_allowed
from xmind_archive.config import (
    ALLOWED_DIRS_ENV,
    FUZZY_RESULT_LIMIT,
    SEARCH_FIELDS,
    resolve_allowed_directories,
)
from xmind_archive.core.builder.builder import ArchiveBuilder
from xmind_archive.core.files.scanner import find_archives, list_archives
from xmind_archive.core.importer.parser import parse_archive
from xmind_archive.core.search.searcher import fuzzy_path_search, search_nodes
from xmind_archive.core.tree.navigation import find_node_by_id, find_node_by_path
from xmind_archive.errors import NotFoundError, XMindError
from xmind_archive.models.description import SheetSpec
from xmind_archive.models.topic import TaskStatus, Topic
from xmind_archive.protocols import PathPolicyProtocol
from xmind_archive.writer import ArchiveWriter

SearchField = Literal["title", "notes", "labels", "callouts", "tasks"]


def _as_result(func: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    """Turn any failure of an operation into an {"error": message} result."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        try:
            return func(*args, **kwargs)
        except (XMindError, ValidationError, OSError) as e:
            logger.debug("{} failed: {}", func.__name__, e)
            return {"error": str(e)}
        except Exception as e:
            logger.exception("{} failed unexpectedly", func.__name__)
            return {"error": f"Unexpected error: {e}"}

    return wrapper


def load_archive(policy: PathPolicyProtocol, path: str | Path) -> list[Topic]:
    """Check access, then decode an archive into one root Topic per sheet.

    Raises:
        AccessDeniedError: path is outside the allow-list.
        NotFoundError: No file exists at path.
        FormatError: The file is not a readable archive.
    """
    resolved = ensure_allowed(policy, path)
    if not resolved.is_file():
        msg = f"File not found: {path}"
        raise NotFoundError(msg)
    return parse_archive(resolved)


# --- Core functions (testable without MCP context) ---


@_as_result
def xmind_read(policy: PathPolicyProtocol, *, path: str) -> dict[str, Any]:
    """Decode an XMind file into one topic tree per sheet."""
    roots = load_archive(policy, path)
    return {"sheets": [root.to_dict() for root in roots], "count": len(roots)}


@_as_result
def xmind_list_directory(
    policy: PathPolicyProtocol,
    *,
    directory: str | None = None,
) -> dict[str, Any]:
    """Recursively list XMind files in a directory or all allowed directories."""
    files = list_archives(policy, directory)
    return {"files": [str(f) for f in files], "count": len(files)}


def xmind_read_multiple(policy: PathPolicyProtocol, *, paths: list[str]) -> dict[str, Any]:
    """Decode several files; one failing file never fails the batch."""
    results: list[dict[str, Any]] = []
    for path in paths:
        entry: dict[str, Any] = {"filePath": path, "content": []}
        try:
            entry["content"] = [root.to_dict() for root in load_archive(policy, path)]
        except (XMindError, OSError) as e:
            logger.warning("Could not read {}: {}", path, e)
            entry["error"] = str(e)
        except Exception as e:
            logger.exception("Failed to read {}", path)
            entry["error"] = f"Unexpected error: {e}"
        results.append(entry)
    return {"results": results, "count": len(results)}


@_as_result
def xmind_search_files(
    policy: PathPolicyProtocol,
    *,
    pattern: str,
    directory: str | None = None,
) -> dict[str, Any]:
    """Find XMind files by name, then by content."""
    files = find_archives(policy, pattern, directory)
    return {"files": [str(f) for f in files], "count": len(files)}


@_as_result
def xmind_extract_node(
    policy: PathPolicyProtocol,
    *,
    path: str,
    search_query: str,
    limit: int = FUZZY_RESULT_LIMIT,
) -> dict[str, Any]:
    """Find nodes by fuzzy path matching, ranked by confidence.

    Args:
        path: XMind file.
        search_query: Free text matched against "Root > ... > Title" paths.
        limit: Max matches to return (totalMatches counts all of them).
    """
    matches = fuzzy_path_search(load_archive(policy, path), search_query)
    output: dict[str, Any] = {
        "matches": [m.to_dict() for m in matches[: max(1, limit)]],
        "totalMatches": len(matches),
        "query": search_query,
    }
    if not matches:
        output["message"] = f"No nodes found matching: {search_query}"
    return output


@_as_result
def xmind_extract_node_by_id(
    policy: PathPolicyProtocol,
    *,
    path: str,
    node_id: str,
) -> dict[str, Any]:
    """Return a node and its subtree by exact id; a missing id is not an error."""
    node = find_node_by_id(load_archive(policy, path), node_id)
    if node is None:
        return {"found": False, "message": f"Node not found with ID: {node_id}"}
    return {"found": True, "node": node.to_dict()}


@_as_result
def xmind_extract_node_by_path(
    policy: PathPolicyProtocol,
    *,
    path: str,
    node_path: list[str],
    sheet: str | None = None,
) -> dict[str, Any]:
    """Return the node reached by following exact child titles from a root.

    Args:
        path: XMind file.
        node_path: Child titles below the root topic, matched case-insensitively.
        sheet: Sheet title to search in; all sheets are tried when omitted.
    """
    roots = load_archive(policy, path)
    if sheet is not None:
        roots = [r for r in roots if r.sheet_title == sheet]
        if not roots:
            msg = f'Sheet "{sheet}" not found'
            raise NotFoundError(msg)

    first_error: NotFoundError | None = None
    for root in roots:
        try:
            node = find_node_by_path(root, node_path)
        except NotFoundError as e:
            first_error = first_error or e
            continue
        return {"found": True, "node": node.to_dict(), "sheet": root.sheet_title}
    if first_error is None:
        msg = "Archive contains no sheets"
        raise NotFoundError(msg)
    raise first_error


@_as_result
def xmind_search_nodes(
    policy: PathPolicyProtocol,
    *,
    path: str,
    query: str,
    search_in: list[str] | None = None,
    case_sensitive: bool = False,
    task_status: TaskStatus | None = None,
) -> dict[str, Any]:
    """Search node titles, notes, labels, callouts and task status.

    Args:
        path: XMind file.
        query: Search text.
        search_in: Fields to search (default: all).
        case_sensitive: Whether the search is case-sensitive.
        task_status: Only return nodes with this task status.
    """
    matches = search_nodes(
        load_archive(policy, path),
        query,
        search_in=search_in,
        case_sensitive=case_sensitive,
        task_status=task_status,
    )
    return {
        "query": query,
        "matches": [m.to_dict() for m in matches],
        "totalMatches": len(matches),
        "searchedIn": list(search_in) if search_in else list(SEARCH_FIELDS),
    }


@_as_result
def xmind_create(
    policy: PathPolicyProtocol,
    *,
    path: str,
    sheets: list[SheetSpec] | list[dict[str, Any]],
    overwrite: bool = False,
) -> dict[str, Any]:
    """Build an XMind file from sheet descriptions and write it.

    Nothing is written unless every reference resolves.
    """
    specs = [s if isinstance(s, SheetSpec) else SheetSpec.model_validate(s) for s in sheets]
    if not specs:
        return {"error": "At least one sheet is required"}

    writer = ArchiveWriter(policy)
    target = writer.check_target(path, overwrite=overwrite)
    document = ArchiveBuilder().build(specs)
    writer.write(target, document.to_bytes())
    logger.info("Created {} ({} sheet(s))", target, len(specs))
    return {"success": True, "path": str(target), "message": f"XMind file created: {target}"}


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    policy: AllowList


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Fix the allowed directories for the lifetime of the server."""
    policy = AllowList(resolve_allowed_directories())
    logger.info("Allowed directories: {}", ", ".join(str(d) for d in policy.directories))
    yield ServerContext(policy=policy)


mcp_server = FastMCP(
    "xmind-archive",
    instructions="""\
XMind files are mind maps: each sheet is a tree of topics with notes, labels,
markers, callouts, task data and relationships.

## Reading
1. Use list_xmind_directory or search_xmind_files to discover files.
2. Use search_nodes or extract_node to find topics, then extract_node_by_id
   to read a topic's full subtree.

## Creating
create_xmind builds a file from nested topic descriptions. Topics refer to
each other by title (linkToTopic, dependencies, relationships), so keep titles
unique when you link to them.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def read_xmind(ctx: Context, path: str) -> dict[str, Any]:
    """Parse an XMind file and return its complete structure.

    Returns one tree per sheet with titles, ids, notes, labels, markers,
    callouts, boundaries, summaries, task data, links, and sheet relationships
    on each root topic.

    Args:
        path: Path to the .xmind file.
    """
    return xmind_read(_ctx(ctx).policy, path=path)


@mcp_server.tool()
async def list_xmind_directory(ctx: Context, directory: str | None = None) -> dict[str, Any]:
    """Recursively list .xmind files.

    Args:
        directory: Directory to scan (defaults to all allowed directories).
    """
    return xmind_list_directory(_ctx(ctx).policy, directory=directory)


@mcp_server.tool()
async def read_multiple_xmind_files(ctx: Context, paths: list[str]) -> dict[str, Any]:
    """Parse several XMind files at once.

    Each result carries filePath and content; files that fail carry an error
    instead of stopping the batch.

    Args:
        paths: Paths to .xmind files.
    """
    return xmind_read_multiple(_ctx(ctx).policy, paths=paths)


@mcp_server.tool()
async def search_xmind_files(
    ctx: Context,
    pattern: str,
    directory: str | None = None,
) -> dict[str, Any]:
    """Find .xmind files whose name or content contains a pattern.

    Case-insensitive. Name matches are listed before content matches.

    Args:
        pattern: Search pattern to match in file names or content.
        directory: Starting directory for search (defaults to all allowed directories).
    """
    return xmind_search_files(_ctx(ctx).policy, pattern=pattern, directory=directory)


@mcp_server.tool()
async def extract_node(ctx: Context, path: str, search_query: str) -> dict[str, Any]:
    """Find topics by fuzzy path matching, ranked by relevance.

    Paths look like "Project > Backend > API". A query matches fully if it is
    contained in a path, partially by the share of its words found in the path.
    Returns the top 5 matches with their subtrees.

    Args:
        path: Path to the .xmind file.
        search_query: Text to search in node paths (flexible matching).
    """
    return xmind_extract_node(_ctx(ctx).policy, path=path, search_query=search_query)


@mcp_server.tool()
async def extract_node_by_id(ctx: Context, path: str, node_id: str) -> dict[str, Any]:
    """Return a topic and its subtree by its XMind id.

    Args:
        path: Path to the .xmind file.
        node_id: Unique identifier of the node.
    """
    return xmind_extract_node_by_id(_ctx(ctx).policy, path=path, node_id=node_id)


@mcp_server.tool()
async def extract_node_by_path(
    ctx: Context,
    path: str,
    node_path: list[str],
    sheet: str | None = None,
) -> dict[str, Any]:
    """Return the topic reached by following exact child titles from the root.

    Args:
        path: Path to the .xmind file.
        node_path: Child titles below the root topic, case-insensitive.
        sheet: Sheet title (defaults to trying every sheet).
    """
    return xmind_extract_node_by_path(_ctx(ctx).policy, path=path, node_path=node_path, sheet=sheet)


@mcp_server.tool(name="search_nodes")
async def search_nodes_tool(
    ctx: Context,
    path: str,
    query: str,
    search_in: list[SearchField] | None = None,
    case_sensitive: bool = False,
    task_status: TaskStatus | None = None,
) -> dict[str, Any]:
    """Search topics by title, notes, labels, callouts and task status.

    With task_status set, only topics with that status are returned; an empty
    query then lists all of them.

    Args:
        path: Path to the .xmind file.
        query: Search text.
        search_in: Fields to search in (default: all).
        case_sensitive: Whether search is case-sensitive.
        task_status: Filter by task status ("todo" or "done").
    """
    return xmind_search_nodes(
        _ctx(ctx).policy,
        path=path,
        query=query,
        search_in=list(search_in) if search_in else None,
        case_sensitive=case_sensitive,
        task_status=task_status,
    )


@mcp_server.tool()
async def create_xmind(
    ctx: Context,
    path: str,
    sheets: list[SheetSpec],
    overwrite: bool = False,
) -> dict[str, Any]:
    """Create a new XMind mind map file from structured data.

    Topics support notes (string or {plain, html}), labels, markers, callouts,
    href or linkToTopic (internal link by title, across sheets), boundaries,
    summaryTopics and structureClass. Sheets support relationships by title
    and a theme (default, business, dark, simple).

    SIMPLE TO-DO: taskStatus 'todo' or 'done', no dates needed.

    PLANNED TASKS:
    1. RELATIVE (preferred): durationDays + dependencies
       [{"targetTitle": "Analysis", "type": "FS"}]; XMind derives the dates.
       Types: FS=Finish-Start, FF=Finish-Finish, SS=Start-Start, SF=Start-Finish.
    2. ABSOLUTE: startDate + dueDate (ISO 8601) with progress and priority.

    MARKERS: 'task-done', 'task-start', 'priority-1' to 'priority-9'.

    Args:
        path: Output path for the .xmind file (must end with .xmind).
        sheets: Sheets to create.
        overwrite: Overwrite an existing file.
    """
    return xmind_create(_ctx(ctx).policy, path=path, sheets=sheets, overwrite=overwrite)


def run_mcp_server(directories: list[Path] | None = None) -> None:
    """Run the MCP server with stdio transport."""
    from xmind_archive.logging_config import configure_logging

    configure_logging(verbose=False)
    resolved = resolve_allowed_directories(directories)
    os.environ[ALLOWED_DIRS_ENV] = os.pathsep.join(str(d) for d in resolved)
    mcp_server.run(transport="stdio")
