"""CLI for XMind archives (read, search, create, MCP server)."""

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from xmind_archive.access import AllowList
from xmind_archive.config import SEARCH_FIELDS, resolve_allowed_directories
from xmind_archive.core.tree.markdown import render_topic_as_markdown
from xmind_archive.errors import XMindError
from xmind_archive.logging_config import configure_logging
from xmind_archive.mcp.server import (
    load_archive,
    xmind_create,
    xmind_extract_node,
    xmind_extract_node_by_id,
    xmind_list_directory,
    xmind_search_files,
    xmind_search_nodes,
)

app = typer.Typer(help="XMind archive: read, search and create mind maps.")


def _policy(ctx: typer.Context) -> AllowList:
    return ctx.obj  # type: ignore[no-any-return]


def _emit(result: dict[str, Any], *, as_json: bool = True) -> None:
    """Print a result dict, exiting with status 1 if it carries an error."""
    if "error" in result:
        logger.error("{}", result["error"])
        raise typer.Exit(1)
    if as_json:
        typer.echo(json.dumps(result, indent=2, ensure_ascii=False))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    allow: Annotated[
        list[Path] | None,
        typer.Option("--allow", "-a", help="Allowed directory (repeatable)"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose)
    if ctx.invoked_subcommand == "serve":
        return
    try:
        ctx.obj = AllowList(resolve_allowed_directories(allow))
    except ValueError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


@app.command()
def read(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="XMind file"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Read a mind map as a markdown outline, one section per sheet."""
    try:
        roots = load_archive(_policy(ctx), path)
    except (XMindError, OSError) as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    if output_json:
        typer.echo(json.dumps([r.to_dict() for r in roots], indent=2, ensure_ascii=False))
        return
    for root in roots:
        typer.echo(f"# {root.sheet_title}\n")
        typer.echo(render_topic_as_markdown(root, max_depth=max_depth))


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    directory: Annotated[
        Path | None, typer.Argument(help="Directory to scan (default: allowed directories)")
    ] = None,
) -> None:
    """List .xmind files recursively."""
    result = xmind_list_directory(_policy(ctx), directory=str(directory) if directory else None)
    _emit(result, as_json=False)
    if not result["files"]:
        typer.echo("No XMind files found")
    for f in result["files"]:
        typer.echo(f)


@app.command()
def find(
    ctx: typer.Context,
    pattern: str = typer.Argument(..., help="Text to match in file names or content"),
) -> None:
    """Find .xmind files by name, then by content."""
    result = xmind_search_files(_policy(ctx), pattern=pattern)
    _emit(result, as_json=False)
    if not result["files"]:
        typer.echo("No matching files found")
    for f in result["files"]:
        typer.echo(f)


@app.command()
def extract(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="XMind file"),
    query: str = typer.Argument(..., help="Path-like query, e.g. 'Project > Backend'"),
    limit: int = typer.Option(5, "--limit", "-n", help="Max results"),
) -> None:
    """Find topics by fuzzy path matching."""
    result = xmind_extract_node(_policy(ctx), path=str(path), search_query=query, limit=limit)
    _emit(result)


@app.command()
def node(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="XMind file"),
    node_id: str = typer.Argument(..., help="Topic id"),
) -> None:
    """Print a topic and its subtree by id."""
    result = xmind_extract_node_by_id(_policy(ctx), path=str(path), node_id=node_id)
    _emit(result)
    if not result["found"]:
        raise typer.Exit(1)


@app.command()
def search(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="XMind file"),
    query: str = typer.Argument("", help="Search text"),
    fields: Annotated[
        list[str] | None,
        typer.Option("--in", help=f"Field to search, one of {', '.join(SEARCH_FIELDS)}"),
    ] = None,
    case_sensitive: bool = typer.Option(False, "--case-sensitive", "-c"),
    status: Annotated[
        str | None,
        typer.Option("--status", "-s", help="Only topics with this task status (todo/done)"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Search topics by title, notes, labels, callouts and task status."""
    unknown = [f for f in fields or () if f not in SEARCH_FIELDS]
    if unknown:
        typer.echo(f"Unknown field(s): {', '.join(unknown)}")
        raise typer.Exit(1)
    if status is not None and status not in ("todo", "done"):
        typer.echo(f"Invalid status '{status}'. Expected todo or done.")
        raise typer.Exit(1)

    result = xmind_search_nodes(
        _policy(ctx),
        path=str(path),
        query=query,
        search_in=fields,
        case_sensitive=case_sensitive,
        task_status=status,  # type: ignore[arg-type]
    )
    _emit(result, as_json=output_json)
    if output_json:
        return
    typer.echo(f"Found {result['totalMatches']} matches:\n")
    for m in result["matches"]:
        typer.echo(f"  [{m['sheet']}] {m['path']}")
        typer.echo(f"    id={m['id']}  matched in: {', '.join(m['matchedIn']) or '-'}")
        typer.echo()


@app.command()
def create(
    ctx: typer.Context,
    output: Path = typer.Argument(..., help="Output .xmind file"),
    description: Path = typer.Argument(
        ..., help="JSON file with a list of sheets, or an object with a 'sheets' key"
    ),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace an existing file"),
) -> None:
    """Create a mind map from a JSON description."""
    try:
        data = json.loads(description.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Cannot read description {}: {}", description, e)
        raise typer.Exit(1) from e
    sheets = data.get("sheets", []) if isinstance(data, dict) else data

    result = xmind_create(_policy(ctx), path=str(output), sheets=sheets, overwrite=overwrite)
    _emit(result, as_json=False)
    typer.echo(result["message"])


@app.command()
def serve(
    directories: Annotated[
        list[Path] | None,
        typer.Argument(help="Allowed directories (default: XMIND_ALLOWED_DIRS or cwd)"),
    ] = None,
) -> None:
    """Start the MCP server (stdio transport)."""
    from xmind_archive.mcp.server import run_mcp_server

    try:
        run_mcp_server(directories)
    except ValueError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
