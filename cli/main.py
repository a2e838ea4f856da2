"""Lineage Explorer CLI: entry-point for lineage queries and exploration.

Usage:
    python cli/main.py --help

Commands:
    links      → annotated links around one resource
    explore    → breadth-first graph exploration from a root resource
    processes  → list lineage processes in a project/location
    process    → process, runs and BigQuery job details
    serve      → run the HTTP API
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that
# `from lineage_explorer.xxx import ...` works when the CLI is invoked as
# `python cli/main.py` from any working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
from typing import Optional

import typer

from cli.rendering import render_json, render_list, render_tree
from lineage_explorer.client.http import LineageApiClient
from lineage_explorer.client.processes import get_process_and_job_details, list_processes
from lineage_explorer.config import settings
from lineage_explorer.errors import BackendUnavailable, ValidationError, require_fields
from lineage_explorer.graph.controller import ExpansionController
from lineage_explorer.graph.models import Direction, GraphDelta
from lineage_explorer.graph.session import ExplorationSession
from lineage_explorer.log import configure_logging
from lineage_explorer.service import LineageQueryService

app = typer.Typer(
    name="lineage-explorer",
    help="Explore data lineage around a resource.",
    no_args_is_help=True,
)

_TOKEN_OPTION = typer.Option(
    None, "--token", help="Bearer token (defaults to LINEAGE_ACCESS_TOKEN)."
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    configure_logging("DEBUG" if verbose else settings.log_level, json_format=settings.log_json)


def _run(coro):  # type: ignore[no-untyped-def]
    """Run *coro*, turning domain errors into exit codes (2 = bad input, 1 = backend)."""
    try:
        return asyncio.run(coro)
    except ValidationError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=2) from exc
    except BackendUnavailable as exc:
        cause = f" ({exc.__cause__})" if exc.__cause__ else ""
        typer.echo(f"Error: {exc.message}{cause}", err=True)
        raise typer.Exit(code=1) from exc


def _next_frontier(resource: str, delta: GraphDelta) -> list[tuple[str, Direction]]:
    """New neighbours of *resource*, each paired with the side to keep following."""
    new_ids = {n.resource_id for n in delta.nodes}
    frontier: list[tuple[str, Direction]] = []
    for edge in delta.edges:
        if edge.target == resource and edge.source in new_ids:
            frontier.append((edge.source, Direction.UPSTREAM))
            new_ids.discard(edge.source)
        elif edge.source == resource and edge.target in new_ids:
            frontier.append((edge.target, Direction.DOWNSTREAM))
            new_ids.discard(edge.target)
    return frontier


async def explore_graph(
    api: LineageApiClient, parent: str, fqn: str, depth: int
) -> ExplorationSession:
    """Expand the root both ways, then follow each side outward *depth* - 1 more levels.

    Nodes of one level are expanded concurrently.  A node whose fetch fails
    is reported and left unexpanded; the rest of the level still merges.
    """
    session = ExplorationSession.start(parent, fqn)
    controller = ExpansionController(session.model, LineageQueryService.from_client(api))

    frontier: list[tuple[str, Direction]] = [(fqn, Direction.BOTH)]
    for _ in range(depth):
        if not frontier:
            break
        results = await asyncio.gather(
            *(controller.expand(resource, direction) for resource, direction in frontier),
            return_exceptions=True,
        )
        next_frontier: list[tuple[str, Direction]] = []
        for (resource, _direction), result in zip(frontier, results):
            if isinstance(result, BackendUnavailable):
                if resource == fqn:
                    raise result
                typer.echo(f"[explore] Skipped {resource}: {result.message}", err=True)
                continue
            if isinstance(result, BaseException):
                raise result
            if result is not None:
                next_frontier.extend(_next_frontier(resource, result))
        frontier = next_frontier
    return session


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("links")
def links_cmd(
    fqn: str = typer.Argument(..., help="Fully-qualified resource name."),
    parent: str = typer.Option(..., "--parent", help="projects/P/locations/L"),
    direction: str = typer.Option("both", "--direction", help="upstream | downstream | both"),
    token: Optional[str] = _TOKEN_OPTION,
) -> None:
    """Print the links around FQN, annotated with their processes."""
    try:
        wanted = Direction.parse(direction)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    async def _go():  # type: ignore[no-untyped-def]
        require_fields(parent=parent, fqn=fqn)
        async with LineageApiClient(token or settings.access_token) as api:
            return await LineageQueryService.from_client(api).explore_direction(fqn, parent)

    result = _run(_go())
    sections = []
    if wanted & Direction.UPSTREAM:
        sections.append(("upstream", result.upstream_links))
    if wanted & Direction.DOWNSTREAM:
        sections.append(("downstream", result.downstream_links))

    for label, links in sections:
        typer.echo(f"[links] {label}: {len(links)} link(s)")
        for link in links:
            typer.echo(
                f"  {link.source} -> {link.target}  [{link.process or 'unknown process'}]"
            )


@app.command("explore")
def explore_cmd(
    fqn: str = typer.Argument(..., help="Fully-qualified resource name of the root."),
    parent: str = typer.Option(..., "--parent", help="projects/P/locations/L"),
    depth: int = typer.Option(1, "--depth", min=1, help="Levels to expand outward."),
    format: str = typer.Option("tree", "--format", help="Output format: tree | list | json"),
    token: Optional[str] = _TOKEN_OPTION,
) -> None:
    """Explore the lineage graph around FQN and print it."""
    if format not in {"tree", "list", "json"}:
        typer.echo(f"Error: unknown format {format!r}.", err=True)
        raise typer.Exit(code=2)

    async def _go():  # type: ignore[no-untyped-def]
        require_fields(parent=parent, fqn=fqn)
        async with LineageApiClient(token or settings.access_token) as api:
            return await explore_graph(api, parent, fqn, depth)

    session = _run(_go())
    model = session.model
    if format == "json":
        typer.echo(render_json(model))
    elif format == "list":
        typer.echo(render_list(model))
    else:
        typer.echo(render_tree(model))
        typer.echo(f"[explore] {len(model)} node(s), {len(model.edges)} edge(s)")


@app.command("processes")
def processes_cmd(
    parent: str = typer.Option(..., "--parent", help="projects/P/locations/L"),
    token: Optional[str] = _TOKEN_OPTION,
) -> None:
    """List the lineage processes under PARENT."""

    async def _go():  # type: ignore[no-untyped-def]
        require_fields(parent=parent)
        async with LineageApiClient(token or settings.access_token) as api:
            return await list_processes(api, parent)

    processes = _run(_go())
    if not processes:
        typer.echo("[processes] No processes found.")
        return
    for p in processes:
        job = f"  job={p.bigquery_job_id}" if p.bigquery_job_id else ""
        typer.echo(f"  {p.name}  {p.display_name!r}{job}")


@app.command("process")
def process_cmd(
    name: str = typer.Argument(..., help="Process resource name."),
    token: Optional[str] = _TOKEN_OPTION,
) -> None:
    """Print a process, its runs and its BigQuery job as JSON."""

    async def _go():  # type: ignore[no-untyped-def]
        require_fields(process=name)
        async with LineageApiClient(token or settings.access_token) as api:
            return await get_process_and_job_details(api, name)

    typer.echo(json.dumps(_run(_go()), indent=2))


@app.command("serve")
def serve_cmd(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
    reload: bool = typer.Option(False, "--reload"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("lineage_explorer.api.app:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
