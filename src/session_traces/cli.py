"""CLI entry point for session-traces."""

from pathlib import Path

import click
import uvicorn

from .backends import get_event_store
from .config import get_port
from .search import search as search_corpus


@click.group()
def main():
    """Browse AI-assistant session logs with turn structure and analytics."""
    pass


@main.command()
@click.option("--port", default=get_port, type=int, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.option("--root", type=click.Path(file_okay=False, path_type=Path), help="Projects directory.")
@click.option("--log-level", default="info", help="Uvicorn log level.")
def serve(port: int, host: str, root: Path | None, log_level: str):
    """Start the web API."""
    from .server import app, set_event_store

    store = get_event_store(root)
    set_event_store(store)
    click.echo(f"Serving {store.get_base_path()} on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=log_level, reload=False)


@main.command()
@click.argument("query")
@click.option("--root", type=click.Path(file_okay=False, path_type=Path), help="Projects directory.")
def search(query: str, root: Path | None):
    """Search every session log for QUERY."""
    matches = search_corpus(query, get_event_store(root))
    if not matches:
        click.echo("No matches.")
        return
    for m in matches:
        summary = " ".join(m.summary[:60].split())
        click.echo(f"{m.project_path}  {m.session_id}  ({m.match_count})  {summary}")
