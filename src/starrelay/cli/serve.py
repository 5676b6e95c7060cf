"""CLI command that runs the HTTP API."""

import click
import uvicorn

from ..api import create_app


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=3000, show_default=True, type=int, help="Port to listen on")
def serve(host: str, port: int) -> None:
    """Serve the ephemeris API."""
    uvicorn.run(create_app(), host=host, port=port)
