"""CLI commands that read ephemerides through the caches."""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import click

from ..cache import SnapshotMode
from ..catalog import BODIES, PLANETS
from ..context import EphemerisContext
from ..errors import StarrelayError, UnknownBodyError
from .common import echo_json

T = TypeVar("T")


def _run(operation: Callable[[EphemerisContext], Awaitable[T]]) -> T:
    """Run one cache operation against a fresh context, without prewarm."""

    async def main() -> T:
        context = EphemerisContext.create()
        await context.store.connect()
        try:
            return await operation(context)
        finally:
            await context.close()

    return asyncio.run(main())


@click.command()
@click.option("--full", is_flag=True, help="Include observer geometry for each planet")
@click.option("--refresh", is_flag=True, help="Bypass the cache")
def snapshot(full: bool, refresh: bool) -> None:
    """Print the all-planets snapshot as JSON."""
    mode = SnapshotMode.FULL if full else SnapshotMode.STATE_VECTORS
    try:
        result = _run(lambda ctx: ctx.snapshots.get(force_refresh=refresh, mode=mode))
    except StarrelayError as e:
        raise click.ClickException(str(e))
    echo_json(result.payload)


@click.command()
@click.argument("body_id")
@click.option("--refresh", is_flag=True, help="Bypass the cache")
def body(body_id: str, refresh: bool) -> None:
    """Print one body's ephemeris as JSON."""
    try:
        payload: Any = _run(lambda ctx: ctx.bodies.get(body_id, force_refresh=refresh))
    except UnknownBodyError:
        raise click.BadParameter(f"unknown body id {body_id!r}", param_hint="BODY_ID")
    except StarrelayError as e:
        raise click.ClickException(str(e))
    echo_json(payload)


@click.command()
def bodies() -> None:
    """List the catalog: snapshot planets, then single-body ids."""
    for entry in PLANETS + BODIES:
        click.echo(
            f"{entry.id:<10} {entry.horizons_id:>4}  "
            f"{entry.display_name:<10} {entry.category.value}"
        )
