import asyncio
import json
from collections.abc import Sequence
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from restbind.core.collection import Collection
from restbind.core.ports.transport import TransportError
from restbind.core.record import Record
from restbind.core.resource import define_resource
from restbind.transport.httpx_adapter import HttpxTransport

console = Console()


def _get_transport(base_url: str | None) -> HttpxTransport:
    from restbind.transport.client import get_transport

    return get_transport(base_url)


def _parse_pairs(pairs: Sequence[str] | None) -> dict[str, Any]:
    """Parse ``key=value`` options; values that are valid JSON are decoded."""
    result: dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {pair!r}")
        try:
            result[key] = json.loads(raw)
        except ValueError:
            result[key] = raw
    return result


def _render_records(records: Sequence[Record]) -> None:
    headers: list[str] = []
    for record in records:
        for key in record.attributes:
            if key not in headers:
                headers.append(key)
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for record in records:
        table.add_row(*(str(record.attributes.get(h, "")) for h in headers))
    console.print(table)
    console.print(f"({len(records)} rows)")


def fetch(
    path: Annotated[str, typer.Argument(help="Resource path, e.g. /bikes.")],
    param: Annotated[list[str] | None, typer.Option("--param", "-p", help="Query parameter as key=value.")] = None,
    base_url: Annotated[str | None, typer.Option(help="API base URL (default: $RESTBIND_BASE_URL).")] = None,
) -> None:
    """Fetch a resource collection and print it as a table."""
    params = _parse_pairs(param)
    transport = _get_transport(base_url)

    async def _run() -> Collection:
        try:
            return await define_resource(path, transport).collection(params).fetch()
        finally:
            await transport.aclose()

    try:
        collection = asyncio.run(_run())
    except TransportError as exc:
        console.print(f"[red]Fetch failed: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    _render_records(collection)


def create(
    path: Annotated[str, typer.Argument(help="Resource path, e.g. /bikes.")],
    attr: Annotated[list[str] | None, typer.Option("--attr", "-a", help="Attribute as key=value.")] = None,
    base_url: Annotated[str | None, typer.Option(help="API base URL (default: $RESTBIND_BASE_URL).")] = None,
) -> None:
    """Create a resource and print the id assigned by the server."""
    attributes = _parse_pairs(attr)
    transport = _get_transport(base_url)

    async def _run() -> Record:
        try:
            return await define_resource(path, transport).collection().create(attributes)
        finally:
            await transport.aclose()

    try:
        record = asyncio.run(_run())
    except TransportError as exc:
        console.print(f"[red]Create failed: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(f"[green]Created {path} with id {record.pk}[/green]")
