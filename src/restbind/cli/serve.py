import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

console = Console()


def serve(
    host: str = "127.0.0.1",
    port: int = 8000,
    seed: Annotated[Path | None, typer.Option(help='JSON file of {"resource": [objects]} to preload.')] = None,
) -> None:
    """Start the in-memory demo REST API."""
    import uvicorn

    from restbind.api.app import create_app
    from restbind.api.dependencies import set_store
    from restbind.api.store import InMemoryResourceStore

    store = InMemoryResourceStore()
    if seed is not None:
        store.seed(json.loads(seed.read_text(encoding="utf-8")))
    set_store(store)

    app = create_app()
    console.print(f"[green]Starting API server on {host}:{port}[/green]")
    uvicorn.run(app, host=host, port=port)
