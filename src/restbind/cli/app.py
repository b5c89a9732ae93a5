import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from restbind.cli.resources import create, fetch
from restbind.cli.serve import serve

app = typer.Typer(
    name="restbind",
    help="restbind CLI: fetch and create REST resources.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    log_level: Annotated[str, typer.Option(help="Logging level (DEBUG, INFO, WARNING, ...).")] = "WARNING",
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


app.command("fetch")(fetch)
app.command("create")(create)
app.command("serve")(serve)


def main() -> None:
    app()
