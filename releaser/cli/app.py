from __future__ import annotations

import typer

from releaser import __version__
from releaser.cli.commands.plan_cmd import plan
from releaser.cli.commands.publish_cmd import publish
from releaser.cli.commands.run_cmd import run
from releaser.cli.commands.variant_cmd import variant


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(run)
app.command()(variant)
app.command()(publish)
app.command()(plan)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    del version


def main() -> None:
    app()
