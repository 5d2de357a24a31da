from __future__ import annotations

from pathlib import Path

import typer

from gohack_core.config import load_config
from gohack_core.errors import ConfigError
from gohack_core.runner import RunContext

from . import util

app = typer.Typer(help="gohack: make temporary edits to your Go module dependencies")


@app.callback(invoke_without_command=True)
def _init(
    ctx: typer.Context,
    print_commands: bool = typer.Option(False, "-x", help="Show executed commands"),
    dry_run: bool = typer.Option(False, "-n", help="Print but do not execute update commands"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help(), err=True)
        raise typer.Exit(2)
    try:
        config = load_config()
    except ConfigError as e:
        typer.echo(f"ConfigError: {e}", err=True)
        raise typer.Exit(1)
    util.setup_logging("debug" if verbose else config.log_level)

    run_ctx = RunContext(print_commands=print_commands, dry_run=dry_run, cwd=Path.cwd())
    ctx.obj = util.CLIState(ctx=run_ctx, runner=util.make_runner(run_ctx), config=config)


# Subcommands are registered in commands/*.py
from .commands import config_cmd  # noqa: E402
from .commands.get import get as get_fn  # noqa: E402
from .commands.status import dir_ as dir_fn, status as status_fn  # noqa: E402
from .commands.undo import undo as undo_fn  # noqa: E402

app.command(name="get")(get_fn)
app.command(name="undo")(undo_fn)
app.command(name="status")(status_fn)
app.command(name="dir")(dir_fn)
app.add_typer(config_cmd.app, name="config", help="Configuration inspection")


def main():
    app()
