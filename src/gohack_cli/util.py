from __future__ import annotations

import logging
from dataclasses import dataclass

import typer
from rich.console import Console
from rich.logging import RichHandler

from gohack_core.config import HackConfig
from gohack_core.errors import HackError
from gohack_core.runner import CommandRunner, RunContext


@dataclass
class CLIState:
    """Per-invocation state handed from the root callback to the commands."""
    ctx: RunContext
    runner: CommandRunner
    config: HackConfig


def make_runner(ctx: RunContext) -> CommandRunner:
    return CommandRunner(ctx)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_state(ctx: typer.Context) -> CLIState:
    state = ctx.find_root().obj
    if not isinstance(state, CLIState):
        raise RuntimeError("gohack state not initialised")
    return state


def fatal(err: HackError | str) -> None:
    """Report an error that stops the whole command."""
    typer.echo(f"gohack: {err}", err=True)
    raise typer.Exit(1)


def finish(state: CLIState) -> None:
    """Exit non-zero if any module failed along the way."""
    if state.ctx.exit_code:
        raise typer.Exit(state.ctx.exit_code)
