from __future__ import annotations

from typing import List, Optional

import typer

from gohack_core.errors import HackError
from gohack_ops.status import hack_dirs, replacement_status

from ..util import fatal, finish, get_state


def status(
    ctx: typer.Context,
    modules: Optional[List[str]] = typer.Argument(None, help="Only report these modules"),
):
    """Print the modules currently replaced by local directories."""
    state = get_state(ctx)
    try:
        result = replacement_status(state.runner, state.ctx.cwd, modules or [])
    except HackError as e:
        fatal(e)

    for r in result.replaced:
        typer.echo(f"{r.old.path} => {r.new.path}")
    for mpath in result.not_replaced:
        state.ctx.fail(f"{mpath} not currently replaced")
    finish(state)


def dir_(
    ctx: typer.Context,
    modules: Optional[List[str]] = typer.Argument(None, help="Module paths (default: all replaced by directories)"),
):
    """Print the hack directory of each module."""
    state = get_state(ctx)
    try:
        dirs = hack_dirs(state.runner, state.ctx.cwd, state.config.root, modules or [])
    except HackError as e:
        fatal(e)

    for d in dirs:
        typer.echo(str(d))
