from __future__ import annotations

from typing import List, Optional

import typer

from gohack_core.errors import HackError
from gohack_ops.get import get_modules

from ..util import fatal, finish, get_state


def get(
    ctx: typer.Context,
    modules: List[str] = typer.Argument(..., help="Module paths to start hacking"),
    vcs: Optional[bool] = typer.Option(
        None, "--vcs/--no-vcs", help="Check out version control information too (default from config)"
    ),
    force: bool = typer.Option(False, "-f", "--force", help="Update to the current version even if not clean"),
):
    """Start hacking a module.

    Module source is copied from the module cache into $GOHACK/<module>
    ($HOME/gohack/<module> by default) and go.mod is pointed at it. With
    --vcs the directory is a version control checkout updated to the
    required version instead. An existing directory is updated in place.
    """
    state = get_state(ctx)
    use_vcs = state.config.vcs if vcs is None else vcs
    try:
        result = get_modules(
            state.ctx,
            state.runner,
            state.config.root,
            modules,
            use_vcs=use_vcs,
            force=force,
        )
    except HackError as e:
        fatal(e)

    for exc in result.already:
        typer.echo(str(exc))
    for synced in result.hacked:
        typer.echo(f"{synced.replace.module_path} => {synced.replace.dir}")
    finish(state)
