from __future__ import annotations

from typing import List, Optional

import typer

from gohack_core.errors import HackError
from gohack_ops.undo import undo_modules

from ..util import fatal, finish, get_state


def undo(
    ctx: typer.Context,
    modules: Optional[List[str]] = typer.Argument(None, help="Module paths (default: all replaced by directories)"),
    remove: bool = typer.Option(False, "--rm", help="Remove the module directory too"),
    force: bool = typer.Option(
        False,
        "-f",
        "--force",
        help="With --rm, remove the directory even if it has local changes. Do not use unless you really need to!",
    ),
):
    """Stop hacking a module.

    Reverts the replace directives in go.mod, restoring any directive
    that was there before the module was hacked. Directories are left
    alone unless --rm is given.
    """
    state = get_state(ctx)
    try:
        outcome = undo_modules(
            state.ctx,
            state.runner,
            state.config.root,
            modules or [],
            remove=remove,
            force=force,
        )
    except HackError as e:
        fatal(e)

    for res in outcome.undone:
        if res.restored is not None:
            typer.echo(f"restored {res.restored.old} => {res.restored.new}")
        else:
            typer.echo(f"dropped {res.module_path}")
    for path in outcome.removed:
        typer.echo(f"removed {path}")
    finish(state)
