"""undo.py - Stop hacking modules.

Reverts the replace directives that get added, leaving the hack
directories alone unless removal is asked for.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from gohack_core.errors import HackError
from gohack_core.gotool import main_mod_file, write_mod_file
from gohack_core.runner import CommandRunner, RunContext

from .checkout import is_checkout_clean, module_dir
from .replace import UndoResult, directory_replaces, undo_replace

logger = logging.getLogger(__name__)


@dataclass
class UndoOutcome:
    undone: List[UndoResult] = field(default_factory=list)
    removed: List[Path] = field(default_factory=list)


def undo_modules(
    ctx: RunContext,
    runner: CommandRunner,
    root: Path,
    module_paths: Sequence[str] = (),
    remove: bool = False,
    force: bool = False,
) -> UndoOutcome:
    """Revert the directory replacements for module_paths.

    With no module paths, every directory replacement is reverted. When
    remove is set, each module's hack directory under root is deleted too,
    provided it is clean or force is set.
    """
    modf = main_mod_file(runner, ctx.cwd)
    targets = {r.old.path: r.new.path for r in directory_replaces(modf)}
    paths = list(dict.fromkeys(module_paths)) if module_paths else list(targets)

    outcome = UndoOutcome()
    for mpath in paths:
        try:
            outcome.undone.append(undo_replace(modf, mpath))
        except HackError as exc:
            ctx.fail(str(exc))
    if not outcome.undone:
        return outcome
    write_mod_file(modf)

    if remove:
        for res in outcome.undone:
            removed = _remove_hack_dir(ctx, runner, root, res.module_path, targets.get(res.module_path, ""), force)
            if removed is not None:
                outcome.removed.append(removed)
    return outcome


def _remove_hack_dir(
    ctx: RunContext,
    runner: CommandRunner,
    root: Path,
    module_path: str,
    target: str,
    force: bool,
) -> Path | None:
    dir = module_dir(root, module_path)
    if target != str(dir):
        logger.warning(f"{module_path} was replaced by {target}, not {dir}; leaving it alone")
        return None
    if not dir.exists():
        return None
    if not force:
        try:
            clean = is_checkout_clean(runner, dir, module_path)
        except (HackError, OSError) as exc:
            ctx.fail(f"cannot check {dir}: {exc}")
            return None
        if not clean:
            ctx.fail(f'"{dir}" is not clean; not removing')
            return None
    runner.remove_tree(dir)
    return dir
