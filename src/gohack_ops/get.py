"""get.py - Start hacking modules.

Each requested module is checked out into its hack directory and then
replaced by that directory in the main module's go.mod file. A failure
for one module is reported and the rest carry on; go.mod is written once
at the end, covering every module that succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from gohack_core.errors import AlreadyHackingError, HackError, ModuleNotInUseError
from gohack_core.gotool import list_modules, main_mod_file, write_mod_file
from gohack_core.runner import CommandRunner, RunContext
from gohack_core.vcs import RepoRoot, repo_root_for_import_path

from .checkout import CheckoutSynchronizer, SyncResult, ensure_go_mod_file
from .replace import check_can_replace, replace_module

logger = logging.getLogger(__name__)


@dataclass
class GetResult:
    hacked: List[SyncResult] = field(default_factory=list)
    already: List[AlreadyHackingError] = field(default_factory=list)
    go_mod: Optional[Path] = None  # set when go.mod was rewritten


def get_modules(
    ctx: RunContext,
    runner: CommandRunner,
    root: Path,
    module_paths: Sequence[str],
    use_vcs: bool = False,
    force: bool = False,
    resolve_repo_root: Callable[[str], RepoRoot] = repo_root_for_import_path,
) -> GetResult:
    """Check out and replace each of module_paths.

    Per-module failures go to ctx.fail. Raises HackError when nothing can
    be done at all: the module graph or go.mod cannot be read, every
    module failed, or go.mod cannot be written.
    """
    if not module_paths:
        raise HackError("get requires at least one module argument")
    try:
        mods = list_modules(runner, ctx.cwd, "all")
    except HackError as exc:
        raise HackError(f"cannot get module info: {exc}") from exc
    try:
        modf = main_mod_file(runner, ctx.cwd)
    except HackError as exc:
        raise HackError(f"cannot get local module info: {exc}") from exc

    sync = CheckoutSynchronizer(runner, root, force=force, resolve_repo_root=resolve_repo_root)
    result = GetResult()
    for mpath in dict.fromkeys(module_paths):
        m = mods.get(mpath)
        if m is None or m.main:
            ctx.fail(str(ModuleNotInUseError(mpath)))
            continue
        # Check early so we don't do all the work of a checkout only to
        # find that the replace directive cannot be added.
        try:
            check_can_replace(modf, mpath, sync.module_dir(mpath))
        except AlreadyHackingError as exc:
            result.already.append(exc)
            continue
        except HackError as exc:
            ctx.fail(str(exc))
            continue

        try:
            synced = sync.sync(m, use_vcs)
        except (HackError, OSError) as exc:
            if use_vcs:
                ctx.fail(f"cannot update VCS dir for {mpath}: {exc}")
            else:
                ctx.fail(f"cannot update {mpath} from local cache: {exc}")
            continue
        logger.debug(f"{mpath}@{m.version}: {synced.action} {synced.replace.dir}")

        # Without a go.mod file the directory cannot be used as a module.
        try:
            if ensure_go_mod_file(mpath, synced.replace.dir):
                logger.debug(f"generated go.mod in {synced.replace.dir}")
        except OSError as exc:
            ctx.fail(f"cannot create go.mod in {synced.replace.dir}: {exc}")
        result.hacked.append(synced)

    if not result.hacked:
        if result.already:
            return result
        raise HackError("all modules failed; not replacing anything")

    for synced in result.hacked:
        replace_module(modf, synced.replace.module_path, synced.replace.dir)
    write_mod_file(modf)
    result.go_mod = modf.path
    return result
