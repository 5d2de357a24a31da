"""status.py - Report which modules are being hacked."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from gohack_core.gotool import main_mod_file
from gohack_core.modfile import Replace
from gohack_core.runner import CommandRunner

from .checkout import module_dir
from .replace import directory_replaces


@dataclass
class StatusResult:
    replaced: List[Replace] = field(default_factory=list)
    not_replaced: List[str] = field(default_factory=list)


def replacement_status(runner: CommandRunner, cwd: Path, module_paths: Sequence[str] = ()) -> StatusResult:
    """Return the directory replacements of the main module.

    When module_paths is given, only those modules are reported, and the
    ones without a directory replacement are listed separately.
    """
    repls = directory_replaces(main_mod_file(runner, cwd))
    if not module_paths:
        return StatusResult(replaced=repls)
    by_path = {r.old.path: r for r in repls}
    result = StatusResult()
    for mpath in dict.fromkeys(module_paths):
        if mpath in by_path:
            result.replaced.append(by_path[mpath])
        else:
            result.not_replaced.append(mpath)
    return result


def hack_dirs(runner: CommandRunner, cwd: Path, root: Path, module_paths: Sequence[str] = ()) -> List[Path]:
    """Return the hack directories for module_paths.

    With no module paths, return the directories of all current directory
    replacements instead; only then is a go.mod file needed.
    """
    if module_paths:
        return [module_dir(root, p) for p in module_paths]
    return [Path(r.new.path) for r in directory_replaces(main_mod_file(runner, cwd))]
