"""replace.py - Reversible edits of go.mod replace directives.

When a module is hacked, a replace directive pointing at the hack
directory is added. If the main module already replaced that module with
another module version, the existing directive is rewritten in place and
its previous state is kept as a marker comment:

    replace example.com/m => /home/me/gohack/example.com/m // was example.com/m v1.0.0 => fork.com/m v1.0.1

Undo pops the marker to restore the original directive, or drops the
directive when there is no marker.

All functions edit the in-memory ModFile only; callers write it once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from gohack_core.errors import (
    AlreadyHackingError,
    AlreadyReplacedError,
    AmbiguousReplaceError,
    NotReplacedError,
)
from gohack_core.modfile import Comment, ModFile, ModuleVersion, PreviousReplace, Replace

logger = logging.getLogger(__name__)


@dataclass
class UndoResult:
    module_path: str
    restored: Optional[Replace] = None  # set when a previous directive was put back

    @property
    def action(self) -> str:
        return "restored" if self.restored is not None else "dropped"


def check_can_replace(modf: ModFile, module_path: str, dir: Path | str) -> None:
    """Check that a replace directive for module_path may be pointed at dir.

    Raises AlreadyHackingError if it already is, AlreadyReplacedError if
    the module is already replaced by some other directory, and
    AmbiguousReplaceError if there is more than one directive for it.
    """
    found = modf.find_replaces(module_path)
    if len(found) > 1:
        raise AmbiguousReplaceError(module_path)
    if not found or found[0].new.version != "":
        return
    target = found[0].new.path
    if target == str(dir):
        raise AlreadyHackingError(module_path, target)
    raise AlreadyReplacedError(module_path, target)


def replace_module(modf: ModFile, module_path: str, dir: Path | str) -> Replace:
    """Add or rewrite the replace directive for module_path to point at dir.

    check_can_replace must have succeeded for the same arguments.
    """
    check_can_replace(modf, module_path, dir)
    found = modf.find_replaces(module_path)
    if not found:
        logger.debug(f"adding replace {module_path} => {dir}")
        return modf.add_replace(module_path, "", str(dir), "")

    r = found[0]
    if r.previous is None:
        suffix = r.syntax.comments.suffix
        r.previous = PreviousReplace(
            old=ModuleVersion(r.old.path, r.old.version),
            new=ModuleVersion(r.new.path, r.new.version),
            comment=suffix[0].token.strip() if suffix else "",
        )
        # Any further suffix comments are dropped; the first one lives on in the marker.
        r.syntax.comments.suffix = []
    logger.debug(f"rewriting replace {r.old} => {r.new} to point at {dir}")
    modf.set_replace(r, ModuleVersion(module_path), ModuleVersion(str(dir)))
    return r


def directory_replaces(modf: ModFile) -> List[Replace]:
    """Return every replace directive that maps any version of a module to a directory."""
    return [r for r in modf.replaces if r.is_directory]


def undo_replace(modf: ModFile, module_path: str) -> UndoResult:
    """Stop replacing module_path with a directory.

    A directive carrying a previous-state marker for the same module is
    restored to what the marker records; otherwise it is dropped.
    """
    candidates = [r for r in modf.find_replaces(module_path) if r.old.version == ""]
    if len(candidates) > 1:
        raise AmbiguousReplaceError(module_path)
    if not candidates or not candidates[0].is_directory:
        raise NotReplacedError(module_path)

    r = candidates[0]
    prev = r.previous
    if prev is None or prev.old.path != r.old.path:
        logger.debug(f"dropping replace {r.old} => {r.new}")
        modf.drop_replace(module_path, "")
        return UndoResult(module_path)

    logger.debug(f"restoring replace {prev.old} => {prev.new}")
    r.previous = None
    modf.set_replace(r, prev.old, prev.new)
    r.syntax.comments.suffix = [] if not prev.comment else [Comment(prev.comment)]
    return UndoResult(module_path, restored=r)
