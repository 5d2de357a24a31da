"""Bazaar VCS backend."""

from __future__ import annotations

import re
from pathlib import Path

from ..errors import VCSError
from ..runner import CommandRunner
from .base import VCSInfo, run_vcs

_VALID_BZR_INFO = re.compile(r"^([0-9.]+) ([^ \t]+)$")
_SHELVE_LINE = re.compile(r"^[0-9]+ (shelves exist|shelf exists)\.")


def status_is_clean(out: str) -> bool:
    """Shelved changes are not part of the working tree, so they count as clean."""
    for line in out.split("\n"):
        if line == "" or _SHELVE_LINE.match(line):
            continue
        return False
    return True


class BzrVCS:
    kind = "bzr"

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def info(self, dir: Path) -> VCSInfo:
        out = run_vcs(self.runner, "info", dir, "bzr", "revision-info", "--tree")
        m = _VALID_BZR_INFO.match(out.strip())
        if m is None:
            raise VCSError("info", dir, f"bzr revision-info has unexpected result {out!r}")
        status = run_vcs(self.runner, "info", dir, "bzr", "status", "-S")
        return VCSInfo(revid=m.group(2), revno=m.group(1), clean=status_is_clean(status))

    def create(self, repo: str, root_dir: Path) -> None:
        run_vcs(self.runner, "create", None, "bzr", "branch", repo, str(root_dir), update=True, report_dir=root_dir)

    def update(self, dir: Path, is_tag: bool, revid: str) -> None:
        to = f"tag:{revid}" if is_tag else f"revid:{revid}"
        run_vcs(self.runner, "update", dir, "bzr", "update", "-r", to, update=True)

    def clean(self, dir: Path) -> None:
        run_vcs(self.runner, "clean", dir, "bzr", "revert", update=True)

    def fetch(self, dir: Path) -> None:
        run_vcs(self.runner, "fetch", dir, "bzr", "pull")
