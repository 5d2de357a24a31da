"""Mercurial VCS backend."""

from __future__ import annotations

import re
from pathlib import Path

from ..errors import VCSError
from ..runner import CommandRunner
from .base import VCSInfo, run_vcs

_VALID_HG_INFO = re.compile(r"^([a-f0-9]+) ([0-9]+)$")


class HgVCS:
    kind = "hg"

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def info(self, dir: Path) -> VCSInfo:
        out = run_vcs(self.runner, "info", dir, "hg", "log", "-l", "1", "-r", ".", "--template", "{node} {rev}")
        m = _VALID_HG_INFO.match(out.strip())
        if m is None:
            raise VCSError("info", dir, f"hg log has unexpected result {out!r}")
        status = run_vcs(self.runner, "info", dir, "hg", "status")
        return VCSInfo(revid=m.group(1), revno=m.group(2), clean=status == "")

    def create(self, repo: str, root_dir: Path) -> None:
        run_vcs(self.runner, "create", None, "hg", "clone", "-U", repo, str(root_dir), update=True, report_dir=root_dir)

    def update(self, dir: Path, is_tag: bool, revid: str) -> None:
        run_vcs(self.runner, "update", dir, "hg", "update", revid, update=True)

    def clean(self, dir: Path) -> None:
        run_vcs(self.runner, "clean", dir, "hg", "revert", "--all", update=True)

    def fetch(self, dir: Path) -> None:
        run_vcs(self.runner, "fetch", dir, "hg", "pull")
