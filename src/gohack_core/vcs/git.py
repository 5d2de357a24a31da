"""Git VCS backend."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from ..errors import VCSError
from ..runner import CommandRunner
from .base import VCSInfo, run_vcs


def _is_hex_hash(s: str) -> bool:
    if not s or len(s) % 2:
        return False
    try:
        bytes.fromhex(s)
    except ValueError:
        return False
    return True


class GitVCS:
    kind = "git"

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def info(self, dir: Path) -> VCSInfo:
        out = run_vcs(self.runner, "info", dir, "git", "log", "-n", "1", "--pretty=format:%H %ct", "HEAD")
        fields = out.split()
        if len(fields) != 2:
            raise VCSError("info", dir, f"unexpected git log output {out!r}")
        revid, stamp = fields
        if not _is_hex_hash(revid):
            raise VCSError("info", dir, f"git log provided invalid revision {revid!r}")
        try:
            unix_time = int(stamp)
        except ValueError:
            raise VCSError("info", dir, f"git log provided invalid time {stamp!r}") from None

        # One line per changed or untracked file; empty output means clean.
        status = run_vcs(self.runner, "info", dir, "git", "status", "--porcelain")
        return VCSInfo(
            revid=revid,
            revno=datetime.fromtimestamp(unix_time, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            clean=status == "",
        )

    def create(self, repo: str, root_dir: Path) -> None:
        run_vcs(self.runner, "create", None, "git", "clone", repo, str(root_dir), update=True, report_dir=root_dir)

    def update(self, dir: Path, is_tag: bool, revid: str) -> None:
        run_vcs(self.runner, "update", dir, "git", "checkout", revid, update=True)

    def clean(self, dir: Path) -> None:
        run_vcs(self.runner, "clean", dir, "git", "reset", "--hard", "HEAD", update=True)

    def fetch(self, dir: Path) -> None:
        run_vcs(self.runner, "fetch", dir, "git", "fetch")
