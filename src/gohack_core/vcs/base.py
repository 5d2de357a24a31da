"""VCS abstraction base types."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..errors import CommandError, VCSError
from ..runner import CommandRunner


@dataclass(frozen=True)
class VCSInfo:
    """State of a working copy."""
    revid: str
    revno: str = ""  # revision number or commit time; optional
    clean: bool = True


class VCS(Protocol):
    """Operations gohack needs from a version control system."""

    kind: str

    def info(self, dir: Path) -> VCSInfo:
        """Return the current revision and cleanliness of the working copy."""
        ...

    def update(self, dir: Path, is_tag: bool, revid: str) -> None:
        """Update the working copy to a tag or revision id."""
        ...

    def clean(self, dir: Path) -> None:
        """Discard uncommitted changes."""
        ...

    def create(self, repo: str, root_dir: Path) -> None:
        """Create a new working copy of repo at root_dir."""
        ...

    def fetch(self, dir: Path) -> None:
        """Fetch new revisions from upstream without changing the working copy."""
        ...


def run_vcs(
    runner: CommandRunner,
    operation: str,
    dir: Path | None,
    name: str,
    *args: str,
    update: bool = False,
    report_dir: Path | None = None,
) -> str:
    """Run a VCS command, reporting failures as VCSError.

    Commands that change the working copy must pass update=True so that
    they are skipped in dry-run mode. report_dir names the directory in
    errors when the command runs elsewhere, as a clone does.
    """
    try:
        if update:
            return runner.run_update(dir, name, *args)
        return runner.run(dir, name, *args)
    except CommandError as exc:
        where = report_dir if report_dir is not None else dir
        raise VCSError(operation, where if where is not None else ".", str(exc)) from exc
