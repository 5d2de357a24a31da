from __future__ import annotations

from typing import Callable, Dict

from ..errors import RepoRootError
from ..runner import CommandRunner
from .base import VCS
from .bzr import BzrVCS
from .git import GitVCS
from .hg import HgVCS

KIND_TO_VCS: Dict[str, Callable[[CommandRunner], VCS]] = {
    "bzr": BzrVCS,
    "hg": HgVCS,
    "git": GitVCS,
}


def vcs_for_kind(kind: str, runner: CommandRunner) -> VCS:
    factory = KIND_TO_VCS.get(kind)
    if factory is None:
        raise RepoRootError(f"unknown VCS kind {kind!r}")
    return factory(runner)
