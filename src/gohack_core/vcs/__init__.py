from .base import VCS, VCSInfo
from .bzr import BzrVCS
from .git import GitVCS
from .hg import HgVCS
from .reporoot import RepoRoot, repo_root_for_import_path
from .registry import vcs_for_kind, KIND_TO_VCS

__all__ = [
    "VCS",
    "VCSInfo",
    "GitVCS",
    "HgVCS",
    "BzrVCS",
    "KIND_TO_VCS",
    "vcs_for_kind",
    "RepoRoot",
    "repo_root_for_import_path",
]
