"""checkout.py - Bring a hack directory in line with a dependency version.

Two modes are supported:
- copy mode copies the module source from the module cache and records a
  content fingerprint next to it, so later edits can be detected;
- VCS mode clones the module's repository and updates it to the
  revision the main module requires.

Neither mode overwrites local changes unless forced.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional

from gohack_core import dirhash
from gohack_core.errors import HackError, NotCleanError, NotOverwritingError, VCSError
from gohack_core.fsutil import copy_all, is_empty_dir, remove_all
from gohack_core.gotool import ListModule
from gohack_core.runner import CommandRunner
from gohack_core.versions import is_pseudo_version, pseudo_version_rev
from gohack_core.vcs import VCS, RepoRoot, repo_root_for_import_path, vcs_for_kind

logger = logging.getLogger(__name__)

AUTO_GO_MOD_HEADER = "// Generated by gohack; DO NOT EDIT.\n"

_VCS_MARKERS = {".git": "git", ".hg": "hg", ".bzr": "bzr"}


@dataclass
class ModReplace:
    """A module and the directory that should replace it."""
    module_path: str
    dir: Path


@dataclass
class SyncResult:
    replace: ModReplace
    version: str
    action: str  # copied, unchanged, updated, created, fetched


@dataclass
class VCSCheckout:
    module_path: str
    root: RepoRoot
    vcs: VCS
    dir: Path
    already_exists: bool
    clean: bool = True
    revid: str = ""


def module_dir(root: Path, module_path: str) -> Path:
    """Return the hack directory for module_path under the checkout root."""
    return Path(root).joinpath(*module_path.split("/"))


def auto_go_mod(module_path: str) -> str:
    return f"{AUTO_GO_MOD_HEADER}module {module_path}\n"


def is_auto_go_mod(path: Path, module_path: str) -> bool:
    """Report whether the file at path looks like a go.mod file we generated."""
    try:
        data = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return False
    return data == auto_go_mod(module_path)


def ensure_go_mod_file(module_path: str, dir: Path) -> bool:
    """Write a go.mod file into dir unless one exists. Reports whether it wrote one.

    Without a go.mod file the directory cannot be used as a module replacement.
    """
    go_mod = Path(dir) / "go.mod"
    if go_mod.exists() or not Path(dir).is_dir():
        return False
    go_mod.write_text(auto_go_mod(module_path), encoding="utf-8")
    return True


def remove_auto_go_mod(dir: Path, module_path: str) -> bool:
    go_mod = Path(dir) / "go.mod"
    if not is_auto_go_mod(go_mod, module_path):
        return False
    go_mod.unlink()
    return True


@contextmanager
def auto_go_mod_removed(dir: Path, module_path: str) -> Iterator[bool]:
    """Hide a generated go.mod file while the directory is inspected or updated."""
    removed = remove_auto_go_mod(dir, module_path)
    try:
        yield removed
    finally:
        if removed:
            ensure_go_mod_file(module_path, dir)


def update_target(version: str) -> tuple[bool, str]:
    """Return (is_tag, name) to pass to VCS.update for a module version."""
    if is_pseudo_version(version):
        return False, pseudo_version_rev(version)
    # Tags for pre-module major versions are recorded as vX.Y.Z+incompatible.
    return True, version.split("+", 1)[0]


def check_clean_without_vcs(dir: Path) -> str:
    """Return the stored fingerprint of dir if its contents still match it."""
    try:
        want = dirhash.read_hash_file(dir)
    except FileNotFoundError:
        raise NotOverwritingError(dir) from None
    got = dirhash.hash_dir(dir)
    if got != want:
        raise NotCleanError(dir)
    return want


class CheckoutSynchronizer:
    """Creates and updates hack directories for modules."""

    def __init__(
        self,
        runner: CommandRunner,
        root: Path,
        force: bool = False,
        resolve_repo_root: Callable[[str], RepoRoot] = repo_root_for_import_path,
    ) -> None:
        self.runner = runner
        self.root = Path(root)
        self.force = force
        self.resolve_repo_root = resolve_repo_root

    def module_dir(self, module_path: str) -> Path:
        return module_dir(self.root, module_path)

    def sync(self, m: ListModule, use_vcs: bool) -> SyncResult:
        return self.sync_vcs(m) if use_vcs else self.sync_copy(m)

    def sync_copy(self, m: ListModule) -> SyncResult:
        if not m.dir:
            raise HackError("no local source code found")
        src_hash = dirhash.hash_dir(m.dir)
        dest = self.module_dir(m.path)
        repl = ModReplace(m.path, dest)

        if not dest.exists():
            dest.parent.mkdir(parents=True, exist_ok=True)
            copy_all(dest, Path(m.dir))
            action = "copied"
        else:
            if not self.force and not is_empty_dir(dest):
                with auto_go_mod_removed(dest, m.path):
                    dest_hash = check_clean_without_vcs(dest)
                if dest_hash == src_hash:
                    logger.debug(f"{dest} is already up to date")
                    return SyncResult(repl, m.version, "unchanged")
            # Empty, clean or forced: replace it wholesale.
            remove_all(dest)
            copy_all(dest, Path(m.dir))
            action = "updated"

        dirhash.write_hash_file(dest, src_hash)
        return SyncResult(repl, m.version, action)

    def checkout_info(self, module_path: str) -> VCSCheckout:
        root = self.resolve_repo_root(module_path)
        vcs = vcs_for_kind(root.vcs, self.runner)
        dir = self.module_dir(module_path)
        checkout = VCSCheckout(module_path, root, vcs, dir, already_exists=dir.exists())
        if checkout.already_exists:
            with auto_go_mod_removed(dir, module_path):
                info = vcs.info(dir)
            checkout.clean = info.clean
            checkout.revid = info.revid
        return checkout

    def sync_vcs(self, m: ListModule) -> SyncResult:
        checkout = self.checkout_info(m.path)
        vcs, dir = checkout.vcs, checkout.dir
        is_tag, target = update_target(m.version)
        repl = ModReplace(m.path, dir)

        if not checkout.already_exists:
            logger.info(f"creating {m.path}@{m.version}")
            # Some version control tools require the parent of the target to exist.
            dir.parent.mkdir(parents=True, exist_ok=True)
            vcs.create(checkout.root.repo, dir)
            vcs.update(dir, is_tag, target)
            return SyncResult(repl, m.version, "created")

        with auto_go_mod_removed(dir, m.path):
            if not checkout.clean:
                if not self.force:
                    raise NotCleanError(dir)
                vcs.clean(dir)
            try:
                vcs.update(dir, is_tag, target)
                return SyncResult(repl, m.version, "updated")
            except VCSError as exc:
                logger.debug(f"update of {dir} failed ({exc}); fetching")
            logger.info(f"fetching {m.path}@{m.version}")
            vcs.fetch(dir)
            vcs.update(dir, is_tag, target)
        return SyncResult(repl, m.version, "fetched")


def detect_vcs_kind(dir: Path) -> Optional[str]:
    for marker, kind in _VCS_MARKERS.items():
        if (Path(dir) / marker).exists():
            return kind
    return None


def is_checkout_clean(runner: CommandRunner, dir: Path, module_path: str) -> bool:
    """Report whether a hack directory has no local changes.

    Copy-mode directories are checked against their fingerprint, VCS-mode
    ones by asking the VCS. A directory that is neither is not ours and is
    never considered clean.
    """
    with auto_go_mod_removed(dir, module_path):
        if (Path(dir) / dirhash.HASH_FILE).exists():
            try:
                check_clean_without_vcs(dir)
            except NotCleanError:
                return False
            return True
        kind = detect_vcs_kind(dir)
        if kind is None:
            return False
        return vcs_for_kind(kind, runner).info(dir).clean
