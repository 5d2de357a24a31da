"""Filesystem helpers for checkout directories."""

from __future__ import annotations

import os
import shutil
import stat
import sys
from pathlib import Path

from .errors import HackError


def is_empty_dir(directory: Path) -> bool:
    with os.scandir(directory) as it:
        return next(it, None) is None


def copy_all(dst: Path, src: Path) -> None:
    """Recursively copy src to dst, which must not exist.

    File contents are copied but not permissions, so a copy of a read-only
    module cache directory is writable. Symbolic links are refused.
    """
    dst, src = Path(dst), Path(src)
    if dst.exists() or dst.is_symlink():
        raise HackError(f'will not overwrite "{dst}"')
    if src.is_symlink():
        raise HackError(f'will not copy symbolic link "{src}"')
    if src.is_dir():
        dst.mkdir()
        for entry in sorted(os.listdir(src)):
            copy_all(dst / entry, src / entry)
    elif src.is_file():
        shutil.copyfile(src, dst)
    else:
        raise HackError(f'cannot copy "{src}": not a regular file or directory')


def _make_writable(func, path, _exc_info):
    os.chmod(path, stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC)
    func(path)


def remove_all(directory: Path) -> None:
    if not directory.exists():
        return
    if sys.version_info >= (3, 12):
        shutil.rmtree(directory, onexc=_make_writable)
    else:
        shutil.rmtree(directory, onerror=_make_writable)
