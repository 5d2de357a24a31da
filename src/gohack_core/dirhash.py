"""Content fingerprints of directory trees.

The fingerprint uses the Go module "h1:" scheme: a SHA-256 over sorted
"<sha256-hex>  <relative/path>\n" lines, base64 encoded. File modes and
timestamps play no part, so a copy of a tree hashes the same as its source.
"""

from __future__ import annotations

import base64
import hashlib
import os
from pathlib import Path
from typing import Callable, Iterable, List, BinaryIO

HASH_FILE = ".gohack-modhash"

_CHUNK = 1 << 16


def dir_files(directory: Path, exclude: str | None = HASH_FILE) -> List[str]:
    """List regular files under directory as slash-separated relative paths.

    A top-level file named `exclude` is left out.
    """
    files: list[str] = []
    for root, dirnames, filenames in os.walk(directory, onerror=_raise):
        dirnames.sort()
        for name in filenames:
            full = Path(root) / name
            if not full.is_file():
                continue
            rel = full.relative_to(directory).as_posix()
            if rel == exclude:
                continue
            files.append(rel)
    return files


def _raise(err: OSError) -> None:
    raise err


def _sha256_stream(f: BinaryIO) -> str:
    h = hashlib.sha256()
    for chunk in iter(lambda: f.read(_CHUNK), b""):
        h.update(chunk)
    return h.hexdigest()


def hash1(files: Iterable[str], open_file: Callable[[str], BinaryIO]) -> str:
    summary = hashlib.sha256()
    for name in sorted(files):
        if "\n" in name:
            raise ValueError(f"filenames with newlines are not supported: {name!r}")
        with open_file(name) as f:
            digest = _sha256_stream(f)
        summary.update(f"{digest}  {name}\n".encode("utf-8"))
    return "h1:" + base64.b64encode(summary.digest()).decode("ascii")


def hash_dir(directory: Path | str, exclude: str | None = HASH_FILE) -> str:
    """Return the fingerprint of every regular file under directory.

    Any read error propagates; there is no partial result.
    """
    directory = Path(directory)
    files = dir_files(directory, exclude)
    return hash1(files, lambda name: open(directory / name, "rb"))


def read_hash_file(directory: Path | str) -> str:
    """Return the stored fingerprint; FileNotFoundError if there is none."""
    return (Path(directory) / HASH_FILE).read_text(encoding="utf-8").strip()


def write_hash_file(directory: Path | str, value: str) -> None:
    (Path(directory) / HASH_FILE).write_text(value, encoding="utf-8")
