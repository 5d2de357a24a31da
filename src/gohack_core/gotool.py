"""Queries against the go command and go.mod file I/O."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import HackError, ModFileError
from .modfile import ModFile
from .runner import CommandRunner

logger = logging.getLogger(__name__)


class ListModuleError(BaseModel):
    err: str = Field(alias="Err")


class ListModule(BaseModel):
    """A module as printed by `go list -m -json`."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    path: str = Field(alias="Path")
    version: str = Field(default="", alias="Version")
    replace: Optional["ListModule"] = Field(default=None, alias="Replace")
    main: bool = Field(default=False, alias="Main")
    indirect: bool = Field(default=False, alias="Indirect")
    dir: str = Field(default="", alias="Dir")
    go_mod: str = Field(default="", alias="GoMod")
    error: Optional[ListModuleError] = Field(default=None, alias="Error")


ListModule.model_rebuild()


def decode_modules(out: str) -> Dict[str, ListModule]:
    """Decode a stream of concatenated JSON objects into modules keyed by path."""
    decoder = json.JSONDecoder()
    mods: dict[str, ListModule] = {}
    idx = 0
    while True:
        while idx < len(out) and out[idx].isspace():
            idx += 1
        if idx >= len(out):
            break
        try:
            obj, idx = decoder.raw_decode(out, idx)
            m = ListModule.model_validate(obj)
        except (json.JSONDecodeError, ValidationError) as exc:
            raise HackError(f"cannot decode go list output: {exc}") from exc
        if m.path in mods:
            raise HackError(f"duplicate module {m.path!r} in go list output")
        mods[m.path] = m
    return mods


def list_modules(runner: CommandRunner, cwd: Path | str, *patterns: str) -> Dict[str, ListModule]:
    """Return information on the given modules as used by the main module."""
    out = runner.run(cwd, "go", "list", "-m", "-json", *patterns)
    return decode_modules(out)


def find_go_mod(runner: CommandRunner, cwd: Path | str) -> Path:
    out = runner.run(cwd, "go", "env", "GOMOD").strip()
    if not out or out == "/dev/null" or out == "NUL":
        raise HackError("no go.mod file found in any parent directory")
    return Path(out)


def read_mod_file(path: Path | str) -> ModFile:
    path = Path(path)
    try:
        data = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ModFileError(f"cannot read main go.mod file: {exc}") from exc
    return ModFile.parse(path, data)


def main_mod_file(runner: CommandRunner, cwd: Path | str) -> ModFile:
    """Find and parse the main module's go.mod file."""
    return read_mod_file(find_go_mod(runner, cwd))


def write_mod_file(modf: ModFile) -> None:
    """Format modf and replace the file on disk.

    Formatting happens before the file is opened, so a formatting failure
    leaves the original untouched.
    """
    data = modf.format()
    try:
        modf.path.write_text(data, encoding="utf-8")
    except OSError as exc:
        raise ModFileError(f"cannot write {modf.path}: {exc}") from exc
    logger.debug(f"wrote {modf.path}")
