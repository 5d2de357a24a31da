"""Exception hierarchy shared by the gohack packages."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class HackError(Exception):
    """Base class for all gohack errors."""


class ConfigError(HackError):
    """Raised when the gohack configuration cannot be loaded."""


class CommandError(HackError):
    """An external program exited with a non-zero status."""

    def __init__(self, message: str, argv: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.argv = list(argv or [])


class CommandStartError(CommandError):
    """An external program could not be started at all."""


class VCSError(HackError):
    """A VCS backend operation failed."""

    def __init__(self, operation: str, directory: Path | str, message: str) -> None:
        super().__init__(f"{operation} in {directory}: {message}")
        self.operation = operation
        self.directory = Path(directory)
        self.message = message


class NotCleanError(HackError):
    def __init__(self, directory: Path | str) -> None:
        super().__init__(f'"{directory}" is not clean; not overwriting')
        self.directory = Path(directory)


class NotOverwritingError(HackError):
    def __init__(self, directory: Path | str) -> None:
        super().__init__(f'"{directory}" already exists; not overwriting')
        self.directory = Path(directory)


class AlreadyReplacedError(HackError):
    def __init__(self, module_path: str, target: str) -> None:
        super().__init__(f"{module_path} is already replaced by {target}")
        self.module_path = module_path
        self.target = target


class AlreadyHackingError(HackError):
    def __init__(self, module_path: str, directory: str) -> None:
        super().__init__(
            f'"{module_path}" is already replaced by "{directory}" - are you already gohacking it?'
        )
        self.module_path = module_path
        self.directory = directory


class AmbiguousReplaceError(HackError):
    def __init__(self, module_path: str) -> None:
        super().__init__(f'found multiple existing replacements for "{module_path}"')
        self.module_path = module_path


class ModuleNotInUseError(HackError):
    def __init__(self, module_path: str) -> None:
        super().__init__(f'module "{module_path}" does not appear to be in use')
        self.module_path = module_path


class NotReplacedError(HackError):
    def __init__(self, module_path: str) -> None:
        super().__init__(f"{module_path} not currently replaced; cannot drop")
        self.module_path = module_path


class ModFileError(HackError):
    """go.mod parse, format or I/O failure."""


class MalformedVersionError(HackError):
    pass


class RepoRootError(HackError):
    """The repository root for an import path could not be determined."""
