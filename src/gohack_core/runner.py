"""External command execution.

All external programs (go, git, hg, bzr) are run through `CommandRunner`.
Dry-run mode is honoured in `run_update` and `remove_tree` only.
"""

from __future__ import annotations

import logging
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, TextIO

from .errors import CommandError, CommandStartError
from .fsutil import remove_all

logger = logging.getLogger(__name__)


def shquote(s: str) -> str:
    """Quote s for a POSIX shell."""
    return "'" + s.replace("'", "'\"'\"'") + "'"


@dataclass
class RunContext:
    """State for one gohack invocation.

    Holds the accumulated exit status and the echo settings, so nothing
    about an invocation lives in module globals.
    """

    print_commands: bool = False
    dry_run: bool = False
    cwd: Path = field(default_factory=Path.cwd)
    stderr: Optional[TextIO] = None
    exit_code: int = 0
    _echo_dir: str = field(default="", repr=False)
    _echo_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def err(self) -> TextIO:
        return self.stderr if self.stderr is not None else sys.stderr

    def fail(self, message: str) -> int:
        """Report a per-item failure and mark the invocation as failed."""
        print(message, file=self.err)
        self.exit_code = 1
        return self.exit_code

    def echo_command(self, directory: Path | str | None, name: str, args: Sequence[str]) -> None:
        dir_str = "" if directory is None else str(directory)
        with self._echo_lock:
            if dir_str != self._echo_dir:
                print(f"cd {shquote(dir_str)}", file=self.err)
                self._echo_dir = dir_str
            print(" ".join([name, *(shquote(a) for a in args)]), file=self.err)


class CommandRunner:
    """Runs programs and captures their output."""

    def __init__(self, ctx: RunContext) -> None:
        self.ctx = ctx

    def run(self, directory: Path | str | None, name: str, *args: str) -> str:
        if self.ctx.print_commands:
            self.ctx.echo_command(directory, name, args)
        argv = [name, *args]
        logger.debug(f"running {argv} in {directory or '.'}")
        try:
            proc = subprocess.run(
                argv,
                cwd=str(directory) if directory else None,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise CommandStartError(f"cannot run {argv}: {exc}", argv) from exc
        if proc.returncode == 0:
            return proc.stdout
        stderr = proc.stderr.strip()
        if stderr:
            raise CommandError(stderr, argv)
        raise CommandError(f"{argv}: exit status {proc.returncode}", argv)

    def run_update(self, directory: Path | str | None, name: str, *args: str) -> str:
        """Run a command that changes a working copy; only echoed in dry-run mode."""
        if self.ctx.dry_run:
            self.ctx.echo_command(directory, name, args)
            return ""
        return self.run(directory, name, *args)

    def remove_tree(self, directory: Path | str) -> None:
        """Delete a checkout directory; only echoed in dry-run mode."""
        if self.ctx.dry_run or self.ctx.print_commands:
            self.ctx.echo_command(None, "rm", ["-rf", str(directory)])
        if self.ctx.dry_run:
            return
        logger.debug(f"removing {directory}")
        remove_all(Path(directory))
