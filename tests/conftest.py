import io
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest
from hypothesis import settings

from gohack_core.errors import CommandStartError
from gohack_core.runner import CommandRunner, RunContext

# Prevent Hypothesis from writing a local example database (e.g. `.hypothesis/`) during tests.
settings.register_profile("gohack-tests", database=None)
settings.load_profile("gohack-tests")

Response = Union[str, Exception, Callable[[Optional[Path]], str]]


class FakeRunner(CommandRunner):
    """Answers commands from a table keyed on argv instead of running them."""

    def __init__(self, ctx: Optional[RunContext] = None, responses: Optional[Dict[Tuple[str, ...], Response]] = None):
        super().__init__(ctx or RunContext(cwd=Path("."), stderr=io.StringIO()))
        self.responses: Dict[Tuple[str, ...], Response] = dict(responses or {})
        self.calls: List[Tuple[Optional[Path], Tuple[str, ...]]] = []

    def on(self, *argv: str, out: Response = "") -> "FakeRunner":
        self.responses[tuple(argv)] = out
        return self

    def argvs(self) -> List[Tuple[str, ...]]:
        return [argv for _, argv in self.calls]

    def run(self, directory, name, *args):
        if self.ctx.print_commands:
            self.ctx.echo_command(directory, name, args)
        argv = (name, *args)
        self.calls.append((Path(directory) if directory else None, argv))
        try:
            resp = self.responses[argv]
        except KeyError:
            raise CommandStartError(f"cannot run {list(argv)}: unexpected command", list(argv)) from None
        if isinstance(resp, Exception):
            raise resp
        if callable(resp):
            return resp(Path(directory) if directory else None)
        return resp


def go_list_output(*modules: Dict[str, Any]) -> str:
    """Render modules the way `go list -m -json` prints them."""
    return "".join(json.dumps(m, indent="\t") + "\n" for m in modules)


@pytest.fixture
def run_ctx(tmp_path: Path) -> RunContext:
    return RunContext(cwd=tmp_path, stderr=io.StringIO())


@pytest.fixture
def fake_runner(run_ctx: RunContext) -> FakeRunner:
    return FakeRunner(run_ctx)
