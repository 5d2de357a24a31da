import io
import subprocess
from pathlib import Path

import pytest

from gohack_core import runner as runner_mod
from gohack_core.errors import CommandError, CommandStartError
from gohack_core.runner import CommandRunner, RunContext, shquote


def test_shquote() -> None:
    assert shquote("abc") == "'abc'"
    assert shquote("") == "''"
    assert shquote("it's") == "'it'\"'\"'s'"


def test_echo_tracks_directory() -> None:
    err = io.StringIO()
    ctx = RunContext(cwd=Path("."), stderr=err)
    ctx.echo_command("/a", "git", ["status"])
    ctx.echo_command("/a", "git", ["log", "-n", "1"])
    ctx.echo_command("/b", "hg", ["pull"])
    assert err.getvalue() == (
        "cd '/a'\n"
        "git 'status'\n"
        "git 'log' '-n' '1'\n"
        "cd '/b'\n"
        "hg 'pull'\n"
    )


def test_fail_sets_exit_code() -> None:
    err = io.StringIO()
    ctx = RunContext(cwd=Path("."), stderr=err)
    assert ctx.exit_code == 0
    ctx.fail("cannot hack x")
    assert ctx.exit_code == 1
    assert err.getvalue() == "cannot hack x\n"


def _fake_subprocess(monkeypatch, returncode=0, stdout="", stderr="", exc=None):
    calls = []

    def fake_run(argv, cwd=None, **kwargs):
        calls.append((argv, cwd))
        if exc is not None:
            raise exc
        return subprocess.CompletedProcess(argv, returncode, stdout, stderr)

    monkeypatch.setattr(runner_mod.subprocess, "run", fake_run)
    return calls


class TestCommandRunner:
    def test_returns_stdout(self, monkeypatch) -> None:
        calls = _fake_subprocess(monkeypatch, stdout="/work/go.mod\n")
        out = CommandRunner(RunContext(cwd=Path("."))).run("/work", "go", "env", "GOMOD")
        assert out == "/work/go.mod\n"
        assert calls == [(["go", "env", "GOMOD"], "/work")]

    def test_error_output_becomes_message(self, monkeypatch) -> None:
        _fake_subprocess(monkeypatch, returncode=1, stderr="fatal: not a git repository\n")
        with pytest.raises(CommandError) as excinfo:
            CommandRunner(RunContext(cwd=Path("."))).run("/work", "git", "status")
        assert str(excinfo.value) == "fatal: not a git repository"
        assert not isinstance(excinfo.value, CommandStartError)
        assert excinfo.value.argv == ["git", "status"]

    def test_silent_failure_reports_exit_status(self, monkeypatch) -> None:
        _fake_subprocess(monkeypatch, returncode=2)
        with pytest.raises(CommandError) as excinfo:
            CommandRunner(RunContext(cwd=Path("."))).run(None, "go", "version")
        assert str(excinfo.value) == "['go', 'version']: exit status 2"
        assert not isinstance(excinfo.value, CommandStartError)

    def test_missing_program(self, monkeypatch) -> None:
        _fake_subprocess(monkeypatch, exc=FileNotFoundError(2, "No such file or directory"))
        with pytest.raises(CommandStartError, match=r"cannot run \['bzr', 'pull'\]"):
            CommandRunner(RunContext(cwd=Path("."))).run("/work", "bzr", "pull")

    def test_print_commands(self, monkeypatch) -> None:
        _fake_subprocess(monkeypatch)
        err = io.StringIO()
        CommandRunner(RunContext(print_commands=True, cwd=Path("."), stderr=err)).run("/work", "git", "fetch")
        assert err.getvalue() == "cd '/work'\ngit 'fetch'\n"

    def test_dry_run_update_does_not_run(self, monkeypatch) -> None:
        calls = _fake_subprocess(monkeypatch)
        err = io.StringIO()
        out = CommandRunner(RunContext(dry_run=True, cwd=Path("."), stderr=err)).run_update("/work", "git", "checkout", "v1.0.0")
        assert out == ""
        assert calls == []
        assert err.getvalue() == "cd '/work'\ngit 'checkout' 'v1.0.0'\n"

    def test_remove_tree(self, tmp_path) -> None:
        target = tmp_path / "hack"
        (target / "sub").mkdir(parents=True)
        (target / "sub" / "f.go").write_text("package sub\n", encoding="utf-8")

        err = io.StringIO()
        CommandRunner(RunContext(dry_run=True, cwd=tmp_path, stderr=err)).remove_tree(target)
        assert target.exists()
        assert err.getvalue() == f"rm '-rf' '{target}'\n"

        CommandRunner(RunContext(cwd=tmp_path)).remove_tree(target)
        assert not target.exists()
