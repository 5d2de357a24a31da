from pathlib import Path

import pytest

from gohack_core.errors import ModFileError
from gohack_core.modfile import ModFile, ModuleVersion, PreviousReplace, auto_quote, is_local_path, parse_marker

GO_MOD = """\
// The main module.
module example.com/main

require (
\texample.com/a v1.0.0
\texample.com/b v1.2.0 // indirect
)

replace example.com/c v1.0.0 => example.com/c-fork v1.0.1 // keep
"""


def _parse(data: str) -> ModFile:
    return ModFile.parse(Path("go.mod"), data)


class TestParse:
    def test_module_and_replaces(self) -> None:
        f = _parse(GO_MOD)
        assert f.module == "example.com/main"
        assert len(f.replaces) == 1
        r = f.replaces[0]
        assert r.old == ModuleVersion("example.com/c", "v1.0.0")
        assert r.new == ModuleVersion("example.com/c-fork", "v1.0.1")
        assert r.previous is None
        assert not r.is_directory

    def test_format_round_trips_canonical_file(self) -> None:
        assert _parse(GO_MOD).format() == GO_MOD

    def test_replace_block(self) -> None:
        f = _parse("module m\n\nreplace (\n\ta => ./a\n\tb v1.0.0 => c v1.1.0\n)\n")
        assert [r.old.path for r in f.replaces] == ["a", "b"]
        assert f.replaces[0].is_directory
        assert f.replaces[0].syntax.in_block

    def test_quoted_paths(self) -> None:
        f = _parse('module "example.com/m"\n\nreplace `x` => "./with space"\n')
        assert f.module == "example.com/m"
        assert f.replaces[0].old.path == "x"
        assert f.replaces[0].new.path == "./with space"

    @pytest.mark.parametrize(
        "line",
        [
            "replace a => b",  # module target without version
            "replace a => ./b v1.0.0",  # directory target with version
            "replace a notaversion => b v1.0.0",
            "replace a",
        ],
    )
    def test_invalid_replace(self, line: str) -> None:
        with pytest.raises(ModFileError):
            _parse(f"module m\n\n{line}\n")

    def test_unterminated_block(self) -> None:
        with pytest.raises(ModFileError, match="unterminated"):
            _parse("module m\n\nrequire (\n\ta v1.0.0\n")

    def test_marker_becomes_previous(self) -> None:
        f = _parse("module m\n\nreplace a => /tmp/a // was a v1.0.0 => b v1.1.0 // note\n")
        r = f.replaces[0]
        assert r.previous == PreviousReplace(ModuleVersion("a", "v1.0.0"), ModuleVersion("b", "v1.1.0"), "// note")
        assert r.syntax.comments.suffix == []
        assert f.format().endswith("replace a => /tmp/a // was a v1.0.0 => b v1.1.0 // note\n")


class TestMarker:
    def test_parse_marker(self) -> None:
        prev = parse_marker("// was example.com v1.2.3 => foo.com v1.3.4 // original comment")
        assert prev is not None
        assert str(prev.old) == "example.com v1.2.3"
        assert str(prev.new) == "foo.com v1.3.4"
        assert prev.comment == "// original comment"

    def test_parse_marker_without_versions(self) -> None:
        prev = parse_marker("// was a => ../b")
        assert prev == PreviousReplace(ModuleVersion("a"), ModuleVersion("../b"))

    @pytest.mark.parametrize("token", ["// plain comment", "// was a v1 x => b", "// was a notsemver => b"])
    def test_not_a_marker(self, token: str) -> None:
        assert parse_marker(token) is None

    def test_marker_text(self) -> None:
        prev = PreviousReplace(ModuleVersion("a", "v1.0.0"), ModuleVersion("b", "v2.0.0"), "// hi")
        assert prev.marker() == "// was a v1.0.0 => b v2.0.0 // hi"


class TestEdit:
    def test_add_replace_appends_statement(self) -> None:
        f = _parse("module m\n")
        f.add_replace("example.com/a", "", "/home/me/gohack/example.com/a", "")
        assert f.format() == "module m\n\nreplace example.com/a => /home/me/gohack/example.com/a\n"

    def test_add_then_drop_round_trips(self) -> None:
        f = _parse(GO_MOD)
        f.add_replace("example.com/a", "", "/tmp/a", "")
        f.format()
        f.drop_replace("example.com/a", "")
        assert f.format() == GO_MOD

    def test_add_next_to_standalone_replace(self) -> None:
        data = "module m\n\n// forks\nreplace a v1.0.0 => b v1.0.1\n\nrequire a v1.0.0\n"
        f = _parse(data)
        f.add_replace("c", "", "/tmp/c", "")
        hacked = f.format()
        assert hacked == (
            "module m\n\n// forks\nreplace a v1.0.0 => b v1.0.1\n\nreplace c => /tmp/c\n\nrequire a v1.0.0\n"
        )
        f = _parse(hacked)
        f.drop_replace("c")
        assert f.format() == data

    def test_drop_keeps_block_with_one_line_left(self) -> None:
        f = _parse("module m\n\nreplace (\n\ta => ./a\n\tb => ./b\n)\n")
        f.drop_replace("b")
        assert f.format() == "module m\n\nreplace (\n\ta => ./a\n)\n"

    def test_drop_last_line_removes_block(self) -> None:
        f = _parse("module m\n\nreplace (\n\ta => ./a\n)\n")
        f.drop_replace("a")
        assert f.format() == "module m\n"

    def test_blank_lines_in_block_are_kept(self) -> None:
        data = "module m\n\nrequire (\n\ta v1.0.0\n\n\t// tools\n\tb v1.0.0\n\n\tc v1.0.0\n)\n"
        assert _parse(data).format() == data

    def test_blank_line_runs_in_block_collapse(self) -> None:
        f = _parse("module m\n\nrequire (\n\n\ta v1.0.0\n\n\n\tb v1.0.0\n)\n")
        assert f.format() == "module m\n\nrequire (\n\ta v1.0.0\n\n\tb v1.0.0\n)\n"

    def test_add_to_existing_block(self) -> None:
        data = "module m\n\nreplace (\n\ta => ./a\n\tb => ./b\n)\n"
        f = _parse(data)
        f.add_replace("c", "", "./c", "")
        assert f.format() == "module m\n\nreplace (\n\ta => ./a\n\tb => ./b\n\tc => ./c\n)\n"

    def test_untouched_single_line_block_is_kept(self) -> None:
        data = "module m\n\nreplace (\n\ta => ./a\n)\n"
        assert _parse(data).format() == data

    def test_add_replace_updates_matching_directive(self) -> None:
        f = _parse("module m\n\nreplace a => ./old\n")
        f.add_replace("a", "", "./new", "")
        assert len(f.replaces) == 1
        assert f.format() == "module m\n\nreplace a => ./new\n"

    def test_set_replace_in_block(self) -> None:
        f = _parse("module m\n\nreplace (\n\ta v1.0.0 => b v1.0.1\n\tc => ./c\n)\n")
        f.set_replace(f.replaces[0], ModuleVersion("a"), ModuleVersion("/tmp/a"))
        assert f.format() == "module m\n\nreplace (\n\ta => /tmp/a\n\tc => ./c\n)\n"

    def test_comments_preserved(self) -> None:
        data = "// head\nmodule m // trailing\n\n// lone comment\n\nrequire a v1.0.0\n"
        assert _parse(data).format() == data


def test_local_paths_and_quoting() -> None:
    assert is_local_path("./x")
    assert is_local_path("../x")
    assert is_local_path("/abs/x")
    assert is_local_path("C:\\x")
    assert not is_local_path("example.com/x")
    assert auto_quote("example.com/x") == "example.com/x"
    assert auto_quote("with space") == '"with space"'
