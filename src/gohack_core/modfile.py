"""go.mod parsing, editing and formatting.

Only the parts of the go.mod grammar that gohack needs are interpreted
(`module` and `replace`); every other statement is carried through as
uninterpreted tokens so the file can be written back without loss.

Formatting is canonical: one blank line between top-level statements,
tab-indented block bodies and single spaces between tokens. Blank lines
inside a block are kept.
"""

from __future__ import annotations

import ast
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from . import semver
from .errors import ModFileError

MARKER_PREFIX = "// was "

# Matches a previous-state marker, for example:
#   // was example.com v1.2.3 => foo.com v1.3.4 // original comment
_MARKER_RE = re.compile(r"^// was ([^ ]+(?: [^ ]+)?) => ([^ ]+(?: [^ ]+)?)(?: (//.+))?$")

_LOCAL_PATH_RE = re.compile(r"^(\./|\.\./|/|\.\\|\.\.\\|[A-Za-z]:[\\/])")


@dataclass
class Comment:
    token: str


@dataclass
class Comments:
    before: List[Comment] = field(default_factory=list)
    suffix: List[Comment] = field(default_factory=list)
    after: List[Comment] = field(default_factory=list)


@dataclass(eq=False)
class Line:
    tokens: List[str]
    comments: Comments = field(default_factory=Comments)
    in_block: bool = False
    start: int = 0

    @property
    def deleted(self) -> bool:
        return not self.tokens


@dataclass(eq=False)
class LineBlock:
    tokens: List[str]
    lines: List[Line] = field(default_factory=list)
    comments: Comments = field(default_factory=Comments)
    lparen_suffix: List[Comment] = field(default_factory=list)
    rparen_before: List[Comment] = field(default_factory=list)


@dataclass(eq=False)
class CommentBlock:
    comments: Comments = field(default_factory=Comments)


Stmt = Union[Line, LineBlock, CommentBlock]


@dataclass
class ModuleVersion:
    path: str
    version: str = ""

    def __str__(self) -> str:
        return self.path if not self.version else f"{self.path} {self.version}"


@dataclass
class PreviousReplace:
    """What a replace directive looked like before gohack rewrote it."""

    old: ModuleVersion
    new: ModuleVersion
    comment: str = ""

    def marker(self) -> str:
        token = f"{MARKER_PREFIX}{self.old} => {self.new}"
        if self.comment:
            token += " " + self.comment
        return token


@dataclass(eq=False)
class Replace:
    old: ModuleVersion
    new: ModuleVersion
    syntax: Line
    previous: Optional[PreviousReplace] = None

    @property
    def is_directory(self) -> bool:
        """Report whether this replaces any version of a module with a directory."""
        return self.old.version == "" and self.new.version == ""


def is_local_path(path: str) -> bool:
    return _LOCAL_PATH_RE.match(path) is not None


def must_quote(s: str) -> bool:
    for ch in s:
        if not ch.isprintable() or ch in " \"'`":
            return True
    return s == "" or "//" in s or "/*" in s


def auto_quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False) if must_quote(s) else s


def unquote(token: str) -> str:
    if token.startswith("`"):
        return token[1:-1]
    if token.startswith('"'):
        try:
            value = ast.literal_eval(token)
        except (SyntaxError, ValueError) as exc:
            raise ValueError(f"invalid quoted string {token}") from exc
        if not isinstance(value, str):
            raise ValueError(f"invalid quoted string {token}")
        return value
    return token


def tokens_for_replace(old: ModuleVersion, new: ModuleVersion) -> List[str]:
    tokens = ["replace", auto_quote(old.path)]
    if old.version:
        tokens.append(old.version)
    tokens += ["=>", auto_quote(new.path)]
    if new.version:
        tokens.append(new.version)
    return tokens


def split_path_version(s: str) -> Optional[ModuleVersion]:
    fields = s.split()
    if len(fields) not in (1, 2):
        return None
    if len(fields) == 2:
        if not semver.is_valid(fields[1]):
            return None
        return ModuleVersion(fields[0], fields[1])
    return ModuleVersion(fields[0])


def parse_marker(token: str) -> Optional[PreviousReplace]:
    """Parse a previous-state marker comment, or return None if token is not one."""
    m = _MARKER_RE.match(token)
    if m is None:
        return None
    old = split_path_version(m.group(1))
    new = split_path_version(m.group(2))
    if old is None or new is None:
        return None
    return PreviousReplace(old=old, new=new, comment=m.group(3) or "")


def _scan_line(text: str, filename: str, lineno: int) -> tuple[List[str], Optional[str]]:
    tokens: list[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if text.startswith("//", i):
            return tokens, text[i:].rstrip()
        if ch in "()":
            tokens.append(ch)
            i += 1
            continue
        if ch == '"':
            j = i + 1
            while j < n and text[j] != '"':
                j += 2 if text[j] == "\\" else 1
            if j >= n:
                raise ModFileError(f"{filename}:{lineno}: unterminated quoted string")
            tokens.append(text[i : j + 1])
            i = j + 1
            continue
        if ch == "`":
            j = text.find("`", i + 1)
            if j < 0:
                raise ModFileError(f"{filename}:{lineno}: unterminated raw string")
            tokens.append(text[i : j + 1])
            i = j + 1
            continue
        j = i
        while j < n and not text[j].isspace() and text[j] not in '()"`' and not text.startswith("//", j):
            j += 1
        tokens.append(text[i:j])
        i = j
    return tokens, None


def _suffix(comment: Optional[str]) -> List[Comment]:
    return [Comment(comment)] if comment is not None else []


def _block_comment(c: Comment) -> str:
    token = c.token.strip()
    return "\t" + token if token else ""


class ModFile:
    """A parsed go.mod file."""

    def __init__(self, path: Path, stmts: List[Stmt]) -> None:
        self.path = Path(path)
        self.stmts = stmts
        self.module: Optional[str] = None
        self.replaces: List[Replace] = []
        self._interpret()

    @classmethod
    def parse(cls, path: Path | str, data: str) -> "ModFile":
        filename = str(path)
        stmts: list[Stmt] = []
        pending: list[Comment] = []
        block: Optional[LineBlock] = None

        for lineno, raw in enumerate(data.splitlines(), 1):
            tokens, comment = _scan_line(raw, filename, lineno)
            if not tokens:
                if comment is not None:
                    pending.append(Comment(comment))
                elif block is not None:
                    # A blank line in a block is kept as an empty comment; runs of blanks count once.
                    if (pending and pending[-1].token != "") or (not pending and block.lines):
                        pending.append(Comment(""))
                elif pending:
                    stmts.append(CommentBlock(Comments(before=pending)))
                    pending = []
                continue

            if block is not None:
                if tokens == [")"]:
                    block.rparen_before = pending
                    block.comments.suffix = _suffix(comment)
                    pending = []
                    stmts.append(block)
                    block = None
                    continue
                if "(" in tokens or ")" in tokens:
                    raise ModFileError(f"{filename}:{lineno}: unexpected parenthesis in block")
                block.lines.append(
                    Line(tokens, Comments(before=pending, suffix=_suffix(comment)), in_block=True, start=lineno)
                )
                pending = []
                continue

            if tokens[-1] == "(":
                verb = tokens[:-1]
                if not verb or "(" in verb or ")" in verb:
                    raise ModFileError(f"{filename}:{lineno}: syntax error: unexpected (")
                block = LineBlock(verb, comments=Comments(before=pending), lparen_suffix=_suffix(comment))
                pending = []
                continue
            if "(" in tokens or ")" in tokens:
                raise ModFileError(f"{filename}:{lineno}: syntax error: unexpected parenthesis")
            stmts.append(Line(tokens, Comments(before=pending, suffix=_suffix(comment)), start=lineno))
            pending = []

        if block is not None:
            raise ModFileError(f"{filename}: unterminated {block.tokens[0]} block")
        if pending:
            stmts.append(CommentBlock(Comments(before=pending)))
        return cls(Path(path), stmts)

    def _interpret(self) -> None:
        for stmt in self.stmts:
            if isinstance(stmt, Line):
                verb = stmt.tokens[0]
                if verb == "module":
                    if len(stmt.tokens) != 2:
                        raise ModFileError(f"{self.path}:{stmt.start}: usage: module module/path")
                    self.module = self._unquote(stmt.tokens[1], stmt)
                elif verb == "replace":
                    self.replaces.append(self._parse_replace(stmt, stmt.tokens[1:]))
            elif isinstance(stmt, LineBlock) and stmt.tokens == ["replace"]:
                for line in stmt.lines:
                    self.replaces.append(self._parse_replace(line, line.tokens))

    def _unquote(self, token: str, line: Line) -> str:
        try:
            return unquote(token)
        except ValueError as exc:
            raise ModFileError(f"{self.path}:{line.start}: {exc}") from exc

    def _parse_replace(self, line: Line, args: List[str]) -> Replace:
        usage = (
            f"{self.path}:{line.start}: usage: replace module/path [v1.2.3] => other/module v1.4\n"
            "\t or replace module/path [v1.2.3] => ../local/directory"
        )
        arrow = 1 if len(args) >= 2 and args[1] == "=>" else 2
        if len(args) < arrow + 2 or len(args) > arrow + 3 or args[arrow] != "=>":
            raise ModFileError(usage)
        old = ModuleVersion(self._unquote(args[0], line))
        if arrow == 2:
            if not semver.is_valid(args[1]):
                raise ModFileError(f"{self.path}:{line.start}: invalid version {args[1]!r}")
            old.version = args[1]
        new = ModuleVersion(self._unquote(args[arrow + 1], line))
        if len(args) == arrow + 2:
            if not is_local_path(new.path):
                raise ModFileError(
                    f"{self.path}:{line.start}: replacement module without version must be "
                    "directory path (rooted or starting with ./ or ../)"
                )
        else:
            if is_local_path(new.path):
                raise ModFileError(
                    f"{self.path}:{line.start}: replacement module directory path must not have version"
                )
            if not semver.is_valid(args[arrow + 2]):
                raise ModFileError(f"{self.path}:{line.start}: invalid version {args[arrow + 2]!r}")
            new.version = args[arrow + 2]

        previous = None
        suffix = line.comments.suffix
        if len(suffix) == 1:
            previous = parse_marker(suffix[0].token)
            if previous is not None:
                line.comments.suffix = []
        return Replace(old=old, new=new, syntax=line, previous=previous)

    def find_replaces(self, path: str) -> List[Replace]:
        return [r for r in self.replaces if r.old.path == path]

    def set_replace(self, r: Replace, old: ModuleVersion, new: ModuleVersion) -> None:
        """Point r at new, rewriting its syntax in place."""
        r.old = old
        r.new = new
        self._update_line(r.syntax, tokens_for_replace(old, new))

    def add_replace(self, old_path: str, old_version: str, new_path: str, new_version: str) -> Replace:
        old = ModuleVersion(old_path, old_version)
        new = ModuleVersion(new_path, new_version)
        tokens = tokens_for_replace(old, new)
        found: Optional[Replace] = None
        hint: Optional[Line] = None
        for r in list(self.replaces):
            if r.old.path == old_path and (old_version == "" or r.old.version == old_version):
                if found is None:
                    r.new = new
                    self._update_line(r.syntax, tokens)
                    found = r
                    continue
                self._remove_replace(r)
                continue
            if r.old.path == old_path:
                hint = r.syntax
        if found is not None:
            return found
        r = Replace(old=old, new=new, syntax=self._add_line(hint, tokens))
        self.replaces.append(r)
        return r

    def drop_replace(self, old_path: str, old_version: str = "") -> None:
        for r in list(self.replaces):
            if r.old.path == old_path and r.old.version == old_version:
                self._remove_replace(r)

    def _remove_replace(self, r: Replace) -> None:
        r.syntax.tokens = []
        self.replaces.remove(r)

    @staticmethod
    def _update_line(line: Line, tokens: List[str]) -> None:
        line.tokens = tokens[1:] if line.in_block else list(tokens)

    def _add_line(self, hint: Optional[Line], tokens: List[str]) -> Line:
        if hint is None:
            for stmt in reversed(self.stmts):
                if isinstance(stmt, Line) and stmt.tokens and stmt.tokens[0] == tokens[0]:
                    hint = stmt
                    break
                if isinstance(stmt, LineBlock) and stmt.tokens[0] == tokens[0]:
                    new = Line(tokens[1:], in_block=True)
                    stmt.lines.append(new)
                    return new

        if hint is not None:
            for i, stmt in enumerate(self.stmts):
                if isinstance(stmt, Line) and stmt is hint:
                    # Dropping the new line later must leave the file as it was.
                    new = Line(list(tokens))
                    self.stmts.insert(i + 1, new)
                    return new
                if isinstance(stmt, LineBlock):
                    for j, line in enumerate(stmt.lines):
                        if line is hint:
                            new = Line(tokens[1:], in_block=True)
                            stmt.lines.insert(j + 1, new)
                            return new

        new = Line(list(tokens))
        self.stmts.append(new)
        return new

    def cleanup(self) -> None:
        """Remove deleted lines, and blocks left with no lines."""
        kept: list[Stmt] = []
        for stmt in self.stmts:
            if isinstance(stmt, Line):
                if stmt.deleted:
                    continue
            elif isinstance(stmt, LineBlock):
                stmt.lines = [line for line in stmt.lines if not line.deleted]
                if not stmt.lines:
                    continue
            kept.append(stmt)
        self.stmts = kept

    def _line_suffix(self, line: Line) -> List[Comment]:
        for r in self.replaces:
            if r.syntax is line and r.previous is not None:
                return [Comment(r.previous.marker())]
        return line.comments.suffix

    @staticmethod
    def _with_suffix(text: str, suffix: List[Comment], indent: str) -> List[str]:
        if not suffix:
            return [text]
        out = [f"{text} {suffix[0].token.strip()}"]
        out += [f"{indent}{c.token.strip()}" for c in suffix[1:]]
        return out

    def format(self) -> str:
        self.cleanup()
        out: list[str] = []
        for i, stmt in enumerate(self.stmts):
            if i > 0:
                out.append("")
            out += [c.token.strip() for c in stmt.comments.before]
            if isinstance(stmt, Line):
                out += self._with_suffix(" ".join(stmt.tokens), self._line_suffix(stmt), "")
            elif isinstance(stmt, LineBlock):
                out += self._with_suffix(" ".join(stmt.tokens) + " (", stmt.lparen_suffix, "\t")
                for line in stmt.lines:
                    out += [_block_comment(c) for c in line.comments.before]
                    out += ["\t" + s for s in self._with_suffix(" ".join(line.tokens), self._line_suffix(line), "")]
                    out += [_block_comment(c) for c in line.comments.after]
                out += [_block_comment(c) for c in stmt.rparen_before]
                out += self._with_suffix(")", stmt.comments.suffix, "")
            out += [c.token.strip() for c in stmt.comments.after]
        if not out:
            return ""
        return "\n".join(out) + "\n"
