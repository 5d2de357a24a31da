"""Semantic version syntax as used by Go modules.

Versions must start with "v". "v1" and "v1.2" are accepted as shorthands for
"v1.0.0" and "v1.2.0", but shorthands cannot carry prerelease or build suffixes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_NUM = r"(0|[1-9][0-9]*)"
_IDENTS = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"

_SEMVER_RE = re.compile(
    rf"^v{_NUM}"
    rf"(?:\.{_NUM}"
    rf"(?:\.{_NUM}(?:-({_IDENTS}))?(?:\+({_IDENTS}))?)?"
    r")?$"
)


@dataclass(frozen=True)
class Parsed:
    major: str
    minor: str
    patch: str
    prerelease: str = ""
    build: str = ""
    short: str = ""


def parse(v: str) -> Optional[Parsed]:
    m = _SEMVER_RE.match(v)
    if m is None:
        return None
    major, minor, patch, pre, build = m.groups()
    if pre is not None:
        for ident in pre.split("."):
            if ident.isdigit() and len(ident) > 1 and ident[0] == "0":
                return None
    short = ""
    if minor is None:
        short = ".0.0"
    elif patch is None:
        short = ".0"
    return Parsed(
        major=major,
        minor=minor or "0",
        patch=patch or "0",
        prerelease=f"-{pre}" if pre else "",
        build=f"+{build}" if build else "",
        short=short,
    )


def is_valid(v: str) -> bool:
    return parse(v) is not None


def build(v: str) -> str:
    """Return the build suffix of v including the "+", or "" if there is none."""
    p = parse(v)
    return p.build if p else ""


def prerelease(v: str) -> str:
    p = parse(v)
    return p.prerelease if p else ""


def canonical(v: str) -> str:
    """Return the canonical form of v: shorthands expanded, build suffix dropped."""
    p = parse(v)
    if p is None:
        return ""
    return f"v{p.major}.{p.minor}.{p.patch}{p.prerelease}"
