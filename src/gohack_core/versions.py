"""Pseudo-version recognition.

A pseudo-version names an untagged revision, for example
v0.0.0-20190312203944-abcdef012345. Three shapes exist:

    vX.0.0-yyyymmddhhmmss-abcdefabcdef      no earlier tag
    vX.Y.Z-pre.0.yyyymmddhhmmss-abcdef...   after a prerelease tag
    vX.Y.(Z+1)-0.yyyymmddhhmmss-abcdef...   after a release tag
"""

from __future__ import annotations

import re

from . import semver
from .errors import MalformedVersionError

_PSEUDO_RE = re.compile(
    r"^v[0-9]+\.(0\.0-|[0-9]+\.[0-9]+-([^+]*\.)?0\.)[0-9]{14}-[A-Za-z0-9]+"
    r"(\+[0-9A-Za-z-]+(\.[0-9A-Za-z-]+)*)?$"
)


def is_pseudo_version(v: str) -> bool:
    return v.count("-") >= 2 and semver.is_valid(v) and _PSEUDO_RE.match(v) is not None


def _split(v: str) -> tuple[str, str, str, str]:
    if not is_pseudo_version(v):
        raise MalformedVersionError(f"malformed pseudo-version {v!r}")
    build = semver.build(v)
    v = v[: len(v) - len(build)] if build else v
    j = v.rindex("-")
    v, rev = v[:j], v[j + 1 :]
    i = v.rindex("-")
    dot = v.rfind(".")
    if dot > i:
        base, timestamp = v[:dot], v[dot + 1 :]
    else:
        base, timestamp = v[:i], v[i + 1 :]
    return base, timestamp, rev, build


def pseudo_version_rev(v: str) -> str:
    """Return the revision identifier embedded in pseudo-version v."""
    return _split(v)[2]


def pseudo_version_time(v: str) -> str:
    """Return the 14-digit UTC timestamp embedded in pseudo-version v."""
    return _split(v)[1]


def pseudo_version_base(v: str) -> str:
    """Return the tagged version the pseudo-version was derived from.

    That is "" for the vX.0.0 form with no earlier tag, vX.Y.Z-pre for the
    prerelease form and vX.Y.Z for the vX.Y.(Z+1)-0 form.
    """
    base, _, _, build = _split(v)
    pre = semver.prerelease(base)
    if pre == "":
        if build:
            raise MalformedVersionError(f"malformed pseudo-version {v!r}: base version has build suffix")
        return ""
    if pre == "-0":
        base = base[: -len(pre)]
        i = base.rindex(".")
        patch = int(base[i + 1 :]) - 1
        if patch < 0:
            raise MalformedVersionError(f"malformed pseudo-version {v!r}: version before v0.0.0")
        return f"{base[: i + 1]}{patch}{build}"
    if not base.endswith(".0"):
        raise MalformedVersionError(f"malformed pseudo-version {v!r}")
    return base[: -len(".0")] + build
