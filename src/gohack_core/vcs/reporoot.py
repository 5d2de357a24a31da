"""Import path to repository root resolution.

Well-known hosting sites are matched statically; any other path is
resolved by fetching https://<path>?go-get=1 and reading its
<meta name="go-import"> tags.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import List, Optional

import httpx

from ..errors import RepoRootError

logger = logging.getLogger(__name__)

SUPPORTED_KINDS = ("git", "hg", "bzr")

_ELEM = r"[A-Za-z0-9_.\-]+"


@dataclass(frozen=True)
class RepoRoot:
    """How to fetch the repository holding an import path."""

    vcs: str  # git, hg or bzr
    repo: str  # URL to clone from
    root: str  # import path corresponding to the repository root


@dataclass(frozen=True)
class _StaticHost:
    prefix: str
    pattern: re.Pattern
    vcs: str


_STATIC_HOSTS: List[_StaticHost] = [
    _StaticHost("github.com/", re.compile(rf"^(?P<root>github\.com/{_ELEM}/{_ELEM})(/{_ELEM})*$"), "git"),
    _StaticHost("bitbucket.org/", re.compile(rf"^(?P<root>bitbucket\.org/{_ELEM}/{_ELEM})(/{_ELEM})*$"), "git"),
    _StaticHost("hub.jazz.net/git/", re.compile(rf"^(?P<root>hub\.jazz\.net/git/[a-z0-9]+/{_ELEM})(/{_ELEM})*$"), "git"),
    _StaticHost("git.apache.org/", re.compile(rf"^(?P<root>git\.apache\.org/[a-z0-9_.\-]+\.git)(/{_ELEM})*$"), "git"),
    _StaticHost(
        "git.openstack.org/",
        re.compile(rf"^(?P<root>git\.openstack\.org/{_ELEM}/{_ELEM})(\.git)?(/{_ELEM})*$"),
        "git",
    ),
    _StaticHost(
        "launchpad.net/",
        re.compile(
            rf"^(?P<root>launchpad\.net/(({_ELEM})(/{_ELEM})?|~{_ELEM}/(\+junk|{_ELEM})/{_ELEM}))(/{_ELEM})*$"
        ),
        "bzr",
    ),
]

_VCS_SUFFIX_RE = re.compile(
    r"^(?P<root>(?P<repo>([a-z0-9.\-]+\.)+[a-z0-9.\-]+(:[0-9]+)?(/~?[A-Za-z0-9_.\-]+)+?)"
    r"\.(?P<vcs>bzr|git|hg|svn))(/~?[A-Za-z0-9_.\-]+)*$"
)


@dataclass(frozen=True)
class MetaImport:
    prefix: str
    vcs: str
    repo: str


class _MetaImportParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.imports: list[MetaImport] = []
        self._done = False

    def handle_starttag(self, tag, attrs):
        if self._done:
            return
        if tag == "body":
            self._done = True
            return
        if tag != "meta":
            return
        values = dict(attrs)
        if values.get("name") != "go-import":
            return
        fields = (values.get("content") or "").split()
        if len(fields) == 3:
            self.imports.append(MetaImport(*fields))

    def handle_endtag(self, tag):
        if tag == "head":
            self._done = True


def parse_meta_go_imports(html: str) -> List[MetaImport]:
    parser = _MetaImportParser()
    parser.feed(html)
    parser.close()
    return parser.imports


def match_go_import(imports: List[MetaImport], import_path: str) -> Optional[MetaImport]:
    match: Optional[MetaImport] = None
    for imp in imports:
        if imp.vcs == "mod":
            continue
        if import_path != imp.prefix and not import_path.startswith(imp.prefix + "/"):
            continue
        if match is not None:
            raise RepoRootError(f"multiple meta tags match import path {import_path!r}")
        match = imp
    return match


def _check_import_path(import_path: str) -> None:
    if not import_path or import_path.startswith("/") or ".." in import_path.split("/"):
        raise RepoRootError(f"invalid import path {import_path!r}")
    if "\\" in import_path:
        raise RepoRootError(f"invalid import path {import_path!r}: contains backslash")


def _static_repo_root(import_path: str) -> Optional[RepoRoot]:
    for host in _STATIC_HOSTS:
        if not import_path.startswith(host.prefix):
            continue
        m = host.pattern.match(import_path)
        if m is None:
            raise RepoRootError(f"invalid {host.prefix.rstrip('/')} import path {import_path!r}")
        root = m.group("root")
        return RepoRoot(vcs=host.vcs, repo=f"https://{root}", root=root)
    m = _VCS_SUFFIX_RE.match(import_path)
    if m is not None:
        return RepoRoot(vcs=m.group("vcs"), repo=f"https://{m.group('repo')}", root=m.group("root"))
    return None


def _dynamic_repo_root(import_path: str, client: httpx.Client) -> RepoRoot:
    url = f"https://{import_path}"
    logger.debug(f"fetching {url}?go-get=1")
    try:
        resp = client.get(url, params={"go-get": "1"})
    except httpx.HTTPError as exc:
        raise RepoRootError(f"cannot fetch {url}?go-get=1: {exc}") from exc
    if resp.status_code != 200:
        raise RepoRootError(f"{url}?go-get=1: unexpected status {resp.status_code}")
    imp = match_go_import(parse_meta_go_imports(resp.text), import_path)
    if imp is None:
        raise RepoRootError(f"{url}?go-get=1: no go-import meta tags for {import_path!r}")
    if not re.match(r"^[a-z][a-z0-9+.\-]*://", imp.repo):
        raise RepoRootError(f"{url}?go-get=1: repo URL {imp.repo!r} has no scheme")
    return RepoRoot(vcs=imp.vcs, repo=imp.repo, root=imp.prefix)


def repo_root_for_import_path(import_path: str, client: Optional[httpx.Client] = None) -> RepoRoot:
    """Return the repository root for import_path.

    Raises RepoRootError if it cannot be determined or if the repository
    uses a version control system gohack cannot drive.
    """
    _check_import_path(import_path)
    root = _static_repo_root(import_path)
    if root is None:
        if client is None:
            with httpx.Client(timeout=30, follow_redirects=True) as own_client:
                root = _dynamic_repo_root(import_path, own_client)
        else:
            root = _dynamic_repo_root(import_path, client)
    if root.vcs not in SUPPORTED_KINDS:
        raise RepoRootError(f"unsupported VCS kind {root.vcs!r} for {import_path}")
    return root
