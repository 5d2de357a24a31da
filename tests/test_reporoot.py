import httpx
import pytest

from gohack_core.errors import RepoRootError
from gohack_core.vcs.reporoot import MetaImport, RepoRoot, match_go_import, parse_meta_go_imports, repo_root_for_import_path


@pytest.mark.parametrize(
    "path,want",
    [
        ("github.com/rogpeppe/gohack", RepoRoot("git", "https://github.com/rogpeppe/gohack", "github.com/rogpeppe/gohack")),
        ("github.com/user/repo/sub/pkg", RepoRoot("git", "https://github.com/user/repo", "github.com/user/repo")),
        ("bitbucket.org/user/repo", RepoRoot("git", "https://bitbucket.org/user/repo", "bitbucket.org/user/repo")),
        ("launchpad.net/project/series", RepoRoot("bzr", "https://launchpad.net/project/series", "launchpad.net/project/series")),
        ("example.com/repo.hg/sub", RepoRoot("hg", "https://example.com/repo", "example.com/repo.hg")),
    ],
)
def test_static_roots(path: str, want: RepoRoot) -> None:
    assert repo_root_for_import_path(path, client=_no_network()) == want


def test_invalid_github_path() -> None:
    with pytest.raises(RepoRootError, match="invalid github.com import path"):
        repo_root_for_import_path("github.com/user", client=_no_network())


def test_unsupported_vcs_suffix() -> None:
    with pytest.raises(RepoRootError, match="unsupported VCS kind 'svn'"):
        repo_root_for_import_path("example.com/repo.svn", client=_no_network())


def _no_network() -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request {request.url}")

    return httpx.Client(transport=httpx.MockTransport(handler))


def _serving(html: str, status: int = 200):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status, text=html)

    return httpx.Client(transport=httpx.MockTransport(handler)), requests


PAGE = """<!DOCTYPE html>
<html>
<head>
<meta name="go-import" content="golang.org/x/mod mod https://proxy.golang.org">
<meta name="go-import" content="golang.org/x/mod git https://go.googlesource.com/mod">
<meta name="go-source" content="golang.org/x/mod https://github.com/golang/mod/ x y">
</head>
<body>
<meta name="go-import" content="golang.org/x/mod hg https://ignored.example.com">
</body>
</html>
"""


def test_dynamic_discovery() -> None:
    client, requests = _serving(PAGE)
    root = repo_root_for_import_path("golang.org/x/mod/semver", client=client)
    assert root == RepoRoot("git", "https://go.googlesource.com/mod", "golang.org/x/mod")
    assert str(requests[0].url) == "https://golang.org/x/mod/semver?go-get=1"


def test_dynamic_discovery_without_meta() -> None:
    client, _ = _serving("<html><head></head></html>")
    with pytest.raises(RepoRootError, match="no go-import meta tags"):
        repo_root_for_import_path("example.org/thing", client=client)


def test_dynamic_discovery_http_error() -> None:
    client, _ = _serving("not found", status=404)
    with pytest.raises(RepoRootError, match="unexpected status 404"):
        repo_root_for_import_path("example.org/thing", client=client)


def test_parse_meta_stops_at_body() -> None:
    imports = parse_meta_go_imports(PAGE)
    assert [i.vcs for i in imports] == ["mod", "git"]


def test_match_go_import() -> None:
    imports = [
        MetaImport("example.org/a", "git", "https://a"),
        MetaImport("example.org/ab", "git", "https://ab"),
    ]
    assert match_go_import(imports, "example.org/ab/c").repo == "https://ab"
    assert match_go_import(imports, "example.org/abc") is None
    with pytest.raises(RepoRootError, match="multiple meta tags"):
        match_go_import(imports + [MetaImport("example.org/a", "hg", "https://a2")], "example.org/a/x")
