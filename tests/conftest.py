"""Shared fixtures for gitwiki tests."""

import pytest
from click.testing import CliRunner

from gitwiki import Repository
from gitwiki.cli import main
from gitwiki.finder import new_document


@pytest.fixture(params=["disk", "memory"])
def repo(request, tmp_path):
    """An empty repository, on disk and in memory."""
    if request.param == "disk":
        r = Repository.open(tmp_path / "wiki.git")
    else:
        r = Repository.memory()
    yield r
    r.close()


@pytest.fixture
def disk_repo(tmp_path):
    r = Repository.open(tmp_path / "wiki.git")
    yield r
    r.close()


@pytest.fixture
def wiki(repo):
    """Repository with Home, docs/guide.md, docs/api.md and docs/img/logo.png."""
    new_document(repo, "Home").write("Welcome", "init", "alice")
    new_document(repo, "docs/guide.md").write("# Guide", "add guide", "bob")
    new_document(repo, "docs/api.md").write("# API", "add api", "bob")
    new_document(repo, "docs/img/logo.png").write(b"\x89PNG\r\n\x1a\n....", "add logo", "carol")
    return repo


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def repo_path(tmp_path):
    """Return a path to a not-yet-created repo."""
    return str(tmp_path / "test.git")


@pytest.fixture
def initialized_repo(repo_path, runner):
    """Create a repo and return its path."""
    result = runner.invoke(main, ["init", "--repo", repo_path])
    assert result.exit_code == 0, result.output
    return repo_path


@pytest.fixture
def repo_with_pages(initialized_repo, runner):
    """Repo with Home (two revisions) and a/b/c."""
    p = initialized_repo
    for args in (
        [":Home", "Hello", "-m", "init", "--author", "alice"],
        [":Home", "Hello v2", "-m", "update", "--author", "bob"],
        [":a/b/c", "deep", "-m", "nested"],
    ):
        r = runner.invoke(main, ["write", "--repo", p, *args])
        assert r.exit_code == 0, r.output
    return p
