"""Tests for resolving paths and revisions to nodes."""

import pytest

from gitwiki import (
    Directory,
    Document,
    InvalidPathError,
    NodeKind,
    NotFoundError,
    find,
    find_directory,
    find_directory_or_fail,
    find_document,
    find_document_or_fail,
    find_or_fail,
)


class TestFind:
    def test_empty_repo(self, repo):
        assert find(repo, "") is None
        assert find(repo, "Home") is None

    def test_document(self, wiki):
        node = find(wiki, "Home")
        assert isinstance(node, Document)
        assert node.kind is NodeKind.DOCUMENT
        assert node.is_document and not node.is_directory
        assert node.is_current

    def test_directory(self, wiki):
        node = find(wiki, "docs")
        assert isinstance(node, Directory)
        assert node.kind is NodeKind.DIRECTORY

    def test_root(self, wiki):
        root = find(wiki, "")
        assert root.is_directory
        assert root.path == ""
        assert root.identity == wiki[wiki.head()].tree.decode()

    def test_root_aliases(self, wiki):
        assert find(wiki, "/") == find(wiki, "")
        assert find(wiki, None) == find(wiki, "")

    def test_missing(self, wiki):
        assert find(wiki, "Nope") is None
        assert find(wiki, "docs/nope.md") is None

    def test_path_normalized(self, wiki):
        node = find(wiki, "/docs//./guide.md")
        assert node.path == "docs/guide.md"

    def test_invalid_path_propagates(self, wiki):
        with pytest.raises(InvalidPathError):
            find(wiki, "a<b")
        with pytest.raises(InvalidPathError):
            find(wiki, "/../Home")

    def test_resolves_commit_that_touched_path(self, wiki):
        home = find(wiki, "Home")
        assert home.revision.message == "init"
        assert home.commit.id != wiki.head()

    def test_pinned_revision(self, wiki):
        first = find(wiki, "Home").revision
        node = find(wiki, "Home", first.id)
        assert not node.is_current
        assert node.revision == first

    def test_pinned_revision_object(self, wiki):
        first = find(wiki, "Home").revision
        assert find(wiki, "Home", first).revision == first

    def test_short_revision(self, wiki):
        first = find(wiki, "Home").revision
        assert find(wiki, "Home", first.id[:7]).revision == first

    def test_path_absent_at_revision(self, wiki):
        first = find(wiki, "Home").revision
        assert find(wiki, "docs", first.id) is None

    def test_unknown_revision(self, wiki):
        with pytest.raises(NotFoundError):
            find(wiki, "Home", "0" * 40)
        with pytest.raises(NotFoundError):
            find(wiki, "Home", "not-a-sha")


class TestFindOrFail:
    def test_found(self, wiki):
        assert find_or_fail(wiki, "Home").path == "Home"

    def test_not_found(self, wiki):
        with pytest.raises(NotFoundError) as exc_info:
            find_or_fail(wiki, "Nope")
        assert exc_info.value.path == "Nope"

    def test_not_found_is_lookup_error(self, wiki):
        with pytest.raises(LookupError):
            find_or_fail(wiki, "Nope")


class TestTypedFind:
    def test_find_document(self, wiki):
        assert find_document(wiki, "Home") is not None
        assert find_document(wiki, "docs") is None
        assert find_document(wiki, "Nope") is None

    def test_find_directory(self, wiki):
        assert find_directory(wiki, "docs") is not None
        assert find_directory(wiki, "Home") is None

    def test_or_fail_variants(self, wiki):
        with pytest.raises(NotFoundError):
            find_document_or_fail(wiki, "docs")
        with pytest.raises(NotFoundError):
            find_directory_or_fail(wiki, "Home")
        assert find_directory_or_fail(wiki, "").path == ""
