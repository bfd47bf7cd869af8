"""Tests for Document content, saving and the mutation protocol."""

import pytest

from gitwiki import (
    AlreadyExistsError,
    ConflictError,
    Document,
    EmptyContentError,
    InvalidPathError,
    find,
    find_document,
    new_document,
)


class TestNewDocument:
    def test_new_document_is_unsaved(self, repo):
        doc = new_document(repo, "Home")
        assert doc.is_new
        assert not doc.exists
        assert not doc.saved
        assert doc.is_current
        assert doc.identity == ""
        assert doc.revision is None
        assert doc.content is None
        assert doc.saved_content is None

    def test_new_document_has_no_history(self, repo):
        doc = new_document(repo, "Home")
        assert doc.history() == []
        assert doc.latest_revision is None
        assert doc.previous_revision is None
        assert doc.next_revision is None

    def test_new_document_returns_existing(self, wiki):
        doc = new_document(wiki, "Home")
        assert not doc.is_new
        assert doc.content == b"Welcome"

    def test_new_document_on_directory(self, wiki):
        with pytest.raises(AlreadyExistsError):
            new_document(wiki, "docs")

    def test_root_is_not_a_document(self, repo):
        with pytest.raises(InvalidPathError):
            new_document(repo, "")
        with pytest.raises(InvalidPathError):
            Document(repo, "/")
        assert repo.head() is None


class TestScenarios:
    def test_create_on_empty_repo(self, repo):
        assert find(repo, "Home") is None
        rev = new_document(repo, "Home").write("Hello", "init", "alice")
        assert rev is not None

        doc = find(repo, "Home")
        assert isinstance(doc, Document)
        assert doc.content == b"Hello"
        assert doc.saved
        assert doc.latest_revision == rev
        assert doc.previous_revision is None
        assert rev.author == "alice"
        assert rev.message == "init"

    def test_update_tracks_previous_and_next(self, repo):
        r1 = new_document(repo, "Home").write("Hello", "init", "alice")
        doc = find(repo, "Home")
        r2 = doc.write("Hello v2", "update", "bob")
        assert r2 != r1

        doc = find(repo, "Home")
        assert doc.content == b"Hello v2"
        assert doc.latest_revision == r2
        assert doc.previous_revision == r1

        old = find(repo, "Home", r1.id)
        assert old.content == b"Hello"
        assert not old.is_current
        assert old.next_revision == r2
        assert doc.next_revision is None

    def test_nested_path_creates_directories(self, repo):
        new_document(repo, "a/b/c").write("x", "m", "a")
        a = find(repo, "a")
        assert a.is_directory
        dirs, docs = a.children()
        assert [d.name for d in dirs] == ["b"]
        assert docs == ()

    def test_empty_content_rejected(self, repo):
        doc = new_document(repo, "Home")
        with pytest.raises(EmptyContentError) as exc_info:
            doc.write("", "empty", "alice")
        assert exc_info.value.path == "Home"
        assert repo.head() is None

    def test_blank_content_rejected(self, wiki):
        head = wiki.head()
        doc = find_document(wiki, "Home")
        with pytest.raises(EmptyContentError):
            doc.write("  \n\t", "blank")
        assert wiki.head() == head

    def test_concurrent_creators(self, repo):
        first = new_document(repo, "Home")
        second = new_document(repo, "Home")
        first.content = "from first"
        second.content = "from second"

        assert first.save("first", "alice") is not None
        with pytest.raises((AlreadyExistsError, ConflictError)):
            second.save("second", "bob")

        assert find(repo, "Home").content == b"from first"
        assert len(find(repo, "Home").history()) == 1


class TestSave:
    def test_saved_content_equals_content(self, wiki):
        doc = find_document(wiki, "docs/guide.md")
        assert doc.saved
        assert doc.content == doc.saved_content

    def test_pending_content(self, wiki):
        doc = find_document(wiki, "Home")
        doc.content = "draft"
        assert doc.content == b"draft"
        assert doc.saved_content == b"Welcome"
        assert not doc.saved

    def test_save_twice_is_noop(self, wiki):
        doc = find_document(wiki, "Home")
        doc.write("changed", "edit")
        head = wiki.head()
        assert doc.save("again") is None
        assert wiki.head() == head
        assert doc.saved

    def test_unchanged_content_is_noop(self, wiki):
        head = wiki.head()
        doc = find_document(wiki, "Home")
        assert doc.write("Welcome", "same") is None
        assert wiki.head() == head
        assert doc.saved

    def test_save_rebinds_identity(self, wiki):
        doc = find_document(wiki, "Home", wiki.head().decode())
        before = doc.identity
        old_history = doc.history()
        rev = doc.write("new text", "edit", "dave")
        assert doc.identity != before
        assert doc.revision == rev
        assert doc.is_current
        assert doc.saved
        assert doc.latest_revision == rev
        assert doc.history()[0] == rev
        assert len(doc.history()) == len(old_history) + 1

    def test_round_trip(self, repo):
        new_document(repo, "notes/today.txt").write(b"\x00binary\xff", "bin")
        doc = find_document(repo, "notes/today.txt")
        assert doc.content == b"\x00binary\xff"
        assert doc.saved

    def test_blank_message_uses_default(self, wiki):
        rev = find_document(wiki, "Home").write("x", "   ")
        assert rev.message == "(Empty commit message)"

    def test_default_author(self, wiki):
        rev = find_document(wiki, "Home").write("x", "m")
        assert rev.author == "gitwiki"
        assert rev.email == "gitwiki@localhost"

    def test_author_with_email(self, wiki):
        rev = find_document(wiki, "Home").write("x", "m", "Eve <eve@example.com>")
        assert rev.author == "Eve"
        assert rev.email == "eve@example.com"

    def test_stale_document_conflicts(self, wiki):
        a = find_document(wiki, "Home")
        b = find_document(wiki, "Home")
        a.write("from a", "a")
        with pytest.raises(ConflictError) as exc_info:
            b.write("from b", "b")
        assert exc_info.value.path == "Home"
        assert find_document(wiki, "Home").content == b"from a"

    def test_other_path_does_not_conflict(self, wiki):
        home = find_document(wiki, "Home")
        find_document(wiki, "docs/api.md").write("changed", "api")
        home.write("still fine", "home")
        assert find_document(wiki, "Home").content == b"still fine"

    def test_document_under_document_conflicts(self, wiki):
        doc = new_document(wiki, "Home/child")
        with pytest.raises(ConflictError):
            doc.write("x", "m")

    def test_saving_historical_revision(self, wiki):
        first = find_document(wiki, "Home").revision
        find_document(wiki, "docs/api.md").write("changed", "api")
        old = find_document(wiki, "Home", first.id)
        assert not old.is_current
        old.write("restored", "restore")
        assert old.is_current
        assert find_document(wiki, "Home").content == b"restored"


class TestMime:
    def test_by_extension(self, wiki):
        assert str(find_document(wiki, "docs/guide.md").mime_type) == "text/markdown"

    def test_by_content(self, repo):
        new_document(repo, "logo").write(b"\x89PNG\r\n\x1a\nrest", "logo")
        assert str(find_document(repo, "logo").mime_type) == "image/png"

    def test_text_fallback(self, wiki):
        assert str(find_document(wiki, "Home").mime_type) == "text/plain"

    def test_default(self, repo):
        new_document(repo, "blob").write(b"\x00\x01\x02", "bin")
        assert str(find_document(repo, "blob").mime_type) == "application/octet-stream"

    def test_recomputed_after_save(self, repo):
        doc = new_document(repo, "thing")
        doc.write(b"\x00\x01", "bin")
        assert str(doc.mime_type) == "application/octet-stream"
        doc.write(b"GIF89a....", "gif")
        assert str(doc.mime_type) == "image/gif"

    def test_extension(self, wiki):
        assert find_document(wiki, "docs/guide.md").extension == "md"
        assert find_document(wiki, "Home").extension == ""
