"""Tests for Directory children, naming and archive export."""

import tarfile

import pytest

from gitwiki import Directory, Document, NotFoundError, find, find_directory, new_document


class TestChildren:
    def test_root_children(self, wiki):
        dirs, docs = find_directory(wiki, "").children()
        assert [d.name for d in dirs] == ["docs"]
        assert [d.name for d in docs] == ["Home"]
        assert all(isinstance(d, Directory) for d in dirs)
        assert all(isinstance(d, Document) for d in docs)

    def test_sorted_by_name(self, repo):
        for name in ("zeta", "Alpha", "beta", "sub2/x", "sub1/x"):
            new_document(repo, name).write("x", f"add {name}")
        dirs, docs = find_directory(repo, "").children()
        assert [d.name for d in dirs] == ["sub1", "sub2"]
        assert [d.name for d in docs] == ["Alpha", "beta", "zeta"]

    def test_children_paths(self, wiki):
        dirs, docs = find_directory(wiki, "docs").children()
        assert [d.path for d in dirs] == ["docs/img"]
        assert [d.path for d in docs] == ["docs/api.md", "docs/guide.md"]

    def test_children_cached(self, wiki):
        directory = find_directory(wiki, "docs")
        assert directory.children() is directory.children()

    def test_children_share_revision_and_current(self, wiki):
        first = find(wiki, "Home").revision
        root = find_directory(wiki, "", first.id)
        dirs, docs = root.children()
        assert dirs == ()
        assert [d.name for d in docs] == ["Home"]
        assert docs[0].revision == first
        assert not docs[0].is_current

        current_root = find_directory(wiki, "")
        assert all(c.is_current for c in current_root.all_children())

    def test_all_children(self, wiki):
        names = [c.name for c in find_directory(wiki, "docs").all_children()]
        assert names == ["img", "api.md", "guide.md"]

    def test_children_content(self, wiki):
        _, docs = find_directory(wiki, "docs").children()
        assert docs[1].content == b"# Guide"

    def test_children_by_date(self, wiki):
        find(wiki, "Home").write("newest", "touch home")
        ordered = find_directory(wiki, "").children_by_date()
        assert {c.name for c in ordered} == {"Home", "docs"}
        times = [c.latest_revision.time for c in ordered]
        assert times == sorted(times, reverse=True)


class TestNames:
    def test_root_display_name(self, wiki):
        assert find_directory(wiki, "").display_name == "√ Root"

    def test_nested_display_name(self, wiki):
        assert find_directory(wiki, "docs/img").display_name == "√ Root/docs/img"

    def test_document_display_name(self, wiki):
        assert find(wiki, "docs/guide.md").display_name == "guide"

    def test_safe_name(self, wiki):
        assert find_directory(wiki, "").safe_name == "root"
        assert find_directory(wiki, "docs").safe_name == "docs"


class TestArchive:
    def test_archive_root(self, wiki, tmp_path):
        out = find_directory(wiki, "").archive(tmp_path)
        assert out == tmp_path / "root.tar.gz"
        with tarfile.open(out, "r:gz") as tf:
            names = set(tf.getnames())
            assert "root/Home" in names
            assert "root/docs/guide.md" in names
            assert tf.extractfile("root/Home").read() == b"Welcome"

    def test_archive_subdirectory(self, wiki, tmp_path):
        out = find_directory(wiki, "docs").archive(tmp_path)
        assert out.name == "docs.tar.gz"
        with tarfile.open(out, "r:gz") as tf:
            names = set(tf.getnames())
        assert "docs/api.md" in names
        assert "docs/img/logo.png" in names
        assert not any(n.startswith("docs/docs") for n in names)

    def test_archive_missing(self, repo, tmp_path):
        with pytest.raises(NotFoundError):
            Directory(repo, "nothing").archive(tmp_path)


class TestDiff:
    def test_diff_restricted_to_path(self, wiki):
        guide = find(wiki, "docs/guide.md")
        before = find(wiki, "").revision
        guide.write("# Guide v2", "edit guide")
        find(wiki, "Home").write("Welcome v2", "edit home")

        result = find(wiki, "docs").diff(before, find(wiki, "").revision)
        assert result.paths == ["docs/guide.md"]
        change = result.changes[0]
        assert change.kind == "modify"
        assert "-# Guide" in change.patch
        assert "+# Guide v2" in change.patch

    def test_diff_root_sees_everything(self, wiki):
        first = find(wiki, "Home").revision
        result = find(wiki, "").diff(first, find(wiki, "").revision)
        assert sorted(result.paths) == ["docs/api.md", "docs/guide.md", "docs/img/logo.png"]
        assert all(c.kind == "add" for c in result)
