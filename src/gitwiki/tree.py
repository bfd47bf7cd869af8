"""Low-level tree manipulation for gitwiki.

Path-based lookup and single-path tree rebuild on top of dulwich's
object store.
"""

from __future__ import annotations

import stat
from typing import Iterator, NamedTuple

from dulwich.objects import Blob, ShaFile, Tree

GIT_FILEMODE_TREE = 0o040000
GIT_FILEMODE_BLOB = 0o100644


class TreeItem(NamedTuple):
    """An immediate entry of a tree: *name*, *sha* and *filemode*."""

    name: str
    sha: bytes
    filemode: int

    @property
    def is_tree(self) -> bool:
        return stat.S_ISDIR(self.filemode)

    @property
    def is_blob(self) -> bool:
        return stat.S_ISREG(self.filemode)


def iter_items(tree: Tree) -> Iterator[TreeItem]:
    """Yield the immediate entries of *tree* in git order."""
    for entry in tree.iteritems():
        yield TreeItem(entry.path.decode(), entry.sha, entry.mode)


def entry_at_path(object_store, tree: Tree, path: str) -> tuple[bytes, int] | None:
    """Return ``(sha, filemode)`` of the entry at *path*, or None if missing."""
    segments = path.split("/")
    for i, seg in enumerate(segments):
        try:
            mode, sha = tree[seg.encode()]
        except KeyError:
            return None
        if i == len(segments) - 1:
            return (sha, mode)
        if not stat.S_ISDIR(mode):
            return None
        tree = object_store[sha]
    return None


def lookup(object_store, tree: Tree, path: str) -> ShaFile | None:
    """Return the blob or tree at *path* inside *tree* (the tree itself for ``""``)."""
    if not path:
        return tree
    entry = entry_at_path(object_store, tree, path)
    if entry is None:
        return None
    return object_store[entry[0]]


def write_blob_at_path(object_store, base_tree: Tree | None, path: str, data: bytes) -> Tree:
    """Return a new root tree with *data* stored at *path*.

    Only the ancestor chain from the leaf to the root is rebuilt; sibling
    subtrees are shared by hash reference.  Missing intermediate directories
    are created.

    Raises:
        ValueError: If *path* is empty or has an empty segment.
        NotADirectoryError: If a blob stands where a directory is needed.
    """
    segments = path.split("/")
    if not all(segments):
        raise ValueError(f"Empty segment in path {path!r}")
    blob = Blob.from_string(data)
    object_store.add_object(blob)
    return _insert(object_store, base_tree, segments, blob.id, "")


def _insert(object_store, base_tree: Tree | None, segments: list[str], blob_sha: bytes, prefix: str) -> Tree:
    tree = Tree()
    if base_tree is not None:
        for entry in base_tree.iteritems():
            tree.add(entry.path, entry.mode, entry.sha)

    name = segments[0].encode()
    if len(segments) == 1:
        tree.add(name, GIT_FILEMODE_BLOB, blob_sha)
    else:
        here = f"{prefix}/{segments[0]}" if prefix else segments[0]
        existing = None
        try:
            mode, sha = tree[name]
        except KeyError:
            pass
        else:
            if not stat.S_ISDIR(mode):
                raise NotADirectoryError(here)
            existing = object_store[sha]
        subtree = _insert(object_store, existing, segments[1:], blob_sha, here)
        tree.add(name, GIT_FILEMODE_TREE, subtree.id)

    object_store.add_object(tree)
    return tree
