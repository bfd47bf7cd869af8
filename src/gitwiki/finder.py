"""Finder: resolve a path (optionally at a revision) to a node."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from . import paths
from .exceptions import AlreadyExistsError, InvalidPathError, NotFoundError
from .node import Directory, Document, Node, NodeKind, make_node

if TYPE_CHECKING:
    from .history import Revision
    from .repo import Repository

__all__ = [
    "find", "find_or_fail",
    "find_document", "find_document_or_fail",
    "find_directory", "find_directory_or_fail",
    "new_document",
]


def find(
    repo: Repository,
    path: str | os.PathLike[str] | None,
    revision: Revision | str | None = None,
) -> Node | None:
    """Resolve *path* to a :class:`Document` or :class:`Directory`.

    Without *revision* the most recent commit touching *path* on the branch
    is used and the node is current; with one, that commit is used and the
    node is pinned to it.

    Returns None if the repository is empty or the path does not exist.

    Raises:
        InvalidPathError: If *path* is malformed.
        NotFoundError: If *revision* does not name a commit.
    """
    path = paths.clean(path)
    if revision is not None:
        commit = repo.commit_by_id(str(revision))
        if commit is None:
            raise NotFoundError(path, str(revision))
    else:
        commits = repo.log_since(None, path, max_count=1)
        if not commits:
            return None
        commit = commits[0]
    obj = repo.lookup(repo.tree_of(commit), path)
    if obj is None:
        return None
    return make_node(repo, path, obj, commit, revision is None)


def find_or_fail(repo: Repository, path, revision=None) -> Node:
    """Like :func:`find` but raise :class:`NotFoundError` instead of returning None."""
    node = find(repo, path, revision)
    if node is None:
        raise NotFoundError(paths.normalize(path), str(revision) if revision else None)
    return node


def find_document(repo: Repository, path, revision=None) -> Document | None:
    node = find(repo, path, revision)
    return node if node is not None and node.kind is NodeKind.DOCUMENT else None


def find_directory(repo: Repository, path, revision=None) -> Directory | None:
    node = find(repo, path, revision)
    return node if node is not None and node.kind is NodeKind.DIRECTORY else None


def find_document_or_fail(repo: Repository, path, revision=None) -> Document:
    node = find_document(repo, path, revision)
    if node is None:
        raise NotFoundError(paths.normalize(path), str(revision) if revision else None)
    return node


def find_directory_or_fail(repo: Repository, path, revision=None) -> Directory:
    node = find_directory(repo, path, revision)
    if node is None:
        raise NotFoundError(paths.normalize(path), str(revision) if revision else None)
    return node


def new_document(repo: Repository, path: str | os.PathLike[str]) -> Document:
    """The document at *path* on the branch tip, or a new unsaved one.

    Raises:
        InvalidPathError: If *path* is the root.
        AlreadyExistsError: If a directory lives at *path*.
    """
    if not paths.clean(path):
        raise InvalidPathError("", "The root is a directory, not a document")
    node = find(repo, path)
    if node is None:
        return Document(repo, path)
    if node.kind is NodeKind.DOCUMENT:
        return node
    raise AlreadyExistsError(node.path)
