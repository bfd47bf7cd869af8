"""Object model: documents and directories resolved at a revision."""

from __future__ import annotations

import enum
import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from dulwich.objects import Blob, Commit, ShaFile, S_ISGITLINK, Tree

from . import paths
from .exceptions import (
    AlreadyExistsError,
    EmptyContentError,
    InternalConsistencyError,
    InvalidPathError,
    NotFoundError,
)
from .history import Revision, latest_and_previous, log, next_revision
from .tree import iter_items

if TYPE_CHECKING:
    from .diff import DiffResult
    from .mime import MimeType
    from .repo import Repository

__all__ = ["NodeKind", "Node", "Document", "Directory", "make_node"]

logger = logging.getLogger(__name__)

ROOT_MARKER = "√ Root"
_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


class NodeKind(enum.Enum):
    DOCUMENT = "document"
    DIRECTORY = "directory"


def kind_of(obj: ShaFile) -> NodeKind:
    """Classify a raw object; only blobs and trees can back a node."""
    if isinstance(obj, Blob):
        return NodeKind.DOCUMENT
    if isinstance(obj, Tree):
        return NodeKind.DIRECTORY
    raise InternalConsistencyError(f"Unexpected {obj.type_name.decode()} object {obj.id.decode()}")


class Node:
    """Shared identity of documents and directories.

    A node is the triple (path, commit, backing object).  ``backing`` is
    ``None`` for a node that does not exist yet; such a node is always
    current.
    """

    kind: NodeKind

    def __init__(
        self,
        repo: Repository,
        path: str | None,
        backing: ShaFile | None = None,
        commit: Commit | None = None,
        current: bool = False,
    ):
        self._repo = repo
        self._path = paths.clean(path)
        self._backing = backing
        self._commit = commit
        self._current = current
        self._revision: Revision | None = None
        self._latest_previous: tuple[Revision | None, Revision | None] | None = None
        self._history: list[Revision] | None = None

    def __repr__(self) -> str:
        rev = self.revision.short_id if self.revision else "new"
        return f"{type(self).__name__}({self._path!r}, revision={rev})"

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return (self.kind, self._path, self.identity, self.revision) == (
            other.kind, other._path, other.identity, other.revision)

    def __hash__(self) -> int:
        return hash((self.kind, self._path, self.identity))

    @property
    def repo(self) -> Repository:
        return self._repo

    @property
    def path(self) -> str:
        return self._path

    @property
    def backing(self) -> ShaFile | None:
        """The raw blob or tree, or ``None`` for a node not yet created."""
        return self._backing

    @property
    def commit(self) -> Commit | None:
        return self._commit

    @property
    def revision(self) -> Revision | None:
        """The revision this node was resolved against."""
        if self._revision is None and self._commit is not None:
            self._revision = Revision.from_commit(self._commit)
        return self._revision

    @property
    def is_new(self) -> bool:
        return self._backing is None

    @property
    def exists(self) -> bool:
        return self._backing is not None

    @property
    def is_current(self) -> bool:
        """True when browsing the branch tip (or when the node is new)."""
        return self._current or self.is_new

    @property
    def is_document(self) -> bool:
        return self.kind is NodeKind.DOCUMENT

    @property
    def is_directory(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    @property
    def identity(self) -> str:
        """Hex sha of the backing object, ``""`` if the node does not exist."""
        return self._backing.id.decode() if self._backing is not None else ""

    @property
    def name(self) -> str:
        return paths.name(self._path)

    @property
    def display_name(self) -> str:
        return paths.display_name(self._path)

    @property
    def safe_name(self) -> str:
        return paths.safe_name(self._path)

    # --- History ---

    def _load_latest_previous(self) -> tuple[Revision | None, Revision | None]:
        if self._latest_previous is None:
            if self._commit is None:
                self._latest_previous = (None, None)
            else:
                self._latest_previous = latest_and_previous(
                    self._repo, self._path, self._commit.id.decode())
        return self._latest_previous

    @property
    def latest_revision(self) -> Revision | None:
        """The last revision that touched this path, as of :attr:`revision`."""
        return self._load_latest_previous()[0]

    @property
    def previous_revision(self) -> Revision | None:
        """The revision before :attr:`latest_revision` for this path."""
        return self._load_latest_previous()[1]

    def history(self) -> list[Revision]:
        """Revisions touching this path from the branch tip, most recent first.

        Bounded by the repository's ``history_limit``.
        """
        if self._history is None:
            if self._commit is None:
                self._history = []
            else:
                self._history = log(self._repo, self._path, limit=self._repo.config.history_limit)
        return self._history

    @property
    def next_revision(self) -> Revision | None:
        """The revision of this path that follows :attr:`revision`, if any."""
        # the last change to this path as of our revision marks our place
        anchor = self.latest_revision
        if anchor is None:
            return None
        window = self.history()
        if anchor not in window and len(window) >= self._repo.config.history_limit:
            logger.debug("Widening history of %r past %d entries", self._path, len(window))
            window = log(self._repo, self._path, limit=None)
        return next_revision(window, anchor)

    def diff(self, from_revision: Revision | str, to_revision: Revision | str) -> DiffResult:
        """Changes to this path (and below) between two revisions."""
        return self._repo.diff(str(from_revision), str(to_revision), self._path)

    def _invalidate(self) -> None:
        self._revision = None
        self._latest_previous = None
        self._history = None


class Directory(Node):
    """A node backed by a tree."""

    kind = NodeKind.DIRECTORY

    def __init__(self, repo, path, backing=None, commit=None, current=False):
        super().__init__(repo, path, backing, commit, current)
        self._children: tuple[tuple[Directory, ...], tuple[Document, ...]] | None = None

    @property
    def display_name(self) -> str:
        return f"{ROOT_MARKER}/{self._path}" if self._path else ROOT_MARKER

    def children(self) -> tuple[tuple[Directory, ...], tuple[Document, ...]]:
        """Immediate sub-directories and documents, each sorted by name.

        Children share this directory's commit and current flag.  Computed
        once per instance.
        """
        if self._children is None:
            dirs: list[Directory] = []
            docs: list[Document] = []
            if self._backing is not None:
                for item in iter_items(self._backing):
                    if S_ISGITLINK(item.filemode):
                        continue
                    try:
                        child_path = paths.join(self._path, item.name)
                        paths.validate(child_path)
                    except InvalidPathError:
                        logger.warning("Skipping entry %r in %r: invalid name", item.name, self._path)
                        continue
                    child = make_node(self._repo, child_path, self._repo[item.sha],
                                      self._commit, self.is_current)
                    if child.kind is NodeKind.DIRECTORY:
                        dirs.append(child)
                    elif child.kind is NodeKind.DOCUMENT:
                        docs.append(child)
            dirs.sort(key=lambda n: n.name)
            docs.sort(key=lambda n: n.name)
            self._children = (tuple(dirs), tuple(docs))
        return self._children

    def all_children(self) -> list[Node]:
        """Sub-directories followed by documents."""
        dirs, docs = self.children()
        return [*dirs, *docs]

    def children_by_date(self) -> list[Node]:
        """All children, most recently changed first."""
        def key(node: Node) -> datetime:
            latest = node.latest_revision
            return latest.time if latest is not None else _EPOCH
        return sorted(self.all_children(), key=key, reverse=True)

    def archive(self, dest_dir: str | Path | None = None) -> Path:
        """Export this tree as ``<safe_name>.tar.gz`` with members under ``<safe_name>/``.

        Returns the path of the written archive.
        """
        if not self.exists:
            raise NotFoundError(self._path)
        name = self.safe_name
        dest = Path(dest_dir) if dest_dir is not None else Path(tempfile.gettempdir())
        return self._repo.archive_to_file(self.identity, f"{name}/", dest / f"{name}.tar.gz")


class Document(Node):
    """A node backed by a blob, with an edit buffer for unsaved content."""

    kind = NodeKind.DOCUMENT

    def __init__(self, repo, path, backing=None, commit=None, current=False):
        super().__init__(repo, path, backing, commit, current)
        if not self._path:
            raise InvalidPathError(self._path, "The root is a directory, not a document")
        self._pending: bytes | None = None
        self._mime: MimeType | None = None

    @property
    def content(self) -> bytes | None:
        """Pending edits if any, else the saved content."""
        if self._pending is not None:
            return self._pending
        return self.saved_content

    @content.setter
    def content(self, value: bytes | str | None) -> None:
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._pending = value

    @property
    def saved_content(self) -> bytes | None:
        return self._backing.data if self._backing is not None else None

    @property
    def saved(self) -> bool:
        """True if the document exists and has no pending edits."""
        return not self.is_new and self._pending is None

    @property
    def extension(self) -> str:
        return paths.extension(self._path)

    @property
    def mime_type(self) -> MimeType:
        if self._mime is None:
            self._mime = self._repo.mime.resolve(self.extension, self.content)
        return self._mime

    def write(self, content: bytes | str, message: str = "", author: str | None = None) -> Revision | None:
        """Replace the content and :meth:`save` it."""
        self.content = content
        return self.save(message, author)

    def save(self, message: str = "", author: str | None = None) -> Revision | None:
        """Commit pending content at this document's path.

        Returns the new revision, or None when there was nothing to save.

        Raises:
            EmptyContentError: If the content is missing or blank.
            AlreadyExistsError: If this document is new but the path now exists.
            ConflictError: If another commit changed the path since this
                document was resolved.
            InternalConsistencyError: If the committed path cannot be read back.
        """
        if self.content == self.saved_content:
            self._pending = None
            return None

        pending = self._pending
        if pending is None or not pending.strip():
            raise EmptyContentError(self._path)
        if self.is_new:
            from .finder import find
            if find(self._repo, self._path) is not None:
                raise AlreadyExistsError(self._path)

        config = self._repo.config
        commit = self._repo.commit_file(
            self._path,
            pending,
            message=message if message and message.strip() else config.default_message,
            author=author,
            expect=self._backing.id if self._backing is not None else None,
        )

        self._pending = None
        self._mime = None
        self._invalidate()
        self._commit = commit
        backing = self._repo.lookup(self._repo.tree_of(commit), self._path)
        if not isinstance(backing, Blob):
            raise InternalConsistencyError(
                f"{self._path!r} not found in commit {commit.id.decode()} after save", self._path)
        self._backing = backing
        self._current = True
        logger.debug("Rebound %r to %s", self._path, commit.id.decode()[:7])
        return self.revision


_NODE_TYPES: dict[NodeKind, type[Node]] = {
    NodeKind.DOCUMENT: Document,
    NodeKind.DIRECTORY: Directory,
}


def make_node(repo: Repository, path: str, obj: ShaFile, commit: Commit | None, current: bool) -> Node:
    """Build the node matching the kind of *obj*."""
    return _NODE_TYPES[kind_of(obj)](repo, path, obj, commit, current)
