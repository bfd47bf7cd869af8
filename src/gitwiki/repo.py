"""Repository: the dulwich-backed storage capability under the object model."""

from __future__ import annotations

import logging
import os
import re
import time
from pathlib import Path

from dulwich.archive import tar_stream
from dulwich.objects import Commit, ShaFile, Tree
from dulwich.repo import MemoryRepo
from dulwich.repo import Repo as _DRepo

from ._lock import CommitLock
from .config import StoreConfig
from .diff import DiffResult, compute_diff
from .exceptions import ConflictError, InvalidAuthorError, InvalidPathError, NotFoundError
from .mime import MimeResolver
from .tree import entry_at_path, lookup, write_blob_at_path

logger = logging.getLogger(__name__)

SHA_PATTERN = re.compile(r"[A-Fa-f0-9]{5,40}")

# Sentinel for commit_file: skip the compare-and-swap on the path entry.
UNCHECKED = object()


def _head_branch(drepo) -> str | None:
    """Return the branch HEAD points at, or None for a detached HEAD."""
    target = drepo.refs.get_symrefs().get(b"HEAD")
    if target and target.startswith(b"refs/heads/"):
        return target[len(b"refs/heads/"):].decode()
    return None


class Repository:
    """A git repository seen through the operations the document store needs.

    All reads are pure functions of the object store.  The only mutation,
    :meth:`commit_file`, runs under the repository lock and moves the branch
    ref with a compare-and-swap.
    """

    def __init__(self, drepo, config: StoreConfig | None = None, *, path: str | None = None):
        self._repo = drepo
        self._path = path
        self.config = config or StoreConfig()
        self._lock = CommitLock(path)
        self.mime = MimeResolver(self.config.default_mime)

    def __repr__(self) -> str:
        where = self._path if self._path else "memory"
        return f"Repository({where!r}, branch={self.config.branch!r})"

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @classmethod
    def open(
        cls,
        path: str | os.PathLike[str],
        *,
        create: bool = True,
        config: StoreConfig | None = None,
    ) -> Repository:
        """Open or create a bare git repository.

        Args:
            path: Path to the bare repository.
            create: If True (default), create the repo when it doesn't exist.
                    If False, raise FileNotFoundError when missing.
            config: Store settings.  Defaults to :meth:`StoreConfig.from_env`,
                    following the repository's HEAD branch unless
                    ``GITWIKI_BRANCH`` is set.
        """
        path = Path(path)

        if path.exists():
            drepo = _DRepo(str(path))
            if config is None:
                config = StoreConfig.from_env(
                    branch=os.environ.get("GITWIKI_BRANCH") or _head_branch(drepo)
                )
            return cls(drepo, config, path=str(path))

        if not create:
            raise FileNotFoundError(f"Repository not found: {path}")

        config = config or StoreConfig.from_env()
        drepo = _DRepo.init_bare(str(path), mkdir=True)
        drepo.refs.set_symbolic_ref(b"HEAD", f"refs/heads/{config.branch}".encode())
        logger.info("Created repository %s on branch %s", path, config.branch)
        return cls(drepo, config, path=str(path))

    @classmethod
    def memory(cls, config: StoreConfig | None = None) -> Repository:
        """Create an empty repository held entirely in memory."""
        config = config or StoreConfig()
        drepo = MemoryRepo()
        drepo.refs.set_symbolic_ref(b"HEAD", f"refs/heads/{config.branch}".encode())
        return cls(drepo, config)

    def close(self) -> None:
        """Release file handles held by an on-disk repository."""
        if self._path is not None:
            self._repo.close()

    @property
    def path(self) -> str | None:
        """Filesystem path of the repository, ``None`` for in-memory ones."""
        return self._path

    @property
    def object_store(self):
        return self._repo.object_store

    @property
    def _ref_name(self) -> bytes:
        return f"refs/heads/{self.config.branch}".encode()

    # --- Reads ---

    def __getitem__(self, sha: bytes) -> ShaFile:
        return self._repo.object_store[sha]

    def head(self) -> bytes | None:
        """Hex sha of the branch tip, or None while the branch has no commits."""
        try:
            return self._repo.refs[self._ref_name]
        except KeyError:
            return None

    def commit_by_id(self, rev: str | bytes) -> Commit | None:
        """Look up a commit by full or abbreviated (>= 5 chars) hex sha."""
        rev_str = rev.decode() if isinstance(rev, bytes) else rev
        if not SHA_PATTERN.fullmatch(rev_str):
            return None
        sha = rev_str.lower().encode()
        store = self._repo.object_store
        if len(sha) == 40:
            try:
                obj = store[sha]
            except KeyError:
                return None
        else:
            matches = [s for s in store if s.startswith(sha)]
            if len(matches) != 1:
                return None
            obj = store[matches[0]]
        return obj if isinstance(obj, Commit) else None

    def tree_of(self, commit: Commit) -> Tree:
        return self._repo.object_store[commit.tree]

    def lookup(self, tree: Tree, path: str) -> ShaFile | None:
        """The blob or tree at *path* in *tree*; the tree itself for the root."""
        return lookup(self._repo.object_store, tree, path)

    def _entry_id(self, commit: Commit | None, path: str):
        if commit is None:
            return None
        if not path:
            return commit.tree
        return entry_at_path(self._repo.object_store, self.tree_of(commit), path)

    def log_since(self, start: bytes | None, path: str = "", max_count: int | None = None) -> list[Commit]:
        """Walk first parents from *start*, most recent first.

        Only commits that changed the entry at *path* (or anything below it)
        are returned; at most *max_count* of them when given.
        """
        sha = start if start is not None else self.head()
        store = self._repo.object_store
        commits: list[Commit] = []
        while sha is not None:
            if max_count is not None and len(commits) >= max_count:
                break
            commit = store[sha]
            parent = store[commit.parents[0]] if commit.parents else None
            if self._entry_id(commit, path) != self._entry_id(parent, path):
                commits.append(commit)
            sha = commit.parents[0] if commit.parents else None
        return commits

    def diff(self, from_rev: str | bytes, to_rev: str | bytes, path: str = "") -> DiffResult:
        """Changes between two revisions, restricted to *path* and below.

        Raises:
            NotFoundError: If either revision does not resolve.
        """
        old = self.commit_by_id(from_rev)
        if old is None:
            raise NotFoundError(path, str(from_rev))
        new = self.commit_by_id(to_rev)
        if new is None:
            raise NotFoundError(path, str(to_rev))
        return compute_diff(
            self._repo.object_store, old.tree, new.tree,
            from_revision=old.id.decode(), to_revision=new.id.decode(), path=path,
        )

    def archive_to_file(self, tree_id: str | bytes, prefix: str, output: str | os.PathLike[str]) -> Path:
        """Write the tree *tree_id* as a gzipped tarball with members under *prefix*."""
        sha = tree_id.encode() if isinstance(tree_id, str) else tree_id
        tree = self._repo.object_store[sha]
        if not isinstance(tree, Tree):
            raise NotADirectoryError(tree_id)
        output = Path(output)
        with open(output, "wb") as f:
            for chunk in tar_stream(self._repo.object_store, tree, int(time.time()),
                                    prefix=prefix.encode(), format="gz"):
                f.write(chunk)
        logger.debug("Archived tree %s to %s", sha.decode()[:7], output)
        return output

    # --- Writes ---

    def signature(self, author: str | None = None) -> bytes:
        """Git identity for *author* (``"Name"`` or ``"Name <email>"``)."""
        if not author:
            ident = f"{self.config.author} <{self.config.email}>"
        elif "<" in author:
            ident = author
        else:
            ident = f"{author} <>"
        if "\n" in ident or "\0" in ident:
            raise InvalidAuthorError(author)
        return ident.encode()

    def commit_file(
        self,
        path: str,
        data: bytes,
        *,
        message: str,
        author: str | None = None,
        expect=UNCHECKED,
    ) -> Commit:
        """Store *data* at *path* and commit it on the branch.

        *expect* is the hex sha the blob at *path* must still have at the tip
        (``None`` if the path must still be absent).  The check and the ref
        update happen under the repository lock; a failed check or a ref that
        moved underneath raises :class:`ConflictError` and leaves the branch
        untouched.
        """
        if not path:
            raise InvalidPathError(path, "Cannot store a document at the root")
        store = self._repo.object_store
        ident = self.signature(author)

        with self._lock:
            tip = self.head()
            base = self.tree_of(store[tip]) if tip is not None else None
            current = entry_at_path(store, base, path) if base is not None else None

            if current is not None and current[1] & 0o170000 == 0o040000:
                raise ConflictError(f"{path!r} is a directory", path)
            if expect is not UNCHECKED:
                current_sha = current[0] if current is not None else None
                if current_sha != expect:
                    logger.warning("Conflict saving %s: tip has %s, expected %s", path, current_sha, expect)
                    raise ConflictError(f"{path!r} was changed by another commit", path)

            try:
                new_tree = write_blob_at_path(store, base, path, data)
            except NotADirectoryError as exc:
                raise ConflictError(f"{exc.args[0]!r} is a document, not a directory", path)

            if base is not None and new_tree.id == base.id:
                return store[tip]

            commit = Commit()
            commit.tree = new_tree.id
            commit.parents = [tip] if tip is not None else []
            commit.author = commit.committer = ident
            commit.author_time = commit.commit_time = int(time.time())
            commit.author_timezone = commit.commit_timezone = 0
            msg = message.encode()
            if not msg.endswith(b"\n"):
                msg += b"\n"
            commit.message = msg
            commit.encoding = b"UTF-8"
            store.add_object(commit)

            if tip is None:
                moved = self._repo.refs.add_if_new(self._ref_name, commit.id)
            else:
                moved = self._repo.refs.set_if_equals(self._ref_name, tip, commit.id)
            if not moved:
                raise ConflictError(f"Branch {self.config.branch!r} advanced while saving {path!r}", path)

        logger.info("Committed %s as %s", path, commit.id.decode()[:7])
        return commit
