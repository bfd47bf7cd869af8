"""Diff results between two revisions, built from dulwich tree changes."""

from __future__ import annotations

import io
from dataclasses import dataclass, field

from dulwich.diff_tree import CHANGE_ADD, CHANGE_DELETE, CHANGE_MODIFY, tree_changes
from dulwich.patch import write_object_diff

_KINDS = {CHANGE_ADD: "add", CHANGE_DELETE: "delete", CHANGE_MODIFY: "modify"}


@dataclass(frozen=True, slots=True)
class FileChange:
    """One changed file.

    Attributes:
        path: Repository path of the file.
        kind: ``"add"``, ``"delete"`` or ``"modify"``.
        old_sha: Hex sha of the old blob, or ``None`` when added.
        new_sha: Hex sha of the new blob, or ``None`` when deleted.
        patch: Unified diff text for this file.
    """

    path: str
    kind: str
    old_sha: str | None
    new_sha: str | None
    patch: str


@dataclass(frozen=True, slots=True)
class DiffResult:
    """Changes between two revisions, restricted to a path prefix."""

    from_revision: str
    to_revision: str
    path: str = ""
    changes: list[FileChange] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self):
        return iter(self.changes)

    @property
    def paths(self) -> list[str]:
        return [c.path for c in self.changes]

    @property
    def patch(self) -> str:
        """The unified diff of every change, concatenated."""
        return "".join(c.patch for c in self.changes)


_NULL = (None, None, None)


def _entry(entry):
    """Normalize a missing side of a change to a null triple."""
    if entry is None or entry.path is None:
        return _NULL
    return (entry.path, entry.mode, entry.sha)


def _in_scope(path: str, prefix: str) -> bool:
    return not prefix or path == prefix or path.startswith(prefix + "/")


def compute_diff(object_store, old_tree: bytes, new_tree: bytes, *,
                 from_revision: str, to_revision: str, path: str = "") -> DiffResult:
    """Compare two root trees, keeping only changes at or under *path*."""
    changes = []
    for change in tree_changes(object_store, old_tree, new_tree):
        kind = _KINDS.get(change.type)
        if kind is None:
            continue
        old, new = _entry(change.old), _entry(change.new)
        file_path = (new[0] if kind != "delete" else old[0]).decode()
        if not _in_scope(file_path, path):
            continue
        buf = io.BytesIO()
        write_object_diff(buf, object_store, old, new)
        changes.append(FileChange(
            path=file_path,
            kind=kind,
            old_sha=old[2].decode() if old[2] else None,
            new_sha=new[2].decode() if new[2] else None,
            patch=buf.getvalue().decode("utf-8", errors="replace"),
        ))
    return DiffResult(from_revision, to_revision, path, changes)
