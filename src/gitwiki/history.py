"""Revision history of a path.

History is read in a bounded window (30 entries by default) to keep deep
histories cheap.  Near the end of that window ``next`` and ``previous`` may
be approximate; :meth:`gitwiki.node.Node.next_revision` widens the window
when it has to.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from dulwich.objects import Commit

from .config import DEFAULT_HISTORY_LIMIT

if TYPE_CHECKING:
    from .repo import Repository

__all__ = ["Revision", "log", "latest_and_previous", "next_revision", "DEFAULT_HISTORY_LIMIT"]


@dataclass(frozen=True, slots=True)
class Revision:
    """An immutable point in the commit history.

    Attributes:
        id: 40-char hex commit sha.
        author: Author name.
        email: Author email (may be empty).
        time: Timezone-aware commit time.
        message: Commit message, trailing newline stripped.
    """

    id: str
    author: str
    email: str
    time: datetime
    message: str

    @classmethod
    def from_commit(cls, commit: Commit) -> Revision:
        ident = commit.author.decode("utf-8", errors="replace")
        name, _, email_part = ident.partition(" <")
        tz = timezone(timedelta(seconds=commit.commit_timezone))
        return cls(
            id=commit.id.decode(),
            author=name,
            email=email_part.rstrip(">"),
            time=datetime.fromtimestamp(commit.commit_time, tz=tz),
            message=commit.message.decode("utf-8", errors="replace").rstrip("\n"),
        )

    @property
    def short_id(self) -> str:
        return self.id[:7]

    def __eq__(self, other):
        if isinstance(other, Revision):
            return self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.id


def log(
    repo: Repository,
    path: str,
    limit: int | None = DEFAULT_HISTORY_LIMIT,
    start: str | None = None,
) -> list[Revision]:
    """Revisions that touched *path* or anything below it, most recent first.

    Args:
        repo: The repository.
        path: Normalized path (``""`` for the whole tree).
        limit: Window size; ``None`` for the full history.
        start: Revision id to walk back from (default: the branch tip).
    """
    start_sha = start.encode() if start is not None else None
    return [Revision.from_commit(c) for c in repo.log_since(start_sha, path, limit)]


def latest_and_previous(
    repo: Repository, path: str, at: str
) -> tuple[Revision | None, Revision | None]:
    """The revision that last touched *path* as of *at*, and the one before it."""
    commits = log(repo, path, limit=2, start=at)
    latest = commits[0] if commits else None
    previous = commits[1] if len(commits) > 1 else None
    return latest, previous


def next_revision(history: list[Revision], current: Revision) -> Revision | None:
    """The entry of *history* (most recent first) that comes after *current*.

    *current* is located by identity.  When it is not part of *history*
    (e.g. a pinned commit that did not touch the path) the first entry not
    newer than *current* marks its position instead.  Returns None when
    *current* is the newest, and also when every entry is newer than
    *current*, since the window then cannot tell which one follows it.
    """
    for i, rev in enumerate(history):
        if rev.id == current.id:
            return history[i - 1] if i > 0 else None
    for i, rev in enumerate(history):
        if rev.time <= current.time:
            return history[i - 1] if i > 0 else None
    return None
