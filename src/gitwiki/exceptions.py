"""Exceptions for gitwiki."""


class GitWikiError(Exception):
    """Base class for all gitwiki errors.  Carries the offending *path*."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class InvalidPathError(GitWikiError, ValueError):
    """Raised when a path does not match the path grammar."""

    def __init__(self, path: str, reason: str = "Invalid path"):
        super().__init__(f"{reason}: {path!r}", path)


class NotFoundError(GitWikiError, LookupError):
    """Raised when a path or revision does not resolve."""

    def __init__(self, path: str, revision: str | None = None):
        if revision:
            msg = f"{path or '/'} not found at revision {revision}"
        else:
            msg = f"{path or '/'} not found"
        super().__init__(msg, path)
        self.revision = revision


class EmptyContentError(GitWikiError):
    """Raised when saving a document without content."""

    def __init__(self, path: str):
        super().__init__(f"No content for {path!r}", path)


class AlreadyExistsError(GitWikiError):
    """Raised when creating a document whose path appeared in the meantime."""

    def __init__(self, path: str):
        super().__init__(f"Object already exists: {path!r}", path)


class ConflictError(GitWikiError):
    """Raised when a concurrent commit changed the path being saved.

    Re-fetch the document with :func:`~gitwiki.find_document` and retry.
    """


class InternalConsistencyError(GitWikiError):
    """Raised when the repository contradicts what was just written or read."""


class InvalidAuthorError(GitWikiError, ValueError):
    """Raised when an author string cannot be written into a commit."""

    def __init__(self, author: str):
        super().__init__(f"Invalid author {author!r}")
        self.author = author
