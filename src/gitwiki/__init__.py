from .config import StoreConfig
from .repo import Repository
from .history import Revision, next_revision
from .node import Node, NodeKind, Document, Directory
from .finder import (
    find, find_or_fail,
    find_document, find_document_or_fail,
    find_directory, find_directory_or_fail,
    new_document,
)
from .diff import DiffResult, FileChange
from .mime import MimeType, MimeResolver
from .exceptions import (
    GitWikiError, InvalidPathError, NotFoundError, EmptyContentError,
    AlreadyExistsError, ConflictError, InternalConsistencyError, InvalidAuthorError,
)

__all__ = [
    "StoreConfig", "Repository", "Revision", "next_revision",
    "Node", "NodeKind", "Document", "Directory",
    "find", "find_or_fail", "find_document", "find_document_or_fail",
    "find_directory", "find_directory_or_fail", "new_document",
    "DiffResult", "FileChange", "MimeType", "MimeResolver",
    "GitWikiError", "InvalidPathError", "NotFoundError", "EmptyContentError",
    "AlreadyExistsError", "ConflictError", "InternalConsistencyError", "InvalidAuthorError",
]
