"""Path normalization, validation and name helpers.

Paths are slash-separated, relative to the repository root; ``""`` is the
root itself.
"""

from __future__ import annotations

import os
import re

from .exceptions import InvalidPathError

_SEGMENT = r"[\w.+\-:](?:[\w.+\-: ]*[\w.+\-:])?"
PATH_PATTERN = re.compile(rf"{_SEGMENT}(?:/{_SEGMENT})*")
_UNSAFE_NAME = re.compile(r"[^\w.\-]")
_EXTENSION = re.compile(r".\.([^.]+)$")
ROOT_NAME = "root"


def normalize(raw: str | os.PathLike[str] | None) -> str:
    """Collapse *raw* to canonical form.

    Redundant slashes and ``.`` components are dropped and ``..`` removes the
    preceding segment.  Segment content is left untouched.

    Raises:
        InvalidPathError: If ``..`` climbs above the root.
    """
    if raw is None:
        return ""
    path = os.fspath(raw)
    if os.name == "nt":
        path = path.replace("\\", "/")
    segments: list[str] = []
    for seg in path.split("/"):
        if seg in ("", "."):
            continue
        if seg == "..":
            if not segments:
                raise InvalidPathError(path, "Path escapes the root")
            segments.pop()
            continue
        segments.append(seg)
    return "/".join(segments)


def validate(path: str) -> None:
    """Raise :class:`InvalidPathError` unless *path* matches the grammar."""
    if path and not PATH_PATTERN.fullmatch(path):
        raise InvalidPathError(path)


def clean(raw: str | os.PathLike[str] | None) -> str:
    """Normalize then validate *raw*; the entry point for external paths."""
    path = normalize(raw)
    validate(path)
    return path


def join(*parts: str) -> str:
    """Join path parts and normalize the result."""
    return normalize("/".join(p for p in parts if p))


def is_root(path: str) -> bool:
    return path == ""


def name(path: str) -> str:
    """Last path segment, or the whole path if it has no slash."""
    return path.rsplit("/", 1)[-1]


def display_name(path: str) -> str:
    """Name with a single trailing ``.extension`` stripped."""
    return re.sub(r"\.[^.]+$", "", name(path))


def safe_name(path: str) -> str:
    """File-system safe variant of the name (``"root"`` for the root)."""
    n = name(path) or ROOT_NAME
    return _UNSAFE_NAME.sub("_", n)


def extension(path: str) -> str:
    """Text after the last ``.`` of the final segment, or ``""``."""
    m = _EXTENSION.search(name(path))
    return m.group(1) if m else ""
