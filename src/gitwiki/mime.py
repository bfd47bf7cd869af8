"""MIME type resolution: by extension, then by content sniffing, then a default."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass

from .config import DEFAULT_MIME

# Extensions wiki content commonly uses that mimetypes doesn't know everywhere.
mimetypes.add_type("text/markdown", ".md")
mimetypes.add_type("text/markdown", ".markdown")
mimetypes.add_type("text/x-creole", ".creole")
mimetypes.add_type("text/x-textile", ".textile")
mimetypes.add_type("application/yaml", ".yaml")
mimetypes.add_type("application/yaml", ".yml")

# (offset, magic bytes, mime type), checked in order
MAGIC_SIGNATURES: list[tuple[int, bytes, str]] = [
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"GIF87a", "image/gif"),
    (0, b"GIF89a", "image/gif"),
    (0, b"%PDF-", "application/pdf"),
    (0, b"PK\x03\x04", "application/zip"),
    (0, b"\x1f\x8b", "application/gzip"),
    (0, b"BM", "image/bmp"),
    (8, b"WEBP", "image/webp"),
    (0, b"<?xml", "application/xml"),
    (0, b"<svg", "image/svg+xml"),
    (0, b"<!DOCTYPE html", "text/html"),
    (0, b"<html", "text/html"),
]

_SNIFF_BYTES = 512


@dataclass(frozen=True, slots=True)
class MimeType:
    """A parsed MIME type such as ``text/plain``."""

    type: str
    subtype: str

    @classmethod
    def parse(cls, value: str) -> MimeType:
        main, sep, sub = value.partition(";")[0].strip().lower().partition("/")
        if not sep or not main or not sub:
            raise ValueError(f"Invalid MIME type {value!r}")
        return cls(main, sub)

    @property
    def mime(self) -> str:
        return f"{self.type}/{self.subtype}"

    @property
    def is_text(self) -> bool:
        return self.type == "text" or self.subtype in ("json", "xml", "yaml", "javascript")

    def __str__(self) -> str:
        return self.mime


def by_extension(ext: str) -> MimeType | None:
    if not ext:
        return None
    mime, _ = mimetypes.guess_type(f"file.{ext}", strict=False)
    return MimeType.parse(mime) if mime else None


def by_magic(content: bytes | None) -> MimeType | None:
    """Guess from leading bytes; plain UTF-8 without NULs is ``text/plain``."""
    if not content:
        return None
    head = content[:_SNIFF_BYTES]
    stripped = head.lstrip()
    for offset, magic, mime in MAGIC_SIGNATURES:
        sample = stripped if magic.startswith(b"<") else head
        if sample[offset:offset + len(magic)] == magic:
            return MimeType.parse(mime)
    if b"\0" in head:
        return None
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as exc:
        # a multibyte sequence cut off at the sniff boundary is still text
        if len(content) <= _SNIFF_BYTES or exc.reason != "unexpected end of data":
            return None
    return MimeType("text", "plain")


class MimeResolver:
    """Pluggable resolution strategy: extension, content, default.

    Subclass and override :meth:`by_extension` or :meth:`by_content` to
    change the lookup tables.
    """

    def __init__(self, default: str = DEFAULT_MIME):
        self.default = MimeType.parse(default)

    def by_extension(self, ext: str) -> MimeType | None:
        return by_extension(ext)

    def by_content(self, content: bytes | None) -> MimeType | None:
        return by_magic(content)

    def resolve(self, ext: str, content: bytes | None) -> MimeType:
        return self.by_extension(ext) or self.by_content(content) or self.default
