"""Commit lock: one writer at a time per repository.

An in-memory repository only needs a thread lock.  An on-disk one shares
its thread lock with every :class:`CommitLock` opened on the same directory
in this process, and additionally holds an advisory lock on
``<repo>/gitwiki.lock`` so other processes wait too.
"""

from __future__ import annotations

import logging
import os
import threading

logger = logging.getLogger(__name__)

LOCK_NAME = "gitwiki.lock"

_shared: dict[object, threading.Lock] = {}
_shared_guard = threading.Lock()


def _key(path: str) -> object:
    real = os.path.realpath(path)
    try:
        st = os.stat(real)
    except OSError:
        return os.path.normcase(real)
    # some filesystems report no inode numbers
    return (st.st_dev, st.st_ino) if st.st_ino else os.path.normcase(real)


def _shared_lock(path: str) -> threading.Lock:
    key = _key(path)
    with _shared_guard:
        return _shared.setdefault(key, threading.Lock())


try:
    import fcntl

    def _flock(fd: int, exclusive: bool) -> None:
        fcntl.flock(fd, fcntl.LOCK_EX if exclusive else fcntl.LOCK_UN)

except ImportError:
    import msvcrt

    def _flock(fd: int, exclusive: bool) -> None:
        msvcrt.locking(fd, msvcrt.LK_LOCK if exclusive else msvcrt.LK_UNLCK, 1)


class CommitLock:
    """Context manager serializing commits on one repository.

    *path* is the repository directory, or ``None`` for a repository that
    lives only in memory.  Not reentrant.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None):
        self.path = os.fspath(path) if path is not None else None
        self._thread_lock = _shared_lock(self.path) if self.path else threading.Lock()
        self._fd: int | None = None

    @property
    def lock_file(self) -> str | None:
        if self.path is None:
            return None
        if os.path.isdir(self.path):
            return os.path.join(self.path, LOCK_NAME)
        return self.path + ".lock"

    def __enter__(self) -> CommitLock:
        self._thread_lock.acquire()
        if self.path is None:
            return self
        try:
            fd = os.open(self.lock_file, os.O_CREAT | os.O_RDWR | getattr(os, "O_CLOEXEC", 0))
        except OSError:
            self._thread_lock.release()
            raise
        try:
            _flock(fd, True)
        except OSError:
            os.close(fd)
            self._thread_lock.release()
            raise
        self._fd = fd
        logger.debug("Acquired %s", self.lock_file)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._fd is not None:
                fd, self._fd = self._fd, None
                try:
                    _flock(fd, False)
                finally:
                    os.close(fd)
        finally:
            self._thread_lock.release()
