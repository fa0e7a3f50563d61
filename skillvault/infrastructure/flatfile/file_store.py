"""Whole-file read/rewrite transactions over the users file.

Every read and every rewrite holds the store lock, so a reader sees either the
file before a rewrite or after it. Rewrites are assembled in memory, written to
``<path>.tmp`` and moved over the original with ``os.replace``.
"""
import os
import threading
from contextlib import contextmanager
from typing import Iterator

from skillvault.domain.schema import TERMINATOR

# Bytes that are not valid UTF-8 survive a read/rewrite cycle unchanged.
ENCODING_ERRORS = "surrogateescape"


class FileStore:
    """Line-oriented access to a single flat file."""

    def __init__(self, path: str):
        self._path = path
        # Re-entrant: load-or-create appends while the scan still holds it.
        self._lock = threading.RLock()

    @property
    def path(self) -> str:
        return self._path

    def exists(self) -> bool:
        return os.path.exists(self._path)

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def ensure_exists(self) -> bool:
        """Create the parent directory and an empty file. True if created."""
        with self._lock:
            if self.exists():
                return False
            parent = os.path.dirname(self._path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self._path, "a", encoding="utf-8", errors=ENCODING_ERRORS, newline=""):
                pass
            return True

    def read_lines(self) -> list:
        """All lines without terminators. A missing file reads as empty."""
        with self._lock:
            if not self.exists():
                return []
            with open(self._path, "r", encoding="utf-8", errors=ENCODING_ERRORS, newline="") as f:
                return [raw.rstrip("\r\n") for raw in f]

    def append_line(self, line: str) -> None:
        with self._lock:
            parent = os.path.dirname(self._path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self._path, "a", encoding="utf-8", errors=ENCODING_ERRORS, newline="") as f:
                f.write(line + TERMINATOR)

    @contextmanager
    def transaction(self) -> Iterator[list]:
        """Yield the current lines; the list as left by the caller is committed.

        Nothing is written if the body raises.
        """
        with self._lock:
            lines = self.read_lines()
            yield lines
            self._rewrite(lines)

    def _rewrite(self, lines: list) -> None:
        content = "".join(line + TERMINATOR for line in lines)
        parent = os.path.dirname(self._path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        tmp_path = f"{self._path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8", errors=ENCODING_ERRORS, newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
