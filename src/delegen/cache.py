"""Persistent response cache — one file per key, never expires.

Records are written exactly as the service returned them, before validation,
so a malformed response is kept for inspection instead of being requested
again.  Delete a record (``delegen cache rm KEY``) to force regeneration.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path

from .exceptions import CacheIoFailure

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[0-9a-f]{64}$")


@dataclass
class CacheStats:
    """Snapshot of cache performance counters."""

    hits: int = 0
    misses: int = 0
    size: int = 0


class ResponseCache:
    """File-backed map from cache key to generated text.

    Parameters
    ----------
    directory:
        Directory holding the records.  Created on the first write.

    Writes go to a temporary file in the same directory and are moved into
    place with :func:`os.replace`, so a reader sees either no record or a
    complete one.  An existing record is never overwritten.
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)
        self._hits: int = 0
        self._misses: int = 0
        self._lock = threading.Lock()

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        """Location of the record for *key*."""
        if not _KEY_RE.match(key):
            raise ValueError(f"Malformed cache key {key!r}")
        return self._dir / key

    def lookup(self, key: str) -> str | None:
        """Return the stored text for *key*, or ``None`` on a miss."""
        path = self.path_for(key)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                text = f.read()
        except FileNotFoundError:
            with self._lock:
                self._misses += 1
            logger.info("cache miss %s", key[:12])
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise CacheIoFailure(str(path), str(exc)) from exc
        with self._lock:
            self._hits += 1
        logger.info("cache hit %s", key[:12])
        return text

    def store(self, key: str, text: str) -> Path:
        """Persist *text* under *key* and return the record's path."""
        path = self.path_for(key)
        if path.exists():
            logger.info("cache record %s already present, keeping it", key[:12])
            return path

        tmp_name: str | None = None
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=f".{key[:12]}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise CacheIoFailure(str(path), str(exc)) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.info("cached %d chars under %s", len(text), key[:12])
        return path

    def entries(self) -> list[str]:
        """Keys of all records, sorted."""
        if not self._dir.is_dir():
            return []
        try:
            return sorted(p.name for p in self._dir.iterdir() if _KEY_RE.match(p.name))
        except OSError as exc:
            raise CacheIoFailure(str(self._dir), str(exc)) from exc

    def discard(self, key: str) -> bool:
        """Remove the record for *key*.  Returns ``False`` if there was none."""
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CacheIoFailure(str(path), str(exc)) from exc
        logger.info("discarded cache record %s", key[:12])
        return True

    @property
    def stats(self) -> CacheStats:
        """Current performance counters."""
        return CacheStats(hits=self._hits, misses=self._misses, size=len(self.entries()))
