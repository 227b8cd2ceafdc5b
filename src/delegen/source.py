"""Load the enclosing file of a call site.

The cache key and the user message both cover the *whole* file as it is on
disk, not only the directive's payload.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .exceptions import SourceUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceContext:
    """Path and current on-disk bytes of a source file."""

    path: Path
    data: bytes

    @property
    def text(self) -> str:
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SourceUnavailable(str(self.path), f"not valid UTF-8 ({exc})") from exc


def collect_source(path: str | Path) -> SourceContext:
    """Resolve *path* and read its bytes.

    Raises :class:`~delegen.exceptions.SourceUnavailable` when the file is
    missing, is not a regular file, or cannot be read.
    """
    path = Path(path)
    try:
        resolved = path.resolve(strict=True)
        if not resolved.is_file():
            raise SourceUnavailable(str(path), "not a regular file")
        data = resolved.read_bytes()
    except OSError as exc:
        raise SourceUnavailable(str(path), exc.strerror or str(exc)) from exc
    logger.debug("read %d bytes from %s", len(data), resolved)
    return SourceContext(path=resolved, data=data)
