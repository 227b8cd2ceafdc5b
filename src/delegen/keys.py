"""Deterministic cache keys and default seeds.

Only the input bytes feed the digests, so the same file and directive give
the same key on every run and every machine.
"""

from __future__ import annotations

import hashlib

from .types import MAX_SEED


def content_digest(source: bytes, entry_point: str, payload: str) -> str:
    """SHA-256 over the enclosing file, the entry-point name and the payload."""
    h = hashlib.sha256()
    h.update(source)
    h.update(b"\0")
    h.update(entry_point.encode("utf-8"))
    h.update(b"\0")
    h.update(payload.encode("utf-8"))
    return h.hexdigest()


def default_seed(digest: str) -> int:
    """Seed used when a directive does not set one; always <= ``MAX_SEED``."""
    return int(digest[:16], 16) & MAX_SEED


def cache_key(digest: str, model: str) -> str:
    """Key of the cache record for *digest* generated with *model*."""
    raw = f"{digest}\0{model}".encode()
    return hashlib.sha256(raw).hexdigest()
