"""Configuration for the delegen library."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

DEFAULT_MODEL = "gpt-4o"
DEFAULT_CACHE_DIR = Path("gpt_responses")


@dataclass
class DelegenConfig:
    """Settings threaded through every stage of a generation run.

    Build one at process start (usually via :meth:`from_env`) and pass it to
    :class:`~delegen.pipeline.Pipeline`.  Nothing below the pipeline reads the
    environment.
    """

    api_key: str | None = field(default=None, repr=False)
    """Credential for the generation service.  Only needed on a cache miss."""

    cache_dir: Path = DEFAULT_CACHE_DIR
    """Directory holding one record per cache key."""

    default_model: str = DEFAULT_MODEL
    """Model used when a directive does not set ``model``."""

    base_url: str | None = None
    """Alternative OpenAI-compatible endpoint."""

    timeout: float | None = None
    """Transport timeout in seconds.  ``None`` keeps the SDK default."""

    unwrap_fences: bool = False
    """Extract code from Markdown fences before validating a response.

    The cache always keeps the text exactly as received.
    """

    verbose: bool = False
    """Log cache and service activity to stderr."""

    def __post_init__(self) -> None:
        self.cache_dir = Path(self.cache_dir)
        if not self.default_model:
            raise ValueError("default_model must be a non-empty model identifier")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")

    @classmethod
    def from_env(cls, env_file: str | Path | None = None, **overrides: Any) -> DelegenConfig:
        """Build a config from the process environment.

        A ``.env`` file (``env_file`` or ``./.env``) is loaded first without
        overriding variables that are already set.  Keyword *overrides* win
        over anything read from the environment.
        """
        load_dotenv(env_file or Path.cwd() / ".env")

        values: dict[str, Any] = {
            "api_key": os.environ.get("OPENAI_API_KEY") or None,
            "base_url": os.environ.get("OPENAI_BASE_URL") or None,
        }
        if os.environ.get("DELEGEN_CACHE_DIR"):
            values["cache_dir"] = Path(os.environ["DELEGEN_CACHE_DIR"])
        if os.environ.get("DELEGEN_MODEL"):
            values["default_model"] = os.environ["DELEGEN_MODEL"]

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
