"""Public data types shared across the pipeline stages."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

MAX_SEED = 9_223_372_036_854_775_807


@dataclass(frozen=True)
class CallSite:
    """One directive located in a source file."""

    path: Path
    """File the directive was found in."""

    entry_point: str
    """Directive name as written (the identity label)."""

    payload: str
    """Exact source text between the directive's parentheses."""

    start: tuple[int, int]
    """``(line, col)`` of the directive name; lines are 1-based."""

    end: tuple[int, int]
    """``(line, col)`` just past the closing parenthesis."""

    indent: str = ""
    """Leading whitespace of the directive's line."""

    @property
    def location(self) -> str:
        line, col = self.start
        return f"{self.path}:{line}:{col + 1}"


@dataclass(frozen=True)
class OptionSet:
    """Options given explicitly in a directive.  ``None`` means unset."""

    model: str | None = None
    seed: int | None = None
    max_completion_tokens: int | None = None


@dataclass(frozen=True)
class Invocation:
    """A parsed directive together with its enclosing source."""

    site: CallSite
    source: bytes
    """Raw bytes of the enclosing file as read from disk."""

    options: OptionSet = field(default_factory=OptionSet)
    prompt: str | None = None
    language: str = "en"
    """Instruction-template language selected by the entry point."""

    @property
    def source_text(self) -> str:
        return self.source.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class GenerationRequest:
    """Everything sent to the generation service for one invocation."""

    messages: list[dict[str, str]]
    model: str
    seed: int
    max_completion_tokens: int | None = None

    def to_params(self) -> dict[str, Any]:
        """Keyword arguments for ``chat.completions.create``."""
        params: dict[str, Any] = {
            "model": self.model,
            "messages": self.messages,
            "seed": self.seed,
        }
        if self.max_completion_tokens is not None:
            params["max_completion_tokens"] = self.max_completion_tokens
        return params


@dataclass(frozen=True)
class ValidatedCode:
    """Generated text that parsed as a sequence of Python statements."""

    text: str
    module: ast.Module = field(repr=False)

    @property
    def items(self) -> list[ast.stmt]:
        return self.module.body


@dataclass(frozen=True)
class Expansion:
    """Outcome of expanding one directive."""

    site: CallSite
    key: str
    seed: int
    model: str
    code: ValidatedCode
    cached: bool
    """``True`` when the text came from the cache without a service call."""
