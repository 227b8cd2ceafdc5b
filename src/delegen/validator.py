"""Parse generated text before it is allowed into a source file."""

from __future__ import annotations

import ast
import re

from .exceptions import GenerationParseFailure
from .types import ValidatedCode

# Fenced code blocks tagged as ``python``/``py`` or untagged.
_CODE_BLOCK_RE = re.compile(
    r"```(?:python3?|py)?[ \t]*\n(.*?)```",
    re.DOTALL,
)


def unwrap_fences(text: str) -> str:
    """Join the contents of Markdown code fences in *text*.

    Text without fences is returned unchanged.
    """
    blocks = _CODE_BLOCK_RE.findall(text)
    if not blocks:
        return text
    return "\n".join(block.rstrip("\n") + "\n" for block in blocks)


def validate_response(text: str, unwrap: bool = False) -> ValidatedCode:
    """Parse *text* as a sequence of top-level Python statements.

    Raises :class:`~delegen.exceptions.GenerationParseFailure` carrying the
    raw text when it does not parse.
    """
    code = unwrap_fences(text) if unwrap else text
    # ast.parse treats a bare "\r" as a line break; splicing only knows "\n".
    code = code.replace("\r\n", "\n").replace("\r", "\n")
    try:
        module = ast.parse(code, mode="exec")
    except SyntaxError as exc:
        raise GenerationParseFailure(text, exc.msg or "invalid syntax", exc.lineno) from exc
    except ValueError as exc:
        # e.g. source containing NUL bytes
        raise GenerationParseFailure(text, str(exc)) from exc
    return ValidatedCode(text=code, module=module)
