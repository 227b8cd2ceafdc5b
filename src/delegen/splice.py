"""Replace a directive with validated generated code.

The code is inserted as-is: no renaming and no check against definitions
already in the file.  A clash surfaces when the expanded file is compiled.
Line breaks in the code are ``"\\n"`` only (see
:func:`~delegen.validator.validate_response`).
"""

from __future__ import annotations

import io
import tokenize

from .types import CallSite, ValidatedCode


def _string_continuation_rows(code: str) -> set[int]:
    """Rows (1-based) that continue a multi-line string literal."""
    rows: set[int] = set()
    fstring_starts: list[int] = []
    fstring_start = getattr(tokenize, "FSTRING_START", None)
    fstring_end = getattr(tokenize, "FSTRING_END", None)
    for tok in tokenize.generate_tokens(io.StringIO(code).readline):
        if tok.type == fstring_start:
            fstring_starts.append(tok.start[0])
            continue
        if tok.type == fstring_end:
            first = fstring_starts.pop()
        elif tok.type == tokenize.STRING:
            first = tok.start[0]
        else:
            continue
        rows.update(range(first + 1, tok.end[0] + 1))
    return rows


def reindent(code: str, indent: str) -> str:
    """Prefix every line but the first with *indent*.

    Blank lines and lines inside multi-line strings are left alone so
    literal values do not change.
    """
    if not indent:
        return code
    protected = _string_continuation_rows(code)
    lines = code.split("\n")
    out = [lines[0]]
    for row, line in enumerate(lines[1:], start=2):
        if row in protected or not line.strip():
            out.append(line)
        else:
            out.append(indent + line)
    return "\n".join(out)


def _offset(lines: list[str], position: tuple[int, int]) -> int:
    line, col = position
    return sum(len(s) for s in lines[: line - 1]) + col


def substitute(source: str, site: CallSite, code: ValidatedCode) -> str:
    """Return *source* with *site* replaced by *code*.

    Text after the closing parenthesis on the directive's last line (such as
    a trailing comment) is kept.  Code with no statements (empty, or only
    comments) gets a ``pass`` when the directive sits inside a block.
    """
    lines = io.StringIO(source).readlines()
    start = _offset(lines, site.start)
    end = _offset(lines, site.end)
    body = reindent(code.text.rstrip(), site.indent)
    if not code.items and site.indent:
        body = f"{body}\n{site.indent}pass" if body else "pass"
    return source[:start] + body + source[end:]


def substitute_all(source: str, replacements: list[tuple[CallSite, ValidatedCode]]) -> str:
    """Apply several replacements, last site first so offsets stay valid."""
    for site, code in sorted(replacements, key=lambda r: r[0].start, reverse=True):
        source = substitute(source, site, code)
    return source
