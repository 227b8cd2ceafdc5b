"""Locate generation directives in a Python source file.

A directive is a statement that starts a logical line with an entry-point
name followed by a parenthesised payload::

    def main():
        print(fib(10))

    take_care_of_the_rest(model = "o1-preview"; seed = 20; "Implement fib.")

The payload uses ``;`` separators, so a file containing directives is not
valid Python until it has been expanded.  ``tokenize`` still reads it, which
keeps names inside strings and comments from being mistaken for directives.

Python has no marker like Rust's ``!`` for macro calls, so several aliases
(``magic``, ``do_it``, ``help_me``, ...) look like ordinary function calls.
An entry-point name that the file binds itself, through ``def``, ``class``,
``import`` or a top-of-line assignment, is treated as that ordinary name and
never as a directive.
"""

from __future__ import annotations

import io
import logging
import tokenize
from pathlib import Path

from .exceptions import InvocationSyntaxError
from .prompt import ENTRY_POINTS
from .types import CallSite

logger = logging.getLogger(__name__)

# Token types that may precede a directive name on its logical line.
_LINE_START = frozenset({tokenize.NEWLINE, tokenize.NL, tokenize.INDENT, tokenize.DEDENT})
# Token types skipped when looking for what follows the closing paren.
_TRIVIA = frozenset({tokenize.COMMENT, tokenize.NL})


def _tokens(text: str, path: Path) -> list[tokenize.TokenInfo]:
    try:
        return list(tokenize.generate_tokens(io.StringIO(text).readline))
    except (tokenize.TokenError, SyntaxError) as exc:
        raise InvocationSyntaxError(f"Cannot tokenize source: {exc}").at(str(path)) from exc


def _bound_names(tokens: list[tokenize.TokenInfo]) -> set[str]:
    """Entry-point names the file defines, imports or assigns."""
    bound: set[str] = set()
    in_import = False
    for i, tok in enumerate(tokens):
        at_line_start = i == 0 or tokens[i - 1].type in _LINE_START
        if tok.type == tokenize.NEWLINE:
            in_import = False
        elif tok.type != tokenize.NAME:
            continue
        elif at_line_start and tok.string in ("import", "from"):
            in_import = True
        elif tok.string not in ENTRY_POINTS:
            continue
        elif in_import or (i > 0 and tokens[i - 1].string in ("def", "class")):
            bound.add(tok.string)
        elif at_line_start and i + 1 < len(tokens) and tokens[i + 1].exact_type == tokenize.EQUAL:
            bound.add(tok.string)
    return bound


def _slice(lines: list[str], start: tuple[int, int], end: tuple[int, int]) -> str:
    """Source text between two ``(line, col)`` positions."""
    (start_line, start_col), (end_line, end_col) = start, end
    if start_line == end_line:
        return lines[start_line - 1][start_col:end_col]
    parts = [lines[start_line - 1][start_col:]]
    parts.extend(lines[start_line:end_line - 1])
    parts.append(lines[end_line - 1][:end_col])
    return "".join(parts)


def find_call_sites(text: str, path: str | Path) -> list[CallSite]:
    """Return every directive in *text*, in source order."""
    path = Path(path)
    tokens = _tokens(text, path)
    lines = io.StringIO(text).readlines()
    sites: list[CallSite] = []
    bound = _bound_names(tokens)
    if bound:
        logger.debug("%s: %s bound in the file, not treated as directives", path, sorted(bound))

    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if not (
            tok.type == tokenize.NAME
            and tok.string in ENTRY_POINTS
            and tok.string not in bound
            and (i == 0 or tokens[i - 1].type in _LINE_START)
            and i + 1 < len(tokens)
            and tokens[i + 1].exact_type == tokenize.LPAR
        ):
            i += 1
            continue

        open_paren = tokens[i + 1]
        depth = 0
        j = i + 1
        while j < len(tokens):
            kind = tokens[j].exact_type
            if kind in (tokenize.LPAR, tokenize.LSQB, tokenize.LBRACE):
                depth += 1
            elif kind in (tokenize.RPAR, tokenize.RSQB, tokenize.RBRACE):
                depth -= 1
                if depth == 0:
                    break
            j += 1
        else:
            raise InvocationSyntaxError(
                f"Unclosed parenthesis after {tok.string!r}"
            ).at(f"{path}:{tok.start[0]}:{tok.start[1] + 1}")

        close_paren = tokens[j]
        k = j + 1
        while k < len(tokens) and tokens[k].type in _TRIVIA:
            k += 1
        if k < len(tokens) and tokens[k].type not in (tokenize.NEWLINE, tokenize.ENDMARKER):
            logger.debug(
                "%s:%d: %s used inside an expression, not a directive",
                path, tok.start[0], tok.string,
            )
            i = j + 1
            continue

        line = lines[tok.start[0] - 1]
        sites.append(
            CallSite(
                path=path,
                entry_point=tok.string,
                payload=_slice(lines, open_paren.end, close_paren.start),
                start=tok.start,
                end=close_paren.end,
                indent=line[: tok.start[1]],
            )
        )
        i = j + 1

    logger.debug("%s: found %d directive(s)", path, len(sites))
    return sites
