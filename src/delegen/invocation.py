"""Parse a directive payload into an :class:`~delegen.types.Invocation`.

Payload grammar::

    payload := (option ";")* [option | prompt] [";"]
    option  := NAME "=" literal
    prompt  := STRING+

Adjacent string literals in the prompt concatenate as they do in Python.
"""

from __future__ import annotations

import ast
import io
import tokenize

from .exceptions import (
    DuplicateOption,
    InvalidOptionType,
    InvocationSyntaxError,
    UnknownOption,
)
from .prompt import language_for
from .types import MAX_SEED, CallSite, Invocation, OptionSet

_SKIPPED = frozenset(
    {
        tokenize.NL,
        tokenize.NEWLINE,
        tokenize.COMMENT,
        tokenize.INDENT,
        tokenize.DEDENT,
        tokenize.ENDMARKER,
    }
)

OPTION_KEYS = ("model", "seed", "max_completion_tokens")


def _check_model(value: object) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidOptionType("model", "a non-empty string", value)
    return value


def _check_seed(value: object) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidOptionType("seed", "an integer", value)
    if not 0 <= value <= MAX_SEED:
        raise InvalidOptionType("seed", f"an integer between 0 and {MAX_SEED}", value)
    return value


def _check_max_tokens(value: object) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise InvalidOptionType("max_completion_tokens", "a positive integer", value)
    return value


_CHECKS = {
    "model": _check_model,
    "seed": _check_seed,
    "max_completion_tokens": _check_max_tokens,
}


def _split_items(payload: str) -> list[list[tokenize.TokenInfo]]:
    """Tokenize *payload* and split it on top-level semicolons."""
    try:
        # Wrapping in parens lets the payload span lines without INDENT tokens.
        raw = list(tokenize.generate_tokens(io.StringIO(f"({payload})").readline))
    except (tokenize.TokenError, SyntaxError) as exc:
        raise InvocationSyntaxError(f"Cannot tokenize directive payload: {exc}") from exc

    tokens = [t for t in raw if t.type not in _SKIPPED][1:-1]
    items: list[list[tokenize.TokenInfo]] = [[]]
    depth = 0
    for tok in tokens:
        kind = tok.exact_type
        if kind in (tokenize.LPAR, tokenize.LSQB, tokenize.LBRACE):
            depth += 1
        elif kind in (tokenize.RPAR, tokenize.RSQB, tokenize.RBRACE):
            depth -= 1
        if kind == tokenize.SEMI and depth == 0:
            items.append([])
        else:
            items[-1].append(tok)
    return items


def _literal(tokens: list[tokenize.TokenInfo], what: str) -> object:
    source = " ".join(t.string for t in tokens)
    try:
        return ast.literal_eval(source)
    except (ValueError, SyntaxError) as exc:
        raise InvocationSyntaxError(f"Expected a literal for {what}, got {source!r}") from exc


def parse_options(payload: str) -> tuple[OptionSet, str | None]:
    """Parse *payload* into its options and optional prompt."""
    items = _split_items(payload)
    # A single trailing ';' leaves one empty item behind.
    if len(items) > 1 and not items[-1]:
        items.pop()

    values: dict[str, object] = {}
    prompt: str | None = None

    for index, item in enumerate(items):
        if not item:
            if len(items) == 1:
                break
            raise InvocationSyntaxError("Empty item between ';' separators")
        if prompt is not None:
            raise InvocationSyntaxError("The prompt must be the last item of a directive")

        if item[0].type == tokenize.NAME and len(item) > 1 and item[1].exact_type == tokenize.EQUAL:
            key = item[0].string
            if key not in _CHECKS:
                raise UnknownOption(key, list(OPTION_KEYS))
            if key in values:
                raise DuplicateOption(key)
            if len(item) == 2:
                raise InvocationSyntaxError(f"Missing value for option {key!r}")
            values[key] = _CHECKS[key](_literal(item[2:], f"option {key!r}"))
        elif all(t.type == tokenize.STRING for t in item):
            text = _literal(item, "the prompt")
            if not isinstance(text, str):
                raise InvocationSyntaxError("The prompt must be a str literal, not bytes")
            prompt = text
        else:
            first = item[0].string
            raise InvocationSyntaxError(
                f"Expected 'key = value' or a string prompt in item {index + 1}, got {first!r}"
            )

    return OptionSet(**values), prompt


def parse_invocation(site: CallSite, source: bytes) -> Invocation:
    """Build the :class:`Invocation` for *site* inside a file holding *source*."""
    language = language_for(site.entry_point)
    options, prompt = parse_options(site.payload)
    return Invocation(
        site=site,
        source=source,
        options=options,
        prompt=prompt,
        language=language,
    )
