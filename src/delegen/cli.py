"""Command line front end.

Usage::

    delegen build templates/fib.py -o build/fib.py
    delegen cache list
    delegen cache rm 3f2a...

The API key is read from ``OPENAI_API_KEY`` (or a ``.env`` file) and is only
needed when a directive is not cached yet.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .cache import ResponseCache
from .config import DelegenConfig
from .exceptions import DelegenError
from .pipeline import Pipeline


def _build(args: argparse.Namespace) -> int:
    config = DelegenConfig.from_env(
        cache_dir=args.cache_dir,
        default_model=args.model,
        unwrap_fences=args.unwrap_fences or None,
        verbose=args.verbose or None,
    )
    pipeline = Pipeline(config)
    if args.output is None:
        sys.stdout.write(pipeline.expand_file(args.source))
    else:
        expansions = pipeline.build(args.source, args.output)
        reused = sum(e.cached for e in expansions)
        print(
            f"{args.output}: {len(expansions)} directive(s), "
            f"{reused} from cache, {len(expansions) - reused} generated",
            file=sys.stderr,
        )
    return 0


def _cache_list(args: argparse.Namespace) -> int:
    cache = ResponseCache(DelegenConfig.from_env(cache_dir=args.cache_dir).cache_dir)
    for key in cache.entries():
        print(key)
    return 0


def _cache_rm(args: argparse.Namespace) -> int:
    cache = ResponseCache(DelegenConfig.from_env(cache_dir=args.cache_dir).cache_dir)
    status = 0
    for key in args.keys:
        try:
            removed = cache.discard(key)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            status = 1
            continue
        if not removed:
            print(f"error: no cache record {key}", file=sys.stderr)
            status = 1
    return status


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="delegen",
        description="Expand code-generation directives in Python source files",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="expand the directives of a file")
    build.add_argument("source", type=Path)
    build.add_argument("-o", "--output", type=Path, default=None, help="write here instead of stdout")
    build.add_argument("--cache-dir", type=Path, default=None)
    build.add_argument("--model", default=None, help="model for directives without one")
    build.add_argument("--unwrap-fences", action="store_true", help="accept Markdown-fenced responses")
    build.add_argument("-v", "--verbose", action="store_true")
    build.set_defaults(func=_build)

    cache = sub.add_parser("cache", help="inspect or prune the response cache")
    cache_sub = cache.add_subparsers(dest="cache_command", required=True)
    ls = cache_sub.add_parser("list", help="print all cache keys")
    ls.add_argument("--cache-dir", type=Path, default=None)
    ls.set_defaults(func=_cache_list)
    rm = cache_sub.add_parser("rm", help="delete cache records")
    rm.add_argument("keys", nargs="+")
    rm.add_argument("--cache-dir", type=Path, default=None)
    rm.set_defaults(func=_cache_rm)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except DelegenError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
