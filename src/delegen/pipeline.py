"""Generation pipeline — parse, key, look up, generate, store, validate, splice.

For one directive the stages run strictly in this order::

    parse invocation -> derive key -> cache lookup
        hit  -> validate cached text
        miss -> call service -> store raw text -> validate

A failure at any stage ends the directive with an error located at its call
site.  Nothing is retried.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .cache import ResponseCache
from .client import GenerationClient, make_openai_client, wrap_if_needed
from .config import DelegenConfig
from .directives import find_call_sites
from .exceptions import DelegenError
from .invocation import parse_invocation
from .keys import cache_key, content_digest, default_seed
from .prompt import build_messages
from .source import SourceContext, collect_source
from .splice import substitute_all
from .types import CallSite, Expansion, GenerationRequest
from .validator import validate_response

logger = logging.getLogger(__name__)


class Pipeline:
    """Expands generation directives in Python source files.

    Parameters
    ----------
    config:
        :class:`~delegen.config.DelegenConfig` built once at start-up.
    client:
        A :class:`~delegen.client.GenerationClient` or an OpenAI-compatible
        SDK client.  When ``None``, an OpenAI client is created from *config*
        on the first cache miss.
    cache:
        Response cache.  Defaults to a :class:`ResponseCache` over
        ``config.cache_dir``.

    Example
    -------
    >>> from delegen import DelegenConfig, Pipeline
    >>> pipeline = Pipeline(DelegenConfig.from_env())
    >>> pipeline.build("templates/fib.py", "build/fib.py")
    """

    def __init__(
        self,
        config: DelegenConfig | None = None,
        client: Any = None,
        cache: ResponseCache | None = None,
    ) -> None:
        self._config = config or DelegenConfig()
        self._client: GenerationClient | None = wrap_if_needed(client) if client is not None else None
        self._cache = cache or ResponseCache(self._config.cache_dir)

        if self._config.verbose:
            logging.basicConfig(
                level=logging.INFO,
                format="%(name)s %(levelname)s: %(message)s",
            )
            logging.getLogger("delegen").setLevel(logging.INFO)

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    def _get_client(self) -> GenerationClient:
        if self._client is None:
            self._client = make_openai_client(self._config)
        return self._client

    # -- One directive -------------------------------------------------------

    def expand(self, site: CallSite, context: SourceContext) -> Expansion:
        """Run the pipeline for a single directive of *context*."""
        try:
            return self._expand(site, context)
        except DelegenError as exc:
            exc.at(site.location)
            raise

    def _expand(self, site: CallSite, context: SourceContext) -> Expansion:
        invocation = parse_invocation(site, context.data)
        options = invocation.options

        digest = content_digest(context.data, site.entry_point, site.payload)
        seed = options.seed if options.seed is not None else default_seed(digest)
        model = options.model or self._config.default_model
        key = cache_key(digest, model)
        logger.debug("%s: key=%s model=%s seed=%d", site.location, key[:12], model, seed)

        text = self._cache.lookup(key)
        cached = text is not None
        if text is None:
            request = GenerationRequest(
                messages=build_messages(invocation),
                model=model,
                seed=seed,
                max_completion_tokens=options.max_completion_tokens,
            )
            text = self._get_client().complete(request)
            self._cache.store(key, text)

        code = validate_response(text, unwrap=self._config.unwrap_fences)
        logger.info(
            "%s: %s %d statement(s)",
            site.location,
            "reused" if cached else "generated",
            len(code.items),
        )
        return Expansion(site=site, key=key, seed=seed, model=model, code=code, cached=cached)

    # -- Whole files ---------------------------------------------------------

    def expand_source(self, context: SourceContext) -> tuple[str, list[Expansion]]:
        """Expand every directive of *context*.  Returns the new text and results."""
        text = context.text
        expansions = [self.expand(site, context) for site in find_call_sites(text, context.path)]
        return substitute_all(text, [(e.site, e.code) for e in expansions]), expansions

    def expand_file(self, path: str | Path) -> str:
        """Return the contents of *path* with all directives expanded."""
        text, _ = self.expand_source(collect_source(path))
        return text

    def build(self, src: str | Path, dst: str | Path) -> list[Expansion]:
        """Expand *src* and write the result to *dst*."""
        text, expansions = self.expand_source(collect_source(src))
        dst = Path(dst)
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_text(text, encoding="utf-8")
        logger.info("wrote %s (%d directive(s))", dst, len(expansions))
        return expansions
