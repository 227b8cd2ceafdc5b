"""Provider abstraction — ``GenerationClient`` protocol and ``OpenAIAdapter``.

Any object with a ``complete(request) -> str`` method can serve as the
generation client of a :class:`~delegen.pipeline.Pipeline`.  The
:class:`OpenAIAdapter` wraps a standard ``openai.OpenAI`` client and turns
SDK errors into the delegen error family.  Nothing here retries.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import openai

from .config import DelegenConfig
from .exceptions import (
    AuthenticationFailure,
    MissingCredential,
    ServiceError,
    ServiceUnavailable,
)
from .types import GenerationRequest

logger = logging.getLogger(__name__)


@runtime_checkable
class GenerationClient(Protocol):
    """Protocol that any generation provider must satisfy."""

    def complete(self, request: GenerationRequest) -> str:
        """Send *request* and return the raw response text."""
        ...


class OpenAIAdapter:
    """Wraps an ``openai.OpenAI`` client.

    Parameters
    ----------
    client:
        Any object with a ``client.chat.completions.create(...)`` method.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    def complete(self, request: GenerationRequest) -> str:
        logger.info("requesting completion from %s (seed=%d)", request.model, request.seed)
        try:
            response = self._client.chat.completions.create(**request.to_params())
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise AuthenticationFailure(str(exc)) from exc
        except openai.APIConnectionError as exc:
            raise ServiceUnavailable(str(exc)) from exc
        except openai.APIStatusError as exc:
            raise ServiceError(str(exc), status_code=exc.status_code) from exc
        except openai.OpenAIError as exc:
            raise ServiceError(str(exc)) from exc

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if content is None:
            raise ServiceError(f"Response from {request.model} carried no message content")
        return content


def wrap_if_needed(client: Any) -> GenerationClient:
    """Auto-wrap an OpenAI-style client in :class:`OpenAIAdapter` if needed.

    If *client* already has a ``complete`` method, it is returned as-is.
    If it has a ``chat.completions`` attribute (OpenAI SDK pattern), it is
    wrapped in :class:`OpenAIAdapter`.
    """
    if hasattr(client, "complete"):
        return client
    if hasattr(client, "chat"):
        return OpenAIAdapter(client)
    raise TypeError(f"{type(client).__name__} is neither a GenerationClient nor an OpenAI client")


def make_openai_client(config: DelegenConfig) -> OpenAIAdapter:
    """Create an adapter around a fresh ``openai.OpenAI`` client.

    Raises :class:`~delegen.exceptions.MissingCredential` when *config* has
    no API key, before any transport is constructed.
    """
    if not config.api_key:
        raise MissingCredential()
    # Failures surface to the caller; the SDK must not retry on its own.
    kwargs: dict[str, Any] = {"api_key": config.api_key, "max_retries": 0}
    if config.base_url:
        kwargs["base_url"] = config.base_url
    if config.timeout is not None:
        kwargs["timeout"] = config.timeout
    return OpenAIAdapter(openai.OpenAI(**kwargs))
