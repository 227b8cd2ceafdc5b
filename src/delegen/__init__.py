"""delegen — let an LLM write part of a Python module, reproducibly.

A directive in a source file hands the rest of the implementation to an
OpenAI-compatible model.  The whole file and the directive are hashed; the
response is cached on disk under that hash, validated as Python and spliced
in place of the directive.  Unchanged inputs never reach the service twice.

Basic usage::

    # templates/fib.py
    def main():
        print(fib(10))

    take_care_of_the_rest(seed = 20; "Implement fib with memoisation.")

    from delegen import DelegenConfig, Pipeline

    pipeline = Pipeline(DelegenConfig.from_env())
    pipeline.build("templates/fib.py", "build/fib.py")
"""

from .cache import CacheStats, ResponseCache
from .client import GenerationClient, OpenAIAdapter, make_openai_client
from .config import DelegenConfig
from .exceptions import (
    AuthenticationFailure,
    CacheIoFailure,
    DelegenError,
    DuplicateOption,
    GenerationParseFailure,
    GenerationServiceError,
    InvalidOptionType,
    InvocationError,
    InvocationSyntaxError,
    MissingCredential,
    ServiceError,
    ServiceUnavailable,
    SourceUnavailable,
    UnknownEntryPoint,
    UnknownOption,
)
from .pipeline import Pipeline
from .prompt import ENTRY_POINTS
from .types import CallSite, Expansion, GenerationRequest, Invocation, OptionSet, ValidatedCode

__all__ = [
    "Pipeline",
    "DelegenConfig",
    "ResponseCache",
    "CacheStats",
    "GenerationClient",
    "OpenAIAdapter",
    "make_openai_client",
    "ENTRY_POINTS",
    "CallSite",
    "Invocation",
    "OptionSet",
    "GenerationRequest",
    "ValidatedCode",
    "Expansion",
    "DelegenError",
    "InvocationError",
    "InvocationSyntaxError",
    "UnknownEntryPoint",
    "UnknownOption",
    "DuplicateOption",
    "InvalidOptionType",
    "SourceUnavailable",
    "GenerationServiceError",
    "MissingCredential",
    "ServiceUnavailable",
    "AuthenticationFailure",
    "ServiceError",
    "CacheIoFailure",
    "GenerationParseFailure",
]

__version__ = "0.1.0"
