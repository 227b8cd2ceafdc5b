"""Custom exceptions for the delegen library.

Every error raised while expanding a directive carries an optional
``location`` (``path:line:col``) so it can be reported against the call site
that caused it.
"""

from __future__ import annotations


class DelegenError(Exception):
    """Base exception for all delegen errors."""

    location: str | None = None

    def at(self, location: str) -> DelegenError:
        """Attach a call-site location and return ``self`` for re-raising."""
        if self.location is None:
            self.location = location
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.location:
            return f"{self.location}: {message}"
        return message


# -- Invocation parsing -------------------------------------------------------


class InvocationError(DelegenError):
    """Raised when a directive's payload cannot be turned into an invocation."""


class InvocationSyntaxError(InvocationError):
    """Raised when a payload is not a well-formed option/prompt sequence."""


class UnknownEntryPoint(InvocationError):
    """Raised when a directive name is not in the entry-point table."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown entry point {name!r}")


class UnknownOption(InvocationError):
    """Raised for an option key outside the recognised set."""

    def __init__(self, key: str, known: list[str]) -> None:
        self.key = key
        super().__init__(f"Unknown option {key!r}. Must be one of {known}")


class DuplicateOption(InvocationError):
    """Raised when the same option key is assigned twice."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Option {key!r} is given more than once")


class InvalidOptionType(InvocationError):
    """Raised when an option value has the wrong literal kind or range."""

    def __init__(self, key: str, expected: str, value: object) -> None:
        self.key = key
        self.expected = expected
        self.value = value
        super().__init__(f"Option {key!r} expects {expected}, got {value!r}")


# -- Context collection -------------------------------------------------------


class SourceUnavailable(DelegenError):
    """Raised when the file enclosing a call site cannot be located or read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read source file {path}: {reason}")


# -- Generation service -------------------------------------------------------


class GenerationServiceError(DelegenError):
    """Base class for failures talking to the generation service."""


class MissingCredential(GenerationServiceError):
    """Raised before any network attempt when no API key is configured."""

    def __init__(self, variable: str = "OPENAI_API_KEY") -> None:
        self.variable = variable
        super().__init__(
            f"No API key configured; set {variable} in the environment or a .env file"
        )


class ServiceUnavailable(GenerationServiceError):
    """Raised when the generation service cannot be reached."""


class AuthenticationFailure(GenerationServiceError):
    """Raised when the service rejects the configured credential."""


class ServiceError(GenerationServiceError):
    """Raised for a non-success response from the generation service."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message)


# -- Cache store --------------------------------------------------------------


class CacheIoFailure(DelegenError):
    """Raised when a cache record cannot be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cache I/O failed for {path}: {reason}")


# -- Response validation ------------------------------------------------------


class GenerationParseFailure(DelegenError):
    """Raised when generated text does not parse as Python source.

    The offending text is kept on :attr:`text` verbatim; the record stays in
    the cache until removed by hand.
    """

    def __init__(self, text: str, reason: str, lineno: int | None = None) -> None:
        self.text = text
        self.reason = reason
        self.lineno = lineno
        where = f" at line {lineno}" if lineno is not None else ""
        super().__init__(
            f"Generated code is not valid Python{where}: {reason}\n"
            f"--- generated text ---\n{text}"
        )
