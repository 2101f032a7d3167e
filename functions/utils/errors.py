"""
functions/utils/errors.py

WHAT THIS FILE IS FOR
---------------------
Typed error variants shared by the inner and edge services.

Every failure that reaches the HTTP boundary is classified into exactly
one variant (see `as_service_error`). The fallback handler then renders
the variant's message; it never needs to know about httpx, sockets or
any other library exception.

VARIANTS
--------
- ProcessingError              inner service random rejection
- UpstreamResponseError        inner service answered with a non-2xx status
- UpstreamAddressUnknownError  inner service host could not be resolved
- UpstreamUnavailableError     connection to the inner service not established
- UnhandledError               anything else (wraps the original exception)

All variants answer with HTTP 500.
"""

from __future__ import annotations

from typing import ClassVar


class ServiceError(Exception):
    """Base class for errors rendered by the fallback handler."""

    kind: ClassVar[str] = "service_error"
    status_code: ClassVar[int] = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ProcessingError(ServiceError):
    kind = "processing_error"


class UpstreamResponseError(ServiceError):
    """The message is the raw upstream response body."""

    kind = "upstream_response"


class UpstreamAddressUnknownError(ServiceError):
    kind = "upstream_address_unknown"


class UpstreamUnavailableError(ServiceError):
    kind = "upstream_unavailable"


class UnhandledError(ServiceError):
    """Wraps an exception that no other variant covers."""

    kind = "unhandled"

    def __init__(self, original: BaseException) -> None:
        super().__init__(str(original) or type(original).__name__)
        self.original = original


def as_service_error(exc: BaseException) -> ServiceError:
    """Classify any exception into a ServiceError variant."""
    if isinstance(exc, ServiceError):
        return exc
    return UnhandledError(exc)
