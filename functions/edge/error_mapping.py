"""
functions/edge/error_mapping.py

WHAT THIS FILE IS FOR
---------------------
Translates failures of the inner service call into descriptive,
typed service errors (used by GET /data2 only).

An ErrorMapper is an ordered list of rules. Each rule is a
(predicate, transform) pair:

- rules are evaluated in order, first match wins
- the transform receives the ORIGINAL exception (rules never see each
  other's output)
- no match -> the original exception is returned unchanged and falls
  through to the generic fallback handler

DEFAULT RULES (in order)
------------------------
1) upstream_response  httpx.HTTPStatusError
                      -> UpstreamResponseError(<raw inner response body>)
2) address_unknown    httpx.ConnectError caused by a DNS failure
                      -> UpstreamAddressUnknownError(
                             "internal service address unknown: <detail>")
3) unavailable        any other httpx.ConnectError, or httpx.ConnectTimeout
                      (connection never established; read/write/pool
                      timeouts stay unmapped)
                      -> UpstreamUnavailableError(
                             "internal service not available: data service")

This module performs pure mapping: no I/O, no retries.
"""

from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence

import httpx
import structlog

from functions.utils.errors import (
    UpstreamAddressUnknownError,
    UpstreamResponseError,
    UpstreamUnavailableError,
)

logger = structlog.get_logger(__name__)

ADDRESS_UNKNOWN_PREFIX = "internal service address unknown: "
UNAVAILABLE_MESSAGE = "internal service not available: data service"


@dataclass(frozen=True)
class ErrorRule:
    name: str
    predicate: Callable[[BaseException], bool]
    transform: Callable[[BaseException], Exception]


class ErrorMapper:
    """Ordered, first-match-wins collection of ErrorRule."""

    def __init__(self, rules: Sequence[ErrorRule]) -> None:
        self.rules = tuple(rules)

    def map(self, exc: Exception) -> Exception:
        for rule in self.rules:
            if rule.predicate(exc):
                mapped = rule.transform(exc)
                logger.info(
                    "upstream_error_mapped",
                    rule=rule.name,
                    original_type=type(exc).__name__,
                    mapped_type=type(mapped).__name__,
                )
                return mapped
        return exc


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def _cause_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def find_dns_failure(exc: BaseException) -> Optional[socket.gaierror]:
    """Return the socket.gaierror behind `exc`, if any."""
    for item in _cause_chain(exc):
        if isinstance(item, socket.gaierror):
            return item
    return None


def _is_status_error(exc: BaseException) -> bool:
    return isinstance(exc, httpx.HTTPStatusError)


def _is_dns_failure(exc: BaseException) -> bool:
    return isinstance(exc, httpx.ConnectError) and find_dns_failure(exc) is not None


def _is_connect_failure(exc: BaseException) -> bool:
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


def _response_body(exc: BaseException) -> Exception:
    assert isinstance(exc, httpx.HTTPStatusError)
    return UpstreamResponseError(exc.response.text)


def _address_unknown(exc: BaseException) -> Exception:
    dns_error = find_dns_failure(exc)
    detail = str(dns_error) if dns_error is not None else str(exc)
    return UpstreamAddressUnknownError(ADDRESS_UNKNOWN_PREFIX + detail)


def _unavailable(exc: BaseException) -> Exception:
    return UpstreamUnavailableError(UNAVAILABLE_MESSAGE)


DEFAULT_RULES: tuple[ErrorRule, ...] = (
    ErrorRule("upstream_response", _is_status_error, _response_body),
    ErrorRule("address_unknown", _is_dns_failure, _address_unknown),
    ErrorRule("unavailable", _is_connect_failure, _unavailable),
)

default_mapper = ErrorMapper(DEFAULT_RULES)
