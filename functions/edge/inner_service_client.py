"""
functions/edge/inner_service_client.py

WHAT THIS FILE IS FOR
---------------------
Asynchronous client used by the edge service to call the inner service.

It exists to:
- Own the single pooled httpx.AsyncClient of the edge process
- Issue GET /retrieveData against the configured base URL
- Turn non-2xx answers into httpx.HTTPStatusError
- Parse the body into the edge's own EdgeResponse model

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Retries (there are none)
- Translating failures into user-facing messages
  (see functions/edge/error_mapping.py)

Transport failures (httpx.ConnectError, httpx.TimeoutException, ...) and
HTTPStatusError propagate unchanged to the caller.
"""

from __future__ import annotations

from typing import Optional

import httpx
import structlog

from schemas.edge_schema import EdgeResponse

logger = structlog.get_logger(__name__)

RETRIEVE_DATA_PATH = "/retrieveData"


class InnerServiceClient:
    """
    Thin async client around the inner service.

    The underlying httpx.AsyncClient is created on first use and reused
    for every later call; call `aclose()` on shutdown.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = str(base_url).rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def retrieve_data(self) -> EdgeResponse:
        """
        GET /retrieveData and return the parsed payload.

        Raises:
            httpx.HTTPStatusError: the inner service answered with a non-2xx status.
            httpx.RequestError: the request could not be completed.
            pydantic.ValidationError: the body does not match EdgeResponse.
        """
        try:
            resp = await self.client.get(RETRIEVE_DATA_PATH)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "inner_service_call_failed",
                url=self.base_url + RETRIEVE_DATA_PATH,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        logger.debug("inner_service_call_succeeded", status_code=resp.status_code)
        return EdgeResponse.model_validate_json(resp.content)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
