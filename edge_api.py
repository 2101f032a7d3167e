"""
edge_api.py

WHAT THIS FILE IS FOR
---------------------
FastAPI application of the EDGE service, the externally-facing proxy in
front of the inner service.

It is responsible for:
- Creating the FastAPI app instance and its shared InnerServiceClient
- Registering the generic fallback error handler
  (500 text/plain "internal error: <message>")
- Exposing HTTP endpoints:
    - GET /health and /healthz
    - GET /data1  naive relay: every failure reaches the fallback handler as-is
    - GET /data2  mapped relay: known failure categories are translated
                  first (functions/edge/error_mapping.py)

The inner service base URL is REQUIRED (EDGE_SERVICE_INNER_SERVICE_URL or
parameters/edge_service.yaml).
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from functions.edge.error_mapping import default_mapper
from functions.edge.inner_service_client import InnerServiceClient
from functions.utils.fallback_handler import install_fallback_handler, render_edge_body
from functions.utils.json_response import model_response
from functions.utils.settings import get_edge_settings

settings = get_edge_settings()

logger = structlog.get_logger(__name__)

inner_client = InnerServiceClient(
    str(settings.inner_service_url),
    timeout_seconds=settings.inner_service_timeout_seconds,
)
error_mapper = default_mapper


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await inner_client.aclose()


app = FastAPI(
    title="Edge Service",
    version="1.0.0",
    description="Proxy relaying the inner service, with naive and mapped error handling.",
    lifespan=lifespan,
)

install_fallback_handler(app, render_edge_body)


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------
@app.get("/healthz")
@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": settings.service_name,
        "environment": settings.environment,
        "innerServiceUrl": inner_client.base_url,
    }


@app.get("/data1")
async def data1() -> JSONResponse:
    result = await inner_client.retrieve_data()
    return model_response(result, indent=settings.indent_json)


@app.get("/data2")
async def data2() -> JSONResponse:
    try:
        result = await inner_client.retrieve_data()
    except Exception as exc:
        mapped = error_mapper.map(exc)
        if mapped is exc:
            raise
        raise mapped from exc

    return model_response(result, indent=settings.indent_json)


def main() -> None:
    logger.info(
        "edge_service_starting",
        host=settings.host,
        port=settings.port,
        inner_service_url=inner_client.base_url,
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
