"""
inner_api.py

WHAT THIS FILE IS FOR
---------------------
FastAPI application of the INNER service.

It is responsible for:
- Creating the FastAPI app instance
- Registering the generic fallback error handler
  (500 text/plain "internal error in inner service: <message>\\n<traceback>")
- Exposing HTTP endpoints:
    - GET /health and /healthz
    - GET /retrieveData (returns {"value", "now"} or fails at random)

Failure injection lives in functions/inner/data_producer.py; the
probability comes from settings (INNER_SERVICE_FAILURE_PROBABILITY).
"""

from __future__ import annotations

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from functions.inner.data_producer import DataProducer
from functions.utils.fallback_handler import install_fallback_handler, render_inner_body
from functions.utils.json_response import model_response
from functions.utils.settings import get_inner_settings

settings = get_inner_settings()

logger = structlog.get_logger(__name__)

producer = DataProducer(
    value=settings.response_value,
    failure_probability=settings.failure_probability,
)

app = FastAPI(
    title="Inner Service",
    version="1.0.0",
    description="Backend service returning a value/timestamp pair, failing at random.",
)

install_fallback_handler(app, render_inner_body)


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
    }


@app.get("/retrieveData")
async def retrieve_data() -> JSONResponse:
    return model_response(producer.produce(), indent=settings.indent_json)


def main() -> None:
    logger.info("inner_service_starting", host=settings.host, port=settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
