"""
functions/inner/data_producer.py

WHAT THIS FILE IS FOR
---------------------
Produces the inner service payload and injects random failures.

Each call to `produce()` draws one independent random number:

- draw <  failure_probability -> ProcessingError("processing error")
- otherwise                   -> fresh InnerResponse(value, now=UTC now)

The failure is not caught here; it propagates to the fallback handler
registered in inner_api.py, which answers with a plain-text 500.

The random source and the probability are constructor arguments;
probability 0.0 / 1.0 or a seeded Random gives deterministic outcomes.
"""

from __future__ import annotations

import random
from typing import Optional

import structlog

from functions.utils.errors import ProcessingError
from schemas.inner_schema import InnerResponse

logger = structlog.get_logger(__name__)

PROCESSING_ERROR_MESSAGE = "processing error"
DEFAULT_VALUE = "hi there!"


class DataProducer:
    """Builds InnerResponse values, failing with the configured probability."""

    def __init__(
        self,
        value: str = DEFAULT_VALUE,
        failure_probability: float = 0.5,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not 0.0 <= failure_probability <= 1.0:
            raise ValueError(
                f"failure_probability must be within [0, 1], got {failure_probability}"
            )
        self.value = value
        self.failure_probability = failure_probability
        self._rng = rng or random.Random()

    def should_fail(self) -> bool:
        return self._rng.random() < self.failure_probability

    def produce(self) -> InnerResponse:
        if self.should_fail():
            logger.debug("processing_error_injected", failure_probability=self.failure_probability)
            raise ProcessingError(PROCESSING_ERROR_MESSAGE)

        return InnerResponse(value=self.value)
