# -------------------------------------------------------------------
# schemas/inner_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# Response model of the inner service (GET /retrieveData).
#
# WIRE SHAPE
# ----------
#   {"value": "hi there!", "now": "2024-05-01T10:00:00.123456Z"}
#
# The edge service keeps its own copy of this shape in
# schemas/edge_schema.py. Both must stay wire-compatible: same field
# names, same order, ISO-8601 timestamps.
#
# The model is frozen: one instance per request, never mutated.
# -------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InnerResponse(BaseModel):
    """Value produced by the inner service, stamped at construction time (UTC)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: str = Field(..., min_length=1)
    now: datetime = Field(default_factory=utc_now)
