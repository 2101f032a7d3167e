# -------------------------------------------------------------------
# schemas/edge_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# Response model relayed by the edge service (GET /data1, GET /data2).
#
# This is the edge-side definition of the inner service payload. It is
# declared independently of schemas/inner_schema.py so the edge never
# imports inner service code, but the wire shape is the same:
#
#   {"value": "hi there!", "now": "2024-05-01T10:00:00.123456Z"}
#
# Timestamps are kept in the timezone the inner service sent (no
# conversion to a local zone).
# -------------------------------------------------------------------

from __future__ import annotations

from pydantic import AwareDatetime, BaseModel, ConfigDict


class EdgeResponse(BaseModel):
    """
    Relayed inner service payload.

    Unknown fields are ignored so the inner service may add fields
    without breaking the edge.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    value: str
    now: AwareDatetime
