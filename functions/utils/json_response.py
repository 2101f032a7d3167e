"""
functions/utils/json_response.py

JSON response helpers shared by both services.

Bodies are pretty-printed (indent=2) when the service's `indent_json`
setting is on. The content is identical either way.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class IndentedJSONResponse(JSONResponse):
    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=2,
        ).encode("utf-8")


def model_response(model: BaseModel, *, indent: bool) -> JSONResponse:
    """Serialize a pydantic model into a JSON response (ISO-8601 datetimes)."""
    response_cls = IndentedJSONResponse if indent else JSONResponse
    return response_cls(content=model.model_dump(mode="json"))
