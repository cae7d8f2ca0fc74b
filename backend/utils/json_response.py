"""
JSON Response mit festen CORS- und No-Cache-Headern
"""

import json
from typing import Any, Optional

from fastapi.responses import JSONResponse, Response

ALLOW_ORIGIN = "*"
ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"
PREFLIGHT_MAX_AGE = 86400  # 24h

JSON_HEADERS = {
    "Access-Control-Allow-Origin": ALLOW_ORIGIN,
    "Cache-Control": "no-cache, no-store, must-revalidate",
}


class EnvelopeResponse(JSONResponse):
    """
    JSONResponse für alle Envelopes: 2-Space-Indent, Unicode unverändert,
    CORS- und No-Cache-Header auf jeder Antwort.
    """

    media_type = "application/json"

    def __init__(self, content: Any, status_code: int = 200, headers: Optional[dict] = None, **kwargs):
        merged = dict(JSON_HEADERS)
        if headers:
            merged.update(headers)
        super().__init__(content, status_code=status_code, headers=merged, **kwargs)

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


def preflight_response() -> Response:
    """Leere 204-Antwort für CORS-Preflight"""
    return Response(
        status_code=204,
        headers={
            "Access-Control-Allow-Origin": ALLOW_ORIGIN,
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
            "Access-Control-Max-Age": str(PREFLIGHT_MAX_AGE),
        },
    )
