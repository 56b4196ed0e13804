"""Response error extraction for load test observability.

Parses Eyecart API error responses into human-readable messages.
Handles two response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Cart errors (400/403/404/409/503): {"error": {"code": "...", "message": "...", ...}}
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a compact error message for Locust failure messages and log lines."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            code = error.get("code", "error")
            message = error.get("message", "")
            return f"{code}: {message}" if message else code
        return str(error)

    return str(body)[:300]


def is_busy(response: Response) -> bool:
    """A 503 from the per-user cart lock, which clients may retry."""
    return response.status_code == 503
