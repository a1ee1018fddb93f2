"""Request context middleware.

Reads the organization, branch and team headers, rejects malformed ids
with 400, and stores the unverified RequestContext in
``scope["state"]["raw_context"]``. Access checks and branch validation
happen later, in the get_request_context dependency, once the caller is
authenticated. Raw ASGI (no BaseHTTPMiddleware).
"""

import json
import re
from typing import Callable

from scopegate.core.constants import SCOPE_ID_MAX_LENGTH
from scopegate.core.request_context import RequestContext

CONTEXT_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1," + str(SCOPE_ID_MAX_LENGTH) + r"}$")


def _get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


async def _reject(send: Callable, header: str) -> None:
    body = json.dumps(
        {
            "error": "INVALID_CONTEXT_HEADER",
            "message": f"Invalid {header} header",
            "details": {"header": header},
        }
    ).encode()
    await send(
        {
            "type": "http.response.start",
            "status": 400,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(body)).encode()),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})


def ContextMiddleware(
    app: Callable,
    organization_header: str = "X-Organization-Id",
    branch_header: str = "X-Branch-Id",
    team_header: str = "X-Team-Id",
) -> Callable:
    """Parse context headers into scope state. Empty headers count as absent."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        values: dict[str, str | None] = {}
        for field, header in (
            ("organization_id", organization_header),
            ("branch_id", branch_header),
            ("team_id", team_header),
        ):
            raw = (_get_header(scope, header) or "").strip()
            if raw and not CONTEXT_ID_PATTERN.match(raw):
                await _reject(send, header)
                return
            values[field] = raw or None
        scope.setdefault("state", {})["raw_context"] = RequestContext(**values)
        await app(scope, receive, send)

    return asgi_app
