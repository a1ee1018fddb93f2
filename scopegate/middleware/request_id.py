"""Request ID middleware.

Forwards a well-formed X-Request-ID or generates one, exposes it as
``request.state.request_id`` and echoes it on the response. Raw ASGI.
"""

import re
import uuid
from typing import Callable

REQUEST_ID_MAX_LENGTH = 64
_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,%d}$" % REQUEST_ID_MAX_LENGTH)


def _request_id_from(scope: dict, header_name: str) -> str:
    """Incoming id when it is safe to log, else a fresh UUID4."""
    want = header_name.lower().encode()
    for key, value in scope.get("headers", []):
        if key.lower() == want:
            candidate = value.decode("latin-1").strip()
            if _REQUEST_ID_PATTERN.match(candidate):
                return candidate
            break
    return str(uuid.uuid4())


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = _request_id_from(scope, header_name)
        scope.setdefault("state", {})["request_id"] = request_id
        header = (header_name.lower().encode(), request_id.encode())

        async def send_with_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [*message.get("headers", []), header]
            await send(message)

        await app(scope, receive, send_with_id)

    return asgi_app
