"""
Unified error handling middleware.

Any exception that escapes a route becomes a JSON 500 body with a stable
shape. Pure ASGI (not BaseHTTPMiddleware).
"""

import json
import logging
from typing import Any, Dict

from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("autodash.middleware.error_handler")


class ErrorHandlerMiddleware:
    """Turns unhandled exceptions into structured JSON error responses."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            path = scope.get("path", "unknown")
            method = scope.get("method", "unknown")
            logger.exception("Unhandled exception on %s %s: %s", method, path, exc)
            if response_started:
                # Headers are already on the wire; nothing sensible left to send.
                raise
            await send_json_error(send, 500, {
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again.",
                "retryable": False,
                "path": path,
            })


async def send_json_error(send: Send, status: int, payload: Dict[str, Any]) -> None:
    body = json.dumps(payload).encode("utf-8")
    await send({
        "type": "http.response.start",
        "status": status,
        "headers": [
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
        ],
    })
    await send({"type": "http.response.body", "body": body})
