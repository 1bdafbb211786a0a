"""
MODULE: api.middleware
RESPONSIBILITY: Request body size limit.
ALLOWED: starlette.
FORBIDDEN: Business logic.
ERRORS: HTTPException(413).

Pure ASGI middleware: rejects oversized bodies by Content-Length up front and
cuts off streamed bodies once they pass the limit.
"""

from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

LIMITED_METHODS = frozenset({"POST", "PUT", "PATCH"})
BODY_TOO_LARGE_MESSAGE = "request body too large"


class MaxBodySizeMiddleware:
    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in LIMITED_METHODS:
            await self.app(scope, receive, send)
            return

        content_length = dict(scope["headers"]).get(b"content-length")
        if content_length is not None:
            try:
                too_large = int(content_length) > self.max_bytes
            except ValueError:
                response = JSONResponse({"error": "invalid Content-Length header"}, status_code=400)
                await response(scope, receive, send)
                return
            if too_large:
                response = JSONResponse({"error": BODY_TOO_LARGE_MESSAGE}, status_code=413)
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise HTTPException(status_code=413, detail=BODY_TOO_LARGE_MESSAGE)
            return message

        await self.app(scope, limited_receive, send)
