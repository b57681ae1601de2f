"""HTTP method override for HTML forms.

Browsers only submit GET and POST. A POST carrying ``_method=PUT|PATCH|DELETE``
(urlencoded form field, query parameter, or ``X-HTTP-Method-Override``
header) is rewritten before routing so it reaches the matching route.

Multipart bodies are not inspected; multipart forms pass ``_method`` in the
query string instead.
"""

from urllib.parse import parse_qs

from starlette.types import ASGIApp, Message, Receive, Scope, Send

OVERRIDABLE = frozenset({"PUT", "PATCH", "DELETE"})
FORM_CONTENT_TYPE = b"application/x-www-form-urlencoded"


class MethodOverrideMiddleware:
    """Pure ASGI middleware rewriting ``scope["method"]`` for POST requests."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "POST":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        override = headers.get(b"x-http-method-override", b"").decode("latin-1")
        if not override:
            query = parse_qs(scope.get("query_string", b"").decode("latin-1"))
            override = query.get("_method", [""])[0]

        content_type = headers.get(b"content-type", b"")
        if not override and content_type.startswith(FORM_CONTENT_TYPE):
            body, receive = await self._buffer(receive)
            form = parse_qs(body.decode("latin-1"))
            override = form.get("_method", [""])[0]

        method = override.upper()
        if method in OVERRIDABLE:
            scope = {**scope, "method": method}
        await self.app(scope, receive, send)

    @staticmethod
    async def _buffer(receive: Receive) -> tuple[bytes, Receive]:
        """Read the whole body and return a receive callable that replays it."""
        chunks: list[bytes] = []
        more_body = True
        while more_body:
            message = await receive()
            chunks.append(message.get("body", b""))
            more_body = message.get("more_body", False)
        body = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        return body, replay
