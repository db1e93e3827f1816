from typing import List, Tuple

# Sent on every HTTP response
SECURITY_HEADERS: List[Tuple[bytes, bytes]] = [
    (b"X-Content-Type-Options", b"nosniff"),
    (b"X-Frame-Options", b"DENY"),
    (b"X-XSS-Protection", b"1; mode=block"),
    (b"Referrer-Policy", b"no-referrer"),
]

# Responses under these prefixes carry tokens or account data
NO_STORE_PREFIXES: Tuple[str, ...] = ("/api/",)


class SecurityHeadersMiddleware:
    """Pure ASGI middleware; avoids BaseHTTPMiddleware buffering the response body."""

    def __init__(self, app, no_store_prefixes: Tuple[str, ...] = NO_STORE_PREFIXES):
        self.app = app
        self.no_store_prefixes = no_store_prefixes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        no_store = scope["path"].startswith(self.no_store_prefixes)

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.extend(SECURITY_HEADERS)
                if no_store:
                    headers.append((b"Cache-Control", b"no-store"))
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_with_headers)
