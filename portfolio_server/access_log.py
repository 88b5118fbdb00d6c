"""Apache combined-format access logging as ASGI middleware."""

import logging
from datetime import datetime
from typing import FrozenSet, Iterable, Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

access_logger = logging.getLogger("portfolio_server.access")

# Asset fetches that would drown page-level navigation in the log
DEFAULT_SKIP_EXTENSIONS: FrozenSet[str] = frozenset({
    # scripts, styles, source maps
    ".js", ".mjs", ".cjs", ".css", ".map",
    # icons and images
    ".ico", ".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".avif", ".bmp",
    # fonts
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
    # video
    ".mp4", ".webm", ".ogv", ".mov",
    # 3D models, textures and buffers
    ".glb", ".gltf", ".obj", ".fbx", ".stl", ".hdr", ".ktx2", ".bin",
    ".wasm",
})


def should_skip(path: str, skip_extensions: Iterable[str]) -> bool:
    """Case-insensitive suffix match of the URL path against ``skip_extensions``."""
    lowered = path.lower()
    return any(lowered.endswith(ext.lower()) for ext in skip_extensions)


def format_access_line(
    client: str,
    timestamp: datetime,
    request_line: str,
    status: int,
    size: int,
    referer: Optional[str],
    user_agent: Optional[str],
) -> str:
    """Render one Apache combined log line."""
    return '{} - - [{}] "{}" {} {} "{}" "{}"'.format(
        client or "-",
        timestamp.strftime("%d/%b/%Y:%H:%M:%S %z"),
        request_line,
        status,
        size if size else "-",
        referer or "-",
        user_agent or "-",
    )


def _request_line(scope: Scope) -> str:
    raw_path = scope.get("raw_path")
    target = raw_path.decode("latin-1") if raw_path else scope["path"]
    query = scope.get("query_string", b"")
    if query and "?" not in target:
        target = f"{target}?{query.decode('latin-1')}"
    return f"{scope['method']} {target} HTTP/{scope.get('http_version', '1.1')}"


def _header(scope: Scope, name: bytes) -> Optional[str]:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value.decode("latin-1")
    return None


class AccessLogMiddleware:
    """Log one line per completed HTTP request, except for static asset fetches.

    The skip set is fixed when the middleware is constructed.
    """

    def __init__(
        self,
        app: ASGIApp,
        skip_extensions: Iterable[str] = DEFAULT_SKIP_EXTENSIONS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.app = app
        self.skip_extensions = frozenset(ext.lower() for ext in skip_extensions)
        self.logger = logger or access_logger

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or should_skip(scope["path"], self.skip_extensions):
            await self.app(scope, receive, send)
            return

        received_at = datetime.now().astimezone()
        status = 500
        size = 0
        content_length = 0

        async def send_wrapper(message: Message) -> None:
            nonlocal status, size, content_length
            if message["type"] == "http.response.start":
                status = message["status"]
                for key, value in message.get("headers", []):
                    if key.lower() == b"content-length":
                        content_length = int(value)
            elif message["type"] == "http.response.body":
                size += len(message.get("body", b""))
            elif message["type"] == "http.response.pathsend":
                size = content_length
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            client = scope.get("client")
            self.logger.info(
                format_access_line(
                    client=client[0] if client else "-",
                    timestamp=received_at,
                    request_line=_request_line(scope),
                    status=status,
                    size=size,
                    referer=_header(scope, b"referer"),
                    user_agent=_header(scope, b"user-agent"),
                )
            )
