"""Static asset server for the prebuilt portfolio bundle.

Serves files from the asset root and answers every other path with
index.html so client-side routes survive a reload.

Run:
    portfolio-server                 # PORT=3000, ASSET_ROOT=./dist
    PORT=8080 portfolio-server
"""

import logging
import os
import socket
import sys
from pathlib import Path
from typing import Iterable

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse

from portfolio_server.access_log import DEFAULT_SKIP_EXTENSIONS, AccessLogMiddleware
from portfolio_server.config import Settings, load_settings
from portfolio_server.errors import (
    AssetReadError,
    BindError,
    ConfigurationError,
    NotFoundError,
    RequestError,
    StartupError,
)
from portfolio_server.logging_config import build_log_config
from portfolio_server.media import guess_media_type
from portfolio_server.resolver import resolve_fallback, resolve_static_file
from portfolio_server.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def _stat_readable(path: Path) -> os.stat_result:
    """Stat a file through an open handle so unreadable files fail here, not mid-stream."""
    with open(path, "rb") as fh:
        return os.fstat(fh.fileno())


def create_app(
    settings: Settings,
    skip_extensions: Iterable[str] = DEFAULT_SKIP_EXTENSIONS,
) -> FastAPI:
    """Build the ASGI application serving ``settings.ASSET_ROOT``."""
    asset_root = settings.ASSET_ROOT

    app = FastAPI(
        title="Portfolio Static Server",
        version="1.0.0",
        # The catch-all owns every path, including /docs
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    if settings.ACCESS_LOG:
        app.add_middleware(AccessLogMiddleware, skip_extensions=frozenset(skip_extensions))

    @app.exception_handler(RequestError)
    async def request_error_handler(request: Request, exc: RequestError):
        body = ErrorResponse(status_code=exc.status_code, detail=exc.detail)
        return JSONResponse(body.model_dump(), status_code=exc.status_code)

    # SPA catch-all: a real file if one matches, otherwise index.html
    @app.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
    def serve_asset(full_path: str):
        try:
            path = resolve_static_file(asset_root, full_path)
            if path is None:
                path = resolve_fallback(asset_root)
            if path is None:
                raise NotFoundError(full_path)
            stat_result = _stat_readable(path)
        except OSError as e:
            logger.error(f"Failed to read asset for /{full_path}: {e}")
            raise AssetReadError(full_path) from e

        return FileResponse(
            path,
            stat_result=stat_result,
            media_type=guess_media_type(path),
        )

    return app


def bind_socket(host: str, port: int) -> socket.socket:
    """Create, bind and listen, raising BindError if the address is unavailable."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        if sys.platform != "win32":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(2048)
    except OSError as e:
        sock.close()
        raise BindError(f"Could not bind to {host}:{port}: {e.strerror or e}") from e
    return sock


def start(settings: Settings) -> None:
    """Bind the listener and serve until interrupted."""
    if not settings.ASSET_ROOT.is_dir():
        raise ConfigurationError(f"Asset root {settings.ASSET_ROOT} is not a directory")

    sock = bind_socket(settings.HOST, settings.PORT)
    try:
        config = uvicorn.Config(
            create_app(settings),
            log_config=build_log_config(settings.LOG_LEVEL),
            log_level=settings.LOG_LEVEL,
            access_log=False,
            timeout_keep_alive=settings.KEEP_ALIVE_TIMEOUT,
            timeout_graceful_shutdown=settings.SHUTDOWN_TIMEOUT,
        )
        server = uvicorn.Server(config)

        if not settings.entry_document.is_file():
            logger.warning(f"{settings.entry_document} is missing; unmatched paths will return 404")

        port = sock.getsockname()[1]
        print(f"Serving dist from {settings.ASSET_ROOT} on http://localhost:{port}")
        server.run(sockets=[sock])
    finally:
        sock.close()


def main() -> None:
    try:
        start(load_settings())
    except StartupError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
