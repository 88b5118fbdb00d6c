"""Content-Type lookup for files in the built bundle."""

import mimetypes
from pathlib import Path

DEFAULT_MEDIA_TYPE = "application/octet-stream"

# Types the platform table is missing or gets wrong on some hosts
# (Windows registry overrides, minimal containers without /etc/mime.types).
BUNDLE_MEDIA_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".map": "application/json",
    ".webmanifest": "application/manifest+json",
    ".wasm": "application/wasm",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".ico": "image/x-icon",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".glb": "model/gltf-binary",
    ".gltf": "model/gltf+json",
    ".hdr": "image/vnd.radiance",
    ".ktx2": "image/ktx2",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}


def guess_media_type(path: Path) -> str:
    media_type = BUNDLE_MEDIA_TYPES.get(path.suffix.lower())
    if media_type is None:
        media_type, _ = mimetypes.guess_type(path.name)
    return media_type or DEFAULT_MEDIA_TYPE
