"""Map request paths onto files inside the asset root.

Resolution happens in two stages composed by the request handler:
``resolve_static_file`` looks for the requested file, and when that misses
``resolve_fallback`` supplies the SPA entry document.
"""

import errno
from pathlib import Path
from typing import Optional

from portfolio_server.config import ENTRY_DOCUMENT


def _is_inside(candidate: Path, root: Path) -> bool:
    return candidate == root or root in candidate.parents


def resolve_static_file(asset_root: Path, url_path: str) -> Optional[Path]:
    """Return the regular file under ``asset_root`` named by ``url_path``.

    Returns None for paths that escape the root (``..`` segments or
    symlinks pointing outside), dotfiles, and anything that is not an
    existing regular file. A directory resolves to its own index.html.
    """
    if "\x00" in url_path:
        return None

    root = asset_root.resolve()
    relative = url_path.lstrip("/")

    try:
        candidate = (root / relative).resolve()
        if not _is_inside(candidate, root):
            return None
        if any(part.startswith(".") for part in candidate.relative_to(root).parts):
            return None

        if candidate.is_dir():
            candidate = candidate / ENTRY_DOCUMENT

        if candidate.is_file():
            return candidate
    except RuntimeError:
        # Symlink loop (Path.resolve before 3.13)
        return None
    except OSError as exc:
        # Over-long client paths and symlink loops are a miss, not a server fault
        if exc.errno in (errno.ENAMETOOLONG, errno.ELOOP):
            return None
        raise
    return None


def resolve_fallback(asset_root: Path) -> Optional[Path]:
    """Return the SPA entry document if the bundle has one."""
    entry = asset_root.resolve() / ENTRY_DOCUMENT
    if entry.is_file():
        return entry
    return None
