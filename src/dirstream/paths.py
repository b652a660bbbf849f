# Path resolution shared by the listing parser and the file operations.
# Created: 2026-10-12
#
# Canonical paths start with "/", never contain "//" and never end with "/"
# except for the root itself. Every path that enters the service goes through
# normalize_path() so paths derived from a listing and paths used for lookups
# always agree.

from __future__ import annotations

import posixpath
import re
from urllib.parse import quote, unquote

ROOT = "/"

_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(path: str | None) -> str:
    """Return the canonical form of *path*.

    ``.`` and ``..`` segments are collapsed; ``..`` never climbs above the root.
    An empty or missing path is the root.
    """
    if not path:
        return ROOT
    collapsed = _REPEATED_SLASHES.sub("/", "/" + path)
    return posixpath.normpath(collapsed)


def resolve(current_path: str, href: str) -> str:
    """Resolve *href* (absolute or relative) against the directory *current_path*."""
    if href.startswith("/"):
        return normalize_path(href)
    return normalize_path(f"{normalize_path(current_path)}/{href}")


def build_url(base_url: str, path: str, *, directory: bool = False) -> str:
    """Join a canonical *path* onto *base_url*, percent-encoding it.

    A path still holding escapes that don't decode as UTF-8 (the parser keeps
    such hrefs raw, e.g. Latin-1 ``caf%E9.mp4``) is sent with those escapes
    intact, so it addresses the same resource the listing linked to.

    Directory URLs always end with a slash, which is what index-generating
    servers expect (they redirect ``/dir`` to ``/dir/`` otherwise).
    """
    url = base_url.rstrip("/") + _quote_path(normalize_path(path))
    if directory and not url.endswith("/"):
        url += "/"
    return url


def _quote_path(path: str) -> str:
    try:
        unquote(path, errors="strict")
    except UnicodeDecodeError:
        return quote(path, safe="/%")
    return quote(path, safe="/")
