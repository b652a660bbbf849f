# Directory index parser: turns an upstream HTML listing into Entry objects.
# Created: 2026-10-12
#
# Listing markup is untrusted and differs between servers (nginx, Apache,
# lighttpd, hand-written pages). The parser never raises: a line it cannot
# understand is dropped and the remaining lines are still returned.
#
# Primary path: the first <pre> block, one entry per line, e.g. nginx:
#   <a href="Movies/">Movies/</a>            07-Dec-2025 10:36       -
#   <a href="clip.mp4">clip.mp4</a>          07-Dec-2025 10:40   1048576
# Fallback: every <a href> in the document, without size or date.

from __future__ import annotations

import html
import logging
import posixpath
import re
from datetime import datetime
from email.utils import parsedate_to_datetime
from urllib.parse import unquote

from bs4 import BeautifulSoup

from dirstream.listing.models import Entry
from dirstream.paths import normalize_path, resolve

logger = logging.getLogger(__name__)

_PRE_BLOCK = re.compile(r"<pre\b[^>]*>(.*?)(?:</pre\s*>|\Z)", re.IGNORECASE | re.DOTALL)

# First *closed* anchor on a line. The text may not contain another "<a" so an
# unclosed anchor never swallows the next one.
_ANCHOR = re.compile(
    r"""<a\b[^>]*?\bhref\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>"']+))[^>]*>"""
    r"""((?:(?!<a[\s>]).)*?)</a\s*>""",
    re.IGNORECASE,
)
_TAG = re.compile(r"<[^>]*>")
_EXTERNAL_HREF = re.compile(r"^(?:[a-z][a-z0-9+.\-]*:)?//|^(?:mailto|javascript|data|tel):", re.I)

_INDEX_DATE = re.compile(r"^(\d{1,2})-([a-z]{3})-(\d{4})\s+(\d{1,2}):(\d{2})$", re.IGNORECASE)
_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
_GENERIC_DATE_FORMATS = (
    "%Y-%m-%d %H:%M",  # Apache fancy index
    "%Y-%m-%d %H:%M:%S",
    "%Y-%b-%d %H:%M:%S",  # lighttpd
    "%d-%b-%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
)

_LEADING_INT = re.compile(r"^\d+")
_HUMAN_SIZE = re.compile(r"^(\d+(?:\.\d+)?)([KMGT])i?B?$", re.IGNORECASE)
_SIZE_UNITS = {"K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}

_TRUNCATION_MARKER = "..>"


def parse_listing(markup: str, current_path: str) -> list[Entry]:
    """Parse an HTML directory index into entries, in document order.

    Args:
        markup: Raw HTML of the index page.
        current_path: Canonical path of the directory the page describes,
            used to resolve relative hrefs.

    Returns:
        The entries that could be extracted. An empty list is a valid result.
    """
    if not markup:
        return []

    block = _PRE_BLOCK.search(markup)
    if block is None:
        logger.debug("No <pre> block in listing for %s, scanning all anchors", current_path)
        entries = _parse_anchors(markup, current_path)
    else:
        entries = _parse_pre_block(block.group(1), current_path)

    logger.debug("Parsed %d entries from directory listing of %s", len(entries), current_path)
    return entries


def _parse_pre_block(block: str, current_path: str) -> list[Entry]:
    entries: list[Entry] = []
    for line in block.splitlines():
        if not line.strip():
            continue
        try:
            entry = _parse_line(line, current_path)
        except Exception:
            logger.debug("Skipping unparseable listing line: %r", line, exc_info=True)
            continue
        if entry is not None:
            entries.append(entry)
    return entries


def _parse_line(line: str, current_path: str) -> Entry | None:
    match = _ANCHOR.search(line)
    if match is None:
        return None

    raw_href = next(g for g in match.group(1, 2, 3) if g is not None)
    href = _decode(html.unescape(raw_href.strip()))
    text = _decode(html.unescape(_TAG.sub("", match.group(4)))).strip()

    if _is_parent_link(href, text) or _is_foreign_href(href):
        return None

    is_dir = href.endswith("/") or text.endswith("/")
    clean_href = href.rstrip("/")
    if not clean_href:
        return None
    path = resolve(current_path, clean_href)
    if _is_self_link(path, current_path):
        return None
    name = _display_name(text.removesuffix("/"), clean_href)

    tokens = _TAG.sub(" ", line[match.end() :]).split()
    modified: datetime | None = None
    size = 0
    if len(tokens) >= 2:
        modified = parse_modified(tokens[0], tokens[1])
        if len(tokens) >= 3:
            size = parse_size(tokens[-1])
        elif tokens[1] != "-":
            # Date-only line: the time token doubles as the size token, so
            # "10:36" yields 10. Kept as the upstream-observed behaviour.
            size = _leading_int(tokens[1])

    return Entry(
        name=name,
        type="directory" if is_dir else "file",
        path=path,
        size=size,
        modified=modified,
    )


def _parse_anchors(markup: str, current_path: str) -> list[Entry]:
    soup = BeautifulSoup(markup, "html.parser")
    entries: list[Entry] = []
    for link in soup.find_all("a", href=True):
        try:
            href = _decode(str(link["href"]).strip())
            text = link.get_text(strip=True)
            if _is_parent_link(href, text) or _is_foreign_href(href):
                continue
            clean_href = href.rstrip("/")
            if not clean_href:
                continue
            path = resolve(current_path, clean_href)
            if _is_self_link(path, current_path):
                continue
            entries.append(
                Entry(
                    name=_display_name(_decode(text).removesuffix("/"), clean_href),
                    type="directory" if href.endswith("/") else "file",
                    path=path,
                )
            )
        except Exception:
            logger.debug("Skipping unparseable anchor: %r", link, exc_info=True)
    return entries


def parse_modified(date_token: str, time_token: str) -> datetime | None:
    """Parse the modification time printed next to an entry.

    Understands the nginx ``DD-Mon-YYYY HH:MM`` layout first, then a handful of
    other index formats. Returns None instead of raising.
    """
    value = f"{date_token} {time_token}"
    match = _INDEX_DATE.match(value)
    if match:
        day, month, year, hour, minute = match.groups()
        month_num = _MONTHS.get(month.lower())
        if month_num is not None:
            try:
                return datetime(int(year), month_num, int(day), int(hour), int(minute))
            except ValueError:
                return None

    for fmt in _GENERIC_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None


def parse_size(token: str) -> int:
    """Parse the size column: ``-`` or garbage is 0, ``1234`` is 1234 bytes.

    Human-readable sizes (``1.2G``, ``603M``) as printed by Apache and
    ``autoindex_exact_size off`` are converted to bytes.
    """
    token = token.strip()
    if not token or token == "-":
        return 0
    if token.isdecimal():
        return int(token)
    human = _HUMAN_SIZE.match(token)
    if human:
        return int(float(human.group(1)) * _SIZE_UNITS[human.group(2).upper()])
    return _leading_int(token)


def _leading_int(token: str) -> int:
    match = _LEADING_INT.match(token)
    return int(match.group()) if match else 0


def _decode(value: str) -> str:
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def _is_parent_link(href: str, text: str) -> bool:
    return (
        href in ("../", "..")
        or text in ("../", "..")
        or text.lower() == "parent directory"
    )


def _is_self_link(path: str, current_path: str) -> bool:
    # "./" or an absolute link back to the listed directory itself.
    return path == normalize_path(current_path)


def _is_foreign_href(href: str) -> bool:
    # Column-sort links (?C=N;O=D), in-page anchors and other sites.
    return href.startswith(("?", "#")) or bool(_EXTERNAL_HREF.match(href))


def _display_name(text: str, clean_href: str) -> str:
    if not text or text.endswith(_TRUNCATION_MARKER):
        return posixpath.basename(clean_href)
    return text
