"""Conditional-request negotiation (ETag / Last-Modified / 304)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import timezone
from email.utils import formatdate, parsedate_to_datetime
from typing import Mapping

from classic_static.schemas.options import StaticConfig

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "cache-control": "no-cache, no-store, must-revalidate",
    "pragma": "no-cache",
    "expires": "0",
}


@dataclass(frozen=True)
class CacheDecision:
    headers: dict[str, str] = field(default_factory=dict)
    not_modified: bool = False


def mtime_ms(st: os.stat_result) -> int:
    return st.st_mtime_ns // 1_000_000


def make_etag(st: os.stat_result) -> str:
    """Validator token: quoted ``<mtime in ms>-<size in bytes>``."""
    return f'"{mtime_ms(st)}-{st.st_size}"'


def parse_http_date(value: str) -> int | None:
    """Parse an HTTP date into epoch milliseconds, None if unparseable."""
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def negotiate(
    request_headers: Mapping[str, str], st: os.stat_result, config: StaticConfig
) -> CacheDecision:
    """Compute caching headers for a file and decide between 200 and 304.

    With caching disabled only anti-cache headers are returned and the
    request is never answered with 304.
    """
    if not config.browser_cache_enabled:
        return CacheDecision(headers=dict(NO_CACHE_HEADERS))

    etag = make_etag(st)
    headers = {
        "etag": etag,
        "last-modified": formatdate(st.st_mtime, usegmt=True),
        "cache-control": f"public, max-age={config.browser_cache_max_age}, must-revalidate",
    }

    if_none_match = request_headers.get("if-none-match")
    if if_none_match and if_none_match == etag:
        return CacheDecision(headers=headers, not_modified=True)

    if_modified_since = request_headers.get("if-modified-since")
    if if_modified_since:
        client_ms = parse_http_date(if_modified_since)
        # Last-Modified has whole-second resolution
        if client_ms is not None and (mtime_ms(st) // 1000) * 1000 <= client_ms:
            return CacheDecision(headers=headers, not_modified=True)
        if client_ms is None:
            logger.debug("Ignoring unparseable If-Modified-Since: %r", if_modified_since)

    return CacheDecision(headers=headers)
