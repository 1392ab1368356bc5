"""Request resolution: prefix matching, reserved paths, traversal containment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote, unquote

from starlette.requests import Request

from classic_static.schemas.options import StaticConfig

logger = logging.getLogger(__name__)


class Resolution(Enum):
    DELEGATE = "delegate"  # not ours: hand over to the wrapped app
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class ResolvedRequest:
    """Per-request context shared by the dispatcher, streamer and renderer.

    Attributes:
        request: The incoming Starlette request.
        href_path: Encoded request path, prefix included, without trailing
            slash (``/`` for the site root).
        relative_path: Encoded path with the URL prefix stripped (``/`` at
            the configured root).
        fs_path: Absolute, normalised filesystem path inside the root.
    """

    request: Request
    href_path: str
    relative_path: str
    fs_path: str

    @property
    def at_root(self) -> bool:
        return self.relative_path == "/"

    @property
    def display_path(self) -> str:
        return unquote(self.relative_path)


def request_path(request: Request, use_original_url: bool = True) -> str:
    """Percent-encoded path of the request, without query string.

    ``raw_path`` is what the client sent; ``scope["path"]`` reflects any
    rewrite done by an upstream middleware and is already decoded.
    """
    raw = request.scope.get("raw_path") if use_original_url else None
    if raw:
        return raw.decode("latin-1").split("?", 1)[0]
    return quote(request.scope.get("path") or "/", safe="/")


def is_within(root: str, path: str) -> bool:
    if path == root:
        return True
    base = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(base)


def resolve(request: Request, config: StaticConfig) -> ResolvedRequest | Resolution:
    """Map a request onto a filesystem path under ``config.root``.

    Returns ``Resolution.DELEGATE`` when the request is outside this
    handler's scope and ``Resolution.FORBIDDEN`` when the decoded path
    escapes the root.
    """
    if request.method not in config.method:
        return Resolution.DELEGATE

    path = request_path(request, config.use_original_url)
    if path.endswith("/"):
        path = path[:-1]
    path = path or "/"

    # Compare encoded segments, an encoded slash must not split a segment
    segments = path.split("/")
    prefix_segments = config.url_prefix.split("/")
    if segments[: len(prefix_segments)] != prefix_segments:
        return Resolution.DELEGATE

    if config.url_prefix:
        relative = "/" + "/".join(segments[len(prefix_segments):])
    else:
        relative = path

    first_segment = relative.split("/")[1]
    if first_segment in config.reserved_segments:
        return Resolution.DELEGATE

    requested = "" if relative == "/" else unquote(relative)
    fs_path = os.path.normpath(os.path.join(config.root, requested.lstrip("/")))
    if not is_within(config.root, fs_path):
        logger.warning("Blocked path traversal attempt: %s -> %s", path, fs_path)
        return Resolution.FORBIDDEN

    return ResolvedRequest(
        request=request,
        href_path=path,
        relative_path=relative,
        fs_path=fs_path,
    )
