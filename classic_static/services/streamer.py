"""File responses: template hand-off, cache negotiation, streamed body."""

from __future__ import annotations

import inspect
import logging
import mimetypes
import os
from typing import AsyncIterator
from urllib.parse import quote

import anyio
from anyio import AsyncFile
from starlette.responses import Response, StreamingResponse

from classic_static.schemas.options import CallNext, StaticConfig
from classic_static.services import cache
from classic_static.services.resolver import ResolvedRequest
from classic_static.utils import fs, pages

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024  # 64 KB

DEFAULT_MEDIA_TYPE = "application/octet-stream"


def file_extension(path: str) -> str:
    """Extension without the dot; dot-files such as ``.gitignore`` have none."""
    return os.path.splitext(path)[1][1:]


def guess_media_type(path: str) -> str | None:
    return mimetypes.guess_type(path)[0]


def content_disposition(path: str) -> str:
    """``inline`` disposition naming only the final path segment."""
    filename = os.path.basename(path)
    escaped = filename.replace('"', '\\"')
    try:
        escaped.encode("latin-1")
    except UnicodeEncodeError:
        fallback = escaped.encode("ascii", "replace").decode("ascii")
        return f"inline; filename=\"{fallback}\"; filename*=utf-8''{quote(filename)}"
    return f'inline; filename="{escaped}"'


async def render_template(
    resolved: ResolvedRequest, path: str, config: StaticConfig, call_next: CallNext
) -> Response | None:
    """Hand the file over to the configured renderer.

    Renderer failures are logged and turned into a 500, unless the wrapped
    app has already started its response; nothing propagates to the host
    application.
    """
    try:
        result = config.template.render(resolved.request, call_next, path)
        if inspect.isawaitable(result):
            result = await result
    except Exception:
        logger.exception("Template rendering failed for %s", path)
        if getattr(call_next, "response_started", False):
            return None
        return pages.template_error()
    return result


async def _iter_file(
    file: AsyncFile[bytes], first_chunk: bytes, path: str
) -> AsyncIterator[bytes]:
    try:
        chunk = first_chunk
        while chunk:
            yield chunk
            chunk = await file.read(CHUNK_SIZE)
    except OSError as e:
        # Headers are already out, the only option left is cutting the body short
        logger.error("Stream error while reading %s: %s", path, e)
    finally:
        await file.aclose()


async def serve_file(
    resolved: ResolvedRequest,
    path: str,
    st: os.stat_result,
    config: StaticConfig,
    call_next: CallNext,
) -> Response | None:
    """Serve ``path`` whose metadata ``st`` is already known.

    Returns ``None`` only when a template renderer produced the response
    on its own.
    """
    if config.template is not None and config.template.enabled:
        ext = file_extension(path)
        if ext and ext in config.template.ext:
            return await render_template(resolved, path, config, call_next)

    decision = cache.negotiate(resolved.request.headers, st, config)
    if decision.not_modified:
        return Response(status_code=304, headers=decision.headers)

    if not await fs.is_readable(path):
        logger.warning("File no longer readable: %s", path)
        return pages.not_found()

    headers = {
        **decision.headers,
        "content-length": str(st.st_size),
        "content-disposition": content_disposition(path),
    }
    media_type = guess_media_type(path) or DEFAULT_MEDIA_TYPE

    if resolved.request.method == "HEAD":
        return Response(status_code=200, headers=headers, media_type=media_type)

    try:
        file = await anyio.open_file(path, "rb")
    except OSError as e:
        logger.error("Cannot open %s: %s", path, e)
        return pages.stream_error()
    try:
        first_chunk = await file.read(CHUNK_SIZE)
    except OSError as e:
        logger.error("Cannot read %s: %s", path, e)
        await file.aclose()
        return pages.stream_error()

    return StreamingResponse(
        _iter_file(file, first_chunk, path),
        status_code=200,
        headers=headers,
        media_type=media_type,
    )
