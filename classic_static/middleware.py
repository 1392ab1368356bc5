"""ASGI middleware serving files and directory listings from a root directory."""

from __future__ import annotations

import logging
import os
import stat
from typing import Any

from starlette.requests import Request
from starlette.responses import HTMLResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from classic_static.schemas.options import CallNext, StaticConfig
from classic_static.services.index_matcher import find_index
from classic_static.services.listing import render_listing
from classic_static.services.resolver import Resolution, resolve
from classic_static.services.streamer import serve_file
from classic_static.utils import fs, pages
from classic_static.utils.asgi import NextHandler

logger = logging.getLogger(__name__)


class StaticFilesMiddleware:
    """Serve ``root`` in front of ``app``.

    Requests that are not ours (method not allowed, outside ``url_prefix``,
    under a reserved segment) go to the wrapped app untouched. Everything
    else is answered here: a file, an index file, a listing, or one of the
    fixed 403/404/500 bodies.

    Example:
        app = FastAPI()
        app.add_middleware(
            StaticFilesMiddleware,
            root="/srv/www",
            index=["index.html", re.compile(r"index\\.htm", re.I)],
            urls_reserved=["/api"],
        )
    """

    def __init__(
        self,
        app: ASGIApp,
        root: str | os.PathLike[str] | None = None,
        *,
        config: StaticConfig | None = None,
        **options: Any,
    ) -> None:
        self.app = app
        self.config = config if config is not None else StaticConfig.build(root, **options)
        logger.info(
            "Serving %s at prefix %r (listing=%s, caching=%s)",
            self.config.root,
            self.config.url_prefix or "/",
            self.config.show_dir_contents,
            self.config.browser_cache_enabled,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)

        call_next = NextHandler(self.app, scope, receive, send)
        response = await self.handle(request, call_next)
        if response is None:
            return
        if call_next.response_started:
            logger.error(
                "Dropping %s response for %s, the wrapped app already answered",
                response.status_code,
                request.url.path,
            )
            return
        await response(scope, receive, send)

    async def handle(self, request: Request, call_next: CallNext) -> Response | None:
        """Answer one request; ``None`` means the response was already sent."""
        resolved = resolve(request, self.config)
        if resolved is Resolution.DELEGATE:
            await call_next()
            return None
        if resolved is Resolution.FORBIDDEN:
            return pages.forbidden()

        try:
            st = await fs.stat_path(resolved.fs_path)
        except (OSError, ValueError):
            return pages.not_found()

        if stat.S_ISDIR(st.st_mode):
            if not self.config.show_dir_contents:
                return pages.not_found()
            hit = await find_index(resolved.fs_path, self.config.index)
            if hit is not None:
                return await serve_file(resolved, hit.path, hit.stat, self.config, call_next)
            return HTMLResponse(await render_listing(resolved, self.config))

        if not stat.S_ISREG(st.st_mode):
            return pages.not_found()
        return await serve_file(resolved, resolved.fs_path, st, self.config, call_next)
