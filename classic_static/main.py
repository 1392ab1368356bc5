"""classic-static FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from classic_static import __version__
from classic_static.config import Settings, get_settings
from classic_static.middleware import StaticFilesMiddleware
from classic_static.schemas.options import StaticConfig

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory: API routes behind the static file middleware.

    The API prefix should be listed in ``urls_reserved`` so the middleware
    hands those requests to the router.
    """
    from classic_static.api.routes import api_router

    settings = settings or get_settings()
    # Built here so that invalid options fail at startup, not on first request
    static_config = StaticConfig.build(settings.root_dir, **settings.handler_options())

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        _setup_logging(settings.log_level)
        if not Path(settings.root_dir).is_dir():
            logger.warning("Static root %s does not exist, every file request will 404", settings.root_dir)
        logger.info("classic-static v%s started, serving %s", __version__, settings.root_dir)
        try:
            yield
        finally:
            logger.info("classic-static shutting down")

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
    )
    app.state.settings = settings

    app.include_router(api_router, prefix=settings.api_prefix)
    app.add_middleware(StaticFilesMiddleware, config=static_config)

    return app


def run(**kwargs: Any) -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "classic_static.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()
