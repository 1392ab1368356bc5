"""Health check for the bundled application."""

from fastapi import APIRouter, Request

from classic_static import __version__
from classic_static.schemas.system import HealthResponse, PingResponse
from classic_static.utils import fs

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Report the served root and which handler features are on."""
    settings = request.app.state.settings
    return HealthResponse(
        version=__version__,
        root_dir=settings.root_dir,
        listing_enabled=settings.show_dir_contents,
        caching_enabled=settings.browser_cache_enabled,
    )


@router.get("/ping", response_model=PingResponse)
async def ping(request: Request):
    """Check that the static root can still be read."""
    root = request.app.state.settings.root_dir
    readable = await fs.is_readable_directory(root)
    return PingResponse(status="ok" if readable else "degraded", root_readable=readable)
