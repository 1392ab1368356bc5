"""System status schemas."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    service: str = "classic-static"
    root_dir: str
    listing_enabled: bool = True
    caching_enabled: bool = True


class PingResponse(BaseModel):
    """Static root reachability."""
    status: str
    root_readable: bool
