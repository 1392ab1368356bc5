"""Test fixtures: a served directory tree and an async client factory."""

from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from httpx import ASGITransport, AsyncClient

from classic_static.middleware import StaticFilesMiddleware

NEXT_BODY = "handled by next"


def build_app(root: Path, **options) -> FastAPI:
    """A FastAPI app whose only route marks requests the middleware passed on."""
    app = FastAPI()

    @app.api_route("/{path:path}", methods=["GET", "HEAD", "POST", "PUT", "DELETE"])
    async def fallback(path: str):
        return PlainTextResponse(NEXT_BODY, headers={"x-next": "1"})

    app.add_middleware(StaticFilesMiddleware, root=str(root), **options)
    return app


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Served root: a.txt, a sub-directory and an empty directory."""
    root = tmp_path / "site"
    root.mkdir()
    (root / "a.txt").write_text("hi")
    sub = root / "sub"
    sub.mkdir()
    (sub / "note.md").write_text("# note")
    (root / "empty").mkdir()
    return root


@pytest_asyncio.fixture
async def make_client():
    """Factory building a client for a middleware configured with ``options``."""
    clients: list[AsyncClient] = []

    async def _make(root: Path, **options) -> AsyncClient:
        transport = ASGITransport(app=build_app(root, **options))
        c = AsyncClient(transport=transport, base_url="http://test")
        clients.append(c)
        return c

    yield _make

    for c in clients:
        await c.aclose()


@pytest_asyncio.fixture
async def client(site: Path, make_client) -> AsyncClient:
    """Client for ``site`` with default options."""
    return await make_client(site)
