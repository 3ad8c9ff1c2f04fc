# File: tests/conftest.py
from collections.abc import AsyncIterator, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import ClientSession, web

from mirrorget.crawler.fetcher import build_http_session
from mirrorget.crawler.models import CrawlSession

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 8


async def serve_app(app: web.Application) -> AsyncIterator[str]:
    """Start *app* on a free localhost port, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


@pytest.fixture()
def hits() -> dict[str, int]:
    """Request counter per path, shared with the test-server handlers."""
    return {}


def counted(hits: dict[str, int], handler: Callable) -> Callable:
    async def wrapper(request: web.Request) -> web.StreamResponse:
        hits[request.path] = hits.get(request.path, 0) + 1
        return await handler(request)

    return wrapper


@pytest_asyncio.fixture
async def two_page_site(hits) -> AsyncIterator[str]:
    """
    /index.html -> /about.html (twice), img/logo.png (twice)
    /about.html -> back to /index.html only
    """
    app = web.Application()

    async def index(_):
        return web.Response(
            text=(
                '<html><head><link rel="stylesheet" href="#top"></head><body>'
                '<a href="/about.html">About</a>'
                '<a href="about.html#team">Team</a>'
                '<img src="img/logo.png">'
                '<img src="/img/logo.png">'
                '<a href="mailto:me@example.com">Mail</a>'
                '<a href="http://other.invalid/x.html">Elsewhere</a>'
                "</body></html>"
            ),
            content_type="text/html",
        )

    async def about(_):
        return web.Response(
            text='<html><body><a href="index.html">Home</a></body></html>',
            content_type="text/html",
        )

    async def logo(_):
        return web.Response(body=PNG_BYTES, content_type="image/png")

    app.router.add_get("/index.html", counted(hits, index))
    app.router.add_get("/about.html", counted(hits, about))
    app.router.add_get("/img/logo.png", counted(hits, logo))

    async for url in serve_app(app):
        yield url


@pytest.fixture()
def make_session(tmp_path: Path) -> Callable[[str], CrawlSession]:
    def factory(url: str) -> CrawlSession:
        return CrawlSession.for_seed(url, tmp_path)

    return factory


@pytest_asyncio.fixture
async def http() -> AsyncIterator[ClientSession]:
    async with build_http_session("TestAgent/1.0", timeout=5.0) as session:
        yield session
