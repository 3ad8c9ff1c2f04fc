# File: tests/test_crawler.py
# Mirror crawler against real local aiohttp sites
from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from urllib.parse import urlsplit

import pytest
import pytest_asyncio
from aiohttp import web

from conftest import PNG_BYTES, counted, serve_app
from mirrorget.crawler.crawler import MirrorCrawler
from mirrorget.crawler.fetcher import ResourceFetcher
from mirrorget.progress import Reporter



def files_under(root: Path) -> set[str]:
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


@pytest.mark.asyncio()
async def test_mirror_two_page_site(two_page_site, http, hits, tmp_path):
    crawler = MirrorCrawler(ResourceFetcher(http, Reporter()))
    session = await crawler.mirror(f"{two_page_site}/index.html", tmp_path)

    root = tmp_path / urlsplit(two_page_site).netloc
    assert session.root == root
    assert files_under(root) == {"index.html", "about.html", "img/logo.png"}
    assert (root / "img" / "logo.png").read_bytes() == PNG_BYTES
    assert hits == {"/index.html": 1, "/about.html": 1, "/img/logo.png": 1}
    assert session.visited == {f"{two_page_site}/index.html", f"{two_page_site}/about.html"}


@pytest.mark.asyncio()
async def test_second_crawl_of_visited_url_is_noop(two_page_site, http, hits, tmp_path):
    crawler = MirrorCrawler(ResourceFetcher(http))
    session = await crawler.mirror(f"{two_page_site}/index.html", tmp_path)
    before = dict(hits)
    visited = set(session.visited)

    await crawler.crawl(session, f"{two_page_site}/index.html")
    await crawler.crawl(session, f"{two_page_site}/about.html#again")

    assert hits == before
    assert session.visited == visited


@pytest.mark.asyncio()
async def test_out_of_scope_seed_link_never_fetched(two_page_site, http, tmp_path):
    crawler = MirrorCrawler(ResourceFetcher(http))
    session = await crawler.mirror(f"{two_page_site}/index.html", tmp_path)
    await crawler.crawl(session, "http://other.invalid/x.html")

    assert "http://other.invalid/x.html" not in session.visited


@pytest_asyncio.fixture
async def broken_site(hits) -> AsyncIterator[str]:
    app = web.Application()

    async def index(_):
        return web.Response(
            text=(
                '<a href="/dead.html">dead</a>'
                '<img src="/missing.png">'
                '<script src="/js/app.js"></script>'
                '<a href="/docs/guide.html">guide</a>'
                '<img src="/photos/big.jpg">'
            ),
            content_type="text/html",
        )

    async def dead(_):
        return web.Response(status=500, text="boom")

    async def missing(_):
        return web.Response(status=404)

    async def script(_):
        return web.Response(text="console.log(1)", content_type="application/javascript")

    async def guide(_):
        return web.Response(text="<p>guide</p>", content_type="text/html")

    async def photo(_):
        return web.Response(body=b"jpeg", content_type="image/jpeg")

    app.router.add_get("/index.html", counted(hits, index))
    app.router.add_get("/dead.html", counted(hits, dead))
    app.router.add_get("/missing.png", counted(hits, missing))
    app.router.add_get("/js/app.js", counted(hits, script))
    app.router.add_get("/docs/guide.html", counted(hits, guide))
    app.router.add_get("/photos/big.jpg", counted(hits, photo))

    async for url in serve_app(app):
        yield url


@pytest.mark.asyncio()
async def test_failures_do_not_abort_mirror(broken_site, http, tmp_path):
    reporter = Reporter()
    crawler = MirrorCrawler(ResourceFetcher(http, reporter), concurrency=3)
    session = await crawler.mirror(f"{broken_site}/index.html", tmp_path)

    root = session.root
    assert files_under(root) == {"index.html", "js/app.js", "docs/guide.html", "photos/big.jpg"}
    statuses = {o.url.removeprefix(broken_site): o.status.value for o in reporter.outcomes}
    assert statuses["/dead.html"] == "http_error"
    assert statuses["/missing.png"] == "http_error"
    assert statuses["/js/app.js"] == "ok"


@pytest.mark.asyncio()
async def test_reject_and_exclude(broken_site, http, hits, tmp_path):
    crawler = MirrorCrawler(ResourceFetcher(http), reject=["jpg", ".png"], exclude=["/docs"])
    session = await crawler.mirror(f"{broken_site}/index.html", tmp_path)

    assert files_under(session.root) == {"index.html", "js/app.js"}
    assert "/photos/big.jpg" not in hits
    assert "/docs/guide.html" not in hits


@pytest_asyncio.fixture
async def malformed_link_site(hits) -> AsyncIterator[str]:
    app = web.Application()

    async def index(_):
        return web.Response(
            text='<a href="http://[::1/x">bad</a><img src="/logo.png">',
            content_type="text/html",
        )

    async def logo(_):
        return web.Response(body=PNG_BYTES, content_type="image/png")

    app.router.add_get("/index.html", counted(hits, index))
    app.router.add_get("/logo.png", counted(hits, logo))

    async for url in serve_app(app):
        yield url


@pytest.mark.asyncio()
async def test_malformed_link_skipped_siblings_fetched(malformed_link_site, http, hits, tmp_path):
    crawler = MirrorCrawler(ResourceFetcher(http))
    session = await crawler.mirror(f"{malformed_link_site}/index.html", tmp_path)

    assert hits == {"/index.html": 1, "/logo.png": 1}
    assert (session.root / "logo.png").read_bytes() == PNG_BYTES
