# mirrorget/crawler/crawler.py
"""
Recursive same-domain site mirroring.

Pages (paths ending in ``.html``) are recursed into depth-first; every other
link is saved as a leaf asset. The :class:`CrawlSession` visited set is the
only termination guarantee: a server that mints unbounded distinct URLs
(e.g. ever-changing query strings) under the same host will not terminate.
"""
from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import List, Sequence
from urllib.parse import urlsplit

from mirrorget.crawler.errors import MalformedURLError
from mirrorget.crawler.fetcher import ResourceFetcher
from mirrorget.crawler.link_extractor import extract_refs
from mirrorget.crawler.models import CrawlSession, FetchOutcome, FetchStatus
from mirrorget.crawler.paths import canonical_url, domain_of, is_fetchable, is_page_url, resolve, split_target

__all__ = ("MirrorCrawler",)


class MirrorCrawler:
    """Mirrors one host into ``<download_path>/<host>/``."""

    def __init__(
        self,
        fetcher: ResourceFetcher,
        reject: Sequence[str] = (),
        exclude: Sequence[str] = (),
        concurrency: int = 1,
    ) -> None:
        self.fetcher = fetcher
        self.reject = tuple(s.lower().lstrip(".") for s in reject if s)
        self.exclude = tuple("/" + d.strip("/") for d in exclude if d.strip("/"))
        self.concurrency = max(1, concurrency)
        self.logger = logging.getLogger("mirrorget")
        self._slots = asyncio.Semaphore(self.concurrency)

    async def mirror(self, seed_url: str, download_path: Path | str = ".") -> CrawlSession:
        """Create the mirror root and crawl from *seed_url*.

        Failing to create the root directory is the only error raised here.
        """
        root = Path(download_path, domain_of(seed_url))
        root.mkdir(parents=True, exist_ok=True)
        session = CrawlSession.for_seed(seed_url, root)

        self.logger.info("Mirroring %s into %s", seed_url, root)
        start = time.monotonic()
        await self.crawl(session, seed_url)
        self.logger.info(
            "Mirror finished: %d pages, %d assets in %.2f s",
            len(session.visited),
            len(session.assets),
            time.monotonic() - start,
        )
        return session

    async def crawl(self, session: CrawlSession, url: str) -> None:
        url = canonical_url(url)
        if self._excluded(url) or not session.claim_page(url):
            return

        outcome = await self._save(session, url, keep_body=True)
        if not outcome.ok:
            self.logger.warning("Error downloading %s: %s", url, outcome.error)
            return
        if outcome.body is None:
            return

        assets: List[str] = []
        for ref in extract_refs(outcome.body):
            try:
                link = resolve(url, ref)
            except MalformedURLError as exc:
                self.logger.debug("Skipping link: %s", exc)
                continue
            if not is_fetchable(link):
                self.logger.debug("Skipping non-http link %s", link)
                continue
            link = canonical_url(link)
            if is_page_url(link):
                await self.crawl(session, link)
            elif self._rejected(link) or self._excluded(link):
                self.logger.debug("Skipping rejected asset %s", link)
            elif session.claim_asset(link):
                assets.append(link)

        if assets:
            await asyncio.gather(*(self._fetch_asset(session, link) for link in assets))

    async def _fetch_asset(self, session: CrawlSession, url: str) -> None:
        async with self._slots:
            outcome = await self._save(session, url)
        if outcome.status is FetchStatus.SCOPE_ERROR:
            self.logger.debug("Out of scope asset %s", url)
        elif not outcome.ok:
            self.logger.warning("Error downloading %s: %s", url, outcome.error)

    async def _save(self, session: CrawlSession, url: str, keep_body: bool = False) -> FetchOutcome:
        target = split_target(url)
        return await self.fetcher.fetch(
            session,
            url,
            target.file_name,
            Path(session.root, target.output_dir),
            keep_body=keep_body,
        )

    def _rejected(self, url: str) -> bool:
        if not self.reject:
            return False
        name = split_target(url).file_name.lower()
        return any(name.endswith("." + suffix) for suffix in self.reject)

    def _excluded(self, url: str) -> bool:
        if not self.exclude:
            return False
        path = urlsplit(url).path or "/"
        return any(path == d or path.startswith(d + "/") for d in self.exclude)
