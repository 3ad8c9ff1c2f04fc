# File: mirrorget/engine.py
"""mirrorget.engine: Orchestration layer: single fetch, URL list or site mirror."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

from mirrorget.aggregator import FetchReport, aggregate_results
from mirrorget.config import FetchRequest
from mirrorget.crawler.crawler import MirrorCrawler
from mirrorget.crawler.fetcher import ResourceFetcher, build_http_session
from mirrorget.crawler.models import CrawlSession, FetchOutcome
from mirrorget.crawler.paths import split_target
from mirrorget.logger import logger
from mirrorget.progress import DisplayMode, Reporter, make_reporter
from mirrorget.utils import read_url_list

__all__ = ["Engine"]


class Engine:
    """Фасад для CLI и тестов: выбор режима, запуск загрузок и сводка результатов."""

    def __init__(self, request: FetchRequest, reporter: Optional[Reporter] = None) -> None:
        self.request = request
        self.reporter = reporter or make_reporter(self.display_mode, request.log_path)

    @property
    def display_mode(self) -> DisplayMode:
        if self.request.log_to_file:
            return DisplayMode.LOG_FILE
        if self.request.input_file is not None:
            return DisplayMode.BATCH
        return DisplayMode.INTERACTIVE

    def urls(self) -> List[str]:
        if self.request.input_file is not None:
            return read_url_list(self.request.input_file)
        return [self.request.seed_url]

    def start(self) -> FetchReport:
        """Синхронная обёртка над :meth:`run`."""
        return asyncio.run(self.run())

    async def run(self) -> FetchReport:
        req = self.request
        urls = self.urls()
        async with build_http_session(req.user_agent, req.timeout, req.verify_tls) as http:
            fetcher = ResourceFetcher(http, self.reporter, req.rate_limit, req.chunk_size)
            if req.mirror:
                await self._mirror(fetcher)
            else:
                for url in urls:
                    await self._fetch_one(fetcher, url, single=len(urls) == 1)
        return aggregate_results(self.reporter.outcomes)

    async def _mirror(self, fetcher: ResourceFetcher) -> CrawlSession:
        req = self.request
        crawler = MirrorCrawler(fetcher, req.reject, req.exclude, req.concurrency)
        try:
            return await crawler.mirror(req.seed_url, req.download_path)
        except OSError as exc:
            logger.error("Cannot create mirror directory under %s: %s", req.download_path, exc)
            raise

    async def _fetch_one(self, fetcher: ResourceFetcher, url: str, single: bool) -> FetchOutcome:
        req = self.request
        session = CrawlSession.for_seed(url, Path(req.download_path))
        file_name = split_target(url).file_name
        if single and req.output_file_name:
            file_name = req.output_file_name
        outcome = await fetcher.fetch(session, url, file_name, session.root)
        if not outcome.ok:
            logger.warning("Error downloading %s: %s", url, outcome.error)
        return outcome
