# mirrorget/crawler/fetcher.py
"""
Fetcher module: one HTTP GET streamed to disk under a rate limit, with telemetry.
"""
from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import IO, Optional

from aiohttp import ClientError, ClientPayloadError, ClientResponse, ClientSession, ClientTimeout, TCPConnector

from mirrorget.crawler.errors import FetchError, HttpError, ScopeError, SizeMismatchError, StorageError
from mirrorget.crawler.models import CrawlSession, FetchOutcome, FetchStatus, TransferProgress
from mirrorget.crawler.throttle import RateLimiter
from mirrorget.progress import Reporter

DEFAULT_CHUNK_SIZE = 1024

logger = logging.getLogger("mirrorget")


def build_http_session(
    user_agent: str,
    timeout: float = 30.0,
    verify_tls: bool = True,
) -> ClientSession:
    """ClientSession with the fixed client identity; TLS checks are on unless opted out."""
    if not verify_tls:
        logger.warning("TLS certificate verification is disabled")
    return ClientSession(
        timeout=ClientTimeout(total=None, connect=timeout, sock_read=timeout),
        headers={"User-Agent": user_agent, "Accept-Encoding": "identity"},
        connector=TCPConnector(ssl=verify_tls),
        raise_for_status=False,
    )


class ResourceFetcher:
    """Downloads single resources into a :class:`CrawlSession`'s scope."""

    def __init__(
        self,
        http: ClientSession,
        reporter: Optional[Reporter] = None,
        rate_limit: int = 0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.http = http
        self.reporter = reporter or Reporter()
        self.rate_limit = rate_limit
        self.chunk_size = chunk_size

    async def fetch(
        self,
        session: CrawlSession,
        url: str,
        file_name: str,
        output_dir: Path | str,
        *,
        keep_body: bool = False,
    ) -> FetchOutcome:
        """
        Fetch *url* into ``output_dir/file_name``.

        Never raises for per-resource failures; the returned outcome carries
        the status. A partially written file is left in place on failure.
        With *keep_body* the bytes are also returned for HTML responses.
        """
        path = Path(output_dir, file_name)
        outcome = FetchOutcome(url=url, path=None, status=FetchStatus.OK)
        start = time.monotonic()
        try:
            if not session.in_scope(url):
                raise ScopeError(f"domain mismatch: {url} is outside {session.scope.host}")
            async with self.http.get(url) as resp:
                if resp.history:
                    logger.debug("%s redirected to %s", url, resp.url)
                    if not session.in_scope(str(resp.url)):
                        raise ScopeError(f"{url} redirected off-host to {resp.url}")
                await self._save(resp, path, outcome, start, keep_body)
        except FetchError as exc:
            outcome.status, outcome.error = exc.status, str(exc)
        except (ClientError, asyncio.TimeoutError) as exc:
            outcome.status, outcome.error = FetchStatus.HTTP_ERROR, str(exc) or type(exc).__name__
        outcome.elapsed = time.monotonic() - start

        if not outcome.ok and outcome.bytes_written:
            logger.warning("Partial file left at %s (%d bytes)", outcome.path, outcome.bytes_written)
        if outcome.status is not FetchStatus.SCOPE_ERROR:
            self.reporter.on_finish(outcome)
        return outcome

    async def _save(
        self,
        resp: ClientResponse,
        path: Path,
        outcome: FetchOutcome,
        start: float,
        keep_body: bool,
    ) -> None:
        if resp.status != 200:
            raise HttpError(f"{resp.status} {resp.reason or ''}".strip())

        total = resp.content_length
        outcome.bytes_total = total
        outcome.content_type = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
        self.reporter.on_start(outcome.url, resp.status, total, path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = path.open("wb")
        except OSError as exc:
            raise StorageError(f"cannot create {path}: {exc}") from exc
        outcome.path = path

        buffer = bytearray() if keep_body and outcome.is_html else None
        with fh:
            await self._stream(resp, fh, outcome, start, buffer)

        if total is None:
            outcome.bytes_total = outcome.bytes_written
        elif outcome.bytes_written < total:
            raise SizeMismatchError(f"expected {total} bytes, received {outcome.bytes_written}")
        if buffer is not None:
            outcome.body = bytes(buffer)

    async def _stream(
        self,
        resp: ClientResponse,
        fh: IO[bytes],
        outcome: FetchOutcome,
        start: float,
        buffer: Optional[bytearray],
    ) -> None:
        limiter = RateLimiter(self.rate_limit)
        total = outcome.bytes_total
        while True:
            try:
                chunk = await resp.content.read(self.chunk_size)
            except ClientPayloadError as exc:
                if total is not None and outcome.bytes_written < total:
                    raise SizeMismatchError(
                        f"expected {total} bytes, received {outcome.bytes_written}"
                    ) from exc
                raise HttpError(str(exc)) from exc
            if chunk:
                try:
                    fh.write(chunk)
                except OSError as exc:
                    raise StorageError(f"write to {fh.name} failed: {exc}") from exc
                outcome.bytes_written += len(chunk)
                if buffer is not None:
                    buffer.extend(chunk)

            elapsed = time.monotonic() - start
            self.reporter.on_progress(outcome.url, TransferProgress(outcome.bytes_written, total, elapsed))

            if not chunk or (total is not None and outcome.bytes_written >= total):
                return
            await limiter.throttle(len(chunk), outcome.bytes_written, elapsed)
