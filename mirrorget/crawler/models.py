# mirrorget/crawler/models.py
"""
Data models for the mirroring core.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Set
from urllib.parse import urlsplit


class FetchStatus(str, enum.Enum):
    OK = "ok"
    HTTP_ERROR = "http_error"
    IO_ERROR = "io_error"
    SCOPE_ERROR = "scope_error"
    SIZE_MISMATCH = "size_mismatch"


@dataclass(frozen=True, slots=True)
class CrawlScope:
    """The single host a crawl is allowed to fetch from."""

    host: str

    @classmethod
    def from_url(cls, url: str) -> CrawlScope:
        return cls(urlsplit(url).netloc.lower())

    def contains(self, url: str) -> bool:
        try:
            return urlsplit(url).netloc.lower() == self.host
        except ValueError:
            return False


@dataclass(slots=True)
class CrawlSession:
    """State owned by exactly one crawl invocation.

    ``visited`` holds canonical page URLs and only ever grows. Leaf assets are
    tracked separately in ``assets`` so a shared stylesheet or image is saved
    once per crawl without entering the page recursion bookkeeping.
    """

    scope: CrawlScope
    root: Path
    visited: Set[str] = field(default_factory=set)
    assets: Set[str] = field(default_factory=set)

    @classmethod
    def for_seed(cls, seed_url: str, root: Path) -> CrawlSession:
        return cls(scope=CrawlScope.from_url(seed_url), root=Path(root))

    def in_scope(self, url: str) -> bool:
        return self.scope.contains(url)

    def claim_page(self, url: str) -> bool:
        """Check-and-mark in one step; True only for the first in-scope claim."""
        if not self.in_scope(url) or url in self.visited:
            return False
        self.visited.add(url)
        return True

    def claim_asset(self, url: str) -> bool:
        if url in self.assets:
            return False
        self.assets.add(url)
        return True


@dataclass(frozen=True, slots=True)
class ResolvedTarget:
    """Local placement of a remote resource, relative to the mirror root."""

    file_name: str
    output_dir: str


@dataclass(frozen=True, slots=True)
class TransferProgress:
    """Telemetry snapshot taken after each chunk write."""

    bytes_written: int
    bytes_total: Optional[int]
    elapsed: float

    @property
    def rate(self) -> float:
        return self.bytes_written / self.elapsed if self.elapsed > 0 else 0.0

    @property
    def percent(self) -> Optional[float]:
        if not self.bytes_total:
            return None
        return min(100.0, self.bytes_written / self.bytes_total * 100)

    @property
    def remaining(self) -> Optional[float]:
        """Seconds left, estimated as ``elapsed * remaining / downloaded``."""
        if self.bytes_total is None or self.bytes_written == 0:
            return None
        left = max(0, self.bytes_total - self.bytes_written)
        return self.elapsed * (left / self.bytes_written)


@dataclass(slots=True)
class FetchOutcome:
    """Result of one fetch attempt. Produced once, never retried."""

    url: str
    path: Optional[Path]
    status: FetchStatus
    bytes_total: Optional[int] = None
    bytes_written: int = 0
    elapsed: float = 0.0
    content_type: str = ""
    error: str = ""
    body: Optional[bytes] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK

    @property
    def is_html(self) -> bool:
        if "html" in self.content_type:
            return True
        return not self.content_type and urlsplit(self.url).path.endswith(".html")

    def as_dict(self) -> dict:
        return {
            "url": self.url,
            "path": str(self.path) if self.path else None,
            "status": self.status.value,
            "bytes_total": self.bytes_total,
            "bytes_written": self.bytes_written,
            "elapsed": round(self.elapsed, 3),
            "error": self.error,
        }
