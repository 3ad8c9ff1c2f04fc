# mirrorget/crawler/errors.py
"""
Error taxonomy for single-resource fetches and link resolution.
"""
from __future__ import annotations

from mirrorget.crawler.models import FetchStatus


class FetchError(Exception):
    """Base class for errors that abort one fetch but never the crawl."""

    status: FetchStatus = FetchStatus.HTTP_ERROR


class ScopeError(FetchError):
    """Target host differs from the crawl's registered domain."""

    status = FetchStatus.SCOPE_ERROR


class HttpError(FetchError):
    """Non-OK status or transport failure."""

    status = FetchStatus.HTTP_ERROR


class StorageError(FetchError):
    """Directory creation, file creation or write failure."""

    status = FetchStatus.IO_ERROR


class SizeMismatchError(FetchError):
    """Stream ended before the declared Content-Length was reached."""

    status = FetchStatus.SIZE_MISMATCH


class MalformedURLError(ValueError):
    """A link could not be resolved to a usable absolute URL."""
