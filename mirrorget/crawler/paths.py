# mirrorget/crawler/paths.py
"""
URL resolution and remote-to-local path derivation.
"""
from __future__ import annotations

import posixpath
import re
from urllib.parse import urljoin, urlsplit, urlunsplit

from mirrorget.crawler.errors import MalformedURLError
from mirrorget.crawler.models import ResolvedTarget

__all__ = (
    "DEFAULT_FILE_NAME",
    "PAGE_SUFFIX",
    "canonical_url",
    "domain_of",
    "is_fetchable",
    "is_page_url",
    "resolve",
    "split_target",
)

DEFAULT_FILE_NAME = "index.html"
PAGE_SUFFIX = ".html"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def resolve(base_url: str, ref: str) -> str:
    """Resolve *ref* against *base_url* (RFC 3986).

    References that already carry a scheme are returned unchanged.
    Raises :class:`MalformedURLError` when either side cannot be parsed.
    """
    ref = ref.strip()
    try:
        if _SCHEME_RE.match(ref):
            urlsplit(ref)
            return ref
        return urljoin(base_url, ref)
    except ValueError as exc:
        raise MalformedURLError(f"cannot resolve {ref!r} against {base_url!r}: {exc}") from exc


def domain_of(url: str) -> str:
    """Host (with port) of *url*, lower-cased; ``""`` when unparseable."""
    try:
        return urlsplit(url).netloc.lower()
    except ValueError:
        return ""


def canonical_url(url: str) -> str:
    """Lower-case scheme and host, drop the fragment, default the path to ``/``."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, ""))


def is_fetchable(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def is_page_url(url: str) -> bool:
    """Pages are recursed into; anything else is a leaf asset."""
    return urlsplit(url).path.endswith(PAGE_SUFFIX)


def split_target(url: str) -> ResolvedTarget:
    """Derive the local directory and file name for *url*.

    ``https://example.com/a/b/c.png`` -> ``ResolvedTarget("c.png", "a/b")``.
    An empty last segment maps to ``index.html``. Dot segments are resolved
    against the root, so ``/a/../../etc/x`` lands in ``etc`` and the result
    never escapes the mirror root.
    """
    path = urlsplit(url).path or "/"
    is_dir = path.endswith(("/", "/.", "/.."))
    segments = [s for s in posixpath.normpath(path).split("/") if s not in ("", ".", "..")]
    if is_dir or not segments:
        return ResolvedTarget(file_name=DEFAULT_FILE_NAME, output_dir="/".join(segments))
    return ResolvedTarget(file_name=segments[-1], output_dir="/".join(segments[:-1]))
