# mirrorget/crawler/link_extractor.py
"""
Tag tokenization and link reference extraction for mirrored pages.
"""
from __future__ import annotations

from typing import Iterator, Mapping, Tuple, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

LINK_TAGS = ("a", "link", "img", "script")
LINK_ATTRS = ("href", "src")

Markup = Union[str, bytes]


def iter_tags(markup: Markup) -> Iterator[Tuple[str, Mapping[str, object]]]:
    """Yield ``(tag_name, attributes)`` for every tag that may carry a link."""
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(list(LINK_TAGS)):
        if isinstance(tag, Tag):
            yield tag.name, tag.attrs


def extract_refs(markup: Markup) -> Iterator[str]:
    """
    Yield raw ``href``/``src`` values in document order.

    Empty values and pure fragments are skipped; no resolution happens here.
    """
    for _name, attrs in iter_tags(markup):
        for key in LINK_ATTRS:
            value = attrs.get(key)
            if not isinstance(value, str):
                continue
            raw = value.strip()
            if raw and not raw.startswith("#"):
                yield raw
