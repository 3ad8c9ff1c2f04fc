# File: mirrorget/utils.py
"""mirrorget.utils: Утилиты для путей и списков URL."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Collection, List, Sequence, Union

from mirrorget.logger import logger

__all__: Sequence[str] = (
    "expand_path",
    "read_url_list",
    "remove_duplicates",
)


def expand_path(path: Union[str, Path]) -> Path:
    """Раскрывает `~` и переменные окружения, не проверяя существование."""
    return Path(os.path.expandvars(str(path))).expanduser()


def read_url_list(path: Union[str, Path]) -> List[str]:
    """Читает файл со списком URL: по одному на строку, `#` — комментарий."""
    p = expand_path(path)
    if not p.is_file():
        logger.error("URL list not found: %s", p)
        raise FileNotFoundError(f"URL list file not found: {p}")
    urls = []
    for line in p.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    logger.debug("Loaded %d URLs from %s", len(urls), p)
    return remove_duplicates(urls)


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
