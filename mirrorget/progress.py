# mirrorget/progress.py
"""Progress rendering and per-fetch summaries.

Three display modes are supported:

* ``interactive`` – a live progress bar on the console;
* ``log_file``    – one init+completion block appended per fetch to a log file;
* ``batch``       – quiet console, outcomes collected into a summary list.
"""
from __future__ import annotations

import enum
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import click

from mirrorget.crawler.models import FetchOutcome, TransferProgress

__all__ = [
    "BAR_WIDTH",
    "BatchReporter",
    "ConsoleReporter",
    "DisplayMode",
    "LogFileReporter",
    "Reporter",
    "format_duration",
    "format_size",
    "make_reporter",
]

BAR_WIDTH = 50
_TIME_FMT = "%Y-%m-%d %H:%M:%S"


class DisplayMode(str, enum.Enum):
    INTERACTIVE = "interactive"
    LOG_FILE = "log_file"
    BATCH = "batch"


def format_size(size: Optional[float]) -> str:
    if size is None:
        return "unknown"
    for unit, factor in (("GiB", 1024**3), ("MiB", 1024**2), ("KiB", 1024)):
        if size >= factor:
            return f"{size / factor:.2f} {unit}"
    return f"{int(size)} B"


def format_duration(seconds: Optional[float]) -> str:
    if seconds is None:
        return "--"
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def _now() -> str:
    return datetime.now().strftime(_TIME_FMT)


def _init_block(url: str, status: int, total: Optional[int], path: Path) -> str:
    return (
        f"Start at: {_now()}\n"
        f"Sending request, awaiting response... status {status} OK\n"
        f"Content size: {total if total is not None else 'unknown'} [{format_size(total)}]\n"
        f"Saving to: {path}\n"
    )


def _end_block(outcome: FetchOutcome) -> str:
    head = "Download completed" if outcome.ok else f"Download failed ({outcome.status.value}: {outcome.error})"
    return f"{head} [{outcome.url}]\nfinished at: {_now()}\n"


class Reporter:
    """Receives fetch telemetry. The base class ignores everything."""

    def __init__(self) -> None:
        self.outcomes: List[FetchOutcome] = []
        self._blocks: dict[str, str] = {}

    def on_start(self, url: str, status: int, total: Optional[int], path: Path) -> None:
        self._blocks[url] = _init_block(url, status, total, path)

    def on_progress(self, url: str, progress: TransferProgress) -> None:
        pass

    def on_finish(self, outcome: FetchOutcome) -> None:
        self.outcomes.append(outcome)
        self._blocks.pop(outcome.url, None)


class ConsoleReporter(Reporter):
    """Interactive progress bar, redrawn in place after every chunk."""

    def on_start(self, url: str, status: int, total: Optional[int], path: Path) -> None:
        super().on_start(url, status, total, path)
        click.echo(self._blocks[url])

    def on_progress(self, url: str, progress: TransferProgress) -> None:
        percent = progress.percent
        if percent is None:
            bar, shown = "?" * BAR_WIDTH, "  ?.??%"
        else:
            filled = int(percent / 100 * BAR_WIDTH)
            bar, shown = "=" * filled + " " * (BAR_WIDTH - filled), f"{percent:6.2f}%"
        click.echo(
            f"\r{format_size(progress.bytes_written)} / {format_size(progress.bytes_total)} "
            f"[{bar}] {shown} {format_size(progress.rate)}/s "
            f"{format_duration(progress.remaining)}",
            nl=False,
        )

    def on_finish(self, outcome: FetchOutcome) -> None:
        if outcome.url in self._blocks:
            click.echo("\n")
            click.echo(_end_block(outcome))
        super().on_finish(outcome)


class LogFileReporter(Reporter):
    """Appends one init+completion block per finished fetch to ``log_path``.

    Blocks are written in a single call from the event loop thread, so
    concurrent fetches never interleave inside a block.
    """

    def __init__(self, log_path: Path | str) -> None:
        super().__init__()
        self.log_path = Path(log_path)

    def on_finish(self, outcome: FetchOutcome) -> None:
        block = self._blocks.get(outcome.url, "") + _end_block(outcome)
        with self.log_path.open("a", encoding="utf-8") as fh:
            fh.write(block + "\n")
        super().on_finish(outcome)


class BatchReporter(Reporter):
    """Collects outcomes; the caller prints the summary once all fetches finish."""


def make_reporter(mode: DisplayMode, log_path: Path | str | None = None) -> Reporter:
    if mode is DisplayMode.LOG_FILE:
        if log_path is None:
            raise ValueError("log_path is required for log_file mode")
        return LogFileReporter(log_path)
    if mode is DisplayMode.BATCH:
        return BatchReporter()
    return ConsoleReporter()
