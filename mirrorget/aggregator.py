# File: mirrorget/aggregator.py
"""mirrorget.aggregator: Сводка по результатам всех загрузок одного запуска."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from mirrorget.crawler.models import FetchOutcome, FetchStatus


@dataclass(slots=True)
class FetchReport:
    """Агрегат результатов: список загрузок, счётчики статусов и объём."""

    outcomes: List[FetchOutcome] = field(default_factory=list)

    @property
    def status_counts(self) -> Dict[str, int]:
        counts = Counter(o.status.value for o in self.outcomes)
        return {status.value: counts.get(status.value, 0) for status in FetchStatus}

    @property
    def bytes_written(self) -> int:
        return sum(o.bytes_written for o in self.outcomes)

    @property
    def failed(self) -> List[FetchOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": len(self.outcomes),
            "bytes_written": self.bytes_written,
            "statuses": self.status_counts,
            "fetches": [o.as_dict() for o in self.outcomes],
        }

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)

    def summary_lines(self) -> List[str]:
        """Короткая текстовая сводка для вывода в консоль после пакетной загрузки."""
        lines = [f"content size: {[o.bytes_written for o in self.outcomes]}"]
        for o in self.outcomes:
            mark = "ok" if o.ok else f"{o.status.value}: {o.error}"
            lines.append(f"  {o.url} -> {o.path or '-'} ({mark})")
        counts = self.status_counts
        lines.append(
            f"finished: {counts[FetchStatus.OK.value]} of {len(self.outcomes)} downloaded, "
            f"{self.bytes_written} bytes"
        )
        return lines


def aggregate_results(outcomes: Iterable[FetchOutcome]) -> FetchReport:
    """Собирает результаты загрузок в FetchReport."""
    return FetchReport(outcomes=list(outcomes))
