# File: mirrorget/report/__init__.py
"""mirrorget.report: Сохранение сводных отчётов о загрузках."""

from __future__ import annotations

from mirrorget.report.json_report import render_json

__all__ = ["render_json"]
