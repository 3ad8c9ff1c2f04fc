# mirrorget/report/json_report.py

"""
Генерация JSON-отчёта о загрузках mirrorget.

Сериализация объекта FetchReport в файл.
"""
from pathlib import Path

from mirrorget.aggregator import FetchReport


def render_json(report: FetchReport, output_path: Path | str) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект FetchReport с результатами загрузок
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from mirrorget.report.json_report import render_json
    report_path = render_json(report, 'reports/fetches.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.json(pretty=True), encoding="utf-8")
    return output
