# === FILE: mirrorget/cli.py ===
#!/usr/bin/env python3
"""
Точка входа mirrorget: загрузка ресурса по URL или зеркалирование сайта.

Команды:
  get       Скачать URL (или список URL, или зеркало сайта)
  config    Показать умолчания из файла конфигурации

Общие опции:
  --config PATH       YAML/JSON с умолчаниями для get
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда get опции:
  -O NAME             Имя сохраняемого файла
  -P DIR              Каталог для сохранения (default: .)
  --mirror            Зеркалировать сайт рекурсивно
  --rate-limit SIZE   Лимит скорости: 200k, 2M, 1GB, 500B
  -B                  Писать прогресс в лог-файл вместо консоли
  -i FILE             Файл со списком URL
  -R LIST             Суффиксы файлов, которые пропускаются (jpg,gif)
  -X LIST             Каталоги, исключённые из зеркала (/img,/css)
  --no-check-certificate  Не проверять TLS-сертификаты
  --json PATH         Сохранить JSON-отчёт о загрузках

Пример:
  mirrorget get --mirror --rate-limit 400k https://example.com/index.html
"""
import sys
import json
from pathlib import Path

import click
from click.core import ParameterSource
from pydantic import ValidationError

from mirrorget import __version__
from mirrorget.config import FetchRequest, load_config
from mirrorget.engine import Engine
from mirrorget.logger import DEFAULT_FORMAT, init_logging
from mirrorget.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])

# option name -> FetchRequest field
_GET_FIELDS = {
    "output": "output_file_name",
    "download_path": "download_path",
    "mirror": "mirror",
    "rate_limit": "rate_limit",
    "log_to_file": "log_to_file",
    "input_file": "input_file",
    "reject": "reject",
    "exclude": "exclude",
    "verify_tls": "verify_tls",
    "user_agent": "user_agent",
    "concurrency": "concurrency",
}


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "").removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='mirrorget, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML/JSON с умолчаниями для команды get.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """mirrorget: загрузчик ресурсов и зеркал сайтов."""
    init_logging(level=log_level, log_file=log_file, log_format=log_format)
    defaults = {}
    if config_path is not None:
        try:
            defaults = load_config(config_path)
        except Exception as e:
            print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['defaults'] = defaults


@cli.command('get', context_settings=CONTEXT_SETTINGS)
@click.argument('url', required=False, default='')
@click.option('-O', 'output', default='', help='Имя сохраняемого файла')
@click.option(
    '-P', 'download_path',
    default='.', show_default=True,
    help='Каталог для сохранения'
)
@click.option('--mirror', is_flag=True, help='Зеркалировать сайт рекурсивно')
@click.option('--rate-limit', 'rate_limit', default='', help='Лимит скорости (200k, 2M, 1GB, 500B)')
@click.option('-B', 'log_to_file', is_flag=True, help='Писать прогресс в лог-файл')
@click.option(
    '-i', 'input_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Файл со списком URL'
)
@click.option('-R', '--reject', 'reject', default='', help='Пропускаемые суффиксы через запятую')
@click.option('-X', '--exclude', 'exclude', default='', help='Исключённые каталоги через запятую')
@click.option(
    '--no-check-certificate', 'verify_tls',
    is_flag=True, flag_value=False, default=True,
    help='Не проверять TLS-сертификаты'
)
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent')
@click.option('--concurrency', 'concurrency', type=int, default=1, show_default=True,
              help='Параллельные загрузки ресурсов одной страницы')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт о загрузках'
)
@click.pass_context
def get(ctx, url, json_output, **options):
    """Скачать URL, список URL или зеркало сайта."""
    data = dict(ctx.obj['defaults'])
    if url or 'seed_url' not in data:
        data['seed_url'] = url
    for name, value in options.items():
        if value is None:
            continue
        if ctx.get_parameter_source(name) is ParameterSource.DEFAULT and _GET_FIELDS[name] in data:
            continue
        data[_GET_FIELDS[name]] = value

    try:
        request = FetchRequest(**data)
    except ValidationError as e:
        print_error(f'Некорректные параметры: {_describe(e)}')

    if request.log_to_file:
        click.echo(f'Output will be written to "{request.log_path}".')

    engine = cli.engine_factory(request)
    try:
        report = engine.start()
    except OSError as e:
        print_error(f'Ошибка при загрузке: {e}')

    if request.input_file is not None:
        for line in report.summary_lines():
            click.echo(line)

    if json_output:
        try:
            saved_json = cli.render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    single = not request.mirror and request.input_file is None
    if single and report.failed:
        sys.exit(1)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать умолчания из файла конфигурации в JSON."""
    click.echo(json.dumps(ctx.obj['defaults'], ensure_ascii=False, indent=2, default=str))


# expose these names at module level for test monkey-patching
cli.engine_factory = Engine
cli.render_json = render_json

if __name__ == "__main__":
    cli()
