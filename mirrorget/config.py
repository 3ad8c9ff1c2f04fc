# === FILE: mirrorget/config.py ===
"""
Загрузка и валидация параметров запуска mirrorget.
Схема запроса описана через Pydantic, размеры скорости разбираются parse_size().
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Optional, Tuple, Union
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mirrorget import __version__
from mirrorget.utils import expand_path

DEFAULT_USER_AGENT = f"mirrorget/{__version__}"
DEFAULT_LOG_PATH = Path("mirrorget-log")

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([kmg]?)(b?)\s*$", re.IGNORECASE)
_MULTIPLIERS = {"": 1, "k": 1024, "m": 1024**2, "g": 1024**3}


def parse_size(value: Union[str, int, float, None]) -> int:
    """Переводит литерал размера (``200k``, ``2M``, ``1GB``, ``500B``) в байты.

    Пустое значение означает 0 (без ограничения).
    """
    if value is None:
        return 0
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"Размер не может быть отрицательным: {value}")
        return int(value)
    if not value.strip():
        return 0
    match = _SIZE_RE.match(value)
    if not match:
        raise ValueError(f"Неподдерживаемый размер: {value!r}")
    number, unit, _ = match.groups()
    return int(float(number) * _MULTIPLIERS[unit.lower()])


def _split_list(value: Any) -> Any:
    if isinstance(value, str):
        return tuple(item.strip() for item in value.split(",") if item.strip())
    return value


class FetchRequest(BaseModel):
    """Проверенный запрос на загрузку одного ресурса, списка или зеркала сайта."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: str = Field("", description="URL ресурса или стартовой страницы.")
    output_file_name: str = Field("", description="Имя файла вместо имени из URL.")
    download_path: Path = Field(Path("."), description="Каталог для сохранения.")
    mirror: bool = Field(False, description="Рекурсивно зеркалировать сайт.")
    rate_limit: int = Field(0, ge=0, description="Лимит скорости, байт/с (0 = без лимита).")
    log_to_file: bool = Field(False, description="Писать прогресс в лог-файл вместо консоли.")
    log_path: Path = Field(DEFAULT_LOG_PATH, description="Путь лог-файла загрузок.")
    input_file: Optional[Path] = Field(None, description="Файл со списком URL.")
    reject: Tuple[str, ...] = Field((), description="Суффиксы файлов, которые не скачиваются.")
    exclude: Tuple[str, ...] = Field((), description="Каталоги, исключённые из зеркала.")
    verify_tls: bool = Field(True, description="Проверять TLS-сертификаты.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    timeout: float = Field(30.0, gt=0, description="Таймаут соединения и чтения (секунд).")
    chunk_size: int = Field(1024, ge=1, description="Размер блока чтения, байт.")
    concurrency: int = Field(1, ge=1, description="Параллельные загрузки ресурсов страницы.")

    @field_validator("seed_url", mode="before")
    def _strip_url(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("rate_limit", mode="before")
    def _parse_rate_limit(cls, v: Any) -> int:
        return parse_size(v)

    @field_validator("reject", "exclude", mode="before")
    def _parse_lists(cls, v: Any) -> Any:
        return _split_list(v)

    @field_validator("download_path", mode="before")
    def _expand_download_path(cls, v: Any) -> Any:
        return expand_path(v) if isinstance(v, (str, Path)) else v

    @model_validator(mode="after")
    def _check_target(self) -> FetchRequest:
        if self.input_file is None:
            if not self.seed_url:
                raise ValueError("Укажите URL для загрузки")
            parts = urlsplit(self.seed_url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ValueError(f"Некорректный URL: {self.seed_url}")
        if self.mirror and self.input_file is not None:
            raise ValueError("--mirror нельзя сочетать со списком URL")
        return self


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path]) -> dict[str, Any]:
    """
    Читает YAML или JSON с умолчаниями для FetchRequest.
    Возвращает словарь: проверка происходит после слияния с опциями CLI.
    """
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")
