"""Хранилища «ключ → строка» для корзины (аналог localStorage)."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union


class StorageError(Exception):
    """Хранилище недоступно или повреждено."""


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Хранилище в памяти процесса."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Все ключи в одном JSON-файле.

    Запись атомарная: временный файл рядом и os.replace.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except ValueError as exc:
            raise StorageError(f"Повреждён файл хранилища {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Ожидался JSON-объект в {self._path}")
        return data

    def _dump(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def _load_for_write(self) -> dict[str, str]:
        # повреждённый файл перезаписывается, как localStorage после очистки
        try:
            return self._load()
        except StorageError:
            return {}

    def set_item(self, key: str, value: str) -> None:
        data = self._load_for_write()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load_for_write()
        data.pop(key, None)
        self._dump(data)
