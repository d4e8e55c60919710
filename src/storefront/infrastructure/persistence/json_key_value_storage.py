"""KeyValueStorage kept in a single JSON object on disk."""

from __future__ import annotations

import threading
from pathlib import Path

from storefront.domain.repository.key_value_storage import KeyValueStorage
from storefront.infrastructure.persistence.json_file import ensure_file, read_json, write_json


class JsonKeyValueStorage(KeyValueStorage):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        ensure_file(self._file_path, {})

    def get(self, key: str) -> str | None:
        return read_json(self._file_path).get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = read_json(self._file_path)
            data[key] = value
            write_json(self._file_path, data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = read_json(self._file_path)
            if data.pop(key, None) is not None:
                write_json(self._file_path, data)
