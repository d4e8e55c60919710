"""File helpers shared by the JSON-backed stores.

Writes go to a temporary file in the same directory and are moved into
place with ``os.replace``, so a reader never sees a half-written file.
I/O failures surface as StorageError.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from storefront.domain.exceptions import StorageError


def ensure_file(file_path: Path, empty: Any) -> None:
    if not file_path.exists():
        write_json(file_path, empty)


def read_json(file_path: Path) -> Any:
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise StorageError(f"Cannot read {file_path}: {exc}") from exc
    except ValueError as exc:
        raise StorageError(f"Corrupt JSON in {file_path}: {exc}") from exc


def write_json(file_path: Path, data: Any) -> None:
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(data, indent=2) + "\n")
            os.replace(tmp_name, file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise StorageError(f"Cannot write {file_path}: {exc}") from exc
