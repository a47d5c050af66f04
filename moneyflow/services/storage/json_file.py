"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON object on local disk stands in for browser
local storage because:
1. Nothing to install or configure
2. The user can open, back up or delete the file by hand
3. The data volume of one person's transactions is small

TRADEOFFS:
- The whole file is rewritten on every change (fine at this size)
- One writer at a time; there is no locking between processes

Writes go to a temporary file first and are moved into place, so a crash
mid-write never leaves half a file behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from moneyflow.services.storage.interface import KeyValueStore, StorageError


logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store persisted as one JSON object of string values.

    The file is read once, on first access. A file that is not a JSON
    object of strings is treated as empty and moved aside with a
    `.corrupt` suffix so it is not silently overwritten.

    The cached contents only change after the file write succeeded; a
    failed `set`, `delete` or `clear` leaves both unchanged.
    """

    def __init__(self, path: Union[str, os.PathLike]):
        self._path = Path(path)
        self._data: Optional[dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data

        if not self._path.exists():
            self._data = {}
            return self._data

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
            ):
                raise ValueError("store file is not an object of strings")
            self._data = raw
        except (OSError, ValueError) as e:
            backup = self._path.with_suffix(self._path.suffix + ".corrupt")
            logger.warning(
                "store_file_unreadable",
                path=str(self._path),
                backup=str(backup),
                error=str(e),
            )
            try:
                self._path.replace(backup)
            except OSError as move_error:
                logger.error(
                    "store_file_backup_failed",
                    path=str(self._path),
                    error=str(move_error),
                )
            self._data = {}

        return self._data

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _write_file(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=self._path.name,
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _commit(self, data: dict[str, str]) -> None:
        """Write `data` to disk, then make it the cached state."""
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        try:
            self._write_file(payload)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")
        self._data = data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = dict(self._load())
        data[key] = value
        self._commit(data)

    def delete(self, key: str) -> bool:
        if key not in self._load():
            return False
        data = dict(self._load())
        del data[key]
        self._commit(data)
        return True

    def clear(self) -> None:
        self._load()
        self._commit({})

    def keys(self) -> list[str]:
        return list(self._load())
