"""Persistent-tier key-value stores.

Both stores satisfy KeyValueStoreProtocol. They may raise; the Cache treats
every storage exception as a soft failure.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Union

import structlog

from futureresume.core.exceptions import StorageQuotaExceeded

log = structlog.get_logger()


class InMemoryKeyValueStore:
    """Dict-backed store with an optional byte quota.

    Keys are enumerated in insertion order. Useful as the persistent tier in
    tests and when no file path is configured.

    Args:
        quota_bytes: Maximum total size of keys plus values (UTF-8). None
            disables the quota.
    """

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        if quota_bytes is not None and quota_bytes <= 0:
            raise ValueError("quota_bytes must be positive")
        self._quota_bytes = quota_bytes
        self._data: Dict[str, str] = {}

    @property
    def length(self) -> int:
        return len(self._data)

    @property
    def used_bytes(self) -> int:
        return sum(_entry_size(k, v) for k, v in self._data.items())

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            current = self._data.get(key)
            projected = self.used_bytes + _entry_size(key, value)
            if current is not None:
                projected -= _entry_size(key, current)
            if projected > self._quota_bytes:
                raise StorageQuotaExceeded(key=key, quota_bytes=self._quota_bytes)
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def key(self, index: int) -> Optional[str]:
        if 0 <= index < len(self._data):
            return list(self._data)[index]
        return None


class JsonFileKeyValueStore:
    """Store persisted as a single JSON object on disk.

    The file is rewritten atomically (temp file + replace) on every mutation,
    so entries survive process restarts. A missing file starts empty; an
    unreadable or corrupt file is logged and replaced on the next write.

    Args:
        path: Location of the JSON file. Parent directories are created.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path).expanduser()
        self._lock = threading.Lock()
        self._data: Dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def length(self) -> int:
        with self._lock:
            return len(self._data)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            previous = self._data.get(key)
            self._data[key] = value
            try:
                self._flush()
            except OSError:
                # Keep memory consistent with disk
                if previous is None:
                    del self._data[key]
                else:
                    self._data[key] = previous
                raise

    def remove_item(self, key: str) -> None:
        with self._lock:
            if key in self._data:
                del self._data[key]
                self._flush()

    def key(self, index: int) -> Optional[str]:
        with self._lock:
            if 0 <= index < len(self._data):
                return list(self._data)[index]
            return None

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            content = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            log.warning("kv_store_load_failed", path=str(self._path), error=str(e))
            return {}
        if not isinstance(content, dict):
            log.warning("kv_store_load_failed", path=str(self._path), error="not a JSON object")
            return {}
        return {str(k): v for k, v in content.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f)
        os.replace(tmp_path, self._path)


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))
