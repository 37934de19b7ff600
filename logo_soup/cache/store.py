"""Keyed storage for computed logo metrics."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Dict, Protocol

from ..io.models import LogoMetrics

logger = logging.getLogger(__name__)


class MetricsCache(Protocol):
    """Interface expected by ``analyze`` for memoising metrics by identity."""

    def get(self, key: str) -> LogoMetrics | None: ...

    def set(self, key: str, metrics: LogoMetrics) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryMetricsCache:
    """Process-local cache backed by a dictionary."""

    def __init__(self) -> None:
        self._entries: Dict[str, LogoMetrics] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> LogoMetrics | None:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, metrics: LogoMetrics) -> None:
        with self._lock:
            self._entries[key] = metrics

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class JsonFileMetricsCache:
    """Cache persisted as a single JSON object mapping keys to metrics.

    The file is reloaded on every read so separate processes sharing the path
    see each other's writes; writes replace the file atomically.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = Lock()

    def get(self, key: str) -> LogoMetrics | None:
        with self._lock:
            payload = self._read().get(key)
        if payload is None:
            return None
        try:
            return LogoMetrics.from_dict(payload)
        except ValueError:
            logger.warning("Discarding malformed cache entry %s in %s", key, self.path)
            return None

    def set(self, key: str, metrics: LogoMetrics) -> None:
        with self._lock:
            entries = self._read()
            entries[key] = metrics.to_dict()
            self._write(entries)

    def remove(self, key: str) -> None:
        with self._lock:
            entries = self._read()
            if entries.pop(key, None) is not None:
                self._write(entries)

    def clear(self) -> None:
        with self._lock:
            self._write({})

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._read())

    def _read(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable metrics cache %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring metrics cache %s with unexpected layout", self.path)
            return {}
        return data

    def _write(self, entries: Dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(entries, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
