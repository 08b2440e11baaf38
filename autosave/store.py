"""
Local key-value storage for form drafts.

Each store doubles as a same-context signal channel: every set/remove is
delivered synchronously to listeners subscribed to that key. Writes made by
another process are only seen by FileDraftStore, through poll().
"""
from __future__ import annotations

import logging
import re
import threading
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

EXTERNAL_SOURCE = "external"


@dataclass(frozen=True)
class DraftChange:
    key: str
    value: Optional[str]
    source: Optional[str] = None


Listener = Callable[[DraftChange], None]


class DraftStore:
    def __init__(self):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._listener_lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, value: str) -> None:
        raise NotImplementedError

    def _delete(self, key: str) -> None:
        raise NotImplementedError

    def set(self, key: str, value: str, source: Optional[str] = None) -> None:
        self._write(key, value)
        self._notify(DraftChange(key, value, source))

    def remove(self, key: str, source: Optional[str] = None) -> None:
        self._delete(key)
        self._notify(DraftChange(key, None, source))

    def subscribe(self, key: str, listener: Listener) -> Callable[[], None]:
        """Register a listener for one key; returns a callable that unsubscribes it."""
        with self._listener_lock:
            self._listeners[key].append(listener)

        def unsubscribe() -> None:
            with self._listener_lock:
                if listener in self._listeners[key]:
                    self._listeners[key].remove(listener)

        return unsubscribe

    def _notify(self, change: DraftChange) -> None:
        with self._listener_lock:
            listeners = list(self._listeners.get(change.key, ()))
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                logger.exception(f"Draft listener failed for key {change.key}")


class MemoryDraftStore(DraftStore):
    def __init__(self):
        super().__init__()
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def _write(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def _delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class FileDraftStore(DraftStore):
    """One JSON file per key under a directory; shared between processes on the same host."""

    def __init__(self, directory: str | Path):
        super().__init__()
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._seen: dict[str, Optional[str]] = {}

    def _path(self, key: str) -> Path:
        return self.directory / (re.sub(r"[^A-Za-z0-9_.-]", "_", key) + ".json")

    def get(self, key: str) -> Optional[str]:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        with self._lock:
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
            self._seen[key] = value

    def _delete(self, key: str) -> None:
        with self._lock:
            self._path(key).unlink(missing_ok=True)
            self._seen[key] = None

    def subscribe(self, key: str, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._seen.setdefault(key, self.get(key))
        return super().subscribe(key, listener)

    def poll(self) -> list[DraftChange]:
        """Detect subscribed keys changed by other processes and notify listeners."""
        changes: list[DraftChange] = []
        with self._listener_lock:
            keys = [k for k, listeners in self._listeners.items() if listeners]
        for key in keys:
            current = self.get(key)
            with self._lock:
                if self._seen.get(key) == current:
                    continue
                self._seen[key] = current
            changes.append(DraftChange(key, current, EXTERNAL_SOURCE))
        for change in changes:
            self._notify(change)
        return changes
