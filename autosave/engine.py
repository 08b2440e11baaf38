"""
Debounced local draft persistence for an in-progress application form.

One DraftAutoSaver belongs to one form session. It restores a recent snapshot
when the session starts, then saves the form after each burst of changes has
been quiet for the debounce period. Stored payloads look like
{"data": {...}, "timestamp": "<ISO 8601>"}.
"""
from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, MutableMapping, Optional

from autosave.store import DraftStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 1000
MAX_DRAFT_AGE = timedelta(hours=24)

Notice = Callable[[str, str], None]


def _log_notice(title: str, description: str) -> None:
    logger.info(f"{title}: {description}")


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def parse_snapshot(raw: Optional[str]) -> Optional[tuple[dict[str, Any], datetime]]:
    """Decode a stored snapshot; None when absent or unreadable."""
    if not raw:
        return None
    try:
        snapshot = json.loads(raw)
        timestamp = datetime.fromisoformat(snapshot["timestamp"])
        data = snapshot.get("data") or {}
    except (ValueError, TypeError, KeyError, AttributeError):
        return None
    if not isinstance(data, dict):
        return None
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return data, timestamp


class DraftAutoSaver:
    def __init__(
        self,
        store: DraftStore,
        storage_key: str,
        form: MutableMapping[str, Any],
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        exclude_fields: Iterable[str] = (),
        on_restore: Optional[Callable[[dict[str, Any]], None]] = None,
        on_notice: Optional[Notice] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.storage_key = storage_key
        self.form = form
        self.debounce_ms = debounce_ms
        self.exclude_fields = frozenset(exclude_fields)
        self.on_restore = on_restore
        self.on_notice = on_notice or _log_notice
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.session_id = uuid.uuid4().hex

        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[dict[str, Any]] = None
        self._last_saved = ""
        self._started = False

    def __enter__(self) -> "DraftAutoSaver":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def start(self) -> Optional[dict[str, Any]]:
        """Restore a fresh snapshot into the form. Runs once per session."""
        with self._lock:
            if self._started:
                return None
            self._started = True

        parsed = parse_snapshot(self._read())
        if parsed is None:
            return None
        data, saved_at = parsed
        if not data or self._clock() - saved_at >= MAX_DRAFT_AGE:
            return None

        restored = {k: v for k, v in data.items() if k not in self.exclude_fields}
        for key, value in restored.items():
            if not _is_empty(value):
                self.form[key] = value

        if self.on_restore is not None:
            self.on_restore(restored)
        self.on_notice(
            "Draft restored",
            f"Your progress from {saved_at:%Y-%m-%d %H:%M} has been restored.",
        )
        return restored

    def update(self, **fields: Any) -> None:
        """Apply field changes to the form and schedule a save."""
        self.form.update(fields)
        self.schedule_save()

    def schedule_save(self, data: Optional[dict[str, Any]] = None) -> None:
        """Debounce a save; each call cancels the pending one and restarts the quiet period."""
        with self._lock:
            self._pending = dict(self.form if data is None else data)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_ms / 1000, self._on_timer)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """Write any pending change immediately. Returns True if storage was written."""
        with self._lock:
            self._cancel_timer()
            data, self._pending = self._pending, None
        if data is None:
            return False
        return self._save(data)

    def _on_timer(self) -> None:
        with self._lock:
            if threading.current_thread() is not self._timer:
                return  # superseded by a later change
            self._timer = None
            data, self._pending = self._pending, None
        if data is not None:
            self._save(data)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _save(self, data: dict[str, Any]) -> bool:
        filtered = {
            k: v for k, v in data.items() if k not in self.exclude_fields and not _is_empty(v)
        }
        try:
            serialized = json.dumps(filtered, sort_keys=True, default=str)
            with self._lock:
                # The timestamp changes on every write, so only the data decides redundancy.
                if serialized == self._last_saved:
                    return False
                payload = json.dumps(
                    {"data": filtered, "timestamp": self._clock().isoformat()}, default=str
                )
                self.store.set(self.storage_key, payload, source=self.session_id)
                self._last_saved = serialized
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to auto-save draft {self.storage_key}: {e}")
            return False

    def _read(self) -> Optional[str]:
        try:
            return self.store.get(self.storage_key)
        except OSError as e:
            logger.warning(f"Failed to read draft {self.storage_key}: {e}")
            return None

    def clear(self) -> None:
        """Drop the stored snapshot and any pending save."""
        with self._lock:
            self._cancel_timer()
            self._pending = None
            self._last_saved = ""
        try:
            self.store.remove(self.storage_key, source=self.session_id)
        except OSError as e:
            logger.warning(f"Failed to clear draft {self.storage_key}: {e}")

    def clear_on_submit(self) -> None:
        self.clear()
        self.on_notice("Application submitted", "Your draft has been cleared.")

    def last_saved_at(self) -> Optional[datetime]:
        parsed = parse_snapshot(self._read())
        return parsed[1] if parsed else None

    def close(self) -> None:
        """End the session, writing out any change still waiting on the debounce timer."""
        self.flush()
