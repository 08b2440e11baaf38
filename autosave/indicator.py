"""Save-status tracker for a draft key: idle, saving, or saved."""
from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Literal, Optional

from autosave.engine import parse_snapshot
from autosave.store import DraftChange, DraftStore

SaveStatus = Literal["idle", "saving", "saved"]

SETTLE_DELAY_SECONDS = 0.3


def format_last_saved(saved_at: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    minutes = int((now - saved_at).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return saved_at.strftime("%Y-%m-%d")


class AutoSaveIndicator:
    """
    Follows change signals for one storage key, from this process or another.
    A write shows as "saving" and settles to "saved" after a short delay;
    removal returns to "idle". Unreadable snapshots are ignored.
    """

    def __init__(self, store: DraftStore, storage_key: str, settle_delay: float = SETTLE_DELAY_SECONDS):
        self.store = store
        self.storage_key = storage_key
        self.settle_delay = settle_delay
        self.status: SaveStatus = "idle"
        self.last_saved: Optional[datetime] = None
        self._lock = threading.Lock()
        self._settle_timer: Optional[threading.Timer] = None
        self._unsubscribe = store.subscribe(storage_key, self._on_change)
        self.refresh()

    def refresh(self) -> None:
        parsed = parse_snapshot(self.store.get(self.storage_key))
        if parsed is not None:
            with self._lock:
                self.last_saved = parsed[1]
                if self.status == "idle":
                    self.status = "saved"

    def _on_change(self, change: DraftChange) -> None:
        with self._lock:
            self._cancel_settle()
            if change.value is None:
                self.status = "idle"
                self.last_saved = None
                return
            self.status = "saving"
            self._settle_timer = threading.Timer(self.settle_delay, self.settle, args=(change.value,))
            self._settle_timer.daemon = True
            self._settle_timer.start()

    def settle(self, value: Optional[str] = None) -> None:
        """Finish a pending saving -> saved transition."""
        with self._lock:
            self._cancel_settle()
            if self.status != "saving":
                return
            self.status = "saved"
            parsed = parse_snapshot(value if value is not None else self.store.get(self.storage_key))
            if parsed is not None:
                self.last_saved = parsed[1]

    def _cancel_settle(self) -> None:
        if self._settle_timer is not None and self._settle_timer is not threading.current_thread():
            self._settle_timer.cancel()
        self._settle_timer = None

    def label(self, now: Optional[datetime] = None) -> Optional[str]:
        if self.status == "saving":
            return "Saving..."
        if self.status == "saved":
            suffix = f" {format_last_saved(self.last_saved, now)}" if self.last_saved else ""
            return f"Draft saved{suffix}"
        if self.last_saved is None:
            return None
        return "Not saved"

    def close(self) -> None:
        with self._lock:
            self._cancel_settle()
        self._unsubscribe()
