"""Local draft auto-save for loan application forms."""
from autosave.engine import DEFAULT_DEBOUNCE_MS, MAX_DRAFT_AGE, DraftAutoSaver, parse_snapshot
from autosave.indicator import AutoSaveIndicator, format_last_saved
from autosave.store import DraftChange, DraftStore, FileDraftStore, MemoryDraftStore

__all__ = [
    "DEFAULT_DEBOUNCE_MS",
    "MAX_DRAFT_AGE",
    "AutoSaveIndicator",
    "DraftAutoSaver",
    "DraftChange",
    "DraftStore",
    "FileDraftStore",
    "MemoryDraftStore",
    "format_last_saved",
    "parse_snapshot",
]
