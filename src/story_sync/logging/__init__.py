"""Structured history logging."""

from .history import HISTORY_FILENAME, HistoryEvent, HistoryLog, events_for_result

__all__ = ["HISTORY_FILENAME", "HistoryEvent", "HistoryLog", "events_for_result"]
