"""Append-only JSONL history of artifact writes."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass
from pathlib import Path

from story_sync.sync.cache import utc_now_iso
from story_sync.sync.models import SyncResult

HISTORY_FILENAME = "history.jsonl"


@dataclass(slots=True, frozen=True)
class HistoryEvent:
    """One created or updated artifact."""

    timestamp: str
    trigger: str
    component: str
    source_path: str
    kind: str
    action: str
    path: str | None
    reason: str | None
    content_hash: str | None
    preserved: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()


def events_for_result(result: SyncResult, trigger: str) -> list[HistoryEvent]:
    """Return one event per artifact the result created or updated."""
    timestamp = utc_now_iso()
    events: list[HistoryEvent] = []
    for kind, action in result.actions().items():
        if action.action not in ("created", "updated"):
            continue
        events.append(
            HistoryEvent(
                timestamp=timestamp,
                trigger=trigger,
                component=result.component,
                source_path=result.path,
                kind=kind,
                action=action.action,
                path=action.path,
                reason=action.reason,
                content_hash=action.content_hash,
                preserved=action.preserved,
                removed=action.removed,
            )
        )
    return events


class HistoryLog:
    """Append-only JSONL history writer and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def in_data_dir(cls, data_dir: Path) -> HistoryLog:
        """Open the history log stored under a data directory."""
        return cls(data_dir / HISTORY_FILENAME)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: HistoryEvent) -> None:
        """Append one event as a JSON object per line."""
        line = json.dumps(asdict(event), sort_keys=True)
        with self._lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)
            handle.write("\n")

    def record(self, result: SyncResult, trigger: str) -> int:
        """Append events for every written artifact of `result`; return the count."""
        events = events_for_result(result, trigger)
        for event in events:
            self.append(event)
        return len(events)

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if not isinstance(record, dict):
                    continue
                if since is not None:
                    timestamp = record.get("timestamp")
                    if not isinstance(timestamp, str) or timestamp < since:
                        continue
                entries.append(record)
        return entries[-limit:]
