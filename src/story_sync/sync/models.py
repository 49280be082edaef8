"""Typed models for synchronization state."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Literal

from story_sync.config import DEFAULT_BATCH_SIZE

CACHE_SCHEMA_VERSION = "1"

Action = Literal["created", "updated", "skipped", "unchanged"]
ExportKind = Literal["default", "named"]


@dataclass(slots=True, frozen=True)
class SourceUnit:
    """One discovered component source file."""

    name: str
    path: str
    library: str
    has_example_artifact: bool = False
    example_artifact_path: str | None = None
    export_kind: ExportKind = "named"


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """Last-known content hash of one source unit."""

    content_hash: str
    last_sync: str
    examples: tuple[str, ...] = ()


@dataclass(slots=True)
class HashCache:
    """Persisted mapping from source path to cache entry."""

    version: str = CACHE_SCHEMA_VERSION
    entries: dict[str, CacheEntry] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class FileAction:
    """Outcome for one artifact kind of one unit."""

    action: Action
    path: str | None = None
    reason: str | None = None
    preserved: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    content_hash: str | None = None


SKIPPED = FileAction(action="skipped")


@dataclass(slots=True, frozen=True)
class SyncResult:
    """Per-unit result of one synchronization."""

    component: str
    path: str
    story: FileAction = SKIPPED
    test: FileAction = SKIPPED
    docs: FileAction = SKIPPED

    def actions(self) -> dict[str, FileAction]:
        """Return actions keyed by artifact kind in deterministic order."""
        return {"story": self.story, "test": self.test, "docs": self.docs}

    def changed_kinds(self) -> list[str]:
        """Return kinds whose artifact was created or updated."""
        return [
            f"{kind} {action.action}"
            for kind, action in self.actions().items()
            if action.action in ("created", "updated")
        ]

    def to_dict(self) -> dict[str, object]:
        """Return serializable result."""
        return {
            "component": self.component,
            "path": self.path,
            **{kind: _action_dict(action) for kind, action in self.actions().items()},
        }


@dataclass(slots=True, frozen=True)
class SyncOptions:
    """Options controlling one synchronization pass."""

    stories: bool = True
    tests: bool = True
    docs: bool = True
    update_existing: bool = True
    dry_run: bool = False
    library: str | None = None
    name_filter: str | None = None
    max_components: int | None = None
    batch_size: int = DEFAULT_BATCH_SIZE


@dataclass(slots=True)
class KindCounts:
    """Created or updated counts per artifact kind."""

    stories: int = 0
    tests: int = 0
    docs: int = 0

    @property
    def total(self) -> int:
        """Return the sum over all kinds."""
        return self.stories + self.tests + self.docs


@dataclass(slots=True, frozen=True)
class SyncError:
    """Failure recorded for one unit."""

    component: str
    error: str


@dataclass(slots=True)
class SyncSummary:
    """Aggregated result of a batch synchronization pass."""

    scanned: int = 0
    processed: int = 0
    created: KindCounts = field(default_factory=KindCounts)
    updated: KindCounts = field(default_factory=KindCounts)
    skipped: int = 0
    errors: list[SyncError] = field(default_factory=list)
    details: list[SyncResult] = field(default_factory=list)
    truncated: bool = False
    limit: int | None = None
    notice: str | None = None

    def record(self, result: SyncResult) -> None:
        """Count created/updated actions of one unit result."""
        self.details.append(result)
        for counts, action in ((self.created, "created"), (self.updated, "updated")):
            if result.story.action == action:
                counts.stories += 1
            if result.test.action == action:
                counts.tests += 1
            if result.docs.action == action:
                counts.docs += 1

    def to_dict(self) -> dict[str, object]:
        """Return serializable summary."""
        return {
            "scanned": self.scanned,
            "processed": self.processed,
            "created": asdict(self.created),
            "updated": asdict(self.updated),
            "skipped": self.skipped,
            "errors": [asdict(error) for error in self.errors],
            "details": [result.to_dict() for result in self.details],
            "truncated": self.truncated,
            "limit": self.limit,
            "notice": self.notice,
        }


@dataclass(slots=True, frozen=True)
class MergeResult:
    """Regenerated example content reconciled with prior content."""

    content: str
    preserved: tuple[str, ...]
    removed: tuple[str, ...]


def _action_dict(action: FileAction) -> dict[str, object]:
    payload: dict[str, object] = {"action": action.action}
    if action.path is not None:
        payload["path"] = action.path
    if action.reason is not None:
        payload["reason"] = action.reason
    if action.preserved:
        payload["preserved"] = list(action.preserved)
    if action.removed:
        payload["removed"] = list(action.removed)
    return payload
