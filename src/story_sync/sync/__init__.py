"""Cache, merge and reconciliation engine."""

from .cache import hash_file, load_cache, prune_cache, save_cache
from .exports import parse_named_exports
from .merge import merge_examples
from .models import (
    CacheEntry,
    FileAction,
    HashCache,
    SourceUnit,
    SyncOptions,
    SyncResult,
    SyncSummary,
)
from .coverage import CoverageReport, component_coverage, suggest_stories
from .orchestrator import process_units, sync_all
from .paths import PathBlockedError, artifact_paths, is_derived_artifact
from .unit import sync_component, sync_unit
from .watcher import WatchState, start_watching

__all__ = [
    "CacheEntry",
    "CoverageReport",
    "FileAction",
    "HashCache",
    "PathBlockedError",
    "SourceUnit",
    "SyncOptions",
    "SyncResult",
    "SyncSummary",
    "WatchState",
    "artifact_paths",
    "component_coverage",
    "hash_file",
    "is_derived_artifact",
    "load_cache",
    "merge_examples",
    "parse_named_exports",
    "process_units",
    "prune_cache",
    "save_cache",
    "start_watching",
    "suggest_stories",
    "sync_all",
    "sync_component",
    "sync_unit",
]
