"""Batch reconciliation over every discovered source unit."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from story_sync.config import SyncConfig
from story_sync.generators.registry import Generators
from story_sync.logging.history import HistoryLog
from story_sync.scanner.discovery import scan_components
from story_sync.sync.cache import load_cache, prune_cache, save_cache
from story_sync.sync.models import (
    CacheEntry,
    HashCache,
    SourceUnit,
    SyncError,
    SyncOptions,
    SyncSummary,
)
from story_sync.sync.unit import sync_unit

logger = logging.getLogger(__name__)


class ScanFn(Protocol):
    """Scanner callback signature used by the orchestrator and watcher."""

    def __call__(self, config: SyncConfig, library: str | None = None) -> list[SourceUnit]:
        """Return discovered source units."""


def sync_all(
    config: SyncConfig,
    options: SyncOptions,
    generators: Generators | None = None,
    history: HistoryLog | None = None,
    scan: ScanFn | None = None,
) -> SyncSummary:
    """Run one full reconciliation pass and persist the cache once at the end."""
    scan_fn = scan or scan_components
    cache = load_cache(config.root_dir, config.cache_filename)
    units = scan_fn(config, options.library)
    summary = SyncSummary(scanned=len(units))
    pruned = prune_cache(cache, (unit.path for unit in units))

    selected = select_units(units, options, summary)
    logger.info("Syncing %d of %d components", len(selected), len(units))

    entries = process_units(
        config, selected, pruned, options, summary, generators, history, trigger="sync"
    )
    pruned.entries.update(entries)
    if not options.dry_run:
        save_cache(config.root_dir, pruned, config.cache_filename)
    log_summary(summary, options)
    return summary


def select_units(
    units: list[SourceUnit], options: SyncOptions, summary: SyncSummary
) -> list[SourceUnit]:
    """Apply the processing cap, then the name filter.

    Units removed by the filter count as skipped. Units beyond the cap are
    reported through the summary's truncation fields.
    """
    selected = units
    limit = options.max_components
    if limit is not None and limit < len(units):
        selected = units[:limit]
        summary.truncated = True
        summary.limit = limit
        summary.notice = (
            f"Component limit reached: synced first {limit} of {len(units)} components "
            f"(cap {limit})."
        )
    if not options.name_filter:
        return list(selected)
    needle = options.name_filter.lower()
    kept: list[SourceUnit] = []
    for unit in selected:
        if needle in unit.name.lower():
            kept.append(unit)
        else:
            summary.skipped += 1
    return kept


def process_units(
    config: SyncConfig,
    units: Sequence[SourceUnit],
    cache: HashCache,
    options: SyncOptions,
    summary: SyncSummary,
    generators: Generators | None = None,
    history: HistoryLog | None = None,
    trigger: str = "sync",
) -> dict[str, CacheEntry]:
    """Sync units in sequential batches of at most `options.batch_size` workers.

    Returns the cache entries recorded by units that completed without error.
    A failing unit is recorded in `summary.errors` and its entry is dropped so
    a later pass retries it.
    """
    active = generators or Generators()
    new_entries: dict[str, CacheEntry] = {}
    batch_size = max(1, options.batch_size)
    with ThreadPoolExecutor(max_workers=batch_size, thread_name_prefix="story-sync") as pool:
        for batch in batched(units, batch_size):
            futures = [
                (unit, pool.submit(sync_unit, config, unit, cache, new_entries, options, active))
                for unit in batch
            ]
            for unit, future in futures:
                try:
                    result = future.result()
                except Exception as error:
                    new_entries.pop(unit.path, None)
                    summary.errors.append(SyncError(component=unit.name, error=str(error)))
                    logger.warning("Failed to sync %s: %s", unit.path, error)
                    continue
                summary.record(result)
                if history is not None and not options.dry_run:
                    history.record(result, trigger)
    summary.processed += len(units)
    return new_entries


def batched(units: Sequence[SourceUnit], size: int) -> Iterator[Sequence[SourceUnit]]:
    """Yield consecutive slices of at most `size` units."""
    for start in range(0, len(units), size):
        yield units[start : start + size]


def log_summary(summary: SyncSummary, options: SyncOptions) -> None:
    """Log the pass outcome in a few lines."""
    created = summary.created
    updated = summary.updated
    prefix = "Dry run complete" if options.dry_run else "Sync complete"
    logger.info(
        "%s: scanned %d, processed %d, skipped %d",
        prefix,
        summary.scanned,
        summary.processed,
        summary.skipped,
    )
    logger.info(
        "Created %d files (%d stories, %d tests, %d docs)",
        created.total,
        created.stories,
        created.tests,
        created.docs,
    )
    logger.info(
        "Updated %d files (%d stories, %d tests, %d docs)",
        updated.total,
        updated.stories,
        updated.tests,
        updated.docs,
    )
    if summary.errors:
        logger.warning("%d component(s) failed to sync", len(summary.errors))
    if summary.truncated:
        logger.warning("%s", summary.notice)
