"""Filesystem watcher with per-path debounce and a recurring catch-up rescan."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from story_sync.config import SyncConfig
from story_sync.generators.registry import Generators
from story_sync.logging.history import HistoryLog
from story_sync.scanner.discovery import is_component_path, scan_components, unit_for_path
from story_sync.sync.cache import hash_file, load_cache, prune_cache, save_cache
from story_sync.sync.models import CacheEntry, HashCache, SourceUnit, SyncOptions, SyncSummary
from story_sync.sync.orchestrator import ScanFn, process_units, select_units
from story_sync.sync.unit import sync_unit

logger = logging.getLogger(__name__)

OBSERVER_JOIN_TIMEOUT_SECONDS = 2.0


class DebounceTimers:
    """Per-key single-shot timers.

    Scheduling a key that already has a pending timer cancels it first, so the
    callback fires once per key after the last event in a burst.
    """

    def __init__(self, delay_seconds: float, callback: Callable[[str], None]) -> None:
        self._delay = delay_seconds
        self._callback = callback
        self._timers: dict[str, tuple[object, threading.Timer]] = {}
        self._lock = threading.Lock()
        self._closed = False

    def schedule(self, key: str) -> None:
        """(Re)start the timer for `key`."""
        token = object()
        timer = threading.Timer(self._delay, self._fire, args=(key, token))
        timer.daemon = True
        with self._lock:
            if self._closed:
                return
            pending = self._timers.pop(key, None)
            if pending is not None:
                pending[1].cancel()
            self._timers[key] = (token, timer)
            timer.start()

    def pending(self) -> int:
        """Return the number of keys waiting to settle."""
        with self._lock:
            return len(self._timers)

    def cancel_all(self) -> None:
        """Cancel every pending timer and refuse new ones."""
        with self._lock:
            self._closed = True
            timers = list(self._timers.values())
            self._timers.clear()
        for _, timer in timers:
            timer.cancel()

    def _fire(self, key: str, token: object) -> None:
        with self._lock:
            current = self._timers.get(key)
            if current is None or current[0] is not token:
                return
            del self._timers[key]
        self._callback(key)


class RecurringTimer:
    """Call `callback` every `interval_seconds` on a daemon thread until cancelled."""

    def __init__(self, interval_seconds: float, callback: Callable[[], None]) -> None:
        self._interval = interval_seconds
        self._callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="story-sync-rescan", daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def _run(self) -> None:
        while not self._cancelled.wait(self._interval):
            self._callback()


class ComponentEventHandler(FileSystemEventHandler):
    """Forward file events to the watch state; moves become delete + create."""

    def __init__(self, state: WatchState) -> None:
        super().__init__()
        self._state = state

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._state._notify(os.fsdecode(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._state._notify(os.fsdecode(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._state._notify(os.fsdecode(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._state._notify(os.fsdecode(event.src_path))
        self._state._notify(os.fsdecode(event.dest_path))


class WatchState:
    """Runtime state of a running watcher, created by `start_watching`.

    `stop()` releases observers and timers. Callbacks that fire after it has
    been called do nothing.
    """

    def __init__(
        self,
        config: SyncConfig,
        options: SyncOptions,
        generators: Generators | None = None,
        history: HistoryLog | None = None,
        scan: ScanFn | None = None,
    ) -> None:
        self.config = config
        self.options = replace(options, update_existing=True)
        self.generators = generators or Generators()
        self.history = history
        self.observers: list[BaseObserver] = []
        self.lock = threading.Lock()
        self.stopped = False
        self.debouncer = DebounceTimers(config.watch.debounce_ms / 1000.0, self._on_settled)
        self.rescan_timer = RecurringTimer(config.watch.rescan_interval_seconds, self._rescan)
        self._scan = scan or scan_components
        # Paths inside the cap and name filter; None until first needed.
        self._selected: frozenset[str] | None = None
        # Dry runs never save the cache, so reported hashes stand in for it.
        self._dry_run_hashes: dict[str, str] = {}

    def _notify(self, absolute_path: str) -> None:
        """Filter one raw event path and debounce it when it names a component."""
        if self.stopped:
            return
        relative = self._relative(absolute_path)
        if relative is None or not is_component_path(self.config, relative):
            return
        self.debouncer.schedule(relative)

    def _rescan(self) -> None:
        """Re-hash every unit and re-sync those that disagree with the cache."""
        if self.stopped:
            return
        try:
            units = self._scan(self.config, self.options.library)
            cache = load_cache(self.config.root_dir, self.config.cache_filename)
            summary = SyncSummary(scanned=len(units))
            selected = select_units(units, self.options, summary)
            self._selected = frozenset(unit.path for unit in selected)
            stale = [unit for unit in selected if self._is_stale(unit, cache)]
            entries = process_units(
                self.config,
                stale,
                cache,
                self.options,
                summary,
                self.generators,
                self.history,
                trigger="rescan",
            )
            with self.lock:
                current = load_cache(self.config.root_dir, self.config.cache_filename)
                pruned = prune_cache(current, (unit.path for unit in units))
                pruned.entries.update(entries)
                dirty = bool(entries) or len(pruned.entries) != len(current.entries)
                if self.options.dry_run:
                    self._remember_dry_run(entries)
                elif dirty:
                    save_cache(self.config.root_dir, pruned, self.config.cache_filename)
        except Exception as error:
            logger.warning("Rescan failed: %s", error)
            return
        if stale:
            logger.info(
                "%s %d component(s), %d error(s)",
                "Rescan would re-sync" if self.options.dry_run else "Rescan re-synced",
                len(stale),
                len(summary.errors),
            )

    def stop(self) -> None:
        """Stop timers and observers; safe to call more than once."""
        if self.stopped:
            return
        self.stopped = True
        self.rescan_timer.cancel()
        self.debouncer.cancel_all()
        for observer in self.observers:
            observer.stop()
        current = threading.current_thread()
        for observer in self.observers:
            if observer is not current and observer.is_alive():
                observer.join(OBSERVER_JOIN_TIMEOUT_SECONDS)
        self.rescan_timer.join(OBSERVER_JOIN_TIMEOUT_SECONDS)
        logger.info("Watcher stopped")

    def _on_settled(self, relative: str) -> None:
        if self.stopped:
            return
        try:
            if not (self.config.root_dir / relative).exists():
                self._handle_deletion(relative)
                return
            self._handle_change(relative)
        except Exception as error:
            logger.warning("Watch sync failed for %s: %s", relative, error)

    def _handle_deletion(self, relative: str) -> None:
        with self.lock:
            cache = load_cache(self.config.root_dir, self.config.cache_filename)
            if cache.entries.pop(relative, None) is None:
                return
            if not self.options.dry_run:
                save_cache(self.config.root_dir, cache, self.config.cache_filename)
        logger.info("Removed %s from cache", relative)

    def _handle_change(self, relative: str) -> None:
        unit = unit_for_path(self.config, relative)
        if unit is None:
            return
        if not self._is_selected(relative):
            logger.debug("Skipping %s: outside the component limit or filter", relative)
            return
        snapshot = load_cache(self.config.root_dir, self.config.cache_filename)
        new_entries: dict[str, CacheEntry] = {}
        result = sync_unit(
            self.config, unit, snapshot, new_entries, self.options, self.generators
        )
        changed = result.changed_kinds()
        if self.options.dry_run:
            with self.lock:
                self._remember_dry_run(new_entries)
            if changed:
                logger.info("Dry run: %s: %s", unit.name, ", ".join(changed))
            return
        with self.lock:
            cache = load_cache(self.config.root_dir, self.config.cache_filename)
            cache.entries.update(new_entries)
            save_cache(self.config.root_dir, cache, self.config.cache_filename)
        if changed:
            logger.info("%s: %s", unit.name, ", ".join(changed))
        if self.history is not None:
            self.history.record(result, "watch")

    def _is_selected(self, relative: str) -> bool:
        """Apply the same component limit and name filter as the rescan.

        A path missing from the remembered selection triggers one fresh scan,
        so newly created components inside the limit are picked up.
        """
        if self.options.max_components is None and not self.options.name_filter:
            return True
        selected = self._selected
        if selected is None or relative not in selected:
            units = self._scan(self.config, self.options.library)
            picked = select_units(units, self.options, SyncSummary(scanned=len(units)))
            selected = frozenset(unit.path for unit in picked)
            self._selected = selected
        return relative in selected

    def _is_stale(self, unit: SourceUnit, cache: HashCache) -> bool:
        current = hash_file(self.config.root_dir / unit.path)
        if self._dry_run_hashes.get(unit.path) == current:
            return False
        entry = cache.entries.get(unit.path)
        return entry is None or entry.content_hash != current

    def _remember_dry_run(self, entries: dict[str, CacheEntry]) -> None:
        for path, entry in entries.items():
            self._dry_run_hashes[path] = entry.content_hash

    def _relative(self, absolute_path: str) -> str | None:
        try:
            path = Path(absolute_path).resolve(strict=False)
            return path.relative_to(self.config.root_dir).as_posix()
        except (OSError, ValueError):
            return None


def start_watching(
    config: SyncConfig,
    options: SyncOptions,
    generators: Generators | None = None,
    history: HistoryLog | None = None,
    scan: ScanFn | None = None,
) -> WatchState:
    """Start one observer per library root plus the recurring rescan."""
    state = WatchState(config, options, generators, history, scan)
    handler = ComponentEventHandler(state)
    observer_class = PollingObserver if config.watch.polling else Observer
    for root in watch_roots(config, options.library):
        observer = observer_class()
        try:
            observer.schedule(handler, str(root), recursive=True)
            observer.start()
        except OSError as error:
            logger.warning("Could not watch %s, relying on rescan: %s", root, error)
            continue
        state.observers.append(observer)
        logger.info("Watching %s", root)
    state.rescan_timer.start()
    return state


def watch_roots(config: SyncConfig, library: str | None = None) -> list[Path]:
    """Return existing library roots, dropping roots nested inside another."""
    roots: list[Path] = []
    for library_config, root in config.library_roots():
        if library is not None and library != "all" and library != library_config.name:
            continue
        if root.is_dir() and root not in roots:
            roots.append(root)
    return [
        root
        for root in roots
        if not any(other != root and root.is_relative_to(other) for other in roots)
    ]
