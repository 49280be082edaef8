"""Persistent content-hash cache used for change detection."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from story_sync.config import DEFAULT_CACHE_FILENAME
from story_sync.sync.models import CACHE_SCHEMA_VERSION, CacheEntry, HashCache

logger = logging.getLogger(__name__)


def load_cache(root_dir: Path, filename: str = DEFAULT_CACHE_FILENAME) -> HashCache:
    """Load the cache file, falling back to an empty cache on any failure."""
    path = root_dir / filename
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError:
        return HashCache()
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as error:
        logger.warning("Ignoring unreadable cache %s: %s", path, error)
        return HashCache()
    if not isinstance(payload, dict):
        return HashCache()
    if payload.get("version") != CACHE_SCHEMA_VERSION:
        return HashCache()
    components = payload.get("components")
    if not isinstance(components, dict):
        return HashCache()

    entries: dict[str, CacheEntry] = {}
    for key, raw in components.items():
        if not isinstance(key, str) or not isinstance(raw, dict):
            continue
        content_hash = raw.get("hash")
        last_sync = raw.get("lastSync")
        if not isinstance(content_hash, str):
            continue
        if not isinstance(last_sync, str):
            continue
        examples = raw.get("examples", [])
        if not isinstance(examples, list):
            examples = []
        entries[key] = CacheEntry(
            content_hash=content_hash,
            last_sync=last_sync,
            examples=tuple(item for item in examples if isinstance(item, str)),
        )
    return HashCache(version=CACHE_SCHEMA_VERSION, entries=entries)


def save_cache(root_dir: Path, cache: HashCache, filename: str = DEFAULT_CACHE_FILENAME) -> bool:
    """Write the cache atomically; failures are logged and reported as False."""
    path = root_dir / filename
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(cache_to_payload(cache), handle, indent=2, sort_keys=True)
            handle.write("\n")
        tmp.replace(path)
    except OSError as error:
        logger.warning("Could not write cache %s: %s", path, error)
        tmp.unlink(missing_ok=True)
        return False
    return True


def cache_to_payload(cache: HashCache) -> dict[str, object]:
    """Return the on-disk JSON shape of a cache."""
    components: dict[str, object] = {}
    for key in sorted(cache.entries):
        entry = cache.entries[key]
        row: dict[str, object] = {"hash": entry.content_hash, "lastSync": entry.last_sync}
        if entry.examples:
            row["examples"] = list(entry.examples)
        components[key] = row
    return {"version": cache.version, "components": components}


def prune_cache(cache: HashCache, live_paths: Iterable[str]) -> HashCache:
    """Drop entries whose source path is not in the current scan."""
    live = set(live_paths)
    return HashCache(
        version=cache.version,
        entries={key: entry for key, entry in cache.entries.items() if key in live},
    )


def hash_file(path: Path) -> str:
    """Compute SHA-256 hash in chunked reads; unreadable files hash to ''."""
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            while True:
                chunk = handle.read(1024 * 128)
                if not chunk:
                    break
                digest.update(chunk)
    except OSError:
        return ""
    return digest.hexdigest()


def hash_text(text: str) -> str:
    """Hash already-rendered artifact content."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def utc_now_iso() -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
