from __future__ import annotations

import json
from pathlib import Path

from story_sync.sync.cache import (
    cache_to_payload,
    hash_file,
    hash_text,
    load_cache,
    prune_cache,
    save_cache,
)
from story_sync.sync.models import CACHE_SCHEMA_VERSION, CacheEntry, HashCache


def test_missing_cache_file_loads_empty(tmp_path: Path) -> None:
    cache = load_cache(tmp_path)

    assert cache.version == CACHE_SCHEMA_VERSION
    assert cache.entries == {}


def test_malformed_cache_file_loads_empty(tmp_path: Path) -> None:
    (tmp_path / ".story-sync-cache.json").write_text("{not json", encoding="utf-8")

    assert load_cache(tmp_path).entries == {}


def test_schema_mismatch_loads_empty(tmp_path: Path) -> None:
    payload = {"version": "0", "components": {"src/A.tsx": {"hash": "x", "lastSync": "t"}}}
    (tmp_path / ".story-sync-cache.json").write_text(json.dumps(payload), encoding="utf-8")

    assert load_cache(tmp_path).entries == {}


def test_invalid_entries_are_skipped(tmp_path: Path) -> None:
    payload = {
        "version": CACHE_SCHEMA_VERSION,
        "components": {
            "src/Good.tsx": {"hash": "abc", "lastSync": "2026-01-01T00:00:00.000Z"},
            "src/NoHash.tsx": {"lastSync": "2026-01-01T00:00:00.000Z"},
            "src/NotADict.tsx": "abc",
        },
    }
    (tmp_path / ".story-sync-cache.json").write_text(json.dumps(payload), encoding="utf-8")

    cache = load_cache(tmp_path)

    assert list(cache.entries) == ["src/Good.tsx"]


def test_save_then_load_preserves_entries_and_examples(tmp_path: Path) -> None:
    cache = HashCache(
        entries={
            "src/b/Beta.tsx": CacheEntry("h2", "2026-01-02T00:00:00.000Z"),
            "src/a/Alpha.tsx": CacheEntry("h1", "2026-01-01T00:00:00.000Z", ("Default",)),
        }
    )

    assert save_cache(tmp_path, cache) is True
    loaded = load_cache(tmp_path)

    assert loaded.entries == cache.entries
    raw = json.loads((tmp_path / ".story-sync-cache.json").read_text(encoding="utf-8"))
    assert list(raw["components"]) == ["src/a/Alpha.tsx", "src/b/Beta.tsx"]
    assert "examples" not in raw["components"]["src/b/Beta.tsx"]
    assert not (tmp_path / ".story-sync-cache.json.tmp").exists()


def test_save_failure_reports_false(tmp_path: Path) -> None:
    missing_dir = tmp_path / "missing"

    assert save_cache(missing_dir, HashCache()) is False


def test_prune_drops_entries_not_in_scan() -> None:
    cache = HashCache(
        entries={
            "src/Keep.tsx": CacheEntry("h1", "t"),
            "src/Gone.tsx": CacheEntry("h2", "t"),
        }
    )

    pruned = prune_cache(cache, ["src/Keep.tsx", "src/New.tsx"])

    assert list(pruned.entries) == ["src/Keep.tsx"]
    assert len(cache.entries) == 2


def test_hash_is_stable_and_content_sensitive(tmp_path: Path) -> None:
    source = tmp_path / "Button.tsx"
    source.write_text("export const Button = () => null\n", encoding="utf-8")
    first = hash_file(source)

    assert first == hash_file(source)
    assert first == hash_text("export const Button = () => null\n")

    source.write_text("export const Button = () => <b />\n", encoding="utf-8")
    assert hash_file(source) != first


def test_unreadable_file_hashes_to_empty_string(tmp_path: Path) -> None:
    assert hash_file(tmp_path / "missing.tsx") == ""


def test_payload_shape_uses_camel_case_timestamp() -> None:
    payload = cache_to_payload(HashCache(entries={"a.tsx": CacheEntry("h", "t")}))

    assert payload == {
        "version": CACHE_SCHEMA_VERSION,
        "components": {"a.tsx": {"hash": "h", "lastSync": "t"}},
    }
