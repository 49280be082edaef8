from __future__ import annotations

from pathlib import Path

import pytest

from story_sync.config import SyncConfig, load_effective_config
from story_sync.scanner.discovery import unit_for_path
from story_sync.scanner.models import ComponentNotFoundError
from story_sync.sync.cache import hash_file, load_cache
from story_sync.sync.exports import parse_named_exports
from story_sync.sync.models import CacheEntry, HashCache, SyncOptions
from story_sync.sync.paths import PathBlockedError
from story_sync.sync.unit import sync_component, sync_unit

BUTTON_SOURCE = """import React from 'react'

export interface ButtonProps {
  /** Visual style */
  variant?: 'primary' | 'secondary'
  size?: 'sm' | 'md' | 'lg'
  disabled?: boolean
  children: React.ReactNode
  onClick?: () => void
}

export function Button({ variant = 'primary', size = 'md', children }: ButtonProps) {
  return <button className={variant}>{children}</button>
}
"""


def _project(tmp_path: Path) -> tuple[SyncConfig, str]:
    components = tmp_path / "src" / "components"
    components.mkdir(parents=True)
    (components / "Button.tsx").write_text(BUTTON_SOURCE, encoding="utf-8")
    return load_effective_config(tmp_path), "src/components/Button.tsx"


def _sync(config: SyncConfig, rel: str, cache: HashCache, options: SyncOptions):
    unit = unit_for_path(config, rel)
    assert unit is not None
    entries: dict[str, CacheEntry] = {}
    result = sync_unit(config, unit, cache, entries, options)
    return result, entries


def test_new_unit_creates_every_artifact(tmp_path: Path) -> None:
    config, rel = _project(tmp_path)

    result, entries = _sync(config, rel, HashCache(), SyncOptions())

    assert result.story.action == "created"
    assert result.test.action == "created"
    assert result.docs.action == "created"
    story = (tmp_path / "src/components/Button.stories.tsx").read_text(encoding="utf-8")
    assert parse_named_exports(story) == ["Default", "Sizes", "Variants", "Interactive"]
    assert (tmp_path / "src/components/Button.test.tsx").is_file()
    assert (tmp_path / "src/components/Button.mdx").is_file()
    entry = entries[rel]
    assert entry.content_hash == hash_file(tmp_path / rel)
    assert entry.examples == ("Default", "Sizes", "Variants", "Interactive")


def test_unchanged_unit_is_left_alone(tmp_path: Path) -> None:
    config, rel = _project(tmp_path)
    _, first_entries = _sync(config, rel, HashCache(), SyncOptions())
    story_path = tmp_path / "src/components/Button.stories.tsx"
    story_path.write_text(story_path.read_text(encoding="utf-8") + "// edited\n", "utf-8")

    result, entries = _sync(config, rel, HashCache(entries=first_entries), SyncOptions())

    assert result.changed_kinds() == []
    assert result.story.action == "unchanged"
    assert entries[rel] == first_entries[rel]
    assert story_path.read_text(encoding="utf-8").endswith("// edited\n")


def test_changed_unit_regenerates_and_preserves_user_examples(tmp_path: Path) -> None:
    config, rel = _project(tmp_path)
    _, first_entries = _sync(config, rel, HashCache(), SyncOptions())
    story_path = tmp_path / "src/components/Button.stories.tsx"
    story_path.write_text(
        story_path.read_text(encoding="utf-8")
        + "\nexport const Custom: Story = {\n  args: { children: 'Custom' },\n}\n",
        encoding="utf-8",
    )
    source = tmp_path / rel
    source.write_text(source.read_text(encoding="utf-8") + "\n// touched\n", encoding="utf-8")

    result, entries = _sync(config, rel, HashCache(entries=first_entries), SyncOptions())

    assert result.story.action == "updated"
    assert result.story.preserved == ("Custom",)
    assert result.story.reason == "component changed"
    assert result.test.action == "updated"
    assert result.docs.action == "updated"
    story = story_path.read_text(encoding="utf-8")
    assert parse_named_exports(story)[-1] == "Custom"
    docs = (tmp_path / "src/components/Button.mdx").read_text(encoding="utf-8")
    assert "<Canvas of={ButtonStories.Custom} />" in docs
    assert entries[rel].content_hash == hash_file(source)


def test_dropped_generated_example_is_reported_removed(tmp_path: Path) -> None:
    config, rel = _project(tmp_path)
    _, first_entries = _sync(config, rel, HashCache(), SyncOptions())
    source = tmp_path / rel
    source.write_text(
        source.read_text(encoding="utf-8").replace("  size?: 'sm' | 'md' | 'lg'\n", ""),
        encoding="utf-8",
    )

    result, _ = _sync(config, rel, HashCache(entries=first_entries), SyncOptions())

    assert result.story.removed == ("Sizes",)
    assert result.story.preserved == ()
    story = (tmp_path / "src/components/Button.stories.tsx").read_text(encoding="utf-8")
    assert "Sizes" not in parse_named_exports(story)


def test_changed_unit_without_update_leaves_existing_artifacts(tmp_path: Path) -> None:
    config, rel = _project(tmp_path)
    _, first_entries = _sync(config, rel, HashCache(), SyncOptions())
    source = tmp_path / rel
    source.write_text(source.read_text(encoding="utf-8") + "\n// touched\n", encoding="utf-8")

    result, entries = _sync(
        config, rel, HashCache(entries=first_entries), SyncOptions(update_existing=False)
    )

    assert result.changed_kinds() == []
    assert entries[rel].content_hash == hash_file(source)


def test_disabled_kinds_are_skipped_and_missing_ones_recreated(tmp_path: Path) -> None:
    config, rel = _project(tmp_path)
    _, first_entries = _sync(config, rel, HashCache(), SyncOptions(tests=False, docs=False))
    assert not (tmp_path / "src/components/Button.test.tsx").exists()

    result, _ = _sync(config, rel, HashCache(entries=first_entries), SyncOptions(docs=False))

    assert result.story.action == "unchanged"
    assert result.test.action == "created"
    assert result.docs.action == "skipped"


def test_dry_run_writes_nothing_but_reports_actions(tmp_path: Path) -> None:
    config, rel = _project(tmp_path)

    result, entries = _sync(config, rel, HashCache(), SyncOptions(dry_run=True))

    assert result.story.action == "created"
    assert rel in entries
    assert not (tmp_path / "src/components/Button.stories.tsx").exists()
    assert not (tmp_path / "src/components/Button.mdx").exists()


def test_sync_component_saves_cache(tmp_path: Path) -> None:
    config, rel = _project(tmp_path)

    result = sync_component(config, rel, SyncOptions())

    assert result.component == "Button"
    assert result.story.action == "created"
    assert rel in load_cache(tmp_path).entries


def test_sync_component_rejects_missing_and_escaping_paths(tmp_path: Path) -> None:
    config, _ = _project(tmp_path)

    with pytest.raises(ComponentNotFoundError):
        sync_component(config, "src/components/Missing.tsx", SyncOptions())
    with pytest.raises(PathBlockedError):
        sync_component(config, "../outside/Button.tsx", SyncOptions())


def test_existing_story_in_stories_directory_is_the_merge_target(tmp_path: Path) -> None:
    config, rel = _project(tmp_path)
    stories_dir = tmp_path / "src/components/stories"
    stories_dir.mkdir()
    (stories_dir / "Button.stories.tsx").write_text(
        "export const Mine = {}\n", encoding="utf-8"
    )

    result, _ = _sync(config, rel, HashCache(), SyncOptions(tests=False))

    assert result.story.path == "src/components/stories/Button.stories.tsx"
    assert result.story.action == "updated"
    assert result.story.preserved == ("Mine",)
    assert not (tmp_path / "src/components/Button.stories.tsx").exists()
    docs = (tmp_path / "src/components/Button.mdx").read_text(encoding="utf-8")
    assert "<Canvas of={ButtonStories.Mine} />" in docs
