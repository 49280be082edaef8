"""Single-unit synchronization against the hash cache."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from story_sync.config import SyncConfig
from story_sync.generators.base import ArtifactGenerator, GeneratedArtifact, write_artifact
from story_sync.generators.registry import Generators
from story_sync.scanner.analysis import describe_component
from story_sync.scanner.discovery import find_story_file
from story_sync.scanner.models import ComponentDescription
from story_sync.sync.cache import hash_file, hash_text, load_cache, save_cache, utc_now_iso
from story_sync.sync.exports import parse_named_exports
from story_sync.sync.merge import merge_examples
from story_sync.sync.models import (
    SKIPPED,
    CacheEntry,
    FileAction,
    HashCache,
    SourceUnit,
    SyncOptions,
    SyncResult,
)
from story_sync.sync.paths import artifact_paths, relative_posix, resolve_repo_path

logger = logging.getLogger(__name__)

CHANGED_REASON = "component changed"


class _LazyDescription:
    """Describe the component on first use only."""

    def __init__(self, config: SyncConfig, path: str) -> None:
        self._config = config
        self._path = path
        self._value: ComponentDescription | None = None

    def get(self) -> ComponentDescription:
        if self._value is None:
            self._value = describe_component(self._config, self._path)
        return self._value


def sync_unit(
    config: SyncConfig,
    unit: SourceUnit,
    old_cache: HashCache,
    new_entries: dict[str, CacheEntry],
    options: SyncOptions,
    generators: Generators | None = None,
) -> SyncResult:
    """Create, regenerate or leave each artifact of one unit.

    The unit's cache entry is written into `new_entries` before any artifact
    work starts. Generator and filesystem errors propagate to the caller.
    """
    active = generators or Generators()
    root = config.root_dir
    current_hash = hash_file(root / unit.path)
    previous = old_cache.entries.get(unit.path)
    changed = previous is None or previous.content_hash != current_hash
    if changed:
        entry = CacheEntry(
            content_hash=current_hash,
            last_sync=utc_now_iso(),
            examples=previous.examples if previous is not None else (),
        )
    else:
        entry = previous
    new_entries[unit.path] = entry

    update = options.update_existing and changed
    description = _LazyDescription(config, unit.path)
    paths = artifact_paths(unit.path)
    story_target = unit.example_artifact_path or paths.story

    story_action = SKIPPED
    story_content: str | None = None
    if options.stories:
        story_action, story_content, generated = _sync_story(
            root,
            story_target,
            active.story,
            config,
            description,
            update,
            previous.examples if previous is not None else (),
            options.dry_run,
        )
        if generated is not None and changed:
            new_entries[unit.path] = replace(entry, examples=generated)
    if story_content is None:
        story_content = _read_text(root / story_target)
    example_names = tuple(parse_named_exports(story_content)) if story_content else ()

    test_action = SKIPPED
    if options.tests:
        test_action = _sync_artifact(
            root,
            paths.test,
            active.test,
            config,
            description,
            update,
            example_names,
            options.dry_run,
        )
    docs_action = SKIPPED
    if options.docs:
        docs_action = _sync_artifact(
            root,
            paths.docs,
            active.docs,
            config,
            description,
            update,
            example_names,
            options.dry_run,
        )

    return SyncResult(
        component=unit.name,
        path=unit.path,
        story=story_action,
        test=test_action,
        docs=docs_action,
    )


def sync_component(
    config: SyncConfig,
    component_path: str,
    options: SyncOptions,
    generators: Generators | None = None,
) -> SyncResult:
    """Sync one component by path, always regenerating changed artifacts.

    Loads the cache, merges the unit's fresh entry into it and saves it
    unless `options.dry_run` is set.
    """
    full_path = resolve_repo_path(config.root_dir, component_path)
    relative = relative_posix(config.root_dir, full_path)
    description = describe_component(config, relative)
    story_path = find_story_file(config.root_dir, relative)
    unit = SourceUnit(
        name=description.name,
        path=relative,
        library=description.library,
        has_example_artifact=story_path is not None,
        example_artifact_path=story_path,
        export_kind=description.export_kind,
    )
    cache = load_cache(config.root_dir, config.cache_filename)
    new_entries: dict[str, CacheEntry] = {}
    result = sync_unit(
        config,
        unit,
        cache,
        new_entries,
        replace(options, update_existing=True),
        generators,
    )
    if not options.dry_run:
        merged = HashCache(version=cache.version, entries={**cache.entries, **new_entries})
        save_cache(config.root_dir, merged, config.cache_filename)
    return result


def _sync_story(
    root: Path,
    target: str,
    generator: ArtifactGenerator,
    config: SyncConfig,
    description: _LazyDescription,
    update: bool,
    generated_before: tuple[str, ...],
    dry_run: bool,
) -> tuple[FileAction, str | None, tuple[str, ...] | None]:
    """Return the story action, its final content, and the generated example names."""
    full_path = root / target
    if not full_path.exists():
        artifact = _retarget(generator.generate(config, description.get()), target)
        if not dry_run:
            write_artifact(root, artifact, overwrite=False)
        action = FileAction(
            action="created", path=target, content_hash=hash_text(artifact.content)
        )
        return action, artifact.content, artifact.examples
    if not update:
        return FileAction(action="unchanged", path=target), None, None

    prior = full_path.read_text(encoding="utf-8", errors="replace")
    artifact = generator.generate(config, description.get())
    merged = merge_examples(artifact.content, prior, artifact.examples, generated_before)
    if merged.preserved:
        logger.info("Preserved %d custom example(s) in %s", len(merged.preserved), target)
    if not dry_run:
        write_artifact(
            root, GeneratedArtifact(content=merged.content, path=target), overwrite=True
        )
    action = FileAction(
        action="updated",
        path=target,
        reason=CHANGED_REASON,
        preserved=merged.preserved,
        removed=merged.removed,
        content_hash=hash_text(merged.content),
    )
    return action, merged.content, artifact.examples


def _sync_artifact(
    root: Path,
    target: str,
    generator: ArtifactGenerator,
    config: SyncConfig,
    description: _LazyDescription,
    update: bool,
    example_names: tuple[str, ...],
    dry_run: bool,
) -> FileAction:
    """Create or regenerate a test or docs artifact."""
    exists = (root / target).exists()
    if exists and not update:
        return FileAction(action="unchanged", path=target)
    artifact = _retarget(generator.generate(config, description.get(), example_names), target)
    if not dry_run:
        write_artifact(root, artifact, overwrite=exists)
    return FileAction(
        action="updated" if exists else "created",
        path=target,
        reason=CHANGED_REASON if exists else None,
        content_hash=hash_text(artifact.content),
    )


def _retarget(artifact: GeneratedArtifact, target: str) -> GeneratedArtifact:
    if artifact.path == target:
        return artifact
    return replace(artifact, path=target)


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
