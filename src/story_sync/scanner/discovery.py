"""Deterministic component discovery."""

from __future__ import annotations

import fnmatch
import os
import re
from pathlib import Path, PurePosixPath

from story_sync.config import ScanConfig, SyncConfig
from story_sync.sync.models import ExportKind, SourceUnit
from story_sync.sync.paths import STORY_SUFFIX, is_derived_artifact

_EXPORT_DEFAULT_RE = re.compile(r"^\s*export\s+default\b", re.MULTILINE)
_STORY_DIRECTORIES = ("", "stories", "__stories__")


def scan_components(config: SyncConfig, library: str | None = None) -> list[SourceUnit]:
    """Discover component source units in every configured library."""
    root = config.root_dir
    units: dict[str, SourceUnit] = {}
    excluded_dir_names = _excluded_dir_names(config.scan.exclude_globs)
    for library_config, library_root in config.library_roots():
        if library is not None and library != "all" and library != library_config.name:
            continue
        if not library_root.is_dir():
            continue
        for full_path in _walk(library_root, root, config.scan, excluded_dir_names):
            relative = full_path.relative_to(root).as_posix()
            if relative in units:
                continue
            name = component_name(relative, config.scan)
            if name is None:
                continue
            story_path = find_story_file(root, relative)
            units[relative] = SourceUnit(
                name=name,
                path=relative,
                library=library_config.name,
                has_example_artifact=story_path is not None,
                example_artifact_path=story_path,
                export_kind=detect_export_kind(full_path),
            )
    return sorted(units.values(), key=lambda unit: (unit.name.lower(), unit.path))


def unit_for_path(config: SyncConfig, relative_path: str) -> SourceUnit | None:
    """Build a source unit for one known path, or None when it is not a component."""
    if not is_component_path(config, relative_path):
        return None
    name = component_name(relative_path, config.scan)
    if name is None:
        return None
    library = config.find_library(relative_path)
    if library is None:
        return None
    story_path = find_story_file(config.root_dir, relative_path)
    return SourceUnit(
        name=name,
        path=relative_path,
        library=library.name,
        has_example_artifact=story_path is not None,
        example_artifact_path=story_path,
        export_kind=detect_export_kind(config.root_dir / relative_path),
    )


def is_component_path(config: SyncConfig, relative_path: str) -> bool:
    """Return True when a project-relative path follows the component naming rules."""
    if not has_component_extension(relative_path, config.scan.component_extensions):
        return False
    if is_derived_artifact(relative_path):
        return False
    if should_exclude(relative_path, config.scan.exclude_globs):
        return False
    if config.find_library(relative_path) is None:
        return False
    return component_name(relative_path, config.scan) is not None


def component_name(relative_path: str, scan: ScanConfig) -> str | None:
    """Derive the PascalCase component name; None for non-component files."""
    path = PurePosixPath(relative_path)
    basename = path.stem
    if basename == "index":
        parent = path.parent.name
        return to_pascal_case(parent) if parent else None
    if basename.lower() in scan.non_component_names:
        return None
    return to_pascal_case(basename)


def find_story_file(root_dir: Path, relative_path: str) -> str | None:
    """Locate an existing story file next to or below the component."""
    path = PurePosixPath(relative_path)
    for directory in _STORY_DIRECTORIES:
        for extension in (path.suffix, ".tsx", ".ts"):
            candidate = path.parent / directory / f"{path.stem}{STORY_SUFFIX}{extension}"
            if (root_dir / candidate).is_file():
                return candidate.as_posix()
    return None


def detect_export_kind(full_path: Path) -> ExportKind:
    """Return 'default' when the module has a default export."""
    try:
        source = full_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return "named"
    return "default" if _EXPORT_DEFAULT_RE.search(source) else "named"


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a path matches configured ignore globs."""
    anchored = f"/{relative_path}"
    return any(
        fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern)
        for pattern in exclude_globs
    )


def has_component_extension(relative_path: str, extensions: tuple[str, ...]) -> bool:
    """Return True when the file extension is a component extension."""
    return PurePosixPath(relative_path).suffix.lower() in extensions


def to_pascal_case(value: str) -> str:
    """Convert `my-button` or `my_button` to `MyButton`."""
    converted = re.sub(r"[-_](.)", lambda match: match.group(1).upper(), value)
    return converted[:1].upper() + converted[1:]


def to_kebab_case(value: str) -> str:
    """Convert `MyButton` to `my-button`."""
    converted = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", value)
    return re.sub(r"[\s_]+", "-", converted).lower()


def _walk(
    library_root: Path,
    root: Path,
    scan: ScanConfig,
    excluded_dir_names: set[str],
) -> list[Path]:
    """Walk a library tree deterministically, pruning excluded directories."""
    output: list[Path] = []
    stack: list[Path] = [library_root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                ordered_entries = sorted(entries, key=lambda item: item.name)
        except OSError:
            continue
        for entry in reversed(ordered_entries):
            full_path = Path(entry.path)
            try:
                relative = full_path.relative_to(root).as_posix()
            except ValueError:
                continue
            if entry.is_dir(follow_symlinks=False):
                if entry.name in excluded_dir_names and should_exclude(
                    f"{relative}/", scan.exclude_globs
                ):
                    continue
                stack.append(full_path)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            if not has_component_extension(relative, scan.component_extensions):
                continue
            if is_derived_artifact(relative):
                continue
            if should_exclude(relative, scan.exclude_globs):
                continue
            output.append(full_path)
    return output


def _excluded_dir_names(exclude_globs: tuple[str, ...]) -> set[str]:
    """Extract directory-name prunes from **/name/** glob patterns."""
    output: set[str] = set()
    for pattern in exclude_globs:
        if not pattern.startswith("**/") or not pattern.endswith("/**"):
            continue
        name = pattern[3:-3].strip("/")
        if not name:
            continue
        if any(char in name for char in "*?[]{}"):
            continue
        output.add(name)
    return output
