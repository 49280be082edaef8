"""Derived-artifact path conventions and repo-scoped path resolution."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath, Path
from typing import Final

STORY_SUFFIX: Final = ".stories"
TEST_SUFFIX: Final = ".test"
DOCS_EXTENSION: Final = ".mdx"
DERIVED_SUFFIXES: Final = (STORY_SUFFIX, TEST_SUFFIX, ".spec")

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


@dataclass(slots=True, frozen=True)
class ArtifactPaths:
    """Conventional artifact locations for one source unit."""

    story: str
    test: str
    docs: str


class PathBlockedError(Exception):
    """Raised when a requested path escapes the project root."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def artifact_paths(source_path: str) -> ArtifactPaths:
    """Map `dir/Base.ext` to its story, test and docs paths."""
    source = PurePosixPath(source_path.replace("\\", "/"))
    stem = source.stem
    suffix = source.suffix
    return ArtifactPaths(
        story=source.with_name(f"{stem}{STORY_SUFFIX}{suffix}").as_posix(),
        test=source.with_name(f"{stem}{TEST_SUFFIX}{suffix}").as_posix(),
        docs=source.with_name(f"{stem}{DOCS_EXTENSION}").as_posix(),
    )


def is_derived_artifact(path: str) -> bool:
    """Return True for `X.stories.tsx`, `X.test.ts` and similar generated names."""
    name = PurePosixPath(path.replace("\\", "/")).name
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return any(stem.endswith(suffix) for suffix in DERIVED_SUFFIXES)


def resolve_repo_path(repo_root: Path, candidate: str) -> Path:
    """Resolve a candidate path against the project root, rejecting escapes."""
    root = repo_root.resolve()
    normalized = candidate.replace("\\", "/")

    if not normalized:
        raise PathBlockedError(
            reason="Path is empty.",
            hint="Provide a project-relative path such as 'src/components/Button.tsx'.",
        )

    if normalized.startswith("/") or WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        resolved_absolute = Path(normalized).resolve(strict=False)
        if not resolved_absolute.is_relative_to(root):
            raise PathBlockedError(
                reason="Absolute path is outside the project root.",
                hint="Use a path located under the configured project root.",
            )
        return resolved_absolute

    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if any(part == ".." for part in parts):
        raise PathBlockedError(
            reason="Path traversal is blocked.",
            hint="Remove '..' segments and use a project-relative path.",
        )

    resolved = (root / Path(*parts)).resolve(strict=False)
    if not resolved.is_relative_to(root):
        raise PathBlockedError(
            reason="Resolved path escapes the project root.",
            hint="Use a path located under the configured project root.",
        )
    return resolved


def relative_posix(repo_root: Path, path: Path) -> str:
    """Return `path` relative to the resolved root in POSIX form."""
    return path.resolve(strict=False).relative_to(repo_root.resolve()).as_posix()
