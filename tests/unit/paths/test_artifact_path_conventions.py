from __future__ import annotations

from pathlib import Path

import pytest

from story_sync.sync.paths import (
    PathBlockedError,
    artifact_paths,
    is_derived_artifact,
    relative_posix,
    resolve_repo_path,
)


def test_artifact_paths_are_siblings_of_the_source() -> None:
    paths = artifact_paths("src/components/Button/Button.tsx")

    assert paths.story == "src/components/Button/Button.stories.tsx"
    assert paths.test == "src/components/Button/Button.test.tsx"
    assert paths.docs == "src/components/Button/Button.mdx"


def test_artifact_paths_keep_jsx_extension() -> None:
    paths = artifact_paths("lib/Card.jsx")

    assert paths.story == "lib/Card.stories.jsx"
    assert paths.test == "lib/Card.test.jsx"


def test_backslashes_are_normalized() -> None:
    assert artifact_paths("src\\ui\\Tag.tsx").story == "src/ui/Tag.stories.tsx"


@pytest.mark.parametrize(
    "path",
    [
        "src/Button.stories.tsx",
        "src/Button.test.tsx",
        "src/Button.spec.ts",
    ],
)
def test_derived_artifacts_are_recognized(path: str) -> None:
    assert is_derived_artifact(path) is True


@pytest.mark.parametrize("path", ["src/Button.tsx", "src/Testimonial.tsx", "src/index.tsx"])
def test_sources_are_not_derived(path: str) -> None:
    assert is_derived_artifact(path) is False


def test_resolve_repo_path_accepts_relative_paths(tmp_path: Path) -> None:
    resolved = resolve_repo_path(tmp_path, "./src/components/Button.tsx")

    assert resolved == (tmp_path / "src" / "components" / "Button.tsx").resolve()
    assert relative_posix(tmp_path, resolved) == "src/components/Button.tsx"


def test_resolve_repo_path_blocks_traversal(tmp_path: Path) -> None:
    with pytest.raises(PathBlockedError) as error:
        resolve_repo_path(tmp_path, "src/../../etc/passwd")

    assert error.value.reason == "Path traversal is blocked."


def test_resolve_repo_path_blocks_outside_absolute(tmp_path: Path) -> None:
    outside = tmp_path.parent / "elsewhere" / "Button.tsx"

    with pytest.raises(PathBlockedError):
        resolve_repo_path(tmp_path / "project", str(outside))


def test_resolve_repo_path_rejects_empty(tmp_path: Path) -> None:
    with pytest.raises(PathBlockedError):
        resolve_repo_path(tmp_path, "")
