from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from story_sync.config import LibraryConfig, SyncConfig, load_effective_config
from story_sync.sync.coverage import component_coverage, suggest_stories
from story_sync.sync.models import SourceUnit


def _project(tmp_path: Path) -> SyncConfig:
    for relative in (
        "packages/ui/Button.tsx",
        "packages/ui/Button.stories.tsx",
        "packages/ui/Button.test.tsx",
        "packages/ui/Card.tsx",
        "packages/forms/Input.tsx",
        "packages/forms/Input.mdx",
    ):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("export const X = () => null\n", encoding="utf-8")
    config = load_effective_config(tmp_path)
    return replace(
        config,
        libraries=(
            LibraryConfig(name="ui", path="packages/ui"),
            LibraryConfig(name="forms", path="packages/forms"),
            LibraryConfig(name="empty", path="packages/empty"),
        ),
    )


def test_coverage_counts_each_artifact_kind(tmp_path: Path) -> None:
    report = component_coverage(_project(tmp_path))

    assert [unit.name for unit in report.units] == ["Button", "Card", "Input"]
    assert report.total == 3
    assert report.with_stories == 1
    assert report.story_percent == 33
    assert [unit.missing() for unit in report.units] == [
        ("docs",),
        ("story", "test", "docs"),
        ("story", "test"),
    ]
    payload = report.to_dict()
    assert payload["coverage"] == "33%"
    assert payload["with_tests"] == 1
    assert payload["with_docs"] == 1
    assert payload["by_library"] == {
        "ui": {"total": 2, "with_stories": 1},
        "forms": {"total": 1, "with_stories": 0},
        "empty": {"total": 0, "with_stories": 0},
    }


def test_coverage_honors_library_selection(tmp_path: Path) -> None:
    report = component_coverage(_project(tmp_path), library="forms")

    assert [unit.path for unit in report.units] == ["packages/forms/Input.tsx"]
    assert report.story_percent == 0


def test_percent_rounds_half_up(tmp_path: Path) -> None:
    units = [
        SourceUnit(name=f"C{index}", path=f"C{index}.tsx", library="x")
        for index in range(8)
    ]
    stories = {"C0.tsx", "C1.tsx", "C2.tsx"}

    def scan(config: SyncConfig, library: str | None = None) -> list[SourceUnit]:
        return [replace(unit, has_example_artifact=unit.path in stories) for unit in units]

    report = component_coverage(load_effective_config(tmp_path), scan=scan)

    assert report.with_stories == 3
    assert report.story_percent == 38


def test_empty_project_has_zero_coverage(tmp_path: Path) -> None:
    report = component_coverage(load_effective_config(tmp_path))

    assert report.total == 0
    assert report.story_percent == 0
    assert report.to_dict()["missing"] == []


def test_suggestions_are_limited_and_point_at_sync_command(tmp_path: Path) -> None:
    config = _project(tmp_path)

    suggestions = suggest_stories(config, limit=1)

    assert len(suggestions) == 1
    assert suggestions[0].component == "Card"
    assert suggestions[0].library == "ui"
    assert suggestions[0].command == "story-sync --component packages/ui/Card.tsx"
    assert [item.component for item in suggest_stories(config)] == ["Card", "Input"]


def test_suggestion_limit_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Suggestion limit"):
        suggest_stories(_project(tmp_path), limit=0)
