from __future__ import annotations

import json
from pathlib import Path

import pytest

from story_sync.config import detect_framework, detect_libraries


def test_src_components_layout_is_a_root_library(tmp_path: Path) -> None:
    (tmp_path / "src" / "components").mkdir(parents=True)
    (tmp_path / "packages" / "ui" / "src").mkdir(parents=True)

    libraries = detect_libraries(tmp_path)

    assert [(library.name, library.path) for library in libraries] == [
        ("components", "."),
        ("ui", "packages/ui"),
    ]


def test_plain_src_is_the_fallback(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()

    libraries = detect_libraries(tmp_path)

    assert [(library.name, library.path) for library in libraries] == [("src", "src")]


def test_no_source_directories_yields_no_libraries(tmp_path: Path) -> None:
    assert detect_libraries(tmp_path) == ()


@pytest.mark.parametrize(
    ("dependencies", "expected"),
    [
        ({"@chakra-ui/react": "^2"}, "chakra"),
        ({"class-variance-authority": "^0.7"}, "shadcn"),
        ({"react-native": "0.74"}, "react-native"),
        ({"react": "^18"}, "vanilla"),
    ],
)
def test_framework_detection_from_package_json(
    tmp_path: Path, dependencies: dict[str, str], expected: str
) -> None:
    (tmp_path / "package.json").write_text(
        json.dumps({"devDependencies": dependencies}), encoding="utf-8"
    )

    assert detect_framework(tmp_path) == expected


def test_unreadable_package_json_is_vanilla(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text("{", encoding="utf-8")

    assert detect_framework(tmp_path) == "vanilla"
