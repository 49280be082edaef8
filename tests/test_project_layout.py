from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/story_sync/cli.py",
        "src/story_sync/config.py",
        "src/story_sync/license.py",
        "src/story_sync/sync/__init__.py",
        "src/story_sync/scanner/__init__.py",
        "src/story_sync/generators/__init__.py",
        "src/story_sync/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
