from __future__ import annotations

from pathlib import Path

import pytest

from story_sync.config import CliOverrides, load_effective_config


def _write_config(root: Path, *lines: str) -> None:
    (root / "story_sync.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_batch_size_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[sync]", 'batch_size = "many"')

    with pytest.raises(ValueError, match="sync.batch_size"):
        load_effective_config(tmp_path)


def test_batch_size_above_cap_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[sync]", "batch_size = 1000")

    with pytest.raises(ValueError, match="must be <= 64"):
        load_effective_config(tmp_path)


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, 'watch = "often"')

    with pytest.raises(ValueError, match="section 'watch'"):
        load_effective_config(tmp_path)


def test_unknown_framework_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[generation]", 'framework = "svelte"')

    with pytest.raises(ValueError, match="generation.framework"):
        load_effective_config(tmp_path)


def test_library_without_path_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[[libraries]]", 'name = "ui"')

    with pytest.raises(ValueError, match="requires 'name' and 'path'"):
        load_effective_config(tmp_path)


def test_non_boolean_toggle_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[watch]", "polling = 1")

    with pytest.raises(ValueError, match="watch.polling"):
        load_effective_config(tmp_path)


def test_invalid_override_raises_value_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.debounce_ms"):
        load_effective_config(tmp_path, CliOverrides(debounce_ms=0))
