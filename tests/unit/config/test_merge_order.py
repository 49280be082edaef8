from __future__ import annotations

from pathlib import Path

from story_sync.config import CliOverrides, load_effective_config


def test_merge_order_defaults_then_repo_then_cli(tmp_path: Path) -> None:
    (tmp_path / "story_sync.toml").write_text(
        "\n".join(
            [
                "[sync]",
                "batch_size = 8",
                "",
                "[generation]",
                "docs = false",
                "tests = false",
                "",
                "[watch]",
                "debounce_ms = 250",
            ]
        ),
        encoding="utf-8",
    )
    overrides = CliOverrides(batch_size=2, tests=True)

    config = load_effective_config(tmp_path, overrides)

    assert config.batch_size == 2
    assert config.generation.tests is True
    assert config.generation.docs is False
    assert config.generation.stories is True
    assert config.watch.debounce_ms == 250
    assert config.watch.rescan_interval_seconds == 30.0


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config.root_dir == tmp_path.resolve()
    assert config.data_dir == tmp_path.resolve() / ".story-sync"
    assert config.batch_size == 5
    assert config.cache_filename == ".story-sync-cache.json"
    assert config.libraries == ()
    assert config.generation.framework == "vanilla"


def test_data_dir_override_has_highest_precedence(tmp_path: Path) -> None:
    custom_data_dir = tmp_path / ".custom_data"

    config = load_effective_config(tmp_path, CliOverrides(data_dir=custom_data_dir))

    assert config.data_dir == custom_data_dir.resolve()
    assert config.to_public_dict()["data_dir"] == str(custom_data_dir.resolve())


def test_libraries_table_replaces_detection(tmp_path: Path) -> None:
    (tmp_path / "src" / "components").mkdir(parents=True)
    (tmp_path / "story_sync.toml").write_text(
        "\n".join(
            [
                "[[libraries]]",
                'name = "design"',
                'path = "./packages/design/"',
                'title_prefix = "Design System"',
                'import_alias = "@acme/design"',
                'decorators = ["withTheme"]',
            ]
        ),
        encoding="utf-8",
    )

    config = load_effective_config(tmp_path)

    assert len(config.libraries) == 1
    library = config.libraries[0]
    assert library.name == "design"
    assert library.path == "packages/design"
    assert library.decorators == ("withTheme",)
    assert config.find_library("packages/design/src/Chip.tsx") == library
    assert config.find_library("src/components/Chip.tsx") is None


def test_license_key_from_file_and_override(tmp_path: Path) -> None:
    (tmp_path / "story_sync.toml").write_text('[license]\nkey = "FROM-FILE"\n', encoding="utf-8")

    assert load_effective_config(tmp_path).license_key == "FROM-FILE"
    overridden = load_effective_config(tmp_path, CliOverrides(license_key="FROM-CLI"))
    assert overridden.license_key == "FROM-CLI"
    assert overridden.to_public_dict()["license_key_present"] is True
