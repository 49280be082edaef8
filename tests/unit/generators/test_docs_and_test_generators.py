from __future__ import annotations

from pathlib import Path

from story_sync.config import LibraryConfig, SyncConfig
from story_sync.generators.docs import DocsGenerator
from story_sync.generators.testing import TestGenerator
from story_sync.scanner.models import ComponentDescription, PropDefinition


def _config(tmp_path: Path, import_alias: str | None = None) -> SyncConfig:
    return SyncConfig(
        root_dir=tmp_path,
        data_dir=tmp_path / ".story-sync",
        libraries=(
            LibraryConfig(name="ui", path=".", title_prefix="UI", import_alias=import_alias),
        ),
    )


def _description(*extra: PropDefinition) -> ComponentDescription:
    return ComponentDescription(
        name="Button",
        path="src/Button.tsx",
        library="ui",
        export_kind="named",
        props=(
            PropDefinition(
                name="variant",
                type="'primary' | 'ghost'",
                required=False,
                control_type="radio",
                control_options=("primary", "ghost"),
            ),
            PropDefinition(name="disabled", type="boolean", required=False),
            *extra,
        ),
    )


def test_docs_reference_only_given_examples(tmp_path: Path) -> None:
    artifact = DocsGenerator().generate(
        _config(tmp_path), _description(), ("Default", "Variants", "Custom")
    )

    assert artifact.path == "src/Button.mdx"
    assert artifact.examples == ("Default", "Variants", "Custom")
    content = artifact.content
    assert "import * as ButtonStories from './Button.stories'" in content
    assert "<Meta of={ButtonStories} />" in content
    assert "<Canvas of={ButtonStories.Default} />" in content
    assert "<Canvas of={ButtonStories.Variants} />" in content
    assert "### Custom\n\n<Canvas of={ButtonStories.Custom} />" in content
    assert "<Controls of={ButtonStories.Default} />" in content
    assert "ButtonStories.Sizes" not in content
    assert "- Correctly announces disabled state" in content
    assert "| `variant` | `'primary' \\| 'ghost'` | `-` | - |" in content


def test_docs_without_examples_fall_back_to_title_meta(tmp_path: Path) -> None:
    content = DocsGenerator().generate(_config(tmp_path, "@acme/ui"), _description()).content

    assert '<Meta title="UI/Button/Docs" />' in content
    assert "import { Button } from '@acme/ui/Button'" in content
    assert "Canvas of=" not in content
    assert "ButtonStories" not in content


def test_interactive_components_get_playwright_suite(tmp_path: Path) -> None:
    description = _description(PropDefinition(name="onClick", type="() => void", required=False))

    artifact = TestGenerator().generate(_config(tmp_path), description, ("Default", "Variants"))

    assert artifact.path == "src/Button.test.tsx"
    assert "import { test, expect } from '@playwright/test'" in artifact.content
    assert "test('displays all variants'" in artifact.content
    assert "test('handles interactions'" in artifact.content
    assert "test('displays all sizes'" not in artifact.content


def test_static_components_get_vitest_suite(tmp_path: Path) -> None:
    artifact = TestGenerator().generate(_config(tmp_path), _description())

    content = artifact.content
    assert "import { describe, it, expect } from 'vitest'" in content
    assert "import { Button } from './Button'" in content
    assert "it('renders ghost variant'" in content
    assert "it('respects disabled state'" in content
    assert content.endswith("})\n")
