"""Test file generator (Playwright for interactive components, Vitest otherwise)."""

from __future__ import annotations

from story_sync.config import SyncConfig
from story_sync.generators.base import GeneratedArtifact, component_import_path, options_for
from story_sync.scanner.discovery import to_kebab_case
from story_sync.scanner.models import ComponentDescription
from story_sync.sync.paths import artifact_paths


class TestGenerator:
    """Render a component test module."""

    __test__ = False
    kind = "test"

    def generate(
        self,
        config: SyncConfig,
        description: ComponentDescription,
        example_names: tuple[str, ...] = (),
    ) -> GeneratedArtifact:
        """Pick the runner from router usage and event-handler props."""
        _ = config
        interactive = description.dependencies.uses_router or any(
            prop.name.startswith("on") for prop in description.props
        )
        if interactive:
            content = playwright_test(description, example_names)
        else:
            content = vitest_test(description)
        return GeneratedArtifact(content=content, path=artifact_paths(description.path).test)


def playwright_test(description: ComponentDescription, example_names: tuple[str, ...] = ()) -> str:
    """Render a Playwright suite driving the rendered examples."""
    name = description.name
    kebab = to_kebab_case(name)
    locator = f"page.locator('[data-testid=\"{kebab}\"]').first()"
    blocks = [
        "\n".join(
            [
                "import { test, expect } from '@playwright/test'",
                "",
                f"test.describe('{name}', () => {{",
                "  test.beforeEach(async ({ page }) => {",
                f"    await page.goto('/iframe.html?id=components-{kebab}--default')",
                "  })",
                "",
                "  test('renders correctly', async ({ page }) => {",
                f"    const component = {locator}",
                "    await expect(component).toBeVisible()",
                "  })",
            ]
        )
    ]
    for example, prop_name, label in (
        ("Variants", "variant", "variants"),
        ("Sizes", "size", "sizes"),
    ):
        options = options_for(description, prop_name)
        if not options:
            continue
        if example_names and example not in example_names:
            continue
        lines = [
            f"  test('displays all {label}', async ({{ page }}) => {{",
            f"    await page.goto('/iframe.html?id=components-{kebab}--{label}')",
        ]
        lines.extend(
            f"    await expect(page.getByText('{option}')).toBeVisible()" for option in options
        )
        lines.append("  })")
        blocks.append("\n".join(lines))

    if any(prop.name.startswith("on") for prop in description.props):
        blocks.append(
            "\n".join(
                [
                    "  test('handles interactions', async ({ page }) => {",
                    f"    const component = {locator}",
                    "    await component.click()",
                    "  })",
                ]
            )
        )
    blocks.append(
        "\n".join(
            [
                "  test('is keyboard accessible', async ({ page }) => {",
                "    await page.keyboard.press('Tab')",
                f"    const component = {locator}",
                "    await expect(component).toBeFocused()",
                "    await page.keyboard.press('Enter')",
                "    await page.keyboard.press(' ')",
                "  })",
            ]
        )
    )
    for label, width, height in (("mobile", 375, 667), ("desktop", 1280, 720)):
        blocks.append(
            "\n".join(
                [
                    f"  test('responsive - {label}', async ({{ page }}) => {{",
                    f"    await page.setViewportSize({{ width: {width}, height: {height} }})",
                    f"    const component = {locator}",
                    "    await expect(component).toBeVisible()",
                    "  })",
                ]
            )
        )
    return "\n\n".join(blocks) + "\n})\n"


def vitest_test(description: ComponentDescription) -> str:
    """Render a Vitest + Testing Library suite."""
    name = description.name
    import_path = component_import_path(description)
    if description.export_kind == "default":
        component_import = f"import {name} from '{import_path}'"
    else:
        component_import = f"import {{ {name} }} from '{import_path}'"
    blocks = [
        "\n".join(
            [
                "import { describe, it, expect } from 'vitest'",
                "import { render, screen } from '@testing-library/react'",
                component_import,
                "",
                f"describe('{name}', () => {{",
                "  it('renders correctly', () => {",
                f"    render(<{name}>Test Content</{name}>)",
                "    expect(screen.getByText('Test Content')).toBeInTheDocument()",
                "  })",
            ]
        ),
        "\n".join(
            [
                "  it('applies custom className', () => {",
                f'    render(<{name} className="custom-class">Content</{name}>)',
                "    expect(screen.getByText('Content')).toHaveClass('custom-class')",
                "  })",
            ]
        ),
    ]
    for prop_name in ("variant", "size"):
        for option in options_for(description, prop_name):
            blocks.append(
                "\n".join(
                    [
                        f"  it('renders {option} {prop_name}', () => {{",
                        f'    render(<{name} {prop_name}="{option}">Content</{name}>)',
                        "    const element = screen.getByText('Content')",
                        f"    expect(element).toHaveAttribute('data-{prop_name}', '{option}')",
                        "  })",
                    ]
                )
            )
    if description.has_prop("disabled"):
        blocks.append(
            "\n".join(
                [
                    "  it('respects disabled state', () => {",
                    f"    render(<{name} disabled>Content</{name}>)",
                    "    expect(screen.getByText('Content')).toBeDisabled()",
                    "  })",
                ]
            )
        )
    return "\n\n".join(blocks) + "\n})\n"
