"""Story (example) file generator."""

from __future__ import annotations

from story_sync.config import SyncConfig
from story_sync.generators.base import (
    GeneratedArtifact,
    component_import_path,
    default_args,
    options_for,
    ts_literal,
)
from story_sync.scanner.models import ComponentDescription, PropDefinition
from story_sync.sync.paths import artifact_paths

_TEST_IMPORT = "import { expect, userEvent, within } from 'storybook/test'"
_ROUTER_IMPORT = "import { withRouter } from 'storybook-addon-remix-react-router'"


class StoryGenerator:
    """Render a story module with Default, variant and interaction examples."""

    kind = "story"

    def __init__(
        self,
        include_variants: bool = True,
        include_interactive: bool = True,
        include_a11y: bool = False,
        include_responsive: bool = False,
    ) -> None:
        self.include_variants = include_variants
        self.include_interactive = include_interactive
        self.include_a11y = include_a11y
        self.include_responsive = include_responsive

    def generate(
        self,
        config: SyncConfig,
        description: ComponentDescription,
        example_names: tuple[str, ...] = (),
    ) -> GeneratedArtifact:
        """Render the story file; `example_names` is unused for stories."""
        _ = example_names
        name = description.name
        native = config.generation.framework == "react-native"
        web_only = not native
        library = next(
            (item for item in config.libraries if item.name == description.library), None
        )
        prefix = library.title_prefix if library is not None else "Components"
        decorators = list(library.decorators) if library is not None else []
        if description.dependencies.uses_router and web_only:
            decorators.append("withRouter")
        args = default_args(description.props)

        imports = ["import type { Meta, StoryObj } from '@storybook/react'"]
        if web_only and (self.include_interactive or self.include_a11y):
            imports.append(_TEST_IMPORT)
        import_path = component_import_path(description)
        if description.export_kind == "default":
            imports.append(f"import {name} from '{import_path}'")
        else:
            imports.append(f"import {{ {name} }} from '{import_path}'")
        if description.dependencies.uses_router and web_only:
            imports.append(_ROUTER_IMPORT)

        sections = [
            "\n".join(imports),
            _meta(name, f"{prefix}/{name}", decorators, description.props, args),
            f"type Story = StoryObj<typeof {name}>",
            _default_story(name, args),
        ]
        examples = ["Default"]

        if self.include_variants:
            has_children = description.has_prop("children")
            for example, prop_name, style in (
                ("Sizes", "size", "display: 'flex', gap: '1rem', alignItems: 'center'"),
                ("Variants", "variant", "display: 'flex', gap: '1rem'"),
            ):
                options = options_for(description, prop_name)
                if not options:
                    continue
                sections.append(
                    _gallery_story(example, name, prop_name, options, style, has_children)
                )
                examples.append(example)

        if self.include_interactive and web_only:
            sections.append(_interactive_story(description))
            examples.append("Interactive")
        if self.include_a11y and web_only:
            sections.append(_a11y_story(description))
            examples.append("Accessibility")
        if self.include_responsive:
            sections.append(_viewport_story("Mobile", "Mobile viewport", "mobile1"))
            sections.append(_viewport_story("Desktop", "Desktop viewport", "desktop"))
            examples.extend(("Mobile", "Desktop"))

        return GeneratedArtifact(
            content="\n\n".join(section.rstrip("\n") for section in sections) + "\n",
            path=artifact_paths(description.path).story,
            examples=tuple(examples),
        )


def _meta(
    name: str,
    title: str,
    decorators: list[str],
    props: tuple[PropDefinition, ...],
    args: dict[str, object],
) -> str:
    lines = [
        f"const meta: Meta<typeof {name}> = {{",
        f"  title: '{title}',",
        f"  component: {name},",
        "  tags: ['autodocs'],",
    ]
    if decorators:
        lines.append(f"  decorators: [{', '.join(decorators)}],")
    arg_types = _arg_types(props)
    if arg_types:
        lines.append(f"  argTypes: {_indented(ts_literal(arg_types))},")
    if args:
        lines.append(f"  args: {_indented(ts_literal(args))},")
    lines.append("}")
    lines.append("")
    lines.append("export default meta")
    return "\n".join(lines)


def _arg_types(props: tuple[PropDefinition, ...]) -> dict[str, object]:
    arg_types: dict[str, object] = {}
    for prop in props:
        if prop.control_type is None:
            continue
        entry: dict[str, object] = {
            "control": (
                {"type": prop.control_type, "options": list(prop.control_options)}
                if prop.control_options
                else prop.control_type
            )
        }
        if prop.description:
            entry["description"] = prop.description
        arg_types[prop.name] = entry
    return arg_types


def _default_story(name: str, args: dict[str, object]) -> str:
    lines = ["/**", f" * Default {name}", " */", "export const Default: Story = {"]
    if args:
        lines.append(f"  args: {_indented(ts_literal(args))},")
    lines.append("}")
    return "\n".join(lines)


def _gallery_story(
    example: str,
    name: str,
    prop_name: str,
    options: tuple[str, ...],
    style: str,
    has_children: bool,
) -> str:
    label = "size" if prop_name == "size" else "style"
    lines = [
        "/**",
        f" * All {label} variants",
        " */",
        f"export const {example}: Story = {{",
        "  render: () => (",
        f"    <div style={{{{ {style} }}}}>",
    ]
    for option in options:
        if has_children:
            lines.append(f'      <{name} {prop_name}="{option}">{option}</{name}>')
        else:
            lines.append(f'      <{name} {prop_name}="{option}" />')
    lines.extend(["    </div>", "  ),", "}"])
    return "\n".join(lines)


def _interactive_story(description: ComponentDescription) -> str:
    has_on_click = description.has_prop("onClick")
    lines = ["/**", " * Interactive test", " */", "export const Interactive: Story = {"]
    if description.has_prop("children"):
        lines.extend(["  args: {", "    children: 'Click me',"])
        if has_on_click:
            lines.append("    onClick: () => {},")
        lines.extend(
            [
                "  },",
                "  play: async ({ canvasElement }) => {",
                "    const canvas = within(canvasElement)",
                "    const element = canvas.getByText(/click me/i)",
                "    await expect(element).toBeInTheDocument()",
            ]
        )
        if has_on_click:
            lines.append("    await userEvent.click(element)")
        lines.append("  },")
    elif description.has_prop("role"):
        lines.extend(["  args: {", "    role: 'button',"])
        if has_on_click:
            lines.append("    onClick: () => {},")
        lines.extend(
            [
                "  },",
                "  play: async ({ canvasElement }) => {",
                "    const canvas = within(canvasElement)",
                "    const element = canvas.getByRole('button')",
                "    await expect(element).toBeInTheDocument()",
            ]
        )
        if has_on_click:
            lines.append("    await userEvent.click(element)")
        lines.append("  },")
    else:
        lines.extend(
            [
                "  play: async ({ canvasElement }) => {",
                "    await expect(canvasElement.firstElementChild).toBeInTheDocument()",
                "  },",
            ]
        )
    lines.append("}")
    return "\n".join(lines)


def _a11y_story(description: ComponentDescription) -> str:
    name = description.name
    has_children = description.has_prop("children")
    has_label = description.has_prop("aria-label", "ariaLabel")
    has_role = description.has_prop("role")
    lines = ["/**", " * Accessibility test", " */", "export const Accessibility: Story = {"]
    lines.append("  args: {")
    if has_children:
        lines.append(f"    children: 'Accessible {name}',")
    if has_label:
        lines.append(f"    'aria-label': '{name} example',")
    if has_role and not has_label:
        lines.append("    role: 'region',")
    lines.extend(["  },", "  play: async ({ canvasElement }) => {"])
    lines.append("    const canvas = within(canvasElement)")
    if has_label:
        lines.append(f"    const element = canvas.getByLabelText(/{name} example/i)")
    elif has_role:
        lines.append("    const element = canvas.getByRole('region')")
    elif has_children:
        lines.append(f"    const element = canvas.getByText(/accessible {name}/i)")
    else:
        lines.append("    const element = canvasElement.firstElementChild as HTMLElement")
    lines.append("    await expect(element).toBeInTheDocument()")
    if has_label or has_role or description.has_prop("onClick", "onKeyDown"):
        lines.extend(
            [
                "    await userEvent.tab()",
                "    if (document.activeElement === element) {",
                "      await expect(element).toHaveFocus()",
                "    }",
            ]
        )
    lines.extend(["  },", "}"])
    return "\n".join(lines)


def _viewport_story(example: str, label: str, viewport: str) -> str:
    return "\n".join(
        [
            "/**",
            f" * {label}",
            " */",
            f"export const {example}: Story = {{",
            "  parameters: {",
            "    viewport: {",
            f"      defaultViewport: '{viewport}',",
            "    },",
            "  },",
            "}",
        ]
    )


def _indented(literal: str) -> str:
    """Indent continuation lines of a literal nested one level inside a block."""
    return literal.replace("\n", "\n  ")
