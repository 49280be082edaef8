"""MDX documentation page generator.

Canvas blocks only reference example names passed in by the caller; those
names are the top-level exports of the sibling story file.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from story_sync.config import SyncConfig
from story_sync.generators.base import GeneratedArtifact, options_for
from story_sync.scanner.models import ComponentDescription, DependencyInfo, PropDefinition
from story_sync.sync.paths import STORY_SUFFIX, artifact_paths


class DocsGenerator:
    """Render an MDX page for one component."""

    kind = "docs"

    def generate(
        self,
        config: SyncConfig,
        description: ComponentDescription,
        example_names: tuple[str, ...] = (),
    ) -> GeneratedArtifact:
        """Render the docs page, embedding only the given examples."""
        name = description.name
        library = next(
            (item for item in config.libraries if item.name == description.library), None
        )
        if library is not None and library.import_alias:
            import_path = f"{library.import_alias}/{name}"
        else:
            import_path = f"@/components/{name}"
        stories = f"{name}Stories"
        story_module = f"./{PurePosixPath(description.path).stem}{STORY_SUFFIX}"
        title = f"{library.title_prefix}/{name}" if library is not None else f"Components/{name}"

        header = [
            "---",
            f"title: {name}",
            f"description: Documentation for the {name} component",
            "---",
            "",
            f"import {{ {name} }} from '{import_path}'",
            "import { Canvas, Meta, Controls, ArgTypes } from '@storybook/blocks'",
        ]
        if example_names:
            header.append(f"import * as {stories} from '{story_module}'")
            header.extend(["", f"<Meta of={{{stories}}} />"])
        else:
            header.extend(["", f'<Meta title="{title}/Docs" />'])
        sections = ["\n".join(header), f"# {name}\n\n{_summary(name, description)}"]
        sections.append(f"## Import\n\n```tsx\nimport {{ {name} }} from '{import_path}'\n```")

        usage = ["## Usage", "", "### Basic Example"]
        if "Default" in example_names:
            usage.extend(["", f"<Canvas of={{{stories}.Default}} />"])
        usage.extend(["", "```tsx", f"<{name}{_example_props(description)}>", "  Content"])
        usage.extend([f"</{name}>", "```"])
        sections.append("\n".join(usage))

        for example, prop_name, heading, noun in (
            ("Variants", "variant", "Variants", "visual variants"),
            ("Sizes", "size", "Sizes", "sizes"),
        ):
            options = options_for(description, prop_name)
            if not options:
                continue
            lines = [f"### {heading}", "", f"The `{name}` supports {len(options)} {noun}:"]
            if example in example_names:
                lines.extend(["", f"<Canvas of={{{stories}.{example}}} />"])
            lines.extend(["", "```tsx"])
            lines.extend(f'<{name} {prop_name}="{option}">{option}</{name}>' for option in options)
            lines.append("```")
            sections.append("\n".join(lines))

        extra = [
            example
            for example in example_names
            if example not in ("Default", "Variants", "Sizes")
        ]
        if extra:
            lines = ["## Examples"]
            for example in extra:
                lines.extend(["", f"### {example}", "", f"<Canvas of={{{stories}.{example}}} />"])
            sections.append("\n".join(lines))

        sections.append(
            f"## Props\n\n<ArgTypes of={{{name}}} />\n\n{_props_table(description.props)}"
        )
        if example_names:
            sections.append(f"<Controls of={{{stories}.{example_names[0]}}} />")
        sections.append(f"## Accessibility\n\n{_accessibility(name, description.props)}")
        notes = _integration_notes(description.dependencies)
        if notes:
            sections.append(f"## Integration Notes\n\n{notes}")
        sections.append(f"## Best Practices\n\n{_best_practices(description)}")

        return GeneratedArtifact(
            content="\n\n".join(sections) + "\n",
            path=artifact_paths(description.path).docs,
            examples=tuple(example_names),
        )


def _summary(name: str, description: ComponentDescription) -> str:
    features: list[str] = []
    if description.has_prop("variant"):
        features.append("multiple visual variants")
    if description.has_prop("size"):
        features.append("configurable sizes")
    if description.has_prop("disabled"):
        features.append("disabled state support")
    if description.dependencies.uses_framer_motion:
        features.append("smooth animations")
    if features:
        return f"The `{name}` component provides {', '.join(features)}."
    return f"The `{name}` component is a reusable UI element."


def _example_props(description: ComponentDescription) -> str:
    parts: list[str] = []
    variants = options_for(description, "variant")
    if variants:
        parts.append(f'variant="{variants[0]}"')
    sizes = options_for(description, "size")
    if len(sizes) > 1:
        parts.append(f'size="{sizes[1]}"')
    return "".join(f" {part}" for part in parts)


def _props_table(props: tuple[PropDefinition, ...]) -> str:
    if not props:
        return "This component accepts standard HTML attributes."
    rows = ["| Prop | Type | Default | Description |", "|------|------|---------|-------------|"]
    for prop in props:
        prop_type = prop.type.replace("|", "\\|")
        rows.append(
            f"| `{prop.name}` | `{prop_type}` | `{prop.default_value or '-'}` "
            f"| {prop.description or '-'} |"
        )
    return "\n".join(rows)


def _accessibility(name: str, props: tuple[PropDefinition, ...]) -> str:
    lines = [
        f"The `{name}` component follows WAI-ARIA guidelines:",
        "",
        "- Supports keyboard navigation",
        "- Includes proper ARIA attributes",
        "- Compatible with screen readers",
    ]
    if any(prop.name == "disabled" for prop in props):
        lines.append("- Correctly announces disabled state")
    lines.extend(
        [
            "",
            "### Keyboard Interactions",
            "",
            "| Key | Description |",
            "|-----|-------------|",
            "| `Tab` | Moves focus to the component |",
            "| `Enter` | Activates the component |",
            "| `Space` | Activates the component |",
        ]
    )
    return "\n".join(lines)


def _integration_notes(dependencies: DependencyInfo) -> str:
    notes: list[str] = []
    if dependencies.uses_router:
        notes.append(
            "### Router Integration\n\n"
            "This component uses a router. Render it inside a router provider."
        )
    if dependencies.uses_react_query:
        notes.append(
            "### React Query Integration\n\n"
            "This component uses TanStack Query. Provide a `QueryClientProvider`."
        )
    if dependencies.uses_global_state:
        notes.append(
            "### State Management\n\n"
            "This component relies on global state. Configure the store provider."
        )
    if dependencies.uses_msw:
        notes.append("### Mocked Requests\n\nNetwork calls are mocked with MSW handlers.")
    return "\n\n".join(notes)


def _best_practices(description: ComponentDescription) -> str:
    practices = ["**Accessibility**: Always provide meaningful content or aria-label"]
    if description.has_prop("variant"):
        practices.append("**Variants**: Choose the appropriate variant for the context")
    if description.has_prop("size"):
        practices.append("**Sizing**: Use consistent sizes within the same section of your UI")
    practices.append("**Performance**: Avoid creating new callback functions on each render")
    return "\n".join(f"{index}. {text}" for index, text in enumerate(practices, start=1))
