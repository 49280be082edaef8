"""Generator protocol, output type and filesystem writer."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from story_sync.config import SyncConfig
from story_sync.scanner.models import ComponentDescription, PropDefinition

ArtifactKind = Literal["story", "test", "docs"]


@dataclass(slots=True, frozen=True)
class GeneratedArtifact:
    """Rendered artifact content with its project-relative destination."""

    content: str
    path: str
    examples: tuple[str, ...] = ()


class ArtifactGenerator(Protocol):
    """Protocol implemented by story, test and docs generators."""

    kind: ArtifactKind

    def generate(
        self,
        config: SyncConfig,
        description: ComponentDescription,
        example_names: tuple[str, ...] = (),
    ) -> GeneratedArtifact:
        """Render one artifact for a described component."""


def write_artifact(root_dir: Path, artifact: GeneratedArtifact, overwrite: bool = False) -> bool:
    """Write an artifact atomically; False when it exists and overwrite is off."""
    path = root_dir / artifact.path
    if path.exists() and not overwrite:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(artifact.content, encoding="utf-8")
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    return True


def ts_literal(value: object, indent: int = 2) -> str:
    """Render a JSON-compatible value as a TypeScript object literal."""
    rendered = json.dumps(value, indent=indent)
    lines = []
    for line in rendered.splitlines():
        stripped = line.lstrip()
        key_end = stripped.find('":')
        if stripped.startswith('"') and key_end > 0:
            key = stripped[1:key_end]
            if key.isidentifier():
                line = line[: len(line) - len(stripped)] + key + stripped[key_end + 1 :]
        lines.append(line)
    return "\n".join(lines)


def default_args(props: tuple[PropDefinition, ...]) -> dict[str, object]:
    """Choose initial example args from prop defaults and control options."""
    args: dict[str, object] = {}
    for prop in props:
        if prop.default_value is not None:
            args[prop.name] = _parse_default(prop.default_value)
        elif prop.control_options:
            args[prop.name] = prop.control_options[0]
        elif prop.name == "children":
            args[prop.name] = "Content"
    return args


def options_for(description: ComponentDescription, prop_name: str) -> tuple[str, ...]:
    """Return declared control options of `prop_name`, or ()."""
    prop = description.prop(prop_name)
    return prop.control_options if prop is not None else ()


def component_import_path(description: ComponentDescription) -> str:
    """Return the relative module specifier used by sibling artifacts."""
    stem = Path(description.path).stem
    return "." if stem == "index" else f"./{stem}"


def _parse_default(value: str) -> object:
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    if text in ("true", "false"):
        return text == "true"
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text
