"""Typed models for component analysis."""

from __future__ import annotations

from dataclasses import dataclass, field

from story_sync.sync.models import ExportKind


@dataclass(slots=True, frozen=True)
class PropDefinition:
    """One prop extracted from a `<Name>Props` declaration."""

    name: str
    type: str
    required: bool
    description: str | None = None
    default_value: str | None = None
    control_type: str | None = None
    control_options: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class DependencyInfo:
    """Notable libraries a component depends on."""

    uses_router: bool = False
    uses_react_query: bool = False
    uses_chakra: bool = False
    uses_emotion: bool = False
    uses_tailwind: bool = False
    uses_framer_motion: bool = False
    uses_msw: bool = False
    uses_global_state: bool = False
    other_imports: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class ComponentDescription:
    """Structured description consumed by the artifact generators."""

    name: str
    path: str
    library: str
    export_kind: ExportKind
    props: tuple[PropDefinition, ...] = ()
    dependencies: DependencyInfo = field(default_factory=DependencyInfo)
    suggestions: tuple[str, ...] = ()
    source_preview: str = ""

    def prop(self, name: str) -> PropDefinition | None:
        """Return the prop called `name`, if declared."""
        for prop in self.props:
            if prop.name == name:
                return prop
        return None

    def has_prop(self, *names: str) -> bool:
        """Return True when any of `names` is a declared prop."""
        return any(self.prop(name) is not None for name in names)


class ComponentNotFoundError(Exception):
    """Raised when a component source file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Component not found: {path}")
        self.path = path
