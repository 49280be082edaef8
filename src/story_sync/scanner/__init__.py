"""Component discovery and analysis package."""

from .analysis import analyze_dependencies, describe_component, extract_props, infer_control
from .discovery import (
    component_name,
    find_story_file,
    is_component_path,
    scan_components,
    should_exclude,
    to_kebab_case,
    to_pascal_case,
    unit_for_path,
)
from .models import ComponentDescription, ComponentNotFoundError, DependencyInfo, PropDefinition

__all__ = [
    "ComponentDescription",
    "ComponentNotFoundError",
    "DependencyInfo",
    "PropDefinition",
    "analyze_dependencies",
    "component_name",
    "describe_component",
    "extract_props",
    "find_story_file",
    "infer_control",
    "is_component_path",
    "scan_components",
    "should_exclude",
    "to_kebab_case",
    "to_pascal_case",
    "unit_for_path",
]
