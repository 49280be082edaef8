"""Best-effort component analysis: props, dependencies and suggestions."""

from __future__ import annotations

import re

from story_sync.config import SyncConfig
from story_sync.scanner.discovery import component_name, detect_export_kind, find_story_file
from story_sync.scanner.lexical import mask_comments_and_strings
from story_sync.scanner.models import (
    ComponentDescription,
    ComponentNotFoundError,
    DependencyInfo,
    PropDefinition,
)
from story_sync.sync.paths import resolve_repo_path

PREVIEW_CHARS = 1000
MAX_NOTABLE_IMPORTS = 10

_MEMBER_RE = re.compile(
    r"^(?:readonly\s+)?([A-Za-z_$][A-Za-z0-9_$]*)(\?)?\s*:\s*(.+)$",
    re.DOTALL,
)
_JSDOC_RE = re.compile(r"/\*\*(.*?)\*/", re.DOTALL)
_IMPORT_FROM_RE = re.compile(r"from\s+['\"]([^'\"]+)['\"]")
_DEPENDENCY_PATTERNS: dict[str, re.Pattern[str]] = {
    "uses_router": re.compile(
        r"from ['\"](?:react-router|@tanstack/react-router|next/navigation)"
    ),
    "uses_react_query": re.compile(r"from ['\"](?:@tanstack/react-query|react-query)"),
    "uses_chakra": re.compile(r"from ['\"]@chakra-ui"),
    "uses_emotion": re.compile(r"from ['\"]@emotion"),
    "uses_tailwind": re.compile(r"className=.*['\"].*?(?:flex|grid|p-|m-|bg-|text-).*?['\"]"),
    "uses_framer_motion": re.compile(r"from ['\"]framer-motion"),
    "uses_msw": re.compile(r"from ['\"]msw"),
    "uses_global_state": re.compile(r"from ['\"](?:zustand|@reduxjs|recoil|jotai)"),
}
_VARIANT_PROP_NAMES = ("variant", "size", "color", "colorScheme")
_SKIPPED_IMPORTS = ("react", "react-dom")


def describe_component(config: SyncConfig, component_path: str) -> ComponentDescription:
    """Analyze one component source file.

    Raises:
        PathBlockedError: when `component_path` escapes the project root.
        ComponentNotFoundError: when the file does not exist.
    """
    full_path = resolve_repo_path(config.root_dir, component_path)
    if not full_path.is_file():
        raise ComponentNotFoundError(component_path)
    relative = full_path.relative_to(config.root_dir).as_posix()
    source = full_path.read_text(encoding="utf-8", errors="replace")
    name = component_name(relative, config.scan) or "Unknown"
    library = config.find_library(relative)
    props = extract_props(source, name)
    dependencies = analyze_dependencies(source)
    has_story = find_story_file(config.root_dir, relative) is not None
    preview = source[:PREVIEW_CHARS]
    if len(source) > PREVIEW_CHARS:
        preview += "\n// ..."
    return ComponentDescription(
        name=name,
        path=relative,
        library=library.name if library is not None else "unknown",
        export_kind=detect_export_kind(full_path),
        props=tuple(props),
        dependencies=dependencies,
        suggestions=tuple(build_suggestions(props, dependencies, has_story)),
        source_preview=preview,
    )


def extract_props(source: str, name: str) -> list[PropDefinition]:
    """Extract props from the `<name>Props` interface or type literal."""
    masked = mask_comments_and_strings(source)
    declaration = re.compile(rf"\b(?:interface|type)\s+{re.escape(name)}Props\b[^{{;]*\{{")
    match = declaration.search(masked)
    if match is None:
        return []
    open_index = match.end() - 1
    close_index = _matching_brace(masked, open_index)
    if close_index is None:
        return []

    code = mask_comments_and_strings(source, keep_strings=True)
    defaults = _destructured_defaults(code, name)
    props: list[PropDefinition] = []
    for start, end in _member_spans(masked, code, open_index + 1, close_index):
        member_code = " ".join(code[start:end].split())
        jsdoc = _JSDOC_RE.search(source[start:end])
        member = _MEMBER_RE.match(member_code)
        if member is None:
            continue
        prop_name, optional, prop_type = member.groups()
        description = _clean_jsdoc(jsdoc.group(1)) if jsdoc else None
        prop_type = prop_type.strip().rstrip(";,").strip()
        control_type, control_options = infer_control(prop_type)
        props.append(
            PropDefinition(
                name=prop_name,
                type=prop_type,
                required=optional != "?",
                description=description,
                default_value=defaults.get(prop_name),
                control_type=control_type,
                control_options=control_options,
            )
        )
    return props


def infer_control(prop_type: str) -> tuple[str | None, tuple[str, ...]]:
    """Map a TypeScript type to an interactive control type and options."""
    if prop_type == "boolean":
        return "boolean", ()
    if prop_type == "number":
        return "number", ()
    if prop_type == "string":
        return "text", ()
    if "|" in prop_type and ("'" in prop_type or '"' in prop_type):
        options = tuple(
            option
            for option in (part.strip().strip("'\"") for part in prop_type.split("|"))
            if option
        )
        return ("radio" if len(options) <= 4 else "select"), options
    if "color" in prop_type.lower():
        return "color", ()
    if "Date" in prop_type:
        return "date", ()
    if prop_type.startswith("{") or "Record" in prop_type or "Object" in prop_type:
        return "object", ()
    return None, ()


def analyze_dependencies(source: str) -> DependencyInfo:
    """Flag notable libraries imported by a component."""
    flags = {
        field: bool(pattern.search(source)) for field, pattern in _DEPENDENCY_PATTERNS.items()
    }
    notable: list[str] = []
    for match in _IMPORT_FROM_RE.finditer(source):
        package = match.group(1)
        if package.startswith(".") or package.startswith("@types"):
            continue
        if package in _SKIPPED_IMPORTS or package in notable:
            continue
        notable.append(package)
    return DependencyInfo(**flags, other_imports=tuple(notable[:MAX_NOTABLE_IMPORTS]))


def build_suggestions(
    props: list[PropDefinition],
    dependencies: DependencyInfo,
    has_story: bool,
) -> list[str]:
    """Return human-readable hints for authoring examples."""
    suggestions: list[str] = []
    if has_story:
        suggestions.append(
            "Story already exists - consider adding more variants or interaction tests"
        )
    else:
        suggestions.append("No story found - create one to document this component")

    variant_props = [prop.name for prop in props if prop.name in _VARIANT_PROP_NAMES]
    if variant_props:
        suggestions.append(f"Add variant stories for: {', '.join(variant_props)}")
    if dependencies.uses_router:
        suggestions.append("Component uses routing - wrap stories with router decorator")
    if dependencies.uses_react_query:
        suggestions.append("Component uses React Query - wrap stories with QueryClientProvider")
    if dependencies.uses_chakra:
        suggestions.append("Component uses Chakra UI - ensure ChakraProvider is in decorators")
    if dependencies.uses_global_state:
        suggestions.append("Component uses global state - mock or provide store in stories")

    handlers = [prop.name for prop in props if prop.name.startswith("on") and "=>" in prop.type]
    if handlers:
        suggestions.append(f"Add interaction tests for: {', '.join(handlers)}")
    return suggestions


def _matching_brace(masked: str, open_index: int) -> int | None:
    depth = 0
    for index in range(open_index, len(masked)):
        char = masked[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _member_spans(masked: str, code: str, start: int, end: int) -> list[tuple[int, int]]:
    """Split a type body into member spans at top-level `;`, `,` and newlines.

    Splitting reads `masked`; continuation checks read `code`, where string
    literals are still visible.
    Comment-only lines stay attached to the member that follows them.
    Continuation lines of multi-line unions (`| 'a'`) join the previous member.
    """
    spans: list[tuple[int, int]] = []
    depth = 0
    segment_start = start
    for index in range(start, end):
        char = masked[index]
        if char in "{([":
            depth += 1
        elif char in "})]":
            depth = max(0, depth - 1)
        elif depth == 0 and char in ";,\n":
            if char == "\n" and not masked[segment_start:index].strip():
                continue
            spans.append((segment_start, index))
            segment_start = index + 1
    spans.append((segment_start, end))

    merged: list[tuple[int, int]] = []
    for span_start, span_end in spans:
        text = code[span_start:span_end].strip()
        if merged and text.startswith(("|", "&")):
            merged[-1] = (merged[-1][0], span_end)
            continue
        if merged:
            previous = code[merged[-1][0] : merged[-1][1]].rstrip()
            if previous.endswith((":", "|", "&", "=>")):
                merged[-1] = (merged[-1][0], span_end)
                continue
        merged.append((span_start, span_end))
    return merged


def _destructured_defaults(code: str, name: str) -> dict[str, str]:
    """Read `prop = value` defaults from `({ ... }: NameProps)` parameters."""
    pattern = re.compile(rf"\(\s*\{{([^}}]*)\}}\s*:\s*{re.escape(name)}Props\b")
    match = pattern.search(code)
    if match is None:
        return {}
    defaults: dict[str, str] = {}
    for part in match.group(1).split(","):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        key = key.strip()
        value = value.strip()
        if key and value and re.fullmatch(r"[A-Za-z_$][A-Za-z0-9_$]*", key):
            defaults[key] = value
    return defaults


def _clean_jsdoc(body: str) -> str | None:
    lines = [line.strip().lstrip("*").strip() for line in body.splitlines()]
    text = " ".join(line for line in lines if line)
    return text or None
