"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

CONFIG_FILENAME = "story_sync.toml"
DEFAULT_CACHE_FILENAME = ".story-sync-cache.json"
DEFAULT_BATCH_SIZE = 5
MAX_BATCH_SIZE_CAP = 64
MAX_DEBOUNCE_MS_CAP = 60_000

DEFAULT_COMPONENT_EXTENSIONS = (".tsx", ".jsx")
DEFAULT_EXCLUDE_GLOBS = (
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/.next/**",
    "**/.storybook/**",
    "**/.git/**",
)
DEFAULT_NON_COMPONENT_NAMES = ("types", "utils", "hooks", "constants", "styles", "helpers", "api")
FRAMEWORKS = ("vanilla", "chakra", "shadcn", "tamagui", "gluestack", "react-native", "custom")

# (directory that must exist, library path, name, title prefix)
_LIBRARY_LAYOUTS = (
    ("src/components", ".", "components", "Components"),
    ("src/lib", ".", "lib", "Lib"),
    ("packages/ui/src", "packages/ui", "ui", "UI"),
    ("apps/web/src/components", "apps/web", "web", "Web / Components"),
)

_FRAMEWORK_MARKERS = (
    (("@chakra-ui/react",), "chakra"),
    (("@radix-ui/react-slot", "class-variance-authority"), "shadcn"),
    (("tamagui",), "tamagui"),
    (("@gluestack-ui/themed", "@gluestack-ui/config"), "gluestack"),
    (("react-native",), "react-native"),
)


@dataclass(slots=True, frozen=True)
class LibraryConfig:
    """One component library root."""

    name: str
    path: str
    title_prefix: str = "Components"
    import_alias: str | None = None
    decorators: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class ScanConfig:
    """Source discovery settings."""

    component_extensions: tuple[str, ...] = DEFAULT_COMPONENT_EXTENSIONS
    exclude_globs: tuple[str, ...] = DEFAULT_EXCLUDE_GLOBS
    non_component_names: tuple[str, ...] = DEFAULT_NON_COMPONENT_NAMES


@dataclass(slots=True, frozen=True)
class GenerationConfig:
    """Artifact generation toggles."""

    stories: bool = True
    tests: bool = True
    docs: bool = True
    update_existing: bool = True
    framework: str = "vanilla"


@dataclass(slots=True, frozen=True)
class WatchConfig:
    """Watcher timing settings."""

    debounce_ms: int = 500
    rescan_interval_seconds: float = 30.0
    polling: bool = False


@dataclass(slots=True, frozen=True)
class SyncConfig:
    """Fully merged configuration."""

    root_dir: Path
    data_dir: Path
    libraries: tuple[LibraryConfig, ...]
    cache_filename: str = DEFAULT_CACHE_FILENAME
    batch_size: int = DEFAULT_BATCH_SIZE
    history_enabled: bool = True
    license_key: str | None = None
    scan: ScanConfig = ScanConfig()
    generation: GenerationConfig = GenerationConfig()
    watch: WatchConfig = WatchConfig()

    def library_roots(self) -> list[tuple[LibraryConfig, Path]]:
        """Return each library with its absolute root directory."""
        return [(library, (self.root_dir / library.path).resolve()) for library in self.libraries]

    def find_library(self, relative_path: str) -> LibraryConfig | None:
        """Return the most specific library containing `relative_path`."""
        best: LibraryConfig | None = None
        best_length = -1
        for library in self.libraries:
            prefix = _normalize_library_path(library.path)
            if prefix and relative_path != prefix and not relative_path.startswith(f"{prefix}/"):
                continue
            if len(prefix) > best_length:
                best = library
                best_length = len(prefix)
        return best

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "root_dir": str(self.root_dir),
            "data_dir": str(self.data_dir),
            "cache_filename": self.cache_filename,
            "batch_size": self.batch_size,
            "history_enabled": self.history_enabled,
            "license_key_present": self.license_key is not None,
            "libraries": [
                {
                    "name": library.name,
                    "path": library.path,
                    "title_prefix": library.title_prefix,
                    "import_alias": library.import_alias,
                    "decorators": list(library.decorators),
                }
                for library in self.libraries
            ],
            "scan": {
                "component_extensions": list(self.scan.component_extensions),
                "exclude_globs": list(self.scan.exclude_globs),
                "non_component_names": list(self.scan.non_component_names),
            },
            "generation": {
                "stories": self.generation.stories,
                "tests": self.generation.tests,
                "docs": self.generation.docs,
                "update_existing": self.generation.update_existing,
                "framework": self.generation.framework,
            },
            "watch": {
                "debounce_ms": self.watch.debounce_ms,
                "rescan_interval_seconds": self.watch.rescan_interval_seconds,
                "polling": self.watch.polling,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    batch_size: int | None = None
    stories: bool | None = None
    tests: bool | None = None
    docs: bool | None = None
    update_existing: bool | None = None
    debounce_ms: int | None = None
    polling: bool | None = None
    license_key: str | None = None


def default_config(root_dir: Path) -> SyncConfig:
    """Build default config for a project root, auto-detecting libraries."""
    resolved_root = root_dir.resolve()
    return SyncConfig(
        root_dir=resolved_root,
        data_dir=resolved_root / ".story-sync",
        libraries=detect_libraries(resolved_root),
        generation=GenerationConfig(framework=detect_framework(resolved_root)),
    )


def detect_libraries(root_dir: Path) -> tuple[LibraryConfig, ...]:
    """Guess library roots from common project layouts."""
    libraries: list[LibraryConfig] = []
    seen_paths: set[str] = set()
    for check, path, name, prefix in _LIBRARY_LAYOUTS:
        if not (root_dir / check).is_dir() or path in seen_paths:
            continue
        seen_paths.add(path)
        libraries.append(LibraryConfig(name=name, path=path, title_prefix=prefix))
    if not libraries and (root_dir / "src").is_dir():
        libraries.append(LibraryConfig(name="src", path="src", title_prefix="Components"))
    return tuple(libraries)


def detect_framework(root_dir: Path) -> str:
    """Guess the UI framework from package.json dependencies."""
    package_path = root_dir / "package.json"
    try:
        with package_path.open("r", encoding="utf-8") as handle:
            package = json.load(handle)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return "vanilla"
    if not isinstance(package, dict):
        return "vanilla"
    dependencies: dict[str, object] = {}
    for section in ("dependencies", "devDependencies"):
        value = package.get(section)
        if isinstance(value, dict):
            dependencies.update(value)
    for names, framework in _FRAMEWORK_MARKERS:
        if any(name in dependencies for name in names):
            return framework
    return "vanilla"


def load_repo_config_file(root_dir: Path) -> dict[str, object]:
    """Load optional story_sync.toml from the project root."""
    config_path = root_dir / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILENAME} must contain a top-level table.")
    return payload


def merge_config(
    base: SyncConfig, repo_payload: dict[str, object], overrides: CliOverrides
) -> SyncConfig:
    """Merge defaults, repo config, then CLI/startup overrides."""
    sync_payload = _get_table(repo_payload, "sync")
    scan_payload = _get_table(repo_payload, "scan")
    generation_payload = _get_table(repo_payload, "generation")
    watch_payload = _get_table(repo_payload, "watch")
    license_payload = _get_table(repo_payload, "license")

    libraries = base.libraries
    if "libraries" in repo_payload:
        libraries = _libraries(repo_payload["libraries"])

    batch_size = _optional_positive_int_with_cap(
        sync_payload.get("batch_size"), "sync.batch_size", base.batch_size, MAX_BATCH_SIZE_CAP
    )
    cache_filename = base.cache_filename
    if "cache_file" in sync_payload:
        cache_filename = _string(sync_payload["cache_file"], "sync", "cache_file")
    history_enabled = _optional_bool(
        sync_payload.get("history"), "sync.history", base.history_enabled
    )

    scan = base.scan
    if "component_extensions" in scan_payload:
        extensions = _tuple_of_strings(
            scan_payload["component_extensions"], "scan", "component_extensions"
        )
        scan = replace(scan, component_extensions=tuple(item.lower() for item in extensions))
    if "exclude_globs" in scan_payload:
        scan = replace(
            scan,
            exclude_globs=_tuple_of_strings(scan_payload["exclude_globs"], "scan", "exclude_globs"),
        )
    if "non_component_names" in scan_payload:
        scan = replace(
            scan,
            non_component_names=_tuple_of_strings(
                scan_payload["non_component_names"], "scan", "non_component_names"
            ),
        )

    generation = GenerationConfig(
        stories=_optional_bool(
            generation_payload.get("stories"), "generation.stories", base.generation.stories
        ),
        tests=_optional_bool(
            generation_payload.get("tests"), "generation.tests", base.generation.tests
        ),
        docs=_optional_bool(
            generation_payload.get("docs"), "generation.docs", base.generation.docs
        ),
        update_existing=_optional_bool(
            generation_payload.get("update_existing"),
            "generation.update_existing",
            base.generation.update_existing,
        ),
        framework=base.generation.framework,
    )
    if "framework" in generation_payload:
        framework = _string(generation_payload["framework"], "generation", "framework")
        if framework not in FRAMEWORKS:
            raise ValueError(
                f"Config field 'generation.framework' must be one of: {', '.join(FRAMEWORKS)}."
            )
        generation = replace(generation, framework=framework)

    watch = WatchConfig(
        debounce_ms=_optional_positive_int_with_cap(
            watch_payload.get("debounce_ms"),
            "watch.debounce_ms",
            base.watch.debounce_ms,
            MAX_DEBOUNCE_MS_CAP,
        ),
        rescan_interval_seconds=_optional_positive_number(
            watch_payload.get("rescan_interval_seconds"),
            "watch.rescan_interval_seconds",
            base.watch.rescan_interval_seconds,
        ),
        polling=_optional_bool(watch_payload.get("polling"), "watch.polling", base.watch.polling),
    )

    license_key = base.license_key
    if "key" in license_payload:
        license_key = _string(license_payload["key"], "license", "key")

    merged = replace(
        base,
        libraries=libraries,
        batch_size=batch_size,
        cache_filename=cache_filename,
        history_enabled=history_enabled,
        license_key=license_key,
        scan=scan,
        generation=generation,
        watch=watch,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: SyncConfig, overrides: CliOverrides) -> SyncConfig:
    """Apply startup overrides at highest precedence."""
    batch_size = _optional_positive_int_with_cap(
        overrides.batch_size, "overrides.batch_size", config.batch_size, MAX_BATCH_SIZE_CAP
    )
    generation = GenerationConfig(
        stories=_pick(overrides.stories, config.generation.stories),
        tests=_pick(overrides.tests, config.generation.tests),
        docs=_pick(overrides.docs, config.generation.docs),
        update_existing=_pick(overrides.update_existing, config.generation.update_existing),
        framework=config.generation.framework,
    )
    watch = replace(
        config.watch,
        debounce_ms=_optional_positive_int_with_cap(
            overrides.debounce_ms,
            "overrides.debounce_ms",
            config.watch.debounce_ms,
            MAX_DEBOUNCE_MS_CAP,
        ),
        polling=_pick(overrides.polling, config.watch.polling),
    )
    data_dir = overrides.data_dir or config.data_dir
    return replace(
        config,
        data_dir=data_dir.resolve(),
        batch_size=batch_size,
        generation=generation,
        watch=watch,
        license_key=overrides.license_key or config.license_key,
    )


def load_effective_config(root_dir: Path, overrides: CliOverrides | None = None) -> SyncConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    resolved_root = root_dir.resolve()
    base = default_config(resolved_root)
    payload = load_repo_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _libraries(value: object) -> tuple[LibraryConfig, ...]:
    if not isinstance(value, list):
        raise ValueError("Config field 'libraries' must be an array of tables.")
    output: list[LibraryConfig] = []
    for index, item in enumerate(value):
        section = f"libraries[{index}]"
        if not isinstance(item, dict):
            raise ValueError(f"Config field '{section}' must be a table.")
        if "name" not in item or "path" not in item:
            raise ValueError(f"Config field '{section}' requires 'name' and 'path'.")
        import_alias = item.get("import_alias")
        if import_alias is not None:
            import_alias = _string(import_alias, section, "import_alias")
        output.append(
            LibraryConfig(
                name=_string(item["name"], section, "name"),
                path=_normalize_library_path(_string(item["path"], section, "path")) or ".",
                title_prefix=_string(
                    item.get("title_prefix", "Components"), section, "title_prefix"
                ),
                import_alias=import_alias,
                decorators=_tuple_of_strings(item.get("decorators", []), section, "decorators"),
            )
        )
    return tuple(output)


def _normalize_library_path(path: str) -> str:
    normalized = path.replace("\\", "/").strip()
    while normalized.startswith("./"):
        normalized = normalized[2:]
    normalized = normalized.rstrip("/")
    return "" if normalized == "." else normalized


def _string(value: object, section: str, field: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"Config field '{section}.{field}' must be a non-empty string.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _pick(value: bool | None, default: bool) -> bool:
    return default if value is None else value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_positive_number(value: object, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"Config field '{name}' must be a positive number.")
    return float(value)


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
