"""Read-only artifact coverage report and story suggestions."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from story_sync.config import SyncConfig
from story_sync.scanner.discovery import scan_components
from story_sync.sync.orchestrator import ScanFn
from story_sync.sync.paths import artifact_paths

DEFAULT_SUGGESTION_LIMIT = 10


@dataclass(slots=True, frozen=True)
class UnitCoverage:
    """Which artifacts exist for one source unit."""

    name: str
    path: str
    library: str
    story: bool
    test: bool
    docs: bool

    def missing(self) -> tuple[str, ...]:
        """Return artifact kinds that do not exist yet."""
        present = {"story": self.story, "test": self.test, "docs": self.docs}
        return tuple(kind for kind, exists in present.items() if not exists)


@dataclass(slots=True, frozen=True)
class LibraryCoverage:
    """Story counts for one configured library."""

    total: int
    with_stories: int


@dataclass(slots=True, frozen=True)
class CoverageReport:
    """Artifact coverage over every scanned unit."""

    units: tuple[UnitCoverage, ...]
    by_library: dict[str, LibraryCoverage]

    @property
    def total(self) -> int:
        return len(self.units)

    @property
    def with_stories(self) -> int:
        return sum(1 for unit in self.units if unit.story)

    @property
    def story_percent(self) -> int:
        """Story coverage rounded half-up to a whole percent; 0 without units."""
        if not self.units:
            return 0
        return (200 * self.with_stories + self.total) // (2 * self.total)

    def needing_stories(self) -> list[UnitCoverage]:
        return [unit for unit in self.units if not unit.story]

    def to_dict(self) -> dict[str, object]:
        """Return serializable report."""
        return {
            "total": self.total,
            "with_stories": self.with_stories,
            "without_stories": self.total - self.with_stories,
            "with_tests": sum(1 for unit in self.units if unit.test),
            "with_docs": sum(1 for unit in self.units if unit.docs),
            "coverage": f"{self.story_percent}%",
            "by_library": {name: asdict(counts) for name, counts in self.by_library.items()},
            "missing": [
                {"component": unit.name, "path": unit.path, "missing": list(unit.missing())}
                for unit in self.units
                if unit.missing()
            ],
        }


@dataclass(slots=True, frozen=True)
class StorySuggestion:
    """A component without a story and the command that would create one."""

    component: str
    path: str
    library: str
    command: str


def component_coverage(
    config: SyncConfig, library: str | None = None, scan: ScanFn | None = None
) -> CoverageReport:
    """Report which units lack story, test or docs artifacts."""
    scan_fn = scan or scan_components
    root = config.root_dir
    units: list[UnitCoverage] = []
    for unit in scan_fn(config, library):
        paths = artifact_paths(unit.path)
        units.append(
            UnitCoverage(
                name=unit.name,
                path=unit.path,
                library=unit.library,
                story=unit.has_example_artifact or (root / paths.story).is_file(),
                test=(root / paths.test).is_file(),
                docs=(root / paths.docs).is_file(),
            )
        )
    by_library: dict[str, LibraryCoverage] = {}
    for library_config in config.libraries:
        members = [unit for unit in units if unit.library == library_config.name]
        by_library[library_config.name] = LibraryCoverage(
            total=len(members),
            with_stories=sum(1 for unit in members if unit.story),
        )
    return CoverageReport(units=tuple(units), by_library=by_library)


def suggest_stories(
    config: SyncConfig,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
    library: str | None = None,
    scan: ScanFn | None = None,
) -> list[StorySuggestion]:
    """Return up to `limit` components without a story, in scan order."""
    if limit < 1:
        raise ValueError("Suggestion limit must be a positive integer.")
    report = component_coverage(config, library, scan)
    return [
        StorySuggestion(
            component=unit.name,
            path=unit.path,
            library=unit.library,
            command=f"story-sync --component {unit.path}",
        )
        for unit in report.needing_stories()[:limit]
    ]
