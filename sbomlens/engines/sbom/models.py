"""Canonical data models for the SBOM engine."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import NamedTuple


class DependencyKey(NamedTuple):
    """Identity of a dependency inside a workspace."""

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"

    @classmethod
    def parse(cls, raw: str) -> DependencyKey | None:
        """Parse ``name@version``; scoped npm names keep their leading ``@``.

        Returns ``None`` when either half is missing.
        """
        if not raw:
            return None
        name, sep, version = raw.strip().rpartition("@")
        if not sep or not name or not version:
            return None
        return cls(name, version)


@dataclass
class DependencyEntry:
    """Classification flags and adjacency of one (name, version) in a workspace."""

    direct: bool = False
    transitive: bool = False
    dev: bool = False
    prod: bool = False
    bundled: bool = False
    optional: bool = False
    dependencies: dict[str, str] = field(default_factory=dict)
    requires: dict[str, str] = field(default_factory=dict)
    licenses: list[str] = field(default_factory=list)
    ecosystem: str | None = None
    source_plugin: str | None = None

    @property
    def is_active(self) -> bool:
        """Entries with neither ``dev`` nor ``prod`` are merge scaffolding."""
        return self.dev or self.prod


@dataclass
class Workspace:
    dependencies: dict[str, dict[str, DependencyEntry]] = field(default_factory=dict)
    declared_dependencies: list[DependencyKey] = field(default_factory=list)
    declared_dev_dependencies: list[DependencyKey] = field(default_factory=list)

    def get(self, key: DependencyKey) -> DependencyEntry | None:
        return self.dependencies.get(key.name, {}).get(key.version)

    def iter_entries(self):
        """Yield ``(DependencyKey, DependencyEntry)`` in insertion order."""
        for name, versions in self.dependencies.items():
            for version, entry in versions.items():
                yield DependencyKey(name, version), entry

    def is_declared(self, key: DependencyKey) -> bool:
        return key in self.declared_dependencies or key in self.declared_dev_dependencies


@dataclass
class AnalysisInfo:
    package_manager: str = ""
    analysis_start_time: str | None = None
    analysis_end_time: str | None = None
    public_errors: list[str] = field(default_factory=list)
    private_errors: list[str] = field(default_factory=list)
    status: str = "success"
    project_name: str = ""


@dataclass
class CanonicalSbom:
    """Merged SBOM of one analysis run. Treated as read-only after merge."""

    workspaces: dict[str, Workspace] = field(default_factory=dict)
    analysis_info: AnalysisInfo = field(default_factory=AnalysisInfo)


@dataclass
class SbomDependencyRow:
    """Listing projection of one dependency in one workspace."""

    name: str
    version: str
    newest_release: str
    dev: bool = False
    prod: bool = False
    is_direct: bool = False
    is_direct_count: int = 0
    is_transitive_count: int = 0
    deprecated: bool | None = None
    deprecated_message: str | None = None
    outdated: bool | None = None
    unlicensed: bool | None = None
    licenses: list[str] = field(default_factory=list)
    last_published: str | None = None
    release: str | None = None
    package_manager: str | None = None
    ecosystem: str | None = None
    source_plugin: str | None = None


@dataclass
class AnalysisStats:
    number_of_dependencies: int = 0
    number_of_direct_dependencies: int = 0
    number_of_transitive_dependencies: int = 0
    number_of_both_direct_transitive_dependencies: int = 0
    number_of_bundled_dependencies: int = 0
    number_of_optional_dependencies: int = 0
    number_of_dev_dependencies: int = 0
    number_of_non_dev_dependencies: int = 0
    number_of_outdated_dependencies: int = 0
    number_of_deprecated_dependencies: int = 0

    number_of_dependencies_diff: int = 0
    number_of_direct_dependencies_diff: int = 0
    number_of_transitive_dependencies_diff: int = 0
    number_of_both_direct_transitive_dependencies_diff: int = 0
    number_of_bundled_dependencies_diff: int = 0
    number_of_optional_dependencies_diff: int = 0
    number_of_dev_dependencies_diff: int = 0
    number_of_non_dev_dependencies_diff: int = 0
    number_of_outdated_dependencies_diff: int = 0
    number_of_deprecated_dependencies_diff: int = 0

    @classmethod
    def counter_names(cls) -> list[str]:
        """Names of the counters that carry a ``_diff`` twin."""
        return [f.name for f in fields(cls) if not f.name.endswith("_diff")]


@dataclass
class LicenseFact:
    id: str
    name: str = ""
    category: str = ""
    unable_to_infer: bool = False
    license_compliance_violation: bool = False
    deps_using_license: list[str] = field(default_factory=list)
    description: str = ""
    references: list[str] = field(default_factory=list)


@dataclass
class DependencyDetails:
    name: str
    version: str
    latest_version: str
    dependencies: dict[str, str]
    requires: dict[str, str]
    direct: bool
    transitive: bool
    dev: bool
    prod: bool
    bundled: bool
    optional: bool
    package_manager: str
    licenses: list[str] = field(default_factory=list)
    ecosystem: str | None = None
    source_plugin: str | None = None


@dataclass
class GraphNode:
    id: str
    parent_ids: list[str] = field(default_factory=list)
    children_ids: list[str] = field(default_factory=list)
    prod: bool = False
    dev: bool = False
