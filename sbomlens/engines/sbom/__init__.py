"""SBOM engine: merge, stats, listing pipeline and graph queries, without I/O."""

from sbomlens.engines.sbom.filter import filter_dependencies, filter_licenses, parse_active_filters
from sbomlens.engines.sbom.graph import (
    VIRTUAL_ROOT_ID,
    ancestors,
    build_graph,
    dependency_graph,
    descendants,
)
from sbomlens.engines.sbom.licenses import (
    LicenseCatalog,
    LicenseDetails,
    RawLicenseOutput,
    StaticLicenseCatalog,
    build_license_facts,
)
from sbomlens.engines.sbom.merge import MULTI_LANGUAGE, filter_by_ecosystem, merge_plugin_outputs
from sbomlens.engines.sbom.models import (
    AnalysisInfo,
    AnalysisStats,
    CanonicalSbom,
    DependencyDetails,
    DependencyEntry,
    DependencyKey,
    GraphNode,
    LicenseFact,
    SbomDependencyRow,
    Workspace,
)
from sbomlens.engines.sbom.pagination import PaginatedResult, paginate
from sbomlens.engines.sbom.raw import PluginOutput, parse_plugin_output
from sbomlens.engines.sbom.rows import build_rows
from sbomlens.engines.sbom.sort import sort_dependencies, sort_licenses
from sbomlens.engines.sbom.stats import compute_stats

__all__ = [
    "MULTI_LANGUAGE",
    "VIRTUAL_ROOT_ID",
    "AnalysisInfo",
    "AnalysisStats",
    "CanonicalSbom",
    "DependencyDetails",
    "DependencyEntry",
    "DependencyKey",
    "GraphNode",
    "LicenseCatalog",
    "LicenseDetails",
    "LicenseFact",
    "PaginatedResult",
    "PluginOutput",
    "RawLicenseOutput",
    "SbomDependencyRow",
    "StaticLicenseCatalog",
    "Workspace",
    "ancestors",
    "build_graph",
    "build_license_facts",
    "build_rows",
    "compute_stats",
    "dependency_graph",
    "descendants",
    "filter_by_ecosystem",
    "filter_dependencies",
    "filter_licenses",
    "merge_plugin_outputs",
    "paginate",
    "parse_active_filters",
    "parse_plugin_output",
    "sort_dependencies",
    "sort_licenses",
]
