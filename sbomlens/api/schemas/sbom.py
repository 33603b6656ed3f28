"""SBOM response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SbomDependencyItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    version: str
    newest_release: str
    dev: bool
    prod: bool
    is_direct: bool
    is_direct_count: int
    is_transitive_count: int
    deprecated: bool | None = None
    deprecated_message: str | None = None
    outdated: bool | None = None
    unlicensed: bool | None = None
    licenses: list[str] = []
    last_published: str | None = None
    release: str | None = None
    package_manager: str | None = None
    ecosystem: str | None = None
    source_plugin: str | None = None


class AnalysisStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    number_of_dependencies: int
    number_of_direct_dependencies: int
    number_of_transitive_dependencies: int
    number_of_both_direct_transitive_dependencies: int
    number_of_bundled_dependencies: int
    number_of_optional_dependencies: int
    number_of_dev_dependencies: int
    number_of_non_dev_dependencies: int
    number_of_outdated_dependencies: int
    number_of_deprecated_dependencies: int

    number_of_dependencies_diff: int
    number_of_direct_dependencies_diff: int
    number_of_transitive_dependencies_diff: int
    number_of_both_direct_transitive_dependencies_diff: int
    number_of_bundled_dependencies_diff: int
    number_of_optional_dependencies_diff: int
    number_of_dev_dependencies_diff: int
    number_of_non_dev_dependencies_diff: int
    number_of_outdated_dependencies_diff: int
    number_of_deprecated_dependencies_diff: int


class WorkspacesResponse(BaseModel):
    workspaces: list[str]
    package_manager: str


class StatusResponse(BaseModel):
    public_errors: list
    private_errors: list
    stage_start: str | None
    stage_end: str | None


class DependencyDetailsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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
    licenses: list[str]
    ecosystem: str | None = None
    source_plugin: str | None = None


class GraphNodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    parent_ids: list[str]
    children_ids: list[str]
    prod: bool
    dev: bool


class RelatedDependenciesResponse(BaseModel):
    dependency: str
    related: list[str]
