"""SBOM router: listing, stats, workspaces and dependency lookups."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from sbomlens.api.deps import get_sbom_service
from sbomlens.api.schemas.common import PaginatedResponse, to_paginated_response
from sbomlens.api.schemas.sbom import (
    AnalysisStatsResponse,
    DependencyDetailsResponse,
    GraphNodeResponse,
    RelatedDependenciesResponse,
    SbomDependencyItem,
    StatusResponse,
    WorkspacesResponse,
)
from sbomlens.services.sbom_service import SbomQuery, SbomService

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[SbomDependencyItem])
async def list_dependencies(
    analysis_id: str,
    workspace: str = Query(...),
    page: int | None = Query(None),
    entries_per_page: int | None = Query(None),
    sort_by: str | None = Query(None),
    sort_direction: str | None = Query(None),
    active_filters: str | None = Query(None),
    search_key: str | None = Query(None),
    ecosystem_filter: str | None = Query(None),
    svc: SbomService = Depends(get_sbom_service),
) -> PaginatedResponse[SbomDependencyItem]:
    result = await svc.get_sbom(
        analysis_id,
        SbomQuery(
            workspace=workspace,
            page=page,
            entries_per_page=entries_per_page,
            sort_by=sort_by,
            sort_direction=sort_direction,
            active_filters=active_filters,
            search_key=search_key,
            ecosystem_filter=ecosystem_filter,
        ),
    )
    return to_paginated_response(result, SbomDependencyItem)


@router.get("/stats", response_model=AnalysisStatsResponse)
async def get_stats(
    analysis_id: str,
    workspace: str = Query(...),
    ecosystem_filter: str | None = Query(None),
    svc: SbomService = Depends(get_sbom_service),
) -> AnalysisStatsResponse:
    stats = await svc.get_stats(analysis_id, workspace, ecosystem_filter)
    return AnalysisStatsResponse.model_validate(stats)


@router.get("/workspaces", response_model=WorkspacesResponse)
async def get_workspaces(
    analysis_id: str,
    svc: SbomService = Depends(get_sbom_service),
) -> WorkspacesResponse:
    return WorkspacesResponse(**await svc.get_workspaces(analysis_id))


@router.get("/status", response_model=StatusResponse)
async def get_status(
    analysis_id: str,
    svc: SbomService = Depends(get_sbom_service),
) -> StatusResponse:
    return StatusResponse(**await svc.get_status(analysis_id))


@router.get("/dependency", response_model=DependencyDetailsResponse)
async def get_dependency(
    analysis_id: str,
    workspace: str = Query(...),
    dependency: str = Query(..., description="name@version"),
    svc: SbomService = Depends(get_sbom_service),
) -> DependencyDetailsResponse:
    details = await svc.get_dependency(analysis_id, workspace, dependency)
    return DependencyDetailsResponse.model_validate(details)


@router.get("/dependency/graph", response_model=list[GraphNodeResponse])
async def get_dependency_graph(
    analysis_id: str,
    workspace: str = Query(...),
    dependency: str = Query(..., description="name@version"),
    svc: SbomService = Depends(get_sbom_service),
) -> list[GraphNodeResponse]:
    nodes = await svc.get_dependency_graph(analysis_id, workspace, dependency)
    return [GraphNodeResponse.model_validate(node) for node in nodes]


@router.get("/dependency/ancestors", response_model=RelatedDependenciesResponse)
async def get_ancestors(
    analysis_id: str,
    workspace: str = Query(...),
    dependency: str = Query(..., description="name@version"),
    svc: SbomService = Depends(get_sbom_service),
) -> RelatedDependenciesResponse:
    related = await svc.get_ancestors(analysis_id, workspace, dependency)
    return RelatedDependenciesResponse(dependency=dependency, related=related)


@router.get("/dependency/descendants", response_model=RelatedDependenciesResponse)
async def get_descendants(
    analysis_id: str,
    workspace: str = Query(...),
    dependency: str = Query(..., description="name@version"),
    svc: SbomService = Depends(get_sbom_service),
) -> RelatedDependenciesResponse:
    related = await svc.get_descendants(analysis_id, workspace, dependency)
    return RelatedDependenciesResponse(dependency=dependency, related=related)
