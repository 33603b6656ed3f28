"""Licenses router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from sbomlens.api.deps import get_license_service
from sbomlens.api.schemas.common import PaginatedResponse, to_paginated_response
from sbomlens.api.schemas.license import LicenseItem
from sbomlens.services.license_service import LicenseQuery, LicenseService

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[LicenseItem])
async def list_licenses(
    analysis_id: str,
    workspace: str = Query(...),
    page: int | None = Query(None),
    entries_per_page: int | None = Query(None),
    sort_by: str | None = Query(None),
    sort_direction: str | None = Query(None),
    active_filters: str | None = Query(None),
    search_key: str | None = Query(None),
    svc: LicenseService = Depends(get_license_service),
) -> PaginatedResponse[LicenseItem]:
    result = await svc.get_licenses(
        analysis_id,
        LicenseQuery(
            workspace=workspace,
            page=page,
            entries_per_page=entries_per_page,
            sort_by=sort_by,
            sort_direction=sort_direction,
            active_filters=active_filters,
            search_key=search_key,
        ),
    )
    return to_paginated_response(result, LicenseItem)
