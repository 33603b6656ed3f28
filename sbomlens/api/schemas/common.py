"""Shared pagination schemas."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

from sbomlens.engines.sbom.pagination import PaginatedResult

T = TypeVar("T", bound=BaseModel)


class PaginatedResponse(BaseModel, Generic[T]):
    """Offset-paginated list response."""

    data: list[T]
    page: int
    entries_per_page: int
    total_entries: int
    total_pages: int
    entry_count: int
    matching_count: int
    filter_count: dict[str, int] = {}


def to_paginated_response(result: PaginatedResult, item_model: type[T]) -> PaginatedResponse[T]:
    """Convert an engine :class:`PaginatedResult` into its response model."""
    return PaginatedResponse[item_model](  # type: ignore[valid-type]
        data=[item_model.model_validate(item) for item in result.data],
        page=result.page,
        entries_per_page=result.entries_per_page,
        total_entries=result.total_entries,
        total_pages=result.total_pages,
        entry_count=result.entry_count,
        matching_count=result.matching_count,
        filter_count=result.filter_count,
    )
