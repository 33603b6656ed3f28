"""Offset pagination over an already filtered and sorted sequence."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from sbomlens.core.config import PaginationConfig

T = TypeVar("T")

DEFAULT_PAGE = 0


@dataclass
class PaginatedResult(Generic[T]):
    data: list[T]
    page: int
    entries_per_page: int
    total_entries: int
    total_pages: int
    entry_count: int
    matching_count: int
    filter_count: dict[str, int] = field(default_factory=dict)


def paginate(
    items: Sequence[T],
    total_available: int,
    *,
    page: int | None = None,
    entries_per_page: int | None = None,
    config: PaginationConfig | None = None,
    filter_count: dict[str, int] | None = None,
) -> PaginatedResult[T]:
    """Cut one page out of *items*.

    ``entries_per_page`` is clamped to ``[1, max_entries_per_page]``; a missing
    or non-positive value uses the configured default. ``page`` is clamped to
    ``>= 0``. ``total_pages`` is derived from *total_available*.
    """
    config = config or PaginationConfig()
    max_size = max(1, config.max_entries_per_page)
    default_size = min(max(1, config.default_entries_per_page), max_size)

    if entries_per_page is None or entries_per_page <= 0:
        size = default_size
    else:
        size = min(entries_per_page, max_size)

    current = DEFAULT_PAGE if page is None or page < 0 else page
    total_entries = max(0, total_available)

    window = list(items[current * size : (current + 1) * size])

    return PaginatedResult(
        data=window,
        page=current,
        entries_per_page=size,
        total_entries=total_entries,
        total_pages=math.ceil(total_entries / size),
        entry_count=len(window),
        matching_count=len(items),
        filter_count=dict(filter_count or {}),
    )
