"""Filter engine: free-text search plus named boolean predicates.

Search is applied first; category counts are then taken over the
search-filtered set, one predicate at a time, so they read as "how many
would match if only this filter were on" and do not move when filters are
toggled. Active filters combine with AND. Unknown filter names are ignored.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from sbomlens.engines.sbom.models import LicenseFact, SbomDependencyRow

T = TypeVar("T")

Predicate = Callable[[T], bool]

LICENSE_FILTERS: dict[str, Predicate[LicenseFact]] = {
    "compliance_violation": lambda lic: bool(lic.license_compliance_violation),
    "unrecognized": lambda lic: bool(lic.unable_to_infer),
    "permissive": lambda lic: lic.category == "permissive",
    "copy_left": lambda lic: lic.category == "copy_left",
}

DEPENDENCY_FILTERS: dict[str, Predicate[SbomDependencyRow]] = {
    "user_installed": lambda dep: dep.is_direct_count > 0,
    "not_user_installed": lambda dep: dep.is_direct_count == 0,
    "deprecated": lambda dep: bool(dep.deprecated),
    "outdated": lambda dep: bool(dep.outdated),
    "unlicensed": lambda dep: bool(dep.unlicensed),
    "dev": lambda dep: bool(dep.dev),
    "prod": lambda dep: bool(dep.prod),
}


def parse_active_filters(raw: str | None) -> list[str]:
    """Decode the ``[a,b]`` wire format into a list of filter names."""
    if not raw:
        return []
    stripped = raw.strip().removeprefix("[").removesuffix("]")
    return [name.strip() for name in stripped.split(",") if name.strip()]


def filter_licenses(
    licenses: Sequence[LicenseFact],
    search_key: str | None,
    active_filters: Iterable[str] | None,
) -> tuple[list[LicenseFact], dict[str, int]]:
    """Search licenses by id or name, then apply license filters."""
    searched = _search(licenses, search_key, lambda lic: (lic.id, lic.name))
    return _apply(searched, active_filters, LICENSE_FILTERS)


def filter_dependencies(
    dependencies: Sequence[SbomDependencyRow],
    search_key: str | None,
    active_filters: Iterable[str] | None,
) -> tuple[list[SbomDependencyRow], dict[str, int]]:
    """Search dependency rows by name, then apply dependency filters."""
    searched = _search(dependencies, search_key, lambda dep: (dep.name,))
    return _apply(searched, active_filters, DEPENDENCY_FILTERS)


def _search(
    items: Sequence[T],
    search_key: str | None,
    fields: Callable[[T], tuple[str | None, ...]],
) -> list[T]:
    if not search_key:
        return list(items)
    needle = search_key.lower()
    # one pass over the items, so a match on several fields yields one entry
    return [
        item
        for item in items
        if any(value and needle in value.lower() for value in fields(item))
    ]


def _apply(
    searched: list[T],
    active_filters: Iterable[str] | None,
    predicates: dict[str, Predicate[T]],
) -> tuple[list[T], dict[str, int]]:
    counts = {
        name: sum(1 for item in searched if predicate(item))
        for name, predicate in predicates.items()
    }

    selected = [predicates[name] for name in (active_filters or []) if name in predicates]
    if not selected:
        return searched, counts

    filtered = [item for item in searched if all(pred(item) for pred in selected)]
    return filtered, counts
