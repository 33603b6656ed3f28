"""Sort engine: stable, field-aware ordering of listing rows.

Invalid input never raises: an unknown ``sort_by`` falls back to ``dev`` and
an unknown direction to ``DESC``. Every path uses Python's stable sort, and
``reverse=True`` keeps equal elements in their input order.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import Any

import semver
import structlog

from sbomlens.engines.sbom.models import LicenseFact, SbomDependencyRow

log = structlog.get_logger("sbomlens.engine")

ALLOWED_SORT_BY = (
    "name",
    "version",
    "package_manager",
    "unlicensed",
    "deprecated",
    "outdated",
    "licenses",
    "newest_release",
    "last_published",
    "user_installed",
    "release",
    "dev",
    "is_direct_count",
    "combined_severity",
)
DEFAULT_SORT = "dev"
DEFAULT_SORT_DIRECTION = "DESC"

_FIELD_MAPPING = {"user_installed": "is_direct"}

_BOOLEAN_FIELDS = frozenset({"unlicensed", "deprecated", "outdated", "is_direct"})
_DATE_FIELDS = frozenset({"last_published", "release"})
_COUNT_FIELDS = frozenset({"dev", "is_direct_count"})
# accepted but not ordered on
_PASSTHROUGH_FIELDS = frozenset({"licenses", "combined_severity"})

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

LICENSE_SORT_BY = ("dep_count", "license_id", "type")
DEFAULT_LICENSE_SORT = "dep_count"


def resolve_direction(sort_direction: str | None) -> str:
    if sort_direction in ("ASC", "DESC"):
        return sort_direction
    return DEFAULT_SORT_DIRECTION


def resolve_sort_field(sort_by: str | None) -> str:
    """Validate against the allow-list and map public names to row fields."""
    field = sort_by if sort_by in ALLOWED_SORT_BY else DEFAULT_SORT
    return _FIELD_MAPPING.get(field, field)


def sort_dependencies(
    dependencies: Sequence[SbomDependencyRow],
    sort_by: str | None,
    sort_direction: str | None,
) -> list[SbomDependencyRow]:
    """Return a new, stably sorted list of *dependencies*."""
    field = resolve_sort_field(sort_by)
    descending = resolve_direction(sort_direction) == "DESC"
    items = list(dependencies)

    if field in _PASSTHROUGH_FIELDS:
        return items

    if field == "version":
        return sorted(items, key=cmp_to_key(_compare_versions), reverse=descending)

    if field in _BOOLEAN_FIELDS:
        return sorted(items, key=lambda dep: bool(getattr(dep, field, None)), reverse=descending)

    if field in _DATE_FIELDS:
        return sorted(items, key=lambda dep: _parse_date(getattr(dep, field, None)), reverse=descending)

    if field in _COUNT_FIELDS:
        # DESC is higher-first; ties keep input order
        return sorted(items, key=lambda dep: int(getattr(dep, field, 0) or 0), reverse=descending)

    return sorted(items, key=lambda dep: str(getattr(dep, field, None) or ""), reverse=descending)


def sort_licenses(
    licenses: Sequence[LicenseFact],
    sort_by: str | None,
    sort_direction: str | None,
) -> list[LicenseFact]:
    """Order license facts by dependency count, id or category."""
    field = sort_by if sort_by in LICENSE_SORT_BY else DEFAULT_LICENSE_SORT
    descending = resolve_direction(sort_direction) == "DESC"

    if field == "dep_count":
        key: Any = lambda lic: len(lic.deps_using_license or [])
    elif field == "license_id":
        key = lambda lic: lic.id or ""
    else:
        key = lambda lic: lic.category or ""
    return sorted(licenses, key=key, reverse=descending)


def _compare_versions(a: SbomDependencyRow, b: SbomDependencyRow) -> int:
    """SemVer 2.0 precedence; unparseable versions compare equal."""
    raw_a = _strip_prefix(a.version or "0.0.0")
    raw_b = _strip_prefix(b.version or "0.0.0")
    try:
        return semver.Version.parse(raw_a).compare(raw_b)
    except ValueError as exc:
        log.debug("sort.version_compare_failed", a=raw_a, b=raw_b, error=str(exc))
        return 0


def _strip_prefix(version: str) -> str:
    return version.strip().lstrip("=v")


def _parse_date(value: Any) -> datetime:
    """Parse an ISO date/time; anything unparseable sorts as the epoch."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return _EPOCH
    else:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
