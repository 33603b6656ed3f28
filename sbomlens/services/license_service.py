"""LicenseService: license usage listing for one analysis run."""

from __future__ import annotations

from dataclasses import dataclass

from sbomlens.core.config import PaginationConfig
from sbomlens.engines.sbom.filter import filter_licenses, parse_active_filters
from sbomlens.engines.sbom.licenses import LicenseCatalog, build_license_facts
from sbomlens.engines.sbom.models import LicenseFact
from sbomlens.engines.sbom.pagination import PaginatedResult, paginate
from sbomlens.engines.sbom.sort import sort_licenses
from sbomlens.services import NoResultAvailableError, UnknownWorkspaceError
from sbomlens.services.result_store import ResultStore


@dataclass
class LicenseQuery:
    workspace: str
    page: int | None = None
    entries_per_page: int | None = None
    sort_by: str | None = None
    sort_direction: str | None = None
    active_filters: str | list[str] | None = None
    search_key: str | None = None


class LicenseService:
    """Stateless service for license facts."""

    def __init__(
        self,
        store: ResultStore,
        catalog: LicenseCatalog | None = None,
        *,
        pagination: PaginationConfig | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._pagination = pagination or PaginationConfig()

    async def get_licenses(
        self, analysis_id: str, query: LicenseQuery
    ) -> PaginatedResult[LicenseFact]:
        """Filtered, sorted and paginated license facts of one workspace.

        Raises :class:`NoResultAvailableError` if the run has no license
        result and :class:`UnknownWorkspaceError` if the workspace is absent.
        """
        output = await self._store.get_license_output(analysis_id)
        if output is None:
            raise NoResultAvailableError(f"no license result for analysis {analysis_id}")
        if query.workspace not in output.workspaces:
            raise UnknownWorkspaceError(query.workspace)

        facts = build_license_facts(output.workspaces[query.workspace], self._catalog)

        active = query.active_filters
        if isinstance(active, str) or active is None:
            active = parse_active_filters(active)

        filtered, counts = filter_licenses(facts, query.search_key, active)
        ordered = sort_licenses(filtered, query.sort_by, query.sort_direction)
        return paginate(
            ordered,
            len(facts),
            page=query.page,
            entries_per_page=query.entries_per_page,
            config=self._pagination,
            filter_count=counts,
        )
