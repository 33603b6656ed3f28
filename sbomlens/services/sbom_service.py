"""SbomService: merged SBOM queries for one analysis run."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from sbomlens.core.config import PaginationConfig
from sbomlens.engines.package_registry.models import PackageInfo, PackageMetadataLookup
from sbomlens.engines.sbom.filter import filter_dependencies, parse_active_filters
from sbomlens.engines.sbom.graph import ancestors, dependency_graph, descendants, get_workspace
from sbomlens.engines.sbom.merge import filter_by_ecosystem, merge_plugin_outputs
from sbomlens.engines.sbom.models import (
    AnalysisStats,
    CanonicalSbom,
    DependencyDetails,
    DependencyKey,
    GraphNode,
    SbomDependencyRow,
    Workspace,
)
from sbomlens.engines.sbom.pagination import PaginatedResult, paginate
from sbomlens.engines.sbom.raw import PluginOutput
from sbomlens.engines.sbom.rows import build_rows, deprecated_keys, latest_versions
from sbomlens.engines.sbom.sort import sort_dependencies
from sbomlens.engines.sbom.stats import compute_stats
from sbomlens.services import EntityNotFoundError, NoResultAvailableError, UnknownWorkspaceError
from sbomlens.services.result_store import ResultStore

log = structlog.get_logger("sbomlens.service")

Metadata = dict[DependencyKey, PackageInfo | None]


@dataclass
class SbomQuery:
    """Listing parameters for :meth:`SbomService.get_sbom`."""

    workspace: str
    page: int | None = None
    entries_per_page: int | None = None
    sort_by: str | None = None
    sort_direction: str | None = None
    active_filters: str | list[str] | None = None
    search_key: str | None = None
    ecosystem_filter: str | None = None


class SbomService:
    """Stateless service over the result store and the SBOM engine."""

    def __init__(
        self,
        store: ResultStore,
        metadata: PackageMetadataLookup | None = None,
        *,
        pagination: PaginationConfig | None = None,
        metadata_concurrency: int = 8,
    ) -> None:
        self._store = store
        self._metadata = metadata
        self._pagination = pagination or PaginationConfig()
        self._metadata_concurrency = max(1, metadata_concurrency)

    # ── queries ────────────────────────────────────────────────────────────

    async def get_sbom(
        self, analysis_id: str, query: SbomQuery
    ) -> PaginatedResult[SbomDependencyRow]:
        """Filtered, sorted and paginated dependency rows of one workspace.

        Raises :class:`NoResultAvailableError` if the run has no usable SBOM
        and :class:`UnknownWorkspaceError` if the workspace is absent.
        """
        sbom = self._scoped(await self._load(analysis_id), query.ecosystem_filter)
        workspace = get_workspace(sbom, query.workspace)

        metadata = await self._resolve_metadata([workspace])
        rows = build_rows(workspace, sbom.analysis_info.package_manager, metadata)

        active = query.active_filters
        if isinstance(active, str) or active is None:
            active = parse_active_filters(active)

        filtered, counts = filter_dependencies(rows, query.search_key, active)
        ordered = sort_dependencies(filtered, query.sort_by, query.sort_direction)
        return paginate(
            ordered,
            len(rows),
            page=query.page,
            entries_per_page=query.entries_per_page,
            config=self._pagination,
            filter_count=counts,
        )

    async def get_stats(
        self, analysis_id: str, workspace: str, ecosystem_filter: str | None = None
    ) -> AnalysisStats:
        """Counters for *workspace* and their diff against the prior run."""
        current_outputs, previous_outputs = await asyncio.gather(
            self._store.get_plugin_outputs(analysis_id),
            self._store.get_previous_plugin_outputs(analysis_id),
        )
        current = self._merge(analysis_id, current_outputs)
        if current is None:
            raise NoResultAvailableError(f"no SBOM result for analysis {analysis_id}")
        previous = self._merge(analysis_id, previous_outputs)

        current = self._scoped(current, ecosystem_filter)
        if previous is not None:
            previous = self._scoped(previous, ecosystem_filter)

        if workspace not in current.workspaces:
            raise UnknownWorkspaceError(workspace)

        if self._metadata is None:
            return compute_stats(current, previous, workspace)

        workspaces = [current.workspaces[workspace]]
        if previous is not None and workspace in previous.workspaces:
            workspaces.append(previous.workspaces[workspace])
        metadata = await self._resolve_metadata(workspaces)
        return compute_stats(
            current,
            previous,
            workspace,
            latest_versions=latest_versions(metadata),
            deprecated=deprecated_keys(metadata),
        )

    async def get_workspaces(self, analysis_id: str) -> dict:
        """Return workspace names and the merged package manager."""
        sbom = await self._load(analysis_id)
        return {
            "workspaces": list(sbom.workspaces),
            "package_manager": sbom.analysis_info.package_manager,
        }

    async def get_dependency(
        self, analysis_id: str, workspace: str, dependency: str
    ) -> DependencyDetails:
        """Details of one ``name@version`` in *workspace*.

        Raises :class:`EntityNotFoundError` if the identity is malformed or
        absent from the workspace.
        """
        sbom = await self._load(analysis_id)
        ws = get_workspace(sbom, workspace)
        key = _parse_key(dependency)
        entry = ws.get(key)
        if entry is None:
            raise EntityNotFoundError(f"dependency {dependency} not found in workspace {workspace}")

        latest = key.version
        if self._metadata is not None:
            info = await self._lookup(key, entry.ecosystem)
            if info is not None and info.latest_version:
                latest = info.latest_version

        return DependencyDetails(
            name=key.name,
            version=key.version,
            latest_version=latest,
            dependencies=dict(entry.dependencies),
            requires=dict(entry.requires),
            direct=entry.direct,
            transitive=entry.transitive,
            dev=entry.dev,
            prod=entry.prod,
            bundled=entry.bundled,
            optional=entry.optional,
            package_manager=sbom.analysis_info.package_manager,
            licenses=list(entry.licenses),
            ecosystem=entry.ecosystem,
            source_plugin=entry.source_plugin,
        )

    async def get_dependency_graph(
        self, analysis_id: str, workspace: str, dependency: str
    ) -> list[GraphNode]:
        """Target node plus every node on a path from the root to it."""
        sbom = await self._load(analysis_id)
        return dependency_graph(sbom, workspace, _parse_key(dependency))

    async def get_ancestors(self, analysis_id: str, workspace: str, dependency: str) -> list[str]:
        sbom = await self._load(analysis_id)
        return sorted(str(key) for key in ancestors(sbom, workspace, _parse_key(dependency)))

    async def get_descendants(self, analysis_id: str, workspace: str, dependency: str) -> list[str]:
        sbom = await self._load(analysis_id)
        return sorted(str(key) for key in descendants(sbom, workspace, _parse_key(dependency)))

    async def get_status(self, analysis_id: str) -> dict:
        """Error lists and stage timing of the run, failed plugins included."""
        outputs = await self._store.get_plugin_outputs(analysis_id)
        if not outputs:
            raise NoResultAvailableError(f"no SBOM result for analysis {analysis_id}")

        info = merge_plugin_outputs(outputs).analysis_info
        has_errors = bool(info.private_errors)
        return {
            "public_errors": list(info.public_errors) if has_errors else [],
            "private_errors": list(info.private_errors) if has_errors else [],
            "stage_start": info.analysis_start_time,
            "stage_end": info.analysis_end_time,
        }

    # ── internal ───────────────────────────────────────────────────────────

    async def _load(self, analysis_id: str) -> CanonicalSbom:
        outputs = await self._store.get_plugin_outputs(analysis_id)
        sbom = self._merge(analysis_id, outputs)
        if sbom is None:
            raise NoResultAvailableError(f"no SBOM result for analysis {analysis_id}")
        return sbom

    @staticmethod
    def _merge(analysis_id: str, outputs: list[PluginOutput] | None) -> CanonicalSbom | None:
        """Merge the usable outputs; ``None`` if there are none."""
        if not outputs:
            return None
        usable = []
        for output in outputs:
            if output.failed:
                log.warning("merge.plugin_skipped", analysis_id=analysis_id, plugin=output.plugin)
                continue
            usable.append(output)
        if not usable:
            return None
        return merge_plugin_outputs(usable)

    @staticmethod
    def _scoped(sbom: CanonicalSbom, ecosystem_filter: str | None) -> CanonicalSbom:
        if not ecosystem_filter:
            return sbom
        return filter_by_ecosystem(sbom, ecosystem_filter)

    async def _resolve_metadata(self, workspaces: list[Workspace]) -> Metadata:
        """Registry info for every active identity, fetched concurrently."""
        if self._metadata is None:
            return {}

        wanted: dict[DependencyKey, str | None] = {}
        for workspace in workspaces:
            for key, entry in workspace.iter_entries():
                if entry.is_active:
                    wanted.setdefault(key, entry.ecosystem)

        semaphore = asyncio.Semaphore(self._metadata_concurrency)

        async def _bounded(key: DependencyKey, ecosystem: str | None) -> PackageInfo | None:
            async with semaphore:
                return await self._lookup(key, ecosystem)

        results = await asyncio.gather(*(_bounded(k, eco) for k, eco in wanted.items()))
        return dict(zip(wanted, results))

    async def _lookup(self, key: DependencyKey, ecosystem: str | None) -> PackageInfo | None:
        """Registry info for one identity; lookup failures degrade to ``None``."""
        if self._metadata is None:
            return None
        try:
            return await self._metadata.get_package_info(key.name, key.version, ecosystem)
        except Exception as exc:
            log.warning("metadata.lookup_failed", package=str(key), error=str(exc))
            return None


def _parse_key(dependency: str) -> DependencyKey:
    key = DependencyKey.parse(dependency)
    if key is None:
        raise EntityNotFoundError(f"malformed dependency identity: {dependency!r}")
    return key
