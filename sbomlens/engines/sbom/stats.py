"""Stats engine: per-workspace dependency counters and run-over-run diffs."""

from __future__ import annotations

from collections.abc import Collection, Mapping

from sbomlens.engines.sbom.models import AnalysisStats, CanonicalSbom, DependencyKey, Workspace
from sbomlens.services import NoResultAvailableError, UnknownWorkspaceError


def compute_stats(
    current: CanonicalSbom | None,
    previous: CanonicalSbom | None,
    workspace: str,
    *,
    latest_versions: Mapping[str, str | None] | None = None,
    deprecated: Collection[DependencyKey] | None = None,
) -> AnalysisStats:
    """Count dependencies of *workspace* and diff them against the prior run.

    With no *previous* run the current SBOM stands in for it, so every
    ``_diff`` is zero. A previous run that lacks the workspace contributes
    zero counts.

    *latest_versions* (package name -> newest known version) and *deprecated*
    enable the outdated / deprecated counters; without them those stay 0.

    Raises :class:`NoResultAvailableError` when *current* is ``None`` and
    :class:`UnknownWorkspaceError` when it has no such workspace.
    """
    if current is None:
        raise NoResultAvailableError("no analysis result available")
    if workspace not in current.workspaces:
        raise UnknownWorkspaceError(workspace)

    stats = count_workspace(current.workspaces[workspace], latest_versions, deprecated)

    if previous is None:
        prev_stats = stats
    elif workspace in previous.workspaces:
        prev_stats = count_workspace(previous.workspaces[workspace], latest_versions, deprecated)
    else:
        prev_stats = AnalysisStats()

    for counter in AnalysisStats.counter_names():
        setattr(stats, f"{counter}_diff", getattr(stats, counter) - getattr(prev_stats, counter))
    return stats


def count_workspace(
    workspace: Workspace,
    latest_versions: Mapping[str, str | None] | None = None,
    deprecated: Collection[DependencyKey] | None = None,
) -> AnalysisStats:
    """Absolute counters for one workspace (``_diff`` fields left at 0)."""
    stats = AnalysisStats(
        number_of_non_dev_dependencies=len(workspace.declared_dependencies),
        number_of_dev_dependencies=len(workspace.declared_dev_dependencies),
    )

    for key, entry in workspace.iter_entries():
        if not entry.is_active:
            continue

        if entry.bundled:
            stats.number_of_bundled_dependencies += 1
        if entry.optional:
            stats.number_of_optional_dependencies += 1

        if entry.transitive and entry.direct:
            stats.number_of_both_direct_transitive_dependencies += 1
        elif entry.transitive:
            stats.number_of_transitive_dependencies += 1
        elif entry.direct:
            stats.number_of_direct_dependencies += 1

        if latest_versions is not None:
            latest = latest_versions.get(key.name)
            if latest and latest != key.version:
                stats.number_of_outdated_dependencies += 1
        if deprecated is not None and key in deprecated:
            stats.number_of_deprecated_dependencies += 1

        stats.number_of_dependencies += 1

    return stats
