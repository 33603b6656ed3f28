"""Listing rows: project a workspace into :class:`SbomDependencyRow` objects."""

from __future__ import annotations

from collections.abc import Mapping

from sbomlens.engines.package_registry.models import PackageInfo
from sbomlens.engines.sbom.models import DependencyKey, SbomDependencyRow, Workspace


def build_rows(
    workspace: Workspace,
    package_manager: str | None = None,
    metadata: Mapping[DependencyKey, PackageInfo | None] | None = None,
) -> list[SbomDependencyRow]:
    """One row per active entry of *workspace*.

    Without registry *metadata* for an identity, ``newest_release`` is the
    row's own version and ``outdated`` / ``deprecated`` are ``False``.
    """
    metadata = metadata or {}
    rows: list[SbomDependencyRow] = []

    for key, entry in workspace.iter_entries():
        if not entry.is_active:
            continue

        declared = workspace.is_declared(key)
        row = SbomDependencyRow(
            name=key.name,
            version=key.version,
            newest_release=key.version,
            dev=entry.dev,
            prod=entry.prod,
            is_direct=declared,
            is_direct_count=1 if declared else 0,
            is_transitive_count=1 if entry.transitive else 0,
            deprecated=False,
            outdated=False,
            unlicensed=not entry.licenses,
            licenses=list(entry.licenses),
            package_manager=package_manager,
            ecosystem=entry.ecosystem,
            source_plugin=entry.source_plugin,
        )

        info = metadata.get(key)
        if info is not None:
            if info.latest_version:
                row.newest_release = info.latest_version
                row.outdated = info.latest_version != key.version
            row.deprecated = info.deprecated
            row.deprecated_message = info.deprecated_message
            row.release = info.release
            row.last_published = info.last_published

        rows.append(row)

    return rows


def latest_versions(metadata: Mapping[DependencyKey, PackageInfo | None]) -> dict[str, str | None]:
    """Package name -> latest known version, for the stats engine."""
    return {key.name: info.latest_version for key, info in metadata.items() if info is not None}


def deprecated_keys(metadata: Mapping[DependencyKey, PackageInfo | None]) -> set[DependencyKey]:
    return {key for key, info in metadata.items() if info is not None and info.deprecated}
