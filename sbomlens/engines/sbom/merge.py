"""SBOM merge: fold per-plugin outputs of one analysis run into a canonical SBOM."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

import structlog

from sbomlens.engines.sbom.ecosystems import (
    ecosystem_for_package_manager,
    ecosystem_for_plugin,
    is_valid_ecosystem,
)
from sbomlens.engines.sbom.models import (
    AnalysisInfo,
    CanonicalSbom,
    DependencyEntry,
    DependencyKey,
    Workspace,
)
from sbomlens.engines.sbom.raw import (
    PluginOutput,
    RawAnalysisInfo,
    RawDependency,
    RawRootDependency,
)
from sbomlens.services import ValidationError

log = structlog.get_logger("sbomlens.engine")

MULTI_LANGUAGE = "multi-language"

_FLAGS = ("direct", "transitive", "dev", "prod", "bundled", "optional")


def merge_plugin_outputs(outputs: Iterable[PluginOutput]) -> CanonicalSbom:
    """Merge plugin outputs, in the given order, into one :class:`CanonicalSbom`.

    Identities reported by several plugins have each flag OR-ed together, so a
    ``True`` reported anywhere survives. Root sets come from the first output
    that defines a non-empty set for the workspace. Never fails on partial
    input; an empty sequence produces an empty SBOM.
    """
    outputs = list(outputs)
    sbom = CanonicalSbom()

    for output in outputs:
        ecosystem = ecosystem_for_plugin(output.plugin) or ecosystem_for_package_manager(
            output.analysis_info.package_manager
        )
        for ws_name, raw_ws in output.workspaces.items():
            workspace = sbom.workspaces.setdefault(ws_name, Workspace())

            for name, versions in raw_ws.dependencies.items():
                merged_versions = workspace.dependencies.setdefault(name, {})
                for version, raw in versions.items():
                    existing = merged_versions.get(version)
                    if existing is None:
                        merged_versions[version] = _entry_from_raw(raw, ecosystem, output.plugin)
                    else:
                        _fold(existing, raw)

            if not workspace.declared_dependencies and raw_ws.start.dependencies:
                workspace.declared_dependencies = _root_keys(raw_ws.start.dependencies)
            if not workspace.declared_dev_dependencies and raw_ws.start.dev_dependencies:
                workspace.declared_dev_dependencies = _root_keys(raw_ws.start.dev_dependencies)

    sbom.analysis_info = _merge_analysis_info([o.analysis_info for o in outputs])
    log.debug(
        "merge.completed",
        sources=len(outputs),
        workspaces=len(sbom.workspaces),
        package_manager=sbom.analysis_info.package_manager,
    )
    return sbom


def filter_by_ecosystem(sbom: CanonicalSbom, ecosystem: str) -> CanonicalSbom:
    """Return a copy of *sbom* keeping only entries that belong to *ecosystem*.

    Raises :class:`ValidationError` for an unsupported ecosystem.
    """
    if not is_valid_ecosystem(ecosystem):
        raise ValidationError(f"invalid ecosystem filter: {ecosystem!r}")

    filtered = CanonicalSbom(analysis_info=copy.deepcopy(sbom.analysis_info))
    for ws_name, workspace in sbom.workspaces.items():
        kept: dict[str, dict[str, DependencyEntry]] = {}
        for name, versions in workspace.dependencies.items():
            matching = {
                version: copy.deepcopy(entry)
                for version, entry in versions.items()
                if entry.ecosystem == ecosystem
            }
            if matching:
                kept[name] = matching
        filtered.workspaces[ws_name] = Workspace(
            dependencies=kept,
            declared_dependencies=list(workspace.declared_dependencies),
            declared_dev_dependencies=list(workspace.declared_dev_dependencies),
        )
    return filtered


# ── internal ─────────────────────────────────────────────────────────────


def _entry_from_raw(
    raw: RawDependency, ecosystem: str | None, plugin: str | None
) -> DependencyEntry:
    return DependencyEntry(
        direct=raw.direct,
        transitive=raw.transitive,
        dev=raw.dev,
        prod=raw.prod,
        bundled=raw.bundled,
        optional=raw.optional,
        dependencies=dict(raw.dependencies),
        requires=dict(raw.requires),
        licenses=_unique(raw.licenses),
        ecosystem=ecosystem,
        source_plugin=plugin,
    )


def _fold(entry: DependencyEntry, raw: RawDependency) -> None:
    """OR flags and union adjacency of *raw* into *entry* (first value wins per key)."""
    for flag in _FLAGS:
        if getattr(raw, flag):
            setattr(entry, flag, True)
    for child, version in raw.dependencies.items():
        entry.dependencies.setdefault(child, version)
    for child, constraint in raw.requires.items():
        entry.requires.setdefault(child, constraint)
    for license_id in raw.licenses:
        if license_id not in entry.licenses:
            entry.licenses.append(license_id)


def _root_keys(items: Sequence[RawRootDependency]) -> list[DependencyKey]:
    return _unique(DependencyKey(item.name, item.version) for item in items)


def _unique(items: Iterable[Any]) -> list[Any]:
    """Order-preserving de-duplication by equality (items may be unhashable)."""
    result: list[Any] = []
    for item in items:
        if item not in result:
            result.append(item)
    return result


def _parse_timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _pick_timestamp(values: list[str], *, latest: bool) -> str | None:
    if not values:
        return None
    parsed = [(_parse_timestamp(v), v) for v in values]
    if all(ts is not None for ts, _ in parsed):
        try:
            chooser = max if latest else min
            return chooser(parsed, key=lambda pair: pair[0])[1]
        except TypeError:
            # mixed naive / aware timestamps
            pass
    return (max if latest else min)(values)


def _merge_analysis_info(infos: list[RawAnalysisInfo]) -> AnalysisInfo:
    if not infos:
        return AnalysisInfo()

    managers = _unique(info.package_manager for info in infos if info.package_manager)
    if len(managers) == 1:
        package_manager = managers[0]
    elif managers:
        package_manager = MULTI_LANGUAGE
    else:
        package_manager = ""

    all_failed = all(info.status.lower() == "failure" for info in infos)

    return AnalysisInfo(
        package_manager=package_manager,
        analysis_start_time=_pick_timestamp(
            [i.analysis_start_time for i in infos if i.analysis_start_time], latest=False
        ),
        analysis_end_time=_pick_timestamp(
            [i.analysis_end_time for i in infos if i.analysis_end_time], latest=True
        ),
        public_errors=_unique(err for info in infos for err in info.public_errors),
        private_errors=_unique(err for info in infos for err in info.private_errors),
        status="failure" if all_failed else "success",
        project_name=next((i.project_name for i in infos if i.project_name), ""),
    )
