"""CLI entry point for standalone usage: sbomlens.

Every command reads raw plugin outputs from JSON files, one file per SBOM
plugin (the file stem is taken as the plugin name):

    sbomlens workspaces js-sbom.json php-sbom.json
    sbomlens stats -w . js-sbom.json --previous old/js-sbom.json
    sbomlens list -w . --sort-by version --filters "[dev]" js-sbom.json
    sbomlens graph -w . -d lodash@4.17.21 js-sbom.json
    sbomlens licenses -w . --licenses licenses.json
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import click
import pydantic

from sbomlens.core.config import load_settings
from sbomlens.core.logging import setup_logging
from sbomlens.engines.package_registry import CachedMetadataLookup, RegistryClient
from sbomlens.engines.sbom.licenses import RawLicenseOutput, StaticLicenseCatalog
from sbomlens.engines.sbom.merge import merge_plugin_outputs
from sbomlens.engines.sbom.raw import PluginOutput, parse_plugin_output
from sbomlens.services import ServiceError
from sbomlens.services.license_service import LicenseQuery, LicenseService
from sbomlens.services.result_store import MemoryResultStore
from sbomlens.services.sbom_service import SbomQuery, SbomService

_CURRENT = "current"
_PREVIOUS = "previous"

_plugin_files = click.argument(
    "plugin_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False)
)
_workspace = click.option("-w", "--workspace", default=".", show_default=True, help="Workspace name")
_dependency = click.option("-d", "--dependency", required=True, help="Dependency as name@version")


def _load_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise click.ClickException(f"cannot read {path}: {exc}") from exc


def _load_plugin_outputs(paths: tuple[str, ...]) -> list[PluginOutput]:
    outputs = []
    for path in paths:
        data = _load_json(path)
        if not isinstance(data, dict):
            raise click.ClickException(f"{path}: expected a JSON object")
        try:
            outputs.append(parse_plugin_output(data, plugin=Path(path).stem))
        except pydantic.ValidationError as exc:
            raise click.ClickException(f"{path}: invalid plugin output\n{exc}") from exc
    return outputs


def _build_store(
    plugin_files: tuple[str, ...],
    previous_files: tuple[str, ...] = (),
    license_file: str | None = None,
) -> MemoryResultStore:
    store = MemoryResultStore()
    if previous_files:
        store.add_run(_PREVIOUS, _load_plugin_outputs(previous_files))
        store.add_run(_CURRENT, _load_plugin_outputs(plugin_files), previous_id=_PREVIOUS)
    elif plugin_files:
        store.add_run(_CURRENT, _load_plugin_outputs(plugin_files))
    if license_file:
        try:
            store.add_licenses(_CURRENT, RawLicenseOutput.model_validate(_load_json(license_file)))
        except pydantic.ValidationError as exc:
            raise click.ClickException(f"{license_file}: invalid license output\n{exc}") from exc
    return store


def _run(
    ctx: click.Context,
    store: MemoryResultStore,
    call: Callable[[SbomService], Awaitable[Any]],
) -> Any:
    """Run *call* against an :class:`SbomService`, online lookups if requested."""

    async def _go() -> Any:
        if not ctx.obj["online"]:
            return await call(SbomService(store, pagination=ctx.obj["settings"].pagination))
        async with RegistryClient.from_settings(ctx.obj["settings"]) as client:
            svc = SbomService(
                store,
                CachedMetadataLookup(client, max_entries=ctx.obj["settings"].metadata_cache_size),
                pagination=ctx.obj["settings"].pagination,
                metadata_concurrency=ctx.obj["settings"].metadata_concurrency,
            )
            return await call(svc)

    try:
        return asyncio.run(_go())
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc


def _echo_json(value: Any) -> None:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    elif isinstance(value, list):
        value = [
            dataclasses.asdict(v) if dataclasses.is_dataclass(v) and not isinstance(v, type) else v
            for v in value
        ]
    click.echo(json.dumps(value, indent=2, default=str))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option("--online", is_flag=True, help="Query package registries for latest versions")
@click.pass_context
def main(ctx: click.Context, verbose: bool, online: bool) -> None:
    """SbomLens: merge, diff and query SBOM plugin outputs."""
    setup_logging("DEBUG" if verbose else None)
    ctx.ensure_object(dict)
    ctx.obj["online"] = online
    ctx.obj["settings"] = load_settings()


@main.command("merge")
@_plugin_files
def merge(plugin_files: tuple[str, ...]) -> None:
    """Print the merged canonical SBOM."""
    sbom = merge_plugin_outputs(o for o in _load_plugin_outputs(plugin_files) if not o.failed)
    payload = dataclasses.asdict(sbom)
    for workspace in payload["workspaces"].values():
        for field in ("declared_dependencies", "declared_dev_dependencies"):
            workspace[field] = [{"name": n, "version": v} for n, v in workspace[field]]
    _echo_json(payload)


@main.command("workspaces")
@_plugin_files
@click.pass_context
def workspaces(ctx: click.Context, plugin_files: tuple[str, ...]) -> None:
    """List workspaces and the merged package manager."""
    store = _build_store(plugin_files)
    _echo_json(_run(ctx, store, lambda svc: svc.get_workspaces(_CURRENT)))


@main.command("status")
@_plugin_files
@click.pass_context
def status(ctx: click.Context, plugin_files: tuple[str, ...]) -> None:
    """Show errors and stage timing of the run."""
    store = _build_store(plugin_files)
    _echo_json(_run(ctx, store, lambda svc: svc.get_status(_CURRENT)))


@main.command("stats")
@_workspace
@click.option(
    "--previous",
    "previous_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Plugin output of the prior run (repeatable)",
)
@click.option("--ecosystem", default=None, help="Only count this ecosystem")
@_plugin_files
@click.pass_context
def stats(
    ctx: click.Context,
    workspace: str,
    previous_files: tuple[str, ...],
    ecosystem: str | None,
    plugin_files: tuple[str, ...],
) -> None:
    """Dependency counters and their diff against the prior run."""
    store = _build_store(plugin_files, previous_files)
    _echo_json(_run(ctx, store, lambda svc: svc.get_stats(_CURRENT, workspace, ecosystem)))


@main.command("list")
@_workspace
@click.option("--page", type=int, default=None, help="Zero-based page")
@click.option("--per-page", "entries_per_page", type=int, default=None, help="Entries per page")
@click.option("--sort-by", default=None, help="Sort field")
@click.option("--direction", "sort_direction", default=None, help="ASC or DESC")
@click.option("--filters", "active_filters", default=None, help='Active filters, e.g. "[dev,outdated]"')
@click.option("--search", "search_key", default=None, help="Substring of the package name")
@click.option("--ecosystem", default=None, help="Only list this ecosystem")
@_plugin_files
@click.pass_context
def list_dependencies(
    ctx: click.Context,
    workspace: str,
    page: int | None,
    entries_per_page: int | None,
    sort_by: str | None,
    sort_direction: str | None,
    active_filters: str | None,
    search_key: str | None,
    ecosystem: str | None,
    plugin_files: tuple[str, ...],
) -> None:
    """Filtered, sorted and paginated dependency listing."""
    store = _build_store(plugin_files)
    query = SbomQuery(
        workspace=workspace,
        page=page,
        entries_per_page=entries_per_page,
        sort_by=sort_by,
        sort_direction=sort_direction,
        active_filters=active_filters,
        search_key=search_key,
        ecosystem_filter=ecosystem,
    )
    _echo_json(_run(ctx, store, lambda svc: svc.get_sbom(_CURRENT, query)))


@main.command("dependency")
@_workspace
@_dependency
@_plugin_files
@click.pass_context
def dependency(
    ctx: click.Context, workspace: str, dependency: str, plugin_files: tuple[str, ...]
) -> None:
    """Details of one dependency."""
    store = _build_store(plugin_files)
    _echo_json(_run(ctx, store, lambda svc: svc.get_dependency(_CURRENT, workspace, dependency)))


@main.command("graph")
@_workspace
@_dependency
@_plugin_files
@click.pass_context
def graph(
    ctx: click.Context, workspace: str, dependency: str, plugin_files: tuple[str, ...]
) -> None:
    """Nodes on every path from the project root to a dependency."""
    store = _build_store(plugin_files)
    _echo_json(
        _run(ctx, store, lambda svc: svc.get_dependency_graph(_CURRENT, workspace, dependency))
    )


@main.command("ancestors")
@_workspace
@_dependency
@_plugin_files
@click.pass_context
def ancestors(
    ctx: click.Context, workspace: str, dependency: str, plugin_files: tuple[str, ...]
) -> None:
    """Every dependency that pulls in the given one."""
    store = _build_store(plugin_files)
    _echo_json(_run(ctx, store, lambda svc: svc.get_ancestors(_CURRENT, workspace, dependency)))


@main.command("descendants")
@_workspace
@_dependency
@_plugin_files
@click.pass_context
def descendants(
    ctx: click.Context, workspace: str, dependency: str, plugin_files: tuple[str, ...]
) -> None:
    """Every dependency the given one pulls in."""
    store = _build_store(plugin_files)
    _echo_json(_run(ctx, store, lambda svc: svc.get_descendants(_CURRENT, workspace, dependency)))


@main.command("licenses")
@_workspace
@click.option(
    "--licenses",
    "license_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="License plugin output",
)
@click.option(
    "--catalog",
    "catalog_file",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="License catalog JSON ({id: {name, category, ...}})",
)
@click.option("--page", type=int, default=None, help="Zero-based page")
@click.option("--per-page", "entries_per_page", type=int, default=None, help="Entries per page")
@click.option("--sort-by", default=None, help="dep_count, license_id or type")
@click.option("--direction", "sort_direction", default=None, help="ASC or DESC")
@click.option("--filters", "active_filters", default=None, help='Active filters, e.g. "[copy_left]"')
@click.option("--search", "search_key", default=None, help="Substring of the license id or name")
@click.pass_context
def licenses(
    ctx: click.Context,
    workspace: str,
    license_file: str,
    catalog_file: str | None,
    page: int | None,
    entries_per_page: int | None,
    sort_by: str | None,
    sort_direction: str | None,
    active_filters: str | None,
    search_key: str | None,
) -> None:
    """License usage of a workspace."""
    store = _build_store((), license_file=license_file)
    catalog = StaticLicenseCatalog.from_dict(_load_json(catalog_file)) if catalog_file else None
    svc = LicenseService(store, catalog, pagination=ctx.obj["settings"].pagination)
    query = LicenseQuery(
        workspace=workspace,
        page=page,
        entries_per_page=entries_per_page,
        sort_by=sort_by,
        sort_direction=sort_direction,
        active_filters=active_filters,
        search_key=search_key,
    )
    try:
        result = asyncio.run(svc.get_licenses(_CURRENT, query))
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(result)


if __name__ == "__main__":
    main()
