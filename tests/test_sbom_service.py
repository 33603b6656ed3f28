"""Tests for SbomService (in-memory result store, mocked registry)."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from sbomlens.engines.package_registry.models import PackageInfo
from sbomlens.engines.sbom.graph import VIRTUAL_ROOT_ID
from sbomlens.engines.sbom.raw import parse_plugin_output
from sbomlens.services import (
    EntityNotFoundError,
    NoResultAvailableError,
    UnknownWorkspaceError,
    ValidationError,
)
from sbomlens.services.result_store import MemoryResultStore
from sbomlens.services.sbom_service import SbomQuery, SbomService

# ── helpers ───────────────────────────────────────────────────────────────


def _output(deps, *, plugin="js-sbom", workspace=".", **info):
    info.setdefault("package_manager", "NPM")
    return parse_plugin_output(
        {"workspaces": {workspace: {"dependencies": deps}}, "analysis_info": info},
        plugin=plugin,
    )


def _metadata(infos: dict[str, PackageInfo]):
    lookup = AsyncMock()

    async def _get(name, version, ecosystem):
        return infos.get(name)

    lookup.get_package_info = AsyncMock(side_effect=_get)
    return lookup


@pytest.fixture
def store(sample_output):
    store = MemoryResultStore()
    store.add_run("run-1", [sample_output])
    return store


@pytest.fixture
def service(store):
    return SbomService(store)


# ── TestGetSbom ───────────────────────────────────────────────────────────


class TestGetSbom:
    async def test_default_listing(self, service):
        result = await service.get_sbom("run-1", SbomQuery(workspace="."))
        assert result.total_entries == 6
        assert result.matching_count == 6
        assert result.page == 0
        assert result.entries_per_page == 20
        # default sort: dev DESC, ties in workspace order
        assert [row.name for row in result.data] == [
            "jest",
            "lodash",
            "express",
            "body-parser",
            "debug",
            "ms",
        ]

    async def test_filters_wire_format(self, service):
        result = await service.get_sbom("run-1", SbomQuery(workspace=".", active_filters="[dev]"))
        assert [row.name for row in result.data] == ["jest"]
        assert result.matching_count == 1
        assert result.total_entries == 6
        assert result.filter_count["prod"] == 5

    async def test_filters_as_list(self, service):
        query = SbomQuery(workspace=".", active_filters=["not_user_installed"])
        result = await service.get_sbom("run-1", query)
        assert {row.name for row in result.data} == {"body-parser", "debug", "ms"}

    async def test_search_sort_paginate(self, service):
        query = SbomQuery(
            workspace=".",
            search_key="E",
            sort_by="name",
            sort_direction="ASC",
            entries_per_page=2,
            page=1,
        )
        result = await service.get_sbom("run-1", query)
        # matches: body-parser, debug, express, jest
        assert [row.name for row in result.data] == ["express", "jest"]
        assert result.matching_count == 4
        assert result.total_pages == 3

    async def test_metadata_enriches_rows(self, store):
        service = SbomService(
            store, _metadata({"express": PackageInfo(name="express", latest_version="5.0.0")})
        )
        result = await service.get_sbom("run-1", SbomQuery(workspace=".", active_filters="[outdated]"))
        assert [row.name for row in result.data] == ["express"]
        assert result.data[0].newest_release == "5.0.0"

    async def test_metadata_failure_degrades(self, store):
        lookup = AsyncMock()
        lookup.get_package_info = AsyncMock(side_effect=RuntimeError("registry down"))
        service = SbomService(store, lookup)
        result = await service.get_sbom("run-1", SbomQuery(workspace="."))
        assert result.total_entries == 6
        assert all(row.outdated is False for row in result.data)

    async def test_ecosystem_filter(self, store, sample_output):
        php = _output(
            {"monolog/monolog": {"3.0.0": {"Prod": True}}},
            plugin="php-sbom",
            package_manager="composer",
        )
        store.add_run("mixed", [sample_output, php])
        service = SbomService(store)
        result = await service.get_sbom("mixed", SbomQuery(workspace=".", ecosystem_filter="packagist"))
        assert [row.name for row in result.data] == ["monolog/monolog"]

    async def test_invalid_ecosystem(self, service):
        with pytest.raises(ValidationError):
            await service.get_sbom("run-1", SbomQuery(workspace=".", ecosystem_filter="cobol"))

    async def test_unknown_workspace(self, service):
        with pytest.raises(UnknownWorkspaceError):
            await service.get_sbom("run-1", SbomQuery(workspace="missing"))

    async def test_no_result(self, service):
        with pytest.raises(NoResultAvailableError):
            await service.get_sbom("run-404", SbomQuery(workspace="."))

    async def test_all_plugins_failed(self, store):
        store.add_run("failed", [_output({}, status="failure")])
        with pytest.raises(NoResultAvailableError):
            await SbomService(store).get_sbom("failed", SbomQuery(workspace="."))

    async def test_failed_plugin_skipped(self, store, sample_output):
        broken = _output({"evil": {"6.6.6": {"Prod": True}}}, status="failure")
        store.add_run("partial", [sample_output, broken])
        result = await SbomService(store).get_sbom("partial", SbomQuery(workspace="."))
        assert "evil" not in [row.name for row in result.data]


# ── TestGetStats ──────────────────────────────────────────────────────────


class TestGetStats:
    async def test_without_previous(self, service):
        stats = await service.get_stats("run-1", ".")
        assert stats.number_of_dependencies == 6
        assert stats.number_of_dependencies_diff == 0

    async def test_with_previous(self, store, sample_output):
        store.add_run("run-0", [_output({"lodash": {"4.17.21": {"Direct": True, "Prod": True}}})])
        store.add_run("run-1", [sample_output], previous_id="run-0")
        stats = await SbomService(store).get_stats("run-1", ".")
        assert stats.number_of_dependencies_diff == 5
        assert stats.number_of_direct_dependencies_diff == 2

    async def test_outdated_and_deprecated(self, store):
        service = SbomService(
            store,
            _metadata(
                {
                    "express": PackageInfo(name="express", latest_version="5.0.0"),
                    "debug": PackageInfo(name="debug", latest_version="2.6.9", deprecated=True),
                }
            ),
        )
        stats = await service.get_stats("run-1", ".")
        assert stats.number_of_outdated_dependencies == 1
        assert stats.number_of_deprecated_dependencies == 1

    async def test_unknown_workspace(self, service):
        with pytest.raises(UnknownWorkspaceError):
            await service.get_stats("run-1", "nope")

    async def test_no_result(self, service):
        with pytest.raises(NoResultAvailableError):
            await service.get_stats("run-404", ".")


# ── TestLookups ───────────────────────────────────────────────────────────


class TestLookups:
    async def test_workspaces(self, service):
        assert await service.get_workspaces("run-1") == {
            "workspaces": ["."],
            "package_manager": "NPM",
        }

    async def test_dependency(self, service):
        details = await service.get_dependency("run-1", ".", "express@4.18.2")
        assert details.latest_version == "4.18.2"
        assert details.dependencies == {"body-parser": "1.20.1", "debug": "2.6.9"}
        assert details.direct is True
        assert details.package_manager == "NPM"
        assert details.ecosystem == "npm"

    async def test_dependency_latest_from_registry(self, store):
        service = SbomService(
            store, _metadata({"express": PackageInfo(name="express", latest_version="5.0.0")})
        )
        details = await service.get_dependency("run-1", ".", "express@4.18.2")
        assert details.latest_version == "5.0.0"

    async def test_dependency_missing(self, service):
        with pytest.raises(EntityNotFoundError):
            await service.get_dependency("run-1", ".", "express@9.9.9")

    async def test_dependency_malformed(self, service):
        with pytest.raises(EntityNotFoundError):
            await service.get_dependency("run-1", ".", "express")

    async def test_graph(self, service):
        nodes = await service.get_dependency_graph("run-1", ".", "ms@2.0.0")
        assert nodes[0].id == "ms@2.0.0"
        assert nodes[-1].id == VIRTUAL_ROOT_ID

    async def test_ancestors_sorted(self, service):
        assert await service.get_ancestors("run-1", ".", "ms@2.0.0") == [
            "body-parser@1.20.1",
            "debug@2.6.9",
            "express@4.18.2",
        ]

    async def test_descendants_sorted(self, service):
        assert await service.get_descendants("run-1", ".", "body-parser@1.20.1") == [
            "debug@2.6.9",
            "ms@2.0.0",
        ]


# ── TestGetStatus ─────────────────────────────────────────────────────────


class TestGetStatus:
    async def test_clean_run(self, service):
        status = await service.get_status("run-1")
        assert status == {
            "public_errors": [],
            "private_errors": [],
            "stage_start": "2026-01-15T12:00:00Z",
            "stage_end": "2026-01-15T12:00:30Z",
        }

    async def test_errors_reported_with_failed_plugins(self, store, sample_output):
        broken = _output(
            {},
            status="failure",
            public_errors=["lockfile unreadable"],
            private_errors=["Traceback ..."],
        )
        store.add_run("partial", [sample_output, broken])
        status = await SbomService(store).get_status("partial")
        assert status["public_errors"] == ["lockfile unreadable"]
        assert status["private_errors"] == ["Traceback ..."]

    async def test_public_errors_hidden_without_private(self, store):
        store.add_run("quiet", [_output({}, public_errors=["minor"])])
        status = await SbomService(store).get_status("quiet")
        assert status["public_errors"] == []

    async def test_no_result(self, service):
        with pytest.raises(NoResultAvailableError):
            await service.get_status("run-404")
