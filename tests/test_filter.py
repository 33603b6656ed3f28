"""Tests for the filter engine."""

from __future__ import annotations

from sbomlens.engines.sbom.filter import filter_dependencies, filter_licenses, parse_active_filters
from sbomlens.engines.sbom.models import LicenseFact, SbomDependencyRow

# ── helpers ───────────────────────────────────────────────────────────────


def _licenses() -> list[LicenseFact]:
    return [
        LicenseFact(id="MIT", name="MIT License", category="permissive"),
        LicenseFact(
            id="GPL-2.0",
            name="GNU General Public License v2.0",
            category="copy_left",
            license_compliance_violation=True,
        ),
        LicenseFact(id="LicenseRef-custom", name="LicenseRef-custom", category="unknown", unable_to_infer=True),
        LicenseFact(id="Apache-2.0", name="Apache License 2.0", category="permissive"),
    ]


def _row(name: str, **kwargs) -> SbomDependencyRow:
    kwargs.setdefault("version", "1.0.0")
    kwargs.setdefault("newest_release", kwargs["version"])
    return SbomDependencyRow(name=name, **kwargs)


def _rows() -> list[SbomDependencyRow]:
    return [
        _row("react", prod=True, is_direct_count=1, outdated=True),
        _row("react-dom", prod=True, is_direct_count=1),
        _row("scheduler", prod=True, deprecated=True, unlicensed=True),
        _row("jest", dev=True, is_direct_count=1, outdated=True),
    ]


# ── TestParseActiveFilters ────────────────────────────────────────────────


class TestParseActiveFilters:
    def test_wire_format(self):
        assert parse_active_filters("[permissive,copy_left]") == ["permissive", "copy_left"]

    def test_whitespace_and_empty_items(self):
        assert parse_active_filters("[ dev , ,prod ]") == ["dev", "prod"]

    def test_empty(self):
        assert parse_active_filters(None) == []
        assert parse_active_filters("") == []
        assert parse_active_filters("[]") == []

    def test_without_brackets(self):
        assert parse_active_filters("dev") == ["dev"]


# ── TestFilterLicenses ────────────────────────────────────────────────────


class TestFilterLicenses:
    def test_search_and_category(self):
        items = [
            LicenseFact(id="MIT", name="MIT License", category="permissive"),
            LicenseFact(id="GPL-2.0", name="GNU General Public License v2.0", category="copy_left"),
        ]
        filtered, counts = filter_licenses(items, "gpl", ["copy_left"])
        assert [lic.id for lic in filtered] == ["GPL-2.0"]
        assert counts["copy_left"] == 1
        assert counts["permissive"] == 0

    def test_search_by_name(self):
        filtered, _ = filter_licenses(_licenses(), "apache license", [])
        assert [lic.id for lic in filtered] == ["Apache-2.0"]

    def test_match_on_id_and_name_not_duplicated(self):
        filtered, _ = filter_licenses(_licenses(), "mit", None)
        assert [lic.id for lic in filtered] == ["MIT"]

    def test_search_case_insensitive(self):
        filtered, _ = filter_licenses(_licenses(), "GnU", None)
        assert [lic.id for lic in filtered] == ["GPL-2.0"]

    def test_no_search_keeps_order(self):
        filtered, _ = filter_licenses(_licenses(), None, None)
        assert [lic.id for lic in filtered] == ["MIT", "GPL-2.0", "LicenseRef-custom", "Apache-2.0"]

    def test_filters_combine_with_and(self):
        filtered, _ = filter_licenses(_licenses(), None, ["copy_left", "compliance_violation"])
        assert [lic.id for lic in filtered] == ["GPL-2.0"]
        filtered, _ = filter_licenses(_licenses(), None, ["permissive", "copy_left"])
        assert filtered == []

    def test_unrecognized_filter(self):
        filtered, _ = filter_licenses(_licenses(), None, ["unrecognized"])
        assert [lic.id for lic in filtered] == ["LicenseRef-custom"]

    def test_unknown_filter_ignored(self):
        filtered, _ = filter_licenses(_licenses(), None, ["bogus"])
        assert len(filtered) == 4

    def test_counts_independent_of_active_filters(self):
        _, none_active = filter_licenses(_licenses(), None, [])
        _, some_active = filter_licenses(_licenses(), None, ["copy_left"])
        assert none_active == some_active
        assert none_active == {
            "compliance_violation": 1,
            "unrecognized": 1,
            "permissive": 2,
            "copy_left": 1,
        }

    def test_counts_follow_search(self):
        _, counts = filter_licenses(_licenses(), "gnu", [])
        assert counts == {
            "compliance_violation": 1,
            "unrecognized": 0,
            "permissive": 0,
            "copy_left": 1,
        }


# ── TestFilterDependencies ────────────────────────────────────────────────


class TestFilterDependencies:
    def test_search_by_name(self):
        filtered, _ = filter_dependencies(_rows(), "react", None)
        assert [r.name for r in filtered] == ["react", "react-dom"]

    def test_search_ignores_version(self):
        filtered, _ = filter_dependencies(_rows(), "1.0.0", None)
        assert filtered == []

    def test_user_installed(self):
        filtered, _ = filter_dependencies(_rows(), None, ["user_installed"])
        assert [r.name for r in filtered] == ["react", "react-dom", "jest"]

    def test_not_user_installed(self):
        filtered, _ = filter_dependencies(_rows(), None, ["not_user_installed"])
        assert [r.name for r in filtered] == ["scheduler"]

    def test_and_semantics(self):
        filtered, _ = filter_dependencies(_rows(), None, ["outdated", "prod"])
        assert [r.name for r in filtered] == ["react"]

    def test_counts(self):
        _, counts = filter_dependencies(_rows(), None, ["dev"])
        assert counts == {
            "user_installed": 3,
            "not_user_installed": 1,
            "deprecated": 1,
            "outdated": 2,
            "unlicensed": 1,
            "dev": 1,
            "prod": 3,
        }
