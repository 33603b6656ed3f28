"""Tests for raw plugin output ingestion."""

from __future__ import annotations

import pydantic
import pytest

from sbomlens.engines.sbom.raw import RawDependency, RawStart, parse_plugin_output

# ── TestRawDependency ─────────────────────────────────────────────────────


class TestRawDependency:
    def test_capitalised_keys(self):
        dep = RawDependency.model_validate({"Direct": True, "Prod": True, "Bundled": True})
        assert dep.direct and dep.prod and dep.bundled
        assert not dep.transitive and not dep.dev and not dep.optional

    def test_lowercase_keys(self):
        dep = RawDependency.model_validate({"direct": True, "dev": True, "licenses": ["MIT"]})
        assert dep.direct is True
        assert dep.dev is True
        assert dep.licenses == ["MIT"]

    def test_capitalised_key_wins(self):
        dep = RawDependency.model_validate({"Direct": False, "direct": True})
        assert dep.direct is False

    def test_lowercase_used_when_capitalised_is_null(self):
        dep = RawDependency.model_validate({"Transitive": None, "transitive": True})
        assert dep.transitive is True

    def test_missing_flags_default_false(self):
        dep = RawDependency.model_validate({})
        assert not any([dep.direct, dep.transitive, dep.dev, dep.prod, dep.bundled, dep.optional])
        assert dep.dependencies == {}
        assert dep.requires == {}
        assert dep.licenses == []

    def test_null_flag_is_false(self):
        dep = RawDependency.model_validate({"Dev": None})
        assert dep.dev is False

    def test_null_adjacency_is_leaf(self):
        dep = RawDependency.model_validate({"Dependencies": None, "Requires": None})
        assert dep.dependencies == {}
        assert dep.requires == {}

    def test_adjacency_drops_empty_versions(self):
        dep = RawDependency.model_validate({"Dependencies": {"a": "1.0.0", "b": None, "c": ""}})
        assert dep.dependencies == {"a": "1.0.0"}

    def test_unknown_keys_ignored(self):
        dep = RawDependency.model_validate({"Prod": True, "Peer": True, "Resolved": "x"})
        assert dep.prod is True


# ── TestRawStart ──────────────────────────────────────────────────────────


class TestRawStart:
    def test_drops_incomplete_items(self):
        start = RawStart.model_validate(
            {
                "dependencies": [
                    {"name": "a", "version": "1.0.0"},
                    {"name": "b"},
                    {"version": "2.0.0"},
                ],
                "dev_dependencies": None,
            }
        )
        assert [(d.name, d.version) for d in start.dependencies] == [("a", "1.0.0")]
        assert start.dev_dependencies == []

    def test_constraint_optional(self):
        start = RawStart.model_validate(
            {"dependencies": [{"name": "a", "version": "1.0.0", "constraint": "^1.0"}]}
        )
        assert start.dependencies[0].constraint == "^1.0"


# ── TestParsePluginOutput ─────────────────────────────────────────────────


class TestParsePluginOutput:
    def test_parses_sample(self, sample_js):
        output = parse_plugin_output(sample_js, plugin="js-sbom")
        assert output.plugin == "js-sbom"
        ws = output.workspaces["."]
        assert ws.dependencies["express"]["4.18.2"].dependencies == {
            "body-parser": "1.20.1",
            "debug": "2.6.9",
        }
        assert len(ws.start.dependencies) == 2
        assert output.analysis_info.package_manager == "NPM"
        assert not output.failed

    def test_failed_status(self):
        output = parse_plugin_output({"analysis_info": {"status": "FAILURE"}})
        assert output.failed

    def test_null_workspace_sections(self):
        output = parse_plugin_output({"workspaces": {".": {"dependencies": None, "start": None}}})
        ws = output.workspaces["."]
        assert ws.dependencies == {}
        assert ws.start.dependencies == []

    def test_null_error_lists(self):
        output = parse_plugin_output({"analysis_info": {"public_errors": None, "private_errors": None}})
        assert output.analysis_info.public_errors == []
        assert output.analysis_info.private_errors == []

    def test_plugin_name_kept_when_not_given(self):
        output = parse_plugin_output({"plugin": "php-sbom"})
        assert output.plugin == "php-sbom"

    def test_wrong_shape_raises(self):
        with pytest.raises(pydantic.ValidationError):
            parse_plugin_output({"workspaces": "not-a-map"})
