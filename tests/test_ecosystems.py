"""Tests for the ecosystem registry."""

from __future__ import annotations

import re

import pytest

from sbomlens.engines.sbom.ecosystems import (
    ECOSYSTEM_REGISTRY,
    EcosystemInfo,
    ecosystem_for_package_manager,
    ecosystem_for_plugin,
    is_valid_ecosystem,
    register_ecosystem,
    supported_ecosystems,
)


class TestEcosystemRegistry:
    @pytest.mark.parametrize(
        "plugin, ecosystem",
        [
            ("js-sbom", "npm"),
            ("php-sbom", "packagist"),
            ("python-sbom", "pypi"),
            ("rust-sbom", "cargo"),
            ("java-sbom", "maven"),
            ("dotnet-sbom", "nuget"),
            ("go-sbom", "go"),
            ("ruby-sbom", "rubygems"),
        ],
    )
    def test_plugin_mapping(self, plugin, ecosystem):
        assert ecosystem_for_plugin(plugin) == ecosystem

    def test_unknown_plugin(self):
        assert ecosystem_for_plugin("cobol-sbom") is None
        assert ecosystem_for_plugin(None) is None

    @pytest.mark.parametrize(
        "package_manager, ecosystem",
        [
            ("NPM", "npm"),
            ("yarn", "npm"),
            ("composer", "packagist"),
            ("poetry", "pypi"),
            ("cargo", "cargo"),
            ("gradle", "maven"),
            ("bundler", "rubygems"),
            ("go", "go"),
        ],
    )
    def test_package_manager_mapping(self, package_manager, ecosystem):
        assert ecosystem_for_package_manager(package_manager) == ecosystem

    def test_unknown_package_manager(self):
        assert ecosystem_for_package_manager("") is None
        assert ecosystem_for_package_manager("make") is None

    def test_supported_lists(self):
        assert len(supported_ecosystems()) == 8
        assert "npm" in supported_ecosystems()
        assert is_valid_ecosystem("pypi")
        assert not is_valid_ecosystem("cobol")

    def test_register_ecosystem(self):
        info = EcosystemInfo("SwiftPM", "swift", "Swift", re.compile(r"\bswiftpm\b", re.I), "swiftpm")
        register_ecosystem("swift-sbom", info)
        try:
            assert ecosystem_for_plugin("swift-sbom") == "swift"
            assert is_valid_ecosystem("swift")
        finally:
            ECOSYSTEM_REGISTRY.pop("swift-sbom")
