"""Ecosystem registry: map SBOM plugins and package managers to ecosystems."""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class EcosystemInfo:
    """Static description of one package ecosystem."""

    name: str
    ecosystem: str
    language: str
    package_manager_pattern: re.Pattern[str]
    default_package_manager: str


ECOSYSTEM_REGISTRY: dict[str, EcosystemInfo] = {}


def register_ecosystem(plugin: str, info: EcosystemInfo) -> None:
    """Register the ecosystem produced by an SBOM plugin."""
    ECOSYSTEM_REGISTRY[plugin] = info


register_ecosystem(
    "js-sbom",
    EcosystemInfo("npm Registry", "npm", "JavaScript", re.compile(r"\b(npm|yarn|pnpm|bun)\b", re.I), "npm"),
)
register_ecosystem(
    "php-sbom",
    EcosystemInfo("Packagist", "packagist", "PHP", re.compile(r"\bcomposer\b", re.I), "composer"),
)
register_ecosystem(
    "python-sbom",
    EcosystemInfo("PyPI", "pypi", "Python", re.compile(r"\b(pip|poetry|pipenv|conda|uv)\b", re.I), "pip"),
)
register_ecosystem(
    "rust-sbom",
    EcosystemInfo("crates.io", "cargo", "Rust", re.compile(r"\bcargo\b", re.I), "cargo"),
)
register_ecosystem(
    "java-sbom",
    EcosystemInfo("Maven Central", "maven", "Java", re.compile(r"\b(maven|gradle|sbt)\b", re.I), "maven"),
)
register_ecosystem(
    "dotnet-sbom",
    EcosystemInfo("NuGet", "nuget", "C#", re.compile(r"\b(dotnet|nuget|paket)\b", re.I), "dotnet"),
)
register_ecosystem(
    "go-sbom",
    EcosystemInfo("Go Modules", "go", "Go", re.compile(r"\bgo\b", re.I), "go"),
)
register_ecosystem(
    "ruby-sbom",
    EcosystemInfo("RubyGems", "rubygems", "Ruby", re.compile(r"\b(gem|bundler)\b", re.I), "gem"),
)


def supported_ecosystems() -> list[str]:
    return [info.ecosystem for info in ECOSYSTEM_REGISTRY.values()]


def is_valid_ecosystem(ecosystem: str) -> bool:
    return ecosystem in supported_ecosystems()


def ecosystem_for_plugin(plugin: str | None) -> str | None:
    info = ECOSYSTEM_REGISTRY.get(plugin or "")
    return info.ecosystem if info else None


def ecosystem_for_package_manager(package_manager: str) -> str | None:
    """First registered ecosystem whose pattern matches *package_manager*."""
    if not package_manager:
        return None
    for info in ECOSYSTEM_REGISTRY.values():
        if info.package_manager_pattern.search(package_manager):
            return info.ecosystem
    return None
