"""Package metadata as reported by an upstream registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class PackageInfo:
    """Registry facts about one package, seen from one of its versions."""

    name: str
    latest_version: str | None = None
    deprecated: bool = False
    deprecated_message: str | None = None
    release: str | None = None  # publish time of the requested version
    last_published: str | None = None  # publish time of the latest version


class PackageMetadataLookup(Protocol):
    async def get_package_info(
        self, name: str, version: str, ecosystem: str | None
    ) -> PackageInfo | None: ...
