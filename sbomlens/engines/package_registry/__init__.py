"""Package registry lookups: latest versions and deprecation state."""

from sbomlens.engines.package_registry.cache import CachedMetadataLookup
from sbomlens.engines.package_registry.client import RegistryClient
from sbomlens.engines.package_registry.models import PackageInfo, PackageMetadataLookup

__all__ = [
    "CachedMetadataLookup",
    "PackageInfo",
    "PackageMetadataLookup",
    "RegistryClient",
]
