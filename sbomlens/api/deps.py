"""Dependency injection: result store, metadata client and service singletons."""

from __future__ import annotations

import structlog

from sbomlens.core.config import Settings, load_settings
from sbomlens.engines.package_registry import CachedMetadataLookup, RegistryClient
from sbomlens.engines.sbom.licenses import LicenseCatalog, StaticLicenseCatalog
from sbomlens.services.license_service import LicenseService
from sbomlens.services.result_store import DirectoryResultStore
from sbomlens.services.sbom_service import SbomService

log = structlog.get_logger("sbomlens.api")

# ---------------------------------------------------------------------------
# Singletons (initialised by app lifespan)
# ---------------------------------------------------------------------------
_registry_client: RegistryClient | None = None
_sbom_service: SbomService | None = None
_license_service: LicenseService | None = None


def init_services(settings: Settings | None = None) -> None:
    """Build the store, registry client and services. Called once at startup."""
    global _registry_client, _sbom_service, _license_service  # noqa: PLW0603
    settings = settings or load_settings()

    store = DirectoryResultStore(settings.results_dir)
    catalog: LicenseCatalog | None = None
    if settings.license_catalog_path:
        catalog = StaticLicenseCatalog.from_json_file(settings.license_catalog_path)

    _registry_client = RegistryClient.from_settings(settings)
    _sbom_service = SbomService(
        store,
        CachedMetadataLookup(_registry_client, max_entries=settings.metadata_cache_size),
        pagination=settings.pagination,
        metadata_concurrency=settings.metadata_concurrency,
    )
    _license_service = LicenseService(store, catalog, pagination=settings.pagination)
    log.info("services.initialised", results_dir=settings.results_dir)


async def close_services() -> None:
    """Close the registry client's connection pool."""
    global _registry_client  # noqa: PLW0603
    if _registry_client is not None:
        await _registry_client.close()
        _registry_client = None


# ---------------------------------------------------------------------------
# Service getters (for Depends())
# ---------------------------------------------------------------------------


def get_sbom_service() -> SbomService:
    if _sbom_service is None:
        raise RuntimeError("call init_services() before handling requests")
    return _sbom_service


def get_license_service() -> LicenseService:
    if _license_service is None:
        raise RuntimeError("call init_services() before handling requests")
    return _license_service
