"""Runtime settings read from ``SBOMLENS_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class PaginationConfig:
    """Server-side bounds for listing endpoints."""

    max_entries_per_page: int = 100
    default_entries_per_page: int = 20


@dataclass(frozen=True)
class Settings:
    pagination: PaginationConfig
    metadata_concurrency: int
    http_timeout: float
    npm_registry_url: str
    pypi_url: str
    packagist_url: str
    results_dir: str = "results"
    license_catalog_path: str | None = None
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)
    metadata_cache_size: int = 4096


def load_settings() -> Settings:
    """Build :class:`Settings` from the current environment."""
    return Settings(
        pagination=PaginationConfig(
            max_entries_per_page=_env_int("SBOMLENS_MAX_ENTRIES_PER_PAGE", 100),
            default_entries_per_page=_env_int("SBOMLENS_DEFAULT_ENTRIES_PER_PAGE", 20),
        ),
        metadata_concurrency=max(1, _env_int("SBOMLENS_METADATA_CONCURRENCY", 8)),
        http_timeout=_env_float("SBOMLENS_HTTP_TIMEOUT", 10.0),
        npm_registry_url=os.environ.get(
            "SBOMLENS_NPM_REGISTRY_URL", "https://registry.npmjs.org"
        ),
        pypi_url=os.environ.get("SBOMLENS_PYPI_URL", "https://pypi.org"),
        packagist_url=os.environ.get("SBOMLENS_PACKAGIST_URL", "https://repo.packagist.org"),
        results_dir=os.environ.get("SBOMLENS_RESULTS_DIR", "results"),
        license_catalog_path=os.environ.get("SBOMLENS_LICENSE_CATALOG") or None,
        cors_origins=tuple(
            origin.strip()
            for origin in os.environ.get("SBOMLENS_CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ),
        metadata_cache_size=max(1, _env_int("SBOMLENS_METADATA_CACHE_SIZE", 4096)),
    )
