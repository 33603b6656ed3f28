"""Tests for environment-driven settings."""

from __future__ import annotations

import os
from unittest.mock import patch

from sbomlens.core.config import PaginationConfig, load_settings

_VARS = [
    "SBOMLENS_MAX_ENTRIES_PER_PAGE",
    "SBOMLENS_DEFAULT_ENTRIES_PER_PAGE",
    "SBOMLENS_METADATA_CONCURRENCY",
    "SBOMLENS_HTTP_TIMEOUT",
    "SBOMLENS_NPM_REGISTRY_URL",
    "SBOMLENS_RESULTS_DIR",
    "SBOMLENS_LICENSE_CATALOG",
    "SBOMLENS_CORS_ORIGINS",
    "SBOMLENS_METADATA_CACHE_SIZE",
]


def _clean_env() -> dict[str, str]:
    return {k: v for k, v in os.environ.items() if k not in _VARS}


class TestLoadSettings:
    def test_defaults(self):
        with patch.dict(os.environ, _clean_env(), clear=True):
            settings = load_settings()
        assert settings.pagination == PaginationConfig(100, 20)
        assert settings.metadata_concurrency == 8
        assert settings.http_timeout == 10.0
        assert settings.npm_registry_url == "https://registry.npmjs.org"
        assert settings.results_dir == "results"
        assert settings.license_catalog_path is None
        assert settings.cors_origins == ("http://localhost:3000",)
        assert settings.metadata_cache_size == 4096

    def test_overrides(self):
        env = _clean_env() | {
            "SBOMLENS_MAX_ENTRIES_PER_PAGE": "50",
            "SBOMLENS_DEFAULT_ENTRIES_PER_PAGE": "10",
            "SBOMLENS_HTTP_TIMEOUT": "2.5",
            "SBOMLENS_RESULTS_DIR": "/srv/results",
            "SBOMLENS_LICENSE_CATALOG": "/etc/sbomlens/licenses.json",
            "SBOMLENS_CORS_ORIGINS": "https://a.example, https://b.example,",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings()
        assert settings.pagination == PaginationConfig(50, 10)
        assert settings.http_timeout == 2.5
        assert settings.results_dir == "/srv/results"
        assert settings.license_catalog_path == "/etc/sbomlens/licenses.json"
        assert settings.cors_origins == ("https://a.example", "https://b.example")

    def test_garbage_numbers_fall_back(self):
        env = _clean_env() | {
            "SBOMLENS_MAX_ENTRIES_PER_PAGE": "lots",
            "SBOMLENS_HTTP_TIMEOUT": "",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings()
        assert settings.pagination.max_entries_per_page == 100
        assert settings.http_timeout == 10.0

    def test_concurrency_at_least_one(self):
        env = _clean_env() | {"SBOMLENS_METADATA_CONCURRENCY": "0"}
        with patch.dict(os.environ, env, clear=True):
            assert load_settings().metadata_concurrency == 1

    def test_cache_size_at_least_one(self):
        env = _clean_env() | {"SBOMLENS_METADATA_CACHE_SIZE": "0"}
        with patch.dict(os.environ, env, clear=True):
            assert load_settings().metadata_cache_size == 1
