"""Async package registry client (npm, PyPI, Packagist) with retries."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from sbomlens.core.config import Settings
from sbomlens.engines.package_registry.models import PackageInfo

log = structlog.get_logger("sbomlens.engine")

_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 0.5  # seconds

_DEFAULT_NPM_URL = "https://registry.npmjs.org"
_DEFAULT_PYPI_URL = "https://pypi.org"
_DEFAULT_PACKAGIST_URL = "https://repo.packagist.org"


class RegistryClient:
    """Looks up latest versions and deprecation state on public registries.

    Unsupported ecosystems and unknown packages return ``None``. Transport
    failures and malformed bodies raise once retries are exhausted.
    """

    def __init__(
        self,
        *,
        npm_url: str = _DEFAULT_NPM_URL,
        pypi_url: str = _DEFAULT_PYPI_URL,
        packagist_url: str = _DEFAULT_PACKAGIST_URL,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        retry_base_delay: float = _RETRY_BASE_DELAY,
    ) -> None:
        self._npm_url = npm_url.rstrip("/")
        self._pypi_url = pypi_url.rstrip("/")
        self._packagist_url = packagist_url.rstrip("/")
        self._retry_base_delay = retry_base_delay
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
            follow_redirects=True,
        )
        self._fetchers: dict[str, Callable[[str, str], Any]] = {
            "npm": self._npm_info,
            "pypi": self._pypi_info,
            "packagist": self._packagist_info,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> RegistryClient:
        return cls(
            npm_url=settings.npm_registry_url,
            pypi_url=settings.pypi_url,
            packagist_url=settings.packagist_url,
            timeout=settings.http_timeout,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get_package_info(
        self, name: str, version: str, ecosystem: str | None
    ) -> PackageInfo | None:
        fetcher = self._fetchers.get(ecosystem or "")
        if fetcher is None:
            return None
        try:
            return await fetcher(name, version)
        except (httpx.HTTPError, ValueError) as exc:
            log.warning(
                "registry.lookup_failed",
                ecosystem=ecosystem,
                package=name,
                error=str(exc),
            )
            raise

    # ── registries ─────────────────────────────────────────────────────────

    async def _npm_info(self, name: str, version: str) -> PackageInfo | None:
        # scoped names keep their "@" but the slash must be escaped
        data = await self._get_json(f"{self._npm_url}/{quote(name, safe='@')}")
        if data is None:
            return None

        latest = (data.get("dist-tags") or {}).get("latest")
        times = data.get("time") or {}
        version_data = (data.get("versions") or {}).get(version) or {}
        deprecated = version_data.get("deprecated")

        return PackageInfo(
            name=name,
            latest_version=latest,
            deprecated=bool(deprecated),
            deprecated_message=_deprecation_message(deprecated),
            release=times.get(version),
            last_published=times.get(latest) if latest else None,
        )

    async def _pypi_info(self, name: str, version: str) -> PackageInfo | None:
        data = await self._get_json(f"{self._pypi_url}/pypi/{quote(name)}/json")
        if data is None:
            return None

        latest = (data.get("info") or {}).get("version")
        releases = data.get("releases") or {}
        files = releases.get(version) or []
        # a release is withdrawn only when every file of it is yanked
        yanked = bool(files) and all(f.get("yanked") for f in files)
        reason = next((f.get("yanked_reason") for f in files if f.get("yanked_reason")), None)

        return PackageInfo(
            name=name,
            latest_version=latest,
            deprecated=yanked,
            deprecated_message=(reason or "This release has been yanked") if yanked else None,
            release=_first_upload_time(files),
            last_published=_first_upload_time(releases.get(latest) or []) if latest else None,
        )

    async def _packagist_info(self, name: str, version: str) -> PackageInfo | None:
        data = await self._get_json(f"{self._packagist_url}/p2/{name}.json")
        if data is None:
            return None

        entries = (data.get("packages") or {}).get(name) or []
        if not entries:
            return None

        # p2 lists tagged releases newest first
        newest = entries[0]
        wanted = version.removeprefix("v")
        current = next(
            (e for e in entries if str(e.get("version", "")).removeprefix("v") == wanted),
            None,
        )
        abandoned = newest.get("abandoned")

        return PackageInfo(
            name=name,
            latest_version=str(newest.get("version", "")).removeprefix("v") or None,
            deprecated=bool(abandoned),
            deprecated_message=_abandoned_message(abandoned),
            release=current.get("time") if current else None,
            last_published=newest.get("time"),
        )

    # ── internal ───────────────────────────────────────────────────────────

    async def _get_json(self, url: str) -> dict[str, Any] | None:
        """GET *url*; ``None`` on 404, retries on 429 / 5xx / timeouts."""
        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES):
            try:
                resp = await self._client.get(url)
                if resp.status_code == 404:
                    return None
                if resp.status_code != 429 and resp.status_code < 500:
                    resp.raise_for_status()
                    data = resp.json()
                    return data if isinstance(data, dict) else None

                log.warning(
                    "registry.server_error",
                    url=url,
                    status=resp.status_code,
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = httpx.HTTPStatusError(
                    f"{resp.status_code}", request=resp.request, response=resp
                )
            except httpx.TimeoutException as exc:
                log.warning(
                    "registry.timeout",
                    url=url,
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = exc

            if attempt < _MAX_RETRIES - 1:
                await asyncio.sleep(self._retry_base_delay * (2**attempt))

        raise last_exc  # type: ignore[misc]


def _deprecation_message(value: Any) -> str | None:
    if not value:
        return None
    if isinstance(value, str):
        return value
    return "This package is deprecated"


def _abandoned_message(value: Any) -> str | None:
    if not value:
        return None
    if isinstance(value, str):
        return f"This package is abandoned, use {value} instead"
    return "This package is abandoned"


def _first_upload_time(files: list[dict[str, Any]]) -> str | None:
    for f in files:
        uploaded = f.get("upload_time_iso_8601") or f.get("upload_time")
        if uploaded:
            return uploaded
    return None
