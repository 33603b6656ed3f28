"""ResultStore: where the services read plugin outputs of an analysis run."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import structlog

from sbomlens.engines.sbom.licenses import RawLicenseOutput
from sbomlens.engines.sbom.raw import PluginOutput, parse_plugin_output

log = structlog.get_logger("sbomlens.service")


class ResultStore(Protocol):
    """Read side of analysis result storage.

    Every method returns ``None`` when the analysis has produced no result
    of that kind yet.
    """

    async def get_plugin_outputs(self, analysis_id: str) -> list[PluginOutput] | None: ...

    async def get_previous_plugin_outputs(self, analysis_id: str) -> list[PluginOutput] | None: ...

    async def get_license_output(self, analysis_id: str) -> RawLicenseOutput | None: ...


class MemoryResultStore:
    """Holds decoded plugin outputs in memory, keyed by analysis id."""

    def __init__(
        self,
        runs: Mapping[str, list[PluginOutput]] | None = None,
        *,
        previous: Mapping[str, str] | None = None,
        licenses: Mapping[str, RawLicenseOutput] | None = None,
    ) -> None:
        self._runs = dict(runs or {})
        self._previous = dict(previous or {})
        self._licenses = dict(licenses or {})

    def add_run(
        self,
        analysis_id: str,
        outputs: list[PluginOutput],
        *,
        previous_id: str | None = None,
    ) -> None:
        self._runs[analysis_id] = list(outputs)
        if previous_id is not None:
            self._previous[analysis_id] = previous_id

    def add_licenses(self, analysis_id: str, output: RawLicenseOutput) -> None:
        self._licenses[analysis_id] = output

    async def get_plugin_outputs(self, analysis_id: str) -> list[PluginOutput] | None:
        return self._runs.get(analysis_id)

    async def get_previous_plugin_outputs(self, analysis_id: str) -> list[PluginOutput] | None:
        previous_id = self._previous.get(analysis_id)
        if previous_id is None:
            return None
        return self._runs.get(previous_id)

    async def get_license_output(self, analysis_id: str) -> RawLicenseOutput | None:
        return self._licenses.get(analysis_id)


class DirectoryResultStore:
    """Reads analysis runs from a directory tree.

    Layout::

        <root>/<analysis_id>/sbom/<plugin>.json   one file per SBOM plugin
        <root>/<analysis_id>/licenses.json        license plugin output
        <root>/<analysis_id>/previous             id of the prior run (text)
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    async def get_plugin_outputs(self, analysis_id: str) -> list[PluginOutput] | None:
        return await asyncio.to_thread(self._read_plugin_outputs, analysis_id)

    async def get_previous_plugin_outputs(self, analysis_id: str) -> list[PluginOutput] | None:
        previous_id = await asyncio.to_thread(self._read_previous_id, analysis_id)
        if previous_id is None:
            return None
        return await self.get_plugin_outputs(previous_id)

    async def get_license_output(self, analysis_id: str) -> RawLicenseOutput | None:
        data = await asyncio.to_thread(self._read_json, self._run_dir(analysis_id) / "licenses.json")
        if data is None:
            return None
        return RawLicenseOutput.model_validate(data)

    # ── internal ───────────────────────────────────────────────────────────

    def _run_dir(self, analysis_id: str) -> Path:
        # analysis ids are opaque, never paths
        if not analysis_id or "/" in analysis_id or "\\" in analysis_id or analysis_id in (".", ".."):
            return self._root / "__invalid__"
        return self._root / analysis_id

    def _read_plugin_outputs(self, analysis_id: str) -> list[PluginOutput] | None:
        sbom_dir = self._run_dir(analysis_id) / "sbom"
        if not sbom_dir.is_dir():
            return None
        outputs = []
        for path in sorted(sbom_dir.glob("*.json")):
            data = self._read_json(path)
            if data is not None:
                outputs.append(parse_plugin_output(data, plugin=path.stem))
        return outputs or None

    def _read_previous_id(self, analysis_id: str) -> str | None:
        path = self._run_dir(analysis_id) / "previous"
        if not path.is_file():
            return None
        previous_id = path.read_text(encoding="utf-8").strip()
        return previous_id or None

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any] | None:
        if not path.is_file():
            return None
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            log.warning("store.unexpected_document", path=str(path))
            return None
        return data
