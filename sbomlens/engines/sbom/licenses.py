"""License facts: per-workspace license usage joined with catalog details."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from sbomlens.engines.sbom.models import LicenseFact

log = structlog.get_logger("sbomlens.engine")

UNKNOWN_CATEGORY = "unknown"


class RawLicenseWorkspace(BaseModel):
    """One workspace of the license plugin's output."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    licenses_dep_map: dict[str, list[str]] = Field(default_factory=dict, alias="LicensesDepMap")
    non_spdx_licenses_dep_map: dict[str, list[str]] = Field(
        default_factory=dict, alias="NonSpdxLicensesDepMap"
    )
    license_compliance_violations: list[str] = Field(
        default_factory=list, alias="LicenseComplianceViolations"
    )

    @field_validator("licenses_dep_map", "non_spdx_licenses_dep_map", mode="before")
    @classmethod
    def _none_is_empty_map(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return {k: v or [] for k, v in value.items()}

    @field_validator("license_compliance_violations", mode="before")
    @classmethod
    def _none_is_empty_list(cls, value: Any) -> Any:
        return value or []


class RawLicenseOutput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    workspaces: dict[str, RawLicenseWorkspace] = Field(default_factory=dict)


@dataclass(frozen=True)
class LicenseDetails:
    name: str
    category: str = ""
    description: str = ""
    references: list[str] = field(default_factory=list)


class LicenseCatalog(Protocol):
    def get(self, license_id: str) -> LicenseDetails | None: ...


class StaticLicenseCatalog:
    """In-memory catalog keyed by SPDX id."""

    def __init__(self, entries: Mapping[str, LicenseDetails] | None = None) -> None:
        self._entries = dict(entries or {})

    def get(self, license_id: str) -> LicenseDetails | None:
        return self._entries.get(license_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> StaticLicenseCatalog:
        """``{"MIT": {"name": ..., "category": ...}, ...}`` -> catalog."""
        return cls(
            {
                license_id: LicenseDetails(
                    name=item.get("name") or license_id,
                    category=item.get("category") or "",
                    description=item.get("description") or "",
                    references=list(item.get("references") or []),
                )
                for license_id, item in data.items()
            }
        )

    @classmethod
    def from_json_file(cls, path: str | Path) -> StaticLicenseCatalog:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(data)


def build_license_facts(
    workspace: RawLicenseWorkspace, catalog: LicenseCatalog | None = None
) -> list[LicenseFact]:
    """One :class:`LicenseFact` per license id used in *workspace*.

    SPDX ids are enriched from *catalog*; a miss keeps the id as the name
    and files the license under ``unknown``. Non-SPDX ids are flagged
    ``unable_to_infer`` and carry no catalog data.
    """
    violations = set(workspace.license_compliance_violations)
    facts: dict[str, LicenseFact] = {}

    for license_id, deps in workspace.licenses_dep_map.items():
        fact = LicenseFact(
            id=license_id,
            unable_to_infer=license_id in workspace.non_spdx_licenses_dep_map,
            license_compliance_violation=license_id in violations,
            deps_using_license=list(dict.fromkeys(deps)),
        )
        details = catalog.get(license_id) if catalog is not None else None
        if details is None:
            log.debug("licenses.catalog_miss", license_id=license_id)
            fact.name = license_id
            fact.category = UNKNOWN_CATEGORY
        else:
            fact.name = details.name
            fact.category = details.category
            fact.description = details.description
            fact.references = list(details.references)
        facts[license_id] = fact

    for license_id, deps in workspace.non_spdx_licenses_dep_map.items():
        facts[license_id] = LicenseFact(
            id=license_id,
            name=license_id,
            category=UNKNOWN_CATEGORY,
            unable_to_infer=True,
            license_compliance_violation=license_id in violations,
            deps_using_license=list(dict.fromkeys(deps)),
        )

    return list(facts.values())
