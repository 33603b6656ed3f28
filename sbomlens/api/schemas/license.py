"""License response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LicenseItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    category: str
    unable_to_infer: bool
    license_compliance_violation: bool
    deps_using_license: list[str]
    description: str = ""
    references: list[str] = []
