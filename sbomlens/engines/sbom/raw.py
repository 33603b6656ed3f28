"""Raw plugin output: validated once at ingestion.

Plugin families disagree on field casing (``Direct`` vs ``direct``) and on
which optional fields they populate. Everything is normalised here so the
rest of the engine works on fully-defaulted models.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# lowercase spelling -> canonical (capitalised) spelling
_DEPENDENCY_KEYS = {
    "direct": "Direct",
    "transitive": "Transitive",
    "dev": "Dev",
    "prod": "Prod",
    "bundled": "Bundled",
    "optional": "Optional",
    "dependencies": "Dependencies",
    "requires": "Requires",
    "licenses": "Licenses",
}


class RawDependency(BaseModel):
    """One ``dependencies[name][version]`` entry as emitted by a plugin."""

    model_config = ConfigDict(extra="ignore")

    direct: bool = Field(False, alias="Direct")
    transitive: bool = Field(False, alias="Transitive")
    dev: bool = Field(False, alias="Dev")
    prod: bool = Field(False, alias="Prod")
    bundled: bool = Field(False, alias="Bundled")
    optional: bool = Field(False, alias="Optional")
    dependencies: dict[str, str] = Field(default_factory=dict, alias="Dependencies")
    requires: dict[str, str] = Field(default_factory=dict, alias="Requires")
    licenses: list[str] = Field(default_factory=list, alias="Licenses")

    @model_validator(mode="before")
    @classmethod
    def _normalize_casing(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        normalized = dict(data)
        for lower, canonical in _DEPENDENCY_KEYS.items():
            if normalized.get(canonical) is None and lower in normalized:
                normalized[canonical] = normalized[lower]
            normalized.pop(lower, None)
        return normalized

    @field_validator(
        "direct", "transitive", "dev", "prod", "bundled", "optional", mode="before"
    )
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("dependencies", "requires", mode="before")
    @classmethod
    def _none_is_empty_map(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        # plugins occasionally emit null or non-string child versions
        return {str(k): str(v) for k, v in value.items() if k and v}

    @field_validator("licenses", mode="before")
    @classmethod
    def _none_is_empty_list(cls, value: Any) -> Any:
        return value or []


class RawRootDependency(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    version: str
    constraint: str | None = None


class RawStart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    dependencies: list[RawRootDependency] = Field(default_factory=list)
    dev_dependencies: list[RawRootDependency] = Field(default_factory=list)

    @field_validator("dependencies", "dev_dependencies", mode="before")
    @classmethod
    def _drop_incomplete(cls, value: Any) -> Any:
        if not value:
            return []
        return [
            item
            for item in value
            if isinstance(item, dict) and item.get("name") and item.get("version")
        ]


class RawWorkspace(BaseModel):
    model_config = ConfigDict(extra="ignore")

    dependencies: dict[str, dict[str, RawDependency]] = Field(default_factory=dict)
    start: RawStart = Field(default_factory=RawStart)

    @field_validator("dependencies", "start", mode="before")
    @classmethod
    def _none_is_default(cls, value: Any) -> Any:
        return {} if value is None else value


class RawAnalysisInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    package_manager: str = ""
    analysis_start_time: str | None = None
    analysis_end_time: str | None = None
    public_errors: list[Any] = Field(default_factory=list)
    private_errors: list[Any] = Field(default_factory=list)
    status: str = "success"
    project_name: str = ""

    @field_validator("public_errors", "private_errors", mode="before")
    @classmethod
    def _none_is_empty_list(cls, value: Any) -> Any:
        return value or []


class PluginOutput(BaseModel):
    """Decoded result of one SBOM plugin for one analysis run."""

    model_config = ConfigDict(extra="ignore")

    plugin: str | None = None
    workspaces: dict[str, RawWorkspace] = Field(default_factory=dict)
    analysis_info: RawAnalysisInfo = Field(default_factory=RawAnalysisInfo)

    @property
    def failed(self) -> bool:
        return self.analysis_info.status.lower() == "failure"


def parse_plugin_output(data: dict[str, Any], plugin: str | None = None) -> PluginOutput:
    """Validate a decoded plugin JSON document.

    Raises ``pydantic.ValidationError`` when the document's shape is wrong.
    """
    output = PluginOutput.model_validate(data)
    if plugin is not None:
        output.plugin = plugin
    return output
