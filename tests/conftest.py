"""Shared pytest fixtures for SbomLens tests."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from sbomlens.engines.sbom.raw import parse_plugin_output

# ---------------------------------------------------------------------------
# A small npm project, workspace "."
#
#   lodash@4.17.21   direct, prod
#   express@4.18.2   direct, prod  -> body-parser, debug
#   body-parser      transitive    -> debug
#   debug@2.6.9      transitive    -> ms
#   ms@2.0.0         transitive, bundled, no license
#   jest@29.0.0      direct, dev, optional
#   ghost@1.0.0      neither dev nor prod (inactive)
# ---------------------------------------------------------------------------

SAMPLE_JS: dict[str, Any] = {
    "workspaces": {
        ".": {
            "dependencies": {
                "lodash": {"4.17.21": {"Direct": True, "Prod": True, "Licenses": ["MIT"]}},
                "express": {
                    "4.18.2": {
                        "Direct": True,
                        "Prod": True,
                        "Dependencies": {"body-parser": "1.20.1", "debug": "2.6.9"},
                        "Licenses": ["MIT"],
                    }
                },
                "body-parser": {
                    "1.20.1": {
                        "Transitive": True,
                        "Prod": True,
                        "Dependencies": {"debug": "2.6.9"},
                        "Licenses": ["MIT"],
                    }
                },
                "debug": {
                    "2.6.9": {
                        "Transitive": True,
                        "Prod": True,
                        "Dependencies": {"ms": "2.0.0"},
                        "Licenses": ["MIT"],
                    }
                },
                "ms": {"2.0.0": {"Transitive": True, "Prod": True, "Bundled": True}},
                "jest": {
                    "29.0.0": {"Direct": True, "Dev": True, "Optional": True, "Licenses": ["MIT"]}
                },
                "ghost": {"1.0.0": {}},
            },
            "start": {
                "dependencies": [
                    {"name": "lodash", "version": "4.17.21", "constraint": "^4.17.0"},
                    {"name": "express", "version": "4.18.2", "constraint": "^4.18.0"},
                ],
                "dev_dependencies": [{"name": "jest", "version": "29.0.0"}],
            },
        }
    },
    "analysis_info": {
        "package_manager": "NPM",
        "analysis_start_time": "2026-01-15T12:00:00Z",
        "analysis_end_time": "2026-01-15T12:00:30Z",
        "public_errors": [],
        "private_errors": [],
        "status": "success",
        "project_name": "shop",
    },
}


@pytest.fixture
def sample_js() -> dict[str, Any]:
    """Raw js-sbom output of the sample project (a fresh copy per test)."""
    return copy.deepcopy(SAMPLE_JS)


@pytest.fixture
def sample_output(sample_js):
    return parse_plugin_output(sample_js, plugin="js-sbom")
