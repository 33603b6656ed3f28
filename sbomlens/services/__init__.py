"""Service layer: query orchestration over the SBOM engine."""


class ServiceError(Exception):
    """Base service exception."""


class NotFoundError(ServiceError):
    """Resource not found (-> HTTP 404)."""


class UnknownWorkspaceError(NotFoundError):
    """Requested workspace is absent from the canonical SBOM."""

    def __init__(self, workspace: str) -> None:
        self.workspace = workspace
        super().__init__(f"unknown workspace: {workspace!r}")


class EntityNotFoundError(NotFoundError):
    """Dependency or license lookup by key failed inside a valid workspace."""


class NoResultAvailableError(ServiceError):
    """No analysis result exists yet for the requested analysis (-> HTTP 409)."""


class ValidationError(ServiceError):
    """Input validation error (-> HTTP 422)."""
