"""
Domain error taxonomy.

Services raise these; `app.platform.exceptions` turns them into API responses.
"""
from fastapi import status


class AppError(Exception):
    """Base class for errors that map to a client-facing response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Internal server error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid input"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Authentication required"


class ReportNotFound(AppError):
    """Raised for missing reports AND for reports owned by someone else."""

    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Report not found or access denied"


# ── Scan-time failures ───────────────────────────────────────────────────────

class ScanError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    public_message = "Failed to analyze website"


class UpstreamUnavailable(ScanError):
    """Browser session (or axe-core source) could not be obtained."""


class NavigationTimeout(ScanError):
    pass


class NavigationError(ScanError):
    """DNS, TLS, connection or HTTP failure surfaced by the browser."""


class AuditEngineError(ScanError):
    pass


# ── Persistence / enrichment ─────────────────────────────────────────────────

class StoreError(AppError):
    # Details are logged, never sent to the client.
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Internal server error"


class EnrichmentUpstreamFailure(Exception):
    """Completion call failed or returned unusable output. Never leaves the enricher."""
