"""Failure taxonomy for build reporting."""

from typing import Optional


class ReporterError(Exception):
    """Base class for all build reporter failures."""


class EnvironmentUnavailable(ReporterError):
    """The build environment could not be read; the report is aborted."""


class InvalidBuildRecord(ReporterError):
    """The orchestrator supplied build facts that cannot form a build record."""


class TransportFailure(ReporterError):
    """Base class for failures of a single API call."""

    kind = "transport_failure"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(TransportFailure):
    """The API key was rejected (HTTP 403) or is missing."""

    kind = "authentication_error"


class ApiRejection(TransportFailure):
    """Well-formed response whose status field is not "ok"."""

    kind = "api_rejection"


class TransportError(TransportFailure):
    """Network or IO failure (refused, timeout, DNS, TLS, HTTP error status)."""

    kind = "transport_error"


class MalformedResponse(TransportFailure):
    """Response body is not valid JSON or lacks the expected field."""

    kind = "malformed_response"
