"""
Shared error handling for the satellite catalog gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class SatcatException(Exception):
    """Base exception for satellite catalog gateway components."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class TransportError(SatcatException):
    """Network or connection failure while talking to the remote service."""

    def __init__(self, message: str = "Transport failure", details: Optional[Dict[str, Any]] = None):
        super().__init__("TRANSPORT_ERROR", message, details)


class AuthError(SatcatException):
    """Credentials rejected, or the session could not be renewed."""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTH_ERROR", message, details)


class UpstreamError(SatcatException):
    """The remote service answered with a non-auth error status."""

    def __init__(self, status_code: int, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        merged = {"status_code": status_code, **(details or {})}
        super().__init__("UPSTREAM_ERROR", message or f"Upstream returned HTTP {status_code}", merged)


class ParseError(SatcatException):
    """Malformed catalog or payload data from the remote service."""

    def __init__(self, message: str = "Malformed upstream data", details: Optional[Dict[str, Any]] = None):
        super().__init__("PARSE_ERROR", message, details)


class ValidationError(SatcatException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ConfigurationError(SatcatException):
    """Missing or inconsistent service configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)
