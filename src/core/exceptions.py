"""Custom exceptions for smo_reporting.

Domain-specific exception types for better error handling and debugging.
"""

from __future__ import annotations

from typing import Any



class SmoReportingError(Exception):
    """Base exception for all smo_reporting errors."""
    pass


# --- API Errors ---

class ApiError(SmoReportingError):
    """Network failure or non-2xx answer from the reporting API."""

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class AuthenticationError(ApiError):
    """Credentials rejected by the reporting API."""
    pass


class PayloadError(SmoReportingError):
    """Response body is not a JSON envelope."""
    pass


# --- Export Errors ---

class ExportError(SmoReportingError):
    """Failed to build or write an export file."""
    pass


class InvalidParameterError(SmoReportingError):
    """Invalid parameter value provided."""
    
    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        msg = f"Invalid parameter '{param_name}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


# --- Configuration Errors ---

class ConfigurationError(SmoReportingError):
    """Error in application configuration."""
    pass
