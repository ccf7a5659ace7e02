"""Core exceptions, logging, settings and reporting definitions."""

from .exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    ExportError,
    InvalidParameterError,
    PayloadError,
    SmoReportingError,
)
from .settings import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "get_settings",
    # Exceptions
    "SmoReportingError",
    "ApiError",
    "AuthenticationError",
    "PayloadError",
    "ExportError",
    "InvalidParameterError",
    "ConfigurationError",
]
