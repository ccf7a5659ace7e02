"""Infrastructure services: exports and the stored session."""

from .exporter import ExportOptions, ExportPayload, OperationExporter, build_export_filename
from .session_store import SessionStore

__all__ = [
    "ExportOptions",
    "ExportPayload",
    "OperationExporter",
    "build_export_filename",
    "SessionStore",
]
