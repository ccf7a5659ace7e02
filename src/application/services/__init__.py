"""Application services."""

from .detail_loader import OperationDetail, OperationDetailLoader, RequestToken, RequestTracker
from .operations import (
    FilterOptions,
    OperationFilters,
    Page,
    build_operations,
    filter_operations,
    filter_options,
    load_operations,
    paginate,
    search_operations,
    select_simulation,
    sort_by_latest_modification,
)
from .reporting_client import ReportingClient, build_filter

__all__ = [
    "ReportingClient",
    "build_filter",
    "OperationDetail",
    "OperationDetailLoader",
    "RequestToken",
    "RequestTracker",
    "FilterOptions",
    "OperationFilters",
    "Page",
    "build_operations",
    "filter_operations",
    "filter_options",
    "load_operations",
    "paginate",
    "search_operations",
    "select_simulation",
    "sort_by_latest_modification",
]
