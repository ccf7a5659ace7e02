"""Session state management for Streamlit app.

Provides a centralized interface for managing Streamlit session state,
with type-safe accessors and default values.
"""

from __future__ import annotations

from typing import Any, TypeVar

import streamlit as st

from src.application.services.detail_loader import OperationDetail, RequestTracker
from src.application.services.operations import OperationFilters
from src.domain.calculator.ratios import RatioKind
from src.domain.models.operation import OperationRecord, UserSession

T = TypeVar("T")


def get_state(key: str, default: T) -> T:
    """Get a value from session state with a default.

    Args:
        key: Session state key
        default: Default value if key not present

    Returns:
        Value from session state or default
    """
    if key not in st.session_state:
        st.session_state[key] = default
    return st.session_state[key]


def set_state(key: str, value: Any) -> None:
    """Set a value in session state.

    Args:
        key: Session state key
        value: Value to set
    """
    st.session_state[key] = value


def init_state(defaults: dict[str, Any]) -> None:
    """Initialize multiple session state values with defaults.

    Only sets values that don't already exist.

    Args:
        defaults: Dictionary of key-value defaults
    """
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


class SessionManager:
    """Manages all session state for the app."""

    # Default state values
    DEFAULTS = {
        "user": None,
        "page": "dashboard",
        "operations": [],
        "operations_loaded": False,
        "selected_operation_id": None,
        "selected_simulations": {},
        "detail": None,
        "search_term": "",
        "explorer_page": 1,
        "budget_ratio": RatioKind.TOTAL.value,
        "financing_ratio": RatioKind.TOTAL.value,
        "selected_nature": None,
    }

    @classmethod
    def initialize(cls) -> None:
        """Initialize all session state with defaults."""
        init_state(cls.DEFAULTS)
        # Mutable defaults must not be shared between sessions
        init_state({"filters": OperationFilters(), "request_tracker": RequestTracker()})

    # --- user ---

    @classmethod
    def get_user(cls) -> UserSession | None:
        return get_state("user", None)

    @classmethod
    def set_user(cls, user: UserSession | None) -> None:
        set_state("user", user)

    @classmethod
    def reset(cls) -> None:
        """Forget everything loaded for the current user (logout)."""
        for key, value in cls.DEFAULTS.items():
            set_state(key, value)
        set_state("selected_simulations", {})
        set_state("operations", [])
        set_state("filters", OperationFilters())
        set_state("request_tracker", RequestTracker())

    # --- navigation ---

    @classmethod
    def get_page(cls) -> str:
        return get_state("page", "dashboard")

    @classmethod
    def set_page(cls, page: str) -> None:
        set_state("page", page)

    # --- operations ---

    @classmethod
    def get_operations(cls) -> list[OperationRecord]:
        """Get loaded operations."""
        return get_state("operations", [])

    @classmethod
    def set_operations(cls, operations: list[OperationRecord]) -> None:
        set_state("operations", operations)
        set_state("operations_loaded", True)

    @classmethod
    def operations_loaded(cls) -> bool:
        return get_state("operations_loaded", False)

    @classmethod
    def get_filters(cls) -> OperationFilters:
        return get_state("filters", OperationFilters())

    @classmethod
    def set_filters(cls, filters: OperationFilters) -> None:
        if filters != cls.get_filters():
            set_state("explorer_page", 1)
        set_state("filters", filters)

    @classmethod
    def get_explorer_page(cls) -> int:
        return get_state("explorer_page", 1)

    @classmethod
    def set_explorer_page(cls, page: int) -> None:
        set_state("explorer_page", page)

    # --- selection ---

    @classmethod
    def get_selected_operation(cls) -> OperationRecord | None:
        """Get currently selected operation."""
        project_code = get_state("selected_operation_id", None)
        if project_code is None:
            return None
        return next((op for op in cls.get_operations() if op.project_code == project_code), None)

    @classmethod
    def select_operation(cls, project_code: str) -> None:
        """Open an operation; the detail of the previous one is dropped."""
        if project_code != get_state("selected_operation_id", None):
            set_state("detail", None)
            set_state("selected_nature", None)
        set_state("selected_operation_id", project_code)
        set_state("page", "operation")

    @classmethod
    def get_selected_simulation_code(cls, project_code: str) -> str | None:
        return get_state("selected_simulations", {}).get(project_code)

    @classmethod
    def set_selected_simulation_code(cls, project_code: str, code: str) -> None:
        selections = dict(get_state("selected_simulations", {}))
        selections[project_code] = code
        set_state("selected_simulations", selections)

    # --- detail ---

    @classmethod
    def get_detail(cls) -> OperationDetail | None:
        return get_state("detail", None)

    @classmethod
    def set_detail(cls, detail: OperationDetail | None) -> None:
        set_state("detail", detail)

    @classmethod
    def get_request_tracker(cls) -> RequestTracker:
        return get_state("request_tracker", RequestTracker())

    # --- view selections ---

    @classmethod
    def get_ratio(cls, section: str) -> RatioKind:
        """Selected ratio card of the budget or financing section."""
        return RatioKind(get_state(f"{section}_ratio", RatioKind.TOTAL.value))

    @classmethod
    def set_ratio(cls, section: str, kind: RatioKind) -> None:
        set_state(f"{section}_ratio", kind.value)

    @classmethod
    def get_selected_nature(cls) -> str | None:
        return get_state("selected_nature", None)

    @classmethod
    def set_selected_nature(cls, nature: str | None) -> None:
        set_state("selected_nature", nature)
