"""Application controller - orchestrates UI and business logic.

Each function represents a distinct user action. Service errors are
caught here, logged and shown to the user; previously loaded data stays
in place.
"""

from __future__ import annotations

from collections.abc import Callable

import streamlit as st

from src.application.services.detail_loader import OperationDetail, OperationDetailLoader
from src.application.services.operations import load_operations, sort_by_latest_modification
from src.application.services.reporting_client import ReportingClient
from src.core.exceptions import AuthenticationError, SmoReportingError
from src.core.logging import get_logger
from src.core.settings import get_settings
from src.domain.models.operation import UserSession
from src.services.exporter import ExportOptions, ExportPayload, OperationExporter
from src.services.session_store import SessionStore
from src.ui.state import SessionManager

log = get_logger(__name__)


def make_client(user: UserSession | None = None) -> ReportingClient:
    """Client authenticated as the logged-in user, or with configured credentials."""
    return ReportingClient(get_settings(), token=user.token if user else None)


def restore_session() -> UserSession | None:
    """Hydrate the session from the stored user record once per browser session."""
    user = SessionManager.get_user()
    if user is None:
        user = SessionStore().load()
        if user is not None:
            SessionManager.set_user(user)
            log.info("session_restored", username=user.username)
    return user


def login(username: str, password: str) -> bool:
    """Check credentials, store the user and open the dashboard.

    Returns:
        True on success
    """
    try:
        user = ReportingClient(get_settings()).authenticate(username, password)
    except AuthenticationError as e:
        st.error(f"Connexion refusée : {e}")
        return False
    except SmoReportingError as e:
        log.error("login_failed", error=str(e))
        st.error(f"Serveur de reporting injoignable : {e}")
        return False

    SessionStore().save(user)
    SessionManager.reset()
    SessionManager.set_user(user)
    st.toast(f"Bienvenue {user.username}")
    return True


def logout() -> None:
    user = SessionManager.get_user()
    SessionStore().clear()
    SessionManager.reset()
    log.info("logout", username=user.username if user else None)


def refresh_operations(on_progress: Callable[[int], None] | None = None) -> bool:
    """Load every operation page by page.

    Returns:
        True when the list was replaced
    """
    try:
        operations = load_operations(make_client(SessionManager.get_user()), on_progress)
    except SmoReportingError as e:
        log.error("operations_load_failed", error=str(e))
        st.error(f"Erreur lors du chargement des opérations : {e}")
        return False

    SessionManager.set_operations(sort_by_latest_modification(operations))
    log.info("operations_loaded", count=len(operations))
    return True


def ensure_operations() -> None:
    """Load the operations on first display, with a live row counter."""
    if SessionManager.operations_loaded():
        return
    placeholder = st.empty()

    def on_progress(rows: int) -> None:
        placeholder.caption(f"Chargement des opérations… {rows} lignes")

    refresh_operations(on_progress)
    placeholder.empty()


def load_detail(project_code: str, simulation_code: str | None) -> OperationDetail | None:
    """Load the selected simulation of an operation.

    A superseded response is ignored and the current detail kept.
    """
    operation = next((op for op in SessionManager.get_operations() if op.project_code == project_code), None)
    if operation is None:
        st.error(f"Opération introuvable : {project_code}")
        return None

    loader = OperationDetailLoader(
        make_client(SessionManager.get_user()),
        get_settings(),
        SessionManager.get_request_tracker(),
    )
    try:
        with st.spinner("Chargement de la simulation…"):
            detail = loader.load(operation, simulation_code)
    except SmoReportingError as e:
        log.error("detail_load_failed", project=project_code, simulation=simulation_code, error=str(e))
        st.error(f"Erreur lors du chargement de la simulation : {e}")
        return SessionManager.get_detail()

    if detail is not None:
        SessionManager.set_detail(detail)
    return SessionManager.get_detail()


def build_export(options: ExportOptions, detail: OperationDetail | None) -> ExportPayload | None:
    """Build an export file for download."""
    user = SessionManager.get_user()
    try:
        payload = OperationExporter(get_settings()).export(options, detail, user.username if user else None)
    except SmoReportingError as e:
        log.error("export_failed", format=options.format, error=str(e))
        st.error(f"Export impossible : {e}")
        return None
    st.toast(f"Export prêt : {payload.filename}")
    return payload
