"""Client for the reporting API.

Every reporting "axis" is an OData-like collection served as
``{"value": [...], "@odata.nextLink": "..."}`` and filtered with a
``$filter`` equality on the project and simulation codes.
"""

from __future__ import annotations

import base64
import uuid
from collections.abc import Callable, Sequence
from typing import Any
from urllib.parse import urljoin

import requests

from src.core.exceptions import ApiError, AuthenticationError, ConfigurationError, PayloadError
from src.core.logging import get_logger
from src.core.settings import AppSettings, get_settings
from src.domain.models.operation import UserSession

log = get_logger(__name__)

# Candidate axis names, tried in order: deployments do not all expose the same ones
OPERATIONS_AXIS = "AXE_MON_SRCaracOp"
TYPOLOGY_AXES: tuple[str, ...] = (
    "AXE_MON_SRTypo",
    "AXE_MON_Typo",
    "AXE_Typologie",
    "AXE_MON_Typologie",
    "Typologie",
)
COST_AXES: tuple[str, ...] = (
    "AXE_MON_SRPrixRev",
    "AXE_MON_PrixRev",
    "AXE_PrixRevient",
    "AXE_MON_PrixRevient",
    "PrixRevient",
)
FINANCING_AXES: tuple[str, ...] = (
    "AXE_MON_SRFinancement",
    "AXE_MON_Financement",
    "AXE_Financement",
    "Financement",
)
PROGRAM_AXES: tuple[str, ...] = (
    "AXE_MON_SRCaracProg",
    "AXE_MON_CaracProg",
)

PageCallback = Callable[[int], None]


def _quote(value: str) -> str:
    """OData string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def build_filter(project_code: str | None = None, simulation_code: str | None = None) -> str | None:
    """Build the ``$filter`` expression for a project and/or simulation."""
    clauses = []
    if project_code:
        clauses.append(f"Code_Projet eq {_quote(project_code)}")
    if simulation_code:
        clauses.append(f"Code_Simulation eq {_quote(simulation_code)}")
    return " and ".join(clauses) or None


def _raise_unless_missing(error: ApiError | PayloadError, tolerated: tuple[int, ...] = (404,)) -> None:
    """Re-raise anything that does not mean "this axis cannot serve the query"."""
    if isinstance(error, ApiError) and error.status_code not in tolerated:
        raise error


def basic_token(username: str, password: str) -> str:
    """Base64 credentials of an HTTP Basic header."""
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


class ReportingClient:
    """Read-only access to the reporting axes."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        session: requests.Session | None = None,
        token: str | None = None,
    ):
        """Initialize the client.

        Args:
            settings: Application settings (API URL, credentials, timeout)
            session: Optional pre-built HTTP session
            token: Basic token of a logged-in user; defaults to the configured credentials
        """
        self.settings = settings or get_settings()
        if not self.settings.api_base_url:
            raise ConfigurationError("SMO_API_BASE_URL is not set")
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Basic {token}"
        else:
            self.session.auth = (self.settings.api_username, self.settings.api_password)

    def axis_url(self, axis: str) -> str:
        return f"{self.settings.axes_url}/{axis}"

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = self.session.get(url, params=params, timeout=self.settings.api_timeout_s)
        except requests.RequestException as e:
            log.error("api_transport_error", url=url, error=str(e))
            raise ApiError(f"Erreur réseau: {e}", url=url) from e

        if response.status_code in (401, 403):
            raise AuthenticationError("Identifiants refusés", status_code=response.status_code, url=url)
        if not 200 <= response.status_code < 300:
            raise ApiError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
                url=url,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise PayloadError(f"Réponse non JSON pour {url}") from e
        if not isinstance(data, dict):
            raise PayloadError(f"Enveloppe JSON inattendue (type={type(data).__name__}) pour {url}")
        return data

    def fetch_all_pages(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        on_page: PageCallback | None = None,
    ) -> list[dict[str, Any]]:
        """Follow ``@odata.nextLink`` until exhaustion.

        Args:
            url: First page URL
            params: Query parameters of the first page
            on_page: Called with the number of rows loaded so far after each page

        Returns:
            Concatenated ``value`` arrays
        """
        rows: list[dict[str, Any]] = []
        next_url: str | None = url
        next_params = params
        while next_url:
            log.debug("fetching_page", url=next_url)
            data = self._get_json(next_url, next_params)
            rows.extend(data.get("value") or [])
            if on_page:
                on_page(len(rows))

            link = data.get("@odata.nextLink")
            # Relative links are served from the API host
            next_url = urljoin(self.settings.api_base_url, link) if link else None
            next_params = None
        return rows

    def fetch_axis(
        self,
        axis: str,
        project_code: str | None = None,
        simulation_code: str | None = None,
        on_page: PageCallback | None = None,
    ) -> list[dict[str, Any]]:
        """All rows of an axis, filtered on project/simulation codes."""
        odata_filter = build_filter(project_code, simulation_code)
        params = {"$filter": odata_filter} if odata_filter else None
        return self.fetch_all_pages(self.axis_url(axis), params, on_page=on_page)

    def fetch_first_available(
        self,
        axes: Sequence[str],
        project_code: str,
        simulation_code: str | None = None,
    ) -> list[dict[str, Any]]:
        """Rows of the first axis that answers.

        Each candidate is tried with the simulation filter, then without it
        (rows filtered here on the simulation code). Only a missing axis (404),
        a rejected filter (400) or an unreadable payload moves on to the next
        candidate.

        Returns:
            Rows, or an empty list when no axis answers

        Raises:
            ApiError: Transport failure or any other non-2xx answer
        """
        for axis in axes:
            try:
                rows = self.fetch_axis(axis, project_code, simulation_code)
            except (ApiError, PayloadError) as e:
                _raise_unless_missing(e, tolerated=(400, 404))
                log.debug("axis_not_found", axis=axis, error=str(e))
                continue
            log.info("axis_found", axis=axis, rows=len(rows))
            return rows

        if simulation_code:
            for axis in axes:
                try:
                    rows = self.fetch_axis(axis, project_code)
                except (ApiError, PayloadError) as e:
                    _raise_unless_missing(e)
                    continue
                filtered = [r for r in rows if r.get("Code_Simulation") == simulation_code]
                log.info("axis_found_unfiltered", axis=axis, rows=len(filtered))
                return filtered

        log.warning("no_axis_available", axes=list(axes), project=project_code, simulation=simulation_code)
        return []

    def fetch_operations(self, on_page: PageCallback | None = None, project_code: str | None = None) -> list[dict[str, Any]]:
        """Operation/simulation characteristic rows."""
        return self.fetch_axis(OPERATIONS_AXIS, project_code, on_page=on_page)

    def authenticate(self, username: str, password: str) -> UserSession:
        """Check credentials against the API and build the session record.

        Raises:
            AuthenticationError: Empty or rejected credentials
            ApiError: API unreachable
        """
        if not username or not password:
            raise AuthenticationError("Identifiant et mot de passe requis")

        token = basic_token(username, password)
        url = self.axis_url(OPERATIONS_AXIS)
        try:
            response = self.session.get(
                url,
                params={"$top": 1},
                auth=(username, password),
                timeout=self.settings.api_timeout_s,
            )
        except requests.RequestException as e:
            raise ApiError(f"Erreur réseau: {e}", url=url) from e

        if response.status_code in (401, 403):
            log.warning("login_rejected", username=username)
            raise AuthenticationError("Identifiants refusés", status_code=response.status_code, url=url)
        if not 200 <= response.status_code < 300:
            raise ApiError(f"HTTP error! status: {response.status_code}", status_code=response.status_code, url=url)

        user_id = str(uuid.uuid5(uuid.NAMESPACE_URL, f"{self.settings.api_base_url}/{username}"))
        log.info("login_succeeded", username=username)
        return UserSession(id=user_id, username=username, token=token)
