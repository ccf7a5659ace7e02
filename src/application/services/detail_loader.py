"""Operation detail loader.

Fetches the typology, cost, financing and program axes of one simulation
concurrently and turns them into an ``OperationDetail``. Each load is
tagged with a request token; a response whose token is no longer the
latest for its operation is discarded.
"""

from __future__ import annotations

import concurrent.futures
import itertools
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from src.application.services.presentation import (
    BudgetView,
    CompositionView,
    FinancingView,
    build_budget_view,
    build_composition_view,
    build_financing_view,
)
from src.application.services.reporting_client import (
    COST_AXES,
    FINANCING_AXES,
    PROGRAM_AXES,
    TYPOLOGY_AXES,
    ReportingClient,
)
from src.core.exceptions import ApiError, SmoReportingError
from src.core.logging import get_logger, operation_context
from src.core.settings import AppSettings, get_settings
from src.domain.calculator.aggregation import TypologyTotals, compute_typology_totals
from src.domain.calculator.normalizer import (
    build_program_map,
    normalize_cost_row,
    normalize_financing,
    normalize_program_info,
    normalize_rows,
    normalize_typology_row,
)
from src.domain.models.operation import OperationRecord, Simulation
from src.domain.models.rows import CostRow, FinancingRow, ProgramInfo, TypologyRow

log = get_logger(__name__)


@dataclass(frozen=True)
class RequestToken:
    """Identifies one detail request."""

    operation_id: str
    simulation_code: str | None
    sequence: int


class RequestTracker:
    """Issues request tokens and remembers the latest one per operation.

    Thread-safe: tokens may be checked from worker threads.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest: dict[str, RequestToken] = {}
        self._lock = threading.Lock()

    def issue(self, operation_id: str, simulation_code: str | None) -> RequestToken:
        """New token for an operation; every older token of it becomes stale."""
        with self._lock:
            token = RequestToken(operation_id, simulation_code, next(self._counter))
            self._latest[operation_id] = token
            return token

    def is_current(self, token: RequestToken) -> bool:
        with self._lock:
            return self._latest.get(token.operation_id) == token

    def latest(self, operation_id: str) -> RequestToken | None:
        with self._lock:
            return self._latest.get(operation_id)


@dataclass
class OperationDetail:
    """Normalized rows of one simulation and the views derived from them.

    Rows are replaced wholesale by a new load, never mutated in place.
    """

    operation: OperationRecord
    simulation: Simulation | None
    typology: tuple[TypologyRow, ...] = ()
    costs: tuple[CostRow, ...] = ()
    financing: tuple[FinancingRow, ...] = ()
    programs: dict[str, ProgramInfo] = field(default_factory=dict)

    @property
    def simulation_code(self) -> str | None:
        return self.simulation.code if self.simulation else None

    @cached_property
    def typology_totals(self) -> TypologyTotals:
        return compute_typology_totals(self.typology)

    @cached_property
    def composition(self) -> CompositionView:
        return build_composition_view(self.typology, self.programs)

    @cached_property
    def budget(self) -> BudgetView:
        return build_budget_view(self.costs, self.typology_totals)

    @cached_property
    def financing_plan(self) -> FinancingView:
        return build_financing_view(self.financing, self.typology_totals)

    @property
    def is_empty(self) -> bool:
        return not (self.typology or self.costs or self.financing)


class OperationDetailLoader:
    """Loads operation details, discarding superseded responses."""

    def __init__(
        self,
        client: ReportingClient,
        settings: AppSettings | None = None,
        tracker: RequestTracker | None = None,
    ):
        """Initialize the loader.

        Args:
            client: Reporting API client
            settings: Application settings (worker count)
            tracker: Shared tracker; the UI keeps one across reruns
        """
        self.client = client
        self.settings = settings or get_settings()
        self.tracker = tracker or RequestTracker()

    def _fetch_all(self, project_code: str, simulation_code: str | None) -> dict[str, list[dict[str, Any]]]:
        """Fetch the four axes concurrently; the first failure cancels the rest."""
        requests_by_name: dict[str, Sequence[str]] = {
            "typology": TYPOLOGY_AXES,
            "costs": COST_AXES,
            "financing": FINANCING_AXES,
            "programs": PROGRAM_AXES,
        }
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=self.settings.max_workers)
        try:
            futures = {
                executor.submit(self.client.fetch_first_available, axes, project_code, simulation_code): name
                for name, axes in requests_by_name.items()
            }
            done, pending = concurrent.futures.wait(futures, return_when=concurrent.futures.FIRST_EXCEPTION)
            for future in done:
                error = future.exception()
                if error is None:
                    continue
                for other in pending:
                    other.cancel()
                log.error("detail_fetch_failed", axis_group=futures[future], error=str(error))
                if isinstance(error, SmoReportingError):
                    raise error
                raise ApiError(f"Chargement impossible ({futures[future]}): {error}") from error
            return {futures[f]: f.result() for f in done}
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def load(
        self,
        operation: OperationRecord,
        simulation: Simulation | str | None = None,
        on_token: Callable[[RequestToken], None] | None = None,
    ) -> OperationDetail | None:
        """Load the detail of an operation for one simulation.

        Args:
            operation: Selected operation
            simulation: Simulation or its code; defaults to the most recent one
            on_token: Called with the issued token before fetching

        Returns:
            The detail, or None when a newer request superseded this one

        Raises:
            ApiError: A fetch failed
        """
        if isinstance(simulation, str):
            simulation = operation.get_simulation(simulation)
        if simulation is None:
            simulation = operation.default_simulation
        simulation_code = simulation.code if simulation else None

        token = self.tracker.issue(operation.project_code, simulation_code)
        if on_token:
            on_token(token)

        with operation_context(operation.project_code, simulation_code):
            log.info("detail_load_started", token=token.sequence)
            raw = self._fetch_all(operation.project_code, simulation_code)
            if not self.tracker.is_current(token):
                log.info("stale_response_discarded", token=token.sequence)
                return None
            detail = self._build_detail(operation, simulation, raw)
            log.info(
                "detail_loaded",
                typology=len(detail.typology),
                costs=len(detail.costs),
                financing=len(detail.financing),
            )
        return detail

    @staticmethod
    def _build_detail(
        operation: OperationRecord, simulation: Simulation | None, raw: dict[str, list[dict[str, Any]]]
    ) -> OperationDetail:
        programs = build_program_map(normalize_rows(raw["programs"], normalize_program_info))
        return OperationDetail(
            operation=operation,
            simulation=simulation,
            typology=tuple(normalize_rows(raw["typology"], normalize_typology_row)),
            costs=tuple(normalize_rows(raw["costs"], normalize_cost_row)),
            financing=tuple(normalize_financing(raw["financing"])),
            programs=programs,
        )
