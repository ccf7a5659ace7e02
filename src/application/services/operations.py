"""Operation catalogue.

Builds operations from the operation-characteristics axis and provides
the explorer's filtering, search, sorting and pagination.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.core.exceptions import InvalidParameterError
from src.core.logging import get_logger
from src.domain.calculator.normalizer import normalize_simulation, to_text
from src.domain.models.operation import OperationRecord, Simulation

log = get_logger(__name__)


@dataclass
class OperationFilters:
    """Explorer filters. Empty values do not filter."""

    commune: str | None = None
    construction_nature: str | None = None
    budget_owner: str | None = None

    def is_empty(self) -> bool:
        return not (self.commune or self.construction_nature or self.budget_owner)


@dataclass
class Page:
    """One page of operations."""

    items: list[OperationRecord]
    page: int
    total_pages: int
    total_items: int


@dataclass
class FilterOptions:
    """Distinct values offered by the filter selectors."""

    communes: list[str] = field(default_factory=list)
    construction_natures: list[str] = field(default_factory=list)
    budget_owners: list[str] = field(default_factory=list)


def _sort_simulations(simulations: Iterable[Simulation]) -> tuple[Simulation, ...]:
    """Most recently modified first; undated simulations last."""
    return tuple(
        sorted(
            simulations,
            key=lambda s: s.modified_at or datetime.min,
            reverse=True,
        )
    )


def build_operations(raw_rows: Sequence[Mapping[str, Any]]) -> list[OperationRecord]:
    """Group characteristic rows sharing an operation label.

    Args:
        raw_rows: Records of the operation-characteristics axis

    Returns:
        Operations in first-seen label order, simulations deduplicated by
        code and sorted by modification date (newest first)
    """
    heads: dict[str, Mapping[str, Any]] = {}
    simulations: dict[str, dict[str, Simulation]] = {}

    for raw in raw_rows:
        label = to_text(raw.get("LibelleOperation"), to_text(raw.get("Code_Projet")))
        if not label:
            continue
        heads.setdefault(label, raw)
        per_label = simulations.setdefault(label, {})
        code = to_text(raw.get("Code_Simulation"))
        if code and code not in per_label:
            per_label[code] = normalize_simulation(raw)

    operations = [
        OperationRecord(
            project_code=to_text(head.get("Code_Projet")),
            label=label,
            address=to_text(head.get("AdresseOperation")),
            commune=to_text(head.get("Commune")),
            postal_code=to_text(head.get("CodePostal")),
            construction_nature=to_text(head.get("NatureConstruction")) or None,
            budget_owner=to_text(head.get("RespBudget")) or None,
            simulations=_sort_simulations(simulations[label].values()),
        )
        for label, head in heads.items()
    ]
    log.info("operations_built", rows=len(raw_rows), operations=len(operations))
    return operations


def load_operations(client: Any, on_progress: Callable[[int], None] | None = None) -> list[OperationRecord]:
    """Fetch every operation row page by page and build the operations.

    Args:
        client: ReportingClient
        on_progress: Called with the number of rows loaded after each page
    """
    raw_rows = client.fetch_operations(on_page=on_progress)
    return build_operations(raw_rows)


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


def filter_operations(operations: Iterable[OperationRecord], filters: OperationFilters) -> list[OperationRecord]:
    """Apply the explorer filters (commune is a substring match)."""
    result = []
    for op in operations:
        if filters.commune and not _contains(op.commune, filters.commune):
            continue
        if filters.construction_nature and op.construction_nature != filters.construction_nature:
            continue
        if filters.budget_owner and op.budget_owner != filters.budget_owner:
            continue
        result.append(op)
    return result


def search_operations(operations: Iterable[OperationRecord], term: str | None) -> list[OperationRecord]:
    """Case-insensitive search on label, address, commune and budget owner."""
    operations = list(operations)
    term = (term or "").strip()
    if not term:
        return operations
    return [
        op
        for op in operations
        if _contains(op.label, term)
        or _contains(op.address, term)
        or _contains(op.commune, term)
        or _contains(op.budget_owner, term)
    ]


def sort_by_latest_modification(operations: Iterable[OperationRecord]) -> list[OperationRecord]:
    """Operations whose simulations changed most recently come first."""
    return sorted(operations, key=lambda op: op.latest_modification or datetime.min, reverse=True)


def paginate(operations: Sequence[OperationRecord], page: int, page_size: int) -> Page:
    """Slice one page; out-of-range page numbers are clamped."""
    if page_size < 1:
        raise InvalidParameterError("page_size", page_size, "must be at least 1")
    total_items = len(operations)
    total_pages = max(1, math.ceil(total_items / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return Page(
        items=list(operations[start:start + page_size]),
        page=page,
        total_pages=total_pages,
        total_items=total_items,
    )


def filter_options(operations: Iterable[OperationRecord]) -> FilterOptions:
    """Distinct, sorted, non-empty values for the filter selectors."""
    operations = list(operations)
    return FilterOptions(
        communes=sorted({op.commune for op in operations if op.commune}),
        construction_natures=sorted({op.construction_nature for op in operations if op.construction_nature}),
        budget_owners=sorted({op.budget_owner for op in operations if op.budget_owner}),
    )


def select_simulation(operation: OperationRecord, code: str | None = None) -> Simulation | None:
    """The chosen simulation, or the most recently modified one."""
    if code:
        chosen = operation.get_simulation(code)
        if chosen is not None:
            return chosen
    return operation.default_simulation
