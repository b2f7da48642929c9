"""Result filtering for the results table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from domain.models import ComparisonResult, MatchStatus, Severity


@dataclass(frozen=True)
class ResultFilters:
    """Empty collections mean "no constraint"."""
    statuses: FrozenSet[MatchStatus] = field(default_factory=frozenset)
    severities: FrozenSet[Severity] = field(default_factory=frozenset)
    search: str = ""
    colors: FrozenSet[str] = field(default_factory=frozenset)
    sizes: FrozenSet[str] = field(default_factory=frozenset)
    suppliers: FrozenSet[str] = field(default_factory=frozenset)
    price_range: Optional[Tuple[float, float]] = None
    currency: str = "ALL"  # "ALL" | "EUR" | "GBP"


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in value.lower()


def _matches_search(result: ComparisonResult, needle: str) -> bool:
    entry = result.excel_data
    if needle in result.barcode.lower() or _contains(result.discrepancy, needle):
        return True
    if entry is None:
        return False
    return any(
        _contains(value, needle)
        for value in (entry.description, entry.supplier, entry.color, entry.size, entry.product_reference)
    )


def _keep(result: ComparisonResult, filters: ResultFilters) -> bool:
    entry = result.excel_data

    if filters.statuses and result.status not in filters.statuses:
        return False
    if filters.severities and result.severity not in filters.severities:
        return False

    if filters.colors and (entry is None or entry.color not in filters.colors):
        return False
    if filters.sizes and (entry is None or entry.size not in filters.sizes):
        return False
    if filters.suppliers and (entry is None or entry.supplier not in filters.suppliers):
        return False

    if filters.price_range is not None:
        low, high = filters.price_range
        price = entry and (entry.price_euro or entry.price)
        if not price or price < low or price > high:
            return False

    if filters.currency == "EUR" and not (entry and entry.price_euro):
        return False
    if filters.currency == "GBP" and not (entry and entry.price_pound):
        return False

    needle = filters.search.strip().lower()
    if needle and not _matches_search(result, needle):
        return False

    return True


def filter_results(results: Sequence[ComparisonResult], filters: ResultFilters) -> List[ComparisonResult]:
    """Results satisfying every active filter, in their original order."""
    return [r for r in results if _keep(r, filters)]


def distinct_values(results: Iterable[ComparisonResult], attribute: str) -> List[str]:
    """Sorted distinct non-empty catalog values (color, size, supplier) for filter widgets."""
    values = {
        getattr(r.excel_data, attribute)
        for r in results
        if r.excel_data is not None and getattr(r.excel_data, attribute)
    }
    return sorted(values)
