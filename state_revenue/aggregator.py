"""
Revenue aggregation for the selected states.

Joins normalized tax rows against the population-selected comparison set,
sums revenue per state and category, derives totals and per-capita
figures, and assembles the payload handed to the presentation layer.

All revenue figures stay in the source unit: thousands of dollars.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_DOWN, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Optional

from state_revenue.categories import NormalizedTaxRow, category_label
from state_revenue.population import NormalizedPopulationRow

logger = logging.getLogger(__name__)

CURRENCY = "USD"
SCOPE = "state+local"
NOTES = (
    "Nominal dollars.",
    "Top states selected by population for the same year.",
    "Revenue figures are in thousands of dollars.",
)


@dataclass
class AggregatedState:
    """Summed revenue for one selected state."""

    state: str
    population: int
    total_revenue: float = 0.0
    per_capita_total: float = 0.0
    breakdown: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state,
            "population": self.population,
            "totalRevenue": self.total_revenue,
            "perCapitaTotal": self.per_capita_total,
            "breakdown": dict(self.breakdown),
        }


@dataclass(frozen=True)
class TaxType:
    key: str
    label: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "label": self.label}


@dataclass
class OutputPayload:
    """The single artifact consumed by the presentation layer."""

    year: int
    top_n: int
    generated_at: datetime
    tax_types: list[TaxType]
    states: list[AggregatedState]
    currency: str = CURRENCY
    scope: str = SCOPE
    notes: tuple[str, ...] = NOTES

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": {
                "year": self.year,
                "currency": self.currency,
                "scope": self.scope,
                "topN": self.top_n,
                "generatedAt": self.generated_at.isoformat(),
                "notes": list(self.notes),
            },
            "taxTypes": [t.to_dict() for t in self.tax_types],
            "states": [s.to_dict() for s in self.states],
        }


def round_revenue(amount: float) -> int:
    """Round a revenue total to the nearest whole unit, halves toward +inf."""
    rounding = ROUND_HALF_UP if amount >= 0 else ROUND_HALF_DOWN
    return int(Decimal(amount).quantize(Decimal("1"), rounding=rounding))


def per_capita(total_revenue: float, population: int) -> float:
    """Revenue per resident to two decimals; zero when population is not positive."""
    if population <= 0:
        return 0.0
    return round(total_revenue / population, 2)


class RevenueAggregator:
    """
    Accumulates tax rows into per-state totals.

    Category keys are recorded in the order they are first seen across
    all selected states, which fixes the column order of the output.
    """

    def __init__(
        self,
        selected: Iterable[NormalizedPopulationRow],
        labels: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.labels = labels or {}
        self._states: dict[str, AggregatedState] = {
            row.state: AggregatedState(state=row.state, population=row.population)
            for row in selected
        }
        self._category_order: list[str] = []
        self._ignored = 0

    def add(self, row: NormalizedTaxRow) -> None:
        """Fold one tax row in; rows for unselected states are ignored."""
        entry = self._states.get(row.state)
        if entry is None:
            self._ignored += 1
            return

        key = row.tax_category
        if key not in self._category_order:
            self._category_order.append(key)

        amount = row.total
        entry.breakdown[key] = entry.breakdown.get(key, 0.0) + amount
        entry.total_revenue += amount

    def add_all(self, rows: Iterable[NormalizedTaxRow]) -> "RevenueAggregator":
        for row in rows:
            self.add(row)
        return self

    @property
    def tax_types(self) -> list[TaxType]:
        return [
            TaxType(key=key, label=category_label(key, self.labels))
            for key in self._category_order
        ]

    def results(self) -> list[AggregatedState]:
        """Finalized states, highest total revenue first (stable on ties)."""
        finalized: list[AggregatedState] = []
        for entry in self._states.values():
            total = round_revenue(entry.total_revenue)
            finalized.append(
                AggregatedState(
                    state=entry.state,
                    population=entry.population,
                    total_revenue=total,
                    per_capita_total=per_capita(total, entry.population),
                    breakdown=dict(entry.breakdown),
                )
            )
        finalized.sort(key=lambda s: s.total_revenue, reverse=True)
        return finalized

    @property
    def ignored_rows(self) -> int:
        return self._ignored


def build_payload(
    tax_rows: Iterable[NormalizedTaxRow],
    selected: list[NormalizedPopulationRow],
    year: int,
    top_n: int,
    labels: Optional[Mapping[str, str]] = None,
    generated_at: Optional[datetime] = None,
) -> OutputPayload:
    """Aggregate ``tax_rows`` for the ``selected`` states into an OutputPayload."""
    aggregator = RevenueAggregator(selected, labels).add_all(tax_rows)
    states = aggregator.results()
    logger.info(
        "Aggregated %d states across %d tax types (%d rows outside the selection)",
        len(states), len(aggregator.tax_types), aggregator.ignored_rows,
    )
    return OutputPayload(
        year=year,
        top_n=top_n,
        generated_at=generated_at or datetime.now(timezone.utc),
        tax_types=aggregator.tax_types,
        states=states,
    )
