"""
Population normalization and top-N state selection.

Population is the denominator for every per-capita figure and decides
which states make the comparison set, so an empty result is fatal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from state_revenue.config import ColumnAliases
from state_revenue.errors import InsufficientDataError
from state_revenue.numeric import parse_numeric, parse_year
from state_revenue.roster import is_recognized, normalize_state
from state_revenue.sources import ABSENT, RawRecord, pick_column

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedPopulationRow:
    """Resident population of one recognized state for one year."""

    state: str
    year: int
    population: int

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "year": self.year,
            "population": self.population,
        }


def normalize_population_rows(
    records: Iterable[RawRecord], year: int, columns: ColumnAliases
) -> list[NormalizedPopulationRow]:
    """
    Keep rows for ``year`` and recognized states with a positive population.

    When a state appears more than once the last valid row wins, but the
    state keeps the position of its first appearance.
    """
    state_cols = columns.get("state")
    population_cols = columns.get("population")
    year_cols = columns.optional("year")

    by_state: dict[str, NormalizedPopulationRow] = {}
    for record in records:
        raw_state = pick_column(record, state_cols)
        state = normalize_state(None if raw_state is ABSENT else raw_state)
        if not is_recognized(state):
            logger.debug("Skipping population row for unrecognized state %r", state)
            continue

        raw_year = pick_column(record, year_cols)
        row_year = parse_year(None if raw_year is ABSENT else raw_year, year)
        if row_year != year:
            continue

        raw_population = pick_column(record, population_cols)
        population = round(
            parse_numeric(None if raw_population is ABSENT else raw_population)
        )
        if population <= 0:
            logger.debug("Skipping %s: non-positive population %r", state, raw_population)
            continue

        if state in by_state:
            logger.debug("Duplicate population row for %s; keeping the later value", state)
        by_state[state] = NormalizedPopulationRow(state, row_year, population)

    rows = list(by_state.values())
    logger.info("Normalized %d population rows for %d", len(rows), year)
    return rows


def select_top_states(
    rows: list[NormalizedPopulationRow], top_n: int
) -> list[NormalizedPopulationRow]:
    """
    Rank states by population, largest first, and keep the first ``top_n``.

    Ties keep input order. Raises InsufficientDataError when ``rows`` is
    empty.
    """
    if not rows:
        raise InsufficientDataError(
            "population", "No valid population rows for the target year."
        )
    ranked = sorted(rows, key=lambda r: r.population, reverse=True)
    selected = ranked[:top_n]
    logger.info(
        "Selected %d of %d states by population: %s",
        len(selected), len(rows), ", ".join(r.state for r in selected),
    )
    return selected
