"""Tests for population normalization and top-N selection."""

import pytest

from state_revenue.config import POPULATION_FIELDS, ColumnAliases
from state_revenue.errors import InsufficientDataError
from state_revenue.population import (
    NormalizedPopulationRow,
    normalize_population_rows,
    select_top_states,
)


@pytest.fixture
def columns() -> ColumnAliases:
    return ColumnAliases.from_dict(
        "population",
        {"state": ["NAME", "state"], "year": ["year"], "population": ["population"]},
        POPULATION_FIELDS,
    )


def _row(state, population, year="2023"):
    return {"NAME": state, "year": year, "population": population}


# ── Normalization ────────────────────────────────────────────────────


def test_filters_year_roster_and_non_positive(columns):
    rows = normalize_population_rows(
        [
            _row("Texas", "30,503,301"),
            _row("Puerto Rico", "3,205,691"),
            _row("United States", "334,914,895"),
            _row("Ohio", "11,785,935", year="2022"),
            _row("Iowa", "0"),
            _row("Utah", "(10)"),
            _row("Maine", "unknown"),
        ],
        2023,
        columns,
    )
    assert rows == [NormalizedPopulationRow("Texas", 2023, 30503301)]


def test_last_valid_value_wins(columns):
    rows = normalize_population_rows(
        [_row("Texas", "100"), _row("Ohio", "50"), _row("Texas", "300"), _row("Texas", "-1")],
        2023,
        columns,
    )
    assert [(r.state, r.population) for r in rows] == [("Texas", 300), ("Ohio", 50)]


def test_missing_year_column_uses_target(columns):
    rows = normalize_population_rows(
        [{"state": "Kansas", "population": 2940546}], 2023, columns
    )
    assert rows == [NormalizedPopulationRow("Kansas", 2023, 2940546)]


def test_no_surviving_rows_is_empty_list(columns):
    assert normalize_population_rows([_row("Guam", "150000")], 2023, columns) == []


# ── Ranking ──────────────────────────────────────────────────────────


def test_selects_most_populous_in_order():
    rows = [
        NormalizedPopulationRow("Alaska", 2023, 100),
        NormalizedPopulationRow("Texas", 2023, 300),
        NormalizedPopulationRow("Ohio", 2023, 200),
    ]
    selected = select_top_states(rows, 2)
    assert [r.state for r in selected] == ["Texas", "Ohio"]


def test_ties_keep_input_order():
    rows = [
        NormalizedPopulationRow("Iowa", 2023, 500),
        NormalizedPopulationRow("Utah", 2023, 900),
        NormalizedPopulationRow("Idaho", 2023, 500),
        NormalizedPopulationRow("Maine", 2023, 500),
    ]
    selected = select_top_states(rows, 3)
    assert [r.state for r in selected] == ["Utah", "Iowa", "Idaho"]


def test_top_n_larger_than_available():
    rows = [NormalizedPopulationRow("Ohio", 2023, 10)]
    assert len(select_top_states(rows, 10)) == 1


def test_empty_rows_raise_insufficient_data():
    with pytest.raises(InsufficientDataError, match="Population"):
        select_top_states([], 5)
