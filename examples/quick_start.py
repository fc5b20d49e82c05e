#!/usr/bin/env python3
"""
Quick Start Example
===================

Normalizes a handful of Census API style tax rows and population rows in
memory, selects the two most populous states and prints the aggregated
revenue.

Usage:
    python examples/quick_start.py
"""

from state_revenue.aggregator import build_payload
from state_revenue.categories import normalize_code_rows
from state_revenue.config import ColumnAliases
from state_revenue.population import normalize_population_rows, select_top_states
from state_revenue.report_generator import ReportGenerator
from state_revenue.sources import parse_rows

TAX_JSON = """[
  ["NAME", "YEAR", "AGG_DESC", "GOVTYPE", "AMOUNT"],
  ["Texas", "2023", "LF0009", "002", "1,000"],
  ["Texas", "2023", "LF0009", "003", "500"],
  ["Texas", "2023", "LF0011", "002", "49,000"],
  ["Ohio", "2023", "LF0022", "002", "12,000"],
  ["Vermont", "2023", "LF0009", "003", "1,800"]
]"""

POPULATION_CSV = """NAME,year,population
Texas,2023,"30,503,301"
Ohio,2023,"11,785,935"
Vermont,2023,"647,464"
"""


def main() -> None:
    year = 2023

    tax_rows = normalize_code_rows(parse_rows(TAX_JSON, "tax"), year)
    columns = ColumnAliases.from_dict(
        "population",
        {"state": ["NAME"], "year": ["year"], "population": ["population"]},
        ("state", "year", "population"),
    )
    population_rows = normalize_population_rows(
        parse_rows(POPULATION_CSV, "population"), year, columns
    )

    # Keep the two most populous states
    selected = select_top_states(population_rows, top_n=2)
    payload = build_payload(tax_rows, selected, year=year, top_n=2)

    print(ReportGenerator().format_text(payload))

    print("--- Texas breakdown ($K) ---")
    texas = next(s for s in payload.states if s.state == "Texas")
    for key, amount in texas.breakdown.items():
        print(f"{key:<16} {amount:>12,.0f}")


if __name__ == "__main__":
    main()
