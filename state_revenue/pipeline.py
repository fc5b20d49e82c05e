"""
End-to-end pipeline: read sources, normalize, select, aggregate, write.

Each stage fully consumes the previous stage's output. The first fatal
error aborts the run before anything is written, so the previous output
file survives a failed run untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from state_revenue.aggregator import OutputPayload, build_payload
from state_revenue.categories import NormalizedTaxRow, normalize_tax_rows
from state_revenue.config import PipelineConfig
from state_revenue.errors import InsufficientDataError
from state_revenue.population import (
    NormalizedPopulationRow,
    normalize_population_rows,
    select_top_states,
)
from state_revenue.report_generator import ReportGenerator
from state_revenue.sources import read_source_rows

logger = logging.getLogger(__name__)


@dataclass
class NormalizedSources:
    tax_rows: list[NormalizedTaxRow]
    population_rows: list[NormalizedPopulationRow]


@dataclass
class PipelineResult:
    payload: OutputPayload
    output_path: Optional[Path]
    sources: NormalizedSources


def normalize_sources(config: PipelineConfig) -> NormalizedSources:
    """Read both input files and normalize them for ``config.year``."""
    tax_records = read_source_rows(config.require_path("tax_path"), "tax source")
    population_records = read_source_rows(
        config.require_path("population_path"), "population source"
    )

    tax_rows = normalize_tax_rows(tax_records, config)
    if not tax_rows:
        raise InsufficientDataError(
            "tax",
            f"Check columns.tax aliases and the target year {config.year}.",
        )
    logger.info("Normalized %d tax rows", len(tax_rows))

    population_rows = normalize_population_rows(
        population_records, config.year, config.population_columns
    )
    if not population_rows:
        raise InsufficientDataError(
            "population",
            f"Check columns.population aliases and the target year {config.year}.",
        )

    return NormalizedSources(tax_rows=tax_rows, population_rows=population_rows)


def write_normalized(
    config: PipelineConfig,
    sources: NormalizedSources,
    generator: Optional[ReportGenerator] = None,
) -> tuple[Path, Path]:
    """Persist the normalized intermediate tables as CSV."""
    generator = generator or ReportGenerator()
    tax_path = config.require_path("normalized_tax_path")
    population_path = config.require_path("normalized_population_path")
    generator.export_normalized_tax(sources.tax_rows, tax_path)
    generator.export_normalized_population(sources.population_rows, population_path)
    return tax_path, population_path


def run_pipeline(
    config: PipelineConfig,
    output_path: Optional[str | Path] = None,
    write: bool = True,
    generated_at: Optional[datetime] = None,
) -> PipelineResult:
    """
    Build the output payload and, unless ``write`` is False, write it.

    ``output_path`` overrides ``output.json`` from the config.
    """
    sources = normalize_sources(config)
    selected = select_top_states(sources.population_rows, config.top_n)

    payload = build_payload(
        sources.tax_rows,
        selected,
        year=config.year,
        top_n=config.top_n,
        labels=config.tax_type_labels,
        generated_at=generated_at,
    )

    destination: Optional[Path] = None
    if write:
        destination = (
            Path(output_path)
            if output_path is not None
            else config.require_path("output_path")
        )
        ReportGenerator().to_json(payload, destination)

    return PipelineResult(payload=payload, output_path=destination, sources=sources)
