"""
State Revenue Pipeline
======================

Normalizes Census-style state/local tax revenue and population extracts
into a per-state, per-tax-type dataset for the most populous states.

Modules:
    numeric          - Lenient numeric coercion
    roster           - Recognized state names
    sources          - CSV / JSON array-of-arrays reading and column aliasing
    categories       - Tax category normalization
    population       - Population normalization and top-N selection
    aggregator       - Per-state revenue aggregation and output payload
    report_generator - JSON payload and normalized CSV export
    pipeline         - End-to-end orchestration
    cli              - Command-line interface
"""

__version__ = "1.0.0"

from state_revenue.aggregator import OutputPayload, RevenueAggregator
from state_revenue.config import PipelineConfig, load_config
from state_revenue.pipeline import run_pipeline
from state_revenue.report_generator import ReportGenerator

__all__ = [
    "OutputPayload",
    "PipelineConfig",
    "ReportGenerator",
    "RevenueAggregator",
    "load_config",
    "run_pipeline",
]
