"""
Tax category normalization.

Turns raw tax rows into one ``NormalizedTaxRow`` per (state, year,
category), with state-level and local-level amounts kept apart.

Two input shapes are recognized:
- Statistical-code rows (Census API): an ``AMOUNT``, an ``AGG_DESC`` tax
  code and a ``GOVTYPE`` level indicator per row. Codes map to a fixed set
  of categories; unknown codes are dropped.
- Pre-normalized rows: free-text tax type plus separate state and local
  amount columns, found through the configured column aliases.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from state_revenue.config import ColumnAliases, PipelineConfig
from state_revenue.numeric import parse_numeric, parse_year
from state_revenue.roster import is_recognized, normalize_state
from state_revenue.sources import ABSENT, RawRecord, has_columns, pick_column

logger = logging.getLogger(__name__)


class TaxCategory(Enum):
    """Canonical revenue classes for statistical-code sources."""

    INDIVIDUAL_INCOME = "individual_income"
    CORPORATE_INCOME = "corporate_income"
    GENERAL_SALES = "general_sales"
    SELECTIVE_SALES = "selective_sales"
    PROPERTY = "property"
    LICENSES = "licenses"
    OTHER = "other"


class TaxShape(Enum):
    STATISTICAL_CODE = "statistical_code"
    PRE_NORMALIZED = "pre_normalized"


class GovernmentLevel(Enum):
    STATE = "002"
    LOCAL = "003"


# ---------------------------------------------------------------------------
# Fixed lookups
# ---------------------------------------------------------------------------

CODE_COLUMN = "AGG_DESC"
LEVEL_COLUMN = "GOVTYPE"
AMOUNT_COLUMN = "AMOUNT"
CODE_STATE_COLUMNS = ("NAME", "state", "State")
CODE_YEAR_COLUMNS = ("YEAR", "year")

TAX_CODE_CATEGORIES: Mapping[str, str] = MappingProxyType(
    {
        "LF0022": TaxCategory.INDIVIDUAL_INCOME.value,
        "LF0023": TaxCategory.CORPORATE_INCOME.value,
        "LF0011": TaxCategory.GENERAL_SALES.value,
        "LF0012": TaxCategory.SELECTIVE_SALES.value,
        "LF0009": TaxCategory.PROPERTY.value,
        "LF0033": TaxCategory.OTHER.value,
    }
)

# Motor vehicle, occupation/business, hunting and other license taxes.
LICENSE_CODES: frozenset[str] = frozenset(
    f"LF00{n}" for n in range(24, 33)
)

CATEGORY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        TaxCategory.INDIVIDUAL_INCOME.value: "Individual income tax",
        TaxCategory.CORPORATE_INCOME.value: "Corporate income tax",
        TaxCategory.GENERAL_SALES.value: "General sales tax",
        TaxCategory.SELECTIVE_SALES.value: "Selective sales tax",
        TaxCategory.PROPERTY.value: "Property tax",
        TaxCategory.LICENSES.value: "License taxes",
        TaxCategory.OTHER.value: "Other taxes",
    }
)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


@dataclass
class NormalizedTaxRow:
    """Revenue for one state, year and category, in thousands of dollars."""

    state: str
    year: int
    tax_category: str
    state_amount: float = 0.0
    local_amount: float = 0.0

    @property
    def total(self) -> float:
        return self.state_amount + self.local_amount

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "year": self.year,
            "tax_type": self.tax_category,
            "state_tax_revenue": self.state_amount,
            "local_tax_revenue": self.local_amount,
        }


# ---------------------------------------------------------------------------
# Category keys
# ---------------------------------------------------------------------------


def slugify(label: str) -> str:
    """'General Sales & Gross Receipts' -> 'general_sales_gross_receipts'."""
    return _SLUG_RE.sub("_", label.strip().lower()).strip("_")


def category_key(label: str, overrides: Optional[Mapping[str, str]] = None) -> str:
    """An explicit label override wins; otherwise the slug of the label."""
    if overrides and label in overrides:
        return overrides[label]
    return slugify(label)


def category_label(key: str, labels: Optional[Mapping[str, str]] = None) -> str:
    """Display label for a category key, falling back to the key itself."""
    if labels and key in labels:
        return labels[key]
    return CATEGORY_LABELS.get(key, key)


def code_category(
    code: str,
    code_map: Mapping[str, str] = TAX_CODE_CATEGORIES,
    license_codes: Iterable[str] = LICENSE_CODES,
) -> Optional[str]:
    """Map a statistical tax code to its category key, or None if unknown."""
    category = code_map.get(code)
    if category is None and code in license_codes:
        category = TaxCategory.LICENSES.value
    return category


# ---------------------------------------------------------------------------
# Shape detection
# ---------------------------------------------------------------------------


def detect_tax_shape(records: list[RawRecord]) -> TaxShape:
    """Statistical-code shape needs code, level and amount columns on the first row."""
    if records and has_columns(
        records[0], (CODE_COLUMN, LEVEL_COLUMN, AMOUNT_COLUMN)
    ):
        return TaxShape.STATISTICAL_CODE
    return TaxShape.PRE_NORMALIZED


# ---------------------------------------------------------------------------
# Normalizers
# ---------------------------------------------------------------------------


def normalize_code_rows(
    records: Iterable[RawRecord],
    year: int,
    code_map: Mapping[str, str] = TAX_CODE_CATEGORIES,
    license_codes: Iterable[str] = LICENSE_CODES,
) -> list[NormalizedTaxRow]:
    """
    Bucket statistical-code rows by (state, year, category).

    Amounts add into the state or local side according to the level
    indicator. Buckets whose combined amount is exactly zero are dropped.
    """
    license_codes = frozenset(license_codes)
    buckets: dict[tuple[str, int, str], NormalizedTaxRow] = {}
    skipped = 0

    for record in records:
        state = normalize_state(_present(pick_column(record, CODE_STATE_COLUMNS)))
        if not is_recognized(state):
            skipped += 1
            continue

        row_year = parse_year(_present(pick_column(record, CODE_YEAR_COLUMNS)), year)
        if row_year != year:
            skipped += 1
            continue

        try:
            level = GovernmentLevel(str(record.get(LEVEL_COLUMN, "")).strip())
        except ValueError:
            skipped += 1
            continue

        code = str(record.get(CODE_COLUMN) or "").strip()
        category = code_category(code, code_map, license_codes)
        if category is None:
            skipped += 1
            continue

        key = (state, row_year, category)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = NormalizedTaxRow(state=state, year=row_year, tax_category=category)
            buckets[key] = bucket

        amount = parse_numeric(record.get(AMOUNT_COLUMN))
        if level is GovernmentLevel.STATE:
            bucket.state_amount += amount
        else:
            bucket.local_amount += amount

    rows = [row for row in buckets.values() if row.total != 0]
    logger.debug(
        "Statistical-code rows: %d buckets kept, %d zero buckets dropped, %d rows skipped",
        len(rows), len(buckets) - len(rows), skipped,
    )
    return rows


def normalize_labeled_rows(
    records: Iterable[RawRecord],
    year: int,
    columns: ColumnAliases,
    type_map: Optional[Mapping[str, str]] = None,
) -> list[NormalizedTaxRow]:
    """Normalize pre-normalized rows, merging duplicates by addition."""
    state_cols = columns.get("state")
    type_cols = columns.get("tax_type")
    state_amount_cols = columns.get("state_amount")
    local_amount_cols = columns.get("local_amount")
    year_cols = columns.optional("year")

    buckets: dict[tuple[str, int, str], NormalizedTaxRow] = {}
    skipped = 0

    for record in records:
        state = normalize_state(_present(pick_column(record, state_cols)))
        if not is_recognized(state):
            skipped += 1
            continue

        row_year = parse_year(_present(pick_column(record, year_cols)), year)
        if row_year != year:
            skipped += 1
            continue

        label = str(_present(pick_column(record, type_cols)) or "").strip()
        if not label:
            skipped += 1
            continue
        category = category_key(label, type_map)

        key = (state, row_year, category)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = NormalizedTaxRow(state=state, year=row_year, tax_category=category)
            buckets[key] = bucket

        bucket.state_amount += parse_numeric(
            _present(pick_column(record, state_amount_cols))
        )
        bucket.local_amount += parse_numeric(
            _present(pick_column(record, local_amount_cols))
        )

    logger.debug(
        "Labeled rows: %d buckets, %d rows skipped", len(buckets), skipped
    )
    return list(buckets.values())


def normalize_tax_rows(
    records: list[RawRecord], config: PipelineConfig
) -> list[NormalizedTaxRow]:
    """Detect the input shape and normalize accordingly."""
    shape = detect_tax_shape(records)
    logger.info("Tax source shape: %s", shape.value)

    if shape is TaxShape.STATISTICAL_CODE:
        return normalize_code_rows(
            records,
            config.year,
            config.tax_code_map if config.tax_code_map is not None else TAX_CODE_CATEGORIES,
            config.license_codes if config.license_codes is not None else LICENSE_CODES,
        )
    return normalize_labeled_rows(
        records, config.year, config.tax_columns, config.tax_type_map
    )


def _present(value: Any) -> Any:
    """Turn the ABSENT marker into None for the coercion helpers."""
    return None if value is ABSENT else value
