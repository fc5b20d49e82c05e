"""
Output writers.

Produces:
- The JSON payload for the presentation layer (whole-file replace)
- Normalized tax and population tables as CSV
- A plain-text summary for console output
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd

from state_revenue.aggregator import OutputPayload
from state_revenue.categories import NormalizedTaxRow
from state_revenue.population import NormalizedPopulationRow

logger = logging.getLogger(__name__)

TAX_CSV_COLUMNS = [
    "state",
    "year",
    "tax_type",
    "state_tax_revenue",
    "local_tax_revenue",
]
POPULATION_CSV_COLUMNS = ["state", "year", "population"]


def _target_mode(path: Path) -> int:
    """Keep an existing file's permissions; new files follow the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _replace_file(path: Path, text: str) -> None:
    """Write ``text`` beside ``path`` and move it into place in one step."""
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _target_mode(path)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class ReportGenerator:
    """
    Serializes pipeline results.

    Every writer renders its full content in memory before touching the
    destination, so a failure never leaves a truncated file behind.
    """

    # ------------------------------------------------------------------
    # JSON payload
    # ------------------------------------------------------------------

    def to_json(
        self,
        payload: OutputPayload,
        path: Optional[str | Path] = None,
    ) -> str:
        """Render the payload as JSON; also write it when ``path`` is given."""
        json_str = json.dumps(payload.to_dict(), indent=2)

        if path is not None:
            _replace_file(Path(path), json_str + "\n")
            logger.info("Wrote %d states to %s", len(payload.states), path)

        return json_str

    # ------------------------------------------------------------------
    # Normalized tables
    # ------------------------------------------------------------------

    def tax_frame(self, rows: Iterable[NormalizedTaxRow]) -> pd.DataFrame:
        return pd.DataFrame([r.to_dict() for r in rows], columns=TAX_CSV_COLUMNS)

    def population_frame(
        self, rows: Iterable[NormalizedPopulationRow]
    ) -> pd.DataFrame:
        return pd.DataFrame(
            [r.to_dict() for r in rows], columns=POPULATION_CSV_COLUMNS
        )

    def export_normalized_tax(
        self, rows: Iterable[NormalizedTaxRow], path: str | Path
    ) -> str:
        """Export normalized tax rows to CSV. Returns the CSV string."""
        csv_str = self.tax_frame(rows).to_csv(index=False, lineterminator="\n")
        _replace_file(Path(path), csv_str)
        logger.info("Wrote normalized tax rows to %s", path)
        return csv_str

    def export_normalized_population(
        self, rows: Iterable[NormalizedPopulationRow], path: str | Path
    ) -> str:
        """Export normalized population rows to CSV. Returns the CSV string."""
        csv_str = self.population_frame(rows).to_csv(
            index=False, lineterminator="\n"
        )
        _replace_file(Path(path), csv_str)
        logger.info("Wrote normalized population rows to %s", path)
        return csv_str

    # ------------------------------------------------------------------
    # Console-formatted text output
    # ------------------------------------------------------------------

    def format_text(self, payload: OutputPayload) -> str:
        """Format a payload as human-readable text."""
        data: dict[str, Any] = payload.to_dict()
        meta = data["metadata"]
        lines: list[str] = []
        lines.append(f"{'=' * 60}")
        lines.append(f"  State Tax Revenue {meta['year']} (top {meta['topN']})")
        lines.append(f"  Generated: {meta['generatedAt']}")
        lines.append(f"{'=' * 60}")
        lines.append("")

        lines.append("TAX TYPES")
        lines.append("-" * 40)
        for t in data["taxTypes"]:
            lines.append(f"  {t['key']}: {t['label']}")
        lines.append("")

        lines.append("STATES (thousands of dollars)")
        lines.append("-" * 40)
        for s in data["states"]:
            lines.append(
                f"  {s['state']:<16} ${s['totalRevenue']:>14,.0f} | "
                f"pop {s['population']:>12,} | "
                f"${s['perCapitaTotal']:>8,.2f} per capita"
            )
        lines.append("")

        lines.append("NOTES")
        lines.append("-" * 40)
        for note in meta["notes"]:
            lines.append(f"  * {note}")
        lines.append("")

        return "\n".join(lines)
