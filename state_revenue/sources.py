"""
Source file reading and column aliasing.

Two on-disk formats are accepted:
- Census-API style JSON: an array of arrays, the first row holding the
  header labels.
- Delimited text (CSV) with a header row. Quoted fields may contain the
  delimiter or newlines.

Both produce the same thing: a list of records mapping column name to raw
cell value. Column names differ from vendor to vendor, so logical fields
are looked up through ordered alias lists with ``pick_column``.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from state_revenue.errors import EmptySourceError, MissingInputError, ParseError

logger = logging.getLogger(__name__)

RawRecord = dict[str, Any]


class SourceFormat(Enum):
    JSON_ARRAY = "json_array"
    DELIMITED = "delimited"


class _Absent:
    """Marker for a logical field none of whose aliases is present."""

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


def detect_format(content: str) -> SourceFormat:
    """Bracketed content is a JSON export; anything else is delimited text."""
    if content.strip().startswith("["):
        return SourceFormat.JSON_ARRAY
    return SourceFormat.DELIMITED


def parse_rows(content: str, source: str = "<string>") -> list[RawRecord]:
    """
    Parse file content into field-keyed records.

    Raises EmptySourceError for blank content and ParseError for
    malformed structure. ``source`` only labels error messages.
    """
    if not content.strip():
        raise EmptySourceError(source)

    fmt = detect_format(content)
    if fmt is SourceFormat.JSON_ARRAY:
        records = _parse_json_array(content, source)
    else:
        records = _parse_delimited(content, source)

    logger.debug("Parsed %d %s records from %s", len(records), fmt.value, source)
    return records


def read_source_rows(path: str | Path, label: str = "source") -> list[RawRecord]:
    """Read one input file from disk and parse it into records."""
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise MissingInputError(str(file_path), label) from None
    except UnicodeDecodeError as e:
        raise ParseError(str(file_path), f"not valid UTF-8 ({e})") from e
    except OSError as e:
        raise ParseError(
            str(file_path), f"file could not be read ({e.strerror or e})"
        ) from e

    if not content.strip():
        raise EmptySourceError(str(file_path))

    records = parse_rows(content, source=str(file_path))
    logger.info("Read %d %s rows from %s", len(records), label, file_path)
    return records


def pick_column(record: RawRecord, aliases: Sequence[str]) -> Any:
    """
    Return the value of the first alias present as a key in ``record``.

    Matching is exact and case-sensitive. Returns ``ABSENT`` when no alias
    matches so callers can choose their own default.
    """
    for alias in aliases:
        if alias in record:
            return record[alias]
    return ABSENT


def has_columns(record: RawRecord, columns: Sequence[str]) -> bool:
    return all(column in record for column in columns)


# ---------------------------------------------------------------------------
# Format-specific parsers
# ---------------------------------------------------------------------------


def _parse_json_array(content: str, source: str) -> list[RawRecord]:
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(source, f"invalid JSON ({e})") from e

    if not isinstance(parsed, list) or not parsed:
        raise ParseError(source, "expected a non-empty JSON array of arrays")
    if not isinstance(parsed[0], list):
        raise ParseError(source, "first row must be an array of header labels")
    if len(parsed) < 2:
        raise ParseError(source, "header row present but no data rows")

    headers = [str(h) for h in parsed[0]]
    records: list[RawRecord] = []
    for index, row in enumerate(parsed[1:], start=1):
        if not isinstance(row, list):
            raise ParseError(
                source, f"row {index} is not an array: {json.dumps(row)[:80]}"
            )
        records.append(dict(zip(headers, row)))
    return records


def _parse_delimited(content: str, source: str) -> list[RawRecord]:
    reader = csv.DictReader(io.StringIO(content, newline=""), strict=True)
    records: list[RawRecord] = []
    try:
        if reader.fieldnames is None:
            raise ParseError(source, "missing header row")
        expected = len(reader.fieldnames)
        for row in reader:
            if None in row:
                raise ParseError(
                    source,
                    f"line {reader.line_num}: too many fields "
                    f"(expected {expected}, saw {expected + len(row[None])})",
                )
            if any(value is None for value in row.values()):
                present = sum(1 for value in row.values() if value is not None)
                raise ParseError(
                    source,
                    f"line {reader.line_num}: too few fields "
                    f"(expected {expected}, saw {present})",
                )
            records.append(dict(row))
    except csv.Error as e:
        raise ParseError(source, f"line {reader.line_num}: {e}") from e
    return records
