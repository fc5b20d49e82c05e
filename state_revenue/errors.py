"""
Fatal pipeline errors.

Each of these aborts a run. Row-level anomalies (unknown state, off-year
row, unrecognized tax code, zero amounts) are not errors and never raise;
they are dropped during normalization.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for every whole-run failure."""


class MissingInputError(PipelineError):
    """A required source file does not exist."""

    def __init__(self, path: str, label: str = "source") -> None:
        self.path = path
        self.label = label
        super().__init__(
            f"Missing required {label} file: {path}. "
            f"Add it and run the build again."
        )


class EmptySourceError(PipelineError):
    """The source file exists but holds nothing but whitespace."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Source file is empty: {path}")


class ParseError(PipelineError):
    """Malformed delimited text or an unexpected JSON structure."""

    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        self.detail = detail
        super().__init__(f"Parsing failed for {source}: {detail}")


class InsufficientDataError(PipelineError):
    """Normalization left no usable rows on one side of the join."""

    def __init__(self, side: str, detail: str = "") -> None:
        self.side = side
        message = f"{side.capitalize()} normalization produced zero rows."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class ConfigurationError(PipelineError):
    """A required config key, alias list, or lookup entry is missing."""

    def __init__(self, key: str, detail: str = "") -> None:
        self.key = key
        message = f"Configuration error for '{key}'"
        message = f"{message}: {detail}" if detail else f"{message}: missing"
        super().__init__(message)
