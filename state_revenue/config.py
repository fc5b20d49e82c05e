"""
Pipeline configuration.

Loaded from a JSON file. Everything the core needs from the outside world
lives here: the target year, the top-N count, input/output paths, column
alias lists per logical field, and the category lookups.

Example::

    {
        "year": 2023,
        "top_n": 10,
        "input": {"tax": "raw/tax.json", "population": "raw/population.csv"},
        "output": {"json": "public/state-tax-data.json"},
        "columns": {
            "tax": {"state": ["State", "NAME"], "tax_type": ["Tax Type"], ...},
            "population": {"state": ["NAME"], "population": ["POPESTIMATE"]}
        },
        "tax_type_labels": {"property": "Property tax"}
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from state_revenue.errors import ConfigurationError

logger = logging.getLogger(__name__)

TAX_FIELDS = ("state", "year", "tax_type", "state_amount", "local_amount")
POPULATION_FIELDS = ("state", "year", "population")

DEFAULT_CONFIG_PATH = Path("config") / "ingestion.config.json"


@dataclass(frozen=True)
class ColumnAliases:
    """Ordered candidate column names for each logical field of one source."""

    source: str
    aliases: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def get(self, name: str) -> tuple[str, ...]:
        """Return the alias list for ``name`` or raise ConfigurationError."""
        candidates = self.aliases.get(name)
        if not candidates:
            raise ConfigurationError(f"columns.{self.source}.{name}")
        return candidates

    def optional(self, name: str) -> tuple[str, ...]:
        return self.aliases.get(name, ())

    @classmethod
    def from_dict(
        cls, source: str, data: Any, allowed: tuple[str, ...]
    ) -> "ColumnAliases":
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"columns.{source}", "expected an object of alias lists"
            )
        aliases: dict[str, tuple[str, ...]] = {}
        for name, value in data.items():
            if name not in allowed:
                logger.warning("Ignoring unknown column field columns.%s.%s", source, name)
                continue
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(
                isinstance(v, str) for v in value
            ):
                raise ConfigurationError(
                    f"columns.{source}.{name}", "expected a list of column names"
                )
            aliases[name] = tuple(value)
        return cls(source=source, aliases=MappingProxyType(aliases))


@dataclass(frozen=True)
class PipelineConfig:
    """Resolved configuration for one pipeline run."""

    year: int
    top_n: int
    tax_path: Optional[Path] = None
    population_path: Optional[Path] = None
    output_path: Optional[Path] = None
    normalized_tax_path: Optional[Path] = None
    normalized_population_path: Optional[Path] = None
    tax_columns: ColumnAliases = field(
        default_factory=lambda: ColumnAliases("tax")
    )
    population_columns: ColumnAliases = field(
        default_factory=lambda: ColumnAliases("population")
    )
    tax_type_map: Mapping[str, str] = field(default_factory=dict)
    tax_type_labels: Mapping[str, str] = field(default_factory=dict)
    tax_code_map: Optional[Mapping[str, str]] = None
    license_codes: Optional[frozenset[str]] = None

    def require_path(self, name: str) -> Path:
        """Return a configured path attribute or raise naming its key."""
        keys = {
            "tax_path": "input.tax",
            "population_path": "input.population",
            "output_path": "output.json",
            "normalized_tax_path": "output.normalized_tax",
            "normalized_population_path": "output.normalized_population",
        }
        value = getattr(self, name)
        if value is None:
            raise ConfigurationError(keys[name])
        return value

    @classmethod
    def from_dict(
        cls, data: dict, base_dir: Optional[Path] = None
    ) -> "PipelineConfig":
        """Build a config from parsed JSON, resolving paths against base_dir."""
        if not isinstance(data, dict):
            raise ConfigurationError("<root>", "expected a JSON object")

        year = _require_int(data, "year")
        top_n = _require_int(data, "top_n")
        if top_n <= 0:
            raise ConfigurationError("top_n", "must be a positive integer")

        inputs = _section(data, "input")
        outputs = _section(data, "output")
        columns = _section(data, "columns")

        tax_code_map = data.get("tax_code_map")
        license_codes = data.get("license_codes")

        return cls(
            year=year,
            top_n=top_n,
            tax_path=_path(inputs.get("tax"), base_dir),
            population_path=_path(inputs.get("population"), base_dir),
            output_path=_path(outputs.get("json"), base_dir),
            normalized_tax_path=_path(outputs.get("normalized_tax"), base_dir),
            normalized_population_path=_path(
                outputs.get("normalized_population"), base_dir
            ),
            tax_columns=ColumnAliases.from_dict(
                "tax", columns.get("tax"), TAX_FIELDS
            ),
            population_columns=ColumnAliases.from_dict(
                "population", columns.get("population"), POPULATION_FIELDS
            ),
            tax_type_map=MappingProxyType(_string_map(data, "tax_type_map")),
            tax_type_labels=MappingProxyType(
                _string_map(data, "tax_type_labels")
            ),
            tax_code_map=(
                MappingProxyType(_string_map(data, "tax_code_map"))
                if tax_code_map is not None
                else None
            ),
            license_codes=(
                frozenset(str(c) for c in license_codes)
                if license_codes is not None
                else None
            ),
        )


def load_config(path: str | Path) -> PipelineConfig:
    """Read and validate a JSON config file."""
    config_path = Path(path)
    try:
        content = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigurationError(
            str(config_path), "config file not found"
        ) from None
    except UnicodeDecodeError as e:
        raise ConfigurationError(str(config_path), f"not valid UTF-8 ({e})") from e
    except OSError as e:
        raise ConfigurationError(
            str(config_path), f"config file could not be read ({e.strerror or e})"
        ) from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(str(config_path), f"invalid JSON ({e})") from e

    config = PipelineConfig.from_dict(data, base_dir=config_path.parent)
    logger.debug(
        "Loaded config %s (year=%d, top_n=%d)",
        config_path, config.year, config.top_n,
    )
    return config


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_int(data: dict, key: str) -> int:
    if key not in data:
        raise ConfigurationError(key)
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(key, f"expected an integer, got {value!r}")
    return value


def _section(data: dict, key: str) -> dict:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(key, "expected an object")
    return value


def _string_map(data: dict, key: str) -> dict[str, str]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(key, "expected an object")
    return {str(k): str(v) for k, v in value.items()}


def _path(value: Any, base_dir: Optional[Path]) -> Optional[Path]:
    if not value:
        return None
    p = Path(value)
    if base_dir is not None and not p.is_absolute():
        p = base_dir / p
    return p
