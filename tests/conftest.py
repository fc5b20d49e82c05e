"""Shared fixtures: a small but realistic pair of input files and a config."""

import json

import pytest

from state_revenue.config import PipelineConfig

TAX_JSON = [
    ["NAME", "YEAR", "AGG_DESC", "GOVTYPE", "AMOUNT"],
    ["California", "2023", "LF0022", "002", "128,000,000"],
    ["California", "2023", "LF0011", "002", "45,000,000"],
    ["California", "2023", "LF0011", "003", "21,000,000"],
    ["Texas", "2023", "LF0011", "002", "49,000,000"],
    ["Texas", "2023", "LF0009", "003", "78,000,000"],
    ["Texas", "2023", "LF0026", "002", "3,100,000"],
    ["Florida", "2023", "LF0009", "003", "41,000,000"],
    ["New York", "2023", "LF0022", "002", "61,000,000"],
    ["Puerto Rico", "2023", "LF0022", "002", "2,500,000"],
    ["Texas", "2022", "LF0011", "002", "47,000,000"],
]

POPULATION_CSV = """NAME,year,population
United States,2023,"334,914,895"
California,2023,"38,965,193"
Texas,2023,"30,503,301"
Florida,2023,"22,610,726"
New York,2023,"19,571,216"
Puerto Rico,2023,"3,205,691"
"""

CONFIG = {
    "year": 2023,
    "top_n": 3,
    "input": {"tax": "raw/tax.json", "population": "raw/population.csv"},
    "output": {
        "json": "out/state-tax-data.json",
        "normalized_tax": "out/normalized/tax.csv",
        "normalized_population": "out/normalized/population.csv",
    },
    "columns": {
        "population": {
            "state": ["NAME"],
            "year": ["year"],
            "population": ["population"],
        }
    },
    "tax_type_labels": {"property": "Property"},
}


@pytest.fixture
def project(tmp_path):
    """Write inputs and a config file under tmp_path; return the config path."""
    raw = tmp_path / "raw"
    raw.mkdir()
    (raw / "tax.json").write_text(json.dumps(TAX_JSON), encoding="utf-8")
    (raw / "population.csv").write_text(POPULATION_CSV, encoding="utf-8")
    config_path = tmp_path / "ingestion.config.json"
    config_path.write_text(json.dumps(CONFIG), encoding="utf-8")
    return config_path


@pytest.fixture
def config(project) -> PipelineConfig:
    return PipelineConfig.from_dict(CONFIG, base_dir=project.parent)
