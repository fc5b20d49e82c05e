"""Tests for the payload and CSV writers."""

import json
import os
import stat
from datetime import datetime, timezone

import pytest

from state_revenue.aggregator import build_payload
from state_revenue.categories import NormalizedTaxRow
from state_revenue.population import NormalizedPopulationRow
from state_revenue.report_generator import ReportGenerator


@pytest.fixture
def generator() -> ReportGenerator:
    return ReportGenerator()


@pytest.fixture
def payload():
    return build_payload(
        [NormalizedTaxRow("Ohio", 2023, "property", 1_000, 500)],
        [NormalizedPopulationRow("Ohio", 2023, 300)],
        year=2023,
        top_n=1,
        generated_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )


def test_to_json_without_path_returns_string(generator, payload, tmp_path):
    text = generator.to_json(payload)
    data = json.loads(text)
    assert data["states"][0]["totalRevenue"] == 1500
    assert data["states"][0]["perCapitaTotal"] == 5.0
    assert list(tmp_path.iterdir()) == []


def test_to_json_replaces_existing_file(generator, payload, tmp_path):
    path = tmp_path / "nested" / "out.json"
    path.parent.mkdir()
    path.write_text("stale content that is longer than nothing", encoding="utf-8")

    generator.to_json(payload, path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["metadata"]["topN"] == 1
    assert [p.name for p in path.parent.iterdir()] == ["out.json"]


# ── File permissions ─────────────────────────────────────────────────


posix_only = pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")


@pytest.fixture
def umask_022():
    previous = os.umask(0o022)
    yield
    os.umask(previous)


@posix_only
def test_new_file_is_readable_under_umask(generator, payload, tmp_path, umask_022):
    path = tmp_path / "out.json"
    generator.to_json(payload, path)
    assert stat.S_IMODE(path.stat().st_mode) == 0o644


@posix_only
def test_replacing_keeps_existing_mode(generator, payload, tmp_path, umask_022):
    path = tmp_path / "out.json"
    path.write_text("{}", encoding="utf-8")
    path.chmod(0o640)
    generator.to_json(payload, path)
    assert stat.S_IMODE(path.stat().st_mode) == 0o640


@posix_only
def test_normalized_csv_is_readable_under_umask(generator, tmp_path, umask_022):
    path = tmp_path / "pop.csv"
    generator.export_normalized_population([], path)
    assert stat.S_IMODE(path.stat().st_mode) == 0o644


def test_export_normalized_tax(generator, tmp_path):
    rows = [
        NormalizedTaxRow("Ohio", 2023, "property", 1_000.5, 0),
        NormalizedTaxRow("Iowa", 2023, "licenses", 0, 12),
    ]
    csv_str = generator.export_normalized_tax(rows, tmp_path / "tax.csv")
    lines = csv_str.splitlines()
    assert lines[0] == "state,year,tax_type,state_tax_revenue,local_tax_revenue"
    assert lines[1].startswith("Ohio,2023,property,1000.5,")
    assert (tmp_path / "tax.csv").read_text(encoding="utf-8") == csv_str


def test_export_empty_population_keeps_header(generator, tmp_path):
    csv_str = generator.export_normalized_population([], tmp_path / "pop.csv")
    assert csv_str.strip() == "state,year,population"


def test_format_text_lists_states_and_notes(generator, payload):
    text = generator.format_text(payload)
    assert "State Tax Revenue 2023 (top 1)" in text
    assert "Ohio" in text
    assert "property: Property tax" in text
    assert "Nominal dollars." in text
