"""Tests for the command-line interface."""

import json

import pytest

from state_revenue.cli import build_parser, main


def test_no_command_prints_help_and_exits_zero(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 0
    assert "state-revenue" in capsys.readouterr().out


def test_build_command_writes_output(project):
    main(["build", "--config", str(project)])
    output = project.parent / "out" / "state-tax-data.json"
    data = json.loads(output.read_text(encoding="utf-8"))
    assert len(data["states"]) == 3


def test_build_with_output_override(project, tmp_path):
    target = tmp_path / "custom.json"
    main(["build", "--config", str(project), "--output", str(target)])
    assert target.exists()


def test_normalize_command_writes_csvs(project):
    main(["--verbose", "normalize", "--config", str(project)])
    normalized = project.parent / "out" / "normalized"
    assert (normalized / "tax.csv").exists()
    assert (normalized / "population.csv").exists()
    assert not (project.parent / "out" / "state-tax-data.json").exists()


def test_pipeline_error_exits_one(project):
    (project.parent / "raw" / "population.csv").unlink()
    with pytest.raises(SystemExit) as exc:
        main(["build", "--config", str(project)])
    assert exc.value.code == 1


def test_missing_config_exits_one(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["build", "--config", str(tmp_path / "none.json")])
    assert exc.value.code == 1


def test_states_command_lists_roster(capsys):
    main(["states"])
    out = capsys.readouterr().out
    assert "Wyoming" in out
    assert "Puerto Rico" not in out


def test_default_config_path():
    args = build_parser().parse_args(["build"])
    assert args.config.endswith("ingestion.config.json")
