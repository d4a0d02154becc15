"""Tests for the podcraft command-line interface."""

from __future__ import annotations

from pathlib import Path

import yaml
from click.testing import CliRunner

from podcraft.cli import main
from podcraft.exceptions import MissingProbePortError

from .support.data import data_path, read_output_data


def test_help() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["help"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "synth" in result.output

    result = runner.invoke(main, ["help", "synth"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "--output" in result.output


def test_synth() -> None:
    runner = CliRunner()
    config_path = data_path("manifests/app.yaml")
    result = runner.invoke(
        main, ["synth", str(config_path)], catch_exceptions=False
    )
    assert result.exit_code == 0
    expected = read_output_data("manifests/app-output.yaml")
    assert list(yaml.safe_load_all(result.stdout)) == expected


def test_synth_output(tmp_path: Path) -> None:
    runner = CliRunner()
    config_path = data_path("manifests/app.yaml")
    output = tmp_path / "manifest.yaml"
    result = runner.invoke(
        main,
        ["synth", str(config_path), "-o", str(output)],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    assert result.stdout == ""
    with output.open("r") as f:
        documents = list(yaml.safe_load_all(f))
    assert documents == read_output_data("manifests/app-output.yaml")


def test_validate() -> None:
    runner = CliRunner()
    config_path = data_path("manifests/app.yaml")
    result = runner.invoke(
        main, ["validate", str(config_path)], catch_exceptions=False
    )
    assert result.exit_code == 0
    assert result.output == f"{config_path}: 2 resources OK\n"


def test_errors() -> None:
    runner = CliRunner()

    config_path = data_path("manifests/unknown-volume.yaml")
    result = runner.invoke(main, ["validate", str(config_path)])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert "Unknown mounted volume missing" in result.output

    config_path = data_path("manifests/duplicate-volume.yaml")
    result = runner.invoke(main, ["synth", str(config_path)])
    assert result.exit_code == 1
    assert "data" in result.output

    config_path = data_path("manifests/no-containers.yaml")
    result = runner.invoke(main, ["validate", str(config_path)])
    assert result.exit_code == 1
    assert "at least 1 container" in result.output

    result = runner.invoke(main, ["synth", str(config_path)])
    assert result.exit_code == 1
    assert "at least 1 container" in result.output

    config_path = data_path("manifests/no-port.yaml")
    result = runner.invoke(main, ["synth", str(config_path)])
    assert result.exit_code == 1
    assert not isinstance(result.exception, MissingProbePortError)
    assert "Container main-0 has no port for its liveness probe" in (
        result.output
    )
