"""Tests for the spatialeval command-line interface."""

import json

import pandas as pd
from click.testing import CliRunner

from spatialeval.cli.main import cli


class TestInternalCommand:
    """Tests for `spatialeval internal`."""

    def test_default_table(self, spots_csv):
        runner = CliRunner()

        result = runner.invoke(cli, ["internal", str(spots_csv)])

        assert result.exit_code == 0, result.output
        assert "PAS" in result.output
        assert "CHAOS" in result.output

    def test_json_class_level(self, spots_csv):
        runner = CliRunner()

        result = runner.invoke(
            cli,
            ["internal", str(spots_csv), "-L", "class", "--metrics", "PAS,CHAOS", "-F", "json"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["level"] == "class"
        assert [row["class"] for row in data["values"]] == ["A", "B"]

    def test_csv_output_file(self, spots_csv, tmp_path):
        runner = CliRunner()
        out_path = tmp_path / "scores.csv"

        result = runner.invoke(
            cli,
            [
                "internal",
                str(spots_csv),
                "-L",
                "element",
                "-m",
                "PAS",
                "-F",
                "csv",
                "-o",
                str(out_path),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Results written to" in result.output
        df = pd.read_csv(out_path)
        assert list(df.columns) == ["element", "PAS"]
        assert len(df) == 100

    def test_unsupported_metric_fails(self, spots_csv):
        runner = CliRunner()

        result = runner.invoke(cli, ["internal", str(spots_csv), "-L", "element", "-m", "CHAOS"])

        assert result.exit_code == 1
        assert "UNSUPPORTED_METRIC_AT_LEVEL" in result.output

    def test_missing_file(self, tmp_path):
        runner = CliRunner()

        result = runner.invoke(cli, ["internal", str(tmp_path / "missing.csv")])

        assert result.exit_code != 0


class TestExternalCommand:
    """Tests for `spatialeval external`."""

    def test_dataset_json(self, spots_csv):
        runner = CliRunner()

        result = runner.invoke(
            cli, ["external", str(spots_csv), "-t", "label", "-p", "pred", "-F", "json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["metrics"] == ["Accuracy", "SpatialAccuracy"]
        assert abs(data["values"][0]["Accuracy"] - 0.9) < 1e-9

    def test_element_markdown(self, spots_csv):
        runner = CliRunner()

        result = runner.invoke(
            cli, ["external", str(spots_csv), "-L", "element", "--no-pairs", "-F", "markdown"]
        )

        assert result.exit_code == 0, result.output
        assert result.output.startswith("| element | SpotAgreement |")

    def test_negatives_without_pairs_fails(self, spots_csv):
        runner = CliRunner()

        result = runner.invoke(
            cli, ["external", str(spots_csv), "-L", "element", "--no-pairs", "--negatives"]
        )

        assert result.exit_code == 1
        assert "UNSUPPORTED_COMBINATION" in result.output


class TestListCommands:
    """Tests for `spatialeval list ...`."""

    def test_list_metrics(self):
        runner = CliRunner()

        result = runner.invoke(cli, ["list", "metrics"])

        assert result.exit_code == 0
        assert "SpotAgreement" in result.output
        assert "Total: 9 metrics" in result.output

    def test_list_metrics_json(self):
        runner = CliRunner()

        result = runner.invoke(cli, ["list", "metrics", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert {row["metric"] for row in data} >= {"PAS", "CHAOS", "ELSA"}

    def test_list_levels(self):
        runner = CliRunner()

        result = runner.invoke(cli, ["list", "levels"])

        assert result.exit_code == 0
        assert "element:" in result.output
        assert "external: SpotAgreement" in result.output

    def test_version(self):
        runner = CliRunner()

        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
