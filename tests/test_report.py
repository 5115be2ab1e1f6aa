"""Tests for metric reference data and result formatting."""

import json

import numpy as np
import pandas as pd

from spatialeval.core.reference import (
    INTERNAL_CAPABILITIES,
    Level,
    Metric,
    format_metric_value,
    get_direction_symbol,
    get_metric_info,
    supported_levels,
)
from spatialeval.output.report import SpatialEvaluationResult


class TestReference:
    """Tests for the metric reference helpers."""

    def test_metric_info(self):
        info = get_metric_info("CHAOS")

        assert info["direction"] == "lower"
        assert info["kind"] == "Internal"
        assert get_metric_info("Silhouette") is None

    def test_supported_levels(self):
        assert supported_levels(Metric.CHAOS) == {Level.CLASS, Level.DATASET}
        assert supported_levels(Metric.SPOT_AGREEMENT) == {Level.ELEMENT}

    def test_every_internal_metric_has_a_level(self):
        assert all(levels for levels in INTERNAL_CAPABILITIES.values())

    def test_formatting(self):
        assert format_metric_value(0.123456) == "0.1235"
        assert format_metric_value(float("nan")) == "N/A"
        assert get_direction_symbol("higher") == "↑ Higher"
        assert get_direction_symbol("lower") == "↓ Lower"


class TestSpatialEvaluationResult:
    """Tests for result rendering."""

    def make_result(self):
        values = pd.DataFrame(
            {"PAS": [0.1, 0.3], "CHAOS": [0.05, np.nan]},
            index=pd.Index(["A", "B"], name="class"),
        )
        return SpatialEvaluationResult(level="class", values=values, metadata={"k": 6})

    def test_get_returns_series_below_dataset_level(self):
        result = self.make_result()

        assert list(result.get("PAS")) == [0.1, 0.3]

    def test_dataset_get_returns_float(self):
        result = SpatialEvaluationResult(level="dataset", values=pd.DataFrame([{"PAS": 0.25}]))

        assert result.get("PAS") == 0.25

    def test_to_dict_replaces_nan(self):
        data = self.make_result().to_dict()

        assert data["values"][1]["CHAOS"] is None
        assert data["values"][0]["class"] == "A"
        json.loads(self.make_result().to_json())

    def test_tables(self):
        result = self.make_result()

        assert "class" in result.to_table()
        assert result.to_table(format="markdown").startswith("| class | PAS | CHAOS |")
        assert "┌" in result.to_table(format="grid")
        assert "N/A" in result.to_table()

    def test_truncated_table(self):
        values = pd.DataFrame({"PAS": np.zeros(60, dtype=bool)})
        result = SpatialEvaluationResult(level="element", values=values)

        assert "(10 more rows)" in result.to_table(max_rows=50)

    def test_warnings_and_summary(self):
        result = self.make_result()
        result.add_warning("something odd")

        summary = result.summary()

        assert summary["rows"] == 2
        assert summary["warnings"] == 1
        assert summary["metrics"] == ["PAS", "CHAOS"]
