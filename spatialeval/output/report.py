"""
Output container for spatial metric evaluations.

Wraps the metric table produced at one level (element, class or dataset)
together with run metadata and warnings, and renders it as text, JSON or CSV.
"""

import json
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from spatialeval.core.reference import format_metric_value


@dataclass
class SpatialEvaluationResult:
    """Metric values at one level plus metadata and warnings."""

    level: str
    values: pd.DataFrame
    metadata: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    @property
    def metric_columns(self) -> list[str]:
        return list(self.values.columns)

    def get(self, column: str):
        """
        Values of one metric column.

        Returns a float at dataset level, otherwise a pandas Series indexed
        like the result (spots or classes).
        """
        series = self.values[column]
        if self.level == "dataset":
            return float(series.iloc[0])
        return series

    def to_dataframe(self) -> pd.DataFrame:
        """Metric table with the class/element index as a regular column."""
        if self.level == "dataset":
            return self.values.reset_index(drop=True)
        return self.values.reset_index()

    def to_table(self, format: str = "simple", max_rows: int | None = 50) -> str:
        """
        Generate a formatted table string.

        Args:
            format: Table format ('simple', 'grid', 'markdown')
            max_rows: Truncate element-level tables to this many rows (None for all)

        Returns:
            Formatted table string
        """
        df = self.to_dataframe()
        truncated = max_rows is not None and len(df) > max_rows
        if truncated:
            df = df.head(max_rows)

        rows = [
            {col: _format_cell(value) for col, value in record.items()}
            for record in df.to_dict("records")
        ]

        if format == "markdown":
            table = _markdown_table(rows)
        elif format == "grid":
            table = _grid_table(rows)
        else:  # simple
            table = _simple_table(rows)

        if truncated:
            table += f"\n... ({len(self.values) - max_rows:,} more rows)"
        return table

    def to_dict(self) -> dict:
        """Convert entire result to dictionary."""
        df = self.to_dataframe()
        records = df.astype(object).where(df.notna(), None).to_dict("records")
        return {
            "level": self.level,
            "metrics": self.metric_columns,
            "values": records,
            "metadata": self.metadata,
            "warnings": self.warnings,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=_json_default)

    def to_csv(self) -> str:
        """Convert the metric table to a CSV string."""
        return self.to_dataframe().to_csv(index=False)

    def summary(self) -> dict:
        """Generate a summary of the evaluation."""
        return {
            "level": self.level,
            "metrics": self.metric_columns,
            "rows": len(self.values),
            "warnings": len(self.warnings),
            "metadata": self.metadata,
        }


def _format_cell(value) -> str:
    if isinstance(value, (bool, np.bool_)):
        return str(bool(value))
    if isinstance(value, (float, np.floating)):
        return format_metric_value(float(value))
    return str(value)


def _json_default(value):
    if isinstance(value, np.generic):
        return value.item()
    return str(value)


# =============================================================================
# Internal table formatters
# =============================================================================


def _simple_table(rows: list[dict]) -> str:
    """Generate a simple text table."""
    if not rows:
        return "No data"

    cols = list(rows[0].keys())

    widths = {}
    for col in cols:
        max_width = max(len(str(col)), max(len(str(row.get(col, ""))) for row in rows))
        widths[col] = min(max_width, 30)  # Cap at 30 chars

    header = " | ".join(str(col).ljust(widths[col]) for col in cols)
    separator = "-+-".join("-" * widths[col] for col in cols)

    lines = [header, separator]
    for row in rows:
        row_str = " | ".join(
            str(row.get(col, ""))[: widths[col]].ljust(widths[col]) for col in cols
        )
        lines.append(row_str)

    return "\n".join(lines)


def _grid_table(rows: list[dict]) -> str:
    """Generate a grid-style table with box drawing characters."""
    if not rows:
        return "No data"

    cols = list(rows[0].keys())

    widths = {}
    for col in cols:
        max_width = max(len(str(col)), max(len(str(row.get(col, ""))) for row in rows))
        widths[col] = min(max_width + 2, 32)  # Padding + cap

    top = "┌" + "┬".join("─" * widths[col] for col in cols) + "┐"
    mid = "├" + "┼".join("─" * widths[col] for col in cols) + "┤"
    bot = "└" + "┴".join("─" * widths[col] for col in cols) + "┘"

    header = (
        "│"
        + "│".join(f" {str(col)[: widths[col] - 2].center(widths[col] - 2)} " for col in cols)
        + "│"
    )

    lines = [top, header, mid]
    for row in rows:
        row_str = (
            "│"
            + "│".join(
                f" {str(row.get(col, ''))[: widths[col] - 2].ljust(widths[col] - 2)} "
                for col in cols
            )
            + "│"
        )
        lines.append(row_str)
    lines.append(bot)

    return "\n".join(lines)


def _markdown_table(rows: list[dict]) -> str:
    """Generate a markdown table."""
    if not rows:
        return "No data"

    cols = [str(col) for col in rows[0].keys()]

    header = "| " + " | ".join(cols) + " |"
    separator = "|" + "|".join("---" for _ in cols) + "|"

    lines = [header, separator]
    for row in rows:
        row_str = "| " + " | ".join(str(value) for value in row.values()) + " |"
        lines.append(row_str)

    return "\n".join(lines)
