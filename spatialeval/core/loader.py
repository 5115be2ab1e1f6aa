"""
CSV data loading and validation for spatial evaluation.

This module loads spot tables (one row per spot, with coordinates and one or
two label columns) from CSV files, validates them, and auto-detects column
roles when they are not specified.
"""

import logging
import re
from pathlib import Path

import numpy as np
import pandas as pd

from spatialeval.core.exceptions import (
    ColumnNotFoundError,
    FileNotFoundError,
    InvalidCSVError,
)

logger = logging.getLogger(__name__)

# Ground-truth / single labeling columns, in order of preference
LABEL_PATTERNS = [
    r"^ground_?truth$",
    r"^(?:true|truth)(?:_?label)?$",
    r"^label(?:s)?$",
    r"^class$",
    r"^(?:spatial_)?domain(?:_?index)?$",
    r"^cluster(?:_?id)?$",
]

# Predicted labeling columns, in order of preference
PRED_PATTERNS = [
    r"^pred(?:icted)?(?:_?label)?$",
    r"^prediction$",
    r"^cluster(?:_?id)?$",
    r"^(?:spatial_)?domain(?:_?index)?$",
]

# Coordinate column sets; the third column is used when present
COORDINATE_SETS = [
    ("x", "y", "z"),
    ("coord_x", "coord_y", "coord_z"),
    ("pos_x", "pos_y", "pos_z"),
    ("spatial_x", "spatial_y", "spatial_z"),
    ("array_row", "array_col", None),
    ("imagerow", "imagecol", None),
    ("row", "col", None),
]


class SpatialData:
    """Container for validated spot data."""

    def __init__(
        self,
        coordinates: np.ndarray,
        labels: np.ndarray,
        label_col: str,
        coord_cols: list[str],
        pred_labels: np.ndarray | None = None,
        pred_col: str | None = None,
        source_path: Path | None = None,
        warnings: list[str] | None = None,
    ):
        self.coordinates = coordinates
        self.labels = labels
        self.label_col = label_col
        self.coord_cols = coord_cols
        self.pred_labels = pred_labels
        self.pred_col = pred_col
        self.source_path = source_path
        self.warnings = warnings or []

    @property
    def n_spots(self) -> int:
        return len(self.labels)

    @property
    def n_dims(self) -> int:
        return self.coordinates.shape[1]

    @property
    def n_classes(self) -> int:
        return len(pd.unique(self.labels))


def _match_column(columns: list[str], patterns: list[str], skip: set[str]) -> str | None:
    for pattern in patterns:
        for col in columns:
            if col not in skip and re.match(pattern, str(col).lower()):
                return col
    return None


def detect_columns(
    df: pd.DataFrame,
    label_col: str | None = None,
    coord_cols: list[str] | None = None,
    pred_col: str | None = None,
    with_predictions: bool = False,
) -> tuple[str, list[str], str | None]:
    """
    Auto-detect label, coordinate and (optionally) prediction columns.

    Args:
        df: Input DataFrame
        label_col: Override for the (true) label column
        coord_cols: Override for coordinate columns
        pred_col: Override for the predicted label column
        with_predictions: Whether a prediction column is required

    Returns:
        Tuple of (label_col, coord_cols, pred_col)

    Raises:
        ColumnNotFoundError: If required columns cannot be detected
    """
    columns = list(df.columns)

    if coord_cols is None:
        lowered = {str(c).lower(): c for c in columns}
        for first, second, third in COORDINATE_SETS:
            if first in lowered and second in lowered:
                coord_cols = [lowered[first], lowered[second]]
                if third is not None and third in lowered:
                    coord_cols.append(lowered[third])
                break

        if coord_cols is None:
            raise ColumnNotFoundError(
                "coordinates",
                available=columns,
                message="Could not auto-detect coordinate columns. "
                "Please specify --coord-cols explicitly.",
            )

    missing = [c for c in coord_cols if c not in columns]
    if missing:
        raise ColumnNotFoundError(
            missing, available=columns, message=f"Coordinate columns not found: {missing}"
        )

    skip = set(coord_cols)
    if pred_col is not None:
        skip.add(pred_col)

    if label_col is None:
        label_col = _match_column(columns, LABEL_PATTERNS, skip)
        if label_col is None:
            raise ColumnNotFoundError(
                "label",
                available=columns,
                message="Could not auto-detect label column. "
                "Please specify --label-col explicitly.",
            )

    if label_col not in columns:
        raise ColumnNotFoundError(label_col, available=columns)

    if with_predictions:
        if pred_col is None:
            pred_col = _match_column(columns, PRED_PATTERNS, skip | {label_col})
            if pred_col is None:
                raise ColumnNotFoundError(
                    "prediction",
                    available=columns,
                    message="Could not auto-detect prediction column. "
                    "Please specify --pred-col explicitly.",
                )
        if pred_col not in columns:
            raise ColumnNotFoundError(pred_col, available=columns)

    return label_col, list(coord_cols), pred_col


def validate_data(df: pd.DataFrame, label_cols: list[str], coord_cols: list[str]) -> list[str]:
    """
    Validate spot data and return any warnings.

    Validation rules:
    - At least 2 data rows
    - Coordinate columns are numeric
    - No NaN in label columns
    - NaN coordinates are reported (rows are dropped by the loader)

    Returns:
        List of warning messages
    """
    warnings = []

    if len(df) < 2:
        raise InvalidCSVError("CSV must contain at least 2 data rows", details={"rows": len(df)})

    for col in coord_cols:
        if not pd.api.types.is_numeric_dtype(df[col]):
            raise InvalidCSVError(
                f"Coordinate column '{col}' is not numeric", details={"column": col}
            )
        nan_count = int(df[col].isna().sum())
        if nan_count > 0:
            warnings.append(
                f"Column '{col}' has {nan_count} missing values ({nan_count / len(df) * 100:.1f}%)"
            )

    for col in label_cols:
        nan_labels = int(df[col].isna().sum())
        if nan_labels > 0:
            raise InvalidCSVError(
                f"Label column '{col}' contains {nan_labels} missing values",
                details={"column": col, "missing": nan_labels},
            )

    return warnings


def load_csv(
    path: str | Path,
    label_col: str | None = None,
    coord_cols: list[str] | None = None,
    pred_col: str | None = None,
    with_predictions: bool = False,
) -> SpatialData:
    """
    Load and validate spot data from a CSV file.

    Args:
        path: Path to CSV file
        label_col: Name of the (true) label column (auto-detected if not specified)
        coord_cols: Coordinate column names (auto-detected if not specified)
        pred_col: Name of the predicted label column
        with_predictions: Load a prediction column as well (auto-detected if
            ``pred_col`` is not given)

    Returns:
        SpatialData with validated coordinates and labels

    Raises:
        FileNotFoundError: If file does not exist
        InvalidCSVError: If file is not valid CSV or fails validation
        ColumnNotFoundError: If required columns not found
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(path)

    try:
        df = pd.read_csv(path)
    except Exception as e:
        raise InvalidCSVError(
            f"Failed to parse CSV: {e}", details={"path": str(path), "error": str(e)}
        )

    if df.empty:
        raise InvalidCSVError("CSV file is empty", details={"path": str(path)})

    with_predictions = with_predictions or pred_col is not None
    label_col, coord_cols, pred_col = detect_columns(
        df, label_col, coord_cols, pred_col, with_predictions=with_predictions
    )
    label_cols = [label_col] + ([pred_col] if pred_col else [])
    warnings = validate_data(df, label_cols, coord_cols)

    mask = df[coord_cols].notna().all(axis=1)
    dropped = int((~mask).sum())
    if dropped > 0:
        warnings.append(f"Dropped {dropped} rows with NaN coordinates")
        df = df[mask]
        if len(df) < 2:
            raise InvalidCSVError(
                "Fewer than 2 rows left after dropping NaN coordinates",
                details={"path": str(path), "dropped": dropped},
            )

    logger.info(
        f"Loaded {len(df):,} spots from {path.name} "
        f"(labels: {label_col}, coordinates: {', '.join(coord_cols)})"
    )

    return SpatialData(
        coordinates=df[coord_cols].to_numpy(dtype=np.float64),
        labels=df[label_col].to_numpy(),
        label_col=label_col,
        coord_cols=coord_cols,
        pred_labels=df[pred_col].to_numpy() if pred_col else None,
        pred_col=pred_col,
        source_path=path,
        warnings=warnings,
    )
