"""
spatialeval: Evaluate spatial clusterings.

Score how spatially coherent a labeling of spots is (PAS, CHAOS, ELSA and
fuzzy partition indices), and how well a predicted labeling matches the
ground truth once cluster ids are optimally aligned to classes.

Example:
    >>> import spatialeval
    >>> result = spatialeval.evaluate("spots.csv", level="class")
    >>> print(result.to_table())

    >>> # Compare predictions with the ground truth
    >>> result = spatialeval.evaluate_external("spots.csv", pred_col="cluster")
    >>> print(result.get("SpatialAccuracy"))
"""

from pathlib import Path

import pandas as pd

__version__ = "0.1.0"


def evaluate(
    csv_path: str | Path,
    *,
    level: str = "dataset",
    metrics: list[str] | None = None,
    k: int = 6,
    label_col: str | None = None,
    coord_cols: list[str] | None = None,
    backend: str | None = None,
):
    """
    Evaluate the spatial coherence of a labeling stored in a CSV file.

    Args:
        csv_path: Path to a CSV file with one row per spot.
        level: "element", "class" or "dataset".
        metrics: Metric names to compute (defaults in parentheses):
            element: PAS, ELSA (both); class: CHAOS, PAS, ELSA (all);
            dataset: PAS, ELSA, CHAOS, MPC, PC, PE (PAS, ELSA, CHAOS).
        k: Spatial neighborhood size for PAS, ELSA and the fuzzy indices.
        label_col: Name of the label column (auto-detected if None).
        coord_cols: Coordinate column names (auto-detected if None).
        backend: "exact" or "approximate" neighbor search (None: by size).

    Returns:
        SpatialEvaluationResult: Metric table with methods:
            - to_table(): Formatted string table
            - to_dataframe(): pandas DataFrame
            - to_json(): JSON string
            - to_csv(): CSV string

    Raises:
        FileNotFoundError: If csv_path does not exist.
        InvalidCSVError: If file is not valid CSV.
        ColumnNotFoundError: If required columns not found.
        InvalidMetricError: If a metric name is unknown.
        UnsupportedMetricAtLevelError: If a metric is not defined at the level.

    Example:
        >>> result = spatialeval.evaluate("spots.csv", level="dataset", metrics=["PAS", "CHAOS"])
        >>> result.get("PAS")
    """
    from spatialeval.core.evaluator import evaluate as _evaluate

    return _evaluate(
        csv_path,
        level=level,
        metrics=metrics,
        k=k,
        label_col=label_col,
        coord_cols=coord_cols,
        backend=backend,
    )


def evaluate_external(
    csv_path: str | Path,
    *,
    level: str = "dataset",
    metrics: list[str] | None = None,
    k: int = 5,
    true_col: str | None = None,
    pred_col: str | None = None,
    coord_cols: list[str] | None = None,
    backend: str | None = None,
    use_pairs: bool = True,
    use_negatives: bool = False,
):
    """
    Compare predicted labels with ground-truth labels stored in one CSV file.

    Args:
        csv_path: Path to a CSV file with one row per spot.
        level: "element" (SpotAgreement) or "dataset" (Accuracy, SpatialAccuracy).
        metrics: Metric names to compute (defaults depend on the level).
        k: Spatial neighborhood size for SpatialAccuracy.
        true_col: Ground-truth column (auto-detected if None).
        pred_col: Prediction column (auto-detected if None).
        coord_cols: Coordinate column names (auto-detected if None).
        backend: "exact" or "approximate" neighbor search (None: by size).
        use_pairs: SpotAgreement over pairs of spots instead of spots.
        use_negatives: SpotAgreement also credits pairs separated in both labelings.

    Returns:
        SpatialEvaluationResult

    Example:
        >>> result = spatialeval.evaluate_external("spots.csv", true_col="label", pred_col="p1")
        >>> print(result.to_table())
    """
    from spatialeval.core.evaluator import evaluate_external as _evaluate_external

    return _evaluate_external(
        csv_path,
        level=level,
        metrics=metrics,
        k=k,
        true_col=true_col,
        pred_col=pred_col,
        coord_cols=coord_cols,
        backend=backend,
        use_pairs=use_pairs,
        use_negatives=use_negatives,
    )


def list_metrics(include_reference: bool = False) -> list[str] | pd.DataFrame:
    """
    List all available spatial metrics.

    Args:
        include_reference: If True, return DataFrame with full metadata
            (range, direction, kind, levels, complexity). If False, return list of names.

    Returns:
        List of metric names, or DataFrame with one row per metric.

    Example:
        >>> spatialeval.list_metrics()
        ['PAS', 'CHAOS', 'ELSA', 'MPC', 'PC', 'PE', 'SpotAgreement', 'Accuracy', 'SpatialAccuracy']
    """
    from spatialeval.core.reference import METRIC_REFERENCE, Level, Metric, supported_levels

    if include_reference:
        data = []
        for name, info in METRIC_REFERENCE.items():
            levels = supported_levels(Metric(name))
            data.append(
                {
                    "metric": name,
                    "range": info["range"],
                    "direction": info["direction"],
                    "kind": info["kind"],
                    "levels": ", ".join(lv.value for lv in Level if lv in levels),
                    "complexity": info["complexity"],
                }
            )
        return pd.DataFrame(data)
    return list(METRIC_REFERENCE.keys())


__all__ = [
    "evaluate",
    "evaluate_external",
    "list_metrics",
    "__version__",
]
