"""
Core evaluation engine for spatial clustering metrics.

Requested metric names are validated against the capability tables in
``reference`` before anything is computed, then dispatched to the metric
functions and assembled into one table per level:

    element  one row per spot, in input order
    class    one row per class, indexed by the original label values
    dataset  a single row
"""

import logging
from collections.abc import Iterable
from pathlib import Path

import numpy as np
import pandas as pd

from spatialeval.core.exceptions import (
    InvalidArgumentError,
    InvalidMetricError,
    UnsupportedMetricAtLevelError,
)
from spatialeval.core.labels import (
    LabelEncoding,
    as_coordinates,
    check_k,
    check_same_length,
    encode_labels,
)
from spatialeval.core.loader import load_csv
from spatialeval.core.metrics import (
    chaos,
    elsa,
    fuzzy_membership,
    get_agreement,
    matched_accuracy,
    modified_partition_coefficient,
    nn_weighted_accuracy,
    partition_coefficient,
    partition_entropy,
    pas,
)
from spatialeval.core.reference import (
    DEFAULT_ACCURACY_K,
    DEFAULT_EXTERNAL_METRICS,
    DEFAULT_INTERNAL_METRICS,
    DEFAULT_K,
    EXTERNAL_CAPABILITIES,
    INTERNAL_CAPABILITIES,
    Level,
    Metric,
)
from spatialeval.output.report import SpatialEvaluationResult

logger = logging.getLogger(__name__)


def parse_level(level: str | Level) -> Level:
    """Convert a level name to ``Level``."""
    try:
        return Level(level)
    except ValueError:
        raise InvalidArgumentError(
            f"Unknown level '{level}', expected one of: {', '.join(lv.value for lv in Level)}",
            level=str(level),
        )


def resolve_metrics(
    metrics: Iterable[str | Metric] | None,
    level: Level,
    capabilities: dict[Metric, frozenset[Level]],
    defaults: dict[Level, list[Metric]],
) -> list[Metric]:
    """
    Validate requested metric names against a capability table.

    Args:
        metrics: Requested names (None for the level's defaults).
        level: Requested level.
        capabilities: Metric -> supported levels, for one family of metrics.
        defaults: Metrics used per level when none are requested.

    Returns:
        Deduplicated metrics in request order.

    Raises:
        InvalidMetricError: For names outside this family of metrics.
        UnsupportedMetricAtLevelError: For metrics not defined at ``level``.
    """
    if metrics is None:
        if level not in defaults:
            raise InvalidArgumentError(
                f"No metrics of this kind are available at level '{level.value}'",
                level=level.value,
            )
        return list(defaults[level])
    if isinstance(metrics, str):
        metrics = [metrics]

    names = list(dict.fromkeys(str(m.value if isinstance(m, Metric) else m) for m in metrics))
    if not names:
        raise InvalidArgumentError("No metrics requested")

    known = {m.value: m for m in capabilities}
    invalid = [name for name in names if name not in known]
    if invalid:
        raise InvalidMetricError(invalid, valid_names=list(known))

    resolved = [known[name] for name in names]
    unsupported = [m.value for m in resolved if level not in capabilities[m]]
    if unsupported:
        allowed = [m.value for m, levels in capabilities.items() if level in levels]
        raise UnsupportedMetricAtLevelError(unsupported, level.value, allowed=allowed)

    return resolved


def _class_means(values: np.ndarray, encoding: LabelEncoding) -> np.ndarray:
    """Average element-level values within each class, ignoring NaN."""
    values = np.asarray(values, dtype=np.float64)
    return pd.Series(values).groupby(encoding.codes).mean().to_numpy()


def get_spatial_internal_metrics(
    labels,
    location,
    k: int = DEFAULT_K,
    level: str | Level = Level.CLASS,
    metrics: Iterable[str | Metric] | None = None,
    backend: str | None = None,
) -> pd.DataFrame:
    """
    Compute spatial internal metrics of one labeling at the requested level.

    Allowed metrics per level:
        - element: PAS (abnormality flag), ELSA (Ea, Ec, ELSA)
        - class: CHAOS, PAS, ELSA
        - dataset: PAS, ELSA, CHAOS, MPC, PC, PE

    Args:
        labels: Label per spot.
        location: N×D spot coordinates.
        k: Neighborhood size for PAS, ELSA and the fuzzy membership.
        level: "element", "class" or "dataset".
        metrics: Metric names (defaults depend on the level).
        backend: Neighbor search backend, None to choose by size.

    Returns:
        DataFrame of metric values (ELSA expands to Ea, Ec and ELSA columns).
    """
    level = parse_level(level)
    requested = resolve_metrics(metrics, level, INTERNAL_CAPABILITIES, DEFAULT_INTERNAL_METRICS)
    encoding = encode_labels(labels)
    X = as_coordinates(location, n_expected=len(encoding))
    k = check_k(k, len(encoding))

    logger.info(
        f"Computing {', '.join(m.value for m in requested)} at {level.value} level "
        f"for {len(encoding):,} spots in {encoding.n_categories} classes (k={k})"
    )

    columns = {}
    membership = None
    for metric in requested:
        if metric is Metric.PAS:
            result = pas(labels, X, k=k, backend=backend)
            columns["PAS"] = result.score if level is Level.DATASET else result.abnormal
        elif metric is Metric.ELSA:
            scores = elsa(labels, X, k=k, backend=backend)
            for col in scores.columns:
                if level is Level.DATASET:
                    columns[col] = scores[col].mean()
                else:
                    columns[col] = scores[col].to_numpy()
        elif metric is Metric.CHAOS:
            result = chaos(labels, X, backend=backend)
            columns["CHAOS"] = result.score if level is Level.DATASET else result.per_class
        else:
            if membership is None:
                membership = fuzzy_membership(labels, X, k=k, backend=backend)
            if metric is Metric.MPC:
                columns["MPC"] = modified_partition_coefficient(membership)
            elif metric is Metric.PC:
                columns["PC"] = partition_coefficient(membership)
            else:
                columns["PE"] = partition_entropy(membership)

    if level is Level.DATASET:
        return pd.DataFrame([columns])

    if level is Level.ELEMENT:
        return pd.DataFrame(columns)

    table = pd.DataFrame(index=pd.Index(encoding.categories, name="class"))
    for name, v in columns.items():
        # CHAOS arrives per class already, everything else per element
        table[name] = v.to_numpy() if isinstance(v, pd.Series) else _class_means(v, encoding)
    return table


def get_spatial_external_metrics(
    true_labels,
    pred_labels,
    location=None,
    k: int = DEFAULT_ACCURACY_K,
    level: str | Level = Level.DATASET,
    metrics: Iterable[str | Metric] | None = None,
    backend: str | None = None,
    use_pairs: bool = True,
    use_negatives: bool = False,
) -> pd.DataFrame:
    """
    Compare a predicted labeling with the ground truth at the requested level.

    Allowed metrics per level:
        - element: SpotAgreement
        - dataset: Accuracy, SpatialAccuracy (needs ``location``)

    Args:
        true_labels: Ground-truth class per spot.
        pred_labels: Predicted cluster per spot.
        location: N×D spot coordinates (required for SpatialAccuracy).
        k: Neighborhood size for SpatialAccuracy.
        level: "element" or "dataset".
        metrics: Metric names (defaults depend on the level).
        backend: Neighbor search backend, None to choose by size.
        use_pairs: SpotAgreement option, see ``get_agreement``.
        use_negatives: SpotAgreement option, see ``get_agreement``.

    Returns:
        DataFrame of metric values.
    """
    level = parse_level(level)
    requested = resolve_metrics(metrics, level, EXTERNAL_CAPABILITIES, DEFAULT_EXTERNAL_METRICS)

    true = encode_labels(true_labels, "true_labels")
    pred = encode_labels(pred_labels, "pred_labels")
    check_same_length(true, pred)

    X = None
    if Metric.SPATIAL_ACCURACY in requested:
        if location is None:
            raise InvalidArgumentError("SpatialAccuracy requires spot coordinates")
        X = as_coordinates(location, n_expected=len(true))
        k = check_k(k, len(true))

    columns = {}
    for metric in requested:
        if metric is Metric.SPOT_AGREEMENT:
            columns["SpotAgreement"] = get_agreement(
                true_labels, pred_labels, use_pairs=use_pairs, use_negatives=use_negatives
            )
        elif metric is Metric.ACCURACY:
            columns["Accuracy"] = matched_accuracy(true_labels, pred_labels)
        else:
            columns["SpatialAccuracy"] = nn_weighted_accuracy(
                true_labels, pred_labels, X, k=k, backend=backend
            )

    if level is Level.DATASET:
        return pd.DataFrame([columns])
    return pd.DataFrame(columns)


def _wrap(values: pd.DataFrame, level: Level, data, k: int) -> SpatialEvaluationResult:
    if level is Level.ELEMENT:
        values.index.name = "element"
    result = SpatialEvaluationResult(level=level.value, values=values)
    result.metadata = {
        "n_spots": data.n_spots,
        "n_dims": data.n_dims,
        "n_classes": data.n_classes,
        "k": k,
        "source_file": str(data.source_path),
        "label_col": data.label_col,
        "coord_cols": data.coord_cols,
    }
    for warning in data.warnings:
        result.add_warning(warning)
    return result


def evaluate(
    csv_path: str | Path,
    *,
    level: str = "dataset",
    metrics: list[str] | None = None,
    k: int = DEFAULT_K,
    label_col: str | None = None,
    coord_cols: list[str] | None = None,
    backend: str | None = None,
) -> SpatialEvaluationResult:
    """
    Evaluate the spatial coherence of the labeling stored in a CSV file.

    This is the main public API for single-labeling evaluation.

    Raises:
        FileNotFoundError: If CSV file does not exist
        InvalidCSVError: If CSV is malformed
        ColumnNotFoundError: If required columns not found
        InvalidMetricError: If a metric name is unknown
        UnsupportedMetricAtLevelError: If a metric is not defined at ``level``
    """
    level = parse_level(level)
    resolve_metrics(metrics, level, INTERNAL_CAPABILITIES, DEFAULT_INTERNAL_METRICS)

    data = load_csv(csv_path, label_col=label_col, coord_cols=coord_cols)
    values = get_spatial_internal_metrics(
        data.labels, data.coordinates, k=k, level=level, metrics=metrics, backend=backend
    )
    return _wrap(values, level, data, k)


def evaluate_external(
    csv_path: str | Path,
    *,
    level: str = "dataset",
    metrics: list[str] | None = None,
    k: int = DEFAULT_ACCURACY_K,
    true_col: str | None = None,
    pred_col: str | None = None,
    coord_cols: list[str] | None = None,
    backend: str | None = None,
    use_pairs: bool = True,
    use_negatives: bool = False,
) -> SpatialEvaluationResult:
    """
    Evaluate a predicted labeling against the ground truth stored in the same CSV file.

    Raises:
        FileNotFoundError: If CSV file does not exist
        InvalidCSVError: If CSV is malformed
        ColumnNotFoundError: If required columns not found
        InvalidMetricError: If a metric name is unknown
        UnsupportedMetricAtLevelError: If a metric is not defined at ``level``
    """
    level = parse_level(level)
    resolve_metrics(metrics, level, EXTERNAL_CAPABILITIES, DEFAULT_EXTERNAL_METRICS)

    data = load_csv(
        csv_path,
        label_col=true_col,
        coord_cols=coord_cols,
        pred_col=pred_col,
        with_predictions=True,
    )
    values = get_spatial_external_metrics(
        data.labels,
        data.pred_labels,
        data.coordinates,
        k=k,
        level=level,
        metrics=metrics,
        backend=backend,
        use_pairs=use_pairs,
        use_negatives=use_negatives,
    )
    result = _wrap(values, level, data, k)
    result.metadata["pred_col"] = data.pred_col
    result.metadata["n_clusters"] = int(len(np.unique(data.pred_labels)))
    return result
