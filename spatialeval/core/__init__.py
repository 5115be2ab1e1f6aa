"""Core evaluation functionality."""

from spatialeval.core.composition import knn_composition, spatial_composition
from spatialeval.core.evaluator import (
    evaluate,
    evaluate_external,
    get_spatial_external_metrics,
    get_spatial_internal_metrics,
    resolve_metrics,
)
from spatialeval.core.exceptions import (
    ColumnNotFoundError,
    FileNotFoundError,
    InvalidArgumentError,
    InvalidCSVError,
    InvalidMetricError,
    SpatialEvalError,
    UnsupportedCombinationError,
    UnsupportedMetricAtLevelError,
)
from spatialeval.core.labels import LabelEncoding, encode_labels
from spatialeval.core.loader import SpatialData, detect_columns, load_csv
from spatialeval.core.matching import (
    UNMATCHED,
    Correspondence,
    contingency_table,
    match_sets,
)
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
from spatialeval.core.neighbors import NeighborGraph, build_knn, decide_backend, radius_graph
from spatialeval.core.reference import (
    EXACT_SEARCH_THRESHOLD,
    EXTERNAL_CAPABILITIES,
    INTERNAL_CAPABILITIES,
    METRIC_REFERENCE,
    Level,
    Metric,
    get_metric_info,
)

__all__ = [
    # Reference
    "METRIC_REFERENCE",
    "INTERNAL_CAPABILITIES",
    "EXTERNAL_CAPABILITIES",
    "EXACT_SEARCH_THRESHOLD",
    "Level",
    "Metric",
    "get_metric_info",
    # Exceptions
    "SpatialEvalError",
    "InvalidArgumentError",
    "UnsupportedMetricAtLevelError",
    "UnsupportedCombinationError",
    "InvalidMetricError",
    "FileNotFoundError",
    "InvalidCSVError",
    "ColumnNotFoundError",
    # Labels and loading
    "LabelEncoding",
    "encode_labels",
    "SpatialData",
    "load_csv",
    "detect_columns",
    # Neighborhoods
    "NeighborGraph",
    "build_knn",
    "decide_backend",
    "radius_graph",
    "knn_composition",
    "spatial_composition",
    # Matching
    "UNMATCHED",
    "Correspondence",
    "contingency_table",
    "match_sets",
    # Metrics
    "pas",
    "chaos",
    "elsa",
    "fuzzy_membership",
    "partition_coefficient",
    "partition_entropy",
    "modified_partition_coefficient",
    "matched_accuracy",
    "nn_weighted_accuracy",
    "get_agreement",
    # Evaluator
    "get_spatial_internal_metrics",
    "get_spatial_external_metrics",
    "resolve_metrics",
    "evaluate",
    "evaluate_external",
]
