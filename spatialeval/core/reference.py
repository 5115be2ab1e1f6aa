"""Metric reference data: levels, directions, ranges and tuning constants."""

from enum import Enum


class Level(str, Enum):
    """Granularity at which a metric is reported."""

    ELEMENT = "element"
    CLASS = "class"
    DATASET = "dataset"


class Metric(str, Enum):
    """Every metric the package knows how to compute."""

    # Internal (labels + coordinates)
    PAS = "PAS"
    CHAOS = "CHAOS"
    ELSA = "ELSA"
    MPC = "MPC"
    PC = "PC"
    PE = "PE"
    # External (true + predicted labels, optionally coordinates)
    SPOT_AGREEMENT = "SpotAgreement"
    ACCURACY = "Accuracy"
    SPATIAL_ACCURACY = "SpatialAccuracy"


# Levels supported by each internal metric
INTERNAL_CAPABILITIES: dict[Metric, frozenset[Level]] = {
    Metric.PAS: frozenset({Level.ELEMENT, Level.CLASS, Level.DATASET}),
    Metric.ELSA: frozenset({Level.ELEMENT, Level.CLASS, Level.DATASET}),
    Metric.CHAOS: frozenset({Level.CLASS, Level.DATASET}),
    Metric.MPC: frozenset({Level.DATASET}),
    Metric.PC: frozenset({Level.DATASET}),
    Metric.PE: frozenset({Level.DATASET}),
}

# Levels supported by each external metric
EXTERNAL_CAPABILITIES: dict[Metric, frozenset[Level]] = {
    Metric.SPOT_AGREEMENT: frozenset({Level.ELEMENT}),
    Metric.ACCURACY: frozenset({Level.DATASET}),
    Metric.SPATIAL_ACCURACY: frozenset({Level.DATASET}),
}

# Metrics computed when the caller does not name any
DEFAULT_INTERNAL_METRICS = {
    Level.ELEMENT: [Metric.PAS, Metric.ELSA],
    Level.CLASS: [Metric.CHAOS, Metric.PAS, Metric.ELSA],
    Level.DATASET: [Metric.PAS, Metric.ELSA, Metric.CHAOS],
}

DEFAULT_EXTERNAL_METRICS = {
    Level.ELEMENT: [Metric.SPOT_AGREEMENT],
    Level.DATASET: [Metric.ACCURACY, Metric.SPATIAL_ACCURACY],
}

# Exhaustive search up to this many points, approximate (HNSW) above
EXACT_SEARCH_THRESHOLD = 500

# HNSW graph degree and search breadth for the approximate backend
HNSW_M = 32
HNSW_EF_SEARCH = 64

# Own-class neighbor fraction below which a spot counts as abnormal (PAS)
ABNORMAL_THRESHOLD = 0.5

# Classes smaller than this contribute nothing to CHAOS
CHAOS_MIN_CLASS_SIZE = 3

# Neighborhood sizes used when the caller does not pass k
DEFAULT_K = 6
DEFAULT_PAS_K = 10
DEFAULT_ACCURACY_K = 5
DEFAULT_FUZZY_SELF_WEIGHT = 0.5


METRIC_REFERENCE = {
    "PAS": {
        "range": "[0, 1]",
        "direction": "lower",
        "kind": "Internal",
        "complexity": "O(n·k)",
        "description": "Proportion of abnormal spots: own class is a minority of the k-NN",
    },
    "CHAOS": {
        "range": "[0, ∞)",
        "direction": "lower",
        "kind": "Internal",
        "complexity": "O(n log n)",
        "description": "Mean within-class 1-NN distance on standardized coordinates",
    },
    "ELSA": {
        "range": "[0, 1]",
        "direction": "lower",
        "kind": "Internal",
        "complexity": "O(n·k)",
        "description": "Entropy-based local indicator of spatial association (Ea × Ec)",
    },
    "MPC": {
        "range": "[0, 1]",
        "direction": "higher",
        "kind": "Internal",
        "complexity": "O(n·k)",
        "description": "Modified partition coefficient of the neighborhood fuzzy membership",
    },
    "PC": {
        "range": "[1/C, 1]",
        "direction": "higher",
        "kind": "Internal",
        "complexity": "O(n·k)",
        "description": "Partition coefficient of the neighborhood fuzzy membership",
    },
    "PE": {
        "range": "[0, log(C)]",
        "direction": "lower",
        "kind": "Internal",
        "complexity": "O(n·k)",
        "description": "Partition entropy of the neighborhood fuzzy membership",
    },
    "SpotAgreement": {
        "range": "[0, 1]",
        "direction": "higher",
        "kind": "External",
        "complexity": "O(n)",
        "description": "Per-spot pair agreement between class and cluster",
    },
    "Accuracy": {
        "range": "[0, 1]",
        "direction": "higher",
        "kind": "External",
        "complexity": "O(n + C³)",
        "description": "Accuracy after optimal one-to-one label matching",
    },
    "SpatialAccuracy": {
        "range": "[0, 1]",
        "direction": "higher",
        "kind": "External",
        "complexity": "O(n·k + C³)",
        "description": "Matched accuracy with errors weighted by their spatial neighborhood",
    },
}


def get_metric_info(name: str) -> dict | None:
    """Get reference information for a metric by name."""
    return METRIC_REFERENCE.get(name)


def supported_levels(metric: Metric) -> frozenset[Level]:
    """Levels at which a metric can be reported."""
    if metric in INTERNAL_CAPABILITIES:
        return INTERNAL_CAPABILITIES[metric]
    return EXTERNAL_CAPABILITIES.get(metric, frozenset())


def get_direction_symbol(direction: str) -> str:
    """Convert direction to display symbol."""
    return "↑ Higher" if direction == "higher" else "↓ Lower"


def format_metric_value(value: float, precision: int = 4) -> str:
    """Format metric value for display."""
    if value is None or (isinstance(value, float) and (value != value)):  # NaN check
        return "N/A"
    return f"{value:.{precision}f}"
