"""Class composition of spatial neighborhoods."""

import numpy as np

from spatialeval.core.exceptions import InvalidArgumentError
from spatialeval.core.labels import as_coordinates, encode_labels
from spatialeval.core.neighbors import NeighborGraph, build_knn


def knn_composition(
    graph: NeighborGraph,
    codes: np.ndarray,
    n_classes: int | None = None,
    self_weight: float = 0.0,
) -> np.ndarray:
    """
    Fraction of each class in every point's neighborhood.

    Each neighbor counts equally (no distance weighting). With
    ``self_weight`` = a, the row becomes a * onehot(own class) +
    (1 - a) * neighbor fractions, so rows always sum to 1.

    Args:
        graph: k-NN graph of the points.
        codes: Dense class codes (0..C-1), one per point.
        n_classes: Number of classes C (defaults to max code + 1).
        self_weight: Weight of the point's own label, in [0, 1].

    Returns:
        N×C composition matrix.
    """
    codes = np.asarray(codes)
    if len(codes) != graph.n_points:
        raise InvalidArgumentError(
            f"Got {len(codes)} labels for a graph over {graph.n_points} points",
            n_labels=len(codes),
            n_points=graph.n_points,
        )
    if not 0.0 <= self_weight <= 1.0:
        raise InvalidArgumentError(
            f"self_weight must lie in [0, 1], got {self_weight}", self_weight=self_weight
        )
    if n_classes is None:
        n_classes = int(codes.max()) + 1

    n = graph.n_points
    comp = np.zeros((n, n_classes))
    rows = np.repeat(np.arange(n), graph.k)
    np.add.at(comp, (rows, graph.neighbor_codes(codes).ravel()), 1.0)
    comp /= graph.k

    if self_weight > 0:
        comp *= 1.0 - self_weight
        comp[np.arange(n), codes] += self_weight
    return comp


def spatial_composition(
    labels,
    location,
    k: int,
    self_weight: float = 0.0,
    backend: str | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Build the k-NN graph and return the composition matrix with its class values.

    Returns:
        Tuple of (N×C composition matrix, sorted class values for the columns).
    """
    encoding = encode_labels(labels)
    X = as_coordinates(location, n_expected=len(encoding))
    graph = build_knn(X, k, backend=backend)
    comp = knn_composition(graph, encoding.codes, encoding.n_categories, self_weight)
    return comp, encoding.categories
