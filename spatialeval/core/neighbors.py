"""
Spatial nearest-neighbor search.

Small inputs are searched exhaustively; larger inputs go through a FAISS HNSW
index, which trades a little recall for a large speedup. Both backends return
the same structure: per-point neighbor indices and Euclidean distances, self
excluded, sorted by distance with ties going to the lower point index.
"""

import logging
from dataclasses import dataclass

import faiss
import numpy as np
from scipy import sparse
from scipy.spatial.distance import cdist
from sklearn.neighbors import NearestNeighbors

from spatialeval.core.exceptions import InvalidArgumentError
from spatialeval.core.labels import as_coordinates, check_k
from spatialeval.core.reference import (
    EXACT_SEARCH_THRESHOLD,
    HNSW_EF_SEARCH,
    HNSW_M,
)

logger = logging.getLogger(__name__)

BACKENDS = ("exact", "approximate")

# Upper bound on distance-matrix cells held in memory by the exact backend
_CHUNK_CELLS = 2**24


@dataclass(frozen=True)
class NeighborGraph:
    """k-nearest-neighbor lists for a point set."""

    indices: np.ndarray
    distances: np.ndarray
    backend: str

    @property
    def n_points(self) -> int:
        return self.indices.shape[0]

    @property
    def k(self) -> int:
        return self.indices.shape[1]

    def neighbor_codes(self, codes: np.ndarray) -> np.ndarray:
        """Label codes of every point's neighbors (N×k)."""
        return np.asarray(codes)[self.indices]


def decide_backend(n_points: int, backend: str | None = None) -> str:
    """Pick the search backend: the caller's choice, else by input size."""
    if backend is None:
        return "exact" if n_points <= EXACT_SEARCH_THRESHOLD else "approximate"
    if backend not in BACKENDS:
        raise InvalidArgumentError(
            f"Unknown neighbor backend '{backend}', expected one of {', '.join(BACKENDS)}",
            backend=backend,
        )
    return backend


def _exact_rows(X: np.ndarray, rows: np.ndarray, k: int) -> tuple[np.ndarray, np.ndarray]:
    """Exhaustive k-NN for a subset of query rows."""
    D = cdist(X[rows], X)
    D[np.arange(len(rows)), rows] = np.inf
    # stable sort keeps equal distances in index order
    order = np.argsort(D, axis=1, kind="stable")[:, :k]
    return order, np.take_along_axis(D, order, axis=1)


def _exact_knn(X: np.ndarray, k: int) -> tuple[np.ndarray, np.ndarray]:
    n = X.shape[0]
    chunk = max(1, _CHUNK_CELLS // n)
    indices = np.empty((n, k), dtype=np.intp)
    distances = np.empty((n, k), dtype=np.float64)
    for start in range(0, n, chunk):
        rows = np.arange(start, min(start + chunk, n))
        indices[rows], distances[rows] = _exact_rows(X, rows, k)
    return indices, distances


def _drop_self(indices: np.ndarray, k: int) -> np.ndarray:
    """Remove each point from its own k+1 candidate list."""
    n = indices.shape[0]
    is_self = indices == np.arange(n)[:, None]
    # self not returned (duplicates or a missed hit): drop the farthest candidate
    missing = ~is_self.any(axis=1)
    is_self[missing, -1] = True
    return indices[~is_self].reshape(n, k)


def _hnsw_knn(X: np.ndarray, k: int) -> tuple[np.ndarray, np.ndarray]:
    n, d = X.shape
    data = np.ascontiguousarray(X, dtype=np.float32)

    index = faiss.IndexHNSWFlat(d, HNSW_M)
    # graph construction is order-sensitive when threaded
    n_threads = faiss.omp_get_max_threads()
    faiss.omp_set_num_threads(1)
    try:
        index.add(data)
    finally:
        faiss.omp_set_num_threads(n_threads)

    index.hnsw.efSearch = max(HNSW_EF_SEARCH, k + 1)
    _, candidates = index.search(data, k + 1)
    indices = _drop_self(candidates.astype(np.intp), k)

    incomplete = np.flatnonzero((indices < 0).any(axis=1))
    if len(incomplete) > 0:
        logger.debug(f"HNSW returned short lists for {len(incomplete)} points, filling exactly")
        indices[incomplete], _ = _exact_rows(X, incomplete, k)

    # float64 distances so that ties are compared exactly
    distances = np.linalg.norm(X[:, None, :] - X[indices], axis=2)
    return indices, distances


def build_knn(coordinates, k: int, backend: str | None = None) -> NeighborGraph:
    """
    Build the k-nearest-neighbor graph of a point set.

    Args:
        coordinates: N×D coordinate matrix (1-D input is treated as D=1).
        k: Number of neighbors per point, 1 <= k < N.
        backend: "exact", "approximate", or None to choose by size
            (exact for N <= EXACT_SEARCH_THRESHOLD).

    Returns:
        NeighborGraph whose rows hold k neighbors each, self excluded,
        ordered by distance then index.

    Raises:
        InvalidArgumentError: If k is out of range, coordinates are invalid,
            or the backend is unknown.
    """
    X = as_coordinates(coordinates)
    n = X.shape[0]
    k = check_k(k, n)
    backend = decide_backend(n, backend)
    logger.debug(f"Building {k}-NN graph over {n:,} points with the {backend} backend")

    if backend == "exact":
        indices, distances = _exact_knn(X, k)
    else:
        indices, distances = _hnsw_knn(X, k)

    order = np.lexsort((indices, distances), axis=1)
    return NeighborGraph(
        indices=np.take_along_axis(indices, order, axis=1),
        distances=np.take_along_axis(distances, order, axis=1),
        backend=backend,
    )


def radius_graph(coordinates, radius: float) -> sparse.csr_matrix:
    """
    Connectivity of all point pairs within ``radius`` of each other.

    Points sharing a location are neighbors of each other (distance 0); a
    point is never its own neighbor.

    Returns:
        N×N sparse 0/1 matrix, row i marking the neighbors of point i.
    """
    X = as_coordinates(coordinates)
    if radius < 0:
        raise InvalidArgumentError(f"radius must be non-negative, got {radius}", radius=radius)

    # tree distances may differ from cdist in the last ulp
    tolerance = 1e-12 * max(1.0, radius)
    nn = NearestNeighbors(radius=radius + tolerance).fit(X)
    graph = nn.radius_neighbors_graph(X, mode="connectivity").tocsr()
    graph.setdiag(0)
    graph.eliminate_zeros()
    logger.debug(
        f"Radius graph (r={radius:.4g}) has {graph.nnz:,} edges over {X.shape[0]:,} points"
    )
    return graph
