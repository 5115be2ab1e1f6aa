"""
Spatial clustering metric implementations.

Internal metrics score a single labeling against the point layout:
    metric(labels, location, ...) -> result

External metrics compare a predicted labeling with the ground truth:
    metric(true_labels, pred_labels, [location], ...) -> result

Every call builds the neighbor graph or contingency table it needs; nothing
is shared between calls.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import sparse
from scipy.stats import entropy

from spatialeval.core.composition import knn_composition, spatial_composition
from spatialeval.core.exceptions import InvalidArgumentError, UnsupportedCombinationError
from spatialeval.core.labels import (
    as_coordinates,
    check_k,
    check_same_length,
    encode_labels,
)
from spatialeval.core.matching import contingency_table, match_codes
from spatialeval.core.neighbors import build_knn, decide_backend, radius_graph
from spatialeval.core.reference import (
    ABNORMAL_THRESHOLD,
    CHAOS_MIN_CLASS_SIZE,
    DEFAULT_ACCURACY_K,
    DEFAULT_FUZZY_SELF_WEIGHT,
    DEFAULT_K,
    DEFAULT_PAS_K,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Result containers
# =============================================================================


@dataclass
class PASResult:
    """Dataset PAS score and the per-element abnormality flags behind it."""

    score: float
    abnormal: np.ndarray


@dataclass
class CHAOSResult:
    """Dataset CHAOS score and per-class mean 1-NN distances."""

    score: float
    per_class: pd.Series


# =============================================================================
# Internal Metrics
# =============================================================================


def pas(labels, location, k: int = DEFAULT_PAS_K, backend: str | None = None) -> PASResult:
    """
    Proportion of Abnormal Spots.

    A spot is abnormal when fewer than half of its k nearest neighbors share
    its label. Lower = spatially more coherent.
    """
    encoding = encode_labels(labels)
    X = as_coordinates(location, n_expected=len(encoding))
    graph = build_knn(X, k, backend=backend)
    comp = knn_composition(graph, encoding.codes, encoding.n_categories, self_weight=0.0)

    own = comp[np.arange(len(encoding)), encoding.codes]
    abnormal = own < ABNORMAL_THRESHOLD
    return PASResult(score=float(abnormal.mean()), abnormal=abnormal)


def standardize(X: np.ndarray) -> np.ndarray:
    """Center columns and scale to unit sample variance (constant columns are only centered)."""
    centered = X - X.mean(axis=0)
    if X.shape[0] < 2:
        return centered
    sd = X.std(axis=0, ddof=1)
    return centered / np.where(sd > 0, sd, 1.0)


def chaos(labels, location, backend: str | None = None) -> CHAOSResult:
    """
    Spatial chaos score.

    For every class, sums the distance from each member to its nearest
    same-class neighbor on standardized coordinates. Classes with fewer than
    CHAOS_MIN_CLASS_SIZE members contribute 0. The dataset score divides the
    total by N; per-class scores divide by the class size. Lower = better.
    """
    encoding = encode_labels(labels)
    X = as_coordinates(location, n_expected=len(encoding))
    Z = standardize(X)
    # backend follows the size of the whole dataset, not of each class
    backend = decide_backend(len(Z), backend)

    dist_sums = np.zeros(encoding.n_categories)
    for code in range(encoding.n_categories):
        members = np.flatnonzero(encoding.codes == code)
        if len(members) < CHAOS_MIN_CLASS_SIZE:
            logger.debug(
                f"CHAOS: class {encoding.categories[code]!r} has {len(members)} point(s), skipped"
            )
            continue
        graph = build_knn(Z[members], 1, backend=backend)
        dist_sums[code] = graph.distances[:, 0].sum()

    per_class = pd.Series(
        dist_sums / encoding.counts(),
        index=pd.Index(encoding.categories, name="class"),
        name="CHAOS",
    )
    return CHAOSResult(score=float(dist_sums.sum() / len(encoding)), per_class=per_class)


def elsa(labels, location, k: int = DEFAULT_PAS_K, backend: str | None = None) -> pd.DataFrame:
    """
    Entropy-based Local indicator of Spatial Association (Naimi et al., 2019).

    The neighborhood of a spot holds every other spot within the largest
    k-NN distance of the dataset. With binary weights and 0/1 label
    dissimilarity:

        Ea = share of neighbors with a different label
        Ec = Shannon entropy (base 2) of the labels in the neighborhood plus
             the spot, normalized by log2(min(C, neighborhood size + 1))
        ELSA = Ea × Ec

    Returns:
        DataFrame with columns Ea, Ec, ELSA, one row per spot. Lower values
        mean stronger spatial autocorrelation of the labels.
    """
    encoding = encode_labels(labels)
    X = as_coordinates(location, n_expected=len(encoding))
    n, n_classes = len(encoding), encoding.n_categories
    codes = encoding.codes

    graph = build_knn(X, k, backend=backend)
    adjacency = radius_graph(X, float(graph.distances.max()))

    membership = sparse.csr_matrix((np.ones(n), (np.arange(n), codes)), shape=(n, n_classes))
    counts = np.asarray((adjacency @ membership).todense())
    degree = counts.sum(axis=1)
    same = counts[np.arange(n), codes]

    ea = np.divide(degree - same, degree, out=np.full(n, np.nan), where=degree > 0)

    window = counts.copy()
    window[np.arange(n), codes] += 1
    m = np.minimum(n_classes, degree + 1)
    h = entropy(window, base=2, axis=1)
    ec = np.divide(h, np.log2(np.maximum(m, 2)), out=np.zeros(n), where=m > 1)
    ec[degree == 0] = np.nan

    return pd.DataFrame({"Ea": ea, "Ec": ec, "ELSA": ea * ec})


# =============================================================================
# Fuzzy Partition Metrics
# =============================================================================


def fuzzy_membership(
    labels,
    location,
    k: int = DEFAULT_K,
    self_weight: float = DEFAULT_FUZZY_SELF_WEIGHT,
    backend: str | None = None,
) -> np.ndarray:
    """Soft membership from crisp labels: own label blended with the k-NN composition."""
    membership, _ = spatial_composition(
        labels, location, k, self_weight=self_weight, backend=backend
    )
    return membership


def partition_coefficient(U: np.ndarray) -> float:
    """PC: mean squared membership. Range [1/C, 1], higher = crisper."""
    return float(np.mean(np.sum(U**2, axis=1)))


def partition_entropy(U: np.ndarray) -> float:
    """PE: mean membership entropy (natural log). Range [0, log C], lower = crisper."""
    return float(np.mean(entropy(U, axis=1)))


def modified_partition_coefficient(U: np.ndarray) -> float:
    """MPC: PC rescaled to [0, 1], removing its dependence on the number of classes."""
    n_classes = U.shape[1]
    if n_classes < 2:
        raise InvalidArgumentError("MPC needs at least 2 classes", n_classes=n_classes)
    return 1.0 - n_classes / (n_classes - 1) * (1.0 - partition_coefficient(U))


# =============================================================================
# External Metrics
# =============================================================================


def matched_accuracy(true_labels, pred_labels) -> float:
    """Accuracy after aligning predicted clusters to true classes.

    Spots in clusters left without a class count as errors.
    """
    true = encode_labels(true_labels, "true_labels")
    pred = encode_labels(pred_labels, "pred_labels")
    correspondence = match_codes(true, pred)
    relabeled = correspondence.relabel(pred.codes)
    return float(np.mean(relabeled == true.codes))


def nn_weighted_accuracy(
    true_labels,
    pred_labels,
    location,
    k: int = DEFAULT_ACCURACY_K,
    backend: str | None = None,
) -> float:
    """
    Matched accuracy where each error is weighted by its spatial neighborhood.

    A misclassified spot is penalized by the fraction of its k nearest
    neighbors whose true class differs from the spot's (matched) prediction,
    so errors at domain boundaries cost less than isolated ones:

        1 - sum(penalties over misclassified spots) / N
    """
    true = encode_labels(true_labels, "true_labels")
    pred = encode_labels(pred_labels, "pred_labels")
    check_same_length(true, pred)
    X = as_coordinates(location, n_expected=len(true))
    k = check_k(k, len(true))

    relabeled = match_codes(true, pred).relabel(pred.codes)
    wrong = np.flatnonzero(relabeled != true.codes)
    if len(wrong) == 0:
        return 1.0

    graph = build_knn(X, k, backend=backend)
    neighbor_truth = true.codes[graph.indices[wrong]]
    penalties = (neighbor_truth != relabeled[wrong][:, None]).mean(axis=1)
    return float(1.0 - penalties.sum() / len(true))


def _choose2(x: np.ndarray) -> np.ndarray:
    return x * (x - 1) / 2.0


def get_agreement(
    true_labels,
    pred_labels,
    use_pairs: bool = True,
    use_negatives: bool = False,
) -> np.ndarray:
    """
    Per-spot agreement between a clustering and the ground truth.

    Args:
        true_labels: Ground-truth class labels.
        pred_labels: Predicted cluster labels, same length.
        use_pairs: Score pairs of spots instead of the spots themselves.
        use_negatives: Also reward pairs that are separated in both
            labelings (only with ``use_pairs``).

    Returns:
        Array of scores in [0, 1], aligned with the inputs.

    Modes:
        - element (use_pairs=False): |class ∩ cluster| / |class ∪ cluster|
          for the class and cluster of the spot.
        - pairs: pairs co-assigned in the spot's class or cluster divided by
          all pairs in class ∪ cluster; a union of one spot scores 1.
        - pairs with negatives: 1 - mean over other spots j of
          |[pred_i = pred_j] - [true_i = true_j]|.

    Raises:
        UnsupportedCombinationError: If use_negatives is set without use_pairs.
    """
    if use_negatives and not use_pairs:
        raise UnsupportedCombinationError(
            "use_negatives is only defined together with use_pairs",
            use_pairs=use_pairs,
            use_negatives=use_negatives,
        )

    true = encode_labels(true_labels, "true_labels")
    pred = encode_labels(pred_labels, "pred_labels")
    check_same_length(true, pred)
    n = len(true)

    table = contingency_table(true.codes, pred.codes).astype(np.float64)
    class_sizes = table.sum(axis=1)
    cluster_sizes = table.sum(axis=0)

    if use_negatives:
        if n < 2:
            raise InvalidArgumentError("Negative-pair agreement needs at least 2 spots", n=n)
        # j disagrees with i when exactly one labeling groups them together
        cell = table[true.codes, pred.codes]
        disagreements = cluster_sizes[pred.codes] + class_sizes[true.codes] - 2 * cell
        return 1.0 - disagreements / (n - 1)

    union = class_sizes[:, None] + cluster_sizes[None, :] - table
    if use_pairs:
        pairs = _choose2(table)
        agreeing = pairs.sum(axis=0)[None, :] + pairs.sum(axis=1)[:, None] - pairs
        possible = _choose2(union)
        scores = np.divide(agreeing, possible, out=np.ones_like(possible), where=possible > 0)
    else:
        scores = table / union

    return scores[true.codes, pred.codes]
