"""
Optimal one-to-one correspondence between two labelings.

Cluster ids produced by a clustering algorithm are arbitrary, so before
counting hits the predicted clusters are aligned to the true classes by a
maximum-weight bipartite matching on their contingency table.
"""

from dataclasses import dataclass

import numpy as np
from scipy.optimize import linear_sum_assignment
from sklearn.metrics.cluster import contingency_matrix

from spatialeval.core.labels import LabelEncoding, check_same_length, encode_labels

# Code used for categories left without a partner
UNMATCHED = -1


@dataclass(frozen=True)
class Correspondence:
    """Matched pairs between true classes and predicted clusters."""

    pred_to_true: np.ndarray
    true_to_pred: np.ndarray
    contingency: np.ndarray
    matched_mass: int

    def relabel(self, pred_codes: np.ndarray) -> np.ndarray:
        """Translate predicted codes into matched true codes (UNMATCHED if none)."""
        return self.pred_to_true[np.asarray(pred_codes)]


def contingency_table(true_codes: np.ndarray, pred_codes: np.ndarray) -> np.ndarray:
    """C_true × C_pred co-occurrence counts."""
    return contingency_matrix(true_codes, pred_codes)


def match_codes(true_labels: LabelEncoding, pred_labels: LabelEncoding) -> Correspondence:
    """Match two already-interned labelings."""
    check_same_length(true_labels, pred_labels)

    table = contingency_table(true_labels.codes, pred_labels.codes)

    rows, cols = linear_sum_assignment(table, maximize=True)

    pred_to_true = np.full(pred_labels.n_categories, UNMATCHED, dtype=np.intp)
    true_to_pred = np.full(true_labels.n_categories, UNMATCHED, dtype=np.intp)
    pred_to_true[cols] = rows
    true_to_pred[rows] = cols

    return Correspondence(
        pred_to_true=pred_to_true,
        true_to_pred=true_to_pred,
        contingency=table,
        matched_mass=int(table[rows, cols].sum()),
    )


def match_sets(true_labels, pred_labels) -> Correspondence:
    """
    Align predicted clusters to true classes.

    Solves the assignment problem maximizing the number of elements whose
    cluster is matched to their class. Each class and each cluster is used at
    most once; when the counts differ, the leftover categories map to
    ``UNMATCHED``.

    Args:
        true_labels: Ground-truth class labels.
        pred_labels: Predicted cluster labels, same length.

    Returns:
        Correspondence indexed by the sorted category codes of each labeling.
    """
    return match_codes(
        encode_labels(true_labels, "true_labels"),
        encode_labels(pred_labels, "pred_labels"),
    )
