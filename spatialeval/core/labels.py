"""
Label interning and input validation shared by all metrics.

Labels may be any sortable values (ints, strings, ...). They are mapped to
dense integer codes 0..C-1 in sorted order; the mapping is returned so codes
can be turned back into the caller's values.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from spatialeval.core.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class LabelEncoding:
    """Dense integer codes for a labeling, plus the sorted category values."""

    categories: np.ndarray
    codes: np.ndarray

    @property
    def n_categories(self) -> int:
        return len(self.categories)

    def __len__(self) -> int:
        return len(self.codes)

    def decode(self, codes: np.ndarray) -> np.ndarray:
        """Map integer codes back to the original label values."""
        return self.categories[np.asarray(codes)]

    def counts(self) -> np.ndarray:
        """Number of elements per category, in category order."""
        return np.bincount(self.codes, minlength=self.n_categories)


def encode_labels(labels, name: str = "labels") -> LabelEncoding:
    """
    Intern a label sequence into dense integer codes.

    Args:
        labels: Sequence of hashable, mutually comparable label values.
        name: Argument name used in error messages.

    Returns:
        LabelEncoding with sorted categories and per-element codes.

    Raises:
        InvalidArgumentError: If labels are empty, not 1-D, or contain NaN/None.
    """
    values = np.asarray(labels)
    if values.ndim != 1:
        raise InvalidArgumentError(f"{name} must be one-dimensional", shape=values.shape)
    if len(values) == 0:
        raise InvalidArgumentError(f"{name} must not be empty")

    missing = int(pd.isna(values).sum())
    if missing > 0:
        raise InvalidArgumentError(
            f"{name} contains {missing} missing value(s)", argument=name, missing=missing
        )

    categories, codes = np.unique(values, return_inverse=True)
    return LabelEncoding(categories=categories, codes=codes.reshape(-1).astype(np.intp))


def as_coordinates(location, n_expected: int | None = None) -> np.ndarray:
    """
    Validate and convert point locations to an N×D float matrix.

    A 1-D input is treated as N points in one dimension.

    Raises:
        InvalidArgumentError: On non-numeric or non-finite values, or when the
            number of rows differs from ``n_expected``.
    """
    try:
        X = np.asarray(location, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Coordinates must be numeric: {e}")

    if X.ndim == 1:
        X = X.reshape(-1, 1)
    if X.ndim != 2 or X.shape[1] < 1:
        raise InvalidArgumentError("Coordinates must be an N×D matrix", shape=X.shape)
    if not np.isfinite(X).all():
        raise InvalidArgumentError("Coordinates contain NaN or infinite values")
    if n_expected is not None and X.shape[0] != n_expected:
        raise InvalidArgumentError(
            f"Got {X.shape[0]} coordinate rows for {n_expected} labels",
            n_coordinates=X.shape[0],
            n_labels=n_expected,
        )
    return X


def check_same_length(true_labels: LabelEncoding, pred_labels: LabelEncoding) -> None:
    """Raise if two labelings do not cover the same number of elements."""
    if len(true_labels) != len(pred_labels):
        raise InvalidArgumentError(
            f"true and predicted labels differ in length "
            f"({len(true_labels)} vs {len(pred_labels)})",
            n_true=len(true_labels),
            n_pred=len(pred_labels),
        )


def check_k(k, n_points: int) -> int:
    """Validate a neighborhood size against the number of points."""
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise InvalidArgumentError(f"k must be an integer, got {k!r}", k=k)
    if k < 1:
        raise InvalidArgumentError(f"k must be at least 1, got {k}", k=int(k))
    if k >= n_points:
        raise InvalidArgumentError(
            f"k={k} must be smaller than the number of points ({n_points})",
            k=int(k),
            n_points=n_points,
        )
    return int(k)
