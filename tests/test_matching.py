"""Unit tests for the optimal class/cluster correspondence."""

import numpy as np
import pytest

from spatialeval.core.exceptions import InvalidArgumentError
from spatialeval.core.matching import UNMATCHED, contingency_table, match_sets


class TestMatchSets:
    """Tests for match_sets()."""

    def test_identical_labelings(self):
        """Each class is matched to itself and all elements are covered."""
        labels = np.array([0, 0, 1, 1, 2, 2])

        corr = match_sets(labels, labels)

        np.testing.assert_array_equal(corr.pred_to_true, [0, 1, 2])
        np.testing.assert_array_equal(corr.true_to_pred, [0, 1, 2])
        assert corr.matched_mass == 6

    def test_permuted_cluster_ids(self):
        """Arbitrary cluster ids are aligned with the classes they cover."""
        true = np.array(["a", "a", "b", "b", "c", "c"])
        pred = np.array([9, 9, 4, 4, 1, 1])

        corr = match_sets(true, pred)

        # Predicted categories are sorted: 1 -> c, 4 -> b, 9 -> a
        np.testing.assert_array_equal(corr.pred_to_true, [2, 1, 0])
        np.testing.assert_array_equal(corr.true_to_pred, [2, 1, 0])
        assert corr.matched_mass == 6

    def test_more_clusters_than_classes(self):
        """Leftover clusters map to UNMATCHED."""
        true = np.array([0, 0, 0, 1, 1, 1])
        pred = np.array([0, 0, 2, 1, 1, 1])

        corr = match_sets(true, pred)

        np.testing.assert_array_equal(corr.pred_to_true, [0, 1, UNMATCHED])
        assert corr.matched_mass == 5

    def test_more_classes_than_clusters(self):
        """Leftover classes map to UNMATCHED."""
        true = np.array([0, 0, 1, 1, 2, 2, 2])
        pred = np.array([5, 5, 5, 5, 6, 6, 6])

        corr = match_sets(true, pred)

        assert corr.true_to_pred[2] == 1
        assert UNMATCHED in corr.true_to_pred
        assert corr.matched_mass == 5

    def test_matched_mass_equals_matched_cells(self):
        """The matched mass is the sum of the contingency cells on the matching."""
        rng = np.random.default_rng(0)
        true = rng.integers(0, 4, size=200)
        pred = rng.integers(0, 5, size=200)

        corr = match_sets(true, pred)

        matched = [(t, p) for t, p in enumerate(corr.true_to_pred) if p != UNMATCHED]
        assert corr.matched_mass == sum(corr.contingency[t, p] for t, p in matched)
        # Round trip through both maps
        for t, p in matched:
            assert corr.pred_to_true[p] == t

    def test_matching_is_optimal(self):
        """The matching beats the naive diagonal pairing when that is worse."""
        true = np.array([0, 0, 0, 1, 1, 2])
        pred = np.array([1, 1, 1, 2, 2, 0])

        corr = match_sets(true, pred)

        assert corr.matched_mass == 6

    def test_relabel(self):
        """Predicted codes are translated into matched true codes."""
        true = np.array([0, 0, 1, 1])
        pred = np.array([1, 1, 0, 0])

        corr = match_sets(true, pred)

        np.testing.assert_array_equal(corr.relabel(np.array([1, 1, 0, 0])), [0, 0, 1, 1])

    def test_length_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            match_sets([0, 1, 1], [0, 1])


class TestContingencyTable:
    def test_counts(self):
        table = contingency_table(np.array([0, 0, 1, 1]), np.array([0, 1, 1, 1]))

        np.testing.assert_array_equal(table, [[1, 1], [0, 2]])
