"""Unit tests for label interning and input validation."""

import numpy as np
import pytest

from spatialeval.core.exceptions import InvalidArgumentError
from spatialeval.core.labels import as_coordinates, check_k, encode_labels


class TestEncodeLabels:
    def test_sorted_dense_codes(self):
        encoding = encode_labels(["b", "a", "c", "a"])

        assert list(encoding.categories) == ["a", "b", "c"]
        np.testing.assert_array_equal(encoding.codes, [1, 0, 2, 0])
        np.testing.assert_array_equal(encoding.counts(), [2, 1, 1])
        assert len(encoding) == 4

    def test_decode_round_trip(self):
        labels = np.array([10, 3, 3, 7])
        encoding = encode_labels(labels)

        np.testing.assert_array_equal(encoding.decode(encoding.codes), labels)

    @pytest.mark.parametrize("labels", [[], [[0, 1], [1, 0]], [1.0, np.nan], ["a", None]])
    def test_invalid_labels(self, labels):
        with pytest.raises(InvalidArgumentError):
            encode_labels(labels)


class TestCoordinatesAndK:
    def test_row_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            as_coordinates(np.zeros((3, 2)), n_expected=4)

    def test_non_numeric(self):
        with pytest.raises(InvalidArgumentError):
            as_coordinates([["a", "b"], ["c", "d"]])

    def test_k_bounds(self):
        assert check_k(np.int64(3), 4) == 3
        with pytest.raises(InvalidArgumentError):
            check_k(4, 4)
