"""Pytest fixtures for spatialeval tests."""

import numpy as np
import pandas as pd
import pytest


def grid_coordinates(n_rows: int, n_cols: int) -> np.ndarray:
    """Spots on a unit-spaced rectangular grid, row-major."""
    rows, cols = np.meshgrid(np.arange(n_rows), np.arange(n_cols), indexing="ij")
    return np.column_stack([rows.ravel(), cols.ravel()]).astype(float)


@pytest.fixture
def block_layout():
    """Two 10×5 blocks side by side on a 10×10 grid, one label per block."""
    coords = grid_coordinates(10, 10)
    labels = np.where(coords[:, 1] < 5, "A", "B")
    return coords, labels


@pytest.fixture
def separated_blobs():
    """Three tight, far-apart blobs of 30 spots each."""
    rng = np.random.default_rng(42)
    centers = np.array([[0.0, 0.0], [50.0, 0.0], [0.0, 50.0]])
    coords = np.vstack([c + rng.normal(scale=1.0, size=(30, 2)) for c in centers])
    labels = np.repeat([0, 1, 2], 30)
    return coords, labels


@pytest.fixture
def noisy_labels(block_layout):
    """Block labels with 10 spots flipped to the other block's label."""
    coords, labels = block_layout
    rng = np.random.default_rng(7)
    noisy = labels.copy()
    flipped = rng.choice(len(labels), size=10, replace=False)
    noisy[flipped] = np.where(noisy[flipped] == "A", "B", "A")
    return coords, labels, noisy


@pytest.fixture
def spots_csv(tmp_path, noisy_labels):
    """CSV with x/y coordinates, a ground-truth column and a prediction column."""
    coords, truth, pred = noisy_labels
    # Prediction ids are arbitrary: use integers unrelated to the class names
    pred_ids = np.where(pred == "A", 7, 3)

    df = pd.DataFrame(
        {
            "x": coords[:, 0],
            "y": coords[:, 1],
            "label": truth,
            "pred": pred_ids,
        }
    )
    csv_path = tmp_path / "spots.csv"
    df.to_csv(csv_path, index=False)
    return csv_path


@pytest.fixture
def spots_csv_with_nan(tmp_path, block_layout):
    """CSV whose first two spots have missing coordinates."""
    coords, labels = block_layout
    df = pd.DataFrame({"array_row": coords[:, 0], "array_col": coords[:, 1], "domain": labels})
    df.loc[:1, "array_row"] = np.nan
    csv_path = tmp_path / "spots_nan.csv"
    df.to_csv(csv_path, index=False)
    return csv_path
