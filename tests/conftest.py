"""
Shared fixtures for edastats tests.
"""

import numpy as np
import pytest


WINE_LIKE_CLASS_SIZES = (59, 71, 48)
WINE_LIKE_FEATURES = [
    'alcohol', 'malic_acid', 'ash', 'alcalinity_of_ash', 'magnesium',
    'total_phenols', 'flavanoids', 'nonflavanoid_phenols', 'proanthocyanins',
    'color_intensity', 'hue', 'od280_od315', 'proline'
]


@pytest.fixture
def wine_like_data():
    """
    Synthetic stand-in for a 178 x 13 dataset with 3 classes.

    Classes differ in their means and features live on very different
    scales, so scaled and unscaled PCA disagree.
    """
    rng = np.random.default_rng(42)
    n_features = len(WINE_LIKE_FEATURES)
    scales = np.logspace(-1, 3, n_features)

    blocks = []
    labels = []
    for label, size in enumerate(WINE_LIKE_CLASS_SIZES, start=1):
        shift = rng.normal(0, 1.5, n_features)
        latent = rng.normal(size=(size, 2))
        mixing = rng.normal(size=(2, n_features))
        block = (latent @ mixing + rng.normal(size=(size, n_features)) + shift) * scales
        blocks.append(block)
        labels.extend([label] * size)

    return np.vstack(blocks), labels, list(WINE_LIKE_FEATURES)


@pytest.fixture
def small_matrix():
    """The 4 x 2 matrix with nearly dependent columns."""
    return [[1, 2], [3, 4], [5, 6], [7, 9]]
