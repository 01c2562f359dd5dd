"""
Tests for the standardize module.
"""

import dataclasses

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from edastats.math.standardize import (
    standardize, column_stats, zero_variance_columns
)
from edastats.math.errors import InvalidInputError


class TestStandardize:
    """Tests for the standardize function."""

    def test_zero_mean_unit_std(self, wine_like_data):
        """Test every column has mean 0 and sample std 1."""
        data, _, names = wine_like_data
        result = standardize(data, colnames=names)

        assert result.shape == data.shape
        assert np.allclose(result.values.mean(axis=0), 0.0, atol=1e-9)
        assert np.allclose(result.values.std(axis=0, ddof=1), 1.0, atol=1e-9)

    def test_uses_sample_std(self):
        """Test the n - 1 denominator."""
        result = standardize([[1.0], [2.0], [3.0]])

        assert np.allclose(result.means, [2.0])
        assert np.allclose(result.stds, [1.0])
        assert np.allclose(result.values[:, 0], [-1.0, 0.0, 1.0])

    def test_inverse_transform(self, wine_like_data):
        """Test mapping back to the original scale."""
        data, _, _ = wine_like_data
        result = standardize(data)
        assert np.allclose(result.inverse_transform(), data)

    def test_constant_column(self):
        """Test a zero-variance column is rejected by name."""
        data = [[1.0, 5.0], [2.0, 5.0], [3.0, 5.0]]

        with pytest.raises(InvalidInputError, match="const"):
            standardize(data, colnames=['x', 'const'])

    def test_constant_non_integer_column(self):
        """Test a constant column whose mean is not exactly representable."""
        data = [[1.0, 0.1], [2.0, 0.1], [3.0, 0.1]]

        with pytest.raises(InvalidInputError):
            standardize(data)

    def test_ragged_input(self):
        """Test non-rectangular input is rejected."""
        with pytest.raises(InvalidInputError):
            standardize([[1.0, 2.0], [3.0]])

    def test_single_row(self):
        """Test a single row is rejected."""
        with pytest.raises(InvalidInputError):
            standardize([[1.0, 2.0]])

    def test_overflowing_variance(self):
        """Test a column whose variance overflows is rejected by name."""
        data = [[1e308, 1.0], [-1e308, 2.0], [0.0, 4.0]]

        with pytest.raises(InvalidInputError, match="huge"):
            standardize(data, colnames=['huge', 'y'])

    def test_result_is_immutable(self):
        """Test results cannot be modified."""
        result = standardize([[1.0, 2.0], [2.0, 4.0], [3.0, 7.0]])

        with pytest.raises(ValueError):
            result.values[0, 0] = 10.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.means = np.zeros(2)
        with pytest.raises(AttributeError):
            result.colnames.append('c')
        assert result.colnames == (0, 1)

    def test_to_named_matrix(self):
        """Test conversion keeps the names."""
        result = standardize([[1.0, 2.0], [2.0, 4.0], [3.0, 7.0]], colnames=['a', 'b'])
        nmat = result.to_named_matrix()
        assert nmat.colnames() == ['a', 'b']
        assert np.allclose(nmat.values, result.values)

    def test_input_is_not_modified(self):
        """Test the input array is left alone."""
        data = np.array([[1.0, 2.0], [2.0, 4.0], [3.0, 7.0]])
        original = data.copy()
        standardize(data)
        assert np.array_equal(data, original)


class TestColumnStats:
    """Tests for summary statistics."""

    def test_column_stats(self):
        """Test the summary table."""
        stats = column_stats([[1.0, 10.0], [2.0, 20.0], [3.0, 60.0]], colnames=['a', 'b'])

        assert list(stats.index) == ['a', 'b']
        assert list(stats.columns) == ['count', 'mean', 'std', 'min', 'max']
        assert stats.loc['a', 'count'] == 3
        assert stats.loc['a', 'mean'] == pytest.approx(2.0)
        assert stats.loc['a', 'std'] == pytest.approx(1.0)
        assert stats.loc['b', 'min'] == 10.0
        assert stats.loc['b', 'max'] == 60.0

    def test_zero_variance_columns(self):
        """Test constant column detection."""
        values = np.array([[1.0, 5.0, 0.0], [2.0, 5.0, 0.0]])
        assert zero_variance_columns(values, ['a', 'b', 'c']) == ['b', 'c']
