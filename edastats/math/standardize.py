"""
Standardization of feature columns.

Each column is rescaled to zero mean and unit sample standard deviation
(denominator n - 1). Constant columns cannot be standardized and are
rejected rather than turned into NaN.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import numpy as np
import pandas as pd

from edastats.math.errors import InvalidInputError
from edastats.math.named_matrix import NamedMatrix, MatrixLike, validate_matrix
from edastats.utils.general import readonly_array

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class StandardizedMatrix:
    """
    A matrix whose columns have mean 0 and sample standard deviation 1.

    Attributes:
        values: Standardized values (rows x features)
        means: Column means of the original data
        stds: Column sample standard deviations of the original data
        rownames: Row labels
        colnames: Column labels
    """
    values: np.ndarray
    means: np.ndarray
    stds: np.ndarray
    rownames: Tuple[Any, ...]
    colnames: Tuple[Any, ...]

    def __post_init__(self):
        object.__setattr__(self, "rownames", tuple(self.rownames))
        object.__setattr__(self, "colnames", tuple(self.colnames))

    @property
    def shape(self):
        return self.values.shape

    def to_named_matrix(self) -> NamedMatrix:
        """Get the standardized values as a NamedMatrix."""
        return NamedMatrix(
            np.array(self.values), rownames=list(self.rownames), colnames=list(self.colnames)
        )

    def inverse_transform(self, values: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Map standardized values back onto the original scale.

        Args:
            values: Standardized values to map back (defaults to this matrix)

        Returns:
            Values on the original scale
        """
        if values is None:
            values = self.values
        return np.asarray(values, dtype=float) * self.stds + self.means


def zero_variance_columns(values: np.ndarray, colnames: List[Any]) -> List[Any]:
    """
    Find columns whose sample standard deviation is zero.

    A column counts as constant when all its values are equal, which avoids
    rounding noise in the mean producing a tiny non-zero std.

    Args:
        values: Numeric matrix (rows x features)
        colnames: Column labels

    Returns:
        Names of the constant columns
    """
    with np.errstate(over='ignore'):
        spans = np.ptp(values, axis=0)
    return [name for name, span in zip(colnames, spans) if span == 0]


def check_no_zero_variance(values: np.ndarray, colnames: List[Any], operation: str) -> None:
    """
    Raise InvalidInputError if any column is constant.

    Args:
        values: Numeric matrix (rows x features)
        colnames: Column labels
        operation: Name of the operation, used in the error message
    """
    constant = zero_variance_columns(values, colnames)
    if constant:
        raise InvalidInputError(
            f"Cannot {operation}: zero-variance column(s) {constant}"
        )


def finite_moments(values: np.ndarray,
                   colnames: List[Any],
                   operation: str) -> Tuple[np.ndarray, np.ndarray]:
    """
    Column means and sample standard deviations, rejecting columns whose
    moments overflow to infinity.

    Args:
        values: Finite numeric matrix (rows x features)
        colnames: Column labels
        operation: Name of the operation, used in the error message

    Returns:
        Tuple of (means, stds)
    """
    with np.errstate(over='ignore', invalid='ignore'):
        means = np.mean(values, axis=0)
        stds = np.std(values, axis=0, ddof=1)

    overflowed = [
        name for name, mean, std in zip(colnames, means, stds)
        if not (np.isfinite(mean) and np.isfinite(std))
    ]
    if overflowed:
        raise InvalidInputError(
            f"Cannot {operation}: mean or variance of column(s) {overflowed} overflows"
        )

    return means, stds


def standardize(matrix: MatrixLike, colnames: Optional[List[Any]] = None) -> StandardizedMatrix:
    """
    Rescale each column to zero mean and unit sample standard deviation.

    Args:
        matrix: Input data with at least 2 rows
        colnames: Optional column labels

    Returns:
        StandardizedMatrix with the per-column means and stds used
    """
    nmat = validate_matrix(matrix, colnames=colnames)
    values = nmat.values
    names = nmat.colnames()

    check_no_zero_variance(values, names, "standardize")

    means, stds = finite_moments(values, names, "standardize")
    scaled = (values - means) / stds

    logger.debug(f"Standardized {values.shape[0]}x{values.shape[1]} matrix")

    return StandardizedMatrix(
        values=readonly_array(scaled),
        means=readonly_array(means),
        stds=readonly_array(stds),
        rownames=nmat.rownames(),
        colnames=names
    )


def column_stats(matrix: MatrixLike, colnames: Optional[List[Any]] = None) -> pd.DataFrame:
    """
    Summary statistics per column.

    Args:
        matrix: Input data
        colnames: Optional column labels

    Returns:
        DataFrame indexed by column name with count, mean, std, min and max
    """
    nmat = validate_matrix(matrix, colnames=colnames)
    values = nmat.values

    return pd.DataFrame(
        {
            'count': np.full(values.shape[1], values.shape[0]),
            'mean': np.mean(values, axis=0),
            'std': np.std(values, axis=0, ddof=1),
            'min': np.min(values, axis=0),
            'max': np.max(values, axis=0),
        },
        index=nmat.colnames()
    )
