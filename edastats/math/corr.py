"""
Correlation and hierarchical clustering of feature columns.

This module computes the correlation matrix between the columns of a data
matrix and orders features by hierarchical clustering, so that correlated
features end up next to each other in a correlogram.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
import scipy.cluster.hierarchy as hcluster
from scipy.spatial.distance import squareform
from scipy.stats import rankdata

from edastats.math.errors import InvalidInputError
from edastats.math.named_matrix import MatrixLike, validate_matrix
from edastats.math.standardize import check_no_zero_variance, finite_moments
from edastats.utils.general import readonly_array

logger = logging.getLogger(__name__)

CORRELATION_METHODS = ('pearson', 'spearman')


@dataclass(frozen=True, eq=False)
class CorrelationMatrix:
    """
    Square, symmetric matrix of pairwise column correlations.

    Attributes:
        values: Correlations (features x features), unit diagonal
        colnames: Feature labels, in row/column order
        method: Correlation method used
    """
    values: np.ndarray
    colnames: Tuple[Any, ...]
    method: str = 'pearson'

    def __post_init__(self):
        object.__setattr__(self, "colnames", tuple(self.colnames))

    def get(self, a: Any, b: Any) -> float:
        """
        Correlation between two features by name.

        Args:
            a: First feature name
            b: Second feature name

        Returns:
            Correlation coefficient
        """
        try:
            i = self.colnames.index(a)
            j = self.colnames.index(b)
        except ValueError:
            raise KeyError(f"Unknown feature in pair ({a!r}, {b!r})") from None
        return float(self.values[i, j])

    def to_frame(self) -> pd.DataFrame:
        """Correlations as a labelled DataFrame."""
        names = list(self.colnames)
        return pd.DataFrame(np.array(self.values), index=names, columns=names)

    def top_pairs(self, n: int = 5) -> List[Tuple[Any, Any, float]]:
        """
        Strongest off-diagonal correlations by absolute value.

        Args:
            n: Number of pairs to return

        Returns:
            List of (feature_a, feature_b, r) tuples, strongest first
        """
        if n < 0:
            raise ValueError(f"Number of pairs must be non-negative, got {n}")
        rows, cols = np.triu_indices(len(self.colnames), k=1)
        pair_values = self.values[rows, cols]
        # Stable sort keeps column order for equal magnitudes
        order = np.argsort(-np.abs(pair_values), kind='stable')[:n]
        return [
            (self.colnames[rows[k]], self.colnames[cols[k]], float(pair_values[k]))
            for k in order
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Export-ready dictionary."""
        return {
            'method': self.method,
            'colnames': list(self.colnames),
            'correlation': self.values.tolist()
        }


def correlation_matrix(values: np.ndarray, method: str = 'pearson') -> np.ndarray:
    """
    Compute the correlation matrix between the columns of a numeric array.

    The caller must ensure no column is constant.

    Args:
        values: Numeric matrix (rows x features)
        method: Correlation method ('pearson' or 'spearman')

    Returns:
        Correlation matrix as numpy array
    """
    if method == 'pearson':
        data = values
    elif method == 'spearman':
        # Spearman is Pearson on ranks, ties get the average rank
        data = rankdata(values, axis=0)
    else:
        raise ValueError(f"Unknown correlation method: {method}")

    corr = np.corrcoef(data, rowvar=False)

    # Enforce the exact invariants that rounding can disturb
    corr = (corr + corr.T) / 2.0
    corr = np.clip(corr, -1.0, 1.0)
    np.fill_diagonal(corr, 1.0)

    return corr


def correlate(matrix: MatrixLike,
              method: str = 'pearson',
              colnames: Optional[List[Any]] = None) -> CorrelationMatrix:
    """
    Compute pairwise correlations between all columns of a matrix.

    Args:
        matrix: Input data with at least 2 rows and 2 columns
        method: Correlation method ('pearson' or 'spearman')
        colnames: Optional column labels

    Returns:
        CorrelationMatrix
    """
    if method not in CORRELATION_METHODS:
        raise ValueError(f"Unknown correlation method: {method}")

    nmat = validate_matrix(matrix, colnames=colnames, min_rows=2, min_cols=2)
    values = nmat.values
    names = nmat.colnames()

    check_no_zero_variance(values, names, "correlate")
    finite_moments(values, names, "correlate")

    corr = correlation_matrix(values, method)

    logger.debug(f"Computed {method} correlation for {len(names)} features")

    return CorrelationMatrix(values=readonly_array(corr), colnames=names, method=method)


def hierarchical_cluster(corr: CorrelationMatrix, method: str = 'complete') -> Dict[str, Any]:
    """
    Perform hierarchical clustering of features using 1 - r as the distance.

    Args:
        corr: Correlation matrix to cluster
        method: Linkage method ('single', 'complete', 'average', 'weighted',
            'centroid', 'median', 'ward')

    Returns:
        Dictionary with linkage, names, leaves and condensed distances
    """
    distance_matrix = 1.0 - np.array(corr.values)
    np.fill_diagonal(distance_matrix, 0.0)
    distances = squareform(distance_matrix, checks=False)

    linkage = hcluster.linkage(distances, method=method)

    return {
        'linkage': linkage.tolist(),
        'names': list(corr.colnames),
        'leaves': hcluster.leaves_list(linkage).tolist(),
        'distances': distances.tolist()
    }


def flatten_hierarchical_cluster(hclust_result: Dict[str, Any]) -> List[Any]:
    """
    Extract leaf node ordering from hierarchical clustering results.

    Args:
        hclust_result: Result from hierarchical_cluster

    Returns:
        List of names in hierarchical order
    """
    leaves = hclust_result['leaves']
    names = hclust_result['names']
    return [names[i] for i in leaves]


def blockify_correlation_matrix(corr: CorrelationMatrix,
                                order: Optional[List[int]] = None,
                                method: str = 'complete') -> CorrelationMatrix:
    """
    Reorder a correlation matrix so that clustered features are adjacent.

    Args:
        corr: Correlation matrix to reorder
        order: Feature positions in the desired order (defaults to the
            leaf order of hierarchical_cluster)
        method: Linkage method used when order is not given

    Returns:
        Reordered CorrelationMatrix
    """
    if order is None:
        order = hierarchical_cluster(corr, method=method)['leaves']

    if sorted(order) != list(range(len(corr.colnames))):
        raise InvalidInputError("Order must be a permutation of the feature positions")

    reordered = np.array(corr.values)[order, :][:, order]

    return CorrelationMatrix(
        values=readonly_array(reordered),
        colnames=[corr.colnames[i] for i in order],
        method=corr.method
    )
