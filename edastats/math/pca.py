"""
PCA (Principal Component Analysis) implementation for edastats.

Principal components are computed by eigendecomposition of the covariance
matrix of the centered (or standardized) data. The decomposition itself is
delegated to scipy.linalg.eigh.

Eigenvectors are unique only up to sign. Each loading vector is oriented so
that its largest-magnitude entry is positive. When two eigenvalues are equal
their components keep the order returned by eigh, which is not guaranteed
to be stable across library versions.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import linalg

from edastats.math.errors import InvalidInputError, NumericalInstabilityError
from edastats.math.named_matrix import MatrixLike, NamedMatrix, validate_matrix
from edastats.math.standardize import finite_moments, standardize
from edastats.utils.general import component_names, readonly_array

logger = logging.getLogger(__name__)

# Eigenvalues below -EIGEN_TOLERANCE mean the covariance matrix was not
# positive semi-definite
EIGEN_TOLERANCE = 1e-10


@dataclass(frozen=True, eq=False)
class PCAResult:
    """
    Result of a principal component decomposition.

    Attributes:
        loadings: Eigenvectors as columns (features x components), sorted
            by descending eigenvalue
        scores: Projection of each row onto each loading (rows x components)
        eigenvalues: Eigenvalues of the covariance matrix, descending
        explained_variance: Eigenvalues normalized to sum to 1
        center: Column means subtracted before projection
        scale: Column standard deviations divided out, or None if unscaled
        rownames: Row labels
        colnames: Feature labels
    """
    loadings: np.ndarray
    scores: np.ndarray
    eigenvalues: np.ndarray
    explained_variance: np.ndarray
    center: np.ndarray
    scale: Optional[np.ndarray]
    rownames: Tuple[Any, ...]
    colnames: Tuple[Any, ...]

    def __post_init__(self):
        object.__setattr__(self, "rownames", tuple(self.rownames))
        object.__setattr__(self, "colnames", tuple(self.colnames))

    @property
    def n_components(self) -> int:
        return self.loadings.shape[1]

    @property
    def scaled(self) -> bool:
        return self.scale is not None

    @property
    def cumulative_variance(self) -> np.ndarray:
        """Running total of the explained variance ratios."""
        return np.cumsum(self.explained_variance)

    def n_components_for(self, threshold: float) -> int:
        """
        Smallest number of components whose cumulative explained variance
        reaches the threshold.

        Args:
            threshold: Target fraction of variance in (0, 1]

        Returns:
            Number of components
        """
        if not 0 < threshold <= 1:
            raise ValueError(f"Threshold must be in (0, 1], got {threshold}")
        # Rounding can leave the full sum a hair under 1
        cumulative = np.minimum(self.cumulative_variance, 1.0)
        reached = np.nonzero(cumulative >= threshold - 1e-12)[0]
        return int(reached[0]) + 1 if len(reached) else self.n_components

    def loadings_frame(self) -> pd.DataFrame:
        """Loadings indexed by feature, one column per component."""
        return pd.DataFrame(
            np.array(self.loadings),
            index=list(self.colnames),
            columns=component_names(self.n_components)
        )

    def scores_frame(self) -> pd.DataFrame:
        """Scores indexed by row, one column per component."""
        return pd.DataFrame(
            np.array(self.scores),
            index=list(self.rownames),
            columns=component_names(self.n_components)
        )

    def variance_table(self) -> pd.DataFrame:
        """Eigenvalue, explained and cumulative variance per component (scree data)."""
        return pd.DataFrame(
            {
                'eigenvalue': self.eigenvalues,
                'explained_variance': self.explained_variance,
                'cumulative_variance': self.cumulative_variance
            },
            index=component_names(self.n_components)
        )

    def _prepare(self, values: np.ndarray) -> np.ndarray:
        centered = values - self.center
        if self.scale is not None:
            centered = centered / self.scale
        return centered

    def transform(self, matrix: MatrixLike) -> np.ndarray:
        """
        Project new rows into component space using this fit.

        A DataFrame or NamedMatrix is matched to the fitted features by
        column name, in any order. Plain arrays are matched by position.

        Args:
            matrix: Rows with the same features as the fitted data

        Returns:
            Scores for the new rows (rows x components)
        """
        if isinstance(matrix, NamedMatrix):
            matrix = matrix.matrix
        if isinstance(matrix, pd.DataFrame):
            fitted = set(self.colnames)
            missing = [name for name in self.colnames if name not in matrix.columns]
            unknown = [name for name in matrix.columns if name not in fitted]
            if missing or unknown:
                raise InvalidInputError(
                    f"Columns do not match the fitted features: "
                    f"missing {missing}, unknown {unknown}"
                )
            matrix = matrix[list(self.colnames)]

        nmat = validate_matrix(matrix, min_rows=1)
        values = nmat.values
        if values.shape[1] != len(self.colnames):
            raise InvalidInputError(
                f"Expected {len(self.colnames)} features, got {values.shape[1]}"
            )
        return self._prepare(values) @ self.loadings

    def reconstruct(self, n_comps: Optional[int] = None) -> np.ndarray:
        """
        Rebuild the data on its original scale from the first n_comps
        components. With all components this recovers the input.

        Args:
            n_comps: Number of components to use (defaults to all)

        Returns:
            Reconstructed data (rows x features)
        """
        if n_comps is None:
            n_comps = self.n_components
        if not 1 <= n_comps <= self.n_components:
            raise ValueError(f"n_comps must be between 1 and {self.n_components}, got {n_comps}")

        approx = self.scores[:, :n_comps] @ self.loadings[:, :n_comps].T
        if self.scale is not None:
            approx = approx * self.scale
        return approx + self.center

    def to_dict(self, n_comps: Optional[int] = None) -> Dict[str, Any]:
        """
        Export-ready dictionary.

        Args:
            n_comps: Number of leading components to include (defaults to all)

        Returns:
            Dictionary of plain lists
        """
        if n_comps is not None and n_comps < 1:
            raise ValueError(f"n_comps must be at least 1, got {n_comps}")
        k = self.n_components if n_comps is None else min(n_comps, self.n_components)
        return {
            'scaled': self.scaled,
            'colnames': list(self.colnames),
            'rownames': list(self.rownames),
            'components': component_names(k),
            'center': self.center.tolist(),
            'scale': None if self.scale is None else self.scale.tolist(),
            'eigenvalues': self.eigenvalues[:k].tolist(),
            'explained_variance': self.explained_variance[:k].tolist(),
            'cumulative_variance': self.cumulative_variance[:k].tolist(),
            'loadings': self.loadings[:, :k].tolist(),
            'scores': self.scores[:, :k].tolist()
        }


def covariance_matrix(centered: np.ndarray) -> np.ndarray:
    """
    Sample covariance of already-centered data.

    Args:
        centered: Data with zero column means (rows x features)

    Returns:
        Covariance matrix (features x features)
    """
    n_rows = centered.shape[0]
    with np.errstate(over='ignore', invalid='ignore'):
        cov = centered.T @ centered / (n_rows - 1)
    # Exactly symmetric for eigh
    return (cov + cov.T) / 2.0


def orient_components(vectors: np.ndarray) -> np.ndarray:
    """
    Flip eigenvectors so the largest-magnitude entry of each is positive.

    Args:
        vectors: Eigenvectors as columns

    Returns:
        Oriented eigenvectors
    """
    # argmax picks the first index among equal magnitudes
    pivots = np.argmax(np.abs(vectors), axis=0)
    signs = np.sign(vectors[pivots, np.arange(vectors.shape[1])])
    signs[signs == 0] = 1.0
    return vectors * signs


def sorted_eigh(cov: np.ndarray, tolerance: float = EIGEN_TOLERANCE):
    """
    Eigendecomposition of a symmetric covariance matrix, sorted by
    descending eigenvalue.

    Args:
        cov: Symmetric positive semi-definite matrix
        tolerance: Largest magnitude allowed for a negative eigenvalue

    Returns:
        Tuple of (eigenvalues, eigenvectors as columns)
    """
    if not np.all(np.isfinite(cov)):
        raise NumericalInstabilityError("Covariance matrix overflows; rescale the data")

    try:
        eigvals, eigvecs = linalg.eigh(cov)
    except linalg.LinAlgError as e:
        raise NumericalInstabilityError(f"Eigendecomposition failed: {e}") from e

    if not np.all(np.isfinite(eigvals)):
        raise NumericalInstabilityError("Eigendecomposition produced non-finite eigenvalues")

    if eigvals.min() < -tolerance:
        raise NumericalInstabilityError(
            f"Covariance matrix has negative eigenvalue {eigvals.min():.3e}"
        )

    # Tiny negatives are rounding noise
    eigvals = np.clip(eigvals, 0.0, None)

    # eigh returns ascending order; reverse with a stable sort on the negation
    order = np.argsort(-eigvals, kind='stable')
    return eigvals[order], eigvecs[:, order]


def compute_pca(matrix: MatrixLike,
                scale: bool = True,
                colnames: Optional[List[Any]] = None,
                tolerance: float = EIGEN_TOLERANCE) -> PCAResult:
    """
    Compute all principal components of a data matrix.

    Args:
        matrix: Input data (rows x features), ideally with many more rows
            than features
        scale: Standardize columns first (correlation PCA) instead of only
            centering them (covariance PCA)
        colnames: Optional column labels
        tolerance: Largest magnitude allowed for a negative eigenvalue

    Returns:
        PCAResult with loadings, scores and explained variance
    """
    nmat = validate_matrix(matrix, colnames=colnames)
    n_rows, n_cols = nmat.shape

    if n_rows <= n_cols:
        logger.warning(
            f"PCA on {n_rows} rows and {n_cols} features: "
            f"at most {n_rows - 1} components carry variance"
        )

    if scale:
        standardized = standardize(nmat)
        data = np.array(standardized.values)
        center = standardized.means
        col_scale = standardized.stds
    else:
        values = nmat.values
        center, _ = finite_moments(values, nmat.colnames(), "compute PCA")
        data = values - center
        col_scale = None

    cov = covariance_matrix(data)
    eigvals, eigvecs = sorted_eigh(cov, tolerance)

    total = eigvals.sum()
    if total <= 0:
        raise InvalidInputError("Data has zero total variance; every column is constant")

    loadings = orient_components(eigvecs)
    scores = data @ loadings
    explained = eigvals / total

    logger.debug(f"PCA eigenvalues: {np.round(eigvals, 6).tolist()}")

    return PCAResult(
        loadings=readonly_array(loadings),
        scores=readonly_array(scores),
        eigenvalues=readonly_array(eigvals),
        explained_variance=readonly_array(explained),
        center=readonly_array(center),
        scale=None if col_scale is None else readonly_array(col_scale),
        rownames=nmat.rownames(),
        colnames=nmat.colnames()
    )
