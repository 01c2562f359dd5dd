"""
One-pass exploratory analysis of a labelled feature matrix.

FeatureAnalysis validates the data once, then computes the summary table,
standardized matrix, correlation matrix with its clustered feature order,
and the principal component decomposition. The results are exported as a
plain dictionary for the reporting layer that draws correlograms, scree
plots and biplots.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from edastats.components.config import Config
from edastats.math.corr import (
    CorrelationMatrix, correlate, hierarchical_cluster, flatten_hierarchical_cluster,
    blockify_correlation_matrix
)
from edastats.math.errors import EdaStatsError, InvalidInputError
from edastats.math.named_matrix import MatrixLike, NamedMatrix, validate_matrix
from edastats.math.pca import PCAResult, compute_pca
from edastats.math.standardize import StandardizedMatrix, standardize, column_stats
from edastats.utils.general import component_names, hash_map_subset, jsonable

logger = logging.getLogger(__name__)

EXPORT_SECTIONS = ('summary', 'correlation', 'pca', 'class_centroids')


class FeatureAnalysis:
    """
    Standardization, correlation and PCA of one dataset.
    """

    def __init__(self,
                 data: MatrixLike,
                 labels: Optional[Sequence[Any]] = None,
                 colnames: Optional[List[Any]] = None,
                 config: Optional[Config] = None):
        """
        Validate the data and run every computation.

        Args:
            data: Feature matrix (rows x features)
            labels: Optional class label per row
            colnames: Optional feature labels
            config: Configuration (defaults to Config())
        """
        self.config = config if config is not None else Config()

        self.matrix: NamedMatrix = validate_matrix(data, colnames=colnames)

        if labels is not None:
            labels = list(labels)
            if len(labels) != self.matrix.shape[0]:
                raise InvalidInputError(
                    f"Got {len(labels)} labels for {self.matrix.shape[0]} rows"
                )
        self.labels = labels

        self.summary: Optional[pd.DataFrame] = None
        self.standardized: Optional[StandardizedMatrix] = None
        self.correlation: Optional[CorrelationMatrix] = None
        self.clustered_correlation: Optional[CorrelationMatrix] = None
        self.feature_order: List[Any] = []
        self.pca: Optional[PCAResult] = None

        self._run()

    def _run(self) -> None:
        """
        Compute all results, logging each step.
        """
        n_rows, n_cols = self.matrix.shape
        logger.info(f"Analysing {n_rows} rows and {n_cols} features")
        start_time = time.time()

        try:
            self.summary = column_stats(self.matrix)
            self.standardized = standardize(self.matrix)

            corr_start = time.time()
            self.correlation = correlate(self.matrix, method=self.config.get('corr.method'))
            hclust = hierarchical_cluster(
                self.correlation, method=self.config.get('corr.cluster-method'))
            self.feature_order = flatten_hierarchical_cluster(hclust)
            self.clustered_correlation = blockify_correlation_matrix(
                self.correlation, order=hclust['leaves'])
            logger.info(f"Correlation computed in {time.time() - corr_start:.3f}s")

            pca_start = time.time()
            self.pca = compute_pca(
                self.matrix,
                scale=self.config.get('pca.scale'),
                tolerance=self.config.get('pca.eigen-tolerance')
            )
            logger.info(
                f"PCA computed in {time.time() - pca_start:.3f}s, "
                f"first component explains {self.pca.explained_variance[0]:.1%}"
            )
        except (EdaStatsError, ValueError) as e:
            logger.error(f"Analysis failed: {e}")
            raise

        logger.info(f"Analysis completed in {time.time() - start_time:.3f}s")

    def class_centroids(self, n_comps: int = 2) -> pd.DataFrame:
        """
        Mean PCA scores per class label.

        Args:
            n_comps: Number of leading components to include

        Returns:
            DataFrame indexed by sorted label, one column per component
            plus a 'count' column
        """
        if self.labels is None:
            raise InvalidInputError("No class labels were given")

        k = min(n_comps, self.pca.n_components)
        scores = pd.DataFrame(
            np.array(self.pca.scores[:, :k]),
            columns=component_names(k)
        )
        scores['label'] = self.labels

        grouped = scores.groupby('label')
        centroids = grouped.mean()
        centroids['count'] = grouped.size()
        return centroids

    def to_dict(self, include: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """
        Export results as JSON-compatible data.

        Args:
            include: Sections to export (defaults to all available of
                'summary', 'correlation', 'pca', 'class_centroids')

        Returns:
            Dictionary of plain Python values
        """
        n_export = self.config.get('pca.export-components')

        result = {
            'summary': self.summary.reset_index().rename(
                columns={'index': 'feature'}).to_dict(orient='records'),
            'correlation': {
                **self.correlation.to_dict(),
                'feature_order': self.feature_order,
                'clustered': self.clustered_correlation.values.tolist(),
                'top_pairs': [
                    {'a': a, 'b': b, 'r': r}
                    for a, b, r in self.correlation.top_pairs(self.config.get('corr.top-pairs'))
                ]
            },
            'pca': self.pca.to_dict(n_export)
        }

        if self.labels is not None:
            centroids = self.class_centroids()
            result['class_centroids'] = centroids.reset_index().to_dict(orient='records')
            result['pca']['labels'] = self.labels

        if include is not None:
            unknown = set(include) - set(EXPORT_SECTIONS)
            if unknown:
                raise ValueError(f"Unknown export sections: {sorted(unknown)}")
            result = hash_map_subset(result, include)

        return jsonable(result)

    def __repr__(self) -> str:
        n_rows, n_cols = self.matrix.shape
        return f"FeatureAnalysis(rows={n_rows}, features={n_cols})"
