"""
Numeric core of edastats: standardization, correlation and PCA.
"""

from edastats.math.errors import EdaStatsError, InvalidInputError, NumericalInstabilityError
from edastats.math.named_matrix import NamedMatrix, create_named_matrix, validate_matrix
from edastats.math.standardize import StandardizedMatrix, standardize, column_stats
from edastats.math.corr import CorrelationMatrix, correlate
from edastats.math.pca import PCAResult, compute_pca
