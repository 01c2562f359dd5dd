"""
Edastats package for exploratory analysis of tabular feature data.

Provides standardization, correlation and principal component analysis
as immutable results that a plotting or reporting layer can consume.
"""

__version__ = '0.1.0'

from edastats.math import (
    EdaStatsError, InvalidInputError, NumericalInstabilityError,
    NamedMatrix, StandardizedMatrix, CorrelationMatrix, PCAResult,
    standardize, correlate, compute_pca
)
from edastats.analysis import FeatureAnalysis
from edastats.components.config import Config
