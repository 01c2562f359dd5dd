"""
Exceptions raised by the edastats math modules.
"""


class EdaStatsError(Exception):
    """Base class for all edastats errors."""


class InvalidInputError(EdaStatsError, ValueError):
    """
    Raised when an input matrix cannot be used for the requested computation.

    Covers non-rectangular input, too few rows or columns, non-numeric or
    non-finite values, and zero-variance columns where standardization or
    correlation is required.
    """


class NumericalInstabilityError(EdaStatsError, ArithmeticError):
    """
    Raised when the eigendecomposition fails to converge or produces a
    materially negative eigenvalue.
    """
