"""
Named Matrix implementation for the edastats math module.

This module provides a data structure for numeric matrices with named rows
and columns, along with the validation every computation runs before any
numeric work begins.
"""

import logging
from collections.abc import Sequence
from typing import List, Optional, Union, Any

import numpy as np
import pandas as pd

from edastats.math.errors import InvalidInputError

logger = logging.getLogger(__name__)


class IndexHash:
    """
    Maintains an ordered index of names with fast lookup.
    """

    def __init__(self, names: Optional[List[Any]] = None):
        """
        Initialize an IndexHash with optional initial names.

        Args:
            names: Optional list of initial names
        """
        self._names = [] if names is None else list(names)
        self._index_hash = {name: idx for idx, name in enumerate(self._names)}

    def get_names(self) -> List[Any]:
        """Return the ordered list of names."""
        return self._names.copy()

    def index(self, name: Any) -> Optional[int]:
        """
        Get the index for a given name, or None if not found.

        Args:
            name: The name to look up

        Returns:
            The index if found, None otherwise
        """
        return self._index_hash.get(name)

    def subset(self, names: List[Any]) -> 'IndexHash':
        """
        Create a subset of the index with only the specified names.

        Args:
            names: List of names to include in the subset

        Returns:
            A new IndexHash containing only the specified names
        """
        valid_names = [name for name in names if name in self._index_hash]
        return IndexHash(valid_names)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: Any) -> bool:
        return name in self._index_hash


class NamedMatrix:
    """
    A numeric matrix with named rows and columns.

    Uses a pandas DataFrame as the underlying storage. Instances are treated
    as immutable: every operation returns a new NamedMatrix and `values`
    hands out a copy.
    """

    def __init__(self,
                 matrix: Union[np.ndarray, pd.DataFrame],
                 rownames: Optional[List[Any]] = None,
                 colnames: Optional[List[Any]] = None):
        """
        Initialize a NamedMatrix.

        Args:
            matrix: Matrix data (numpy array or pandas DataFrame)
            rownames: List of row names (defaults to 0..n-1)
            colnames: List of column names (defaults to 0..m-1)
        """
        if isinstance(matrix, pd.DataFrame):
            self._matrix = matrix.copy()
            if rownames is not None:
                self._matrix.index = rownames
            if colnames is not None:
                self._matrix.columns = colnames
        else:
            rows = rownames if rownames is not None else range(matrix.shape[0])
            cols = colnames if colnames is not None else range(matrix.shape[1])
            self._matrix = pd.DataFrame(matrix, index=rows, columns=cols)

        self._row_index = IndexHash(self._matrix.index.tolist())
        self._col_index = IndexHash(self._matrix.columns.tolist())

    @property
    def matrix(self) -> pd.DataFrame:
        """Get a copy of the underlying DataFrame."""
        return self._matrix.copy()

    @property
    def values(self) -> np.ndarray:
        """Get the matrix as a float numpy array."""
        return self._matrix.to_numpy(dtype=float, copy=True)

    @property
    def shape(self):
        return self._matrix.shape

    def rownames(self) -> List[Any]:
        """Get the list of row names."""
        return self._row_index.get_names()

    def colnames(self) -> List[Any]:
        """Get the list of column names."""
        return self._col_index.get_names()

    def col_index(self, col_name: Any) -> int:
        """
        Get the position of a column by name.

        Args:
            col_name: The name of the column

        Returns:
            Zero-based column position
        """
        idx = self._col_index.index(col_name)
        if idx is None:
            raise KeyError(f"Column name '{col_name}' not found")
        return idx

    def rowname_subset(self, rownames: List[Any]) -> 'NamedMatrix':
        """
        Create a subset of the matrix with only the specified rows.

        Args:
            rownames: List of row names to include

        Returns:
            A new NamedMatrix with only the specified rows
        """
        valid_rows = self._row_index.subset(rownames).get_names()
        return NamedMatrix(self._matrix.loc[valid_rows])

    def colname_subset(self, colnames: List[Any]) -> 'NamedMatrix':
        """
        Create a subset of the matrix with only the specified columns.

        Args:
            colnames: List of column names to include

        Returns:
            A new NamedMatrix with only the specified columns
        """
        valid_cols = self._col_index.subset(colnames).get_names()
        return NamedMatrix(self._matrix[valid_cols])

    def get_row_by_name(self, row_name: Any) -> np.ndarray:
        """
        Get a row of the matrix by name.

        Args:
            row_name: The name of the row

        Returns:
            The row as a numpy array
        """
        if row_name not in self._row_index:
            raise KeyError(f"Row name '{row_name}' not found")
        return self._matrix.loc[row_name].to_numpy(dtype=float)

    def get_col_by_name(self, col_name: Any) -> np.ndarray:
        """
        Get a column of the matrix by name.

        Args:
            col_name: The name of the column

        Returns:
            The column as a numpy array
        """
        if col_name not in self._col_index:
            raise KeyError(f"Column name '{col_name}' not found")
        return self._matrix[col_name].to_numpy(dtype=float)

    def with_values(self, values: np.ndarray) -> 'NamedMatrix':
        """
        Create a matrix with the same names but different values.

        Args:
            values: New values, same shape as this matrix

        Returns:
            A new NamedMatrix
        """
        if values.shape != self.shape:
            raise InvalidInputError(
                f"Expected values of shape {self.shape}, got {values.shape}"
            )
        return NamedMatrix(values, rownames=self.rownames(), colnames=self.colnames())

    def __repr__(self) -> str:
        return f"NamedMatrix(rows={len(self._row_index)}, cols={len(self._col_index)})"

    def __str__(self) -> str:
        return (f"NamedMatrix with {len(self._row_index)} rows and "
                f"{len(self._col_index)} columns\n{self._matrix}")


MatrixLike = Union[NamedMatrix, pd.DataFrame, np.ndarray, Sequence]


def _check_rectangular(rows: Sequence) -> None:
    """
    Check that every row of a nested sequence has the same length.

    Args:
        rows: Sequence of row sequences
    """
    expected = None
    for i, row in enumerate(rows):
        if isinstance(row, (str, bytes)) or not isinstance(row, (Sequence, np.ndarray)):
            raise InvalidInputError(f"Row {i} is not a sequence of numbers")
        if expected is None:
            expected = len(row)
        elif len(row) != expected:
            raise InvalidInputError(
                f"Matrix is not rectangular: row {i} has {len(row)} values, "
                f"expected {expected}"
            )


def validate_matrix(data: MatrixLike,
                    colnames: Optional[List[Any]] = None,
                    rownames: Optional[List[Any]] = None,
                    min_rows: int = 2,
                    min_cols: int = 1) -> NamedMatrix:
    """
    Validate input data and wrap it in a NamedMatrix.

    Rectangularity is checked before any numeric conversion. The result is
    guaranteed to be a finite float matrix with at least `min_rows` rows,
    at least `min_cols` columns and unique column names.

    Args:
        data: Nested lists, numpy array, DataFrame or NamedMatrix
        colnames: Optional column labels (override any carried by data)
        rownames: Optional row labels (override any carried by data)
        min_rows: Minimum number of rows required
        min_cols: Minimum number of columns required

    Returns:
        Validated NamedMatrix
    """
    if isinstance(data, NamedMatrix):
        data = data.matrix

    if isinstance(data, pd.DataFrame):
        colnames = colnames if colnames is not None else data.columns.tolist()
        rownames = rownames if rownames is not None else data.index.tolist()
        raw = data.to_numpy()
    elif isinstance(data, np.ndarray):
        raw = data
    else:
        if isinstance(data, (str, bytes)) or not isinstance(data, Sequence):
            raise InvalidInputError(
                f"Expected a matrix of numbers, got {type(data).__name__}"
            )
        _check_rectangular(data)
        raw = data

    try:
        values = np.array(raw, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Matrix contains non-numeric values: {e}") from e

    if values.ndim != 2:
        raise InvalidInputError(f"Expected a 2-dimensional matrix, got {values.ndim} dimensions")

    n_rows, n_cols = values.shape
    if n_rows < min_rows:
        raise InvalidInputError(f"Matrix needs at least {min_rows} rows, got {n_rows}")
    if n_cols < min_cols:
        raise InvalidInputError(f"Matrix needs at least {min_cols} columns, got {n_cols}")

    if not np.all(np.isfinite(values)):
        bad_rows, bad_cols = np.nonzero(~np.isfinite(values))
        raise InvalidInputError(
            f"Matrix contains {len(bad_rows)} missing or non-finite values "
            f"(first at row {bad_rows[0]}, column {bad_cols[0]})"
        )

    if colnames is not None:
        colnames = list(colnames)
        if len(colnames) != n_cols:
            raise InvalidInputError(
                f"Got {len(colnames)} column names for {n_cols} columns"
            )
        if len(set(colnames)) != len(colnames):
            raise InvalidInputError("Column names must be unique")

    if rownames is not None and len(rownames) != n_rows:
        raise InvalidInputError(f"Got {len(rownames)} row names for {n_rows} rows")

    logger.debug(f"Validated matrix with {n_rows} rows and {n_cols} columns")

    return NamedMatrix(values, rownames=rownames, colnames=colnames)


def create_named_matrix(matrix_data: MatrixLike,
                        rownames: Optional[List[Any]] = None,
                        colnames: Optional[List[Any]] = None) -> NamedMatrix:
    """
    Create a NamedMatrix from data, validating it first.

    Args:
        matrix_data: Matrix data (numpy array or nested lists)
        rownames: List of row names
        colnames: List of column names

    Returns:
        A new NamedMatrix
    """
    return validate_matrix(matrix_data, colnames=colnames, rownames=rownames)
