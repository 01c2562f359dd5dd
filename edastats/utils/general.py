"""
General utility functions for the edastats package.
"""

from typing import Any, Dict, List, Sequence

import numpy as np


def readonly_array(values: Any) -> np.ndarray:
    """
    Copy values into a float array that cannot be modified in place.

    Args:
        values: Array-like values

    Returns:
        Read-only numpy array
    """
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


def component_names(n_comps: int) -> List[str]:
    """
    Labels for principal components: PC1, PC2, ...

    Args:
        n_comps: Number of components

    Returns:
        List of component labels
    """
    return [f"PC{i + 1}" for i in range(n_comps)]


def jsonable(value: Any) -> Any:
    """
    Convert numpy arrays and scalars (possibly nested in dicts and lists)
    into plain Python values for JSON export.

    Args:
        value: Value to convert

    Returns:
        JSON-compatible value
    """
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, dict):
        return {str(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def hash_map_subset(m: Dict[Any, Any], keys: Sequence[Any]) -> Dict[Any, Any]:
    """
    Create a subset of a dictionary containing only specified keys.

    Args:
        m: Dictionary to subset
        keys: Keys to include

    Returns:
        Dictionary subset
    """
    return {k: m[k] for k in keys if k in m}
