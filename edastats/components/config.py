"""
Configuration management for edastats.

This module provides functionality for managing configuration,
including loading from environment variables, files and default values.
Configuration objects are always passed explicitly; there is no global
instance.
"""

import os
import json
import logging
from copy import deepcopy
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL
}

# Linkage methods accepted by scipy.cluster.hierarchy.linkage
CLUSTER_METHODS = ('single', 'complete', 'average', 'weighted', 'centroid', 'median', 'ward')


def to_int(value: Any) -> Optional[int]:
    """
    Convert a value to an integer.

    Args:
        value: Value to convert

    Returns:
        Integer value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def to_float(value: Any) -> Optional[float]:
    """
    Convert a value to a float.

    Args:
        value: Value to convert

    Returns:
        Float value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def to_bool(value: Any) -> Optional[bool]:
    """
    Convert a value to a boolean.

    Args:
        value: Value to convert

    Returns:
        Boolean value, or None if conversion failed
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float)):
        return bool(value)

    if isinstance(value, str):
        value = value.lower().strip()
        if value in ('true', 'yes', 'y', '1', 't'):
            return True
        if value in ('false', 'no', 'n', '0', 'f'):
            return False

    return None


def _env_or(name: str, convert, default: Any) -> Any:
    """Read and convert an environment variable, falling back on bad or missing values."""
    if name not in os.environ:
        return default
    converted = convert(os.environ[name])
    if converted is None:
        logger.warning(f"Ignoring invalid value for {name}: {os.environ[name]!r}")
        return default
    return converted


def setup_logging(level: str = 'warn') -> None:
    """
    Set up logging.

    Args:
        level: Logging level name (debug, info, warn, error, critical)
    """
    numeric_level = LOG_LEVELS.get(str(level).lower())
    if numeric_level is None:
        raise ValueError(f"Unknown logging level: {level}")

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )
    logging.getLogger('edastats').setLevel(numeric_level)


class Config:
    """
    Configuration for edastats analyses.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            overrides: Optional configuration overrides
        """
        self._config = {}
        self.load_config(overrides)

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        """
        Load configuration from all sources.

        Args:
            overrides: Optional configuration overrides
        """
        config = self._get_defaults()
        config = self._apply_env_vars(config)
        if overrides:
            config = self._apply_overrides(config, overrides)
        self._validate(config)
        self._config = config

        logger.debug("Configuration loaded")

    def _get_defaults(self) -> Dict[str, Any]:
        """
        Get default configuration values.

        Returns:
            Default configuration
        """
        return {
            # PCA
            'pca': {
                'scale': True,              # correlation PCA
                'eigen-tolerance': 1e-10,   # allowed negative eigenvalue magnitude
                'export-components': None   # None exports all components
            },

            # Correlation
            'corr': {
                'method': 'pearson',
                'cluster-method': 'complete',
                'top-pairs': 5
            },

            # Logging
            'logging': {
                'level': 'warn'
            }
        }

    def _apply_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variables to configuration.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        config = deepcopy(config)

        # PCA
        config['pca']['scale'] = _env_or('EDA_PCA_SCALE', to_bool, config['pca']['scale'])
        config['pca']['eigen-tolerance'] = _env_or(
            'EDA_EIGEN_TOLERANCE', to_float, config['pca']['eigen-tolerance'])

        # Correlation
        config['corr']['method'] = os.environ.get('EDA_CORR_METHOD', config['corr']['method']).lower()
        config['corr']['cluster-method'] = os.environ.get(
            'EDA_CORR_CLUSTER_METHOD', config['corr']['cluster-method']).lower()
        config['corr']['top-pairs'] = _env_or('EDA_CORR_TOP_PAIRS', to_int, config['corr']['top-pairs'])

        # Logging
        config['logging']['level'] = os.environ.get('LOG_LEVEL', config['logging']['level']).lower()

        return config

    def _apply_overrides(self, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply configuration overrides.

        Args:
            config: Current configuration
            overrides: Configuration overrides

        Returns:
            Updated configuration
        """
        config = deepcopy(config)

        def deep_update(d, u):
            for k, v in u.items():
                if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                    d[k] = deep_update(d[k], v)
                else:
                    d[k] = v
            return d

        return deep_update(config, deepcopy(overrides))

    def _validate(self, config: Dict[str, Any]) -> None:
        """
        Check values that would otherwise fail deep inside a computation.

        Args:
            config: Configuration to check
        """
        tolerance = to_float(config['pca']['eigen-tolerance'])
        if tolerance is None or tolerance < 0:
            raise ValueError(
                f"pca.eigen-tolerance must be a non-negative number, "
                f"got {config['pca']['eigen-tolerance']!r}"
            )
        config['pca']['eigen-tolerance'] = tolerance

        if config['corr']['method'] not in ('pearson', 'spearman'):
            raise ValueError(f"Unknown correlation method: {config['corr']['method']}")

        if config['corr']['cluster-method'] not in CLUSTER_METHODS:
            raise ValueError(f"Unknown linkage method: {config['corr']['cluster-method']}")

        top_pairs = config['corr']['top-pairs']
        if isinstance(top_pairs, bool) or not isinstance(top_pairs, int) or top_pairs < 0:
            raise ValueError(f"corr.top-pairs must be a non-negative integer, got {top_pairs!r}")

        export = config['pca']['export-components']
        if export is not None and (isinstance(export, bool) or not isinstance(export, int) or export < 1):
            raise ValueError(f"pca.export-components must be a positive integer or None, got {export!r}")

        if str(config['logging']['level']).lower() not in LOG_LEVELS:
            raise ValueError(f"Unknown logging level: {config['logging']['level']}")

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            path: Configuration path (dot-separated)
            default: Default value if not found

        Returns:
            Configuration value, or default if not found
        """
        value = self._config

        for component in path.split('.'):
            if isinstance(value, dict) and component in value:
                value = value[component]
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value. The change is rejected, leaving the
        configuration untouched, if the result does not validate.

        Args:
            path: Configuration path (dot-separated)
            value: Configuration value
        """
        components = path.split('.')
        updated = deepcopy(self._config)
        config = updated

        for component in components[:-1]:
            if component not in config:
                config[component] = {}
            config = config[component]

        config[components[-1]] = value
        self._validate(updated)
        self._config = updated

    def setup_logging(self) -> None:
        """Configure logging at the configured logging.level."""
        setup_logging(self.get('logging.level'))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Configuration dictionary
        """
        return deepcopy(self._config)

    def save_to_file(self, filepath: str) -> None:
        """
        Save configuration to a file.

        Args:
            filepath: Path to save configuration
        """
        if filepath.endswith('.json'):
            with open(filepath, 'w') as f:
                json.dump(self._config, f, indent=2)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'w') as f:
                yaml.dump(self._config, f, default_flow_style=False)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

    def load_from_file(self, filepath: str) -> None:
        """
        Load configuration from a file.

        Args:
            filepath: Path to load configuration from
        """
        if filepath.endswith('.json'):
            with open(filepath, 'r') as f:
                overrides = json.load(f)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'r') as f:
                overrides = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

        self.load_config(overrides)

    @classmethod
    def from_file(cls, filepath: str) -> 'Config':
        """
        Create a configuration from a JSON or YAML file.

        Args:
            filepath: Path to load configuration from

        Returns:
            Config instance
        """
        config = cls()
        config.load_from_file(filepath)
        return config
