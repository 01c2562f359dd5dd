"""
Tests for the config module.
"""

import logging

import pytest
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from edastats.components.config import Config, setup_logging, to_bool, to_float, to_int

ENV_VARS = [
    'EDA_PCA_SCALE', 'EDA_EIGEN_TOLERANCE', 'EDA_CORR_METHOD',
    'EDA_CORR_CLUSTER_METHOD', 'EDA_CORR_TOP_PAIRS', 'LOG_LEVEL'
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure the host environment does not leak into the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConverters:
    """Tests for value conversion helpers."""

    def test_to_int(self):
        assert to_int('5') == 5
        assert to_int('x') is None
        assert to_int(None) is None

    def test_to_float(self):
        assert to_float('1e-8') == 1e-8
        assert to_float('x') is None

    def test_to_bool(self):
        assert to_bool('Yes') is True
        assert to_bool('0') is False
        assert to_bool(1) is True
        assert to_bool('maybe') is None


class TestConfig:
    """Tests for the Config class."""

    def test_defaults(self):
        """Test default values."""
        config = Config()

        assert config.get('pca.scale') is True
        assert config.get('pca.eigen-tolerance') == 1e-10
        assert config.get('corr.method') == 'pearson'
        assert config.get('corr.cluster-method') == 'complete'
        assert config.get('logging.level') == 'warn'
        assert config.get('missing.key', 'fallback') == 'fallback'

    def test_env_vars(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv('EDA_PCA_SCALE', 'false')
        monkeypatch.setenv('EDA_CORR_METHOD', 'Spearman')
        monkeypatch.setenv('EDA_CORR_TOP_PAIRS', '3')
        monkeypatch.setenv('LOG_LEVEL', 'DEBUG')

        config = Config()

        assert config.get('pca.scale') is False
        assert config.get('corr.method') == 'spearman'
        assert config.get('corr.top-pairs') == 3
        assert config.get('logging.level') == 'debug'

    def test_invalid_env_var_falls_back(self, monkeypatch):
        """Test unparseable environment values keep the default."""
        monkeypatch.setenv('EDA_EIGEN_TOLERANCE', 'tiny')
        assert Config().get('pca.eigen-tolerance') == 1e-10

    def test_overrides(self, monkeypatch):
        """Test overrides win over environment and are deep-merged."""
        monkeypatch.setenv('EDA_PCA_SCALE', 'false')
        config = Config({'pca': {'scale': True}})

        assert config.get('pca.scale') is True
        assert config.get('pca.eigen-tolerance') == 1e-10

    def test_invalid_values(self):
        """Test values that would break a computation are rejected."""
        with pytest.raises(ValueError):
            Config({'corr': {'method': 'kendall'}})
        with pytest.raises(ValueError):
            Config({'pca': {'eigen-tolerance': -1}})
        with pytest.raises(ValueError):
            Config({'logging': {'level': 'loud'}})
        with pytest.raises(ValueError, match="linkage"):
            Config({'corr': {'cluster-method': 'bogus'}})
        with pytest.raises(ValueError):
            Config({'corr': {'top-pairs': -1}})
        with pytest.raises(ValueError):
            Config({'pca': {'export-components': 0}})

    def test_invalid_cluster_method_env_var(self, monkeypatch):
        """Test an unknown linkage method from the environment is rejected."""
        monkeypatch.setenv('EDA_CORR_CLUSTER_METHOD', 'Bogus')
        with pytest.raises(ValueError, match="bogus"):
            Config()

        monkeypatch.setenv('EDA_CORR_CLUSTER_METHOD', 'Average')
        assert Config().get('corr.cluster-method') == 'average'

    def test_set_and_to_dict(self):
        """Test setting values by path."""
        config = Config()
        config.set('pca.scale', False)
        config.set('report.title', 'Wine')

        exported = config.to_dict()
        assert exported['pca']['scale'] is False
        assert exported['report']['title'] == 'Wine'

        # to_dict returns a copy
        exported['pca']['scale'] = True
        assert config.get('pca.scale') is False

    def test_set_validates(self):
        """Test an invalid value is rejected and the old value kept."""
        config = Config()

        with pytest.raises(ValueError):
            config.set('corr.cluster-method', 'bogus')
        with pytest.raises(ValueError):
            config.set('corr.method', 'kendall')

        assert config.get('corr.cluster-method') == 'complete'
        assert config.get('corr.method') == 'pearson'

        config.set('corr.cluster-method', 'ward')
        assert config.get('corr.cluster-method') == 'ward'

    def test_yaml_round_trip(self, tmp_path):
        """Test saving and loading YAML."""
        path = str(tmp_path / 'config.yaml')
        Config({'corr': {'top-pairs': 7}}).save_to_file(path)

        loaded = Config.from_file(path)
        assert loaded.get('corr.top-pairs') == 7

    def test_json_file(self, tmp_path):
        """Test loading JSON."""
        path = tmp_path / 'config.json'
        path.write_text('{"pca": {"scale": false}}')

        config = Config()
        config.load_from_file(str(path))
        assert config.get('pca.scale') is False

    def test_unsupported_file(self, tmp_path):
        """Test unknown file extensions are rejected."""
        with pytest.raises(ValueError):
            Config().save_to_file(str(tmp_path / 'config.ini'))
        with pytest.raises(ValueError):
            Config().load_from_file(str(tmp_path / 'config.ini'))


class TestSetupLogging:
    """Tests for logging setup."""

    def test_sets_package_level(self):
        setup_logging('debug')
        assert logging.getLogger('edastats').level == logging.DEBUG
        setup_logging('warn')
        assert logging.getLogger('edastats').level == logging.WARNING

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logging('loud')

    def test_config_level(self, monkeypatch):
        """Test LOG_LEVEL takes effect through the configuration."""
        monkeypatch.setenv('LOG_LEVEL', 'debug')
        try:
            Config().setup_logging()
            assert logging.getLogger('edastats').level == logging.DEBUG

            Config({'logging': {'level': 'error'}}).setup_logging()
            assert logging.getLogger('edastats').level == logging.ERROR
        finally:
            setup_logging('warn')
