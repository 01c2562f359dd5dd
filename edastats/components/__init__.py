"""
Supporting components for edastats.
"""

from edastats.components.config import Config, setup_logging
