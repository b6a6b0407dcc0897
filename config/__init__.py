"""YAML configuration for the precipitation forecaster.

Usage
-----
    from config import get_config
    cfg = get_config()
    cfg.get('filter.seasonal_band.low_cycles', 0.5)
"""

from .config_manager import (
    ConfigurationError,
    ConfigurationManager,
    get_config,
)

__all__ = [
    'ConfigurationError',
    'ConfigurationManager',
    'get_config',
]
