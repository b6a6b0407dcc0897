"""Configuration manager for the precipitation forecaster.

Loads every YAML file in the config directory, merges them into one tree and
exposes dot-path lookups such as ``get('filter.seasonal_band.low_cycles')``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigurationManager:
    """Loads, merges and validates the YAML configuration tree."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR
        self.loaded_configs: List[str] = []
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """(Re)load every ``*.yaml`` / ``*.yml`` file in ``config_dir`` in name order."""
        if not self.config_dir.is_dir():
            raise ConfigurationError(f"Configuration directory not found: {self.config_dir}")

        self._config = {}
        self.loaded_configs = []
        paths = sorted(list(self.config_dir.glob("*.yaml")) + list(self.config_dir.glob("*.yml")))
        for path in paths:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    content = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to parse {path.name}: {e}") from e
            if not isinstance(content, dict):
                raise ConfigurationError(f"Top level of {path.name} must be a mapping")
            self._config = _deep_merge(self._config, content)
            self.loaded_configs.append(path.name)
        logger.debug("Loaded configuration files: %s", self.loaded_configs)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a value using dot notation.

        Parameters
        ----------
        key_path : str
            Dot-separated path (e.g. 'cycle.calendar.start_month')
        default : Any
            Returned when any part of the path is missing
        """
        current: Any = self._config
        for key in key_path.split("."):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def get_calendar_config(self) -> Dict[str, Any]:
        return self.get("cycle.calendar", {}) or {}

    def validate_configuration(self) -> Dict[str, List[str]]:
        """
        Check value ranges and cross-field consistency.

        Returns
        -------
        Dict[str, List[str]]
            Section name -> list of problems; empty when the configuration is valid
        """
        errors: Dict[str, List[str]] = {}

        def add(section: str, message: str) -> None:
            errors.setdefault(section, []).append(message)

        length = self.get("cycle.length", 365)
        if not isinstance(length, int) or length < 2:
            add("cycle", f"length must be an integer >= 2, got {length!r}")

        calendar = self.get_calendar_config()
        if calendar.get("enabled", True):
            if length != 365:
                add("cycle", "calendar cycles require length 365")
            if calendar.get("leap_policy", "previous") not in ("previous", "next"):
                add("cycle", f"unknown leap_policy {calendar.get('leap_policy')!r}")
            month = calendar.get("start_month", 10)
            if not isinstance(month, int) or not 1 <= month <= 12:
                add("cycle", f"start_month must be 1..12, got {month!r}")

        seasonal_low = self.get("filter.seasonal_band.low_cycles", 0.5)
        seasonal_high = self.get("filter.seasonal_band.high_cycles", 1.5)
        trend_low = self.get("filter.trend_band.low_cycles", 1.5)
        try:
            if float(seasonal_low) <= 0:
                add("filter", "seasonal_band.low_cycles must be positive")
            if float(seasonal_low) >= float(seasonal_high):
                add("filter", "seasonal_band.low_cycles must be below high_cycles")
            if float(seasonal_high) > float(trend_low):
                add("filter", "seasonal band overlaps the trend band")
        except (TypeError, ValueError):
            add("filter", "band limits must be numbers")

        test_cycles = self.get("split.test_cycles", 1)
        if not isinstance(test_cycles, int) or test_cycles < 1:
            add("split", f"test_cycles must be a positive integer, got {test_cycles!r}")
        train_end_index = self.get("split.train_end_index")
        if train_end_index is not None and (not isinstance(train_end_index, int) or train_end_index < 1):
            add("split", f"train_end_index must be a positive integer or null, got {train_end_index!r}")

        horizon = self.get("forecast.horizon")
        if horizon is not None and (not isinstance(horizon, int) or horizon < 1):
            add("forecast", f"horizon must be a positive integer or null, got {horizon!r}")

        return errors

    def get_configuration_summary(self) -> Dict[str, Any]:
        return {
            "config_dir": str(self.config_dir),
            "loaded_configs": list(self.loaded_configs),
            "sections": sorted(self._config.keys()),
        }


_instance: Optional[ConfigurationManager] = None


def get_config(config_dir: Optional[Path] = None) -> ConfigurationManager:
    """
    Get the shared configuration manager.

    Passing ``config_dir`` builds a fresh manager for that directory and makes
    it the shared instance.
    """
    global _instance
    if config_dir is not None or _instance is None:
        _instance = ConfigurationManager(config_dir)
    return _instance
