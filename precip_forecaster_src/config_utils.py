# precip_forecaster_src/config_utils.py

import argparse
from dataclasses import dataclass
from typing import Any, Optional, Tuple
import logging

from config import ConfigurationError, get_config

from .decomposition_utils import (
    DEFAULT_SEASONAL_HIGH_CYCLES,
    DEFAULT_SEASONAL_LOW_CYCLES,
    DEFAULT_TREND_LOW_CYCLES,
    default_bands,
)
from .filter_utils import BandSpec
from .seasonal_utils import CALENDAR_CYCLE_LENGTH, CycleCalendar

logger = logging.getLogger(__name__)

# Global configuration manager, populated by initialize_config()
config_manager = None


def initialize_config(force: bool = False):
    """
    Initializes the global configuration manager.
    This function loads and validates the project's YAML configuration. If the configuration
    fails to load, it logs the error and proceeds with default settings.
    """
    global config_manager
    if config_manager is not None and not force:
        return config_manager
    try:
        config_manager = get_config()
        validation_errors = config_manager.validate_configuration()
        if validation_errors:
            logger.warning("Configuration validation warnings: %s", validation_errors)
    except ConfigurationError as e:
        logger.error("Failed to initialize configuration: %s. Using defaults.", e)
        config_manager = None
    return config_manager


def get_config_value(key_path: str, default=None, args=None, cli_param=None):
    """
    Retrieves a configuration value, providing support for command-line overrides.
    The function prioritizes values in the following order:
    1. CLI argument (if provided)
    2. Configuration file
    3. Default value
    """
    # First priority: CLI argument
    if args and cli_param and hasattr(args, cli_param):
        cli_value = getattr(args, cli_param)
        if cli_value is not None:
            return cli_value

    # Second priority: Configuration file
    if config_manager:
        config_value = config_manager.get(key_path, default)
        if config_value is not None:
            return config_value

    # Third priority: Default value
    return default


@dataclass(frozen=True)
class ForecastConfig:
    """
    Parameters of one band-pass seasonal forecast run.

    Band limits are given as multiples of ``cycle_length``; ``trend_high`` is
    an absolute period in days, or None to use the series length.
    ``train_end_index`` overrides ``test_cycles`` as the split point, and
    ``horizon`` (days) overrides the held-out length as the forecast length.
    """
    cycle_length: int = CALENDAR_CYCLE_LENGTH
    trend_low_cycles: float = DEFAULT_TREND_LOW_CYCLES
    trend_high: Optional[float] = None
    seasonal_low_cycles: float = DEFAULT_SEASONAL_LOW_CYCLES
    seasonal_high_cycles: float = DEFAULT_SEASONAL_HIGH_CYCLES
    root: bool = False
    drift: bool = False
    use_calendar: bool = True
    hydro_start_month: int = 10
    hydro_start_day: int = 1
    leap_policy: str = "previous"
    test_cycles: int = 1
    train_end_index: Optional[int] = None
    horizon: Optional[int] = None

    def calendar(self) -> Optional[CycleCalendar]:
        if not self.use_calendar:
            return None
        return CycleCalendar(self.hydro_start_month, self.hydro_start_day, self.leap_policy)

    def bands(self, nobs: int) -> Tuple[BandSpec, BandSpec]:
        """(trend_band, seasonal_band) for a training series of ``nobs`` samples."""
        trend, seasonal = default_bands(
            self.cycle_length, nobs,
            trend_low_cycles=self.trend_low_cycles,
            seasonal_low_cycles=self.seasonal_low_cycles,
            seasonal_high_cycles=self.seasonal_high_cycles,
        )
        if self.trend_high is not None:
            trend = BandSpec(trend.period_low, float(self.trend_high))
        return trend, seasonal


def _pair(value: Any, default: Tuple[float, float]) -> Tuple[float, float]:
    if value is None:
        return default
    lo, hi = value
    return float(lo), float(hi)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def build_forecast_config(args: Optional[argparse.Namespace] = None) -> ForecastConfig:
    """
    Assemble a ForecastConfig from CLI arguments, the YAML configuration and defaults.

    Parameters
    ----------
    args : argparse.Namespace, optional
        Parsed CLI arguments; ``trend_band`` and ``seasonal_band`` are
        (low, high) tuples in cycles, ``hydro_start`` a (month, day) tuple

    Returns
    -------
    ForecastConfig
    """
    initialize_config()

    seasonal_low, seasonal_high = _pair(
        getattr(args, "seasonal_band", None) if args else None,
        (float(get_config_value("filter.seasonal_band.low_cycles", DEFAULT_SEASONAL_LOW_CYCLES)),
         float(get_config_value("filter.seasonal_band.high_cycles", DEFAULT_SEASONAL_HIGH_CYCLES))),
    )

    cycle_length = int(get_config_value("cycle.length", CALENDAR_CYCLE_LENGTH, args, "cycle_length"))

    # CLI trend band is in cycles; the YAML upper limit is in days
    trend_cli = getattr(args, "trend_band", None) if args else None
    if trend_cli is not None:
        trend_low = float(trend_cli[0])
        trend_high = None if trend_cli[1] is None else float(trend_cli[1]) * cycle_length
    else:
        trend_low = float(get_config_value("filter.trend_band.low_cycles", DEFAULT_TREND_LOW_CYCLES))
        trend_high = get_config_value("filter.trend_band.high", None)
        trend_high = None if trend_high is None else float(trend_high)
    use_calendar = bool(get_config_value("cycle.calendar.enabled", True))
    if getattr(args, "positional", False):
        use_calendar = False
    if use_calendar and cycle_length != CALENDAR_CYCLE_LENGTH:
        logger.warning("Cycle length %d is not a calendar year; grouping by sample position", cycle_length)
        use_calendar = False

    hydro_start = getattr(args, "hydro_start", None) if args else None
    if hydro_start is not None:
        start_month, start_day = hydro_start
    else:
        start_month = int(get_config_value("cycle.calendar.start_month", 10))
        start_day = int(get_config_value("cycle.calendar.start_day", 1))

    cfg = ForecastConfig(
        cycle_length=cycle_length,
        trend_low_cycles=trend_low,
        trend_high=trend_high,
        seasonal_low_cycles=seasonal_low,
        seasonal_high_cycles=seasonal_high,
        root=bool(get_config_value("filter.root", False)),
        drift=bool(get_config_value("filter.drift", False)),
        use_calendar=use_calendar,
        hydro_start_month=int(start_month),
        hydro_start_day=int(start_day),
        leap_policy=str(get_config_value("cycle.calendar.leap_policy", "previous", args, "leap_policy")),
        test_cycles=int(get_config_value("split.test_cycles", 1, args, "test_cycles")),
        train_end_index=_optional_int(get_config_value("split.train_end_index", None, args, "split_index")),
        horizon=_optional_int(get_config_value("forecast.horizon", None, args, "horizon")),
    )
    logger.debug("Forecast configuration: %s", cfg)
    return cfg
