# precip_forecaster_src/__init__.py

"""
Precipitation Forecaster - band-pass seasonal forecasting package

This package forecasts long daily precipitation records with a
Christiano-Fitzgerald band-pass seasonal method: the series is standardized
and asinh-normalized, split into trend, seasonal and residual components with
two band-pass passes, and the seasonal component is averaged across years into
a representative cycle that is tiled forward and transformed back.

Key Components
--------------
- transform_utils: Reversible standardize / asinh-normalize transform
- filter_utils: Christiano-Fitzgerald band-pass filter
- decomposition_utils: Trend / seasonal / residual decomposition
- seasonal_utils: Cycle positions (hydrological year, leap days) and averaging
- forecasting_utils: Forecast projection, fit-and-forecast and band search
- metrics_utils: Forecast accuracy metrics
- config_utils: Configuration management and CLI override support
- data_utils: CSV loading and train/test split
- diagnostics_utils: Stationarity and residual diagnostics
- plotting_utils: Figures
- file_utils: Metrics CSV and path utilities
- main: Command-line entry point and workflow orchestration

Usage
-----
    # Command-line usage
    python -m precip_forecaster_src.main --series-csv data/precip.csv

    # Programmatic usage
    from precip_forecaster_src import ForecastConfig, fit_and_forecast, evaluate
"""

__version__ = "1.0.0"
__author__ = "Precipitation Forecaster Development Team"

from .exceptions import (
    ForecastPipelineError, DegenerateSeriesError, InvalidBandError, AlignmentError, IncompleteDataError
)
from .transform_utils import SeriesScaling, transform_series, inverse_transform
from .filter_utils import BandSpec, bandpass
from .decomposition_utils import Decomposition, decompose, default_bands
from .seasonal_utils import CycleCalendar, average_cycle, cycle_positions
from .forecasting_utils import CFForecastResult, project, project_onto_dates, fit_and_forecast, optimize_bands
from .metrics_utils import evaluate
from .config_utils import ForecastConfig, initialize_config, get_config_value
from .main import main

__all__ = [
    # Core functionality
    "transform_series",
    "inverse_transform",
    "bandpass",
    "decompose",
    "default_bands",
    "average_cycle",
    "cycle_positions",
    "project",
    "project_onto_dates",
    "fit_and_forecast",
    "optimize_bands",
    "evaluate",
    "main",
    "initialize_config",
    "get_config_value",
    # Types
    "SeriesScaling",
    "BandSpec",
    "Decomposition",
    "CycleCalendar",
    "CFForecastResult",
    "ForecastConfig",
    # Errors
    "ForecastPipelineError",
    "DegenerateSeriesError",
    "InvalidBandError",
    "AlignmentError",
    "IncompleteDataError",
    # Version info
    "__version__",
    "__author__"
]
