# precip_forecaster_src/main.py

"""
Band-pass seasonal forecasting of daily precipitation.

Purpose
-------
- Load a daily precipitation record (CSV with a date and a value column)
- Validate it: contiguous days, no missing or negative values
- Hold out the last cycle(s) of the record
- Standardize and asinh-normalize the training series, split it into trend,
  seasonal and residual components with two Christiano-Fitzgerald band-pass
  passes, and average the seasonal component into one representative cycle
- Tile the cycle over the forecast horizon (default: the held-out period),
  invert the transform and score the forecast against the observations and a
  climatological-mean baseline
- Optionally grid-search the band limits by held-out RMSE

Configuration-Driven Workflow
-----------------------------
Cycle, band, calendar and split settings live in config/forecast.yaml. CLI
arguments override configuration values where applicable.
"""

import argparse
import logging
import sys
import warnings
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .config_utils import ForecastConfig, build_forecast_config, get_config_value, initialize_config
from .data_utils import load_series_csv, split_train_test
from .diagnostics_utils import run_decomposition_diagnostics
from .exceptions import ForecastPipelineError
from .file_utils import append_metrics_csv_row, ensure_dir, resolve_path
from .forecasting_utils import (
    CFForecastResult, climatology_forecast, fit_and_forecast, future_dates, hash_forecast, optimize_bands,
    summarize_result,
)
from .metrics_utils import METRIC_NAMES, evaluate
from .parsing_utils import (
    parse_band_arg, parse_band_list, parse_hydro_start, validate_leap_policy, validate_log_level
)
from .plotting_utils import plot_decomposition, plot_forecast_comparison, plot_representative_cycle
from .seasonal_utils import cycle_positions

logger = logging.getLogger(__name__)

METRICS_HEADER = [
    "series", "n", "train_len", "test_len", "model", "cycle_length",
    "trend_band", "seasonal_band", "root", "drift",
] + METRIC_NAMES + ["hash_forecast", "fingerprint"]


def _export_metrics(metrics_csv_path: Optional[Path],
                    series_name: str,
                    n_obs: int,
                    train_len: int,
                    result: CFForecastResult,
                    config: ForecastConfig,
                    scores: Dict[str, Dict[str, float]],
                    forecasts: Dict[str, pd.Series],
                    fingerprint: str) -> None:
    """Append one metrics row per forecast method."""
    decomposition = result.decomposition
    for model, model_scores in scores.items():
        row = {
            "series": series_name,
            "n": n_obs,
            "train_len": train_len,
            "test_len": len(forecasts[model]),
            "model": model,
            "cycle_length": config.cycle_length,
            "trend_band": decomposition.trend_band.describe(),
            "seasonal_band": decomposition.seasonal_band.describe(),
            "root": config.root,
            "drift": config.drift,
            "hash_forecast": hash_forecast(forecasts[model]),
            "fingerprint": fingerprint,
        }
        row.update(model_scores)
        append_metrics_csv_row(metrics_csv_path, row, METRICS_HEADER)


def _save_figures(figures_dir: Path, result: CFForecastResult, train: pd.Series, test: pd.Series,
                  baseline: pd.Series, config: ForecastConfig) -> None:
    """Decomposition, representative-cycle and forecast-overlay figures; failures are logged only."""
    try:
        ensure_dir(figures_dir)
        plot_decomposition(result.decomposition, figures_dir / "CF_Decomposition.png")
        calendar = config.calendar()
        if calendar is not None:
            positions = cycle_positions(train.index, config.cycle_length, calendar)
        else:
            positions = cycle_positions(len(train), config.cycle_length)
        plot_representative_cycle(result.representative_cycle, figures_dir / "CF_RepresentativeCycle.png",
                                  seasonal=result.decomposition.seasonal, positions=positions)
        plot_forecast_comparison(
            test,
            {"CF seasonal": result.forecast, "Climatology": baseline},
            figures_dir / "CF_Forecast.png",
            title="Band-pass seasonal forecast vs held-out observations",
            history=train.iloc[-config.cycle_length:],
        )
        logger.info("Saved figures to %s", figures_dir)
    except (OSError, ValueError) as e:
        logger.error("Failed to save figures: %s", e)


def _save_diagnostics(figures_dir: Path, result: CFForecastResult) -> None:
    """Residual diagnostics and the full forecast path as CSV; failures are logged only."""
    try:
        ensure_dir(figures_dir)
        run_decomposition_diagnostics(result.decomposition, figures_dir, fname_prefix="CF")
        result.forecast.rename_axis("date").to_frame().to_csv(figures_dir / "CF_Forecast.csv")
    except (OSError, ValueError) as e:
        logger.error("Failed to save diagnostics: %s", e)


def _band_candidates(args: argparse.Namespace) -> List:
    seasonal = parse_band_list(getattr(args, "seasonal_candidates", None))
    if not seasonal:
        seasonal = [tuple(b) for b in get_config_value("search.seasonal_bands", [(0.5, 1.5)])]
    trend_lows = get_config_value("search.trend_low_cycles", [1.5])
    return [seasonal, [float(t) for t in trend_lows]]


def run_cf_workflow(series_path: Path,
                    figures_dir: Optional[Path],
                    metrics_csv_path: Optional[Path],
                    args: Optional[argparse.Namespace] = None) -> Dict[str, Dict[str, float]]:
    """
    Run the band-pass seasonal forecast on one precipitation CSV.

    Parameters
    ----------
    series_path : Path
        Input CSV with a date column and a value column
    figures_dir : Optional[Path]
        Output directory for figures and diagnostics (None to skip)
    metrics_csv_path : Optional[Path]
        If provided, append evaluation metrics to this CSV
    args : Optional[argparse.Namespace]
        CLI arguments for configuration

    Returns
    -------
    Dict[str, Dict[str, float]]
        Model name -> metrics, for the CF forecast and the climatological baseline

    Workflow
    --------
    - Load and validate the series (validation errors stop the run)
    - Split off the last ``test_cycles`` cycles, or at ``train_end_index``
    - Fit the decomposition and forecast ``horizon`` days (default: the held-out days)
    - Score CF and climatology on the forecast days that have an observation
    - Append metrics rows; save diagnostics, the forecast CSV and figures
    - Optionally grid-search the band limits
    """
    from validation import run_validation_pipeline
    from . import config_utils

    logger.info("Starting CF workflow for: %s", series_path)
    config = build_forecast_config(args)

    date_column = get_config_value("data.date_column", "date")
    value_column = get_config_value("data.value_column", "value", args, "value_column")
    series = load_series_csv(series_path, date_column=date_column, value_column=value_column)

    validation = run_validation_pipeline(series, name=series_path.stem, cycle_length=config.cycle_length,
                                         config_manager=config_utils.config_manager, raise_on_error=True)

    try:
        train, test = split_train_test(series, config.test_cycles, config.cycle_length, config.use_calendar,
                                       train_end_index=config.train_end_index)
    except ValueError as e:
        raise SystemExit(f"Invalid train/test split: {e}")
    if config.horizon is not None and config.horizon < 1:
        raise SystemExit(f"Forecast horizon must be positive, got {config.horizon}")

    horizon = test.index if config.horizon is None else future_dates(train.index[-1], config.horizon)
    result = fit_and_forecast(train, horizon, config)
    # Only forecast days with an observation are scored
    test = test[test.index.isin(horizon)]
    logger.info("Scoring %d of %d forecast days against observations", len(test), len(horizon))

    logger.info("Fit summary: %s", summarize_result(result))

    mase_period = int(get_config_value("evaluation.mase_period", config.cycle_length))
    baseline = climatology_forecast(train, test.index)
    forecasts = {"CF(seasonal)": result.forecast.loc[test.index], "climatology": baseline}
    scores = {name: evaluate(fc, test, y_train=train, m=mase_period) for name, fc in forecasts.items()}
    for name, s in scores.items():
        logger.info("%s: RMSE=%.4f MAE=%.4f ME=%.4f", name, s["RMSE"], s["MAE"], s["ME"])

    _export_metrics(metrics_csv_path, series_path.stem, len(series), len(train), result, config,
                    scores, forecasts, validation.metrics.get("fingerprint", ""))

    if figures_dir is not None:
        _save_diagnostics(figures_dir, result)
        _save_figures(figures_dir, result, train, test, baseline, config)

    if args is not None and getattr(args, "optimize_bands", False):
        seasonal_candidates, trend_candidates = _band_candidates(args)
        search_df = optimize_bands(train, test, seasonal_candidates, trend_candidates, config)
        if search_df.empty:
            logger.warning("Band search found no valid candidate")
        else:
            logger.info("Top band combinations by RMSE:\n%s", search_df.head().to_string())
            if figures_dir is not None:
                ensure_dir(figures_dir)
                search_df.to_csv(figures_dir / "CF_band_search.csv", index=False)

    logger.info("CF workflow completed")
    return scores


def setup_cli_parser() -> argparse.ArgumentParser:
    """
    Set up the command-line argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="Band-pass (Christiano-Fitzgerald) seasonal forecasting of daily precipitation."
    )

    # Data and output arguments
    parser.add_argument(
        "--series-csv", type=str, required=True,
        help="CSV with a 'date' column and a value column."
    )
    parser.add_argument(
        "--value-column", type=str, default=None,
        help="Name of the value column. Uses config default ('value') if not specified."
    )
    parser.add_argument(
        "--figures-dir", type=str, default="figures",
        help="Directory to write figures and diagnostics."
    )
    parser.add_argument(
        "--no-figures", action="store_true",
        help="Skip figures and diagnostic files."
    )
    parser.add_argument(
        "--metrics-csv", type=str, default=None,
        help="If provided, append evaluation metrics rows to this CSV (resolved relative to base_dir if not absolute)."
    )
    parser.add_argument(
        "--log-level", type=validate_log_level, default="INFO",
        help="Logging verbosity level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Cycle and split
    parser.add_argument(
        "--cycle-length", type=int, default=None,
        help="Cycle length in days. Uses config default (365) if not specified."
    )
    parser.add_argument(
        "--test-cycles", type=int, default=None,
        help="Number of cycles held out at the end of the record."
    )
    parser.add_argument(
        "--split-index", type=int, default=None,
        help="Explicit split point as a 0-based day index; overrides --test-cycles."
    )
    parser.add_argument(
        "--horizon", type=int, default=None,
        help="Days to forecast after the training series (default: the held-out length)."
    )
    parser.add_argument(
        "--hydro-start", type=parse_hydro_start, default=None,
        help="First day of the cycle as MM-DD (default 10-01, the hydrological year)."
    )
    parser.add_argument(
        "--leap-policy", type=validate_leap_policy, default=None,
        help="Bucket for Feb 29: 'previous' (Feb 28) or 'next' (Mar 1)."
    )
    parser.add_argument(
        "--positional", action="store_true",
        help="Group by sample position instead of calendar date."
    )

    # Bands
    parser.add_argument(
        "--trend-band", type=lambda s: parse_band_arg(s, allow_open_high=True), default=None,
        help="Trend band in cycles, e.g. '1.5-' (upper limit = series length)."
    )
    parser.add_argument(
        "--seasonal-band", type=parse_band_arg, default=None,
        help="Seasonal band in cycles, e.g. '0.5-1.5'."
    )
    parser.add_argument(
        "--optimize-bands", action="store_true",
        help="Grid-search band limits by held-out RMSE."
    )
    parser.add_argument(
        "--seasonal-candidates", type=str, default=None,
        help="Comma-separated seasonal bands for the search, e.g. '0.5-1.25,0.5-1.5'."
    )

    return parser


def setup_logging(log_level: str) -> None:
    """
    Configure logging with specified level and warning filters.

    Parameters
    ----------
    log_level : str
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = validate_log_level(log_level)
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Configure warnings based on log level
    if level == "DEBUG":
        warnings.resetwarnings()
        warnings.filterwarnings("default")
    else:
        from statsmodels.tools.sm_exceptions import InterpolationWarning
        warnings.filterwarnings("ignore", category=InterpolationWarning)
        warnings.filterwarnings("ignore", category=FutureWarning)
        warnings.filterwarnings("ignore", category=UserWarning, module="statsmodels")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the band-pass seasonal forecaster.

    Pipeline errors are logged with their details and end the process with
    exit status 1.
    """
    initialize_config()

    parser = setup_cli_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    base_dir = Path(__file__).resolve().parent.parent
    series_path = resolve_path(args.series_csv, base_dir)
    figures_dir = None if args.no_figures else resolve_path(args.figures_dir, base_dir)
    metrics_csv_path: Optional[Path] = None
    if args.metrics_csv:
        metrics_csv_path = resolve_path(args.metrics_csv, base_dir)

    try:
        run_cf_workflow(series_path, figures_dir, metrics_csv_path, args)
    except ForecastPipelineError as e:
        logger.error("%s: %s", type(e).__name__, e)
        sys.exit(1)


if __name__ == "__main__":
    main()
