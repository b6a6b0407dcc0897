# precip_forecaster_src/forecasting_utils.py

import hashlib
import numpy as np
import pandas as pd
from dataclasses import dataclass, replace
from itertools import product
from typing import Dict, List, Optional, Sequence, Tuple, Union, TYPE_CHECKING
from tqdm.auto import tqdm
import logging

from .decomposition_utils import Decomposition, decompose
from .exceptions import AlignmentError, InvalidBandError
from .seasonal_utils import CycleCalendar, average_cycle, cycle_positions
from .transform_utils import SeriesScaling, denormalize, transform_series, unscale

if TYPE_CHECKING:
    from .config_utils import ForecastConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CFForecastResult:
    """Everything produced by one fit-and-forecast run."""
    scaling: SeriesScaling
    decomposition: Decomposition
    representative_cycle: pd.Series
    forecast: pd.Series


def _tile(representative_cycle: pd.Series, positions: np.ndarray) -> np.ndarray:
    rep = np.asarray(representative_cycle, dtype=float).ravel()
    return rep[np.asarray(positions, dtype=int) - 1]


def project(representative_cycle: Union[pd.Series, np.ndarray],
            horizon_start_index: int,
            horizon_length: int,
            mean: float,
            stddev: float) -> pd.Series:
    """
    Tile the representative cycle over a horizon and return it in original units.

    Parameters
    ----------
    representative_cycle : Union[pd.Series, np.ndarray]
        Output of ``average_cycle`` (transformed units), length L
    horizon_start_index : int
        0-based sample index of the first forecast day, counted from the start
        of the series the cycle was averaged on; its position is
        (horizon_start_index mod L) + 1
    horizon_length : int
        Number of days to forecast
    mean, stddev : float
        Scaling captured when the training series was transformed

    Returns
    -------
    pd.Series
        Forecast named "forecast", indexed horizon_start_index ..
        horizon_start_index + horizon_length - 1

    Notes
    -----
    The forecast is purely periodic: it repeats the seasonal pattern only and
    carries no trend and no noise.
    """
    if horizon_length < 0:
        raise ValueError(f"horizon_length must be non-negative, got {horizon_length}")
    cycle_length = len(representative_cycle)
    positions = cycle_positions(horizon_length, cycle_length, origin=horizon_start_index)
    values = unscale(denormalize(_tile(representative_cycle, positions)), mean, stddev)
    index = pd.RangeIndex(horizon_start_index, horizon_start_index + horizon_length)
    return pd.Series(values.to_numpy(), index=index, name="forecast")


def project_onto_dates(representative_cycle: Union[pd.Series, np.ndarray],
                       dates: pd.DatetimeIndex,
                       scaling: SeriesScaling,
                       calendar: CycleCalendar) -> pd.Series:
    """
    Like ``project``, for explicit future dates mapped through a cycle calendar.

    Feb 29 takes the value of the bucket chosen by the calendar's leap policy.
    The result is purely periodic (no trend, no noise) and indexed by ``dates``.
    """
    dates = pd.DatetimeIndex(dates)
    positions = cycle_positions(dates, len(representative_cycle), calendar)
    values = unscale(denormalize(_tile(representative_cycle, positions)), scaling.mean, scaling.stddev)
    return pd.Series(values.to_numpy(), index=dates, name="forecast")


def future_dates(last_date: pd.Timestamp, horizon_length: int) -> pd.DatetimeIndex:
    """Daily dates following ``last_date``."""
    return pd.date_range(pd.Timestamp(last_date) + pd.Timedelta(days=1), periods=horizon_length, freq="D")


def fit_and_forecast(train: pd.Series,
                     horizon: Union[int, pd.DatetimeIndex],
                     config: "ForecastConfig") -> CFForecastResult:
    """
    Run transform -> decompose -> average -> project on a training series.

    Parameters
    ----------
    train : pd.Series
        Training observations in original units. Calendar mode needs a
        DatetimeIndex.
    horizon : Union[int, pd.DatetimeIndex]
        Number of days following the training series, or the explicit dates
        to forecast
    config : ForecastConfig
        Cycle length, bands, edge policy and calendar

    Returns
    -------
    CFForecastResult
    """
    transformed, scaling = transform_series(train)
    trend_band, seasonal_band = config.bands(len(transformed))
    decomposition = decompose(transformed, trend_band, seasonal_band, root=config.root, drift=config.drift)

    calendar = config.calendar()
    if calendar is not None:
        if not isinstance(train.index, pd.DatetimeIndex):
            raise AlignmentError("Calendar cycles need a DatetimeIndex", {"index_type": type(train.index).__name__})
        representative = average_cycle(decomposition.seasonal, dates=train.index,
                                       cycle_length=config.cycle_length, calendar=calendar)
        dates = horizon if isinstance(horizon, pd.DatetimeIndex) else future_dates(train.index[-1], int(horizon))
        forecast = project_onto_dates(representative, dates, scaling, calendar)
    else:
        representative = average_cycle(decomposition.seasonal, cycle_length=config.cycle_length)
        n_ahead = len(horizon) if isinstance(horizon, pd.DatetimeIndex) else int(horizon)
        forecast = project(representative, len(train), n_ahead, scaling.mean, scaling.stddev)
        if isinstance(horizon, pd.DatetimeIndex):
            forecast.index = horizon

    logger.info("Forecast %d days from a %d-day training series (%d cycles of %d)",
                len(forecast), len(train), len(train) // config.cycle_length, config.cycle_length)
    return CFForecastResult(scaling=scaling, decomposition=decomposition,
                            representative_cycle=representative, forecast=forecast)


def optimize_bands(train: pd.Series,
                   test: pd.Series,
                   seasonal_candidates: Sequence[Tuple[float, float]],
                   trend_low_candidates: Sequence[float],
                   config: "ForecastConfig") -> pd.DataFrame:
    """
    Grid-search band limits and rank them by held-out RMSE.

    Parameters
    ----------
    train, test : pd.Series
        Training observations and the held-out observations that follow them
    seasonal_candidates : Sequence[Tuple[float, float]]
        (low, high) seasonal bands in cycles
    trend_low_candidates : Sequence[float]
        Shortest trend periods in cycles
    config : ForecastConfig
        Base configuration; only the band limits are varied

    Returns
    -------
    pd.DataFrame
        Columns ['seasonal_band', 'trend_low_cycles', 'RMSE', 'MAE'] sorted
        ascending by RMSE

    Notes
    -----
    - Combinations whose bands are invalid for the training length are skipped
    - Progress is displayed via tqdm progress bar
    """
    from .metrics_utils import evaluate

    horizon = test.index if isinstance(test.index, pd.DatetimeIndex) else len(test)
    results: List[List[object]] = []
    grid = list(product(seasonal_candidates, trend_low_candidates))

    for (s_lo, s_hi), t_lo in tqdm(grid, desc="Grid search CF bands"):
        candidate = replace(config, seasonal_low_cycles=float(s_lo), seasonal_high_cycles=float(s_hi),
                            trend_low_cycles=float(t_lo))
        try:
            result = fit_and_forecast(train, horizon, candidate)
        except InvalidBandError as e:
            logger.info("Skipping bands seasonal=(%s, %s) trend_low=%s: %s", s_lo, s_hi, t_lo, e)
            continue
        forecast = result.forecast
        if not isinstance(test.index, pd.DatetimeIndex):
            forecast = pd.Series(forecast.to_numpy(), index=test.index, name="forecast")
        scores = evaluate(forecast, test)
        results.append([(float(s_lo), float(s_hi)), float(t_lo), scores["RMSE"], scores["MAE"]])

    result_df = pd.DataFrame(results, columns=["seasonal_band", "trend_low_cycles", "RMSE", "MAE"])
    result_df = result_df.sort_values(by="RMSE", ascending=True).reset_index(drop=True)
    return result_df


def hash_forecast(forecast: Union[pd.Series, np.ndarray, List[float]]) -> str:
    """
    Short fingerprint of a forecast path, used to tell runs apart in the metrics CSV.

    Returns
    -------
    str
        First 16 hex characters of the SHA-1 of the values rounded to 8 decimals
    """
    arr = np.round(np.asarray(forecast, dtype=float).ravel(), 8)
    return hashlib.sha1(arr.tobytes()).hexdigest()[:16]


def climatology_forecast(train: pd.Series, index: pd.Index) -> pd.Series:
    """Flat forecast at the training mean; the baseline any seasonal forecast must beat."""
    return pd.Series(np.full(len(index), float(np.mean(train))), index=index, name="climatology")


def summarize_result(result: CFForecastResult) -> Dict[str, float]:
    """Scaling and representative-cycle summary for logging."""
    rep = result.representative_cycle
    return {
        "scaling_mean": result.scaling.mean,
        "scaling_stddev": result.scaling.stddev,
        "cycle_peak_position": int(rep.idxmax()),
        "cycle_trough_position": int(rep.idxmin()),
        "cycle_range": float(rep.max() - rep.min()),
        "residual_std": float(result.decomposition.residual.std()),
    }
