# precip_forecaster_src/metrics_utils.py

import math
import numpy as np
import pandas as pd
from typing import Dict, List, Optional, Tuple, Union
import logging

from .exceptions import AlignmentError, IncompleteDataError

logger = logging.getLogger(__name__)

ArrayLike = Union[List[float], np.ndarray, pd.Series]

METRIC_NAMES = ["ME", "RMSE", "MAE", "MPE", "MAPE", "MASE", "ACF1", "TheilU1"]


def to_1d_array(x: ArrayLike) -> np.ndarray:
    """
    Convert input to 1D numpy array, filtering out non-finite values.

    Parameters
    ----------
    x : Union[List[float], np.ndarray, pd.Series]
        Input data to convert

    Returns
    -------
    np.ndarray
        1D array containing only finite values
    """
    arr = np.asarray(x, dtype=float).ravel()
    return arr[np.isfinite(arr)]


def align_series(forecast: ArrayLike, observed: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
    """
    Check that forecast and observations describe the same samples.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        (forecast, observed) as float arrays

    Raises
    ------
    AlignmentError
        If lengths differ, or both are Series with different indexes
    IncompleteDataError
        If either contains missing values
    """
    f = np.asarray(forecast, dtype=float).ravel()
    o = np.asarray(observed, dtype=float).ravel()
    if len(f) != len(o):
        raise AlignmentError(
            "Forecast and observations differ in length",
            {"forecast": len(f), "observed": len(o)},
        )
    if isinstance(forecast, pd.Series) and isinstance(observed, pd.Series):
        if not forecast.index.equals(observed.index):
            raise AlignmentError(
                "Forecast and observations have different indexes",
                {"forecast_start": forecast.index[0] if len(forecast) else None,
                 "observed_start": observed.index[0] if len(observed) else None},
            )
    for name, arr in (("forecast", f), ("observed", o)):
        n_missing = int((~np.isfinite(arr)).sum())
        if n_missing:
            raise IncompleteDataError(
                f"{name} contains missing values",
                {"name": name, "missing": n_missing, "length": len(arr)},
            )
    return f, o


def mae(y_true: ArrayLike, y_hat: ArrayLike) -> float:
    """Mean absolute error, or NaN if no valid data."""
    yt = to_1d_array(y_true)
    yh = to_1d_array(y_hat)
    n = min(len(yt), len(yh))
    if n == 0:
        return float("nan")
    return float(np.mean(np.abs(yh[:n] - yt[:n])))


def rmse(y_true: ArrayLike, y_hat: ArrayLike) -> float:
    """
    Calculate Root Mean Square Error.

    RMSE penalizes large errors more heavily than MAE and is the primary
    accuracy measure for the seasonal forecast.
    """
    yt = to_1d_array(y_true)
    yh = to_1d_array(y_hat)
    n = min(len(yt), len(yh))
    if n == 0:
        return float("nan")
    return float(np.sqrt(np.mean((yh[:n] - yt[:n]) ** 2)))


def percentage_errors(y_true: ArrayLike, y_hat: ArrayLike) -> Tuple[np.ndarray, int]:
    """
    Percentage errors 100 * (observed - forecast) / observed over non-zero observations.

    Returns
    -------
    Tuple[np.ndarray, int]
        (percentage_errors, number_of_zero_observations_excluded)
    """
    yt = np.asarray(y_true, dtype=float).ravel()
    yh = np.asarray(y_hat, dtype=float).ravel()
    nonzero = yt != 0.0
    pe = 100.0 * (yt[nonzero] - yh[nonzero]) / yt[nonzero]
    return pe, int((~nonzero).sum())


def mase_metric(y_true: ArrayLike,
                y_hat: ArrayLike,
                y_train: ArrayLike,
                m: int = 365) -> float:
    """
    Calculate Mean Absolute Scaled Error.

    MASE scales the MAE by the MAE of the in-sample seasonal naive forecast
    (same day one cycle earlier).

    Parameters
    ----------
    y_true : Union[List[float], np.ndarray, pd.Series]
        True values
    y_hat : Union[List[float], np.ndarray, pd.Series]
        Predicted values
    y_train : Union[List[float], np.ndarray, pd.Series]
        Training data for scaling reference
    m : int, default=365
        Seasonal lag of the naive forecast

    Returns
    -------
    float
        MASE value, or NaN if the training series is too short or has no
        seasonal variation

    Notes
    -----
    Values < 1 indicate the forecast is better than the seasonal naive forecast.
    """
    yt = to_1d_array(y_true)
    yh = to_1d_array(y_hat)
    n = min(len(yt), len(yh))
    if n == 0:
        return float("nan")

    num = np.mean(np.abs(yh[:n] - yt[:n]))
    tr = to_1d_array(y_train)
    if len(tr) <= m:
        return float("nan")

    denom = np.mean(np.abs(tr[m:] - tr[:-m]))
    if not np.isfinite(denom) or denom <= 0.0:
        return float("nan")
    return float(num / denom)


def acf1(errors: ArrayLike) -> float:
    """Lag-1 autocorrelation of the forecast errors; NaN for fewer than two or constant errors."""
    e = to_1d_array(errors)
    if len(e) < 2:
        return float("nan")
    d = e - e.mean()
    denom = float(np.sum(d * d))
    if denom <= 0.0:
        return float("nan")
    return float(np.sum(d[1:] * d[:-1]) / denom)


def theil_u1(y_true: ArrayLike, y_hat: ArrayLike) -> float:
    """
    Calculate Theil's U1 statistic (coefficient of inequality).

    U1 measures the relative accuracy of forecasts, with values closer to 0
    indicating better forecasts. It is scale-invariant and bounded between 0 and 1.
    """
    yt = to_1d_array(y_true)
    yh = to_1d_array(y_hat)
    n = min(len(yt), len(yh))
    if n == 0:
        return float("nan")
    yt = yt[:n]
    yh = yh[:n]

    rmse_f = math.sqrt(float(np.mean((yh - yt) ** 2)))
    denom = math.sqrt(float(np.mean(yt ** 2))) + math.sqrt(float(np.mean(yh ** 2)))
    if denom <= 0.0:
        return float("nan")
    return float(rmse_f / denom)


def evaluate(forecast_series: ArrayLike,
             observed_series: ArrayLike,
             y_train: Optional[ArrayLike] = None,
             m: int = 365) -> Dict[str, float]:
    """
    Score a forecast against held-out observations.

    Parameters
    ----------
    forecast_series : Union[List[float], np.ndarray, pd.Series]
        Forecast in original units
    observed_series : Union[List[float], np.ndarray, pd.Series]
        Held-out observations for the same days
    y_train : Union[List[float], np.ndarray, pd.Series], optional
        Training observations; enables MASE
    m : int, default=365
        Seasonal lag for MASE

    Returns
    -------
    Dict[str, float]
        ME, RMSE, MAE, MPE, MAPE, MASE, ACF1, TheilU1

    Raises
    ------
    AlignmentError
        If the two series differ in length or index
    IncompleteDataError
        If either series, or ``y_train``, has missing values

    Notes
    -----
    - Errors are e = observed - forecast, so a positive ME means the forecast
      is too low
    - MPE and MAPE use the non-zero observations only; dry days (true zeros)
      are excluded and counted in the log. They are NaN when every
      observation is zero.
    """
    f, o = align_series(forecast_series, observed_series)
    n = len(o)
    if y_train is not None:
        train_arr = np.asarray(y_train, dtype=float).ravel()
        n_missing = int((~np.isfinite(train_arr)).sum())
        if n_missing:
            raise IncompleteDataError(
                "y_train contains missing values",
                {"name": "y_train", "missing": n_missing, "length": len(train_arr)},
            )
    err = o - f

    pe, n_zero = percentage_errors(o, f)
    if n_zero:
        logger.info("Excluded %d zero observations of %d from MPE/MAPE", n_zero, n)

    res = {
        "ME": float(np.mean(err)) if n > 0 else float("nan"),
        "RMSE": rmse(o, f),
        "MAE": mae(o, f),
        "MPE": float(np.mean(pe)) if len(pe) > 0 else float("nan"),
        "MAPE": float(np.mean(np.abs(pe))) if len(pe) > 0 else float("nan"),
        "MASE": mase_metric(o, f, y_train, m=m) if y_train is not None else float("nan"),
        "ACF1": acf1(err),
        "TheilU1": theil_u1(o, f),
    }
    logger.debug("Evaluation on %d samples: %s", n, res)
    return res
