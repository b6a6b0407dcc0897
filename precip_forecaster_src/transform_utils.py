# precip_forecaster_src/transform_utils.py

import pandas as pd
import numpy as np
from dataclasses import dataclass
from typing import Tuple, Union
import logging

from .exceptions import DegenerateSeriesError, IncompleteDataError

logger = logging.getLogger(__name__)

ArrayLike = Union[pd.Series, np.ndarray, list]


@dataclass(frozen=True)
class SeriesScaling:
    """Mean and standard deviation captured by ``standardize``; required for inversion."""
    mean: float
    stddev: float


def _as_float_series(series: ArrayLike, name: str = "series") -> pd.Series:
    s = series.astype(float) if isinstance(series, pd.Series) else pd.Series(np.asarray(series, dtype=float))
    if s.isna().any():
        n_missing = int(s.isna().sum())
        raise IncompleteDataError(
            f"{name} contains missing values",
            {"name": name, "missing": n_missing, "length": len(s)},
        )
    return s


def standardize(series: ArrayLike) -> Tuple[pd.Series, float, float]:
    """
    Center and scale a series to zero mean and unit standard deviation.

    Parameters
    ----------
    series : Union[pd.Series, np.ndarray, list]
        Raw measurements (e.g. daily precipitation in mm)

    Returns
    -------
    Tuple[pd.Series, float, float]
        (scaled_series, mean, stddev). The sample standard deviation (ddof=1)
        is used. Keep ``mean`` and ``stddev``: the inverse must use exactly
        these values.

    Raises
    ------
    DegenerateSeriesError
        If the series is constant or has fewer than two observations
    IncompleteDataError
        If the series contains missing values
    """
    s = _as_float_series(series)
    if len(s) < 2:
        raise DegenerateSeriesError(
            "Cannot standardize a series with fewer than two observations",
            {"length": len(s)},
        )
    mean = float(s.mean())
    stddev = float(s.std(ddof=1))
    if not np.isfinite(stddev) or stddev == 0.0:
        raise DegenerateSeriesError(
            "Cannot standardize a constant series (zero variance)",
            {"mean": mean, "stddev": stddev, "length": len(s)},
        )
    logger.debug("Standardized series: mean=%.6f stddev=%.6f n=%d", mean, stddev, len(s))
    return (s - mean) / stddev, mean, stddev


def normalize(scaled_series: ArrayLike) -> pd.Series:
    """
    Apply the inverse hyperbolic sine, ln(v + sqrt(v^2 + 1)).

    Behaves like a logarithm for large values but is defined at and around
    zero, which matters for precipitation records full of dry days.
    """
    s = _as_float_series(scaled_series, name="scaled_series")
    return pd.Series(np.arcsinh(s.to_numpy()), index=s.index, name=s.name)


def denormalize(values: ArrayLike) -> pd.Series:
    """Inverse of ``normalize``: hyperbolic sine."""
    s = _as_float_series(values, name="values")
    return pd.Series(np.sinh(s.to_numpy()), index=s.index, name=s.name)


def unscale(values: ArrayLike, mean: float, stddev: float) -> pd.Series:
    """Inverse of ``standardize``: v * stddev + mean."""
    s = _as_float_series(values, name="values")
    return s * float(stddev) + float(mean)


def transform_series(series: ArrayLike) -> Tuple[pd.Series, SeriesScaling]:
    """
    Standardize then normalize a raw series.

    Returns
    -------
    Tuple[pd.Series, SeriesScaling]
        Transformed series and the scaling parameters needed by
        ``inverse_transform``.
    """
    scaled, mean, stddev = standardize(series)
    transformed = normalize(scaled)
    logger.info("Transformed series: n=%d mean=%.4f stddev=%.4f", len(transformed), mean, stddev)
    return transformed, SeriesScaling(mean=mean, stddev=stddev)


def inverse_transform(values: ArrayLike, scaling: SeriesScaling) -> pd.Series:
    """Denormalize then unscale, using the stored ``SeriesScaling``."""
    return unscale(denormalize(values), scaling.mean, scaling.stddev)


def safe_adf_pval(series: pd.Series) -> float:
    """
    Safely compute ADF test p-value with error handling.

    Parameters
    ----------
    series : pd.Series
        Time series to test for stationarity

    Returns
    -------
    float
        ADF test p-value, or NaN if test cannot be performed

    Notes
    -----
    Requires at least 12 observations to perform the test reliably.
    """
    from statsmodels.tsa.stattools import adfuller

    try:
        s = pd.Series(series).dropna()
        if len(s) < 12:
            return float("nan")
        return float(adfuller(s)[1])
    except Exception:
        return float("nan")


def adf_test(series: ArrayLike) -> Tuple[float, float]:
    """
    Run the Augmented Dickey-Fuller test for unit roots.

    Returns
    -------
    Tuple[float, float]
        (test_statistic, p_value)

    Notes
    -----
    ADF null hypothesis: the series has a unit root. The filter's default
    configuration assumes no unit root, so a small p-value on the transformed
    series supports that default.
    """
    from statsmodels.tsa.stattools import adfuller

    res = adfuller(pd.Series(series).dropna())
    return float(res[0]), float(res[1])
