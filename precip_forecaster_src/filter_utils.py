# precip_forecaster_src/filter_utils.py

"""
Christiano-Fitzgerald band-pass filter.

The ideal band-pass filter passing periods in [period_low, period_high] has the
infinite, two-sided impulse response

    B_0 = (b - a) / pi,    B_j = (sin(j b) - sin(j a)) / (pi j),   j >= 1

with a = 2 pi / period_high and b = 2 pi / period_low. A finite sample of
length T only supports lags |j| < T, so the filter here is the finite-sample
(asymmetric) approximation: every output sample uses all the history and all
the future available to it, with weights that differ from row to row near the
two ends. No mirroring and no zero padding is involved.

Two edge policies are available:

- ``root=False`` (default): the series is treated as a stationary, mean-zero
  process. It is demeaned and filtered with the truncated ideal weights, which
  is the optimal finite-sample projection for white noise.
- ``root=True``: the series is treated as a random walk. The end-point weights
  absorb the truncated tails so each row of weights sums to zero and a
  constant input produces a zero cycle.

``drift=True`` removes the straight line through the first and last sample
before filtering. Both flags default to off.
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Union
from scipy.signal import fftconvolve
import logging

from .exceptions import IncompleteDataError, InvalidBandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BandSpec:
    """Period band in sampling steps (days)."""
    period_low: float
    period_high: float

    def validate(self, nobs: int) -> None:
        """
        Check the band against a sample length.

        Raises
        ------
        InvalidBandError
            If period_low <= 0, period_low >= period_high or period_high > nobs
        """
        details = {"period_low": self.period_low, "period_high": self.period_high, "nobs": nobs}
        if not (np.isfinite(self.period_low) and np.isfinite(self.period_high)):
            raise InvalidBandError("Band periods must be finite", details)
        if self.period_low <= 0:
            raise InvalidBandError("period_low must be positive", details)
        if self.period_low >= self.period_high:
            raise InvalidBandError("period_low must be smaller than period_high", details)
        if self.period_high > nobs:
            raise InvalidBandError("period_high cannot exceed the series length", details)
        if self.period_low < 2:
            logger.warning("period_low=%.3f is below the Nyquist period of 2 samples; "
                           "the upper band edge aliases", self.period_low)

    def describe(self) -> str:
        return f"[{self.period_low:g}, {self.period_high:g}]"


def cf_weights(period_low: float, period_high: float, nobs: int) -> np.ndarray:
    """
    Ideal band-pass weights B_0 .. B_{nobs-1}.

    Parameters
    ----------
    period_low, period_high : float
        Band limits in sampling steps
    nobs : int
        Sample length; lags beyond nobs - 1 are never used

    Returns
    -------
    np.ndarray
        Weight vector of length ``nobs``, a pure function of the three inputs
    """
    a = 2.0 * np.pi / float(period_high)
    b = 2.0 * np.pi / float(period_low)
    weights = np.empty(int(nobs), dtype=float)
    weights[0] = (b - a) / np.pi
    j = np.arange(1, int(nobs), dtype=float)
    weights[1:] = (np.sin(b * j) - np.sin(a * j)) / (np.pi * j)
    return weights


def _symmetric_filter(x: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """y_t = sum_s B_|t-s| x_s over the whole sample."""
    n = len(x)
    kernel = np.concatenate([weights[:0:-1], weights])
    full = fftconvolve(x, kernel, mode="full")
    return full[n - 1: 2 * n - 1]


def _random_walk_filter(x: np.ndarray, weights: np.ndarray) -> np.ndarray:
    n = len(x)
    b0 = weights[0]
    cum = np.concatenate([[0.0], np.cumsum(weights[1:])])
    idx = np.arange(n)

    interior = x.copy()
    interior[0] = 0.0
    interior[-1] = 0.0
    y = _symmetric_filter(interior, weights)

    # The end samples were zeroed above, so their centre weight is added back here.
    y[0] += b0 * x[0]
    if n > 1:
        y[-1] += b0 * x[-1]

    forward_end = -0.5 * b0 - cum[np.maximum(n - idx - 2, 0)]
    backward_end = -0.5 * b0 - cum[np.maximum(idx - 1, 0)]
    return y + forward_end * x[-1] + backward_end * x[0]


def bandpass(series: Union[pd.Series, np.ndarray, list],
             period_low: float,
             period_high: float,
             root: bool = False,
             drift: bool = False) -> Union[pd.Series, np.ndarray]:
    """
    Extract the component of ``series`` with periods in [period_low, period_high].

    Parameters
    ----------
    series : Union[pd.Series, np.ndarray, list]
        Input series, no missing values
    period_low : float
        Shortest period passed, in sampling steps (> 0)
    period_high : float
        Longest period passed, in sampling steps (<= len(series))
    root : bool, default=False
        Assume a unit root (random walk) when building the end-point weights
    drift : bool, default=False
        Remove the line through the first and last samples before filtering

    Returns
    -------
    Union[pd.Series, np.ndarray]
        Cycle component with the same length as the input. A Series input
        keeps its index and name.

    Raises
    ------
    InvalidBandError
        For a malformed band; raised before any computation
    IncompleteDataError
        If the series contains missing values

    Notes
    -----
    Samples within roughly one band-period of either end only see one side of
    the filter and are less reliable than the interior.
    """
    is_series = isinstance(series, pd.Series)
    x = np.asarray(series, dtype=float).ravel()
    band = BandSpec(float(period_low), float(period_high))
    band.validate(len(x))

    if not np.all(np.isfinite(x)):
        raise IncompleteDataError(
            "Cannot filter a series with missing values",
            {"missing": int((~np.isfinite(x)).sum()), "length": len(x)},
        )

    n = len(x)
    if drift and n > 1:
        x = x - np.arange(n) * (x[-1] - x[0]) / (n - 1.0)

    weights = cf_weights(band.period_low, band.period_high, n)
    if root:
        cycle = _random_walk_filter(x, weights)
    else:
        cycle = _symmetric_filter(x - x.mean(), weights)

    logger.debug("Band-pass %s on %d samples (root=%s, drift=%s)", band.describe(), n, root, drift)

    if is_series:
        return pd.Series(cycle, index=series.index, name=series.name)
    return cycle
