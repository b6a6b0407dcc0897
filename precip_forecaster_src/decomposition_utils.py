# precip_forecaster_src/decomposition_utils.py

import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Optional, Tuple
import logging

from .filter_utils import BandSpec, bandpass

logger = logging.getLogger(__name__)

# Band limits as multiples of the cycle length L. The trend band starts where
# the seasonal band stops so that the two passes split the spectrum without
# overlap, and the annual frequency sits well inside the seasonal band.
DEFAULT_TREND_LOW_CYCLES = 1.5
DEFAULT_SEASONAL_LOW_CYCLES = 0.5
DEFAULT_SEASONAL_HIGH_CYCLES = 1.5


@dataclass(frozen=True)
class Decomposition:
    """Output of the two-pass band-pass decomposition."""
    transformed: pd.Series
    trend: pd.Series
    detrended: pd.Series
    seasonal: pd.Series
    residual: pd.Series
    trend_band: BandSpec
    seasonal_band: BandSpec

    def reconstruct(self) -> pd.Series:
        """trend + seasonal + residual; equals ``transformed`` up to rounding."""
        return self.trend + self.seasonal + self.residual

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "transformed": self.transformed,
            "trend": self.trend,
            "seasonal": self.seasonal,
            "residual": self.residual,
        })


def default_bands(cycle_length: int,
                  nobs: int,
                  trend_low_cycles: float = DEFAULT_TREND_LOW_CYCLES,
                  seasonal_low_cycles: float = DEFAULT_SEASONAL_LOW_CYCLES,
                  seasonal_high_cycles: float = DEFAULT_SEASONAL_HIGH_CYCLES) -> Tuple[BandSpec, BandSpec]:
    """
    Build (trend_band, seasonal_band) from multiples of the cycle length.

    Parameters
    ----------
    cycle_length : int
        Cycle length L in samples (365 for daily data)
    nobs : int
        Series length; the trend band extends to the full series length
    trend_low_cycles : float, default=1.5
        Shortest trend period, in cycles
    seasonal_low_cycles, seasonal_high_cycles : float, default=(0.5, 1.5)
        Seasonal band, in cycles

    Returns
    -------
    Tuple[BandSpec, BandSpec]
        Trend band [trend_low_cycles*L, nobs] and seasonal band
        [seasonal_low_cycles*L, seasonal_high_cycles*L]

    Notes
    -----
    The defaults are wider than the textbook split of a trend band starting
    just above L and a seasonal band of [L/2, L]. With the annual period on
    the upper edge of the seasonal band, the finite-sample weights pass only
    about a quarter of its amplitude, and the held-out RMSE on a synthetic
    sinusoid rises from about 0.18 to about 1.07. Centring L in [0.5L, 1.5L]
    keeps the annual signal, and the trend band starts at 1.5L so the two
    bands stay adjacent.
    """
    trend = BandSpec(trend_low_cycles * cycle_length, float(nobs))
    seasonal = BandSpec(seasonal_low_cycles * cycle_length, seasonal_high_cycles * cycle_length)
    return trend, seasonal


def decompose(transformed: pd.Series,
              trend_band: BandSpec,
              seasonal_band: BandSpec,
              root: bool = False,
              drift: bool = False) -> Decomposition:
    """
    Split a transformed series into trend, seasonal and residual components.

    The steps run strictly in this order:

    1. trend = band-pass of the series over ``trend_band``
    2. detrended = series - trend
    3. seasonal = band-pass of the detrended series over ``seasonal_band``

    and residual = detrended - seasonal. Removing the long-period drift first
    keeps it from leaking into the narrow seasonal band.

    Parameters
    ----------
    transformed : pd.Series
        Output of ``transform_series``
    trend_band, seasonal_band : BandSpec
        Period bands for the two passes
    root, drift : bool
        Edge-policy flags forwarded to ``bandpass`` (both off by default)

    Returns
    -------
    Decomposition
        All components share the index of ``transformed``

    Raises
    ------
    InvalidBandError
        If either band is malformed for the series length. Both bands are
        checked before filtering starts.
    """
    if not isinstance(transformed, pd.Series):
        transformed = pd.Series(np.asarray(transformed, dtype=float))

    nobs = len(transformed)
    trend_band.validate(nobs)
    seasonal_band.validate(nobs)
    if seasonal_band.period_high > trend_band.period_low:
        logger.warning("Seasonal band %s overlaps trend band %s",
                       seasonal_band.describe(), trend_band.describe())

    trend = bandpass(transformed, trend_band.period_low, trend_band.period_high, root=root, drift=drift)
    detrended = transformed - trend
    seasonal = bandpass(detrended, seasonal_band.period_low, seasonal_band.period_high, root=root, drift=drift)
    residual = detrended - seasonal

    logger.info("Decomposed %d samples: trend band %s, seasonal band %s, residual std=%.4f",
                nobs, trend_band.describe(), seasonal_band.describe(), float(residual.std()))

    return Decomposition(
        transformed=transformed,
        trend=trend.rename("trend"),
        detrended=detrended.rename("detrended"),
        seasonal=seasonal.rename("seasonal"),
        residual=residual.rename("residual"),
        trend_band=trend_band,
        seasonal_band=seasonal_band,
    )
