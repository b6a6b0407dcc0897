import numpy as np
import pandas as pd

import pytest


def make_calendar_sine(start: str, end: str, amplitude: float = 2.0, level: float = 3.0,
                       leap_policy: str = "previous") -> pd.Series:
    """Daily series whose value depends only on the hydrological-year position."""
    from precip_forecaster_src.seasonal_utils import CycleCalendar

    dates = pd.date_range(start, end, freq="D")
    positions = CycleCalendar(leap_policy=leap_policy).positions(dates)
    values = level + amplitude * np.sin(2.0 * np.pi * (positions - 1) / 365.0)
    return pd.Series(values, index=dates, name="value")


@pytest.fixture
def calendar_sine():
    return make_calendar_sine


@pytest.fixture
def precip_csv(tmp_path):
    """Four hydrological years of synthetic non-negative daily precipitation."""
    rng = np.random.default_rng(7)
    s = make_calendar_sine("2000-10-01", "2004-09-30")
    values = np.maximum(0.0, s.to_numpy() + rng.normal(0.0, 0.5, len(s)))
    values[rng.random(len(s)) < 0.2] = 0.0
    path = tmp_path / "precip.csv"
    pd.DataFrame({"date": s.index.strftime("%Y-%m-%d"), "value": values}).to_csv(path, index=False)
    return path
