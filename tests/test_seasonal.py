import numpy as np
import pandas as pd

import pytest


def test_positional_average_recovers_periodic_pattern():
    from precip_forecaster_src.seasonal_utils import average_cycle

    pattern = np.random.default_rng(20).normal(size=7)
    series = np.tile(pattern, 5)[:33]  # partial last cycle

    rep = average_cycle(series, cycle_length=7)

    assert len(rep) == 7
    assert list(rep.index) == list(range(1, 8))
    np.testing.assert_allclose(rep.to_numpy(), pattern, atol=1e-12)


@pytest.mark.parametrize("n", [365, 400, 1095, 3652])
def test_average_length_equals_cycle_length(n):
    from precip_forecaster_src.seasonal_utils import average_cycle

    rep = average_cycle(np.random.default_rng(n).normal(size=n), cycle_length=365)
    assert len(rep) == 365
    assert rep.name == "representative_cycle"


def test_positional_origin_shifts_positions():
    from precip_forecaster_src.seasonal_utils import cycle_positions

    assert list(cycle_positions(5, 7, origin=5)) == [6, 7, 1, 2, 3]
    assert list(cycle_positions(3, 7)) == [1, 2, 3]


def test_series_shorter_than_cycle_is_incomplete():
    from precip_forecaster_src.exceptions import IncompleteDataError
    from precip_forecaster_src.seasonal_utils import average_cycle

    with pytest.raises(IncompleteDataError):
        average_cycle(np.ones(100), cycle_length=365)


def test_missing_values_are_rejected():
    from precip_forecaster_src.exceptions import IncompleteDataError
    from precip_forecaster_src.seasonal_utils import average_cycle

    x = np.ones(20)
    x[3] = np.nan
    with pytest.raises(IncompleteDataError):
        average_cycle(x, cycle_length=5)


def test_hydrological_year_positions():
    from precip_forecaster_src.seasonal_utils import CycleCalendar

    cal = CycleCalendar()
    dates = pd.to_datetime(["2000-10-01", "2001-09-30", "2001-10-01", "2003-02-28", "2003-03-01"])
    assert list(cal.positions(dates)) == [1, 365, 1, 151, 152]


@pytest.mark.parametrize("policy, expected", [("previous", 151), ("next", 152)])
def test_leap_day_bucket(policy, expected):
    from precip_forecaster_src.seasonal_utils import CycleCalendar

    cal = CycleCalendar(leap_policy=policy)
    dates = pd.to_datetime(["2004-02-28", "2004-02-29", "2004-03-01"])
    assert list(cal.positions(dates)) == [151, expected, 152]


def test_calendar_average_recovers_pattern_across_leap_year(calendar_sine):
    from precip_forecaster_src.seasonal_utils import CycleCalendar, average_cycle

    pattern = np.random.default_rng(21).normal(size=365)
    dates = pd.date_range("2000-10-01", "2004-09-30", freq="D")
    cal = CycleCalendar()
    series = pd.Series(pattern[cal.positions(dates) - 1], index=dates)

    rep = average_cycle(series, cycle_length=365, calendar=cal)
    np.testing.assert_allclose(rep.to_numpy(), pattern, atol=1e-12)


def test_custom_cycle_start():
    from precip_forecaster_src.seasonal_utils import CycleCalendar

    cal = CycleCalendar(start_month=1, start_day=1)
    assert list(cal.positions(pd.to_datetime(["2001-01-01", "2001-12-31"]))) == [1, 365]
    assert CycleCalendar().cycle_start(pd.Timestamp("2004-02-29")) == pd.Timestamp("2003-10-01")
    assert CycleCalendar().cycle_start(pd.Timestamp("2004-10-01")) == pd.Timestamp("2004-10-01")


def test_calendar_errors():
    from precip_forecaster_src.exceptions import AlignmentError
    from precip_forecaster_src.seasonal_utils import CycleCalendar, average_cycle, cycle_positions

    with pytest.raises(ValueError):
        CycleCalendar(leap_policy="drop")
    with pytest.raises(ValueError):
        CycleCalendar(start_month=2, start_day=29)
    with pytest.raises(ValueError):
        cycle_positions(pd.date_range("2001-01-01", periods=10), 360, CycleCalendar())

    dates = pd.date_range("2000-10-01", periods=400, freq="D")
    with pytest.raises(AlignmentError):
        average_cycle(np.zeros(399), dates=dates, calendar=CycleCalendar())


def test_dates_argument_groups_by_calendar_day():
    from precip_forecaster_src.seasonal_utils import CycleCalendar, average_cycle

    pattern = np.random.default_rng(22).normal(size=365)
    dates = pd.date_range("1995-01-01", "2004-12-31", freq="D")
    values = pattern[CycleCalendar().positions(dates) - 1]

    rep = average_cycle(values, dates, 365)
    np.testing.assert_allclose(rep.to_numpy(), pattern, atol=1e-12)


def test_dates_length_mismatch_without_calendar():
    from precip_forecaster_src.exceptions import AlignmentError
    from precip_forecaster_src.seasonal_utils import average_cycle

    dates = pd.date_range("1995-01-01", "2004-12-31", freq="D")
    with pytest.raises(AlignmentError):
        average_cycle(np.zeros(len(dates)), dates[:-10], 365)
    with pytest.raises(AlignmentError):
        average_cycle(np.zeros(20), list(range(19)), 5)
