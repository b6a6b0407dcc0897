# precip_forecaster_src/seasonal_utils.py

"""
Cycle positions and multi-year seasonal averaging.

Functions
---------
- cycle_positions(index, cycle_length, calendar, origin): 1-based position of
  every sample within its cycle.
- average_cycle(seasonal_cycle, dates, cycle_length, calendar, origin): mean of
  every position across all cycles (the representative cycle).

Calendar convention
-------------------
With a ``CycleCalendar`` the cycle is a 365-day year starting at a fixed
calendar cutover (1 October for the hydrological year). Every date keeps the
same position in every year. Feb 29 has no position of its own: the
``leap_policy`` puts it in the Feb 28 bucket ("previous") or in the Mar 1
bucket ("next").
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union
import logging

import numpy as np
import pandas as pd

from .exceptions import AlignmentError, IncompleteDataError

logger = logging.getLogger(__name__)

CALENDAR_CYCLE_LENGTH = 365
LEAP_POLICIES = ("previous", "next")

# Day-of-year of Feb 29 in a leap year.
_LEAP_DAY_OF_YEAR = 60


@dataclass(frozen=True)
class CycleCalendar:
    """Calendar cutover and leap-day bucket for 365-day cycles."""
    start_month: int = 10
    start_day: int = 1
    leap_policy: str = "previous"

    def __post_init__(self) -> None:
        if self.leap_policy not in LEAP_POLICIES:
            raise ValueError(f"Invalid leap_policy '{self.leap_policy}'. Must be one of: {list(LEAP_POLICIES)}")
        if (self.start_month, self.start_day) == (2, 29):
            raise ValueError("A cycle cannot start on Feb 29")
        # Raises ValueError for impossible dates such as 31 April.
        pd.Timestamp(year=2001, month=self.start_month, day=self.start_day)

    @property
    def start_day_of_year(self) -> int:
        # 2001 is not a leap year, so this is the 365-day numbering.
        return int(pd.Timestamp(year=2001, month=self.start_month, day=self.start_day).dayofyear)

    def positions(self, dates: pd.DatetimeIndex) -> np.ndarray:
        """Cycle position (1..365) of every date."""
        doy = np.asarray(dates.dayofyear, dtype=int)
        leap = np.asarray(dates.is_leap_year, dtype=bool)
        if self.leap_policy == "previous":
            shift = leap & (doy >= _LEAP_DAY_OF_YEAR)
        else:
            shift = leap & (doy > _LEAP_DAY_OF_YEAR)
        doy_365 = doy - shift.astype(int)
        return (doy_365 - self.start_day_of_year) % CALENDAR_CYCLE_LENGTH + 1

    def cycle_start(self, date: pd.Timestamp) -> pd.Timestamp:
        """First day of the cycle containing ``date``."""
        date = pd.Timestamp(date)
        year = date.year if (date.month, date.day) >= (self.start_month, self.start_day) else date.year - 1
        return pd.Timestamp(year=year, month=self.start_month, day=self.start_day)


def cycle_positions(index: Union[pd.Index, Sequence, int],
                    cycle_length: int = CALENDAR_CYCLE_LENGTH,
                    calendar: Optional[CycleCalendar] = None,
                    origin: int = 0) -> np.ndarray:
    """
    Map every sample to its 1-based position within a cycle.

    Parameters
    ----------
    index : Union[pd.Index, Sequence, int]
        Dates (calendar mode) or anything with a length (positional mode); an
        int is taken as the number of samples
    cycle_length : int, default=365
        Cycle length L
    calendar : Optional[CycleCalendar]
        Use calendar positions; requires a DatetimeIndex and L = 365
    origin : int, default=0
        Positional mode only: position of sample 0 is (origin mod L) + 1

    Returns
    -------
    np.ndarray
        Integer positions in 1..L
    """
    if cycle_length < 1:
        raise ValueError(f"cycle_length must be positive, got {cycle_length}")

    if calendar is not None:
        dates = pd.DatetimeIndex(index)
        if cycle_length != CALENDAR_CYCLE_LENGTH:
            raise ValueError(
                f"Calendar cycle positions need cycle_length={CALENDAR_CYCLE_LENGTH}, got {cycle_length}"
            )
        return calendar.positions(dates)

    n = int(index) if isinstance(index, (int, np.integer)) else len(index)
    return (np.arange(n) + int(origin)) % int(cycle_length) + 1


def average_cycle(seasonal_cycle: Union[pd.Series, np.ndarray],
                  dates: Optional[Union[pd.Index, Sequence]] = None,
                  cycle_length: int = CALENDAR_CYCLE_LENGTH,
                  calendar: Optional[CycleCalendar] = None,
                  origin: int = 0) -> pd.Series:
    """
    Average every cycle position across all cycles of a seasonal component.

    Parameters
    ----------
    seasonal_cycle : Union[pd.Series, np.ndarray]
        Seasonal component (usually ``Decomposition.seasonal``)
    dates : Optional[Union[pd.Index, Sequence]]
        Dates aligned with ``seasonal_cycle``. When given with L = 365 and no
        ``calendar``, the default hydrological ``CycleCalendar()`` is used.
        Defaults to the index of a Series with a DatetimeIndex, which is
        only read when ``calendar`` is given.
    cycle_length : int, default=365
        Cycle length L
    calendar : Optional[CycleCalendar]
        Calendar convention; positional grouping is used when None and no
        365-day ``dates`` are given
    origin : int, default=0
        Positional mode offset, see ``cycle_positions``

    Returns
    -------
    pd.Series
        Representative cycle of length exactly ``cycle_length``, indexed by
        position 1..L and named "representative_cycle"

    Raises
    ------
    AlignmentError
        If ``dates`` and ``seasonal_cycle`` differ in length
    IncompleteDataError
        If values are missing or a position has no observations

    Notes
    -----
    Partial first and last cycles are kept: each of their days contributes to
    its own position's mean.
    """
    values = np.asarray(seasonal_cycle, dtype=float).ravel()
    if not np.all(np.isfinite(values)):
        raise IncompleteDataError(
            "Seasonal component contains missing values",
            {"missing": int((~np.isfinite(values)).sum()), "length": len(values)},
        )

    if dates is not None:
        if len(dates) != len(values):
            raise AlignmentError(
                "Dates and seasonal component differ in length",
                {"dates": len(dates), "values": len(values)},
            )
        if calendar is None and cycle_length == CALENDAR_CYCLE_LENGTH:
            try:
                dates = pd.DatetimeIndex(dates)
            except (TypeError, ValueError) as e:
                raise AlignmentError("Dates cannot be read as calendar dates", {"error": str(e)}) from e
            calendar = CycleCalendar()
    elif isinstance(seasonal_cycle, pd.Series) and isinstance(seasonal_cycle.index, pd.DatetimeIndex):
        dates = seasonal_cycle.index

    if calendar is not None:
        if dates is None:
            raise ValueError("Calendar averaging needs dates")
        positions = cycle_positions(dates, cycle_length, calendar)
    else:
        positions = cycle_positions(len(values), cycle_length, origin=origin)

    grouped = pd.Series(values).groupby(positions).mean()
    representative = grouped.reindex(np.arange(1, cycle_length + 1))

    empty = representative.index[representative.isna()]
    if len(empty) > 0:
        raise IncompleteDataError(
            "Some cycle positions have no observations",
            {"empty_positions": len(empty), "first_empty": int(empty[0]),
             "length": len(values), "cycle_length": cycle_length},
        )

    counts = pd.Series(positions).value_counts()
    logger.info("Averaged %d samples into a %d-position cycle (%d to %d occurrences per position)",
                len(values), cycle_length, int(counts.min()), int(counts.max()))

    representative.index.name = "position"
    return representative.rename("representative_cycle")
