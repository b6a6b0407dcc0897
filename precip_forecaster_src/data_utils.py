# precip_forecaster_src/data_utils.py

import pandas as pd
from pathlib import Path
from typing import Optional, Tuple
import logging

from .seasonal_utils import CALENDAR_CYCLE_LENGTH

logger = logging.getLogger(__name__)


def load_series_csv(series_path: Path,
                    date_column: str = "date",
                    value_column: str = "value") -> pd.Series:
    """
    Load a daily precipitation series from a CSV file.

    Parameters
    ----------
    series_path : Path
        CSV with a date column and a value column
    date_column : str, default="date"
        Name of the date column
    value_column : str, default="value"
        Name of the measurement column

    Returns
    -------
    pd.Series
        Values indexed by a sorted DatetimeIndex, named after ``value_column``

    Raises
    ------
    SystemExit
        If the file doesn't exist, lacks required columns, or contains no rows
        with a valid date

    Notes
    -----
    Rows with an unparseable date are dropped. Missing or unparseable values
    are kept as NaN so that validation reports them instead of hiding a gap.
    """
    if not series_path.exists():
        raise SystemExit(f"Series CSV not found: {series_path}")

    logger.info("Loading precipitation series from: %s", series_path)
    df_series = pd.read_csv(series_path)

    if date_column not in df_series.columns or value_column not in df_series.columns:
        raise SystemExit(f"Series CSV must contain '{date_column}' and '{value_column}' columns.")

    df_series[date_column] = pd.to_datetime(df_series[date_column], errors="coerce")
    df_series[value_column] = pd.to_numeric(df_series[value_column], errors="coerce")
    n_bad_dates = int(df_series[date_column].isna().sum())
    if n_bad_dates:
        logger.warning("Dropping %d rows with unparseable dates", n_bad_dates)
    df_series = df_series.dropna(subset=[date_column]).sort_values(date_column).reset_index(drop=True)

    if df_series.empty:
        raise SystemExit("No valid rows found in series CSV after parsing.")

    series = pd.Series(df_series[value_column].to_numpy(dtype=float),
                       index=pd.DatetimeIndex(df_series[date_column]), name=value_column)
    series.index.name = date_column
    logger.info("Loaded %d daily values from %s to %s",
                len(series), series.index[0].date(), series.index[-1].date())
    return series


def split_train_test(series: pd.Series,
                     test_cycles: int = 1,
                     cycle_length: int = CALENDAR_CYCLE_LENGTH,
                     use_calendar: bool = True,
                     train_end_index: Optional[int] = None) -> Tuple[pd.Series, pd.Series]:
    """
    Hold out the last ``test_cycles`` cycles of a series.

    Parameters
    ----------
    series : pd.Series
        Full observation series
    test_cycles : int, default=1
        Number of cycles to hold out
    cycle_length : int, default=365
        Cycle length L (positional mode)
    use_calendar : bool, default=True
        Split at a calendar year boundary counted back from the last date
        (leap days included); otherwise hold out the last test_cycles * L samples
    train_end_index : Optional[int]
        Explicit split point: samples 0 .. train_end_index - 1 train, the rest
        is held out. Overrides ``test_cycles`` when given.

    Returns
    -------
    Tuple[pd.Series, pd.Series]
        (train, test)
    """
    if train_end_index is not None:
        if not 0 < train_end_index < len(series):
            raise ValueError(f"train_end_index must lie in 1..{len(series) - 1}, got {train_end_index}")
        train = series.iloc[:train_end_index]
        test = series.iloc[train_end_index:]
    elif test_cycles < 1:
        raise ValueError(f"test_cycles must be positive, got {test_cycles}")
    elif use_calendar and isinstance(series.index, pd.DatetimeIndex):
        cutoff = series.index[-1] + pd.Timedelta(days=1) - pd.DateOffset(years=test_cycles)
        train = series[series.index < cutoff]
        test = series[series.index >= cutoff]
    else:
        n_test = test_cycles * cycle_length
        if n_test >= len(series):
            raise ValueError(f"Cannot hold out {n_test} samples from a series of {len(series)}")
        train = series.iloc[:-n_test]
        test = series.iloc[-n_test:]

    if train.empty:
        raise ValueError("Training series is empty after the split")
    logger.info("Split: train=%d samples, test=%d samples", len(train), len(test))
    return train, test
