# precip_forecaster_src/parsing_utils.py

from typing import List, Optional, Tuple
import logging

from .seasonal_utils import LEAP_POLICIES

logger = logging.getLogger(__name__)


def parse_band_arg(s: str, allow_open_high: bool = False) -> Tuple[float, Optional[float]]:
    """
    Parse a band argument like '0.5-1.5' into (low, high) multiples of the cycle length.

    Parameters
    ----------
    s : str
        "low-high"; with ``allow_open_high`` the high limit may be omitted
        ("1.5-" or "1.5"), meaning "up to the series length"
    allow_open_high : bool, default=False
        Accept a missing high limit

    Returns
    -------
    Tuple[float, Optional[float]]
        (low, high); high is None for an open band

    Raises
    ------
    ValueError
        If the text is not a band or low >= high

    Examples
    --------
    >>> parse_band_arg("0.5-1.5")
    (0.5, 1.5)
    >>> parse_band_arg("1.5-", allow_open_high=True)
    (1.5, None)
    """
    txt = (s or "").strip()
    lo_txt, sep, hi_txt = txt.partition("-")
    if not lo_txt.strip():
        raise ValueError(f"Invalid band '{s}'. Expected 'low-high'")
    lo = float(lo_txt)
    if not hi_txt.strip():
        if allow_open_high:
            return lo, None
        raise ValueError(f"Invalid band '{s}'. Expected 'low-high'")
    hi = float(hi_txt)
    if not 0 < lo < hi:
        raise ValueError(f"Invalid band '{s}'. Need 0 < low < high")
    return lo, hi


def parse_band_list(s: Optional[str]) -> List[Tuple[float, float]]:
    """
    Parse a comma-separated list of bands, e.g. '0.5-1.25,0.5-1.5'.

    Examples
    --------
    >>> parse_band_list("0.5-1.25,0.5-1.5")
    [(0.5, 1.25), (0.5, 1.5)]
    """
    if not s:
        return []
    return [parse_band_arg(part) for part in s.split(",") if part.strip()]


def parse_hydro_start(s: str) -> Tuple[int, int]:
    """
    Parse a cycle start given as 'MM-DD' (e.g. '10-01' for the hydrological year).

    Raises
    ------
    ValueError
        If the text is not a valid month and day
    """
    try:
        month_txt, day_txt = s.strip().split("-", 1)
        month, day = int(month_txt), int(day_txt)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid cycle start '{s}'. Expected 'MM-DD'")
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        raise ValueError(f"Invalid cycle start '{s}'. Expected 'MM-DD'")
    return month, day


def validate_leap_policy(policy: str) -> str:
    """
    Validate the Feb 29 bucket policy.

    Raises
    ------
    ValueError
        If the policy is not 'previous' or 'next'
    """
    value = policy.strip().lower()
    if value not in LEAP_POLICIES:
        raise ValueError(f"Invalid leap policy '{policy}'. Must be one of: {list(LEAP_POLICIES)}")
    return value


def validate_log_level(log_level: str) -> str:
    """
    Validate and normalize logging level specification.

    Parameters
    ----------
    log_level : str
        Logging level to validate

    Returns
    -------
    str
        Validated logging level

    Raises
    ------
    ValueError
        If the logging level is not supported
    """
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    level_upper = log_level.upper()
    if level_upper not in valid_levels:
        raise ValueError(f"Invalid log level '{log_level}'. Must be one of: {valid_levels}")
    return level_upper
