# precip_forecaster_src/exceptions.py

"""
Error taxonomy for the band-pass seasonal forecaster.

Every error carries the offending parameter values in ``details`` so that the
caller (usually the CLI) can report exactly what invalidated the run. Errors
are raised at the first component that needs the violated invariant and are
never retried or recovered.
"""

from typing import Any, Dict, Optional


class ForecastPipelineError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        extra = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{base} ({extra})"


class DegenerateSeriesError(ForecastPipelineError):
    """Raised when a series has zero (or undefined) variance and cannot be standardized."""


class InvalidBandError(ForecastPipelineError):
    """Raised when a band-pass period band is malformed for the given series."""


class AlignmentError(ForecastPipelineError):
    """Raised when two series to be compared differ in length or index."""


class IncompleteDataError(ForecastPipelineError):
    """Raised when a series has gaps or missing values."""
