"""Observation-series validation for the precipitation forecaster.

This package checks daily series before forecasting:
- Contiguous, duplicate-free daily dates
- Missing and negative values
- Record length in cycles
- Structured issue reporting and plain-text reports
"""

from .pipeline import (
    ValidationSeverity,
    ValidationIssue,
    ValidationResult,
    DataValidationError,
    ObservationSeriesValidator,
    series_fingerprint,
    run_validation_pipeline,
    create_validation_report
)

__all__ = [
    'ValidationSeverity',
    'ValidationIssue',
    'ValidationResult',
    'DataValidationError',
    'ObservationSeriesValidator',
    'series_fingerprint',
    'run_validation_pipeline',
    'create_validation_report'
]

__version__ = '1.0.0'
