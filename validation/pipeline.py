"""Validation pipeline for daily precipitation observation series.

This module checks an observation series before it enters the band-pass
forecaster and reports every problem it finds in one structured result.

Checks:
- Empty input and index type
- Strictly increasing, duplicate-free, gap-free daily dates
- Missing and negative values
- Record length relative to the cycle length
"""

import hashlib
import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import pandas as pd
import numpy as np

from precip_forecaster_src.exceptions import DegenerateSeriesError, IncompleteDataError

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Validation issue severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ValidationIssue:
    """Individual validation issue."""
    severity: ValidationSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None


@dataclass
class ValidationResult:
    """Complete validation result with all issues and metrics."""
    is_valid: bool
    issues: List[ValidationIssue]
    metrics: Dict[str, Any]

    @property
    def has_errors(self) -> bool:
        """Check if result has any errors or critical issues."""
        return any(issue.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]
                   for issue in self.issues)

    @property
    def has_warnings(self) -> bool:
        """Check if result has any warnings."""
        return any(issue.severity == ValidationSeverity.WARNING for issue in self.issues)

    def get_issues_by_severity(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        """Get all issues of a specific severity."""
        return [issue for issue in self.issues if issue.severity == severity]

    def summary(self) -> str:
        """Get a summary string of the validation result."""
        total_issues = len(self.issues)
        errors = len(self.get_issues_by_severity(ValidationSeverity.ERROR))
        criticals = len(self.get_issues_by_severity(ValidationSeverity.CRITICAL))
        warnings = len(self.get_issues_by_severity(ValidationSeverity.WARNING))

        status = "PASS" if self.is_valid and not self.has_errors else "FAIL"
        return f"Validation {status}: {total_issues} issues ({criticals} critical, {errors} error, {warnings} warning)"


class DataValidationError(IncompleteDataError):
    """Raised when an observation series fails validation."""

    def __init__(self, message: str, validation_result: Optional[ValidationResult] = None):
        details = {}
        if validation_result is not None:
            details = {"issues": [i.message for i in validation_result.issues
                                  if i.severity in (ValidationSeverity.ERROR, ValidationSeverity.CRITICAL)]}
        super().__init__(message, details)
        self.validation_result = validation_result


def series_fingerprint(series: pd.Series) -> str:
    """SHA-256 of the dates and values, truncated to 16 hex characters."""
    hasher = hashlib.sha256()
    if isinstance(series.index, pd.DatetimeIndex):
        hasher.update(np.asarray(series.index.asi8, dtype=np.int64).tobytes())
    hasher.update(np.nan_to_num(np.asarray(series, dtype=float), nan=-1.0).tobytes())
    return hasher.hexdigest()[:16]


class ObservationSeriesValidator:
    """Runs every integrity check on one observation series."""

    def __init__(self, cycle_length: int = 365, min_cycles: float = 2.0, config_manager=None):
        self.cycle_length = cycle_length
        self.min_cycles = min_cycles
        if config_manager is not None:
            self.min_cycles = float(config_manager.get('validation.min_cycles', min_cycles))
        self.issues: List[ValidationIssue] = []
        self.metrics: Dict[str, Any] = {}

    def validate(self, series: pd.Series, name: str = "series") -> ValidationResult:
        """Validate an observation series.

        Parameters
        ----------
        series : pd.Series
            Daily observations indexed by date
        name : str
            Label used in messages

        Returns
        -------
        ValidationResult
            Errors for anything the forecaster cannot use (gaps, missing or
            negative values, bad index); warnings for short records
        """
        logger.info("Validating observation series '%s' (%d samples)", name, 0 if series is None else len(series))
        self.issues = []
        self.metrics = {}

        if series is None or series.empty:
            self._add(ValidationSeverity.CRITICAL, f"Series '{name}' is empty", "basic_properties")
            return self._result()

        self.metrics['observations'] = len(series)
        self.metrics['fingerprint'] = series_fingerprint(series)

        self._validate_index(series, name)
        self._validate_values(series, name)
        self._validate_coverage(series, name)

        return self._result()

    def _add(self, severity: ValidationSeverity, message: str, component: str,
             details: Optional[Dict[str, Any]] = None) -> None:
        self.issues.append(ValidationIssue(severity=severity, message=message,
                                           component=component, details=details))

    def _result(self) -> ValidationResult:
        is_valid = not any(issue.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]
                           for issue in self.issues)
        result = ValidationResult(is_valid=is_valid, issues=self.issues.copy(), metrics=self.metrics.copy())
        logger.info("Validation completed: %s", result.summary())
        return result

    def _validate_index(self, series: pd.Series, name: str) -> None:
        """Daily dates, strictly increasing, no duplicates, no gaps."""
        logger.debug("Validating temporal properties")
        index = series.index
        if not isinstance(index, pd.DatetimeIndex):
            self._add(ValidationSeverity.WARNING,
                      f"Series '{name}' does not have DatetimeIndex; calendar cycles are unavailable",
                      "temporal_properties")
            return

        n_dup = int(index.duplicated().sum())
        if n_dup:
            self._add(ValidationSeverity.ERROR, f"Series '{name}' has {n_dup} duplicate dates",
                      "temporal_properties", {'duplicates': n_dup})
        if not index.is_monotonic_increasing:
            self._add(ValidationSeverity.ERROR, f"Series '{name}' dates are not in increasing order",
                      "temporal_properties")
            return

        full_range = pd.date_range(start=index.min(), end=index.max(), freq="D")
        missing_dates = full_range.difference(index)
        off_grid = index.difference(full_range)
        if len(missing_dates):
            self._add(ValidationSeverity.ERROR,
                      f"Series '{name}' has {len(missing_dates)} missing days (first: {missing_dates[0].date()})",
                      "temporal_properties",
                      {'missing_days': len(missing_dates), 'first_missing': missing_dates[0].isoformat()})
        if len(off_grid):
            self._add(ValidationSeverity.ERROR,
                      f"Series '{name}' has {len(off_grid)} timestamps that are not whole days",
                      "temporal_properties", {'off_grid': len(off_grid)})

        self.metrics['start_date'] = index.min().isoformat()
        self.metrics['end_date'] = index.max().isoformat()
        self.metrics['leap_days'] = int(((index.month == 2) & (index.day == 29)).sum())

    def _validate_values(self, series: pd.Series, name: str) -> None:
        """Missing and negative values; zero share is recorded, zeros are legal."""
        logger.debug("Validating data quality")
        values = pd.to_numeric(series, errors="coerce")
        missing_count = int(values.isna().sum())
        if missing_count:
            self._add(ValidationSeverity.ERROR,
                      f"Series '{name}' has {missing_count} missing values",
                      "data_quality",
                      {'missing': missing_count, 'missing_percent': 100.0 * missing_count / len(values)})

        valid = values.dropna()
        n_negative = int((valid < 0).sum())
        if n_negative:
            self._add(ValidationSeverity.ERROR,
                      f"Series '{name}' has {n_negative} negative values",
                      "data_quality", {'negative': n_negative, 'minimum': float(valid.min())})

        if len(valid) > 1 and float(valid.std()) == 0.0:
            self._add(ValidationSeverity.ERROR, f"Series '{name}' is constant", "variance",
                      {'value': float(valid.iloc[0])})

        self.metrics['missing'] = missing_count
        self.metrics['zero_fraction'] = float((valid == 0).mean()) if len(valid) else float("nan")

    def _validate_coverage(self, series: pd.Series, name: str) -> None:
        """At least ``min_cycles`` full cycles, and at least one for averaging."""
        cycles = len(series) / float(self.cycle_length)
        self.metrics['cycles'] = cycles
        if len(series) < self.cycle_length:
            self._add(ValidationSeverity.ERROR,
                      f"Series '{name}' covers {cycles:.2f} cycles; at least one full cycle is required",
                      "coverage", {'cycles': cycles, 'cycle_length': self.cycle_length})
        elif cycles < self.min_cycles:
            self._add(ValidationSeverity.WARNING,
                      f"Series '{name}' covers only {cycles:.2f} cycles (recommended: {self.min_cycles:g})",
                      "coverage", {'cycles': cycles, 'minimum': self.min_cycles})


def run_validation_pipeline(series: pd.Series,
                            name: str = "series",
                            cycle_length: int = 365,
                            config_manager=None,
                            raise_on_error: bool = False) -> ValidationResult:
    """Run the observation-series validation pipeline.

    Parameters
    ----------
    series : pd.Series
        Daily observations indexed by date
    name : str
        Label used in messages
    cycle_length : int, default 365
        Cycle length L used for the coverage check
    config_manager : ConfigurationManager, optional
        Source of 'validation.min_cycles'
    raise_on_error : bool, default False
        Whether to raise exception on validation errors

    Returns
    -------
    ValidationResult

    Raises
    ------
    DegenerateSeriesError
        If raise_on_error=True and the only errors are zero variance
    DataValidationError
        If raise_on_error=True and validation fails otherwise
    """
    validator = ObservationSeriesValidator(cycle_length=cycle_length, config_manager=config_manager)
    result = validator.validate(series, name)

    for issue in result.issues:
        if issue.severity == ValidationSeverity.CRITICAL:
            logger.critical("CRITICAL [%s]: %s", issue.component, issue.message)
        elif issue.severity == ValidationSeverity.ERROR:
            logger.error("ERROR [%s]: %s", issue.component, issue.message)
        elif issue.severity == ValidationSeverity.WARNING:
            logger.warning("WARNING [%s]: %s", issue.component, issue.message)
        else:
            logger.info("INFO [%s]: %s", issue.component, issue.message)

    if raise_on_error and result.has_errors:
        failed = [i for i in result.issues
                  if i.severity in (ValidationSeverity.ERROR, ValidationSeverity.CRITICAL)]
        if all(i.component == "variance" for i in failed):
            raise DegenerateSeriesError(f"Series '{name}' has zero variance", failed[0].details)
        raise DataValidationError(f"Data validation failed: {result.summary()}", result)

    return result


def create_validation_report(result: ValidationResult, output_path: Optional[Path] = None) -> str:
    """Create a plain-text validation report, optionally saved to ``output_path``."""
    lines = []
    lines.append("=" * 60)
    lines.append("Precipitation Series Validation Report")
    lines.append("=" * 60)
    lines.append(f"Overall Status: {'PASS' if result.is_valid and not result.has_errors else 'FAIL'}")
    lines.append(f"Total Issues: {len(result.issues)}")
    lines.append("")

    for severity in ValidationSeverity:
        issues = result.get_issues_by_severity(severity)
        if issues:
            lines.append(f"{severity.value.upper()}: {len(issues)} issues")

    lines.append("")
    lines.append("Validation Metrics:")
    for key, value in result.metrics.items():
        lines.append(f"  {key}: {value}")

    lines.append("")
    lines.append("Detailed Issues:")
    lines.append("-" * 40)

    for issue in result.issues:
        lines.append(f"[{issue.severity.value.upper()}] {issue.component}: {issue.message}")
        if issue.details:
            for key, value in issue.details.items():
                lines.append(f"    {key}: {value}")
        lines.append("")

    report_content = '\n'.join(lines)

    if output_path:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w') as f:
                f.write(report_content)
            logger.info("Validation report saved to: %s", output_path)
        except OSError as e:
            logger.error("Failed to save validation report: %s", e)

    return report_content
