import numpy as np
import pandas as pd

import pytest


def _daily(n=800, start="2000-10-01", seed=30):
    rng = np.random.default_rng(seed)
    values = np.maximum(0.0, rng.normal(2.0, 2.0, n))
    return pd.Series(values, index=pd.date_range(start, periods=n, freq="D"), name="value")


def _components(result, severity):
    return [i.component for i in result.get_issues_by_severity(severity)]


def test_clean_series_passes():
    from validation import ValidationSeverity, run_validation_pipeline

    s = _daily()
    result = run_validation_pipeline(s, name="clean")

    assert result.is_valid
    assert not result.has_errors
    assert result.metrics["observations"] == 800
    assert 0.0 < result.metrics["zero_fraction"] < 1.0
    assert len(result.metrics["fingerprint"]) == 16
    assert _components(result, ValidationSeverity.ERROR) == []


def test_gap_is_an_error():
    from validation import ValidationSeverity, run_validation_pipeline

    s = _daily().drop(pd.Timestamp("2001-01-15"))
    result = run_validation_pipeline(s)

    assert result.has_errors
    issue = result.get_issues_by_severity(ValidationSeverity.ERROR)[0]
    assert issue.component == "temporal_properties"
    assert issue.details["missing_days"] == 1


def test_missing_and_negative_values_are_errors():
    from validation import ValidationSeverity, run_validation_pipeline

    s = _daily()
    s.iloc[10] = np.nan
    s.iloc[20] = -1.0
    result = run_validation_pipeline(s)

    messages = [i.message for i in result.get_issues_by_severity(ValidationSeverity.ERROR)]
    assert any("missing values" in m for m in messages)
    assert any("negative values" in m for m in messages)


def test_duplicate_dates_are_errors():
    from validation import run_validation_pipeline

    s = _daily(400)
    s = pd.concat([s, s.iloc[[5]]]).sort_index()
    assert run_validation_pipeline(s).has_errors


def test_short_record_warns_and_very_short_record_fails():
    from validation import ValidationSeverity, run_validation_pipeline

    short = run_validation_pipeline(_daily(500))
    assert short.is_valid
    assert "coverage" in _components(short, ValidationSeverity.WARNING)

    too_short = run_validation_pipeline(_daily(200))
    assert "coverage" in _components(too_short, ValidationSeverity.ERROR)


def test_raise_on_error_uses_pipeline_error_taxonomy():
    from precip_forecaster_src.exceptions import IncompleteDataError
    from validation import DataValidationError, run_validation_pipeline

    s = _daily()
    s.iloc[3] = np.nan
    with pytest.raises(IncompleteDataError) as excinfo:
        run_validation_pipeline(s, raise_on_error=True)
    assert isinstance(excinfo.value, DataValidationError)
    assert excinfo.value.validation_result.has_errors


def test_empty_series_is_critical():
    from validation import ValidationSeverity, run_validation_pipeline

    result = run_validation_pipeline(pd.Series([], dtype=float))
    assert not result.is_valid
    assert _components(result, ValidationSeverity.CRITICAL) == ["basic_properties"]


def test_validation_report(tmp_path):
    from validation import create_validation_report, run_validation_pipeline

    out = tmp_path / "reports" / "validation.txt"
    text = create_validation_report(run_validation_pipeline(_daily()), out)
    assert "Overall Status: PASS" in text
    assert out.read_text() == text


def test_constant_series_raises_degenerate_error():
    from precip_forecaster_src.exceptions import DegenerateSeriesError
    from validation import ValidationSeverity, run_validation_pipeline

    s = pd.Series(0.0, index=pd.date_range("2000-10-01", periods=800, freq="D"))
    assert _components(run_validation_pipeline(s), ValidationSeverity.ERROR) == ["variance"]
    with pytest.raises(DegenerateSeriesError) as excinfo:
        run_validation_pipeline(s, raise_on_error=True)
    assert excinfo.value.details["value"] == 0.0
