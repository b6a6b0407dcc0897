import numpy as np
import pandas as pd

import pytest


@pytest.mark.parametrize("root", [False, True])
@pytest.mark.parametrize("band", [(2.0, 10.0), (20.0, 100.0), (182.5, 547.5), (547.5, 1200.0)])
def test_output_length_matches_input(band, root):
    from precip_forecaster_src.filter_utils import bandpass

    x = np.random.default_rng(1).normal(size=1200)
    y = bandpass(x, band[0], band[1], root=root)
    assert isinstance(y, np.ndarray)
    assert len(y) == len(x)
    assert np.all(np.isfinite(y))


def test_series_index_and_name_preserved():
    from precip_forecaster_src.filter_utils import bandpass

    idx = pd.date_range("2000-10-01", periods=400, freq="D")
    s = pd.Series(np.random.default_rng(2).normal(size=400), index=idx, name="precip")
    y = bandpass(s, 10, 60)
    assert isinstance(y, pd.Series)
    assert y.index.equals(idx)
    assert y.name == "precip"


@pytest.mark.parametrize("low, high", [(0.0, 10.0), (-1.0, 5.0), (10.0, 10.0), (20.0, 10.0), (10.0, 101.0)])
def test_malformed_band_raises(low, high):
    from precip_forecaster_src.exceptions import InvalidBandError
    from precip_forecaster_src.filter_utils import bandpass

    with pytest.raises(InvalidBandError) as excinfo:
        bandpass(np.ones(100) + np.arange(100), low, high)
    assert excinfo.value.details["period_low"] == low
    assert excinfo.value.details["period_high"] == high


def test_band_checked_before_missing_values():
    from precip_forecaster_src.exceptions import InvalidBandError
    from precip_forecaster_src.filter_utils import bandpass

    x = np.array([1.0, np.nan, 2.0, 3.0])
    with pytest.raises(InvalidBandError):
        bandpass(x, 2.0, 50.0)


def test_missing_values_raise():
    from precip_forecaster_src.exceptions import IncompleteDataError
    from precip_forecaster_src.filter_utils import bandpass

    x = np.random.default_rng(3).normal(size=50)
    x[10] = np.nan
    with pytest.raises(IncompleteDataError):
        bandpass(x, 2.0, 20.0)


def test_weights_match_ideal_band_pass():
    from precip_forecaster_src.filter_utils import cf_weights

    w = cf_weights(6.0, 32.0, 5)
    a, b = 2 * np.pi / 32.0, 2 * np.pi / 6.0
    j = np.arange(1, 5)
    np.testing.assert_allclose(w[0], (b - a) / np.pi)
    np.testing.assert_allclose(w[1:], (np.sin(j * b) - np.sin(j * a)) / (np.pi * j))


def test_random_walk_weights_annihilate_constants():
    from precip_forecaster_src.filter_utils import bandpass

    y = bandpass(np.full(300, 4.2), 6.0, 32.0, root=True)
    np.testing.assert_allclose(y, 0.0, atol=1e-10)


def test_stationary_policy_removes_mean():
    from precip_forecaster_src.filter_utils import bandpass

    y = bandpass(np.full(300, 4.2), 6.0, 32.0, root=False)
    np.testing.assert_allclose(y, 0.0, atol=1e-12)


@pytest.mark.parametrize("drift", [False, True])
def test_random_walk_policy_matches_statsmodels(drift):
    from statsmodels.tsa.filters.cf_filter import cffilter
    from precip_forecaster_src.filter_utils import bandpass

    x = np.cumsum(np.random.default_rng(4).normal(size=200))
    expected, _ = cffilter(x, low=6, high=32, drift=drift)
    y = bandpass(x, 6, 32, root=True, drift=drift)
    np.testing.assert_allclose(y, expected, atol=1e-9)


def test_passband_and_stopband_in_interior():
    from precip_forecaster_src.filter_utils import bandpass

    t = np.arange(1000)
    inside = np.sin(2 * np.pi * t / 50.0)
    outside = np.sin(2 * np.pi * t / 10.0)

    y_in = bandpass(inside, 30.0, 80.0)
    y_out = bandpass(outside, 30.0, 80.0)

    interior = slice(200, 800)
    np.testing.assert_allclose(y_in[interior], inside[interior], atol=0.05)
    np.testing.assert_allclose(y_out[interior], 0.0, atol=0.05)


def test_adjacent_bands_and_residual_reconstruct_input():
    from precip_forecaster_src.filter_utils import bandpass

    x = np.random.default_rng(5).normal(size=600)
    low = bandpass(x, 100.0, 600.0)
    high = bandpass(x - low, 20.0, 100.0)
    residual = x - low - high
    np.testing.assert_allclose(low + high + residual, x, atol=1e-12)


def test_band_spec_validation():
    from precip_forecaster_src.exceptions import InvalidBandError
    from precip_forecaster_src.filter_utils import BandSpec

    BandSpec(182.5, 547.5).validate(1095)
    with pytest.raises(InvalidBandError):
        BandSpec(182.5, 547.5).validate(500)
    with pytest.raises(InvalidBandError):
        BandSpec(float("nan"), 10.0).validate(100)
