import numpy as np
import pandas as pd

import pytest


def test_components_reconstruct_transformed_series():
    from precip_forecaster_src.decomposition_utils import decompose, default_bands

    idx = pd.date_range("2000-10-01", periods=1095, freq="D")
    x = pd.Series(np.random.default_rng(10).normal(size=1095), index=idx)
    trend_band, seasonal_band = default_bands(365, len(x))

    d = decompose(x, trend_band, seasonal_band)

    np.testing.assert_allclose(d.reconstruct().to_numpy(), x.to_numpy(), atol=1e-12)
    np.testing.assert_allclose((d.detrended - d.seasonal - d.residual).to_numpy(), 0.0, atol=1e-12)
    for component in (d.trend, d.detrended, d.seasonal, d.residual):
        assert component.index.equals(idx)
    assert [d.trend.name, d.seasonal.name, d.residual.name] == ["trend", "seasonal", "residual"]


def test_default_bands_are_adjacent_multiples_of_cycle():
    from precip_forecaster_src.decomposition_utils import default_bands

    trend, seasonal = default_bands(365, 3650)
    assert (trend.period_low, trend.period_high) == (pytest.approx(547.5), 3650.0)
    assert (seasonal.period_low, seasonal.period_high) == (pytest.approx(182.5), pytest.approx(547.5))
    assert seasonal.period_low < 365 < seasonal.period_high


def test_seasonal_pass_runs_on_detrended_series():
    from precip_forecaster_src.decomposition_utils import decompose
    from precip_forecaster_src.filter_utils import BandSpec, bandpass

    x = pd.Series(np.random.default_rng(11).normal(size=800))
    d = decompose(x, BandSpec(150, 800), BandSpec(40, 150))
    expected_trend = bandpass(x, 150, 800)
    expected_seasonal = bandpass(x - expected_trend, 40, 150)
    np.testing.assert_allclose(d.trend.to_numpy(), expected_trend.to_numpy())
    np.testing.assert_allclose(d.seasonal.to_numpy(), expected_seasonal.to_numpy())


def test_invalid_seasonal_band_fails_before_filtering(monkeypatch):
    from precip_forecaster_src import decomposition_utils
    from precip_forecaster_src.exceptions import InvalidBandError
    from precip_forecaster_src.filter_utils import BandSpec

    calls = []
    monkeypatch.setattr(decomposition_utils, "bandpass", lambda *a, **k: calls.append(a))

    x = pd.Series(np.random.default_rng(12).normal(size=300))
    with pytest.raises(InvalidBandError):
        decomposition_utils.decompose(x, BandSpec(100, 300), BandSpec(50, 400))
    assert calls == []


def test_decomposition_frame_has_all_components():
    from precip_forecaster_src.decomposition_utils import decompose
    from precip_forecaster_src.filter_utils import BandSpec

    x = pd.Series(np.random.default_rng(13).normal(size=200))
    frame = decompose(x, BandSpec(60, 200), BandSpec(20, 60)).to_frame()
    assert list(frame.columns) == ["transformed", "trend", "seasonal", "residual"]
    assert len(frame) == 200
