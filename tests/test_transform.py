import numpy as np
import pandas as pd

import pytest


def test_round_trip_recovers_raw_series():
    from precip_forecaster_src.transform_utils import transform_series, inverse_transform

    rng = np.random.default_rng(0)
    raw = pd.Series(rng.gamma(0.5, 4.0, 500), index=pd.date_range("2001-01-01", periods=500, freq="D"))

    transformed, scaling = transform_series(raw)
    back = inverse_transform(transformed, scaling)

    assert back.index.equals(raw.index)
    np.testing.assert_allclose(back.to_numpy(), raw.to_numpy(), rtol=1e-10, atol=1e-10)


def test_round_trip_keeps_true_zeros():
    from precip_forecaster_src.transform_utils import transform_series, inverse_transform

    raw = [0.0, 0.0, 5.0, 0.0, 12.5, 0.0, 1.0]
    transformed, scaling = transform_series(raw)
    back = inverse_transform(transformed, scaling)
    np.testing.assert_allclose(back.to_numpy(), raw, atol=1e-10)


def test_standardize_uses_sample_stddev():
    from precip_forecaster_src.transform_utils import standardize

    scaled, mean, stddev = standardize([1.0, 2.0, 3.0, 4.0])
    assert mean == pytest.approx(2.5)
    assert stddev == pytest.approx(np.sqrt(5.0 / 3.0))
    assert scaled.mean() == pytest.approx(0.0, abs=1e-12)
    assert scaled.std(ddof=1) == pytest.approx(1.0)


def test_normalize_is_inverse_hyperbolic_sine():
    from precip_forecaster_src.transform_utils import normalize, denormalize

    out = normalize([0.0, np.sinh(1.0), -np.sinh(2.0)])
    np.testing.assert_allclose(out.to_numpy(), [0.0, 1.0, -2.0], atol=1e-12)
    np.testing.assert_allclose(denormalize(out).to_numpy(), [0.0, np.sinh(1.0), -np.sinh(2.0)], atol=1e-12)


@pytest.mark.parametrize("raw", [[3.0, 3.0, 3.0, 3.0], [7.0]])
def test_degenerate_series_rejected(raw):
    from precip_forecaster_src.exceptions import DegenerateSeriesError
    from precip_forecaster_src.transform_utils import transform_series

    with pytest.raises(DegenerateSeriesError) as excinfo:
        transform_series(raw)
    assert "length" in excinfo.value.details


def test_missing_values_rejected():
    from precip_forecaster_src.exceptions import IncompleteDataError
    from precip_forecaster_src.transform_utils import standardize

    with pytest.raises(IncompleteDataError):
        standardize([1.0, np.nan, 2.0])


def test_adf_rejects_unit_root_for_white_noise():
    from precip_forecaster_src.transform_utils import adf_test, safe_adf_pval

    noise = np.random.default_rng(3).normal(size=400)
    stat, pval = adf_test(noise)
    assert stat < 0
    assert pval < 0.05
    assert np.isnan(safe_adf_pval(pd.Series(noise[:5])))
