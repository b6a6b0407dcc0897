import importlib

import numpy as np
import pandas as pd

import pytest


def test_cli_writes_metrics_and_figures(precip_csv, tmp_path):
    from precip_forecaster_src.main import main

    figures = tmp_path / "figures"
    metrics = tmp_path / "out" / "metrics.csv"
    main(["--series-csv", str(precip_csv), "--figures-dir", str(figures), "--metrics-csv", str(metrics),
          "--log-level", "WARNING"])

    df = pd.read_csv(metrics)
    assert list(df["model"]) == ["CF(seasonal)", "climatology"]
    assert (df["test_len"] == 366).all()
    assert (df["train_len"] == 1095).all()
    assert df.loc[0, "RMSE"] > 0
    assert df.loc[0, "hash_forecast"] != df.loc[1, "hash_forecast"]
    for name in ("CF_Decomposition.png", "CF_RepresentativeCycle.png", "CF_Forecast.png", "CF_LjungBox.csv"):
        assert (figures / name).exists()


def test_cli_band_search_and_overrides(precip_csv, tmp_path):
    from precip_forecaster_src.main import main

    figures = tmp_path / "figures"
    main(["--series-csv", str(precip_csv), "--figures-dir", str(figures), "--optimize-bands",
          "--seasonal-candidates", "0.5-1.25,0.5-1.5", "--seasonal-band", "0.5-1.25",
          "--leap-policy", "next", "--log-level", "WARNING"])

    search = pd.read_csv(figures / "CF_band_search.csv")
    assert len(search) == 2 * 3  # two seasonal bands x three trend limits from config
    assert search["RMSE"].is_monotonic_increasing


def test_cli_appends_rows_across_runs(precip_csv, tmp_path):
    from precip_forecaster_src.main import main

    metrics = tmp_path / "metrics.csv"
    for _ in range(2):
        main(["--series-csv", str(precip_csv), "--no-figures", "--metrics-csv", str(metrics),
              "--log-level", "ERROR"])
    assert len(pd.read_csv(metrics)) == 4


def test_cli_exits_nonzero_on_missing_values(tmp_path):
    from precip_forecaster_src.main import main

    dates = pd.date_range("2000-10-01", "2003-09-30", freq="D")
    values = np.abs(np.sin(np.arange(len(dates)) / 30.0))
    values[100] = np.nan
    path = tmp_path / "gappy.csv"
    pd.DataFrame({"date": dates.strftime("%Y-%m-%d"), "value": values}).to_csv(path, index=False)

    with pytest.raises(SystemExit) as excinfo:
        main(["--series-csv", str(path), "--no-figures", "--log-level", "ERROR"])
    assert excinfo.value.code == 1


def test_cli_rejects_bad_arguments(precip_csv):
    from precip_forecaster_src.main import main

    with pytest.raises(SystemExit):
        main(["--series-csv", str(precip_csv), "--seasonal-band", "1.5-0.5"])
    with pytest.raises(SystemExit):
        main(["--series-csv", str(precip_csv), "--leap-policy", "skip"])


def test_missing_csv_exits(tmp_path):
    from precip_forecaster_src.main import main

    with pytest.raises(SystemExit) as excinfo:
        main(["--series-csv", str(tmp_path / "nope.csv"), "--no-figures"])
    assert "not found" in str(excinfo.value.code)


def test_parsing_helpers():
    from precip_forecaster_src.parsing_utils import (
        parse_band_arg, parse_band_list, parse_hydro_start, validate_leap_policy, validate_log_level
    )

    assert parse_band_arg("0.5-1.5") == (0.5, 1.5)
    assert parse_band_arg("1.5-", allow_open_high=True) == (1.5, None)
    assert parse_band_list("0.5-1.25, 0.33-1.5") == [(0.5, 1.25), (0.33, 1.5)]
    assert parse_band_list(None) == []
    assert parse_hydro_start("10-01") == (10, 1)
    assert validate_leap_policy("Next") == "next"
    assert validate_log_level("debug") == "DEBUG"
    for bad in ("1.5", "2-1", "-1"):
        with pytest.raises(ValueError):
            parse_band_arg(bad)
    with pytest.raises(ValueError):
        parse_hydro_start("13-01")


def test_constant_csv_aborts_with_degenerate_error(tmp_path):
    from precip_forecaster_src.exceptions import DegenerateSeriesError
    from precip_forecaster_src.main import main, run_cf_workflow

    dates = pd.date_range("2000-10-01", "2004-09-30", freq="D")
    path = tmp_path / "dry.csv"
    pd.DataFrame({"date": dates.strftime("%Y-%m-%d"), "value": 0.0}).to_csv(path, index=False)

    with pytest.raises(DegenerateSeriesError):
        run_cf_workflow(path, None, None)
    with pytest.raises(SystemExit) as excinfo:
        main(["--series-csv", str(path), "--no-figures", "--log-level", "ERROR"])
    assert excinfo.value.code == 1


def test_cli_split_index_and_horizon(precip_csv, tmp_path):
    from precip_forecaster_src.main import main

    figures = tmp_path / "figures"
    metrics = tmp_path / "metrics.csv"
    main(["--series-csv", str(precip_csv), "--figures-dir", str(figures), "--metrics-csv", str(metrics),
          "--split-index", "1000", "--horizon", "30", "--log-level", "WARNING"])

    df = pd.read_csv(metrics)
    assert (df["train_len"] == 1000).all()
    assert (df["test_len"] == 30).all()
    assert len(pd.read_csv(figures / "CF_Forecast.csv")) == 30


def test_cli_horizon_beyond_record_scores_overlap_only(precip_csv, tmp_path):
    from precip_forecaster_src.main import main

    figures = tmp_path / "figures"
    metrics = tmp_path / "metrics.csv"
    main(["--series-csv", str(precip_csv), "--figures-dir", str(figures), "--metrics-csv", str(metrics),
          "--horizon", "400", "--log-level", "WARNING"])

    assert (pd.read_csv(metrics)["test_len"] == 366).all()
    forecast = pd.read_csv(figures / "CF_Forecast.csv", parse_dates=["date"])
    assert len(forecast) == 400
    assert forecast["date"].iloc[-1] == pd.Timestamp("2004-11-03")


def test_cli_rejects_split_index_outside_record(precip_csv):
    from precip_forecaster_src.main import main

    with pytest.raises(SystemExit) as excinfo:
        main(["--series-csv", str(precip_csv), "--no-figures", "--split-index", "99999"])
    assert "split" in str(excinfo.value.code)


def test_diagnostics_failure_does_not_abort_run(precip_csv, tmp_path, monkeypatch):
    main_module = importlib.import_module("precip_forecaster_src.main")

    def failing_diagnostics(*args, **kwargs):
        raise ValueError("diagnostics unavailable")

    monkeypatch.setattr(main_module, "run_decomposition_diagnostics", failing_diagnostics)
    figures = tmp_path / "figures"
    metrics = tmp_path / "metrics.csv"
    main_module.main(["--series-csv", str(precip_csv), "--figures-dir", str(figures),
                      "--metrics-csv", str(metrics), "--log-level", "ERROR"])

    assert len(pd.read_csv(metrics)) == 2
    assert (figures / "CF_Forecast.png").exists()
