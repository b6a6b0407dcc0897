# precip_forecaster_src/diagnostics_utils.py

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from pathlib import Path
from typing import Any, Dict, Optional
import logging

from .decomposition_utils import Decomposition
from .file_utils import ensure_dir
from .transform_utils import safe_adf_pval

logger = logging.getLogger(__name__)


def ljungbox_table(resid: pd.Series, max_lag: int = 24) -> pd.DataFrame:
    """
    Ljung-Box portmanteau tests on the residual for lags 1..max_lag.

    Returns
    -------
    pd.DataFrame
        Columns ['lb_stat', 'lb_pvalue'] indexed by lag
    """
    from statsmodels.stats.diagnostic import acorr_ljungbox

    lags = int(min(max_lag, max(1, len(resid) - 1)))
    return acorr_ljungbox(resid, lags=np.arange(1, lags + 1), return_df=True)


def _save_acf_plot(resid: pd.Series, out_dir: Path, fname_prefix: str, lags: int) -> None:
    from statsmodels.graphics.tsaplots import plot_acf

    try:
        fig, ax = plt.subplots(figsize=(8, 3.5), dpi=150)
        plot_acf(resid, ax=ax, lags=lags, zero=False)
        ax.set_title("Residual ACF")
        fig.tight_layout()
        fig.savefig(out_dir / f"{fname_prefix}_ACF.png", dpi=150)
        plt.close(fig)
    except (ValueError, np.linalg.LinAlgError) as e:
        logger.warning("Failed to render residual ACF: %s", e)


def run_decomposition_diagnostics(decomposition: Decomposition,
                                  out_dir: Optional[Path] = None,
                                  fname_prefix: str = "CF") -> Dict[str, Any]:
    """
    Stationarity and whiteness checks on a decomposition.

    Parameters
    ----------
    decomposition : Decomposition
        Output of ``decompose``
    out_dir : Optional[Path]
        When given, the Ljung-Box table and a residual ACF plot are written here
    fname_prefix : str, default="CF"
        Prefix for output filenames

    Returns
    -------
    Dict[str, Any]
        adf_pvalue_transformed, adf_pvalue_residual, ljungbox_pvalue (at the
        largest lag tested), residual_std

    Notes
    -----
    The filter's default edge policy assumes no unit root; a small ADF p-value
    on the transformed series supports that choice. A small Ljung-Box p-value
    on the residual is expected for precipitation (weather persistence is
    not modelled).
    """
    resid = decomposition.residual.dropna()
    out: Dict[str, Any] = {
        "adf_pvalue_transformed": safe_adf_pval(decomposition.transformed),
        "adf_pvalue_residual": safe_adf_pval(resid),
        "ljungbox_pvalue": float("nan"),
        "residual_std": float(resid.std()) if len(resid) > 1 else float("nan"),
    }

    if out["adf_pvalue_transformed"] > 0.05:
        logger.warning("ADF p-value %.3f on the transformed series; consider root=True",
                       out["adf_pvalue_transformed"])

    if len(resid) > 2:
        lb = ljungbox_table(resid)
        out["ljungbox_pvalue"] = float(lb["lb_pvalue"].iloc[-1])
        if out_dir is not None:
            ensure_dir(out_dir)
            lb.to_csv(out_dir / f"{fname_prefix}_LjungBox.csv", index=True)
            _save_acf_plot(resid, out_dir, fname_prefix, lags=int(min(60, max(1, len(resid) // 4))))

    logger.info("Diagnostics: ADF p (transformed)=%.4f, Ljung-Box p=%.4f",
                out["adf_pvalue_transformed"], out["ljungbox_pvalue"])
    return out
