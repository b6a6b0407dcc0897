# precip_forecaster_src/plotting_utils.py

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, Optional
import logging

from .decomposition_utils import Decomposition
from .file_utils import ensure_dir

logger = logging.getLogger(__name__)


def plot_decomposition(decomposition: Decomposition, out_path: Path) -> None:
    """
    Render the transformed series and its trend, seasonal and residual components.

    Parameters
    ----------
    decomposition : Decomposition
        Output of ``decompose``
    out_path : Path
        File path to save the PNG (parents are created if missing)
    """
    ensure_dir(out_path.parent)
    panels = [
        ("Transformed", decomposition.transformed),
        (f"Trend {decomposition.trend_band.describe()}", decomposition.trend),
        (f"Seasonal {decomposition.seasonal_band.describe()}", decomposition.seasonal),
        ("Residual", decomposition.residual),
    ]
    fig, axes = plt.subplots(nrows=4, ncols=1, sharex=True, figsize=(11, 8), dpi=150)
    for ax, (title, series) in zip(axes, panels):
        ax.plot(series.index, series.to_numpy(), color="black", linewidth=0.6)
        ax.set_title(title, fontsize=9)
        ax.spines["top"].set_alpha(0)
        ax.tick_params(labelsize=7)
    fig.autofmt_xdate()
    plt.tight_layout()
    plt.savefig(out_path, dpi=150)
    plt.close(fig)


def plot_representative_cycle(representative_cycle: pd.Series,
                              out_path: Path,
                              seasonal: Optional[pd.Series] = None,
                              positions=None) -> None:
    """
    Plot the averaged cycle, optionally over the individual seasonal values.

    Parameters
    ----------
    representative_cycle : pd.Series
        Indexed by cycle position 1..L
    out_path : Path
        File path to save the PNG
    seasonal : pd.Series, optional
        Seasonal component, drawn as a scatter against ``positions``
    positions : array-like, optional
        Cycle position of every sample of ``seasonal``
    """
    ensure_dir(out_path.parent)
    fig, ax = plt.subplots(figsize=(9, 4), dpi=150)
    if seasonal is not None and positions is not None:
        ax.scatter(positions, seasonal.to_numpy(), s=2, color="grey", alpha=0.4, label="Seasonal component")
    ax.plot(representative_cycle.index, representative_cycle.to_numpy(), color="C0", linewidth=1.5,
            label="Representative cycle")
    ax.set_xlabel("Cycle position (day)")
    ax.set_ylabel("Transformed units")
    ax.legend()
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(out_path, dpi=150)
    plt.close(fig)


def plot_forecast_comparison(y_true: pd.Series,
                             forecasts: Dict[str, pd.Series],
                             out_path: Path,
                             title: str = "Forecast Comparison",
                             history: Optional[pd.Series] = None) -> None:
    """
    Create a comparison plot of held-out observations against one or more forecasts.

    Parameters
    ----------
    y_true : pd.Series
        Held-out observations
    forecasts : Dict[str, pd.Series]
        Method name -> forecast; Series are drawn on their own index and may
        extend past ``y_true``
    out_path : Path
        File path to save the PNG
    title : str, default="Forecast Comparison"
        Plot title
    history : pd.Series, optional
        Tail of the training series drawn before the forecast window
    """
    ensure_dir(out_path.parent)
    fig, ax = plt.subplots(figsize=(11, 5), dpi=150)
    if history is not None:
        ax.plot(history.index, history.to_numpy(), color="grey", linewidth=0.6, label="Train")
    ax.plot(y_true.index, y_true.to_numpy(), color="black", linewidth=0.8, label="Observed")
    for i, (name, fc) in enumerate(forecasts.items()):
        fc = fc if isinstance(fc, pd.Series) else pd.Series(np.asarray(fc, dtype=float), index=y_true.index)
        ax.plot(fc.index, fc.to_numpy(), color=f"C{i}", linewidth=1.5, label=name)
    ax.set_title(title)
    ax.set_ylabel("Precipitation")
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.autofmt_xdate()
    plt.tight_layout()
    plt.savefig(out_path, dpi=150)
    plt.close(fig)
