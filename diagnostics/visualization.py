# diagnostics/visualization.py
from typing import Optional

import matplotlib.pyplot as plt
import pandas as pd
from statsmodels.graphics.tsaplots import plot_acf, plot_pacf

from data.months import MONTH_NAMES
from diagnostics.decomposition import DecompositionResult
from visualization.exploration.behaviour import Y_LABEL, finish_figure


def plot_rolling_statistics(series: pd.Series, window: int = 12, title: str = "",
                            path: Optional[str] = None, show: bool = False):
    roll_mean = series.rolling(window=window).mean()
    roll_std = series.rolling(window=window).std()

    fig, ax = plt.subplots(figsize=(12, 6))
    ax.plot(series, label="Original", color="black")
    ax.plot(roll_mean, label=f"Rolling Mean ({window})", linestyle="--", color="blue")
    ax.plot(roll_std, label=f"Rolling Std ({window})", linestyle=":", color="orange")
    ax.set_title(f"Rolling Statistics - {title}")
    ax.legend()
    return finish_figure(fig, path, show)


def plot_acf_pacf(series: pd.Series, lags: int = 24, title: str = "",
                  path: Optional[str] = None, show: bool = False):
    series = series.dropna()
    # PACF needs lags below half the sample size
    lags = min(lags, len(series) // 2 - 1)
    fig, ax = plt.subplots(2, 1, figsize=(12, 8))

    plot_acf(series, ax=ax[0], lags=lags)
    ax[0].set_title(f"ACF - {title}")

    plot_pacf(series, ax=ax[1], lags=lags, method='ywm')
    ax[1].set_title(f"PACF - {title}")
    return finish_figure(fig, path, show)


def plot_decomposition(result: DecompositionResult, title: str = "",
                       path: Optional[str] = None, show: bool = False):
    frame = result.to_frame()
    fig, axes = plt.subplots(4, 1, figsize=(12, 10), sharex=True)
    for ax, column in zip(axes, ["observed", "trend", "seasonal", "remainder"]):
        if column == "remainder":
            ax.scatter(frame.index, frame[column], s=10, color="black")
            ax.axhline(0, color="grey", linewidth=0.8)
        else:
            ax.plot(frame.index, frame[column], color="black")
        ax.set_ylabel(column.capitalize())
        ax.grid(True, alpha=0.3)
    fig.suptitle(f"STL Decomposition ({result.label}) - {title}", fontsize=14)
    return finish_figure(fig, path, show)


def plot_seasonal_impact(impact: pd.DataFrame, title: str = "",
                         path: Optional[str] = None, show: bool = False):
    """Bar chart of the average seasonal effect per calendar month."""
    values = impact["seasonal"]
    colors = ["seagreen" if v >= 0 else "firebrick" for v in values.fillna(0)]
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.bar([name[:3] for name in MONTH_NAMES], values.to_numpy(), color=colors)
    ax.axhline(0, color="black", linewidth=0.8)
    ax.set_title(f"Seasonal impact on visits - {title}")
    ax.set_ylabel(Y_LABEL)
    ax.grid(True, axis="y", alpha=0.3)
    return finish_figure(fig, path, show, dpi=300)
