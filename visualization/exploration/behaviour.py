# visualization/exploration/behaviour.py

import logging
import os
from typing import Optional

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.ticker import EngFormatter, FuncFormatter

from data.series import MonthlySeries
from diagnostics.summary import annual_totals

logger = logging.getLogger(__name__)

Y_LABEL = "Visits (thousands)"


def set_y_axis_format(ax, mode: str = "full"):
    if mode == "short":
        ax.yaxis.set_major_formatter(EngFormatter(sep=""))
    else:
        ax.yaxis.set_major_formatter(FuncFormatter(lambda x, _: f'{x:,.0f}'))


def finish_figure(fig, path: Optional[str] = None, show: bool = False, dpi: int = 150):
    fig.tight_layout()
    if path:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
        logger.info(f"🖼️ Saved chart to {path}")
    if show:
        plt.show()
    plt.close(fig)
    return fig


def plot_raw_series(series: MonthlySeries, path: Optional[str] = None, show: bool = False, format="full"):
    fig, ax = plt.subplots(figsize=(12, 4))
    ax.plot(series.values.index, series.values, color="black", linewidth=1.2)
    ax.set_title(f"Monthly visits - {series.institution}", fontsize=11)
    ax.set_ylabel(Y_LABEL)
    ax.grid(True, alpha=0.3)
    set_y_axis_format(ax, format)
    return finish_figure(fig, path, show)


def plot_annual_totals(series: MonthlySeries, path: Optional[str] = None, show: bool = False, format="full"):
    totals = annual_totals(series)
    if totals.empty:
        logger.warning(f"No complete calendar year to plot for {series.institution}.")
        return None
    fig, ax = plt.subplots(figsize=(10, 4))
    sns.barplot(x=totals.index.astype(str), y=totals.values, color="steelblue", ax=ax)
    ax.set_title(f"Annual visits - {series.institution}")
    ax.set_xlabel("Calendar year")
    ax.set_ylabel(Y_LABEL)
    set_y_axis_format(ax, format)
    return finish_figure(fig, path, show)


def plot_overlay_years(series: MonthlySeries, kind: str = "line", path: Optional[str] = None,
                       show: bool = False, format="full"):
    assert kind in {"line", "box"}, "kind must be one of: line, box"
    data = series.values.to_frame("visits").reset_index()
    data["Year"] = data["month"].dt.year
    data["Month"] = data["month"].dt.month

    fig, ax = plt.subplots(figsize=(10, 5))
    if kind == "line":
        pivot = data.pivot(index="Month", columns="Year", values="visits")
        pivot.plot(ax=ax, marker='o', title=f"Yearly overlay - {series.institution}")
        ax.set_xticks(range(1, 13))
    else:
        sns.boxplot(data=data, x="Month", y="visits", ax=ax)
        ax.set_title(f"Visits by month - {series.institution}")
    ax.set_xlabel("Month")
    ax.set_ylabel(Y_LABEL)
    set_y_axis_format(ax, format)
    return finish_figure(fig, path, show)
