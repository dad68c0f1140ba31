# diagnostics/summary.py
"""Exploratory summaries of a monthly visits series (thousands of visits)."""
import logging

import pandas as pd

from data.series import MonthlySeries

logger = logging.getLogger(__name__)


def _frame(series: MonthlySeries) -> pd.DataFrame:
    df = series.values.to_frame("visits")
    df["year"] = df.index.year
    df["month"] = df.index.month
    return df


def annual_totals(series: MonthlySeries) -> pd.Series:
    """Calendar-year totals, keeping only years with all twelve months observed."""
    df = _frame(series)
    counts = df.groupby("year")["visits"].count()
    complete = counts[counts == 12].index
    totals = df[df["year"].isin(complete)].groupby("year")["visits"].sum()
    if len(complete) < df["year"].nunique():
        logger.info(f"Skipped incomplete years: {sorted(set(df['year']) - set(complete))}")
    return totals.rename("visits")


def monthly_profile(series: MonthlySeries) -> pd.DataFrame:
    """Mean, median, min and max visits per calendar month across all years."""
    df = _frame(series)
    profile = df.groupby("month")["visits"].agg(["mean", "median", "min", "max", "count"])
    return profile.reindex(range(1, 13))


def year_over_year(series: MonthlySeries) -> pd.Series:
    """Percentage change against the same month one year earlier."""
    values = series.values
    return ((values / values.shift(12) - 1) * 100).rename("yoy_pct")


def peak_months(series: MonthlySeries, top_n: int = 3) -> pd.Series:
    return monthly_profile(series)["mean"].nlargest(top_n)
