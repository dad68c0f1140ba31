"""
Shared fixtures: synthetic wide visit tables laid out like the source dataset
(one row per institution/month label, one column per fiscal year) and synthetic
monthly series for decomposition tests.
"""
import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from data.months import MONTH_NAMES
from data.series import MonthlySeries

FISCAL_ORDER = MONTH_NAMES[3:] + MONTH_NAMES[:3]  # April .. March
INSTITUTION = "MUSEUM_X"


def synthetic_visits(year: int, month: int) -> int:
    """Trend + seasonal cycle + deterministic jitter, in raw visits."""
    t = (year - 2008) * 12 + (month - 1)
    seasonal = 30000 * np.sin(2 * np.pi * (month - 4) / 12)
    jitter = ((year * 12 + month) * 7919) % 2001 - 1000
    spike = 25000 if (year, month) == (2013, 11) else 0
    return int(round(200000 + 500 * t + seasonal + jitter + spike))


def build_visits_table(institution=INSTITUTION, fiscal_years=range(2008, 2017), last_month=(2016, 12),
                       blanks=(), value_fn=synthetic_visits, extra_rows=True) -> pd.DataFrame:
    rows = []
    for name in FISCAL_ORDER:
        month = MONTH_NAMES.index(name) + 1
        row = {"Museum": f"{institution}_{name}"}
        for fy in fiscal_years:
            year = fy + 1 if month < 4 else fy
            if (year, month) > last_month or (year, month) in blanks:
                row[str(fy)] = np.nan
            else:
                row[str(fy)] = value_fn(year, month)
        rows.append(row)
    if extra_rows:
        rows.append({"Museum": f"{institution}_Total", **{str(fy): 2_500_000 for fy in fiscal_years}})
        rows.append({"Museum": "OTHER GALLERY_April", **{str(fy): 5000 for fy in fiscal_years}})
        rows.append({"Museum": "OTHER GALLERY_May", **{str(fy): 6000 for fy in fiscal_years}})
    return pd.DataFrame(rows)


def monthly_series(values, start="2010-01", institution=INSTITUTION) -> MonthlySeries:
    index = pd.date_range(start, periods=len(values), freq="MS")
    return MonthlySeries(institution, pd.Series(values, index=index))


@pytest.fixture
def visits_table() -> pd.DataFrame:
    return build_visits_table()


@pytest.fixture
def visits_csv(tmp_path, visits_table):
    path = tmp_path / "monthly_museum_visits.csv"
    visits_table.to_csv(path, index=False)
    return path


@pytest.fixture
def noisy_series() -> MonthlySeries:
    """72 months (2010-01..2015-12) with trend, seasonality, jitter and one anomaly."""
    index = pd.date_range("2010-01", "2015-12", freq="MS")
    values = [synthetic_visits(ts.year, ts.month) / 1000 for ts in index]
    return monthly_series(values)


@pytest.fixture
def noiseless_series() -> MonthlySeries:
    """24 months of a pure sinusoid on a linear trend."""
    t = np.arange(24)
    values = 100.0 + 2.0 * t + 10.0 * np.sin(2 * np.pi * t / 12)
    return monthly_series(values)
