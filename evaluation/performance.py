from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from statsmodels.stats.diagnostic import acorr_ljungbox
from statsmodels.tsa.stattools import acf


@dataclass(frozen=True)
class RemainderStats:
    """
    Summary of an STL remainder (thousands of visits).

    ``mean_abs`` drives model ranking; ``mean`` and ``median`` are reported
    alongside because a well-fitted additive model should centre on zero.
    """
    mean: float
    median: float
    mean_abs: float
    median_abs: float
    std: float
    rmse: float
    max_abs: float

    @classmethod
    def from_remainder(cls, remainder) -> "RemainderStats":
        r = np.asarray(remainder, dtype=float)
        return cls(
            mean=float(np.mean(r)),
            median=float(np.median(r)),
            mean_abs=float(np.mean(np.abs(r))),
            median_abs=float(np.median(np.abs(r))),
            std=float(np.std(r, ddof=1)) if len(r) > 1 else 0.0,
            rmse=float(np.sqrt(np.mean(r ** 2))),
            max_abs=float(np.max(np.abs(r))),
        )

    def ranking_key(self):
        return self.mean_abs, abs(self.median)

    def to_row(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class AutocorrelationDiagnostics:
    acf_lag1: float
    acf_seasonal: float
    ljung_box_stat: float
    ljung_box_pvalue: float
    lag: int

    @property
    def white_noise(self) -> Optional[bool]:
        if np.isnan(self.ljung_box_pvalue):
            return None
        return bool(self.ljung_box_pvalue > 0.05)

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        row["white_noise"] = self.white_noise
        return row


def residual_autocorrelation(remainder, seasonal_lag: int = 12) -> AutocorrelationDiagnostics:
    """ACF at lag 1 and at the seasonal lag, plus a Ljung-Box test up to the seasonal lag."""
    r = np.asarray(remainder, dtype=float)
    lag = max(1, min(seasonal_lag, len(r) - 1))
    if len(r) < 3 or np.allclose(r, r[0]):
        return AutocorrelationDiagnostics(np.nan, np.nan, np.nan, np.nan, lag)

    coefficients = acf(r, nlags=lag, fft=False)
    lb = acorr_ljungbox(r, lags=[lag], return_df=True)
    return AutocorrelationDiagnostics(
        acf_lag1=float(coefficients[1]),
        acf_seasonal=float(coefficients[lag]),
        ljung_box_stat=float(lb["lb_stat"].iloc[0]),
        ljung_box_pvalue=float(lb["lb_pvalue"].iloc[0]),
        lag=lag,
    )


def remainder_frame(rows: Dict[str, Dict[str, Any]]) -> pd.DataFrame:
    """Stack per-model rows (label -> flat dict) into a comparison table."""
    df = pd.DataFrame.from_dict(rows, orient="index")
    df.index.name = "model"
    return df
