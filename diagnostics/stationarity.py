# diagnostics/stationarity.py
import logging
import warnings

import pandas as pd
from statsmodels.tools.sm_exceptions import InterpolationWarning
from statsmodels.tsa.stattools import adfuller, kpss

from data.series import MonthlySeries

logger = logging.getLogger(__name__)


def _values(series) -> pd.Series:
    values = series.values if isinstance(series, MonthlySeries) else series
    return values.dropna()


def adf_test(series) -> dict:
    result = adfuller(_values(series), autolag='AIC')
    return {
        'statistic': result[0],
        'pvalue': result[1],
        'critical_values': result[4],
        'stationary': result[1] < 0.05
    }


def kpss_test(series, regression: str = 'c') -> dict:
    with warnings.catch_warnings():
        # KPSS p-values are clipped to its lookup table; the clipped value is still reported
        warnings.simplefilter("ignore", InterpolationWarning)
        result = kpss(_values(series), regression=regression, nlags="auto")
    return {
        'statistic': result[0],
        'pvalue': result[1],
        'critical_values': result[3],
        'stationary': result[1] > 0.05
    }


def run_stationarity_tests(series, title="") -> dict:
    """
        ADF says non-stationary (p > 0.05) and KPSS says non-stationary (p < 0.05)
        → strong evidence of non-stationarity (e.g. a trend STL should absorb).

        ADF says stationary (p < 0.05) and KPSS says stationary (p > 0.05)
        → strong evidence of stationarity.
    """
    logger.info(f"🧪 Running stationarity tests for: {title}")
    adf_result = adf_test(series)
    try:
        kpss_result = kpss_test(series)
    except (ValueError, OverflowError) as e:
        logger.warning(f"⚠️ KPSS test failed for {title}: {e}")
        kpss_result = {'statistic': None, 'pvalue': None, 'critical_values': {}, 'stationary': None}

    return {
        'ADF': adf_result,
        'KPSS': kpss_result
    }
