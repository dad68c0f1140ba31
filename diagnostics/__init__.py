from diagnostics.decomposition import DecompositionResult, fit_fixed, fit_variable, seasonal_impact
from diagnostics.stationarity import run_stationarity_tests
