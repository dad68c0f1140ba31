import os

import pytest

from diagnostics.decomposition import fit_fixed, seasonal_impact
from diagnostics.visualization import plot_acf_pacf, plot_decomposition, plot_seasonal_impact
from tests.conftest import monthly_series
from visualization.exploration.behaviour import plot_annual_totals, plot_overlay_years, plot_raw_series


@pytest.mark.parametrize("kind", ["line", "box"])
def test_overlay_years(tmp_path, noisy_series, kind):
    path = tmp_path / f"overlay_{kind}.png"
    plot_overlay_years(noisy_series, kind=kind, path=str(path))
    assert path.is_file()


def test_annual_totals_skip_without_complete_year():
    assert plot_annual_totals(monthly_series([1.0, 2.0, 3.0], start="2010-03")) is None


def test_decomposition_charts(tmp_path, noisy_series):
    result = fit_fixed(noisy_series)
    plot_raw_series(noisy_series, path=str(tmp_path / "raw.png"), format="short")
    plot_decomposition(result, "synthetic", path=str(tmp_path / "stl.png"))
    plot_acf_pacf(result.remainder, lags=48, path=str(tmp_path / "acf.png"))
    plot_seasonal_impact(seasonal_impact(result), "synthetic", path=str(tmp_path / "nested" / "impact.png"))
    assert sorted(os.listdir(tmp_path)) == ["acf.png", "nested", "raw.png", "stl.png"]
