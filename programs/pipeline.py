import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from config_loader import AnalysisConfig
from data.dataset import VisitorDataset
from data.series import MissingObservation, MonthlySeries
from diagnostics.decomposition import FIXED, DecompositionResult, seasonal_impact
from diagnostics.stationarity import run_stationarity_tests
from diagnostics.summary import annual_totals, monthly_profile, year_over_year
from models.selector import DecompositionSelector, ModelChoice, SelectionResult, choose_model
from profiler.profiler_switch import profiling_switch
from profiler.profiler_utils import conditional_timer

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    full_series: MonthlySeries
    analysis_series: MonthlySeries
    missing: List[MissingObservation]
    selection: SelectionResult
    choice: ModelChoice
    stationarity: Dict[str, Any]
    annual_totals: pd.Series
    monthly_profile: pd.DataFrame
    year_over_year: pd.Series
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def preferred(self) -> DecompositionResult:
        return self.selection.fixed if self.choice.preferred == FIXED else self.selection.best_variable

    @property
    def seasonal_impact(self) -> pd.DataFrame:
        return seasonal_impact(self.preferred)


class VisitorPipeline:
    def __init__(self, config: AnalysisConfig, dataset: Optional[VisitorDataset] = None):
        self.config = config
        self.dataset = dataset or VisitorDataset(config)
        self.selector = DecompositionSelector(config.decomposition)
        profiling_switch.configure(config.profiling)

    def run(self, table: Optional[pd.DataFrame] = None) -> PipelineResult:
        with conditional_timer("programs/pipeline.py", "run", "Series builder", category="dataset"):
            self.dataset.load_data(table)
            info = self.dataset.preprocess()
            analysis_series = self.dataset.define_window()
        logger.info(f"📦 Metadata extracted: {info['metadata']}")

        full_series = self.dataset.full_series
        stationarity = run_stationarity_tests(analysis_series, title=analysis_series.institution)
        selection = self.selector.select(analysis_series)
        choice = choose_model(selection, self.config.decomposition.materiality)

        return PipelineResult(
            full_series=full_series,
            analysis_series=analysis_series,
            missing=info["missing"],
            selection=selection,
            choice=choice,
            stationarity=stationarity,
            annual_totals=annual_totals(full_series),
            monthly_profile=monthly_profile(full_series),
            year_over_year=year_over_year(full_series),
            metadata=info["metadata"],
        )


def write_outputs(result: PipelineResult, output_dir: str) -> Dict[str, str]:
    """Write every table of a run as CSV into ``output_dir`` (overwriting earlier runs)."""
    os.makedirs(output_dir, exist_ok=True)
    tables = {
        "series": result.full_series.values.to_frame(),
        "missing_observations": pd.DataFrame(
            [(m.year, m.month, m.label, m.fiscal_year_label) for m in result.missing],
            columns=["year", "month", "label", "fiscal_year"]),
        "annual_totals": result.annual_totals.to_frame(),
        "monthly_profile": result.monthly_profile,
        "candidates": result.selection.candidate_table(),
        "comparison": result.selection.comparison_table(),
        "components_fixed": result.selection.fixed.to_frame(),
        "components_variable": result.selection.best_variable.to_frame(),
        "seasonal_impact": result.seasonal_impact,
    }
    paths = {}
    for name, frame in tables.items():
        path = os.path.join(output_dir, f"{name}.csv")
        frame.to_csv(path, index=name not in ("candidates", "missing_observations"))
        paths[name] = path
    logger.info(f"💾 Wrote {len(paths)} tables to {output_dir}/")
    return paths


def write_charts(result: PipelineResult, output_dir: str, show: bool = False, acf_lags: int = 24) -> Dict[str, str]:
    from diagnostics.visualization import (plot_acf_pacf, plot_decomposition, plot_rolling_statistics,
                                          plot_seasonal_impact)
    from visualization.exploration.behaviour import plot_annual_totals, plot_overlay_years, plot_raw_series

    institution = result.full_series.institution
    paths = {name: os.path.join(output_dir, f"{name}.png") for name in (
        "raw_series", "rolling_statistics", "annual_totals", "overlay_years", "decomposition_fixed",
        "decomposition_variable", "remainder_acf", "seasonal_impact")}

    plot_raw_series(result.full_series, path=paths["raw_series"], show=show)
    plot_rolling_statistics(result.analysis_series.values, title=institution, path=paths["rolling_statistics"], show=show)
    plot_annual_totals(result.full_series, path=paths["annual_totals"], show=show)
    plot_overlay_years(result.analysis_series, path=paths["overlay_years"], show=show)
    plot_decomposition(result.selection.fixed, institution, path=paths["decomposition_fixed"], show=show)
    plot_decomposition(result.selection.best_variable, institution, path=paths["decomposition_variable"], show=show)
    plot_acf_pacf(result.preferred.remainder, lags=acf_lags, title=f"{institution} remainder ({result.preferred.label})",
                  path=paths["remainder_acf"], show=show)
    plot_seasonal_impact(result.seasonal_impact, institution, path=paths["seasonal_impact"], show=show)
    return paths
