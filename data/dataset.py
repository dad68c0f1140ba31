# dataset.py

import logging
from typing import Any, Dict, Optional

import pandas as pd

from config_loader import AnalysisConfig
from data.dml import ParseResult, iter_raw_observations, load_visitor_table, parse
from data.months import MONTHS, MonthLookup
from data.series import MonthlySeries, window

logger = logging.getLogger(__name__)


class VisitorDataset:
    """
    Load the visits table once and derive the full and analysis-window series
    for the configured institution.
    """

    def __init__(self, config: AnalysisConfig, lookup: MonthLookup = MONTHS):
        self.config = config
        self.lookup = lookup
        self.raw_df: pd.DataFrame = pd.DataFrame()
        self.parse_result: Optional[ParseResult] = None
        self.full_series: Optional[MonthlySeries] = None
        self.analysis_series: Optional[MonthlySeries] = None
        self.metadata: Dict[str, Any] = {}

    def load_data(self, table: Optional[pd.DataFrame] = None) -> None:
        if table is not None:
            self.raw_df = table
        else:
            self.raw_df = load_visitor_table(
                self.config.data_path,
                delimiter=self.config.csv_delimiter,
                na_values=self.config.na_values,
            )

    def preprocess(self) -> Dict[str, Any]:
        if self.raw_df.empty:
            raise ValueError("Dataset must be loaded before preprocessing.")

        self.parse_result = parse(
            iter_raw_observations(self.raw_df),
            self.config.institution,
            lookup=self.lookup,
            delimiter=self.config.label_delimiter,
        )
        self.full_series = self.parse_result.require_complete(self.config.acknowledge_missing)
        self.metadata = self.extract_metadata()
        return {"metadata": self.metadata, "missing": self.parse_result.missing}

    def extract_metadata(self) -> Dict[str, Any]:
        series = self.full_series
        return {
            "institution": series.institution,
            "start": f"{series.start:%Y-%m}",
            "end": f"{series.end:%Y-%m}",
            "months": len(series),
            "missing_months": len(self.parse_result.missing),
            "dropped_raw_observations": self.parse_result.dropped_rows,
        }

    def define_window(self) -> MonthlySeries:
        if self.full_series is None:
            raise ValueError("Dataset must be preprocessed before windowing.")
        self.analysis_series = window(self.full_series, self.config.window_start, self.config.window_end)
        logger.info(f"📅 Analysis window: {self.analysis_series.start:%Y-%m} to "
                    f"{self.analysis_series.end:%Y-%m} ({len(self.analysis_series)} months)")
        return self.analysis_series
