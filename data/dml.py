import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from data.months import MONTHS, MonthLookup, normalise_institution
from data.series import (CanonicalObservation, MissingObservation, MonthLike, MonthlySeries,
                         RawObservation, to_month_start)
from profiler.errors.exceptions import (ParseError, SeriesValidationError,
                                        UnacknowledgedMissingDataError)
from profiler.profiler_utils import profiled_function

logger = logging.getLogger(__name__)

DEFAULT_NA_VALUES = ["", "NA", "N/A", "n/a", "-", "..", "x", ":"]
FISCAL_YEAR_PATTERN = re.compile(r"^\s*(\d{4})(?:\s*[/\-]\s*\d{2,4})?\s*$")
FISCAL_YEAR_START_MONTH = 4


@dataclass
class ParseResult:
    series: MonthlySeries
    missing: List[MissingObservation] = field(default_factory=list)
    dropped_rows: int = 0

    def require_complete(self, acknowledge: bool = False) -> MonthlySeries:
        """
        Return the series, insisting the caller has seen any missing months.

        Raises:
            UnacknowledgedMissingDataError: if months inside the range have no
                visit count and ``acknowledge`` is False.
        """
        if self.missing and not acknowledge:
            raise UnacknowledgedMissingDataError(
                count=len(self.missing),
                institution=self.series.institution,
                months=", ".join(str(m) for m in self.missing),
            )
        if self.missing:
            logger.warning(f"⚠️ Continuing with {len(self.missing)} acknowledged missing month(s): "
                           f"{[str(m) for m in self.missing]}")
        return self.series

    def missing_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(m.year, m.month, m.label, m.fiscal_year_label) for m in self.missing],
            columns=["year", "month", "label", "fiscal_year"],
        )


def fiscal_to_calendar_year(fiscal_year: int, month: int) -> int:
    """April-March fiscal years: January to March belong to the following calendar year."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in [1, 12], got {month}")
    return fiscal_year + 1 if month < FISCAL_YEAR_START_MONTH else fiscal_year


def parse_fiscal_year(header) -> Optional[int]:
    match = FISCAL_YEAR_PATTERN.match(str(header))
    return int(match.group(1)) if match else None


@profiled_function(category="dataset")
def load_visitor_table(path: str, delimiter: str = ",", na_values: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Function: Read the monthly visits table from a delimited file.

    The first column holds composite institution/month labels; every other
    column is a fiscal year of integer visit counts.
    """
    na_values = list(na_values) if na_values is not None else DEFAULT_NA_VALUES
    logger.info(f"📂 Loading visitor table from {path}")
    df = pd.read_csv(
        path,
        sep=delimiter,
        na_values=na_values,
        keep_default_na=False,
        skipinitialspace=True,
    )
    df = df.loc[:, ~df.columns.astype(str).str.contains("^Unnamed")]
    df.columns = [str(c).strip() for c in df.columns]
    logger.info(f"✅ Loaded {len(df)} rows x {len(df.columns) - 1} fiscal-year columns.")
    return df


def _coerce_visits(value, label: str, column: str) -> Optional[int]:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return None
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            raise ParseError(row=label, column=column, reason=f"visit count {value!r} is not a number")
    number = float(value)
    if not number.is_integer():
        raise ParseError(row=label, column=column, reason=f"visit count {value!r} is not a whole number")
    if number < 0:
        raise ParseError(row=label, column=column, reason=f"visit count {value!r} is negative")
    return int(number)


def iter_raw_observations(table: pd.DataFrame) -> Iterator[RawObservation]:
    """
    Melt the wide table into one RawObservation per (row, fiscal-year column).

    Cells are passed through as read; only rows kept by ``parse`` are converted
    to visit counts, so footnotes in totals or other institutions are ignored.
    """
    if table.shape[1] < 2:
        raise ParseError(row="<header>", column="", reason="expected a label column and at least one fiscal-year column")

    label_column, *year_columns = list(table.columns)
    for column in year_columns:
        if parse_fiscal_year(column) is None:
            raise ParseError(row="<header>", column=column, reason="column header is not a fiscal year")

    for _, row in table.iterrows():
        raw_label = row[label_column]
        if pd.isna(raw_label):
            continue
        label = str(raw_label).strip()
        for column in year_columns:
            cell = row[column]
            yield RawObservation(label, column, None if pd.isna(cell) else cell)


def _matching_rows(rows: Iterable[RawObservation], institution: str, lookup: MonthLookup,
                   delimiter: str) -> Tuple[List[Tuple[RawObservation, int, int]], int]:
    target = normalise_institution(institution)
    matched, dropped = [], 0
    for raw in rows:
        tag, month = lookup.tokenize(raw.label, delimiter)
        if month is None or normalise_institution(tag) != target:
            dropped += 1
            continue
        fiscal_year = parse_fiscal_year(raw.fiscal_year_label)
        if fiscal_year is None:
            raise ParseError(row=raw.label, column=raw.fiscal_year_label, reason="column header is not a fiscal year")
        raw = replace(raw, visits=_coerce_visits(raw.visits, raw.label, raw.fiscal_year_label))
        matched.append((raw, fiscal_to_calendar_year(fiscal_year, month), month))
    return matched, dropped


@profiled_function(category="series_builder")
def parse(rows: Iterable[RawObservation], institution: str, start: Optional[MonthLike] = None,
          end: Optional[MonthLike] = None, lookup: MonthLookup = MONTHS, delimiter: str = "_") -> ParseResult:
    """
    Function: Build the canonical monthly series for one institution.

    Rows whose trailing label token is not a month, or whose institution tag does
    not match, are dropped. Visits are converted to thousands and fiscal years to
    calendar years. Without an explicit range the series spans the first to the
    last month with a visit count; months inside the range without a count are
    returned as MissingObservation records and left as NaN.

    Raises:
        ParseError: malformed headers/values, or no usable observation at all.
        SeriesValidationError: the same calendar month appears twice.
    """
    matched, dropped = _matching_rows(rows, institution, lookup, delimiter)
    logger.debug(f"Dropped {dropped} raw observations that are not monthly rows for {institution}.")

    by_key: Dict[Tuple[int, int], RawObservation] = {}
    for raw, year, month in matched:
        if (year, month) in by_key:
            raise SeriesValidationError(
                institution=institution,
                reason=f"duplicate observation for {year:04d}-{month:02d} "
                       f"(rows '{by_key[(year, month)].label}' and '{raw.label}')",
            )
        by_key[(year, month)] = raw

    observed = sorted(key for key, raw in by_key.items() if raw.visits is not None)
    if not observed:
        raise ParseError(row=institution, column="", reason="no monthly visit counts found for institution")

    lo = to_month_start(start) if start is not None else to_month_start(observed[0])
    hi = to_month_start(end) if end is not None else to_month_start(observed[-1])
    if lo > hi:
        raise ParseError(row=institution, column="", reason=f"requested range {lo:%Y-%m}..{hi:%Y-%m} is inverted")

    observations: List[CanonicalObservation] = []
    missing: List[MissingObservation] = []
    for ts in pd.date_range(lo, hi, freq="MS"):
        raw = by_key.get((ts.year, ts.month))
        if raw is None or raw.visits is None:
            missing.append(MissingObservation(
                ts.year, ts.month,
                label=raw.label if raw else "",
                fiscal_year_label=raw.fiscal_year_label if raw else "",
            ))
            continue
        observations.append(CanonicalObservation(institution, ts.year, ts.month, raw.visits / 1000))

    if not observations:
        raise ParseError(row=institution, column="", reason=f"no visit counts between {lo:%Y-%m} and {hi:%Y-%m}")

    values = pd.Series(
        [o.visits for o in observations],
        index=pd.DatetimeIndex([o.date for o in observations]),
    ).reindex(pd.date_range(lo, hi, freq="MS"))
    series = MonthlySeries(institution, values)

    if missing:
        logger.warning(f"⚠️ {len(missing)} month(s) inside {lo:%Y-%m}..{hi:%Y-%m} have no visit count for {institution}.")
    logger.info(f"✅ Built series for {institution}: {series.start:%Y-%m}..{series.end:%Y-%m} ({len(series)} months).")
    return ParseResult(series=series, missing=missing, dropped_rows=dropped)
