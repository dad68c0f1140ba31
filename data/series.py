# data/series.py
"""
Canonical observation and monthly series types, plus windowing.

A MonthlySeries holds visits (in thousands) on a month-start DatetimeIndex with
``freq="MS"``. The index is always complete between ``start`` and ``end``; a month
without a visit count is NaN and only appears on a full series whose gaps were
reported as MissingObservation records.
"""
from dataclasses import dataclass
from typing import Any, List, Tuple, Union

import pandas as pd

from profiler.errors.exceptions import NonContiguousWindowError, SeriesValidationError

MonthLike = Union[str, Tuple[int, int], pd.Timestamp, pd.Period]


@dataclass(frozen=True)
class RawObservation:
    label: str
    fiscal_year_label: str
    visits: Any  # cell as read, None when blank; an int once parse has matched the row


@dataclass(frozen=True)
class CanonicalObservation:
    institution: str
    calendar_year: int
    month: int
    visits: float  # thousands

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be in [1, 12], got {self.month}")
        if self.visits < 0:
            raise ValueError(f"visits must be non-negative, got {self.visits}")

    @property
    def key(self) -> Tuple[int, int]:
        return self.calendar_year, self.month

    @property
    def date(self) -> pd.Timestamp:
        return pd.Timestamp(year=self.calendar_year, month=self.month, day=1)


@dataclass(frozen=True)
class MissingObservation:
    year: int
    month: int
    label: str = ""
    fiscal_year_label: str = ""

    def __str__(self):
        return f"{self.year:04d}-{self.month:02d}"


def to_month_start(value: MonthLike) -> pd.Timestamp:
    """Normalise "YYYY-MM", (year, month), Period or Timestamp to a month-start Timestamp."""
    if isinstance(value, tuple):
        year, month = value
        return pd.Timestamp(year=int(year), month=int(month), day=1)
    if isinstance(value, pd.Period):
        return value.asfreq("M").to_timestamp()
    return pd.Timestamp(value).to_period("M").to_timestamp()


class MonthlySeries:
    def __init__(self, institution: str, values: pd.Series):
        self.institution = institution
        self.values = self._validate(institution, values)

    @staticmethod
    def _validate(institution: str, values: pd.Series) -> pd.Series:
        if values.empty:
            raise SeriesValidationError(institution=institution, reason="series is empty")
        index = pd.DatetimeIndex(values.index)
        if index.has_duplicates:
            dupes = sorted({ts.strftime("%Y-%m") for ts in index[index.duplicated()]})
            raise SeriesValidationError(institution=institution, reason=f"duplicate months {dupes}")
        if not index.is_monotonic_increasing:
            raise SeriesValidationError(institution=institution, reason="months are not in ascending order")
        expected = pd.date_range(index[0], index[-1], freq="MS")
        if not index.equals(expected):
            raise SeriesValidationError(institution=institution, reason="index is not a contiguous month-start range")
        out = pd.Series(values.to_numpy(dtype=float), index=expected, name="visits")
        out.index.name = "month"
        return out

    @classmethod
    def from_observations(cls, observations: List[CanonicalObservation]) -> "MonthlySeries":
        if not observations:
            raise SeriesValidationError(institution="", reason="no observations")
        institution = observations[0].institution
        values = pd.Series(
            [o.visits for o in observations],
            index=pd.DatetimeIndex([o.date for o in observations]),
        )
        return cls(institution, values)

    @property
    def start(self) -> pd.Timestamp:
        return self.values.index[0]

    @property
    def end(self) -> pd.Timestamp:
        return self.values.index[-1]

    @property
    def has_gaps(self) -> bool:
        return bool(self.values.isnull().any())

    @property
    def missing_months(self) -> List[str]:
        return [ts.strftime("%Y-%m") for ts in self.values.index[self.values.isnull()]]

    def __len__(self) -> int:
        return len(self.values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, MonthlySeries):
            return NotImplemented
        return self.institution == other.institution and self.values.equals(other.values)

    def __repr__(self) -> str:
        return (f"MonthlySeries({self.institution!r}, {self.start:%Y-%m}..{self.end:%Y-%m}, "
                f"n={len(self)})")

    def to_points(self) -> List[Tuple[pd.Timestamp, float]]:
        return list(zip(self.values.index, self.values.tolist()))

    def observations(self) -> List[CanonicalObservation]:
        return [
            CanonicalObservation(self.institution, ts.year, ts.month, float(v))
            for ts, v in self.values.dropna().items()
        ]


def window(series: MonthlySeries, start: MonthLike, end: MonthLike) -> MonthlySeries:
    """
    Return the contiguous sub-series between start and end (inclusive).

    Raises NonContiguousWindowError when the range is inverted, reaches past
    either end of the source series, or covers a month without data.
    """
    lo, hi = to_month_start(start), to_month_start(end)
    context = {
        "series_start": f"{series.start:%Y-%m}",
        "series_end": f"{series.end:%Y-%m}",
        "start": f"{lo:%Y-%m}",
        "end": f"{hi:%Y-%m}",
    }
    if lo > hi:
        raise NonContiguousWindowError(reason="start is after end", **context)
    if lo < series.start or hi > series.end:
        raise NonContiguousWindowError(reason="range is not covered by the source series", **context)

    values = series.values.loc[lo:hi]
    if values.isnull().any():
        missing = [ts.strftime("%Y-%m") for ts in values.index[values.isnull()]]
        raise NonContiguousWindowError(reason=f"missing observations at {missing}", **context)
    return MonthlySeries(series.institution, values)
