# data/months.py
"""
Month-name lookup and label tokenizer.

Source labels are composite: an institution name followed by a trailing month
token, e.g. ``"MUSEUM_X_October"``. English month names are spelled out here
instead of taken from ``calendar.month_name``, which follows the process locale.
"""
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class MonthLookup:
    """Immutable, case-insensitive month name → ordinal (1-12) mapping."""

    def __init__(self, names: Mapping[str, int]):
        table = {}
        for name, ordinal in names.items():
            if not 1 <= ordinal <= 12:
                raise ValueError(f"Month ordinal out of range for {name!r}: {ordinal}")
            table[name.strip().lower()] = ordinal
        self._table = MappingProxyType(table)

    @classmethod
    def english(cls) -> "MonthLookup":
        names = {}
        for i, name in enumerate(MONTH_NAMES, start=1):
            names[name] = i
            names[name[:3]] = i
        names["Sept"] = 9
        return cls(names)

    @property
    def table(self) -> Mapping[str, int]:
        return self._table

    def ordinal(self, token: str) -> Optional[int]:
        if token is None:
            return None
        return self._table.get(str(token).strip().lower().rstrip("."))

    def __contains__(self, token) -> bool:
        return self.ordinal(token) is not None

    def __len__(self) -> int:
        return len(self._table)

    def tokenize(self, label: str, delimiter: str = "_") -> Tuple[str, Optional[int]]:
        """
        Split a composite label into (institution tag, month ordinal).

        The month is None when the trailing token is not a month name
        (annual totals, notes, blank labels).
        """
        text = str(label).strip()
        if delimiter not in text:
            return text, None
        institution, token = text.rsplit(delimiter, 1)
        return institution.strip(), self.ordinal(token)


MONTHS = MonthLookup.english()


def normalise_institution(name: str) -> str:
    return " ".join(str(name).replace("_", " ").split()).upper()
