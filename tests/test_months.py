import pytest

from data.months import MONTHS, MonthLookup, normalise_institution


@pytest.mark.parametrize("token, expected", [
    ("January", 1),
    ("october", 10),
    ("DECEMBER", 12),
    ("Feb", 2),
    ("sep", 9),
    ("Sept", 9),
    ("Aug.", 8),
    (" March ", 3),
])
def test_ordinal_accepts_names_and_abbreviations(token, expected):
    assert MONTHS.ordinal(token) == expected


@pytest.mark.parametrize("token", ["Total", "", "Q1", "13", None])
def test_ordinal_rejects_non_months(token):
    assert MONTHS.ordinal(token) is None


def test_every_month_is_reachable():
    assert set(MONTHS.table.values()) == set(range(1, 13))


def test_lookup_table_is_read_only():
    with pytest.raises(TypeError):
        MONTHS.table["smarch"] = 3


def test_lookup_rejects_out_of_range_ordinals():
    with pytest.raises(ValueError):
        MonthLookup({"Smarch": 13})


def test_tokenize_splits_trailing_month():
    assert MONTHS.tokenize("MUSEUM_X_October") == ("MUSEUM_X", 10)
    assert MONTHS.tokenize("NATURAL HISTORY MUSEUM_Jan") == ("NATURAL HISTORY MUSEUM", 1)


def test_tokenize_marks_non_monthly_labels():
    assert MONTHS.tokenize("MUSEUM_X_Total") == ("MUSEUM_X", None)
    assert MONTHS.tokenize("Notes") == ("Notes", None)


def test_tokenize_custom_delimiter():
    assert MONTHS.tokenize("MUSEUM X - May", delimiter="-") == ("MUSEUM X", 5)


def test_normalise_institution():
    assert normalise_institution(" museum_x ") == "MUSEUM X"
    assert normalise_institution("Museum  X") == "MUSEUM X"
