"""Tests for the gridsift.inference.columns module."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from gridsift.cancellation import CancellationToken
from gridsift.config import GuessSettings
from gridsift.exceptions import ValidationError
from gridsift.inference.columns import common_date_format, guess_columns, id_column_suffix
from gridsift.models import Column
from gridsift.source import DataFrameRowSource
from gridsift.utils.io import read_table
from gridsift.value_format import DataType, ValueFormat

FIXTURES = Path(__file__).parent / "fixtures"


def _orders_source():
    return DataFrameRowSource(read_table(FIXTURES / "orders.csv"))


def _by_name(guesses):
    return {guess.column.name: guess for guess in guesses}


def test_guess_columns_on_orders_file():
    guesses = _by_name(guess_columns(_orders_source()))

    assert guesses["OrderID"].result is None
    assert "identifier column" in guesses["OrderID"].message
    assert guesses["Ordered"].result.found_format.description() == "Date Time (yyyy-MM-dd)"
    assert guesses["Amount"].result.found_format.description() == (
        "Money (High Precision) (0.#####)"
    )
    assert guesses["Paid"].result.found_format.data_type == DataType.BOOLEAN
    assert guesses["Share"].result.found_format.description() == "Percentage (0.#####%)"
    assert guesses["Customer"].result.found_format is None
    assert guesses["Notes"].result.found_format is None
    assert guesses["Notes"].samples.values == ("first", "repeat")


def test_guess_columns_keeps_source_order():
    guesses = guess_columns(_orders_source())

    assert [guess.column.name for guess in guesses] == [
        "OrderID",
        "Customer",
        "Ordered",
        "Amount",
        "Paid",
        "Share",
        "Notes",
    ]


def test_guess_columns_only_selected():
    settings = GuessSettings(columns=["Amount"])

    guesses = _by_name(guess_columns(_orders_source(), settings))

    assert guesses["Amount"].result.found
    assert guesses["Paid"].result is None
    assert "not selected" in guesses["Paid"].message


def test_guess_columns_id_columns_when_not_ignored():
    settings = GuessSettings(ignore_id_columns=False)

    guesses = _by_name(guess_columns(_orders_source(), settings))

    assert guesses["OrderID"].result.found_format.data_type == DataType.INTEGER


def test_guess_columns_skips_committed_formats():
    committed = [
        Column("Amount", ValueFormat(DataType.INTEGER)),
        Column("Paid", ignore=True),
    ]

    guesses = _by_name(guess_columns(_orders_source(), columns=committed))

    assert "already set to Integer" in guesses["Amount"].message
    assert "ignored" in guesses["Paid"].message


def test_guess_columns_uses_committed_date_format():
    committed_format = ValueFormat(
        DataType.DATETIME, date_format="yyyy/MM/dd", date_separator="-"
    )
    source = DataFrameRowSource(pd.DataFrame({"Ordered": ["2023-01-05", "2023-02-28"]}))

    guesses = guess_columns(
        source, GuessSettings(min_samples=10), columns=[Column("Ordered", committed_format)]
    )

    assert guesses[0].result.found_format == committed_format


def test_guess_columns_uses_configured_date_format():
    source = DataFrameRowSource(pd.DataFrame({"Shipped": ["05.01.2023", "28.02.2023"]}))

    guesses = guess_columns(source, GuessSettings(min_samples=10, date_format="dd/MM/yyyy"))

    found = guesses[0].result.found_format
    assert found.date_format == "dd/MM/yyyy"
    assert found.date_separator == "."


def test_guess_columns_suggested_column():
    guesses = _by_name(guess_columns(_orders_source()))

    suggested = guesses["Paid"].suggested_column
    assert suggested.name == "Paid"
    assert suggested.value_format.data_type == DataType.BOOLEAN
    assert guesses["Customer"].suggested_column == guesses["Customer"].column


def test_guess_columns_disabled():
    guesses = guess_columns(_orders_source(), GuessSettings(enabled=False))

    assert all(guess.result is None for guess in guesses)
    assert "guessing disabled" in guesses[1].message


def test_guess_columns_canceled():
    token = CancellationToken()
    token.cancel()

    guesses = guess_columns(_orders_source(), cancellation_token=token)

    assert all(guess.result is None for guess in guesses)


def test_guess_columns_validates_settings():
    with pytest.raises(ValidationError):
        guess_columns(_orders_source(), GuessSettings(sample_values=0))


def test_guess_columns_records_profile():
    profile: dict[str, float] = {}

    guess_columns(_orders_source(), profile=profile)

    assert set(profile) == {"collect_samples", "guess_formats"}


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("OrderID", 2),
        ("CustomerId", 2),
        ("Order ID", 3),
        ("Invoice Ref", 4),
        ("InvoiceRef", 3),
        ("Status Text", 5),
        ("Guid", 0),
        ("Name", 0),
        ("", 0),
    ],
)
def test_id_column_suffix(name, expected):
    assert id_column_suffix(name) == expected


def test_few_dates_follow_the_date_format_of_earlier_columns():
    frame = pd.DataFrame(
        {
            "Ordered": ["2023-01-05", "2023-02-28", "2023-12-31", "2023-03-15", "2023-03-16"],
            "Shipped": ["2023-01-07", "2023-03-01", "", "", ""],
        }
    )

    guesses = guess_columns(DataFrameRowSource(frame))

    ordered_format = guesses[0].result.found_format
    assert ordered_format.data_type == DataType.DATETIME
    assert guesses[1].result.found_format == ordered_format


def test_few_dates_alone_are_not_guessed():
    frame = pd.DataFrame({"Shipped": ["2023-01-07", "2023-03-01"]})

    guesses = guess_columns(DataFrameRowSource(frame))

    assert guesses[0].result.found_format is None


def test_common_date_format_prefers_most_used():
    day_first = ValueFormat(DataType.DATETIME, date_format="dd/MM/yyyy")
    iso = ValueFormat(DataType.DATETIME, date_format="yyyy-MM-dd")
    columns = [
        Column("A", day_first),
        Column("B", iso),
        Column("C", iso),
        Column("D", day_first, ignore=True),
        Column("E", day_first, ignore=True),
        Column("F"),
    ]

    assert common_date_format(columns) == iso
    assert common_date_format([Column("F")]) is None
