"""Tests for the gridsift.filtering.composer module."""

from __future__ import annotations

import pandas as pd
import pytest

from gridsift.exceptions import ColumnNotFoundError, FilterExpressionError
from gridsift.filtering.composer import FilterComposer, combine_filters
from gridsift.filtering.logic import ColumnFilterLogic
from gridsift.filtering.view import DataView
from gridsift.models import Column
from gridsift.value_format import DataType, ValueFormat


@pytest.fixture
def view():
    raw = pd.DataFrame(
        {
            "Name": ["Alice", "Bob", "Carol", "Dave"],
            "Amount": ["12.5", "7", "", "3"],
        }
    )
    return DataView.from_frame(raw, [Column("Amount", ValueFormat(DataType.NUMERIC))])


def _name_is(value):
    return ColumnFilterLogic.for_value("Name", DataType.STRING, value)


def _amount_above(value):
    return ColumnFilterLogic.for_operator("Amount", DataType.NUMERIC, ">", value)


def test_combine_filters_follows_column_order():
    logics = {"Name": _name_is("Bob"), "Amount": _amount_above(5)}

    combined = combine_filters(logics, ["Amount", "Name"])

    assert combined == "([Amount] > 5) AND ([Name] = 'Bob')"


def test_combine_filters_skips_inactive_and_appends_unknown():
    logics = {
        "Other": _name_is("x"),
        "Name": _name_is("Bob").deactivated(),
        "Amount": _amount_above(5),
    }

    combined = combine_filters(logics, ["Name", "Amount"])

    assert combined == "([Amount] > 5) AND ([Name] = 'x')"


def test_apply_filters_sets_row_filter(view):
    composer = FilterComposer(view)
    composer.set_filter(_amount_above(5))

    assert composer.apply_filters() is True
    assert view.row_filter == "([Amount] > 5)"
    assert view.visible()["Name"].tolist() == ["Alice", "Bob"]


def test_apply_filters_twice_reports_no_change(view):
    composer = FilterComposer(view)
    composer.set_filter(_amount_above(5))

    composer.apply_filters()

    assert composer.apply_filters() is False


def test_apply_filters_without_filters_is_no_change(view):
    assert FilterComposer(view).apply_filters() is False


def test_replacing_a_filter_changes_the_row_filter(view):
    composer = FilterComposer(view)
    composer.set_filter(_amount_above(5))
    composer.apply_filters()

    composer.set_filter(_amount_above(10))

    assert composer.apply_filters() is True
    assert len(view) == 1


def test_filters_combine_with_and(view):
    composer = FilterComposer(view)
    composer.set_filter(_amount_above(5))
    composer.set_filter(_name_is("bob"))

    composer.apply_filters()

    assert view.row_filter == "([Name] = 'bob') AND ([Amount] > 5)"
    assert view.visible()["Name"].tolist() == ["Bob"]


def test_deactivate_and_remove(view):
    composer = FilterComposer(view)
    composer.set_filter(_name_is("Bob"))
    composer.apply_filters()

    assert composer.deactivate("name") is True
    assert composer.deactivate("name") is False
    assert composer.apply_filters() is True
    assert len(view) == 4
    assert composer.get_filter("Name").active is False

    assert composer.remove_filter("Name") is True
    assert composer.remove_filter("Name") is False
    assert composer.get_filter("Name") is None


def test_unknown_column_is_rejected(view):
    composer = FilterComposer(view)

    with pytest.raises(ColumnNotFoundError):
        composer.set_filter(ColumnFilterLogic.for_value("Missing", DataType.STRING, "x"))


def test_reset_columns_drops_filters_of_removed_columns(view):
    composer = FilterComposer(view)
    composer.set_filter(_name_is("Bob"))
    composer.set_filter(_amount_above(5))

    composer.reset_columns(["Amount"])

    assert list(composer.filters) == ["Amount"]
    assert composer.column_order == ["Amount"]


def test_clear(view):
    composer = FilterComposer(view)
    composer.set_filter(_name_is("Bob"))
    composer.apply_filters()

    composer.clear()

    assert composer.combined_expression() == ""
    assert composer.apply_filters() is True
    assert view.row_filter == ""


def test_invalid_combined_expression_keeps_view_filter(view):
    composer = FilterComposer(view)
    composer.set_filter(_name_is("Bob"))
    composer.apply_filters()
    composer.set_filter(ColumnFilterLogic("Amount", expression="[Amount] >", active=True))

    with pytest.raises(FilterExpressionError):
        composer.apply_filters()

    assert view.row_filter == "([Name] = 'Bob')"
