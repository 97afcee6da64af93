"""Tests for the gridsift.view_settings module."""

from __future__ import annotations

import json
from datetime import datetime

import pandas as pd
import pytest

from gridsift.exceptions import ValidationError
from gridsift.filtering.composer import FilterComposer
from gridsift.filtering.logic import ColumnFilterLogic, ValueFilter
from gridsift.filtering.view import DataView
from gridsift.models import Column
from gridsift.value_format import DataType, ValueFormat
from gridsift.view_settings import (
    ColumnSetting,
    dump_view_settings,
    load_view_settings,
    restore_filters,
    settings_for_view,
)


@pytest.fixture
def view():
    raw = pd.DataFrame(
        {
            "Name": ["Alice", "Bob", "Carol"],
            "Amount": ["12.5", "7", "3"],
            "Ordered": ["2023-01-05", "2023-01-06", "2023-01-07"],
        }
    )
    return DataView.from_frame(
        raw,
        [
            Column("Amount", ValueFormat(DataType.NUMERIC)),
            Column("Ordered", ValueFormat(DataType.DATETIME, date_format="yyyy-MM-dd")),
        ],
    )


def test_settings_for_view(view):
    settings = settings_for_view(view)

    assert [setting.data_property_name for setting in settings] == ["Name", "Amount", "Ordered"]
    assert [setting.display_index for setting in settings] == [0, 1, 2]
    assert all(setting.visible and setting.width == 100 for setting in settings)


def test_dump_uses_stored_key_names(view):
    composer = FilterComposer(view)
    composer.set_filter(ColumnFilterLogic.for_operator("Amount", DataType.NUMERIC, ">", "5"))
    composer.set_filter(
        ColumnFilterLogic.create(
            "Name",
            value_filters=[ValueFilter("([Name] = 'Bob')", "Bob")],
        )
    )

    data = json.loads(dump_view_settings(settings_for_view(view), composer))

    assert data[0]["DataPropertyName"] == "Name"
    assert data[0]["ValueFilters"] == [{"SQLCondition": "([Name] = 'Bob')", "Display": "Bob"}]
    assert data[0]["Operator"] == ""
    assert data[1]["Operator"] == ">"
    assert data[1]["ValueText"] == "5"
    assert data[1]["ValueFilters"] == []
    assert data[2]["Operator"] == ""
    assert data[2]["ValueDate"] is None


def test_dump_leaves_out_inactive_filters(view):
    composer = FilterComposer(view)
    composer.set_filter(
        ColumnFilterLogic.for_operator("Amount", DataType.NUMERIC, ">", "5").deactivated()
    )

    data = json.loads(dump_view_settings(settings_for_view(view), composer))

    assert data[1]["Operator"] == ""


def test_dump_and_restore_round_trip(view):
    composer = FilterComposer(view)
    composer.set_filter(ColumnFilterLogic.for_operator("Amount", DataType.NUMERIC, ">", "5"))
    composer.set_filter(
        ColumnFilterLogic.for_operator("Ordered", DataType.DATETIME, "=", datetime(2023, 1, 6))
    )
    text = dump_view_settings(settings_for_view(view), composer)

    restored = FilterComposer(view)
    count = restore_filters(load_view_settings(text), restored)
    restored.apply_filters()

    assert count == 2
    assert restored.combined_expression() == composer.combined_expression()
    assert view.visible()["Name"].tolist() == ["Bob"]


def test_value_filters_take_precedence_over_operator(view):
    setting = ColumnSetting(
        data_property_name="Name",
        operator="=",
        value_text="Alice",
        value_filters=[{"SQLCondition": "([Name] = 'Carol')", "Display": "Carol"}],
    )
    composer = FilterComposer(view)

    restore_filters([setting], composer)

    assert composer.get_filter("Name").expression == "([Name] = 'Carol')"


def test_restore_skips_unknown_columns_and_bad_operators(view):
    settings = load_view_settings(
        json.dumps(
            [
                {"DataPropertyName": "Gone", "Operator": "=", "ValueText": "x"},
                {"DataPropertyName": "amount", "Operator": "…xxx…", "ValueText": "1"},
                {"DataPropertyName": "Name", "Operator": "=", "ValueText": "Bob"},
            ]
        )
    )
    composer = FilterComposer(view)

    count = restore_filters(settings, composer)

    assert count == 1
    assert list(composer.filters) == ["Name"]


def test_restore_reorders_columns(view):
    settings = [
        ColumnSetting(data_property_name="Ordered", display_index=0),
        ColumnSetting(data_property_name="Name", display_index=1),
    ]
    composer = FilterComposer(view)

    restore_filters(settings, composer)

    assert composer.column_order == ["Ordered", "Name", "Amount"]


def test_load_view_settings_empty_text():
    assert load_view_settings("") == []
    assert load_view_settings("   ") == []


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        '[{"Visible": true}]',
        '[{"DataPropertyName": "A", "Sort": 3}]',
        '[{"DataPropertyName": "A", "Unknown": 1}]',
    ],
)
def test_load_view_settings_rejects_invalid(text):
    with pytest.raises(ValidationError) as exc_info:
        load_view_settings(text)

    assert "Invalid view settings" in str(exc_info.value)
