"""Tests for the gridsift.inference.detectors module."""

from __future__ import annotations

from datetime import datetime

from gridsift.culture import LocaleConfig
from gridsift.inference.detectors import (
    MatchKind,
    detect_boolean,
    detect_date_with_format,
    detect_datetime,
    detect_escaped_text,
    detect_guid,
    detect_number,
    detect_serial_date,
    has_significant_leading_zero,
)
from gridsift.value_format import DataType, ValueFormat


def test_boolean_mixed_case_literals_match_totally():
    outcome = detect_boolean(["true", "FALSE", "True"])

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.value_format.data_type == DataType.BOOLEAN
    assert outcome.value_format.true_value == "true"
    assert outcome.value_format.false_value == "FALSE"


def test_boolean_needs_at_most_two_distinct_values():
    outcome = detect_boolean(["1", "0", "-1"])

    assert outcome.kind == MatchKind.PARTIAL


def test_boolean_configured_literals():
    outcome = detect_boolean(["ok", "bad", "OK"], true_value="ok", false_value="bad")

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.value_format.true_value == "ok"


def test_boolean_reports_non_matching_examples():
    outcome = detect_boolean(["yes", "no", "maybe", "perhaps"])

    assert outcome.kind == MatchKind.PARTIAL
    assert outcome.matched == 2
    assert outcome.non_matching == ("maybe", "perhaps")


def test_guid_with_and_without_braces():
    samples = [
        "{6F9619FF-8B86-D011-B42D-00C04FC964FF}",
        "6f9619ff-8b86-d011-b42d-00c04fc964fe",
    ]
    assert detect_guid(samples).kind == MatchKind.TOTAL
    assert detect_guid(samples + ["not-a-guid"]).kind == MatchKind.PARTIAL


def test_leading_zero_detection():
    assert has_significant_leading_zero("0123")
    assert has_significant_leading_zero("-012")
    assert not has_significant_leading_zero("0.5")
    assert not has_significant_leading_zero("0")
    assert not has_significant_leading_zero("10")


def test_number_rejects_leading_zero_values():
    outcome = detect_number(["0123", "0456"])

    assert outcome.kind == MatchKind.NONE


def test_number_integer():
    outcome = detect_number(["1", "22", "-333", "(4)"])

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.data_type == DataType.INTEGER
    assert outcome.value_format.number_format == "0"


def test_number_outside_int32_is_numeric():
    outcome = detect_number(["1", "3000000000"])

    assert outcome.data_type == DataType.NUMERIC


def test_number_with_fraction_is_numeric():
    outcome = detect_number(["1.5", "2", "3.25"])

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.data_type == DataType.NUMERIC
    assert outcome.value_format.decimal_separator == "."


def test_number_exponent_is_double():
    outcome = detect_number(["1.5E+3", "2e-2"])

    assert outcome.data_type == DataType.DOUBLE


def test_number_group_separator():
    outcome = detect_number(["1,234.50", "12,345", "7"])

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.value_format.group_separator == ","
    assert outcome.value_format.decimal_separator == "."
    assert outcome.value_format.number_format.startswith("#,##0")


def test_number_decimal_comma_from_locale():
    german = LocaleConfig(decimal_separator=",", group_separator=".")

    outcome = detect_number(["1.234,5", "2,75"], german)

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.value_format.decimal_separator == ","
    assert outcome.value_format.group_separator == "."


def test_number_badly_placed_group_separator_fails():
    outcome = detect_number(["1,23,456"])

    assert outcome.kind == MatchKind.NONE


def test_number_currency_symbols_removed():
    outcome = detect_number(["$12.00", "€3.50"])

    assert outcome.kind == MatchKind.TOTAL
    assert detect_number(["$12.00"], remove_currency_symbols=False).kind == MatchKind.NONE


def test_percentage_requires_suffix_on_every_value():
    assert detect_number(["12.5%", "33.0%"], percentage=True).kind == MatchKind.TOTAL
    partial = detect_number(["12.5%", "33.0"], percentage=True)
    assert partial.kind == MatchKind.PARTIAL
    assert partial.non_matching == ("33.0",)


def test_per_mille_format():
    outcome = detect_number(["5‰", "12‰"], percentage=True)

    assert outcome.value_format.number_format.endswith("‰")


def test_datetime_iso_dates():
    outcome = detect_datetime(["2023-01-05", "2023-02-28", "2023-12-31"])

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.value_format.date_format == "yyyy-MM-dd"
    assert outcome.formats == ("yyyy-MM-dd",)


def test_datetime_ambiguous_day_month_keeps_all_formats():
    outcome = detect_datetime(["10/05/2022", "11/06/2022"])

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.formats == ("MM/dd/yyyy", "dd/MM/yyyy")
    assert outcome.value_format.date_format == "MM/dd/yyyy;dd/MM/yyyy"


def test_datetime_day_above_twelve_resolves_order():
    outcome = detect_datetime(["25/12/2022", "01/02/2022"])

    assert outcome.formats == ("dd/MM/yyyy",)


def test_datetime_single_letter_pattern_needs_same_length():
    outcome = detect_datetime(["1/5/2023", "12/31/2023"])

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.formats == ("M/d/yyyy",)


def test_datetime_other_separator():
    outcome = detect_datetime(["05.01.2023", "28.02.2023"])

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.value_format.date_separator == "."
    assert "dd/MM/yyyy" in outcome.formats


def test_datetime_trailing_z_is_ignored():
    outcome = detect_datetime(["2023-01-05T10:00:00Z", "2023-01-06T11:30:00Z"])

    assert outcome.kind == MatchKind.TOTAL
    assert "yyyy-MM-ddTHH:mm:ss" in outcome.formats


def test_datetime_merges_compatible_formats():
    outcome = detect_datetime(["2023-01-05 10:00:00", "2023-01-06 11:30"])

    assert outcome.kind == MatchKind.TOTAL
    assert set(outcome.formats) == {"yyyy-MM-dd HH:mm:ss", "yyyy-MM-dd HH:mm"}


def test_datetime_partial_match_reports_misses():
    outcome = detect_datetime(["2023-01-05", "2023-01-06", "2023-01-07", "later"])

    assert outcome.kind == MatchKind.PARTIAL
    assert outcome.matched == 3
    assert outcome.non_matching == ("later",)


def test_date_with_known_format():
    value_format = ValueFormat(DataType.DATETIME, date_format="dd.MM.yyyy")

    assert detect_date_with_format(["05.01.2023"], value_format).kind == MatchKind.TOTAL
    assert detect_date_with_format(["2023-01-05"], value_format).kind == MatchKind.NONE


def test_serial_dates_within_window():
    now = datetime(2024, 6, 1)

    outcome = detect_serial_date(["45000", "45123.5"], now=now)

    assert outcome.kind == MatchKind.TOTAL
    assert outcome.value_format.is_serial_date


def test_serial_dates_outside_window_fail():
    now = datetime(2024, 6, 1)

    outcome = detect_serial_date(["1", "2"], now=now)

    assert outcome.kind == MatchKind.NONE


def test_escaped_text():
    assert detect_escaped_text(["line<br>break", "a<BR/>b"]).data_type == DataType.TEXT_TO_HTML
    unescape = detect_escaped_text(["tab\\there", "new\\nline"])
    assert unescape.data_type == DataType.TEXT_UNESCAPE
    assert unescape.kind == MatchKind.TOTAL
    assert detect_escaped_text(["plain"]).kind == MatchKind.NONE
