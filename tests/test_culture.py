"""Tests for the gridsift.culture module."""

import pytest

from gridsift.culture import (
    INVARIANT_LOCALE,
    LocaleConfig,
    get_default_locale,
    set_default_locale,
)
from gridsift.exceptions import ValidationError


@pytest.fixture(autouse=True)
def restore_default_locale():
    yield
    set_default_locale(INVARIANT_LOCALE)


def test_invariant_locale_values():
    """Test the conventions of the invariant locale."""
    assert INVARIANT_LOCALE.decimal_separator == "."
    assert INVARIANT_LOCALE.group_separator == ","
    assert INVARIANT_LOCALE.short_date_pattern == "M/d/yyyy"
    assert INVARIANT_LOCALE.abbreviated_month_names[8] == "Sep"
    assert INVARIANT_LOCALE.abbreviated_day_names[0] == "Mon"


def test_date_time_patterns_combine_date_and_time():
    """Test that date and time patterns are combined without duplicates."""
    patterns = INVARIANT_LOCALE.date_time_patterns()

    assert patterns == [
        "M/d/yyyy",
        "dddd, MMMM d, yyyy",
        "M/d/yyyy h:mm tt",
        "M/d/yyyy h:mm:ss tt",
        "dddd, MMMM d, yyyy h:mm:ss tt",
    ]


def test_date_time_patterns_drop_duplicates():
    """Test that identical short and long patterns are listed once."""
    locale = LocaleConfig(short_date_pattern="yyyy-MM-dd", long_date_pattern="yyyy-MM-dd")

    patterns = locale.date_time_patterns()

    assert patterns.count("yyyy-MM-dd") == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"decimal_separator": ""},
        {"decimal_separator": ",", "group_separator": ","},
        {"month_names": ("January",)},
        {"abbreviated_day_names": ("Mon", "Tue")},
    ],
)
def test_validate_rejects_broken_locales(kwargs):
    """Test that inconsistent locales are rejected."""
    with pytest.raises(ValidationError):
        LocaleConfig(**kwargs).validate()


def test_set_default_locale():
    """Test replacing the process-wide default locale."""
    german = LocaleConfig(decimal_separator=",", group_separator=".", date_separator=".")

    set_default_locale(german)

    assert get_default_locale() is german


def test_set_default_locale_rejects_invalid():
    """Test that an invalid locale does not replace the default."""
    with pytest.raises(ValidationError):
        set_default_locale(LocaleConfig(decimal_separator=""))

    assert get_default_locale() is INVARIANT_LOCALE
