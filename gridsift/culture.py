"""Locale settings used while guessing formats.

The process-wide default is populated once and only replaced through
set_default_locale, which callers invoke when the user changes preferences.
Inference code receives a LocaleConfig explicitly instead of reading it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from gridsift.exceptions import ValidationError

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class LocaleConfig:
    """Number and date conventions of a culture."""

    decimal_separator: str = "."
    group_separator: str = ","
    date_separator: str = "/"
    time_separator: str = ":"
    short_date_pattern: str = "M/d/yyyy"
    long_date_pattern: str = "dddd, MMMM d, yyyy"
    short_time_pattern: str = "h:mm tt"
    long_time_pattern: str = "h:mm:ss tt"
    month_names: tuple[str, ...] = _MONTH_NAMES
    abbreviated_month_names: tuple[str, ...] = field(
        default=tuple(name[:3] for name in _MONTH_NAMES)
    )
    day_names: tuple[str, ...] = _DAY_NAMES
    abbreviated_day_names: tuple[str, ...] = field(default=tuple(name[:3] for name in _DAY_NAMES))
    am_designator: str = "AM"
    pm_designator: str = "PM"

    def validate(self) -> None:
        """
        Validate the locale values.

        Raises:
            ValidationError: If separators clash or name tables are incomplete
        """
        if not self.decimal_separator:
            raise ValidationError("decimal_separator must not be empty")
        if self.decimal_separator == self.group_separator:
            raise ValidationError("decimal_separator and group_separator must differ")
        if len(self.month_names) != 12 or len(self.abbreviated_month_names) != 12:
            raise ValidationError("month name tables must contain 12 entries")
        if len(self.day_names) != 7 or len(self.abbreviated_day_names) != 7:
            raise ValidationError("day name tables must contain 7 entries")

    def date_time_patterns(self) -> list[str]:
        """Short/long date and time patterns plus their combinations."""
        patterns = [
            self.short_date_pattern,
            self.long_date_pattern,
            f"{self.short_date_pattern} {self.short_time_pattern}",
            f"{self.short_date_pattern} {self.long_time_pattern}",
            f"{self.long_date_pattern} {self.long_time_pattern}",
        ]
        seen: set[str] = set()
        unique = []
        for pattern in patterns:
            if pattern and pattern not in seen:
                seen.add(pattern)
                unique.append(pattern)
        return unique


INVARIANT_LOCALE = LocaleConfig()

_lock = threading.Lock()
_default_locale = INVARIANT_LOCALE


def get_default_locale() -> LocaleConfig:
    """Return the process-wide default locale."""
    return _default_locale


def set_default_locale(locale: LocaleConfig) -> None:
    """Replace the process-wide default locale (preferences changed)."""
    global _default_locale

    locale.validate()
    with _lock:
        _default_locale = locale
