"""Parse and format date/time values with custom date patterns.

Patterns use the familiar custom date format letters (``yyyy``, ``MM``,
``dd``, ``HH``, ``mm``, ``ss``, ``FFF``, ``tt``, ``zzz`` ...). A ``/`` in a
pattern stands for the date separator and a ``:`` for the time separator,
so one pattern covers ``01/05/2023`` as well as ``01.05.2023``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache

from gridsift.constants import LIST_DELIMITER, SERIAL_DATE_MAX, SERIAL_DATE_MIN
from gridsift.culture import INVARIANT_LOCALE, LocaleConfig

SERIAL_EPOCH = datetime(1899, 12, 30)
_TIME_ONLY_DATE = date(1899, 12, 30)

_SPECIFIERS = set("yMdHhmsfFtzKg")
_DATE_SEP = "/"
_TIME_SEP = ":"


@dataclass(frozen=True)
class _Token:
    kind: str
    count: int = 0
    text: str = ""


@lru_cache(maxsize=512)
def tokenize(pattern: str) -> tuple[_Token, ...]:
    """Split a custom date pattern into specifier and literal tokens."""
    tokens: list[_Token] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch in ("'", '"'):
            end = pattern.find(ch, i + 1)
            if end == -1:
                end = len(pattern)
            tokens.append(_Token("literal", text=pattern[i + 1 : end]))
            i = end + 1
        elif ch == "\\" and i + 1 < len(pattern):
            tokens.append(_Token("literal", text=pattern[i + 1]))
            i += 2
        elif ch == "%":
            i += 1
        elif ch in _SPECIFIERS:
            j = i
            while j < len(pattern) and pattern[j] == ch:
                j += 1
            tokens.append(_Token(ch, count=j - i))
            i = j
        elif ch == _DATE_SEP:
            tokens.append(_Token("date_sep"))
            i += 1
        elif ch == _TIME_SEP:
            tokens.append(_Token("time_sep"))
            i += 1
        else:
            tokens.append(_Token("literal", text=ch))
            i += 1
    return tuple(tokens)


def _alternation(names: tuple[str, ...]) -> str:
    ordered = sorted(names, key=len, reverse=True)
    return "(" + "|".join(re.escape(name) for name in ordered) + ")"


@dataclass(frozen=True)
class CompiledPattern:
    pattern: str
    regex: re.Pattern[str]
    groups: tuple[_Token, ...]
    min_length: int
    max_length: int


def _numeric(count: int, widest: int = 2) -> tuple[str, int, int]:
    if count == 1:
        return rf"(\d{{1,{widest}}})", 1, widest
    return rf"(\d{{{count}}})", count, count


@lru_cache(maxsize=1024)
def compile_pattern(
    pattern: str, date_separator: str, time_separator: str, locale: LocaleConfig
) -> CompiledPattern:
    """Turn a pattern into an anchored regex plus its possible length range."""
    parts: list[str] = []
    groups: list[_Token] = []
    min_len = 0
    max_len = 0
    for token in tokenize(pattern):
        kind = token.kind
        if kind == "literal":
            piece, low, high = re.escape(token.text), len(token.text), len(token.text)
        elif kind == "date_sep":
            piece, low, high = re.escape(date_separator), len(date_separator), len(date_separator)
        elif kind == "time_sep":
            piece, low, high = re.escape(time_separator), len(time_separator), len(time_separator)
        elif kind == "y":
            if token.count <= 2:
                piece, low, high = _numeric(token.count)
            else:
                piece, low, high = rf"(\d{{{token.count},4}})", token.count, max(token.count, 4)
        elif kind in ("M", "d") and token.count >= 3:
            if kind == "M":
                names = (
                    locale.abbreviated_month_names if token.count == 3 else locale.month_names
                )
            else:
                names = locale.abbreviated_day_names if token.count == 3 else locale.day_names
            piece = _alternation(names)
            low = min(len(name) for name in names)
            high = max(len(name) for name in names)
        elif kind in ("M", "d", "H", "h", "m", "s"):
            piece, low, high = _numeric(min(token.count, 2))
        elif kind == "f":
            piece, low, high = rf"(\d{{{token.count}}})", token.count, token.count
        elif kind == "F":
            piece, low, high = rf"(\d{{1,{token.count}}})?", 0, token.count
            if parts and parts[-1] == re.escape("."):
                parts.pop()
                min_len -= 1
                piece = rf"(?:\.(\d{{1,{token.count}}}))?"
                high += 1
        elif kind == "t":
            designators = (locale.am_designator, locale.pm_designator)
            if token.count == 1:
                designators = tuple(d[:1] for d in designators)
            piece = _alternation(designators)
            low = min(len(d) for d in designators)
            high = max(len(d) for d in designators)
        elif kind == "z":
            if token.count == 1:
                piece, low, high = r"([+-]\d{1,2})", 2, 3
            elif token.count == 2:
                piece, low, high = r"([+-]\d{2})", 3, 3
            else:
                piece, low, high = r"([+-]\d{2}:?\d{2})", 5, 6
        elif kind == "K":
            piece, low, high = r"(Z|[+-]\d{2}:?\d{2})?", 0, 6
        else:  # era
            piece, low, high = r"(?:A\.?D\.?)?", 0, 4
        # every specifier except the era captures exactly one group
        if kind not in ("literal", "date_sep", "time_sep", "g"):
            groups.append(token)
        parts.append(piece)
        min_len += low
        max_len += high
    regex = re.compile("^" + "".join(parts) + "$", re.IGNORECASE)
    return CompiledPattern(pattern, regex, tuple(groups), max(min_len, 0), max_len)


def _index_of(name: str, names: tuple[str, ...]) -> int:
    lowered = name.lower()
    for index, candidate in enumerate(names):
        if candidate.lower() == lowered:
            return index
    return -1


def _parse_offset(text: str) -> timezone:
    if text.upper() == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours = int(digits[:2]) if len(digits) >= 2 else int(digits)
    minutes = int(digits[2:4]) if len(digits) >= 4 else 0
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_exact(
    text: str,
    pattern: str,
    date_separator: str = "/",
    time_separator: str = ":",
    locale: LocaleConfig = INVARIANT_LOCALE,
) -> datetime | None:
    """Parse text with exactly one pattern, None when it does not fit."""
    compiled = compile_pattern(pattern, date_separator, time_separator, locale)
    if not compiled.min_length <= len(text) <= compiled.max_length:
        return None
    match = compiled.regex.match(text)
    if match is None:
        return None

    year = month = day = None
    hour = minute = second = microsecond = 0
    pm: bool | None = None
    weekday: int | None = None
    tzinfo = None
    for token, value in zip(compiled.groups, match.groups()):
        if value is None:
            continue
        kind = token.kind
        if kind == "y":
            year = int(value)
            if token.count <= 2:
                year += 2000 if year <= 49 else 1900
        elif kind == "M":
            if token.count >= 3:
                names = (
                    locale.abbreviated_month_names if token.count == 3 else locale.month_names
                )
                month = _index_of(value, names) + 1
            else:
                month = int(value)
        elif kind == "d":
            if token.count >= 3:
                names = locale.abbreviated_day_names if token.count == 3 else locale.day_names
                weekday = _index_of(value, names)
            else:
                day = int(value)
        elif kind in ("H", "h"):
            hour = int(value)
        elif kind == "m":
            minute = int(value)
        elif kind == "s":
            second = int(value)
        elif kind in ("f", "F"):
            microsecond = int(value[:6].ljust(6, "0"))
        elif kind == "t":
            pm = value.lower() == locale.pm_designator[: len(value)].lower()
        elif kind in ("z", "K"):
            tzinfo = _parse_offset(value)

    if pm is not None:
        if hour > 12:
            return None
        hour = hour % 12 + (12 if pm else 0)

    try:
        if year is None and month is None and day is None:
            base = _TIME_ONLY_DATE
        else:
            base = date(year or 1, month or 1, day or 1)
        result = datetime(
            base.year, base.month, base.day, hour, minute, second, microsecond, tzinfo=tzinfo
        )
    except ValueError:
        return None
    if weekday is not None and result.weekday() != weekday:
        return None
    return result


def parse_any(
    text: str,
    formats: str,
    date_separator: str = "/",
    time_separator: str = ":",
    locale: LocaleConfig = INVARIANT_LOCALE,
) -> datetime | None:
    """Parse with the first of several patterns separated by the list delimiter."""
    for pattern in split_formats(formats):
        parsed = parse_exact(text, pattern, date_separator, time_separator, locale)
        if parsed is not None:
            return parsed
    return None


def split_formats(formats: str) -> list[str]:
    return [part for part in formats.split(LIST_DELIMITER) if part.strip()]


def _format_offset(value: datetime, count: int) -> str:
    offset = value.utcoffset() or timedelta(0)
    sign = "-" if offset < timedelta(0) else "+"
    total = abs(int(offset.total_seconds())) // 60
    hours, minutes = divmod(total, 60)
    if count == 1:
        return f"{sign}{hours}"
    if count == 2:
        return f"{sign}{hours:02d}"
    return f"{sign}{hours:02d}:{minutes:02d}"


def format_datetime(
    value: datetime,
    pattern: str,
    date_separator: str = "/",
    time_separator: str = ":",
    locale: LocaleConfig = INVARIANT_LOCALE,
) -> str:
    """Render value with a custom date pattern."""
    out: list[str] = []
    for token in tokenize(pattern):
        kind, count = token.kind, token.count
        if kind == "literal":
            out.append(token.text)
        elif kind == "date_sep":
            out.append(date_separator)
        elif kind == "time_sep":
            out.append(time_separator)
        elif kind == "y":
            if count == 1:
                out.append(str(value.year % 100))
            elif count == 2:
                out.append(f"{value.year % 100:02d}")
            else:
                out.append(str(value.year).zfill(count))
        elif kind == "M":
            if count >= 4:
                out.append(locale.month_names[value.month - 1])
            elif count == 3:
                out.append(locale.abbreviated_month_names[value.month - 1])
            else:
                out.append(str(value.month).zfill(count))
        elif kind == "d":
            if count >= 4:
                out.append(locale.day_names[value.weekday()])
            elif count == 3:
                out.append(locale.abbreviated_day_names[value.weekday()])
            else:
                out.append(str(value.day).zfill(count))
        elif kind == "H":
            out.append(str(value.hour).zfill(min(count, 2)))
        elif kind == "h":
            out.append(str(value.hour % 12 or 12).zfill(min(count, 2)))
        elif kind == "m":
            out.append(str(value.minute).zfill(min(count, 2)))
        elif kind == "s":
            out.append(str(value.second).zfill(min(count, 2)))
        elif kind == "f":
            out.append(f"{value.microsecond:06d}"[:count].ljust(count, "0"))
        elif kind == "F":
            digits = f"{value.microsecond:06d}"[:count].rstrip("0")
            if not digits and out and out[-1] == ".":
                out.pop()
            out.append(digits)
        elif kind == "t":
            designator = locale.pm_designator if value.hour >= 12 else locale.am_designator
            out.append(designator[:1] if count == 1 else designator)
        elif kind == "z":
            out.append(_format_offset(value, count))
        elif kind == "K":
            if value.tzinfo is not None:
                out.append(_format_offset(value, 3))
        elif kind == "g":
            out.append("A.D.")
    return "".join(out)


def has_single_letter_fields(pattern: str) -> bool:
    """True when a pattern contains variable-width numeric fields such as ``d`` or ``M``."""
    return any(
        token.kind in ("M", "d", "H", "h", "m", "s") and token.count == 1
        for token in tokenize(pattern)
    )


def has_time(pattern: str) -> bool:
    return any(token.kind in ("H", "h", "m", "s", "f", "F") for token in tokenize(pattern))


def has_date(pattern: str) -> bool:
    return any(token.kind in ("y", "M", "d") for token in tokenize(pattern))


_UNITS = (
    ("second", ("s", "f", "F")),
    ("minute", ("m",)),
    ("hour", ("H", "h")),
    ("day", ("d",)),
    ("month", ("M",)),
    ("year", ("y",)),
)


def finest_unit(pattern: str) -> str:
    """
    Smallest unit a pattern shows: second, minute, hour, day, month or year.

    Fractions of a second count as seconds. A pattern without any date or
    time field counts as day.
    """
    kinds = {token.kind for token in tokenize(pattern) if token.kind != "d" or token.count < 3}
    for unit, letters in _UNITS:
        if kinds.intersection(letters):
            return unit
    return "day"


def unit_period(value: datetime, unit: str) -> tuple[datetime, datetime]:
    """Start and end of the unit containing value, as naive datetimes."""
    start = value.replace(tzinfo=None, microsecond=0)
    if unit == "second":
        return start, start + timedelta(seconds=1)
    start = start.replace(second=0)
    if unit == "minute":
        return start, start + timedelta(minutes=1)
    start = start.replace(minute=0)
    if unit == "hour":
        return start, start + timedelta(hours=1)
    start = start.replace(hour=0)
    if unit == "day":
        return start, start + timedelta(days=1)
    start = start.replace(day=1)
    if unit == "month":
        if start.month == 12:
            return start, start.replace(year=start.year + 1, month=1)
        return start, start.replace(month=start.month + 1)
    start = start.replace(month=1)
    return start, start.replace(year=start.year + 1)


def effective_pattern(pattern: str, date_separator: str, time_separator: str) -> str:
    """Pattern text with the separator placeholders replaced."""
    pieces = []
    for token in tokenize(pattern):
        if token.kind == "date_sep":
            pieces.append(date_separator)
        elif token.kind == "time_sep":
            pieces.append(time_separator)
        elif token.kind == "literal":
            pieces.append(token.text)
        else:
            pieces.append(token.kind * token.count)
    return "".join(pieces)


def from_serial_date(value: float) -> datetime | None:
    """Convert an OLE Automation day count to a datetime."""
    if not SERIAL_DATE_MIN <= value < SERIAL_DATE_MAX:
        return None
    # negative values count days backwards but the fraction is still the time of day
    days = int(value)
    fraction = abs(value - days)
    return SERIAL_EPOCH + timedelta(days=days) + timedelta(days=fraction)


def to_serial_date(value: datetime) -> float:
    """Convert a datetime to an OLE Automation day count."""
    naive = value.replace(tzinfo=None)
    delta = naive - SERIAL_EPOCH
    days = delta.days
    fraction = delta.seconds / 86400 + delta.microseconds / 86400e6
    if days < 0:
        return days - fraction
    return days + fraction
