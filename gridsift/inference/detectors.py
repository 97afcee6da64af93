"""
Type detectors.

Each detector looks at a whole sample and reports a DetectorOutcome: the
data type it stands for, whether every value fit (TOTAL), some fit
(PARTIAL) or none did (NONE), the first values that did not fit and the
concrete ValueFormat that parses the fitting ones. Detectors are pure: no
logging, no shared state.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from gridsift import datetimes
from gridsift.constants import (
    DATE_SEPARATORS,
    DOUBLE_THRESHOLD,
    EXTRA_DATE_TIME_FORMATS,
    INT32_MAX,
    INT32_MIN,
    LIST_DELIMITER,
    MAX_NON_MATCHING_EXAMPLES,
    NUMBER_DECIMAL_SEPARATORS,
    NUMBER_GROUP_SEPARATORS,
    SERIAL_DATE_FORMAT,
    SERIAL_YEARS_AHEAD,
    SERIAL_YEARS_BACK,
)
from gridsift.culture import INVARIANT_LOCALE, LocaleConfig
from gridsift.numbers import has_exponent, parse_decimal, parse_number, strip_currency
from gridsift.value_format import DataType, ValueFormat, is_guid, parse_boolean

DETECT_BOOLEAN = "boolean"
DETECT_GUID = "guid"
DETECT_NUMERIC = "numeric"
DETECT_PERCENTAGE = "percentage"
DETECT_DATETIME = "datetime"
DETECT_SERIAL_DATE = "serial_date"
DETECT_ESCAPED_TEXT = "escaped_text"

ALL_DETECTORS = frozenset(
    {
        DETECT_BOOLEAN,
        DETECT_GUID,
        DETECT_NUMERIC,
        DETECT_PERCENTAGE,
        DETECT_DATETIME,
        DETECT_SERIAL_DATE,
        DETECT_ESCAPED_TEXT,
    }
)


class MatchKind(str, Enum):
    TOTAL = "total"
    PARTIAL = "partial"
    NONE = "none"


@dataclass(frozen=True)
class DetectorOutcome:
    """Result of one detector over a sample, tagged with the detected data type."""

    data_type: DataType
    kind: MatchKind
    matched: int
    total: int
    value_format: ValueFormat | None = None
    non_matching: tuple[str, ...] = ()
    formats: tuple[str, ...] = ()

    @property
    def ratio(self) -> float:
        return self.matched / self.total if self.total else 0.0

    @property
    def is_total(self) -> bool:
        return self.kind == MatchKind.TOTAL


def _kind(matched: int, total: int) -> MatchKind:
    if total and matched == total:
        return MatchKind.TOTAL
    if matched:
        return MatchKind.PARTIAL
    return MatchKind.NONE


class _Misses:
    """Counts values that did not fit and keeps the first few."""

    def __init__(self) -> None:
        self.count = 0
        self.examples: list[str] = []

    def add(self, value: str) -> None:
        self.count += 1
        if len(self.examples) < MAX_NON_MATCHING_EXAMPLES:
            self.examples.append(value)


def detect_boolean(
    samples: Sequence[str], true_value: str = "", false_value: str = ""
) -> DetectorOutcome:
    """
    Boolean literals in any case, e.g. ``true``/``FALSE`` or ``1``/``0``.

    A column only counts as boolean when it holds at most two distinct
    values; ``1``, ``0`` and ``-1`` together are numbers, not flags.
    """
    misses = _Misses()
    first_true = first_false = None
    distinct: set[str] = set()
    for value in samples:
        parsed = parse_boolean(value, true_value, false_value)
        if parsed is None:
            misses.add(value)
            continue
        distinct.add(value.casefold())
        if parsed and first_true is None:
            first_true = value
        elif not parsed and first_false is None:
            first_false = value
    matched = len(samples) - misses.count
    kind = _kind(matched, len(samples))
    if kind == MatchKind.TOTAL and len(distinct) > 2:
        kind = MatchKind.PARTIAL
    value_format = ValueFormat(
        DataType.BOOLEAN,
        true_value=first_true or true_value or "True",
        false_value=first_false or false_value or "False",
    )
    return DetectorOutcome(
        DataType.BOOLEAN,
        kind,
        matched,
        len(samples),
        value_format if matched else None,
        tuple(misses.examples),
    )


def detect_guid(samples: Sequence[str]) -> DetectorOutcome:
    """Dashed hexadecimal GUIDs, optionally in braces."""
    misses = _Misses()
    for value in samples:
        if not is_guid(value):
            misses.add(value)
    matched = len(samples) - misses.count
    return DetectorOutcome(
        DataType.GUID,
        _kind(matched, len(samples)),
        matched,
        len(samples),
        ValueFormat(DataType.GUID) if matched else None,
        tuple(misses.examples),
    )


def has_significant_leading_zero(text: str) -> bool:
    """True for text like ``0123`` where dropping the zero would change the value."""
    body = strip_currency(text).lstrip("(+-").lstrip()
    return len(body) > 1 and body[0] == "0" and body[1].isdigit()


def _ordered_candidates(
    preferred: str, candidates: Sequence[str], samples: Sequence[str], always: bool
) -> list[str]:
    ordered: list[str] = []
    if preferred and (always or any(preferred in value for value in samples)):
        ordered.append(preferred)
    for candidate in candidates:
        if candidate not in ordered and any(candidate in value for value in samples):
            ordered.append(candidate)
    return ordered


def _check_number(
    samples: Sequence[str],
    decimal_separator: str,
    group_separator: str,
    percentage: bool,
    remove_currency_symbols: bool,
) -> DetectorOutcome:
    misses = _Misses()
    has_fraction = False
    is_double = False
    outside_int32 = False
    grouped = False
    per_mille = 0
    for value in samples:
        if percentage and value[-1:] not in ("%", "‰"):
            misses.add(value)
            continue
        if has_significant_leading_zero(value):
            misses.add(value)
            continue
        parsed = parse_decimal(
            value,
            decimal_separator,
            group_separator,
            allow_percentage=percentage,
            remove_currency_symbols=remove_currency_symbols,
        )
        if parsed is None:
            misses.add(value)
            continue
        if decimal_separator in value:
            has_fraction = True
        if group_separator and group_separator in value:
            grouped = True
        if has_exponent(value) or abs(parsed) >= DOUBLE_THRESHOLD:
            is_double = True
        if parsed != parsed.to_integral_value() or not INT32_MIN <= parsed <= INT32_MAX:
            outside_int32 = True
        if value.endswith("‰"):
            per_mille += 1

    matched = len(samples) - misses.count
    prefix = "#,##0" if grouped else "0"
    if percentage:
        data_type = DataType.PERCENTAGE
        suffix = "‰" if matched and per_mille == matched else "%"
        number_format = f"{prefix}.#####{suffix}"
    elif is_double:
        data_type = DataType.DOUBLE
        number_format = f"{prefix}.#####"
    elif not has_fraction and not outside_int32:
        data_type = DataType.INTEGER
        number_format = prefix
    else:
        data_type = DataType.NUMERIC
        number_format = f"{prefix}.#####"

    value_format = ValueFormat(
        data_type,
        number_format=number_format,
        decimal_separator=decimal_separator,
        group_separator=group_separator if grouped else "",
        remove_currency_symbols=remove_currency_symbols,
    )
    return DetectorOutcome(
        data_type,
        _kind(matched, len(samples)),
        matched,
        len(samples),
        value_format if matched else None,
        tuple(misses.examples),
    )


def detect_number(
    samples: Sequence[str],
    locale: LocaleConfig = INVARIANT_LOCALE,
    percentage: bool = False,
    remove_currency_symbols: bool = True,
) -> DetectorOutcome:
    """
    Integer, Numeric or Double values; Percentage when ``percentage`` is set.

    Every decimal/group separator pairing seen in the sample is tried, the
    locale's own separators first. The first pairing that parses every
    value wins, otherwise the pairing that parsed the most values is
    reported as a partial match.
    """
    decimals = _ordered_candidates(
        locale.decimal_separator, NUMBER_DECIMAL_SEPARATORS, samples, always=True
    )
    groups = _ordered_candidates(
        locale.group_separator, NUMBER_GROUP_SEPARATORS, samples, always=False
    )
    groups.append("")

    best: DetectorOutcome | None = None
    for decimal_separator in decimals:
        for group_separator in groups:
            if decimal_separator == group_separator:
                continue
            outcome = _check_number(
                samples, decimal_separator, group_separator, percentage, remove_currency_symbols
            )
            if outcome.is_total:
                return outcome
            if best is None or outcome.matched > best.matched:
                best = outcome
    if best is None:
        data_type = DataType.PERCENTAGE if percentage else DataType.NUMERIC
        return DetectorOutcome(data_type, MatchKind.NONE, 0, len(samples))
    return best


def _strip_utc_marker(value: str) -> str:
    return value[:-1] if len(value) > 1 and value[-1] in ("Z", "z") else value


def date_candidates(locale: LocaleConfig = INVARIANT_LOCALE) -> list[str]:
    """Locale patterns followed by the fixed list of common non-locale patterns."""
    return list(dict.fromkeys([*locale.date_time_patterns(), *EXTRA_DATE_TIME_FORMATS]))


def _date_field_order(pattern: str) -> tuple[str, ...]:
    order: list[str] = []
    for token in datetimes.tokenize(pattern):
        if token.kind in ("y", "M") or (token.kind == "d" and token.count <= 2):
            if token.kind not in order:
                order.append(token.kind)
    return tuple(order)


def _fits(
    value: str, pattern: str, date_separator: str, time_separator: str, locale: LocaleConfig
) -> bool:
    parsed = datetimes.parse_exact(value, pattern, date_separator, time_separator, locale)
    if parsed is None:
        return False
    if datetimes.has_single_letter_fields(pattern):
        rendered = datetimes.format_datetime(
            parsed, pattern, date_separator, time_separator, locale
        )
        return len(rendered) == len(value)
    return True


def _separators_by_use(samples: Sequence[str], default: str) -> list[str]:
    counts = {sep: sum(1 for value in samples if sep in value) for sep in DATE_SEPARATORS}
    used = [sep for sep in DATE_SEPARATORS if counts[sep]]
    used.sort(key=lambda sep: counts[sep], reverse=True)
    return used or [default]


def _date_format(
    formats: Sequence[str], date_separator: str, time_separator: str, locale: LocaleConfig
) -> ValueFormat:
    month_names = None
    if locale.month_names != INVARIANT_LOCALE.month_names and any(
        "MMM" in pattern for pattern in formats
    ):
        month_names = locale.month_names
    return ValueFormat(
        DataType.DATETIME,
        date_format=LIST_DELIMITER.join(formats),
        date_separator=date_separator,
        time_separator=time_separator,
        month_names=month_names,
    )


def _cover(
    samples: Sequence[str], matches: dict[str, set[int]]
) -> tuple[list[str], set[int]]:
    """Greedy cover of the sample with patterns sharing one day/month/year order."""
    ranked = sorted(matches, key=lambda pattern: len(matches[pattern]), reverse=True)
    if not ranked or not matches[ranked[0]]:
        return [], set()
    order = _date_field_order(ranked[0])
    chosen = [ranked[0]]
    covered = set(matches[ranked[0]])
    while len(covered) < len(samples):
        best, gain = None, 0
        for pattern in ranked:
            if pattern in chosen or _date_field_order(pattern) != order:
                continue
            extra = len(matches[pattern] - covered)
            if extra > gain:
                best, gain = pattern, extra
        if best is None:
            break
        chosen.append(best)
        covered |= matches[best]
    return chosen, covered


def detect_datetime(
    samples: Sequence[str],
    locale: LocaleConfig = INVARIANT_LOCALE,
    candidates: Sequence[str] | None = None,
) -> DetectorOutcome:
    """
    Date/time values in any of the candidate patterns.

    Patterns that parse every value are all kept, so ``10/05/2022`` yields
    both ``MM/dd/yyyy`` and ``dd/MM/yyyy``. Otherwise patterns with the same
    field order are combined until every value is covered, e.g. ISO
    timestamps with and without an offset.
    """
    patterns = list(candidates) if candidates is not None else date_candidates(locale)
    values = [_strip_utc_marker(value) for value in samples]
    time_separator = ":" if any(":" in value for value in values) else locale.time_separator

    best: DetectorOutcome | None = None
    for date_separator in _separators_by_use(values, locale.date_separator):
        matches: dict[str, set[int]] = {}
        seen: dict[str, str] = {}
        for pattern in patterns:
            effective = datetimes.effective_pattern(pattern, date_separator, time_separator)
            # keep one pattern per effective layout, preferring literal separators
            if effective in seen:
                kept = seen[effective]
                if pattern.count("/") >= kept.count("/"):
                    continue
                matches.pop(kept, None)
            seen[effective] = pattern
            hits = {
                index
                for index, value in enumerate(values)
                if _fits(value, pattern, date_separator, time_separator, locale)
            }
            if hits:
                matches[pattern] = hits

        full = [pattern for pattern, hits in matches.items() if len(hits) == len(values)]
        if full:
            chosen, covered = full, set(range(len(values)))
        else:
            chosen, covered = _cover(values, matches)
        non_matching = tuple(
            samples[index] for index in range(len(samples)) if index not in covered
        )[:MAX_NON_MATCHING_EXAMPLES]
        outcome = DetectorOutcome(
            DataType.DATETIME,
            _kind(len(covered), len(values)),
            len(covered),
            len(values),
            _date_format(chosen, date_separator, time_separator, locale) if chosen else None,
            non_matching,
            tuple(chosen),
        )
        if outcome.is_total:
            return outcome
        if best is None or outcome.matched > best.matched:
            best = outcome
    return best or DetectorOutcome(DataType.DATETIME, MatchKind.NONE, 0, len(samples))


def detect_date_with_format(samples: Sequence[str], value_format: ValueFormat) -> DetectorOutcome:
    """Check values against a date format the caller already knows."""
    misses = _Misses()
    for value in samples:
        if value_format.parse(value) is None:
            misses.add(value)
    matched = len(samples) - misses.count
    return DetectorOutcome(
        DataType.DATETIME,
        _kind(matched, len(samples)),
        matched,
        len(samples),
        value_format if matched else None,
        tuple(misses.examples),
        tuple(value_format.date_formats),
    )


def detect_serial_date(samples: Sequence[str], now: datetime | None = None) -> DetectorOutcome:
    """
    Day counts since 1899-12-30 with the time of day as fraction.

    Only day counts between 80 years ago and 20 years ahead are accepted,
    other numbers are far more likely to be plain integers.
    """
    now = now or datetime.now()
    earliest = now.replace(year=now.year - SERIAL_YEARS_BACK, month=1, day=1)
    latest = now.replace(year=now.year + SERIAL_YEARS_AHEAD, month=12, day=31)
    misses = _Misses()
    for value in samples:
        number = parse_number(value, ".", "")
        converted = datetimes.from_serial_date(number) if number is not None else None
        if converted is None or not earliest <= converted <= latest:
            misses.add(value)
    matched = len(samples) - misses.count
    return DetectorOutcome(
        DataType.DATETIME,
        _kind(matched, len(samples)),
        matched,
        len(samples),
        ValueFormat(DataType.DATETIME, date_format=SERIAL_DATE_FORMAT) if matched else None,
        tuple(misses.examples),
        (SERIAL_DATE_FORMAT,),
    )


_HTML_HINT = re.compile(r"<br\s*/?>", re.IGNORECASE)
_ESCAPE_HINTS = ("\\r", "\\n", "\\t", "\\u", "\\x")


def detect_escaped_text(samples: Sequence[str]) -> DetectorOutcome:
    """Text carrying ``<br>``/CDATA markup or backslash escapes."""
    html = 0
    escaped = 0
    for value in samples:
        if _HTML_HINT.search(value) or value.upper().startswith("<![CDATA["):
            html += 1
        elif any(hint in value for hint in _ESCAPE_HINTS):
            escaped += 1
    if html >= escaped:
        data_type, matched = DataType.TEXT_TO_HTML, html
    else:
        data_type, matched = DataType.TEXT_UNESCAPE, escaped
    return DetectorOutcome(
        data_type,
        _kind(matched, len(samples)),
        matched,
        len(samples),
        ValueFormat(data_type) if matched else None,
    )
