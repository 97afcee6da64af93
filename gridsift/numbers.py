"""Parse and format numbers written with arbitrary decimal and group separators."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from gridsift.constants import CURRENCY_SYMBOLS

_PLAIN_NUMBER = re.compile(r"^(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def strip_currency(text: str) -> str:
    for symbol in CURRENCY_SYMBOLS:
        if symbol in text:
            text = text.replace(symbol, "")
    return text.strip()


def parse_decimal(
    text: str | None,
    decimal_separator: str = ".",
    group_separator: str = "",
    allow_percentage: bool = False,
    remove_currency_symbols: bool = True,
) -> Decimal | None:
    """
    Convert text to a Decimal using the given separators.

    Group separators must be three digits apart and sit three digits before
    the decimal separator, so ``1,5`` is rejected when ``,`` groups digits.
    A second decimal separator, or any other stray character, makes the
    value invalid. Parentheses mark a negative number; a trailing ``%`` or
    ``‰`` divides the value by 100 or 1000 when percentages are allowed.

    Returns:
        The parsed value, or None if the text is not a number.
    """
    if text is None:
        return None
    value = text.strip()
    if not value:
        return None
    if remove_currency_symbols:
        value = strip_currency(value)

    divisor = 1
    if allow_percentage and value[-1:] in ("%", "‰"):
        divisor = 100 if value[-1] == "%" else 1000
        value = value[:-1].rstrip()

    negative = False
    if len(value) > 2 and value[0] == "(" and value[-1] == ")":
        negative = True
        value = value[1:-1].strip()
    if value[:1] in ("-", "+"):
        negative = negative or value[0] == "-"
        value = value[1:].lstrip()
    elif value[-1:] == "-":
        negative = True
        value = value[:-1].rstrip()
    if not value:
        return None

    decimal_pos = -1
    last_group = -1
    digits: list[str] = []
    for index, ch in enumerate(value):
        if group_separator and ch == group_separator:
            if last_group >= 0 and index - last_group != 4:
                return None
            if last_group < 0 and index == 0:
                return None
            if decimal_pos >= 0:
                return None
            last_group = index
            continue
        if ch == decimal_separator:
            if decimal_pos >= 0:
                return None
            decimal_pos = index
            digits.append(".")
            continue
        digits.append(ch)

    if last_group >= 0:
        end_of_integer = decimal_pos if decimal_pos >= 0 else len(value)
        if end_of_integer != last_group + 4:
            return None

    plain = "".join(digits)
    if not _PLAIN_NUMBER.match(plain):
        return None
    try:
        result = Decimal(plain)
    except InvalidOperation:
        return None
    if negative:
        result = -result
    if divisor != 1:
        result = result / divisor
    return result


def parse_number(
    text: str | None,
    decimal_separator: str = ".",
    group_separator: str = "",
    allow_percentage: bool = False,
    remove_currency_symbols: bool = True,
) -> float | None:
    """Float flavour of parse_decimal."""
    parsed = parse_decimal(
        text, decimal_separator, group_separator, allow_percentage, remove_currency_symbols
    )
    return None if parsed is None else float(parsed)


def has_exponent(text: str) -> bool:
    return bool(re.search(r"\d[eE][+-]?\d", text))


def _split_number_format(number_format: str) -> tuple[int, int, bool]:
    """Return (min decimals, max decimals, grouping) of a format like ``#,##0.00``."""
    body = number_format.rstrip("%‰").strip()
    integer_part, _, fraction_part = body.partition(".")
    min_decimals = fraction_part.count("0")
    max_decimals = min_decimals + fraction_part.count("#")
    return min_decimals, max_decimals, "," in integer_part


def format_number(
    value: float | int | Decimal,
    number_format: str = "0.#####",
    decimal_separator: str = ".",
    group_separator: str = "",
) -> str:
    """
    Render a number with a ``0.##`` style format.

    ``0`` positions after the decimal point are always written, ``#``
    positions only when significant. A ``,`` before the decimal point
    enables digit grouping with group_separator.
    """
    min_decimals, max_decimals, grouping = _split_number_format(number_format)
    quantum = Decimal(1).scaleb(-max_decimals)
    number = Decimal(str(value)) if not isinstance(value, Decimal) else value
    rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{abs(rounded):f}"
    integer_part, _, fraction_part = text.partition(".")
    fraction_part = fraction_part.rstrip("0")
    if len(fraction_part) < min_decimals:
        fraction_part = fraction_part.ljust(min_decimals, "0")
    if grouping and group_separator:
        groups = []
        while len(integer_part) > 3:
            groups.insert(0, integer_part[-3:])
            integer_part = integer_part[:-3]
        groups.insert(0, integer_part)
        integer_part = group_separator.join(groups)
    result = integer_part
    if fraction_part:
        result += decimal_separator + fraction_part
    if rounded < 0 and rounded != 0:
        result = "-" + result
    return result


def rounding_interval(
    value: float | int | Decimal, number_format: str = "0.#####"
) -> tuple[Decimal, Decimal, Decimal]:
    """
    Numbers format_number renders the same way as value.

    Returns (rounded, lower, upper). Halves round away from zero, so a
    positive rounded value covers [lower, upper), a negative one
    (lower, upper] and zero the open interval.
    """
    _, max_decimals, _ = _split_number_format(number_format)
    quantum = Decimal(1).scaleb(-max_decimals)
    number = Decimal(str(value)) if not isinstance(value, Decimal) else value
    rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
    half = quantum / 2
    return rounded, rounded - half, rounded + half
