"""Value formats: how raw text maps to typed values and back."""

from __future__ import annotations

import dataclasses
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from gridsift import datetimes, numbers
from gridsift.constants import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_DATE_SEPARATOR,
    DEFAULT_DECIMAL_SEPARATOR,
    DEFAULT_FALSE_VALUE,
    DEFAULT_GROUP_SEPARATOR,
    DEFAULT_NUMBER_FORMAT,
    DEFAULT_PART,
    DEFAULT_PART_SPLITTER,
    DEFAULT_PART_TO_END,
    DEFAULT_TIME_SEPARATOR,
    DEFAULT_TRUE_VALUE,
    FALSE_VALUES,
    LIST_DELIMITER,
    SERIAL_DATE_FORMAT,
    TRUE_VALUES,
)


class DataType(str, Enum):
    """Semantic type of a column."""

    STRING = "String"
    INTEGER = "Integer"
    NUMERIC = "Numeric"
    DOUBLE = "Double"
    PERCENTAGE = "Percentage"
    DATETIME = "DateTime"
    BOOLEAN = "Boolean"
    GUID = "Guid"
    TEXT_PART = "TextPart"
    TEXT_REPLACE = "TextReplace"
    TEXT_TO_HTML = "TextToHtml"
    TEXT_UNESCAPE = "TextUnescape"
    BINARY = "Binary"

    @property
    def display(self) -> str:
        return _DISPLAY_NAMES.get(self, self.value)

    @property
    def is_number(self) -> bool:
        return self in (DataType.INTEGER, DataType.NUMERIC, DataType.DOUBLE, DataType.PERCENTAGE)


_DISPLAY_NAMES = {
    DataType.NUMERIC: "Money (High Precision)",
    DataType.DOUBLE: "Decimal (Floating Point)",
    DataType.DATETIME: "Date Time",
    DataType.GUID: "Guid",
    DataType.TEXT_PART: "Text Part",
    DataType.TEXT_REPLACE: "Text Replace",
    DataType.TEXT_TO_HTML: "Encode HTML (Linefeed only)",
    DataType.TEXT_UNESCAPE: "Unescape Text",
    DataType.BINARY: "Binary (File Reference)",
}

_GUID = re.compile(
    r"^\{?[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\}?$"
)
_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[rnt\\])")
_SIMPLE_ESCAPES = {"r": "\r", "n": "\n", "t": "\t", "\\": "\\"}
_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TRUE_LITERALS = frozenset(literal.casefold() for literal in TRUE_VALUES)
_FALSE_LITERALS = frozenset(literal.casefold() for literal in FALSE_VALUES)


def split_literals(text: str) -> list[str]:
    return [part.strip() for part in text.split(LIST_DELIMITER) if part.strip()]


def parse_boolean(text: str, true_value: str = "", false_value: str = "") -> bool | None:
    """Match text against the given literals first, then the built-in literal lists."""
    value = text.strip().casefold()
    if not value:
        return None
    if value in {literal.casefold() for literal in split_literals(true_value)}:
        return True
    if value in {literal.casefold() for literal in split_literals(false_value)}:
        return False
    if value in _TRUE_LITERALS:
        return True
    if value in _FALSE_LITERALS:
        return False
    return None


def is_guid(text: str) -> bool:
    return bool(_GUID.match(text.strip()))


def unescape_text(text: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        code = match.group(1)
        if code[0] in ("u", "x"):
            return chr(int(code[1:], 16))
        return _SIMPLE_ESCAPES[code]

    return _ESCAPE.sub(_replace, text)


def html_to_text(text: str) -> str:
    value = text
    if value.upper().startswith("<![CDATA[") and value.endswith("]]>"):
        value = value[9:-3]
    return _BR.sub("\n", value)


@dataclass(frozen=True)
class ValueFormat:
    """
    Immutable description of a column's type and parse format.

    Everything needed to parse or render a value is stored on the instance,
    so parsing never depends on ambient locale settings.
    """

    data_type: DataType = DataType.STRING
    date_format: str = DEFAULT_DATE_FORMAT
    date_separator: str = DEFAULT_DATE_SEPARATOR
    time_separator: str = DEFAULT_TIME_SEPARATOR
    time_zone_source: str = ""
    time_zone_target: str = ""
    number_format: str = DEFAULT_NUMBER_FORMAT
    group_separator: str = DEFAULT_GROUP_SEPARATOR
    decimal_separator: str = DEFAULT_DECIMAL_SEPARATOR
    true_value: str = DEFAULT_TRUE_VALUE
    false_value: str = DEFAULT_FALSE_VALUE
    part: int = DEFAULT_PART
    part_splitter: str = DEFAULT_PART_SPLITTER
    part_to_end: bool = DEFAULT_PART_TO_END
    regex_search_pattern: str = ""
    regex_replacement: str = ""
    remove_currency_symbols: bool = True
    month_names: tuple[str, ...] | None = None

    def with_changes(self, **changes: Any) -> ValueFormat:
        return dataclasses.replace(self, **changes)

    @property
    def date_formats(self) -> list[str]:
        return datetimes.split_formats(self.date_format)

    @property
    def is_serial_date(self) -> bool:
        return self.data_type == DataType.DATETIME and self.date_format == SERIAL_DATE_FORMAT

    def _locale(self):
        from gridsift.culture import INVARIANT_LOCALE

        if self.month_names and len(self.month_names) == 12:
            return dataclasses.replace(
                INVARIANT_LOCALE,
                month_names=self.month_names,
                abbreviated_month_names=tuple(name[:3] for name in self.month_names),
            )
        return INVARIANT_LOCALE

    def parse(self, text: str | None) -> Any:
        """
        Convert raw text into the typed value for this format.

        Returns:
            The typed value, or None when the text is empty or does not fit
        """
        if text is None:
            return None
        if self.data_type == DataType.STRING:
            return text
        stripped = text.strip()
        if not stripped:
            return None

        data_type = self.data_type
        if data_type == DataType.INTEGER:
            value = numbers.parse_decimal(
                stripped,
                self.decimal_separator,
                self.group_separator,
                remove_currency_symbols=self.remove_currency_symbols,
            )
            if value is None or value != value.to_integral_value():
                return None
            return int(value)
        if data_type in (DataType.NUMERIC, DataType.DOUBLE, DataType.PERCENTAGE):
            return numbers.parse_number(
                stripped,
                self.decimal_separator,
                self.group_separator,
                allow_percentage=data_type == DataType.PERCENTAGE,
                remove_currency_symbols=self.remove_currency_symbols,
            )
        if data_type == DataType.DATETIME:
            return self._parse_datetime(stripped)
        if data_type == DataType.BOOLEAN:
            return parse_boolean(stripped, self.true_value, self.false_value)
        if data_type == DataType.GUID:
            if not is_guid(stripped):
                return None
            return uuid.UUID(stripped.strip("{}"))
        if data_type == DataType.TEXT_PART:
            return self._text_part(text)
        if data_type == DataType.TEXT_REPLACE:
            if not self.regex_search_pattern:
                return text
            return re.sub(self.regex_search_pattern, self.regex_replacement, text)
        if data_type == DataType.TEXT_UNESCAPE:
            return unescape_text(text)
        if data_type == DataType.TEXT_TO_HTML:
            return html_to_text(text)
        # binary columns hold a file reference
        return text

    def _text_part(self, text: str) -> str | None:
        if not self.part_splitter:
            return text if self.part == 1 else None
        pieces = text.split(self.part_splitter)
        if self.part < 1 or self.part > len(pieces):
            return None
        if self.part_to_end:
            return self.part_splitter.join(pieces[self.part - 1 :])
        return pieces[self.part - 1]

    def _parse_datetime(self, text: str) -> datetime | None:
        if self.date_format == SERIAL_DATE_FORMAT:
            serial = numbers.parse_number(text, self.decimal_separator, self.group_separator)
            if serial is None:
                return None
            return datetimes.from_serial_date(serial)
        locale = self._locale()
        parsed = datetimes.parse_any(
            text, self.date_format, self.date_separator, self.time_separator, locale
        )
        if parsed is None and text[-1:] in ("Z", "z"):
            parsed = datetimes.parse_any(
                text[:-1], self.date_format, self.date_separator, self.time_separator, locale
            )
            if parsed is not None and parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
        if parsed is None:
            return None
        return self._convert_time_zone(parsed)

    def _convert_time_zone(self, value: datetime) -> datetime:
        if not self.time_zone_source and not self.time_zone_target:
            return value
        from zoneinfo import ZoneInfo

        if value.tzinfo is None and self.time_zone_source:
            value = value.replace(tzinfo=ZoneInfo(self.time_zone_source))
        if self.time_zone_target and value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(self.time_zone_target))
        return value

    def format(self, value: Any) -> str:
        """Render a typed value the way a grid would display it."""
        if value is None:
            return ""
        data_type = self.data_type
        if data_type == DataType.DATETIME and isinstance(value, datetime):
            if self.date_format == SERIAL_DATE_FORMAT:
                return numbers.format_number(
                    datetimes.to_serial_date(value), self.number_format, self.decimal_separator
                )
            formats = self.date_formats or [DEFAULT_DATE_FORMAT]
            return datetimes.format_datetime(
                value, formats[0], self.date_separator, self.time_separator, self._locale()
            )
        if data_type == DataType.PERCENTAGE and isinstance(value, (int, float, Decimal)):
            if isinstance(value, bool):
                return str(value)
            per_mille = self.number_format.endswith("‰")
            scaled = Decimal(str(value)) * (1000 if per_mille else 100)
            text = numbers.format_number(
                scaled, self.number_format, self.decimal_separator, self.group_separator
            )
            return text + ("‰" if per_mille else "%")
        if data_type.is_number and isinstance(value, (int, float, Decimal)):
            if isinstance(value, bool):
                return str(value)
            if isinstance(value, float) and value != value:
                return ""
            return numbers.format_number(
                value, self.number_format, self.decimal_separator, self.group_separator
            )
        if data_type == DataType.BOOLEAN and isinstance(value, bool):
            literals = split_literals(self.true_value if value else self.false_value)
            if literals:
                return literals[0]
            return DEFAULT_TRUE_VALUE if value else DEFAULT_FALSE_VALUE
        if data_type == DataType.GUID and isinstance(value, uuid.UUID):
            return str(value).upper()
        return str(value)

    def format_description(self) -> str:
        data_type = self.data_type
        if data_type == DataType.INTEGER:
            return self.number_format.replace(",", self.group_separator)
        if data_type == DataType.DATETIME:
            return datetimes.effective_pattern(
                self.date_format, self.date_separator, self.time_separator
            )
        if data_type in (DataType.NUMERIC, DataType.DOUBLE, DataType.PERCENTAGE):
            return (
                self.number_format.replace(".", "\0")
                .replace(",", self.group_separator)
                .replace("\0", self.decimal_separator)
            )
        if data_type == DataType.TEXT_PART:
            return f"{self.part}" + (" To End" if self.part_to_end else "")
        if data_type == DataType.TEXT_REPLACE:
            return f"Replace {self.regex_search_pattern[:10]} with {self.regex_replacement[:10]}"
        return ""

    def description(self) -> str:
        """Type name plus a short description of the format, e.g. ``Date Time (yyyy-MM-dd)``."""
        short = self.format_description()
        if not short:
            return self.data_type.display
        return f"{self.data_type.display} ({short})"

    def is_matching(self, other: ValueFormat) -> bool:
        """True if values in this format are acceptable where other is expected."""
        if other.data_type == self.data_type:
            return True
        # integers fit wherever any number is expected and vice versa
        integral = (DataType.INTEGER, DataType.NUMERIC, DataType.DOUBLE)
        if self.data_type == DataType.INTEGER and other.data_type in integral:
            return True
        if other.data_type == DataType.INTEGER and self.data_type in integral:
            return True
        decimals = (DataType.NUMERIC, DataType.DOUBLE)
        if self.data_type in decimals and other.data_type in decimals:
            return (
                other.number_format == self.number_format
                and other.decimal_separator == self.decimal_separator
                and other.group_separator == self.group_separator
            )
        return False

    def to_dict(self) -> dict:
        data = dataclasses.asdict(self)
        data["data_type"] = self.data_type.value
        if self.month_names is None:
            data.pop("month_names")
        else:
            data["month_names"] = list(self.month_names)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ValueFormat:
        values = dict(data)
        values["data_type"] = DataType(values.get("data_type", DataType.STRING.value))
        if values.get("month_names") is not None:
            values["month_names"] = tuple(values["month_names"])
        return cls(**values)
