"""Per-column filter definitions and the expressions they produce."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from gridsift import numbers
from gridsift.constants import (
    OPERATOR_BEGINS,
    OPERATOR_BIGGER,
    OPERATOR_BIGGER_EQUAL,
    OPERATOR_CONTAINS,
    OPERATOR_ENDS,
    OPERATOR_EQUALS,
    OPERATOR_IS_NULL,
    OPERATOR_LONGER,
    OPERATOR_NOT_EQUALS,
    OPERATOR_NOT_NULL,
    OPERATOR_SHORTER,
    OPERATOR_SMALLER,
    OPERATOR_SMALLER_EQUAL,
)
from gridsift.exceptions import ValidationError
from gridsift.filtering.expression import (
    date_literal,
    escape_like,
    parse_date_literal,
    sql_name,
    sql_quote,
)
from gridsift.models import ValueCluster
from gridsift.value_format import DataType, parse_boolean

TEXT_OPERATORS = (
    OPERATOR_BEGINS,
    OPERATOR_CONTAINS,
    OPERATOR_ENDS,
    OPERATOR_EQUALS,
    OPERATOR_NOT_EQUALS,
    OPERATOR_LONGER,
    OPERATOR_SHORTER,
    OPERATOR_IS_NULL,
    OPERATOR_NOT_NULL,
)
ORDERED_OPERATORS = (
    OPERATOR_EQUALS,
    OPERATOR_NOT_EQUALS,
    OPERATOR_SMALLER,
    OPERATOR_SMALLER_EQUAL,
    OPERATOR_BIGGER,
    OPERATOR_BIGGER_EQUAL,
    OPERATOR_IS_NULL,
    OPERATOR_NOT_NULL,
)
BOOLEAN_OPERATORS = (OPERATOR_EQUALS, OPERATOR_NOT_EQUALS, OPERATOR_IS_NULL, OPERATOR_NOT_NULL)

_ALIASES = {
    "begins": OPERATOR_BEGINS,
    "begins with": OPERATOR_BEGINS,
    "xxx...": OPERATOR_BEGINS,
    "contains": OPERATOR_CONTAINS,
    "...xxx...": OPERATOR_CONTAINS,
    "ends": OPERATOR_ENDS,
    "ends with": OPERATOR_ENDS,
    "...xxx": OPERATOR_ENDS,
    "!=": OPERATOR_NOT_EQUALS,
    "blank": OPERATOR_IS_NULL,
    "is null": OPERATOR_IS_NULL,
    "not blank": OPERATOR_NOT_NULL,
    "is not null": OPERATOR_NOT_NULL,
}


def operators_for(data_type: DataType) -> tuple[str, ...]:
    """Operators offered for a column of the given type."""
    if data_type == DataType.BOOLEAN:
        return BOOLEAN_OPERATORS
    if data_type.is_number or data_type == DataType.DATETIME:
        return ORDERED_OPERATORS
    return TEXT_OPERATORS


def normalize_operator(operator: str) -> str:
    """Map a typed-in alias such as ``begins with`` to its operator."""
    stripped = operator.strip()
    return _ALIASES.get(stripped.lower(), stripped)


@dataclass(frozen=True)
class ValueFilter:
    """A selected value: the expression term and the text it was shown as."""

    condition: str
    display: str


def _number_text(text: str, data_type: DataType) -> str:
    value = numbers.parse_decimal(text, allow_percentage=data_type == DataType.PERCENTAGE)
    if value is None:
        # a decimal comma typed by the user
        value = numbers.parse_decimal(
            text, ",", ".", allow_percentage=data_type == DataType.PERCENTAGE
        )
    return "" if value is None else str(value)


def _date_terms(name: str, operator: str, day: datetime) -> str:
    start = date_literal(day)
    end = date_literal(day + timedelta(days=1))
    if operator == OPERATOR_EQUALS:
        return f"({name} >= {start} AND {name} < {end})"
    if operator == OPERATOR_NOT_EQUALS:
        return f"({name} < {start} OR {name} >= {end})"
    if operator == OPERATOR_SMALLER_EQUAL:
        return f"{name} < {end}"
    if operator == OPERATOR_BIGGER:
        return f"{name} >= {end}"
    return f"{name} {operator} {start}"


def operator_expression(
    column_name: str,
    data_type: DataType,
    operator: str,
    value_text: str = "",
    value_date: datetime | None = None,
) -> str:
    """Expression for an operator filter; empty when the value does not fit the operator."""
    name = sql_name(column_name)
    text_like = operators_for(data_type) is TEXT_OPERATORS
    if operator == OPERATOR_IS_NULL:
        if text_like:
            return f"({name} IS NULL OR {name} = '')"
        return f"{name} IS NULL"
    if operator == OPERATOR_NOT_NULL:
        if text_like:
            return f"NOT ({name} IS NULL OR {name} = '')"
        return f"NOT {name} IS NULL"

    if data_type == DataType.DATETIME:
        if value_date is None and value_text:
            value_date = parse_date_literal(value_text)
        if value_date is None:
            return ""
        day = value_date.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
        return _date_terms(name, operator, day)

    if not value_text:
        return ""
    if operator == OPERATOR_CONTAINS:
        return f"{name} LIKE '%{escape_like(value_text)}%'"
    if operator == OPERATOR_BEGINS:
        return f"{name} LIKE '{escape_like(value_text)}%'"
    if operator == OPERATOR_ENDS:
        return f"{name} LIKE '%{escape_like(value_text)}'"
    if operator in (OPERATOR_LONGER, OPERATOR_SHORTER):
        if not value_text.strip().isdigit():
            return ""
        compare = ">" if operator == OPERATOR_LONGER else "<"
        return f"LEN({name}) {compare} {int(value_text)}"

    if data_type == DataType.BOOLEAN:
        flag = parse_boolean(value_text)
        if flag is None:
            return ""
        literal = "true" if flag else "false"
    elif data_type.is_number:
        literal = _number_text(value_text, data_type)
        if not literal:
            return ""
    else:
        literal = sql_quote(value_text)
    return f"{name} {operator} {literal}"


def values_expression(value_filters: Iterable[ValueFilter]) -> str:
    """OR-list of the selected values, parenthesized when there is more than one."""
    conditions = [value.condition for value in value_filters if value.condition]
    if len(conditions) > 1:
        return "(" + " OR ".join(conditions) + ")"
    return conditions[0] if conditions else ""


@dataclass(frozen=True)
class ColumnFilterLogic:
    """
    The filter set on one column.

    Instances are replaced, never changed: build a new one with one of the
    class methods or with deactivated()/activated(). The expression combines
    the operator part and the selected values part with AND.
    """

    column_name: str
    expression: str = ""
    active: bool = False
    data_type: DataType = DataType.STRING
    operator: str = ""
    value_text: str = ""
    value_date: datetime | None = None
    value_filters: tuple[ValueFilter, ...] = ()

    @classmethod
    def create(
        cls,
        column_name: str,
        data_type: DataType = DataType.STRING,
        operator: str = "",
        value_text: str = "",
        value_date: datetime | None = None,
        value_filters: Iterable[ValueFilter] = (),
    ) -> ColumnFilterLogic:
        """
        Build a filter from an optional operator and value selection.

        Raises:
            ValidationError: If the operator is not offered for data_type
        """
        operator = normalize_operator(operator) if operator else ""
        if operator and operator not in operators_for(data_type):
            raise ValidationError(
                f"Operator {operator!r} is not available for {data_type.display} columns"
            )
        value_text = (value_text or "").strip()
        value_filters = tuple(value_filters)
        operator_part = (
            operator_expression(column_name, data_type, operator, value_text, value_date)
            if operator
            else ""
        )
        values_part = values_expression(value_filters)
        if operator_part and values_part and operator != OPERATOR_NOT_NULL:
            expression = f"{operator_part} AND {values_part}"
        else:
            expression = values_part or operator_part
        return cls(
            column_name=column_name,
            expression=expression,
            active=bool(expression),
            data_type=data_type,
            operator=operator,
            value_text=value_text,
            value_date=value_date,
            value_filters=value_filters,
        )

    @classmethod
    def for_operator(
        cls,
        column_name: str,
        data_type: DataType,
        operator: str,
        value: object = None,
    ) -> ColumnFilterLogic:
        """Filter such as ``[Name] LIKE 'Sm%'`` from an operator and a typed or text value."""
        if isinstance(value, datetime):
            return cls.create(column_name, data_type, operator, value_date=value)
        return cls.create(column_name, data_type, operator, "" if value is None else str(value))

    @classmethod
    def for_value(cls, column_name: str, data_type: DataType, value: object) -> ColumnFilterLogic:
        """Equality filter on one value; a missing value filters for blanks."""
        if value is None or str(value) == "":
            return cls.for_operator(column_name, data_type, OPERATOR_IS_NULL)
        return cls.for_operator(column_name, data_type, OPERATOR_EQUALS, value)

    @classmethod
    def for_clusters(
        cls,
        column_name: str,
        clusters: Iterable[ValueCluster],
        data_type: DataType = DataType.STRING,
    ) -> ColumnFilterLogic:
        """Filter matching any of the active clusters."""
        value_filters = [
            ValueFilter(cluster.condition, cluster.display_text)
            for cluster in clusters
            if cluster.active
        ]
        return cls.create(column_name, data_type, value_filters=value_filters)

    @property
    def is_effective(self) -> bool:
        return self.active and bool(self.expression)

    def deactivated(self) -> ColumnFilterLogic:
        return dataclasses.replace(self, active=False)

    def activated(self) -> ColumnFilterLogic:
        return dataclasses.replace(self, active=bool(self.expression))
