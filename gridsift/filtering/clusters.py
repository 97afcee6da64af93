"""Build the catalogue of distinct values shown in a column's filter list."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from datetime import datetime
from decimal import Decimal
from typing import Any

from gridsift import datetimes, numbers
from gridsift.constants import BLANK_DISPLAY, DEFAULT_MAX_CLUSTER_VALUES
from gridsift.exceptions import ColumnNotFoundError
from gridsift.filtering.expression import date_literal, number_literal, sql_name, sql_quote
from gridsift.filtering.view import DataView
from gridsift.logging import get_logger
from gridsift.models import ClusterCatalogue, ClusterOutcome, ValueCluster
from gridsift.value_format import DataType, ValueFormat

logger = get_logger(__name__)

NOT_CLUSTERABLE = frozenset(
    {
        DataType.BINARY,
        DataType.TEXT_TO_HTML,
        DataType.TEXT_UNESCAPE,
        DataType.TEXT_REPLACE,
        DataType.TEXT_PART,
    }
)


def default_rank(cluster: ValueCluster) -> tuple:
    """Most frequent first, then alphabetical ignoring case."""
    return (-cluster.count, cluster.display_text.casefold())


def _decimal_literal(value: Decimal) -> str:
    return format(value.normalize(), "f")


def _number_range(name: str, value: Any, value_type: DataType, value_format: ValueFormat) -> str:
    scale = Decimal(1)
    if value_type == DataType.PERCENTAGE:
        scale = Decimal(1000 if value_format.number_format.endswith("‰") else 100)
    rounded, lower, upper = numbers.rounding_interval(
        Decimal(str(value)) * scale, value_format.number_format
    )
    low = _decimal_literal(lower / scale)
    high = _decimal_literal(upper / scale)
    if rounded > 0:
        return f"({name} >= {low} AND {name} < {high})"
    if rounded < 0:
        return f"({name} > {low} AND {name} <= {high})"
    return f"({name} > {low} AND {name} < {high})"


def cluster_condition(
    column_name: str,
    value: Any,
    value_type: DataType,
    value_format: ValueFormat | None = None,
    shared: bool = False,
) -> str:
    """
    Filter expression term selecting the rows displayed like value.

    Dates select the whole unit the format shows (day, hour, minute ...).
    With shared, several different values are displayed as the same text
    and numbers select every value rounding to it; otherwise a number is
    matched exactly.
    """
    name = sql_name(column_name)
    if value is None:
        return f"({name} IS NULL)"
    if value_type == DataType.DATETIME and isinstance(value, datetime):
        patterns = value_format.date_formats if value_format else []
        unit = datetimes.finest_unit(patterns[0]) if patterns else "day"
        if unit == "second" and not value.microsecond and not shared:
            return f"({name} = {date_literal(value, with_time=True)})"
        start, end = datetimes.unit_period(value, unit)
        with_time = unit in ("second", "minute", "hour")
        return (
            f"({name} >= {date_literal(start, with_time)} AND "
            f"{name} < {date_literal(end, with_time)})"
        )
    if value_type == DataType.BOOLEAN or isinstance(value, bool):
        return f"({name} = {'true' if value else 'false'})"
    if value_type.is_number and isinstance(value, (int, float)):
        if shared and value_format is not None:
            return _number_range(name, value, value_type, value_format)
        return f"({name} = {number_literal(value)})"
    return f"({name} = {sql_quote(str(value))})"


def _kept(previous: Iterable[ValueCluster]) -> dict[str, ValueCluster]:
    return {
        cluster.display_text.casefold(): cluster for cluster in previous if cluster.active
    }


def build_value_clusters(
    view: DataView,
    column: str | int,
    value_type: DataType | None = None,
    max_distinct_values: int = DEFAULT_MAX_CLUSTER_VALUES,
    rank: Callable[[ValueCluster], Any] | None = None,
    keep_active: Iterable[ValueCluster] = (),
) -> ClusterCatalogue:
    """
    Count the distinct displayed values of a column among the visible rows.

    Values are grouped by their formatted text, ignoring case, and each
    cluster's condition selects exactly the rows it counts. A "(Blank)"
    cluster for nulls comes first and does not count toward
    max_distinct_values. Failures while scanning are reported as the ERROR
    outcome and logged; they are never raised.

    Args:
        view: The view whose visible rows are scanned
        column: Column name or position
        value_type: Type to cluster as, defaults to the column's format type
        max_distinct_values: Largest number of distinct values to list
        rank: Sort key for the clusters, defaults to default_rank
        keep_active: Clusters of an earlier build; the active ones stay
            selected, with a count of 0 when the rows no longer hold them

    Raises:
        ColumnNotFoundError: If the view has no such column
    """
    if isinstance(column, int):
        names = view.column_names
        if not 0 <= column < len(names):
            raise ColumnNotFoundError(column)
        column_name = names[column]
    else:
        column_name = column
    value_format = view.value_format(column_name)
    column_name = next(
        name for name in view.column_names if name.casefold() == column_name.casefold()
    )
    value_type = value_type or value_format.data_type
    kept = _kept(keep_active)

    if value_type in NOT_CLUSTERABLE:
        return ClusterCatalogue(
            ClusterOutcome.WRONG_TYPE,
            column_name=column_name,
            value_type=value_type,
            message=f"Values of type {value_type.display} can not be listed",
        )

    try:
        counts: dict[str, list] = {}
        nulls = 0
        for value in view.visible()[column_name].tolist():
            if value is None or (isinstance(value, float) and value != value):
                nulls += 1
                continue
            display = value_format.format(value)
            key = display.casefold()
            entry = counts.get(key)
            if entry is not None:
                entry[2] += 1
                entry[3] = entry[3] or value != entry[1]
                continue
            if len(counts) >= max_distinct_values:
                return ClusterCatalogue(
                    ClusterOutcome.TOO_MANY_VALUES,
                    tuple(kept.values()),
                    column_name=column_name,
                    value_type=value_type,
                    message=f"More than {max_distinct_values:,} different values",
                )
            counts[key] = [display, value, 1, False]

        if not counts:
            return ClusterCatalogue(
                ClusterOutcome.NO_VALUES,
                tuple(kept.values()),
                column_name=column_name,
                value_type=value_type,
                message="No values",
            )

        clusters = [
            ValueCluster(
                display_text=display,
                source_value=value,
                count=count,
                condition=cluster_condition(
                    column_name, value, value_type, value_format, shared
                ),
                active=key in kept,
            )
            for key, (display, value, count, shared) in counts.items()
        ]
        blank = BLANK_DISPLAY.casefold()
        clusters.extend(
            dataclasses.replace(cluster, count=0)
            for key, cluster in kept.items()
            if key not in counts and key != blank
        )
        clusters.sort(key=rank or default_rank)
        if nulls or blank in kept:
            blank_condition = cluster_condition(column_name, None, value_type)
            clusters.insert(
                0, ValueCluster(BLANK_DISPLAY, None, nulls, blank_condition, blank in kept)
            )
    except Exception as exc:
        logger.warning("value_clusters_failed", column=column_name, error=str(exc), exc_info=True)
        return ClusterCatalogue(
            ClusterOutcome.ERROR,
            column_name=column_name,
            value_type=value_type,
            message=f"Error building the value list: {exc}",
        )

    logger.debug(
        "value_clusters_built", column=column_name, clusters=len(clusters), kept=len(kept)
    )
    return ClusterCatalogue(
        ClusterOutcome.LIST_FILLED,
        tuple(clusters),
        column_name=column_name,
        value_type=value_type,
    )
