"""Collect bounded samples of raw text values from a row source."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from gridsift.cancellation import CancellationToken, is_canceled
from gridsift.constants import DEFAULT_MAX_SAMPLE_CHARS
from gridsift.exceptions import (
    ColumnNotFoundError,
    GridSiftError,
    SourceReadError,
)
from gridsift.logging import get_logger
from gridsift.models import SampleResult
from gridsift.source import RowSource

logger = get_logger(__name__)


class _ColumnSamples:
    __slots__ = ("seen", "values", "done")

    def __init__(self) -> None:
        self.seen: set[str] = set()
        self.values: list[str] = []
        self.done = False


def collect_samples(
    source: RowSource,
    column_indexes: Iterable[int],
    max_rows_to_scan: int,
    max_distinct_values: int,
    treat_as_null: Collection[str] = (),
    cancellation_token: CancellationToken | None = None,
    max_chars: int = DEFAULT_MAX_SAMPLE_CHARS,
) -> dict[int, SampleResult]:
    """
    Read rows from source and gather distinct raw values per column.

    Empty values and values listed in treat_as_null (ignoring case) are
    skipped. A column stops collecting once max_distinct_values distinct
    values were seen; reading stops when every column is done or
    max_rows_to_scan rows were read. Values are trimmed and cut to max_chars.

    Cancellation is checked before every row; a canceled scan returns what
    was collected so far.

    Raises:
        ColumnNotFoundError: If an index is outside the source's columns
        SourceReadError: If the source fails while reading
        OperationCanceledError: If the source itself reports cancellation
    """
    indexes = list(dict.fromkeys(column_indexes))
    for index in indexes:
        if not 0 <= index < source.field_count:
            raise ColumnNotFoundError(index)

    nulls = {value.strip().casefold() for value in treat_as_null}
    columns = {index: _ColumnSamples() for index in indexes}
    records_read = 0
    pending = len(columns)

    try:
        while pending and records_read < max_rows_to_scan:
            if is_canceled(cancellation_token):
                logger.info("sample_collection_canceled", records_read=records_read)
                break
            if not source.read():
                break
            records_read += 1
            for index, state in columns.items():
                if state.done:
                    continue
                raw = source.get_value(index)
                if raw is None:
                    continue
                value = raw.strip()
                if not value or value.casefold() in nulls:
                    continue
                if len(value) > max_chars:
                    value = value[:max_chars]
                key = value.casefold()
                if key in state.seen:
                    continue
                state.seen.add(key)
                state.values.append(value)
                if len(state.values) >= max_distinct_values:
                    state.done = True
                    pending -= 1
    except GridSiftError:
        raise
    except Exception as exc:
        raise SourceReadError(f"Reading row {records_read + 1} failed: {exc}") from exc

    logger.debug(
        "samples_collected",
        records_read=records_read,
        columns={index: len(state.values) for index, state in columns.items()},
    )
    return {
        index: SampleResult(values=tuple(state.values), records_read=records_read)
        for index, state in columns.items()
    }


def collect_samples_by_name(
    source: RowSource,
    column_names: Iterable[str],
    max_rows_to_scan: int,
    max_distinct_values: int,
    treat_as_null: Collection[str] = (),
    cancellation_token: CancellationToken | None = None,
    max_chars: int = DEFAULT_MAX_SAMPLE_CHARS,
) -> dict[str, SampleResult]:
    """Like collect_samples, with columns addressed by name."""
    ordinals = {name: source.get_ordinal(name) for name in column_names}
    by_index = collect_samples(
        source,
        ordinals.values(),
        max_rows_to_scan,
        max_distinct_values,
        treat_as_null,
        cancellation_token,
        max_chars,
    )
    return {name: by_index[index] for name, index in ordinals.items()}
