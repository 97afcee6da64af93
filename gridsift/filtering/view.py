"""A filterable view over typed column values."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd

from gridsift.cancellation import CancellationToken, is_canceled
from gridsift.exceptions import ColumnNotFoundError, GridSiftError, SourceReadError
from gridsift.filtering.expression import evaluate_filter
from gridsift.logging import get_logger
from gridsift.models import Column
from gridsift.source import RowSource
from gridsift.value_format import ValueFormat

logger = get_logger(__name__)


class DataView:
    """
    Rows of typed values plus the row filter currently applied to them.

    Values are stored as parsed by each column's ValueFormat; text that does
    not parse is kept as null and counted in conversion_errors. Setting
    row_filter validates the expression before it replaces the current one.
    """

    def __init__(
        self, frame: pd.DataFrame, formats: Mapping[str, ValueFormat] | None = None
    ) -> None:
        self._frame = frame
        self._formats = {str(name): ValueFormat() for name in frame.columns}
        for name, value_format in (formats or {}).items():
            self._formats[self._resolve(name)] = value_format
        self._row_filter = ""
        self._mask = pd.Series(True, index=frame.index, dtype=bool)
        self.conversion_errors: dict[str, int] = {}

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, columns: Sequence[Column] = ()) -> DataView:
        """Build a view from a DataFrame of raw text, parsing each column with its format."""
        frame = frame.reset_index(drop=True)
        formats = _resolved({column.name: column.value_format for column in columns}, frame)
        typed: dict[str, pd.Series] = {}
        errors: dict[str, int] = {}
        for name in frame.columns:
            values, failed = _parse_column(frame[name], formats[str(name)])
            typed[str(name)] = values
            if failed:
                errors[str(name)] = failed
        view = cls(pd.DataFrame(typed, index=frame.index), formats)
        view.conversion_errors = errors
        return view

    @classmethod
    def from_row_source(
        cls,
        source: RowSource,
        columns: Sequence[Column] = (),
        cancellation_token: CancellationToken | None = None,
    ) -> DataView:
        """
        Read every row of source into a view.

        A canceled read keeps the rows read so far.

        Raises:
            SourceReadError: If the source fails while reading
        """
        names = [source.get_name(index) for index in range(source.field_count)]
        rows: list[list] = []
        try:
            while not is_canceled(cancellation_token) and source.read():
                rows.append([source.get_value(index) for index in range(len(names))])
        except GridSiftError:
            raise
        except Exception as e:
            raise SourceReadError(f"Reading rows failed: {e}") from e

        raw = pd.DataFrame(rows, columns=names, dtype=object)
        view = cls.from_frame(raw, columns)
        logger.info("data_view_loaded", rows=len(view.frame), columns=len(names))
        return view

    @property
    def frame(self) -> pd.DataFrame:
        """All rows, ignoring the row filter."""
        return self._frame

    @property
    def column_names(self) -> list[str]:
        return [str(name) for name in self._frame.columns]

    @property
    def total_rows(self) -> int:
        return len(self._frame)

    def __len__(self) -> int:
        return int(self._mask.sum())

    def _resolve(self, name: str) -> str:
        if name in self._formats:
            return name
        wanted = name.casefold()
        for candidate in self._formats:
            if candidate.casefold() == wanted:
                return candidate
        raise ColumnNotFoundError(name)

    def value_format(self, name: str) -> ValueFormat:
        """
        Format of a column, matched ignoring case.

        Raises:
            ColumnNotFoundError: If the view has no such column
        """
        return self._formats[self._resolve(name)]

    @property
    def row_filter(self) -> str:
        return self._row_filter

    @row_filter.setter
    def row_filter(self, expression: str) -> None:
        expression = expression or ""
        # evaluate first so an invalid expression leaves the current filter in place
        mask = evaluate_filter(expression, self._frame)
        self._row_filter = expression
        self._mask = mask
        logger.info(
            "filter_applied",
            expression=expression,
            visible=int(mask.sum()),
            total=len(self._frame),
        )

    def refresh(self) -> None:
        """Re-evaluate the current row filter, e.g. after the frame was changed in place."""
        self._mask = evaluate_filter(self._row_filter, self._frame)

    def visible(self) -> pd.DataFrame:
        """Rows passing the row filter."""
        return self._frame[self._mask]


def _lookup(formats: Mapping[str, ValueFormat], name: str) -> ValueFormat:
    if name in formats:
        return formats[name]
    wanted = name.casefold()
    for candidate, value_format in formats.items():
        if candidate.casefold() == wanted:
            return value_format
    return ValueFormat()


def _resolved(formats: Mapping[str, ValueFormat], frame: pd.DataFrame) -> dict[str, ValueFormat]:
    return {str(name): _lookup(formats, str(name)) for name in frame.columns}


def _parse_column(raw: pd.Series, value_format: ValueFormat) -> tuple[pd.Series, int]:
    """Typed values of a raw column and the number of cells that did not parse."""
    texts = raw.map(str, na_action="ignore").astype(object)
    present = texts.str.strip().fillna("") != ""
    parsed = texts[present].map(value_format.parse).astype(object)
    typed = parsed.reindex(raw.index).astype(object)
    return typed.where(typed.notna(), None), int(parsed.isna().sum())
