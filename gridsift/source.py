"""Row sources: the sequential readers sampling pulls raw text from."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from gridsift.exceptions import ColumnNotFoundError

if TYPE_CHECKING:
    import pandas as pd


@runtime_checkable
class RowSource(Protocol):
    """Forward-only reader over rows of text."""

    @property
    def field_count(self) -> int: ...

    def get_name(self, index: int) -> str: ...

    def get_ordinal(self, name: str) -> int: ...

    def read(self) -> bool: ...

    def get_value(self, index: int) -> str | None: ...


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value != value:
        return None
    if isinstance(value, str):
        return value
    return str(value)


class DataFrameRowSource:
    """
    RowSource over the rows of a pandas DataFrame.

    Cells are handed out as text; missing cells (None/NaN) come back as None.
    Column names are matched case-sensitively first, then ignoring case.
    """

    def __init__(self, df: pd.DataFrame) -> None:
        self._names = [str(name) for name in df.columns]
        self._rows = df.itertuples(index=False, name=None)
        self._current: tuple | None = None
        self.records_read = 0

    @property
    def field_count(self) -> int:
        return len(self._names)

    def get_name(self, index: int) -> str:
        if not 0 <= index < len(self._names):
            raise ColumnNotFoundError(index)
        return self._names[index]

    def get_ordinal(self, name: str) -> int:
        if name in self._names:
            return self._names.index(name)
        lowered = name.casefold()
        for index, candidate in enumerate(self._names):
            if candidate.casefold() == lowered:
                return index
        raise ColumnNotFoundError(name)

    def read(self) -> bool:
        try:
            self._current = next(self._rows)
        except StopIteration:
            self._current = None
            return False
        self.records_read += 1
        return True

    def get_value(self, index: int) -> str | None:
        if self._current is None:
            raise RuntimeError("read() must return True before values can be accessed")
        return _as_text(self._current[index])
