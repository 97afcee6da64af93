"""Combine the filters of all columns into the view's row filter."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from gridsift.exceptions import ColumnNotFoundError
from gridsift.filtering.logic import ColumnFilterLogic
from gridsift.filtering.view import DataView
from gridsift.logging import get_logger

logger = get_logger(__name__)


def combine_filters(logics: Mapping[str, ColumnFilterLogic], column_order: Sequence[str]) -> str:
    """
    AND-join the active filters, each in parentheses, in column display order.

    Filters for columns missing from column_order follow in insertion order.
    """
    ordered = [name for name in column_order if name in logics]
    ordered += [name for name in logics if name not in ordered]
    parts = [f"({logics[name].expression})" for name in ordered if logics[name].is_effective]
    return " AND ".join(parts)


class FilterComposer:
    """
    Holds at most one filter per column and applies their combination to a view.

    There is a single writer; filters are replaced wholesale, never edited.
    """

    def __init__(self, view: DataView, column_order: Sequence[str] | None = None) -> None:
        self._view = view
        self._order = list(column_order if column_order is not None else view.column_names)
        self._filters: dict[str, ColumnFilterLogic] = {}

    @property
    def view(self) -> DataView:
        return self._view

    @property
    def column_order(self) -> list[str]:
        return list(self._order)

    @property
    def filters(self) -> dict[str, ColumnFilterLogic]:
        return dict(self._filters)

    def _key(self, name: str) -> str:
        if name in self._order:
            return name
        wanted = name.casefold()
        for candidate in self._order:
            if candidate.casefold() == wanted:
                return candidate
        raise ColumnNotFoundError(name)

    def get_filter(self, name: str) -> ColumnFilterLogic | None:
        return self._filters.get(self._key(name))

    def set_filter(self, logic: ColumnFilterLogic) -> None:
        """
        Replace the filter of logic.column_name.

        Raises:
            ColumnNotFoundError: If the column is not part of the column order
        """
        self._filters[self._key(logic.column_name)] = logic

    def remove_filter(self, name: str) -> bool:
        return self._filters.pop(self._key(name), None) is not None

    def deactivate(self, name: str) -> bool:
        key = self._key(name)
        logic = self._filters.get(key)
        if logic is None or not logic.active:
            return False
        self._filters[key] = logic.deactivated()
        return True

    def clear(self) -> None:
        self._filters.clear()

    def reset_columns(self, names: Sequence[str]) -> None:
        """Switch to a new set of columns, dropping filters of columns that are gone."""
        self._order = list(names)
        kept = set(self._order)
        self._filters = {name: logic for name, logic in self._filters.items() if name in kept}

    def combined_expression(self) -> str:
        return combine_filters(self._filters, self._order)

    def apply_filters(self) -> bool:
        """
        Set the combined expression as the view's row filter.

        Returns:
            False if the view already had exactly this filter, True if it was applied

        Raises:
            FilterExpressionError: If the combined expression is invalid
        """
        expression = self.combined_expression()
        if expression == self._view.row_filter:
            return False
        self._view.row_filter = expression
        active = sum(1 for logic in self._filters.values() if logic.is_effective)
        logger.debug("filters_combined", active=active)
        return True
