"""Store and restore per-column view settings, including active filters, as JSON."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_pascal

from gridsift.exceptions import ValidationError
from gridsift.logging import get_logger

if TYPE_CHECKING:
    from gridsift.filtering.composer import FilterComposer
    from gridsift.filtering.view import DataView

logger = get_logger(__name__)


class ValueFilterSetting(BaseModel):
    """A stored value selection: its expression term and display text."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, alias_generator=to_pascal)

    sql_condition: str = Field(alias="SQLCondition")
    display: str = ""


class ColumnSetting(BaseModel):
    """
    How one column is shown and filtered.

    sort is 0 for unsorted, 1 ascending, 2 descending. When value_filters is
    not empty it takes precedence over operator/value_text/value_date.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, alias_generator=to_pascal)

    data_property_name: str
    visible: bool = True
    sort: int = Field(default=0, ge=0, le=2)
    display_index: int = 0
    width: int = 100
    operator: str = ""
    value_text: str = ""
    value_date: datetime | None = None
    value_filters: list[ValueFilterSetting] = Field(default_factory=list)


_SETTINGS = TypeAdapter(list[ColumnSetting])


def settings_for_view(view: DataView) -> list[ColumnSetting]:
    """Default settings for every column of a view, in view order."""
    return [
        ColumnSetting(data_property_name=name, display_index=index)
        for index, name in enumerate(view.column_names)
    ]


def dump_view_settings(columns: Sequence[ColumnSetting], composer: FilterComposer) -> str:
    """
    Serialize column settings with the composer's active filters filled in.

    Returns:
        JSON text using the stored key names (``DataPropertyName``, ``ValueFilters``, ...)
    """
    filters = {name.casefold(): logic for name, logic in composer.filters.items()}
    stored = []
    for setting in columns:
        logic = filters.get(setting.data_property_name.casefold())
        update = {"operator": "", "value_text": "", "value_date": None, "value_filters": []}
        if logic is not None and logic.active:
            if logic.value_filters:
                update["value_filters"] = [
                    ValueFilterSetting(sql_condition=value.condition, display=value.display)
                    for value in logic.value_filters
                    if value.condition
                ]
            else:
                update.update(
                    operator=logic.operator,
                    value_text=logic.value_text,
                    value_date=logic.value_date,
                )
        stored.append(setting.model_copy(update=update))
    return _SETTINGS.dump_json(stored, by_alias=True).decode("utf-8")


def load_view_settings(text: str) -> list[ColumnSetting]:
    """
    Parse stored view settings; empty text means no settings.

    Raises:
        ValidationError: If text is not valid settings JSON
    """
    if not text or not text.strip():
        return []
    try:
        return _SETTINGS.validate_json(text)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid view settings: {exc}") from exc


def restore_filters(settings: Sequence[ColumnSetting], composer: FilterComposer) -> int:
    """
    Rebuild column order and filters on composer from stored settings.

    Settings for columns the composer does not know are skipped. Columns
    are put in stored display order, unknown ones keep their place after.

    Returns:
        Number of filters restored
    """
    from gridsift.filtering.logic import ColumnFilterLogic, ValueFilter

    by_name = {name.casefold(): name for name in composer.column_order}
    ordered: list[str] = []
    restored = 0
    for setting in sorted(settings, key=lambda item: item.display_index):
        name = by_name.get(setting.data_property_name.casefold())
        if name is None:
            logger.info("view_setting_skipped", column=setting.data_property_name)
            continue
        ordered.append(name)
        data_type = composer.view.value_format(name).data_type
        if setting.value_filters:
            logic = ColumnFilterLogic.create(
                name,
                data_type,
                value_filters=[
                    ValueFilter(value.sql_condition, value.display)
                    for value in setting.value_filters
                ],
            )
        elif setting.operator:
            try:
                logic = ColumnFilterLogic.create(
                    name, data_type, setting.operator, setting.value_text, setting.value_date
                )
            except ValidationError as exc:
                logger.warning("view_setting_filter_skipped", column=name, error=str(exc))
                continue
        else:
            continue
        if logic.expression:
            composer.set_filter(logic)
            restored += 1

    ordered += [name for name in composer.column_order if name not in ordered]
    composer.reset_columns(ordered)
    return restored
