"""Save and load guessing recipes (YAML settings files)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from gridsift.config import GuessSettings
from gridsift.exceptions import ValidationError

RECIPE_FIELDS = (
    "checked_records",
    "sample_values",
    "min_samples",
    "detect_boolean",
    "detect_guid",
    "detect_numbers",
    "detect_percentage",
    "detect_date_time",
    "serial_date_time",
    "detect_escaped_text",
    "true_value",
    "false_value",
    "remove_currency_symbols",
    "ignore_id_columns",
    "date_format",
    "treat_as_null",
    "max_sample_chars",
    "possible_match_ratio",
)


class RecipeYaml(BaseModel):
    """
    Validated recipe schema.

    Keys are limited to the guessing settings; run options such as the
    column selection or verbosity are not part of a recipe.
    """

    model_config = ConfigDict(extra="forbid")

    checked_records: int | None = Field(default=None, ge=1)
    sample_values: int | None = Field(default=None, ge=1)
    min_samples: int | None = Field(default=None, ge=1)
    detect_boolean: bool | None = None
    detect_guid: bool | None = None
    detect_numbers: bool | None = None
    detect_percentage: bool | None = None
    detect_date_time: bool | None = None
    serial_date_time: bool | None = None
    detect_escaped_text: bool | None = None
    true_value: str | None = None
    false_value: str | None = None
    remove_currency_symbols: bool | None = None
    ignore_id_columns: bool | None = None
    date_format: str | None = None
    treat_as_null: str | None = None
    max_sample_chars: int | None = Field(default=None, ge=1)
    possible_match_ratio: float | None = Field(default=None, gt=0.0, le=1.0)

    @field_validator("treat_as_null", "date_format", mode="before")
    @classmethod
    def _join_lists(cls, value: Any) -> Any:
        # YAML lists are accepted for the delimited settings
        if isinstance(value, list):
            return ";".join(str(item) for item in value)
        return value

    def as_settings_kwargs(self) -> dict[str, Any]:
        """Return kwargs for GuessSettings, only for keys present in the file."""
        return {key: getattr(self, key) for key in self.model_fields_set if key in RECIPE_FIELDS}


def save_recipe(settings: GuessSettings, path: Path) -> None:
    """
    Save GuessSettings as a YAML recipe file.

    Raises:
        ValidationError: If settings are invalid
        FileNotFoundError: If destination directory does not exist
        IsADirectoryError: If path points to a directory
    """
    settings.validate()

    recipe_path = Path(path)
    if recipe_path.exists() and recipe_path.is_dir():
        raise IsADirectoryError(f"Recipe path is a directory: {recipe_path}")
    if recipe_path.parent and not recipe_path.parent.exists():
        raise FileNotFoundError(f"Recipe directory not found: {recipe_path.parent}")

    data = {key: getattr(settings, key) for key in RECIPE_FIELDS}
    with recipe_path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(data, fh, sort_keys=False, allow_unicode=True)


def load_recipe(path: Path) -> GuessSettings:
    """Load and validate a recipe from YAML.

    Raises:
        FileNotFoundError: if the recipe file is missing
        ValidationError: if YAML is invalid or does not match the schema
    """
    recipe_path = Path(path)
    if not recipe_path.exists():
        raise FileNotFoundError(f"Recipe file not found: {recipe_path}")

    try:
        with recipe_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ValidationError(f"Invalid YAML in recipe file: {exc}") from exc

    if not isinstance(data, dict):
        raise ValidationError("Recipe file must contain a top-level mapping")

    try:
        parsed = RecipeYaml.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(str(exc)) from exc

    settings = GuessSettings(**parsed.as_settings_kwargs())
    settings.validate()
    return settings
