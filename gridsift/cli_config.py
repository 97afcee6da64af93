"""Pydantic model for CLI options."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from gridsift.config import GuessSettings
from gridsift.constants import (
    DEFAULT_CHECKED_RECORDS,
    DEFAULT_FALSE_VALUE,
    DEFAULT_MAX_SAMPLE_CHARS,
    DEFAULT_MIN_SAMPLES,
    DEFAULT_POSSIBLE_MATCH_RATIO,
    DEFAULT_SAMPLE_VALUES,
    DEFAULT_TREAT_AS_NULL,
    DEFAULT_TRUE_VALUE,
    SUPPORTED_FORMATS,
)
from gridsift.exceptions import ValidationError

_BOOL_FIELDS = {
    "verbose",
    "quiet",
    "silent",
    "profile",
    "detect_boolean",
    "detect_guid",
    "detect_numbers",
    "detect_percentage",
    "detect_date_time",
    "serial_date_time",
    "detect_escaped_text",
    "remove_currency_symbols",
    "ignore_id_columns",
}
_INT_FIELDS = {"checked_records", "sample_values", "min_samples", "max_sample_chars"}
_FLOAT_FIELDS = {"possible_match_ratio"}


class CLIConfig(BaseModel):
    """Validated representation of CLI options."""

    model_config = ConfigDict(extra="forbid")

    path: Path = Field(..., description="Input file path")
    columns: list[str] = Field(default_factory=list, description="Columns to guess, all when empty")
    verbose: bool = False
    quiet: bool = False
    silent: bool = False
    profile: bool = False

    # Guess settings (kept here to keep CLI defaults in sync with core)
    checked_records: int = Field(default=DEFAULT_CHECKED_RECORDS, ge=1)
    sample_values: int = Field(default=DEFAULT_SAMPLE_VALUES, ge=1)
    min_samples: int = Field(default=DEFAULT_MIN_SAMPLES, ge=1)
    detect_boolean: bool = True
    detect_guid: bool = False
    detect_numbers: bool = True
    detect_percentage: bool = True
    detect_date_time: bool = True
    serial_date_time: bool = False
    detect_escaped_text: bool = True
    true_value: str = DEFAULT_TRUE_VALUE
    false_value: str = DEFAULT_FALSE_VALUE
    remove_currency_symbols: bool = True
    ignore_id_columns: bool = True
    date_format: str = ""
    treat_as_null: str = DEFAULT_TREAT_AS_NULL
    max_sample_chars: int = Field(default=DEFAULT_MAX_SAMPLE_CHARS, ge=1)
    possible_match_ratio: float = Field(default=DEFAULT_POSSIBLE_MATCH_RATIO, gt=0.0, le=1.0)

    @field_validator("path")
    @classmethod
    def _validate_path(cls, value: Path) -> Path:
        if not str(value).strip():
            raise ValueError("path must be provided")

        suffix = value.suffix.lower()
        if not suffix:
            return value.with_suffix(".csv")
        if suffix not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported file format: {suffix}. Supported formats: {sorted(SUPPORTED_FORMATS)}"
            )
        return value

    @field_validator("columns", mode="before")
    @classmethod
    def _split_columns(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @model_validator(mode="after")
    def _normalize_output_modes(self) -> CLIConfig:
        if self.silent:
            object.__setattr__(self, "quiet", False)
            object.__setattr__(self, "verbose", False)
        elif self.quiet:
            object.__setattr__(self, "verbose", False)
        return self

    def to_guess_settings(self) -> GuessSettings:
        """
        Convert to core GuessSettings and validate.

        Raises:
            ValidationError: if generated GuessSettings is invalid
        """
        settings = GuessSettings(
            checked_records=self.checked_records,
            sample_values=self.sample_values,
            min_samples=self.min_samples,
            detect_boolean=self.detect_boolean,
            detect_guid=self.detect_guid,
            detect_numbers=self.detect_numbers,
            detect_percentage=self.detect_percentage,
            detect_date_time=self.detect_date_time,
            serial_date_time=self.serial_date_time,
            detect_escaped_text=self.detect_escaped_text,
            true_value=self.true_value,
            false_value=self.false_value,
            remove_currency_symbols=self.remove_currency_symbols,
            ignore_id_columns=self.ignore_id_columns,
            date_format=self.date_format,
            treat_as_null=self.treat_as_null,
            max_sample_chars=self.max_sample_chars,
            possible_match_ratio=self.possible_match_ratio,
            columns=list(self.columns),
            verbose=self.verbose,
            profile=self.profile,
        )
        settings.validate()
        return settings

    @classmethod
    def from_cli(cls, **kwargs) -> CLIConfig:
        """
        Build from CLI args, normalizing validation errors to package ValidationError.
        """
        try:
            return cls(**kwargs)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc)) from exc

    @classmethod
    def from_sources(
        cls,
        cli_args: Mapping[str, Any],
        config_path: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
        recipe_path: str | Path | None = None,
    ) -> CLIConfig:
        """
        Merge config from recipe, YAML, environment, then CLI, respecting precedence.
        """
        merged: dict[str, Any] = {}

        if recipe_path:
            from gridsift.recipes import RECIPE_FIELDS, load_recipe

            recipe = load_recipe(Path(recipe_path))
            merged.update({key: getattr(recipe, key) for key in RECIPE_FIELDS})

        if config_path:
            merged.update(cls._load_yaml_config(config_path))

        env_values = cls._load_env_vars(environ or {})
        merged.update(env_values)

        cli_overrides = {key: value for key, value in cli_args.items() if value is not None}
        merged.update(cli_overrides)

        return cls.from_cli(**merged)

    @staticmethod
    def _parse_bool(value: str) -> bool:
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        raise ValidationError(f"Invalid boolean value: {value!r}")

    @classmethod
    def _load_env_vars(cls, environ: Mapping[str, str]) -> dict[str, Any]:
        field_names = [name for name in cls.model_fields if name != "columns"]
        env_map = {f"GRIDSIFT_{name.upper()}": name for name in field_names}
        env_map["GRIDSIFT_COLUMNS"] = "columns"

        parsed: dict[str, Any] = {}
        for env_var, field_name in env_map.items():
            if env_var not in environ:
                continue
            raw_value = environ[env_var]
            if field_name in _BOOL_FIELDS:
                parsed[field_name] = cls._parse_bool(raw_value)
            elif field_name in _INT_FIELDS:
                try:
                    parsed[field_name] = int(raw_value.strip())
                except ValueError as exc:
                    raise ValidationError(f"Invalid integer for {env_var}: {raw_value!r}") from exc
            elif field_name in _FLOAT_FIELDS:
                try:
                    parsed[field_name] = float(raw_value.strip())
                except ValueError as exc:
                    raise ValidationError(f"Invalid number for {env_var}: {raw_value!r}") from exc
            else:
                parsed[field_name] = raw_value
        return parsed

    @staticmethod
    def _load_yaml_config(path: str | Path) -> dict[str, Any]:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ValidationError(f"Invalid YAML in config file: {exc}") from exc

        if not isinstance(data, dict):
            raise ValidationError("Config file must contain a top-level mapping")

        return data
