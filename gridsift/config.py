"""Configuration settings for the gridsift package."""

from __future__ import annotations

from dataclasses import dataclass, field

from gridsift.constants import (
    DEFAULT_CHECKED_RECORDS,
    DEFAULT_FALSE_VALUE,
    DEFAULT_MAX_SAMPLE_CHARS,
    DEFAULT_MIN_SAMPLES,
    DEFAULT_POSSIBLE_MATCH_RATIO,
    DEFAULT_SAMPLE_VALUES,
    DEFAULT_TREAT_AS_NULL,
    DEFAULT_TRUE_VALUE,
    LIST_DELIMITER,
)


@dataclass
class GuessSettings:
    """
    Settings that control format guessing.

    This is the core dataclass used by sampling and inference.
    CLI layer should use CLIConfig (Pydantic) and convert to this.
    """

    enabled: bool = True
    checked_records: int = DEFAULT_CHECKED_RECORDS
    sample_values: int = DEFAULT_SAMPLE_VALUES
    min_samples: int = DEFAULT_MIN_SAMPLES
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
    max_sample_chars: int = DEFAULT_MAX_SAMPLE_CHARS
    possible_match_ratio: float = DEFAULT_POSSIBLE_MATCH_RATIO
    columns: list[str] = field(default_factory=list)
    verbose: bool = False
    profile: bool = False

    @property
    def treat_as_null_values(self) -> set[str]:
        return {part.strip() for part in self.treat_as_null.split(LIST_DELIMITER) if part.strip()}

    def enabled_detectors(self) -> set[str]:
        """Names of the detectors switched on by these settings."""
        from gridsift.inference.detectors import (
            DETECT_BOOLEAN,
            DETECT_DATETIME,
            DETECT_ESCAPED_TEXT,
            DETECT_GUID,
            DETECT_NUMERIC,
            DETECT_PERCENTAGE,
            DETECT_SERIAL_DATE,
        )

        enabled = set()
        if self.detect_boolean:
            enabled.add(DETECT_BOOLEAN)
        if self.detect_guid:
            enabled.add(DETECT_GUID)
        if self.detect_numbers:
            enabled.add(DETECT_NUMERIC)
        if self.detect_percentage:
            enabled.add(DETECT_PERCENTAGE)
        if self.detect_date_time:
            enabled.add(DETECT_DATETIME)
            if self.serial_date_time:
                enabled.add(DETECT_SERIAL_DATE)
        if self.detect_escaped_text:
            enabled.add(DETECT_ESCAPED_TEXT)
        return enabled

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValidationError: If any configuration value is invalid
        """
        from gridsift.exceptions import ValidationError

        if self.checked_records < 1:
            raise ValidationError(f"checked_records must be positive, got {self.checked_records}")
        if self.sample_values < 1:
            raise ValidationError(f"sample_values must be positive, got {self.sample_values}")
        if self.min_samples < 1:
            raise ValidationError(f"min_samples must be positive, got {self.min_samples}")
        if self.max_sample_chars < 1:
            raise ValidationError(
                f"max_sample_chars must be positive, got {self.max_sample_chars}"
            )
        if not 0.0 < self.possible_match_ratio <= 1.0:
            raise ValidationError(
                f"possible_match_ratio must be in (0, 1], got {self.possible_match_ratio}"
            )
        if not self.true_value.strip() or not self.false_value.strip():
            raise ValidationError("true_value and false_value must not be empty")
        true_literals = {v.strip().casefold() for v in self.true_value.split(LIST_DELIMITER)}
        false_literals = {v.strip().casefold() for v in self.false_value.split(LIST_DELIMITER)}
        overlap = (true_literals & false_literals) - {""}
        if overlap:
            raise ValidationError(
                f"true_value and false_value share literals: {sorted(overlap)}"
            )
        if not isinstance(self.columns, list):
            raise ValidationError("columns must be a list of column names")
