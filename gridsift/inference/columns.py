"""Guess formats for every column of a row source."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from gridsift.cancellation import CancellationToken, is_canceled
from gridsift.config import GuessSettings
from gridsift.culture import LocaleConfig, get_default_locale
from gridsift.inference.engine import guess_format
from gridsift.inference.sampling import collect_samples
from gridsift.logging import get_logger
from gridsift.models import Column, GuessResult, SampleResult
from gridsift.source import RowSource
from gridsift.utils.profiling import profile_section
from gridsift.value_format import DataType, ValueFormat

logger = get_logger(__name__)


def id_column_suffix(name: str) -> int:
    """Length of an identifier suffix such as ``ID`` or `` Ref`` at the end of name, else 0."""
    if not name.rstrip():
        return 0
    lowered = name.lower()
    if lowered.endswith(" text"):
        return 5
    if name.endswith("Text"):
        return 4
    if lowered.endswith(" ref"):
        return 4
    if name.endswith("Ref"):
        return 3
    if lowered.endswith(" id"):
        return 3
    if (name.endswith("ID") or name.endswith("Id")) and not lowered.endswith("guid"):
        return 2
    return 0


@dataclass(frozen=True)
class ColumnGuess:
    """Guess for one column; result is None when the column was skipped."""

    column: Column
    samples: SampleResult | None
    result: GuessResult | None
    message: str

    @property
    def suggested_column(self) -> Column:
        """The column with the suggested format, or unchanged when nothing was found."""
        if self.result is None or self.result.suggestion is None:
            return self.column
        return self.column.with_value_format(self.result.suggestion)


def _skip_reason(column: Column, settings: GuessSettings) -> str | None:
    if column.ignore:
        return "ignored"
    if column.value_format.data_type not in (DataType.STRING, DataType.DATETIME):
        return f"already set to {column.value_format.description()}"
    if settings.ignore_id_columns and id_column_suffix(column.name):
        return "identifier column"
    if settings.columns and column.name not in settings.columns:
        return "not selected"
    return None


def common_date_format(columns: Iterable[Column]) -> ValueFormat | None:
    """Most used DateTime format among the columns that are not ignored."""
    used = Counter(
        column.value_format
        for column in columns
        if not column.ignore and column.value_format.data_type == DataType.DATETIME
    )
    if not used:
        return None
    return used.most_common(1)[0][0]


def guess_columns(
    source: RowSource,
    settings: GuessSettings | None = None,
    columns: Sequence[Column] | None = None,
    locale: LocaleConfig | None = None,
    cancellation_token: CancellationToken | None = None,
    profile: dict[str, float] | None = None,
) -> list[ColumnGuess]:
    """
    Sample a row source once and guess a format for each column.

    Columns that are ignored, already carry a non-text format, look like
    identifiers (with ignore_id_columns) or are not listed in
    settings.columns are skipped. The prior date format of a column is its
    committed DateTime format, else settings.date_format, else the date
    format used most by the columns committed or found so far, so a column
    with few values follows the date convention of the rest of the file.
    The returned guesses never change the given columns; callers apply
    suggested_column themselves.

    Raises:
        ValidationError: If settings are invalid
        SourceReadError: If the row source fails while sampling
    """
    settings = settings or GuessSettings()
    settings.validate()
    locale = locale or get_default_locale()

    known = {column.name: column for column in columns or ()}
    all_columns = [
        known.get(source.get_name(index), Column(source.get_name(index)))
        for index in range(source.field_count)
    ]

    targets: dict[int, Column] = {}
    guesses: dict[int, ColumnGuess] = {}
    for index, column in enumerate(all_columns):
        reason = _skip_reason(column, settings) if settings.enabled else "guessing disabled"
        if reason is None:
            targets[index] = column
        else:
            guesses[index] = ColumnGuess(column, None, None, f"{column.name} - skipped: {reason}")

    if targets:
        with profile_section("collect_samples", profile):
            samples = collect_samples(
                source,
                targets.keys(),
                settings.checked_records,
                settings.sample_values,
                settings.treat_as_null_values,
                cancellation_token,
                settings.max_sample_chars,
            )
        detectors = settings.enabled_detectors()
        dated = list(all_columns)
        with profile_section("guess_formats", profile):
            for index, column in targets.items():
                if is_canceled(cancellation_token):
                    guesses[index] = ColumnGuess(column, None, None, f"{column.name} - canceled")
                    continue
                sample = samples[index]
                prior: ValueFormat | str | None = None
                if column.value_format.data_type == DataType.DATETIME:
                    prior = column.value_format
                elif settings.date_format:
                    prior = settings.date_format
                else:
                    prior = common_date_format(dated)
                result = guess_format(
                    sample.values,
                    settings.min_samples,
                    detectors,
                    settings.true_value,
                    settings.false_value,
                    prior,
                    locale=locale,
                    remove_currency_symbols=settings.remove_currency_symbols,
                    possible_match_ratio=settings.possible_match_ratio,
                    cancellation_token=cancellation_token,
                )
                guesses[index] = ColumnGuess(
                    column, sample, result, _describe(column, sample, result)
                )
                found = result.found_format
                if found is not None and found.data_type == DataType.DATETIME:
                    dated[index] = column.with_value_format(found)

    ordered = [guesses[index] for index in range(len(all_columns))]
    logger.info(
        "columns_guessed",
        columns=len(ordered),
        found=sum(1 for guess in ordered if guess.result and guess.result.found),
        possible=sum(1 for guess in ordered if guess.result and guess.result.is_possible_match),
    )
    return ordered


def _describe(column: Column, sample: SampleResult, result: GuessResult) -> str:
    if not sample.values:
        return f"{column.name} - no values found in {sample.records_read:,} records"
    if result.found_format is not None:
        return f"{column.name} - Format: {result.found_format.description()}"
    if result.possible_match is not None:
        examples = ", ".join(result.non_matching_examples)
        return (
            f"{column.name} - possible match {result.possible_match.description()}, "
            f"not matching: {examples}"
        )
    return f"{column.name} - no format found in {len(sample.values)} sample values"
