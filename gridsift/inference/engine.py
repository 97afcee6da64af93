"""Guess the format of a column from a sample of its raw values."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from datetime import datetime

from gridsift.cancellation import CancellationToken, is_canceled
from gridsift.constants import (
    DATE_SEPARATORS,
    DEFAULT_FALSE_VALUE,
    DEFAULT_POSSIBLE_MATCH_RATIO,
    DEFAULT_TRUE_VALUE,
    MAX_NON_MATCHING_EXAMPLES,
)
from gridsift.culture import LocaleConfig, get_default_locale
from gridsift.inference.detectors import (
    DETECT_BOOLEAN,
    DETECT_DATETIME,
    DETECT_ESCAPED_TEXT,
    DETECT_GUID,
    DETECT_NUMERIC,
    DETECT_PERCENTAGE,
    DETECT_SERIAL_DATE,
    DetectorOutcome,
    MatchKind,
    detect_boolean,
    detect_date_with_format,
    detect_datetime,
    detect_escaped_text,
    detect_guid,
    detect_number,
    detect_serial_date,
)
from gridsift.logging import get_logger
from gridsift.models import GuessResult
from gridsift.value_format import DataType, ValueFormat

logger = get_logger(__name__)

DEFAULT_DETECTORS = frozenset(
    {DETECT_BOOLEAN, DETECT_NUMERIC, DETECT_PERCENTAGE, DETECT_DATETIME, DETECT_ESCAPED_TEXT}
)

# lower wins; every data type a detector can report has a rank
PRIORITY: dict[DataType, int] = {
    DataType.BOOLEAN: 0,
    DataType.GUID: 1,
    DataType.DATETIME: 2,
    DataType.PERCENTAGE: 3,
    DataType.NUMERIC: 4,
    DataType.DOUBLE: 4,
    DataType.INTEGER: 5,
    DataType.TEXT_TO_HTML: 6,
    DataType.TEXT_UNESCAPE: 6,
    DataType.STRING: 7,
}


def _prior_format(
    prior: ValueFormat | str, samples: Sequence[str], locale: LocaleConfig
) -> ValueFormat:
    if isinstance(prior, ValueFormat):
        return prior
    counts = {sep: sum(1 for value in samples if sep in value) for sep in DATE_SEPARATORS}
    separator = max(counts, key=counts.get) if any(counts.values()) else locale.date_separator
    return ValueFormat(
        DataType.DATETIME,
        date_format=prior,
        date_separator=separator,
        time_separator=locale.time_separator,
    )


def _distinct(samples: Sequence[str]) -> list[str]:
    values = []
    seen: set[str] = set()
    for sample in samples:
        if sample is None:
            continue
        value = sample.strip()
        if value and value not in seen:
            seen.add(value)
            values.append(value)
    return values


def resolve(
    outcomes: Sequence[DetectorOutcome], possible_match_ratio: float = DEFAULT_POSSIBLE_MATCH_RATIO
) -> GuessResult:
    """
    Pick the result from detector outcomes.

    Total matches are ranked by PRIORITY; the first outcome wins among equal
    ranks. Without one, the partial match with the highest share at or
    above possible_match_ratio becomes the possible match. When nothing
    matched at all, the examples come from the highest ranked outcome that
    lists any.
    """
    winners = [outcome for outcome in outcomes if outcome.kind == MatchKind.TOTAL]
    if winners:
        best = min(winners, key=lambda outcome: PRIORITY[outcome.data_type])
        return GuessResult(found_format=best.value_format)

    partial = [outcome for outcome in outcomes if outcome.kind == MatchKind.PARTIAL]
    candidates = [
        outcome
        for outcome in partial
        if outcome.ratio >= possible_match_ratio and outcome.value_format is not None
    ]
    if candidates:
        best = max(candidates, key=lambda outcome: (outcome.ratio, -PRIORITY[outcome.data_type]))
        return GuessResult(
            possible_match=best.value_format,
            is_possible_match=True,
            non_matching_examples=best.non_matching,
        )
    if partial:
        closest = max(partial, key=lambda outcome: (outcome.ratio, -PRIORITY[outcome.data_type]))
        return GuessResult(non_matching_examples=closest.non_matching)
    for outcome in sorted(outcomes, key=lambda outcome: PRIORITY[outcome.data_type]):
        if outcome.non_matching:
            return GuessResult(non_matching_examples=outcome.non_matching)
    return GuessResult()


def guess_format(
    samples: Sequence[str],
    min_required_matches: int = 1,
    enabled_detectors: Collection[str] = DEFAULT_DETECTORS,
    true_literals: str = DEFAULT_TRUE_VALUE,
    false_literals: str = DEFAULT_FALSE_VALUE,
    prior_date_format: ValueFormat | str | None = None,
    *,
    locale: LocaleConfig | None = None,
    remove_currency_symbols: bool = True,
    possible_match_ratio: float = DEFAULT_POSSIBLE_MATCH_RATIO,
    cancellation_token: CancellationToken | None = None,
    now: datetime | None = None,
) -> GuessResult:
    """
    Guess the format of a column from sample values.

    A detector only produces found_format when every distinct sample value
    fits it. Numbers and freely searched dates also need at least
    min_required_matches distinct values; booleans, GUIDs and a known prior
    date format do not. When several detectors fit everything the most
    specific one wins (Boolean, GUID, DateTime, Percentage, Numeric,
    Integer). Otherwise the closest partial match is returned as
    possible_match, together with the first values that did not fit.

    Malformed values never raise. A canceled guess returns the result of
    the detectors that already ran.

    Args:
        samples: Raw text values, duplicates and blanks allowed
        min_required_matches: Distinct values needed before numbers/dates are guessed
        enabled_detectors: Names of the detectors to run
        true_literals: Extra literals read as True, separated by ``;``
        false_literals: Extra literals read as False, separated by ``;``
        prior_date_format: A date format the column is already known to use
        locale: Conventions to guess with; the process default when omitted
    """
    locale = locale or get_default_locale()
    values = _distinct(samples)
    if not values:
        return GuessResult()

    enabled = set(enabled_detectors)
    enough = len(values) >= min_required_matches
    checks = []
    if prior_date_format:
        prior = _prior_format(prior_date_format, values, locale)
        checks.append(lambda: detect_date_with_format(values, prior))
    if DETECT_BOOLEAN in enabled:
        checks.append(lambda: detect_boolean(values, true_literals, false_literals))
    if DETECT_GUID in enabled:
        checks.append(lambda: detect_guid(values))
    if enough and DETECT_DATETIME in enabled:
        checks.append(lambda: detect_datetime(values, locale))
    if enough and DETECT_SERIAL_DATE in enabled:
        checks.append(lambda: detect_serial_date(values, now))
    if enough and DETECT_PERCENTAGE in enabled:
        checks.append(
            lambda: detect_number(
                values, locale, percentage=True, remove_currency_symbols=remove_currency_symbols
            )
        )
    if enough and DETECT_NUMERIC in enabled:
        checks.append(
            lambda: detect_number(values, locale, remove_currency_symbols=remove_currency_symbols)
        )

    outcomes: list[DetectorOutcome] = []
    for check in checks:
        if is_canceled(cancellation_token):
            logger.info("format_guess_canceled", evaluated=len(outcomes))
            break
        outcomes.append(check())

    result = resolve(outcomes, possible_match_ratio)
    if outcomes and result.suggestion is None and not result.non_matching_examples:
        # every detector that ran rejected every value
        result = GuessResult(non_matching_examples=tuple(values[:MAX_NON_MATCHING_EXAMPLES]))
    if (
        result.suggestion is None
        and DETECT_ESCAPED_TEXT in enabled
        and not is_canceled(cancellation_token)
    ):
        escaped = detect_escaped_text(values)
        if escaped.kind == MatchKind.TOTAL:
            result = GuessResult(found_format=escaped.value_format)
        elif escaped.matched >= max(1, min_required_matches):
            result = GuessResult(
                possible_match=escaped.value_format,
                is_possible_match=True,
                non_matching_examples=result.non_matching_examples,
            )

    suggestion = result.suggestion
    logger.debug(
        "format_guessed",
        samples=len(values),
        detectors=[outcome.data_type.value for outcome in outcomes],
        found=result.found_format.data_type.value if result.found_format else None,
        possible_match=result.is_possible_match,
        suggestion=suggestion.description() if suggestion else None,
    )
    return result
