"""Format inference: sampling, type detectors and the guessing engine."""

from gridsift.inference.columns import ColumnGuess, common_date_format, guess_columns
from gridsift.inference.detectors import ALL_DETECTORS, DetectorOutcome, MatchKind
from gridsift.inference.engine import DEFAULT_DETECTORS, guess_format
from gridsift.inference.sampling import collect_samples, collect_samples_by_name

__all__ = [
    "ALL_DETECTORS",
    "DEFAULT_DETECTORS",
    "ColumnGuess",
    "DetectorOutcome",
    "MatchKind",
    "collect_samples",
    "collect_samples_by_name",
    "common_date_format",
    "guess_columns",
    "guess_format",
]
