"""gridsift - guess column formats and filter rows of delimited text data."""

__version__ = "0.1.0"

from gridsift.cancellation import CancellationToken
from gridsift.config import GuessSettings
from gridsift.culture import LocaleConfig, get_default_locale, set_default_locale
from gridsift.exceptions import (
    ColumnNotFoundError,
    DataLoadError,
    FilterExpressionError,
    GridSiftError,
    OperationCanceledError,
    SourceReadError,
    ValidationError,
)
from gridsift.inference import collect_samples, guess_columns, guess_format
from gridsift.models import (
    ClusterCatalogue,
    ClusterOutcome,
    Column,
    GuessResult,
    SampleResult,
    ValueCluster,
)
from gridsift.source import RowSource
from gridsift.value_format import DataType, ValueFormat

__all__ = [
    "collect_samples",
    "guess_format",
    "guess_columns",
    "GuessSettings",
    "CancellationToken",
    "LocaleConfig",
    "get_default_locale",
    "set_default_locale",
    "RowSource",
    "DataType",
    "ValueFormat",
    "Column",
    "SampleResult",
    "GuessResult",
    "ValueCluster",
    "ClusterCatalogue",
    "ClusterOutcome",
    "GridSiftError",
    "ValidationError",
    "ColumnNotFoundError",
    "SourceReadError",
    "DataLoadError",
    "FilterExpressionError",
    "OperationCanceledError",
]
