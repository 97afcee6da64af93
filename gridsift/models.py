"""Data models for the gridsift package."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gridsift.value_format import DataType, ValueFormat


@dataclass(frozen=True)
class Column:
    """Persisted column configuration: the committed format and whether to skip it."""

    name: str
    value_format: ValueFormat = field(default_factory=ValueFormat)
    ignore: bool = False

    def with_value_format(self, value_format: ValueFormat) -> Column:
        return Column(name=self.name, value_format=value_format, ignore=self.ignore)


@dataclass(frozen=True)
class SampleResult:
    """
    Raw text values read from one column.

    Values are distinct, trimmed and in the order they were first seen.
    records_read counts the source rows scanned to collect them.
    """

    values: tuple[str, ...] = ()
    records_read: int = 0

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class GuessResult:
    """
    Outcome of guessing a column format.

    found_format is set only when every sample fits; possible_match holds the
    closest runner-up when most but not all samples fit.
    """

    found_format: ValueFormat | None = None
    possible_match: ValueFormat | None = None
    is_possible_match: bool = False
    non_matching_examples: tuple[str, ...] = ()

    @property
    def found(self) -> bool:
        """True if a format fits every sample."""
        return self.found_format is not None

    @property
    def suggestion(self) -> ValueFormat | None:
        """The format to offer: the found one, else the possible match."""
        return self.found_format or self.possible_match

    def to_dict(self) -> dict:
        """Convert result to dictionary format."""
        return {
            "found_format": self.found_format.to_dict() if self.found_format else None,
            "possible_match": self.possible_match.to_dict() if self.possible_match else None,
            "is_possible_match": self.is_possible_match,
            "non_matching_examples": list(self.non_matching_examples),
        }


@dataclass
class ValueCluster:
    """One distinct displayed value of a column and how often it occurs."""

    display_text: str
    source_value: Any
    count: int
    condition: str
    active: bool = False


class ClusterOutcome(str, Enum):
    ERROR = "Error"
    WRONG_TYPE = "WrongType"
    TOO_MANY_VALUES = "TooManyValues"
    NO_VALUES = "NoValues"
    LIST_FILLED = "ListFilled"


@dataclass(frozen=True)
class ClusterCatalogue:
    """Value clusters of a column together with how building them went."""

    outcome: ClusterOutcome
    clusters: tuple[ValueCluster, ...] = ()
    column_name: str = ""
    value_type: DataType = DataType.STRING
    message: str = ""

    def __iter__(self):
        return iter(self.clusters)

    def __len__(self) -> int:
        return len(self.clusters)

    @property
    def active_clusters(self) -> list[ValueCluster]:
        return [cluster for cluster in self.clusters if cluster.active]

    def find(self, display_text: str) -> ValueCluster | None:
        wanted = display_text.casefold()
        for cluster in self.clusters:
            if cluster.display_text.casefold() == wanted:
                return cluster
        return None
