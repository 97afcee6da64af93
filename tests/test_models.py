"""Tests for the gridsift.models module."""

from gridsift.models import (
    ClusterCatalogue,
    ClusterOutcome,
    Column,
    GuessResult,
    SampleResult,
    ValueCluster,
)
from gridsift.value_format import DataType, ValueFormat


def test_guess_result_empty():
    """Test that an empty GuessResult has nothing to suggest."""
    result = GuessResult()

    assert result.found is False
    assert result.suggestion is None
    assert result.non_matching_examples == ()


def test_guess_result_prefers_found_format():
    """Test that the found format is suggested over a possible match."""
    found = ValueFormat(DataType.INTEGER)
    possible = ValueFormat(DataType.NUMERIC)

    assert GuessResult(found_format=found).suggestion is found
    assert GuessResult(possible_match=possible, is_possible_match=True).suggestion is possible


def test_guess_result_to_dict():
    """Test conversion of a GuessResult to a dictionary."""
    result = GuessResult(
        possible_match=ValueFormat(DataType.BOOLEAN),
        is_possible_match=True,
        non_matching_examples=("maybe",),
    )

    data = result.to_dict()

    assert data["found_format"] is None
    assert data["possible_match"]["data_type"] == "Boolean"
    assert data["is_possible_match"] is True
    assert data["non_matching_examples"] == ["maybe"]


def test_sample_result_length():
    """Test that len() counts the distinct sample values."""
    sample = SampleResult(values=("a", "b"), records_read=10)

    assert len(sample) == 2
    assert len(SampleResult()) == 0


def test_column_with_value_format_keeps_name_and_ignore():
    """Test that replacing the format keeps the rest of the column."""
    column = Column("Amount", ignore=True)

    updated = column.with_value_format(ValueFormat(DataType.NUMERIC))

    assert updated.name == "Amount"
    assert updated.ignore is True
    assert updated.value_format.data_type == DataType.NUMERIC
    assert column.value_format.data_type == DataType.STRING


def test_cluster_catalogue_lookup_and_active_clusters():
    """Test finding clusters by display text and listing the active ones."""
    clusters = (
        ValueCluster("Alice", "Alice", 2, "([Customer] = 'Alice')", active=True),
        ValueCluster("Bob", "Bob", 1, "([Customer] = 'Bob')"),
    )
    catalogue = ClusterCatalogue(ClusterOutcome.LIST_FILLED, clusters, "Customer")

    assert len(catalogue) == 2
    assert list(catalogue) == list(clusters)
    assert catalogue.find("BOB") is clusters[1]
    assert catalogue.find("Carol") is None
    assert catalogue.active_clusters == [clusters[0]]
