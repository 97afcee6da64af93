"""Value clusters, column filters and the filterable data view."""

from gridsift.filtering.clusters import build_value_clusters, cluster_condition
from gridsift.filtering.composer import FilterComposer, combine_filters
from gridsift.filtering.expression import evaluate_filter, parse_filter, sql_name, sql_quote
from gridsift.filtering.logic import ColumnFilterLogic, ValueFilter, operators_for
from gridsift.filtering.view import DataView

__all__ = [
    "ColumnFilterLogic",
    "DataView",
    "FilterComposer",
    "ValueFilter",
    "build_value_clusters",
    "cluster_condition",
    "combine_filters",
    "evaluate_filter",
    "operators_for",
    "parse_filter",
    "sql_name",
    "sql_quote",
]
