"""Tests for the gridsift.filtering.expression module."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from gridsift.exceptions import FilterExpressionError
from gridsift.filtering.expression import (
    date_literal,
    escape_like,
    evaluate_filter,
    number_literal,
    parse_date_literal,
    parse_filter,
    sql_name,
    sql_quote,
    tokenize,
)


@pytest.fixture
def frame():
    return pd.DataFrame(
        {
            "Name": ["Alice", "bob", None, "Carol"],
            "Amount": [10, 2.5, None, 7],
            "Ordered": [
                datetime(2023, 1, 5),
                datetime(2023, 1, 6, 12, 0),
                None,
                datetime(2023, 2, 1),
            ],
            "Paid": [True, False, None, True],
            "Code": ["5", "05", "x", "50%"],
        },
        dtype=object,
    )


def _keep(expression, frame):
    return evaluate_filter(expression, frame).tolist()


def test_text_equality_ignores_case(frame):
    assert _keep("[Name] = 'alice'", frame) == [True, False, False, False]


def test_number_comparison(frame):
    assert _keep("[Amount] >= 7", frame) == [True, False, False, True]
    assert _keep("[Amount] > -1", frame) == [True, True, False, True]


def test_null_comparisons_are_never_true(frame):
    assert _keep("[Name] <> 'Alice'", frame) == [False, True, False, True]
    assert _keep("NOT ([Name] = 'Alice')", frame) == [False, True, False, True]


def test_is_null(frame):
    assert _keep("[Name] IS NULL", frame) == [False, False, True, False]
    assert _keep("[Name] IS NOT NULL", frame) == [True, True, False, True]
    assert _keep("NOT [Name] IS NULL", frame) == [True, True, False, True]


def test_like_wildcards(frame):
    assert _keep("[Name] LIKE 'a*'", frame) == [True, False, False, False]
    assert _keep("[Name] LIKE '%o%'", frame) == [False, True, False, True]
    assert _keep("[Name] NOT LIKE '%o%'", frame) == [True, False, False, False]


def test_like_escaped_wildcard(frame):
    assert _keep("[Code] LIKE '50[%]'", frame) == [False, False, False, True]
    assert _keep("[Code] LIKE '5*'", frame) == [True, False, False, True]


def test_in_list(frame):
    assert _keep("[Name] IN ('Alice', 'carol')", frame) == [True, False, False, True]
    assert _keep("[Name] NOT IN ('Alice', 'carol')", frame) == [False, True, False, False]


def test_date_range(frame):
    expression = "[Ordered] >= #01/06/2023# AND [Ordered] < #01/07/2023#"

    assert _keep(expression, frame) == [False, True, False, False]


def test_date_literal_with_time(frame):
    assert _keep("[Ordered] = #01/06/2023 12:00:00#", frame) == [False, True, False, False]


def test_aware_dates_compare_with_plain_literals():
    aware = pd.DataFrame(
        {"At": [datetime(2023, 1, 5, 10, tzinfo=timezone(timedelta(hours=2)))]}, dtype=object
    )

    assert _keep("[At] > #01/05/2023#", aware) == [True]


def test_or_with_unknown_operand(frame):
    assert _keep("[Amount] > 5 OR [Name] = 'bob'", frame) == [True, True, False, True]


def test_and_binds_tighter_than_or(frame):
    expression = "[Name] = 'Alice' OR [Name] = 'bob' AND [Amount] > 5"

    assert _keep(expression, frame) == [True, False, False, False]


def test_boolean_columns(frame):
    assert _keep("[Paid] = true", frame) == [True, False, False, True]
    assert _keep("[Paid]", frame) == [True, False, False, True]
    assert _keep("NOT [Paid]", frame) == [False, True, False, False]


def test_text_compared_with_number_is_converted(frame):
    assert _keep("[Code] = 5", frame) == [True, True, False, False]


def test_functions(frame):
    assert _keep("LEN([Name]) > 3", frame) == [True, False, False, True]
    assert _keep("ISNULL([Name], 'none') = 'NONE'", frame) == [False, False, True, False]
    assert _keep("SUBSTRING([Name], 1, 2) = 'al'", frame) == [True, False, False, False]
    assert _keep("TRIM('  x ') = 'x'", frame) == [True, True, True, True]
    assert _keep("CONVERT([Amount], 'System.String') = '10'", frame) == [
        True,
        False,
        False,
        False,
    ]


def test_column_lookup_ignores_case_and_allows_bare_names(frame):
    assert _keep("[name] = 'Alice'", frame) == [True, False, False, False]
    assert _keep("Name = 'Alice'", frame) == [True, False, False, False]


def test_escaped_column_name_and_quote():
    odd = pd.DataFrame({"a]b": ["it's", "no"]}, dtype=object)

    expression = sql_name("a]b") + " = " + sql_quote("it's")

    assert _keep(expression, odd) == [True, False]


def test_empty_expression_keeps_all_rows(frame):
    assert _keep("", frame) == [True] * 4
    assert _keep("   ", frame) == [True] * 4


def test_unknown_column(frame):
    with pytest.raises(FilterExpressionError) as exc_info:
        evaluate_filter("[Missing] = 1", frame)

    assert "Cannot find column [Missing]" in str(exc_info.value)


@pytest.mark.parametrize(
    "expression",
    [
        "[Name] =",
        "[Name] = 'open",
        "[Name = 'x'",
        "[Ordered] = #99/99/2023#",
        "[Ordered] = #01/01/2023",
        "[Name] LIKE 'a[b'",
        "LEN([Name], 2) > 1",
        "[Amount] = 1)",
        "([Amount] = 1",
        "[Name] IS 'x'",
        "[Amount] ? 1",
        "AND [Amount] = 1",
    ],
)
def test_invalid_expressions(expression):
    with pytest.raises(FilterExpressionError):
        parse_filter(expression)


def test_error_reports_position():
    with pytest.raises(FilterExpressionError) as exc_info:
        parse_filter("[Amount] = 1)")

    assert exc_info.value.position == 12
    assert str(exc_info.value) == "Unexpected ')' at position 12"


def test_tokenize():
    kinds = [token.kind for token in tokenize("[A] >= -1.5 AND B != 'x'")]

    assert kinds == ["name", "op", "op", "number", "word", "word", "op", "string", "end"]
    assert tokenize("a != b")[1].value == "<>"


def test_literal_helpers():
    assert escape_like("50%_[x]*'") == "50[%]_[[]x[]][*]''"
    assert date_literal(datetime(2023, 1, 5, 8, 30)) == "#01/05/2023#"
    assert date_literal(datetime(2023, 1, 5, 8, 30), with_time=True) == "#01/05/2023 08:30:00#"
    assert number_literal(True) == "true"
    assert number_literal(2.5) == "2.5"
    assert number_literal(3) == "3"


def test_parse_date_literal_formats():
    assert parse_date_literal("01/05/2023") == datetime(2023, 1, 5)
    assert parse_date_literal("1/5/2023") == datetime(2023, 1, 5)
    assert parse_date_literal("2023-01-05T10:30:00") == datetime(2023, 1, 5, 10, 30)
    assert parse_date_literal("5. Januar") is None


def test_unknown_comparisons_follow_three_valued_logic(frame):
    either = evaluate_filter("[Amount] > 5 OR [Name] IS NULL", frame)
    negated = evaluate_filter("NOT ([Amount] > 5)", frame)

    assert either.dtype == bool
    assert either.tolist() == [True, False, True, True]
    assert negated.tolist() == [False, True, False, False]
    assert negated.index.equals(frame.index)
