"""Parse and evaluate row filter expressions.

The syntax is the one grid views use for their row filter, for example::

    ([Name] = 'Smith' OR [Amount] >= 10) AND NOT [Ordered] IS NULL

Evaluation is three-valued: any comparison involving a null is unknown,
and only rows whose whole expression is true are kept.
"""

from __future__ import annotations

import operator
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from functools import lru_cache, reduce
from typing import Any

import pandas as pd
from pandas.api.types import infer_dtype

from gridsift import datetimes
from gridsift.exceptions import FilterExpressionError

_NUMBER = re.compile(r"(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_WORD = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_OPERATORS = ("<=", ">=", "<>", "!=", "=", "<", ">", "+", "-")
_COMPARISONS = ("=", "<>", "<", "<=", ">", ">=")
_KEYWORDS = frozenset({"AND", "OR", "NOT", "LIKE", "IS", "IN", "NULL", "TRUE", "FALSE"})
_DATE_LITERAL_FORMATS = (
    "MM/dd/yyyy HH:mm:ss",
    "MM/dd/yyyy HH:mm",
    "MM/dd/yyyy",
    "M/d/yyyy H:mm:ss",
    "M/d/yyyy",
    "yyyy-MM-ddTHH:mm:ss",
    "yyyy-MM-dd HH:mm:ss",
    "yyyy-MM-dd",
)
_LIKE_SPECIAL = frozenset("%*[]")


def sql_name(name: str) -> str:
    """Column reference for an expression: ``[name]`` with ``]`` doubled."""
    return "[" + name.replace("]", "]]") + "]"


def sql_quote(text: str) -> str:
    """String literal for an expression: ``'text'`` with ``'`` doubled."""
    return "'" + text.replace("'", "''") + "'"


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so text matches literally; quotes are doubled too."""
    out = []
    for char in text:
        if char in _LIKE_SPECIAL:
            out.append(f"[{char}]")
        elif char == "'":
            out.append("''")
        else:
            out.append(char)
    return "".join(out)


def date_literal(value: datetime, with_time: bool = False) -> str:
    """Date literal in invariant month/day/year order, e.g. ``#01/05/2023#``."""
    if with_time:
        return value.strftime("#%m/%d/%Y %H:%M:%S#")
    return value.strftime("#%m/%d/%Y#")


def number_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


@dataclass(frozen=True)
class Token:
    kind: str
    value: Any
    position: int


def _read_delimited(expression: str, start: int, closing: str) -> tuple[str, int]:
    out = []
    pos = start + 1
    while pos < len(expression):
        char = expression[pos]
        if char == closing:
            if expression[pos + 1 : pos + 2] == closing:
                out.append(char)
                pos += 2
                continue
            return "".join(out), pos + 1
        out.append(char)
        pos += 1
    raise FilterExpressionError(
        f"Missing closing {closing!r} for the text starting",
        expression,
        start,
    )


def parse_date_literal(text: str) -> datetime | None:
    value = text.strip()
    for pattern in _DATE_LITERAL_FORMATS:
        parsed = datetimes.parse_exact(value, pattern)
        if parsed is not None:
            return parsed
    return None


def tokenize(expression: str) -> list[Token]:
    """Split an expression into tokens, ending with an ``end`` token."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(expression):
        char = expression[pos]
        if char.isspace():
            pos += 1
            continue
        if char == "[":
            name, end = _read_delimited(expression, pos, "]")
            tokens.append(Token("name", name, pos))
            pos = end
            continue
        if char == "'":
            text, end = _read_delimited(expression, pos, "'")
            tokens.append(Token("string", text, pos))
            pos = end
            continue
        if char == "#":
            end = expression.find("#", pos + 1)
            if end == -1:
                raise FilterExpressionError(
                    "Missing closing '#' for the date starting",
                    expression,
                    pos,
                )
            parsed = parse_date_literal(expression[pos + 1 : end])
            if parsed is None:
                raise FilterExpressionError(
                    f"Invalid date literal {expression[pos : end + 1]}", expression, pos
                )
            tokens.append(Token("date", parsed, pos))
            pos = end + 1
            continue
        if char in "(),":
            kind = {"(": "lparen", ")": "rparen", ",": "comma"}[char]
            tokens.append(Token(kind, char, pos))
            pos += 1
            continue
        match = _NUMBER.match(expression, pos)
        if match:
            literal = match.group(0)
            value: Any = int(literal) if literal.isdigit() else float(literal)
            tokens.append(Token("number", value, pos))
            pos = match.end()
            continue
        match = _WORD.match(expression, pos)
        if match:
            tokens.append(Token("word", match.group(0), pos))
            pos = match.end()
            continue
        for operator in _OPERATORS:
            if expression.startswith(operator, pos):
                tokens.append(Token("op", "<>" if operator == "!=" else operator, pos))
                pos += len(operator)
                break
        else:
            raise FilterExpressionError(
                f"Unexpected character {char!r}", expression, pos
            )
    tokens.append(Token("end", None, len(expression)))
    return tokens


# Expression tree. Every node evaluates to a Series aligned with the frame;
# conditions use the nullable "boolean" dtype with <NA> for unknown.

_NUMBER_KINDS = frozenset({"integer", "floating", "mixed-integer-float", "decimal"})
_OPERATIONS = {
    "=": operator.eq,
    "<>": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class _Context:
    def __init__(self, frame: pd.DataFrame, expression: str) -> None:
        self.frame = frame
        self.expression = expression
        self.index = frame.index

    def column(self, name: str) -> pd.Series:
        key = _resolve_column(self.frame, name)
        if key is None:
            raise FilterExpressionError(f"Cannot find column [{name}]", self.expression)
        return self.frame[key]

    def constant(self, value: Any) -> pd.Series:
        return pd.Series([value] * len(self.index), index=self.index, dtype=object)


def _resolve_column(frame: pd.DataFrame, name: str) -> Any:
    if name in frame.columns:
        return name
    wanted = name.casefold()
    for candidate in frame.columns:
        if str(candidate).casefold() == wanted:
            return candidate
    return None


def _missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    return isinstance(value, float) and value != value


def _as_condition(values: pd.Series) -> pd.Series:
    if isinstance(values.dtype, pd.BooleanDtype):
        return values
    return values.map(_truth, na_action="ignore").astype("boolean")


def _texts(values: pd.Series) -> pd.Series:
    return values.map(_as_text, na_action="ignore").astype(object)


def _cells(values: pd.Series) -> list:
    return [None if _missing(value) else value for value in values.tolist()]


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None)


def _comparable_dates(left: pd.Series, right: pd.Series) -> tuple[pd.Series, pd.Series]:
    present = pd.concat([left.dropna(), right.dropna()])
    if present.map(lambda value: value.tzinfo is None).nunique() > 1:
        return left.map(_naive, na_action="ignore"), right.map(_naive, na_action="ignore")
    return left, right


def _compare_series(left: pd.Series, right: pd.Series, comparison: str) -> pd.Series:
    unknown = left.isna() | right.isna()
    if unknown.all():
        return pd.Series(pd.NA, index=left.index, dtype="boolean")
    kinds = (infer_dtype(left, skipna=True), infer_dtype(right, skipna=True))
    compare = _OPERATIONS[comparison]
    if kinds[0] in _NUMBER_KINDS and kinds[1] in _NUMBER_KINDS:
        result = compare(
            pd.to_numeric(left, errors="coerce"), pd.to_numeric(right, errors="coerce")
        )
    elif kinds == ("string", "string"):
        result = compare(left.str.casefold(), right.str.casefold())
    elif kinds == ("datetime", "datetime"):
        result = compare(*_comparable_dates(left, right))
    elif kinds == ("boolean", "boolean"):
        result = compare(left, right)
    else:
        # mixed types convert cell by cell
        result = left.combine(right, lambda a, b: _compare(a, b, comparison)).reindex(left.index)
    return result.astype("boolean").mask(unknown)


@dataclass(frozen=True)
class Literal:
    value: Any

    def evaluate(self, context: _Context) -> pd.Series:
        return context.constant(self.value)


@dataclass(frozen=True)
class ColumnRef:
    name: str

    def evaluate(self, context: _Context) -> pd.Series:
        return context.column(self.name)


def _negated(value: Any) -> Any:
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return -value
    return None


@dataclass(frozen=True)
class Negate:
    operand: Any

    def evaluate(self, context: _Context) -> pd.Series:
        return self.operand.evaluate(context).map(_negated, na_action="ignore")


@dataclass(frozen=True)
class Compare:
    operator: str
    left: Any
    right: Any

    def evaluate(self, context: _Context) -> pd.Series:
        return _compare_series(
            self.left.evaluate(context), self.right.evaluate(context), self.operator
        )


@dataclass(frozen=True)
class Like:
    operand: Any
    pattern: str
    negate: bool = False

    def evaluate(self, context: _Context) -> pd.Series:
        regex = like_regex(self.pattern)
        texts = _texts(self.operand.evaluate(context))
        matched = texts.str.match(regex.pattern, flags=regex.flags).astype("boolean")
        return ~matched if self.negate else matched


@dataclass(frozen=True)
class IsNull:
    operand: Any
    negate: bool = False

    def evaluate(self, context: _Context) -> pd.Series:
        missing = self.operand.evaluate(context).isna()
        return (~missing if self.negate else missing).astype("boolean")


@dataclass(frozen=True)
class In:
    operand: Any
    options: tuple
    negate: bool = False

    def evaluate(self, context: _Context) -> pd.Series:
        values = self.operand.evaluate(context)
        found = reduce(
            operator.or_,
            (_compare_series(values, option.evaluate(context), "=") for option in self.options),
        )
        return ~found if self.negate else found


@dataclass(frozen=True)
class Not:
    operand: Any

    def evaluate(self, context: _Context) -> pd.Series:
        return ~_as_condition(self.operand.evaluate(context))


@dataclass(frozen=True)
class And:
    left: Any
    right: Any

    def evaluate(self, context: _Context) -> pd.Series:
        left = _as_condition(self.left.evaluate(context))
        return left & _as_condition(self.right.evaluate(context))


@dataclass(frozen=True)
class Or:
    left: Any
    right: Any

    def evaluate(self, context: _Context) -> pd.Series:
        left = _as_condition(self.left.evaluate(context))
        return left | _as_condition(self.right.evaluate(context))


@dataclass(frozen=True)
class Function:
    name: str
    arguments: tuple

    def evaluate(self, context: _Context) -> pd.Series:
        values = [argument.evaluate(context) for argument in self.arguments]
        if self.name == "LEN":
            return _texts(values[0]).str.len().astype("Int64")
        if self.name == "TRIM":
            return _texts(values[0]).str.strip()
        if self.name == "ISNULL":
            first, fallback = values
            return first.where(first.notna(), fallback)
        rows = zip(*(_cells(series) for series in values))
        return pd.Series(
            [_call(self.name, list(row)) for row in rows], index=context.index, dtype=object
        )


def _truth(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().casefold() == "true"
    return bool(value)


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        if value.hour or value.minute or value.second or value.microsecond:
            return value.strftime("%m/%d/%Y %H:%M:%S")
        return value.strftime("%m/%d/%Y")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _convert_text(text: str, like: Any) -> Any:
    """Convert text to the type of like; None when it does not convert."""
    stripped = text.strip()
    if isinstance(like, bool):
        return {"true": True, "false": False}.get(stripped.casefold())
    if isinstance(like, (int, float, Decimal)):
        try:
            return float(stripped)
        except ValueError:
            return None
    if isinstance(like, datetime):
        return parse_date_literal(stripped)
    return None


def _coerce(left: Any, right: Any) -> tuple[Any, Any]:
    if isinstance(left, str) and not isinstance(right, str):
        converted = _convert_text(left, right)
        if converted is None:
            right = _as_text(right)
        else:
            left = converted
    elif isinstance(right, str) and not isinstance(left, str):
        converted = _convert_text(right, left)
        if converted is None:
            left = _as_text(left)
        else:
            right = converted
    if isinstance(left, str) and isinstance(right, str):
        return left.casefold(), right.casefold()
    if isinstance(left, datetime) and isinstance(right, datetime):
        if (left.tzinfo is None) != (right.tzinfo is None):
            return _naive(left), _naive(right)
    if isinstance(left, Decimal) and isinstance(right, float):
        return float(left), right
    if isinstance(left, float) and isinstance(right, Decimal):
        return left, float(right)
    return left, right


def _compare(left: Any, right: Any, comparison: str) -> bool | None:
    if _missing(left) or _missing(right):
        return None
    left, right = _coerce(left, right)
    try:
        return bool(_OPERATIONS[comparison](left, right))
    except TypeError:
        return None


_CONVERSIONS = {
    "system.string": _as_text,
    "system.int32": lambda value: int(float(_as_text(value))),
    "system.int64": lambda value: int(float(_as_text(value))),
    "system.double": lambda value: float(_as_text(value)),
    "system.decimal": lambda value: float(_as_text(value)),
    "system.boolean": _truth,
}


def _call(name: str, arguments: list) -> Any:
    if name == "SUBSTRING":
        value, start, length = arguments
        if value is None or start is None or length is None:
            return None
        begin = int(start) - 1
        return _as_text(value)[begin : begin + int(length)]
    # CONVERT
    value, target = arguments
    if value is None:
        return None
    if isinstance(value, datetime) and str(target).casefold() == "system.datetime":
        return value
    if str(target).casefold() == "system.datetime":
        return parse_date_literal(_as_text(value))
    try:
        return _CONVERSIONS[str(target).casefold()](value)
    except ValueError:
        return None


_FUNCTIONS = {"LEN": 1, "TRIM": 1, "ISNULL": 2, "SUBSTRING": 3, "CONVERT": 2}


@lru_cache(maxsize=256)
def like_regex(pattern: str) -> re.Pattern[str]:
    """Translate a LIKE pattern; ``*`` and ``%`` match any run of characters."""
    parts = []
    pos = 0
    while pos < len(pattern):
        char = pattern[pos]
        if char == "[":
            if pattern[pos + 2 : pos + 3] != "]":
                raise FilterExpressionError(
                    f"Invalid escape in LIKE pattern {pattern!r}", pattern, pos
                )
            parts.append(re.escape(pattern[pos + 1]))
            pos += 3
            continue
        parts.append(".*" if char in "*%" else re.escape(char))
        pos += 1
    return re.compile("".join(parts) + r"\Z", re.IGNORECASE | re.DOTALL)


class _Parser:
    """Recursive descent over the tokens, lowest precedence first: OR, AND, NOT, predicates."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self.tokens = tokenize(expression)
        self.index = 0

    def _peek(self, offset: int = 0) -> Token:
        return self.tokens[min(self.index + offset, len(self.tokens) - 1)]

    def _advance(self) -> Token:
        token = self._peek()
        self.index += 1
        return token

    def _is_keyword(self, word: str, offset: int = 0) -> bool:
        token = self._peek(offset)
        return token.kind == "word" and token.value.upper() == word

    def _error(self, message: str, token: Token) -> FilterExpressionError:
        return FilterExpressionError(
            message, self.expression, token.position
        )

    def _expect(self, kind: str) -> Token:
        token = self._advance()
        if token.kind != kind:
            raise self._error(f"Expected {kind}", token)
        return token

    def parse(self) -> Any:
        node = self._or()
        token = self._peek()
        if token.kind != "end":
            raise self._error(f"Unexpected {token.value!r}", token)
        return node

    def _or(self) -> Any:
        node = self._and()
        while self._is_keyword("OR"):
            self._advance()
            node = Or(node, self._and())
        return node

    def _and(self) -> Any:
        node = self._not()
        while self._is_keyword("AND"):
            self._advance()
            node = And(node, self._not())
        return node

    def _not(self) -> Any:
        if self._is_keyword("NOT"):
            self._advance()
            return Not(self._not())
        return self._predicate()

    def _predicate(self) -> Any:
        left = self._unary()
        token = self._peek()
        if token.kind == "op" and token.value in _COMPARISONS:
            self._advance()
            return Compare(token.value, left, self._unary())
        if self._is_keyword("IS"):
            self._advance()
            negate = self._is_keyword("NOT")
            if negate:
                self._advance()
            if not self._is_keyword("NULL"):
                raise self._error("Expected NULL", self._peek())
            self._advance()
            return IsNull(left, negate)
        negate = self._is_keyword("NOT") and (
            self._is_keyword("LIKE", 1) or self._is_keyword("IN", 1)
        )
        if negate:
            self._advance()
        if self._is_keyword("LIKE"):
            self._advance()
            pattern = self._expect("string")
            like_regex(pattern.value)
            return Like(left, pattern.value, negate)
        if self._is_keyword("IN"):
            self._advance()
            self._expect("lparen")
            options = [self._unary()]
            while self._peek().kind == "comma":
                self._advance()
                options.append(self._unary())
            self._expect("rparen")
            return In(left, tuple(options), negate)
        return left

    def _unary(self) -> Any:
        token = self._peek()
        if token.kind == "op" and token.value == "-":
            self._advance()
            operand = self._unary()
            if isinstance(operand, Literal) and isinstance(operand.value, (int, float)):
                return Literal(-operand.value)
            return Negate(operand)
        if token.kind == "op" and token.value == "+":
            self._advance()
            return self._unary()
        return self._primary()

    def _primary(self) -> Any:
        token = self._advance()
        if token.kind == "name":
            return ColumnRef(token.value)
        if token.kind in ("string", "number", "date"):
            return Literal(token.value)
        if token.kind == "lparen":
            node = self._or()
            self._expect("rparen")
            return node
        if token.kind == "word":
            word = token.value.upper()
            if word in ("TRUE", "FALSE"):
                return Literal(word == "TRUE")
            if word == "NULL":
                return Literal(None)
            if word in _FUNCTIONS and self._peek().kind == "lparen":
                return self._function(word, token)
            if word in _KEYWORDS:
                raise self._error(f"Unexpected keyword {token.value}", token)
            return ColumnRef(token.value)
        if token.kind == "end":
            raise self._error("Unexpected end of expression", token)
        raise self._error(f"Unexpected {token.value!r}", token)

    def _function(self, name: str, token: Token) -> Function:
        self._expect("lparen")
        arguments = [self._or()]
        while self._peek().kind == "comma":
            self._advance()
            arguments.append(self._or())
        self._expect("rparen")
        if len(arguments) != _FUNCTIONS[name]:
            raise self._error(f"{name} expects {_FUNCTIONS[name]} argument(s)", token)
        return Function(name, tuple(arguments))


def parse_filter(expression: str) -> Any:
    """
    Parse a filter expression into an evaluable tree.

    Raises:
        FilterExpressionError: If the expression is not valid filter syntax
    """
    return _Parser(expression).parse()


def evaluate_filter(expression: str, frame: pd.DataFrame) -> pd.Series:
    """
    Evaluate a filter expression against the rows of frame.

    An empty expression keeps every row.

    Returns:
        Boolean Series aligned with frame.index; True for rows to keep

    Raises:
        FilterExpressionError: If the expression is invalid or names an unknown column
    """
    if not expression.strip():
        return pd.Series(True, index=frame.index, dtype=bool)
    tree = parse_filter(expression)
    condition = _as_condition(tree.evaluate(_Context(frame, expression)))
    return condition.fillna(False).astype(bool)
