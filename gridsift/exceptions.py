"""Custom exceptions for the gridsift package."""


class GridSiftError(Exception):
    """Base exception for gridsift errors."""

    pass


class ValidationError(GridSiftError):
    """Raised when configuration validation fails."""

    pass


class ColumnNotFoundError(GridSiftError):
    """Raised when a requested column does not exist in the row source."""

    def __init__(self, column: str | int) -> None:
        self.column = column
        super().__init__(f"Column not found: {column!r}")


class SourceReadError(GridSiftError):
    """Raised when the row source fails while rows are being scanned."""

    pass


class DataLoadError(GridSiftError):
    """Raised when data loading fails."""

    pass


class FilterExpressionError(ValidationError):
    """Raised when a filter expression cannot be parsed or evaluated."""

    def __init__(self, message: str, expression: str = "", position: int | None = None) -> None:
        self.expression = expression
        self.position = position
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message)


class OperationCanceledError(GridSiftError):
    """Raised by a row source to report that the caller canceled the read."""

    pass
