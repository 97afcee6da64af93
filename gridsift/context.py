from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from gridsift.config import GuessSettings


@dataclass
class AppContext:
    """
    CLI execution context. Created once at CLI entry point.
    Core functions do not create or depend on this.
    """

    mode: Literal["normal", "quiet", "silent"]
    verbose: bool
    settings: GuessSettings

    @classmethod
    def create(
        cls,
        *,
        quiet: bool = False,
        silent: bool = False,
        verbose: bool = False,
        settings: GuessSettings | None = None,
    ) -> AppContext:
        """
        Factory method to create AppContext.
        Silent overrides quiet, and both switch verbose off.
        """
        if silent:
            mode = "silent"
        elif quiet:
            mode = "quiet"
        else:
            mode = "normal"

        return cls(
            mode=mode,
            verbose=verbose and mode == "normal",
            settings=settings or GuessSettings(),
        )

    @property
    def quiet_output(self) -> bool:
        return self.mode in {"quiet", "silent"}

    @property
    def log_level(self) -> str:
        """ERROR when output is quiet, INFO when verbose, WARNING otherwise."""
        if self.quiet_output:
            return "ERROR"
        return "INFO" if self.verbose else "WARNING"


def map_exception_to_exit_code(exc: Exception) -> int:
    """
    Map exceptions to CLI exit codes.
    Centralized mapping for consistent behavior.
    """
    from gridsift.constants import (
        EXIT_GENERAL_ERROR,
        EXIT_INVALID_INPUT,
        EXIT_IO_ERROR,
    )
    from gridsift.exceptions import (
        ColumnNotFoundError,
        DataLoadError,
        SourceReadError,
        ValidationError,
    )

    if isinstance(exc, FileNotFoundError):
        return EXIT_IO_ERROR
    if isinstance(exc, (DataLoadError, SourceReadError)):
        return EXIT_IO_ERROR
    if isinstance(exc, (ValidationError, ColumnNotFoundError)):
        return EXIT_INVALID_INPUT
    return EXIT_GENERAL_ERROR
