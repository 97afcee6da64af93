"""Structured JSON logging.

Events are emitted as one JSON object per line so guessing and filtering runs
can be inspected by machines. configure_logging_json and run_context exist
for CLI wiring only; library modules just call get_logger and never install
handlers themselves.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from collections.abc import Callable, Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any

import structlog

JsonDict = MutableMapping[str, Any]
Processor = Callable[[Any, str, JsonDict], JsonDict]


def _env_tag() -> str:
    return os.getenv("GRIDSIFT_ENV") or os.getenv("ENV") or "dev"


def _base_fields(service: str, runtime: str) -> Processor:
    def processor(logger: Any, method_name: str, event_dict: JsonDict) -> JsonDict:  # noqa: ANN401
        event_dict.setdefault("service", service)
        event_dict.setdefault("env", _env_tag())
        event_dict.setdefault("runtime", runtime)
        event_dict.setdefault("event", method_name)
        return event_dict

    return processor


def _exception_fields(logger: Any, method_name: str, event_dict: JsonDict) -> JsonDict:  # noqa: ANN401
    """Replace exc_info by error_type, error_message and stack_trace."""
    exc_info = event_dict.pop("exc_info", None)
    if exc_info is True:
        exc_info = sys.exc_info()
    elif isinstance(exc_info, BaseException):
        exc_info = (type(exc_info), exc_info, exc_info.__traceback__)

    if not exc_info or not exc_info[0]:
        return event_dict
    exc_type, exc, tb = exc_info
    event_dict["error_type"] = exc_type.__name__
    event_dict["error_message"] = str(exc)
    event_dict["stack_trace"] = "".join(traceback.format_exception(exc_type, exc, tb))
    return event_dict


def _render_json(processors: list[Processor]) -> Callable[[Any, str, JsonDict], str]:
    def render(logger: Any, method_name: str, event_dict: JsonDict) -> str:  # noqa: ANN401
        for processor in processors:
            event_dict = processor(logger, method_name, event_dict)
        event_dict["level"] = str(event_dict.get("level", method_name)).upper()
        # datetimes and ValueFormat objects end up as their str()
        return json.dumps(event_dict, ensure_ascii=True, separators=(",", ":"), default=str)

    return render


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        return record.levelno <= self.max_level


def _stream_handler(stream, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging_json(
    level: str | int = "INFO", service: str = "gridsift", runtime: str = "cli"
) -> None:
    """
    Configure structlog to emit JSON logs.

    Records below ERROR go to stdout, ERROR and above to stderr. Call this
    only at process boundaries (CLI startup).
    """
    logging_level = logging.getLevelName(level.upper()) if isinstance(level, str) else level

    timestamper = structlog.processors.TimeStamper(fmt="iso", key="timestamp")
    base_fields = _base_fields(service=service, runtime=runtime)

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_render_json([timestamper, base_fields, _exception_fields]),
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
        ],
    )

    stdout_handler = _stream_handler(sys.stdout, logging_level, formatter)
    stdout_handler.addFilter(_MaxLevelFilter(logging.ERROR - 1))
    stderr_handler = _stream_handler(sys.stderr, logging.ERROR, formatter)

    logging.basicConfig(
        level=logging_level,
        handlers=[stdout_handler, stderr_handler],
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging_level),
        cache_logger_on_first_use=True,
    )


@contextmanager
def run_context(**fields: Any) -> Iterator[None]:
    """Attach fields (e.g. command and input path) to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a named structlog logger without configuring global handlers."""

    return structlog.get_logger(name or "gridsift")


def reset_logging_for_tests() -> None:
    """Reset structlog and stdlib logging state (used in tests)."""

    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    logging.basicConfig(level=logging.NOTSET, handlers=[], force=True)
