"""Structured logging configuration for the executor.

Every event carries a ``component`` field, and any ``headers`` mapping in an
event is redacted before rendering, so request headers logged by a host
application pass through the same redaction as the executor's own.
"""

import logging
import sys
from collections.abc import Iterable, Mapping
from typing import TextIO

import structlog
from structlog.types import EventDict, Processor

from httpexec.constants import COMPONENT_NAME, DEFAULT_SENSITIVE_HEADER_PATTERNS
from httpexec.redact import redact_headers


def add_component(
    _logger: object, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Default the ``component`` field for events not bound by the executor."""
    event_dict.setdefault("component", COMPONENT_NAME)
    return event_dict


def header_redactor(
    patterns: Iterable[str] = DEFAULT_SENSITIVE_HEADER_PATTERNS,
) -> Processor:
    """Build a processor that redacts sensitive values in ``headers`` fields.

    Args:
        patterns: Case-insensitive header name substrings to redact.

    Returns:
        structlog processor.
    """
    pattern_list = tuple(patterns)

    def redact_event_headers(
        _logger: object, _method_name: str, event_dict: EventDict
    ) -> EventDict:
        headers = event_dict.get("headers")
        if isinstance(headers, Mapping):
            event_dict["headers"] = redact_headers(headers, pattern_list)
        return event_dict

    return redact_event_headers


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
    sensitive_header_patterns: Iterable[str] = DEFAULT_SENSITIVE_HEADER_PATTERNS,
) -> None:
    """Configure structured logging for the executor.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
        sensitive_header_patterns: Header name substrings redacted in events.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_component,
        header_redactor(sensitive_header_patterns),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)
