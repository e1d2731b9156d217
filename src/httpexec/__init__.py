"""Configuration-driven HTTP request execution.

This package turns a JSON request description into an HTTP call with:
- Basic, bearer and API key authentication
- Query-string merging and structured or raw JSON bodies
- Per-attempt timeouts and caller cancellation
- Status- and failure-based retries with exponential backoff
- Pre-flight validation that reports every problem at once
- Header redaction and metrics for observability
"""

from httpexec.builder import OutgoingRequest, build_request
from httpexec.errors import (
    AttemptTimeoutError,
    ConfigurationError,
    ExecutionErrorClass,
    RequestCancelledError,
)
from httpexec.executor import HttpRequestExecutor
from httpexec.metrics import ExecutorMetrics
from httpexec.models import (
    AuthDescriptor,
    AuthKind,
    ExecutionResult,
    HttpMethod,
    RawJsonBody,
    RequestDescriptor,
    RetryDescriptor,
    StructuredBody,
    ValidationResult,
)
from httpexec.parser import parse_request, parse_request_text
from httpexec.retry import RetryPolicy
from httpexec.settings import ExecutorSettings
from httpexec.transport import TransportRegistry
from httpexec.validator import validate_request


__version__ = "0.1.0"

__all__ = [
    # Executor
    "HttpRequestExecutor",
    "ExecutorSettings",
    "TransportRegistry",
    # Models
    "AuthDescriptor",
    "AuthKind",
    "ExecutionResult",
    "HttpMethod",
    "RawJsonBody",
    "RequestDescriptor",
    "RetryDescriptor",
    "StructuredBody",
    "ValidationResult",
    # Parsing, validation and building
    "OutgoingRequest",
    "build_request",
    "parse_request",
    "parse_request_text",
    "validate_request",
    # Retries
    "RetryPolicy",
    # Errors
    "AttemptTimeoutError",
    "ConfigurationError",
    "ExecutionErrorClass",
    "RequestCancelledError",
    # Metrics
    "ExecutorMetrics",
]
