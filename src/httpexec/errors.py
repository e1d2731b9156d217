"""Error types and transport error classification for the executor."""

from enum import Enum


class ExecutionErrorClass(str, Enum):
    """Classification of terminal execution failures.

    - CONFIGURATION: Request configuration could not be parsed
    - CANCELLED: The caller cancelled the request
    - TIMEOUT: An attempt exceeded its timeout
    - HOST_NOT_FOUND: DNS resolution failed
    - CONNECTION_REFUSED: The server refused the connection
    - SSL_ERROR: SSL/TLS certificate or handshake error
    - CONNECTION_ERROR: Any other transport-level failure
    - UNEXPECTED: An exception the executor does not recognize
    """

    CONFIGURATION = "CONFIGURATION"
    CANCELLED = "CANCELLED"
    TIMEOUT = "TIMEOUT"
    HOST_NOT_FOUND = "HOST_NOT_FOUND"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    UNEXPECTED = "UNEXPECTED"


class ConfigurationError(ValueError):
    """Request configuration is malformed or missing a required field.

    Attributes:
        field: Name of the offending configuration field, if known.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class RequestCancelledError(Exception):
    """The caller's cancellation signal fired while a request was in flight."""


class AttemptTimeoutError(TimeoutError):
    """A single attempt did not complete within its timeout budget.

    Attributes:
        timeout_seconds: The per-attempt budget that was exceeded.
    """

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Attempt exceeded {timeout_seconds} seconds")
        self.timeout_seconds = timeout_seconds


_HOST_NOT_FOUND_MARKERS = (
    "no such host",
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
)
_CONNECTION_REFUSED_MARKERS = ("connection refused", "actively refused")
_SSL_MARKERS = ("ssl", "certificate")


def classify_transport_error(exc: BaseException) -> ExecutionErrorClass:
    """Map a transport exception to an error class by its message.

    Args:
        exc: Exception raised by the transport.

    Returns:
        The matching error class, CONNECTION_ERROR when nothing matches.
    """
    msg_lower = str(exc).lower()
    if any(marker in msg_lower for marker in _HOST_NOT_FOUND_MARKERS):
        return ExecutionErrorClass.HOST_NOT_FOUND
    if any(marker in msg_lower for marker in _CONNECTION_REFUSED_MARKERS):
        return ExecutionErrorClass.CONNECTION_REFUSED
    if any(marker in msg_lower for marker in _SSL_MARKERS):
        return ExecutionErrorClass.SSL_ERROR
    return ExecutionErrorClass.CONNECTION_ERROR


def friendly_error_message(exc: BaseException) -> str:
    """Build a human-readable message for a transport failure.

    Args:
        exc: Exception raised by the transport.

    Returns:
        Message describing the failure category.
    """
    message = str(exc) or type(exc).__name__
    error_class = classify_transport_error(exc)

    if error_class == ExecutionErrorClass.HOST_NOT_FOUND:
        return f"Host not found: {message}"
    if error_class == ExecutionErrorClass.CONNECTION_REFUSED:
        return (
            "Connection refused - the server may be down or not accepting connections"
        )
    if error_class == ExecutionErrorClass.SSL_ERROR:
        return (
            f"SSL/Certificate error: {message}. Consider setting "
            "'ignore_certificate_errors' to true for development."
        )
    return message
