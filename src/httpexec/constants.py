"""Constants for the HTTP request executor.

Centralizes defaults, bounds and header names shared across modules.
"""

from typing import Final


# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Request defaults
DEFAULT_METHOD: Final = "GET"
DEFAULT_CONTENT_TYPE: Final = "application/json"
DEFAULT_TIMEOUT_SECONDS: Final = 30
MIN_TIMEOUT_SECONDS: Final = 1
MAX_TIMEOUT_SECONDS: Final = 300

VALID_METHODS: Final = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

# Retry defaults and bounds
DEFAULT_MAX_ATTEMPTS: Final = 3
MIN_MAX_ATTEMPTS: Final = 1
MAX_MAX_ATTEMPTS: Final = 10
DEFAULT_DELAY_MS: Final = 1000
MIN_DELAY_MS: Final = 100
MAX_DELAY_MS: Final = 60000
DEFAULT_RETRY_STATUS_CODES: Final = frozenset({500, 502, 503, 504})

# Hard ceiling on any computed backoff delay
MAX_BACKOFF_DELAY_MS: Final = 60000

# Headers that describe the request body rather than the request
CONTENT_HEADER_NAMES: Final = frozenset(
    {
        "content-type",
        "content-length",
        "content-encoding",
        "content-language",
        "content-location",
        "content-md5",
        "content-range",
        "content-disposition",
    }
)

# Host defaults
DEFAULT_SENSITIVE_HEADER_PATTERNS: Final = (
    "Authorization",
    "API-Key",
    "Token",
    "Secret",
    "Password",
)
DEFAULT_MAX_RESPONSE_BUFFER_SIZE_BYTES: Final = 10 * 1024 * 1024  # 10 MB

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE: Final = 8192

COMPONENT_NAME: Final = "http_executor"
