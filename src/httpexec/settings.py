"""Host settings for the executor, powered by Pydantic BaseSettings."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from httpexec.constants import (
    DEFAULT_MAX_RESPONSE_BUFFER_SIZE_BYTES,
    DEFAULT_SENSITIVE_HEADER_PATTERNS,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_MAX_ATTEMPTS,
    MAX_TIMEOUT_SECONDS,
    MIN_TIMEOUT_SECONDS,
)


class ExecutorSettings(BaseSettings):
    """Configuration supplied by the hosting application.

    Values can be overridden with ``HTTPEXEC_``-prefixed environment
    variables, e.g. ``HTTPEXEC_DEFAULT_TIMEOUT_SECONDS=10``.
    """

    model_config = SettingsConfigDict(
        env_prefix="HTTPEXEC_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    default_timeout_seconds: Annotated[
        int, Field(ge=MIN_TIMEOUT_SECONDS, le=MAX_TIMEOUT_SECONDS)
    ] = DEFAULT_TIMEOUT_SECONDS
    default_retry_attempts: Annotated[
        int,
        Field(
            ge=0,
            le=MAX_MAX_ATTEMPTS,
            description="Attempts when a request has no retry settings; 0 means one",
        ),
    ] = 0
    default_follow_redirects: bool = True
    enable_request_logging: bool = Field(
        default=False, description="Log redacted request headers at debug level"
    )
    sensitive_header_patterns: tuple[str, ...] = DEFAULT_SENSITIVE_HEADER_PATTERNS
    max_response_buffer_size_bytes: Annotated[int, Field(ge=1024)] = (
        DEFAULT_MAX_RESPONSE_BUFFER_SIZE_BYTES
    )


def get_settings() -> ExecutorSettings:
    """Get a settings instance."""
    return ExecutorSettings()
