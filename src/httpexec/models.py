"""Data models for the HTTP request executor."""

import json
from enum import Enum
from typing import Annotated, Any, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from httpexec.constants import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRY_STATUS_CODES,
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    MAX_TIMEOUT_SECONDS,
    MIN_TIMEOUT_SECONDS,
)
from httpexec.errors import ExecutionErrorClass


T = TypeVar("T")


class HttpMethod(str, Enum):
    """HTTP methods the executor can send."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class AuthKind(str, Enum):
    """Supported authentication schemes."""

    BASIC = "basic"
    BEARER = "bearer"
    API_KEY = "api_key"


class AuthDescriptor(BaseModel):
    """Authentication settings for a request.

    ``kind`` is kept as the raw configured string so that an unknown scheme
    survives parsing and can be reported by validation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Annotated[str, Field(min_length=1, description="basic, bearer or api_key")]
    username: str | None = None
    password: str | None = None
    token: str | None = None
    key: str | None = None
    key_header: str | None = None
    key_query_param: str | None = None

    @property
    def auth_kind(self) -> AuthKind | None:
        """Resolve ``kind`` to a known scheme, or None if unrecognized."""
        try:
            return AuthKind(self.kind.lower())
        except ValueError:
            return None


class RetryDescriptor(BaseModel):
    """Retry settings for a request.

    ``max_attempts`` counts the initial send. ``retry_status_codes`` of None
    means the default set; an empty tuple disables status-based retry.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay_ms: Annotated[int, Field(ge=0)] = DEFAULT_DELAY_MS
    exponential_backoff: bool = True
    retry_status_codes: tuple[int, ...] | None = None

    @property
    def effective_status_codes(self) -> frozenset[int]:
        """Status codes that trigger a retry."""
        if self.retry_status_codes is None:
            return DEFAULT_RETRY_STATUS_CODES
        return frozenset(self.retry_status_codes)


class StructuredBody(BaseModel):
    """A body value that is serialized to JSON when the request is built."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any


class RawJsonBody(BaseModel):
    """An already-encoded JSON document sent with its literal text."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str


class RequestDescriptor(BaseModel):
    """Immutable description of a single HTTP call.

    Built once per call from caller input and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Annotated[str, Field(min_length=1, description="Target URL")]
    method: HttpMethod = HttpMethod.GET
    headers: dict[str, str] = Field(default_factory=dict)
    query: dict[str, str] = Field(default_factory=dict)
    body: StructuredBody | RawJsonBody | None = Field(
        default=None, description="Structured or raw JSON body; wins over body_raw"
    )
    body_raw: str | None = Field(default=None, description="Verbatim body text")
    content_type: str = DEFAULT_CONTENT_TYPE
    timeout_seconds: Annotated[
        int, Field(ge=MIN_TIMEOUT_SECONDS, le=MAX_TIMEOUT_SECONDS)
    ] = DEFAULT_TIMEOUT_SECONDS
    ignore_certificate_errors: bool = False
    follow_redirects: bool = True
    auth: AuthDescriptor | None = None
    retry: RetryDescriptor | None = None

    @field_validator("url")
    @classmethod
    def validate_url_not_blank(cls, v: str) -> str:
        """Reject whitespace-only URLs."""
        if not v.strip():
            msg = "url must not be blank"
            raise ValueError(msg)
        return v

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: object) -> object:
        """Accept lowercase method names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("body", mode="before")
    @classmethod
    def wrap_structured_body(cls, v: object) -> object:
        """Wrap plain values as a structured body."""
        if v is None or isinstance(v, StructuredBody | RawJsonBody):
            return v
        return StructuredBody(value=v)


class ValidationResult(BaseModel):
    """Outcome of a pre-flight configuration check.

    Errors block execution; warnings never do.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_messages(
        cls, errors: list[str], warnings: list[str] | None = None
    ) -> "ValidationResult":
        """Build a result whose validity follows from the error list."""
        return cls(
            is_valid=not errors,
            errors=list(errors),
            warnings=list(warnings or []),
        )


class ExecutionResult(BaseModel):
    """Result of executing a request.

    Never signals failure by raising. A ``status_code`` of 0 means no
    response was received and ``error_message`` explains why.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    is_success: bool = Field(default=False, description="True iff status is 2xx")
    status_code: int = Field(default=0, ge=0)
    reason_phrase: str | None = None
    headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Response headers, lower-cased names"
    )
    content_headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Headers describing the response body"
    )
    content: bytes = Field(default=b"", description="Raw response body")
    elapsed_ms: float = Field(default=0.0, ge=0.0, description="Across all attempts")
    retry_attempts: int = Field(default=0, ge=0, description="Retries made")
    error_message: str | None = None
    error_class: ExecutionErrorClass | None = None
    exception: BaseException | None = Field(default=None, exclude=True, repr=False)

    @model_validator(mode="after")
    def validate_no_response_has_error(self) -> "ExecutionResult":
        """Ensure a result without a response carries an error."""
        if self.status_code == 0 and (self.is_success or self.error_message is None):
            msg = "A result without a status code must be a failure with an error"
            raise ValueError(msg)
        return self

    @classmethod
    def from_error(
        cls,
        error_message: str,
        error_class: ExecutionErrorClass,
        *,
        exception: BaseException | None = None,
        elapsed_ms: float = 0.0,
        retry_attempts: int = 0,
    ) -> "ExecutionResult":
        """Build a terminal failure result with no response."""
        return cls(
            is_success=False,
            status_code=0,
            error_message=error_message,
            error_class=error_class,
            exception=exception,
            elapsed_ms=elapsed_ms,
            retry_attempts=retry_attempts,
        )

    @staticmethod
    def is_success_status(status_code: int) -> bool:
        """Check whether a status code is 2xx."""
        return HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX

    @property
    def content_as_string(self) -> str:
        """Decode the body as UTF-8, replacing invalid bytes."""
        return self.content.decode("utf-8", errors="replace")

    def content_as_json(self) -> Any | None:
        """Parse the body as JSON.

        Returns:
            Parsed value, or None if the body is empty or not valid JSON.
        """
        if not self.content:
            return None
        try:
            return json.loads(self.content)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None

    def content_as(self, type_: type[T]) -> T | None:
        """Parse the body as JSON and validate it into ``type_``.

        Args:
            type_: Target type, typically a pydantic model.

        Returns:
            Validated value, or None if the body is empty or does not fit.
        """
        if not self.content:
            return None
        try:
            return TypeAdapter(type_).validate_json(self.content)
        except ValidationError:
            return None

    def get_header(self, name: str) -> str | None:
        """Look up a response or content header case-insensitively.

        Args:
            name: Header name.

        Returns:
            Comma-joined header values, or None if absent.
        """
        key = name.lower()
        values = self.headers.get(key) or self.content_headers.get(key)
        if not values:
            return None
        return ", ".join(values)
