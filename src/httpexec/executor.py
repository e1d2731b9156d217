"""Configuration-driven HTTP request executor."""

import asyncio
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from io import BytesIO
from typing import Any

import httpx
import structlog

from httpexec.builder import OutgoingRequest, build_request
from httpexec.constants import (
    COMPONENT_NAME,
    CONTENT_HEADER_NAMES,
    DEFAULT_CHUNK_SIZE,
)
from httpexec.errors import (
    AttemptTimeoutError,
    ConfigurationError,
    ExecutionErrorClass,
    RequestCancelledError,
    classify_transport_error,
    friendly_error_message,
)
from httpexec.metrics import ExecutorMetrics
from httpexec.models import ExecutionResult, RequestDescriptor, ValidationResult
from httpexec.parser import parse_request, parse_request_text
from httpexec.redact import redact_headers, redact_url_credentials
from httpexec.retry import RetryPolicy
from httpexec.settings import ExecutorSettings
from httpexec.state_machine import AttemptState, AttemptStateMachine
from httpexec.transport import TransportRegistry, TransportVariant
from httpexec.validator import validate_request


logger = structlog.get_logger()

RequestConfig = str | Mapping[str, Any] | RequestDescriptor

CANCELLED_MESSAGE = "Request was cancelled"


@dataclass
class _ReceivedResponse:
    """A response whose body has been read and whose stream is closed."""

    response: httpx.Response
    content: bytes


class HttpRequestExecutor:
    """Execute HTTP requests described by JSON configuration.

    Provides:
    - Basic, bearer and API key authentication
    - Query-string merging and structured or raw bodies
    - Per-attempt timeouts and caller cancellation
    - Status- and failure-based retries with exponential backoff
    - Header redaction for logging

    Public entry points never raise for request-level failures; every
    outcome is an ``ExecutionResult``.
    """

    def __init__(
        self,
        settings: ExecutorSettings | None = None,
        transports: TransportRegistry | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            settings: Host settings; loaded from the environment if omitted.
            transports: Shared client registry; created if omitted.
        """
        self._settings = settings or ExecutorSettings()
        self._transports = transports or TransportRegistry()
        self._metrics = ExecutorMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_NAME)

    @property
    def settings(self) -> ExecutorSettings:
        """Host settings in effect."""
        return self._settings

    async def __aenter__(self) -> "HttpRequestExecutor":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the shared HTTP clients."""
        await self._transports.aclose()

    def validate(self, config: str | Mapping[str, Any]) -> ValidationResult:
        """Validate a configuration without executing it.

        Args:
            config: JSON text or decoded document.

        Returns:
            Validation result with errors and warnings.
        """
        return validate_request(config)

    async def execute(
        self,
        config: RequestConfig,
        cancel_event: asyncio.Event | None = None,
    ) -> ExecutionResult:
        """Execute a request.

        Args:
            config: JSON text, decoded JSON object, or a request descriptor.
            cancel_event: Caller cancellation signal observed for the whole
                call, including backoff waits.

        Returns:
            ExecutionResult describing the response or the failure.
        """
        start_time_ns = time.perf_counter_ns()
        log = self._log.bind(call_id=uuid.uuid4().hex[:12])

        try:
            descriptor = self._to_descriptor(config)
        except ConfigurationError as e:
            log.error("http_request_invalid", error=str(e), field=e.field)
            return self._finish_error(
                log,
                str(e),
                ExecutionErrorClass.CONFIGURATION,
                exception=e,
                start_time_ns=start_time_ns,
                retry_attempts=0,
            )

        return await self._execute_descriptor(
            descriptor,
            log=log.bind(
                method=descriptor.method.value,
                url=redact_url_credentials(descriptor.url),
            ),
            start_time_ns=start_time_ns,
            cancel_event=cancel_event,
        )

    def _to_descriptor(self, config: RequestConfig) -> RequestDescriptor:
        if isinstance(config, RequestDescriptor):
            return config
        if isinstance(config, str):
            return parse_request_text(
                config,
                default_timeout_seconds=self._settings.default_timeout_seconds,
                default_follow_redirects=self._settings.default_follow_redirects,
            )
        if isinstance(config, Mapping):
            return parse_request(
                config,
                default_timeout_seconds=self._settings.default_timeout_seconds,
                default_follow_redirects=self._settings.default_follow_redirects,
            )
        msg = f"Unsupported request configuration type: {type(config).__name__}"
        raise ConfigurationError(msg)

    async def _execute_descriptor(
        self,
        descriptor: RequestDescriptor,
        log: structlog.stdlib.BoundLogger,
        start_time_ns: int,
        cancel_event: asyncio.Event | None,
    ) -> ExecutionResult:
        """Drive the attempt loop until a terminal outcome.

        Args:
            descriptor: Request to execute.
            log: Bound logger.
            start_time_ns: Call start, from ``time.perf_counter_ns``.
            cancel_event: Caller cancellation signal.

        Returns:
            Terminal ExecutionResult.
        """
        policy = RetryPolicy(descriptor.retry, self._settings.default_retry_attempts)
        machine = AttemptStateMachine()
        variant = TransportVariant(
            descriptor.ignore_certificate_errors, descriptor.follow_redirects
        )
        client = self._transports.get(*variant)
        log = log.bind(client=variant.name)

        while True:
            machine.transition(AttemptState.ATTEMPTING)
            attempt = machine.attempt
            attempt_log = log.bind(attempt=attempt, max_attempts=policy.max_attempts)

            try:
                # Built fresh each attempt; a sent request is never reused.
                request = build_request(descriptor)
                self._log_request(attempt_log, request)
                received = await self._send(client, request, cancel_event)
                self._log_response(attempt_log, received, start_time_ns)

                status_code = received.response.status_code
                if not policy.should_retry(status_code, attempt):
                    exhausted = status_code in policy.retry_status_codes
                    if exhausted:
                        attempt_log.warning(
                            "http_retries_exhausted", status_code=status_code
                        )
                    machine.transition(
                        AttemptState.EXHAUSTED if exhausted else AttemptState.COMPLETED
                    )
                    return self._finish_response(
                        received, start_time_ns, machine.retry_attempts
                    )

                attempt_log.warning(
                    "http_retry_scheduled",
                    status_code=status_code,
                    delay_ms=policy.get_delay_ms(attempt),
                )

            except RequestCancelledError as e:
                machine.transition(AttemptState.CANCELLED)
                return self._finish_cancelled(
                    attempt_log, e, start_time_ns, machine.retry_attempts
                )

            except (httpx.TimeoutException, AttemptTimeoutError) as e:
                attempt_log.warning(
                    "http_request_timeout", timeout_seconds=descriptor.timeout_seconds
                )
                if not policy.should_retry_on_exception(e, attempt):
                    machine.transition(self._terminal_state(e))
                    return self._finish_error(
                        attempt_log,
                        f"Request timed out after {descriptor.timeout_seconds} seconds",
                        ExecutionErrorClass.TIMEOUT,
                        exception=e,
                        start_time_ns=start_time_ns,
                        retry_attempts=machine.retry_attempts,
                    )
                attempt_log.warning(
                    "http_retry_scheduled",
                    error=str(e),
                    delay_ms=policy.get_delay_ms(attempt),
                )

            except httpx.RequestError as e:
                attempt_log.error(
                    "http_request_failed", error=str(e), error_type=type(e).__name__
                )
                if not policy.should_retry_on_exception(e, attempt):
                    machine.transition(self._terminal_state(e))
                    return self._finish_error(
                        attempt_log,
                        friendly_error_message(e),
                        classify_transport_error(e),
                        exception=e,
                        start_time_ns=start_time_ns,
                        retry_attempts=machine.retry_attempts,
                    )
                attempt_log.warning(
                    "http_retry_scheduled",
                    error=str(e),
                    delay_ms=policy.get_delay_ms(attempt),
                )

            except Exception as e:  # noqa: BLE001
                attempt_log.exception("http_request_unexpected_error")
                machine.transition(AttemptState.FAILED)
                return self._finish_error(
                    attempt_log,
                    f"Unexpected error: {e}",
                    ExecutionErrorClass.UNEXPECTED,
                    exception=e,
                    start_time_ns=start_time_ns,
                    retry_attempts=machine.retry_attempts,
                )

            machine.transition(AttemptState.RETRYING)
            self._metrics.record_retry()
            try:
                await policy.wait(attempt, cancel_event)
            except RequestCancelledError as e:
                machine.transition(AttemptState.CANCELLED)
                return self._finish_cancelled(
                    attempt_log, e, start_time_ns, machine.retry_attempts
                )

    @staticmethod
    def _terminal_state(exc: BaseException) -> AttemptState:
        """Pick EXHAUSTED when a transient failure ran out of attempts."""
        if RetryPolicy.is_transient(exc):
            return AttemptState.EXHAUSTED
        return AttemptState.FAILED

    async def _send(
        self,
        client: httpx.AsyncClient,
        request: OutgoingRequest,
        cancel_event: asyncio.Event | None,
    ) -> _ReceivedResponse:
        """Send one attempt under a fresh timeout, racing caller cancellation.

        Args:
            client: Client for the request's transport variant.
            request: Built request.
            cancel_event: Caller cancellation signal.

        Returns:
            Response with its body read.

        Raises:
            RequestCancelledError: If the caller cancels first.
            AttemptTimeoutError: If the attempt exceeds its timeout.
        """
        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelledError

        send_task = asyncio.ensure_future(self._send_and_read(client, request))
        waiters: set[asyncio.Future[Any]] = {send_task}
        cancel_task: asyncio.Future[Any] | None = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=request.timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            pending = [task for task in waiters if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        if cancel_task is not None and cancel_task in done:
            raise RequestCancelledError
        if send_task in done:
            return send_task.result()
        raise AttemptTimeoutError(request.timeout_seconds)

    async def _send_and_read(
        self, client: httpx.AsyncClient, request: OutgoingRequest
    ) -> _ReceivedResponse:
        response = await client.send(request.to_httpx(), stream=True)
        try:
            content = await self._read_body_with_limit(response)
        finally:
            await response.aclose()
        self._metrics.record_response(response.status_code, len(content))
        return _ReceivedResponse(response=response, content=content)

    async def _read_body_with_limit(self, response: httpx.Response) -> bytes:
        """Read the response body, truncating past the buffer limit.

        Args:
            response: Streaming HTTP response.

        Returns:
            Body bytes, at most ``max_response_buffer_size_bytes`` long.
        """
        buffer = BytesIO()
        total_read = 0
        max_size = self._settings.max_response_buffer_size_bytes

        async for chunk in response.aiter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            remaining = max_size - total_read
            if len(chunk) > remaining:
                buffer.write(chunk[:remaining])
                self._log.warning(
                    "http_response_truncated",
                    status_code=response.status_code,
                    max_bytes=max_size,
                )
                break
            buffer.write(chunk)
            total_read += len(chunk)

        return buffer.getvalue()

    def _log_request(
        self, log: structlog.stdlib.BoundLogger, request: OutgoingRequest
    ) -> None:
        if not self._settings.enable_request_logging:
            log.info("http_request_start")
            return

        log.debug(
            "http_request_start",
            request_url=redact_url_credentials(request.url),
            headers=redact_headers(
                dict(request.headers), self._settings.sensitive_header_patterns
            ),
        )

    def _log_response(
        self,
        log: structlog.stdlib.BoundLogger,
        received: _ReceivedResponse,
        start_time_ns: int,
    ) -> None:
        response = received.response
        event_fields = {
            "status_code": response.status_code,
            "reason": response.reason_phrase,
            "bytes": len(received.content),
            "elapsed_ms": round(_elapsed_ms(start_time_ns), 2),
        }
        if ExecutionResult.is_success_status(response.status_code):
            log.info("http_request_complete", **event_fields)
        else:
            log.warning("http_request_complete", **event_fields)

    def _finish_response(
        self,
        received: _ReceivedResponse,
        start_time_ns: int,
        retry_attempts: int,
    ) -> ExecutionResult:
        response = received.response
        headers, content_headers = _split_headers(response.headers)
        elapsed_ms = _elapsed_ms(start_time_ns)
        self._metrics.record_call(elapsed_ms)
        return ExecutionResult(
            is_success=ExecutionResult.is_success_status(response.status_code),
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers=headers,
            content_headers=content_headers,
            content=received.content,
            elapsed_ms=elapsed_ms,
            retry_attempts=retry_attempts,
        )

    def _finish_cancelled(
        self,
        log: structlog.stdlib.BoundLogger,
        exc: RequestCancelledError,
        start_time_ns: int,
        retry_attempts: int,
    ) -> ExecutionResult:
        log.warning("http_request_cancelled")
        return self._finish_error(
            log,
            CANCELLED_MESSAGE,
            ExecutionErrorClass.CANCELLED,
            exception=exc,
            start_time_ns=start_time_ns,
            retry_attempts=retry_attempts,
            quiet=True,
        )

    def _finish_error(
        self,
        log: structlog.stdlib.BoundLogger,
        message: str,
        error_class: ExecutionErrorClass,
        *,
        exception: BaseException | None,
        start_time_ns: int,
        retry_attempts: int,
        quiet: bool = False,
    ) -> ExecutionResult:
        elapsed_ms = _elapsed_ms(start_time_ns)
        self._metrics.record_failure(error_class)
        self._metrics.record_call(elapsed_ms)
        if not quiet:
            log.error(
                "http_request_terminal_error",
                error=message,
                error_class=error_class.value,
                retry_attempts=retry_attempts,
            )
        return ExecutionResult.from_error(
            message,
            error_class,
            exception=exception,
            elapsed_ms=elapsed_ms,
            retry_attempts=retry_attempts,
        )


def _elapsed_ms(start_time_ns: int) -> float:
    return (time.perf_counter_ns() - start_time_ns) / 1_000_000


def _split_headers(
    headers: httpx.Headers,
) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
    """Split response headers into general and content headers.

    Args:
        headers: Response headers.

    Returns:
        Tuple of (general headers, content headers), lower-cased names.
    """
    general: dict[str, list[str]] = {}
    content: dict[str, list[str]] = {}
    for name, value in headers.multi_items():
        key = name.lower()
        target = content if key in CONTENT_HEADER_NAMES else general
        target.setdefault(key, []).append(value)
    return general, content
