"""Pre-flight validation of JSON request configurations.

Works on the raw document so that untrusted input can be checked without
building a descriptor. Every applicable problem is collected in one pass.
"""

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from httpexec import jsonc
from httpexec.auth import validate_auth
from httpexec.constants import (
    MAX_DELAY_MS,
    MAX_MAX_ATTEMPTS,
    MAX_TIMEOUT_SECONDS,
    MIN_DELAY_MS,
    MIN_MAX_ATTEMPTS,
    MIN_TIMEOUT_SECONDS,
    VALID_METHODS,
)
from httpexec.models import AuthDescriptor, ValidationResult


_ALLOWED_SCHEMES = frozenset({"http", "https"})
_AUTH_FIELDS = (
    "username",
    "password",
    "token",
    "key",
    "key_header",
    "key_query_param",
)


def validate_request(config: str | Mapping[str, Any]) -> ValidationResult:
    """Validate a request configuration.

    Args:
        config: JSON text or an already-decoded document.

    Returns:
        Validation result with errors and warnings.
    """
    if isinstance(config, str):
        try:
            document = jsonc.loads(config)
        except json.JSONDecodeError as e:
            return ValidationResult.from_messages([f"Invalid JSON: {e}"])
        except RecursionError:
            return ValidationResult.from_messages(["Invalid JSON: nesting too deep"])
    else:
        document = config

    return validate_document(document)


def validate_document(document: Any) -> ValidationResult:
    """Validate a decoded request configuration.

    Args:
        document: Decoded JSON value.

    Returns:
        Validation result with errors and warnings.
    """
    if not isinstance(document, Mapping):
        return ValidationResult.from_messages(
            ["Request configuration must be a JSON object"]
        )

    errors: list[str] = []
    warnings: list[str] = []

    _validate_url(document.get("url"), errors)

    if "method" in document:
        method = document["method"]
        if not isinstance(method, str):
            errors.append("Property 'method' must be a string")
        elif method.upper() not in VALID_METHODS:
            errors.append(
                f"Invalid HTTP method: '{method}'. "
                f"Valid methods: {', '.join(VALID_METHODS)}"
            )

    if "timeout_seconds" in document:
        timeout = document["timeout_seconds"]
        if not _is_integer(timeout):
            errors.append("Property 'timeout_seconds' must be an integer")
        elif not MIN_TIMEOUT_SECONDS <= timeout <= MAX_TIMEOUT_SECONDS:
            errors.append(
                f"Property 'timeout_seconds' must be between "
                f"{MIN_TIMEOUT_SECONDS} and {MAX_TIMEOUT_SECONDS}"
            )

    for name in ("headers", "query"):
        if name in document and not isinstance(document[name], Mapping):
            errors.append(f"Property '{name}' must be an object with string values")

    auth = document.get("auth")
    if auth is not None:
        if isinstance(auth, Mapping):
            _validate_auth(auth, errors)
        else:
            errors.append("Property 'auth' must be an object")

    retry = document.get("retry")
    if retry is not None:
        if isinstance(retry, Mapping):
            _validate_retry(retry, errors, warnings)
        else:
            errors.append("Property 'retry' must be an object")

    if document.get("body") is not None and document.get("body_raw") is not None:
        warnings.append(
            "Both 'body' and 'body_raw' are specified. 'body' will take precedence."
        )

    return ValidationResult.from_messages(errors, warnings)


def _validate_url(url: Any, errors: list[str]) -> None:
    if not isinstance(url, str) or not url.strip():
        errors.append("Missing or empty required property: 'url'")
        return

    parsed = urlparse(url.strip())
    if not parsed.scheme:
        errors.append(f"Invalid URL format: '{url}'")
    elif parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        errors.append(f"URL must use http or https scheme, got: '{parsed.scheme}'")
    elif not parsed.netloc:
        errors.append(f"Invalid URL format: '{url}'")


def _validate_auth(auth: Mapping[str, Any], errors: list[str]) -> None:
    kind = auth.get("type")
    if not isinstance(kind, str) or not kind:
        errors.append("Auth object requires 'type' property")
        return

    fields: dict[str, str] = {}
    for name in _AUTH_FIELDS:
        value = auth.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            errors.append(f"Auth '{name}' must be a string")
            continue
        fields[name] = value

    errors.extend(validate_auth(AuthDescriptor(kind=kind, **fields)))


def _validate_retry(
    retry: Mapping[str, Any], errors: list[str], warnings: list[str]
) -> None:
    if "max_attempts" in retry:
        max_attempts = retry["max_attempts"]
        if not _is_integer(max_attempts):
            errors.append("Retry 'max_attempts' must be an integer")
        elif not MIN_MAX_ATTEMPTS <= max_attempts <= MAX_MAX_ATTEMPTS:
            errors.append(
                f"Retry 'max_attempts' must be between "
                f"{MIN_MAX_ATTEMPTS} and {MAX_MAX_ATTEMPTS}"
            )

    if "delay_ms" in retry:
        delay_ms = retry["delay_ms"]
        if not _is_integer(delay_ms):
            errors.append("Retry 'delay_ms' must be an integer")
        elif not MIN_DELAY_MS <= delay_ms <= MAX_DELAY_MS:
            errors.append(
                f"Retry 'delay_ms' must be between {MIN_DELAY_MS} and {MAX_DELAY_MS}"
            )

    if "retry_status_codes" in retry:
        codes = retry["retry_status_codes"]
        if not isinstance(codes, list):
            errors.append("Retry 'retry_status_codes' must be an array of integers")
        elif not codes:
            warnings.append(
                "Retry 'retry_status_codes' is empty. "
                "Status-based retry is disabled."
            )
        elif not all(_is_integer(code) for code in codes):
            warnings.append(
                "Retry 'retry_status_codes' contains non-integer values "
                "that will be ignored."
            )


def _is_integer(value: Any) -> bool:
    """Match the parser: whole-valued numbers only, never booleans."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()
