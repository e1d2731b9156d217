"""Parse JSON request configurations into request descriptors."""

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from httpexec import jsonc
from httpexec.constants import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_METHOD,
    DEFAULT_TIMEOUT_SECONDS,
    VALID_METHODS,
)
from httpexec.errors import ConfigurationError
from httpexec.models import AuthDescriptor, RequestDescriptor, RetryDescriptor


def parse_request_text(
    text: str,
    *,
    default_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    default_follow_redirects: bool = True,
) -> RequestDescriptor:
    """Parse JSON text into a request descriptor.

    Comments and trailing commas are accepted.

    Args:
        text: JSON configuration text.
        default_timeout_seconds: Timeout used when the config omits one.
        default_follow_redirects: Redirect policy used when the config omits one.

    Returns:
        Parsed request descriptor.

    Raises:
        ConfigurationError: If the text is not valid JSON or the config is invalid.
    """
    try:
        document = jsonc.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON: {e}"
        raise ConfigurationError(msg) from e
    except RecursionError as e:
        msg = "Invalid JSON: nesting too deep"
        raise ConfigurationError(msg) from e

    return parse_request(
        document,
        default_timeout_seconds=default_timeout_seconds,
        default_follow_redirects=default_follow_redirects,
    )


def parse_request(
    document: Mapping[str, Any],
    *,
    default_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    default_follow_redirects: bool = True,
) -> RequestDescriptor:
    """Parse an already-decoded JSON object into a request descriptor.

    Args:
        document: Decoded JSON configuration.
        default_timeout_seconds: Timeout used when the config omits one.
        default_follow_redirects: Redirect policy used when the config omits one.

    Returns:
        Parsed request descriptor.

    Raises:
        ConfigurationError: If a required field is missing or a field is invalid.
    """
    if not isinstance(document, Mapping):
        msg = "Request configuration must be a JSON object"
        raise ConfigurationError(msg)

    url = document.get("url")
    if not isinstance(url, str) or not url.strip():
        msg = "Missing required property: 'url'"
        raise ConfigurationError(msg, field="url")

    method = (_get_str(document, "method", None) or DEFAULT_METHOD).upper()
    if method not in VALID_METHODS:
        valid = ", ".join(VALID_METHODS)
        msg = f"Invalid HTTP method: '{method}'. Valid methods: {valid}"
        raise ConfigurationError(msg, field="method")

    body = document.get("body")

    try:
        return RequestDescriptor(
            url=url,
            method=method,
            headers=_get_string_map(document, "headers"),
            query=_get_string_map(document, "query"),
            body=body,
            body_raw=_get_str(document, "body_raw", None),
            content_type=_get_str(document, "content_type", None)
            or DEFAULT_CONTENT_TYPE,
            timeout_seconds=_get_int(
                document, "timeout_seconds", default_timeout_seconds
            ),
            ignore_certificate_errors=_get_bool(
                document, "ignore_certificate_errors", False
            ),
            follow_redirects=_get_bool(
                document, "follow_redirects", default_follow_redirects
            ),
            auth=_parse_auth(document.get("auth")),
            retry=_parse_retry(document.get("retry")),
        )
    except ValidationError as e:
        raise _to_configuration_error(e) from e


def _parse_auth(value: Any) -> AuthDescriptor | None:
    if not isinstance(value, Mapping):
        return None
    kind = _get_str(value, "type", None, prefix="auth.")
    if not kind:
        return None
    return AuthDescriptor(
        kind=kind,
        username=_get_str(value, "username", None, prefix="auth."),
        password=_get_str(value, "password", None, prefix="auth."),
        token=_get_str(value, "token", None, prefix="auth."),
        key=_get_str(value, "key", None, prefix="auth."),
        key_header=_get_str(value, "key_header", None, prefix="auth."),
        key_query_param=_get_str(value, "key_query_param", None, prefix="auth."),
    )


def _parse_retry(value: Any) -> RetryDescriptor | None:
    if not isinstance(value, Mapping):
        return None

    status_codes: tuple[int, ...] | None = None
    raw_codes = value.get("retry_status_codes")
    if isinstance(raw_codes, list):
        # Non-numeric elements are skipped rather than rejected.
        status_codes = tuple(int(code) for code in raw_codes if _is_integral(code))

    return RetryDescriptor(
        max_attempts=_get_int(
            value, "max_attempts", DEFAULT_MAX_ATTEMPTS, prefix="retry."
        ),
        delay_ms=_get_int(value, "delay_ms", DEFAULT_DELAY_MS, prefix="retry."),
        exponential_backoff=_get_bool(
            value, "exponential_backoff", True, prefix="retry."
        ),
        retry_status_codes=status_codes,
    )


def _is_integral(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _get_str(
    obj: Mapping[str, Any], name: str, default: str | None, prefix: str = ""
) -> str | None:
    value = obj.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        msg = f"Property '{prefix}{name}' must be a string"
        raise ConfigurationError(msg, field=f"{prefix}{name}")
    return value


def _get_int(obj: Mapping[str, Any], name: str, default: int, prefix: str = "") -> int:
    value = obj.get(name)
    if value is None:
        return default
    if not _is_integral(value):
        msg = f"Property '{prefix}{name}' must be an integer"
        raise ConfigurationError(msg, field=f"{prefix}{name}")
    return int(value)


def _get_bool(
    obj: Mapping[str, Any], name: str, default: bool, prefix: str = ""
) -> bool:
    value = obj.get(name)
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"Property '{prefix}{name}' must be true or false"
        raise ConfigurationError(msg, field=f"{prefix}{name}")
    return value


def _get_string_map(obj: Mapping[str, Any], name: str) -> dict[str, str]:
    value = obj.get(name)
    if not isinstance(value, Mapping):
        return {}
    result: dict[str, str] = {}
    for key, item in value.items():
        if item is None:
            result[str(key)] = ""
        elif isinstance(item, str):
            result[str(key)] = item
        else:
            result[str(key)] = json.dumps(item)
    return result


def _to_configuration_error(error: ValidationError) -> ConfigurationError:
    """Convert the first pydantic error into a ConfigurationError."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    msg = f"Invalid value for '{location}': {first['msg']}"
    return ConfigurationError(msg, field=location or None)
