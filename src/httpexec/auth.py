"""Authentication applied to outgoing requests.

Each scheme is a no-op when its credential is missing; completeness is
reported separately by :func:`validate_auth`.
"""

import base64
from collections.abc import MutableMapping

from httpexec.models import AuthDescriptor, AuthKind
from httpexec.query import append_query_parameter


AUTHORIZATION_HEADER = "Authorization"


def apply_authentication(
    headers: MutableMapping[str, str],
    auth: AuthDescriptor | None,
    url: str,
) -> str:
    """Apply authentication to a request.

    Args:
        headers: Outgoing request headers, updated in place.
        auth: Authentication settings, or None.
        url: Current request URL.

    Returns:
        The URL to send to, rewritten when an API key goes in the query.
    """
    if auth is None:
        return url

    kind = auth.auth_kind
    if kind == AuthKind.BASIC:
        _apply_basic(headers, auth)
    elif kind == AuthKind.BEARER:
        _apply_bearer(headers, auth)
    elif kind == AuthKind.API_KEY:
        return _apply_api_key(headers, auth, url)
    return url


def _apply_basic(headers: MutableMapping[str, str], auth: AuthDescriptor) -> None:
    if not auth.username:
        return
    credentials = f"{auth.username}:{auth.password or ''}"
    encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
    headers[AUTHORIZATION_HEADER] = f"Basic {encoded}"


def _apply_bearer(headers: MutableMapping[str, str], auth: AuthDescriptor) -> None:
    if not auth.token:
        return
    headers[AUTHORIZATION_HEADER] = f"Bearer {auth.token}"


def _apply_api_key(
    headers: MutableMapping[str, str], auth: AuthDescriptor, url: str
) -> str:
    if not auth.key:
        return url
    if auth.key_header:
        headers[auth.key_header] = auth.key
        return url
    if auth.key_query_param:
        return append_query_parameter(url, auth.key_query_param, auth.key)
    return url


def validate_auth(auth: AuthDescriptor | None) -> list[str]:
    """Check that authentication settings are complete.

    Args:
        auth: Authentication settings, or None.

    Returns:
        Human-readable error messages; empty when valid.
    """
    errors: list[str] = []
    if auth is None:
        return errors

    kind = auth.auth_kind
    if kind == AuthKind.BASIC:
        if not auth.username:
            errors.append("Basic auth requires 'username'")
    elif kind == AuthKind.BEARER:
        if not auth.token:
            errors.append("Bearer auth requires 'token'")
    elif kind == AuthKind.API_KEY:
        if not auth.key:
            errors.append("API key auth requires 'key'")
        if not auth.key_header and not auth.key_query_param:
            errors.append(
                "API key auth requires either 'key_header' or 'key_query_param'"
            )
    else:
        valid = ", ".join(k.value for k in AuthKind)
        errors.append(f"Unknown auth type: '{auth.kind}'. Valid types are: {valid}")

    return errors
