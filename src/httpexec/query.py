"""Query-string merging for request URLs."""

from collections.abc import Mapping
from urllib.parse import quote_plus


def _separator(url: str) -> str:
    return "&" if "?" in url else "?"


def append_query_parameters(url: str, params: Mapping[str, str] | None) -> str:
    """Append form-encoded parameters to a URL.

    Args:
        url: Base URL, with or without an existing query string.
        params: Parameters to append, in iteration order.

    Returns:
        URL with the parameters appended, or the URL unchanged if empty.
    """
    if not params:
        return url

    query = "&".join(
        f"{quote_plus(key)}={quote_plus(value)}" for key, value in params.items()
    )
    return f"{url}{_separator(url)}{query}"


def append_query_parameter(url: str, key: str, value: str) -> str:
    """Append a single form-encoded key/value pair to a URL.

    Args:
        url: Base URL.
        key: Parameter name.
        value: Parameter value.

    Returns:
        URL with the pair appended.
    """
    return f"{url}{_separator(url)}{quote_plus(key)}={quote_plus(value)}"
