"""Build outgoing HTTP requests from request descriptors."""

from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import TypeAdapter

from httpexec.auth import apply_authentication
from httpexec.constants import CONTENT_HEADER_NAMES
from httpexec.models import RawJsonBody, RequestDescriptor, StructuredBody
from httpexec.query import append_query_parameters


JSON_CONTENT_TYPE = "application/json"

_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


@dataclass
class OutgoingRequest:
    """A fully built request, ready to hand to a transport.

    Content headers are kept apart from general headers and are only sent
    when the request carries content.
    """

    method: str
    url: str
    timeout_seconds: float
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content_headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes | None = None

    def to_httpx(self) -> httpx.Request:
        """Convert to an ``httpx.Request`` with a per-request timeout."""
        headers = httpx.Headers(self.headers)
        if self.content is not None:
            headers.update(self.content_headers)
        return httpx.Request(
            self.method,
            self.url,
            headers=headers,
            content=self.content,
            extensions={"timeout": httpx.Timeout(self.timeout_seconds).as_dict()},
        )


def build_request(descriptor: RequestDescriptor) -> OutgoingRequest:
    """Build an outgoing request.

    Steps: merge query parameters, apply authentication (which may rewrite
    the URL), attach content, then route configured headers.

    Args:
        descriptor: Request to build.

    Returns:
        Outgoing request.
    """
    url = append_query_parameters(descriptor.url, descriptor.query)
    request = OutgoingRequest(
        method=descriptor.method.value,
        url=url,
        timeout_seconds=descriptor.timeout_seconds,
    )

    request.url = apply_authentication(request.headers, descriptor.auth, request.url)

    _set_content(request, descriptor)
    _set_headers(request, descriptor.headers)

    return request


def serialize_body(body: StructuredBody | RawJsonBody) -> str:
    """Render a body variant as JSON text.

    Args:
        body: Structured value or literal JSON.

    Returns:
        JSON text; literal JSON is returned unchanged.
    """
    if isinstance(body, RawJsonBody):
        return body.text
    return _ANY_ADAPTER.dump_json(body.value).decode("utf-8")


def _set_content(request: OutgoingRequest, descriptor: RequestDescriptor) -> None:
    if descriptor.body is not None:
        text = serialize_body(descriptor.body)
        content_type = JSON_CONTENT_TYPE
    elif descriptor.body_raw:
        text = descriptor.body_raw
        content_type = descriptor.content_type
    else:
        return

    request.content = text.encode("utf-8")
    request.content_headers["Content-Type"] = _with_charset(content_type)


def _set_headers(request: OutgoingRequest, headers: dict[str, str]) -> None:
    for name, value in headers.items():
        lowered = name.lower()
        if lowered in CONTENT_HEADER_NAMES:
            # The body's own content type is authoritative.
            if lowered == "content-type" and "content-type" in request.content_headers:
                continue
            request.content_headers[name] = value
        elif name not in request.headers:
            request.headers[name] = value


def _with_charset(content_type: str) -> str:
    if "charset=" in content_type.lower():
        return content_type
    return f"{content_type}; charset=utf-8"
