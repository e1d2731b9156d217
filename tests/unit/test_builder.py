"""Unit tests for outgoing request construction."""

import pytest

from httpexec.builder import build_request, serialize_body
from httpexec.models import (
    AuthDescriptor,
    RawJsonBody,
    RequestDescriptor,
    StructuredBody,
)


class TestBuildRequest:
    """Tests for build_request."""

    @pytest.mark.unit
    def test_get_without_body(self) -> None:
        """Test a bodiless GET carries no content headers."""
        request = build_request(
            RequestDescriptor(
                url="https://x.test/a",
                headers={"Accept": "application/json", "Content-Type": "text/plain"},
            )
        )
        sent = request.to_httpx()

        assert request.method == "GET"
        assert request.content is None
        assert sent.headers["Accept"] == "application/json"
        assert "Content-Type" not in sent.headers

    @pytest.mark.unit
    def test_query_is_merged(self) -> None:
        """Test query parameters end up in the URL."""
        request = build_request(
            RequestDescriptor(url="https://x.test/a?x=1", query={"y": "2 3"})
        )
        assert request.url == "https://x.test/a?x=1&y=2+3"

    @pytest.mark.unit
    def test_structured_body(self) -> None:
        """Test a structured body is JSON-encoded with a JSON content type."""
        request = build_request(
            RequestDescriptor(url="https://x.test/", method="POST", body={"a": 1})
        )

        assert request.content == b'{"a":1}'
        assert request.content_headers["Content-Type"] == (
            "application/json; charset=utf-8"
        )

    @pytest.mark.unit
    def test_raw_json_body_is_sent_verbatim(self) -> None:
        """Test that literal JSON keeps its exact text."""
        request = build_request(
            RequestDescriptor(
                url="https://x.test/",
                method="POST",
                body=RawJsonBody(text='{ "a" : 1.50 }'),
            )
        )
        assert request.content == b'{ "a" : 1.50 }'

    @pytest.mark.unit
    def test_body_raw_uses_content_type(self) -> None:
        """Test body_raw with its configured content type."""
        request = build_request(
            RequestDescriptor(
                url="https://x.test/",
                method="POST",
                body_raw="a=1&b=2",
                content_type="application/x-www-form-urlencoded",
            )
        )
        sent = request.to_httpx()

        assert sent.content == b"a=1&b=2"
        assert sent.headers["Content-Type"] == (
            "application/x-www-form-urlencoded; charset=utf-8"
        )

    @pytest.mark.unit
    def test_existing_charset_is_kept(self) -> None:
        """Test a content type that already names a charset."""
        request = build_request(
            RequestDescriptor(
                url="https://x.test/",
                method="POST",
                body_raw="x",
                content_type="text/plain; charset=latin-1",
            )
        )
        assert request.content_headers["Content-Type"] == "text/plain; charset=latin-1"

    @pytest.mark.unit
    def test_body_wins_over_body_raw(self) -> None:
        """Test precedence of body over body_raw."""
        request = build_request(
            RequestDescriptor(
                url="https://x.test/", method="POST", body=[1], body_raw="ignored"
            )
        )
        assert request.content == b"[1]"

    @pytest.mark.unit
    def test_configured_content_type_does_not_override_body(self) -> None:
        """Test that the body's content type wins over a header."""
        request = build_request(
            RequestDescriptor(
                url="https://x.test/",
                method="POST",
                body={"a": 1},
                headers={"Content-Type": "text/plain", "Content-Language": "en"},
            )
        )

        assert request.content_headers["Content-Type"].startswith("application/json")
        assert request.content_headers["Content-Language"] == "en"
        assert "Content-Language" not in request.headers

    @pytest.mark.unit
    def test_auth_header_wins_over_configured_header(self) -> None:
        """Test that an auth-set header is not overwritten."""
        request = build_request(
            RequestDescriptor(
                url="https://x.test/",
                headers={"Authorization": "Bearer stale"},
                auth=AuthDescriptor(kind="bearer", token="fresh"),
            )
        )
        assert request.headers["Authorization"] == "Bearer fresh"

    @pytest.mark.unit
    def test_api_key_query_after_configured_query(self) -> None:
        """Test that the API key is appended after configured parameters."""
        request = build_request(
            RequestDescriptor(
                url="https://x.test/",
                query={"page": "1"},
                auth=AuthDescriptor(kind="api_key", key="k", key_query_param="key"),
            )
        )
        assert request.url == "https://x.test/?page=1&key=k"

    @pytest.mark.unit
    def test_timeout_extension(self) -> None:
        """Test the per-request timeout is attached."""
        sent = build_request(
            RequestDescriptor(url="https://x.test/", timeout_seconds=7)
        ).to_httpx()
        assert sent.extensions["timeout"]["read"] == 7


class TestSerializeBody:
    """Tests for serialize_body."""

    def test_structured_unicode(self) -> None:
        """Test that non-ASCII text is encoded as UTF-8, not escaped."""
        body = StructuredBody(value={"name": "Zoë"})
        assert serialize_body(body) == '{"name":"Zoë"}'

    def test_raw(self) -> None:
        """Test literal JSON passthrough."""
        assert serialize_body(RawJsonBody(text="[1, 2]")) == "[1, 2]"
