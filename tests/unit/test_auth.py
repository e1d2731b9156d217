"""Unit tests for request authentication."""

import base64

import pytest

from httpexec.auth import AUTHORIZATION_HEADER, apply_authentication, validate_auth
from httpexec.models import AuthDescriptor


URL = "https://api.test/items"


class TestApplyAuthentication:
    """Tests for apply_authentication."""

    @pytest.mark.unit
    def test_no_auth_is_noop(self) -> None:
        """Test that missing auth leaves headers and URL alone."""
        headers: dict[str, str] = {}
        assert apply_authentication(headers, None, URL) == URL
        assert headers == {}

    @pytest.mark.unit
    def test_basic_auth_header(self) -> None:
        """Test Basic auth encodes username:password."""
        headers: dict[str, str] = {}
        auth = AuthDescriptor(kind="basic", username="u", password="p")

        assert apply_authentication(headers, auth, URL) == URL
        assert headers[AUTHORIZATION_HEADER] == "Basic dTpw"

    @pytest.mark.unit
    def test_basic_auth_without_password(self) -> None:
        """Test that a missing password encodes as empty."""
        headers: dict[str, str] = {}
        auth = AuthDescriptor(kind="BASIC", username="alice")

        apply_authentication(headers, auth, URL)

        expected = base64.b64encode(b"alice:").decode("ascii")
        assert headers[AUTHORIZATION_HEADER] == f"Basic {expected}"

    @pytest.mark.unit
    def test_basic_auth_without_username_is_noop(self) -> None:
        """Test that Basic auth with no username adds nothing."""
        headers: dict[str, str] = {}
        apply_authentication(headers, AuthDescriptor(kind="basic"), URL)
        assert headers == {}

    @pytest.mark.unit
    def test_bearer_auth(self) -> None:
        """Test Bearer auth header."""
        headers: dict[str, str] = {}
        apply_authentication(headers, AuthDescriptor(kind="bearer", token="t0k"), URL)
        assert headers[AUTHORIZATION_HEADER] == "Bearer t0k"

    @pytest.mark.unit
    def test_api_key_in_header(self) -> None:
        """Test API key placed in a named header."""
        headers: dict[str, str] = {}
        auth = AuthDescriptor(kind="api_key", key="k1", key_header="X-API-Key")

        assert apply_authentication(headers, auth, URL) == URL
        assert headers == {"X-API-Key": "k1"}

    @pytest.mark.unit
    def test_api_key_in_query(self) -> None:
        """Test API key appended to the query string."""
        headers: dict[str, str] = {}
        auth = AuthDescriptor(kind="api_key", key="k 1", key_query_param="api_key")

        url = apply_authentication(headers, auth, f"{URL}?page=2")

        assert url == f"{URL}?page=2&api_key=k+1"
        assert headers == {}

    @pytest.mark.unit
    def test_api_key_header_wins_over_query(self) -> None:
        """Test that key_header takes precedence when both are set."""
        headers: dict[str, str] = {}
        auth = AuthDescriptor(
            kind="api_key", key="k", key_header="X-Key", key_query_param="key"
        )

        assert apply_authentication(headers, auth, URL) == URL
        assert headers == {"X-Key": "k"}

    @pytest.mark.unit
    def test_unknown_kind_is_noop(self) -> None:
        """Test that an unknown scheme adds nothing."""
        headers: dict[str, str] = {}
        assert apply_authentication(headers, AuthDescriptor(kind="oauth"), URL) == URL
        assert headers == {}


class TestValidateAuth:
    """Tests for validate_auth."""

    @pytest.mark.unit
    def test_none_is_valid(self) -> None:
        """Test that no auth has no errors."""
        assert validate_auth(None) == []

    @pytest.mark.unit
    def test_complete_configs_are_valid(self) -> None:
        """Test that complete settings have no errors."""
        assert validate_auth(AuthDescriptor(kind="basic", username="u")) == []
        assert validate_auth(AuthDescriptor(kind="bearer", token="t")) == []
        assert (
            validate_auth(
                AuthDescriptor(kind="api_key", key="k", key_query_param="q")
            )
            == []
        )

    @pytest.mark.unit
    def test_missing_credentials(self) -> None:
        """Test messages for missing credentials."""
        assert validate_auth(AuthDescriptor(kind="basic")) == [
            "Basic auth requires 'username'"
        ]
        assert validate_auth(AuthDescriptor(kind="bearer")) == [
            "Bearer auth requires 'token'"
        ]

    @pytest.mark.unit
    def test_api_key_reports_both_problems(self) -> None:
        """Test that an empty api_key config reports key and placement."""
        assert validate_auth(AuthDescriptor(kind="api_key")) == [
            "API key auth requires 'key'",
            "API key auth requires either 'key_header' or 'key_query_param'",
        ]

    @pytest.mark.unit
    def test_unknown_kind(self) -> None:
        """Test the message for an unknown scheme."""
        assert validate_auth(AuthDescriptor(kind="digest")) == [
            "Unknown auth type: 'digest'. Valid types are: basic, bearer, api_key"
        ]
