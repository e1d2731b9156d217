"""Unit tests for query-string merging."""

import pytest

from httpexec.query import append_query_parameter, append_query_parameters


class TestAppendQueryParameters:
    """Tests for append_query_parameters."""

    @pytest.mark.unit
    def test_empty_params_leave_url_unchanged(self) -> None:
        """Test that no parameters means no change."""
        assert append_query_parameters("https://x.test/a", {}) == "https://x.test/a"
        assert append_query_parameters("https://x.test/a", None) == "https://x.test/a"

    @pytest.mark.unit
    def test_first_parameter_uses_question_mark(self) -> None:
        """Test separator when the URL has no query string."""
        url = append_query_parameters("https://x.test/a", {"page": "1", "size": "10"})
        assert url == "https://x.test/a?page=1&size=10"

    @pytest.mark.unit
    def test_existing_query_uses_ampersand(self) -> None:
        """Test separator when the URL already has a query string."""
        url = append_query_parameters("https://x.test/a?x=1", {"y": "2"})
        assert url == "https://x.test/a?x=1&y=2"

    @pytest.mark.unit
    def test_values_are_form_encoded(self) -> None:
        """Test that keys and values are form-encoded."""
        url = append_query_parameters("https://x.test/", {"q": "a b&c", "k y": "é"})
        assert url == "https://x.test/?q=a+b%26c&k+y=%C3%A9"

    @pytest.mark.unit
    def test_single_parameter(self) -> None:
        """Test appending a single pair."""
        assert (
            append_query_parameter("https://x.test/?a=1", "api_key", "s/k")
            == "https://x.test/?a=1&api_key=s%2Fk"
        )

    @pytest.mark.unit
    def test_brackets_are_percent_encoded(self) -> None:
        """Test that square brackets are encoded."""
        url = append_query_parameter("https://x.test/", "filter[id]", "[1]")
        assert url.lower() == "https://x.test/?filter%5bid%5d=%5b1%5d"
