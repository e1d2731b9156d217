"""Unit tests for lenient JSON loading."""

import json

import pytest

from httpexec import jsonc


class TestLoads:
    """Tests for jsonc.loads."""

    def test_plain_json(self) -> None:
        """Test that strict JSON parses unchanged."""
        assert jsonc.loads('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_line_and_block_comments(self) -> None:
        """Test that comments are ignored."""
        text = """
        {
            // the endpoint
            "url": "https://x.test/", /* inline */
            "method": "GET"
        }
        """
        assert jsonc.loads(text) == {"url": "https://x.test/", "method": "GET"}

    def test_trailing_commas(self) -> None:
        """Test that trailing commas before closers are ignored."""
        assert jsonc.loads('{"a": [1, 2,], "b": {"c": 1,},}') == {
            "a": [1, 2],
            "b": {"c": 1},
        }

    def test_comment_markers_inside_strings_are_kept(self) -> None:
        """Test that // and /* inside strings are not comments."""
        text = '{"url": "https://x.test/a", "note": "/* not a comment */"}'
        assert jsonc.loads(text) == {
            "url": "https://x.test/a",
            "note": "/* not a comment */",
        }

    def test_comma_inside_string_is_kept(self) -> None:
        """Test that a ',]' sequence inside a string survives."""
        assert jsonc.loads('{"a": "x,]"}') == {"a": "x,]"}

    def test_escaped_quote_inside_string(self) -> None:
        """Test that escaped quotes do not end the string early."""
        assert jsonc.loads(r'{"a": "say \"//hi\""}') == {"a": 'say "//hi"'}

    def test_unterminated_block_comment_raises(self) -> None:
        """Test that an unterminated block comment is a decode error."""
        with pytest.raises(json.JSONDecodeError):
            jsonc.loads('{"a": 1 /* oops')

    def test_invalid_json_raises(self) -> None:
        """Test that invalid JSON still fails."""
        with pytest.raises(json.JSONDecodeError):
            jsonc.loads("{not json}")
