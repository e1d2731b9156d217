"""Lenient JSON loading for hand-written configuration.

Accepts ``//`` line comments, ``/* */`` block comments and trailing commas
before a closing bracket, none of which the standard ``json`` module allows.
"""

import json
import re
from typing import Any


_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def strip_comments(text: str) -> str:
    """Remove comments outside of string literals.

    Args:
        text: JSON text that may contain comments.

    Returns:
        Text with comments replaced by whitespace so error offsets stay close.
    """
    out: list[str] = []
    i = 0
    length = len(text)
    in_string = False

    while i < length:
        char = text[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            out.append(char)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = length if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                msg = "Unterminated block comment"
                raise json.JSONDecodeError(msg, text, i)
            out.append(" ")
            i = end + 2
        else:
            out.append(char)
            i += 1

    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    """Remove commas that directly precede ``}`` or ``]`` outside strings.

    Args:
        text: Comment-free JSON text.

    Returns:
        Text without trailing commas.
    """
    # Split on string literals so commas inside strings are left alone.
    parts = re.split(r'("(?:[^"\\]|\\.)*")', text)
    for index in range(0, len(parts), 2):
        parts[index] = _TRAILING_COMMA.sub(r"\1", parts[index])
    return "".join(parts)


def loads(text: str) -> Any:
    """Parse JSON text, tolerating comments and trailing commas.

    Args:
        text: JSON text.

    Returns:
        Parsed value.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON after cleanup.
    """
    return json.loads(strip_trailing_commas(strip_comments(text)))
