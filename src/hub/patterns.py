"""Tool name pattern matching.

Two pattern forms are supported:

- ``jira.``  namespace prefix (trailing dot): verbatim ``startswith`` test
- ``read*``  glob: ``*`` is any run of characters, ``?`` exactly one,
  anchored at both ends and case-insensitive
"""

import re
from functools import lru_cache

NAMESPACE_SEPARATOR = "."


@lru_cache(maxsize=512)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def matches(tool_name: str, pattern: str) -> bool:
    """
    Check whether a tool name is admitted by a pattern.

    Never raises; non-string input simply does not match.
    """
    if not isinstance(tool_name, str) or not isinstance(pattern, str):
        return False

    if pattern.endswith(NAMESPACE_SEPARATOR):
        return tool_name.startswith(pattern)

    return _compile_glob(pattern).fullmatch(tool_name) is not None


def matches_any(tool_name: str, patterns: list[str]) -> bool:
    """True if the tool name matches at least one pattern."""
    return any(matches(tool_name, pattern) for pattern in patterns)
