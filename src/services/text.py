"""Small text helpers shared by search, links and note tools."""

import re

from services.frontmatter import extract_frontmatter

_COMMENT_RE = re.compile(r"%%.*?%%", re.DOTALL)


def count_words(content: str) -> int:
    """Count whitespace-separated words, ignoring frontmatter and %% comments %%."""
    body = extract_frontmatter(content).body
    return len(_COMMENT_RE.sub("", body).split())


def snippet_window(line_length: int, column: int, length: int) -> tuple[int, int]:
    """Pick a ``[start, end)`` window of at most ``length`` chars around ``column``.

    The window is centred on the column and clamped to the line; when it
    would run past the end of the line the start shifts back so the match is
    not truncated.
    """
    if line_length <= length:
        return 0, line_length
    start = max(0, column - length // 2)
    end = min(line_length, start + length)
    if end == line_length:
        start = max(0, line_length - length)
    return start, end


def extract_snippet(line: str, column: int, length: int) -> tuple[str, int]:
    """Return the snippet around ``column`` and the offset of its first char."""
    start, end = snippet_window(len(line), column, length)
    return line[start:end], start


def number_lines(content: str) -> str:
    return "\n".join(f"{i}: {line}" for i, line in enumerate(content.split("\n"), start=1))
