"""Glob pattern compilation for include/exclude path filters.

Supported syntax:
    *       any run of characters except "/"
    **      any run of characters including "/" (``**/`` also matches zero folders)
    ?       one character except "/"
    [abc]   character class (``[!abc]`` negates)
    {a,b}   alternatives
"""

import re
from functools import lru_cache


def _translate(pattern: str) -> str:
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if i + 1 < n and pattern[i + 1] == "*":
                i += 2
                if i < n and pattern[i] == "/":
                    out.append("(?:.*/)?")
                    i += 1
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1 or pattern[i + 1:end] in ("", "!"):
                out.append(re.escape(c))
            else:
                body = pattern[i + 1:end].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end + 1
                continue
        elif c == "{":
            end = pattern.find("}", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                options = pattern[i + 1:end].split(",")
                out.append("(?:" + "|".join(_translate(o) for o in options) + ")")
                i = end + 1
                continue
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern:
    """Compile a glob pattern into an anchored regex."""
    return re.compile("^" + _translate(pattern) + "$")


def matches_glob(path: str, pattern: str) -> bool:
    return compile_glob(pattern).match(path) is not None


def matches_any(path: str, patterns: list[str] | None) -> bool:
    return any(matches_glob(path, p) for p in patterns or [])


def should_include(
    path: str,
    includes: list[str] | None = None,
    excludes: list[str] | None = None,
) -> bool:
    """A path passes when it matches some include (or none are given) and no exclude."""
    if includes and not matches_any(path, includes):
        return False
    return not matches_any(path, excludes)
