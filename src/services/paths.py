"""Vault-relative path validation and manipulation."""

import re

from services.errors import InvalidPathError

_RESERVED_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')
_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")
_DUPLICATE_SEPARATORS = re.compile(r"/{2,}")


def is_root_path(path: str | None) -> bool:
    """Check whether a path argument refers to the vault root."""
    return path is None or path in ("", ".")


def normalize_path(path: str | None) -> str:
    """Validate and normalize a vault-relative path.

    Backslashes become forward slashes, duplicate separators collapse and a
    trailing separator is stripped. ``.`` segments are dropped.

    Raises:
        InvalidPathError: If the path is empty, absolute, escapes the vault
            with a ``..`` segment, or contains reserved characters.
    """
    if path is None or not path.strip():
        raise InvalidPathError(path, "path cannot be empty")

    candidate = path.replace("\\", "/")
    if _DRIVE_LETTER.match(candidate):
        raise InvalidPathError(path, "absolute paths are not allowed")
    if candidate.startswith("/"):
        raise InvalidPathError(path, "absolute paths are not allowed")
    if _RESERVED_CHARS.search(candidate):
        raise InvalidPathError(path, "path contains reserved characters")

    candidate = _DUPLICATE_SEPARATORS.sub("/", candidate).rstrip("/")
    segments = []
    for segment in candidate.split("/"):
        if segment == "..":
            raise InvalidPathError(path, "parent directory traversal is not allowed")
        if segment == ".":
            continue
        segments.append(segment)

    if not segments:
        raise InvalidPathError(path, "path cannot be empty")
    return "/".join(segments)


def normalize_folder_path(path: str | None) -> str:
    """Like normalize_path, but the vault root maps to the empty string."""
    if is_root_path(path):
        return ""
    return normalize_path(path)


def parent_path(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


def basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def split_extension(path: str) -> tuple[str, str]:
    """Split ``folder/note.md`` into ``("folder/note", ".md")``."""
    name = basename(path)
    if "." not in name[1:]:
        return path, ""
    stem, ext = name.rsplit(".", 1)
    prefix = path[: len(path) - len(name)]
    return prefix + stem, "." + ext


def ancestors(path: str) -> list[str]:
    """Parent folders of ``path``, outermost first (``a/b/c.md`` -> ``a``, ``a/b``)."""
    parts = path.split("/")[:-1]
    return ["/".join(parts[: i + 1]) for i in range(len(parts))]
