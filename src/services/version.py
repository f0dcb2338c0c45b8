"""Optimistic-concurrency version tags derived from file stats."""

from services.errors import VersionMismatchError
from services.ports import FileStat


def generate_version(mtime: int, size: int) -> str:
    """Build the opaque version tag for a document state."""
    return f"{int(mtime)}-{int(size)}"


def validate_version(tag: str, mtime: int, size: int) -> bool:
    return tag == generate_version(mtime, size)


def version_for(stat: FileStat) -> str:
    return generate_version(stat.mtime, stat.size)


def check_version(path: str, expected: str | None, stat: FileStat) -> None:
    """Raise VersionMismatchError when ``expected`` is non-empty and stale.

    There is a window between this check and the following write; concurrent
    writers racing on the same base tag resolve as last-writer-wins.
    """
    if not expected:
        return
    if not validate_version(expected, stat.mtime, stat.size):
        raise VersionMismatchError(path, expected, version_for(stat))
