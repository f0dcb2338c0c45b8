"""Listing tools - list, stat, exists, vault info."""

from config import LIST_MAX_LIMIT
from services.errors import VaultError
from services.queries import QueryService
from services.vault import err, error_response, get_context, ok
from tools._validation import validate_limit


async def list_notes(
    path: str | None = None,
    recursive: bool = False,
    includes: list[str] | None = None,
    excludes: list[str] | None = None,
    only: str = "any",
    limit: int | None = None,
    cursor: str | None = None,
    with_frontmatter_summary: bool = False,
) -> str:
    """List files and folders.

    Args:
        path: Folder to list; omit, "" or "." for the vault root.
        recursive: Descend into subfolders.
        includes: Glob patterns an entry path must match to be listed.
        excludes: Glob patterns for entries to skip (excluded folders are
            not descended into).
        only: "files", "directories" or "any" (default).
        limit: Maximum items per page.
        cursor: next_cursor from the previous page.
        with_frontmatter_summary: Add title/tags/aliases and other
            frontmatter fields to markdown file items.

    Returns:
        JSON with items (directories first, then by name), total_count,
        has_more and next_cursor.
    """
    if limit is not None:
        limit, error = validate_limit(limit, max_limit=LIST_MAX_LIMIT)
        if error:
            return err(error, kind="InvalidArgument")

    try:
        result = QueryService(get_context()).list_notes(
            path, recursive, includes, excludes, only, limit, cursor, with_frontmatter_summary
        )
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def stat(path: str | None = None) -> str:
    """Get metadata for a file or folder.

    Args:
        path: Vault-relative path; omit for the vault root.

    Returns:
        JSON with path, exists, kind ("file" or "directory") and metadata.
    """
    try:
        result = QueryService(get_context()).stat(path)
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def exists(path: str | None = None) -> str:
    """Check whether a path exists and what kind it is.

    Args:
        path: Vault-relative path.

    Returns:
        JSON with path, exists and kind.
    """
    try:
        result = QueryService(get_context()).exists(path)
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def get_vault_info() -> str:
    """Summarize the vault: name, location, file/folder counts and total size."""
    result = QueryService(get_context()).vault_info()
    return ok(**result.model_dump(exclude_none=True))
