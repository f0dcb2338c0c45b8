"""Link tools - wikilink validation, resolution and backlinks."""

from services.errors import VaultError
from services.queries import QueryService
from services.vault import error_response, get_context, ok


async def validate_wikilinks(path: str) -> str:
    """Check every wikilink in a note.

    Args:
        path: Vault-relative path to the note.

    Returns:
        JSON with resolved_links (text, target, alias) and unresolved_links
        (text, line, ranked suggestions).
    """
    try:
        result = await QueryService(get_context()).validate_wikilinks(path)
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def resolve_wikilink(source_path: str, link_text: str) -> str:
    """Resolve a single wikilink as seen from a source note.

    Args:
        source_path: Note the link would appear in (affects relative links).
        link_text: Link target, with or without [[ ]], heading or alias.

    Returns:
        JSON with resolved, target_path, or ranked suggestions if unresolved.
    """
    try:
        result = QueryService(get_context()).resolve_wikilink(source_path, link_text)
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def backlinks(
    path: str,
    include_unlinked: bool = False,
    include_snippets: bool = True,
) -> str:
    """List notes that link to (or mention) a note.

    Args:
        path: Vault-relative path of the target note.
        include_unlinked: Also scan every note for plain-text mentions of the
            target's name. Slower on large vaults.
        include_snippets: Include the surrounding text of each occurrence.

    Returns:
        JSON with backlinks grouped per source note (type "linked" or
        "unlinked", occurrences with line, column and snippet).
    """
    try:
        result = await QueryService(get_context()).backlinks(
            path, include_unlinked, include_snippets
        )
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))
