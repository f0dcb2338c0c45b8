"""Note tools - read, create, update, rename, delete."""

from services.errors import VaultError
from services.mutations import NoteService
from services.vault import error_response, get_context, ok


async def read_note(
    path: str,
    parse_frontmatter: bool = False,
    with_line_numbers: bool = False,
) -> str:
    """Read a note's content along with its version tag.

    Args:
        path: Vault-relative path to the note (e.g. "projects/plan.md").
        parse_frontmatter: If true, also return the raw frontmatter block, its
            parsed fields and the content without frontmatter.
        with_line_numbers: If true, prefix each line with "<n>: " (useful
            before calling update_sections) and report total_lines.

    Returns:
        JSON with path, content, version_tag and word_count.
    """
    try:
        result = await NoteService(get_context()).read_note(
            path, parse_frontmatter, with_line_numbers
        )
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def create_note(
    path: str,
    content: str = "",
    on_conflict: str = "error",
    create_parents: bool = False,
    validate_links: bool = True,
) -> str:
    """Create a new note.

    Args:
        path: Vault-relative path for the new note.
        content: Full note content, including any frontmatter.
        on_conflict: What to do when the path exists: "error" (default),
            "overwrite" (existing note goes to trash first) or "rename"
            (create "<name> 1.md", "<name> 2.md", ...).
        create_parents: Create missing parent folders instead of failing.
        validate_links: Report broken wikilinks in the new content.

    Returns:
        JSON with path, version_tag, created timestamp, renamed flag,
        word_count and optional link_validation.
    """
    try:
        result = await NoteService(get_context()).create_note(
            path, content, on_conflict, create_parents, validate_links
        )
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def update_note(
    path: str,
    content: str,
    if_match: str | None = None,
    validate_links: bool = True,
) -> str:
    """Replace a note's entire content.

    Args:
        path: Vault-relative path to the note.
        content: New full content.
        if_match: Version tag from a previous read. When given and the note
            has changed since, nothing is written.
        validate_links: Report broken wikilinks in the new content.

    Returns:
        JSON with the new version_tag, word_count and optional link_validation.
    """
    try:
        result = await NoteService(get_context()).update_note(
            path, content, if_match, validate_links
        )
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def rename_file(
    path: str,
    new_path: str,
    if_match: str | None = None,
) -> str:
    """Move or rename a note, updating wikilinks that point to it.

    Args:
        path: Current vault-relative path.
        new_path: Destination path. Missing parent folders are created.
        if_match: Optional version tag guard.

    Returns:
        JSON with old_path, new_path and version_tag.
    """
    try:
        result = await NoteService(get_context()).rename_file(path, new_path, if_match)
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def delete_note(
    path: str,
    soft: bool = True,
    dry_run: bool = False,
    if_match: str | None = None,
) -> str:
    """Delete a note.

    Args:
        path: Vault-relative path to the note.
        soft: Move to the vault trash (default) instead of deleting permanently.
        dry_run: Only report what would happen.
        if_match: Optional version tag guard.

    Returns:
        JSON with path, deleted, soft, dry_run and destination.
    """
    try:
        result = await NoteService(get_context()).delete_note(path, soft, dry_run, if_match)
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))
