"""Section tools - line-range edits."""

from services.errors import VaultError
from services.models import SectionEdit
from services.mutations import NoteService
from services.vault import err, error_response, get_context, ok
from tools._validation import coerce_section_edits


async def update_sections(
    path: str,
    edits: list[SectionEdit],
    if_match: str | None = None,
    validate_links: bool = True,
    force: bool = False,
) -> str:
    """Replace line ranges in a note in one atomic batch.

    Line numbers refer to the note as it is now (use read_note with
    with_line_numbers=true). Either every edit applies or none does.

    Args:
        path: Vault-relative path to the note.
        edits: List of {"start_line", "end_line", "content"} objects.
            Ranges are 1-indexed, inclusive and must not overlap.
        if_match: Optional version tag guard.
        validate_links: Re-check wikilinks across the whole resulting note.
        force: Allow edits that change the auto-generated waypoint block.

    Returns:
        JSON with sections_updated, the new version_tag, word_count and
        optional link_validation.
    """
    coerced, error = coerce_section_edits(edits)
    if error:
        return err(error, kind="InvalidArgument")

    try:
        result = await NoteService(get_context()).update_sections(
            path, coerced, if_match, validate_links, force
        )
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))
