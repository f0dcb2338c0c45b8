"""Frontmatter tools - patch and remove fields."""

import json

from services.errors import VaultError
from services.mutations import NoteService
from services.vault import err, error_response, get_context, ok


def _parse_patch(patch: dict | str | None) -> tuple[dict | None, str | None]:
    """Accept a dict or a JSON object string."""
    if patch is None or isinstance(patch, dict):
        return patch, None
    try:
        parsed = json.loads(patch)
    except json.JSONDecodeError as e:
        return None, f"Invalid patch JSON: {e}"
    if not isinstance(parsed, dict):
        return None, "patch must be a JSON object"
    return parsed, None


async def update_frontmatter(
    path: str,
    patch: dict | str | None = None,
    remove: list[str] | None = None,
    if_match: str | None = None,
) -> str:
    """Set and/or delete frontmatter fields, leaving the body untouched.

    Args:
        path: Vault-relative path to the note.
        patch: Fields to set, e.g. {"status": "done", "tags": ["a", "b"]}.
            A JSON object string is also accepted.
        remove: Field names to delete.
        if_match: Optional version tag guard.

    Returns:
        JSON with updated_fields, removed_fields and the new version_tag.
    """
    patch, error = _parse_patch(patch)
    if error:
        return err(error, kind="InvalidArgument")

    try:
        result = await NoteService(get_context()).update_frontmatter(
            path, patch, remove, if_match
        )
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))
