"""Waypoint tools - folder notes and their generated index blocks."""

from services.errors import VaultError
from services.queries import QueryService
from services.vault import error_response, get_context, ok


async def get_folder_waypoint(path: str) -> str:
    """Read the waypoint block of a note.

    Args:
        path: Vault-relative path to the note.

    Returns:
        JSON with has_waypoint and, when present, waypoint_range, links and
        raw_content.
    """
    try:
        result = await QueryService(get_context()).folder_waypoint(path)
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def is_folder_note(path: str) -> str:
    """Check whether a note is its folder's note.

    A note is a folder note when its name matches its parent folder
    ("Projects/Projects.md") or it contains waypoint markers.

    Args:
        path: Vault-relative path to the note.

    Returns:
        JSON with is_folder_note, reason ("basename_match", "waypoint_marker",
        "both" or "none") and folder_path.
    """
    try:
        result = await QueryService(get_context()).is_folder_note(path)
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))
