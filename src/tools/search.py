"""Search tools - text/regex search and waypoint discovery."""

from config import LIST_MAX_LIMIT, SEARCH_MAX_RESULTS, SEARCH_SNIPPET_LENGTH
from services.errors import VaultError
from services.queries import QueryService
from services.vault import err, error_response, get_context, ok
from tools._validation import validate_limit


async def search(
    query: str,
    is_regex: bool = False,
    case_sensitive: bool = False,
    includes: list[str] | None = None,
    excludes: list[str] | None = None,
    folder: str | None = None,
    return_snippets: bool = True,
    snippet_length: int = SEARCH_SNIPPET_LENGTH,
    max_results: int = SEARCH_MAX_RESULTS,
) -> str:
    """Search note contents and file names for text or a regex.

    Args:
        query: Text to find, or a Python regular expression if is_regex.
        is_regex: Treat query as a regular expression.
        case_sensitive: Match case exactly (default: case-insensitive).
        includes: Glob patterns a note path must match, e.g. ["projects/**"].
        excludes: Glob patterns that drop a note, e.g. ["archive/**"].
        folder: Only search notes under this folder.
        return_snippets: Include a context snippet with each match.
        snippet_length: Maximum snippet length in characters.
        max_results: Stop after this many matches.

    Returns:
        JSON with matches (path, line, column, snippet, match_ranges; line 0
        means the file name matched) and stats (files_searched,
        files_with_matches, total_matches).
    """
    max_results, error = validate_limit(max_results, name="max_results", max_limit=LIST_MAX_LIMIT)
    if error:
        return err(error, kind="InvalidArgument")

    try:
        result = await QueryService(get_context()).search(
            query,
            is_regex=is_regex,
            case_sensitive=case_sensitive,
            includes=includes,
            excludes=excludes,
            folder=folder,
            return_snippets=return_snippets,
            snippet_length=snippet_length,
            max_results=max_results,
        )
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))


async def search_waypoints(folder: str | None = None) -> str:
    """Find all waypoint blocks (%% Begin Waypoint %% ... %% End Waypoint %%).

    Args:
        folder: Only scan notes under this folder (default: whole vault).

    Returns:
        JSON with waypoints (path, line, waypoint_range, content, links),
        total_waypoints and files_searched.
    """
    try:
        result = await QueryService(get_context()).search_waypoints(folder)
    except VaultError as e:
        return error_response(e)
    return ok(**result.model_dump(exclude_none=True))
