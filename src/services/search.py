"""Linear literal/regex search over vault notes."""

import logging
import re

from config import SEARCH_MAX_RESULTS, SEARCH_SNIPPET_LENGTH
from services.errors import InvalidArgumentError
from services.globbing import should_include
from services.models import (
    MatchRange,
    SearchMatch,
    SearchResult,
    SearchStats,
    WaypointMatch,
    WaypointSearchResult,
)
from services.paths import normalize_folder_path
from services.ports import FileHandle, Store, markdown_files
from services.text import extract_snippet
from services.waypoint import extract_waypoints

logger = logging.getLogger(__name__)


def compile_query(query: str, is_regex: bool = False, case_sensitive: bool = False) -> re.Pattern:
    """Compile a search query, escaping it unless ``is_regex``.

    Raises:
        InvalidArgumentError: For an empty query or an invalid regex.
    """
    if not query:
        raise InvalidArgumentError("Search query cannot be empty.")
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(query if is_regex else re.escape(query), flags)
    except re.error as e:
        raise InvalidArgumentError(f"Invalid regex pattern: {e}", query=query)


def find_all(pattern: re.Pattern, text: str, limit: int):
    """Yield up to ``limit`` matches, stepping past zero-width matches."""
    pos = 0
    found = 0
    while found < limit and pos <= len(text):
        m = pattern.search(text, pos)
        if m is None:
            return
        yield m
        found += 1
        pos = m.end() if m.end() > m.start() else m.end() + 1


def _in_folder(path: str, folder: str) -> bool:
    return not folder or path == folder or path.startswith(folder + "/")


def _candidate_files(
    store: Store,
    folder: str | None,
    includes: list[str] | None,
    excludes: list[str] | None,
) -> list[FileHandle]:
    prefix = normalize_folder_path(folder)
    return [
        f for f in markdown_files(store)
        if _in_folder(f.path, prefix) and should_include(f.path, includes, excludes)
    ]


def _search_content(
    file: FileHandle,
    content: str,
    pattern: re.Pattern,
    return_snippets: bool,
    snippet_length: int,
    limit: int,
) -> list[SearchMatch]:
    matches = []
    for line_no, line in enumerate(content.split("\n"), start=1):
        if len(matches) >= limit:
            break
        for m in find_all(pattern, line, limit - len(matches)):
            snippet = None
            offset = 0
            if return_snippets:
                snippet, offset = extract_snippet(line, m.start(), snippet_length)
            start = m.start() - offset
            matches.append(SearchMatch(
                path=file.path,
                line=line_no,
                column=m.start() + 1,
                snippet=snippet,
                match_ranges=[MatchRange(start=start, end=start + len(m.group(0)))],
            ))
    return matches


def _search_filename(file: FileHandle, pattern: re.Pattern, limit: int) -> list[SearchMatch]:
    name = file.basename
    return [
        SearchMatch(
            path=file.path,
            line=0,
            column=m.start() + 1,
            snippet=name,
            match_ranges=[MatchRange(start=m.start(), end=m.end())],
        )
        for m in find_all(pattern, name, limit)
    ]


async def search_vault(
    store: Store,
    query: str,
    *,
    is_regex: bool = False,
    case_sensitive: bool = False,
    includes: list[str] | None = None,
    excludes: list[str] | None = None,
    folder: str | None = None,
    return_snippets: bool = True,
    snippet_length: int = SEARCH_SNIPPET_LENGTH,
    max_results: int = SEARCH_MAX_RESULTS,
) -> SearchResult:
    """Scan notes for a literal or regex query.

    Files are visited in path order. Each file contributes its content
    matches (1-indexed line and column) followed by file-name matches
    (``line=0``). Scanning stops as soon as ``max_results`` matches are
    collected; remaining files are not read. Unreadable files are skipped.
    """
    if max_results < 1:
        raise InvalidArgumentError("max_results must be >= 1")
    if snippet_length < 1:
        raise InvalidArgumentError("snippet_length must be >= 1")
    pattern = compile_query(query, is_regex, case_sensitive)

    matches: list[SearchMatch] = []
    stats = SearchStats()
    for file in _candidate_files(store, folder, includes, excludes):
        if len(matches) >= max_results:
            break
        stats.files_searched += 1
        try:
            content = await store.read(file)
        except Exception as e:
            logger.debug("Skipping %s during search: %s", file.path, e)
            continue

        found = _search_content(
            file, content, pattern, return_snippets, snippet_length, max_results - len(matches)
        )
        found += _search_filename(file, pattern, max_results - len(matches) - len(found))
        if found:
            stats.files_with_matches += 1
            matches.extend(found)

    stats.total_matches = len(matches)
    return SearchResult(query=query, is_regex=is_regex, matches=matches, stats=stats)


async def search_waypoints(store: Store, folder: str | None = None) -> WaypointSearchResult:
    """Find every waypoint block in notes under ``folder``."""
    waypoints = []
    files = _candidate_files(store, folder, None, None)
    for file in files:
        try:
            content = await store.read(file)
        except Exception as e:
            logger.debug("Skipping %s during waypoint scan: %s", file.path, e)
            continue
        for block in extract_waypoints(content):
            waypoints.append(WaypointMatch(
                path=file.path,
                line=block.start,
                waypoint_range=block.range,
                content=block.raw,
                links=block.links,
            ))
    return WaypointSearchResult(
        waypoints=waypoints,
        total_waypoints=len(waypoints),
        files_searched=len(files),
    )
