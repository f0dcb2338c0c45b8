"""Typed inputs and results for vault operations.

Tool functions dump these with ``model_dump(exclude_none=True)`` into the
JSON envelope, so optional fields simply disappear when unset.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class SectionEdit(BaseModel):
    """Replace lines ``start_line..end_line`` (1-indexed, inclusive) with ``content``."""

    start_line: int
    end_line: int
    content: str = ""


# =============================================================================
# Links
# =============================================================================


class WikiLink(BaseModel):
    raw: str
    target: str
    heading: str | None = None
    alias: str | None = None
    line: int
    column: int


class Suggestion(BaseModel):
    path: str
    score: float


class BrokenLink(BaseModel):
    link: str
    line: int
    context: str


class BrokenHeading(BrokenLink):
    note: str


class LinkValidation(BaseModel):
    valid: list[str] = Field(default_factory=list)
    broken_notes: list[BrokenLink] = Field(default_factory=list)
    broken_headings: list[BrokenHeading] = Field(default_factory=list)
    summary: str = ""


class ResolvedLink(BaseModel):
    text: str
    target: str
    alias: str | None = None


class UnresolvedLink(BaseModel):
    text: str
    line: int
    suggestions: list[Suggestion] = Field(default_factory=list)


class WikilinkReport(BaseModel):
    path: str
    total_links: int
    resolved_links: list[ResolvedLink]
    unresolved_links: list[UnresolvedLink]


class LinkResolution(BaseModel):
    source_path: str
    link_text: str
    resolved: bool
    target_path: str | None = None
    suggestions: list[Suggestion] | None = None


class Occurrence(BaseModel):
    line: int
    column: int
    snippet: str | None = None


class Backlink(BaseModel):
    source_path: str
    type: Literal["linked", "unlinked"]
    occurrences: list[Occurrence]


class BacklinkReport(BaseModel):
    path: str
    backlinks: list[Backlink]
    total_backlinks: int


# =============================================================================
# Search
# =============================================================================


class MatchRange(BaseModel):
    start: int
    end: int


class SearchMatch(BaseModel):
    path: str
    line: int  # 0 means the match is in the file name
    column: int  # 1-indexed
    snippet: str | None = None
    match_ranges: list[MatchRange]


class SearchStats(BaseModel):
    files_searched: int = 0
    files_with_matches: int = 0
    total_matches: int = 0


class SearchResult(BaseModel):
    query: str
    is_regex: bool
    matches: list[SearchMatch]
    stats: SearchStats


class WaypointMatch(BaseModel):
    path: str
    line: int
    waypoint_range: dict[str, int]
    content: str
    links: list[str]


class WaypointSearchResult(BaseModel):
    waypoints: list[WaypointMatch]
    total_waypoints: int
    files_searched: int


# =============================================================================
# Notes
# =============================================================================


class ReadResult(BaseModel):
    path: str
    content: str
    version_tag: str
    word_count: int
    total_lines: int | None = None
    has_frontmatter: bool | None = None
    frontmatter: str | None = None
    parsed_frontmatter: dict[str, Any] | None = None
    content_without_frontmatter: str | None = None


class CreateResult(BaseModel):
    path: str
    version_tag: str
    created: int
    renamed: bool = False
    original_path: str | None = None
    word_count: int
    link_validation: LinkValidation | None = None


class UpdateResult(BaseModel):
    path: str
    version_tag: str
    modified: int
    word_count: int
    link_validation: LinkValidation | None = None


class FrontmatterUpdateResult(BaseModel):
    path: str
    version_tag: str
    modified: int
    updated_fields: list[str]
    removed_fields: list[str]


class SectionsUpdateResult(BaseModel):
    path: str
    version_tag: str
    modified: int
    sections_updated: int
    word_count: int
    link_validation: LinkValidation | None = None


class RenameResult(BaseModel):
    old_path: str
    new_path: str
    version_tag: str


class DeleteResult(BaseModel):
    path: str
    deleted: bool
    soft: bool
    dry_run: bool
    destination: str | None = None


# =============================================================================
# Listing / stat
# =============================================================================


class ListItem(BaseModel):
    kind: Literal["file", "directory"]
    name: str
    path: str
    modified: int
    extension: str | None = None
    size: int | None = None
    created: int | None = None
    children_count: int | None = None
    frontmatter_summary: dict[str, Any] | None = None


class ListResult(BaseModel):
    items: list[ListItem]
    total_count: int
    has_more: bool
    next_cursor: str | None = None


class StatResult(BaseModel):
    path: str
    exists: bool
    kind: Literal["file", "directory"] | None = None
    metadata: ListItem | None = None


class VaultInfo(BaseModel):
    name: str
    path: str
    total_files: int
    total_folders: int
    markdown_files: int
    total_size: int


class FolderWaypoint(BaseModel):
    path: str
    has_waypoint: bool
    waypoint_range: dict[str, int] | None = None
    links: list[str] | None = None
    raw_content: str | None = None


class FolderNoteInfo(BaseModel):
    path: str
    is_folder_note: bool
    reason: Literal["basename_match", "waypoint_marker", "both", "none"]
    folder_path: str | None = None
