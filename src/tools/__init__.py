"""MCP tool implementations organized by category."""

from tools.frontmatter import (
    update_frontmatter,
)
from tools.links import (
    backlinks,
    resolve_wikilink,
    validate_wikilinks,
)
from tools.listing import (
    exists,
    get_vault_info,
    list_notes,
    stat,
)
from tools.notes import (
    create_note,
    delete_note,
    read_note,
    rename_file,
    update_note,
)
from tools.search import (
    search,
    search_waypoints,
)
from tools.sections import (
    update_sections,
)
from tools.utility import (
    get_tool_history,
)
from tools.waypoints import (
    get_folder_waypoint,
    is_folder_note,
)

__all__ = [
    # frontmatter
    "update_frontmatter",
    # links
    "backlinks",
    "resolve_wikilink",
    "validate_wikilinks",
    # listing
    "exists",
    "get_vault_info",
    "list_notes",
    "stat",
    # notes
    "create_note",
    "delete_note",
    "read_note",
    "rename_file",
    "update_note",
    # search
    "search",
    "search_waypoints",
    # sections
    "update_sections",
    # utility
    "get_tool_history",
    # waypoints
    "get_folder_waypoint",
    "is_folder_note",
]
