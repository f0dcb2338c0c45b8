"""Waypoint block detection and protection.

A waypoint is an index of a folder's notes generated by a companion plugin
between ``%% Begin Waypoint %%`` and ``%% End Waypoint %%`` marker lines.
The plugin rewrites the block on its own schedule, so manual edits inside it
are lost or desynchronize the index. Only the first block in a note counts.
"""

import re
from dataclasses import dataclass, field

from services.paths import basename, parent_path, split_extension

WAYPOINT_BEGIN = "%% Begin Waypoint %%"
WAYPOINT_END = "%% End Waypoint %%"

_LINK_RE = re.compile(r"\[\[([^\]]+)\]\]")


@dataclass
class WaypointBlock:
    present: bool
    start: int | None = None  # 1-indexed line of the begin marker
    end: int | None = None  # 1-indexed line of the end marker
    links: list[str] = field(default_factory=list)
    raw: str | None = None  # lines strictly between the markers

    @property
    def range(self) -> dict | None:
        if not self.present:
            return None
        return {"start": self.start, "end": self.end}


def _scan(lines: list[str], offset: int = 0) -> WaypointBlock:
    start = None
    for i in range(offset, len(lines)):
        line = lines[i]
        if WAYPOINT_BEGIN in line:
            # A later begin marker restarts the block
            start = i
        elif start is not None and WAYPOINT_END in line:
            raw = "\n".join(lines[start + 1:i])
            return WaypointBlock(
                present=True,
                start=start + 1,
                end=i + 1,
                links=_LINK_RE.findall(raw),
                raw=raw,
            )
    return WaypointBlock(present=False)


def extract_waypoint(content: str) -> WaypointBlock:
    """Locate the first complete waypoint block in a note."""
    return _scan(content.split("\n"))


def extract_waypoints(content: str) -> list[WaypointBlock]:
    """Every complete waypoint block, in order (used for vault-wide scans)."""
    lines = content.split("\n")
    blocks = []
    offset = 0
    while True:
        block = _scan(lines, offset)
        if not block.present:
            return blocks
        blocks.append(block)
        offset = block.end


def would_corrupt(before: str, after: str) -> tuple[bool, dict | None]:
    """Decide whether replacing ``before`` with ``after`` damages the waypoint.

    The edit is rejected when the original block disappears or its content
    changes. Moving an unchanged block (e.g. by adding lines above it) is
    allowed.

    Returns:
        Tuple of (corrupted, original_range).
    """
    old = extract_waypoint(before)
    if not old.present:
        return False, None
    new = extract_waypoint(after)
    if not new.present or new.raw != old.raw:
        return True, old.range
    return False, old.range


def folder_note_reason(path: str, content: str | None) -> str:
    """Classify why a note counts as its folder's note.

    Returns one of ``basename_match``, ``waypoint_marker``, ``both`` or ``none``.
    """
    stem, _ = split_extension(basename(path))
    folder = parent_path(path)
    name_match = bool(folder) and basename(folder) == stem
    has_marker = content is not None and extract_waypoint(content).present
    if name_match and has_marker:
        return "both"
    if name_match:
        return "basename_match"
    if has_marker:
        return "waypoint_marker"
    return "none"
