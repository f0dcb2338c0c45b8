"""Wikilink parsing, resolution, suggestions, validation and backlinks."""

import logging
import re

from config import BACKLINK_SNIPPET_LENGTH, MAX_SUGGESTIONS
from services.ports import (
    FileHandle,
    MetadataIndex,
    Store,
    markdown_files,
)
from services.models import (
    Backlink,
    BrokenHeading,
    BrokenLink,
    LinkValidation,
    Occurrence,
    ResolvedLink,
    Suggestion,
    UnresolvedLink,
    WikiLink,
    WikilinkReport,
)
from services.text import snippet_window

logger = logging.getLogger(__name__)

WIKILINK_RE = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")
_LINK_SPAN_RE = re.compile(r"\[\[[^\]]*\]\]")
_CONTEXT_LENGTH = 100


def parse_wikilinks(content: str) -> list[WikiLink]:
    """Parse ``[[target#heading|alias]]`` links, line by line.

    Lines are 1-indexed, columns 0-indexed. Block references (``^id``) are
    left on the target; link resolution drops them.
    """
    links = []
    for line_no, line in enumerate(content.split("\n"), start=1):
        for m in WIKILINK_RE.finditer(line):
            target = m.group(1).strip()
            heading = None
            if "#" in target:
                target, heading = target.split("#", 1)
                target = target.strip()
                heading = heading.strip() or None
            alias = m.group(2).strip() if m.group(2) else None
            links.append(WikiLink(
                raw=m.group(0),
                target=target,
                heading=heading,
                alias=alias,
                line=line_no,
                column=m.start(),
            ))
    return links


def _link_path(link_text: str) -> str:
    """Strip heading, block and alias suffixes from link text."""
    return link_text.split("|", 1)[0].split("#", 1)[0].split("^", 1)[0].strip()


def resolve_link(
    store: Store,
    metadata: MetadataIndex,
    source_path: str,
    link_text: str,
) -> FileHandle | None:
    """Resolve link text the way the host resolves it, or None.

    An empty link path (``[[#Heading]]``) points at the source note itself.
    """
    target = _link_path(link_text)
    if not target:
        source = store.get_by_path(source_path)
        return source if isinstance(source, FileHandle) else None
    return metadata.resolve_link_path(target, source_path)


def _score(link_text: str, file: FileHandle) -> float:
    name = file.basename.lower()
    path = file.path.lower()
    if name == link_text:
        return 1000.0
    if link_text in name:
        return 500 + len(link_text) / len(name) * 100
    if link_text in path:
        return 250 + len(link_text) / len(path) * 100
    overlap = sum(1 for ch in link_text if ch in name)
    return overlap / len(link_text) * 100


def suggest_links(
    store: Store,
    link_text: str,
    max_suggestions: int = MAX_SUGGESTIONS,
) -> list[Suggestion]:
    """Rank notes that an unresolved link probably meant.

    Scoring: exact basename (1000), basename containing the text (500+),
    path containing the text (250+), else share of the link's characters
    found in the basename (0-100).
    """
    text = _link_path(link_text).lower()
    if not text:
        return []

    scored = []
    for file in markdown_files(store):
        score = _score(text, file)
        if score > 0:
            scored.append(Suggestion(path=file.path, score=round(score, 2)))
    scored.sort(key=lambda s: (-s.score, s.path))
    return scored[:max_suggestions]


def _context(line: str) -> str:
    if len(line) <= _CONTEXT_LENGTH:
        return line
    return line[:_CONTEXT_LENGTH] + "..."


def _heading_exists(metadata: MetadataIndex, file: FileHandle, heading: str) -> bool:
    cache = metadata.get_cache(file)
    if cache is None:
        return False
    wanted = heading.strip().lower()
    return any(h.strip().lower() == wanted for h in cache.headings)


def validate_links(
    store: Store,
    metadata: MetadataIndex,
    content: str,
    source_path: str,
) -> LinkValidation:
    """Check every wikilink in ``content`` as if it lived at ``source_path``.

    Links whose note resolves but whose ``#heading`` is missing from the
    target's outline are reported separately from links to missing notes.
    """
    lines = content.split("\n")
    result = LinkValidation()

    for link in parse_wikilinks(content):
        context = _context(lines[link.line - 1])
        target = resolve_link(store, metadata, source_path, link.target)
        if target is None:
            result.broken_notes.append(BrokenLink(link=link.raw, line=link.line, context=context))
            continue
        if link.heading and not link.heading.startswith("^"):
            if not _heading_exists(metadata, target, link.heading):
                result.broken_headings.append(BrokenHeading(
                    link=link.raw,
                    line=link.line,
                    context=context,
                    note=target.path,
                ))
                continue
        result.valid.append(link.raw)

    total = len(result.valid) + len(result.broken_notes) + len(result.broken_headings)
    result.summary = (
        f"{total} links: {len(result.valid)} valid, "
        f"{len(result.broken_notes)} broken notes, "
        f"{len(result.broken_headings)} broken headings"
    )
    return result


def validate_wikilinks(
    store: Store,
    metadata: MetadataIndex,
    content: str,
    source_path: str,
) -> WikilinkReport:
    """Split a note's links into resolved ones and unresolved ones with suggestions."""
    resolved = []
    unresolved = []
    links = parse_wikilinks(content)
    for link in links:
        target = resolve_link(store, metadata, source_path, link.target)
        if target is not None:
            resolved.append(ResolvedLink(text=link.raw, target=target.path, alias=link.alias))
        else:
            unresolved.append(UnresolvedLink(
                text=link.raw,
                line=link.line,
                suggestions=suggest_links(store, link.target),
            ))
    return WikilinkReport(
        path=source_path,
        total_links=len(links),
        resolved_links=resolved,
        unresolved_links=unresolved,
    )


def _occurrence(line: str, line_no: int, column: int, with_snippet: bool) -> Occurrence:
    snippet = None
    if with_snippet:
        start, end = snippet_window(len(line), column, BACKLINK_SNIPPET_LENGTH)
        snippet = line[start:end]
        if start > 0:
            snippet = "..." + snippet
        if end < len(line):
            snippet = snippet + "..."
    return Occurrence(line=line_no, column=column, snippet=snippet)


def _unlinked_positions(line: str, pattern: re.Pattern) -> list[int]:
    spans = [m.span() for m in _LINK_SPAN_RE.finditer(line)]
    return [
        m.start() for m in pattern.finditer(line)
        if not any(start <= m.start() < end for start, end in spans)
    ]


async def get_backlinks(
    store: Store,
    metadata: MetadataIndex,
    target: FileHandle,
    include_unlinked: bool = False,
    include_snippets: bool = True,
) -> list[Backlink]:
    """Collect linked backlinks and, optionally, unlinked plain-text mentions.

    Linked backlinks come from the metadata index. Unlinked mentions need a
    full scan of every note, so they are opt-in. A mention is the target's
    basename as a whole word (case-insensitive) outside any ``[[...]]``;
    every match position is reported. Notes that already link to the target
    are not scanned for mentions.
    """
    backlinks = []
    linked_sources = metadata.get_backlinks_for(target)

    for source_path in sorted(linked_sources):
        positions = linked_sources[source_path]
        if not positions:
            continue
        lines = []
        if include_snippets:
            source = store.get_by_path(source_path)
            if isinstance(source, FileHandle):
                lines = (await store.read(source)).split("\n")
        occurrences = []
        for pos in sorted(positions, key=lambda p: (p.line, p.column)):
            line = lines[pos.line - 1] if 0 < pos.line <= len(lines) else ""
            occurrences.append(_occurrence(line, pos.line, pos.column, include_snippets))
        backlinks.append(Backlink(source_path=source_path, type="linked", occurrences=occurrences))

    if not include_unlinked:
        return backlinks

    pattern = re.compile(
        rf"(?<!\w){re.escape(target.basename)}(?!\w)",
        re.IGNORECASE,
    )
    skip = set(linked_sources) | {target.path}
    for file in markdown_files(store):
        if file.path in skip:
            continue
        try:
            content = await store.read(file)
        except Exception as e:
            logger.debug("Skipping %s during mention scan: %s", file.path, e)
            continue
        occurrences = []
        for line_no, line in enumerate(content.split("\n"), start=1):
            for column in _unlinked_positions(line, pattern):
                occurrences.append(_occurrence(line, line_no, column, include_snippets))
        if occurrences:
            backlinks.append(Backlink(source_path=file.path, type="unlinked", occurrences=occurrences))

    return backlinks
