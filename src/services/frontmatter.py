"""Frontmatter codec - extract, summarize and serialize the leading YAML block."""

import logging
from dataclasses import dataclass
from datetime import date, datetime

import yaml

logger = logging.getLogger(__name__)

_OPEN_DELIMITERS = ("---\n", "---\r\n")
_CLOSE_DELIMITERS = ("---", "...")
_LIST_FIELDS = ("tags", "aliases")
_SUMMARY_SKIP = ("position",)


@dataclass
class ExtractedFrontmatter:
    has_frontmatter: bool
    raw: str | None
    parsed: dict | None
    body: str


def extract_frontmatter(content: str) -> ExtractedFrontmatter:
    """Split a note into its frontmatter block and body.

    Only a block opening on the very first line counts. A block without a
    closing delimiter is treated as plain content. YAML that fails to parse
    (or parses to something other than a mapping) still reports
    ``has_frontmatter=True`` with ``parsed=None`` so callers can fall back to
    the raw text.
    """
    if not content.startswith(_OPEN_DELIMITERS):
        return ExtractedFrontmatter(False, None, None, content)

    lines = content.split("\n")
    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() in _CLOSE_DELIMITERS:
            end = i
            break

    if end is None:
        return ExtractedFrontmatter(False, None, None, content)

    raw = "\n".join(line.rstrip("\r") for line in lines[1:end])
    body = "\n".join(lines[end + 1:])

    try:
        parsed = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as e:
        logger.debug("Unparseable frontmatter: %s", e)
        parsed = None
    if parsed is not None and not isinstance(parsed, dict):
        parsed = None

    return ExtractedFrontmatter(True, raw, parsed, body)


def json_safe_value(val):
    """Convert a value to a JSON-serializable form.

    YAML auto-parses date-like strings (e.g. 2024-01-15) into datetime.date
    objects, which are not JSON serializable. Convert them to ISO strings.
    """
    if isinstance(val, datetime):
        return val.isoformat()
    if isinstance(val, date):
        return val.isoformat()
    if isinstance(val, list):
        return [json_safe_value(v) for v in val]
    if isinstance(val, dict):
        return {str(k): json_safe_value(v) for k, v in val.items()}
    return val


def summarize_frontmatter(parsed: dict | None) -> dict | None:
    """Summarize frontmatter for listings.

    ``tags`` and ``aliases`` are always lists in the summary; a scalar value
    becomes a one-element list. Other top-level keys are passed through.
    """
    if not parsed:
        return None

    summary = {}
    if parsed.get("title"):
        summary["title"] = parsed["title"]
    for key in _LIST_FIELDS:
        value = parsed.get(key)
        if value is None or value == "":
            continue
        summary[key] = list(value) if isinstance(value, (list, tuple)) else [value]
    for key, value in parsed.items():
        if key in ("title", *_LIST_FIELDS, *_SUMMARY_SKIP):
            continue
        summary[key] = value

    return json_safe_value(summary) if summary else None


def serialize_frontmatter(data: dict) -> str:
    """Render a mapping as a delimited frontmatter block (no trailing newline).

    Strings that would be misread as other YAML types, or that contain
    reserved characters, are quoted by the emitter.
    """
    if not data:
        return "---\n---"
    dumped = yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"---\n{dumped}---"


def rebuild_content(data: dict, body: str) -> str:
    """Join a frontmatter mapping and a body back into note content."""
    if not data:
        return body
    return serialize_frontmatter(data) + "\n" + body
