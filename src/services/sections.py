"""Line-range section patching."""

from services.errors import InvalidRangeError, NoOperationsProvidedError
from services.models import SectionEdit


def validate_section_edits(lines: list[str], edits: list[SectionEdit]) -> None:
    """Check every edit against the original line array.

    Raises:
        NoOperationsProvidedError: If ``edits`` is empty.
        InvalidRangeError: On the first out-of-bounds or overlapping edit.
    """
    if not edits:
        raise NoOperationsProvidedError("No section edits provided.")

    total = len(lines)
    for edit in edits:
        if edit.start_line < 1 or edit.end_line < edit.start_line or edit.end_line > total:
            raise InvalidRangeError(
                f"Invalid line range {edit.start_line}-{edit.end_line}: "
                f"the note has {total} lines. Ranges are 1-indexed and inclusive.",
                edit=edit.model_dump(),
                total_lines=total,
            )

    ordered = sorted(edits, key=lambda e: e.start_line)
    for prev, edit in zip(ordered, ordered[1:]):
        if edit.start_line <= prev.end_line:
            raise InvalidRangeError(
                f"Line range {edit.start_line}-{edit.end_line} overlaps "
                f"{prev.start_line}-{prev.end_line}. Merge overlapping edits into one.",
                edit=edit.model_dump(),
                total_lines=total,
            )


def apply_section_edits(lines: list[str], edits: list[SectionEdit]) -> list[str]:
    """Apply a batch of line-range replacements, all or nothing.

    The input list is never modified. Edits are spliced into a copy from the
    bottom of the note upward so line numbers of lower edits stay valid.
    """
    validate_section_edits(lines, edits)

    result = list(lines)
    for edit in sorted(edits, key=lambda e: e.start_line, reverse=True):
        result[edit.start_line - 1:edit.end_line] = edit.content.split("\n")
    return result
