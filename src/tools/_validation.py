"""Shared validation helpers for tool inputs."""

from pydantic import ValidationError

from services.models import SectionEdit


def validate_limit(
    limit,
    *,
    name: str = "limit",
    max_limit: int = 500,
) -> tuple[int | None, str | None]:
    """Validate and coerce a result-count limit.

    Args:
        limit: Requested maximum number of results.
        name: Argument name used in error messages.
        max_limit: Upper bound for limit to avoid huge payloads.

    Returns:
        Tuple of (coerced_limit, error_message).
        On error, the limit is None and error_message is populated.
    """
    try:
        parsed = int(limit)
    except (TypeError, ValueError):
        return None, f"Invalid {name}: must be an integer"

    if parsed < 1:
        return None, f"Invalid {name}: must be >= 1"

    if parsed > max_limit:
        return None, f"Invalid {name}: must be <= {max_limit}"

    return parsed, None


def coerce_section_edits(edits: list) -> tuple[list[SectionEdit] | None, str | None]:
    """Accept SectionEdit models or plain dicts.

    Returns:
        Tuple of (edits, error_message).
    """
    coerced = []
    for i, edit in enumerate(edits or []):
        if isinstance(edit, SectionEdit):
            coerced.append(edit)
            continue
        try:
            coerced.append(SectionEdit.model_validate(edit))
        except ValidationError as e:
            return None, f"Invalid edit at index {i}: {e.errors()[0]['msg']}"
    return coerced, None
