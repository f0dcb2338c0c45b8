"""Utility tools - tool call history."""

from services.events import history
from services.vault import err, ok
from tools._validation import validate_limit


async def get_tool_history(limit: int = 20, tool: str | None = None) -> str:
    """Show recent tool calls, newest first.

    Args:
        limit: Maximum number of events to return, capped at the history size.
        tool: Only show calls to this tool.

    Returns:
        JSON with events (tool, success, duration_ms, timestamp and error or
        args when recorded) and total.
    """
    limit, error = validate_limit(limit, max_limit=max(history.max_size, 500))
    if error:
        return err(error, kind="InvalidArgument")

    events = history.recent(min(limit, history.max_size), tool)
    return ok(events=[e.to_dict() for e in events], total=len(events))
