"""Tool call events and the bounded in-process history."""

import time
from collections import deque
from dataclasses import asdict, dataclass, field

from config import TOOL_HISTORY_SIZE


@dataclass
class ToolCallEvent:
    tool: str
    success: bool
    duration_ms: int
    error: str | None = None
    args: dict | None = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


class ToolCallHistory:
    """Most recent tool calls, oldest dropped first."""

    def __init__(self, max_size: int = TOOL_HISTORY_SIZE):
        self._events: deque[ToolCallEvent] = deque(maxlen=max_size)

    @property
    def max_size(self) -> int:
        return self._events.maxlen

    def record(self, event: ToolCallEvent) -> None:
        self._events.append(event)

    def recent(self, limit: int | None = None, tool: str | None = None) -> list[ToolCallEvent]:
        """Newest first, optionally filtered by tool name."""
        events = [e for e in reversed(self._events) if tool is None or e.tool == tool]
        return events if limit is None else events[:limit]

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)


history = ToolCallHistory()
