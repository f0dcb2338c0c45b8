#!/usr/bin/env python3
"""MCP server exposing vault note tools."""

import functools
import inspect
import json
import logging
import sys
import time
from pathlib import Path

# Ensure src/ is on the import path when run from project root
sys.path.insert(0, str(Path(__file__).parent))

from mcp.server.fastmcp import FastMCP

from config import TOOL_HISTORY_SHOW_PARAMETERS, setup_logging
from services.events import ToolCallEvent, history
from services.vault import err
import tools

logger = logging.getLogger(__name__)

mcp = FastMCP("vault-mcp")


def _json_default(value):
    if hasattr(value, "model_dump"):
        return value.model_dump()
    return str(value)


def recorded(fn):
    """Wrap a tool so every call is timed, logged and added to the history.

    Unexpected exceptions become an OperationFailed error response; tools
    never raise to the client.
    """
    signature = inspect.signature(fn)

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            result = await fn(*args, **kwargs)
        except Exception as e:
            logger.exception("Tool %s raised", fn.__name__)
            result = err(f"Unexpected error in {fn.__name__}: {e}", kind="OperationFailed")
        duration_ms = int((time.perf_counter() - started) * 1000)

        payload = json.loads(result)
        success = bool(payload.get("success"))
        args_record = None
        if TOOL_HISTORY_SHOW_PARAMETERS:
            bound = signature.bind_partial(*args, **kwargs).arguments
            args_record = json.loads(json.dumps(bound, default=_json_default))

        history.record(ToolCallEvent(
            tool=fn.__name__,
            success=success,
            duration_ms=duration_ms,
            error=None if success else payload.get("error"),
            args=args_record,
        ))
        if success:
            logger.info("%s succeeded in %dms", fn.__name__, duration_ms)
        else:
            logger.warning("%s failed in %dms: %s", fn.__name__, duration_ms, payload.get("error"))
        return result

    return wrapper


for _name in tools.__all__:
    mcp.tool()(recorded(getattr(tools, _name)))


if __name__ == "__main__":
    setup_logging("mcp")
    mcp.run()
