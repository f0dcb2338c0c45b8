"""Shared configuration for vault-mcp."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Vault path - where your notes live
VAULT_PATH = Path(os.getenv("VAULT_PATH", "~/Documents/obsidian-vault")).expanduser()

# Directories to exclude when scanning vault
EXCLUDED_DIRS = {'.obsidian', '.trash', '.git'}

# Soft-deleted notes are moved here (relative to vault root)
TRASH_DIR = ".trash"

# Search defaults
SEARCH_MAX_RESULTS = max(1, int(os.getenv("SEARCH_MAX_RESULTS", "100")))
SEARCH_SNIPPET_LENGTH = max(1, int(os.getenv("SEARCH_SNIPPET_LENGTH", "100")))

# Link resolution
MAX_SUGGESTIONS = 5  # Ranked suggestions returned for an unresolved link
BACKLINK_SNIPPET_LENGTH = 100

# Pagination upper bound for list_notes
LIST_MAX_LIMIT = 2000

# Tool call history
TOOL_HISTORY_SIZE = max(1, int(os.getenv("TOOL_HISTORY_SIZE", "100")))
TOOL_HISTORY_SHOW_PARAMETERS = _env_bool("TOOL_HISTORY_SHOW_PARAMETERS", False)

# Logging configuration
LOG_DIR = Path(os.getenv("LOG_DIR", str(VAULT_PATH / "logs"))).expanduser()
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))  # 5 MB
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))


def setup_logging(name: str) -> None:
    """Configure logging with both stderr and rotating file output.

    Args:
        name: Log file name without extension (e.g. "mcp").
    """
    fmt = "%(asctime)s %(name)s %(levelname)s %(message)s"
    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # stderr handler (stdout carries the MCP stdio transport)
    stderr_handler = logging.StreamHandler()
    stderr_handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(stderr_handler)

    # Rotating file handler (best-effort, fall back to stderr-only)
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_DIR / f"{name}.log.md",
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(file_handler)
    except OSError as e:
        root.warning(f"Could not set up file logging: {e}; using stderr only")
