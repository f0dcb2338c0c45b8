"""Pytest configuration and fixtures for vault-mcp tests."""

import re
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from services.frontmatter import extract_frontmatter  # noqa: E402
from services.links import parse_wikilinks  # noqa: E402
from services.ports import (  # noqa: E402
    CachedMetadata,
    FileHandle,
    FileStat,
    FolderHandle,
    LinkPosition,
    VaultContext,
)

_HEADING_RE = re.compile(r"^#{1,6}\s+(.*)$")


class MemoryVault:
    """In-memory Store, MetadataIndex and FileManager for engine tests.

    Every write advances a fake clock so version tags change. Operation names
    added to ``fail`` raise OSError, and mutating calls are recorded in
    ``calls`` so tests can assert nothing was written.
    """

    def __init__(self):
        self.files: dict[str, dict] = {}
        self.folders: set[str] = set()
        self.clock = 1000
        self.fail: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.trashed: list[str] = []
        self.reads: list[str] = []

    # -- setup helpers --------------------------------------------------------

    def _tick(self) -> int:
        self.clock += 1000
        return self.clock

    def add_folder(self, path: str) -> None:
        parts = path.split("/")
        for i in range(1, len(parts) + 1):
            self.folders.add("/".join(parts[:i]))

    def add_file(self, path: str, content: str = "", mtime: int | None = None) -> FileHandle:
        if "/" in path:
            self.add_folder(path.rsplit("/", 1)[0])
        now = mtime if mtime is not None else self._tick()
        self.files[path] = {"content": content, "ctime": now, "mtime": now}
        return FileHandle(path)

    def content(self, path: str) -> str:
        return self.files[path]["content"]

    def context(self) -> VaultContext:
        return VaultContext(store=self, metadata=self, files=self, name="memory", location="memory://vault")

    def _check(self, operation: str) -> None:
        if operation in self.fail:
            raise OSError(f"simulated {operation} failure")

    # -- Store ----------------------------------------------------------------

    async def read(self, file):
        self._check("read")
        self.reads.append(file.path)
        return self.files[file.path]["content"]

    def stat(self, path):
        if path in self.files:
            entry = self.files[path]
            return FileStat(
                ctime=entry["ctime"],
                mtime=entry["mtime"],
                size=len(entry["content"].encode("utf-8")),
            )
        if path in self.folders or path == "":
            return FileStat(ctime=0, mtime=0, size=0)
        return None

    def get_by_path(self, path):
        if path == "":
            return FolderHandle("")
        if path in self.files:
            return FileHandle(path)
        if path in self.folders:
            return FolderHandle(path)
        return None

    def get_root(self):
        return FolderHandle("")

    def list_children(self, folder):
        def parent(p):
            return p.rsplit("/", 1)[0] if "/" in p else ""

        children = [FolderHandle(p) for p in sorted(self.folders) if parent(p) == folder.path]
        children += [FileHandle(p) for p in sorted(self.files) if parent(p) == folder.path]
        return children

    def list_all(self):
        return [FolderHandle(p) for p in sorted(self.folders)] + [
            FileHandle(p) for p in sorted(self.files)
        ]

    async def create(self, path, text):
        self._check("create")
        self.calls.append(("create", path))
        if path in self.files:
            raise FileExistsError(path)
        return self.add_file(path, text)

    async def modify(self, file, text):
        self._check("modify")
        self.calls.append(("modify", file.path))
        entry = self.files[file.path]
        entry["content"] = text
        entry["mtime"] = self._tick()

    async def create_folder(self, path):
        self._check("create_folder")
        self.calls.append(("create_folder", path))
        self.folders.add(path)
        return FolderHandle(path)

    # -- MetadataIndex ----------------------------------------------------------

    def get_cache(self, file):
        if file.path not in self.files:
            return None
        extracted = extract_frontmatter(self.content(file.path))
        headings = [
            m.group(1).strip()
            for m in (_HEADING_RE.match(line) for line in extracted.body.split("\n"))
            if m
        ]
        return CachedMetadata(frontmatter=extracted.parsed, headings=headings)

    def resolve_link_path(self, link_text, source_path):
        for candidate in (link_text, link_text + ".md"):
            if candidate in self.files:
                return FileHandle(candidate)
        name = link_text.lower()
        for path in sorted(self.files, key=len):
            handle = FileHandle(path)
            if handle.basename.lower() == name or handle.name.lower() == name:
                return handle
        return None

    def get_backlinks_for(self, file):
        found = {}
        for path in sorted(self.files):
            if path == file.path:
                continue
            for link in parse_wikilinks(self.content(path)):
                if not link.target:
                    continue
                resolved = self.resolve_link_path(link.target, path)
                if resolved is not None and resolved.path == file.path:
                    found.setdefault(path, []).append(LinkPosition(link.line, link.column))
        return found

    # -- FileManager ------------------------------------------------------------

    async def rename(self, handle, new_path):
        self._check("rename")
        self.calls.append(("rename", handle.path))
        entry = self.files.pop(handle.path)
        entry["mtime"] = self._tick()
        self.files[new_path] = entry

    async def trash(self, handle):
        self._check("trash")
        self.calls.append(("trash", handle.path))
        self.files.pop(handle.path)
        self.trashed.append(handle.path)

    async def delete(self, handle):
        self._check("delete")
        self.calls.append(("delete", handle.path))
        self.files.pop(handle.path)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def memory_vault():
    """An empty in-memory vault."""
    return MemoryVault()


@pytest.fixture
def temp_vault(tmp_path):
    """Create a temporary vault directory with sample files.

    Returns:
        Path to the temporary vault root.
    """
    vault = tmp_path / "vault"
    vault.mkdir()

    # Create sample files with frontmatter
    (vault / "note1.md").write_text(
        """---
tags:
  - project
  - work
Date: 2024-01-15
---

# Note 1

This is the first note with a [[wikilink]] to another note.
"""
    )

    (vault / "note2.md").write_text(
        """---
tags:
  - meeting
company: Acme Corp
---

# Note 2

This note references [[note1]] and [[note3|alias]].

## Section A

Content in section A.

## Section B

Content in section B.
"""
    )

    (vault / "note3.md").write_text(
        """# Note 3

A simple note without frontmatter. Mentions note1 in passing.
"""
    )

    # Create a subdirectory with notes
    subdir = vault / "projects"
    subdir.mkdir()
    (subdir / "project1.md").write_text(
        """---
tags:
  - project
status: active
aliases: Alpha
---

# Project 1

Project details here. See [[note2#Section A]].
"""
    )

    (subdir / "projects.md").write_text(
        """# Projects

%% Begin Waypoint %%
- [[project1]]
%% End Waypoint %%
"""
    )

    # Create Daily Notes directory
    daily = vault / "Daily Notes"
    daily.mkdir()
    (daily / "2024-01-15.md").write_text(
        """# 2024-01-15

## Tasks

- [x] Task 1
- [ ] Task 2
"""
    )

    # Tooling directory that must stay invisible
    (vault / ".obsidian").mkdir()
    (vault / ".obsidian" / "app.json").write_text("{}")

    return vault


@pytest.fixture
def vault_config(temp_vault, monkeypatch):
    """Patch config module to use temporary vault.

    This fixture patches VAULT_PATH and EXCLUDED_DIRS in both the config module
    and any modules that import them, so tests use the temporary vault.
    """
    import config
    import services.vault

    excluded = {".git", ".obsidian", ".trash"}

    monkeypatch.setattr(config, "VAULT_PATH", temp_vault)
    monkeypatch.setattr(config, "EXCLUDED_DIRS", excluded)

    # Patch in services.vault (which imports from config at load time)
    monkeypatch.setattr(services.vault, "VAULT_PATH", temp_vault)
    monkeypatch.setattr(services.vault, "EXCLUDED_DIRS", excluded)

    return temp_vault
