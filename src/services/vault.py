"""Vault service - response envelopes and the filesystem-backed vault host.

FilesystemVault implements the Store, MetadataIndex and FileManager ports
directly on top of VAULT_PATH. Metadata is computed from note content on
every call; nothing is cached between operations.
"""

import json
import logging
import os
import posixpath
import re
import shutil
from pathlib import Path

from config import EXCLUDED_DIRS, TRASH_DIR, VAULT_PATH
from services.errors import VaultError
from services.frontmatter import extract_frontmatter
from services.links import parse_wikilinks
from services.paths import basename, parent_path, split_extension
from services.ports import (
    CachedMetadata,
    FileHandle,
    FileStat,
    FolderHandle,
    Handle,
    LinkPosition,
    VaultContext,
    markdown_files,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Response Envelope Helpers
# =============================================================================


def ok(data: str | dict | list | None = None, **kwargs) -> str:
    """Return a success JSON response.

    Args:
        data: Primary response data (string message, dict, or list).
        **kwargs: Additional fields to include in the response.

    Returns:
        JSON string with {"success": true, ...}.
    """
    response = {"success": True}
    if data is not None:
        if isinstance(data, str):
            response["message"] = data
        elif isinstance(data, (dict, list)):
            response["data"] = data
    response.update(kwargs)
    return json.dumps(response)


def err(message: str, **kwargs) -> str:
    """Return an error JSON response.

    Args:
        message: Error description.
        **kwargs: Additional fields to include in the response.

    Returns:
        JSON string with {"success": false, "error": ...}.
    """
    response = {"success": False, "error": message}
    response.update(kwargs)
    return json.dumps(response)


def error_response(error: VaultError) -> str:
    """Return an error JSON response for a VaultError, including its kind and details."""
    return err(error.message, kind=error.kind, **error.details)


# =============================================================================
# Markdown Structure
# =============================================================================

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.*)$")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)")


def extract_headings(body: str) -> list[str]:
    """Extract heading texts (without # prefixes), skipping code fences.

    Tracks fence delimiter character and length so ~~~ inside a ``` block
    (and vice versa) is not treated as a close marker, and a shorter fence
    cannot close a longer one.
    """
    headings = []
    fence_char: str | None = None
    fence_len: int = 0
    for line in body.split("\n"):
        m = _FENCE_RE.match(line)
        if m:
            delimiter = m.group(1)
            rest = m.group(2)
            char = delimiter[0]
            length = len(delimiter)
            if fence_char is None:
                fence_char = char
                fence_len = length
            elif char == fence_char and length >= fence_len and not rest.strip():
                fence_char = None
                fence_len = 0
            continue
        if fence_char is not None:
            continue
        m = HEADING_PATTERN.match(line)
        if m:
            headings.append(m.group(2).strip())
    return headings


def _alias_list(frontmatter: dict | None) -> list[str]:
    if not frontmatter:
        return []
    aliases = frontmatter.get("aliases") or frontmatter.get("alias") or []
    if isinstance(aliases, str):
        aliases = [aliases]
    return [str(a) for a in aliases if a]


class _LinkIndex:
    """Name and alias lookups over every file, built once per resolution pass."""

    def __init__(self, vault: "FilesystemVault"):
        self._vault = vault
        self._by_suffix: dict[str, list[FileHandle]] = {}
        self._aliases: dict[str, FileHandle] | None = None
        for handle in vault.list_all():
            if not isinstance(handle, FileHandle):
                continue
            parts = handle.path.lower().split("/")
            for i in range(len(parts)):
                self._by_suffix.setdefault("/".join(parts[i:]), []).append(handle)

    def by_name(self, keys: list[str]) -> list[FileHandle]:
        """Files whose path equals or ends with one of ``keys``."""
        matches = []
        for key in keys:
            matches.extend(self._by_suffix.get(key.lower(), []))
        return matches

    def by_alias(self, name: str) -> FileHandle | None:
        if self._aliases is None:
            self._aliases = {}
            for f in markdown_files(self._vault):
                cache = self._vault.get_cache(f)
                if cache:
                    for alias in _alias_list(cache.frontmatter):
                        self._aliases.setdefault(alias.lower(), f)
        return self._aliases.get(name.lower())


# =============================================================================
# Filesystem Vault
# =============================================================================


class FilesystemVault:
    """Store, metadata index and file manager over a directory of notes."""

    def __init__(self, root: Path | None = None, excluded_dirs: set[str] | None = None):
        self.root = root if root is not None else VAULT_PATH
        self.excluded_dirs = excluded_dirs if excluded_dirs is not None else EXCLUDED_DIRS

    # -------------------------------------------------------------------------
    # Path Resolution
    # -------------------------------------------------------------------------

    def _is_excluded(self, path: str) -> bool:
        return any(part in self.excluded_dirs for part in path.split("/"))

    def _abs(self, path: str) -> Path:
        """Absolute location of a vault-relative path.

        Raises:
            ValueError: If the path escapes the vault root.
        """
        resolved = (self.root / path).resolve() if path else self.root.resolve()
        try:
            resolved.relative_to(self.root.resolve())
        except ValueError:
            raise ValueError(f"Path must be within vault: {self.root}")
        return self.root / path if path else self.root

    def _rel(self, absolute: Path) -> str:
        return absolute.relative_to(self.root).as_posix()

    def _handle(self, absolute: Path) -> Handle:
        rel = self._rel(absolute)
        return FolderHandle(rel) if absolute.is_dir() else FileHandle(rel)

    # -------------------------------------------------------------------------
    # Store
    # -------------------------------------------------------------------------

    def get_by_path(self, path: str) -> Handle | None:
        if not path:
            return self.get_root()
        if self._is_excluded(path):
            return None
        try:
            target = self._abs(path)
        except ValueError:
            return None
        if target.is_dir():
            return FolderHandle(path)
        if target.is_file():
            return FileHandle(path)
        return None

    def get_root(self) -> FolderHandle:
        return FolderHandle("")

    def stat(self, path: str) -> FileStat | None:
        try:
            st = self._abs(path).stat()
        except (OSError, ValueError):
            return None
        # Birth time where the platform has it (macOS), inode change time otherwise
        created = getattr(st, "st_birthtime", st.st_ctime)
        return FileStat(
            ctime=int(created * 1000),
            mtime=st.st_mtime_ns // 1_000_000,
            size=st.st_size,
        )

    def list_children(self, folder: FolderHandle) -> list[Handle]:
        directory = self._abs(folder.path)
        children = []
        for child in sorted(directory.iterdir(), key=lambda p: p.name):
            if child.name in self.excluded_dirs:
                continue
            children.append(self._handle(child))
        return children

    def list_all(self) -> list[Handle]:
        handles = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.excluded_dirs)
            base = Path(dirpath)
            for name in dirnames:
                handles.append(FolderHandle(self._rel(base / name)))
            for name in sorted(filenames):
                handles.append(FileHandle(self._rel(base / name)))
        return handles

    def _read_sync(self, file: FileHandle) -> str:
        with self._abs(file.path).open(encoding="utf-8", newline="") as f:
            return f.read()

    async def read(self, file: FileHandle) -> str:
        return self._read_sync(file)

    async def create(self, path: str, text: str) -> FileHandle:
        target = self._abs(path)
        with target.open("x", encoding="utf-8", newline="") as f:
            f.write(text)
        return FileHandle(path)

    async def modify(self, file: FileHandle, text: str) -> None:
        target = self._abs(file.path)
        before = target.stat()
        with target.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
        after = target.stat()
        # Keep version tags moving on filesystems with coarse timestamps
        if (
            after.st_mtime_ns // 1_000_000 == before.st_mtime_ns // 1_000_000
            and after.st_size == before.st_size
        ):
            bumped = (before.st_mtime_ns // 1_000_000 + 1) * 1_000_000
            os.utime(target, ns=(after.st_atime_ns, bumped))

    async def create_folder(self, path: str) -> FolderHandle:
        self._abs(path).mkdir(exist_ok=True)
        return FolderHandle(path)

    # -------------------------------------------------------------------------
    # MetadataIndex
    # -------------------------------------------------------------------------

    def get_cache(self, file: FileHandle) -> CachedMetadata | None:
        try:
            content = self._read_sync(file)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Could not read metadata from %s: %s", file.path, e)
            return None
        extracted = extract_frontmatter(content)
        return CachedMetadata(
            frontmatter=extracted.parsed,
            headings=extract_headings(extracted.body),
        )

    def _lookup_file(self, path: str) -> FileHandle | None:
        handle = self.get_by_path(path)
        return handle if isinstance(handle, FileHandle) else None

    def resolve_link_path(
        self,
        link_text: str,
        source_path: str,
        index: _LinkIndex | None = None,
    ) -> FileHandle | None:
        """Resolve link text to a file.

        Order: exact vault path, path relative to the source's folder,
        name (or path suffix) match preferring the source's folder and then
        the shortest path, and finally frontmatter aliases. Pass ``index`` to
        reuse name and alias lookups across many resolutions.
        """
        target = link_text.strip()
        if not target:
            return None
        has_ext = split_extension(target)[1] != ""
        candidates = [target] if has_ext else [target + ".md", target]

        for candidate in candidates:
            found = self._lookup_file(candidate)
            if found:
                return found

        source_dir = parent_path(source_path)
        if source_dir:
            for candidate in candidates:
                joined = posixpath.normpath(f"{source_dir}/{candidate}")
                if not joined.startswith(".."):
                    found = self._lookup_file(joined)
                    if found:
                        return found

        if index is None:
            index = _LinkIndex(self)
        matches = index.by_name(candidates)
        if matches:
            matches.sort(key=lambda f: (f.parent != source_dir, len(f.path), f.path))
            return matches[0]
        return index.by_alias(target)

    def get_backlinks_for(self, file: FileHandle) -> dict[str, list[LinkPosition]]:
        backlinks: dict[str, list[LinkPosition]] = {}
        index = None
        for source in markdown_files(self):
            if source.path == file.path:
                continue
            try:
                content = self._read_sync(source)
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Skipping %s: %s", source.path, e)
                continue
            for link in parse_wikilinks(content):
                target = link.target or ""
                if not target:
                    continue
                if index is None:
                    index = _LinkIndex(self)
                resolved = self.resolve_link_path(target.split("^", 1)[0], source.path, index)
                if resolved is not None and resolved.path == file.path:
                    backlinks.setdefault(source.path, []).append(
                        LinkPosition(line=link.line, column=link.column)
                    )
        return backlinks

    # -------------------------------------------------------------------------
    # FileManager
    # -------------------------------------------------------------------------

    def _link_target_for(self, old_target: str, new_path: str) -> str:
        stem, ext = split_extension(new_path)
        had_ext = split_extension(old_target)[1] != ""
        if "/" in old_target:
            return new_path if had_ext else stem
        return basename(new_path) if had_ext else basename(stem)

    def _rewrite_links(self, content: str, positions: list[LinkPosition], new_path: str) -> str:
        lines = content.split("\n")
        wanted = {(p.line, p.column) for p in positions}
        for link in reversed(parse_wikilinks(content)):
            if (link.line, link.column) not in wanted:
                continue
            new_target = self._link_target_for(link.target, new_path)
            rebuilt = "[[" + new_target
            if link.heading:
                rebuilt += "#" + link.heading
            if link.alias:
                rebuilt += "|" + link.alias
            rebuilt += "]]"
            line = lines[link.line - 1]
            lines[link.line - 1] = line[:link.column] + rebuilt + line[link.column + len(link.raw):]
        return "\n".join(lines)

    async def rename(self, handle: Handle, new_path: str) -> None:
        sources = self.get_backlinks_for(handle) if isinstance(handle, FileHandle) else {}
        shutil.move(str(self._abs(handle.path)), str(self._abs(new_path)))

        for source_path, positions in sources.items():
            source = FileHandle(source_path)
            content = self._read_sync(source)
            updated = self._rewrite_links(content, positions, new_path)
            if updated != content:
                await self.modify(source, updated)
        logger.info("Renamed %s -> %s (%d linking notes updated)", handle.path, new_path, len(sources))

    async def trash(self, handle: Handle) -> None:
        trash_dir = self.root / TRASH_DIR
        trash_dir.mkdir(parents=True, exist_ok=True)
        stem, ext = split_extension(basename(handle.path))
        destination = trash_dir / f"{stem}{ext}"
        n = 1
        while destination.exists():
            destination = trash_dir / f"{stem} {n}{ext}"
            n += 1
        shutil.move(str(self._abs(handle.path)), str(destination))
        logger.info("Moved %s to trash", handle.path)

    async def delete(self, handle: Handle) -> None:
        target = self._abs(handle.path)
        if isinstance(handle, FolderHandle):
            shutil.rmtree(target)
        else:
            target.unlink()
        logger.info("Deleted %s", handle.path)


def get_context() -> VaultContext:
    """Build the collaborators for one operation against VAULT_PATH."""
    vault = FilesystemVault()
    return VaultContext(
        store=vault,
        metadata=vault,
        files=vault,
        name=vault.root.name,
        location=str(vault.root),
    )
