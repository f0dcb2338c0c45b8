"""Collaborator interfaces consumed by the mutation and query engine.

The engine never touches the filesystem directly. Everything it knows about
the vault comes through three narrow ports:

- Store: read/write documents, stat them, enumerate the tree.
- MetadataIndex: parsed metadata, link resolution, backlink maps.
- FileManager: moves (with link rewriting) and deletion.

Paths crossing these ports are always normalized vault-relative strings
using "/" as separator; the vault root is the empty string.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class FileStat:
    """Timestamps are integer milliseconds since the epoch."""

    ctime: int
    mtime: int
    size: int


@dataclass(frozen=True)
class FileHandle:
    path: str

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def basename(self) -> str:
        """File name without its extension."""
        name = self.name
        return name.rsplit(".", 1)[0] if "." in name[1:] else name

    @property
    def extension(self) -> str:
        name = self.name
        return name.rsplit(".", 1)[1] if "." in name[1:] else ""

    @property
    def parent(self) -> str:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""


@dataclass(frozen=True)
class FolderHandle:
    path: str

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def is_root(self) -> bool:
        return self.path == ""

    @property
    def parent(self) -> str:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""


Handle = FileHandle | FolderHandle


@dataclass(frozen=True)
class LinkPosition:
    """Location of a link inside a source note (1-indexed line, 0-indexed column)."""

    line: int
    column: int


@dataclass
class CachedMetadata:
    frontmatter: dict[str, Any] | None = None
    headings: list[str] = field(default_factory=list)


class Store(Protocol):
    async def read(self, file: FileHandle) -> str:
        ...

    def stat(self, path: str) -> FileStat | None:
        ...

    def get_by_path(self, path: str) -> Handle | None:
        ...

    def get_root(self) -> FolderHandle:
        ...

    def list_children(self, folder: FolderHandle) -> list[Handle]:
        ...

    def list_all(self) -> list[Handle]:
        """Every file and folder below the root (root itself excluded)."""
        ...

    async def create(self, path: str, text: str) -> FileHandle:
        ...

    async def modify(self, file: FileHandle, text: str) -> None:
        ...

    async def create_folder(self, path: str) -> FolderHandle:
        ...


class MetadataIndex(Protocol):
    def get_cache(self, file: FileHandle) -> CachedMetadata | None:
        ...

    def resolve_link_path(self, link_text: str, source_path: str) -> FileHandle | None:
        ...

    def get_backlinks_for(self, file: FileHandle) -> dict[str, list[LinkPosition]]:
        ...


class FileManager(Protocol):
    async def rename(self, handle: Handle, new_path: str) -> None:
        """Move a file and rewrite links that pointed at it."""
        ...

    async def trash(self, handle: Handle) -> None:
        """Reversible deletion managed by the host."""
        ...

    async def delete(self, handle: Handle) -> None:
        ...


@dataclass
class VaultContext:
    """The three collaborators an operation runs against."""

    store: Store
    metadata: MetadataIndex
    files: FileManager
    name: str = ""
    location: str = ""


def markdown_files(store: Store) -> list[FileHandle]:
    """All markdown notes in the store, sorted by path."""
    files = [
        h for h in store.list_all()
        if isinstance(h, FileHandle) and h.extension.lower() == "md"
    ]
    return sorted(files, key=lambda f: f.path)
