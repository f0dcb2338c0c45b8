"""Read-only vault queries - listing, stat, links, search, waypoints."""

from services.base import VaultService
from services.errors import InvalidArgumentError, NotAFolderError, NotFoundError
from services.frontmatter import summarize_frontmatter
from services.globbing import matches_any
from services.links import (
    get_backlinks,
    resolve_link,
    suggest_links,
    validate_wikilinks,
)
from services.models import (
    BacklinkReport,
    FolderNoteInfo,
    FolderWaypoint,
    LinkResolution,
    ListItem,
    ListResult,
    SearchResult,
    StatResult,
    VaultInfo,
    WaypointSearchResult,
    WikilinkReport,
)
from services.paths import is_root_path, normalize_folder_path, parent_path
from services.ports import FileHandle, FolderHandle, Handle
from services.search import search_vault, search_waypoints
from services.waypoint import extract_waypoint, folder_note_reason

LIST_ONLY_CHOICES = ("any", "files", "directories")


def _sort_key(item: ListItem) -> tuple:
    # Directories first, then case-insensitive name; path breaks ties
    return (item.kind != "directory", item.name.lower(), item.path)


class QueryService(VaultService):
    """Answers questions about the vault without modifying it."""

    def _describe(self, handle: Handle, with_frontmatter_summary: bool = False) -> ListItem:
        stat = self.store.stat(handle.path)
        if isinstance(handle, FolderHandle):
            return ListItem(
                kind="directory",
                name=handle.name,
                path=handle.path,
                modified=stat.mtime if stat else 0,
                children_count=len(self.store.list_children(handle)),
            )

        item = ListItem(
            kind="file",
            name=handle.name,
            path=handle.path,
            extension=handle.extension,
            size=stat.size if stat else 0,
            modified=stat.mtime if stat else 0,
            created=stat.ctime if stat else 0,
        )
        if with_frontmatter_summary and handle.extension.lower() == "md":
            cache = self.metadata.get_cache(handle)
            if cache is not None:
                item.frontmatter_summary = summarize_frontmatter(cache.frontmatter)
        return item

    def _get_folder(self, path: str | None) -> FolderHandle:
        folder = normalize_folder_path(path)
        if not folder:
            return self.store.get_root()
        handle = self.store.get_by_path(folder)
        if handle is None:
            raise NotFoundError(folder, what="Folder")
        if isinstance(handle, FileHandle):
            raise NotAFolderError(folder)
        return handle

    def list_notes(
        self,
        path: str | None = None,
        recursive: bool = False,
        includes: list[str] | None = None,
        excludes: list[str] | None = None,
        only: str = "any",
        limit: int | None = None,
        cursor: str | None = None,
        with_frontmatter_summary: bool = False,
    ) -> ListResult:
        """List a folder's entries, optionally recursively.

        Traversal is pre-order. ``excludes`` drop matching entries and stop
        recursion into excluded folders; ``includes`` only decide which
        entries are emitted. The cursor is the path of the last item of the
        previous page; an unknown cursor restarts from the first item.
        """
        if only not in LIST_ONLY_CHOICES:
            raise InvalidArgumentError(
                f"Invalid only '{only}'. Must be one of: {', '.join(LIST_ONLY_CHOICES)}",
                only=only,
            )
        if limit is not None and limit < 1:
            raise InvalidArgumentError("limit must be >= 1", limit=limit)

        root = self._get_folder(path)
        items: list[ListItem] = []

        def walk(folder: FolderHandle) -> None:
            for child in self.store.list_children(folder):
                if matches_any(child.path, excludes):
                    continue
                is_folder = isinstance(child, FolderHandle)
                wanted = (
                    only == "any"
                    or (only == "directories" and is_folder)
                    or (only == "files" and not is_folder)
                )
                if wanted and (not includes or matches_any(child.path, includes)):
                    items.append(self._describe(child, with_frontmatter_summary))
                if recursive and is_folder:
                    walk(child)

        walk(root)
        items.sort(key=_sort_key)

        start = 0
        if cursor:
            for i, item in enumerate(items):
                if item.path == cursor:
                    start = i + 1
                    break

        end = len(items) if limit is None else start + limit
        page = items[start:end]
        has_more = end < len(items)
        return ListResult(
            items=page,
            total_count=len(items),
            has_more=has_more,
            next_cursor=page[-1].path if has_more and page else None,
        )

    def stat(self, path: str | None) -> StatResult:
        if is_root_path(path):
            root = self.store.get_root()
            return StatResult(path="", exists=True, kind="directory", metadata=self._describe(root))

        normalized = normalize_folder_path(path)
        handle = self.store.get_by_path(normalized)
        if handle is None:
            return StatResult(path=normalized, exists=False)
        item = self._describe(handle)
        return StatResult(path=normalized, exists=True, kind=item.kind, metadata=item)

    def exists(self, path: str | None) -> StatResult:
        if is_root_path(path):
            return StatResult(path="", exists=True, kind="directory")

        normalized = normalize_folder_path(path)
        handle = self.store.get_by_path(normalized)
        if handle is None:
            return StatResult(path=normalized, exists=False)
        kind = "directory" if isinstance(handle, FolderHandle) else "file"
        return StatResult(path=normalized, exists=True, kind=kind)

    def vault_info(self) -> VaultInfo:
        total_files = total_folders = markdown = total_size = 0
        for handle in self.store.list_all():
            if isinstance(handle, FolderHandle):
                total_folders += 1
                continue
            total_files += 1
            if handle.extension.lower() == "md":
                markdown += 1
            stat = self.store.stat(handle.path)
            if stat is not None:
                total_size += stat.size
        return VaultInfo(
            name=self.ctx.name,
            path=self.ctx.location,
            total_files=total_files,
            total_folders=total_folders,
            markdown_files=markdown,
            total_size=total_size,
        )

    async def search(self, query: str, **options) -> SearchResult:
        return await search_vault(self.store, query, **options)

    async def search_waypoints(self, folder: str | None = None) -> WaypointSearchResult:
        if folder is not None:
            self._get_folder(folder)
        return await search_waypoints(self.store, folder)

    async def folder_waypoint(self, path: str) -> FolderWaypoint:
        file = self._get_file(path)
        block = extract_waypoint(await self._read(file))
        if not block.present:
            return FolderWaypoint(path=file.path, has_waypoint=False)
        return FolderWaypoint(
            path=file.path,
            has_waypoint=True,
            waypoint_range=block.range,
            links=block.links,
            raw_content=block.raw,
        )

    async def is_folder_note(self, path: str) -> FolderNoteInfo:
        file = self._get_file(path)
        reason = folder_note_reason(file.path, await self._read(file))
        is_folder_note = reason != "none"
        return FolderNoteInfo(
            path=file.path,
            is_folder_note=is_folder_note,
            reason=reason,
            folder_path=parent_path(file.path) if is_folder_note else None,
        )

    async def validate_wikilinks(self, path: str) -> WikilinkReport:
        file = self._get_file(path)
        content = await self._read(file)
        return validate_wikilinks(self.store, self.metadata, content, file.path)

    def resolve_wikilink(self, source_path: str, link_text: str) -> LinkResolution:
        source = self._get_file(source_path)
        link_text = link_text.strip().removeprefix("[[").removesuffix("]]")
        if not link_text.strip():
            raise InvalidArgumentError("Link text cannot be empty.")

        target = resolve_link(self.store, self.metadata, source.path, link_text)
        if target is not None:
            return LinkResolution(
                source_path=source.path,
                link_text=link_text,
                resolved=True,
                target_path=target.path,
            )
        return LinkResolution(
            source_path=source.path,
            link_text=link_text,
            resolved=False,
            suggestions=suggest_links(self.store, link_text),
        )

    async def backlinks(
        self,
        path: str,
        include_unlinked: bool = False,
        include_snippets: bool = True,
    ) -> BacklinkReport:
        file = self._get_file(path)
        found = await self._call(
            "collect backlinks for",
            file.path,
            get_backlinks(self.store, self.metadata, file, include_unlinked, include_snippets),
        )
        return BacklinkReport(path=file.path, backlinks=found, total_backlinks=len(found))
