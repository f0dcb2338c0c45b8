"""Note mutation orchestration - create, update, patch, rename, delete.

Each operation validates its inputs, checks the caller's version tag (when
given) and only then calls a mutating collaborator method. Collaborator
failures are wrapped in OperationFailedError; VaultErrors pass through.
"""

from services.base import VaultService
from services.errors import (
    AlreadyExistsError,
    InvalidArgumentError,
    NoOperationsProvidedError,
    NotAFileError,
    NotAFolderError,
    NotFoundError,
    OperationFailedError,
    ParentNotFoundError,
    WaypointProtectedError,
)
from services.frontmatter import extract_frontmatter, json_safe_value, rebuild_content
from services.links import validate_links
from services.models import (
    CreateResult,
    DeleteResult,
    FrontmatterUpdateResult,
    LinkValidation,
    ReadResult,
    RenameResult,
    SectionEdit,
    SectionsUpdateResult,
    UpdateResult,
)
from services.paths import ancestors, normalize_path, parent_path, split_extension
from services.ports import FileHandle, FolderHandle
from services.sections import apply_section_edits
from services.text import count_words, number_lines
from services.version import check_version, version_for
from services.waypoint import would_corrupt

ON_CONFLICT_CHOICES = ("error", "overwrite", "rename")


class NoteService(VaultService):
    """Reads and mutates single notes through the vault collaborators."""

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _ensure_folder(self, folder: str, create_parents: bool, for_path: str) -> None:
        """Make sure ``folder`` exists, creating it top-down when allowed."""
        if not folder:
            return
        handle = self.store.get_by_path(folder)
        if isinstance(handle, FolderHandle):
            return
        if isinstance(handle, FileHandle):
            raise NotAFolderError(folder)
        if not create_parents:
            raise ParentNotFoundError(for_path, folder)

        for current in [*ancestors(folder), folder]:
            existing = self.store.get_by_path(current)
            if existing is None:
                await self._call("create folder", current, self.store.create_folder(current))
            elif isinstance(existing, FileHandle):
                raise NotAFolderError(current)

    def _free_path(self, path: str) -> str:
        """First ``"<stem> <n><ext>"`` (n = 1, 2, ...) not present in the store."""
        stem, ext = split_extension(path)
        n = 1
        while self.store.get_by_path(f"{stem} {n}{ext}") is not None:
            n += 1
        return f"{stem} {n}{ext}"

    def _validate(self, content: str, path: str, enabled: bool) -> LinkValidation | None:
        if not enabled:
            return None
        return validate_links(self.store, self.metadata, content, path)

    def _guard_waypoint(self, path: str, before: str, after: str) -> None:
        corrupted, waypoint_range = would_corrupt(before, after)
        if corrupted:
            raise WaypointProtectedError(path, waypoint_range)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def read_note(
        self,
        path: str,
        parse_frontmatter: bool = False,
        with_line_numbers: bool = False,
    ) -> ReadResult:
        file = self._get_file(path)
        stat = self._stat(file)
        content = await self._read(file)

        result = ReadResult(
            path=file.path,
            content=content,
            version_tag=version_for(stat),
            word_count=count_words(content),
        )
        if with_line_numbers:
            result.content = number_lines(content)
            result.total_lines = len(content.split("\n"))
        if parse_frontmatter:
            extracted = extract_frontmatter(content)
            result.has_frontmatter = extracted.has_frontmatter
            result.frontmatter = extracted.raw
            if extracted.parsed is not None:
                result.parsed_frontmatter = json_safe_value(extracted.parsed)
            result.content_without_frontmatter = extracted.body
        return result

    async def create_note(
        self,
        path: str,
        content: str = "",
        on_conflict: str = "error",
        create_parents: bool = False,
        validate_links: bool = True,
    ) -> CreateResult:
        if on_conflict not in ON_CONFLICT_CHOICES:
            raise InvalidArgumentError(
                f"Invalid on_conflict '{on_conflict}'. Must be one of: {', '.join(ON_CONFLICT_CHOICES)}",
                on_conflict=on_conflict,
            )

        target = normalize_path(path)
        existing = self.store.get_by_path(target)
        if isinstance(existing, FolderHandle):
            raise NotAFileError(target)
        if existing is not None and on_conflict == "error":
            raise AlreadyExistsError(target)

        await self._ensure_folder(parent_path(target), create_parents, target)

        final_path = target
        if existing is not None:
            if on_conflict == "overwrite":
                await self._call("trash", target, self.files.trash(existing))
            else:
                final_path = self._free_path(target)

        file = await self._call("create", final_path, self.store.create(final_path, content))
        stat = self._stat(file)
        renamed = final_path != target
        return CreateResult(
            path=file.path,
            version_tag=version_for(stat),
            created=stat.ctime,
            renamed=renamed,
            original_path=target if renamed else None,
            word_count=count_words(content),
            link_validation=self._validate(content, file.path, validate_links),
        )

    async def update_note(
        self,
        path: str,
        content: str,
        if_match: str | None = None,
        validate_links: bool = True,
    ) -> UpdateResult:
        file = self._get_file(path)
        check_version(file.path, if_match, self._stat(file))

        current = await self._read(file)
        self._guard_waypoint(file.path, current, content)

        await self._call("modify", file.path, self.store.modify(file, content))
        stat = self._stat(file)
        return UpdateResult(
            path=file.path,
            version_tag=version_for(stat),
            modified=stat.mtime,
            word_count=count_words(content),
            link_validation=self._validate(content, file.path, validate_links),
        )

    async def update_frontmatter(
        self,
        path: str,
        patch: dict | None = None,
        remove: list[str] | None = None,
        if_match: str | None = None,
    ) -> FrontmatterUpdateResult:
        """Merge ``patch`` into the frontmatter and drop ``remove`` keys.

        The body is preserved byte for byte. When every key ends up removed the
        frontmatter block is dropped entirely.
        """
        patch = patch or {}
        remove = remove or []
        if not patch and not remove:
            raise NoOperationsProvidedError(
                "No frontmatter changes provided. Pass fields to set in 'patch' "
                "or field names to delete in 'remove'."
            )

        file = self._get_file(path)
        check_version(file.path, if_match, self._stat(file))

        current = await self._read(file)
        extracted = extract_frontmatter(current)
        if extracted.has_frontmatter and extracted.parsed is None:
            raise OperationFailedError(
                "update frontmatter", file.path, "existing frontmatter is not valid YAML"
            )

        data = dict(extracted.parsed or {})
        data.update(patch)
        removed = [key for key in remove if key in data]
        for key in removed:
            del data[key]

        new_content = rebuild_content(data, extracted.body)
        await self._call("modify", file.path, self.store.modify(file, new_content))
        stat = self._stat(file)
        return FrontmatterUpdateResult(
            path=file.path,
            version_tag=version_for(stat),
            modified=stat.mtime,
            updated_fields=list(patch),
            removed_fields=removed,
        )

    async def update_sections(
        self,
        path: str,
        edits: list[SectionEdit],
        if_match: str | None = None,
        validate_links: bool = True,
        force: bool = False,
    ) -> SectionsUpdateResult:
        """Apply line-range edits; ``force`` skips the waypoint guard."""
        if not edits:
            raise NoOperationsProvidedError("No section edits provided.")

        file = self._get_file(path)
        check_version(file.path, if_match, self._stat(file))

        current = await self._read(file)
        new_content = "\n".join(apply_section_edits(current.split("\n"), edits))
        if not force:
            self._guard_waypoint(file.path, current, new_content)

        await self._call("modify", file.path, self.store.modify(file, new_content))
        stat = self._stat(file)
        return SectionsUpdateResult(
            path=file.path,
            version_tag=version_for(stat),
            modified=stat.mtime,
            sections_updated=len(edits),
            word_count=count_words(new_content),
            link_validation=self._validate(new_content, file.path, validate_links),
        )

    async def rename_file(
        self,
        path: str,
        new_path: str,
        if_match: str | None = None,
    ) -> RenameResult:
        """Move a note; rewriting links elsewhere is the file manager's job."""
        file = self._get_file(path)
        destination = normalize_path(new_path)

        existing = self.store.get_by_path(destination)
        if isinstance(existing, FolderHandle):
            raise NotAFileError(destination)
        if existing is not None:
            raise AlreadyExistsError(destination)

        check_version(file.path, if_match, self._stat(file))
        await self._ensure_folder(parent_path(destination), True, destination)

        await self._call("rename", file.path, self.files.rename(file, destination))
        stat = self.store.stat(destination)
        if stat is None:
            raise OperationFailedError("rename", file.path, f"{destination} missing after rename")
        return RenameResult(old_path=file.path, new_path=destination, version_tag=version_for(stat))

    async def delete_note(
        self,
        path: str,
        soft: bool = True,
        dry_run: bool = False,
        if_match: str | None = None,
    ) -> DeleteResult:
        """Trash (``soft``) or permanently delete a note.

        ``dry_run`` runs every check and reports what would happen.
        """
        target = normalize_path(path)
        handle = self.store.get_by_path(target)
        if handle is None:
            raise NotFoundError(target)
        if isinstance(handle, FolderHandle):
            raise NotAFileError(target)

        check_version(target, if_match, self._stat(handle))

        destination = "trash" if soft else None
        if dry_run:
            return DeleteResult(
                path=target, deleted=False, soft=soft, dry_run=True, destination=destination
            )

        if soft:
            await self._call("trash", target, self.files.trash(handle))
        else:
            await self._call("delete", target, self.files.delete(handle))
        return DeleteResult(path=target, deleted=True, soft=soft, dry_run=False, destination=destination)
